"""
FastAPI server exposing the TV Tantrum catalog API.
Endpoints:
- GET /health, /api/health: basic health checks
- GET /api/tv-shows?ageGroup=...&themes=...&sortBy=...: filtered, sorted show list
- GET /api/tv-shows/{id}, /api/tv-shows/similar/{id}, /api/tv-shows/compare?ids=1,2
- GET /api/shows/featured, /api/shows/popular, /api/search?q=..., /api/themes
- GET /api/research, /api/research/{id}
- GET /api/homepage-categories, /api/homepage-categories/{id}/shows
- /api/admin/...: show, research and homepage-category management (X-Admin-Password header)

Startup loads the catalog from the JSONL files under the configured data directory.
Run with: uvicorn api:app --reload
"""

# Standard libraries for timing, secrets comparison and logging setup
import secrets  # constant-time password comparison
import sys  # log sink
import time  # measure startup and request latencies
from dataclasses import asdict  # dataclass records -> response models
from typing import Any, Dict, List, Optional  # precise typing for clarity

# FastAPI for the web API and Pydantic for request/response models
from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Loguru for simple, structured console logging
from loguru import logger

# Internal modules
from tvtantrum.cache import CacheConfig, CatalogCache
from tvtantrum.catalog import CatalogError, CatalogService, NotFoundError
from tvtantrum.config import Settings, load_settings
from tvtantrum.data_loader import DataLoader
from tvtantrum.descriptions import describe_show
from tvtantrum.models import TvShow
from tvtantrum.query_parser import FilterQueryParser

# Instantiate the FastAPI application with metadata
app = FastAPI(title="TV Tantrum Catalog API", version="1.0.0")

# Globals that hold the catalog service, settings and measured startup time
CATALOG: Optional[CatalogService] = None
SETTINGS: Settings = load_settings()
STARTUP_TIME_S: float = 0.0
PARSER = FilterQueryParser()


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

class ApiModel(BaseModel):
	"""camelCase on the wire, snake_case in Python."""
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TvShowOut(ApiModel):
	id: int
	name: str
	description: str
	age_range: str
	stimulation_score: int
	interactivity_level: Optional[str] = None
	dialogue_intensity: Optional[str] = None
	sound_effects_level: Optional[str] = None
	themes: List[str]
	overall_rating: float
	views: int
	searches: int
	episode_length: Optional[int] = None
	creator: Optional[str] = None
	release_year: Optional[int] = None
	end_year: Optional[int] = None
	is_ongoing: bool = True
	seasons: Optional[int] = None
	available_on: List[str] = []
	animation_style: Optional[str] = None
	image_url: Optional[str] = None
	is_featured: bool = False


class TvShowDetailOut(TvShowOut):
	labels: Dict[str, str]  # tantrum factor, color bands, level descriptions


class TvShowIn(ApiModel):
	name: str = Field(..., min_length=1)
	description: str = ''
	age_range: str = ''
	stimulation_score: int = Field(..., ge=1, le=5)
	interactivity_level: Optional[str] = None
	dialogue_intensity: Optional[str] = None
	sound_effects_level: Optional[str] = None
	themes: List[str] = []
	overall_rating: float = 0.0
	episode_length: Optional[int] = None
	creator: Optional[str] = None
	release_year: Optional[int] = None
	end_year: Optional[int] = None
	is_ongoing: bool = True
	seasons: Optional[int] = None
	available_on: List[str] = []
	animation_style: Optional[str] = None
	image_url: Optional[str] = None
	is_featured: bool = False


class TvShowUpdate(ApiModel):
	name: Optional[str] = Field(None, min_length=1)
	description: Optional[str] = None
	age_range: Optional[str] = None
	stimulation_score: Optional[int] = Field(None, ge=1, le=5)
	interactivity_level: Optional[str] = None
	dialogue_intensity: Optional[str] = None
	sound_effects_level: Optional[str] = None
	themes: Optional[List[str]] = None
	overall_rating: Optional[float] = None
	episode_length: Optional[int] = None
	creator: Optional[str] = None
	release_year: Optional[int] = None
	end_year: Optional[int] = None
	is_ongoing: Optional[bool] = None
	seasons: Optional[int] = None
	available_on: Optional[List[str]] = None
	animation_style: Optional[str] = None
	image_url: Optional[str] = None
	is_featured: Optional[bool] = None


class ResearchOut(ApiModel):
	id: int
	title: str
	category: str
	summary: Optional[str] = None
	full_text: Optional[str] = None
	image_url: Optional[str] = None
	source: Optional[str] = None
	original_url: Optional[str] = None
	published_date: Optional[str] = None
	headline: Optional[str] = None
	sub_headline: Optional[str] = None
	key_findings: Optional[str] = None
	created_at: Optional[str] = None
	updated_at: Optional[str] = None


class ResearchIn(ApiModel):
	title: str = Field(..., min_length=1)
	category: str = Field(..., min_length=1)
	summary: Optional[str] = None
	full_text: Optional[str] = None
	image_url: Optional[str] = None
	source: Optional[str] = None
	original_url: Optional[str] = None
	published_date: Optional[str] = None
	headline: Optional[str] = None
	sub_headline: Optional[str] = None
	key_findings: Optional[str] = None


class ResearchUpdate(ApiModel):
	title: Optional[str] = Field(None, min_length=1)
	category: Optional[str] = Field(None, min_length=1)
	summary: Optional[str] = None
	full_text: Optional[str] = None
	image_url: Optional[str] = None
	source: Optional[str] = None
	original_url: Optional[str] = None
	published_date: Optional[str] = None
	headline: Optional[str] = None
	sub_headline: Optional[str] = None
	key_findings: Optional[str] = None


class CategoryOut(ApiModel):
	id: int
	name: str
	description: str
	display_order: int
	is_active: bool
	filter_config: Dict[str, Any]
	created_at: Optional[str] = None
	updated_at: Optional[str] = None


class CategoryIn(ApiModel):
	name: str = Field(..., min_length=1)
	description: str = ''
	display_order: int = 0
	is_active: bool = True
	filter_config: Dict[str, Any] = {}


class CategoryUpdate(ApiModel):
	name: Optional[str] = Field(None, min_length=1)
	description: Optional[str] = None
	display_order: Optional[int] = None
	is_active: Optional[bool] = None
	filter_config: Optional[Dict[str, Any]] = None


class AdminLogin(BaseModel):
	password: str


# ---------------------------------------------------------------------------
# Startup and shared helpers
# ---------------------------------------------------------------------------

def build_catalog(settings: Settings) -> CatalogService:
	"""Load whatever data files exist; a missing file just means an empty section."""
	loader = DataLoader()
	shows, research, categories = [], [], []
	if settings.shows_path.exists():
		shows = loader.load_shows_from_jsonl(str(settings.shows_path))
	else:
		logger.warning(f"[API] No show data at {settings.shows_path}; starting with an empty catalog")
	if settings.research_path.exists():
		research = loader.load_research_from_jsonl(str(settings.research_path))
	if settings.categories_path.exists():
		categories = loader.load_categories_from_jsonl(str(settings.categories_path))
	cache = CatalogCache(CacheConfig(ttl_seconds=settings.cache_ttl_seconds, max_keys=settings.cache_max_keys))
	return CatalogService(shows, research, categories, cache=cache)


@app.on_event("startup")
async def startup_event():
	"""Initialize the catalog once, unless one was already installed (tests do this)."""
	global CATALOG, STARTUP_TIME_S
	logger.remove()
	logger.add(sys.stderr, level=SETTINGS.log_level)
	if CATALOG is not None:
		return
	start = time.time()
	logger.info(f"[API] Startup: loading catalog from {SETTINGS.data_dir}...")
	CATALOG = build_catalog(SETTINGS)
	STARTUP_TIME_S = time.time() - start
	logger.info(f"[API] Startup complete in {STARTUP_TIME_S:.2f}s")


def get_catalog() -> CatalogService:
	if CATALOG is None:
		logger.warning("[API] Request received before the catalog was initialized")
		raise HTTPException(status_code=503, detail="Catalog not ready")
	return CATALOG


def require_admin(x_admin_password: Optional[str] = Header(None)) -> None:
	if not x_admin_password or not secrets.compare_digest(x_admin_password, SETTINGS.admin_password):
		raise HTTPException(status_code=401, detail="Admin access required")


@app.exception_handler(CatalogError)
async def catalog_error_handler(request: Request, exc: CatalogError):
	status = 404 if isinstance(exc, NotFoundError) else 400
	logger.info(f"[API] {request.method} {request.url.path} -> {status}: {exc}")
	return JSONResponse(status_code=status, content={"message": str(exc)})


def show_out(show: TvShow) -> TvShowOut:
	return TvShowOut.model_validate(asdict(show))


def show_detail(show: TvShow) -> TvShowDetailOut:
	return TvShowDetailOut(**TvShowOut.model_validate(asdict(show)).model_dump(), labels=describe_show(show))


def _parse_ids(ids: str) -> List[int]:
	try:
		return [int(part) for part in ids.split(',') if part.strip()]
	except ValueError:
		raise HTTPException(status_code=400, detail="ids must be a comma-separated list of integers") from None


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------

@app.get("/health")
@app.get("/api/health")
async def health():
	"""Return minimal health info for liveness/readiness probes."""
	return {
		"status": "ok",
		"catalog_ready": CATALOG is not None,
		"shows": len(CATALOG.shows) if CATALOG is not None else 0,
		"startup_seconds": round(STARTUP_TIME_S, 2),
	}


@app.get("/api/tv-shows", response_model=List[TvShowOut])
def list_tv_shows(request: Request, catalog: CatalogService = Depends(get_catalog)):
	"""Filtered and sorted show list; query parameters mirror the browse page filters."""
	start = time.time()
	params = {key: request.query_params.getlist(key) for key in request.query_params.keys()}
	filters = PARSER.from_query_params(params)
	shows = catalog.get_tv_shows(filters)
	elapsed_ms = (time.time() - start) * 1000
	logger.info(f"[API] /api/tv-shows served {len(shows)} shows in {elapsed_ms:.2f} ms")
	return [show_out(s) for s in shows]


@app.get("/api/tv-shows/compare", response_model=List[TvShowDetailOut])
def compare_tv_shows(ids: str = Query(..., description="Comma-separated show ids"), catalog: CatalogService = Depends(get_catalog)):
	return [show_detail(s) for s in catalog.get_shows(_parse_ids(ids))]


@app.get("/api/tv-shows/similar/{show_id}", response_model=List[TvShowOut])
def similar_tv_shows(show_id: int, limit: int = 6, catalog: CatalogService = Depends(get_catalog)):
	return [show_out(s) for s in catalog.get_similar_shows(show_id, limit)]


@app.get("/api/tv-shows/{show_id}", response_model=TvShowDetailOut)
def get_tv_show(show_id: int, catalog: CatalogService = Depends(get_catalog)):
	show = catalog.record_view(show_id)
	return show_detail(show)


@app.get("/api/shows/featured", response_model=TvShowDetailOut)
def featured_show(catalog: CatalogService = Depends(get_catalog)):
	show = catalog.get_featured_show()
	if show is None:
		raise HTTPException(status_code=404, detail="No featured show found")
	return show_detail(show)


@app.get("/api/shows/popular", response_model=List[TvShowOut])
def popular_shows(limit: int = 10, catalog: CatalogService = Depends(get_catalog)):
	return [show_out(s) for s in catalog.get_popular_shows(limit)]


@app.get("/api/search", response_model=List[TvShowOut])
def search(q: Optional[str] = None, limit: int = 20, catalog: CatalogService = Depends(get_catalog)):
	"""Ranked name/description/creator search."""
	return [show_out(s) for s in catalog.search_shows(q or '', limit)]


@app.get("/api/themes", response_model=List[str])
def themes(catalog: CatalogService = Depends(get_catalog)):
	return catalog.get_themes()


@app.get("/api/research", response_model=List[ResearchOut])
def list_research(category: Optional[str] = None, limit: Optional[int] = None, catalog: CatalogService = Depends(get_catalog)):
	return [ResearchOut.model_validate(asdict(r)) for r in catalog.get_research(category, limit)]


@app.get("/api/research/{research_id}", response_model=ResearchOut)
def get_research(research_id: int, catalog: CatalogService = Depends(get_catalog)):
	return ResearchOut.model_validate(asdict(catalog.get_research_by_id(research_id)))


@app.get("/api/homepage-categories", response_model=List[CategoryOut])
def homepage_categories(catalog: CatalogService = Depends(get_catalog)):
	return [CategoryOut.model_validate(asdict(c)) for c in catalog.get_homepage_categories()]


@app.get("/api/homepage-categories/{category_id}/shows", response_model=List[TvShowOut])
def category_shows(category_id: int, catalog: CatalogService = Depends(get_catalog)):
	return [show_out(s) for s in catalog.get_category_shows(category_id)]


@app.get("/api/performance-stats")
def performance_stats(catalog: CatalogService = Depends(get_catalog)):
	return {
		"cache": catalog.cache.stats(),
		"shows": len(catalog.shows),
		"research": len(catalog.research),
		"categories": len(catalog.categories),
	}


@app.post("/api/cache/clear")
def clear_cache(catalog: CatalogService = Depends(get_catalog)):
	catalog.cache.clear()
	return {"success": True}


# ---------------------------------------------------------------------------
# Admin endpoints
# ---------------------------------------------------------------------------

@app.post("/api/admin/login")
def admin_login(body: AdminLogin):
	if not secrets.compare_digest(body.password, SETTINGS.admin_password):
		logger.warning("[API] Failed admin login")
		raise HTTPException(status_code=401, detail="Invalid password")
	return {"success": True}


@app.post("/api/admin/tv-shows", response_model=TvShowOut, status_code=201, dependencies=[Depends(require_admin)])
def create_tv_show(body: TvShowIn, catalog: CatalogService = Depends(get_catalog)):
	return show_out(catalog.create_show(body.model_dump()))


@app.put("/api/admin/tv-shows/{show_id}", response_model=TvShowOut, dependencies=[Depends(require_admin)])
def update_tv_show(show_id: int, body: TvShowUpdate, catalog: CatalogService = Depends(get_catalog)):
	return show_out(catalog.update_show(show_id, body.model_dump(exclude_unset=True)))


@app.delete("/api/admin/tv-shows/{show_id}", dependencies=[Depends(require_admin)])
def delete_tv_show(show_id: int, catalog: CatalogService = Depends(get_catalog)):
	catalog.delete_show(show_id)
	return {"success": True}


@app.get("/api/admin/research", response_model=List[ResearchOut], dependencies=[Depends(require_admin)])
def admin_list_research(catalog: CatalogService = Depends(get_catalog)):
	return [ResearchOut.model_validate(asdict(r)) for r in catalog.get_research()]


@app.post("/api/admin/research", response_model=ResearchOut, status_code=201, dependencies=[Depends(require_admin)])
def create_research(body: ResearchIn, catalog: CatalogService = Depends(get_catalog)):
	return ResearchOut.model_validate(asdict(catalog.create_research(body.model_dump())))


@app.put("/api/admin/research/{research_id}", response_model=ResearchOut, dependencies=[Depends(require_admin)])
def update_research(research_id: int, body: ResearchUpdate, catalog: CatalogService = Depends(get_catalog)):
	return ResearchOut.model_validate(asdict(catalog.update_research(research_id, body.model_dump(exclude_unset=True))))


@app.delete("/api/admin/research/{research_id}", dependencies=[Depends(require_admin)])
def delete_research(research_id: int, catalog: CatalogService = Depends(get_catalog)):
	catalog.delete_research(research_id)
	return {"success": True}


@app.get("/api/admin/homepage-categories", response_model=List[CategoryOut], dependencies=[Depends(require_admin)])
def admin_homepage_categories(catalog: CatalogService = Depends(get_catalog)):
	return [CategoryOut.model_validate(asdict(c)) for c in catalog.get_all_homepage_categories()]


@app.post("/api/admin/homepage-categories", response_model=CategoryOut, status_code=201, dependencies=[Depends(require_admin)])
def create_homepage_category(body: CategoryIn, catalog: CatalogService = Depends(get_catalog)):
	return CategoryOut.model_validate(asdict(catalog.create_category(body.model_dump())))


@app.put("/api/admin/homepage-categories/{category_id}", response_model=CategoryOut, dependencies=[Depends(require_admin)])
def update_homepage_category(category_id: int, body: CategoryUpdate, catalog: CatalogService = Depends(get_catalog)):
	return CategoryOut.model_validate(asdict(catalog.update_category(category_id, body.model_dump(exclude_unset=True))))


@app.delete("/api/admin/homepage-categories/{category_id}", dependencies=[Depends(require_admin)])
def delete_homepage_category(category_id: int, catalog: CatalogService = Depends(get_catalog)):
	catalog.delete_category(category_id)
	return {"success": True}
