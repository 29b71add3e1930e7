"""
Catalog service module.
Holds the in-memory catalog and answers every read the site needs: filtered
listings, lookups, ranked search, similar shows, research and homepage rows.
Admin mutations go through here too so the read cache stays consistent.
"""

import json  # stable cache keys for filter specs
import threading  # admin writes and counters race with reads on worker threads
from dataclasses import asdict, fields, replace  # record helpers
from datetime import datetime, timezone  # timestamps on admin edits
from typing import Any, Dict, Iterable, List, Optional  # type annotations

# Console logging
from loguru import logger

from . import cache as keys  # cache key prefixes and TTL tiers
from .cache import CatalogCache, cache_key
from .data_loader import DataLoader
from .models import FilterSpec, HomepageCategory, ResearchSummary, TvShow
from .query_parser import FilterQueryParser
from .show_filters import filter_shows
from .show_sorting import sort_shows


class CatalogError(Exception):
	"""Base class for catalog failures surfaced to the API."""


class NotFoundError(CatalogError):
	pass


class ValidationError(CatalogError):
	pass


# Fields an admin may not set directly
_PROTECTED_SHOW_FIELDS = {'id', 'interactivity', 'dialogue', 'sound_effects'}

# Fields that must always hold a value; None is only valid for the rest
_REQUIRED_FIELDS = {
	TvShow: {
		'name', 'description', 'age_range', 'stimulation_score', 'themes', 'overall_rating',
		'views', 'searches', 'is_ongoing', 'available_on', 'is_featured',
	},
	ResearchSummary: {'title', 'category'},
	HomepageCategory: {'name', 'description', 'display_order', 'is_active', 'filter_config'},
}


def _now() -> str:
	return datetime.now(timezone.utc).isoformat()


class CatalogService:
	"""
	High-level catalog API over in-memory records.
	Reads are cached in the injected CatalogCache; mutations invalidate by key prefix.
	"""

	def __init__(
		self,
		shows: Iterable[TvShow],
		research: Optional[Iterable[ResearchSummary]] = None,
		categories: Optional[Iterable[HomepageCategory]] = None,
		cache: Optional[CatalogCache] = None,
	):
		self.shows: Dict[int, TvShow] = {s.id: s for s in shows}
		self.research: Dict[int, ResearchSummary] = {r.id: r for r in (research or [])}
		self.categories: Dict[int, HomepageCategory] = {c.id: c for c in (categories or [])}
		self.cache = cache or CatalogCache()
		self.parser = FilterQueryParser()
		self.loader = DataLoader()
		self._lock = threading.RLock()  # guards the record dicts and the view/search counters
		logger.info(
			f"[Catalog] Ready with {len(self.shows)} shows, {len(self.research)} research summaries, {len(self.categories)} categories"
		)

	# ------------------------------------------------------------------
	# Shows
	# ------------------------------------------------------------------

	def get_tv_shows(self, filters: Optional[FilterSpec] = None) -> List[TvShow]:
		"""
		Filter, sort and page the catalog.
		Listings sorted by popularity are never cached: views and searches reorder them.
		"""
		filters = filters or FilterSpec()
		cacheable = filters.sort_by != 'popular'
		key = cache_key(keys.TV_SHOWS_ALL, json.dumps(asdict(filters), sort_keys=True))
		cached = self.cache.get(key) if cacheable else None
		if cached is not None:
			logger.debug(f"[Catalog] Cache hit for {key}")
			return cached

		shows = self._all_shows()
		results = filter_shows(shows, filters)
		results = sort_shows(results, filters.sort_by)
		start = max(filters.offset or 0, 0)
		if filters.limit is not None:
			results = results[start:start + max(filters.limit, 0)]
		elif start:
			results = results[start:]

		if cacheable:
			self.cache.set(key, results, keys.TTL_SHORT)
		logger.info(f"[Catalog] get_tv_shows returned {len(results)} of {len(shows)} shows")
		return results

	def _all_shows(self) -> List[TvShow]:
		"""Point-in-time copy of the show list, safe to iterate while admins edit."""
		with self._lock:
			return list(self.shows.values())

	def get_show(self, show_id: int) -> TvShow:
		with self._lock:
			show = self.shows.get(show_id)
		if show is None:
			raise NotFoundError(f"TV show {show_id} not found")
		return show

	def get_shows(self, show_ids: Iterable[int]) -> List[TvShow]:
		"""Shows for the compare page, in the requested order; unknown ids are skipped."""
		with self._lock:
			return [self.shows[i] for i in show_ids if i in self.shows]

	def record_view(self, show_id: int) -> TvShow:
		with self._lock:
			show = self.get_show(show_id)
			show.views += 1
		return show

	def get_featured_show(self) -> Optional[TvShow]:
		cached = self.cache.get(keys.FEATURED_SHOW)
		if cached is not None:
			return cached
		show = next((s for s in self._all_shows() if s.is_featured), None)
		if show is not None:
			self.cache.set(keys.FEATURED_SHOW, show, keys.TTL_LONG)
		return show

	def get_popular_shows(self, limit: int = 10) -> List[TvShow]:
		"""Featured shows first, then calmer shows, then by name."""
		key = cache_key(keys.POPULAR_SHOWS, limit)
		cached = self.cache.get(key)
		if cached is not None:
			return cached
		ordered = sorted(
			self._all_shows(),
			key=lambda s: (not s.is_featured, s.stimulation_score, s.name.lower()),
		)[:max(limit, 0)]
		self.cache.set(key, ordered, keys.TTL_MEDIUM)
		return ordered

	def search_shows(self, term: str, limit: int = 20) -> List[TvShow]:
		"""
		Ranked search over name, description and creator:
		exact name, name prefix, name substring, description, creator.
		Each returned show has its search counter bumped.
		"""
		if not term or not term.strip():
			raise ValidationError("Search term required")
		needle = term.strip().lower()

		ranked = []
		for show in self._all_shows():
			rank = self._search_rank(show, needle)
			if rank is not None:
				ranked.append((rank, show.name.lower(), show))
		ranked.sort(key=lambda r: (r[0], r[1]))
		results = [show for _, _, show in ranked[:max(limit, 0)]]

		with self._lock:
			for show in results:
				show.searches += 1
		logger.info(f"[Catalog] search '{term}' -> {len(results)} hits")
		return results

	def _search_rank(self, show: TvShow, needle: str) -> Optional[int]:
		name = show.name.lower()
		if name == needle:
			return 1
		if name.startswith(needle):
			return 2
		if needle in name:
			return 3
		if needle in (show.description or '').lower():
			return 4
		if needle in (show.creator or '').lower():
			return 5
		return None

	def get_similar_shows(self, show_id: int, limit: int = 6) -> List[TvShow]:
		"""
		Shows sharing a theme, the age range or the stimulation score with the target.
		Same age range ranks above same score, which ranks above a theme overlap.
		"""
		with self._lock:
			target = self.shows.get(show_id)
		if target is None:
			return []
		key = cache_key(keys.SIMILAR_SHOWS, show_id, limit)
		cached = self.cache.get(key)
		if cached is not None:
			return cached

		target_themes = set(target.themes)
		scored = []
		for show in self._all_shows():
			if show.id == show_id:
				continue
			same_age = show.age_range == target.age_range
			same_score = show.stimulation_score == target.stimulation_score
			if not (same_age or same_score or target_themes.intersection(show.themes)):
				continue
			similarity = 3 if same_age else 2 if same_score else 1
			scored.append((-similarity, show.name, show))
		scored.sort(key=lambda r: (r[0], r[1]))
		results = [show for _, _, show in scored[:max(limit, 0)]]
		self.cache.set(key, results, keys.TTL_MEDIUM)
		return results

	def get_themes(self) -> List[str]:
		cached = self.cache.get(keys.THEMES)
		if cached is not None:
			return cached
		themes = self.loader.get_all_themes(self._all_shows())
		self.cache.set(keys.THEMES, themes, keys.TTL_LONG)
		return themes

	def create_show(self, data: Dict[str, Any]) -> TvShow:
		"""Add a show from snake_case field values; the id is assigned here."""
		self._check_show_fields(data)
		if not str(data.get('name') or '').strip():
			raise ValidationError("Show name is required")
		with self._lock:
			new_id = max(self.shows, default=0) + 1
			show = TvShow(id=new_id, **data)
			self._validate_show(show)
			self.loader.normalize_levels(show)
			self.shows[new_id] = show
		self._invalidate_shows()
		logger.info(f"[Catalog] Created show {new_id} '{show.name}'")
		return show

	def update_show(self, show_id: int, updates: Dict[str, Any]) -> TvShow:
		"""Apply a partial update; the stored show is only replaced once the result validates."""
		self._check_show_fields(updates)
		with self._lock:
			show = replace(self.get_show(show_id), **updates)
			self._validate_show(show)
			self.loader.normalize_levels(show)
			self.shows[show_id] = show
		self._invalidate_shows()
		logger.info(f"[Catalog] Updated show {show_id}: {sorted(updates)}")
		return show

	def delete_show(self, show_id: int) -> None:
		with self._lock:
			removed = self.shows.pop(show_id, None)
		if removed is None:
			raise NotFoundError(f"TV show {show_id} not found")
		self._invalidate_shows()
		logger.info(f"[Catalog] Deleted show {show_id}")

	def _check_show_fields(self, data: Dict[str, Any]) -> None:
		allowed = {f.name for f in fields(TvShow)} - _PROTECTED_SHOW_FIELDS
		unknown = set(data) - allowed
		if unknown:
			raise ValidationError(f"Unknown show fields: {sorted(unknown)}")
		self._check_required(TvShow, data)

	def _validate_show(self, show: TvShow) -> None:
		score = show.stimulation_score
		if isinstance(score, bool) or not isinstance(score, int) or not 1 <= score <= 5:
			raise ValidationError(f"stimulation_score must be an integer between 1 and 5, got {score!r}")
		if not show.name.strip():
			raise ValidationError("Show name is required")

	def _invalidate_shows(self) -> None:
		for prefix in (
			keys.TV_SHOWS_ALL, keys.TV_SHOW_BY_ID, keys.FEATURED_SHOW, keys.POPULAR_SHOWS,
			keys.THEMES, keys.SIMILAR_SHOWS, keys.CATEGORY_SHOWS,
		):
			self.cache.invalidate_prefix(prefix)

	# ------------------------------------------------------------------
	# Research summaries
	# ------------------------------------------------------------------

	def get_research(self, category: Optional[str] = None, limit: Optional[int] = None) -> List[ResearchSummary]:
		"""Newest first, optionally narrowed to one category."""
		key = cache_key(keys.RESEARCH_SUMMARIES, category or '', limit if limit is not None else '')
		cached = self.cache.get(key)
		if cached is not None:
			return cached
		with self._lock:
			research = list(self.research.values())
		items = [r for r in research if not category or r.category == category]
		items.sort(key=lambda r: (r.created_at or '', r.id), reverse=True)
		if limit is not None:
			items = items[:max(limit, 0)]
		self.cache.set(key, items, keys.TTL_LONG)
		return items

	def get_research_by_id(self, research_id: int) -> ResearchSummary:
		with self._lock:
			item = self.research.get(research_id)
		if item is None:
			raise NotFoundError(f"Research summary {research_id} not found")
		return item

	def create_research(self, data: Dict[str, Any]) -> ResearchSummary:
		if not str(data.get('title') or '').strip() or not str(data.get('category') or '').strip():
			raise ValidationError("Research summaries need a title and a category")
		self._check_fields(ResearchSummary, data)
		stamp = _now()
		with self._lock:
			new_id = max(self.research, default=0) + 1
			item = ResearchSummary(id=new_id, **{**data, 'created_at': stamp, 'updated_at': stamp})
			self.research[new_id] = item
		self._invalidate_research()
		logger.info(f"[Catalog] Created research summary {new_id}")
		return item

	def update_research(self, research_id: int, updates: Dict[str, Any]) -> ResearchSummary:
		self._check_fields(ResearchSummary, updates)
		with self._lock:
			item = replace(self.get_research_by_id(research_id), **{**updates, 'updated_at': _now()})
			if not item.title.strip() or not item.category.strip():
				raise ValidationError("Research summaries need a title and a category")
			self.research[research_id] = item
		self._invalidate_research()
		return item

	def delete_research(self, research_id: int) -> None:
		with self._lock:
			removed = self.research.pop(research_id, None)
		if removed is None:
			raise NotFoundError(f"Research summary {research_id} not found")
		self._invalidate_research()

	def _invalidate_research(self) -> None:
		self.cache.invalidate_prefix(keys.RESEARCH_SUMMARIES)
		self.cache.invalidate_prefix(keys.RESEARCH_BY_ID)

	# ------------------------------------------------------------------
	# Homepage categories
	# ------------------------------------------------------------------

	def get_homepage_categories(self) -> List[HomepageCategory]:
		"""Active categories in display order."""
		cached = self.cache.get(keys.HOMEPAGE_CATEGORIES)
		if cached is not None:
			return cached
		active = [c for c in self.get_all_homepage_categories() if c.is_active]
		self.cache.set(keys.HOMEPAGE_CATEGORIES, active, keys.TTL_LONG)
		return active

	def get_all_homepage_categories(self) -> List[HomepageCategory]:
		with self._lock:
			categories = list(self.categories.values())
		return sorted(categories, key=lambda c: (c.display_order, c.id))

	def get_category_shows(self, category_id: int) -> List[TvShow]:
		"""Shows selected by a category's filter rules; unknown categories have none."""
		with self._lock:
			category = self.categories.get(category_id)
		if category is None:
			return []
		key = cache_key(keys.CATEGORY_SHOWS, category_id)
		cached = self.cache.get(key)
		if cached is not None:
			return cached
		filters = self.parser.from_filter_config(category.filter_config)
		shows = self.get_tv_shows(filters)
		logger.debug(f"[Catalog] Category {category_id} '{category.name}' -> {len(shows)} shows")
		self.cache.set(key, shows, keys.TTL_MEDIUM)
		return shows

	def create_category(self, data: Dict[str, Any]) -> HomepageCategory:
		if not str(data.get('name') or '').strip():
			raise ValidationError("Category name is required")
		self._check_fields(HomepageCategory, data)
		stamp = _now()
		with self._lock:
			new_id = max(self.categories, default=0) + 1
			category = HomepageCategory(id=new_id, **{**data, 'created_at': stamp, 'updated_at': stamp})
			self.categories[new_id] = category
		self._invalidate_categories()
		logger.info(f"[Catalog] Created homepage category {new_id} '{category.name}'")
		return category

	def update_category(self, category_id: int, updates: Dict[str, Any]) -> HomepageCategory:
		self._check_fields(HomepageCategory, updates)
		with self._lock:
			current = self.categories.get(category_id)
			if current is None:
				raise NotFoundError(f"Category {category_id} not found")
			category = replace(current, **{**updates, 'updated_at': _now()})
			if not category.name.strip():
				raise ValidationError("Category name is required")
			self.categories[category_id] = category
		self._invalidate_categories()
		return category

	def delete_category(self, category_id: int) -> None:
		with self._lock:
			removed = self.categories.pop(category_id, None)
		if removed is None:
			raise NotFoundError(f"Category {category_id} not found")
		self._invalidate_categories()

	def _invalidate_categories(self) -> None:
		self.cache.invalidate_prefix(keys.HOMEPAGE_CATEGORIES)
		self.cache.invalidate_prefix(keys.CATEGORY_SHOWS)

	def _check_fields(self, record_type: type, data: Dict[str, Any]) -> None:
		allowed = {f.name for f in fields(record_type)} - {'id', 'created_at', 'updated_at'}
		unknown = set(data) - allowed
		if unknown:
			raise ValidationError(f"Unknown {record_type.__name__} fields: {sorted(unknown)}")
		self._check_required(record_type, data)

	def _check_required(self, record_type: type, data: Dict[str, Any]) -> None:
		missing = sorted(k for k in _REQUIRED_FIELDS[record_type] if k in data and data[k] is None)
		if missing:
			raise ValidationError(f"{record_type.__name__} fields cannot be null: {missing}")
