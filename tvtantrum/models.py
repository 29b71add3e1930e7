"""
Data models for the TV Tantrum catalog.
Defines the core data structures shared by the filter engine, the catalog service and the API.
"""

# Import dataclass to define simple "record-like" classes without boilerplate
from dataclasses import dataclass, field  # auto-generates __init__, __repr__, etc.
# Import typing helpers for precise and self-documenting types
from typing import Any, Dict, List, Optional  # lists, dicts and optional values

from .levels import Level  # normalized level vocabulary


@dataclass
class TvShow:
	"""
	Represents a single show and all the information we know about it.
	Level fields keep the free text from the source data; the normalized
	enums next to them are resolved once when the catalog is loaded.
	"""
	id: int  # unique identifier of the show
	name: str  # display name (may carry a year suffix like "2019-present")
	description: str = ''  # short synopsis
	age_range: str = ''  # free-text age range, e.g. "2-5" or "Preschool"
	stimulation_score: int = 0  # 1 (calm) .. 5 (intense)
	interactivity_level: Optional[str] = None  # free text, e.g. "Moderate-High"
	dialogue_intensity: Optional[str] = None  # free text
	sound_effects_level: Optional[str] = None  # free text
	themes: List[str] = field(default_factory=list)  # content tags, e.g. ["Adventure"]
	overall_rating: float = 0.0  # averaged rating
	views: int = 0  # popularity counter: detail page views
	searches: int = 0  # popularity counter: search hits
	episode_length: Optional[int] = None  # minutes
	creator: Optional[str] = None
	release_year: Optional[int] = None
	end_year: Optional[int] = None
	is_ongoing: bool = True
	seasons: Optional[int] = None
	available_on: List[str] = field(default_factory=list)  # streaming platforms
	animation_style: Optional[str] = None
	image_url: Optional[str] = None
	is_featured: bool = False
	interactivity: Optional[Level] = None  # normalized interactivity_level
	dialogue: Optional[Level] = None  # normalized dialogue_intensity
	sound_effects: Optional[Level] = None  # normalized sound_effects_level


@dataclass
class StimulationRange:
	"""Inclusive bounds on the stimulation score."""
	min: int = 1
	max: int = 5


@dataclass
class AgeRangeBounds:
	"""Inclusive bounds on a child's age in years."""
	min: int
	max: int


@dataclass
class FilterSpec:
	"""
	Optional filter criteria a caller supplies to narrow a show list.
	Every field defaults to "no constraint"; built per request and then discarded.
	"""
	age_group: Optional[str] = None  # Toddler / Preschool / School-Age / Tween
	tantrum_factor: Optional[str] = None  # low / low-medium / medium / medium-high / high
	search: Optional[str] = None  # free-text search term
	themes: List[str] = field(default_factory=list)  # requested themes
	theme_match_mode: str = 'AND'  # AND: all themes, OR: any theme
	interaction_level: Optional[str] = None  # Low / Moderate / High
	stimulation_score_range: Optional[StimulationRange] = None
	age_range: Optional[AgeRangeBounds] = None  # numeric age overlap
	sort_by: Optional[str] = None  # applied by the catalog service after filtering
	limit: Optional[int] = None
	offset: Optional[int] = None


@dataclass
class ResearchSummary:
	"""A research article summary shown in the research section."""
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
	created_at: Optional[str] = None  # ISO timestamp
	updated_at: Optional[str] = None  # ISO timestamp


@dataclass
class HomepageCategory:
	"""An admin-curated homepage row whose shows are chosen by filter rules."""
	id: int
	name: str
	description: str = ''
	display_order: int = 0
	is_active: bool = True
	filter_config: Dict[str, Any] = field(default_factory=dict)  # {"logic": "AND", "rules": [...]}
	created_at: Optional[str] = None
	updated_at: Optional[str] = None
