"""
Catalog filter engine.
Narrows an in-memory show list with the optional criteria of a FilterSpec.

Every criterion is an independent gate that can only reject a show; a missing
criterion never rejects. The free-text search runs last and, when a term is
given, decides the outcome for every show that got that far.
"""

import re  # year-suffix and punctuation stripping
from typing import Dict, Iterable, List, Optional, Set  # type annotations

from loguru import logger  # console logging

from .levels import AGE_GROUP_PATTERNS, INTERACTION_TERMS, AgeGroup, Level, TantrumFactor
from .models import FilterSpec, TvShow


RE_YEAR_SUFFIX = re.compile(r'\s+\d{4}(-\d{4}|-present)?')  # "Show 2018-present" -> "Show"
RE_NAME_PUNCTUATION = re.compile(r"['’.]")  # apostrophes and periods
RE_AGE_SPAN = re.compile(r'^\s*(\d+)\s*-\s*(\d+)')  # "2-5"
RE_AGE_PLUS = re.compile(r'^\s*(\d+)\s*\+')  # "13+"

# Normalized levels accepted by each interaction filter choice.
# Mirrors the substring term sets: "Moderate-Low" contains both "Moderate" and "Low".
INTERACTION_LEVELS: Dict[str, Set[Level]] = {
	'Low': {Level.LOW, Level.MODERATE_LOW},
	'Moderate': {Level.MODERATE_LOW, Level.MODERATE, Level.MODERATE_HIGH},
	'High': {Level.MODERATE_HIGH, Level.HIGH},
}


def filter_shows(shows: Iterable[TvShow], filters: Optional[FilterSpec]) -> List[TvShow]:
	"""
	Return the shows that pass every gate in `filters`, keeping input order.
	Pure: inputs are not modified and an empty list yields an empty list.
	"""
	filters = filters or FilterSpec()
	kept = [show for show in shows if show_matches(show, filters)]
	logger.debug(f"[Filter] Kept {len(kept)} shows")
	return kept


def show_matches(show: TvShow, filters: FilterSpec) -> bool:
	"""Apply every gate to a single show."""
	if not _passes_age_group(show, filters.age_group):
		logger.debug(f"[Filter] Filtered out by age group | show={show.name} ({show.id}) | age_range={show.age_range} | required={filters.age_group}")
		return False

	if not _passes_tantrum_factor(show, filters.tantrum_factor):
		logger.debug(f"[Filter] Filtered out by tantrum factor | show={show.name} ({show.id}) | score={show.stimulation_score} | required={filters.tantrum_factor}")
		return False

	if not _passes_themes(show, filters.themes, filters.theme_match_mode):
		logger.debug(f"[Filter] Filtered out by themes | show={show.name} ({show.id}) | have={show.themes[:5]} | required={filters.themes[:5]}")
		return False

	if not _passes_interaction_level(show, filters.interaction_level):
		logger.debug(f"[Filter] Filtered out by interaction level | show={show.name} ({show.id}) | level={show.interactivity_level} | required={filters.interaction_level}")
		return False

	rng = filters.stimulation_score_range
	if rng and show.stimulation_score:
		if show.stimulation_score < rng.min or show.stimulation_score > rng.max:
			logger.debug(f"[Filter] Filtered out by stimulation score | show={show.name} ({show.id}) | score={show.stimulation_score} | required={rng.min}-{rng.max}")
			return False

	if not _passes_age_range(show, filters):
		logger.debug(f"[Filter] Filtered out by age range | show={show.name} ({show.id}) | age_range={show.age_range}")
		return False

	# Search decides on its own once a term is supplied
	if filters.search and filters.search.strip():
		return matches_search(show, filters.search)

	return True


def matches_search(show: TvShow, search: str) -> bool:
	"""
	Multi-strategy free-text match, tried in order until one hits:
	exact name, name/description substring, name without year suffix,
	any name word, name without apostrophes/periods, any theme.
	"""
	term = search.strip().lower()
	if not term:
		return True
	name = show.name.lower()
	description = (show.description or '').lower()

	if name == term:
		return True

	if term in name or term in description:
		return True

	if term in RE_YEAR_SUFFIX.sub('', name):
		return True

	if any(term in word for word in name.split()):
		return True

	simplified_name = RE_NAME_PUNCTUATION.sub('', name)
	simplified_term = RE_NAME_PUNCTUATION.sub('', term)
	if term in simplified_name or (simplified_term and simplified_term in simplified_name):
		return True

	if show.themes and any(term in theme.lower() for theme in show.themes):
		return True

	return False


def _passes_age_group(show: TvShow, age_group: Optional[str]) -> bool:
	if not age_group or not show.age_range:
		return True
	try:
		group = AgeGroup(age_group)
	except ValueError:
		return True  # unknown bucket: no constraint
	return AGE_GROUP_PATTERNS[group].search(show.age_range) is not None


def _passes_tantrum_factor(show: TvShow, tantrum_factor: Optional[str]) -> bool:
	if not tantrum_factor:
		return True
	factor = TantrumFactor.from_label(tantrum_factor)
	if factor is None:
		return True
	return show.stimulation_score == factor.score


def _passes_themes(show: TvShow, themes: List[str], match_mode: str) -> bool:
	if not themes:
		return True
	if not show.themes:
		return False
	show_themes = [t.lower() for t in show.themes]

	def found(theme: str) -> bool:
		wanted = theme.lower()
		return any(wanted in t for t in show_themes)

	if (match_mode or 'AND').upper() == 'OR':
		return any(found(theme) for theme in themes)
	return all(found(theme) for theme in themes)


def _passes_interaction_level(show: TvShow, interaction_level: Optional[str]) -> bool:
	if not interaction_level or not show.interactivity_level:
		return True
	accepted: Optional[Set[Level]] = INTERACTION_LEVELS.get(interaction_level)
	if accepted is None:
		return True
	if show.interactivity is not None:
		return show.interactivity in accepted
	# Legacy rows that were never normalized
	terms = INTERACTION_TERMS[interaction_level]
	return any(term in show.interactivity_level for term in terms)


def _passes_age_range(show: TvShow, filters: FilterSpec) -> bool:
	bounds = filters.age_range
	if bounds is None or not show.age_range:
		return True
	text = show.age_range
	m = RE_AGE_SPAN.match(text)
	if m:
		low, high = int(m.group(1)), int(m.group(2))
		return low <= bounds.max and high >= bounds.min
	m = RE_AGE_PLUS.match(text)
	if m:
		return int(m.group(1)) <= bounds.max
	# "Any Age", "All Ages" and unparseable text impose no constraint
	return True
