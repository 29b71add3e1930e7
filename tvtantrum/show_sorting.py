"""
Sorting module.
Orders a show list by one of the browse page's sort options.
"""

from typing import Callable, Dict, Iterable, List, Optional, Tuple  # type annotations

from loguru import logger  # console logging

from .levels import level_rank
from .models import TvShow


def popularity_score(show: TvShow) -> int:
	"""Views count double; missing counters count as zero."""
	return (show.views or 0) * 2 + (show.searches or 0)


def interactivity_rank(show: TvShow) -> int:
	"""Low=1 .. High=5; missing or unrecognized levels rank as Moderate (3)."""
	if show.interactivity is not None:
		return show.interactivity.rank
	return level_rank(show.interactivity_level)


def _name_key(show: TvShow) -> Tuple[str, str]:
	# Case-insensitive first, then original case so "abc" sorts before "Abc" consistently
	return (show.name.casefold(), show.name)


def _year_key(descending: bool) -> Callable[[TvShow], Tuple[int, int]]:
	def key(show: TvShow) -> Tuple[int, int]:
		if show.release_year is None:
			return (1, 0)  # missing years last in both directions
		return (0, -show.release_year if descending else show.release_year)
	return key


# sort option -> (key function, descending?)
SORT_KEYS: Dict[str, Tuple[Callable[[TvShow], object], bool]] = {
	'name': (_name_key, False),
	'stimulation-score': (lambda s: s.stimulation_score or 0, False),
	'interactivity-level': (interactivity_rank, False),
	'popular': (popularity_score, True),
	'overall-rating': (lambda s: s.overall_rating or 0.0, True),
	'rating': (lambda s: s.overall_rating or 0.0, True),
	'rating_desc': (lambda s: s.overall_rating or 0.0, True),
	'newest': (_year_key(descending=True), False),
	'oldest': (_year_key(descending=False), False),
}


def sort_shows(shows: Iterable[TvShow], sort_by: Optional[str] = None) -> List[TvShow]:
	"""
	Return a new list ordered by `sort_by`.
	Python's sort is stable, so ties (and unknown options) keep their input order.
	"""
	result = list(shows)
	if not sort_by:
		return result

	entry = SORT_KEYS.get(sort_by)
	if entry is None:
		logger.debug(f"[Sort] Unknown sort option '{sort_by}', keeping input order")
		return result

	key, descending = entry
	# reverse=True keeps stable order for equal keys
	result.sort(key=key, reverse=descending)
	logger.debug(f"[Sort] Sorted {len(result)} shows by '{sort_by}'")
	return result
