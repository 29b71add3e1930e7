"""
HTTP client for the catalog API.
Wraps GET requests with a response cache and a retry policy, and re-applies
filtering and sorting locally so callers get the same result even from an
older server that ignores some query parameters.
"""

import json  # stimulationScoreRange is sent JSON-encoded
import time  # backoff sleeps
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import requests  # HTTP
from loguru import logger  # console logging

from .cache import CatalogCache, CacheConfig, TTL_SHORT, cache_key
from .data_loader import DataLoader
from .models import FilterSpec, TvShow
from .show_filters import filter_shows
from .show_sorting import sort_shows


class CatalogClientError(Exception):
	def __init__(self, message: str, status_code: Optional[int] = None):
		super().__init__(message)
		self.status_code = status_code


@dataclass
class RetryPolicy:
	max_retries: int = 2  # retries after the first attempt
	base_delay: float = 1.0  # seconds
	max_delay: float = 30.0  # seconds

	def delay(self, attempt: int) -> float:
		"""Exponential backoff for the given 0-based retry attempt."""
		return min(self.base_delay * 2 ** attempt, self.max_delay)


def filters_to_params(filters: FilterSpec) -> Dict[str, str]:
	"""Encode a FilterSpec as /api/tv-shows query parameters."""
	params: Dict[str, str] = {}
	if filters.search:
		params['search'] = filters.search
	if filters.age_group:
		params['ageGroup'] = filters.age_group
	if filters.tantrum_factor:
		params['tantrumFactor'] = filters.tantrum_factor
	if filters.themes:
		params['themes'] = ','.join(filters.themes)
		params['themeMatchMode'] = filters.theme_match_mode
	if filters.interaction_level:
		params['interactionLevel'] = filters.interaction_level
	if filters.stimulation_score_range:
		rng = filters.stimulation_score_range
		params['stimulationScoreRange'] = json.dumps({'min': rng.min, 'max': rng.max})
	if filters.sort_by:
		params['sortBy'] = filters.sort_by
	if filters.limit is not None:
		params['limit'] = str(filters.limit)
	if filters.offset is not None:
		params['offset'] = str(filters.offset)
	return params


class CatalogClient:
	"""
	Client for a running catalog API.
	- cache: responses are kept for `stale_seconds` (5 minutes by default)
	- retry: network errors and 5xx responses are retried with backoff; 4xx never are
	"""

	def __init__(
		self,
		base_url: str = 'http://localhost:8000',
		cache: Optional[CatalogCache] = None,
		retry_policy: Optional[RetryPolicy] = None,
		session: Optional[requests.Session] = None,
		timeout: float = 20.0,
		stale_seconds: float = TTL_SHORT,
		sleep: Callable[[float], None] = time.sleep,
	):
		self.base_url = base_url.rstrip('/')
		self.cache = cache or CatalogCache(CacheConfig(ttl_seconds=stale_seconds))
		self.retry_policy = retry_policy or RetryPolicy()
		self.session = session or requests.Session()
		self.timeout = timeout
		self.stale_seconds = stale_seconds
		self._sleep = sleep
		self.loader = DataLoader()

	def list_shows(self, filters: Optional[FilterSpec] = None) -> List[TvShow]:
		"""Fetch /api/tv-shows for `filters`, then filter and sort locally as a fallback."""
		filters = filters or FilterSpec()
		payload = self._get('/api/tv-shows', filters_to_params(filters))
		shows = [self.loader.parse_show(item) for item in payload]
		shows = filter_shows(shows, filters)
		return sort_shows(shows, filters.sort_by)

	def get_show(self, show_id: int) -> TvShow:
		return self.loader.parse_show(self._get(f'/api/tv-shows/{show_id}'))

	def _get(self, path: str, params: Optional[Dict[str, str]] = None) -> Any:
		url = f"{self.base_url}{path}"
		key = cache_key('http:', url, json.dumps(params or {}, sort_keys=True))
		cached = self.cache.get(key)
		if cached is not None:
			logger.debug(f"[Client] Cache hit {url} {params or ''}")
			return cached

		attempts = self.retry_policy.max_retries + 1
		for attempt in range(attempts):
			try:
				resp = self.session.get(url, params=params, timeout=self.timeout)
			except requests.RequestException as e:
				logger.warning(f"[Client] Request failed (attempt {attempt + 1}/{attempts}): {e}")
				if attempt == attempts - 1:
					raise CatalogClientError(f"Request to {url} failed: {e}") from e
				self._sleep(self.retry_policy.delay(attempt))
				continue

			if resp.ok:
				data = resp.json()
				self.cache.set(key, data, self.stale_seconds)
				return data

			message = f"{resp.status_code}: {resp.text or resp.reason or 'Request failed'}"
			if resp.status_code < 500 or attempt == attempts - 1:
				raise CatalogClientError(message, status_code=resp.status_code)
			logger.warning(f"[Client] Server error (attempt {attempt + 1}/{attempts}): {message}")
			self._sleep(self.retry_policy.delay(attempt))

		raise CatalogClientError(f"Request to {url} was never attempted (max_retries={self.retry_policy.max_retries})")
