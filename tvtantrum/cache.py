"""
In-process TTL cache for catalog reads.
The cache is an injected service: the API builds one from settings and hands it
to the catalog service and the client, so tests can pass their own.
"""

import threading  # endpoints run on worker threads
import time  # monotonic clock for expiry
from collections import OrderedDict  # insertion order drives eviction
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from loguru import logger  # console logging


# Cache key prefixes
TV_SHOWS_ALL = 'tv_shows:all'
TV_SHOW_BY_ID = 'tv_show:id:'
FEATURED_SHOW = 'featured_show'
POPULAR_SHOWS = 'popular_shows'
THEMES = 'themes'
SEARCH_RESULTS = 'search:'
SIMILAR_SHOWS = 'similar:'
HOMEPAGE_CATEGORIES = 'homepage_categories'
CATEGORY_SHOWS = 'category_shows:'
RESEARCH_SUMMARIES = 'research_summaries'
RESEARCH_BY_ID = 'research:id:'

# TTL tiers in seconds
TTL_LONG = 1800  # rarely changing data
TTL_MEDIUM = 600
TTL_SHORT = 300
TTL_VERY_SHORT = 60  # dynamic data


def cache_key(base: str, *parts: Any) -> str:
	"""Join a prefix and its parameters: cache_key('tv_show:id:', 7) -> 'tv_show:id:7'."""
	if not parts:
		return base
	return base + ':'.join(str(p) for p in parts)


@dataclass
class CacheConfig:
	ttl_seconds: float = TTL_LONG  # default time-to-live
	max_keys: int = 50000  # capacity before the oldest entry is evicted


class CatalogCache:
	"""
	Key/value store with per-entry expiry.
	Expired entries are dropped lazily on access; when the cache is full the
	oldest inserted entry is evicted. Every operation holds one lock.
	"""

	def __init__(self, config: Optional[CacheConfig] = None, clock: Callable[[], float] = time.monotonic):
		self.config = config or CacheConfig()
		self._clock = clock
		self._entries: 'OrderedDict[str, Tuple[float, Any]]' = OrderedDict()  # key -> (expires_at, value)
		self._lock = threading.Lock()
		self.hits = 0
		self.misses = 0

	def get(self, key: str) -> Optional[Any]:
		with self._lock:
			entry = self._entries.get(key)
			if entry is None:
				self.misses += 1
				return None
			expires_at, value = entry
			if expires_at <= self._clock():
				del self._entries[key]
				self.misses += 1
				logger.debug(f"[Cache] Expired '{key}'")
				return None
			self.hits += 1
			return value

	def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
		ttl = self.config.ttl_seconds if ttl is None else ttl
		with self._lock:
			if key in self._entries:
				del self._entries[key]
			elif len(self._entries) >= self.config.max_keys:
				oldest, _ = self._entries.popitem(last=False)
				logger.debug(f"[Cache] Evicted '{oldest}' (max_keys={self.config.max_keys})")
			self._entries[key] = (self._clock() + ttl, value)

	def delete(self, key: str) -> bool:
		with self._lock:
			return self._entries.pop(key, None) is not None

	def invalidate_prefix(self, prefix: str) -> int:
		"""Remove every key starting with `prefix`; returns how many were removed."""
		with self._lock:
			doomed = [k for k in self._entries if k.startswith(prefix)]
			for k in doomed:
				del self._entries[k]
		if doomed:
			logger.debug(f"[Cache] Invalidated {len(doomed)} keys starting with '{prefix}'")
		return len(doomed)

	def clear(self) -> None:
		with self._lock:
			self._entries.clear()
		logger.info("[Cache] Cleared")

	def __len__(self) -> int:
		return len(self._entries)

	def stats(self) -> Dict[str, Any]:
		with self._lock:
			return {
				'keys': len(self._entries),
				'hits': self.hits,
				'misses': self.misses,
				'ttl_seconds': self.config.ttl_seconds,
				'max_keys': self.config.max_keys,
			}
