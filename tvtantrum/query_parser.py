"""
Filter parsing module.
Builds a FilterSpec from URL query parameters and from the rule lists stored
on homepage categories. Malformed pieces are logged and skipped, never raised.
"""

import json  # stimulationScoreRange arrives JSON-encoded
import re  # "1-2" style ranges
from typing import Any, Dict, List, Mapping, Optional, Tuple  # type annotations

from loguru import logger  # console logging

from .models import AgeRangeBounds, FilterSpec, StimulationRange


class FilterQueryParser:
	"""
	Parses raw request input into a structured FilterSpec.
	Query parameter names mirror the browse page: search, ageGroup, tantrumFactor,
	themes, themeMatchMode, interactionLevel, stimulationScoreRange, sortBy, limit, offset.
	"""

	RE_RANGE = re.compile(r'^\s*(\d+)\s*-\s*(\d+)\s*$')  # "1-3"
	THEME_MATCH_MODES = ('AND', 'OR')

	def from_query_params(self, params: Mapping[str, Any]) -> FilterSpec:
		"""Main entry for GET /api/tv-shows. Values may be strings or lists of strings."""
		logger.debug(f"[Parser] Query params: {dict(params)}")
		spec = FilterSpec()

		spec.search = self._first(params.get('search'))
		spec.age_group = self._first(params.get('ageGroup'))
		# Older links send the bucket as ageRange
		age_range_alias = self._first(params.get('ageRange'))
		if age_range_alias:
			spec.age_group = age_range_alias
		spec.tantrum_factor = self._first(params.get('tantrumFactor'))
		spec.themes = self._parse_themes(params.get('themes'))
		spec.theme_match_mode = self._parse_match_mode(self._first(params.get('themeMatchMode')))

		interaction = self._first(params.get('interactionLevel'))
		spec.interaction_level = interaction if interaction and interaction != 'Any' else None

		spec.stimulation_score_range = self._parse_stimulation_range(self._first(params.get('stimulationScoreRange')))
		spec.sort_by = self._first(params.get('sortBy'))
		spec.limit = self._parse_int(self._first(params.get('limit')), 'limit')
		spec.offset = self._parse_int(self._first(params.get('offset')), 'offset')

		logger.debug(f"[Parser] Parsed filter spec: {spec}")
		return spec

	def from_filter_config(self, config: Optional[Mapping[str, Any]]) -> FilterSpec:
		"""
		Convert a homepage category's filter_config ({"logic": ..., "rules": [...]})
		into a FilterSpec. Unknown fields and operators are ignored.
		"""
		spec = FilterSpec()
		if not config:
			return spec
		if isinstance(config, str):
			try:
				config = json.loads(config)
			except json.JSONDecodeError as e:
				logger.warning(f"[Parser] Invalid filter_config JSON: {e}")
				return spec
		if not isinstance(config, Mapping):
			return spec
		rules = config.get('rules')
		if not isinstance(rules, list):
			return spec

		themes: List[str] = []
		for rule in rules:
			if not isinstance(rule, Mapping):
				continue
			field_name = rule.get('field')
			operator = rule.get('operator')
			value = rule.get('value')

			if field_name == 'stimulationScore' and operator == 'range' and value:
				if isinstance(value, Mapping):
					try:
						spec.stimulation_score_range = StimulationRange(
							min=int(value.get('min') or 1),
							max=int(value.get('max') or 5),
						)
					except (TypeError, ValueError) as e:
						logger.warning(f"[Parser] Ignoring malformed stimulationScore rule {dict(value)}: {e}")
				else:
					bounds = self._parse_span(str(value))
					if bounds:
						spec.stimulation_score_range = StimulationRange(min=bounds[0], max=bounds[1])
			elif field_name == 'ageGroup' and operator == 'equals':
				spec.age_group = self._rule_text(rule)
			elif field_name == 'ageRange' and operator == 'range' and isinstance(value, str):
				bounds = self._parse_span(value)
				if bounds:
					spec.age_range = AgeRangeBounds(min=bounds[0], max=bounds[1])
			elif field_name == 'themes':
				if operator == 'in' and isinstance(value, list):
					themes = [str(t) for t in value]
				elif operator == 'contains' and value:
					themes.append(str(value))
			elif field_name in ('interactivityLevel', 'interactionLevel') and operator == 'equals':
				spec.interaction_level = self._rule_text(rule)
			else:
				logger.debug(f"[Parser] Skipping unsupported rule: {dict(rule)}")

		if themes:
			spec.themes = themes
			spec.theme_match_mode = self._parse_match_mode(config.get('logic'))
		logger.debug(f"[Parser] Category rules -> {spec}")
		return spec

	def _rule_text(self, rule: Mapping[str, Any]) -> Optional[str]:
		"""An equals-rule value; anything but non-blank text is skipped."""
		value = rule.get('value')
		if isinstance(value, str) and value.strip():
			return value.strip()
		logger.warning(f"[Parser] Ignoring {rule.get('field')} rule with non-text value {value!r}")
		return None

	def _first(self, value: Any) -> Optional[str]:
		# Repeated query params arrive as lists; scalar fields use the first non-blank one
		if isinstance(value, (list, tuple)):
			value = next((v for v in value if v not in (None, '')), None)
		if value is None:
			return None
		value = str(value)
		return value if value.strip() else None

	def _parse_themes(self, value: Any) -> List[str]:
		if not value:
			return []
		raw = value if isinstance(value, (list, tuple)) else [value]
		themes: List[str] = []
		for item in raw:
			for theme in str(item).split(','):
				if theme.strip():
					themes.append(theme.strip())
		return themes

	def _parse_match_mode(self, value: Optional[str]) -> str:
		mode = (value or 'AND').strip().upper()
		return mode if mode in self.THEME_MATCH_MODES else 'AND'

	def _parse_stimulation_range(self, value: Optional[str]) -> Optional[StimulationRange]:
		if not value:
			return None
		bounds = self._parse_span(value)
		if bounds:
			return StimulationRange(min=bounds[0], max=bounds[1])
		try:
			data = json.loads(value)
			return StimulationRange(min=int(data['min']), max=int(data['max']))
		except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
			logger.warning(f"[Parser] Ignoring malformed stimulationScoreRange '{value}': {e}")
			return None

	def _parse_span(self, value: str) -> Optional[Tuple[int, int]]:
		m = self.RE_RANGE.match(value)
		if not m:
			return None
		start, end = int(m.group(1)), int(m.group(2))
		if start > end:  # normalize order
			start, end = end, start
		return (start, end)

	def _parse_int(self, value: Optional[str], name: str) -> Optional[int]:
		if value is None:
			return None
		try:
			return int(value)
		except ValueError:
			logger.warning(f"[Parser] Ignoring non-integer {name}='{value}'")
			return None


def parse_query_params(params: Mapping[str, Any]) -> FilterSpec:
	return FilterQueryParser().from_query_params(params)


def parse_filter_config(config: Optional[Dict[str, Any]]) -> FilterSpec:
	return FilterQueryParser().from_filter_config(config)
