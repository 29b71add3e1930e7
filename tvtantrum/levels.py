"""
Level vocabulary and normalization.
Closed enumerations for the free-text level, age-group and tantrum-factor labels
used across the catalog, plus the single function that maps source text onto them.
"""

import re  # age-group patterns
from enum import Enum  # closed label sets
from typing import Dict, Optional, Pattern, Tuple  # type annotations

from rapidfuzz import process, fuzz  # fuzzy matching for near-miss level spellings

from loguru import logger  # console logging


class Level(Enum):
	"""Five-step intensity scale shared by interactivity, dialogue and sound effects."""
	LOW = 'Low'
	MODERATE_LOW = 'Moderate-Low'
	MODERATE = 'Moderate'
	MODERATE_HIGH = 'Moderate-High'
	HIGH = 'High'

	@property
	def rank(self) -> int:
		return _LEVEL_RANKS[self]

	@classmethod
	def from_display(cls, value: Optional[str]) -> Optional['Level']:
		"""Exact lookup by display value ("Moderate-High"); None when not an exact label."""
		for level in cls:
			if level.value == value:
				return level
		return None


_LEVEL_RANKS: Dict[Level, int] = {
	Level.LOW: 1,
	Level.MODERATE_LOW: 2,
	Level.MODERATE: 3,
	Level.MODERATE_HIGH: 4,
	Level.HIGH: 5,
}

# Rank used for a missing or unrecognized level
DEFAULT_LEVEL_RANK = 3


class AgeGroup(Enum):
	TODDLER = 'Toddler'
	PRESCHOOL = 'Preschool'
	SCHOOL_AGE = 'School-Age'
	TWEEN = 'Tween'


class TantrumFactor(Enum):
	"""Human-readable label for a stimulation score."""
	LOW = 'low'
	LOW_MEDIUM = 'low-medium'
	MEDIUM = 'medium'
	MEDIUM_HIGH = 'medium-high'
	HIGH = 'high'

	@property
	def score(self) -> int:
		return _TANTRUM_SCORES[self]

	@classmethod
	def from_label(cls, label: Optional[str]) -> Optional['TantrumFactor']:
		if not label:
			return None
		lowered = label.strip().lower()
		for factor in cls:
			if factor.value == lowered:
				return factor
		return None

	@classmethod
	def from_score(cls, score: Optional[int]) -> Optional['TantrumFactor']:
		for factor, value in _TANTRUM_SCORES.items():
			if value == score:
				return factor
		return None


_TANTRUM_SCORES: Dict[TantrumFactor, int] = {
	TantrumFactor.LOW: 1,
	TantrumFactor.LOW_MEDIUM: 2,
	TantrumFactor.MEDIUM: 3,
	TantrumFactor.MEDIUM_HIGH: 4,
	TantrumFactor.HIGH: 5,
}


# Age-group match patterns applied to the free-text age range.
# Numeric prefixes overlap on purpose: a "5-8" show is both Preschool and School-Age.
AGE_GROUP_PATTERNS: Dict[AgeGroup, Pattern] = {
	AgeGroup.TODDLER: re.compile(r'^[0-3]|toddler', re.I),
	AgeGroup.PRESCHOOL: re.compile(r'^[2-5]|preschool', re.I),
	AgeGroup.SCHOOL_AGE: re.compile(r'^[5-9]|school', re.I),
	AgeGroup.TWEEN: re.compile(r'^[8-9]|10-1[2-3]|tween', re.I),
}

# Substring term sets for the three interaction-level filter choices.
# Only used as a fallback for legacy rows whose level text was never normalized.
INTERACTION_TERMS: Dict[str, Tuple[str, ...]] = {
	'Low': ('Low', 'Limited', 'Minimal'),
	'Moderate': ('Moderate', 'Medium', 'Some'),
	'High': ('High', 'Heavy', 'Strong', 'Frequent'),
}

# Free-text variants seen in source data -> canonical level
LEVEL_SYNONYMS: Dict[str, Level] = {
	'low': Level.LOW,
	'very low': Level.LOW,
	'minimal': Level.LOW,
	'limited': Level.LOW,
	'none': Level.LOW,
	'moderate-low': Level.MODERATE_LOW,
	'moderate low': Level.MODERATE_LOW,
	'low-moderate': Level.MODERATE_LOW,
	'low to moderate': Level.MODERATE_LOW,
	'low-medium': Level.MODERATE_LOW,
	'medium-low': Level.MODERATE_LOW,
	'moderate': Level.MODERATE,
	'medium': Level.MODERATE,
	'some': Level.MODERATE,
	'balanced': Level.MODERATE,
	'moderate-high': Level.MODERATE_HIGH,
	'moderate high': Level.MODERATE_HIGH,
	'moderate to high': Level.MODERATE_HIGH,
	'high-moderate': Level.MODERATE_HIGH,
	'medium-high': Level.MODERATE_HIGH,
	'high': Level.HIGH,
	'very high': Level.HIGH,
	'heavy': Level.HIGH,
	'strong': Level.HIGH,
	'frequent': Level.HIGH,
}

_SYNONYM_KEYS = sorted(LEVEL_SYNONYMS.keys())


def normalize_level(text: Optional[str]) -> Optional[Level]:
	"""
	Map free-text level data onto the closed Level vocabulary.
	Tries the exact display value, then the synonym table, then a fuzzy match
	for small typos ("Moderat-High"). Returns None when nothing fits.
	"""
	if not text or not text.strip():
		return None

	exact = Level.from_display(text.strip())
	if exact is not None:
		return exact

	key = re.sub(r'\s+', ' ', text.strip().lower())
	if key in LEVEL_SYNONYMS:
		return LEVEL_SYNONYMS[key]

	match = process.extractOne(key, _SYNONYM_KEYS, scorer=fuzz.ratio)
	if match and match[1] >= 88:
		logger.debug(f"[Levels] Fuzzy level match: '{text}' -> '{match[0]}' (score={match[1]})")
		return LEVEL_SYNONYMS[match[0]]

	logger.debug(f"[Levels] Unrecognized level text: '{text}'")
	return None


def level_rank(text: Optional[str]) -> int:
	"""Rank of an exact level label; missing or unrecognized text ranks as Moderate."""
	level = Level.from_display(text or 'Moderate')
	return level.rank if level is not None else DEFAULT_LEVEL_RANK
