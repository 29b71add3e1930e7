"""
Unit tests for level normalization and the label enums.
Run: pytest tests/test_levels.py
"""

from tvtantrum.levels import Level, TantrumFactor, level_rank, normalize_level


def test_exact_display_values():
	for level in Level:
		assert normalize_level(level.value) is level


def test_synonyms():
	assert normalize_level('Moderate to High') is Level.MODERATE_HIGH
	assert normalize_level('  medium ') is Level.MODERATE
	assert normalize_level('Minimal') is Level.LOW
	assert normalize_level('Very  High') is Level.HIGH


def test_fuzzy_typos():
	assert normalize_level('Moderat-High') is Level.MODERATE_HIGH  # misspelled on purpose


def test_unrecognized_text():
	assert normalize_level('Unknown-Value') is None
	assert normalize_level('') is None
	assert normalize_level(None) is None


def test_level_rank():
	assert level_rank('Low') == 1
	assert level_rank('High') == 5
	assert level_rank(None) == 3
	assert level_rank('moderate to high') == 3  # only exact labels rank


def test_tantrum_factor_lookups():
	assert TantrumFactor.from_label('Medium-High') is TantrumFactor.MEDIUM_HIGH
	assert TantrumFactor.from_label('bogus') is None
	assert TantrumFactor.from_score(1) is TantrumFactor.LOW
	assert TantrumFactor.from_score(7) is None
	assert TantrumFactor.HIGH.score == 5
