"""
Unit tests for display labels and colour bands.
Run: pytest tests/test_descriptions.py
"""

from tvtantrum.descriptions import (
	describe_show,
	dialogue_intensity_description,
	interactivity_description,
	positive_rating_color,
	sound_effects_description,
	stimulation_score_color,
	stimulation_score_description,
	tantrum_factor_label,
)


def test_stimulation_color_bands():
	assert [stimulation_score_color(s) for s in range(1, 6)] == [
		'green-rating', 'green-rating', 'yellow-rating', 'yellow-rating', 'red-rating',
	]


def test_positive_rating_color_bands():
	assert positive_rating_color(4.5) == 'purple-rating'
	assert positive_rating_color(4) == 'purple-rating'
	assert positive_rating_color(3.2) == 'yellow-rating'
	assert positive_rating_color(1) == 'red-rating'


def test_tantrum_factor_labels():
	assert [tantrum_factor_label(s) for s in range(1, 6)] == ['low', 'low-medium', 'medium', 'medium-high', 'high']
	assert tantrum_factor_label(0) == 'medium'
	assert tantrum_factor_label(None) == 'medium'


def test_stimulation_description_defaults_to_high():
	assert stimulation_score_description(1).startswith('Low stimulation')
	assert stimulation_score_description(5).startswith('High stimulation')
	assert stimulation_score_description(9).startswith('High stimulation')


def test_level_descriptions_fall_back_to_moderate_wording():
	assert interactivity_description('Bogus') == "Moderate level of interactivity."
	assert dialogue_intensity_description(None) == "Moderate level of dialogue."
	assert sound_effects_description('') == "Moderate level of sound effects."
	assert interactivity_description('High').startswith('Very interactive')


def test_describe_show_uses_normalized_levels(make_show):
	show = make_show(
		1, "Sing Along", stimulation_score=4, overall_rating=3.5,
		interactivity_level='Moderate to High', dialogue_intensity='Low',
	)
	labels = describe_show(show)
	assert labels['tantrumFactor'] == 'medium-high'
	assert labels['stimulationColor'] == 'yellow-rating'
	assert labels['ratingColor'] == 'yellow-rating'
	assert labels['interactivityDescription'] == "Frequent audience engagement with multiple interactive elements."
	assert labels['dialogueDescription'] == "Minimal dialogue, relies more on visuals and music."
	assert labels['soundEffectsDescription'] == "Moderate level of sound effects."
