"""
Label and description lookups shown next to a show's ratings.
Unrecognized input always falls back to the "Moderate" wording.
"""

from typing import Dict, Optional

from .levels import Level, TantrumFactor
from .models import TvShow


STIMULATION_DESCRIPTIONS: Dict[int, str] = {
	1: "Low stimulation - calming content with gentle pacing.",
	2: "Low-Medium stimulation - mostly calm content with occasional moderate energy.",
	3: "Medium stimulation - balanced content with moderate energy.",
	4: "Medium-High stimulation - moderately energetic content with some intense moments.",
}
HIGH_STIMULATION_DESCRIPTION = "High stimulation - energetic content that may be overstimulating for some children."

INTERACTIVITY_DESCRIPTIONS: Dict[Level, str] = {
	Level.LOW: "Minimal audience interaction, children mostly observe passively.",
	Level.MODERATE_LOW: "Some audience engagement, primarily through questions or simple responses.",
	Level.MODERATE: "Balanced audience engagement with regular interaction throughout the show.",
	Level.MODERATE_HIGH: "Frequent audience engagement with multiple interactive elements.",
	Level.HIGH: "Very interactive format that encourages active participation throughout.",
}

DIALOGUE_DESCRIPTIONS: Dict[Level, str] = {
	Level.LOW: "Minimal dialogue, relies more on visuals and music.",
	Level.MODERATE_LOW: "Simple dialogue with plenty of pauses and visual storytelling.",
	Level.MODERATE: "Balanced dialogue that's appropriate for the target age group.",
	Level.MODERATE_HIGH: "Conversation-heavy with more complex language patterns.",
	Level.HIGH: "Very dialogue-rich content with complex vocabulary or frequent conversations.",
}

SOUND_EFFECTS_DESCRIPTIONS: Dict[Level, str] = {
	Level.LOW: "Minimal sound effects, creating a calm viewing experience.",
	Level.MODERATE_LOW: "Gentle sound effects that enhance the content without overwhelming.",
	Level.MODERATE: "Balanced use of sound effects to support the storytelling.",
	Level.MODERATE_HIGH: "Frequent sound effects that play a significant role in the experience.",
	Level.HIGH: "Sound effect-heavy show with prominent audio elements throughout.",
}


def stimulation_score_color(score: int) -> str:
	"""Lower stimulation is calmer, so it gets the green band."""
	if score <= 2:
		return 'green-rating'
	if score <= 4:
		return 'yellow-rating'
	return 'red-rating'


def positive_rating_color(rating: float) -> str:
	if rating >= 4:
		return 'purple-rating'
	if rating >= 3:
		return 'yellow-rating'
	return 'red-rating'


def stimulation_score_description(score: int) -> str:
	return STIMULATION_DESCRIPTIONS.get(score, HIGH_STIMULATION_DESCRIPTION)


def tantrum_factor_label(score: Optional[int]) -> str:
	factor = TantrumFactor.from_score(score)
	return factor.value if factor is not None else TantrumFactor.MEDIUM.value


def _describe(table: Dict[Level, str], value: Optional[str], fallback: str) -> str:
	level = Level.from_display(value)
	if level is None:
		return fallback
	return table[level]


def interactivity_description(value: Optional[str]) -> str:
	return _describe(INTERACTIVITY_DESCRIPTIONS, value, "Moderate level of interactivity.")


def dialogue_intensity_description(value: Optional[str]) -> str:
	return _describe(DIALOGUE_DESCRIPTIONS, value, "Moderate level of dialogue.")


def sound_effects_description(value: Optional[str]) -> str:
	return _describe(SOUND_EFFECTS_DESCRIPTIONS, value, "Moderate level of sound effects.")


def describe_show(show: TvShow) -> Dict[str, str]:
	"""All the display labels for one show, keyed for the API payload."""
	return {
		'tantrumFactor': tantrum_factor_label(show.stimulation_score),
		'stimulationColor': stimulation_score_color(show.stimulation_score),
		'stimulationDescription': stimulation_score_description(show.stimulation_score),
		'ratingColor': positive_rating_color(show.overall_rating),
		'interactivityDescription': interactivity_description(
			show.interactivity.value if show.interactivity else show.interactivity_level
		),
		'dialogueDescription': dialogue_intensity_description(
			show.dialogue.value if show.dialogue else show.dialogue_intensity
		),
		'soundEffectsDescription': sound_effects_description(
			show.sound_effects.value if show.sound_effects else show.sound_effects_level
		),
	}
