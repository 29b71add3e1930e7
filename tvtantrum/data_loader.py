"""
Data loading and preprocessing module.
Loads shows, research summaries and homepage categories from JSONL files and
normalizes the records. Level text is resolved to the Level enum here, once,
so the filter engine does not re-interpret free text on every request.
"""

# Standard libs for JSON parsing, typing, and paths
import json  # read JSON lines
from pathlib import Path  # filesystem-safe paths
from typing import Any, Callable, Dict, List, Optional, TypeVar  # type hints

# Console logging
from loguru import logger  # console logger

# Our record types and the level normalizer
from .levels import normalize_level  # free text -> Level
from .models import HomepageCategory, ResearchSummary, TvShow  # structured records

T = TypeVar('T')


class DataLoader:
	"""
	Handles loading and preprocessing of catalog data.
	Accepts both camelCase keys (API exports) and snake_case keys (database dumps).
	"""

	def load_shows_from_jsonl(self, filepath: str) -> List[TvShow]:
		"""Load shows from a JSON Lines file where each line is one show object."""
		return self._load_jsonl(filepath, self.parse_show, 'shows')

	def load_research_from_jsonl(self, filepath: str) -> List[ResearchSummary]:
		return self._load_jsonl(filepath, self.parse_research, 'research summaries')

	def load_categories_from_jsonl(self, filepath: str) -> List[HomepageCategory]:
		return self._load_jsonl(filepath, self.parse_category, 'homepage categories')

	def _load_jsonl(self, filepath: str, parse: Callable[[Dict[str, Any]], T], label: str) -> List[T]:
		records: List[T] = []  # accumulator for parsed records
		filepath = Path(filepath)  # normalize path

		# Validate the file presence early to give clear error messages
		if not filepath.exists():
			raise FileNotFoundError(f"Catalog data file not found: {filepath}")

		logger.info(f"[Loader] Loading {label} from {filepath}...")

		# Read line-by-line; a bad line is skipped, not fatal
		with open(filepath, 'r', encoding='utf-8') as f:
			for line_num, line in enumerate(f, 1):
				if not line.strip():
					continue  # tolerate blank lines
				try:
					data = json.loads(line.strip())
					records.append(parse(data))
				except json.JSONDecodeError as e:
					logger.warning(f"[Loader] Skipping invalid JSON at line {line_num}: {e}")
				except (KeyError, TypeError, ValueError) as e:
					logger.warning(f"[Loader] Error parsing record at line {line_num}: {e}")

		logger.info(f"[Loader] Successfully loaded {len(records)} {label}.")
		return records

	def parse_show(self, data: Dict[str, Any]) -> TvShow:
		"""
		Convert a raw dictionary into a TvShow.
		Normalizes list fields and numbers, and resolves level text to enums.
		"""
		get = self._getter(data)

		interactivity_level = self._clean(get('interactivityLevel', 'interactivity_level', 'interactionLevel'))
		dialogue_intensity = self._clean(get('dialogueIntensity', 'dialogue_intensity'))
		sound_effects_level = self._clean(get('soundEffectsLevel', 'sound_effects_level', 'soundFrequency'))

		show = TvShow(
			id=int(get('id')),  # required
			name=str(get('name') or '').strip(),
			description=str(get('description') or '').strip(),
			age_range=str(get('ageRange', 'age_range') or '').strip(),
			stimulation_score=self._parse_int(get('stimulationScore', 'stimulation_score')) or 0,
			interactivity_level=interactivity_level,
			dialogue_intensity=dialogue_intensity,
			sound_effects_level=sound_effects_level,
			themes=self._parse_list(get('themes')),
			overall_rating=self._parse_float(get('overallRating', 'overall_rating')) or 0.0,
			views=self._parse_int(get('views', 'viewCount', 'view_count')) or 0,
			searches=self._parse_int(get('searches', 'searchCount', 'search_count')) or 0,
			episode_length=self._parse_int(get('episodeLength', 'episode_length')),
			creator=self._clean(get('creator')),
			release_year=self._parse_int(get('releaseYear', 'release_year')),
			end_year=self._parse_int(get('endYear', 'end_year')),
			is_ongoing=bool(get('isOngoing', 'is_ongoing', default=True)),
			seasons=self._parse_int(get('seasons')),
			available_on=self._parse_list(get('availableOn', 'available_on')),
			animation_style=self._clean(get('animationStyle', 'animation_style')),
			image_url=self._clean(get('imageUrl', 'image_url')),
			is_featured=bool(get('isFeatured', 'is_featured', default=False)),
		)
		self.normalize_levels(show)
		return show

	def normalize_levels(self, show: TvShow) -> TvShow:
		"""Resolve the free-text level fields onto the Level enum, in place."""
		show.interactivity = normalize_level(show.interactivity_level)
		show.dialogue = normalize_level(show.dialogue_intensity)
		show.sound_effects = normalize_level(show.sound_effects_level)
		return show

	def parse_research(self, data: Dict[str, Any]) -> ResearchSummary:
		get = self._getter(data)
		return ResearchSummary(
			id=int(get('id')),
			title=str(get('title') or '').strip(),
			category=str(get('category') or '').strip(),
			summary=self._clean(get('summary')),
			full_text=self._clean(get('fullText', 'full_text')),
			image_url=self._clean(get('imageUrl', 'image_url')),
			source=self._clean(get('source')),
			original_url=self._clean(get('originalUrl', 'original_url')),
			published_date=self._clean(get('publishedDate', 'published_date')),
			headline=self._clean(get('headline')),
			sub_headline=self._clean(get('subHeadline', 'sub_headline')),
			key_findings=self._clean(get('keyFindings', 'key_findings')),
			created_at=self._clean(get('createdAt', 'created_at')),
			updated_at=self._clean(get('updatedAt', 'updated_at')),
		)

	def parse_category(self, data: Dict[str, Any]) -> HomepageCategory:
		get = self._getter(data)
		filter_config = get('filterConfig', 'filter_config') or {}
		if isinstance(filter_config, str):
			filter_config = json.loads(filter_config)  # stored as text in older dumps
		return HomepageCategory(
			id=int(get('id')),
			name=str(get('name') or '').strip(),
			description=str(get('description') or '').strip(),
			display_order=self._parse_int(get('displayOrder', 'display_order')) or 0,
			is_active=bool(get('isActive', 'is_active', default=True)),
			filter_config=filter_config,
			created_at=self._clean(get('createdAt', 'created_at')),
			updated_at=self._clean(get('updatedAt', 'updated_at')),
		)

	def _getter(self, data: Dict[str, Any]) -> Callable[..., Any]:
		"""Return a lookup that tries several key spellings in order."""
		def get(*keys: str, default: Any = None) -> Any:
			for key in keys:
				if key in data and data[key] is not None:
					return data[key]
			return default
		return get

	def _parse_list(self, value: Any) -> List[str]:
		"""
		Normalize a value that may be None, a list, or a comma-separated string
		into a list of clean strings.
		"""
		if value is None:
			return []
		if isinstance(value, list):
			return [str(item).strip() for item in value if item and str(item).strip()]
		if isinstance(value, str):
			return [item.strip() for item in value.split(',') if item.strip()]
		return []

	def _clean(self, value: Any) -> Optional[str]:
		if value is None:
			return None
		text = str(value).strip()
		return text or None

	def _parse_int(self, value: Any) -> Optional[int]:
		if value is None or value == '':
			return None
		return int(float(value))  # "3" and 3.0 both accepted

	def _parse_float(self, value: Any) -> Optional[float]:
		if value is None or value == '':
			return None
		return float(value)

	def show_to_record(self, show: TvShow, canonical_levels: bool = True) -> Dict[str, Any]:
		"""
		Convert a TvShow back into a camelCase dictionary.
		With canonical_levels, level text is replaced by the normalized display value
		whenever normalization succeeded.
		"""
		def level_text(raw: Optional[str], level) -> Optional[str]:
			if canonical_levels and level is not None:
				return level.value
			return raw

		return {
			'id': show.id,
			'name': show.name,
			'description': show.description,
			'ageRange': show.age_range,
			'stimulationScore': show.stimulation_score,
			'interactivityLevel': level_text(show.interactivity_level, show.interactivity),
			'dialogueIntensity': level_text(show.dialogue_intensity, show.dialogue),
			'soundEffectsLevel': level_text(show.sound_effects_level, show.sound_effects),
			'themes': list(show.themes),
			'overallRating': show.overall_rating,
			'views': show.views,
			'searches': show.searches,
			'episodeLength': show.episode_length,
			'creator': show.creator,
			'releaseYear': show.release_year,
			'endYear': show.end_year,
			'isOngoing': show.is_ongoing,
			'seasons': show.seasons,
			'availableOn': list(show.available_on),
			'animationStyle': show.animation_style,
			'imageUrl': show.image_url,
			'isFeatured': show.is_featured,
		}

	def save_shows_to_jsonl(self, shows: List[TvShow], filepath: str, canonical_levels: bool = True) -> None:
		filepath = Path(filepath)
		filepath.parent.mkdir(parents=True, exist_ok=True)
		with open(filepath, 'w', encoding='utf-8') as f:
			for show in shows:
				f.write(json.dumps(self.show_to_record(show, canonical_levels), ensure_ascii=False) + '\n')
		logger.info(f"[Loader] Wrote {len(shows)} shows to {filepath}")

	def get_all_themes(self, shows: List[TvShow]) -> List[str]:
		"""Return a sorted list of all unique themes in the dataset."""
		themes = set()
		for show in shows:
			themes.update(t for t in show.themes if t.strip())
		return sorted(themes)
