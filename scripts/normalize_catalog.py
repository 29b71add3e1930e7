"""
Normalize a catalog export.

This script:
1) Loads shows from data/shows.jsonl (or the path given as the first argument)
2) Resolves interactivity, dialogue and sound-effect text to canonical levels
3) Reports rows whose level text could not be normalized
4) Writes the cleaned catalog to data/shows.normalized.jsonl (or the second argument)

Usage:
    python -m scripts.normalize_catalog [input.jsonl] [output.jsonl]
"""

import sys  # command-line arguments
from pathlib import Path  # filesystem-safe paths

from loguru import logger  # console logging

from tvtantrum.data_loader import DataLoader  # data ingestion


def main():
	logger.info("=" * 60)
	logger.info("Normalize Catalog Levels")
	logger.info("=" * 60)

	root = Path(__file__).resolve().parents[1]  # project root
	source = Path(sys.argv[1]) if len(sys.argv) > 1 else root / 'data' / 'shows.jsonl'
	target = Path(sys.argv[2]) if len(sys.argv) > 2 else root / 'data' / 'shows.normalized.jsonl'

	# 1) Load data (levels are normalized while loading)
	logger.info("[1/3] Loading shows...")
	loader = DataLoader()
	shows = loader.load_shows_from_jsonl(str(source))
	logger.info(f"[OK] Loaded {len(shows)} shows")

	# 2) Report anything left unnormalized
	logger.info("[2/3] Checking level fields...")
	unresolved = 0
	for show in shows:
		for label, raw, level in (
			('interactivity', show.interactivity_level, show.interactivity),
			('dialogue', show.dialogue_intensity, show.dialogue),
			('sound effects', show.sound_effects_level, show.sound_effects),
		):
			if raw and level is None:
				unresolved += 1
				logger.warning(f"  show {show.id} '{show.name}': unrecognized {label} level '{raw}'")
	logger.info(f"[OK] {unresolved} level values left as free text")

	# 3) Write the canonical catalog
	logger.info("[3/3] Writing normalized catalog...")
	loader.save_shows_to_jsonl(shows, str(target))
	logger.info(f"All done! Point TVTANTRUM_DATA_DIR at a directory holding {target.name} renamed to shows.jsonl.")
	logger.info("=" * 60)


if __name__ == '__main__':
	main()
