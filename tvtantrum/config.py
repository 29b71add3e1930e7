"""
Runtime settings read from the environment (and a local .env file, if present).
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .cache import TTL_LONG


@dataclass
class Settings:
	data_dir: Path = Path('data')
	admin_password: str = 'admin123'
	cache_ttl_seconds: float = TTL_LONG
	cache_max_keys: int = 50000
	log_level: str = 'INFO'

	@property
	def shows_path(self) -> Path:
		return self.data_dir / 'shows.jsonl'

	@property
	def research_path(self) -> Path:
		return self.data_dir / 'research.jsonl'

	@property
	def categories_path(self) -> Path:
		return self.data_dir / 'categories.jsonl'


def load_settings() -> Settings:
	load_dotenv()
	return Settings(
		data_dir=Path(os.getenv('TVTANTRUM_DATA_DIR', 'data')),
		admin_password=os.getenv('TVTANTRUM_ADMIN_PASSWORD', 'admin123'),
		cache_ttl_seconds=float(os.getenv('TVTANTRUM_CACHE_TTL', TTL_LONG)),
		cache_max_keys=int(os.getenv('TVTANTRUM_CACHE_MAX_KEYS', 50000)),
		log_level=os.getenv('TVTANTRUM_LOG_LEVEL', 'INFO').upper(),
	)
