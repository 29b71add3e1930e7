"""
Shared fixtures: the sample catalog under data/ and a small show factory.
"""

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
	sys.path.insert(0, str(ROOT))

from tvtantrum.data_loader import DataLoader
from tvtantrum.models import TvShow

DATA_DIR = ROOT / 'data'


@pytest.fixture
def loader():
	return DataLoader()


@pytest.fixture
def sample_shows(loader):
	return loader.load_shows_from_jsonl(str(DATA_DIR / 'shows.jsonl'))


@pytest.fixture
def sample_research(loader):
	return loader.load_research_from_jsonl(str(DATA_DIR / 'research.jsonl'))


@pytest.fixture
def sample_categories(loader):
	return loader.load_categories_from_jsonl(str(DATA_DIR / 'categories.jsonl'))


@pytest.fixture
def make_show(loader):
	"""Build a TvShow with normalized levels, like the loader would."""
	def build(id, name, **fields):
		return loader.normalize_levels(TvShow(id=id, name=name, **fields))
	return build
