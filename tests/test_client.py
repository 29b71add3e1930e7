"""
Unit tests for CatalogClient with a scripted HTTP session.
Run: pytest tests/test_client.py
"""

import json

import pytest
import requests

from tvtantrum.client import CatalogClient, CatalogClientError, RetryPolicy, filters_to_params
from tvtantrum.models import FilterSpec, StimulationRange


class FakeResponse:
	def __init__(self, status_code, payload=None, text=''):
		self.status_code = status_code
		self.payload = payload
		self.text = text
		self.reason = ''

	@property
	def ok(self):
		return self.status_code < 400

	def json(self):
		return self.payload


class FakeSession:
	"""Replays queued responses (or raises queued exceptions) and records each call."""

	def __init__(self, *responses):
		self.responses = list(responses)
		self.calls = []

	def get(self, url, params=None, timeout=None):
		self.calls.append((url, params))
		item = self.responses.pop(0)
		if isinstance(item, Exception):
			raise item
		return item


RAW_SHOWS = [
	{'id': 1, 'name': 'Loud Songs', 'ageRange': '0-3', 'stimulationScore': 5, 'themes': ['Music']},
	{'id': 2, 'name': 'Quiet Pond', 'ageRange': '2-5', 'stimulationScore': 1, 'themes': ['Nature']},
	{'id': 3, 'name': 'Calm Tunes', 'ageRange': '2-4', 'stimulationScore': 2, 'themes': ['Music']},
]


def make_client(session, **kwargs):
	sleeps = []
	client = CatalogClient('http://catalog.test/', session=session, sleep=sleeps.append, **kwargs)
	return client, sleeps


def test_filters_to_params():
	params = filters_to_params(FilterSpec(
		age_group='Toddler',
		themes=['Music', 'Nature'],
		stimulation_score_range=StimulationRange(min=1, max=2),
		limit=10,
	))
	assert params['ageGroup'] == 'Toddler'
	assert params['themes'] == 'Music,Nature'
	assert params['themeMatchMode'] == 'AND'
	assert json.loads(params['stimulationScoreRange']) == {'min': 1, 'max': 2}
	assert params['limit'] == '10'
	assert 'search' not in params


def test_list_shows_filters_and_sorts_locally():
	session = FakeSession(FakeResponse(200, RAW_SHOWS))
	client, _ = make_client(session)
	shows = client.list_shows(FilterSpec(themes=['Music'], sort_by='stimulation-score'))
	assert [s.name for s in shows] == ['Calm Tunes', 'Loud Songs']
	url, params = session.calls[0]
	assert url == 'http://catalog.test/api/tv-shows'
	assert params['sortBy'] == 'stimulation-score'


def test_responses_are_cached():
	session = FakeSession(FakeResponse(200, RAW_SHOWS))
	client, _ = make_client(session)
	client.list_shows()
	client.list_shows()
	assert len(session.calls) == 1


def test_server_errors_are_retried_with_backoff():
	session = FakeSession(FakeResponse(503, text='busy'), FakeResponse(500), FakeResponse(200, RAW_SHOWS[0]))
	client, sleeps = make_client(session)
	show = client.get_show(1)
	assert show.name == 'Loud Songs'
	assert sleeps == [1.0, 2.0]


def test_client_errors_are_not_retried():
	session = FakeSession(FakeResponse(404, text='TV show not found'))
	client, sleeps = make_client(session)
	with pytest.raises(CatalogClientError) as excinfo:
		client.get_show(99)
	assert excinfo.value.status_code == 404
	assert len(session.calls) == 1
	assert sleeps == []


def test_network_errors_give_up_after_max_retries():
	failure = requests.ConnectionError('connection refused')
	session = FakeSession(failure, failure)
	client, sleeps = make_client(session, retry_policy=RetryPolicy(max_retries=1, base_delay=0.5))
	with pytest.raises(CatalogClientError):
		client.list_shows()
	assert len(session.calls) == 2
	assert sleeps == [0.5]


def test_backoff_is_capped():
	policy = RetryPolicy(base_delay=1.0, max_delay=30.0)
	assert [policy.delay(a) for a in range(6)] == [1.0, 2.0, 4.0, 8.0, 16.0, 30.0]
