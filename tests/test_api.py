"""
API tests against the sample catalog using FastAPI's TestClient.
Run: pytest tests/test_api.py
"""

import pytest
from fastapi.testclient import TestClient

import api
from tvtantrum.catalog import CatalogService
from tvtantrum.config import Settings

ADMIN_PASSWORD = 'test-password'


@pytest.fixture
def client(monkeypatch, sample_shows, sample_research, sample_categories):
	"""Install a fresh catalog so startup does not read the data directory."""
	monkeypatch.setattr(api, 'CATALOG', CatalogService(sample_shows, sample_research, sample_categories))
	monkeypatch.setattr(api.SETTINGS, 'admin_password', ADMIN_PASSWORD)
	return TestClient(api.app)


@pytest.fixture
def admin_headers():
	return {'X-Admin-Password': ADMIN_PASSWORD}


def names(payload):
	return [item['name'] for item in payload]


class TestHealth:
	def test_health(self, client):
		response = client.get("/api/health")
		assert response.status_code == 200
		assert response.json()['shows'] == 7

	def test_not_ready_without_catalog(self, client, monkeypatch):
		monkeypatch.setattr(api, 'CATALOG', None)
		assert client.get("/api/tv-shows").status_code == 503


class TestShows:
	def test_list_uses_camel_case(self, client):
		response = client.get("/api/tv-shows", params={'ageGroup': 'Tween'})
		assert response.status_code == 200
		show = response.json()[0]
		assert show['name'] == 'Avatar: The Last Airbender'
		assert show['ageRange'] == '8-13'
		assert show['stimulationScore'] == 4
		assert 'interactivity' not in show

	def test_list_filters_and_sorts(self, client):
		response = client.get("/api/tv-shows", params={'themes': 'Animals,Family', 'themeMatchMode': 'OR', 'sortBy': 'name'})
		assert names(response.json()) == ['Bluey', 'Puffin Rock', 'Wild Kratts']

	def test_repeated_theme_params(self, client):
		response = client.get("/api/tv-shows?themes=Animals&themes=Science")
		assert names(response.json()) == ['Wild Kratts']

	def test_search_parameter(self, client):
		response = client.get("/api/tv-shows", params={'search': "Blue's Clues"})
		assert names(response.json()) == ["Blue's Clues & You! 2019-present"]

	def test_detail_has_labels_and_counts_views(self, client):
		before = api.CATALOG.get_show(4).views
		response = client.get("/api/tv-shows/4")
		assert response.status_code == 200
		body = response.json()
		assert body['labels']['tantrumFactor'] == 'high'
		assert body['labels']['stimulationColor'] == 'red-rating'
		assert api.CATALOG.get_show(4).views == before + 1

	def test_unknown_show_is_404(self, client):
		response = client.get("/api/tv-shows/999")
		assert response.status_code == 404
		assert 'not found' in response.json()['message']

	def test_non_integer_id_is_rejected(self, client):
		assert client.get("/api/tv-shows/abc").status_code == 422

	def test_compare(self, client):
		response = client.get("/api/tv-shows/compare", params={'ids': '4,1'})
		assert [s['id'] for s in response.json()] == [4, 1]
		assert client.get("/api/tv-shows/compare", params={'ids': '4,x'}).status_code == 400

	def test_similar(self, client):
		response = client.get("/api/tv-shows/similar/5")
		assert names(response.json()) == ['Avatar: The Last Airbender', 'Puffin Rock']

	def test_featured_and_popular(self, client):
		assert client.get("/api/shows/featured").json()['name'] == 'Bluey'
		assert names(client.get("/api/shows/popular", params={'limit': 2}).json()) == ['Bluey', "Daniel Tiger's Neighborhood"]

	def test_no_featured_show(self, client, admin_headers):
		client.put("/api/admin/tv-shows/1", json={'isFeatured': False}, headers=admin_headers)
		assert client.get("/api/shows/featured").status_code == 404

	def test_search_endpoint(self, client):
		assert names(client.get("/api/search", params={'q': 'cocomelon'}).json()) == ['Cocomelon']
		assert client.get("/api/search", params={'q': ' '}).status_code == 400

	def test_themes(self, client):
		themes = client.get("/api/themes").json()
		assert themes == sorted(themes)


class TestResearchAndCategories:
	def test_research(self, client):
		assert [r['id'] for r in client.get("/api/research").json()] == [2, 1]
		body = client.get("/api/research/1").json()
		assert body['originalUrl'].startswith('https://doi.org/')
		assert client.get("/api/research/42").status_code == 404

	def test_homepage_categories(self, client):
		categories = client.get("/api/homepage-categories").json()
		assert [c['name'] for c in categories] == ['Calm Picks', 'Animal Adventures']
		assert categories[0]['displayOrder'] == 1
		shows = client.get("/api/homepage-categories/2/shows").json()
		assert names(shows) == ['Wild Kratts', 'Puffin Rock']


class TestAdmin:
	def test_login(self, client):
		assert client.post("/api/admin/login", json={'password': ADMIN_PASSWORD}).status_code == 200
		assert client.post("/api/admin/login", json={'password': 'wrong'}).status_code == 401

	def test_requires_password(self, client):
		response = client.post("/api/admin/tv-shows", json={'name': 'Sneaky', 'stimulationScore': 1})
		assert response.status_code == 401

	def test_create_update_delete_show(self, client, admin_headers):
		response = client.post(
			"/api/admin/tv-shows",
			json={'name': 'Tiny Town', 'stimulationScore': 1, 'themes': ['Music'], 'interactivityLevel': 'minimal'},
			headers=admin_headers,
		)
		assert response.status_code == 201
		show_id = response.json()['id']
		assert 'Tiny Town' in names(client.get("/api/tv-shows", params={'themes': 'Music'}).json())

		response = client.put(f"/api/admin/tv-shows/{show_id}", json={'stimulationScore': 3}, headers=admin_headers)
		assert response.json()['stimulationScore'] == 3

		assert client.delete(f"/api/admin/tv-shows/{show_id}", headers=admin_headers).status_code == 200
		assert client.get(f"/api/tv-shows/{show_id}").status_code == 404

	def test_invalid_show_is_rejected(self, client, admin_headers):
		response = client.post("/api/admin/tv-shows", json={'name': 'Loud', 'stimulationScore': 9}, headers=admin_headers)
		assert response.status_code == 422

	def test_null_fields_are_rejected(self, client, admin_headers):
		for body in ({'name': None}, {'stimulationScore': None}, {'themes': None}):
			response = client.put("/api/admin/tv-shows/1", json=body, headers=admin_headers)
			assert response.status_code == 400, body
		listing = client.get("/api/tv-shows", params={'search': 'blu', 'sortBy': 'name'})
		assert listing.status_code == 200
		assert names(listing.json()) == ["Blue's Clues & You! 2019-present", 'Bluey']
		assert client.get("/api/tv-shows/1").json()['stimulationScore'] == 2

	def test_category_with_malformed_rule_still_lists_shows(self, client, admin_headers):
		response = client.post(
			"/api/admin/homepage-categories",
			json={'name': 'Odd Rules', 'filterConfig': {'rules': [{'field': 'interactivityLevel', 'operator': 'equals', 'value': ['Low']}]}},
			headers=admin_headers,
		)
		category_id = response.json()['id']
		shows = client.get(f"/api/homepage-categories/{category_id}/shows")
		assert shows.status_code == 200
		assert len(shows.json()) == 7

	def test_research_crud(self, client, admin_headers):
		response = client.post("/api/admin/research", json={'title': 'Screens at bedtime', 'category': 'Sleep'}, headers=admin_headers)
		assert response.status_code == 201
		research_id = response.json()['id']
		response = client.put(f"/api/admin/research/{research_id}", json={'keyFindings': 'Stop an hour before bed.'}, headers=admin_headers)
		assert response.json()['keyFindings'] == 'Stop an hour before bed.'
		assert client.delete(f"/api/admin/research/{research_id}", headers=admin_headers).status_code == 200
		assert client.delete(f"/api/admin/research/{research_id}", headers=admin_headers).status_code == 404

	def test_category_crud(self, client, admin_headers):
		assert len(client.get("/api/admin/homepage-categories", headers=admin_headers).json()) == 3
		response = client.post(
			"/api/admin/homepage-categories",
			json={'name': 'Sing Along', 'displayOrder': 0, 'filterConfig': {'rules': [{'field': 'themes', 'operator': 'contains', 'value': 'Music'}]}},
			headers=admin_headers,
		)
		assert response.status_code == 201
		assert client.get("/api/homepage-categories").json()[0]['name'] == 'Sing Along'
		category_id = response.json()['id']
		response = client.put(f"/api/admin/homepage-categories/{category_id}", json={'isActive': False}, headers=admin_headers)
		assert response.json()['isActive'] is False
		assert 'Sing Along' not in [c['name'] for c in client.get("/api/homepage-categories").json()]


class TestCache:
	def test_stats_and_clear(self, client):
		client.get("/api/themes")
		client.get("/api/themes")
		stats = client.get("/api/performance-stats").json()
		assert stats['cache']['hits'] >= 1
		assert client.post("/api/cache/clear").json() == {'success': True}
		assert client.get("/api/performance-stats").json()['cache']['keys'] == 0


def test_build_catalog_tolerates_missing_files(tmp_path):
	catalog = api.build_catalog(Settings(data_dir=tmp_path))
	assert catalog.shows == {}
	assert catalog.get_homepage_categories() == []
