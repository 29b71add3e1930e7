"""
Unit tests for the sort options.
Run: pytest tests/test_show_sorting.py
"""

from tvtantrum.models import FilterSpec
from tvtantrum.show_filters import filter_shows
from tvtantrum.show_sorting import interactivity_rank, popularity_score, sort_shows


def test_no_sort_option_returns_a_copy_in_input_order(sample_shows):
	result = sort_shows(sample_shows, None)
	assert result == sample_shows
	assert result is not sample_shows


def test_unknown_sort_option_keeps_input_order(sample_shows):
	assert sort_shows(sample_shows, 'shuffle') == sample_shows


def test_stimulation_score_is_non_decreasing(sample_shows):
	scores = [s.stimulation_score for s in sort_shows(sample_shows, 'stimulation-score')]
	assert scores == sorted(scores)


def test_popular_is_non_increasing(sample_shows):
	result = sort_shows(sample_shows, 'popular')
	scores = [popularity_score(s) for s in result]
	assert scores == sorted(scores, reverse=True)
	assert result[0].name == 'Cocomelon'


def test_popularity_counts_views_twice(make_show):
	show = make_show(1, "Counted", views=10, searches=3)
	assert popularity_score(show) == 23
	assert popularity_score(make_show(2, "New")) == 0


def test_unknown_interactivity_ranks_as_moderate(make_show):
	shows = [
		make_show(1, "H", interactivity_level='High'),
		make_show(2, "U", interactivity_level='Unknown-Value'),
		make_show(3, "L", interactivity_level='Low'),
		make_show(4, "ML", interactivity_level='Moderate-Low'),
		make_show(5, "MH", interactivity_level='Moderate-High'),
	]
	assert interactivity_rank(shows[1]) == 3
	assert [s.name for s in sort_shows(shows, 'interactivity-level')] == ['L', 'ML', 'U', 'MH', 'H']


def test_ties_keep_input_order(make_show):
	shows = [
		make_show(1, "First", stimulation_score=3, overall_rating=4.0),
		make_show(2, "Second", stimulation_score=3, overall_rating=4.0),
		make_show(3, "Calm", stimulation_score=1, overall_rating=2.0),
	]
	assert [s.name for s in sort_shows(shows, 'stimulation-score')] == ['Calm', 'First', 'Second']
	assert [s.name for s in sort_shows(shows, 'overall-rating')] == ['First', 'Second', 'Calm']


def test_name_sort_ignores_case(make_show):
	shows = [make_show(1, "bluey"), make_show(2, "Arthur"), make_show(3, "apple")]
	assert [s.name for s in sort_shows(shows, 'name')] == ['apple', 'Arthur', 'bluey']


def test_rating_aliases_sort_descending(sample_shows):
	for option in ('overall-rating', 'rating', 'rating_desc'):
		ratings = [s.overall_rating for s in sort_shows(sample_shows, option)]
		assert ratings == sorted(ratings, reverse=True), option


def test_release_year_sorts_put_missing_years_last(make_show):
	shows = [make_show(1, "Old", release_year=1990), make_show(2, "Undated"), make_show(3, "New", release_year=2020)]
	assert [s.name for s in sort_shows(shows, 'newest')] == ['New', 'Old', 'Undated']
	assert [s.name for s in sort_shows(shows, 'oldest')] == ['Old', 'New', 'Undated']


def test_filtering_and_sorting_commute(sample_shows):
	spec = FilterSpec(themes=['Animals', 'Family'], theme_match_mode='OR')
	for option in ('name', 'stimulation-score', 'interactivity-level', 'popular'):
		filtered_first = sort_shows(filter_shows(sample_shows, spec), option)
		sorted_first = filter_shows(sort_shows(sample_shows, option), spec)
		assert filtered_first == sorted_first, option
