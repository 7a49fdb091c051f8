import pytest

from lyrics_lab.app.services.search_service import SearchService
from lyrics_lab.core.lyric_search import SearchHistory
from lyrics_lab.core.song import build_song


@pytest.fixture
def service(repository):
    repository.add_song(build_song("Night Drive", "Headlights on the highway\nwe drive all night"))
    repository.add_song(build_song("Morning", "Coffee and the morning light"))
    return SearchService(repository, history=SearchHistory(max_entries=3))


def test_search_returns_matches_and_records_history(service):
    results = service.search("night")

    assert [result.title for result in results] == ["Night Drive"]
    assert service.history() == ["night"]


def test_blank_search_is_not_recorded(service):
    assert service.search("   ") == []
    assert service.history() == []


def test_exact_search_and_history_order(service):
    service.search("light")
    service.search('"morning light"')

    assert service.history() == ['"morning light"', "light"]

    service.clear_history()
    assert service.history() == []


def test_format_results_highlights_terms(service):
    results = service.search("light")

    output = service.format_results("light", results)

    assert "2 match(es) for 'light' in 2 song(s)" in output
    assert "**light**" in output
    assert "Line 1: Head**light**s on the highway" in output


def test_format_results_without_matches(service):
    assert service.format_results("zebra", []) == "❌ No lyrics match 'zebra'."
