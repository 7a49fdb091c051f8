"""Lyric search over the library with search history."""

from __future__ import annotations

from typing import List, Optional, Sequence

from lyrics_lab.core.lyric_search import (
    SearchHistory,
    SearchQuery,
    SongSearchResult,
    parse_query,
    search_songs,
)

from ..data.database import SQLiteSongRepository
from ...utils.observability import create_counter, get_logger, start_span
from .result_formatter import LyricsResultFormatter


class SearchService:
    def __init__(
        self,
        repository: SQLiteSongRepository,
        *,
        history: Optional[SearchHistory] = None,
        formatter: Optional[LyricsResultFormatter] = None,
    ) -> None:
        self.repository = repository
        self.search_history = history or SearchHistory()
        self.formatter = formatter or LyricsResultFormatter()
        self._logger = get_logger(__name__).bind(component="search_service")
        self._metric_searches = create_counter(
            "lyrics_lab_searches_total",
            "Lyric searches run against the library.",
            ["mode"],
        )

    def search(self, query: str) -> List[SongSearchResult]:
        """Search every song and record non-blank queries in the history."""

        parsed = parse_query(query)
        if parsed.is_empty:
            return []

        self._metric_searches.labels(mode="exact" if parsed.exact else "terms").inc()
        with start_span("lyrics_lab.search", {"query": parsed.raw, "exact": parsed.exact}):
            results = search_songs(self.repository.list_songs(), parsed)
        self.search_history.add(parsed.raw)
        self._logger.debug(
            "Lyric search complete",
            context={"query": parsed.raw, "songs_matched": len(results)},
        )
        return results

    def history(self) -> List[str]:
        return self.search_history.entries()

    def clear_history(self) -> None:
        self.search_history.clear()

    def format_results(self, query: str | SearchQuery, results: Sequence[SongSearchResult]) -> str:
        parsed = parse_query(query) if isinstance(query, str) else query
        return self.formatter.format_search_results(parsed, results)


__all__ = ["SearchService"]
