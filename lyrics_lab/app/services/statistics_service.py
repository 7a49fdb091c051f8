"""Library statistics with telemetry, metrics and tracing."""

from __future__ import annotations

import time
from copy import deepcopy
from typing import Any, Dict, List, Optional, Tuple

from lyrics_lab.core.rhyme_analysis import RhymeAnalyzer, RhymeStatistics
from lyrics_lab.core.text_stats import CorpusStatistics, compute_corpus_statistics

from ..data.database import SQLiteSongRepository
from ...utils.observability import (
    add_span_attributes,
    create_counter,
    create_histogram,
    get_logger,
    record_exception,
    start_span,
)
from ...utils.telemetry import StructuredTelemetry
from .library_service import SongNotFoundError


class StatisticsService:
    """Computes corpus statistics and per-song rhyme analysis for the library."""

    def __init__(
        self,
        repository: SQLiteSongRepository,
        analyzer: Optional[RhymeAnalyzer] = None,
        *,
        telemetry: Optional[StructuredTelemetry] = None,
    ) -> None:
        self.repository = repository
        self.analyzer = analyzer or RhymeAnalyzer()
        self.telemetry = telemetry or StructuredTelemetry()
        self._latest_trace: Dict[str, Any] = {}
        self._logger = get_logger(__name__).bind(component="statistics_service")

        self._metric_requests = create_counter(
            "lyrics_lab_statistics_requests_total",
            "Statistics computations requested.",
            ["scope"],
        )
        self._metric_failures = create_counter(
            "lyrics_lab_statistics_failures_total",
            "Statistics computations that raised an exception.",
        )
        self._metric_duration = create_histogram(
            "lyrics_lab_statistics_duration_seconds",
            "Time spent computing library statistics.",
        )

    def set_analyzer(self, analyzer: RhymeAnalyzer) -> None:
        self.analyzer = analyzer

    def song_filter_options(self) -> List[Tuple[str, str]]:
        """``(label, value)`` choices for the statistics song filter."""

        options = [("All songs", "all")]
        options.extend((song.title, song.id) for song in self.repository.list_songs())
        return options

    def compute(self, song_filter: str = "all") -> CorpusStatistics:
        scope = "all" if str(song_filter or "all") == "all" else "song"
        self._metric_requests.labels(scope=scope).inc()
        self.telemetry.start_trace("compute_statistics")
        self.telemetry.annotate("input.song_filter", song_filter)
        start = time.perf_counter()

        with start_span("lyrics_lab.statistics.compute", {"song_filter": song_filter}) as span:
            try:
                with self.telemetry.timer("statistics.load_songs") as payload:
                    songs = self.repository.list_songs()
                    payload["songs"] = len(songs)

                with self.telemetry.timer("statistics.compute"):
                    stats = compute_corpus_statistics(songs, song_filter, self.analyzer)
            except Exception as exc:
                self._metric_failures.inc()
                record_exception(span, exc)
                self._logger.error(
                    "Statistics computation failed",
                    context={"song_filter": song_filter, "error": str(exc)},
                )
                raise
            finally:
                self._metric_duration.observe(time.perf_counter() - start)
                self._latest_trace = self.telemetry.snapshot()

            add_span_attributes(
                span,
                {
                    "song_filter.applied": stats.song_filter,
                    "total_songs": stats.total_songs,
                    "rhymable_words": stats.rhyme_stats.total_rhymable_words,
                },
            )

        self.telemetry.annotate("result.total_songs", stats.total_songs)
        self._latest_trace = self.telemetry.snapshot()
        self._logger.info(
            "Statistics computed",
            context={
                "song_filter": stats.song_filter,
                "total_songs": stats.total_songs,
                "total_words": stats.total_words,
            },
        )
        return stats

    def analyze_song(self, song_id: str) -> RhymeStatistics:
        song = self.repository.get_song(song_id)
        if song is None:
            raise SongNotFoundError(f"Song '{song_id}' was not found")
        with start_span("lyrics_lab.statistics.analyze_song", {"song_id": song_id}):
            with self.telemetry.timer("statistics.analyze_song", {"song_id": song_id}):
                return self.analyzer.analyze(song.lyrics)

    def get_latest_telemetry(self) -> Dict[str, Any]:
        """Return the most recent telemetry snapshot."""

        return deepcopy(self._latest_trace)


__all__ = ["StatisticsService"]
