"""Application wiring for the Lyrics Lab project."""

from __future__ import annotations

from typing import Optional

if __package__ in {None, ""}:
    import sys
    from pathlib import Path

    repo_root = Path(__file__).resolve().parents[2]
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))

from lyrics_lab.core import PhoneticMap, RhymeAnalyzer
from lyrics_lab.utils.logging_config import configure_logging
from lyrics_lab.utils.observability import get_logger
from lyrics_lab.utils.telemetry import StructuredTelemetry, TelemetryLogger

from lyrics_lab.app.data.database import SQLiteSongRepository
from lyrics_lab.app.services.library_service import LibraryService
from lyrics_lab.app.services.lookup_service import WordLookupService
from lyrics_lab.app.services.result_formatter import LyricsResultFormatter
from lyrics_lab.app.services.search_service import SearchService
from lyrics_lab.app.services.statistics_service import StatisticsService
from lyrics_lab.app.settings import AppSettings
from lyrics_lab.app.ui.gradio import create_interface


class LyricsLabApp:
    """High-level application facade bundling dependencies."""

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        *,
        repository: Optional[SQLiteSongRepository] = None,
        phonetic_map: Optional[PhoneticMap] = None,
        analyzer: Optional[RhymeAnalyzer] = None,
        lookup_service: Optional[WordLookupService] = None,
    ) -> None:
        self.settings = settings or AppSettings.from_env()
        self._logger = get_logger(__name__).bind(component="app_facade")
        self._logger.info("Initialising application facade", context={"db_path": self.settings.db_path})

        self.repository = repository or SQLiteSongRepository(self.settings.db_path)
        try:
            song_count = self.repository.ensure_database()
        except Exception as exc:
            self._logger.error(
                "Database initialisation failed",
                context={"db_path": self.settings.db_path, "error": str(exc)},
            )
            raise
        else:
            self._logger.info("Database ready", context={"song_count": song_count})

        self.phonetic_map = phonetic_map or PhoneticMap()
        self.analyzer = analyzer or RhymeAnalyzer(self.phonetic_map)
        self.formatter = LyricsResultFormatter()

        self.telemetry = StructuredTelemetry(listeners=[TelemetryLogger()])
        self.library_service = LibraryService(self.repository, audio_dir=self.settings.audio_dir)
        self.search_service = SearchService(self.repository, formatter=self.formatter)
        self.statistics_service = StatisticsService(
            self.repository,
            self.analyzer,
            telemetry=self.telemetry,
        )
        self.lookup_service = lookup_service or WordLookupService(
            phonetic_map=self.phonetic_map,
            timeout=self.settings.lookup_timeout,
        )

        self._refresh_vocabulary()

    # Dependency management -------------------------------------------------
    def set_phonetic_map(self, phonetic_map: PhoneticMap) -> None:
        self.phonetic_map = phonetic_map
        self.analyzer = RhymeAnalyzer(phonetic_map)
        self.statistics_service.set_analyzer(self.analyzer)
        self.lookup_service.set_phonetic_map(phonetic_map)

    def create_gradio_interface(self):
        return create_interface(
            self.library_service,
            self.search_service,
            self.statistics_service,
            self.lookup_service,
            self.formatter,
        )

    # Internal helpers ------------------------------------------------------
    def _refresh_vocabulary(self) -> None:
        path = self.settings.vocabulary_path
        if not path:
            return
        try:
            added = self.phonetic_map.load_vocabulary_file(path)
        except (OSError, ValueError) as exc:
            self._logger.warning(
                "Custom vocabulary could not be loaded",
                context={"path": path, "error": str(exc)},
            )
            return
        self.analyzer.clear_cached_results()
        self._logger.info("Custom vocabulary loaded", context={"path": path, "words": added})


def main() -> None:
    configure_logging()
    settings = AppSettings.from_env()
    app = LyricsLabApp(settings)
    interface = app.create_gradio_interface()
    interface.launch(
        server_name="0.0.0.0",
        server_port=settings.server_port,
        share=settings.share,
    )


if __name__ == "__main__":
    main()


__all__ = ["LyricsLabApp", "main"]
