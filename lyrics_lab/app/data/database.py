"""SQLite storage for the song library."""

from __future__ import annotations

import os
import queue
import sqlite3
import threading
from contextlib import contextmanager
from typing import Any, Dict, Generator, List, Optional

from lyrics_lab.core.song import Song
from lyrics_lab.utils.observability import get_logger

from .demo_data import build_example_song

EXAMPLE_DELETED_FLAG = "example_deleted"

_SONG_COLUMNS = (
    "id",
    "title",
    "lyrics",
    "filename",
    "word_count",
    "line_count",
    "date_added",
    "date_modified",
    "audio_filename",
    "audio_path",
    "is_example",
    "from_notepad",
)
_UPDATABLE_COLUMNS = frozenset(_SONG_COLUMNS) - {"id", "date_added"}

# Columns added after the first schema version.
_LATE_COLUMNS = {
    "line_count": "INTEGER DEFAULT 0",
    "date_modified": "TEXT",
    "audio_filename": "TEXT",
    "audio_path": "TEXT",
    "from_notepad": "INTEGER DEFAULT 0",
}


def _ensure_parent_directory(path: str) -> None:
    directory = os.path.dirname(os.path.abspath(path))
    if directory and not os.path.exists(directory):
        os.makedirs(directory, exist_ok=True)


def _row_to_song(row: tuple) -> Song:
    values = dict(zip(_SONG_COLUMNS, row))
    values["is_example"] = bool(values["is_example"])
    values["from_notepad"] = bool(values["from_notepad"])
    values["word_count"] = int(values["word_count"] or 0)
    values["line_count"] = int(values["line_count"] or 0)
    return Song(**values)


def _song_to_row(song: Song) -> tuple:
    values = song.as_dict()
    values["is_example"] = int(bool(song.is_example))
    values["from_notepad"] = int(bool(song.from_notepad))
    return tuple(values[column] for column in _SONG_COLUMNS)


class SQLiteSongRepository:
    """Repository encapsulating all SQLite access for the song library."""

    def __init__(
        self,
        db_path: str,
        *,
        pool_size: int = 4,
        pool_timeout: float = 5.0,
        seed_example: bool = True,
    ) -> None:
        self.db_path = db_path
        self.seed_example = seed_example
        self._pool_size = max(1, int(pool_size))
        self._pool_timeout = max(0.0, float(pool_timeout))
        self._pool: queue.Queue = queue.Queue(maxsize=self._pool_size)
        self._pool_semaphore = threading.BoundedSemaphore(self._pool_size)
        self._logger = get_logger(__name__).bind(
            component="sqlite_repository",
            db_path=db_path,
        )
        self._logger.info(
            "SQLite repository initialised",
            context={"pool_size": self._pool_size, "pool_timeout": self._pool_timeout},
        )

    def _create_connection(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self.db_path, check_same_thread=False)
        try:
            connection.execute("PRAGMA journal_mode=WAL")
        except sqlite3.Error as exc:
            self._logger.warning(
                "SQLite WAL mode unavailable",
                context={"error": str(exc)},
            )
        return connection

    def _acquire_connection(self) -> sqlite3.Connection:
        if not self._pool_semaphore.acquire(timeout=self._pool_timeout or None):
            self._logger.error(
                "Database connection pool exhausted",
                context={"pool_size": self._pool_size, "timeout": self._pool_timeout},
            )
            raise TimeoutError("Database connection pool exhausted")

        try:
            connection = self._pool.get_nowait()
        except queue.Empty:
            connection = self._create_connection()

        return connection

    def _release_connection(self, connection: sqlite3.Connection) -> None:
        try:
            self._pool.put_nowait(connection)
        except queue.Full:
            connection.close()
        finally:
            self._pool_semaphore.release()

    @contextmanager
    def _connect(self) -> Generator[sqlite3.Connection, None, None]:
        connection = self._acquire_connection()
        try:
            yield connection
            if connection.in_transaction:
                connection.commit()
        except Exception as exc:
            if connection.in_transaction:
                connection.rollback()
            self._logger.error(
                "SQLite operation failed",
                context={"error": str(exc)},
            )
            raise
        finally:
            self._release_connection(connection)

    def close(self) -> None:
        """Close pooled connections."""

        while True:
            try:
                connection = self._pool.get_nowait()
            except queue.Empty:
                break
            connection.close()

    # Schema ----------------------------------------------------------------
    def ensure_database(self) -> int:
        """Create the schema if needed, seed the example song and return the song count."""

        self._logger.info("Ensuring database availability")
        _ensure_parent_directory(self.db_path)

        with self._connect() as conn:
            self._initialise_schema(conn)

        count = self.count_songs()
        if count == 0 and self.seed_example and not self.get_flag(EXAMPLE_DELETED_FLAG):
            self.add_song(build_example_song())
            count = 1
            self._logger.info("Seeded example song")

        self._logger.info("Database schema verified", context={"song_count": count})
        return count

    def _initialise_schema(self, connection: sqlite3.Connection) -> None:
        cursor = connection.cursor()
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS songs (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                lyrics TEXT NOT NULL,
                filename TEXT,
                word_count INTEGER DEFAULT 0,
                line_count INTEGER DEFAULT 0,
                date_added TEXT NOT NULL,
                date_modified TEXT,
                audio_filename TEXT,
                audio_path TEXT,
                is_example INTEGER DEFAULT 0,
                from_notepad INTEGER DEFAULT 0
            )
            """
        )
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS app_state (
                key TEXT PRIMARY KEY,
                value TEXT
            )
            """
        )
        self._ensure_schema_extensions(connection)

    def _ensure_schema_extensions(self, connection: sqlite3.Connection) -> None:
        cursor = connection.cursor()
        cursor.execute("PRAGMA table_info(songs)")
        existing_columns = {row[1] for row in cursor.fetchall()}

        for column, definition in _LATE_COLUMNS.items():
            if column not in existing_columns:
                cursor.execute(f"ALTER TABLE songs ADD COLUMN {column} {definition}")

        cursor.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_songs_date_added
            ON songs (date_added DESC)
            """
        )
        connection.commit()

    # Songs -----------------------------------------------------------------
    def list_songs(self) -> List[Song]:
        """Return every song, newest first."""

        with self._connect() as conn:
            cursor = conn.execute(
                f"SELECT {', '.join(_SONG_COLUMNS)} FROM songs "
                "ORDER BY date_added DESC, rowid DESC"
            )
            return [_row_to_song(row) for row in cursor.fetchall()]

    def get_song(self, song_id: str) -> Optional[Song]:
        with self._connect() as conn:
            cursor = conn.execute(
                f"SELECT {', '.join(_SONG_COLUMNS)} FROM songs WHERE id = ?",
                (str(song_id),),
            )
            row = cursor.fetchone()
        return _row_to_song(row) if row else None

    def add_song(self, song: Song) -> Song:
        placeholders = ", ".join("?" for _ in _SONG_COLUMNS)
        with self._connect() as conn:
            conn.execute(
                f"INSERT INTO songs ({', '.join(_SONG_COLUMNS)}) VALUES ({placeholders})",
                _song_to_row(song),
            )
        self._logger.debug("Song stored", context={"song_id": song.id, "title": song.title})
        return song

    def update_song(self, song_id: str, **fields: Any) -> Optional[Song]:
        """Update the given columns and return the stored song, ``None`` if missing."""

        unknown = set(fields) - _UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Unknown song fields: {', '.join(sorted(unknown))}")

        values: Dict[str, Any] = dict(fields)
        for flag in ("is_example", "from_notepad"):
            if flag in values:
                values[flag] = int(bool(values[flag]))

        if values:
            assignments = ", ".join(f"{column} = ?" for column in values)
            with self._connect() as conn:
                cursor = conn.execute(
                    f"UPDATE songs SET {assignments} WHERE id = ?",
                    (*values.values(), str(song_id)),
                )
                if cursor.rowcount == 0:
                    return None
        return self.get_song(song_id)

    def delete_song(self, song_id: str) -> bool:
        song = self.get_song(song_id)
        if song is None:
            return False

        with self._connect() as conn:
            conn.execute("DELETE FROM songs WHERE id = ?", (str(song_id),))
        if song.is_example:
            self.set_flag(EXAMPLE_DELETED_FLAG, True)
        self._logger.info("Song deleted", context={"song_id": song_id})
        return True

    def delete_all(self) -> int:
        """Remove every song and allow the example song to return."""

        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM songs")
            removed = cursor.rowcount
        self.set_flag(EXAMPLE_DELETED_FLAG, False)
        self._logger.info("Library cleared", context={"removed": removed})
        return removed

    def count_songs(self) -> int:
        with self._connect() as conn:
            (count,) = conn.execute("SELECT COUNT(*) FROM songs").fetchone()
        return int(count)

    # Application state -----------------------------------------------------
    def get_flag(self, key: str, default: bool = False) -> bool:
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM app_state WHERE key = ?", (key,)).fetchone()
        if row is None or row[0] is None:
            return default
        return str(row[0]).strip().lower() in {"1", "true", "yes"}

    def set_flag(self, key: str, value: bool) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO app_state (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, "1" if value else "0"),
            )


__all__ = ["SQLiteSongRepository", "EXAMPLE_DELETED_FLAG"]
