"""Upload, notepad and editing workflows for the song library."""

from __future__ import annotations

import mimetypes
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

from lyrics_lab.core.song import (
    Song,
    base_name,
    build_song,
    sanitize_text,
    title_from_filename,
    utc_now,
)
from lyrics_lab.utils.observability import create_counter, get_logger

from ..data.database import SQLiteSongRepository

MAX_SONGS = 50
DEFAULT_NOTEPAD_TITLE = "Untitled"

_TEXT_EXTENSIONS = {".txt", ".lyrics"}
_AUDIO_EXTENSIONS = {".mp3", ".wav", ".m4a", ".ogg", ".flac", ".aac", ".webm"}
_UNSAFE_FILENAME = re.compile(r"[^A-Za-z0-9._ -]")


class LibraryError(Exception):
    """Base class for library workflow errors."""


class SongNotFoundError(LibraryError):
    pass


class SongValidationError(LibraryError):
    pass


class LibraryFullError(LibraryError):
    pass


@dataclass(frozen=True)
class UploadedFile:
    """An uploaded file held in memory."""

    name: str
    data: bytes
    content_type: Optional[str] = None

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "UploadedFile":
        file_path = Path(path)
        content_type, _ = mimetypes.guess_type(file_path.name)
        return cls(name=file_path.name, data=file_path.read_bytes(), content_type=content_type)

    @property
    def extension(self) -> str:
        return os.path.splitext(self.name)[1].lower()

    @property
    def is_text(self) -> bool:
        return self.content_type == "text/plain" or self.extension in _TEXT_EXTENSIONS

    @property
    def is_audio(self) -> bool:
        return bool(self.content_type and self.content_type.startswith("audio/")) or (
            self.extension in _AUDIO_EXTENSIONS
        )


@dataclass
class ImportReport:
    created: List[Song] = field(default_factory=list)
    audio_attached: List[Song] = field(default_factory=list)
    skipped: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.created or self.audio_attached)


@dataclass
class _UploadGroup:
    text_file: Optional[UploadedFile] = None
    audio_file: Optional[UploadedFile] = None


def _safe_filename(name: str) -> str:
    cleaned = _UNSAFE_FILENAME.sub("_", os.path.basename(sanitize_text(name))).strip(" .")
    return cleaned or "upload"


class LibraryService:
    """Creates, edits and removes songs while enforcing the library cap."""

    def __init__(
        self,
        repository: SQLiteSongRepository,
        *,
        audio_dir: Union[str, Path] = "audio",
        max_songs: int = MAX_SONGS,
    ) -> None:
        self.repository = repository
        self.audio_dir = Path(audio_dir)
        self.max_songs = max(1, int(max_songs))
        self._logger = get_logger(__name__).bind(component="library_service")
        self._metric_songs_created = create_counter(
            "lyrics_lab_songs_created_total",
            "Songs added to the library.",
            ["source"],
        )

    # Queries ---------------------------------------------------------------
    def list_songs(self) -> List[Song]:
        return self.repository.list_songs()

    def get_song(self, song_id: str) -> Song:
        song = self.repository.get_song(song_id)
        if song is None:
            raise SongNotFoundError(f"Song '{song_id}' was not found")
        return song

    def available_slots(self) -> int:
        return max(0, self.max_songs - self.repository.count_songs())

    # Uploads ---------------------------------------------------------------
    def _store_audio(self, song_id: str, upload: UploadedFile) -> str:
        self.audio_dir.mkdir(parents=True, exist_ok=True)
        target = self.audio_dir / f"{song_id}_{_safe_filename(upload.name)}"
        target.write_bytes(upload.data)
        return str(target)

    def import_files(self, files: Iterable[Union[UploadedFile, str, Path]]) -> ImportReport:
        """Create songs from text uploads and attach audio by matching base filename."""

        uploads = [item if isinstance(item, UploadedFile) else UploadedFile.from_path(item) for item in files]
        report = ImportReport()
        if not uploads:
            return report

        slots = self.available_slots()
        if slots <= 0:
            raise LibraryFullError(f"The library already holds {self.max_songs} songs")

        groups: Dict[str, _UploadGroup] = {}
        for upload in uploads:
            name = sanitize_text(upload.name)
            group = groups.setdefault(base_name(name), _UploadGroup())
            if upload.is_text:
                group.text_file = upload
            elif upload.is_audio:
                group.audio_file = upload
            else:
                report.skipped.append((upload.name, "unsupported file type"))

        existing: Dict[str, Song] = {}
        for song in self.repository.list_songs():
            if song.filename:
                existing.setdefault(base_name(song.filename), song)

        for key, group in groups.items():
            song = existing.get(key)
            if song is None or group.audio_file is None:
                continue
            audio_path = self._store_audio(song.id, group.audio_file)
            updated = self.repository.update_song(
                song.id,
                audio_path=audio_path,
                audio_filename=sanitize_text(group.audio_file.name),
            )
            if updated is not None:
                report.audio_attached.append(updated)

        for key, group in groups.items():
            if key in existing:
                continue
            if group.text_file is None:
                if group.audio_file is not None:
                    report.skipped.append((group.audio_file.name, "no lyrics file with the same name"))
                continue
            if len(report.created) >= slots:
                report.skipped.append((group.text_file.name, "library is full"))
                continue

            try:
                content = group.text_file.data.decode("utf-8-sig")
            except UnicodeDecodeError as exc:
                self._logger.warning(
                    "Lyrics file could not be decoded",
                    context={"filename": group.text_file.name, "error": str(exc)},
                )
                report.skipped.append((group.text_file.name, "not valid UTF-8 text"))
                continue

            filename = sanitize_text(group.text_file.name)
            song = build_song(title_from_filename(filename), content, filename)
            if group.audio_file is not None:
                song.audio_path = self._store_audio(song.id, group.audio_file)
                song.audio_filename = sanitize_text(group.audio_file.name)
            self.repository.add_song(song)
            self._metric_songs_created.labels(source="upload").inc()
            report.created.append(song)

        self._logger.info(
            "Upload processed",
            context={
                "files": len(uploads),
                "created": len(report.created),
                "audio_attached": len(report.audio_attached),
                "skipped": len(report.skipped),
            },
        )
        return report

    # Notepad ---------------------------------------------------------------
    def create_song(self, title: Optional[str], lyrics: Optional[str]) -> Song:
        if not (lyrics or "").strip():
            raise SongValidationError("Lyrics cannot be empty")
        if self.available_slots() <= 0:
            raise LibraryFullError(f"The library already holds {self.max_songs} songs")

        clean_title = sanitize_text(title or "").strip() or DEFAULT_NOTEPAD_TITLE
        song = build_song(clean_title, lyrics or "", f"{clean_title}.txt", from_notepad=True)
        self.repository.add_song(song)
        self._metric_songs_created.labels(source="notepad").inc()
        self._logger.info("Song created from notepad", context={"song_id": song.id})
        return song

    def update_song(self, song_id: str, title: Optional[str], lyrics: Optional[str]) -> Song:
        """Save edits; a blank title keeps the current one, blank lyrics are rejected."""

        current = self.get_song(song_id)
        if not (lyrics or "").strip():
            raise SongValidationError("Lyrics cannot be empty")

        clean_title = sanitize_text(title or "").strip() or current.title
        edited = current.with_lyrics(lyrics or "", title=clean_title)
        updated = self.repository.update_song(
            song_id,
            title=edited.title,
            lyrics=edited.lyrics,
            word_count=edited.word_count,
            line_count=edited.line_count,
            date_modified=edited.date_modified or utc_now(),
        )
        if updated is None:
            raise SongNotFoundError(f"Song '{song_id}' was not found")
        return updated

    # Removal and export ----------------------------------------------------
    def delete_song(self, song_id: str) -> Song:
        song = self.get_song(song_id)
        self.repository.delete_song(song_id)
        if song.audio_path:
            self._remove_audio(song.audio_path)
        return song

    def delete_all(self) -> int:
        songs = self.repository.list_songs()
        removed = self.repository.delete_all()
        for song in songs:
            if song.audio_path:
                self._remove_audio(song.audio_path)
        return removed

    def _remove_audio(self, audio_path: str) -> None:
        path = Path(audio_path)
        try:
            if path.is_file():
                path.unlink()
        except OSError as exc:
            self._logger.warning(
                "Audio file could not be removed",
                context={"path": audio_path, "error": str(exc)},
            )

    def export_text(self, song_id: str) -> Tuple[str, str]:
        """Return ``(filename, text)`` for downloading a song's lyrics."""

        song = self.get_song(song_id)
        filename = _safe_filename(f"{base_name(song.filename or '') or song.title}.txt")
        return filename, f"{song.title}\n\n{song.lyrics}"


__all__ = [
    "ImportReport",
    "LibraryError",
    "LibraryFullError",
    "LibraryService",
    "MAX_SONGS",
    "SongNotFoundError",
    "SongValidationError",
    "UploadedFile",
]
