"""Song records and the text clean-up applied to anything a user uploads."""

from __future__ import annotations

import re
import uuid
from dataclasses import asdict, dataclass, replace
from datetime import datetime, timezone
from typing import Any, Dict, Optional

_TAG_PATTERN = re.compile(r"<[^>]*>")
_SCRIPT_PATTERN = re.compile(r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_CONTROL_PATTERN = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_EXTENSION_PATTERN = re.compile(r"\.[^/.]+$")
_TEXT_EXTENSIONS = (".txt", ".lyrics")

UNTITLED_SONG = "Untitled Song"


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def sanitize_text(text: Optional[str]) -> str:
    """Strip markup, control characters and normalise newlines to ``\\n``."""

    if not text:
        return ""
    cleaned = text.replace("\r\n", "\n").replace("\r", "\n")
    cleaned = _SCRIPT_PATTERN.sub("", cleaned)
    cleaned = _TAG_PATTERN.sub("", cleaned)
    return _CONTROL_PATTERN.sub("", cleaned)


def base_name(filename: Optional[str]) -> str:
    """``filename`` without its last extension."""

    return _EXTENSION_PATTERN.sub("", filename or "")


def title_from_filename(filename: Optional[str]) -> str:
    name = sanitize_text(filename).strip()
    lowered = name.lower()
    for extension in _TEXT_EXTENSIONS:
        if lowered.endswith(extension):
            name = name[: -len(extension)]
            break
    title = " ".join(re.sub(r"[-_]", " ", name).split())
    return title or UNTITLED_SONG


def count_words(text: str) -> int:
    return len((text or "").split())


def count_lines(text: str) -> int:
    return sum(1 for line in (text or "").splitlines() if line.strip())


@dataclass
class Song:
    id: str
    title: str
    lyrics: str
    filename: Optional[str] = None
    word_count: int = 0
    line_count: int = 0
    date_added: str = ""
    date_modified: Optional[str] = None
    audio_filename: Optional[str] = None
    audio_path: Optional[str] = None
    is_example: bool = False
    from_notepad: bool = False

    @property
    def has_audio(self) -> bool:
        return bool(self.audio_path)

    def with_lyrics(self, lyrics: str, *, title: Optional[str] = None) -> "Song":
        """Copy with new lyrics, refreshed counts and a modification stamp."""

        cleaned = sanitize_text(lyrics)
        return replace(
            self,
            title=title if title is not None else self.title,
            lyrics=cleaned,
            word_count=count_words(cleaned),
            line_count=count_lines(cleaned),
            date_modified=utc_now(),
        )

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def build_song(
    title: Optional[str],
    lyrics: str,
    filename: Optional[str] = None,
    *,
    song_id: Optional[str] = None,
    is_example: bool = False,
    from_notepad: bool = False,
) -> Song:
    cleaned = sanitize_text(lyrics)
    clean_title = sanitize_text(title).strip() if title else ""
    if not clean_title:
        clean_title = title_from_filename(filename)
    return Song(
        id=song_id or uuid.uuid4().hex,
        title=clean_title,
        lyrics=cleaned,
        filename=sanitize_text(filename) if filename else f"{clean_title}.txt",
        word_count=count_words(cleaned),
        line_count=count_lines(cleaned),
        date_added=utc_now(),
        is_example=is_example,
        from_notepad=from_notepad,
    )


__all__ = [
    "Song",
    "UNTITLED_SONG",
    "base_name",
    "build_song",
    "count_lines",
    "count_words",
    "sanitize_text",
    "title_from_filename",
    "utc_now",
]
