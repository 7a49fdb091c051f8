"""Line-level lyric search, match highlighting and search history."""

from __future__ import annotations

import re
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .song import Song

Span = Tuple[int, int]


@dataclass(frozen=True)
class SearchQuery:
    """Parsed query. Exact queries match a whole-word phrase, others every term."""

    raw: str
    terms: Tuple[str, ...]
    exact: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.terms

    def patterns(self) -> List[re.Pattern]:
        if self.exact:
            phrase = r"\s+".join(re.escape(term) for term in self.terms)
            return [re.compile(rf"(?<!\w){phrase}(?!\w)", re.IGNORECASE)]
        return [re.compile(re.escape(term), re.IGNORECASE) for term in self.terms]


@dataclass(frozen=True)
class LineMatch:
    line_number: int
    text: str
    spans: Tuple[Span, ...]

    def as_dict(self) -> Dict[str, Any]:
        return {
            "line_number": self.line_number,
            "text": self.text,
            "spans": [list(span) for span in self.spans],
        }


@dataclass
class SongSearchResult:
    song_id: str
    title: str
    matches: List[LineMatch] = field(default_factory=list)

    @property
    def occurrences(self) -> int:
        return sum(len(match.spans) for match in self.matches)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "song_id": self.song_id,
            "title": self.title,
            "occurrences": self.occurrences,
            "matches": [match.as_dict() for match in self.matches],
        }


def parse_query(text: Optional[str]) -> SearchQuery:
    raw = (text or "").strip()
    if len(raw) >= 2 and raw.startswith('"') and raw.endswith('"'):
        return SearchQuery(raw=raw, terms=tuple(raw[1:-1].split()), exact=True)
    return SearchQuery(raw=raw, terms=tuple(raw.replace('"', " ").split()))


def _merge_spans(spans: List[Span]) -> Tuple[Span, ...]:
    merged: List[Span] = []
    for start, end in sorted(spans):
        if merged and start <= merged[-1][1]:
            merged[-1] = (merged[-1][0], max(merged[-1][1], end))
        else:
            merged.append((start, end))
    return tuple(merged)


def match_line(line: str, query: SearchQuery) -> Optional[Tuple[Span, ...]]:
    """Spans matched in ``line``, or ``None`` when the line does not qualify."""

    spans: List[Span] = []
    for pattern in query.patterns():
        found = [match.span() for match in pattern.finditer(line)]
        if not found:
            return None
        spans.extend(found)
    return _merge_spans(spans)


def search_songs(songs: Sequence[Song], query: SearchQuery | str) -> List[SongSearchResult]:
    parsed = parse_query(query) if isinstance(query, str) else query
    if parsed.is_empty:
        return []

    results: List[SongSearchResult] = []
    for song in songs:
        result = SongSearchResult(song_id=str(song.id), title=song.title)
        for line_number, line in enumerate((song.lyrics or "").splitlines(), start=1):
            spans = match_line(line, parsed)
            if spans:
                result.matches.append(LineMatch(line_number, line, spans))
        if result.matches:
            results.append(result)

    results.sort(key=lambda item: (-item.occurrences, item.title.lower()))
    return results


def highlight(text: str, query: SearchQuery | str, marker: str = "**") -> str:
    """Wrap every match of ``query`` in ``text`` with ``marker``."""

    parsed = parse_query(query) if isinstance(query, str) else query
    if parsed.is_empty or not text:
        return text or ""

    spans: List[Span] = []
    for pattern in parsed.patterns():
        spans.extend(match.span() for match in pattern.finditer(text))

    pieces: List[str] = []
    cursor = 0
    for start, end in _merge_spans(spans):
        pieces.append(text[cursor:start])
        pieces.append(f"{marker}{text[start:end]}{marker}")
        cursor = end
    pieces.append(text[cursor:])
    return "".join(pieces)


class SearchHistory:
    """Most recent distinct queries, newest first."""

    def __init__(self, max_entries: int = 10) -> None:
        self.max_entries = max(1, int(max_entries))
        self._entries: List[str] = []
        self._lock = threading.Lock()

    def add(self, query: Optional[str]) -> bool:
        """Record ``query``; returns ``False`` when it was blank or already present."""

        text = (query or "").strip()
        with self._lock:
            if not text or text in self._entries:
                return False
            self._entries.insert(0, text)
            del self._entries[self.max_entries :]
            return True

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def entries(self) -> List[str]:
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


__all__ = [
    "LineMatch",
    "SearchHistory",
    "SearchQuery",
    "SongSearchResult",
    "highlight",
    "match_line",
    "parse_query",
    "search_songs",
]
