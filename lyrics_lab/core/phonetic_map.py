"""Word to pronunciation map backed by the CMU pronouncing dictionary."""

from __future__ import annotations

import json
import re
import threading
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Set, Tuple, Union

import pronouncing

from lyrics_lab.utils.observability import get_logger

from .phonemes import rhyme_part, vowel_count
from .vocabulary import SONG_VOCABULARY

_WORD_VARIANT_PATTERN = re.compile(r"\(\d+\)$")
_EDGE_PUNCTUATION = re.compile(r"^[^a-z']+|[^a-z']+$")

PhoneEntry = Union[str, Sequence[str]]

logger = get_logger(__name__).bind(component="phonetic_map")


def _strip_variant(word: str) -> str:
    return _WORD_VARIANT_PATTERN.sub("", word).lower()


def normalize_word(word: str) -> str:
    """Lower-case ``word``, straighten curly apostrophes and trim punctuation."""

    text = (word or "").strip().lower().replace("’", "'").replace("‘", "'")
    return _EDGE_PUNCTUATION.sub("", text)


def lookup_candidates(word: str) -> List[str]:
    """Spellings tried in order when looking ``word`` up."""

    normalized = normalize_word(word)
    if not normalized:
        return []

    candidates = [normalized]
    if normalized.endswith("in'") and len(normalized) > 3:
        candidates.append(normalized[:-1] + "g")
    stripped = normalized.strip("'")
    if stripped and stripped != normalized:
        candidates.append(stripped)
    collapsed = normalized.replace("'", "")
    if collapsed:
        candidates.append(collapsed)

    ordered: List[str] = []
    for candidate in candidates:
        if candidate not in ordered:
            ordered.append(candidate)
    return ordered


def _coerce_pronunciations(value: PhoneEntry | Sequence[PhoneEntry]) -> List[Tuple[str, ...]]:
    if isinstance(value, str):
        phones = tuple(value.upper().split())
        return [phones] if phones else []

    entries = list(value or [])
    if entries and all(isinstance(item, str) and " " not in item.strip() for item in entries):
        phones = tuple(item.strip().upper() for item in entries if item.strip())
        return [phones] if phones else []

    result: List[Tuple[str, ...]] = []
    for item in entries:
        result.extend(_coerce_pronunciations(item))
    return result


class PhoneticMap:
    """Lazy word to ARPAbet pronunciation map.

    The dictionary is read on first lookup: from ``dict_path`` when given
    (cmudict format) or from the copy bundled with :mod:`pronouncing`.
    Vocabulary entries are layered on top and win over dictionary entries.
    """

    def __init__(
        self,
        dict_path: Optional[Path | str] = None,
        vocabulary: Optional[Mapping[str, PhoneEntry | Sequence[PhoneEntry]]] = None,
        *,
        include_song_vocabulary: bool = True,
    ) -> None:
        self.dict_path: Optional[Path] = Path(dict_path) if dict_path is not None else None
        self._lock = threading.RLock()
        self._dictionary: Dict[str, Tuple[Tuple[str, ...], ...]] = {}
        self._overrides: Dict[str, Tuple[Tuple[str, ...], ...]] = {}
        self._rhyme_index: Optional[Dict[str, Set[str]]] = None
        self._loaded = False

        if include_song_vocabulary:
            self.add_entries(SONG_VOCABULARY)
        if vocabulary:
            self.add_entries(vocabulary)

    @property
    def loaded(self) -> bool:
        return self._loaded

    def _read_dictionary_file(self, path: Path) -> Dict[str, List[Tuple[str, ...]]]:
        entries: Dict[str, List[Tuple[str, ...]]] = {}
        with path.open("r", encoding="utf-8", errors="replace") as handle:
            for line in handle:
                entry = line.strip()
                if not entry or entry.startswith(";;;"):
                    continue

                parts = entry.split()
                if len(parts) < 2:
                    continue

                raw_word, *phones = parts
                word = _strip_variant(raw_word)
                if word:
                    entries.setdefault(word, []).append(tuple(phones))
        return entries

    def _read_bundled_dictionary(self) -> Dict[str, List[Tuple[str, ...]]]:
        pronouncing.init_cmu()
        entries: Dict[str, List[Tuple[str, ...]]] = {}
        for word, phones in pronouncing.pronunciations:
            entries.setdefault(word.lower(), []).append(tuple(phones.split()))
        return entries

    def _ensure_loaded(self) -> None:
        if self._loaded:
            return

        with self._lock:
            if self._loaded:
                return

            if self.dict_path is not None:
                if not self.dict_path.exists():
                    logger.warning(
                        "Pronouncing dictionary not found",
                        context={"path": str(self.dict_path)},
                    )
                    return
                try:
                    entries = self._read_dictionary_file(self.dict_path)
                except OSError as exc:
                    logger.warning(
                        "Pronouncing dictionary could not be read",
                        context={"path": str(self.dict_path), "error": str(exc)},
                    )
                    return
            else:
                entries = self._read_bundled_dictionary()

            self._dictionary = {word: tuple(phones) for word, phones in entries.items()}
            self._rhyme_index = None
            self._loaded = True
            logger.debug("Pronouncing dictionary loaded", context={"words": len(entries)})

    def add_entries(self, mapping: Mapping[str, PhoneEntry | Sequence[PhoneEntry]]) -> int:
        """Layer ``mapping`` over the dictionary and return how many words were added."""

        added = 0
        with self._lock:
            for raw_word, value in (mapping or {}).items():
                word = normalize_word(str(raw_word))
                pronunciations = _coerce_pronunciations(value)
                if not word or not pronunciations:
                    continue
                self._overrides[word] = tuple(pronunciations)
                added += 1
            if added:
                self._rhyme_index = None
        return added

    def load_vocabulary_file(self, path: Path | str) -> int:
        """Read a JSON object of ``word -> phones`` and add it to the map."""

        with Path(path).open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
        if not isinstance(payload, dict):
            raise ValueError("Vocabulary file must contain a JSON object of word to phones")
        return self.add_entries(payload)

    def _lookup(self, word: str) -> Tuple[Tuple[str, ...], ...]:
        self._ensure_loaded()
        for candidate in lookup_candidates(word):
            stored = self._overrides.get(candidate) or self._dictionary.get(candidate)
            if stored:
                return stored
        return ()

    def get_pronunciations(self, word: str) -> List[List[str]]:
        return [list(entry) for entry in self._lookup(word)]

    def get_rhyme_parts(self, word: str) -> Set[str]:
        parts: Set[str] = set()
        for phones in self._lookup(word):
            part = rhyme_part(phones)
            if part:
                parts.add(part)
        return parts

    def syllable_count(self, word: str) -> Optional[int]:
        """Vowel count of the first pronunciation, ``None`` for unknown words."""

        entries = self._lookup(word)
        if not entries:
            return None
        return vowel_count(entries[0]) or None

    def _build_rhyme_index(self) -> Dict[str, Set[str]]:
        index: Dict[str, Set[str]] = {}
        merged = dict(self._dictionary)
        merged.update(self._overrides)
        for entry_word, pronunciations in merged.items():
            for phones in pronunciations:
                part = rhyme_part(phones)
                if part:
                    index.setdefault(part, set()).add(entry_word)
        return index

    def get_rhyming_words(self, word: str, *, limit: Optional[int] = None) -> List[str]:
        parts = self.get_rhyme_parts(word)
        if not parts:
            return []

        with self._lock:
            if self._rhyme_index is None:
                self._rhyme_index = self._build_rhyme_index()
            index = self._rhyme_index

        candidates: Set[str] = set()
        for part in parts:
            candidates.update(index.get(part, ()))
        candidates.difference_update(lookup_candidates(word))

        ordered = sorted(candidates)
        if limit is None or limit < 0:
            return ordered
        return ordered[:limit]

    def __contains__(self, word: object) -> bool:
        if not isinstance(word, str):
            return False
        return bool(self._lookup(word))


__all__ = ["PhoneticMap", "PhoneEntry", "normalize_word", "lookup_candidates"]
