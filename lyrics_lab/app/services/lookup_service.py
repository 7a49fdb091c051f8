"""Dictionary, synonym and rhyme lookups against public word APIs."""

from __future__ import annotations

import threading
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import requests

from lyrics_lab.core.phonetic_map import PhoneticMap

from ...utils.observability import add_span_attributes, create_counter, get_logger, start_span

DICTIONARY_API_URL = "https://api.dictionaryapi.dev/api/v2/entries/en"
DATAMUSE_API_URL = "https://api.datamuse.com/words"
DEFAULT_TIMEOUT = 10.0

ANTONYM_PREFIXES: Tuple[str, ...] = ("un", "non", "dis", "in", "im", "ir", "anti")
MIN_DIRECT_ANTONYMS = 5
MAX_ANTONYMS = 15


class LookupServiceError(Exception):
    pass


@dataclass(frozen=True)
class Definition:
    word: str
    part_of_speech: str
    definition: str
    phonetic: Optional[str] = None
    example: Optional[str] = None


@dataclass(frozen=True)
class RelatedWord:
    word: str
    score: Optional[int] = None
    num_syllables: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "RelatedWord":
        return cls(
            word=str(payload.get("word", "")),
            score=payload.get("score"),
            num_syllables=payload.get("numSyllables"),
        )


@dataclass
class SynonymResult:
    word: str
    synonyms: List[RelatedWord] = field(default_factory=list)
    antonyms: List[RelatedWord] = field(default_factory=list)


@dataclass
class RhymeLookupResult:
    word: str
    perfect: List[RelatedWord] = field(default_factory=list)
    near: List[RelatedWord] = field(default_factory=list)
    sounds_like: List[RelatedWord] = field(default_factory=list)
    offline: bool = False


class _JsonClient:
    def __init__(self, session: Optional[requests.Session] = None, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.session = session or requests.Session()
        self.timeout = timeout

    def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Tuple[int, Any]:
        try:
            resp = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise LookupServiceError(f"Request to {url} failed: {exc}") from exc

        if resp.status_code != 200:
            return resp.status_code, None
        try:
            return resp.status_code, resp.json()
        except ValueError as exc:
            raise LookupServiceError(f"Invalid JSON from {url}") from exc


class DictionaryApiClient(_JsonClient):
    """Client for dictionaryapi.dev."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
        base_url: str = DICTIONARY_API_URL,
    ) -> None:
        super().__init__(session, timeout)
        self.base_url = base_url.rstrip("/")

    def fetch_entries(self, word: str) -> List[Dict[str, Any]]:
        """Raw entries for ``word``; an unknown word gives an empty list."""

        status, payload = self._get_json(f"{self.base_url}/{quote(word.lower())}")
        if status == 404:
            return []
        if status != 200:
            raise LookupServiceError(f"Dictionary lookup failed ({status})")
        return payload if isinstance(payload, list) else []


class DataMuseClient(_JsonClient):
    """Client for the DataMuse ``/words`` endpoint."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
        base_url: str = DATAMUSE_API_URL,
    ) -> None:
        super().__init__(session, timeout)
        self.base_url = base_url

    def words(self, relation: str, word: str, max_results: int) -> List[RelatedWord]:
        status, payload = self._get_json(
            self.base_url, params={relation: word.lower(), "max": int(max_results)}
        )
        if status != 200:
            raise LookupServiceError(f"DataMuse {relation} lookup failed ({status})")
        if not isinstance(payload, list):
            return []
        return [RelatedWord.from_payload(item) for item in payload if isinstance(item, dict) and item.get("word")]


def parse_definitions(entries: List[Dict[str, Any]]) -> List[Definition]:
    definitions: List[Definition] = []
    for entry in entries:
        word = str(entry.get("word", ""))
        phonetic = entry.get("phonetic")
        for meaning in entry.get("meanings") or []:
            part_of_speech = str(meaning.get("partOfSpeech", ""))
            for item in meaning.get("definitions") or []:
                text = item.get("definition")
                if not text:
                    continue
                definitions.append(
                    Definition(
                        word=word,
                        part_of_speech=part_of_speech,
                        definition=str(text),
                        phonetic=phonetic,
                        example=item.get("example"),
                    )
                )
    return definitions


def prefixed_antonyms(word: str, related: List[RelatedWord]) -> List[RelatedWord]:
    """Related words that negate ``word`` with a prefix such as ``un`` or ``dis``, or vice versa."""

    target = word.lower()
    matches: List[RelatedWord] = []
    for candidate in related:
        other = candidate.word.lower()
        if any(other.startswith(prefix + target) or target.startswith(prefix + other) for prefix in ANTONYM_PREFIXES):
            matches.append(candidate)
    return matches


def _dedupe(words: List[RelatedWord]) -> List[RelatedWord]:
    seen = set()
    unique: List[RelatedWord] = []
    for item in words:
        if item.word in seen:
            continue
        seen.add(item.word)
        unique.append(item)
    return unique


class WordLookupService:
    """Definitions, synonyms and rhymes with caching and offline rhyme fallback."""

    def __init__(
        self,
        *,
        dictionary_client: Optional[DictionaryApiClient] = None,
        datamuse_client: Optional[DataMuseClient] = None,
        phonetic_map: Optional[PhoneticMap] = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_cache_entries: int = 256,
    ) -> None:
        self.dictionary_client = dictionary_client or DictionaryApiClient(timeout=timeout)
        self.datamuse_client = datamuse_client or DataMuseClient(timeout=timeout)
        self.phonetic_map = phonetic_map
        self._cache: OrderedDict[Tuple[str, str], Any] = OrderedDict()
        self._cache_lock = threading.RLock()
        self._max_cache_entries = max_cache_entries
        self._logger = get_logger(__name__).bind(component="lookup_service")
        self._metric_lookups = create_counter(
            "lyrics_lab_lookups_total",
            "Word lookups requested.",
            ["kind"],
        )
        self._metric_failures = create_counter(
            "lyrics_lab_lookup_failures_total",
            "Word lookups that failed upstream.",
            ["kind"],
        )

    def set_phonetic_map(self, phonetic_map: Optional[PhoneticMap]) -> None:
        self.phonetic_map = phonetic_map

    def _cache_get(self, key: Tuple[str, str]) -> Any:
        with self._cache_lock:
            cached = self._cache.get(key)
            if cached is not None:
                self._cache.move_to_end(key)
            return cached

    def _cache_put(self, key: Tuple[str, str], value: Any) -> None:
        with self._cache_lock:
            self._cache[key] = value
            while len(self._cache) > self._max_cache_entries:
                self._cache.popitem(last=False)

    def clear_cache(self) -> None:
        with self._cache_lock:
            self._cache.clear()

    def _fetch_related(self, kind: str, relation: str, word: str, max_results: int) -> Optional[List[RelatedWord]]:
        try:
            return self.datamuse_client.words(relation, word, max_results)
        except LookupServiceError as exc:
            self._metric_failures.labels(kind=kind).inc()
            self._logger.warning(
                "DataMuse lookup failed",
                context={"relation": relation, "word": word, "error": str(exc)},
            )
            return None

    def define(self, word: str) -> List[Definition]:
        term = (word or "").strip().lower()
        if not term:
            return []
        cached = self._cache_get(("define", term))
        if cached is not None:
            return list(cached)

        self._metric_lookups.labels(kind="define").inc()
        with start_span("lyrics_lab.lookup.define", {"word": term}):
            try:
                definitions = parse_definitions(self.dictionary_client.fetch_entries(term))
            except LookupServiceError as exc:
                self._metric_failures.labels(kind="define").inc()
                self._logger.warning(
                    "Dictionary lookup failed",
                    context={"word": term, "error": str(exc)},
                )
                return []

        self._cache_put(("define", term), tuple(definitions))
        return definitions

    def synonyms(self, word: str) -> SynonymResult:
        term = (word or "").strip().lower()
        if not term:
            return SynonymResult(word="")
        cached = self._cache_get(("synonyms", term))
        if cached is not None:
            return cached

        self._metric_lookups.labels(kind="synonyms").inc()
        with start_span("lyrics_lab.lookup.synonyms", {"word": term}):
            synonyms = self._fetch_related("synonyms", "rel_syn", term, 20)
            antonyms = self._fetch_related("synonyms", "rel_ant", term, 20)
            related = self._fetch_related("synonyms", "ml", term, 30)

        antonym_list = antonyms or []
        if len(antonym_list) < MIN_DIRECT_ANTONYMS:
            antonym_list = _dedupe(antonym_list + prefixed_antonyms(term, related or []))[:MAX_ANTONYMS]

        result = SynonymResult(word=term, synonyms=synonyms or [], antonyms=antonym_list)
        if synonyms is not None and antonyms is not None and related is not None:
            self._cache_put(("synonyms", term), result)
        return result

    def rhymes(self, word: str) -> RhymeLookupResult:
        term = (word or "").strip().lower()
        if not term:
            return RhymeLookupResult(word="")
        cached = self._cache_get(("rhymes", term))
        if cached is not None:
            return cached

        self._metric_lookups.labels(kind="rhymes").inc()
        with start_span("lyrics_lab.lookup.rhymes", {"word": term}) as span:
            perfect = self._fetch_related("rhymes", "rel_rhy", term, 30)
            near = self._fetch_related("rhymes", "rel_nry", term, 20)
            sounds_like = self._fetch_related("rhymes", "sl", term, 20)

            offline = False
            if perfect is None and self.phonetic_map is not None:
                offline = True
                perfect = [RelatedWord(word=item) for item in self.phonetic_map.get_rhyming_words(term, limit=30)]
                add_span_attributes(span, {"offline": True})
                self._logger.info("Using local rhymes", context={"word": term, "count": len(perfect)})

        result = RhymeLookupResult(
            word=term,
            perfect=perfect or [],
            near=near or [],
            sounds_like=sounds_like or [],
            offline=offline,
        )
        if not offline and None not in (perfect, near, sounds_like):
            self._cache_put(("rhymes", term), result)
        return result


__all__ = [
    "DataMuseClient",
    "Definition",
    "DictionaryApiClient",
    "LookupServiceError",
    "RelatedWord",
    "RhymeLookupResult",
    "SynonymResult",
    "WordLookupService",
    "parse_definitions",
    "prefixed_antonyms",
]
