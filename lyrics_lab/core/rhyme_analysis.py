"""Perfect, near, sounds-like and internal rhyme analysis of lyrics."""

from __future__ import annotations

import re
import threading
from collections import Counter, OrderedDict
from dataclasses import dataclass, field, replace
from itertools import combinations
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from lyrics_lab.utils.observability import get_logger

from .phonemes import approximate_rhyme_part, normalize_phoneme, sequence_similarity, vowel_count
from .phonetic_map import PhoneticMap
from .scorer import Rime, SlantScore, collect_rimes, compare_rimes, score_rimes, syllable_count
from .vocabulary import FUNCTION_WORDS

WORD_PATTERN = re.compile(r"[A-Za-z]+(?:'[A-Za-z]+)*'?")

PERFECT = "perfect"
NEAR = "near"
SOUNDS_LIKE = "sounds_like"

NEAR_RHYME_THRESHOLD = 0.68
NEAR_RIME_FLOOR = 0.5
NEAR_CODA_FLOOR = 0.55
SOUNDS_LIKE_THRESHOLD = 0.8

# Phones a regular inflection appends to the whole base word (loved, cats, running).
INFLECTION_ENDINGS = frozenset(
    {
        ("D",),
        ("T",),
        ("Z",),
        ("S",),
        ("IH", "D"),
        ("IH", "Z"),
        ("IH", "NG"),
        ("AH", "D"),
        ("AH", "Z"),
    }
)


@dataclass(frozen=True)
class RhymeGroup:
    """Words linked by perfect or near rhymes, with the lines they appear on."""

    type: str
    key: str
    words: Tuple[str, ...]
    lines: Tuple[int, ...]

    @property
    def size(self) -> int:
        return len(self.words)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "key": self.key,
            "words": list(self.words),
            "lines": list(self.lines),
            "size": self.size,
        }


@dataclass
class RhymeStatistics:
    total_rhymable_words: int = 0
    perfect_rhymes: int = 0
    near_rhymes: int = 0
    sounds_like: int = 0
    internal_rhymes: int = 0
    rhyme_density: float = 0.0
    rhyme_groups: List[RhymeGroup] = field(default_factory=list)

    @classmethod
    def combine(cls, items: Iterable["RhymeStatistics"]) -> "RhymeStatistics":
        """Sum counts across ``items``; density is averaged when there are several."""

        collected = list(items)
        if not collected:
            return cls()

        combined = cls(
            total_rhymable_words=sum(item.total_rhymable_words for item in collected),
            perfect_rhymes=sum(item.perfect_rhymes for item in collected),
            near_rhymes=sum(item.near_rhymes for item in collected),
            sounds_like=sum(item.sounds_like for item in collected),
            internal_rhymes=sum(item.internal_rhymes for item in collected),
            rhyme_groups=[group for item in collected for group in item.rhyme_groups],
        )
        combined.rhyme_density = sum(item.rhyme_density for item in collected) / len(collected)
        return combined

    def as_dict(self) -> Dict[str, Any]:
        return {
            "total_rhymable_words": self.total_rhymable_words,
            "perfect_rhymes": self.perfect_rhymes,
            "near_rhymes": self.near_rhymes,
            "sounds_like": self.sounds_like,
            "internal_rhymes": self.internal_rhymes,
            "rhyme_density": round(self.rhyme_density, 4),
            "rhyme_groups": [group.as_dict() for group in self.rhyme_groups],
        }


@dataclass(frozen=True)
class _WordProfile:
    word: str
    pronunciations: Tuple[Tuple[str, ...], ...]
    normalized_pronunciations: frozenset
    rhyme_parts: frozenset
    stressed_vowels: frozenset
    rimes: Tuple[Rime, ...]
    syllables: int


def tokenize_lines(lyrics: str) -> List[List[str]]:
    """Lower-cased word tokens of every non-blank line."""

    text = (lyrics or "").replace("’", "'").replace("‘", "'")
    lines: List[List[str]] = []
    for raw_line in text.splitlines():
        if not raw_line.strip():
            continue
        lines.append([match.group(0).lower() for match in WORD_PATTERN.finditer(raw_line)])
    return lines


class _UnionFind:
    def __init__(self) -> None:
        self._parent: Dict[str, str] = {}

    def find(self, item: str) -> str:
        self._parent.setdefault(item, item)
        root = item
        while self._parent[root] != root:
            root = self._parent[root]
        while self._parent[item] != root:
            self._parent[item], item = root, self._parent[item]
        return root

    def union(self, a: str, b: str) -> None:
        root_a, root_b = self.find(a), self.find(b)
        if root_a != root_b:
            self._parent[max(root_a, root_b)] = min(root_a, root_b)

    def components(self) -> List[Set[str]]:
        grouped: Dict[str, Set[str]] = {}
        for item in list(self._parent):
            grouped.setdefault(self.find(item), set()).add(item)
        return [members for members in grouped.values() if len(members) > 1]


class RhymeAnalyzer:
    """Classifies rhyming word pairs in a lyric.

    Pronunciations, word profiles, slant scores and whole analyses are memoised
    in bounded LRU caches so re-analysing a library after a small edit stays
    cheap. Rime comparisons are shared across analyzers by ``compare_rimes``.
    """

    def __init__(self, phonetic_map: Optional[PhoneticMap] = None, *, max_cache_entries: int = 512):
        self.phonetic_map = phonetic_map or PhoneticMap()
        self._cache_lock = threading.RLock()
        self._max_cache_entries = max_cache_entries
        self._pronunciation_cache: OrderedDict[str, Tuple[Tuple[str, ...], ...]] = OrderedDict()
        self._profile_cache: OrderedDict[str, _WordProfile] = OrderedDict()
        self._similarity_cache: OrderedDict[Tuple[str, str], SlantScore] = OrderedDict()
        self._analysis_cache: OrderedDict[str, RhymeStatistics] = OrderedDict()
        self._logger = get_logger(__name__).bind(component="rhyme_analyzer")

    def _trim_cache(self, cache: OrderedDict) -> None:
        if self._max_cache_entries <= 0:
            cache.clear()
            return
        while len(cache) > self._max_cache_entries:
            cache.popitem(last=False)

    def clear_cached_results(self) -> None:
        """Drop memoised pronunciations, scores and analyses, e.g. after vocabulary changes."""

        self._logger.info("Clearing rhyme analyzer caches")
        with self._cache_lock:
            self._pronunciation_cache.clear()
            self._profile_cache.clear()
            self._similarity_cache.clear()
            self._analysis_cache.clear()

    def get_pronunciations(self, word: str) -> List[List[str]]:
        key = (word or "").strip().lower()
        if not key:
            return []
        with self._cache_lock:
            cached = self._pronunciation_cache.get(key)
            if cached is not None:
                self._pronunciation_cache.move_to_end(key)
                return [list(phones) for phones in cached]

        immutable = tuple(tuple(phones) for phones in self.phonetic_map.get_pronunciations(key))
        with self._cache_lock:
            self._pronunciation_cache[key] = immutable
            self._trim_cache(self._pronunciation_cache)
        return [list(phones) for phones in immutable]

    def _profile(self, word: str) -> _WordProfile:
        with self._cache_lock:
            cached = self._profile_cache.get(word)
            if cached is not None:
                self._profile_cache.move_to_end(word)
                return cached

        pronunciations = tuple(tuple(phones) for phones in self.get_pronunciations(word))
        parts = set(self.phonetic_map.get_rhyme_parts(word)) if pronunciations else set()
        if not parts:
            fallback = approximate_rhyme_part(word)
            if fallback:
                parts.add(fallback)
        phone_lists = [list(phones) for phones in pronunciations]
        profile = _WordProfile(
            word=word,
            pronunciations=pronunciations,
            normalized_pronunciations=frozenset(
                tuple(normalize_phoneme(phone) for phone in phones) for phones in pronunciations
            ),
            rhyme_parts=frozenset(parts),
            stressed_vowels=frozenset(part.split()[0] for part in parts),
            rimes=tuple(collect_rimes(word, phone_lists)),
            syllables=syllable_count(word, phone_lists),
        )

        with self._cache_lock:
            self._profile_cache[word] = profile
            self._trim_cache(self._profile_cache)
        return profile

    def is_rhymable(self, word: str) -> bool:
        if len(word) < 2 or word in FUNCTION_WORDS:
            return False
        return bool(self._profile(word).rhyme_parts)

    def get_slant_score(self, word1: str, word2: str) -> SlantScore:
        """Return a cached ``SlantScore`` for ``word1`` and ``word2``."""

        clean1 = (word1 or "").strip().lower()
        clean2 = (word2 or "").strip().lower()
        if not clean1 or not clean2:
            return SlantScore.empty()

        cache_key = (clean1, clean2) if clean1 <= clean2 else (clean2, clean1)
        with self._cache_lock:
            cached = self._similarity_cache.get(cache_key)
            if cached is not None:
                self._similarity_cache.move_to_end(cache_key)
                return cached

        first = self._profile(clean1)
        second = self._profile(clean2)
        slant = score_rimes(first.rimes, second.rimes, first.syllables, second.syllables)
        with self._cache_lock:
            self._similarity_cache[cache_key] = slant
            self._trim_cache(self._similarity_cache)
        return slant

    @staticmethod
    def _is_inflection(first: _WordProfile, second: _WordProfile) -> bool:
        for phones_a in first.normalized_pronunciations:
            for phones_b in second.normalized_pronunciations:
                shorter, longer = (phones_a, phones_b) if len(phones_a) < len(phones_b) else (phones_b, phones_a)
                if len(shorter) == len(longer) or longer[: len(shorter)] != shorter:
                    continue
                if longer[len(shorter) :] in INFLECTION_ENDINGS:
                    return True
        return False

    @staticmethod
    def _shared_vowel_coda(first: _WordProfile, second: _WordProfile) -> float:
        best = 0.0
        for rime_a, _, _ in first.rimes:
            for rime_b, _, _ in second.rimes:
                vowel = rime_a[0]
                if vowel == rime_b[0] and vowel in first.stressed_vowels and vowel in second.stressed_vowels:
                    best = max(best, compare_rimes(rime_a, rime_b)[2])
        return best

    def _sounds_alike(self, first: _WordProfile, second: _WordProfile) -> bool:
        if not first.pronunciations or not second.pronunciations:
            return False
        if first.normalized_pronunciations & second.normalized_pronunciations:
            return True
        for phones_a in first.pronunciations:
            for phones_b in second.pronunciations:
                if vowel_count(phones_a) != vowel_count(phones_b):
                    continue
                if sequence_similarity(phones_a, phones_b) >= SOUNDS_LIKE_THRESHOLD:
                    return True
        return False

    def _classify(self, first: _WordProfile, second: _WordProfile) -> Optional[str]:
        if first.word == second.word or not first.rhyme_parts or not second.rhyme_parts:
            return None

        homophones = bool(first.normalized_pronunciations & second.normalized_pronunciations)
        if not homophones:
            if first.rhyme_parts & second.rhyme_parts or self._is_inflection(first, second):
                return PERFECT

            if self._shared_vowel_coda(first, second) >= NEAR_CODA_FLOOR:
                return NEAR
            slant = score_rimes(first.rimes, second.rimes, first.syllables, second.syllables)
            if (
                slant.total >= NEAR_RHYME_THRESHOLD
                and slant.rime >= NEAR_RIME_FLOOR
                and slant.coda >= NEAR_CODA_FLOOR
            ):
                return NEAR

        if self._sounds_alike(first, second):
            return SOUNDS_LIKE
        return None

    def classify_pair(self, word1: str, word2: str) -> Optional[str]:
        """Return ``"perfect"``, ``"near"``, ``"sounds_like"`` or ``None``.

        Perfect pairs share a rime, or one word is the other plus a regular
        inflection (``love``/``loved``). Near pairs need similar codas, either
        after the same stressed vowel or inside a strong slant score.
        """

        clean1 = (word1 or "").strip().lower()
        clean2 = (word2 or "").strip().lower()
        if not clean1 or not clean2 or clean1 == clean2:
            return None
        return self._classify(self._profile(clean1), self._profile(clean2))

    def _group_key(self, members: Set[str], group_type: str) -> str:
        counts: Counter = Counter()
        for word in members:
            profile = self._profile(word)
            keys = profile.rhyme_parts if group_type == PERFECT else profile.stressed_vowels
            counts.update(keys)
        if not counts:
            return ""
        return sorted(counts.items(), key=lambda item: (-item[1], item[0]))[0][0]

    def analyze(self, lyrics: str) -> RhymeStatistics:
        """Rhyme statistics for ``lyrics``; repeated texts are served from cache."""

        key = lyrics or ""
        with self._cache_lock:
            cached = self._analysis_cache.get(key)
            if cached is not None:
                self._analysis_cache.move_to_end(key)
                return replace(cached, rhyme_groups=list(cached.rhyme_groups))

        stats = self._analyze(key)
        with self._cache_lock:
            self._analysis_cache[key] = stats
            self._trim_cache(self._analysis_cache)
        return replace(stats, rhyme_groups=list(stats.rhyme_groups))

    def _analyze(self, lyrics: str) -> RhymeStatistics:
        lines = tokenize_lines(lyrics)
        word_lines: Dict[str, Set[int]] = {}
        for line_number, words in enumerate(lines, start=1):
            for word in words:
                word_lines.setdefault(word, set()).add(line_number)

        rhymable = sorted(word for word in word_lines if self.is_rhymable(word))
        if not rhymable:
            return RhymeStatistics()

        stats = RhymeStatistics(total_rhymable_words=len(rhymable))
        perfect_sets = _UnionFind()
        near_pairs: List[Tuple[str, str]] = []
        rhyming_words: Set[str] = set()

        profiles = {word: self._profile(word) for word in rhymable}
        for word_a, word_b in combinations(rhymable, 2):
            category = self._classify(profiles[word_a], profiles[word_b])
            if category is None:
                continue
            if category == SOUNDS_LIKE:
                stats.sounds_like += 1
                continue

            if category == PERFECT:
                stats.perfect_rhymes += 1
                perfect_sets.union(word_a, word_b)
            else:
                stats.near_rhymes += 1
                near_pairs.append((word_a, word_b))
            rhyming_words.update((word_a, word_b))
            if word_lines[word_a] & word_lines[word_b]:
                stats.internal_rhymes += 1

        near_sets = _UnionFind()
        for word_a, word_b in near_pairs:
            if perfect_sets.find(word_a) != perfect_sets.find(word_b):
                near_sets.union(word_a, word_b)

        groups: List[RhymeGroup] = []
        for group_type, sets in ((PERFECT, perfect_sets), (NEAR, near_sets)):
            for members in sets.components():
                lines_seen = sorted({line for word in members for line in word_lines[word]})
                groups.append(
                    RhymeGroup(
                        type=group_type,
                        key=self._group_key(members, group_type),
                        words=tuple(sorted(members)),
                        lines=tuple(lines_seen),
                    )
                )
        groups.sort(key=lambda group: (-group.size, group.key, group.words))

        stats.rhyme_groups = groups
        stats.rhyme_density = len(rhyming_words) / len(rhymable)
        self._logger.debug(
            "Rhyme analysis complete",
            context={
                "rhymable": stats.total_rhymable_words,
                "perfect": stats.perfect_rhymes,
                "near": stats.near_rhymes,
                "groups": len(groups),
            },
        )
        return stats


def analyze_rhyme_statistics(lyrics: str, phonetic_map: Optional[PhoneticMap] = None) -> RhymeStatistics:
    """Analyse ``lyrics`` with a fresh :class:`RhymeAnalyzer` over ``phonetic_map``."""

    return RhymeAnalyzer(phonetic_map).analyze(lyrics)


__all__ = [
    "PERFECT",
    "NEAR",
    "SOUNDS_LIKE",
    "RhymeAnalyzer",
    "RhymeGroup",
    "RhymeStatistics",
    "analyze_rhyme_statistics",
    "tokenize_lines",
]
