from __future__ import annotations

from dataclasses import asdict, dataclass
from functools import lru_cache
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from lyrics_lab.utils.syllables import estimate_syllable_count

from .phonemes import (
    VOWEL_PHONEMES,
    approximate_spelling_coda,
    approximate_spelling_vowel,
    coda_similarity,
    feature_similarity,
    normalize_phoneme,
    rhyme_tail,
    rhyme_tail_index,
    sequence_similarity,
    stress_marker,
)


class PronunciationSource(Protocol):
    def get_pronunciations(self, word: str) -> List[List[str]]:
        ...


_STRESS_PENALTY_STRONG = 0.06
_STRESS_PENALTY_LIGHT = 0.02
_SYLLABLE_PENALTY_STEP = 0.04
_SPELLING_DAMPING = 0.85

_TIER_THRESHOLDS: Tuple[Tuple[str, float], ...] = (
    ("perfect", 0.97),
    ("very_close", 0.82),
    ("strong", 0.68),
    ("loose", 0.55),
)

# (normalized rime, stress marker, from spelling)
Rime = Tuple[Tuple[str, ...], str, bool]


@dataclass(frozen=True)
class SlantScore:
    """Phonetic similarity breakdown of two words' rimes."""

    total: float
    rime: float
    vowel: float
    coda: float
    stress_penalty: float
    syllable_penalty: float
    tier: str
    source_rime: Tuple[str, ...] = ()
    target_rime: Tuple[str, ...] = ()
    used_spelling_backoff: bool = False

    @classmethod
    def empty(cls) -> "SlantScore":
        return cls(
            total=0.0,
            rime=0.0,
            vowel=0.0,
            coda=0.0,
            stress_penalty=0.0,
            syllable_penalty=0.0,
            tier="weak",
        )

    @property
    def penalties(self) -> float:
        return self.stress_penalty + self.syllable_penalty

    def as_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["source_rime"] = list(self.source_rime)
        payload["target_rime"] = list(self.target_rime)
        return payload


def _rime_entry(tail: Sequence[str]) -> Optional[Rime]:
    normalized = tuple(symbol for symbol in (normalize_phoneme(item) for item in tail) if symbol)
    if not normalized:
        return None
    return normalized, stress_marker(tail[0]), False


def collect_rimes(word: str, pronunciations: List[List[str]]) -> List[Rime]:
    """Rimes of every pronunciation, plus each rime extended back one vowel.

    Words without a pronunciation get a single rime guessed from the spelling.
    """

    results: List[Rime] = []
    seen: set[Tuple[str, ...]] = set()

    for phones in pronunciations:
        tail = rhyme_tail(phones)
        entry = _rime_entry(tail) if tail else None
        if entry is None:
            continue
        if entry[0] not in seen:
            seen.add(entry[0])
            results.append(entry)

        start_index = rhyme_tail_index(phones)
        if not start_index:
            continue
        for idx in range(start_index - 1, -1, -1):
            if normalize_phoneme(phones[idx]) in VOWEL_PHONEMES:
                extended = _rime_entry(phones[idx:])
                if extended is not None and extended[0] not in seen:
                    seen.add(extended[0])
                    results.append(extended)
                break

    if results:
        return results

    vowel = approximate_spelling_vowel(word)
    if not vowel:
        return []
    coda = tuple(approximate_spelling_coda(word))
    return [((vowel, *coda), "", True)]


def syllable_count(word: str, pronunciations: List[List[str]]) -> int:
    if pronunciations:
        count = sum(
            1 for phone in pronunciations[0] if normalize_phoneme(phone) in VOWEL_PHONEMES
        )
        if count:
            return count
    return estimate_syllable_count(word)


def _syllable_penalty(diff: int) -> float:
    if diff <= 0:
        return 0.0
    if diff == 1:
        return _SYLLABLE_PENALTY_STEP
    return _SYLLABLE_PENALTY_STEP * (1 + min(diff - 1, 2))


def _stress_penalty(marker_a: str, marker_b: str) -> float:
    if not marker_a or not marker_b:
        return 0.0
    strong_a = marker_a in {"1", "2"}
    strong_b = marker_b in {"1", "2"}
    if strong_a != strong_b:
        return _STRESS_PENALTY_STRONG
    if marker_a != marker_b:
        return _STRESS_PENALTY_LIGHT
    return 0.0


def resolve_tier(total: float) -> str:
    for tier, threshold in _TIER_THRESHOLDS:
        if total >= threshold:
            return tier
    return "weak"


@lru_cache(maxsize=16384)
def compare_rimes(rime_a: Tuple[str, ...], rime_b: Tuple[str, ...]) -> Tuple[float, float, float]:
    """Return ``(rime, vowel, coda)`` similarity of two normalised rimes.

    Rimes repeat heavily across a lyric, so results are memoised by rime pair.
    """

    rime = sequence_similarity(rime_a, rime_b, emphasize_first=True)
    vowels_a = [symbol for symbol in rime_a if symbol in VOWEL_PHONEMES]
    vowels_b = [symbol for symbol in rime_b if symbol in VOWEL_PHONEMES]
    vowel = 0.0
    if vowels_a and vowels_b:
        vowel = max(feature_similarity(v1, v2) for v1 in vowels_a for v2 in vowels_b)
    coda = coda_similarity(rime_a[1:], rime_b[1:])
    return rime, vowel, coda


def score_rimes(
    rimes_a: Sequence[Rime],
    rimes_b: Sequence[Rime],
    syllables_a: int,
    syllables_b: int,
) -> SlantScore:
    """Best slant score over every combination of ``rimes_a`` and ``rimes_b``."""

    if not rimes_a or not rimes_b:
        return SlantScore(
            total=0.0,
            rime=0.0,
            vowel=0.0,
            coda=0.0,
            stress_penalty=0.0,
            syllable_penalty=0.0,
            tier="weak",
            used_spelling_backoff=True,
        )

    syllable_penalty = _syllable_penalty(abs(syllables_a - syllables_b))

    best: Optional[Tuple[float, Tuple[float, float, float], float, Rime, Rime, bool]] = None
    for entry_a in rimes_a:
        for entry_b in rimes_b:
            normalized_a, stress_a, spelling_a = entry_a
            normalized_b, stress_b, spelling_b = entry_b
            parts = compare_rimes(normalized_a, normalized_b)
            rime_similarity, vowel_similarity, coda_score = parts

            base_total = (0.6 * rime_similarity) + (0.2 * vowel_similarity) + (0.2 * coda_score)
            used_spelling = spelling_a or spelling_b
            if used_spelling:
                base_total *= _SPELLING_DAMPING

            stress_penalty = _stress_penalty(stress_a, stress_b)
            total = max(0.0, min(1.0, base_total - stress_penalty - syllable_penalty))

            if best is None or total > best[0] + 1e-6:
                best = (total, parts, stress_penalty, entry_a, entry_b, used_spelling)
            elif abs(total - best[0]) <= 1e-6 and best[5] and not used_spelling:
                best = (total, parts, stress_penalty, entry_a, entry_b, used_spelling)

    total, (rime_similarity, vowel_similarity, coda_score), stress_penalty, entry_a, entry_b, used_spelling = best
    return SlantScore(
        total=total,
        rime=rime_similarity,
        vowel=vowel_similarity,
        coda=coda_score,
        stress_penalty=stress_penalty,
        syllable_penalty=syllable_penalty,
        tier=resolve_tier(total),
        source_rime=entry_a[0],
        target_rime=entry_b[0],
        used_spelling_backoff=used_spelling,
    )


def score_pair(source: PronunciationSource, word_a: str, word_b: str) -> SlantScore:
    """Best slant score over every pronunciation rime of ``word_a`` and ``word_b``.

    ``total`` weighs rime similarity 0.6, vowel 0.2 and coda 0.2, then
    subtracts stress and syllable-count penalties. Rimes guessed from the
    spelling are damped by 0.85.
    """

    clean_a = (word_a or "").strip().lower()
    clean_b = (word_b or "").strip().lower()
    if not clean_a or not clean_b:
        return SlantScore.empty()

    pronunciations_a = source.get_pronunciations(clean_a)
    pronunciations_b = source.get_pronunciations(clean_b)
    return score_rimes(
        collect_rimes(clean_a, pronunciations_a),
        collect_rimes(clean_b, pronunciations_b),
        syllable_count(clean_a, pronunciations_a),
        syllable_count(clean_b, pronunciations_b),
    )


__all__ = [
    "PronunciationSource",
    "Rime",
    "SlantScore",
    "collect_rimes",
    "compare_rimes",
    "resolve_tier",
    "score_pair",
    "score_rimes",
    "syllable_count",
]
