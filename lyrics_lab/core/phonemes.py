"""ARPAbet phoneme features, similarity measures and rime extraction."""

from __future__ import annotations

import difflib
import re
from functools import lru_cache
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

VOWEL_PHONEMES: Set[str] = {
    "AA",
    "AE",
    "AH",
    "AO",
    "AW",
    "AY",
    "EH",
    "ER",
    "EY",
    "IH",
    "IY",
    "OW",
    "OY",
    "UH",
    "UW",
}

_DIGIT_PATTERN = re.compile(r"\d")
_STRESS_PATTERN = re.compile(r"[12]")
_NON_LETTERS = re.compile(r"[^a-z]")
_TRAILING_CONSONANTS = re.compile(r"[bcdfghjklmnpqrstvwxz]+$")
_VOWEL_CLUSTERS = re.compile(r"[aeiouy]+")

# Simplified articulatory features. Similarity between two phonemes is the
# share of feature keys on which they agree.
PHONEME_FEATURES: Dict[str, Dict[str, str]] = {
    # Vowels
    "AA": {"category": "vowel", "height": "open", "backness": "back", "rounding": "unrounded", "tenseness": "tense"},
    "AE": {"category": "vowel", "height": "near-open", "backness": "front", "rounding": "unrounded", "tenseness": "lax"},
    "AH": {"category": "vowel", "height": "open-mid", "backness": "central", "rounding": "unrounded", "tenseness": "lax"},
    "AO": {"category": "vowel", "height": "open", "backness": "back", "rounding": "rounded", "tenseness": "tense"},
    "AW": {"category": "vowel", "height": "open", "backness": "back", "rounding": "rounded", "diphthong": "1"},
    "AY": {"category": "vowel", "height": "open", "backness": "front", "rounding": "unrounded", "diphthong": "1"},
    "EH": {"category": "vowel", "height": "open-mid", "backness": "front", "rounding": "unrounded", "tenseness": "lax"},
    "ER": {"category": "vowel", "height": "mid", "backness": "central", "rounding": "rounded", "rhotacized": "1"},
    "EY": {"category": "vowel", "height": "close-mid", "backness": "front", "rounding": "unrounded", "tenseness": "tense", "diphthong": "1"},
    "IH": {"category": "vowel", "height": "close", "backness": "front", "rounding": "unrounded", "tenseness": "lax"},
    "IY": {"category": "vowel", "height": "close", "backness": "front", "rounding": "unrounded", "tenseness": "tense"},
    "OW": {"category": "vowel", "height": "close-mid", "backness": "back", "rounding": "rounded", "tenseness": "tense", "diphthong": "1"},
    "OY": {"category": "vowel", "height": "close-mid", "backness": "back", "rounding": "rounded", "diphthong": "1"},
    "UH": {"category": "vowel", "height": "close-mid", "backness": "back", "rounding": "rounded", "tenseness": "lax"},
    "UW": {"category": "vowel", "height": "close", "backness": "back", "rounding": "rounded", "tenseness": "tense"},
    # Stops
    "P": {"category": "consonant", "place": "bilabial", "manner": "stop", "voicing": "voiceless", "nasal": "0"},
    "B": {"category": "consonant", "place": "bilabial", "manner": "stop", "voicing": "voiced", "nasal": "0"},
    "T": {"category": "consonant", "place": "alveolar", "manner": "stop", "voicing": "voiceless", "nasal": "0"},
    "D": {"category": "consonant", "place": "alveolar", "manner": "stop", "voicing": "voiced", "nasal": "0"},
    "K": {"category": "consonant", "place": "velar", "manner": "stop", "voicing": "voiceless", "nasal": "0"},
    "G": {"category": "consonant", "place": "velar", "manner": "stop", "voicing": "voiced", "nasal": "0"},
    # Fricatives and affricates
    "F": {"category": "consonant", "place": "labiodental", "manner": "fricative", "voicing": "voiceless", "nasal": "0"},
    "V": {"category": "consonant", "place": "labiodental", "manner": "fricative", "voicing": "voiced", "nasal": "0"},
    "TH": {"category": "consonant", "place": "dental", "manner": "fricative", "voicing": "voiceless", "nasal": "0"},
    "DH": {"category": "consonant", "place": "dental", "manner": "fricative", "voicing": "voiced", "nasal": "0"},
    "S": {"category": "consonant", "place": "alveolar", "manner": "fricative", "voicing": "voiceless", "sibilant": "1", "nasal": "0"},
    "Z": {"category": "consonant", "place": "alveolar", "manner": "fricative", "voicing": "voiced", "sibilant": "1", "nasal": "0"},
    "SH": {"category": "consonant", "place": "postalveolar", "manner": "fricative", "voicing": "voiceless", "sibilant": "1", "nasal": "0"},
    "ZH": {"category": "consonant", "place": "postalveolar", "manner": "fricative", "voicing": "voiced", "sibilant": "1", "nasal": "0"},
    "HH": {"category": "consonant", "place": "glottal", "manner": "fricative", "voicing": "voiceless", "nasal": "0"},
    "CH": {"category": "consonant", "place": "postalveolar", "manner": "affricate", "voicing": "voiceless", "sibilant": "1", "nasal": "0"},
    "JH": {"category": "consonant", "place": "postalveolar", "manner": "affricate", "voicing": "voiced", "sibilant": "1", "nasal": "0"},
    # Nasals
    "M": {"category": "consonant", "place": "bilabial", "manner": "nasal", "voicing": "voiced", "nasal": "1"},
    "N": {"category": "consonant", "place": "alveolar", "manner": "nasal", "voicing": "voiced", "nasal": "1"},
    "NG": {"category": "consonant", "place": "velar", "manner": "nasal", "voicing": "voiced", "nasal": "1"},
    # Liquids and glides
    "L": {"category": "consonant", "place": "alveolar", "manner": "liquid", "voicing": "voiced", "lateral": "1", "nasal": "0"},
    "R": {"category": "consonant", "place": "postalveolar", "manner": "liquid", "voicing": "voiced", "nasal": "0"},
    "W": {"category": "consonant", "place": "labial-velar", "manner": "glide", "voicing": "voiced", "rounding": "rounded", "nasal": "0"},
    "Y": {"category": "consonant", "place": "palatal", "manner": "glide", "voicing": "voiced", "nasal": "0"},
}

# Letter clusters mapped to phonemes for words the dictionary does not know.
GRAPHEME_TO_PHONEMES: Dict[str, Tuple[str, ...]] = {
    "A": ("AE",),
    "E": ("EH",),
    "I": ("IH",),
    "O": ("AO",),
    "U": ("AH",),
    "Y": ("IY",),
    "OO": ("UW",),
    "EE": ("IY",),
    "OU": ("AW",),
    "OW": ("OW",),
    "AI": ("EY",),
    "AY": ("EY",),
    "EA": ("IY",),
    "IE": ("AY",),
    "OA": ("OW",),
    "B": ("B",),
    "C": ("K",),
    "D": ("D",),
    "F": ("F",),
    "G": ("G",),
    "H": ("HH",),
    "J": ("JH",),
    "K": ("K",),
    "L": ("L",),
    "M": ("M",),
    "N": ("N",),
    "P": ("P",),
    "Q": ("K",),
    "R": ("R",),
    "S": ("S",),
    "T": ("T",),
    "V": ("V",),
    "W": ("W",),
    "X": ("K", "S"),
    "Z": ("Z",),
    "NG": ("NG",),
    "SH": ("SH",),
    "TH": ("TH",),
    "PH": ("F",),
    "CH": ("CH",),
    "GH": ("G",),
    "CK": ("K",),
    "LL": ("L",),
    "SS": ("S",),
}


@lru_cache(maxsize=512)
def normalize_phoneme(symbol: str) -> str:
    """Return ``symbol`` upper-cased with stress digits removed."""

    return _DIGIT_PATTERN.sub("", symbol or "").strip().upper()


def stress_marker(symbol: str) -> str:
    """Return the stress digit carried by ``symbol`` or an empty string."""

    match = _DIGIT_PATTERN.search(symbol or "")
    return match.group(0) if match else ""


@lru_cache(maxsize=4096)
def feature_similarity(symbol_a: str, symbol_b: str) -> float:
    if not symbol_a or not symbol_b:
        return 0.0

    key_a = normalize_phoneme(symbol_a)
    key_b = normalize_phoneme(symbol_b)
    features_a = PHONEME_FEATURES.get(key_a)
    features_b = PHONEME_FEATURES.get(key_b)

    if features_a is None or features_b is None:
        return difflib.SequenceMatcher(None, key_a, key_b).ratio()

    keys = set(features_a) | set(features_b)
    mismatches = sum(1 for key in keys if features_a.get(key) != features_b.get(key))
    return max(0.0, 1.0 - (mismatches / len(keys)))


def sequence_similarity(
    sequence_a: Iterable[str],
    sequence_b: Iterable[str],
    *,
    emphasize_first: bool = False,
) -> float:
    """Position-wise feature similarity of two phoneme sequences.

    Missing positions in the shorter sequence count as zero. With
    ``emphasize_first`` the first position (the rime nucleus) weighs 1.5.
    """

    seq_a = [normalize_phoneme(symbol) for symbol in sequence_a]
    seq_b = [normalize_phoneme(symbol) for symbol in sequence_b]

    if not seq_a and not seq_b:
        return 1.0
    if not seq_a or not seq_b:
        return 0.0

    weighted_total = 0.0
    weight_sum = 0.0
    for index in range(max(len(seq_a), len(seq_b))):
        weight = 1.5 if emphasize_first and index == 0 else 1.0
        weight_sum += weight
        if index < len(seq_a) and index < len(seq_b):
            weighted_total += feature_similarity(seq_a[index], seq_b[index]) * weight

    return weighted_total / weight_sum


def coda_similarity(coda_a: Sequence[str], coda_b: Sequence[str]) -> float:
    """Similarity of the phones following a rime's vowel.

    Codas are compared position by position from the vowel over the shorter
    length; every extra phone in the longer coda costs 0.2. Two open
    syllables score 1.0, so ``see``/``seat`` lands at 0.8 and
    ``cat``/``lanterns`` at 0.0.
    """

    shared = min(len(coda_a), len(coda_b))
    extra = abs(len(coda_a) - len(coda_b))
    if shared:
        base = sum(feature_similarity(coda_a[index], coda_b[index]) for index in range(shared)) / shared
    else:
        base = 1.0
    return max(0.0, base - 0.2 * extra)


def rhyme_tail_index(phones: Sequence[str]) -> Optional[int]:
    """Index of the last stressed vowel, or of the last vowel when none is stressed."""

    last_stressed: Optional[int] = None
    last_vowel: Optional[int] = None
    for index, phone in enumerate(phones):
        if normalize_phoneme(phone) not in VOWEL_PHONEMES:
            continue
        last_vowel = index
        if _STRESS_PATTERN.search(phone):
            last_stressed = index
    return last_stressed if last_stressed is not None else last_vowel


def rhyme_tail(phones: Sequence[str]) -> List[str]:
    index = rhyme_tail_index(phones)
    if index is None:
        return []
    return list(phones[index:])


def rhyme_part(phones: Sequence[str]) -> Optional[str]:
    """Stress-free rime key such as ``"EY L"`` for ``T R EY1 L``."""

    tail = rhyme_tail(phones)
    if not tail:
        return None
    return " ".join(normalize_phoneme(phone) for phone in tail)


def stressed_vowel(phones: Sequence[str]) -> Optional[str]:
    index = rhyme_tail_index(phones)
    if index is None:
        return None
    return normalize_phoneme(phones[index])


def vowel_count(phones: Sequence[str]) -> int:
    return sum(1 for phone in phones if normalize_phoneme(phone) in VOWEL_PHONEMES)


def grapheme_cluster_to_phonemes(cluster: str) -> List[str]:
    result: List[str] = []
    upper_cluster = (cluster or "").upper()
    i = 0
    while i < len(upper_cluster):
        for span in (2, 1):
            segment = upper_cluster[i : i + span]
            if len(segment) == span and segment in GRAPHEME_TO_PHONEMES:
                result.extend(GRAPHEME_TO_PHONEMES[segment])
                i += span
                break
        else:
            i += 1
    return result


def approximate_spelling_coda(word: str) -> List[str]:
    lower = _NON_LETTERS.sub("", (word or "").lower())
    if lower.endswith("e") and len(lower) > 2:
        lower = lower[:-1]
    match = _TRAILING_CONSONANTS.search(lower)
    if not match:
        return []
    return grapheme_cluster_to_phonemes(match.group(0))


def approximate_spelling_vowel(word: str) -> Optional[str]:
    lower = _NON_LETTERS.sub("", (word or "").lower())
    if lower.endswith("e") and len(lower) > 2 and _VOWEL_CLUSTERS.search(lower[:-1]):
        lower = lower[:-1]
    vowels = _VOWEL_CLUSTERS.findall(lower)
    if not vowels:
        return None
    phonemes = grapheme_cluster_to_phonemes(vowels[-1])
    vowel_phonemes = [phone for phone in phonemes if phone in VOWEL_PHONEMES]
    return vowel_phonemes[-1] if vowel_phonemes else None


def approximate_rhyme_part(word: str) -> Optional[str]:
    """Spelling-derived rime key used when no pronunciation is known."""

    vowel = approximate_spelling_vowel(word)
    if not vowel:
        return None
    return " ".join([vowel, *approximate_spelling_coda(word)])


__all__ = [
    "VOWEL_PHONEMES",
    "PHONEME_FEATURES",
    "GRAPHEME_TO_PHONEMES",
    "normalize_phoneme",
    "stress_marker",
    "feature_similarity",
    "sequence_similarity",
    "coda_similarity",
    "rhyme_tail_index",
    "rhyme_tail",
    "rhyme_part",
    "stressed_vowel",
    "vowel_count",
    "grapheme_cluster_to_phonemes",
    "approximate_spelling_coda",
    "approximate_spelling_vowel",
    "approximate_rhyme_part",
]
