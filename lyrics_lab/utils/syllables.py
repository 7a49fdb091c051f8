"""Spelling-based syllable estimation shared by the statistics and rhyme code."""

from __future__ import annotations

import re


__all__ = ["estimate_syllable_count"]


_VOWEL_GROUP_PATTERN = re.compile(r"[aeiouy]+")
_NON_LETTERS = re.compile(r"[^a-z]")


def estimate_syllable_count(word: str) -> int:
    """Estimate the number of syllables in ``word`` from its spelling.

    Counts vowel groups (``y`` included), then drops a silent final ``e``
    (but not ``-le``, ``-ee`` or ``-ye``) and a silent ``-ed`` (but not
    ``-ted`` or ``-ded``). Never returns less than one.
    """

    normalized = _NON_LETTERS.sub("", (word or "").lower())
    if not normalized:
        return 1

    syllable_count = len(_VOWEL_GROUP_PATTERN.findall(normalized))

    if syllable_count > 1:
        if normalized.endswith("e") and not normalized.endswith(("le", "ee", "ye")):
            syllable_count -= 1
        elif normalized.endswith("ed") and not normalized.endswith(("ted", "ded")):
            syllable_count -= 1

    return max(1, syllable_count)
