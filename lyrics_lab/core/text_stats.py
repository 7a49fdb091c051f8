"""Word, syllable and readability statistics over a set of songs."""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from lyrics_lab.utils.syllables import estimate_syllable_count

from .phonetic_map import PhoneticMap
from .rhyme_analysis import RhymeAnalyzer, RhymeStatistics
from .song import Song, count_lines, count_words

_LETTER = re.compile(r"[a-zA-Z]")
_NON_WORD = re.compile(r"[^\w]", re.ASCII)

SYLLABLE_BUCKETS: Tuple[str, ...] = ("1", "2", "3", "4", "5+")
WORD_LENGTH_BUCKETS: Tuple[str, ...] = tuple(str(length) for length in range(1, 11)) + ("11+",)
MOST_USED_LIMIT = 10


def count_syllables(word: str, phonetic_map: Optional[PhoneticMap] = None) -> int:
    """Dictionary syllable count when ``phonetic_map`` knows ``word``, else an estimate."""

    if phonetic_map is not None and word:
        known = phonetic_map.syllable_count(word)
        if known:
            return known
    return estimate_syllable_count(word)


def clean_words(text: str) -> List[str]:
    """Lower-cased tokens that contain a letter, stripped of non-word characters."""

    cleaned: List[str] = []
    for token in (text or "").lower().split():
        if not _LETTER.search(token):
            continue
        word = _NON_WORD.sub("", token)
        if word:
            cleaned.append(word)
    return cleaned


def calculate_reading_level(text: str, phonetic_map: Optional[PhoneticMap] = None) -> float:
    """Flesch-Kincaid grade level, treating every non-blank line as a sentence."""

    words = clean_words(text)
    sentences = count_lines(text)
    if not words or not sentences:
        return 0.0

    syllables = sum(count_syllables(word, phonetic_map) for word in words)
    grade = 0.39 * (len(words) / sentences) + 11.8 * (syllables / len(words)) - 15.59
    return round(max(0.0, grade), 1)


def calculate_vocabulary_complexity(
    text: str,
    word_frequency: Mapping[str, int],
    phonetic_map: Optional[PhoneticMap] = None,
) -> float:
    """Percentage mixing lexical diversity, long words and corpus-rare words.

    The mean of three shares over words longer than two characters: distinct
    words per word, distinct words with three or more syllables, and distinct
    words used exactly once across the corpus in ``word_frequency``.
    """

    words = [word for word in clean_words(text) if len(word) > 2]
    if not words:
        return 0.0

    distinct = set(words)
    type_token_ratio = len(distinct) / len(words)
    polysyllabic = sum(1 for word in distinct if count_syllables(word, phonetic_map) >= 3)
    rare = sum(1 for word in distinct if word_frequency.get(word, 0) == 1)
    score = (type_token_ratio + polysyllabic / len(distinct) + rare / len(distinct)) / 3
    return round(score * 100, 1)


@dataclass
class CorpusStatistics:
    total_songs: int = 0
    total_words: int = 0
    unique_words: int = 0
    most_used_words: List[Tuple[str, int]] = field(default_factory=list)
    syllable_distribution: Dict[str, int] = field(default_factory=dict)
    word_length_distribution: Dict[str, int] = field(default_factory=dict)
    average_words_per_song: int = 0
    average_lines_per_song: int = 0
    average_word_length: float = 0.0
    average_syllables_per_word: float = 0.0
    total_lines: int = 0
    reading_level: float = 0.0
    vocabulary_complexity: float = 0.0
    rhyme_stats: RhymeStatistics = field(default_factory=RhymeStatistics)
    song_filter: str = "all"

    def as_dict(self) -> Dict[str, Any]:
        return {
            "song_filter": self.song_filter,
            "total_songs": self.total_songs,
            "total_words": self.total_words,
            "unique_words": self.unique_words,
            "most_used_words": [list(item) for item in self.most_used_words],
            "syllable_distribution": dict(self.syllable_distribution),
            "word_length_distribution": dict(self.word_length_distribution),
            "average_words_per_song": self.average_words_per_song,
            "average_lines_per_song": self.average_lines_per_song,
            "average_word_length": self.average_word_length,
            "average_syllables_per_word": self.average_syllables_per_word,
            "total_lines": self.total_lines,
            "reading_level": self.reading_level,
            "vocabulary_complexity": self.vocabulary_complexity,
            "rhyme_stats": self.rhyme_stats.as_dict(),
        }


def _round_half_up(value: float) -> int:
    # Non-negative averages only; round() would send 2.5 to 2.
    return int(value + 0.5)


def select_songs(songs: Sequence[Song], song_filter: str = "all") -> Tuple[List[Song], str]:
    """Songs matching ``song_filter`` and the filter actually applied."""

    key = str(song_filter or "all")
    if key != "all":
        matches = [song for song in songs if str(song.id) == key]
        if matches:
            return matches, key
    return list(songs), "all"


def compute_corpus_statistics(
    songs: Sequence[Song],
    song_filter: str = "all",
    analyzer: Optional[RhymeAnalyzer] = None,
) -> CorpusStatistics:
    selected, applied_filter = select_songs(songs, song_filter)
    if not selected:
        return CorpusStatistics(song_filter=applied_filter)

    analyzer = analyzer or RhymeAnalyzer()
    phonetic_map = analyzer.phonetic_map

    word_frequency: Counter = Counter()
    syllable_counts = {bucket: 0 for bucket in SYLLABLE_BUCKETS}
    length_counts = {bucket: 0 for bucket in WORD_LENGTH_BUCKETS}
    total_syllables = 0
    total_characters = 0
    valid_words = 0

    for song in selected:
        for word in clean_words(song.lyrics):
            valid_words += 1
            total_characters += len(word)
            if len(word) > 2:
                word_frequency[word] += 1

            syllables = count_syllables(word, phonetic_map)
            total_syllables += syllables
            syllable_counts["5+" if syllables > 4 else str(syllables)] += 1
            length_counts["11+" if len(word) > 10 else str(len(word))] += 1

    song_count = len(selected)
    total_words = sum(song.word_count for song in selected)
    total_lines = sum(count_lines(song.lyrics) for song in selected)

    reading_level = sum(calculate_reading_level(song.lyrics, phonetic_map) for song in selected)
    complexity = sum(
        calculate_vocabulary_complexity(song.lyrics, word_frequency, phonetic_map)
        for song in selected
    )
    rhyme_stats = RhymeStatistics.combine(analyzer.analyze(song.lyrics) for song in selected)

    return CorpusStatistics(
        total_songs=song_count,
        total_words=total_words,
        unique_words=len(word_frequency),
        most_used_words=word_frequency.most_common(MOST_USED_LIMIT),
        syllable_distribution=syllable_counts,
        word_length_distribution=length_counts,
        average_words_per_song=_round_half_up(total_words / song_count),
        average_lines_per_song=_round_half_up(total_lines / song_count),
        average_word_length=round(total_characters / valid_words, 1) if valid_words else 0.0,
        average_syllables_per_word=round(total_syllables / valid_words, 1) if valid_words else 0.0,
        total_lines=total_lines,
        reading_level=round(reading_level / song_count, 1),
        vocabulary_complexity=round(complexity / song_count, 1),
        rhyme_stats=rhyme_stats,
        song_filter=applied_filter,
    )


__all__ = [
    "CorpusStatistics",
    "SYLLABLE_BUCKETS",
    "WORD_LENGTH_BUCKETS",
    "calculate_reading_level",
    "calculate_vocabulary_complexity",
    "clean_words",
    "compute_corpus_statistics",
    "count_lines",
    "count_syllables",
    "count_words",
    "select_songs",
]
