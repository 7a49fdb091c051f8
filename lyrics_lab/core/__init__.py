"""Core lyric analysis utilities for Lyrics Lab."""

from .phonetic_map import PhoneticMap
from .rhyme_analysis import (
    RhymeAnalyzer,
    RhymeGroup,
    RhymeStatistics,
    analyze_rhyme_statistics,
)
from .scorer import SlantScore, score_pair
from .song import Song, build_song, sanitize_text, title_from_filename
from .text_stats import (
    CorpusStatistics,
    calculate_reading_level,
    calculate_vocabulary_complexity,
    compute_corpus_statistics,
    count_syllables,
)
from .lyric_search import SearchHistory, highlight, parse_query, search_songs
from .vocabulary import SONG_VOCABULARY

__all__ = [
    "PhoneticMap",
    "SONG_VOCABULARY",
    "RhymeAnalyzer",
    "RhymeGroup",
    "RhymeStatistics",
    "analyze_rhyme_statistics",
    "SlantScore",
    "score_pair",
    "Song",
    "build_song",
    "sanitize_text",
    "title_from_filename",
    "CorpusStatistics",
    "calculate_reading_level",
    "calculate_vocabulary_complexity",
    "compute_corpus_statistics",
    "count_syllables",
    "SearchHistory",
    "highlight",
    "parse_query",
    "search_songs",
]
