"""Pronunciations for lyric slang and contractions missing from the CMU dictionary."""

from __future__ import annotations

from typing import Dict

SONG_VOCABULARY: Dict[str, str] = {
    "gonna": "G AA1 N AH0",
    "wanna": "W AA1 N AH0",
    "gotta": "G AA1 T AH0",
    "kinda": "K AY1 N D AH0",
    "outta": "AW1 T AH0",
    "tryna": "T R AY1 N AH0",
    "lemme": "L EH1 M IY0",
    "gimme": "G IH1 M IY0",
    "dunno": "D AH0 N OW1",
    "hella": "HH EH1 L AH0",
    "ima": "AY1 M AH0",
    "'cause": "K AH1 Z",
    "cuz": "K AH1 Z",
    "'til": "T IH1 L",
    "'em": "AH0 M",
    "y'all": "Y AO1 L",
    "ya": "Y AH1",
    "tonite": "T AH0 N AY1 T",
    "luv": "L AH1 V",
    "thru": "TH R UW1",
    "nothin'": "N AH1 TH IH0 N",
    "somethin'": "S AH1 M TH IH0 N",
    "lovin'": "L AH1 V IH0 N",
}

# Words that carry no rhyme in lyric analysis.
FUNCTION_WORDS = frozenset(
    {
        "a",
        "an",
        "the",
        "and",
        "or",
        "but",
        "nor",
        "so",
        "to",
        "of",
        "in",
        "on",
        "at",
        "by",
        "for",
        "up",
        "as",
        "is",
        "am",
        "are",
        "was",
        "be",
        "it",
        "its",
        "it's",
        "if",
        "i",
        "i'm",
        "me",
        "my",
        "we",
        "us",
        "our",
        "he",
        "his",
        "she",
        "her",
        "they",
        "them",
        "their",
        "this",
        "that",
        "with",
        "from",
        "do",
        "did",
        "has",
        "had",
        "have",
    }
)

__all__ = ["SONG_VOCABULARY", "FUNCTION_WORDS"]
