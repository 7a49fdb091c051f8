import pytest

from lyrics_lab.core.phonemes import (
    approximate_rhyme_part,
    coda_similarity,
    feature_similarity,
    normalize_phoneme,
    rhyme_part,
    rhyme_tail,
    sequence_similarity,
    stress_marker,
    stressed_vowel,
    vowel_count,
)


def test_feature_similarity_ignores_stress_digits():
    assert feature_similarity("AY1", "AY0") == pytest.approx(1.0)


def test_feature_similarity_scores_voicing_pairs_highly():
    # P and B differ only in voicing.
    assert feature_similarity("P", "B") == pytest.approx(0.8)
    assert feature_similarity("P", "B") > feature_similarity("P", "Z")


def test_feature_similarity_handles_missing_symbols():
    assert feature_similarity("", "AA") == 0.0


def test_sequence_similarity_counts_missing_positions_as_zero():
    assert sequence_similarity([], []) == pytest.approx(1.0)
    assert sequence_similarity(["T"], []) == 0.0
    assert sequence_similarity(["AE", "T"], ["AE"]) == pytest.approx(0.5)
    assert sequence_similarity(["AE", "T"], ["AE"], emphasize_first=True) == pytest.approx(0.6)


@pytest.mark.parametrize(
    "coda_a, coda_b, expected",
    [
        ((), (), 1.0),
        ((), ("T",), 0.8),
        (("M",), ("N", "D"), 0.6),
        (("K", "S"), ("K", "S"), 1.0),
        (("T",), ("N", "T", "ER", "N", "Z"), 0.0),
    ],
)
def test_coda_similarity_penalises_extra_phones(coda_a, coda_b, expected):
    assert coda_similarity(coda_a, coda_b) == pytest.approx(expected)
    assert coda_similarity(coda_b, coda_a) == pytest.approx(expected)


def test_normalize_phoneme_and_stress_marker():
    assert normalize_phoneme("ah1") == "AH"
    assert stress_marker("AH1") == "1"
    assert stress_marker("T") == ""


def test_rhyme_part_starts_at_last_stressed_vowel():
    assert rhyme_part(["T", "R", "EY1", "L"]) == "EY L"
    assert rhyme_part(["AH0", "B", "AH1", "V"]) == "AH V"
    assert rhyme_tail(["AH0", "B", "AH1", "V"]) == ["AH1", "V"]


def test_rhyme_part_falls_back_to_last_vowel_without_stress():
    assert rhyme_part(["DH", "AH0"]) == "AH"
    assert rhyme_part(["HH", "M"]) is None


def test_stressed_vowel_and_vowel_count():
    phones = ["AH0", "B", "AH1", "V"]

    assert stressed_vowel(phones) == "AH"
    assert vowel_count(phones) == 2
    assert stressed_vowel(["S", "T"]) is None


def test_approximate_rhyme_part_uses_spelling():
    assert approximate_rhyme_part("blorf") == "AO R F"
    assert approximate_rhyme_part("brrr") is None
