import pytest

from lyrics_lab.core.scorer import SlantScore, collect_rimes, compare_rimes, resolve_tier, score_pair


def test_identical_rimes_score_as_perfect(phonetic_map):
    score = score_pair(phonetic_map, "time", "rhyme")

    assert score.total == pytest.approx(1.0)
    assert score.tier == "perfect"
    assert score.source_rime == ("AY", "M")
    assert score.target_rime == ("AY", "M")
    assert score.used_spelling_backoff is False


def test_unrelated_rimes_score_weak(phonetic_map):
    score = score_pair(phonetic_map, "cat", "dog")

    assert score.total < 0.55
    assert score.tier == "weak"


def test_unknown_words_fall_back_to_spelling_and_are_damped(phonetic_map):
    score = score_pair(phonetic_map, "blorf", "glorf")

    assert score.used_spelling_backoff is True
    assert score.total == pytest.approx(0.85)
    assert score.tier == "very_close"


def test_syllable_difference_is_penalised(phonetic_map):
    score = score_pair(phonetic_map, "love", "above")

    assert score.syllable_penalty == pytest.approx(0.04)
    assert score.penalties == pytest.approx(score.stress_penalty + score.syllable_penalty)


def test_blank_word_returns_empty_score(phonetic_map):
    assert score_pair(phonetic_map, "", "time") == SlantScore.empty()


def test_resolve_tier_thresholds():
    assert resolve_tier(0.97) == "perfect"
    assert resolve_tier(0.85) == "very_close"
    assert resolve_tier(0.7) == "strong"
    assert resolve_tier(0.55) == "loose"
    assert resolve_tier(0.2) == "weak"


def test_slant_score_as_dict_lists_rimes(phonetic_map):
    payload = score_pair(phonetic_map, "time", "climb").as_dict()

    assert payload["source_rime"] == ["AY", "M"]
    assert payload["tier"] == "perfect"


def test_longer_rimes_are_compared_position_by_position(phonetic_map):
    score = score_pair(phonetic_map, "cat", "lanterns")

    assert score.coda == pytest.approx(0.0)
    assert score.tier == "weak"


def test_rime_comparisons_are_memoised_by_rime_pair(phonetic_map):
    compare_rimes.cache_clear()

    score_pair(phonetic_map, "time", "mind")
    score_pair(phonetic_map, "rhyme", "mind")

    info = compare_rimes.cache_info()
    assert info.misses == 1
    assert info.hits == 1


def test_collect_rimes_extends_back_to_the_previous_vowel(phonetic_map):
    rimes = collect_rimes("above", phonetic_map.get_pronunciations("above"))

    assert [rime for rime, _, _ in rimes] == [("AH", "V"), ("AH", "B", "AH", "V")]
    assert collect_rimes("blorf", []) == [(("AO", "R", "F"), "", True)]
