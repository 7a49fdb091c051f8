import pytest

from lyrics_lab.core.song import build_song
from lyrics_lab.core.text_stats import (
    SYLLABLE_BUCKETS,
    WORD_LENGTH_BUCKETS,
    CorpusStatistics,
    calculate_reading_level,
    calculate_vocabulary_complexity,
    clean_words,
    compute_corpus_statistics,
    count_syllables,
    select_songs,
)


def test_clean_words_drops_tokens_without_letters():
    assert clean_words("Hello, world! 123 don't") == ["hello", "world", "dont"]


def test_count_syllables_prefers_the_dictionary(phonetic_map):
    assert count_syllables("above", phonetic_map) == 2
    assert count_syllables("elephant", phonetic_map) == 3
    assert count_syllables("elephant") == 3


def test_reading_level_is_clamped_at_zero():
    assert calculate_reading_level("The cat sat\nOn the mat") == 0.0
    assert calculate_reading_level("") == 0.0


def test_reading_level_treats_lines_as_sentences():
    assert calculate_reading_level("beautiful elephant dancing") == pytest.approx(17.0)


def test_vocabulary_complexity_mixes_diversity_and_rarity():
    assert calculate_vocabulary_complexity("cat cat dog", {"cat": 2, "dog": 1}) == pytest.approx(38.9)
    assert calculate_vocabulary_complexity("a an", {}) == 0.0


def test_select_songs_falls_back_to_all_for_unknown_ids():
    songs = [build_song("One", "la"), build_song("Two", "da")]

    selected, applied = select_songs(songs, songs[1].id)
    assert [song.title for song in selected] == ["Two"]
    assert applied == songs[1].id

    selected, applied = select_songs(songs, "missing")
    assert len(selected) == 2
    assert applied == "all"


def test_compute_corpus_statistics(analyzer):
    song = build_song("Test", "time and rhyme\nlove and above")

    stats = compute_corpus_statistics([song], "all", analyzer)

    assert stats.total_songs == 1
    assert stats.total_words == 6
    assert stats.total_lines == 2
    assert stats.unique_words == 5
    assert stats.most_used_words[0] == ("and", 2)
    assert stats.average_words_per_song == 6
    assert stats.average_lines_per_song == 2
    assert stats.average_word_length == pytest.approx(4.0)
    assert stats.average_syllables_per_word == pytest.approx(1.2)
    assert stats.syllable_distribution == {"1": 5, "2": 1, "3": 0, "4": 0, "5+": 0}
    assert stats.word_length_distribution["3"] == 2
    assert stats.word_length_distribution["11+"] == 0
    assert list(stats.word_length_distribution) == list(WORD_LENGTH_BUCKETS)
    assert stats.reading_level == 0.0
    assert stats.vocabulary_complexity == pytest.approx(54.4)
    assert stats.rhyme_stats.perfect_rhymes == 2


def test_compute_corpus_statistics_filters_by_song(analyzer):
    first = build_song("First", "time and rhyme")
    second = build_song("Second", "love and above\ncat")

    stats = compute_corpus_statistics([first, second], second.id, analyzer)

    assert stats.total_songs == 1
    assert stats.song_filter == second.id
    assert stats.total_lines == 2


def test_compute_corpus_statistics_without_songs(analyzer):
    stats = compute_corpus_statistics([], "all", analyzer)

    assert stats == CorpusStatistics()
    assert stats.as_dict()["rhyme_stats"]["rhyme_groups"] == []


def test_bucket_labels():
    assert SYLLABLE_BUCKETS == ("1", "2", "3", "4", "5+")
    assert WORD_LENGTH_BUCKETS[-1] == "11+"


def test_integer_averages_round_halves_up(analyzer):
    first = build_song("First", "time rhyme")
    second = build_song("Second", "love above\ncat")

    stats = compute_corpus_statistics([first, second], "all", analyzer)

    assert stats.total_words == 5
    assert stats.average_words_per_song == 3
    assert stats.average_lines_per_song == 2
