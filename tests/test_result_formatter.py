from lyrics_lab.app.services.library_service import ImportReport
from lyrics_lab.app.services.lookup_service import (
    Definition,
    RelatedWord,
    RhymeLookupResult,
    SynonymResult,
)
from lyrics_lab.app.services.result_formatter import LyricsResultFormatter
from lyrics_lab.core.rhyme_analysis import RhymeGroup, RhymeStatistics
from lyrics_lab.core.song import build_song
from lyrics_lab.core.text_stats import CorpusStatistics, compute_corpus_statistics

formatter = LyricsResultFormatter()


def test_song_table_marks_examples_and_audio():
    example = build_song("Demo", "a b c", is_example=True)
    with_audio = build_song("Tune", "x")
    with_audio.audio_path = "audio/tune.mp3"

    output = formatter.format_song_table([example, with_audio])

    assert output.startswith("**2 song(s)**")
    assert "| Demo _(example)_ | 3 | 1 |" in output
    assert "🎵" in output


def test_empty_library_message():
    assert formatter.format_song_table([]).startswith("📭 Your library is empty")


def test_import_report_lists_skipped_files():
    report = ImportReport(created=[build_song("New", "words")], skipped=[("cover.png", "unsupported file type")])

    output = formatter.format_import_report(report)

    assert "✅ Added 1 song(s): New" in output
    assert "⚠️ Skipped `cover.png`: unsupported file type" in output
    assert formatter.format_import_report(ImportReport()) == "No files were imported."


def test_rhyme_groups_are_truncated():
    groups = [RhymeGroup("perfect", f"K{index}", ("a", "b"), (1,)) for index in range(3)]

    output = formatter.format_rhyme_groups(groups, limit=2)

    assert output.count("🎯") == 2
    assert "…and 1 more" in output
    assert formatter.format_rhyme_groups([]) == "_No rhyme groups found._"


def test_rhyme_statistics_show_density_percentage():
    output = formatter.format_rhyme_statistics(RhymeStatistics(total_rhymable_words=4, rhyme_density=0.5))

    assert "Rhyme density: **50.0%**" in output


def test_statistics_overview(analyzer):
    stats = compute_corpus_statistics([build_song("Song", "time and rhyme\nlove and above")], "all", analyzer)

    output = formatter.format_statistics(stats)

    assert "- Songs: **1**" in output
    assert "and (2)" in output
    assert "| 5+ | 0 | 0.0% |" in output
    assert formatter.format_statistics(CorpusStatistics()) == "📭 No songs to analyse yet."


def test_definitions_grouped_by_part_of_speech():
    definitions = [
        Definition("run", "verb", "Move fast.", "/rʌn/", "run home"),
        Definition("run", "noun", "A jog."),
    ]

    output = formatter.format_definitions("run", definitions)

    assert output.startswith("### 📖 run `/rʌn/`")
    assert "**verb**" in output and "**noun**" in output
    assert "_“run home”_" in output
    assert formatter.format_definitions("zzz", []) == "❌ No definitions found for 'zzz'."
    assert formatter.format_definitions(" ", []) == "Enter a word to look up."


def test_synonyms_and_rhymes():
    synonyms = SynonymResult("happy", synonyms=[RelatedWord("glad")])
    rhymes = RhymeLookupResult("time", perfect=[RelatedWord("rhyme")], offline=True)

    assert "glad" in formatter.format_synonyms(synonyms)
    assert "_none_" in formatter.format_synonyms(synonyms)
    rhyme_output = formatter.format_rhymes(rhymes)
    assert "rhyme" in rhyme_output
    assert "showing rhymes from the local dictionary" in rhyme_output
    assert formatter.format_rhymes(RhymeLookupResult("")) == "Enter a word to find rhymes."
