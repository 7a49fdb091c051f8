"""Markdown rendering for statistics, search and lookup results."""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence

from lyrics_lab.core.lyric_search import SearchQuery, SongSearchResult, highlight
from lyrics_lab.core.rhyme_analysis import RhymeGroup, RhymeStatistics
from lyrics_lab.core.song import Song
from lyrics_lab.core.text_stats import CorpusStatistics

from .library_service import ImportReport
from .lookup_service import Definition, RelatedWord, RhymeLookupResult, SynonymResult

_MAX_GROUPS = 12


def _word_list(words: Iterable[RelatedWord]) -> str:
    return ", ".join(item.word for item in words) or "_none_"


def _distribution_rows(distribution: Dict[str, int]) -> List[str]:
    total = sum(distribution.values())
    rows = ["| Bucket | Words | Share |", "| --- | ---: | ---: |"]
    for bucket, count in distribution.items():
        share = (count / total * 100) if total else 0.0
        rows.append(f"| {bucket} | {count} | {share:.1f}% |")
    return rows


class LyricsResultFormatter:
    """Turns service results into markdown for the Gradio and Streamlit front-ends."""

    def format_song_table(self, songs: Sequence[Song]) -> str:
        if not songs:
            return "📭 Your library is empty. Upload `.txt` lyrics or write a song in the notepad."

        rows = ["| Title | Words | Lines | Audio | Added |", "| --- | ---: | ---: | :---: | --- |"]
        for song in songs:
            title = f"{song.title} _(example)_" if song.is_example else song.title
            audio = "🎵" if song.has_audio else ""
            rows.append(
                f"| {title} | {song.word_count} | {song.line_count} | {audio} | {song.date_added[:10]} |"
            )
        return "\n".join([f"**{len(songs)} song(s)**", "", *rows])

    def format_import_report(self, report: ImportReport) -> str:
        lines: List[str] = []
        if report.created:
            lines.append(f"✅ Added {len(report.created)} song(s): " + ", ".join(song.title for song in report.created))
        if report.audio_attached:
            lines.append(
                f"🎵 Attached audio to {len(report.audio_attached)} song(s): "
                + ", ".join(song.title for song in report.audio_attached)
            )
        for filename, reason in report.skipped:
            lines.append(f"⚠️ Skipped `{filename}`: {reason}")
        return "\n\n".join(lines) or "No files were imported."

    def format_search_results(self, query: SearchQuery, results: Sequence[SongSearchResult]) -> str:
        if query.is_empty:
            return "Type a word or phrase to search your lyrics. Wrap it in quotes for an exact match."
        if not results:
            return f"❌ No lyrics match '{query.raw}'."

        total = sum(result.occurrences for result in results)
        sections = [f"### 🔎 {total} match(es) for '{query.raw}' in {len(results)} song(s)"]
        for result in results:
            sections.append(f"#### {result.title} ({result.occurrences})")
            for match in result.matches:
                sections.append(f"- Line {match.line_number}: {highlight(match.text, query)}")
        return "\n".join(sections)

    def format_rhyme_groups(self, groups: Sequence[RhymeGroup], limit: int = _MAX_GROUPS) -> str:
        if not groups:
            return "_No rhyme groups found._"
        lines = []
        for group in list(groups)[:limit]:
            icon = "🎯" if group.type == "perfect" else "〰️"
            line_refs = ", ".join(str(line) for line in group.lines)
            lines.append(
                f"- {icon} **{group.type.title()}** `{group.key}`: {', '.join(group.words)} (lines {line_refs})"
            )
        if len(groups) > limit:
            lines.append(f"- …and {len(groups) - limit} more")
        return "\n".join(lines)

    def format_rhyme_statistics(self, stats: RhymeStatistics) -> str:
        return "\n".join(
            [
                "### 🎶 Rhymes",
                f"- Rhymable words: **{stats.total_rhymable_words}**",
                f"- Perfect rhymes: **{stats.perfect_rhymes}**",
                f"- Near rhymes: **{stats.near_rhymes}**",
                f"- Sounds-like pairs: **{stats.sounds_like}**",
                f"- Internal rhymes: **{stats.internal_rhymes}**",
                f"- Rhyme density: **{stats.rhyme_density * 100:.1f}%**",
                "",
                self.format_rhyme_groups(stats.rhyme_groups),
            ]
        )

    def format_statistics(self, stats: CorpusStatistics) -> str:
        if not stats.total_songs:
            return "📭 No songs to analyse yet."

        top_words = ", ".join(f"{word} ({count})" for word, count in stats.most_used_words) or "_none_"
        sections = [
            "### 📊 Overview",
            f"- Songs: **{stats.total_songs}**",
            f"- Words: **{stats.total_words}** ({stats.unique_words} unique)",
            f"- Lines: **{stats.total_lines}**",
            f"- Average words per song: **{stats.average_words_per_song}**",
            f"- Average lines per song: **{stats.average_lines_per_song}**",
            f"- Average word length: **{stats.average_word_length}** letters",
            f"- Average syllables per word: **{stats.average_syllables_per_word}**",
            f"- Reading level: **grade {stats.reading_level}**",
            f"- Vocabulary complexity: **{stats.vocabulary_complexity}%**",
            "",
            f"**Most used words:** {top_words}",
            "",
            "#### Syllables per word",
            *_distribution_rows(stats.syllable_distribution),
            "",
            "#### Word length",
            *_distribution_rows(stats.word_length_distribution),
            "",
            self.format_rhyme_statistics(stats.rhyme_stats),
        ]
        return "\n".join(sections)

    def format_definitions(self, word: str, definitions: Sequence[Definition]) -> str:
        if not word.strip():
            return "Enter a word to look up."
        if not definitions:
            return f"❌ No definitions found for '{word}'."

        phonetic = next((item.phonetic for item in definitions if item.phonetic), None)
        header = f"### 📖 {definitions[0].word or word}" + (f" `{phonetic}`" if phonetic else "")
        lines = [header]
        current_pos = None
        for item in definitions:
            if item.part_of_speech != current_pos:
                current_pos = item.part_of_speech
                lines.append(f"\n**{current_pos or 'other'}**")
            lines.append(f"- {item.definition}")
            if item.example:
                lines.append(f"  - _“{item.example}”_")
        return "\n".join(lines)

    def format_synonyms(self, result: SynonymResult) -> str:
        if not result.word:
            return "Enter a word to find synonyms."
        return "\n".join(
            [
                f"### 🔁 Synonyms for '{result.word}'",
                _word_list(result.synonyms),
                "",
                f"### ↔️ Antonyms for '{result.word}'",
                _word_list(result.antonyms),
            ]
        )

    def format_rhymes(self, result: RhymeLookupResult) -> str:
        if not result.word:
            return "Enter a word to find rhymes."
        lines = [f"### 🎯 Perfect rhymes for '{result.word}'", _word_list(result.perfect)]
        if result.offline:
            lines.append("\n_Rhyme service unavailable; showing rhymes from the local dictionary._")
        lines.extend(
            [
                "",
                "### 〰️ Near rhymes",
                _word_list(result.near),
                "",
                "### 👂 Sounds like",
                _word_list(result.sounds_like),
            ]
        )
        return "\n".join(lines)


__all__ = ["LyricsResultFormatter"]
