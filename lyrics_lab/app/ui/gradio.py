"""User interface assembly for the Gradio front-end."""

from __future__ import annotations

import concurrent.futures
import tempfile
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import gradio as gr

from ..services.library_service import LibraryError, LibraryService
from ..services.lookup_service import WordLookupService
from ..services.result_formatter import LyricsResultFormatter
from ..services.search_service import SearchService
from ..services.statistics_service import StatisticsService


def _ensure_list(value) -> List:
    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        return [item for item in value if item not in (None, "", [])]
    return [value]


def _format_live_events(snapshot: Dict[str, Any]) -> str:
    """Return a markdown representation of telemetry events."""

    if not snapshot:
        return ""

    events = snapshot.get("events") or []
    counters = snapshot.get("counters") or {}
    if not events and not counters:
        return ""

    output: List[str] = ["#### Analysis activity"]
    if events:
        output.append("")
        for event in events[-8:]:
            name = str(event.get("name", "event"))
            duration = event.get("duration")
            metadata = event.get("metadata") or {}
            meta_chunks = [f"{key}={value}" for key, value in metadata.items()]
            meta_suffix = f" ({', '.join(meta_chunks)})" if meta_chunks else ""
            if isinstance(duration, (float, int)):
                output.append(f"- `{name}` took {float(duration):.2f}s{meta_suffix}")
            else:
                output.append(f"- `{name}`{meta_suffix}")

    if counters:
        output.append("")
        output.append("**Counters**")
        output.append(", ".join(f"`{key}`: {value}" for key, value in counters.items()))

    return "\n".join(output)


def create_interface(
    library_service: LibraryService,
    search_service: SearchService,
    statistics_service: StatisticsService,
    lookup_service: WordLookupService,
    formatter: Optional[LyricsResultFormatter] = None,
) -> gr.Blocks:
    """Construct the interactive Gradio Blocks UI."""

    formatter = formatter or LyricsResultFormatter()
    export_dir = Path(tempfile.mkdtemp(prefix="lyrics_lab_export_"))

    def _song_choices() -> List[Tuple[str, str]]:
        return [(song.title, song.id) for song in library_service.list_songs()]

    def _library_outputs(status: str):
        choices = _song_choices()
        return (
            status,
            formatter.format_song_table(library_service.list_songs()),
            gr.Dropdown(choices=choices, value=None),
            gr.Dropdown(choices=[("All songs", "all"), *choices], value="all"),
        )

    def refresh_library():
        return _library_outputs("")

    def upload_files(files: Sequence[str] | None):
        paths = _ensure_list(files)
        if not paths:
            return _library_outputs("Choose one or more `.txt` lyric files (and optional audio).")
        try:
            report = library_service.import_files(paths)
        except LibraryError as exc:
            return _library_outputs(f"❌ {exc}")
        return _library_outputs(formatter.format_import_report(report))

    def create_song(title: str, lyrics: str):
        try:
            song = library_service.create_song(title, lyrics)
        except LibraryError as exc:
            return _library_outputs(f"❌ {exc}")
        return _library_outputs(f"✅ Saved '{song.title}'.")

    def load_song(song_id: Optional[str]):
        if not song_id:
            return "", "", None
        try:
            song = library_service.get_song(song_id)
        except LibraryError as exc:
            return "", f"{exc}", None
        return song.title, song.lyrics, song.audio_path

    def save_song(song_id: Optional[str], title: str, lyrics: str):
        if not song_id:
            return _library_outputs("Select a song to edit first.")
        try:
            song = library_service.update_song(song_id, title, lyrics)
        except LibraryError as exc:
            return _library_outputs(f"❌ {exc}")
        return _library_outputs(f"✅ Updated '{song.title}'.")

    def delete_song(song_id: Optional[str]):
        if not song_id:
            return _library_outputs("Select a song to delete first.")
        try:
            song = library_service.delete_song(song_id)
        except LibraryError as exc:
            return _library_outputs(f"❌ {exc}")
        return _library_outputs(f"🗑️ Deleted '{song.title}'.")

    def delete_all(confirm: bool):
        if not confirm:
            return _library_outputs("Tick the confirmation box to delete every song.")
        removed = library_service.delete_all()
        return _library_outputs(f"🗑️ Deleted {removed} song(s).")

    def export_song(song_id: Optional[str]):
        if not song_id:
            return None
        try:
            filename, text = library_service.export_text(song_id)
        except LibraryError:
            return None
        target = export_dir / filename
        target.write_text(text, encoding="utf-8")
        return str(target)

    def run_search(query: str):
        results = search_service.search(query)
        history = search_service.history()
        return (
            search_service.format_results(query, results),
            gr.Dropdown(choices=history, value=None),
        )

    def define_word(word: str):
        return formatter.format_definitions(word or "", lookup_service.define(word or ""))

    def find_synonyms(word: str):
        return formatter.format_synonyms(lookup_service.synonyms(word or ""))

    def find_rhymes(word: str):
        return formatter.format_rhymes(lookup_service.rhymes(word or ""))

    def compute_statistics(song_filter: Optional[str]):
        """Compute statistics while streaming telemetry updates to the UI."""

        placeholder = "_Waiting for telemetry updates..._"
        yield "Analysing lyrics...", placeholder, ""

        start_time = time.perf_counter()
        last_log = placeholder
        try:
            with concurrent.futures.ThreadPoolExecutor(max_workers=1) as executor:
                future = executor.submit(statistics_service.compute, song_filter or "all")
                while True:
                    try:
                        stats = future.result(timeout=0.25)
                        break
                    except concurrent.futures.TimeoutError:
                        elapsed = time.perf_counter() - start_time
                        last_log = _format_live_events(statistics_service.get_latest_telemetry()) or last_log
                        yield f"Analysing… {elapsed:.1f}s elapsed", last_log, ""
        except Exception as exc:  # pragma: no cover - surface UI level failures
            yield f"Analysis failed: {exc}", last_log, ""
            return

        elapsed = time.perf_counter() - start_time
        final_log = _format_live_events(statistics_service.get_latest_telemetry()) or last_log
        yield f"Analysis completed in {elapsed:.2f}s", final_log, formatter.format_statistics(stats)

    initial_choices = _song_choices()

    with gr.Blocks(title="Lyrics Lab") as interface:
        gr.Markdown("## 🎵 Lyrics Lab\nUpload, search and study your song lyrics.")

        with gr.Tabs():
            with gr.Tab("Library"):
                library_status = gr.Markdown()
                library_table = gr.Markdown(formatter.format_song_table(library_service.list_songs()))
                with gr.Row():
                    upload_input = gr.File(
                        label="Upload lyrics (.txt) and audio with the same name",
                        file_count="multiple",
                        type="filepath",
                    )
                    upload_btn = gr.Button("📥 Import files", variant="primary")

                with gr.Accordion("Notepad", open=False):
                    new_title = gr.Textbox(label="Title", placeholder="Untitled")
                    new_lyrics = gr.Textbox(label="Lyrics", lines=12)
                    create_btn = gr.Button("💾 Save new song")

                with gr.Accordion("Edit a song", open=False):
                    song_select = gr.Dropdown(choices=initial_choices, label="Song")
                    edit_title = gr.Textbox(label="Title")
                    edit_lyrics = gr.Textbox(label="Lyrics", lines=12)
                    song_audio = gr.Audio(label="Audio", type="filepath", interactive=False)
                    with gr.Row():
                        save_btn = gr.Button("💾 Save changes")
                        export_btn = gr.Button("📄 Export text")
                        delete_btn = gr.Button("🗑️ Delete song", variant="stop")
                    export_file = gr.File(label="Exported lyrics")

                with gr.Row():
                    confirm_delete_all = gr.Checkbox(label="I want to delete every song")
                    delete_all_btn = gr.Button("Delete all songs", variant="stop")

            with gr.Tab("Search"):
                search_input = gr.Textbox(
                    label="Search lyrics",
                    placeholder='Search lyrics... (use "quotes" for exact)',
                )
                history_select = gr.Dropdown(choices=search_service.history(), label="Recent searches")
                search_btn = gr.Button("🔍 Search", variant="primary")
                search_results = gr.Markdown()

            with gr.Tab("Dictionary"):
                define_input = gr.Textbox(label="Word")
                define_btn = gr.Button("📖 Define")
                define_results = gr.Markdown()

            with gr.Tab("Synonyms"):
                synonym_input = gr.Textbox(label="Word")
                synonym_btn = gr.Button("🔁 Search")
                synonym_results = gr.Markdown()

            with gr.Tab("Rhymes"):
                rhyme_input = gr.Textbox(label="Word")
                rhyme_btn = gr.Button("🎯 Find")
                rhyme_results = gr.Markdown()

            with gr.Tab("Stats"):
                stats_filter = gr.Dropdown(
                    choices=[("All songs", "all"), *initial_choices],
                    value="all",
                    label="Songs",
                )
                stats_btn = gr.Button("📊 Analyse", variant="primary")
                stats_status = gr.Markdown()
                stats_log = gr.Markdown()
                stats_results = gr.Markdown()

        library_outputs = [library_status, library_table, song_select, stats_filter]

        interface.load(refresh_library, outputs=library_outputs)
        upload_btn.click(upload_files, inputs=[upload_input], outputs=library_outputs)
        create_btn.click(create_song, inputs=[new_title, new_lyrics], outputs=library_outputs)
        song_select.change(load_song, inputs=[song_select], outputs=[edit_title, edit_lyrics, song_audio])
        save_btn.click(save_song, inputs=[song_select, edit_title, edit_lyrics], outputs=library_outputs)
        delete_btn.click(delete_song, inputs=[song_select], outputs=library_outputs)
        delete_all_btn.click(delete_all, inputs=[confirm_delete_all], outputs=library_outputs)
        export_btn.click(export_song, inputs=[song_select], outputs=[export_file])

        search_btn.click(run_search, inputs=[search_input], outputs=[search_results, history_select])
        search_input.submit(run_search, inputs=[search_input], outputs=[search_results, history_select])
        history_select.input(
            lambda query: (query or "", *run_search(query or "")),
            inputs=[history_select],
            outputs=[search_input, search_results, history_select],
        )

        define_btn.click(define_word, inputs=[define_input], outputs=[define_results])
        define_input.submit(define_word, inputs=[define_input], outputs=[define_results])
        synonym_btn.click(find_synonyms, inputs=[synonym_input], outputs=[synonym_results])
        synonym_input.submit(find_synonyms, inputs=[synonym_input], outputs=[synonym_results])
        rhyme_btn.click(find_rhymes, inputs=[rhyme_input], outputs=[rhyme_results])
        rhyme_input.submit(find_rhymes, inputs=[rhyme_input], outputs=[rhyme_results])

        stats_btn.click(
            compute_statistics,
            inputs=[stats_filter],
            outputs=[stats_status, stats_log, stats_results],
        )

    return interface


__all__ = ["create_interface"]
