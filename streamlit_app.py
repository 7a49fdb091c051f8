"""Streamlit front-end for the Lyrics Lab project."""

from __future__ import annotations

from typing import List

import streamlit as st

from lyrics_lab.app.app import LyricsLabApp
from lyrics_lab.core.song import Song


@st.cache_resource(show_spinner=False)
def _load_app() -> LyricsLabApp:
    """Initialise and cache the core application facade."""

    return LyricsLabApp()


def _render_library(app: LyricsLabApp, songs: List[Song]) -> None:
    st.markdown(app.formatter.format_song_table(songs))


def main() -> None:
    """Render the library overview with statistics and rhyme groups."""

    st.set_page_config(page_title="Lyrics Lab", page_icon="🎵", layout="wide")

    app = _load_app()
    songs = app.library_service.list_songs()

    st.markdown("## 🎵 Lyrics Lab")
    library_tab, stats_tab, rhymes_tab = st.tabs(["Library", "Statistics", "Rhyme groups"])

    with library_tab:
        _render_library(app, songs)

    options = {value: label for label, value in app.statistics_service.song_filter_options()}
    with stats_tab:
        selected = st.selectbox(
            "Songs",
            options=list(options),
            format_func=lambda key: options[key],
        )
        with st.spinner("Analysing lyrics..."):
            stats = app.statistics_service.compute(selected)
        st.markdown(app.formatter.format_statistics(stats))

    with rhymes_tab:
        if not songs:
            st.info("Add songs to see their rhyme groups.")
            return
        song_titles = {song.id: song.title for song in songs}
        song_id = st.selectbox(
            "Song",
            options=list(song_titles),
            format_func=lambda key: song_titles[key],
            key="rhyme_song",
        )
        rhyme_stats = app.statistics_service.analyze_song(song_id)
        st.markdown(app.formatter.format_rhyme_statistics(rhyme_stats))


if __name__ == "__main__":
    main()
