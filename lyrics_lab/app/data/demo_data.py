"""Example song seeded into an empty library."""

from __future__ import annotations

from lyrics_lab.core.song import Song, build_song

EXAMPLE_SONG_ID = "example-song"
EXAMPLE_SONG_TITLE = "Paper Lanterns (Example Song)"
EXAMPLE_SONG_FILENAME = "Paper-Lanterns.txt"

EXAMPLE_SONG_LYRICS = """\
We hung paper lanterns on the fire escape
Counted every window like a city of lakes
You said the night was ours to borrow and break
I said the morning never asks what it takes

Light it up, light it up, let it drift on the breeze
Every little promise floating over the trees
Hold it up, hold it up, till the street lights freeze
We were burning slow and easy, burning bright as we please

Down on the corner where the radios hum
Old men dancing to a borrowed drum
Nothing is finished and the best is to come
Paper lanterns glowing in the dark like a sun

Light it up, light it up, let it drift on the breeze
Every little promise floating over the trees
"""


def build_example_song() -> Song:
    return build_song(
        EXAMPLE_SONG_TITLE,
        EXAMPLE_SONG_LYRICS,
        EXAMPLE_SONG_FILENAME,
        song_id=EXAMPLE_SONG_ID,
        is_example=True,
    )


__all__ = [
    "EXAMPLE_SONG_FILENAME",
    "EXAMPLE_SONG_ID",
    "EXAMPLE_SONG_LYRICS",
    "EXAMPLE_SONG_TITLE",
    "build_example_song",
]
