from lyrics_lab.core.song import (
    UNTITLED_SONG,
    base_name,
    build_song,
    count_lines,
    count_words,
    sanitize_text,
    title_from_filename,
)


def test_sanitize_text_strips_markup_and_control_characters():
    raw = "<b>Hi</b>\r\nthere<script>alert('x')</script>\x07\rnow"

    assert sanitize_text(raw) == "Hi\nthere\nnow"
    assert sanitize_text(None) == ""


def test_title_from_filename():
    assert title_from_filename("my-great_song.txt") == "my great song"
    assert title_from_filename("Verse.LYRICS") == "Verse"
    assert title_from_filename("") == UNTITLED_SONG
    assert title_from_filename(".txt") == UNTITLED_SONG


def test_base_name_removes_last_extension():
    assert base_name("song.mp3") == "song"
    assert base_name("song.final.txt") == "song.final"
    assert base_name(None) == ""


def test_counts_ignore_blank_lines():
    text = "one two\n\n   \nthree"

    assert count_words(text) == 3
    assert count_lines(text) == 2


def test_build_song_derives_title_and_counts():
    song = build_song(None, "a b\n\nc", "x-file.txt")

    assert song.title == "x file"
    assert song.filename == "x-file.txt"
    assert song.word_count == 3
    assert song.line_count == 2
    assert len(song.id) == 32
    assert song.date_added
    assert song.has_audio is False


def test_build_song_defaults_filename_to_title():
    song = build_song("Night Drive", "go")

    assert song.filename == "Night Drive.txt"


def test_with_lyrics_refreshes_counts_and_stamp():
    song = build_song("Old", "one line")

    edited = song.with_lyrics("first\nsecond line", title="New")

    assert edited.id == song.id
    assert edited.title == "New"
    assert edited.word_count == 3
    assert edited.line_count == 2
    assert edited.date_modified is not None
    assert song.title == "Old"


def test_as_dict_round_trips_fields():
    song = build_song("Title", "words", is_example=True)

    payload = song.as_dict()

    assert payload["title"] == "Title"
    assert payload["is_example"] is True
    assert payload["audio_path"] is None
