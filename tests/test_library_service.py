from pathlib import Path

import pytest

from lyrics_lab.app.services.library_service import (
    DEFAULT_NOTEPAD_TITLE,
    LibraryFullError,
    LibraryService,
    SongNotFoundError,
    SongValidationError,
    UploadedFile,
)


@pytest.fixture
def audio_dir(tmp_path):
    return tmp_path / "audio"


@pytest.fixture
def service(repository, audio_dir):
    return LibraryService(repository, audio_dir=audio_dir, max_songs=3)


def _text(name: str, body: str = "la la\nla") -> UploadedFile:
    return UploadedFile(name=name, data=body.encode("utf-8"))


def _audio(name: str) -> UploadedFile:
    return UploadedFile(name=name, data=b"ID3\x00fake")


def test_uploaded_file_classification():
    assert _text("song.txt").is_text
    assert UploadedFile("notes", b"", "text/plain").is_text
    assert _audio("song.MP3").is_audio
    assert UploadedFile("clip", b"", "audio/ogg").is_audio
    assert not UploadedFile("cover.png", b"").is_text
    assert not UploadedFile("cover.png", b"").is_audio


def test_import_pairs_text_with_matching_audio(service, audio_dir):
    report = service.import_files([_text("my-song.txt"), _audio("my-song.mp3")])

    assert len(report.created) == 1
    song = report.created[0]
    assert song.title == "my song"
    assert song.audio_filename == "my-song.mp3"
    assert Path(song.audio_path).parent == audio_dir
    assert Path(song.audio_path).name.startswith(song.id)
    assert Path(song.audio_path).read_bytes() == b"ID3\x00fake"
    assert report.changed is True


def test_import_attaches_audio_to_existing_song(service):
    first = service.import_files([_text("ballad.txt")])
    song_id = first.created[0].id

    report = service.import_files([_audio("ballad.wav")])

    assert report.created == []
    assert [song.id for song in report.audio_attached] == [song_id]
    assert service.get_song(song_id).has_audio


def test_import_skips_unmatched_audio_and_unsupported_files(service):
    report = service.import_files([_audio("lonely.mp3"), UploadedFile("cover.png", b"\x89PNG")])

    assert report.created == []
    assert ("cover.png", "unsupported file type") in report.skipped
    assert ("lonely.mp3", "no lyrics file with the same name") in report.skipped
    assert report.changed is False


def test_import_skips_files_that_are_not_utf8(service):
    report = service.import_files([UploadedFile("broken.txt", b"\xff\xfe\xfa")])

    assert report.skipped == [("broken.txt", "not valid UTF-8 text")]


def test_import_strips_byte_order_mark(service):
    report = service.import_files([UploadedFile("bom.txt", "\ufeffhello".encode("utf-8"))])

    assert report.created[0].lyrics == "hello"


def test_import_respects_library_cap(service):
    report = service.import_files([_text(f"song{index}.txt") for index in range(4)])

    assert len(report.created) == 3
    assert report.skipped == [("song3.txt", "library is full")]

    with pytest.raises(LibraryFullError):
        service.import_files([_text("extra.txt")])


def test_import_reads_paths_from_disk(service, tmp_path):
    path = tmp_path / "from-disk.txt"
    path.write_text("words on disk", encoding="utf-8")

    report = service.import_files([str(path)])

    assert report.created[0].title == "from disk"
    assert report.created[0].word_count == 3


def test_create_song_from_notepad(service):
    song = service.create_song("   ", "first line\nsecond line")

    assert song.title == DEFAULT_NOTEPAD_TITLE
    assert song.from_notepad is True
    assert service.get_song(song.id).line_count == 2


def test_create_song_validation(service):
    with pytest.raises(SongValidationError):
        service.create_song("Empty", "   ")

    for index in range(3):
        service.create_song(f"Song {index}", "words")
    assert service.available_slots() == 0
    with pytest.raises(LibraryFullError):
        service.create_song("One too many", "words")


def test_update_song_keeps_title_when_blank(service):
    song = service.create_song("Keep me", "old words")

    updated = service.update_song(song.id, "", "new words here")

    assert updated.title == "Keep me"
    assert updated.lyrics == "new words here"
    assert updated.word_count == 3
    assert updated.date_modified is not None


def test_update_song_errors(service):
    song = service.create_song("Draft", "words")

    with pytest.raises(SongValidationError):
        service.update_song(song.id, "Draft", "  ")
    with pytest.raises(SongNotFoundError):
        service.update_song("missing", "Title", "words")


def test_delete_song_removes_audio(service):
    song = service.import_files([_text("tune.txt"), _audio("tune.mp3")]).created[0]
    audio_path = Path(song.audio_path)
    assert audio_path.exists()

    deleted = service.delete_song(song.id)

    assert deleted.id == song.id
    assert not audio_path.exists()
    with pytest.raises(SongNotFoundError):
        service.get_song(song.id)


def test_delete_all_clears_library(service):
    service.create_song("One", "words")
    service.create_song("Two", "words")

    assert service.delete_all() == 2
    assert service.list_songs() == []


def test_export_text(service):
    song = service.import_files([_text("my-song.txt")]).created[0]

    filename, text = service.export_text(song.id)

    assert filename == "my-song.txt"
    assert text == "my song\n\nla la\nla"
