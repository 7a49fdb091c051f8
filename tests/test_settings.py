from lyrics_lab.app.settings import AppSettings


def test_defaults_when_environment_is_empty():
    settings = AppSettings.from_env({})

    assert settings == AppSettings()
    assert settings.db_path == "lyrics.db"
    assert settings.server_port == 7860
    assert settings.share is False


def test_reads_prefixed_variables():
    settings = AppSettings.from_env(
        {
            "LYRICS_LAB_DB_PATH": "/data/songs.db",
            "LYRICS_LAB_AUDIO_DIR": "/data/audio",
            "LYRICS_LAB_VOCABULARY": "vocab.json",
            "LYRICS_LAB_LOOKUP_TIMEOUT": "2.5",
            "LYRICS_LAB_PORT": "8080",
            "LYRICS_LAB_SHARE": "Yes",
        }
    )

    assert settings.db_path == "/data/songs.db"
    assert settings.audio_dir == "/data/audio"
    assert settings.vocabulary_path == "vocab.json"
    assert settings.lookup_timeout == 2.5
    assert settings.server_port == 8080
    assert settings.share is True


def test_invalid_numbers_fall_back_to_defaults():
    settings = AppSettings.from_env({"LYRICS_LAB_PORT": "http", "LYRICS_LAB_LOOKUP_TIMEOUT": " "})

    assert settings.server_port == 7860
    assert settings.lookup_timeout == 10.0
