"""Environment driven settings for the Lyrics Lab application."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(value: Optional[str]) -> bool:
    if not value:
        return False
    return str(value).strip().lower() in _TRUTHY


def _env_number(value: Optional[str], default: float, cast=float):
    if value is None or not str(value).strip():
        return default
    try:
        return cast(str(value).strip())
    except ValueError:
        return default


@dataclass(frozen=True)
class AppSettings:
    db_path: str = "lyrics.db"
    audio_dir: str = "audio"
    vocabulary_path: Optional[str] = None
    lookup_timeout: float = 10.0
    server_port: int = 7860
    share: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AppSettings":
        """Read ``LYRICS_LAB_*`` variables, keeping defaults for anything unset or invalid."""

        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            db_path=env.get("LYRICS_LAB_DB_PATH") or defaults.db_path,
            audio_dir=env.get("LYRICS_LAB_AUDIO_DIR") or defaults.audio_dir,
            vocabulary_path=env.get("LYRICS_LAB_VOCABULARY") or None,
            lookup_timeout=_env_number(
                env.get("LYRICS_LAB_LOOKUP_TIMEOUT"), defaults.lookup_timeout
            ),
            server_port=_env_number(env.get("LYRICS_LAB_PORT"), defaults.server_port, int),
            share=_env_flag(env.get("LYRICS_LAB_SHARE")),
        )


__all__ = ["AppSettings"]
