import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from lyrics_lab.app.data.database import SQLiteSongRepository
from lyrics_lab.core.phonetic_map import PhoneticMap
from lyrics_lab.core.rhyme_analysis import RhymeAnalyzer


CMU_ENTRIES = """\
;;; Small pronouncing dictionary for tests
ABOVE  AH0 B AH1 V
CAT  K AE1 T
CLIMB  K L AY1 M
DOG  D AO1 G
FIND  F AY1 N D
LANTERNS  L AE1 N T ER0 N Z
LOVE  L AH1 V
LOVED  L AH1 V D
MIND  M AY1 N D
READ  R IY1 D
READ(1)  R EH1 D
RHYME  R AY1 M
RUN  R AH1 N
RUNNING  R AH1 N IH0 NG
TIME  T AY1 M
TOO  T UW1
TWO  T UW1
"""


@pytest.fixture
def cmudict_path(tmp_path):
    path = tmp_path / "cmudict.dict"
    path.write_text(CMU_ENTRIES, encoding="utf-8")
    return path


@pytest.fixture
def phonetic_map(cmudict_path):
    """Map over the small test dictionary without the slang vocabulary."""

    return PhoneticMap(dict_path=cmudict_path, include_song_vocabulary=False)


@pytest.fixture
def analyzer(phonetic_map):
    return RhymeAnalyzer(phonetic_map)


@pytest.fixture
def repository(tmp_path):
    repo = SQLiteSongRepository(str(tmp_path / "lyrics.db"), seed_example=False)
    repo.ensure_database()
    yield repo
    repo.close()


class FakeClock:
    """Deterministic clock used to drive telemetry timers in tests."""

    def __init__(self, step: float = 0.01) -> None:
        self._current = 0.0
        self._step = step

    def __call__(self) -> float:
        value = self._current
        self._current += self._step
        return value


@pytest.fixture
def fake_clock():
    return FakeClock()
