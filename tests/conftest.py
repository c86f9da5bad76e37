import random
from dataclasses import replace

import pytest

from career.config import build_default_config
from career.progress import new_game_state
from npcs.lifecycle import seed_roster


class ScriptedRandom(random.Random):
    """random() returns the scripted values first, then falls back to the seeded stream."""

    def __init__(self, values=(), seed=1234):
        super().__init__(seed)
        self._values = list(values)

    def random(self):
        if self._values:
            return self._values.pop(0)
        return super().random()

    # Keeps randint/randrange on getrandbits so they never eat scripted values.
    def getrandbits(self, k):
        return super().getrandbits(k)


class TokenSequence:
    def __init__(self, prefix="tok"):
        self.prefix = prefix
        self.issued = 0

    def __call__(self):
        self.issued += 1
        return f"{self.prefix}-{self.issued}"


@pytest.fixture
def cfg():
    return build_default_config()


@pytest.fixture
def make_state(cfg):
    def _make(**overrides):
        state = new_game_state(
            profile_id="p1",
            player_name="Alex Carter",
            country="US",
            branch="US_ARMY",
            start_age=18,
            now_ms=0,
            cfg=cfg,
        )
        return replace(state, **overrides) if overrides else state

    return _make


@pytest.fixture
def roster():
    return seed_roster("US_ARMY")


@pytest.fixture
def tokens():
    return TokenSequence()


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "career.sqlite3")
