import random

import pytest

from spheretile.core.config import Config, ChallengeConfig
from spheretile.game.game_core import Coordinate, PieceDef
from spheretile.game.catalog import PuzzleSpec
from spheretile.game.levels import LevelGenerator


@pytest.fixture
def small_spec():
    """2x3 board tiled by a monomino, a domino and a three-sphere L."""
    return PuzzleSpec(rows=2, cols=3, pieces=[
        PieceDef("O", "#000000", (Coordinate(0, 0),)),
        PieceDef("D", "#888888", (Coordinate(0, 0), Coordinate(1, 0))),
        PieceDef("L", "#ffffff", (Coordinate(0, 0), Coordinate(1, 0), Coordinate(0, 1))),
    ])


@pytest.fixture(scope="session")
def full_solution():
    """One full tiling of the default 5x11 board, generated once per run."""
    return LevelGenerator(rng=random.Random(7)).generate_full_solution()


@pytest.fixture
def offline_config(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    return Config(challenge=ChallengeConfig(
        api_key="test-key",
        retry_min_wait=0,
        retry_max_wait=0,
        max_retries=3,
    ))
