import random

import pytest

from spheretile.core.base import LevelGenerationError, SolverExhausted
from spheretile.core.config import Config, LevelConfig
from spheretile.core.registry import LEVEL_SOURCE_REGISTRY, create_level_source
from spheretile.game.game_core import Coordinate, PieceDef
from spheretile.game.catalog import PuzzleSpec, DEFAULT_SPEC
from spheretile.game.board import count_filled, occupancy_grid
from spheretile.game.state import GameState
from spheretile.game.placement import load_layout
from spheretile.game.levels import LevelGenerator, round_half_up


def test_full_solution_covers_the_board(full_solution):
    assert sorted(p.id for p in full_solution) == sorted(DEFAULT_SPEC.piece_ids())
    assert count_filled(occupancy_grid(full_solution)) == 55
    assert load_layout(GameState(), full_solution).is_complete()


@pytest.mark.parametrize("level, expected", [
    (1, 10),
    (50, 7),
    (100, 3),
    (0, 10),
    (-5, 10),
    (1000, 3),
])
def test_locked_count(level, expected):
    assert LevelGenerator(rng=random.Random(0)).locked_count(level) == expected


def test_locked_count_is_capped_by_catalog(small_spec):
    assert LevelGenerator(small_spec, rng=random.Random(0)).locked_count(1) == 3


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(6.49) == 6
    assert round_half_up(-0.5) == 0


def test_generate_level_locks_a_subset_of_a_solution(full_solution, monkeypatch):
    generator = LevelGenerator(rng=random.Random(1))
    monkeypatch.setattr(generator, "generate_full_solution", lambda: list(full_solution))

    layout = generator.generate_level(1)
    assert len(layout) == 10
    assert all(p.locked for p in layout)
    positions = {(p.id, p.x, p.y, p.rotation, p.is_flipped) for p in full_solution}
    assert all((p.id, p.x, p.y, p.rotation, p.is_flipped) in positions for p in layout)

    assert len(generator.generate_level(100)) == 3


def test_failed_attempts_are_retried(small_spec, monkeypatch):
    generator = LevelGenerator(small_spec, LevelConfig(max_attempts=5), rng=random.Random(0))
    calls = []

    def flaky():
        calls.append(1)
        if len(calls) < 3:
            raise SolverExhausted("no tiling")
        return ["tiling"]

    monkeypatch.setattr(generator, "_attempt_solution", flaky)
    assert generator.generate_full_solution() == ["tiling"]
    assert generator.last_attempts == 3


def test_gives_up_after_max_attempts():
    # The L spans two rows and cannot fit on a single-row board
    spec = PuzzleSpec(rows=1, cols=4, pieces=[
        PieceDef("O", "#000000", (Coordinate(0, 0),)),
        PieceDef("L", "#ffffff", (Coordinate(0, 0), Coordinate(1, 0), Coordinate(0, 1))),
    ])
    generator = LevelGenerator(spec, LevelConfig(max_attempts=3), rng=random.Random(0))
    with pytest.raises(LevelGenerationError):
        generator.generate_full_solution()
    assert generator.last_attempts == 3


def test_inconsistent_area_is_rejected():
    spec = PuzzleSpec(rows=2, cols=2, pieces=[PieceDef("O", "#000000", (Coordinate(0, 0),))])
    with pytest.raises(ValueError):
        LevelGenerator(spec, rng=random.Random(0)).generate_full_solution()


def test_seeded_generation_is_reproducible(small_spec):
    first = LevelGenerator(small_spec, rng=random.Random(11)).generate_full_solution()
    second = LevelGenerator(small_spec, rng=random.Random(11)).generate_full_solution()
    assert first == second


def test_level_sources_are_registered(small_spec):
    create_level_source("free", Config(), small_spec)
    assert {"level", "free", "challenge"} <= set(LEVEL_SOURCE_REGISTRY)

    level_source = create_level_source("level", Config(), small_spec, random.Random(2))
    layout = level_source.create_layout(1)
    assert len(layout) == 3 and all(p.locked for p in layout)

    assert create_level_source("free", Config(), small_spec).create_layout(5) == []


def test_unknown_level_source(small_spec):
    with pytest.raises(ValueError):
        create_level_source("daily", Config(), small_spec)
