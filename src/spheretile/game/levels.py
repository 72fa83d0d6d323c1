"""
Level generation.

A level is a random full tiling of the board of which a subset of pieces is
kept on the board, locked. Lower levels lock more pieces.
"""

import math
import random
from dataclasses import replace
from typing import List, Optional

from tenacity import Retrying, retry_if_exception_type, stop_after_attempt

from spheretile.core.base import LevelGenerationError, SolverExhausted
from spheretile.core.config import Config, LevelConfig
from spheretile.core.registry import register_level_source
from spheretile.game.game_core import PlacedPiece
from spheretile.game.catalog import PuzzleSpec, DEFAULT_SPEC
from spheretile.game.variations import VariationCache
from spheretile.game.solver import BacktrackingSolver


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class LevelGenerator:
    """Generates full solutions and graded starting layouts."""

    def __init__(self, spec: PuzzleSpec = DEFAULT_SPEC,
                 config: Optional[LevelConfig] = None,
                 rng: Optional[random.Random] = None,
                 logger=None):
        self.spec = spec
        self.config = config or LevelConfig()
        self.rng = rng if rng is not None else random.Random(self.config.seed)
        self.logger = logger

        variations = VariationCache(spec, rng=self.rng if self.config.shuffle_variations else None)
        self.solver = BacktrackingSolver(spec, variations, max_nodes=self.config.max_nodes)
        self.last_attempts = 0

    def _attempt_solution(self) -> List[PlacedPiece]:
        piece_ids = self.spec.piece_ids()
        self.rng.shuffle(piece_ids)
        solution = self.solver.solve(piece_ids)
        if solution is None:
            raise SolverExhausted(f"No tiling for piece order {','.join(piece_ids)}")
        return solution

    def generate_full_solution(self) -> List[PlacedPiece]:
        """
        Tile the whole board with every piece of the catalog.

        Each attempt shuffles the piece order; failed or over-budget searches
        are retried with a fresh shuffle up to max_attempts times.

        Raises:
            ValueError: If the catalog cannot cover the grid exactly
            LevelGenerationError: If every attempt failed
        """
        if not self.spec.is_area_consistent():
            raise ValueError(
                f"Catalog covers {self.spec.total_cells()} cells but the grid has {self.spec.grid_cells}"
            )

        retrying = Retrying(
            stop=stop_after_attempt(self.config.max_attempts),
            retry=retry_if_exception_type(SolverExhausted),
            reraise=True,
        )
        try:
            for attempt in retrying:
                with attempt:
                    self.last_attempts = attempt.retry_state.attempt_number
                    solution = self._attempt_solution()
        except SolverExhausted as e:
            raise LevelGenerationError(
                f"No full solution found in {self.config.max_attempts} attempts"
            ) from e

        if self.logger:
            self.logger.log_info(f"Full solution found after {self.last_attempts} attempt(s)")
        return solution

    def locked_count(self, level_number: int) -> int:
        """Pieces kept on the board, falling linearly from max_locked at level 1 to min_locked."""
        cfg = self.config
        progress = (level_number - 1) / (cfg.max_level - 1)
        count = round_half_up(cfg.max_locked - progress * (cfg.max_locked - cfg.min_locked))
        count = max(cfg.min_locked, min(cfg.max_locked, count))
        return min(count, len(self.spec.pieces))

    def generate_level(self, level_number: int) -> List[PlacedPiece]:
        """Starting layout for a level: a random subset of a fresh full solution, locked."""
        solution = self.generate_full_solution()
        self.rng.shuffle(solution)
        return [replace(p, locked=True) for p in solution[:self.locked_count(level_number)]]


@register_level_source("level")
class GeneratedLevelSource:
    """Levels cut from generated full solutions."""

    def __init__(self, config: Config, spec: PuzzleSpec = DEFAULT_SPEC,
                 rng: Optional[random.Random] = None, logger=None):
        self.generator = LevelGenerator(spec, config.level, rng, logger=logger)

    def create_layout(self, level_number: int) -> List[PlacedPiece]:
        return self.generator.generate_level(level_number)


@register_level_source("free")
class FreePlaySource:
    """Sandbox mode: the board starts empty."""

    def __init__(self, config: Config, spec: PuzzleSpec = DEFAULT_SPEC,
                 rng: Optional[random.Random] = None, logger=None):
        self.spec = spec

    def create_layout(self, level_number: int) -> List[PlacedPiece]:
        return []
