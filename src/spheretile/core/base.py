"""
Base definitions shared across the spheretile package.

This module defines the game modes and the exception hierarchy used by the
solver, the level generator and the challenge service.
"""

from enum import Enum


class GameMode(Enum):
    """How the starting layout of a board is produced."""
    LEVEL: str = "level"
    FREE: str = "free"
    CHALLENGE: str = "challenge"


class SpheretileError(Exception):
    """Base class for all spheretile errors."""


class SolverExhausted(SpheretileError):
    """The solver found no tiling for the given piece order."""


class SearchBudgetExceeded(SolverExhausted):
    """The solver visited more nodes than its budget allows."""

    def __init__(self, max_nodes: int):
        super().__init__(f"Search budget of {max_nodes} nodes exceeded")
        self.max_nodes = max_nodes


class LevelGenerationError(SpheretileError):
    """No full solution could be generated within the retry budget."""


class ChallengeServiceError(SpheretileError):
    """The generative service returned nothing usable."""
