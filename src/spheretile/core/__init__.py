"""
Core modules for spheretile.

This package contains the shared infrastructure:
- Game modes and the exception hierarchy
- Configuration management
- Registry for level sources
"""

from spheretile.core.base import (
    GameMode,
    SpheretileError,
    SolverExhausted,
    SearchBudgetExceeded,
    LevelGenerationError,
    ChallengeServiceError,
)

from spheretile.core.config import Config, BoardConfig, LevelConfig, ChallengeConfig, SessionConfig, load_config, create_default_config, validate_config, build_spec

from spheretile.core.registry import register_level_source, create_level_source, LEVEL_SOURCE_REGISTRY

__all__ = [
    "GameMode",
    "SpheretileError",
    "SolverExhausted",
    "SearchBudgetExceeded",
    "LevelGenerationError",
    "ChallengeServiceError",
    "Config",
    "BoardConfig",
    "LevelConfig",
    "ChallengeConfig",
    "SessionConfig",
    "load_config",
    "create_default_config",
    "validate_config",
    "build_spec",
    "register_level_source",
    "create_level_source",
    "LEVEL_SOURCE_REGISTRY",
]
