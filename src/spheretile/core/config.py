"""
Configuration management for spheretile.

This module handles loading and validation of configuration files,
environment variables, and provides typed configuration objects.
"""

import os
import yaml
from typing import Any, Dict, Optional, List
from dataclasses import dataclass, field, asdict
from pathlib import Path

from spheretile.game.catalog import PuzzleSpec, DEFAULT_SPEC, load_catalog


@dataclass
class BoardConfig:
    """Grid size and piece catalog."""
    rows: int = 5
    cols: int = 11
    catalog_path: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.rows, int) or self.rows <= 0:
            raise ValueError("rows must be a positive integer")
        if not isinstance(self.cols, int) or self.cols <= 0:
            raise ValueError("cols must be a positive integer")


@dataclass
class LevelConfig:
    """Configuration for level generation."""
    max_locked: int = 10
    min_locked: int = 3
    max_level: int = 100
    # Most shuffled orders are dead ends; a small node budget drops them early
    max_attempts: int = 20000
    max_nodes: int = 5000
    shuffle_variations: bool = True
    seed: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.min_locked, int) or self.min_locked < 0:
            raise ValueError("min_locked must be a non-negative integer")
        if not isinstance(self.max_locked, int) or self.max_locked < self.min_locked:
            raise ValueError("max_locked must be an integer >= min_locked")
        if not isinstance(self.max_level, int) or self.max_level < 2:
            raise ValueError("max_level must be an integer >= 2")
        if not isinstance(self.max_attempts, int) or self.max_attempts <= 0:
            raise ValueError("max_attempts must be a positive integer")
        if not isinstance(self.max_nodes, int) or self.max_nodes <= 0:
            raise ValueError("max_nodes must be a positive integer")


@dataclass
class ChallengeConfig:
    """Configuration for the generative challenge service."""
    model_name: str = "gpt-4o-mini"
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    temperature: float = 1.0
    max_tokens: int = 500
    timeout: float = 30.0
    max_retries: int = 3
    retry_min_wait: float = 1.0
    retry_max_wait: float = 10.0
    num_pieces: int = 3

    def __post_init__(self):
        # Load from environment variables if not provided
        if self.api_key is None:
            self.api_key = os.getenv("OPENAI_API_KEY")
        if self.base_url is None:
            self.base_url = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
        if not isinstance(self.max_retries, int) or self.max_retries <= 0:
            raise ValueError("max_retries must be a positive integer")
        if not isinstance(self.num_pieces, int) or self.num_pieces <= 0:
            raise ValueError("num_pieces must be a positive integer")
        if self.retry_min_wait < 0 or self.retry_max_wait < self.retry_min_wait:
            raise ValueError("retry waits must satisfy 0 <= retry_min_wait <= retry_max_wait")


@dataclass
class SessionConfig:
    """Configuration for session logs and benchmark results."""
    session_name: str = "spheretile"
    log_dir: str = "logs"
    results_csv_path: str = "benchmark_results.csv"


@dataclass
class Config:
    """Main configuration object."""
    board: BoardConfig = field(default_factory=BoardConfig)
    level: LevelConfig = field(default_factory=LevelConfig)
    challenge: ChallengeConfig = field(default_factory=ChallengeConfig)
    session: SessionConfig = field(default_factory=SessionConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Create Config from dictionary."""
        return cls(
            board=BoardConfig(**(data.get("board") or {})),
            level=LevelConfig(**(data.get("level") or {})),
            challenge=ChallengeConfig(**(data.get("challenge") or {})),
            session=SessionConfig(**(data.get("session") or {})),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert Config to dictionary."""
        result = asdict(self)
        # Never write secrets back to disk
        result["challenge"]["api_key"] = None
        return result


def load_config(config_path: str) -> Config:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Config object

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is malformed
        ValueError: If fields are invalid
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Error parsing YAML config: {e}")

    if not data:
        raise ValueError("Configuration file is empty")

    try:
        return Config.from_dict(data)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Error creating config from data: {e}")


def create_default_config(output_path: str = "config.yaml") -> Config:
    """
    Create a default configuration file.

    Args:
        output_path: Path where to save the default config

    Returns:
        Default Config object
    """
    config = Config()

    with open(output_path, 'w', encoding='utf-8') as f:
        yaml.dump(config.to_dict(), f, default_flow_style=False, indent=2)

    return config


def build_spec(config: Config) -> PuzzleSpec:
    """Puzzle spec described by the board section."""
    if config.board.catalog_path:
        return load_catalog(config.board.catalog_path)
    if (config.board.rows, config.board.cols) == (DEFAULT_SPEC.rows, DEFAULT_SPEC.cols):
        return DEFAULT_SPEC
    return PuzzleSpec(rows=config.board.rows, cols=config.board.cols, pieces=DEFAULT_SPEC.pieces)


def validate_config(config: Config) -> List[str]:
    """
    Validate configuration and return list of warnings/errors.

    Args:
        config: Configuration to validate

    Returns:
        List of validation messages
    """
    issues = []

    if config.board.catalog_path and not os.path.exists(config.board.catalog_path):
        issues.append(f"ERROR: Catalog file does not exist: {config.board.catalog_path}")
    else:
        try:
            spec = build_spec(config)
            if not spec.is_area_consistent():
                issues.append(
                    f"ERROR: Catalog covers {spec.total_cells()} cells but the grid has {spec.grid_cells}"
                )
            if config.level.max_locked > len(spec.pieces):
                issues.append(
                    f"WARNING: max_locked ({config.level.max_locked}) exceeds the catalog size ({len(spec.pieces)})"
                )
        except ValueError as e:
            issues.append(f"ERROR: Invalid catalog: {e}")

    if not config.challenge.api_key:
        issues.append("WARNING: No API key found for the challenge service. Set OPENAI_API_KEY environment variable.")

    if config.challenge.temperature < 0 or config.challenge.temperature > 2:
        issues.append("WARNING: Challenge temperature should be between 0 and 2")

    if config.challenge.max_tokens <= 0:
        issues.append("ERROR: Challenge max_tokens must be positive")

    if config.level.max_attempts < 100:
        issues.append("WARNING: max_attempts below 100 makes level generation likely to fail")

    return issues
