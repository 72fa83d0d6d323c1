"""
spheretile: a sphere tiling puzzle engine

Pieces made of spheres must exactly cover a 5x11 grid, each piece used once,
under translation, quarter-turn rotation and mirror flip.

Included:
- Placement geometry and board validation for interactive play
- A backtracking solver producing full tilings
- Graded level generation (a locked subset of a generated tiling)
- Optional challenge seeding through an OpenAI-compatible model

Example Usage:
```python
from spheretile import LevelGenerator, GameState, load_layout, place_piece

generator = LevelGenerator()
state = load_layout(GameState(), generator.generate_level(1))
print(state.bank_piece_ids())
```

Command-line Usage:
```bash
spheretile generate --level 12
spheretile solve --seed 7
spheretile play --level 1
```
"""

from spheretile.core.config import Config, load_config, validate_config
from spheretile.game import (
    GameState, PlacedPiece, BacktrackingSolver, is_valid_placement, occupancy_grid,
    load_layout, place_piece
)
from spheretile.game.levels import LevelGenerator

__version__ = "0.1.0"

__all__ = [
    "Config",
    "load_config",
    "validate_config",
    "GameState",
    "PlacedPiece",
    "BacktrackingSolver",
    "LevelGenerator",
    "is_valid_placement",
    "occupancy_grid",
    "load_layout",
    "place_piece",
]
