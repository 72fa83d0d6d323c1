"""
Piece catalog and puzzle definition (grid size plus pieces).

The default catalog is the standard 12-piece set for the 5x11 board
(55 spheres in total).
"""

import json
from pathlib import Path
from typing import Dict, List, Optional
from dataclasses import dataclass, field

import yaml

from spheretile.game.game_core import Coordinate, PieceDef


GRID_ROWS = 5
GRID_COLS = 11


def _shape(*cells) -> List[Coordinate]:
    return [Coordinate(x, y) for x, y in cells]


PIECE_DEFINITIONS: List[PieceDef] = [
    # --- 3 spheres ---
    PieceDef("L", "#ffffff", _shape((0, 0), (1, 0), (0, 1))),            # V3
    # --- 4 spheres ---
    PieceDef("J", "#a855f7", _shape((0, 0), (1, 0), (2, 0), (1, 1))),    # T4
    PieceDef("I", "#ec4899", _shape((0, 0), (1, 0), (2, 0), (0, 1))),    # L4
    PieceDef("K", "#3b82f6", _shape((0, 0), (1, 0), (1, 1), (2, 1))),    # Z4
    # --- 5 spheres ---
    PieceDef("A", "#ef4444", _shape((0, 0), (1, 0), (0, 1), (1, 1), (0, 2))),  # P5
    PieceDef("B", "#f97316", _shape((0, 0), (0, 1), (1, 1), (1, 2), (2, 2))),  # W5
    PieceDef("C", "#eab308", _shape((0, 0), (1, 0), (0, 1), (0, 2), (1, 2))),  # U5
    PieceDef("D", "#22c55e", _shape((0, 0), (1, 0), (2, 0), (3, 0), (0, 1))),  # L5
    PieceDef("E", "#06b6d4", _shape((0, 0), (1, 0), (2, 0), (3, 0), (1, 1))),  # Y5
    PieceDef("F", "#0ea5e9", _shape((0, 0), (1, 0), (2, 0), (0, 1), (0, 2))),  # V5
    PieceDef("G", "#d946ef", _shape((1, 0), (2, 0), (0, 1), (1, 1), (1, 2))),  # F5
    PieceDef("H", "#84cc16", _shape((0, 0), (1, 0), (1, 1), (2, 1), (3, 1))),  # N5
]


@dataclass
class PuzzleSpec:
    """Grid size plus the ordered piece catalog"""
    rows: int
    cols: int
    pieces: List[PieceDef]
    _by_id: Dict[str, PieceDef] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not isinstance(self.rows, int) or self.rows <= 0:
            raise ValueError("rows must be a positive integer")
        if not isinstance(self.cols, int) or self.cols <= 0:
            raise ValueError("cols must be a positive integer")
        self._by_id = {}
        for piece in self.pieces:
            if piece.id in self._by_id:
                raise ValueError(f"Duplicate piece id: {piece.id}")
            self._by_id[piece.id] = piece

    def get_piece_def(self, piece_id: str) -> Optional[PieceDef]:
        return self._by_id.get(piece_id)

    def piece_ids(self) -> List[str]:
        return [p.id for p in self.pieces]

    @property
    def grid_cells(self) -> int:
        return self.rows * self.cols

    def total_cells(self) -> int:
        """Number of spheres across the whole catalog"""
        return sum(p.size for p in self.pieces)

    def is_area_consistent(self) -> bool:
        return self.total_cells() == self.grid_cells


DEFAULT_SPEC = PuzzleSpec(rows=GRID_ROWS, cols=GRID_COLS, pieces=PIECE_DEFINITIONS)


def load_catalog(path: str) -> PuzzleSpec:
    """
    Load a puzzle spec from a JSON or YAML catalog file.

    Expected layout::

        rows: 5
        cols: 11
        pieces:
          - id: L
            color: "#ffffff"
            cells: [[0, 0], [1, 0], [0, 1]]

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is malformed
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Catalog file not found: {path}")

    with open(path, 'r', encoding='utf-8') as f:
        try:
            if path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ValueError(f"Error parsing catalog {path}: {e}")

    if not data or "pieces" not in data:
        raise ValueError(f"Catalog {path} has no pieces")

    try:
        pieces = [
            PieceDef(
                id=str(piece_data["id"]),
                color=str(piece_data.get("color", "")),
                initial_shape=[Coordinate.from_list(c) for c in piece_data["cells"]],
            )
            for piece_data in data["pieces"]
        ]
        return PuzzleSpec(
            rows=int(data.get("rows", GRID_ROWS)),
            cols=int(data.get("cols", GRID_COLS)),
            pieces=pieces,
        )
    except (KeyError, TypeError, IndexError) as e:
        raise ValueError(f"Malformed catalog {path}: {e}")
