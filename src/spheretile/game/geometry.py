"""
Coordinate transforms for flat pieces.
The 8 orientations (dihedral group of the square) as 2x2 integer matrices.
"""

from typing import Dict, List, NamedTuple, Sequence, Tuple

import numpy as np

from spheretile.game.game_core import Coordinate, Orientation, ALL_ORIENTATIONS
from spheretile.game.catalog import PuzzleSpec, DEFAULT_SPEC


# Quarter turn: (x, y) -> (-y, x)
ROT90 = np.array([
    [0, -1],
    [1, 0]
], dtype=int)

# Mirror: (x, y) -> (-x, y)
FLIP_X = np.array([
    [-1, 0],
    [0, 1]
], dtype=int)


def generate_orientation_matrices() -> Dict[Tuple[int, bool], np.ndarray]:
    """
    Build the 8 transform matrices.
    The flip is applied before the rotation.
    """
    matrices = {}
    for orientation in ALL_ORIENTATIONS:
        rot = np.linalg.matrix_power(ROT90, orientation.rotation // 90)
        final = rot @ FLIP_X if orientation.is_flipped else rot
        matrices[(orientation.rotation, orientation.is_flipped)] = final
    return matrices


# Precomputed once for the process
ORIENTATION_MATRICES = generate_orientation_matrices()


def get_orientation_matrix(rotation: int, is_flipped: bool) -> np.ndarray:
    """rotation in degrees, any multiple of 90 (taken modulo 360)"""
    return ORIENTATION_MATRICES[(Orientation(rotation, is_flipped).rotation, bool(is_flipped))]


class Bounds(NamedTuple):
    min_x: int
    min_y: int
    width: int
    height: int


def transform_shape(shape: Sequence[Coordinate], rotation: int, is_flipped: bool) -> List[Coordinate]:
    """Apply an orientation to an arbitrary shape, keeping point order."""
    if not shape:
        return []
    matrix = get_orientation_matrix(rotation, is_flipped)
    points = np.array([c.to_tuple() for c in shape], dtype=int)
    moved = points @ matrix.T
    return [Coordinate(int(x), int(y)) for x, y in moved]


def transform(piece_id: str, rotation: int, is_flipped: bool,
              spec: PuzzleSpec = DEFAULT_SPEC) -> List[Coordinate]:
    """
    Transformed initial shape of a piece, not translated to any grid position.

    Unknown piece ids yield an empty list.
    """
    piece = spec.get_piece_def(piece_id)
    if piece is None:
        return []
    return transform_shape(piece.initial_shape, rotation, is_flipped)


def bounds(coords: Sequence[Coordinate]) -> Bounds:
    """Bounding box; empty input is a 1x1 box at the origin"""
    if not coords:
        return Bounds(0, 0, 1, 1)

    min_x = min(c.x for c in coords)
    max_x = max(c.x for c in coords)
    min_y = min(c.y for c in coords)
    max_y = max(c.y for c in coords)

    return Bounds(min_x, min_y, max_x - min_x + 1, max_y - min_y + 1)


def sort_reading_order(coords: Sequence[Coordinate]) -> List[Coordinate]:
    """Top to bottom, left to right"""
    return sorted(coords, key=lambda c: (c.y, c.x))


def normalize(coords: Sequence[Coordinate]) -> List[Coordinate]:
    """
    Sort by (y, x) and shift so the first cell sits at (0, 0).
    """
    if not coords:
        return []
    ordered = sort_reading_order(coords)
    anchor = ordered[0]
    return [Coordinate(c.x - anchor.x, c.y - anchor.y) for c in ordered]


def signature(coords: Sequence[Coordinate]) -> str:
    """Canonical string for a shape, equal for shapes equal up to translation"""
    return ";".join(c.to_key() for c in normalize(coords))


def translate(coords: Sequence[Coordinate], x: int, y: int) -> List[Coordinate]:
    return [Coordinate(c.x + x, c.y + y) for c in coords]


def origin_for_anchor(piece_id: str, rotation: int, is_flipped: bool,
                      anchor_index: int, grid_x: int, grid_y: int,
                      spec: PuzzleSpec = DEFAULT_SPEC) -> Tuple[int, int]:
    """
    Placement origin that puts the grabbed sphere on (grid_x, grid_y).

    anchor_index is the index of the grabbed sphere in the transformed shape;
    out-of-range indexes fall back to the first sphere.
    """
    shape = transform(piece_id, rotation, is_flipped, spec)
    if not shape:
        return grid_x, grid_y
    anchor = shape[anchor_index] if 0 <= anchor_index < len(shape) else shape[0]
    return grid_x - anchor.x, grid_y - anchor.y
