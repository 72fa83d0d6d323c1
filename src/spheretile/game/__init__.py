"""
Sphere Tiling Game Package

Geometry, board validation, variation cache, solver and player commands.
Level generation lives in spheretile.game.levels.
"""

from .game_core import (
    Coordinate, Orientation, PieceDef, PieceVariation, PlacedPiece,
    PlacementResult, GhostPreview, ErrorCode, ALL_ORIENTATIONS
)

from .catalog import (
    GRID_ROWS, GRID_COLS, PIECE_DEFINITIONS, PuzzleSpec, DEFAULT_SPEC, load_catalog
)

from .geometry import transform, bounds, normalize, signature, origin_for_anchor

from .board import occupancy_grid, is_valid_placement, placement_error, absolute_cells

from .variations import VariationCache, build_variations, default_variation_cache

from .solver import BacktrackingSolver

from .state import GameState

from .placement import (
    place_piece,
    move_piece,
    rotate_piece,
    flip_piece,
    pickup_piece,
    reset_board,
    load_layout,
    preview_placement,
    hint
)

__all__ = [
    # Core types
    'Coordinate', 'Orientation', 'PieceDef', 'PieceVariation', 'PlacedPiece',
    'PlacementResult', 'GhostPreview', 'ErrorCode', 'ALL_ORIENTATIONS',
    # Catalog
    'GRID_ROWS', 'GRID_COLS', 'PIECE_DEFINITIONS', 'PuzzleSpec', 'DEFAULT_SPEC', 'load_catalog',
    # Geometry
    'transform', 'bounds', 'normalize', 'signature', 'origin_for_anchor',
    # Board
    'occupancy_grid', 'is_valid_placement', 'placement_error', 'absolute_cells',
    # Search
    'VariationCache', 'build_variations', 'default_variation_cache', 'BacktrackingSolver',
    # Play
    'GameState', 'place_piece', 'move_piece', 'rotate_piece', 'flip_piece',
    'pickup_piece', 'reset_board', 'load_layout', 'preview_placement', 'hint',
]
