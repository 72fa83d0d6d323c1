"""
Board occupancy and placement validation.

The occupancy grid is always rebuilt from the list of placed pieces; it is
never a source of truth on its own.
"""

from typing import Iterable, List, Optional

from spheretile.game.game_core import Coordinate, ErrorCode, PlacedPiece
from spheretile.game.catalog import PuzzleSpec, DEFAULT_SPEC
from spheretile.game.geometry import transform, translate


Board = List[List[Optional[str]]]


def empty_board(spec: PuzzleSpec = DEFAULT_SPEC) -> Board:
    return [[None] * spec.cols for _ in range(spec.rows)]


def within_grid(cell: Coordinate, spec: PuzzleSpec = DEFAULT_SPEC) -> bool:
    return 0 <= cell.x < spec.cols and 0 <= cell.y < spec.rows


def absolute_cells(piece: PlacedPiece, spec: PuzzleSpec = DEFAULT_SPEC) -> List[Coordinate]:
    """Grid cells covered by a placed piece"""
    shape = transform(piece.id, piece.rotation, piece.is_flipped, spec)
    return translate(shape, piece.x, piece.y)


def occupancy_grid(placed_pieces: Iterable[PlacedPiece], spec: PuzzleSpec = DEFAULT_SPEC) -> Board:
    """
    rows x cols grid, each cell None or the id of the piece covering it.
    Cells outside the grid are skipped.
    """
    grid = empty_board(spec)
    for piece in placed_pieces:
        for c in absolute_cells(piece, spec):
            if within_grid(c, spec):
                grid[c.y][c.x] = piece.id
    return grid


def placement_error(piece_id: str, x: int, y: int, rotation: int, is_flipped: bool,
                    board: Optional[Board], spec: PuzzleSpec = DEFAULT_SPEC) -> ErrorCode:
    """
    Why a placement is rejected, or ErrorCode.OK.
    Bounds are checked for every cell before any collision, so a piece that
    both overhangs and overlaps reports OUT_OF_BOUNDS.
    With board=None only the grid bounds are checked.
    """
    cells = translate(transform(piece_id, rotation, is_flipped, spec), x, y)
    if not all(within_grid(c, spec) for c in cells):
        return ErrorCode.OUT_OF_BOUNDS
    if board is not None and any(board[c.y][c.x] is not None for c in cells):
        return ErrorCode.COLLISION
    return ErrorCode.OK


def is_valid_placement(piece_id: str, x: int, y: int, rotation: int, is_flipped: bool,
                       board: Optional[Board], spec: PuzzleSpec = DEFAULT_SPEC) -> bool:
    return placement_error(piece_id, x, y, rotation, is_flipped, board, spec) is ErrorCode.OK


def count_filled(board: Board) -> int:
    return sum(1 for row in board for cell in row if cell is not None)
