"""
Player commands on a game state.

Every command revalidates against the current board before committing.
"""

from typing import Iterable, List, Optional

from spheretile.core.base import SearchBudgetExceeded
from spheretile.game.game_core import (
    ErrorCode, GhostPreview, Orientation, PlacedPiece, PlacementResult
)
from spheretile.game.state import GameState, commit_placement, uncommit_placement
from spheretile.game.board import absolute_cells, placement_error
from spheretile.game.solver import BacktrackingSolver


_REJECTION_MESSAGES = {
    ErrorCode.OUT_OF_BOUNDS: "Piece exceeds board boundaries",
    ErrorCode.COLLISION: "Piece overlaps another piece",
}


def _rejected(error: ErrorCode, message: str = "") -> PlacementResult:
    return PlacementResult(
        success=False,
        error=error,
        message=message or _REJECTION_MESSAGES.get(error, error.value)
    )


def _check_movable(state: GameState, piece_id: str) -> Optional[PlacementResult]:
    """Rejection for a piece that is not on the board or is locked"""
    current = state.placed.get(piece_id)
    if current is None:
        return _rejected(ErrorCode.PIECE_NOT_PLACED, f"Piece {piece_id} is not placed")
    if current.locked:
        return _rejected(ErrorCode.PIECE_LOCKED, f"Piece {piece_id} is locked")
    return None


def place_piece(
    state: GameState,
    piece_id: str,
    x: int,
    y: int,
    rotation: int = 0,
    is_flipped: bool = False
) -> PlacementResult:
    """
    Place a piece from the bank

    Args:
        state: Game state
        piece_id: Piece ID
        x, y: Grid origin the transformed shape is translated by
        rotation: Rotation in degrees (multiple of 90)
        is_flipped: Mirror before rotating

    Returns:
        PlacementResult
    """
    if not state.get_piece_def(piece_id):
        return _rejected(ErrorCode.PIECE_NOT_FOUND, f"Piece {piece_id} not found")

    if piece_id in state.placed:
        return _rejected(ErrorCode.PIECE_ALREADY_PLACED, f"Piece {piece_id} is already placed")

    error = placement_error(piece_id, x, y, rotation, is_flipped, state.board(), state.spec)
    if error is not ErrorCode.OK:
        return _rejected(error)

    placed = PlacedPiece(id=piece_id, x=x, y=y, rotation=rotation, is_flipped=is_flipped)
    commit_placement(state, placed)

    return PlacementResult(
        success=True,
        error=ErrorCode.OK,
        placed=placed,
        message="Piece placed successfully"
    )


def move_piece(
    state: GameState,
    piece_id: str,
    x: int,
    y: int,
    rotation: Optional[int] = None,
    is_flipped: Optional[bool] = None
) -> PlacementResult:
    """
    Move a placed piece; orientation defaults to the current one.
    On failure the piece stays where it was.
    """
    rejection = _check_movable(state, piece_id)
    if rejection:
        return rejection

    prev_placement = state.placed[piece_id]
    if rotation is None:
        rotation = prev_placement.rotation
    if is_flipped is None:
        is_flipped = prev_placement.is_flipped
    # Raises ValueError for a bad rotation while the piece is still on the board
    Orientation(rotation, is_flipped)

    uncommit_placement(state, piece_id)
    result = place_piece(state, piece_id, x, y, rotation, is_flipped)

    if not result.success:
        commit_placement(state, prev_placement)

    return result


def _reorient_in_place(state: GameState, piece_id: str, orientation: Orientation) -> PlacementResult:
    current = state.placed[piece_id]
    error = placement_error(
        piece_id, current.x, current.y, orientation.rotation, orientation.is_flipped,
        state.board(exclude=piece_id), state.spec
    )
    if error is not ErrorCode.OK:
        return _rejected(error)

    placed = current.with_orientation(orientation)
    commit_placement(state, placed)
    return PlacementResult(success=True, error=ErrorCode.OK, placed=placed, message="Piece reoriented")


def rotate_piece(state: GameState, piece_id: str, degrees: int = 90) -> PlacementResult:
    """Rotate a placed piece around its origin, keeping it where it is."""
    rejection = _check_movable(state, piece_id)
    if rejection:
        return rejection
    return _reorient_in_place(state, piece_id, state.placed[piece_id].orientation.rotated(degrees))


def flip_piece(state: GameState, piece_id: str) -> PlacementResult:
    """Mirror a placed piece in place."""
    rejection = _check_movable(state, piece_id)
    if rejection:
        return rejection
    return _reorient_in_place(state, piece_id, state.placed[piece_id].orientation.flipped())


def pickup_piece(state: GameState, piece_id: str) -> PlacementResult:
    """Return a placed piece to the bank"""
    rejection = _check_movable(state, piece_id)
    if rejection:
        return rejection

    placed = uncommit_placement(state, piece_id)

    return PlacementResult(
        success=True,
        error=ErrorCode.OK,
        placed=placed,
        message=f"Piece {piece_id} picked up"
    )


def reset_board(state: GameState) -> List[str]:
    """Return every unlocked piece to the bank; locked pieces stay."""
    removed = [pid for pid, p in state.placed.items() if not p.locked]
    for piece_id in removed:
        uncommit_placement(state, piece_id)
    return removed


def load_layout(state: GameState, pieces: Iterable[PlacedPiece]) -> GameState:
    """
    Replace the board with a starting layout.

    Raises:
        ValueError: If a piece is unknown, repeated, out of bounds or overlapping
    """
    state.placed.clear()
    for piece in pieces:
        if not state.get_piece_def(piece.id):
            raise ValueError(f"Piece {piece.id} not found")
        if piece.id in state.placed:
            raise ValueError(f"Piece {piece.id} appears twice in the layout")
        error = placement_error(
            piece.id, piece.x, piece.y, piece.rotation, piece.is_flipped, state.board(), state.spec
        )
        if error is not ErrorCode.OK:
            raise ValueError(f"Piece {piece.id} cannot be placed: {error.value}")
        commit_placement(state, piece)
    return state


def preview_placement(
    state: GameState,
    piece_id: str,
    x: int,
    y: int,
    rotation: int = 0,
    is_flipped: bool = False
) -> GhostPreview:
    """Where a dragged piece would land; the dragged piece itself is ignored."""
    if not state.get_piece_def(piece_id):
        return GhostPreview(x=x, y=y, valid=False)
    ghost = PlacedPiece(id=piece_id, x=x, y=y, rotation=rotation, is_flipped=is_flipped)
    error = placement_error(
        piece_id, x, y, rotation, is_flipped, state.board(exclude=piece_id), state.spec
    )
    return GhostPreview(x=x, y=y, valid=error is ErrorCode.OK, cells=absolute_cells(ghost, state.spec))


def hint(state: GameState, solver: Optional[BacktrackingSolver] = None) -> Optional[PlacedPiece]:
    """
    Next placement of a tiling that completes the current board.

    Returns None when the board is complete, when the pieces already placed
    admit no completion, or when the solver runs out of budget.
    """
    bank = state.bank_piece_ids()
    if not bank:
        return None
    if solver is None:
        solver = BacktrackingSolver(state.spec, max_nodes=200000)

    try:
        solution = solver.solve(bank, fixed=state.placed_pieces(), any_order=True)
    except SearchBudgetExceeded:
        return None
    return solution[0] if solution else None
