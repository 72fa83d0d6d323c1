import pytest

from spheretile.game.game_core import ErrorCode, PlacedPiece
from spheretile.game.board import absolute_cells
from spheretile.game.state import GameState
from spheretile.game.placement import (
    place_piece, move_piece, rotate_piece, flip_piece, pickup_piece,
    reset_board, load_layout, preview_placement, hint
)


def cells_of(piece):
    return {c.to_tuple() for c in absolute_cells(piece)}


@pytest.fixture
def state():
    return GameState()


@pytest.fixture
def locked_state():
    return load_layout(GameState(), [PlacedPiece("C", 1, 1, locked=True)])


def test_place_piece(state):
    result = place_piece(state, "L", 2, 2, rotation=90)
    assert result.success and result.error is ErrorCode.OK
    assert cells_of(result.placed) == {(2, 2), (2, 3), (1, 2)}
    assert state.placed["L"] == PlacedPiece("L", 2, 2, rotation=90)
    assert "L" not in state.bank_piece_ids()


def test_place_rejections(state):
    place_piece(state, "L", 0, 0)
    assert place_piece(state, "L", 5, 2).error is ErrorCode.PIECE_ALREADY_PLACED
    assert place_piece(state, "Z", 5, 2).error is ErrorCode.PIECE_NOT_FOUND
    assert place_piece(state, "D", 0, 1).error is ErrorCode.COLLISION
    assert place_piece(state, "E", 10, 0).error is ErrorCode.OUT_OF_BOUNDS
    assert list(state.placed) == ["L"]


def test_move_piece_keeps_orientation_by_default(state):
    place_piece(state, "L", 2, 2, rotation=90)
    result = move_piece(state, "L", 6, 1)
    assert result.success
    assert state.placed["L"] == PlacedPiece("L", 6, 1, rotation=90)


def test_failed_move_leaves_piece_in_place(state):
    place_piece(state, "L", 2, 2, rotation=90)
    place_piece(state, "E", 5, 0)
    assert move_piece(state, "L", 0, 4).error is ErrorCode.OUT_OF_BOUNDS
    assert move_piece(state, "L", 6, 0).error is ErrorCode.COLLISION
    assert state.placed["L"] == PlacedPiece("L", 2, 2, rotation=90)


def test_move_with_bad_rotation_keeps_the_piece(state):
    place_piece(state, "L", 2, 2, rotation=90)
    with pytest.raises(ValueError):
        move_piece(state, "L", 3, 3, rotation=45)
    assert state.placed["L"] == PlacedPiece("L", 2, 2, rotation=90)


def test_move_onto_own_cells(state):
    place_piece(state, "D", 0, 0)
    assert move_piece(state, "D", 1, 0).success


def test_rotate_in_place(state):
    place_piece(state, "L", 5, 2)
    result = rotate_piece(state, "L")
    assert result.success
    assert state.placed["L"].rotation == 90
    assert rotate_piece(state, "L", -180).success
    assert state.placed["L"].rotation == 270


def test_rotate_rejected_at_the_edge(state):
    place_piece(state, "L", 0, 0)
    assert rotate_piece(state, "L").error is ErrorCode.OUT_OF_BOUNDS
    assert state.placed["L"].rotation == 0


def test_flip_in_place(state):
    place_piece(state, "L", 5, 2)
    assert flip_piece(state, "L").success
    assert cells_of(state.placed["L"]) == {(5, 2), (4, 2), (5, 3)}
    assert flip_piece(state, "L").success
    assert state.placed["L"].is_flipped is False


def test_pickup_returns_piece_to_bank(state):
    place_piece(state, "L", 0, 0)
    result = pickup_piece(state, "L")
    assert result.success and result.placed.id == "L"
    assert "L" in state.bank_piece_ids()
    assert pickup_piece(state, "L").error is ErrorCode.PIECE_NOT_PLACED


def test_locked_pieces_cannot_be_changed(locked_state):
    for command in (pickup_piece, rotate_piece, flip_piece):
        assert command(locked_state, "C").error is ErrorCode.PIECE_LOCKED
    assert move_piece(locked_state, "C", 5, 0).error is ErrorCode.PIECE_LOCKED
    assert locked_state.locked_ids() == {"C"}


def test_reset_keeps_locked_pieces(locked_state):
    place_piece(locked_state, "L", 5, 0)
    place_piece(locked_state, "E", 5, 3)
    assert reset_board(locked_state) == ["L", "E"]
    assert list(locked_state.placed) == ["C"]


def test_load_layout_replaces_the_board(state):
    place_piece(state, "L", 0, 0)
    load_layout(state, [PlacedPiece("E", 5, 0, locked=True)])
    assert list(state.placed) == ["E"]


@pytest.mark.parametrize("layout", [
    [PlacedPiece("Z", 0, 0)],
    [PlacedPiece("L", 0, 0), PlacedPiece("L", 5, 0)],
    [PlacedPiece("L", 10, 4)],
    [PlacedPiece("L", 0, 0), PlacedPiece("D", 0, 1)],
])
def test_load_layout_rejects_invalid_layouts(state, layout):
    with pytest.raises(ValueError):
        load_layout(state, layout)


def test_preview_ignores_the_dragged_piece(state):
    place_piece(state, "L", 5, 2)
    place_piece(state, "E", 0, 0)
    ghost = preview_placement(state, "L", 5, 2, rotation=90)
    assert ghost.valid
    assert {c.to_tuple() for c in ghost.cells} == {(5, 2), (5, 3), (4, 2)}
    assert not preview_placement(state, "L", 1, 1).valid
    assert not preview_placement(state, "L", 10, 4).valid
    assert not preview_placement(state, "Z", 0, 0).valid
    assert state.placed["L"] == PlacedPiece("L", 5, 2)


def test_hint_completes_the_board(full_solution):
    placed, missing = full_solution[:-1], full_solution[-1]
    state = load_layout(GameState(), placed)
    suggestion = hint(state)
    assert suggestion.id == missing.id
    assert cells_of(suggestion) == cells_of(missing)
    assert place_piece(state, suggestion.id, suggestion.x, suggestion.y,
                       suggestion.rotation, suggestion.is_flipped).success
    assert state.is_complete()
    assert hint(state) is None


def test_hint_on_a_dead_end(small_spec):
    # A vertical domino in the middle column leaves two separate columns
    state = load_layout(GameState(spec=small_spec), [PlacedPiece("D", 1, 0, rotation=90)])
    assert hint(state) is None
