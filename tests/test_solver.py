import pytest

from spheretile.core.base import SearchBudgetExceeded
from spheretile.game.game_core import PlacedPiece
from spheretile.game.catalog import DEFAULT_SPEC
from spheretile.game.board import absolute_cells, count_filled, occupancy_grid
from spheretile.game.solver import BacktrackingSolver
from spheretile.game.state import GameState
from spheretile.game.placement import load_layout


def covered(pieces, spec):
    return [c.to_tuple() for p in pieces for c in absolute_cells(p, spec)]


def test_small_board_is_tiled(small_spec):
    solution = BacktrackingSolver(small_spec).solve(["L", "D", "O"])
    assert [p.id for p in solution] == ["L", "D", "O"]
    cells = covered(solution, small_spec)
    assert len(cells) == len(set(cells)) == 6
    assert all(not p.locked for p in solution)


def test_solution_replays_through_placement_rules(small_spec):
    solution = BacktrackingSolver(small_spec).solve(["O", "L", "D"], any_order=True)
    state = load_layout(GameState(spec=small_spec), solution)
    assert state.is_complete()


def test_fixed_pieces_are_left_alone(small_spec):
    fixed = [PlacedPiece("L", 0, 0)]
    solution = BacktrackingSolver(small_spec).solve(["D", "O"], fixed=fixed)
    assert set(covered(solution, small_spec)) == {(2, 0), (1, 1), (2, 1)}


def test_overlapping_fixed_pieces_are_rejected(small_spec):
    fixed = [PlacedPiece("L", 0, 0), PlacedPiece("O", 1, 0)]
    with pytest.raises(ValueError):
        BacktrackingSolver(small_spec).solve(["D"], fixed=fixed)


def test_head_of_list_order_can_fail_where_any_order_succeeds(small_spec):
    solver = BacktrackingSolver(small_spec)
    # O takes (0, 0), after which D and L cannot both fit
    assert solver.solve(["O", "D", "L"]) is None
    solution = solver.solve(["O", "D", "L"], any_order=True)
    assert solution is not None
    assert len(set(covered(solution, small_spec))) == 6


def test_full_grid_with_pieces_left_is_a_failure(small_spec):
    fixed = [PlacedPiece("L", 0, 0), PlacedPiece("D", 2, 0, rotation=90), PlacedPiece("O", 1, 1)]
    assert BacktrackingSolver(small_spec).solve(["O"], fixed=fixed) is None


def test_nothing_to_place_is_solved(small_spec):
    assert BacktrackingSolver(small_spec).solve([]) == []


def test_search_budget():
    solver = BacktrackingSolver(DEFAULT_SPEC, max_nodes=1)
    with pytest.raises(SearchBudgetExceeded) as exc_info:
        solver.solve(DEFAULT_SPEC.piece_ids())
    assert exc_info.value.max_nodes == 1


def test_invalid_budget():
    with pytest.raises(ValueError):
        BacktrackingSolver(DEFAULT_SPEC, max_nodes=0)


def test_default_board_any_order():
    solver = BacktrackingSolver(DEFAULT_SPEC)
    solution = solver.solve(DEFAULT_SPEC.piece_ids(), any_order=True)
    assert sorted(p.id for p in solution) == sorted(DEFAULT_SPEC.piece_ids())
    assert count_filled(occupancy_grid(solution)) == 55
    assert solver.nodes_visited > 0


def test_completes_a_partial_board(full_solution):
    fixed, missing = full_solution[:-2], full_solution[-2:]
    solution = BacktrackingSolver(DEFAULT_SPEC).solve([p.id for p in missing], fixed=fixed, any_order=True)
    assert set(covered(solution, DEFAULT_SPEC)) == set(covered(missing, DEFAULT_SPEC))
