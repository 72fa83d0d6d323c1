"""
Game state: the single owner of the pieces currently on the board.
"""

from typing import Dict, List, Optional, Set
from dataclasses import dataclass, field

from spheretile.game.game_core import PlacedPiece, PieceDef
from spheretile.game.catalog import PuzzleSpec, DEFAULT_SPEC
from spheretile.game.board import Board, occupancy_grid, count_filled


@dataclass
class GameState:
    """Game state"""
    spec: PuzzleSpec = field(default_factory=lambda: DEFAULT_SPEC)
    placed: Dict[str, PlacedPiece] = field(default_factory=dict)  # piece_id -> PlacedPiece, in placement order

    def placed_pieces(self) -> List[PlacedPiece]:
        return list(self.placed.values())

    def board(self, exclude: Optional[str] = None) -> Board:
        """Occupancy grid, optionally without one piece (the one being dragged)"""
        return occupancy_grid(
            (p for p in self.placed.values() if p.id != exclude),
            self.spec,
        )

    def bank_piece_ids(self) -> List[str]:
        """Catalog pieces not on the board, in catalog order"""
        return [pid for pid in self.spec.piece_ids() if pid not in self.placed]

    def locked_ids(self) -> Set[str]:
        return {pid for pid, p in self.placed.items() if p.locked}

    def get_piece_def(self, piece_id: str) -> Optional[PieceDef]:
        return self.spec.get_piece_def(piece_id)

    def filled_cells(self) -> int:
        return count_filled(self.board())

    def is_complete(self) -> bool:
        """Every cell covered and the bank empty"""
        return not self.bank_piece_ids() and self.filled_cells() == self.spec.grid_cells


def commit_placement(state: GameState, piece: PlacedPiece):
    """Put a piece on the board (no validation)"""
    state.placed[piece.id] = piece


def uncommit_placement(state: GameState, piece_id: str) -> Optional[PlacedPiece]:
    """Take a piece off the board, returning it"""
    return state.placed.pop(piece_id, None)
