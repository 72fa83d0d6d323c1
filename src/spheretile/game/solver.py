"""
Backtracking solver for exact tilings of the board.

The piece at the head of the remaining list always covers the first empty
cell in reading order, anchored by its topmost-leftmost sphere. The search is
deterministic for a fixed piece order and fixed variation lists.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from spheretile.core.base import SearchBudgetExceeded
from spheretile.game.game_core import PieceVariation, PlacedPiece
from spheretile.game.catalog import PuzzleSpec, DEFAULT_SPEC
from spheretile.game.board import absolute_cells, within_grid
from spheretile.game.variations import VariationCache, default_variation_cache


@dataclass(frozen=True)
class CompiledVariation:
    """A variation as a bitmask relative to its anchor cell"""
    variation: PieceVariation
    mask: int
    min_dx: int
    max_dx: int
    max_dy: int


class BacktrackingSolver:
    """
    Exact-cover style search over a private occupancy bitmask.

    Bit ``y * cols + x`` of the mask is set when cell (x, y) is occupied. The
    mask is an int passed down the recursion, so backtracking needs no explicit
    unmarking.
    """

    def __init__(self, spec: PuzzleSpec = DEFAULT_SPEC,
                 variations: Optional[VariationCache] = None,
                 max_nodes: Optional[int] = None):
        if variations is None:
            variations = default_variation_cache() if spec is DEFAULT_SPEC else VariationCache(spec)
        if max_nodes is not None and max_nodes <= 0:
            raise ValueError("max_nodes must be a positive integer")
        self.spec = spec
        self.variations = variations
        self.max_nodes = max_nodes
        self.nodes_visited = 0
        self._full_mask = (1 << spec.grid_cells) - 1
        self._compiled: Dict[str, List[CompiledVariation]] = {}

    def compile(self, piece_id: str) -> List[CompiledVariation]:
        """Bitmask form of a piece's variations, skipping shapes larger than the grid."""
        if piece_id not in self._compiled:
            cols, rows = self.spec.cols, self.spec.rows
            compiled = []
            for v in self.variations.get(piece_id):
                min_dx = min(c.x for c in v.coords)
                max_dx = max(c.x for c in v.coords)
                max_dy = max(c.y for c in v.coords)
                if max_dx - min_dx >= cols or max_dy >= rows:
                    continue
                mask = 0
                for c in v.coords:
                    mask |= 1 << (c.y * cols + c.x)
                compiled.append(CompiledVariation(v, mask, min_dx, max_dx, max_dy))
            self._compiled[piece_id] = compiled
        return self._compiled[piece_id]

    def occupancy_mask(self, pieces: Sequence[PlacedPiece]) -> int:
        """Bitmask of the cells covered by already placed pieces."""
        grid = 0
        for piece in pieces:
            for c in absolute_cells(piece, self.spec):
                if not within_grid(c, self.spec):
                    raise ValueError(f"Piece {piece.id} lies outside the grid at {c.to_tuple()}")
                bit = 1 << (c.y * self.spec.cols + c.x)
                if grid & bit:
                    raise ValueError(f"Piece {piece.id} overlaps another piece at {c.to_tuple()}")
                grid |= bit
        return grid

    def solve(self, piece_ids: Sequence[str],
              fixed: Sequence[PlacedPiece] = (),
              any_order: bool = False) -> Optional[List[PlacedPiece]]:
        """
        Place every piece of ``piece_ids`` on the grid.

        Args:
            piece_ids: Pieces to place; the order drives the search
            fixed: Pieces already on the board, left untouched
            any_order: Let any remaining piece, tried in list order, cover the
                first empty cell instead of only the head of the list. The
                search then finds a tiling whenever one exists.

        Returns:
            One placement per piece id, in search order, or None if no tiling
            exists for this order

        Raises:
            SearchBudgetExceeded: If more than max_nodes nodes were visited
            ValueError: If the fixed pieces are out of bounds or overlap
        """
        grid = self.occupancy_mask(fixed)
        piece_ids = list(piece_ids)
        compiled = [self.compile(piece_id) for piece_id in piece_ids]
        self.nodes_visited = 0
        return self._solve_recursively(grid, compiled, list(range(len(compiled))), any_order)

    def _solve_recursively(self, grid: int, compiled: List[List[CompiledVariation]],
                           remaining: List[int], any_order: bool) -> Optional[List[PlacedPiece]]:
        self.nodes_visited += 1
        if self.max_nodes is not None and self.nodes_visited > self.max_nodes:
            raise SearchBudgetExceeded(self.max_nodes)

        if not remaining:
            return []

        # First empty cell in reading order
        free = ~grid & self._full_mask
        if not free:
            return None
        position = (free & -free).bit_length() - 1
        cell_y, cell_x = divmod(position, self.spec.cols)

        candidates = range(len(remaining)) if any_order else range(1)
        for slot in candidates:
            rest_remaining = remaining[:slot] + remaining[slot + 1:]
            for cv in compiled[remaining[slot]]:
                if (cell_x + cv.min_dx < 0 or cell_x + cv.max_dx >= self.spec.cols
                        or cell_y + cv.max_dy >= self.spec.rows):
                    continue
                cells = cv.mask << position
                if grid & cells:
                    continue

                rest = self._solve_recursively(grid | cells, compiled, rest_remaining, any_order)
                if rest is not None:
                    v = cv.variation
                    placed = PlacedPiece(
                        id=v.piece_id,
                        x=cell_x - v.anchor.x,
                        y=cell_y - v.anchor.y,
                        rotation=v.orientation.rotation,
                        is_flipped=v.orientation.is_flipped,
                    )
                    return [placed] + rest

        return None
