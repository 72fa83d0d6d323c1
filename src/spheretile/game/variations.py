"""
Precomputed distinct orientations of every piece.
"""

import random
from typing import Dict, List, Optional

from spheretile.game.game_core import PieceVariation, ALL_ORIENTATIONS
from spheretile.game.catalog import PuzzleSpec, DEFAULT_SPEC
from spheretile.game.geometry import transform, normalize, sort_reading_order


def build_variations(piece_id: str, spec: PuzzleSpec = DEFAULT_SPEC) -> List[PieceVariation]:
    """
    All distinct shapes of a piece under the 8 orientations.

    The first orientation producing a given normalized shape is kept, so
    symmetric pieces yield fewer than 8 variations.
    """
    seen_signatures = set()
    variations = []

    for orientation in ALL_ORIENTATIONS:
        raw = transform(piece_id, orientation.rotation, orientation.is_flipped, spec)
        if not raw:
            continue
        coords = tuple(normalize(raw))
        variation = PieceVariation(
            piece_id=piece_id,
            orientation=orientation,
            coords=coords,
            anchor=sort_reading_order(raw)[0],
        )

        # Dedup
        if variation.signature not in seen_signatures:
            seen_signatures.add(variation.signature)
            variations.append(variation)

    return variations


class VariationCache:
    """
    Lazily built, memoized variation lists keyed by piece id.

    With an rng, each piece's list is shuffled once when first built, which
    varies the solutions the solver reaches first.
    """

    def __init__(self, spec: PuzzleSpec = DEFAULT_SPEC, rng: Optional[random.Random] = None):
        self.spec = spec
        self.rng = rng
        self._variations: Dict[str, List[PieceVariation]] = {}

    def get(self, piece_id: str) -> List[PieceVariation]:
        if piece_id not in self._variations:
            variations = build_variations(piece_id, self.spec)
            if self.rng is not None:
                self.rng.shuffle(variations)
            self._variations[piece_id] = variations
        return self._variations[piece_id]

    def __contains__(self, piece_id: str) -> bool:
        return piece_id in self._variations

    def build_all(self) -> "VariationCache":
        for piece_id in self.spec.piece_ids():
            self.get(piece_id)
        return self

    def counts(self) -> Dict[str, int]:
        return {piece_id: len(self.get(piece_id)) for piece_id in self.spec.piece_ids()}


_DEFAULT_CACHE: Optional[VariationCache] = None


def default_variation_cache() -> VariationCache:
    """Process-wide cache for the default catalog, in canonical order."""
    global _DEFAULT_CACHE
    if _DEFAULT_CACHE is None:
        _DEFAULT_CACHE = VariationCache(DEFAULT_SPEC).build_all()
    return _DEFAULT_CACHE
