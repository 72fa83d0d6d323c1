"""
Sphere Tiling Game - Core Types
Value types shared by geometry, board, solver and player commands.
"""

from typing import Any, Dict, List, Optional, Tuple
from dataclasses import dataclass, field, replace
from enum import Enum


ROTATIONS = (0, 90, 180, 270)


class ErrorCode(Enum):
    """Error codes"""
    OK = "OK"
    OUT_OF_BOUNDS = "OutOfBounds"
    COLLISION = "Collision"
    PIECE_NOT_FOUND = "PieceNotFound"
    PIECE_ALREADY_PLACED = "PieceAlreadyPlaced"
    PIECE_NOT_PLACED = "PieceNotPlaced"
    PIECE_LOCKED = "PieceLocked"


@dataclass(frozen=True)
class Coordinate:
    """Grid-relative cell (x to the right, y downwards)"""
    x: int
    y: int

    def to_tuple(self) -> Tuple[int, int]:
        return (self.x, self.y)

    def to_key(self) -> str:
        """String key for sets/dicts"""
        return f"{self.x},{self.y}"

    @staticmethod
    def from_list(lst: List[int]) -> 'Coordinate':
        return Coordinate(int(lst[0]), int(lst[1]))


@dataclass(frozen=True)
class Orientation:
    """Rotation (degrees, multiple of 90) plus an optional mirror applied first"""
    rotation: int = 0
    is_flipped: bool = False

    def __post_init__(self):
        if self.rotation % 90 != 0:
            raise ValueError(f"Rotation must be a multiple of 90, got {self.rotation}")
        object.__setattr__(self, "rotation", self.rotation % 360)

    def rotated(self, degrees: int = 90) -> 'Orientation':
        return Orientation(self.rotation + degrees, self.is_flipped)

    def flipped(self) -> 'Orientation':
        return Orientation(self.rotation, not self.is_flipped)


# Flip outer, rotation inner
ALL_ORIENTATIONS = [Orientation(r, f) for f in (False, True) for r in ROTATIONS]


@dataclass(frozen=True)
class PieceDef:
    """Piece definition"""
    id: str
    color: str
    initial_shape: Tuple[Coordinate, ...]

    def __post_init__(self):
        object.__setattr__(self, "initial_shape", tuple(self.initial_shape))

    @property
    def size(self) -> int:
        return len(self.initial_shape)


@dataclass(frozen=True)
class PieceVariation:
    """
    One distinct orientation of a piece.

    coords are normalized so the topmost-leftmost cell sits at (0, 0); anchor is
    that same cell in the raw transformed shape, so a piece placed at
    ``cell - anchor`` covers ``cell + coords``.
    """
    piece_id: str
    orientation: Orientation
    coords: Tuple[Coordinate, ...]
    anchor: Coordinate

    @property
    def signature(self) -> str:
        return ";".join(c.to_key() for c in self.coords)


@dataclass(frozen=True)
class PlacedPiece:
    """A piece on the board"""
    id: str
    x: int
    y: int
    rotation: int = 0
    is_flipped: bool = False
    locked: bool = False

    def __post_init__(self):
        if self.rotation % 90 != 0:
            raise ValueError(f"Rotation must be a multiple of 90, got {self.rotation}")
        object.__setattr__(self, "rotation", self.rotation % 360)

    @property
    def orientation(self) -> Orientation:
        return Orientation(self.rotation, self.is_flipped)

    def with_orientation(self, orientation: Orientation) -> 'PlacedPiece':
        return replace(self, rotation=orientation.rotation, is_flipped=orientation.is_flipped)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "rotation": self.rotation,
            "isFlipped": self.is_flipped,
            "locked": self.locked,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any], locked: Optional[bool] = None) -> 'PlacedPiece':
        return PlacedPiece(
            id=str(data["id"]),
            x=int(data["x"]),
            y=int(data["y"]),
            rotation=int(data.get("rotation", 0)),
            is_flipped=bool(data.get("isFlipped", data.get("is_flipped", False))),
            locked=bool(data.get("locked", False)) if locked is None else locked,
        )


@dataclass
class PlacementResult:
    """Placement result"""
    success: bool
    error: ErrorCode
    placed: Optional[PlacedPiece] = None
    message: str = ""


@dataclass
class GhostPreview:
    """Drag preview: where the piece would land and whether it may drop there"""
    x: int
    y: int
    valid: bool
    cells: List[Coordinate] = field(default_factory=list)
