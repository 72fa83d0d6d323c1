"""
Interactive text session - play the puzzle from a terminal.
"""

import random
from typing import Callable, List, Optional

from spheretile.core.base import GameMode, LevelGenerationError
from spheretile.core.config import Config
from spheretile.core.registry import create_level_source
from spheretile.game.catalog import PuzzleSpec, DEFAULT_SPEC
from spheretile.game.geometry import transform, bounds
from spheretile.game.state import GameState
from spheretile.game.placement import (
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
from spheretile.utils.display import LiveLogger, render_board
from spheretile.utils.logger import SessionLogger


HELP_TEXT = """
Available commands:
  help                              - Show this help
  view                              - Show the board
  bank                              - List pieces not on the board
  piece <id>                        - Show a piece's shape
  place <id> <x> <y> [rot] [f]      - Place a piece (rot in degrees, f to flip)
  move <id> <x> <y> [rot] [f]       - Move a placed piece
  preview <id> <x> <y> [rot] [f]    - Check a placement without committing
  rotate <id> [deg]                 - Rotate a placed piece in place (default 90)
  flip <id>                         - Mirror a placed piece in place
  pickup <id>                       - Return a piece to the bank
  hint                              - Suggest the next placement
  reset                             - Clear the unlocked pieces
  next / prev / level <n>           - Change level
  mode <level|free|challenge>       - Change game mode
  quit/exit                         - Exit the game
"""


class PlaySession:
    """Sphere tiling game main class"""

    def __init__(self, config: Config, spec: PuzzleSpec = DEFAULT_SPEC,
                 rng: Optional[random.Random] = None,
                 session_logger: Optional[SessionLogger] = None,
                 output: Callable[[str], None] = print):
        self.config = config
        self.spec = spec
        self.rng = rng if rng is not None else random.Random(config.level.seed)
        self.session_logger = session_logger
        self.output = output
        self.logger = LiveLogger(verbose=False)
        self.state = GameState(spec=spec)
        self.level = 1
        self.mode = GameMode.LEVEL
        self.step = 0
        self._sources = {}

    def _source(self, mode: GameMode):
        if mode not in self._sources:
            self._sources[mode] = create_level_source(
                mode.value, self.config, self.spec, self.rng, logger=self.logger
            )
        return self._sources[mode]

    def _log(self, data: dict):
        self.step += 1
        if self.session_logger:
            self.session_logger.log_event(self.step, data)

    def load_level(self, level: Optional[int] = None, mode: Optional[GameMode] = None) -> bool:
        """Load a level"""
        if level is not None:
            self.level = max(1, min(self.config.level.max_level, level))
        if mode is not None:
            self.mode = mode

        try:
            layout = self._source(self.mode).create_layout(self.level)
        except LevelGenerationError as e:
            self.output(f"✗ Failed to generate level {self.level}: {e}")
            self._log({"event": "error", "error": str(e)})
            return False

        load_layout(self.state, layout)
        self._log({"event": "level", "level": self.level, "mode": self.mode.value,
                   "layout": [p.to_dict() for p in layout]})
        self.output(f"\n=== Level {self.level} ({self.mode.value}) ===")
        self.output(f"Locked pieces: {len(self.state.locked_ids())}, bank: {len(self.state.bank_piece_ids())}")
        self.show_board()
        return True

    def show_board(self):
        """Show the board"""
        self.output(render_board(self.state.board(), self.state.locked_ids()))
        if self.state.is_complete():
            self.output("\n🎉 PUZZLE COMPLETE! 🎉")

    def show_piece(self, piece_id: str):
        """Show a piece's shape in its initial orientation"""
        shape = transform(piece_id, 0, False, self.spec)
        if not shape:
            self.output(f"Piece {piece_id} not found")
            return
        box = bounds(shape)
        rows = [["."] * box.width for _ in range(box.height)]
        for c in shape:
            rows[c.y - box.min_y][c.x - box.min_x] = piece_id
        self.output(f"\n=== Piece {piece_id} ({len(shape)} spheres) ===")
        self.output("\n".join(" ".join(row) for row in rows))

    def _report(self, command: str, result):
        self._log({"event": "command", "command": command, "success": result.success,
                   "error": result.error.value, "message": result.message})
        if result.success:
            self.output(f"✓ {result.message}")
            self.show_board()
            if self.state.is_complete():
                self._log({"event": "complete", "level": self.level})
        else:
            self.output(f"✗ {result.error.value}: {result.message}")

    @staticmethod
    def _parse_placement(parts: List[str]):
        """<id> <x> <y> [rot] [f]; orientation parts left out come back as None"""
        piece_id = parts[1].upper()
        x, y = int(parts[2]), int(parts[3])
        rotation = int(parts[4]) if len(parts) > 4 and parts[4] != "f" else None
        is_flipped = True if parts[-1] == "f" else None
        return piece_id, x, y, rotation, is_flipped

    def handle_command(self, line: str) -> bool:
        """Run one command; returns False when the session should end."""
        parts = line.strip().lower().split()
        if not parts:
            return True
        command = parts[0]

        try:
            if command == "help":
                self.output(HELP_TEXT)
            elif command in ("view", "state"):
                self.show_board()
            elif command == "bank":
                self.output(f"Bank: {', '.join(self.state.bank_piece_ids()) or '(empty)'}")
            elif command == "piece" and len(parts) >= 2:
                self.show_piece(parts[1].upper())
            elif command in ("place", "move") and len(parts) >= 4:
                piece_id, x, y, rotation, is_flipped = self._parse_placement(parts)
                if command == "place":
                    result = place_piece(self.state, piece_id, x, y, rotation or 0, bool(is_flipped))
                else:
                    result = move_piece(self.state, piece_id, x, y, rotation, is_flipped)
                self._report(line.strip(), result)
            elif command == "preview" and len(parts) >= 4:
                piece_id, x, y, rotation, is_flipped = self._parse_placement(parts)
                ghost = preview_placement(self.state, piece_id, x, y, rotation or 0, bool(is_flipped))
                cells = " ".join(str(c.to_tuple()) for c in ghost.cells)
                self.output(f"{'✓ valid' if ghost.valid else '✗ invalid'}: {cells}")
            elif command == "rotate" and len(parts) >= 2:
                degrees = int(parts[2]) if len(parts) > 2 else 90
                self._report(line.strip(), rotate_piece(self.state, parts[1].upper(), degrees))
            elif command == "flip" and len(parts) >= 2:
                self._report(line.strip(), flip_piece(self.state, parts[1].upper()))
            elif command == "pickup" and len(parts) >= 2:
                self._report(line.strip(), pickup_piece(self.state, parts[1].upper()))
            elif command == "hint":
                suggestion = hint(self.state)
                if suggestion:
                    flip = " f" if suggestion.is_flipped else ""
                    self.output(f"Try: place {suggestion.id} {suggestion.x} {suggestion.y} {suggestion.rotation}{flip}")
                else:
                    self.output("No hint available: the current pieces cannot be completed")
            elif command == "reset":
                removed = reset_board(self.state)
                self.output(f"Returned to bank: {', '.join(removed) or '(none)'}")
                self.show_board()
            elif command == "next":
                self.load_level(self.level + 1)
            elif command == "prev":
                self.load_level(self.level - 1)
            elif command == "level" and len(parts) >= 2:
                self.load_level(int(parts[1]))
            elif command == "mode" and len(parts) >= 2:
                self.load_level(mode=GameMode(parts[1]))
            elif command in ("quit", "exit"):
                self.output("Goodbye!")
                return False
            else:
                self.output(f"Unknown or incomplete command: {line.strip()}")
                self.output("Type 'help' for commands")
        except ValueError as e:
            self.output(f"Error: {e}")

        return True

    def run(self, input_fn: Callable[[str], str] = input):
        """Run the main loop"""
        self.output("=== Sphere Tiling Puzzle ===")
        self.output("Type 'help' for commands")
        self.load_level()

        while True:
            try:
                line = input_fn("\n> ")
            except EOFError:
                break
            except KeyboardInterrupt:
                self.output("\nUse 'quit' to exit")
                continue
            if not self.handle_command(line):
                break

        if self.session_logger:
            self.session_logger.save_logs()
