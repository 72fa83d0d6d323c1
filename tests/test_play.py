import json
import random

import pytest

from spheretile.core.base import GameMode
from spheretile.core.config import Config
from spheretile.game.game_core import PlacedPiece
from spheretile.play import PlaySession
from spheretile.utils.logger import SessionLogger


@pytest.fixture
def session():
    outputs = []
    play = PlaySession(Config(), output=outputs.append)
    play.outputs = outputs
    assert play.load_level(mode=GameMode.FREE)
    return play


def test_free_mode_starts_empty(session):
    assert session.state.placed == {}
    assert len(session.state.bank_piece_ids()) == 12


def test_commands_change_the_board(session):
    assert session.handle_command("place l 2 2 90")
    assert session.state.placed["L"] == PlacedPiece("L", 2, 2, rotation=90)

    session.handle_command("place E 5 0 0 f")
    assert session.state.placed["E"].is_flipped

    session.handle_command("rotate l")
    assert session.state.placed["L"].rotation == 180

    session.handle_command("move l 7 3")
    assert session.state.placed["L"] == PlacedPiece("L", 7, 3, rotation=180)

    session.handle_command("pickup e")
    assert "E" in session.state.bank_piece_ids()

    session.handle_command("reset")
    assert session.state.placed == {}


def test_rejections_are_reported(session):
    session.handle_command("place x 0 0")
    assert any("PieceNotFound" in line for line in session.outputs)

    session.handle_command("place l")
    assert any(line.startswith("Unknown or incomplete") for line in session.outputs)

    session.handle_command("place l a b")
    assert any(line.startswith("Error:") for line in session.outputs)
    assert session.state.placed == {}


def test_preview_does_not_commit(session):
    session.handle_command("preview l 2 2 90")
    assert session.state.placed == {}
    assert session.outputs[-1].startswith("✓ valid")


def test_quit(session):
    assert session.handle_command("quit") is False
    assert session.handle_command("") is True


def test_generated_level_on_small_board(small_spec):
    outputs = []
    play = PlaySession(Config(), small_spec, rng=random.Random(5), output=outputs.append)
    assert play.load_level(1)
    # Every piece of a three-piece catalog ends up locked
    assert play.state.locked_ids() == {"O", "D", "L"}
    assert play.state.is_complete()
    assert any("PUZZLE COMPLETE" in line for line in outputs)


def test_run_loop_writes_session_log(tmp_path):
    logger = SessionLogger(str(tmp_path), "play")
    play = PlaySession(Config(), session_logger=logger, output=lambda line: None)
    play.mode = GameMode.FREE
    inputs = iter(["place l 0 0", "bank", "quit"])
    play.run(lambda prompt: next(inputs))

    with open(tmp_path / logger.session_name / "session_log.json") as f:
        events = json.load(f)
    assert [e["event"] for e in events] == ["level", "command"]
    assert events[1]["success"] is True


def test_run_loop_stops_at_end_of_input():
    play = PlaySession(Config(), output=lambda line: None)
    play.mode = GameMode.FREE

    def no_more_input(prompt):
        raise EOFError

    play.run(no_more_input)
    assert play.state.placed == {}


def test_bad_move_rotation_keeps_the_piece(session):
    session.handle_command("place l 2 2 90")
    session.handle_command("move l 3 3 45")
    assert session.outputs[-1].startswith("Error:")
    assert session.state.placed["L"] == PlacedPiece("L", 2, 2, rotation=90)
