import json
from types import SimpleNamespace

import pytest

from spheretile.core.base import ChallengeServiceError
from spheretile.core.registry import create_level_source
from spheretile.game.catalog import DEFAULT_SPEC
from spheretile.game.state import GameState
from spheretile.game.placement import load_layout
from spheretile.services.challenge import (
    FALLBACK_LAYOUT, ChallengeService, build_prompt, fallback_layout, parse_layout
)


VALID_REPLY = json.dumps({"pieces": [
    {"id": "C", "x": 1, "y": 1, "rotation": 0, "isFlipped": False},
    {"id": "E", "x": 5, "y": 0, "rotation": 0, "isFlipped": True},
]})


def fake_client(*replies):
    """OpenAI-shaped client answering with the given replies; the last one repeats."""
    calls = []

    def create(**kwargs):
        calls.append(kwargs)
        reply = replies[min(len(calls), len(replies)) - 1]
        if isinstance(reply, Exception):
            raise reply
        message = SimpleNamespace(content=reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])

    client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
    return client, calls


def test_valid_reply(offline_config):
    client, calls = fake_client(VALID_REPLY)
    service = ChallengeService(offline_config, client=client)
    layout = service.generate_challenge()

    assert [p.id for p in layout] == ["C", "E"]
    assert all(p.locked for p in layout)
    assert layout[1].is_flipped
    assert not service.used_fallback
    assert len(calls) == 1
    assert calls[0]["model"] == offline_config.challenge.model_name
    assert calls[0]["response_format"] == {"type": "json_object"}


def test_bad_reply_is_retried(offline_config):
    client, calls = fake_client("not json", VALID_REPLY)
    layout = ChallengeService(offline_config, client=client).generate_challenge()
    assert len(layout) == 2
    assert len(calls) == 2


def test_fallback_after_repeated_bad_replies(offline_config):
    overlapping = json.dumps([
        {"id": "C", "x": 1, "y": 1, "rotation": 0, "isFlipped": False},
        {"id": "L", "x": 1, "y": 1, "rotation": 0, "isFlipped": False},
    ])
    client, calls = fake_client(overlapping)
    service = ChallengeService(offline_config, client=client)
    with pytest.warns(UserWarning, match="using fallback"):
        layout = service.generate_challenge()

    assert layout == FALLBACK_LAYOUT
    assert service.used_fallback
    assert len(calls) == offline_config.challenge.max_retries


def test_fallback_when_service_is_down(offline_config):
    client, _ = fake_client(ConnectionError("unreachable"))
    service = create_level_source("challenge", offline_config, DEFAULT_SPEC)
    service.client = client
    with pytest.warns(UserWarning):
        assert service.create_layout(1) == FALLBACK_LAYOUT


def test_fallback_layout_is_valid():
    state = load_layout(GameState(), fallback_layout())
    assert state.locked_ids() == {"C", "J", "E"}


def test_fallback_layout_for_other_catalogs(small_spec):
    assert fallback_layout(small_spec) == []


def test_parse_accepts_a_bare_list():
    reply = json.dumps([{"id": "L", "x": 2, "y": 2, "rotation": 90, "isFlipped": False}])
    layout = parse_layout(reply)
    assert layout[0].rotation == 90 and layout[0].locked


@pytest.mark.parametrize("reply", [
    "",
    "{not json",
    json.dumps({"pieces": []}),
    json.dumps({"layout": [{"id": "C", "x": 1, "y": 1}]}),
    json.dumps([{"id": "Z", "x": 0, "y": 0}]),
    json.dumps([{"id": "C", "x": 1, "y": 1}, {"id": "C", "x": 5, "y": 1}]),
    json.dumps([{"id": "E", "x": 9, "y": 0, "rotation": 180}]),
    json.dumps([{"id": "C", "x": 1, "y": 1, "rotation": 45}]),
    json.dumps([{"id": "C", "y": 1}]),
])
def test_parse_rejects_invalid_replies(reply):
    with pytest.raises(ChallengeServiceError):
        parse_layout(reply)


def test_prompt_lists_the_catalog():
    prompt = build_prompt(DEFAULT_SPEC, 3)
    assert "11x5" in prompt
    assert "exactly 3" in prompt
    assert all(pid in prompt for pid in DEFAULT_SPEC.piece_ids())
