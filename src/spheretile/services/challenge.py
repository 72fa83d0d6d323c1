"""
Challenge seeding through an OpenAI-compatible chat model.

The model proposes a few pre-placed pieces; the layout is validated against
the board and replaced by a fixed static layout whenever anything goes wrong.
"""

import json
import random
import warnings
from typing import Any, Dict, List, Optional

from openai import OpenAI
from tenacity import Retrying, stop_after_attempt, wait_exponential

from spheretile.core.base import ChallengeServiceError
from spheretile.core.config import ChallengeConfig, Config
from spheretile.core.registry import register_level_source
from spheretile.game.game_core import PlacedPiece
from spheretile.game.catalog import PuzzleSpec, DEFAULT_SPEC
from spheretile.game.state import GameState
from spheretile.game.placement import load_layout


# Keeps the game playable when the service is unavailable
FALLBACK_LAYOUT: List[PlacedPiece] = [
    PlacedPiece(id="C", x=1, y=1, rotation=0, is_flipped=False, locked=True),
    PlacedPiece(id="J", x=6, y=2, rotation=270, is_flipped=True, locked=True),
    PlacedPiece(id="E", x=9, y=1, rotation=180, is_flipped=False, locked=True),
]


def fallback_layout(spec: PuzzleSpec = DEFAULT_SPEC) -> List[PlacedPiece]:
    """FALLBACK_LAYOUT, or an empty board if it does not fit this catalog."""
    try:
        load_layout(GameState(spec=spec), FALLBACK_LAYOUT)
    except ValueError:
        return []
    return list(FALLBACK_LAYOUT)


SYSTEM_PROMPT = "You design starting layouts for a sphere tiling puzzle. Reply with JSON only."


def build_prompt(spec: PuzzleSpec, num_pieces: int) -> str:
    pieces_list = ", ".join(spec.piece_ids())
    return f"""
Generate a valid starting board layout for a {spec.cols}x{spec.rows} puzzle grid.
Available Piece IDs: {pieces_list}.

Task:
1. Select exactly {num_pieces} random pieces.
2. Place them on the grid so they fit completely inside bounds (0-{spec.cols - 1}, 0-{spec.rows - 1}).
3. Ensure no overlap.
4. Randomize rotation (0, 90, 180, 270) and flip state.

Return a JSON object of the form
{{"pieces": [{{"id": "A", "x": 0, "y": 0, "rotation": 90, "isFlipped": false}}]}}
"""


def parse_layout(text: str, spec: PuzzleSpec = DEFAULT_SPEC) -> List[PlacedPiece]:
    """
    Parse and validate a model reply.

    Raises:
        ChallengeServiceError: If the reply is not JSON or the layout is invalid
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise ChallengeServiceError(f"Reply is not valid JSON: {e}")

    items = data.get("pieces") if isinstance(data, dict) else data
    if not isinstance(items, list) or not items:
        raise ChallengeServiceError("Reply contains no pieces")

    try:
        pieces = [PlacedPiece.from_dict(item, locked=True) for item in items]
        load_layout(GameState(spec=spec), pieces)
    except (KeyError, TypeError, ValueError) as e:
        raise ChallengeServiceError(f"Invalid layout: {e}")
    return pieces


@register_level_source("challenge")
class ChallengeService:
    """Level source backed by a chat model, with a static fallback."""

    def __init__(self, config: Config, spec: PuzzleSpec = DEFAULT_SPEC,
                 rng: Optional[random.Random] = None, logger=None, client=None):
        self.config: ChallengeConfig = config.challenge
        self.spec = spec
        self.logger = logger
        self.client = client
        self.used_fallback = False

    def _get_client(self):
        # Created lazily so a missing key only triggers the fallback
        if self.client is None:
            self.client = OpenAI(api_key=self.config.api_key, base_url=self.config.base_url)
        return self.client

    def _retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self.config.max_retries),
            wait=wait_exponential(multiplier=1, min=self.config.retry_min_wait, max=self.config.retry_max_wait),
            reraise=True
        )

    def _request_layout(self, messages: List[Dict[str, Any]]) -> List[PlacedPiece]:
        """One model call, parsed and validated."""
        response = self._get_client().chat.completions.create(
            model=self.config.model_name,
            messages=messages,
            temperature=self.config.temperature,
            max_tokens=self.config.max_tokens,
            timeout=self.config.timeout,
            response_format={"type": "json_object"},
        )

        if not response or not response.choices:
            raise ChallengeServiceError("Empty or invalid response from the model")
        content = response.choices[0].message.content
        if not content:
            raise ChallengeServiceError("Empty message in model response")

        return parse_layout(content.strip(), self.spec)

    def generate_challenge(self) -> List[PlacedPiece]:
        """A validated model layout, or the fallback layout if none could be obtained."""
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": build_prompt(self.spec, self.config.num_pieces)},
        ]
        self.used_fallback = False
        try:
            return self._retrying()(self._request_layout, messages)
        except Exception as e:
            warnings.warn(f"Challenge generation failed, using fallback. Details: {e}")
            if self.logger:
                self.logger.log_warning(f"Challenge generation failed, using fallback: {e}")
            self.used_fallback = True
            return fallback_layout(self.spec)

    def create_layout(self, level_number: int) -> List[PlacedPiece]:
        return self.generate_challenge()
