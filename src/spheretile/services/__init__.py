"""External services used to seed boards."""

from spheretile.services.challenge import ChallengeService, FALLBACK_LAYOUT, parse_layout

__all__ = [
    "ChallengeService",
    "FALLBACK_LAYOUT",
    "parse_layout",
]
