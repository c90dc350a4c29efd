"""Scoring coefficients for typing speed and constraint letters."""

import logging
from typing import Dict, Tuple

logger = logging.getLogger(__name__)

# (upper bound in ms, inclusive) -> coefficient, checked in ascending order
SPEED_BUCKETS: Tuple[Tuple[int, float], ...] = (
    (1000, 3.0),
    (2000, 2.5),
    (3000, 2.0),
    (5000, 1.5),
    (8000, 1.2),
)
SLOWEST_SPEED_COEFFICIENT = 1.0

# Grouped by English letter frequency: common letters are worth less.
LETTER_COEFFICIENTS: Dict[str, int] = {
    **dict.fromkeys('aeiousrtnl', 2),
    **dict.fromkeys('cdhpm', 3),
    **dict.fromkeys('bfgkvwy', 4),
    **dict.fromkeys('jq', 6),
    'x': 7,
    'z': 8,
}
DEFAULT_CONSTRAINT_COEFFICIENT = 3


def calculate_speed_coefficient(duration_ms: float) -> float:
    """Map elapsed typing time to a multiplier in [1.0, 3.0].

    Negative durations (clock skew between client focus and server receipt)
    count as zero.
    """
    duration_ms = max(0.0, float(duration_ms))
    for upper_bound, coefficient in SPEED_BUCKETS:
        if duration_ms <= upper_bound:
            break
    else:
        coefficient = SLOWEST_SPEED_COEFFICIENT
    logger.debug("[speed] duration_ms=%.0f coefficient=%.1f", duration_ms, coefficient)
    return coefficient


def get_constraint_coefficient(char: str) -> int:
    """Return the difficulty multiplier for a constraint character.

    Case-insensitive. Only the first character is considered; anything that is
    not one of the tabled Latin letters (including the empty string) gets the
    default coefficient.
    """
    key = char[:1].lower()
    return LETTER_COEFFICIENTS.get(key, DEFAULT_CONSTRAINT_COEFFICIENT)
