import logging
import math
from typing import Any, Dict

from .domain import TurnKind

logger = logging.getLogger(__name__)


def calculate_score(turn_kind: TurnKind, word: str, difficulty_tier: int,
                    coefficient: float, combo: int) -> int:
    """Score one correct answer.

    ``floor(len(word) * difficulty_tier * coefficient * combo)``, never below 0.
    The formula is the same for both turn kinds; only the coefficient differs
    (speed for typing turns, letter rarity for constraint turns). ``combo`` is
    the count *including* the answer being scored, so the first correct answer
    scores with combo 1. A combo of 0 yields 0.
    """
    raw = len(word) * difficulty_tier * coefficient * combo
    score = max(0, math.floor(raw))
    logger.debug(
        "[score] kind=%s formula=%d x %d x %s x %d result=%d",
        TurnKind(turn_kind).value, len(word), difficulty_tier, coefficient, combo, score,
    )
    return score


def score_breakdown(turn_kind: TurnKind, word: str, difficulty_tier: int,
                    coefficient: float, combo: int) -> Dict[str, Any]:
    """Itemised view of a score for client feedback."""
    kind = TurnKind(turn_kind)
    return {
        'turn_kind': kind.value,
        'base_score': len(word),
        'difficulty_tier': difficulty_tier,
        'coefficient': coefficient,
        'coefficient_source': 'speed' if kind is TurnKind.TYPING else 'constraint',
        'combo': combo,
        'final_score': calculate_score(kind, word, difficulty_tier, coefficient, combo),
    }
