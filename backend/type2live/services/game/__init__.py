"""Turn and scoring engine.

Pure domain logic: turn generation, answer validation, scoring and the
per-room session state machine. HTTP routes and socket handlers import from
here; nothing in this package imports Flask.
"""

from .coefficients import calculate_speed_coefficient, get_constraint_coefficient
from .dictionary import DictionaryProvider, TermDictionary
from .domain import ComboState, DictionaryEntry, PlayerStanding, SubmissionResult, Turn, TurnKind
from .errors import (
    DictionaryExhausted,
    GameError,
    InvalidSubmissionState,
    MalformedInput,
    UnauthorizedMutation,
)
from .scoring import calculate_score, score_breakdown
from .session import GameSession, SessionStatus, SubmissionOutcome
from .turns import PythonRandom, SystemClock, TurnGenerator, TurnPolicy, TurnUnavailable
from .validator import validate

__all__ = [
    'calculate_speed_coefficient', 'get_constraint_coefficient',
    'DictionaryProvider', 'TermDictionary',
    'ComboState', 'DictionaryEntry', 'PlayerStanding', 'SubmissionResult', 'Turn', 'TurnKind',
    'DictionaryExhausted', 'GameError', 'InvalidSubmissionState', 'MalformedInput', 'UnauthorizedMutation',
    'calculate_score', 'score_breakdown',
    'GameSession', 'SessionStatus', 'SubmissionOutcome',
    'PythonRandom', 'SystemClock', 'TurnGenerator', 'TurnPolicy', 'TurnUnavailable',
    'validate',
]
