"""Authoritative per-room game session.

One ``GameSession`` exists per room and it is the single writer of turn,
combo and score state. Every mutation runs under the session lock, so two
near-simultaneous correct answers are adjudicated one after the other.

State flow::

    pending --start--> awaiting_submission --end--> ended
                          |   ^
          correct / pass /    | incorrect (turn kept, combo reset)
          timeout: next turn  |

Participants submit candidate answers and passes; only the authority (the
room host) may start the game, end it, or hand authority to someone else.
"""

import enum
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

from .dictionary import DictionaryProvider
from .domain import ComboState, PlayerStanding, SubmissionResult, Turn, TurnKind
from .coefficients import calculate_speed_coefficient
from .errors import DictionaryExhausted, InvalidSubmissionState, MalformedInput, UnauthorizedMutation
from .scoring import calculate_score, score_breakdown
from .turns import ClockProvider, RandomSource, SystemClock, TurnGenerator, TurnPolicy
from .validator import normalize_submission, validate

logger = logging.getLogger(__name__)

Listener = Callable[[str, Dict[str, Any]], None]


class SessionStatus(str, enum.Enum):
    PENDING = 'pending'
    AWAITING_SUBMISSION = 'awaiting_submission'
    ENDED = 'ended'


@dataclass(frozen=True)
class SubmissionOutcome:
    player_id: Any
    word: str
    result: SubmissionResult
    combo: ComboState
    total_score: int
    turn: Turn
    breakdown: Optional[Dict[str, Any]] = None

    @property
    def advanced(self) -> bool:
        return self.result.is_valid

    def to_dict(self) -> Dict[str, Any]:
        return {
            'player_id': self.player_id,
            'word': self.word,
            **self.result.to_dict(),
            'combo': self.combo.combo,
            'max_combo': self.combo.max_combo,
            'total_score': self.total_score,
            'turn': self.turn.to_dict(),
            'breakdown': self.breakdown,
        }


class GameSession:

    def __init__(self, room_code: str, authority_id: Any, dictionary: DictionaryProvider,
                 players: Iterable[Any] = (), rng: Optional[RandomSource] = None,
                 clock: Optional[ClockProvider] = None, policy: Optional[TurnPolicy] = None):
        self.room_code = room_code
        self.authority_id = authority_id
        self.dictionary = dictionary
        self.clock = clock or SystemClock()
        self.generator = TurnGenerator(dictionary, rng=rng, clock=self.clock, policy=policy)
        self.status = SessionStatus.PENDING
        self.current_turn: Optional[Turn] = None
        self.end_reason: Optional[str] = None
        self.started_at: Optional[float] = None
        self.ended_at: Optional[float] = None
        self._standings: Dict[Any, PlayerStanding] = {}
        self._listeners: List[Listener] = []
        self._lock = threading.RLock()
        for player_id in players:
            self.add_player(player_id)
        self.add_player(authority_id)

    # ---- roster and authority ----

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def add_player(self, player_id: Any) -> None:
        with self._lock:
            self._standings.setdefault(player_id, PlayerStanding(player_id))

    def is_authority(self, actor_id: Any) -> bool:
        return actor_id is not None and actor_id == self.authority_id

    def require_authority(self, actor_id: Any) -> None:
        if not self.is_authority(actor_id):
            raise UnauthorizedMutation(f'Player {actor_id} may not control room {self.room_code}')

    def transfer_authority(self, actor_id: Any, new_authority_id: Any) -> None:
        with self._lock:
            self.require_authority(actor_id)
            self.add_player(new_authority_id)
            logger.info("[authority] room=%s %s -> %s", self.room_code, self.authority_id, new_authority_id)
            self.authority_id = new_authority_id
            self._emit('state_update', self.snapshot())

    def standing(self, player_id: Any) -> PlayerStanding:
        try:
            return self._standings[player_id]
        except KeyError:
            raise UnauthorizedMutation(f'Player {player_id} is not in room {self.room_code}') from None

    # ---- lifecycle ----

    def start(self, actor_id: Any) -> Turn:
        """Open turn #1. Starting an already running session returns its turn."""
        with self._lock:
            self.require_authority(actor_id)
            if self.status is SessionStatus.ENDED:
                raise InvalidSubmissionState('Session closed')
            if self.status is SessionStatus.AWAITING_SUBMISSION:
                return self.current_turn
            self.started_at = self.clock.now()
            turn = self._advance()
            logger.info("[session-start] room=%s players=%d", self.room_code, len(self._standings))
            return turn

    def end(self, reason: str = 'ended') -> bool:
        """End the session. Safe to call repeatedly; only the first call counts."""
        with self._lock:
            if self.status is SessionStatus.ENDED:
                return False
            self.status = SessionStatus.ENDED
            self.end_reason = reason
            self.ended_at = self.clock.now()
            logger.info("[session-end] room=%s reason=%s", self.room_code, reason)
            self._emit('session_ended', self.snapshot())
            return True

    def end_by(self, actor_id: Any, reason: str = 'host_ended') -> bool:
        with self._lock:
            self.require_authority(actor_id)
            return self.end(reason)

    @property
    def is_ended(self) -> bool:
        return self.status is SessionStatus.ENDED

    # ---- player actions ----

    def submit(self, player_id: Any, text: str, typing_started_at: Optional[float] = None,
               sequence_number: Optional[int] = None) -> SubmissionOutcome:
        """Adjudicate a candidate answer from ``player_id``.

        ``typing_started_at`` is when the player began typing (e.g. input
        focus), in seconds; the turn start is used when it is not given.
        ``sequence_number`` is the turn the player was answering; an answer
        to a turn that has since been superseded is rejected without touching
        the combo. A wrong answer resets the player's combo and keeps the
        turn; a right one scores, bumps the combo and advances to the next turn.
        """
        with self._lock:
            turn = self._require_active_turn()
            standing = self.standing(player_id)
            word = normalize_submission(text)
            if typing_started_at is not None and (
                    isinstance(typing_started_at, bool) or not isinstance(typing_started_at, (int, float))):
                raise MalformedInput('typing_started_at must be a number of seconds')
            if sequence_number is not None:
                if isinstance(sequence_number, bool) or not isinstance(sequence_number, int):
                    raise MalformedInput('sequence_number must be an integer')
                if sequence_number != turn.sequence_number:
                    raise InvalidSubmissionState('Turn already advanced')

            now = self.clock.now()
            started = typing_started_at if typing_started_at is not None else turn.started_at
            duration_ms = max(0.0, (now - started) * 1000.0)

            match = validate(word, turn, self.dictionary)
            if not match.is_valid:
                standing.combo.reset()
                result = SubmissionResult(is_valid=False, duration_ms=duration_ms)
                outcome = self._outcome(player_id, word, result, standing, turn)
                logger.info("[submit-miss] room=%s player=%s word=%r seq=%d",
                            self.room_code, player_id, word, turn.sequence_number)
                self._emit('submission_result', outcome.to_dict())
                return outcome

            if turn.kind is TurnKind.TYPING:
                coefficient = calculate_speed_coefficient(duration_ms)
            else:
                coefficient = turn.coefficient
            entry = match.matched_entry
            combo = standing.combo.combo + 1
            points = calculate_score(turn.kind, entry.display_text, entry.difficulty_tier, coefficient, combo)
            breakdown = score_breakdown(turn.kind, entry.display_text, entry.difficulty_tier, coefficient, combo)

            # Build the next turn before touching scores so a fatal dictionary
            # error leaves combo and score as they were.
            next_turn = self._advance(emit=False)

            standing.combo.hit()
            standing.total_score += points
            result = SubmissionResult(
                is_valid=True, matched_entry=entry, points_awarded=points,
                coefficient=coefficient, duration_ms=duration_ms,
            )
            outcome = self._outcome(player_id, word, result, standing, turn, breakdown)
            logger.info("[submit-hit] room=%s player=%s word=%r points=%d combo=%d total=%d",
                        self.room_code, player_id, word, points, standing.combo.combo, standing.total_score)
            self._emit('submission_result', outcome.to_dict())
            self._emit('turn_update', {'room_code': self.room_code, 'turn': next_turn.to_dict()})
            return outcome

    def pass_turn(self, player_id: Any) -> Turn:
        """Skip the current turn. Not scored; resets the passer's combo."""
        with self._lock:
            self._require_active_turn()
            standing = self.standing(player_id)
            turn = self._advance()
            standing.combo.reset()
            logger.info("[pass] room=%s player=%s next_seq=%d", self.room_code, player_id, turn.sequence_number)
            self._emit('state_update', self.snapshot())
            return turn

    def expire_turn(self, sequence_number: Optional[int] = None) -> Optional[Turn]:
        """Timer-driven end of the current turn, handled like a pass by everyone.

        Returns ``None`` when the timer is stale: the session ended or the turn
        it was set for has already been superseded.
        """
        with self._lock:
            if self.status is not SessionStatus.AWAITING_SUBMISSION:
                return None
            if sequence_number is not None and self.current_turn.sequence_number != sequence_number:
                return None
            turn = self._advance()
            for standing in self._standings.values():
                standing.combo.reset()
            logger.info("[turn-timeout] room=%s next_seq=%d", self.room_code, turn.sequence_number)
            self._emit('state_update', self.snapshot())
            return turn

    # ---- read side ----

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return {
                'room_code': self.room_code,
                'status': self.status.value,
                'authority_id': self.authority_id,
                'turn': self.current_turn.to_dict() if self.current_turn else None,
                'players': [s.to_dict() for s in self._standings.values()],
                'end_reason': self.end_reason,
                'started_at': self.started_at,
                'ended_at': self.ended_at,
            }

    # ---- internals ----

    def _require_active_turn(self) -> Turn:
        if self.status is SessionStatus.ENDED:
            raise InvalidSubmissionState('Session closed')
        if self.current_turn is None:
            raise InvalidSubmissionState('No active turn')
        return self.current_turn

    def _advance(self, emit: bool = True) -> Turn:
        try:
            turn = self.generator.generate_next_turn()
        except DictionaryExhausted:
            logger.error("[dictionary-exhausted] room=%s", self.room_code)
            self.end('dictionary_exhausted')
            raise
        self.current_turn = turn
        self.status = SessionStatus.AWAITING_SUBMISSION
        if emit:
            self._emit('turn_update', {'room_code': self.room_code, 'turn': turn.to_dict()})
        return turn

    def _outcome(self, player_id, word, result, standing, turn, breakdown=None) -> SubmissionOutcome:
        return SubmissionOutcome(
            player_id=player_id,
            word=word,
            result=result,
            combo=ComboState(standing.combo.combo, standing.combo.max_combo),
            total_score=standing.total_score,
            turn=turn,
            breakdown=breakdown,
        )

    def _emit(self, event: str, payload: Dict[str, Any]) -> None:
        for listener in self._listeners:
            listener(event, payload)
