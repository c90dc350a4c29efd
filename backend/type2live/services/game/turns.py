"""Turn generation: typing turns and constraint turns.

Each generated turn has a sequence number one higher than the previous one.
Failure to build one kind of turn is reported as a ``TurnUnavailable`` value
rather than an exception, so the fallback to the other kind shows up in the
return type of ``try_typing_turn`` / ``try_constraint_turn``.
"""

import logging
import random
import time
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence, TypeVar, Union

from .coefficients import LETTER_COEFFICIENTS, get_constraint_coefficient
from .dictionary import DictionaryProvider
from .domain import Turn, TurnKind
from .errors import DictionaryExhausted

logger = logging.getLogger(__name__)

T = TypeVar('T')


class RandomSource(Protocol):
    def uniform(self) -> float:
        """Return a float in [0, 1)."""
        ...


class ClockProvider(Protocol):
    def now(self) -> float:
        """Return the current time in seconds."""
        ...


class PythonRandom:
    """RandomSource backed by ``random.Random``; pass a seed for repeatable games."""

    def __init__(self, seed=None):
        self._rng = random.Random(seed)

    def uniform(self) -> float:
        return self._rng.random()


class SystemClock:
    def now(self) -> float:
        return time.time()


@dataclass(frozen=True)
class TurnPolicy:
    typing_ratio: float = 0.9
    min_tier: int = 1
    max_tier: int = 7
    preferred_min_length: int = 3
    preferred_max_length: int = 12

    @classmethod
    def from_config(cls, config) -> 'TurnPolicy':
        return cls(
            typing_ratio=float(config.get('TYPING_TURN_RATIO', cls.typing_ratio)),
            min_tier=int(config.get('TYPING_MIN_TIER', cls.min_tier)),
            max_tier=int(config.get('TYPING_MAX_TIER', cls.max_tier)),
            preferred_min_length=int(config.get('PREFERRED_MIN_LENGTH', cls.preferred_min_length)),
            preferred_max_length=int(config.get('PREFERRED_MAX_LENGTH', cls.preferred_max_length)),
        )


@dataclass(frozen=True)
class TurnUnavailable:
    kind: TurnKind
    reason: str


TurnOutcome = Union[Turn, TurnUnavailable]


def pick(rng: RandomSource, items: Sequence[T]) -> T:
    """Uniformly choose one item using a single ``uniform()`` draw."""
    index = min(int(rng.uniform() * len(items)), len(items) - 1)
    return items[index]


class TurnGenerator:

    def __init__(self, dictionary: DictionaryProvider, rng: Optional[RandomSource] = None,
                 clock: Optional[ClockProvider] = None, policy: Optional[TurnPolicy] = None):
        self.dictionary = dictionary
        self.rng = rng or PythonRandom()
        self.clock = clock or SystemClock()
        self.policy = policy or TurnPolicy()
        self.sequence_number = 0

    def generate_next_turn(self) -> Turn:
        """Produce the next turn, falling back to the other kind once.

        Raises ``DictionaryExhausted`` only when neither kind can be built.
        """
        if self.rng.uniform() < self.policy.typing_ratio:
            attempts = (self.try_typing_turn, self.try_constraint_turn)
        else:
            attempts = (self.try_constraint_turn, self.try_typing_turn)

        failures = []
        for attempt in attempts:
            outcome = attempt()
            if isinstance(outcome, Turn):
                self.sequence_number = outcome.sequence_number
                logger.info(
                    "[turn] seq=%d kind=%s target=%s char=%s",
                    outcome.sequence_number, outcome.kind.value,
                    outcome.target_word, outcome.constraint_char,
                )
                return outcome
            logger.warning("[turn-fallback] kind=%s reason=%s", outcome.kind.value, outcome.reason)
            failures.append(outcome)

        raise DictionaryExhausted(
            'Not enough words configured: ' + '; '.join(f"{f.kind.value}: {f.reason}" for f in failures)
        )

    def try_typing_turn(self) -> TurnOutcome:
        policy = self.policy
        eligible = self.dictionary.get_entries(min_tier=policy.min_tier, max_tier=policy.max_tier)
        if not eligible:
            return TurnUnavailable(
                TurnKind.TYPING, f"no entries with tier {policy.min_tier}-{policy.max_tier}"
            )
        preferred = [
            e for e in eligible
            if policy.preferred_min_length <= len(e.display_text) <= policy.preferred_max_length
        ]
        entry = pick(self.rng, preferred or eligible)
        return Turn(
            kind=TurnKind.TYPING,
            target_word=entry.display_text,
            coefficient=1.0,
            started_at=self.clock.now(),
            sequence_number=self.sequence_number + 1,
        )

    def try_constraint_turn(self) -> TurnOutcome:
        # Only offer letters at least one dictionary word can satisfy.
        in_use = self.dictionary.letters_in_use()
        letters = sorted(ch for ch in LETTER_COEFFICIENTS if ch in in_use)
        if not letters:
            return TurnUnavailable(TurnKind.CONSTRAINT, "no dictionary word contains a constraint letter")
        char = pick(self.rng, letters)
        return Turn(
            kind=TurnKind.CONSTRAINT,
            constraint_char=char,
            coefficient=get_constraint_coefficient(char),
            started_at=self.clock.now(),
            sequence_number=self.sequence_number + 1,
        )
