"""Value types shared by the turn and scoring engine."""

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


class TurnKind(str, enum.Enum):
    TYPING = 'typing'
    CONSTRAINT = 'constraint'


@dataclass(frozen=True)
class DictionaryEntry:
    """A known vocabulary item. Ground truth for validation and scoring."""
    id: Any
    display_text: str
    difficulty_tier: int
    description: Optional[str] = None
    category: Optional[str] = None

    def __post_init__(self):
        if self.difficulty_tier < 1:
            raise ValueError(f"difficulty_tier must be >= 1, got {self.difficulty_tier}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'display_text': self.display_text,
            'difficulty_tier': self.difficulty_tier,
            'description': self.description,
            'category': self.category,
        }


@dataclass(frozen=True)
class Turn:
    """One challenge instance. Superseded, never mutated, by the next turn.

    Exactly one of ``target_word`` / ``constraint_char`` is set, depending on
    ``kind``. For typing turns ``coefficient`` is a placeholder; the speed
    coefficient is measured at submission time.
    """
    kind: TurnKind
    coefficient: float
    started_at: float
    sequence_number: int
    target_word: Optional[str] = None
    constraint_char: Optional[str] = None

    def __post_init__(self):
        if self.kind is TurnKind.TYPING:
            if not self.target_word or self.constraint_char is not None:
                raise ValueError("typing turn needs target_word only")
        elif not self.constraint_char or self.target_word is not None:
            raise ValueError("constraint turn needs constraint_char only")
        if self.sequence_number < 1:
            raise ValueError("sequence_number starts at 1")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'kind': self.kind.value,
            'target_word': self.target_word,
            'constraint_char': self.constraint_char,
            'coefficient': self.coefficient,
            'started_at': self.started_at,
            'sequence_number': self.sequence_number,
        }


@dataclass
class ComboState:
    combo: int = 0
    max_combo: int = 0

    def hit(self) -> int:
        self.combo += 1
        self.max_combo = max(self.max_combo, self.combo)
        return self.combo

    def reset(self) -> None:
        self.combo = 0


@dataclass
class PlayerStanding:
    """Combo and cumulative score for one participant of a session."""
    player_id: Any
    combo: ComboState = field(default_factory=ComboState)
    total_score: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'player_id': self.player_id,
            'combo': self.combo.combo,
            'max_combo': self.combo.max_combo,
            'total_score': self.total_score,
        }


@dataclass(frozen=True)
class SubmissionResult:
    is_valid: bool
    matched_entry: Optional[DictionaryEntry] = None
    points_awarded: int = 0
    coefficient: Optional[float] = None
    duration_ms: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'is_valid': self.is_valid,
            'matched_entry': self.matched_entry.to_dict() if self.matched_entry else None,
            'points_awarded': self.points_awarded,
            'coefficient': self.coefficient,
            'duration_ms': self.duration_ms,
        }
