"""Answer validation against the active turn.

Matching is exact and case-sensitive against ``display_text`` after trimming
surrounding whitespace. Any phonetic or IME transliteration has already
happened on the client before text reaches this module.

For constraint turns the containment check is case-insensitive: both the
submission and the constraint character are lowercased for that check only,
so ``"Queue"`` satisfies ``q`` as long as ``"Queue"`` is itself a dictionary
entry.
"""

from .dictionary import DictionaryProvider
from .domain import SubmissionResult, Turn, TurnKind
from .errors import MalformedInput

REJECTED = SubmissionResult(is_valid=False)


def normalize_submission(text) -> str:
    if not isinstance(text, str):
        raise MalformedInput('Submitted word must be a string')
    cleaned = text.strip()
    if not cleaned:
        raise MalformedInput('Submitted word is empty')
    return cleaned


def validate(submitted_text: str, turn: Turn, dictionary: DictionaryProvider) -> SubmissionResult:
    """Decide whether ``submitted_text`` answers ``turn``.

    Only determines the match; points are filled in by the caller.
    """
    text = normalize_submission(submitted_text)

    if turn.kind is TurnKind.TYPING:
        if text != turn.target_word:
            return REJECTED
    elif turn.constraint_char.lower() not in text.lower():
        return REJECTED

    entry = dictionary.find(text)
    if entry is None:
        return REJECTED
    return SubmissionResult(is_valid=True, matched_entry=entry)
