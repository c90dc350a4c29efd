import pytest

from type2live.services.game import (
    DictionaryEntry,
    MalformedInput,
    TermDictionary,
    Turn,
    TurnKind,
    validate,
)

DICTIONARY = TermDictionary([
    DictionaryEntry(id=1, display_text='git', difficulty_tier=2),
    DictionaryEntry(id=2, display_text='Queue', difficulty_tier=2),
    DictionaryEntry(id=3, display_text='sql', difficulty_tier=3),
    DictionaryEntry(id=4, display_text='git', difficulty_tier=9),
])


def typing_turn(word):
    return Turn(kind=TurnKind.TYPING, target_word=word, coefficient=1.0, started_at=0, sequence_number=1)


def constraint_turn(char):
    return Turn(kind=TurnKind.CONSTRAINT, constraint_char=char, coefficient=6, started_at=0, sequence_number=1)


def test_typing_exact_match():
    result = validate('git', typing_turn('git'), DICTIONARY)
    assert result.is_valid
    assert result.matched_entry.id == 1
    assert result.points_awarded == 0


def test_typing_is_case_sensitive():
    assert not validate('GIT', typing_turn('git'), DICTIONARY).is_valid


def test_typing_rejects_other_dictionary_words():
    assert not validate('sql', typing_turn('git'), DICTIONARY).is_valid


def test_surrounding_whitespace_is_ignored():
    assert validate('  git\n', typing_turn('git'), DICTIONARY).is_valid


def test_constraint_containment_ignores_case():
    result = validate('Queue', constraint_turn('q'), DICTIONARY)
    assert result.is_valid
    assert result.matched_entry.display_text == 'Queue'
    assert validate('sql', constraint_turn('Q'), DICTIONARY).is_valid


def test_constraint_word_must_be_in_dictionary():
    assert not validate('quartz', constraint_turn('q'), DICTIONARY).is_valid


def test_constraint_word_must_contain_the_letter():
    assert not validate('git', constraint_turn('q'), DICTIONARY).is_valid


def test_dictionary_lookup_is_exact():
    assert not validate('queue', constraint_turn('q'), DICTIONARY).is_valid


def test_duplicate_display_text_first_entry_wins():
    assert DICTIONARY.find('git').difficulty_tier == 2


@pytest.mark.parametrize('text', ['', '   ', None, 42])
def test_malformed_submissions(text):
    with pytest.raises(MalformedInput) as exc:
        validate(text, typing_turn('git'), DICTIONARY)
    assert exc.value.status == 400
    assert exc.value.to_dict()['code'] == 'malformed_input'
