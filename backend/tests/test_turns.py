import pytest

from conftest import FakeClock, SequenceRandom
from type2live.services.game import (
    DictionaryEntry,
    DictionaryExhausted,
    TermDictionary,
    Turn,
    TurnGenerator,
    TurnKind,
    TurnPolicy,
    TurnUnavailable,
)


def make_dictionary(*items):
    return TermDictionary(
        DictionaryEntry(id=i, display_text=text, difficulty_tier=tier)
        for i, (text, tier) in enumerate(items, start=1)
    )


def test_typing_turn_when_draw_is_below_ratio():
    gen = TurnGenerator(make_dictionary(('git', 2), ('sql', 3)),
                        rng=SequenceRandom([0.1, 0.0]), clock=FakeClock(50.0))
    turn = gen.generate_next_turn()
    assert turn.kind is TurnKind.TYPING
    assert turn.target_word == 'git'
    assert turn.constraint_char is None
    assert turn.coefficient == 1.0
    assert turn.started_at == 50.0
    assert turn.sequence_number == 1


def test_constraint_turn_when_draw_is_above_ratio():
    # letters in use that have a table entry, sorted: g i l q s t
    gen = TurnGenerator(make_dictionary(('git', 2), ('sql', 3)),
                        rng=SequenceRandom([0.95, 0.5]), clock=FakeClock())
    turn = gen.generate_next_turn()
    assert turn.kind is TurnKind.CONSTRAINT
    assert turn.constraint_char == 'q'
    assert turn.coefficient == 6
    assert turn.target_word is None


def test_sequence_numbers_increase_by_one():
    gen = TurnGenerator(make_dictionary(('git', 2)), rng=SequenceRandom([0.3, 0.0, 0.97, 0.0]))
    numbers = [gen.generate_next_turn().sequence_number for _ in range(5)]
    assert numbers == [1, 2, 3, 4, 5]
    assert gen.sequence_number == 5


def test_ratio_is_roughly_ninety_percent_typing():
    gen = TurnGenerator(make_dictionary(('git', 2), ('sql', 3)),
                        rng=SequenceRandom([i / 100 for i in range(100)]))
    kinds = [gen.generate_next_turn().kind for _ in range(100)]
    # two draws per turn: the kind draw lands on every other hundredth
    assert 80 <= kinds.count(TurnKind.TYPING) <= 100
    assert TurnKind.CONSTRAINT in kinds


def test_prefers_words_of_typical_length():
    gen = TurnGenerator(make_dictionary(('go', 1), ('python', 2), ('a' * 20, 3)),
                        rng=SequenceRandom([0.0]))
    for _ in range(3):
        assert gen.generate_next_turn().target_word == 'python'


def test_falls_back_to_full_tier_window_when_no_word_has_typical_length():
    gen = TurnGenerator(make_dictionary(('go', 1), ('js', 2)), rng=SequenceRandom([0.0, 0.99]))
    turn = gen.generate_next_turn()
    assert turn.kind is TurnKind.TYPING
    assert turn.target_word == 'js'


def test_typing_falls_back_to_constraint_when_no_word_is_in_tier_window():
    # only a tier-8 word: no typing turn possible, constraint still is
    gen = TurnGenerator(make_dictionary(('byzantine', 8)), rng=SequenceRandom([0.0]))
    turn = gen.generate_next_turn()
    assert turn.kind is TurnKind.CONSTRAINT
    assert turn.constraint_char in 'byzantine'
    assert turn.sequence_number == 1


def test_constraint_falls_back_to_typing_when_no_letter_is_usable():
    gen = TurnGenerator(make_dictionary(('42', 1)), rng=SequenceRandom([0.99, 0.0]),
                        policy=TurnPolicy(preferred_min_length=1))
    turn = gen.generate_next_turn()
    assert turn.kind is TurnKind.TYPING
    assert turn.target_word == '42'


def test_constraint_letters_come_from_the_dictionary():
    gen = TurnGenerator(make_dictionary(('jq', 2)), rng=SequenceRandom([0.99]))
    seen = {gen.generate_next_turn().constraint_char for _ in range(10)}
    assert seen <= {'j', 'q'}


def test_empty_dictionary_is_fatal():
    gen = TurnGenerator(make_dictionary(), rng=SequenceRandom([0.0]))
    with pytest.raises(DictionaryExhausted) as exc:
        gen.generate_next_turn()
    assert exc.value.code == 'dictionary_exhausted'
    assert exc.value.status == 503
    assert 'Not enough words configured' in exc.value.message
    assert gen.sequence_number == 0


def test_unsatisfiable_dictionary_is_fatal():
    gen = TurnGenerator(make_dictionary(('42', 9)), rng=SequenceRandom([0.0]))
    with pytest.raises(DictionaryExhausted):
        gen.generate_next_turn()


def test_try_methods_report_unavailability_as_values():
    gen = TurnGenerator(make_dictionary(('byzantine', 8)), rng=SequenceRandom([0.0]))
    typing = gen.try_typing_turn()
    assert isinstance(typing, TurnUnavailable)
    assert typing.kind is TurnKind.TYPING
    assert isinstance(gen.try_constraint_turn(), Turn)


def test_policy_from_config():
    policy = TurnPolicy.from_config({'TYPING_TURN_RATIO': '0.5', 'TYPING_MAX_TIER': 4})
    assert policy.typing_ratio == 0.5
    assert policy.max_tier == 4
    assert policy.min_tier == 1
    assert policy.preferred_max_length == 12


def test_turn_requires_exactly_one_challenge_field():
    with pytest.raises(ValueError):
        Turn(kind=TurnKind.TYPING, coefficient=1.0, started_at=0, sequence_number=1)
    with pytest.raises(ValueError):
        Turn(kind=TurnKind.CONSTRAINT, coefficient=2, started_at=0, sequence_number=1,
             target_word='git', constraint_char='g')
    with pytest.raises(ValueError):
        Turn(kind=TurnKind.TYPING, coefficient=1.0, started_at=0, sequence_number=0, target_word='git')


def test_dictionary_entry_tier_must_be_positive():
    with pytest.raises(ValueError):
        DictionaryEntry(id=1, display_text='git', difficulty_tier=0)
