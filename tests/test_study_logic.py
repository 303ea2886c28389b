"""
Tests for the pure study logic.

Tests cover:
- Card variants built from stored records
- Working-list filtering and ordering
- Score rounding
- Multiple-choice and type-answer grading
"""

import random

import pytest

from flashy_app.core.error_handlers import ValidationError
from flashy_app.modules.study.cards import (
    ClassicFlipCard,
    MultipleChoiceCard,
    TypeAnswerCard,
    card_from_record,
    normalize_multiple_choice,
)
from flashy_app.modules.study.engine.choice_engine import ChoiceEngine
from flashy_app.modules.study.engine.typing_engine import TypingEngine
from flashy_app.modules.study.logics.ordering import filter_cards, order_cards, prepare_working_list
from flashy_app.modules.study.logics.scoring import compute_score
from flashy_app.modules.study.modes import ModeFactory
from flashy_app.modules.study.options import StudyOptions


def flip(card_id, position=None, favorite=False, ignored=False, back='b'):
    return ClassicFlipCard(
        card_id=card_id, deck_id=1, front=f'front {card_id}', back=back,
        favorite=favorite, ignored=ignored, position=position,
    )


class TestCardRecords:
    """Records from the database become the matching card variant."""

    def test_type_selects_variant(self):
        assert isinstance(card_from_record({'card_id': 1, 'front': 'a'}), ClassicFlipCard)
        assert isinstance(
            card_from_record({'card_id': 2, 'card_type': 'multiple-choice', 'front': 'a', 'back': 'x'}),
            MultipleChoiceCard,
        )
        assert isinstance(
            card_from_record({'card_id': 3, 'card_type': 'type-answer', 'front': 'a', 'back': 'x'}),
            TypeAnswerCard,
        )

    def test_unknown_type_is_rejected(self):
        with pytest.raises(ValidationError):
            card_from_record({'card_id': 1, 'card_type': 'matching'})

    def test_multiple_choice_falls_back_to_back_text(self):
        card = card_from_record({'card_id': 1, 'card_type': 'multiple-choice', 'front': 'q', 'back': 'Paris'})
        assert card.answer_set == ('Paris',)
        assert card.is_multi_answer is False

    def test_is_ignored_column_maps_to_ignored(self):
        card = card_from_record({'card_id': 1, 'front': 'q', 'is_ignored': True})
        assert card.ignored is True

    def test_normalize_multiple_choice_splits_options(self):
        result = normalize_multiple_choice(['A', ' B ', '', 'C'], [0, 1])
        assert result == {'back': 'A', 'correct_answers': ['A', 'B'], 'incorrect_answers': ['C']}

    def test_normalize_multiple_choice_needs_a_correct_option(self):
        with pytest.raises(ValidationError):
            normalize_multiple_choice(['A', 'B'], [])


class TestStudyOptions:

    def test_defaults(self):
        options = StudyOptions()
        assert options.order == 'randomized'
        assert not options.timed_mode
        assert not options.continuous_shuffle
        assert not options.exclude_ignored
        assert not options.favorites_only

    def test_camel_case_keys(self):
        options = StudyOptions.from_dict({'timedMode': True, 'favoritesOnly': True, 'order': 'linear'})
        assert options.timed_mode is True
        assert options.favorites_only is True
        assert options.order == 'linear'

    def test_unknown_order(self):
        with pytest.raises(ValidationError):
            StudyOptions(order='alphabetical')

    def test_string_booleans_are_rejected(self):
        with pytest.raises(ValidationError):
            StudyOptions.from_dict({'timedMode': 'false'})
        with pytest.raises(ValidationError):
            StudyOptions.from_dict({'favorites_only': 1})

    def test_null_keeps_the_default(self):
        assert StudyOptions.from_dict({'continuousShuffle': None}).continuous_shuffle is False


class TestOrdering:
    """Filtering and ordering of the working list."""

    def test_exclude_ignored(self):
        cards = [flip(1), flip(2, ignored=True), flip(3)]
        result = filter_cards(cards, StudyOptions(exclude_ignored=True))
        assert [c.card_id for c in result] == [1, 3]

    def test_favorites_only_applies_after_ignored(self):
        cards = [flip(1, favorite=True, ignored=True), flip(2, favorite=True), flip(3)]
        result = filter_cards(cards, StudyOptions(exclude_ignored=True, favorites_only=True))
        assert [c.card_id for c in result] == [2]

    def test_linear_sorts_by_position_and_keeps_ties_stable(self):
        cards = [flip(1, position=3), flip(2, position=None), flip(3, position=1), flip(4, position=None)]
        result = order_cards(cards, StudyOptions(order='linear'))
        assert [c.card_id for c in result] == [2, 4, 3, 1]

    def test_randomized_is_a_permutation(self):
        cards = [flip(i) for i in range(20)]
        result = order_cards(cards, StudyOptions(), random.Random(7))
        assert sorted(c.card_id for c in result) == list(range(20))

    def test_prepare_can_empty_the_list(self):
        cards = [flip(1), flip(2)]
        assert prepare_working_list(cards, StudyOptions(favorites_only=True)) == []


class TestScore:

    @pytest.mark.parametrize('correct,wrong,expected', [
        (0, 0, 0),
        (3, 1, 75),
        (1, 7, 13),
        (2, 1, 67),
        (1, 2, 33),
        (5, 0, 100),
    ])
    def test_rounding(self, correct, wrong, expected):
        assert compute_score(correct, wrong) == expected

    def test_half_rounds_up(self):
        # 1/8 = 12.5 -> 13 and 5/8 = 62.5 -> 63
        assert compute_score(1, 7) == 13
        assert compute_score(5, 3) == 63


class TestChoiceGrading:
    """Multiple-choice answers must match the correct set exactly."""

    def test_exact_set(self):
        assert ChoiceEngine.check_selection(['B', 'A'], ['A', 'B'])['is_correct'] is True

    def test_subset_is_wrong(self):
        result = ChoiceEngine.check_selection(['A'], ['A', 'B'])
        assert result['is_correct'] is False
        assert result['missed'] == ['B']

    def test_superset_is_wrong(self):
        result = ChoiceEngine.check_selection(['A', 'B', 'C'], ['A', 'B'])
        assert result['is_correct'] is False
        assert result['wrongly_selected'] == ['C']

    def test_authored_distractors_win(self):
        assert ChoiceEngine.pick_distractors(['A'], ['X', 'Y'], ['S1', 'S2']) == ['X', 'Y']

    def test_sampled_distractors_skip_correct_answers(self):
        picked = ChoiceEngine.pick_distractors(['A'], [], ['A', 'B', 'C', 'D', 'E', 'B'], random.Random(3))
        assert len(picked) == 3
        assert 'A' not in picked
        assert len(set(picked)) == 3

    def test_mode_options_contain_every_correct_answer(self):
        card = MultipleChoiceCard(
            card_id=1, deck_id=1, front='Primes?', back='2',
            correct_answers=('2', '3'), incorrect_answers=('4', '6'),
        )
        data = ModeFactory.for_card(card).format_interaction(card, [card], random.Random(1))
        assert sorted(data['options']) == ['2', '3', '4', '6']
        assert data['multiple_answers'] is True


class TestTypeAnswerGrading:

    def test_case_and_whitespace_insensitive(self):
        assert TypingEngine.validate_answer('  paris ', 'Paris')['is_correct'] is True

    def test_accepted_alternates(self):
        result = TypingEngine.validate_answer('NYC', 'New York City', ['NYC', 'New York'])
        assert result['is_correct'] is True
        assert result['matched'] == 'NYC'

    def test_wrong_answer(self):
        assert TypingEngine.validate_answer('Lyon', 'Paris', [])['is_correct'] is False

    def test_blank_submission_is_rejected(self):
        card = TypeAnswerCard(card_id=1, deck_id=1, front='Capital of France', back='Paris')
        with pytest.raises(ValidationError):
            ModeFactory.for_card(card).evaluate_submission(card, {'answer': '   '})
