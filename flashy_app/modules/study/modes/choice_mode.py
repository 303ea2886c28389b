# File: flashy_app/modules/study/modes/choice_mode.py
"""
Multiple Choice Mode
====================
Shows the right answers mixed with distractors. Cards may have more than
one right answer; the learner must select exactly that set.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from ..cards import MULTIPLE_CHOICE, MultipleChoiceCard
from ..engine.choice_engine import ChoiceEngine
from .base_mode import BaseStudyMode, EvaluationResult


class MultipleChoiceMode(BaseStudyMode):

    def get_mode_id(self) -> str:
        return MULTIPLE_CHOICE

    def format_interaction(self, card: MultipleChoiceCard, siblings=(), rng=None) -> Dict[str, Any]:
        correct = list(card.answer_set)
        distractors = ChoiceEngine.pick_distractors(
            correct_answers=correct,
            authored=card.incorrect_answers,
            sibling_backs=(s.back for s in siblings if s.card_id != card.card_id),
            rng=rng,
        )
        return {
            'type': MULTIPLE_CHOICE,
            'front': card.front,
            'options': ChoiceEngine.build_options(correct, distractors, rng=rng),
            'multiple_answers': len(correct) > 1,
        }

    def evaluate_submission(
        self,
        card: MultipleChoiceCard,
        user_input: Dict[str, Any],
        presented: Optional[Dict[str, Any]] = None,
    ) -> EvaluationResult:
        selected = user_input.get('selected')
        if selected is None and 'answer' in user_input:
            selected = [user_input['answer']]
        if isinstance(selected, str):
            selected = [selected]

        result = ChoiceEngine.check_selection(selected or [], card.answer_set)
        return EvaluationResult(
            is_correct=result['is_correct'],
            feedback={
                'correct_answers': list(card.answer_set),
                'missed': result['missed'],
                'wrongly_selected': result['wrongly_selected'],
            },
        )
