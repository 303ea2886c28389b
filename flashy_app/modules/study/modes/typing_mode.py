# File: flashy_app/modules/study/modes/typing_mode.py
from __future__ import annotations

from typing import Any, Dict, Optional

from flashy_app.core.error_handlers import ValidationError

from ..cards import TYPE_ANSWER, TypeAnswerCard
from ..engine.typing_engine import TypingEngine
from .base_mode import BaseStudyMode, EvaluationResult


class TypeAnswerMode(BaseStudyMode):
    """Free-text answer checked against the back and the accepted alternates."""

    def get_mode_id(self) -> str:
        return TYPE_ANSWER

    def format_interaction(self, card: TypeAnswerCard, siblings=(), rng=None) -> Dict[str, Any]:
        return {
            'type': TYPE_ANSWER,
            'front': card.front,
        }

    def evaluate_submission(
        self,
        card: TypeAnswerCard,
        user_input: Dict[str, Any],
        presented: Optional[Dict[str, Any]] = None,
    ) -> EvaluationResult:
        answer = user_input.get('answer')
        if not isinstance(answer, str) or not answer.strip():
            raise ValidationError('Type an answer before submitting', errors={'answer': 'required'})

        result = TypingEngine.validate_answer(answer, card.back, card.accepted_answers)
        return EvaluationResult(
            is_correct=result['is_correct'],
            feedback={
                'correct_answer': card.back,
                'accepted_answers': list(card.accepted_answers),
                'your_answer': answer,
            },
        )
