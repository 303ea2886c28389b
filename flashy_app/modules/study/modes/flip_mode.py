# File: flashy_app/modules/study/modes/flip_mode.py
from __future__ import annotations

from typing import Any, Dict, Optional

from ..cards import CLASSIC_FLIP
from .base_mode import BaseStudyMode, EvaluationResult


class ClassicFlipMode(BaseStudyMode):
    """
    Reveal-and-rate. Nothing is compared: the learner says whether they
    knew the answer after flipping the card.
    """

    def get_mode_id(self) -> str:
        return CLASSIC_FLIP

    def format_interaction(self, card, siblings=(), rng=None) -> Dict[str, Any]:
        return {
            'type': CLASSIC_FLIP,
            'front': card.front,
            'back': card.back,
        }

    def evaluate_submission(self, card, user_input: Dict[str, Any], presented: Optional[Dict[str, Any]] = None) -> EvaluationResult:
        knew = user_input.get('knew', user_input.get('is_correct'))
        return EvaluationResult(
            is_correct=bool(knew),
            feedback={'back': card.back, 'self_reported': True},
        )
