# File: flashy_app/modules/study/modes/base_mode.py
"""
Base Study Mode
===============
Contract shared by the three presentation modes (classic flip, multiple
choice, type answer).

A *Mode* does two things:

1. **Formatting** a card into the payload the client renders.
2. **Evaluating** the learner's submission for that card.

Modes are stateless. Anything that must stay stable across requests (the
shuffled option order, for instance) is returned from ``format_interaction``
and handed back to ``evaluate_submission`` as ``presented``.
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence

from ..cards import StudyCard


@dataclass
class EvaluationResult:
    """Outcome of ``BaseStudyMode.evaluate_submission``."""

    is_correct: bool
    feedback: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {'is_correct': self.is_correct, 'feedback': dict(self.feedback)}


class BaseStudyMode(ABC):
    """
    Contract for study presentation modes.

    Subclass checklist:
    * Implement ``get_mode_id``, ``format_interaction``, ``evaluate_submission``.
    * Keep logic pure: no database access, no Flask context.
    """

    @abstractmethod
    def get_mode_id(self) -> str:
        """Card type this mode renders, e.g. ``'multiple-choice'``."""
        ...

    @abstractmethod
    def format_interaction(
        self,
        card: StudyCard,
        siblings: Sequence[StudyCard] = (),
        rng: Optional[random.Random] = None,
    ) -> Dict[str, Any]:
        """
        Build the payload for ``card``.

        Args:
            card:     The card on screen.
            siblings: Every card of the run, used by modes that need
                      distractors.
            rng:      Random source for shuffling.
        """
        ...

    @abstractmethod
    def evaluate_submission(
        self,
        card: StudyCard,
        user_input: Dict[str, Any],
        presented: Optional[Dict[str, Any]] = None,
    ) -> EvaluationResult:
        """
        Grade the learner's answer.

        Args:
            card:       The card on screen.
            user_input: Raw submission, shape depends on the mode.
            presented:  What ``format_interaction`` returned for this card.
        """
        ...
