"""
Multiple-choice business rules.
Pure logic, no database access.
"""

import random
from typing import Iterable, List, Optional, Sequence

MAX_SAMPLED_DISTRACTORS = 3


class ChoiceEngine:
    @staticmethod
    def pick_distractors(
        correct_answers: Sequence[str],
        authored: Sequence[str],
        sibling_backs: Iterable[str],
        rng: Optional[random.Random] = None,
    ) -> List[str]:
        """
        Wrong options for a question.

        Author-supplied incorrect answers win. Otherwise up to three backs of
        sibling cards are sampled, skipping any that is itself a correct answer.
        """
        if authored:
            return list(authored)

        correct = set(correct_answers)
        pool = []
        for back in sibling_backs:
            if back and back not in correct and back not in pool:
                pool.append(back)
        (rng or random).shuffle(pool)
        return pool[:MAX_SAMPLED_DISTRACTORS]

    @staticmethod
    def build_options(
        correct_answers: Sequence[str],
        distractors: Sequence[str],
        rng: Optional[random.Random] = None,
    ) -> List[str]:
        options = list(correct_answers) + list(distractors)
        (rng or random).shuffle(options)
        return options

    @staticmethod
    def check_selection(selected: Iterable[str], correct_answers: Iterable[str]) -> dict:
        """Exact set equality: a subset or a superset of the right answers is wrong."""
        chosen = set(selected or [])
        expected = set(correct_answers)
        is_correct = chosen == expected
        return {
            'is_correct': is_correct,
            'missed': sorted(expected - chosen),
            'wrongly_selected': sorted(chosen - expected),
        }
