"""
Type-answer business rules.
Pure logic, no database access.
"""

from typing import Iterable, Optional


class TypingEngine:
    @staticmethod
    def normalize(text: Optional[str]) -> str:
        return (text or '').strip().lower()

    @staticmethod
    def validate_answer(user_input: str, correct_answer: str, accepted_answers: Iterable[str] = ()) -> dict:
        """
        Compare trimmed, lower-cased input with the primary answer and with
        every accepted alternate.
        """
        normalized_input = TypingEngine.normalize(user_input)
        candidates = [correct_answer, *(accepted_answers or [])]

        matched = next(
            (c for c in candidates if c is not None and TypingEngine.normalize(c) == normalized_input),
            None,
        )
        return {
            'is_correct': matched is not None,
            'matched': matched,
        }
