# File: flashy_app/modules/study/modes/factory.py
"""
Mode Factory
============
Resolves the presentation mode for a card from its type.

To add a mode: write a ``BaseStudyMode`` subclass and list it in
``_ensure_builtins`` or call ``ModeFactory.register``.
"""

from __future__ import annotations

from typing import Dict, Type

from ..cards import StudyCard
from .base_mode import BaseStudyMode


class ModeFactory:

    _modes: Dict[str, Type[BaseStudyMode]] = {}
    _initialised: bool = False

    @classmethod
    def _ensure_builtins(cls) -> None:
        """Lazy-load built-in modes on first access."""
        if cls._initialised:
            return

        from .choice_mode import MultipleChoiceMode
        from .flip_mode import ClassicFlipMode
        from .typing_mode import TypeAnswerMode

        for mode_class in (ClassicFlipMode, MultipleChoiceMode, TypeAnswerMode):
            cls._modes[mode_class().get_mode_id()] = mode_class

        cls._initialised = True

    @classmethod
    def register(cls, mode_class: Type[BaseStudyMode]) -> None:
        """Register a custom mode at runtime."""
        cls._ensure_builtins()
        cls._modes[mode_class().get_mode_id()] = mode_class

    @classmethod
    def create(cls, mode_id: str) -> BaseStudyMode:
        """
        Instantiate a mode by card type.

        Raises:
            KeyError: If no mode is registered under *mode_id*.
        """
        cls._ensure_builtins()

        mode_class = cls._modes.get(mode_id)
        if mode_class is None:
            raise KeyError(
                f"Unknown study mode: {mode_id!r}. "
                f"Available: {list(cls._modes.keys())}"
            )
        return mode_class()

    @classmethod
    def for_card(cls, card: StudyCard) -> BaseStudyMode:
        return cls.create(card.card_type)

    @classmethod
    def available_modes(cls) -> list:
        cls._ensure_builtins()
        return list(cls._modes.keys())
