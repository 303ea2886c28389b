# File: flashy_app/modules/study/cards.py
"""
Card variants
=============
The three card types as a closed set of dataclasses. Each variant carries
only the answer fields that make sense for it, so mode dispatch can branch
on the class instead of probing optional keys.

Pure data, no Flask or database access.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, ClassVar, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from flashy_app.core.error_handlers import ValidationError

CLASSIC_FLIP = 'classic-flip'
MULTIPLE_CHOICE = 'multiple-choice'
TYPE_ANSWER = 'type-answer'
CARD_TYPES = (CLASSIC_FLIP, MULTIPLE_CHOICE, TYPE_ANSWER)


@dataclass(frozen=True)
class StudyCard:
    """Fields shared by every card variant."""

    card_type: ClassVar[str] = ''

    card_id: int
    deck_id: Optional[int]
    front: str
    back: str = ''
    front_image_url: Optional[str] = None
    back_image_url: Optional[str] = None
    front_audio: Optional[str] = None
    back_audio: Optional[str] = None
    favorite: bool = False
    ignored: bool = False
    position: Optional[int] = None

    def with_flags(self, **changes: Any) -> 'StudyCard':
        """Return a copy with ``favorite`` / ``ignored`` replaced."""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'card_id': self.card_id,
            'deck_id': self.deck_id,
            'card_type': self.card_type,
            'front': self.front,
            'front_image_url': self.front_image_url,
            'back_image_url': self.back_image_url,
            'front_audio': self.front_audio,
            'back_audio': self.back_audio,
            'favorite': self.favorite,
            'ignored': self.ignored,
        }


@dataclass(frozen=True)
class ClassicFlipCard(StudyCard):
    card_type: ClassVar[str] = CLASSIC_FLIP


@dataclass(frozen=True)
class MultipleChoiceCard(StudyCard):
    card_type: ClassVar[str] = MULTIPLE_CHOICE

    correct_answers: Tuple[str, ...] = field(default_factory=tuple)
    incorrect_answers: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def answer_set(self) -> Tuple[str, ...]:
        return self.correct_answers or ((self.back,) if self.back else ())

    @property
    def is_multi_answer(self) -> bool:
        return len(self.answer_set) > 1


@dataclass(frozen=True)
class TypeAnswerCard(StudyCard):
    card_type: ClassVar[str] = TYPE_ANSWER

    accepted_answers: Tuple[str, ...] = field(default_factory=tuple)


AnyCard = Union[ClassicFlipCard, MultipleChoiceCard, TypeAnswerCard]

_VARIANTS = {
    CLASSIC_FLIP: ClassicFlipCard,
    MULTIPLE_CHOICE: MultipleChoiceCard,
    TYPE_ANSWER: TypeAnswerCard,
}


def _strings(values: Optional[Iterable[Any]]) -> Tuple[str, ...]:
    return tuple(str(v) for v in (values or []) if v is not None)


def card_from_record(record: Mapping[str, Any]) -> AnyCard:
    """
    Build the card variant matching ``record['card_type']``.

    ``record`` is the dict produced by ``Card.to_dict`` or
    ``CommunityCard.to_dict``. A missing type means classic flip.
    """
    card_type = record.get('card_type') or CLASSIC_FLIP
    variant = _VARIANTS.get(card_type)
    if variant is None:
        raise ValidationError(f"Unknown card type: {card_type!r}", errors={'card_type': card_type})

    common = dict(
        card_id=record['card_id'],
        deck_id=record.get('deck_id'),
        front=record.get('front') or '',
        back=record.get('back') or '',
        front_image_url=record.get('front_image_url'),
        back_image_url=record.get('back_image_url'),
        front_audio=record.get('front_audio'),
        back_audio=record.get('back_audio'),
        favorite=bool(record.get('favorite')),
        ignored=bool(record.get('is_ignored', record.get('ignored'))),
        position=record.get('position'),
    )

    if variant is MultipleChoiceCard:
        correct = _strings(record.get('correct_answers'))
        if not correct and common['back']:
            correct = (common['back'],)
        return MultipleChoiceCard(
            correct_answers=correct,
            incorrect_answers=_strings(record.get('incorrect_answers') or record.get('options')),
            **common,
        )
    if variant is TypeAnswerCard:
        return TypeAnswerCard(accepted_answers=_strings(record.get('accepted_answers')), **common)
    return ClassicFlipCard(**common)


def cards_from_records(records: Iterable[Mapping[str, Any]]) -> List[AnyCard]:
    return [card_from_record(r) for r in records]


def normalize_multiple_choice(options: Sequence[Any], correct_indices: Iterable[int]) -> Dict[str, Any]:
    """
    Turn an authoring form (option list + indices of the right ones) into the
    stored answer shape of a multiple-choice card.

    Returns ``{'back', 'correct_answers', 'incorrect_answers'}``.
    Raises ``ValidationError`` when no non-blank option is marked correct.
    """
    trimmed = [str(o).strip() if o is not None else '' for o in options]
    wanted = set(correct_indices or [])

    correct, incorrect = [], []
    for index, option in enumerate(trimmed):
        if not option:
            continue
        (correct if index in wanted else incorrect).append(option)

    if not correct:
        raise ValidationError('A multiple-choice card needs at least one correct answer')

    return {
        'back': correct[0],
        'correct_answers': correct,
        'incorrect_answers': incorrect,
    }
