# File: flashy_app/modules/decks/schemas.py
"""Request validation and result DTOs for decks and cards."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from flashy_app.core.error_handlers import ValidationError
from flashy_app.models import Card, Deck
from flashy_app.modules.study.interface import normalize_multiple_choice

DECK_FIELDS = (
    'name', 'emoji', 'color', 'category', 'subtopic', 'difficulty',
    'front_language', 'back_language', 'position',
)
MEDIA_FIELDS = ('front_image_url', 'back_image_url', 'front_audio', 'back_audio')
ANSWER_FIELDS = ('correct_answers', 'incorrect_answers', 'accepted_answers')


def _clean_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _string_list(value: Any, name: str) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise ValidationError(f"{name} must be a list", errors={name: 'expected a list'})
    return [s for s in (_clean_str(v) for v in value) if s]


def parse_deck_payload(data: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for key in DECK_FIELDS:
        if key in data:
            values[key] = data[key] if key == 'position' else _clean_str(data[key])

    if not partial or 'name' in values:
        if not values.get('name'):
            raise ValidationError('Deck name is required', errors={'name': 'required'})

    difficulty = values.get('difficulty')
    if difficulty is not None and difficulty not in Deck.DIFFICULTIES:
        raise ValidationError(
            'Unknown difficulty',
            errors={'difficulty': f"expected one of {', '.join(Deck.DIFFICULTIES)}"},
        )
    if 'position' in values:
        try:
            values['position'] = int(values['position'] or 0)
        except (TypeError, ValueError):
            raise ValidationError('position must be an integer', errors={'position': 'integer'})

    if not partial:
        values['emoji'] = values.get('emoji') or Deck.DEFAULT_EMOJI
        values['color'] = values.get('color') or Deck.DEFAULT_COLOR
    return values


def parse_card_payload(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate a full card record and return the column values.

    The card type decides which answer fields are kept; the others are
    cleared so a stored card only ever carries one answer shape.
    """
    card_type = data.get('card_type') or Card.TYPE_CLASSIC_FLIP
    if card_type not in Card.TYPES:
        raise ValidationError(
            f"Unknown card type {card_type!r}",
            errors={'card_type': f"expected one of {', '.join(Card.TYPES)}"},
        )

    front = _clean_str(data.get('front'))
    if not front:
        raise ValidationError('Card front is required', errors={'front': 'required'})

    values: Dict[str, Any] = {
        'card_type': card_type,
        'front': front,
        'correct_answers': None,
        'incorrect_answers': None,
        'accepted_answers': None,
    }

    if card_type == Card.TYPE_MULTIPLE_CHOICE:
        if data.get('options') is not None and data.get('correct_indices') is not None:
            shape = normalize_multiple_choice(data['options'], data['correct_indices'])
        else:
            correct = _string_list(data.get('correct_answers'), 'correct_answers')
            if not correct and _clean_str(data.get('back')):
                correct = [_clean_str(data.get('back'))]
            if not correct:
                raise ValidationError(
                    'A multiple-choice card needs at least one correct answer',
                    errors={'correct_answers': 'required'},
                )
            incorrect = [a for a in _string_list(data.get('incorrect_answers'), 'incorrect_answers') if a not in correct]
            shape = {'back': correct[0], 'correct_answers': correct, 'incorrect_answers': incorrect}
        values.update(shape)
    else:
        back = _clean_str(data.get('back'))
        if not back:
            raise ValidationError('Card back is required', errors={'back': 'required'})
        values['back'] = back
        if card_type == Card.TYPE_TYPE_ANSWER:
            values['accepted_answers'] = _string_list(data.get('accepted_answers'), 'accepted_answers')

    for key in MEDIA_FIELDS:
        if key in data:
            values[key] = _clean_str(data[key])

    if 'favorite' in data:
        values['favorite'] = bool(data['favorite'])
    if 'is_ignored' in data or 'ignored' in data:
        values['is_ignored'] = bool(data.get('is_ignored', data.get('ignored')))
    return values


@dataclass
class BatchFailure:
    index: int
    message: str
    field: Optional[str] = None

    def to_dict(self):
        return {'index': self.index, 'message': self.message, 'field': self.field}


@dataclass
class BatchResult:
    """Cards created by a batch and the items (or images) that failed."""

    created: List[Dict[str, Any]] = field(default_factory=list)
    failed: List[BatchFailure] = field(default_factory=list)

    @property
    def partial(self) -> bool:
        return bool(self.created) and bool(self.failed)

    def to_dict(self):
        return {
            'created': self.created,
            'failed': [f.to_dict() for f in self.failed],
            'created_count': len(self.created),
            'failed_count': len(self.failed),
            'partial': self.partial,
        }
