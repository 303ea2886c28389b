# File: flashy_app/modules/study/schemas.py
"""Data transfer objects for study runs. Plain dataclasses, no ORM objects."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from flashy_app.core.error_handlers import ValidationError

SOURCE_DECK = 'deck'
SOURCE_ALL_CARDS = 'all-cards'
SOURCE_TEMPORARY = 'temporary'
SOURCE_KINDS = (SOURCE_DECK, SOURCE_ALL_CARDS, SOURCE_TEMPORARY)


@dataclass(frozen=True)
class StudySource:
    """
    Where the cards of a run come from.

    * ``deck``: one of the user's decks; the only kind that is persisted.
    * ``all-cards``: every card the user owns.
    * ``temporary``: an unsaved preview over a community deck.
    """

    kind: str
    deck_id: Optional[int] = None
    community_deck_id: Optional[int] = None
    return_to_shared_deck_id: Optional[int] = None
    difficulty: Optional[str] = None

    def __post_init__(self):
        if self.kind not in SOURCE_KINDS:
            raise ValidationError(f"Unknown study source {self.kind!r}", errors={'source': self.kind})
        if self.kind == SOURCE_DECK and self.deck_id is None:
            raise ValidationError('deck_id is required to study a deck', errors={'deck_id': 'required'})
        if self.kind == SOURCE_TEMPORARY and self.community_deck_id is None:
            raise ValidationError(
                'community_deck_id is required for a temporary deck',
                errors={'community_deck_id': 'required'},
            )

    @property
    def is_temporary(self) -> bool:
        return self.kind == SOURCE_TEMPORARY

    @property
    def is_all_cards(self) -> bool:
        return self.kind == SOURCE_ALL_CARDS

    @property
    def is_persisted(self) -> bool:
        """Only runs over a real, saved deck leave a history record."""
        return self.kind == SOURCE_DECK and self.deck_id is not None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StudySource':
        return cls(**{k: data.get(k) for k in cls.__dataclass_fields__ if k in data})


@dataclass
class SessionRecord:
    """The single history row a completed deck run produces."""

    run_id: str
    user_id: Optional[int]
    deck_id: int
    started_at: datetime
    ended_at: datetime
    cards_studied: int
    correct_count: int
    incorrect_count: int
    skipped_count: int
    time_spent_seconds: int
    score: int
    study_mode: str = 'review'


@dataclass
class SessionSummary:
    """Terminal tally shown after a run."""

    run_id: str
    studied: int
    correct: int
    wrong: int
    skipped: int
    score: int
    started_at: Optional[datetime]
    ended_at: Optional[datetime]
    elapsed_seconds: int
    persisted: bool = False
    source_kind: str = SOURCE_DECK
    navigation: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['started_at'] = self.started_at.isoformat() if self.started_at else None
        data['ended_at'] = self.ended_at.isoformat() if self.ended_at else None
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SessionSummary':
        values = dict(data)
        for key in ('started_at', 'ended_at'):
            if values.get(key):
                values[key] = datetime.fromisoformat(values[key])
        return cls(**values)
