# File: flashy_app/modules/study/navigation.py
"""
Views a study run can hand the user back to, as a closed set of variants.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Optional, Union

from .schemas import StudySource


@dataclass(frozen=True)
class DeckDetail:
    deck_id: int
    name: ClassVar[str] = 'deck-detail'

    def to_dict(self) -> Dict[str, Any]:
        return {'view': self.name, 'deck_id': self.deck_id}


@dataclass(frozen=True)
class AllCards:
    name: ClassVar[str] = 'all-cards'

    def to_dict(self) -> Dict[str, Any]:
        return {'view': self.name}


@dataclass(frozen=True)
class Community:
    name: ClassVar[str] = 'community'

    def to_dict(self) -> Dict[str, Any]:
        return {'view': self.name}


@dataclass(frozen=True)
class SharedDeck:
    community_deck_id: int
    name: ClassVar[str] = 'shared-deck'

    def to_dict(self) -> Dict[str, Any]:
        return {'view': self.name, 'community_deck_id': self.community_deck_id}


View = Union[DeckDetail, AllCards, Community, SharedDeck]


def back_target(source: StudySource) -> View:
    """Where "back" leads when leaving a run."""
    if source.is_temporary:
        return Community()
    if source.is_all_cards:
        return AllCards()
    return DeckDetail(source.deck_id)


def deck_details_target(source: StudySource) -> Optional[View]:
    """
    "View deck details" for a temporary run: the shared deck it came from
    when known, otherwise the community list. ``None`` for other sources.
    """
    if not source.is_temporary:
        return None
    if source.return_to_shared_deck_id is not None:
        return SharedDeck(source.return_to_shared_deck_id)
    return Community()


def navigation_targets(source: StudySource) -> Dict[str, Any]:
    targets = {'back': back_target(source).to_dict()}
    details = deck_details_target(source)
    if details is not None:
        targets['deck_details'] = details.to_dict()
    return targets
