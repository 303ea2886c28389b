# File: flashy_app/modules/decks/interface.py
"""
Decks Interface
===============
Public API for other modules. Cross-module access to decks and cards goes
through here, never through the services directly.
"""

from typing import Any, Dict, List

from .services.card_service import CardService
from .services.deck_service import DeckService


class DeckInterface:

    @staticmethod
    def get_deck(user, deck_id: int):
        return DeckService.get_deck(user, deck_id)

    @staticmethod
    def get_deck_cards(user, deck_id: int) -> List[Dict[str, Any]]:
        return [c.to_dict() for c in CardService.list_cards(user, deck_id)]

    @staticmethod
    def get_all_cards(user) -> List[Dict[str, Any]]:
        return [c.to_dict() for c in CardService.list_all_cards(user)]

    @staticmethod
    def set_card_flags(user, card_id: int, flags: Dict[str, Any]) -> Dict[str, Any]:
        return CardService.set_flags(user, card_id, flags).to_dict()
