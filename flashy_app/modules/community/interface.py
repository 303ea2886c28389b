# File: flashy_app/modules/community/interface.py
from typing import Any, Dict, List

from .services.publish_service import PublishService


class CommunityInterface:
    """Read access to community snapshots for other modules."""

    @staticmethod
    def get_deck(community_deck_id: int) -> Dict[str, Any]:
        return PublishService.get_community_deck(community_deck_id).to_dict()

    @staticmethod
    def get_cards(community_deck_id: int) -> List[Dict[str, Any]]:
        return [c.to_dict() for c in PublishService.get_community_cards(community_deck_id)]
