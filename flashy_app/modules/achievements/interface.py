# File: flashy_app/modules/achievements/interface.py
"""
Achievements Interface
======================
Public API for other modules.
"""

from typing import Any, Dict, List

from .logics.catalog import ACHIEVEMENTS
from .services.achievement_service import AchievementService


class AchievementInterface:

    @staticmethod
    def describe(user_id: int) -> Dict[str, Any]:
        return AchievementService.describe(user_id)

    @staticmethod
    def catalog() -> List[Dict[str, str]]:
        return [a.to_dict() for a in ACHIEVEMENTS]
