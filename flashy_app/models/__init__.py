"""Database models for Flashy."""

from ..extensions import db
from .user import User
from .deck import Card, Deck
from .community import CommunityCard, CommunityDeck
from .study import ActiveStudyRun, StudySession
from .achievement import UserAchievementStats

__all__ = [
    "db",
    "User",
    "Deck",
    "Card",
    "CommunityDeck",
    "CommunityCard",
    "StudySession",
    "ActiveStudyRun",
    "UserAchievementStats",
]
