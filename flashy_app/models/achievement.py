from datetime import datetime, timezone

from sqlalchemy.ext.mutable import MutableDict, MutableList
from sqlalchemy.types import JSON

from ..extensions import db


class UserAchievementStats(db.Model):
    """Per-user achievement counters, flag bag and unlocked achievement ids."""
    __tablename__ = 'user_achievement_stats'

    user_id = db.Column(db.Integer, db.ForeignKey('users.user_id'), primary_key=True)

    total_study_sessions = db.Column(db.Integer, default=0, nullable=False)
    cards_reviewed = db.Column(db.Integer, default=0, nullable=False)
    average_accuracy = db.Column(db.Float, default=0.0, nullable=False)
    perfect_scores = db.Column(db.Integer, default=0, nullable=False)
    correct_answers_in_row = db.Column(db.Integer, default=0, nullable=False)
    best_correct_in_row = db.Column(db.Integer, default=0, nullable=False)
    study_streak = db.Column(db.Integer, default=0, nullable=False)
    decks_created = db.Column(db.Integer, default=0, nullable=False)
    cards_created = db.Column(db.Integer, default=0, nullable=False)
    decks_published = db.Column(db.Integer, default=0, nullable=False)
    last_study_date = db.Column(db.Date)

    # Boolean observations such as studied_after_midnight or created_multiple_choice_card
    flags = db.Column(MutableDict.as_mutable(JSON), default=dict, nullable=False)
    unlocked = db.Column(MutableList.as_mutable(JSON), default=list, nullable=False)

    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    user = db.relationship(
        'User',
        backref=db.backref('achievement_stats', uselist=False, cascade='all, delete-orphan'),
        lazy=True
    )

    def has_flag(self, name: str) -> bool:
        return bool((self.flags or {}).get(name))

    def set_flag(self, name: str) -> bool:
        """Set a flag; returns True when it was not set before."""
        if self.flags is None:
            self.flags = {}
        if self.flags.get(name):
            return False
        self.flags[name] = True
        return True

    def to_dict(self):
        return {
            'user_id': self.user_id,
            'total_study_sessions': self.total_study_sessions,
            'cards_reviewed': self.cards_reviewed,
            'average_accuracy': round(self.average_accuracy or 0.0, 2),
            'perfect_scores': self.perfect_scores,
            'correct_answers_in_row': self.correct_answers_in_row,
            'study_streak': self.study_streak,
            'decks_created': self.decks_created,
            'cards_created': self.cards_created,
            'decks_published': self.decks_published,
            'last_study_date': self.last_study_date.isoformat() if self.last_study_date else None,
            'flags': dict(self.flags or {}),
            'unlocked': list(self.unlocked or []),
        }
