from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy.types import JSON

from ..extensions import db


class Deck(db.Model):
    """A named collection of cards owned by one user."""
    __tablename__ = 'decks'

    DEFAULT_EMOJI = '📚'
    DEFAULT_COLOR = '#10B981'
    DIFFICULTIES = ('beginner', 'intermediate', 'advanced', 'expert', 'mixed')

    deck_id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.user_id'), nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False)
    emoji = db.Column(db.String(16), default=DEFAULT_EMOJI, nullable=False)
    color = db.Column(db.String(16), default=DEFAULT_COLOR, nullable=False)
    category = db.Column(db.String(100))
    subtopic = db.Column(db.String(100))
    difficulty = db.Column(db.String(20))
    front_language = db.Column(db.String(20))
    back_language = db.Column(db.String(20))
    card_count = db.Column(db.Integer, default=0, nullable=False)
    position = db.Column(db.Integer, default=0, nullable=False)

    # Community linkage
    is_published = db.Column(db.Boolean, default=False, nullable=False)
    community_published_id = db.Column(db.Integer, db.ForeignKey('community_decks.community_deck_id', ondelete='SET NULL'))
    source_community_deck_id = db.Column(db.Integer)
    publish_banned = db.Column(db.Boolean, default=False, nullable=False)
    publish_banned_reason = db.Column(db.Text)

    created_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    cards = db.relationship(
        'Card',
        backref='deck',
        lazy='dynamic',
        cascade='all, delete-orphan',
        order_by='Card.position',
    )

    def to_dict(self):
        return {
            'deck_id': self.deck_id,
            'user_id': self.user_id,
            'name': self.name,
            'emoji': self.emoji,
            'color': self.color,
            'category': self.category,
            'subtopic': self.subtopic,
            'difficulty': self.difficulty,
            'front_language': self.front_language,
            'back_language': self.back_language,
            'card_count': self.card_count,
            'position': self.position,
            'is_published': bool(self.is_published),
            'community_published_id': self.community_published_id,
            'source_community_deck_id': self.source_community_deck_id,
            'publish_banned': bool(self.publish_banned),
            'publish_banned_reason': self.publish_banned_reason,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class Card(db.Model):
    """
    A flashcard. ``card_type`` decides which answer fields are meaningful:

    * ``classic-flip``: ``back`` only
    * ``multiple-choice``: ``correct_answers`` and ``incorrect_answers``
    * ``type-answer``: ``back`` plus ``accepted_answers``
    """
    __tablename__ = 'cards'

    TYPE_CLASSIC_FLIP = 'classic-flip'
    TYPE_MULTIPLE_CHOICE = 'multiple-choice'
    TYPE_TYPE_ANSWER = 'type-answer'
    TYPES = (TYPE_CLASSIC_FLIP, TYPE_MULTIPLE_CHOICE, TYPE_TYPE_ANSWER)

    card_id = db.Column(db.Integer, primary_key=True)
    deck_id = db.Column(db.Integer, db.ForeignKey('decks.deck_id', ondelete='CASCADE'), nullable=False, index=True)
    card_type = db.Column(db.String(20), default=TYPE_CLASSIC_FLIP, nullable=False)
    front = db.Column(db.Text, nullable=False)
    back = db.Column(db.Text, nullable=False, default='')

    correct_answers = db.Column(JSON)
    incorrect_answers = db.Column(JSON)
    accepted_answers = db.Column(JSON)

    front_image_url = db.Column(db.String(500))
    back_image_url = db.Column(db.String(500))
    front_audio = db.Column(db.String(500))
    back_audio = db.Column(db.String(500))

    is_ignored = db.Column(db.Boolean, default=False, nullable=False)
    favorite = db.Column(db.Boolean, default=False, nullable=False)
    position = db.Column(db.Integer, default=0, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    def to_dict(self):
        return {
            'card_id': self.card_id,
            'deck_id': self.deck_id,
            'card_type': self.card_type,
            'front': self.front,
            'back': self.back,
            'correct_answers': list(self.correct_answers or []),
            'incorrect_answers': list(self.incorrect_answers or []),
            'accepted_answers': list(self.accepted_answers or []),
            'front_image_url': self.front_image_url,
            'back_image_url': self.back_image_url,
            'front_audio': self.front_audio,
            'back_audio': self.back_audio,
            'is_ignored': bool(self.is_ignored),
            'favorite': bool(self.favorite),
            'position': self.position,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
