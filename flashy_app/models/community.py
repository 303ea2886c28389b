from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy.types import JSON

from ..extensions import db


class CommunityDeck(db.Model):
    """Published snapshot of a personal deck."""
    __tablename__ = 'community_decks'

    community_deck_id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey('users.user_id'), nullable=False, index=True)
    source_deck_id = db.Column(db.Integer, index=True)
    name = db.Column(db.String(200), nullable=False)
    emoji = db.Column(db.String(16))
    color = db.Column(db.String(16))
    category = db.Column(db.String(100), nullable=False)
    subtopic = db.Column(db.String(100), nullable=False)
    difficulty = db.Column(db.String(20))
    front_language = db.Column(db.String(20))
    back_language = db.Column(db.String(20))
    card_count = db.Column(db.Integer, default=0, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    cards = db.relationship(
        'CommunityCard',
        backref='community_deck',
        lazy='dynamic',
        cascade='all, delete-orphan',
        order_by='CommunityCard.position',
    )

    def to_dict(self):
        return {
            'community_deck_id': self.community_deck_id,
            'owner_id': self.owner_id,
            'source_deck_id': self.source_deck_id,
            'name': self.name,
            'emoji': self.emoji,
            'color': self.color,
            'category': self.category,
            'subtopic': self.subtopic,
            'difficulty': self.difficulty,
            'front_language': self.front_language,
            'back_language': self.back_language,
            'card_count': self.card_count,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }


class CommunityCard(db.Model):
    __tablename__ = 'community_cards'

    community_card_id = db.Column(db.Integer, primary_key=True)
    community_deck_id = db.Column(
        db.Integer,
        db.ForeignKey('community_decks.community_deck_id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )
    card_type = db.Column(db.String(20), nullable=False)
    front = db.Column(db.Text, nullable=False)
    back = db.Column(db.Text, nullable=False, default='')
    correct_answers = db.Column(JSON)
    incorrect_answers = db.Column(JSON)
    accepted_answers = db.Column(JSON)
    front_image_url = db.Column(db.String(500))
    back_image_url = db.Column(db.String(500))
    front_audio = db.Column(db.String(500))
    back_audio = db.Column(db.String(500))
    position = db.Column(db.Integer, default=0, nullable=False)

    def to_dict(self):
        # Shaped like Card.to_dict so study code reads both the same way
        return {
            'card_id': self.community_card_id,
            'deck_id': self.community_deck_id,
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
            'is_ignored': False,
            'favorite': False,
            'position': self.position,
        }
