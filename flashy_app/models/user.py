from __future__ import annotations

from datetime import datetime, timezone

from flask_login import UserMixin
from werkzeug.security import check_password_hash, generate_password_hash

from ..extensions import db


class User(UserMixin, db.Model):
    """Application user model."""
    __tablename__ = 'users'

    TIER_FREE = 'free'
    TIER_MONTHLY = 'monthly'
    TIER_ANNUAL = 'annual'
    TIER_LIFETIME = 'lifetime'
    TIERS = (TIER_FREE, TIER_MONTHLY, TIER_ANNUAL, TIER_LIFETIME)

    user_id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    subscription_tier = db.Column(db.String(20), default=TIER_FREE, nullable=False)
    is_superuser = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    decks = db.relationship('Deck', backref='owner', lazy='dynamic', cascade='all, delete-orphan')

    def get_id(self):
        return str(self.user_id)

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'user_id': self.user_id,
            'username': self.username,
            'email': self.email,
            'subscription_tier': self.subscription_tier,
            'is_superuser': bool(self.is_superuser),
        }
