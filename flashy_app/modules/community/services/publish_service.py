# File: flashy_app/modules/community/services/publish_service.py
"""
Publishing personal decks as community snapshots.

A published deck gets a ``CommunityDeck`` copy with copies of its cards.
Publishing again refreshes that copy in place; unpublishing deletes it.
"""

from __future__ import annotations

from typing import List

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from flashy_app.core.error_handlers import AuthorizationError, NotFoundError, ValidationError
from flashy_app.core.signals import deck_published
from flashy_app.models import Card, CommunityCard, CommunityDeck, Deck, db
from flashy_app.modules.decks.services.deck_service import DeckService
from flashy_app.modules.subscriptions.interface import SubscriptionInterface
from flashy_app.modules.subscriptions.logics.limits import FEATURE_PUBLISH

_SNAPSHOT_DECK_FIELDS = (
    'name', 'emoji', 'color', 'category', 'subtopic', 'difficulty', 'front_language', 'back_language',
)
_SNAPSHOT_CARD_FIELDS = (
    'card_type', 'front', 'back', 'correct_answers', 'incorrect_answers', 'accepted_answers',
    'front_image_url', 'back_image_url', 'front_audio', 'back_audio', 'position',
)


class PublishService:

    @staticmethod
    def publish(user, deck_id: int) -> CommunityDeck:
        deck = DeckService.get_deck(user, deck_id)
        SubscriptionInterface.require_feature(user, FEATURE_PUBLISH)

        if deck.publish_banned:
            raise AuthorizationError(
                f"This deck cannot be published: {deck.publish_banned_reason or 'banned by a moderator'}"
            )
        if deck.source_community_deck_id:
            raise AuthorizationError('Decks imported from the community cannot be republished')
        missing = [f for f in ('category', 'subtopic') if not getattr(deck, f)]
        if missing:
            raise ValidationError(
                'Category and subtopic are required to publish',
                errors={f: 'required' for f in missing},
            )

        cards: List[Card] = deck.cards.order_by(Card.position.asc(), Card.card_id.asc()).all()
        if not cards:
            raise ValidationError('Cannot publish a deck without cards', errors={'cards': 'empty'})

        snapshot = db.session.get(CommunityDeck, deck.community_published_id) if deck.community_published_id else None
        first_publish = snapshot is None
        try:
            if first_publish:
                snapshot = CommunityDeck(owner_id=user.user_id, source_deck_id=deck.deck_id)
                db.session.add(snapshot)
            else:
                CommunityCard.query.filter_by(community_deck_id=snapshot.community_deck_id).delete(synchronize_session=False)

            for field in _SNAPSHOT_DECK_FIELDS:
                setattr(snapshot, field, getattr(deck, field))
            snapshot.card_count = len(cards)
            db.session.flush()

            for card in cards:
                db.session.add(CommunityCard(
                    community_deck_id=snapshot.community_deck_id,
                    **{f: getattr(card, f) for f in _SNAPSHOT_CARD_FIELDS},
                ))

            deck.is_published = True
            deck.community_published_id = snapshot.community_deck_id
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.error("Error publishing deck %s", deck_id, exc_info=True)
            raise

        current_app.logger.info("Deck %s published as community deck %s", deck_id, snapshot.community_deck_id)
        deck_published.send(
            None, user_id=user.user_id, deck=deck, community_deck=snapshot, first_publish=first_publish,
        )
        return snapshot

    @staticmethod
    def remove_snapshot(deck: Deck) -> None:
        """Delete the community copy of ``deck``. The caller commits."""
        snapshot = db.session.get(CommunityDeck, deck.community_published_id) if deck.community_published_id else None
        if snapshot is not None:
            db.session.delete(snapshot)
        deck.is_published = False
        deck.community_published_id = None

    @staticmethod
    def unpublish(user, deck_id: int) -> Deck:
        deck = DeckService.get_deck(user, deck_id)
        if not deck.community_published_id:
            raise ValidationError('Deck is not published')
        try:
            PublishService.remove_snapshot(deck)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.error("Error unpublishing deck %s", deck_id, exc_info=True)
            raise
        return deck

    @staticmethod
    def get_community_deck(community_deck_id: int) -> CommunityDeck:
        snapshot = db.session.get(CommunityDeck, community_deck_id)
        if snapshot is None:
            raise NotFoundError('Community deck not found', resource='community_deck')
        return snapshot

    @staticmethod
    def get_community_cards(community_deck_id: int) -> List[CommunityCard]:
        snapshot = PublishService.get_community_deck(community_deck_id)
        return snapshot.cards.order_by(CommunityCard.position.asc(), CommunityCard.community_card_id.asc()).all()
