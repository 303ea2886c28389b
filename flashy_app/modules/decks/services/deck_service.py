# File: flashy_app/modules/decks/services/deck_service.py
from __future__ import annotations

from typing import Any, Dict, List, Sequence

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from flashy_app.core.error_handlers import NotFoundError, ValidationError
from flashy_app.core.signals import deck_created, deck_deleted
from flashy_app.models import Deck, db
from flashy_app.modules.subscriptions.interface import SubscriptionInterface

from ..schemas import parse_deck_payload


class DeckService:
    """Deck CRUD scoped to the owning user."""

    @staticmethod
    def list_decks(user) -> List[Deck]:
        return (
            Deck.query.filter_by(user_id=user.user_id)
            .order_by(Deck.position.asc(), Deck.created_at.asc())
            .all()
        )

    @staticmethod
    def get_deck(user, deck_id: int) -> Deck:
        deck = db.session.get(Deck, deck_id)
        if deck is None or deck.user_id != user.user_id:
            raise NotFoundError('Deck not found', resource='deck')
        return deck

    @staticmethod
    def create_deck(user, data: Dict[str, Any]) -> Deck:
        current_count = Deck.query.filter_by(user_id=user.user_id).count()
        SubscriptionInterface.check_deck_limit(user, current_count)

        values = parse_deck_payload(data)
        if 'position' not in values:
            last = db.session.query(func.max(Deck.position)).filter(Deck.user_id == user.user_id).scalar()
            values['position'] = (last or 0) + 1

        deck = Deck(user_id=user.user_id, **values)
        try:
            db.session.add(deck)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.error("Error creating deck for user %s", user.user_id, exc_info=True)
            raise

        current_app.logger.info("User %s created deck %s", user.user_id, deck.deck_id)
        deck_created.send(None, user_id=user.user_id, deck=deck)
        return deck

    @staticmethod
    def update_deck(user, deck_id: int, data: Dict[str, Any]) -> Deck:
        deck = DeckService.get_deck(user, deck_id)
        values = parse_deck_payload(data, partial=True)
        for key, value in values.items():
            setattr(deck, key, value)
        try:
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.error("Error updating deck %s", deck_id, exc_info=True)
            raise
        return deck

    @staticmethod
    def delete_deck(user, deck_id: int) -> None:
        """Delete a deck and its cards; a linked community copy is unpublished first."""
        from flashy_app.modules.community.services.publish_service import PublishService

        deck = DeckService.get_deck(user, deck_id)
        try:
            if deck.community_published_id:
                PublishService.remove_snapshot(deck)
            db.session.delete(deck)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.error("Error deleting deck %s", deck_id, exc_info=True)
            raise

        current_app.logger.info("User %s deleted deck %s", user.user_id, deck_id)
        deck_deleted.send(None, user_id=user.user_id, deck_id=deck_id)

    @staticmethod
    def reorder_decks(user, deck_ids: Sequence[int]) -> List[Deck]:
        if not isinstance(deck_ids, (list, tuple)) or not deck_ids:
            raise ValidationError('deck_ids must be a non-empty list', errors={'deck_ids': 'required'})

        decks = {d.deck_id: d for d in DeckService.list_decks(user)}
        unknown = [i for i in deck_ids if i not in decks]
        if unknown:
            raise NotFoundError(f"Unknown decks: {unknown}", resource='deck')

        for position, deck_id in enumerate(deck_ids):
            decks[deck_id].position = position
        try:
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.error("Error reordering decks for user %s", user.user_id, exc_info=True)
            raise
        return DeckService.list_decks(user)
