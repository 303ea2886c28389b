# File: flashy_app/modules/decks/services/card_service.py
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from flashy_app.core.error_handlers import FlashyError, NotFoundError, ValidationError
from flashy_app.core.signals import card_created
from flashy_app.models import Card, Deck, db
from flashy_app.modules.subscriptions.interface import SubscriptionInterface

from ..schemas import (
    ANSWER_FIELDS,
    MEDIA_FIELDS,
    BatchFailure,
    BatchResult,
    parse_card_payload,
)
from .deck_service import DeckService
from .media_service import MediaService

# Patch keys that change the answer shape and need full re-validation
_SHAPE_KEYS = {'card_type', 'front', 'back', 'options', 'correct_indices', *ANSWER_FIELDS}

# Names used by the study flow -> column names
_FLAG_COLUMNS = {'favorite': 'favorite', 'ignored': 'is_ignored', 'is_ignored': 'is_ignored'}


class CardService:

    @staticmethod
    def list_cards(user, deck_id: int) -> List[Card]:
        deck = DeckService.get_deck(user, deck_id)
        return deck.cards.order_by(Card.position.asc(), Card.card_id.asc()).all()

    @staticmethod
    def list_all_cards(user) -> List[Card]:
        return (
            Card.query.join(Deck, Card.deck_id == Deck.deck_id)
            .filter(Deck.user_id == user.user_id)
            .order_by(Deck.position.asc(), Card.position.asc(), Card.card_id.asc())
            .all()
        )

    @staticmethod
    def get_card(user, card_id: int) -> Card:
        card = db.session.get(Card, card_id)
        if card is None or card.deck.user_id != user.user_id:
            raise NotFoundError('Card not found', resource='card')
        return card

    @staticmethod
    def _next_position(deck_id: int) -> int:
        last = db.session.query(func.max(Card.position)).filter(Card.deck_id == deck_id).scalar()
        return (last or 0) + 1

    @staticmethod
    def create_card(user, deck_id: int, data: Dict[str, Any]) -> Card:
        deck = DeckService.get_deck(user, deck_id)
        SubscriptionInterface.check_card_limit(user, deck.card_count)
        SubscriptionInterface.check_card_media(user, data)

        values = parse_card_payload(data)
        card = Card(deck_id=deck.deck_id, position=CardService._next_position(deck.deck_id), **values)
        try:
            db.session.add(card)
            deck.card_count = (deck.card_count or 0) + 1
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.error("Error creating card in deck %s", deck_id, exc_info=True)
            raise

        card_created.send(None, user_id=user.user_id, card=card)
        return card

    @staticmethod
    def update_card(user, card_id: int, patch: Dict[str, Any]) -> Card:
        """Partial update. Changes to the answer shape re-validate the whole card."""
        card = CardService.get_card(user, card_id)
        if not patch:
            return card
        SubscriptionInterface.check_card_media(user, {k: patch.get(k) for k in MEDIA_FIELDS})

        if _SHAPE_KEYS & set(patch):
            merged = {**card.to_dict(), **patch}
            if 'ignored' in patch:
                merged['is_ignored'] = patch['ignored']
            if 'options' in patch or 'correct_indices' in patch:
                merged.pop('correct_answers', None)
            values = parse_card_payload(merged)
        else:
            values = {}
            for key in MEDIA_FIELDS:
                if key in patch:
                    values[key] = patch[key] or None
            for key, column in _FLAG_COLUMNS.items():
                if key in patch:
                    values[column] = bool(patch[key])
        if 'position' in patch:
            values['position'] = int(patch['position'] or 0)

        for key, value in values.items():
            setattr(card, key, value)
        try:
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.error("Error updating card %s", card_id, exc_info=True)
            raise
        return card

    @staticmethod
    def set_flags(user, card_id: int, flags: Dict[str, Any]) -> Card:
        """Write favorite / ignored flags; used by the study flow."""
        unknown = set(flags) - set(_FLAG_COLUMNS)
        if unknown:
            raise ValidationError(f"Unknown card flags: {sorted(unknown)}")
        return CardService.update_card(user, card_id, dict(flags))

    @staticmethod
    def delete_card(user, card_id: int) -> None:
        card = CardService.get_card(user, card_id)
        deck = card.deck
        try:
            db.session.delete(card)
            deck.card_count = max(0, (deck.card_count or 0) - 1)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.error("Error deleting card %s", card_id, exc_info=True)
            raise

    @staticmethod
    def update_positions(user, deck_id: int, positions: Sequence[Dict[str, Any]]) -> List[Card]:
        """``positions`` is a list of ``{"card_id": ..., "position": ...}``."""
        if not isinstance(positions, (list, tuple)) or not positions:
            raise ValidationError('positions must be a non-empty list', errors={'positions': 'required'})

        cards = {c.card_id: c for c in CardService.list_cards(user, deck_id)}
        for entry in positions:
            try:
                card_id, position = int(entry['card_id']), int(entry['position'])
            except (KeyError, TypeError, ValueError):
                raise ValidationError('Each position needs card_id and position', errors={'positions': entry})
            if card_id not in cards:
                raise NotFoundError(f"Card {card_id} is not in this deck", resource='card')
            cards[card_id].position = position
        try:
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.error("Error updating positions in deck %s", deck_id, exc_info=True)
            raise
        return CardService.list_cards(user, deck_id)

    @staticmethod
    def batch_create(user, deck_id: int, items: Any, media: Optional[MediaService] = None) -> BatchResult:
        """
        Create many cards at once.

        Items failing validation are skipped and reported. Remote image URLs
        are downloaded concurrently first; a card whose image could not be
        fetched is still created, without that image, and the image failure
        is reported against its index.
        """
        if not isinstance(items, list) or not items:
            raise ValidationError('cards must be a non-empty list', errors={'cards': 'required'})

        deck = DeckService.get_deck(user, deck_id)
        SubscriptionInterface.check_card_limit(user, deck.card_count, adding=len(items))

        result = BatchResult()
        prepared = []
        for index, item in enumerate(items):
            try:
                if not isinstance(item, dict):
                    raise ValidationError('Card must be an object')
                SubscriptionInterface.check_card_media(user, item)
                prepared.append((index, parse_card_payload(item)))
            except FlashyError as exc:
                result.failed.append(BatchFailure(index=index, message=exc.message))

        image_urls = [v.get(k) for _, v in prepared for k in ('front_image_url', 'back_image_url')]
        media = media or MediaService.from_app()
        report = media.fetch_many(u for u in image_urls if u and not media.is_local(u))

        position = CardService._next_position(deck.deck_id)
        cards = []
        try:
            for index, values in prepared:
                for key in ('front_image_url', 'back_image_url'):
                    url = values.get(key)
                    if not url or media.is_local(url):
                        continue
                    if url in report.stored:
                        values[key] = report.stored[url]
                    else:
                        values[key] = None
                        result.failed.append(BatchFailure(index=index, message=report.failed.get(url, 'Image failed'), field=key))
                card = Card(deck_id=deck.deck_id, position=position, **values)
                position += 1
                db.session.add(card)
                cards.append(card)
            deck.card_count = (deck.card_count or 0) + len(cards)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.error("Error in batch create for deck %s", deck_id, exc_info=True)
            raise

        for card in cards:
            card_created.send(None, user_id=user.user_id, card=card)
        result.created = [c.to_dict() for c in cards]
        result.failed.sort(key=lambda f: f.index)
        current_app.logger.info(
            "Batch for deck %s: %d created, %d failures", deck_id, len(result.created), len(result.failed)
        )
        return result
