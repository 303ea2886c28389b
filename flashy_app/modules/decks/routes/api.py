# File: flashy_app/modules/decks/routes/api.py
from flask import jsonify, request
from flask_login import current_user, login_required

from flashy_app.core.error_handlers import success_response

from .. import blueprint
from ..services.card_service import CardService
from ..services.deck_service import DeckService


def _payload() -> dict:
    return request.get_json(silent=True) or {}


@blueprint.route('', methods=['GET'])
@login_required
def list_decks():
    decks = DeckService.list_decks(current_user)
    return jsonify(success_response([d.to_dict() for d in decks]))


@blueprint.route('', methods=['POST'])
@login_required
def create_deck():
    deck = DeckService.create_deck(current_user, _payload())
    return jsonify(success_response(deck.to_dict(), 'Deck created')), 201


@blueprint.route('/order', methods=['PUT'])
@login_required
def reorder_decks():
    decks = DeckService.reorder_decks(current_user, _payload().get('deck_ids'))
    return jsonify(success_response([d.to_dict() for d in decks]))


@blueprint.route('/<int:deck_id>', methods=['GET'])
@login_required
def get_deck(deck_id):
    deck = DeckService.get_deck(current_user, deck_id)
    return jsonify(success_response(deck.to_dict()))


@blueprint.route('/<int:deck_id>', methods=['PATCH', 'PUT'])
@login_required
def update_deck(deck_id):
    deck = DeckService.update_deck(current_user, deck_id, _payload())
    return jsonify(success_response(deck.to_dict()))


@blueprint.route('/<int:deck_id>', methods=['DELETE'])
@login_required
def delete_deck(deck_id):
    DeckService.delete_deck(current_user, deck_id)
    return jsonify(success_response(message='Deck deleted'))


# ── cards ────────────────────────────────────────────────────────────

@blueprint.route('/<int:deck_id>/cards', methods=['GET'])
@login_required
def list_cards(deck_id):
    cards = CardService.list_cards(current_user, deck_id)
    return jsonify(success_response([c.to_dict() for c in cards]))


@blueprint.route('/<int:deck_id>/cards', methods=['POST'])
@login_required
def create_card(deck_id):
    card = CardService.create_card(current_user, deck_id, _payload())
    return jsonify(success_response(card.to_dict(), 'Card created')), 201


@blueprint.route('/<int:deck_id>/cards/batch', methods=['POST'])
@login_required
def batch_create_cards(deck_id):
    """
    POST /api/decks/<deck_id>/cards/batch
    Payload: { "cards": [ {card}, ... ] }

    Returns 201 when everything was created, 207 on partial success.
    """
    result = CardService.batch_create(current_user, deck_id, _payload().get('cards'))
    status = 207 if result.failed else 201
    return jsonify(success_response(result.to_dict())), status


@blueprint.route('/<int:deck_id>/cards/positions', methods=['PUT'])
@login_required
def update_card_positions(deck_id):
    cards = CardService.update_positions(current_user, deck_id, _payload().get('positions'))
    return jsonify(success_response([c.to_dict() for c in cards]))


@blueprint.route('/cards/all', methods=['GET'])
@login_required
def list_all_cards():
    cards = CardService.list_all_cards(current_user)
    return jsonify(success_response([c.to_dict() for c in cards]))


@blueprint.route('/cards/<int:card_id>', methods=['PATCH', 'PUT'])
@login_required
def update_card(card_id):
    card = CardService.update_card(current_user, card_id, _payload())
    return jsonify(success_response(card.to_dict()))


@blueprint.route('/cards/<int:card_id>', methods=['DELETE'])
@login_required
def delete_card(card_id):
    CardService.delete_card(current_user, card_id)
    return jsonify(success_response(message='Card deleted'))
