# File: flashy_app/modules/community/routes/api.py
from flask import jsonify
from flask_login import current_user, login_required

from flashy_app.core.error_handlers import success_response

from .. import blueprint
from ..services.publish_service import PublishService


@blueprint.route('/decks/<int:deck_id>/publish', methods=['POST'])
@login_required
def publish_deck(deck_id):
    snapshot = PublishService.publish(current_user, deck_id)
    return jsonify(success_response(snapshot.to_dict(), 'Deck published'))


@blueprint.route('/decks/<int:deck_id>/publish', methods=['DELETE'])
@login_required
def unpublish_deck(deck_id):
    deck = PublishService.unpublish(current_user, deck_id)
    return jsonify(success_response(deck.to_dict(), 'Deck unpublished'))


@blueprint.route('/<int:community_deck_id>', methods=['GET'])
@login_required
def get_community_deck(community_deck_id):
    snapshot = PublishService.get_community_deck(community_deck_id)
    data = snapshot.to_dict()
    data['cards'] = [c.to_dict() for c in PublishService.get_community_cards(community_deck_id)]
    return jsonify(success_response(data))
