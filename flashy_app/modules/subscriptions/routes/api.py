from flask import jsonify
from flask_login import current_user, login_required

from flashy_app.core.error_handlers import success_response
from flashy_app.models import Deck

from .. import blueprint
from ..interface import SubscriptionInterface


@blueprint.route('', methods=['GET'])
@login_required
def get_subscription():
    """Current plan, its limits and how much of them is used."""
    data = SubscriptionInterface.describe(current_user)
    data['usage'] = {'decks': Deck.query.filter_by(user_id=current_user.user_id).count()}
    return jsonify(success_response(data))
