from flask import jsonify
from flask_login import current_user, login_required

from flashy_app.core.error_handlers import success_response

from .. import blueprint
from ..interface import AchievementInterface


@blueprint.route('', methods=['GET'])
@login_required
def get_achievements():
    """Current counters and unlocked achievements."""
    return jsonify(success_response(AchievementInterface.describe(current_user.user_id)))


@blueprint.route('/catalog', methods=['GET'])
def get_catalog():
    return jsonify(success_response({'achievements': AchievementInterface.catalog()}))
