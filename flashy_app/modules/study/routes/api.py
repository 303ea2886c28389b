# File: flashy_app/modules/study/routes/api.py
from flask import jsonify, request
from flask_login import current_user, login_required

from flashy_app.core.error_handlers import ValidationError, success_response

from .. import blueprint
from ..services.history_service import StudyHistoryService
from ..services.study_service import StudyService


def _payload() -> dict:
    return request.get_json(silent=True) or {}


@blueprint.route('/start', methods=['POST'])
@login_required
def start_session():
    """
    POST /api/study/start
    Payload: { "source": "deck", "deck_id": 3,
               "options": { "order": "linear", "timedMode": true, ... } }
    """
    return jsonify(success_response(StudyService.start(current_user, _payload()))), 201


@blueprint.route('/current', methods=['GET'])
@login_required
def current_session():
    return jsonify(success_response(StudyService.current(current_user)))


@blueprint.route('/current', methods=['DELETE'])
@login_required
def discard_session():
    StudyService.discard(current_user)
    return jsonify(success_response(message='Study session discarded'))


@blueprint.route('/answer', methods=['POST'])
@login_required
def answer_card():
    """
    Payload by card type:
      classic-flip:    { "knew": true }
      multiple-choice: { "selected": ["A", "B"] }
      type-answer:     { "answer": "Paris" }
    """
    return jsonify(success_response(StudyService.answer(current_user, _payload())))


@blueprint.route('/next', methods=['POST'])
@login_required
def next_card():
    """Payload: { "was_correct": true | false | null } or empty to use the last answer."""
    return jsonify(success_response(StudyService.next(current_user, _payload())))


@blueprint.route('/previous', methods=['POST'])
@login_required
def previous_card():
    return jsonify(success_response(StudyService.previous(current_user)))


@blueprint.route('/stop', methods=['POST'])
@login_required
def stop_session():
    return jsonify(success_response(StudyService.stop(current_user)))


@blueprint.route('/restart', methods=['POST'])
@login_required
def restart_session():
    return jsonify(success_response(StudyService.restart(current_user)))


@blueprint.route('/favorite', methods=['POST'])
@login_required
def toggle_favorite():
    return jsonify(success_response(StudyService.toggle_flag(current_user, 'favorite')))


@blueprint.route('/ignore', methods=['POST'])
@login_required
def toggle_ignored():
    return jsonify(success_response(StudyService.toggle_flag(current_user, 'ignored')))


# ── history ──────────────────────────────────────────────────────────

@blueprint.route('/sessions', methods=['GET'])
@login_required
def list_sessions():
    """
    GET /api/study/sessions?deckId=&studyMode=&startDate=&endDate=&limit=&offset=
    """
    args = request.args
    try:
        deck_id = args.get('deckId', args.get('deck_id'), type=int)
        limit = args.get('limit', type=int)
        offset = args.get('offset', 0, type=int)
    except (TypeError, ValueError):
        raise ValidationError('Invalid query parameters')

    sessions = StudyHistoryService.list_sessions(
        current_user.user_id,
        deck_id=deck_id,
        study_mode=args.get('studyMode', args.get('study_mode')),
        start_date=args.get('startDate', args.get('start_date')),
        end_date=args.get('endDate', args.get('end_date')),
        limit=limit,
        offset=offset,
    )
    return jsonify(success_response([s.to_dict() for s in sessions]))


@blueprint.route('/sessions', methods=['POST'])
@login_required
def save_session():
    study_session = StudyHistoryService.record_from_payload(current_user, _payload())
    return jsonify(success_response(study_session.to_dict(), 'Study session saved')), 201
