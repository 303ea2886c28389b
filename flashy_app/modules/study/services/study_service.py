# File: flashy_app/modules/study/services/study_service.py
"""
Study Service
=============
Drives ``StudySessionController`` across HTTP requests.

The running study is kept server-side in an ``ActiveStudyRun`` row holding
the controller's ``to_state()``. The Flask session only carries a small
``study_session`` marker with the row id, so the cookie stays the same size
whatever the deck size. Every call reloads the current cards, rebuilds the
controller, applies countdown expiries, acts, and stores the state again.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List

from flask import current_app, session
from sqlalchemy.exc import SQLAlchemyError

from flashy_app.core.error_handlers import NotFoundError, ValidationError
from flashy_app.models import ActiveStudyRun, db

from ..cards import AnyCard, cards_from_records
from ..engine.session_controller import PENDING, StudySessionController
from ..options import StudyOptions
from ..schemas import SOURCE_ALL_CARDS, SOURCE_DECK, SOURCE_TEMPORARY, StudySource
from .history_service import StudyHistoryService

SESSION_KEY = 'study_session'


class StudyService:

    # ── wiring ───────────────────────────────────────────────────────

    @staticmethod
    def _clock() -> datetime:
        return datetime.now(timezone.utc)

    @staticmethod
    def resolve_source(user, data: Dict[str, Any]) -> StudySource:
        """Build and authorise the source named in a start request."""
        from flashy_app.modules.community.interface import CommunityInterface
        from flashy_app.modules.decks.interface import DeckInterface

        kind = data.get('source') or (SOURCE_DECK if data.get('deck_id') is not None else None)
        if kind is None and data.get('community_deck_id') is not None:
            kind = SOURCE_TEMPORARY
        kind = kind or SOURCE_ALL_CARDS

        if kind == SOURCE_DECK:
            if data.get('deck_id') is None:
                raise ValidationError('deck_id is required to study a deck', errors={'deck_id': 'required'})
            deck = DeckInterface.get_deck(user, int(data['deck_id']))
            return StudySource(kind=SOURCE_DECK, deck_id=deck.deck_id, difficulty=deck.difficulty)

        if kind == SOURCE_TEMPORARY:
            if data.get('community_deck_id') is None:
                raise ValidationError(
                    'community_deck_id is required for a temporary deck',
                    errors={'community_deck_id': 'required'},
                )
            community_deck = CommunityInterface.get_deck(int(data['community_deck_id']))
            return_to = data.get('return_to_shared_deck_id')
            return StudySource(
                kind=SOURCE_TEMPORARY,
                community_deck_id=community_deck['community_deck_id'],
                return_to_shared_deck_id=int(return_to) if return_to is not None else None,
                difficulty=community_deck.get('difficulty'),
            )

        return StudySource(kind=kind)

    @staticmethod
    def load_cards(user, source: StudySource) -> List[AnyCard]:
        from flashy_app.modules.community.interface import CommunityInterface
        from flashy_app.modules.decks.interface import DeckInterface

        if source.kind == SOURCE_DECK:
            records = DeckInterface.get_deck_cards(user, source.deck_id)
        elif source.kind == SOURCE_TEMPORARY:
            records = CommunityInterface.get_cards(source.community_deck_id)
        else:
            records = DeckInterface.get_all_cards(user)
        return cards_from_records(records)

    @staticmethod
    def _recorder(user):
        return lambda record: StudyHistoryService.record(user.user_id, record)

    @staticmethod
    def _flag_commit(user):
        from flashy_app.modules.decks.interface import DeckInterface

        return lambda card_id, changes: DeckInterface.set_card_flags(user, card_id, changes)

    @staticmethod
    def _active_run(user) -> ActiveStudyRun:
        marker = session.get(SESSION_KEY) or {}
        run = None
        if marker.get('user_id') == user.user_id and marker.get('active_run_id') is not None:
            run = db.session.get(ActiveStudyRun, marker['active_run_id'])
        if run is None or run.user_id != user.user_id:
            raise NotFoundError('No study session in progress', resource='study_session')
        return run

    @staticmethod
    def _restore(user) -> StudySessionController:
        state = StudyService._active_run(user).state

        source = StudySource.from_dict(state['source'])
        controller = StudySessionController.from_state(
            state,
            StudyService.load_cards(user, source),
            recorder=StudyService._recorder(user),
            clock=StudyService._clock,
        )
        expired = controller.sync()
        if expired:
            current_app.logger.debug("Study run %s: %d cards timed out", controller.run_id, expired)
        return controller

    @staticmethod
    def _store(user, controller: StudySessionController) -> Dict[str, Any]:
        # Snapshot first: rendering fixes the presented options that answer() grades against
        snapshot = controller.snapshot()

        run = ActiveStudyRun.query.filter_by(user_id=user.user_id).first()
        if run is None:
            run = ActiveStudyRun(user_id=user.user_id)
            db.session.add(run)
        run.run_id = controller.run_id
        run.phase = controller.phase
        run.state = controller.to_state()
        try:
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.error("Could not store study run %s", controller.run_id, exc_info=True)
            raise

        session[SESSION_KEY] = {
            'user_id': user.user_id,
            'active_run_id': run.active_run_id,
            'run_id': controller.run_id,
        }
        session.modified = True
        return snapshot

    # ── operations ───────────────────────────────────────────────────

    @staticmethod
    def start(user, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Start a run, replacing any run in progress.

        Payload: ``{"source": "deck"|"all-cards"|"temporary", "deck_id",
        "community_deck_id", "return_to_shared_deck_id", "options": {...},
        "utc_offset_minutes"}``
        """
        source = StudyService.resolve_source(user, data)
        options = StudyOptions.from_dict(data.get('options'))
        try:
            offset = int(data.get('utc_offset_minutes') or 0)
        except (TypeError, ValueError):
            raise ValidationError('utc_offset_minutes must be an integer', errors={'utc_offset_minutes': 'integer'})

        controller = StudySessionController(
            StudyService.load_cards(user, source),
            options,
            source,
            user_id=user.user_id,
            recorder=StudyService._recorder(user),
            clock=StudyService._clock,
            timer_budget=current_app.config.get('STUDY_TIMER_SECONDS', 30),
            utc_offset_minutes=offset,
        )
        controller.start()
        current_app.logger.info(
            "User %s started study run %s (%s, %d cards)",
            user.user_id, controller.run_id, source.kind, len(controller.working),
        )
        return StudyService._store(user, controller)

    @staticmethod
    def current(user) -> Dict[str, Any]:
        return StudyService._store(user, StudyService._restore(user))

    @staticmethod
    def answer(user, submission: Dict[str, Any]) -> Dict[str, Any]:
        controller = StudyService._restore(user)
        result = controller.answer(submission)
        state = StudyService._store(user, controller)
        return {'evaluation': result.to_dict(), 'state': state}

    @staticmethod
    def next(user, data: Dict[str, Any]) -> Dict[str, Any]:
        controller = StudyService._restore(user)
        if 'was_correct' in data:
            was_correct = data['was_correct']
            if was_correct is not None and not isinstance(was_correct, bool):
                raise ValidationError('was_correct must be true, false or null', errors={'was_correct': was_correct})
            controller.next(was_correct)
        else:
            controller.next(PENDING)
        return StudyService._store(user, controller)

    @staticmethod
    def previous(user) -> Dict[str, Any]:
        controller = StudyService._restore(user)
        controller.previous()
        return StudyService._store(user, controller)

    @staticmethod
    def stop(user) -> Dict[str, Any]:
        controller = StudyService._restore(user)
        controller.stop()
        return StudyService._store(user, controller)

    @staticmethod
    def restart(user) -> Dict[str, Any]:
        controller = StudyService._restore(user)
        controller.restart()
        return StudyService._store(user, controller)

    @staticmethod
    def toggle_flag(user, flag: str) -> Dict[str, Any]:
        controller = StudyService._restore(user)
        commit = StudyService._flag_commit(user)
        if flag == 'favorite':
            outcome = controller.toggle_favorite(commit)
        elif flag == 'ignored':
            outcome = controller.toggle_ignored(commit)
        else:
            raise ValidationError(f"Unknown flag {flag!r}")
        state = StudyService._store(user, controller)
        return {'outcome': outcome.to_dict(), 'state': state}

    @staticmethod
    def discard(user) -> None:
        session.pop(SESSION_KEY, None)
        run = ActiveStudyRun.query.filter_by(user_id=user.user_id).first()
        if run is None:
            return
        run_id = run.run_id
        try:
            db.session.delete(run)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.error("Could not discard study run %s", run_id, exc_info=True)
            raise
        current_app.logger.info("User %s discarded study run %s", user.user_id, run_id)
