# File: flashy_app/modules/study/services/history_service.py
"""Completed study runs: writing the one history row per run and reading history back."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from flashy_app.core.error_handlers import ValidationError
from flashy_app.core.signals import session_recorded
from flashy_app.models import StudySession, db

from ..logics.scoring import compute_score
from ..schemas import SessionRecord


def parse_datetime(value: Any, name: str) -> Optional[datetime]:
    """ISO-8601 text to an aware UTC datetime. Naive values are taken as UTC."""
    if value in (None, ''):
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
        except ValueError:
            raise ValidationError(f"{name} must be an ISO-8601 date", errors={name: value})
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _int(data: Dict[str, Any], *keys: str, default: int = 0) -> int:
    for key in keys:
        if data.get(key) is not None:
            try:
                return max(0, int(data[key]))
            except (TypeError, ValueError):
                raise ValidationError(f"{key} must be an integer", errors={key: data[key]})
    return default


class StudyHistoryService:

    @staticmethod
    def record(user_id: int, record: SessionRecord) -> StudySession:
        """
        Write the history row for a run. Submitting the same ``run_id``
        again updates that row instead of adding a second one.
        """
        session = None
        if record.run_id:
            session = StudySession.query.filter_by(run_id=record.run_id, user_id=user_id).first()
        created = session is None
        if created:
            session = StudySession(run_id=record.run_id, user_id=user_id)
            db.session.add(session)

        session.deck_id = record.deck_id
        session.study_mode = record.study_mode or 'review'
        session.started_at = parse_datetime(record.started_at, 'started_at')
        session.ended_at = parse_datetime(record.ended_at, 'ended_at')
        session.cards_studied = record.cards_studied
        session.correct_count = record.correct_count
        session.incorrect_count = record.incorrect_count
        session.skipped_count = record.skipped_count
        session.time_spent_seconds = record.time_spent_seconds
        session.score = record.score
        try:
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.error("Error saving study session %s", record.run_id, exc_info=True)
            raise

        current_app.logger.info(
            "Saved study session %s for user %s: %s/%s correct",
            session.session_id, user_id, record.correct_count, record.cards_studied,
        )
        session_recorded.send(None, user_id=user_id, study_session=session, created=created)
        return session

    @staticmethod
    def record_from_payload(user, data: Dict[str, Any]) -> StudySession:
        """Save a run reported directly by a client (``POST /api/study/sessions``)."""
        from flashy_app.modules.decks.interface import DeckInterface

        deck_id = data.get('deck_id', data.get('deckId'))
        if deck_id is None:
            raise ValidationError('deck_id is required', errors={'deck_id': 'required'})
        DeckInterface.get_deck(user, int(deck_id))

        started_at = parse_datetime(data.get('started_at', data.get('startedAt')), 'started_at')
        ended_at = parse_datetime(data.get('ended_at', data.get('endedAt')), 'ended_at') or datetime.now(timezone.utc)
        if started_at is None:
            raise ValidationError('started_at is required', errors={'started_at': 'required'})
        if ended_at < started_at:
            raise ValidationError('ended_at is before started_at', errors={'ended_at': 'before started_at'})

        correct = _int(data, 'correct_count', 'correctCount')
        incorrect = _int(data, 'incorrect_count', 'incorrectCount')
        skipped = _int(data, 'skipped_count', 'skippedCount')
        record = SessionRecord(
            run_id=data.get('run_id') or data.get('runId') or data.get('id'),
            user_id=user.user_id,
            deck_id=int(deck_id),
            started_at=started_at,
            ended_at=ended_at,
            cards_studied=_int(data, 'cards_studied', 'cardsStudied', default=correct + incorrect + skipped),
            correct_count=correct,
            incorrect_count=incorrect,
            skipped_count=skipped,
            time_spent_seconds=_int(
                data, 'time_spent_seconds', 'timeSpentSeconds',
                default=int((ended_at - started_at).total_seconds()),
            ),
            score=_int(data, 'score', default=compute_score(correct, incorrect)),
            study_mode=data.get('study_mode') or data.get('mode') or 'review',
        )
        return StudyHistoryService.record(user.user_id, record)

    @staticmethod
    def list_sessions(
        user_id: int,
        deck_id: Optional[int] = None,
        study_mode: Optional[str] = None,
        start_date: Any = None,
        end_date: Any = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[StudySession]:
        """History of one user, newest first, with optional filters."""
        query = StudySession.query.filter(StudySession.user_id == user_id)
        if deck_id is not None:
            query = query.filter(StudySession.deck_id == deck_id)
        if study_mode:
            query = query.filter(StudySession.study_mode == study_mode)

        start = parse_datetime(start_date, 'start_date')
        end = parse_datetime(end_date, 'end_date')
        if start is not None:
            query = query.filter(StudySession.started_at >= start)
        if end is not None:
            query = query.filter(StudySession.started_at <= end)

        if limit is None:
            limit = current_app.config.get('STUDY_HISTORY_PAGE_SIZE', 100)
        return (
            query.order_by(StudySession.started_at.desc(), StudySession.session_id.desc())
            .offset(max(0, offset))
            .limit(max(1, limit))
            .all()
        )
