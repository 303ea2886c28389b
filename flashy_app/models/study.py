from datetime import datetime, timezone

from sqlalchemy.types import JSON

from ..extensions import db


class StudySession(db.Model):
    """
    One completed study run. Written once when the run reaches its summary
    and never edited afterwards; history screens read it.
    """
    __tablename__ = 'study_sessions'

    session_id = db.Column(db.Integer, primary_key=True)
    # Client-side run id, makes repeated submissions of the same run idempotent
    run_id = db.Column(db.String(64), unique=True, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.user_id'), nullable=False, index=True)
    deck_id = db.Column(db.Integer, db.ForeignKey('decks.deck_id', ondelete='SET NULL'), index=True)

    study_mode = db.Column(db.String(30), default='review', nullable=False)
    started_at = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    ended_at = db.Column(db.DateTime(timezone=True), nullable=False)

    cards_studied = db.Column(db.Integer, default=0, nullable=False)
    correct_count = db.Column(db.Integer, default=0, nullable=False)
    incorrect_count = db.Column(db.Integer, default=0, nullable=False)
    skipped_count = db.Column(db.Integer, default=0, nullable=False)
    time_spent_seconds = db.Column(db.Integer, default=0, nullable=False)
    score = db.Column(db.Integer, default=0, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    user = db.relationship(
        'User',
        backref=db.backref('study_sessions', lazy='dynamic', cascade='all, delete-orphan'),
        lazy=True
    )

    def to_dict(self):
        return {
            'session_id': self.session_id,
            'run_id': self.run_id,
            'user_id': self.user_id,
            'deck_id': self.deck_id,
            'study_mode': self.study_mode,
            'started_at': self.started_at.isoformat() if self.started_at else None,
            'ended_at': self.ended_at.isoformat() if self.ended_at else None,
            'cards_studied': self.cards_studied,
            'correct_count': self.correct_count,
            'incorrect_count': self.incorrect_count,
            'skipped_count': self.skipped_count,
            'time_spent_seconds': self.time_spent_seconds,
            'score': self.score,
        }


class ActiveStudyRun(db.Model):
    """
    Server-side state of the run a user is in the middle of. The Flask
    session only carries ``active_run_id``; the controller state (working
    order, counters, presented card) lives here. One row per user.
    """
    __tablename__ = 'active_study_runs'

    active_run_id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.user_id'), nullable=False, unique=True)
    run_id = db.Column(db.String(64), index=True)
    phase = db.Column(db.String(20), nullable=False)
    state = db.Column(JSON, nullable=False)

    started_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    last_activity = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    user = db.relationship(
        'User',
        backref=db.backref('active_study_run', uselist=False, cascade='all, delete-orphan'),
        lazy=True
    )
