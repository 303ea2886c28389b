# File: flashy_app/modules/study/engine/session_controller.py
"""
Study Session Controller
========================
Owns one pass over a card collection: prepares the working list, hands each
card to the mode matching its type, keeps the running tally and finishes
with a summary.

Phases::

    idle --start--> active --(list end | stop)--> summary
      \\--start (nothing left after filters)--> empty

``restart`` goes back through ``start`` from any phase.

The controller holds no Flask or database references. Persistence and card
flag writes are injected as callables, so a run can be driven from an HTTP
handler or from a test with a fake clock and a seeded ``random.Random``.
Between requests the run travels as ``to_state()`` and comes back with
``from_state``.
"""

from __future__ import annotations

import random
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence

from flashy_app.core.error_handlers import AuthorizationError, ConflictError
from flashy_app.core.logging_config import get_logger
from flashy_app.core.signals import card_advanced, session_completed, session_started

from ..cards import AnyCard
from ..logics.ordering import prepare_working_list, reshuffle
from ..logics.scoring import compute_score
from ..modes import EvaluationResult, ModeFactory
from ..mutations import MutationOutcome, PendingMutation
from ..navigation import navigation_targets
from ..options import StudyOptions
from ..schemas import SessionRecord, SessionSummary, StudySource
from .timer import DEFAULT_BUDGET_SECONDS, CardCountdown

logger = get_logger('study.controller')

PHASE_IDLE = 'idle'
PHASE_ACTIVE = 'active'
PHASE_EMPTY = 'empty'
PHASE_SUMMARY = 'summary'

# Marker for "use the verdict recorded by answer()"
PENDING = object()

Recorder = Callable[[SessionRecord], Any]
FlagCommit = Callable[[int, Dict[str, Any]], Any]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_dt(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class StudySessionController:

    def __init__(
        self,
        cards: Sequence[AnyCard],
        options: Optional[StudyOptions] = None,
        source: Optional[StudySource] = None,
        *,
        user_id: Optional[int] = None,
        recorder: Optional[Recorder] = None,
        clock: Optional[Callable[[], datetime]] = None,
        rng: Optional[random.Random] = None,
        timer_budget: int = DEFAULT_BUDGET_SECONDS,
        utc_offset_minutes: int = 0,
    ):
        self.cards: List[AnyCard] = list(cards)
        self.options = options or StudyOptions()
        self.source = source or StudySource(kind='all-cards')
        self.user_id = user_id
        self.recorder = recorder
        self.clock = clock or _utcnow
        self.rng = rng or random.Random()
        self.utc_offset_minutes = utc_offset_minutes

        self.phase = PHASE_IDLE
        self.run_id: Optional[str] = None
        self.working: List[AnyCard] = []
        self.index = 0
        self.studied = 0
        self.correct = 0
        self.wrong = 0
        self.skipped = 0
        self.started_at: Optional[datetime] = None
        self.card_started_at: Optional[datetime] = None
        self.countdown = CardCountdown(budget=timer_budget)
        self.presented: Optional[Dict[str, Any]] = None
        self.verdict: Optional[Dict[str, Any]] = None
        self.summary: Optional[SessionSummary] = None

    # ── lifecycle ────────────────────────────────────────────────────

    def start(self) -> str:
        """Filter and order the collection and enter ``active`` (or ``empty``)."""
        if self.phase != PHASE_IDLE:
            raise ConflictError('Study session already started', state=self.phase)

        now = self.clock()
        self.run_id = uuid.uuid4().hex
        self.working = prepare_working_list(self.cards, self.options, self.rng)
        self.index = 0
        self.studied = self.correct = self.wrong = self.skipped = 0
        self.started_at = now
        self.summary = None
        self._reset_card(now)

        if not self.working:
            self.phase = PHASE_EMPTY
            self.countdown.cancel()
            logger.info("Study run %s has no cards after filtering", self.run_id)
            return self.phase

        self.phase = PHASE_ACTIVE
        session_started.send(
            None,
            user_id=self.user_id,
            started_at=now,
            local_hour=self.local_time(now).hour,
        )
        logger.debug("Study run %s started with %d cards", self.run_id, len(self.working))
        return self.phase

    def restart(self) -> str:
        """Run ``start`` again over the same raw collection."""
        self.phase = PHASE_IDLE
        return self.start()

    def stop(self) -> SessionSummary:
        """End the run early and go to the summary."""
        self._require(PHASE_ACTIVE)
        return self.complete()

    def complete(self) -> SessionSummary:
        self._require(PHASE_ACTIVE)

        ended = self.clock()
        elapsed = max(0, int((ended - self.started_at).total_seconds()))
        score = compute_score(self.correct, self.wrong)
        self.countdown.cancel()

        persisted = False
        if self.source.is_persisted and self.recorder is not None:
            record = SessionRecord(
                run_id=self.run_id,
                user_id=self.user_id,
                deck_id=self.source.deck_id,
                started_at=self.started_at,
                ended_at=ended,
                cards_studied=self.studied,
                correct_count=self.correct,
                incorrect_count=self.wrong,
                skipped_count=self.skipped,
                time_spent_seconds=elapsed,
                score=score,
            )
            try:
                self.recorder(record)
                persisted = True
            except Exception:
                # The learner still gets the summary
                logger.error("Could not save study run %s", self.run_id, exc_info=True)

        self.summary = SessionSummary(
            run_id=self.run_id,
            studied=self.studied,
            correct=self.correct,
            wrong=self.wrong,
            skipped=self.skipped,
            score=score,
            started_at=self.started_at,
            ended_at=ended,
            elapsed_seconds=elapsed,
            persisted=persisted,
            source_kind=self.source.kind,
            navigation=navigation_targets(self.source),
        )
        self.phase = PHASE_SUMMARY

        session_completed.send(
            None,
            user_id=self.user_id,
            summary=self.summary,
            persisted=persisted,
            difficulty=self.source.difficulty,
        )
        return self.summary

    # ── per-card turn ────────────────────────────────────────────────

    @property
    def current_card(self) -> Optional[AnyCard]:
        if self.phase != PHASE_ACTIVE or not self.working:
            return None
        return self.working[self.index]

    def current_interaction(self) -> Dict[str, Any]:
        """Payload for the card on screen."""
        self._require(PHASE_ACTIVE)
        card = self.current_card
        presented = self._presented_for(card)
        return {
            'card': card.to_dict(),
            'mode': card.card_type,
            'data': presented,
            'progress': {
                'index': self.index,
                'total': len(self.working),
                'studied': self.studied,
                'correct': self.correct,
                'wrong': self.wrong,
            },
            'remaining_seconds': self.countdown.remaining(self.clock()) if self.options.timed_mode else None,
            'answered': self.verdict is not None,
            'evaluation': self.verdict['evaluation'] if self.verdict else None,
            'can_edit_flags': not self.source.is_temporary,
        }

    def answer(self, user_input: Dict[str, Any]) -> EvaluationResult:
        """Grade a submission for the current card; the verdict waits for ``next``."""
        self._require(PHASE_ACTIVE)
        if self.verdict is not None:
            raise ConflictError('This card has already been answered', state=self.phase)

        card = self.current_card
        mode = ModeFactory.for_card(card)
        result = mode.evaluate_submission(card, user_input or {}, self._presented_for(card))
        self.verdict = {
            'card_id': card.card_id,
            'is_correct': result.is_correct,
            'evaluation': result.to_dict(),
        }
        return result

    def next(self, was_correct: Any = PENDING) -> str:
        """
        Leave the current card.

        ``was_correct`` is True, False, or None for a skip. Left out, the
        verdict from ``answer`` is used, or a skip when there was none.
        """
        self._require(PHASE_ACTIVE)
        return self._advance(was_correct, self.clock())

    def previous(self) -> int:
        self._require(PHASE_ACTIVE)
        if self.index > 0:
            self.index -= 1
            self._reset_card(self.clock())
        return self.index

    def sync(self, now: Optional[datetime] = None) -> int:
        """
        Apply countdown expiries up to ``now``. Every expired card counts as
        wrong and the next card gets a fresh countdown from the moment the
        previous one ran out. Returns how many cards were auto-advanced.
        """
        if self.phase != PHASE_ACTIVE or not self.options.timed_mode:
            return 0
        now = now or self.clock()
        advanced = 0
        while self.phase == PHASE_ACTIVE and self.countdown.expired(now):
            self._advance(False, self.countdown.deadline)
            advanced += 1
        return advanced

    # ── flags ────────────────────────────────────────────────────────

    def toggle_favorite(self, commit: FlagCommit) -> MutationOutcome:
        return self._toggle_flag('favorite', commit)

    def toggle_ignored(self, commit: FlagCommit) -> MutationOutcome:
        return self._toggle_flag('ignored', commit)

    def _toggle_flag(self, flag: str, commit: FlagCommit) -> MutationOutcome:
        self._require(PHASE_ACTIVE)
        if self.source.is_temporary:
            raise AuthorizationError('Cards of a temporary deck cannot be changed')

        card_id = self.current_card.card_id
        mutation = PendingMutation(
            snapshot=lambda: {flag: getattr(self._find(card_id), flag)},
            write=lambda values: self._replace_card(card_id, **values),
            changes={flag: not getattr(self.current_card, flag)},
            commit=lambda changes: commit(card_id, changes),
            label=flag,
        )
        return mutation.run()

    # ── internals ────────────────────────────────────────────────────

    def _advance(self, was_correct: Any, at: datetime) -> str:
        card = self.current_card
        if was_correct is PENDING:
            verdict = self.verdict if self.verdict and self.verdict.get('card_id') == card.card_id else None
            was_correct = verdict['is_correct'] if verdict else None

        seconds_on_card = (at - self.card_started_at).total_seconds() if self.card_started_at else 0.0
        card_advanced.send(
            None,
            user_id=self.user_id,
            card_id=card.card_id,
            seconds_on_card=seconds_on_card,
            was_correct=was_correct,
        )

        self.studied += 1
        if was_correct is True:
            self.correct += 1
        elif was_correct is False:
            self.wrong += 1
        else:
            self.skipped += 1

        if self.index + 1 < len(self.working):
            self.index += 1
        elif self.options.continuous_shuffle:
            self.working = reshuffle(self.working, self.rng)
            self.index = 0
        else:
            self.complete()
            return self.phase

        self._reset_card(at)
        return self.phase

    def _reset_card(self, now: datetime) -> None:
        self.card_started_at = now
        self.presented = None
        self.verdict = None
        if self.options.timed_mode:
            self.countdown.restart(now)

    def _presented_for(self, card: AnyCard) -> Dict[str, Any]:
        if self.presented is None or self.presented.get('card_id') != card.card_id:
            mode = ModeFactory.for_card(card)
            self.presented = {
                'card_id': card.card_id,
                'data': mode.format_interaction(card, self.working, self.rng),
            }
        return self.presented['data']

    def _find(self, card_id: int) -> Optional[AnyCard]:
        return next((c for c in self.cards if c.card_id == card_id), None)

    def _replace_card(self, card_id: int, **changes: Any) -> None:
        self.cards = [c.with_flags(**changes) if c.card_id == card_id else c for c in self.cards]
        self.working = [c.with_flags(**changes) if c.card_id == card_id else c for c in self.working]

    def _require(self, *phases: str) -> None:
        if self.phase not in phases:
            raise ConflictError(
                f"Not allowed while the study session is {self.phase}",
                state=self.phase,
            )

    def local_time(self, moment: datetime) -> datetime:
        return moment + timedelta(minutes=self.utc_offset_minutes)

    # ── persistence between requests ─────────────────────────────────

    def to_state(self) -> Dict[str, Any]:
        return {
            'run_id': self.run_id,
            'phase': self.phase,
            'user_id': self.user_id,
            'source': self.source.to_dict(),
            'options': self.options.to_dict(),
            'order': [c.card_id for c in self.working],
            'index': self.index,
            'studied': self.studied,
            'correct': self.correct,
            'wrong': self.wrong,
            'skipped': self.skipped,
            'started_at': _iso(self.started_at),
            'card_started_at': _iso(self.card_started_at),
            'countdown': self.countdown.to_dict(),
            'presented': self.presented,
            'verdict': self.verdict,
            'summary': self.summary.to_dict() if self.summary else None,
            'utc_offset_minutes': self.utc_offset_minutes,
        }

    @classmethod
    def from_state(
        cls,
        state: Dict[str, Any],
        cards: Sequence[AnyCard],
        *,
        recorder: Optional[Recorder] = None,
        clock: Optional[Callable[[], datetime]] = None,
        rng: Optional[random.Random] = None,
    ) -> 'StudySessionController':
        """
        Rebuild a run from ``to_state`` output and the current cards.
        Cards deleted since the last request drop out of the working list;
        the index follows the current card, or moves to the card after it
        when the current card itself was deleted.
        """
        countdown = CardCountdown.from_dict(state.get('countdown'))
        controller = cls(
            cards,
            StudyOptions.from_dict(state.get('options')),
            StudySource.from_dict(state['source']),
            user_id=state.get('user_id'),
            recorder=recorder,
            clock=clock,
            rng=rng,
            timer_budget=countdown.budget,
            utc_offset_minutes=state.get('utc_offset_minutes', 0),
        )
        by_id = {c.card_id: c for c in controller.cards}

        controller.run_id = state.get('run_id')
        controller.phase = state.get('phase', PHASE_IDLE)
        order = state.get('order', [])
        index = state.get('index', 0)
        current_id = order[index] if 0 <= index < len(order) else None
        controller.working = [by_id[i] for i in order if i in by_id]
        if current_id in by_id:
            controller.index = [c.card_id for c in controller.working].index(current_id)
        else:
            controller.index = sum(1 for i in order[:index] if i in by_id)
        controller.studied = state.get('studied', 0)
        controller.correct = state.get('correct', 0)
        controller.wrong = state.get('wrong', 0)
        controller.skipped = state.get('skipped', 0)
        controller.started_at = _parse_dt(state.get('started_at'))
        controller.card_started_at = _parse_dt(state.get('card_started_at'))
        controller.countdown = countdown
        controller.presented = state.get('presented')
        controller.verdict = state.get('verdict')
        if state.get('summary'):
            controller.summary = SessionSummary.from_dict(state['summary'])

        if controller.phase == PHASE_ACTIVE:
            if not controller.working:
                controller.phase = PHASE_EMPTY
                controller.countdown.cancel()
            elif controller.index >= len(controller.working):
                controller.index = len(controller.working) - 1
                controller._reset_card(controller.clock())
            elif current_id is not None and current_id not in by_id:
                controller._reset_card(controller.clock())
        return controller

    def snapshot(self) -> Dict[str, Any]:
        """Everything the client needs to render the current phase."""
        data: Dict[str, Any] = {
            'run_id': self.run_id,
            'phase': self.phase,
            'source': self.source.to_dict(),
            'options': self.options.to_dict(),
        }
        if self.phase == PHASE_ACTIVE:
            data['interaction'] = self.current_interaction()
        elif self.phase == PHASE_SUMMARY and self.summary is not None:
            data['summary'] = self.summary.to_dict()
        elif self.phase == PHASE_EMPTY:
            data['message'] = 'No cards available for these study options.'
            data['navigation'] = navigation_targets(self.source)
        return data
