"""
Event handlers for the achievements module.

Study and content modules publish signals; these handlers turn them into
stats updates. Achievements are best effort: a failure is logged as a
warning and never reaches the request that sent the signal.
"""
from flask import current_app, has_app_context

from flashy_app.core.signals import (
    card_advanced,
    card_created,
    deck_created,
    deck_published,
    session_completed,
    session_recorded,
    session_started,
)

from .services.achievement_service import SLOW_CARD_SECONDS, THREE_HOURS_SECONDS, AchievementService

NONSTOP_SECONDS = 60 * 60


def _active(user_id) -> bool:
    # Pure controller runs (tests, scripts) have no user and no app
    return user_id is not None and has_app_context()


def _safely(what, func, *args):
    try:
        func(*args)
    except Exception:
        current_app.logger.warning("[Achievements] Could not apply %s", what, exc_info=True)


@session_started.connect
def on_session_started(sender, **kwargs):
    user_id = kwargs.get('user_id')
    hour = kwargs.get('local_hour')
    if not _active(user_id) or hour is None:
        return

    flags = []
    if 0 <= hour < 3:
        flags.append('studied_after_midnight')
    if 5 <= hour < 8:
        flags.append('studied_before_eight_am')
    if flags:
        _safely('time-of-day flags', AchievementService.mark_flags, user_id, flags)


@card_advanced.connect
def on_card_advanced(sender, **kwargs):
    user_id = kwargs.get('user_id')
    if not _active(user_id):
        return
    if (kwargs.get('seconds_on_card') or 0) > SLOW_CARD_SECONDS:
        _safely('slow card flag', AchievementService.mark_flags, user_id, ['slow_card_review'])


@session_completed.connect
def on_session_completed(sender, **kwargs):
    user_id = kwargs.get('user_id')
    summary = kwargs.get('summary')
    if not _active(user_id) or summary is None:
        return

    flags = []
    if summary.elapsed_seconds >= NONSTOP_SECONDS:
        flags.append('studied_sixty_minutes_nonstop')
    if summary.elapsed_seconds >= THREE_HOURS_SECONDS:
        flags.append('studied_three_hours_in_one_day')
    if flags:
        _safely('duration flags', AchievementService.mark_flags, user_id, flags)


@session_recorded.connect
def on_session_recorded(sender, **kwargs):
    user_id = kwargs.get('user_id')
    study_session = kwargs.get('study_session')
    if not _active(user_id) or study_session is None or not kwargs.get('created', True):
        return
    _safely('study session', AchievementService.apply_session, user_id, study_session)


@deck_created.connect
def on_deck_created(sender, **kwargs):
    user_id = kwargs.get('user_id')
    deck = kwargs.get('deck')
    if not _active(user_id) or deck is None:
        return
    _safely('new deck', AchievementService.apply_deck_created, user_id, deck)


@card_created.connect
def on_card_created(sender, **kwargs):
    user_id = kwargs.get('user_id')
    card = kwargs.get('card')
    if not _active(user_id) or card is None:
        return
    _safely('new card', AchievementService.apply_card_created, user_id, card)


@deck_published.connect
def on_deck_published(sender, **kwargs):
    user_id = kwargs.get('user_id')
    if not _active(user_id) or not kwargs.get('first_publish'):
        return
    _safely('publish', AchievementService.apply_deck_published, user_id)
