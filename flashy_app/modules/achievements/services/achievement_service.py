# File: flashy_app/modules/achievements/services/achievement_service.py
"""
Achievement Service
Keeps ``UserAchievementStats`` up to date and unlocks achievements.
"""
from __future__ import annotations

import math
from datetime import timezone
from typing import Iterable, List

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from flashy_app.models import Deck, StudySession, UserAchievementStats, db

from ..logics.catalog import (
    CARD_TYPE_FLAGS,
    DIFFICULTY_FLAGS,
    Achievement,
    get_achievement,
    newly_unlocked,
)
from ..logics.streak import calculate_streak

SLOW_CARD_SECONDS = 600
THREE_HOURS_SECONDS = 3 * 60 * 60
CATEGORY_COUNT_FOR_BADGE = 5
HUNDRED_CARDS = 100


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class AchievementService:

    @staticmethod
    def get_or_create_stats(user_id: int) -> UserAchievementStats:
        stats = db.session.get(UserAchievementStats, user_id)
        if stats is None:
            stats = UserAchievementStats(user_id=user_id, flags={}, unlocked=[])
            db.session.add(stats)
            db.session.flush()
        return stats

    @staticmethod
    def _unlock(stats: UserAchievementStats) -> List[Achievement]:
        found = newly_unlocked(stats)
        for achievement in found:
            stats.unlocked.append(achievement.id)
        if found:
            current_app.logger.info(
                "User %s unlocked %s", stats.user_id, ', '.join(a.id for a in found)
            )
        return found

    @staticmethod
    def _save(stats: UserAchievementStats, what: str) -> List[Achievement]:
        try:
            found = AchievementService._unlock(stats)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.error(
                "Error updating achievements (%s) for user %s", what, stats.user_id, exc_info=True
            )
            raise
        return found

    @staticmethod
    def mark_flags(user_id: int, flags: Iterable[str]) -> List[Achievement]:
        """Set boolean observations (time of day, long runs, slow cards) and re-check."""
        stats = AchievementService.get_or_create_stats(user_id)
        changed = [name for name in flags if stats.set_flag(name)]
        if not changed:
            return []
        return AchievementService._save(stats, 'flags')

    @staticmethod
    def apply_session(user_id: int, study_session: StudySession) -> List[Achievement]:
        """Fold one saved study run into the counters."""
        stats = AchievementService.get_or_create_stats(user_id)
        studied = study_session.cards_studied or 0
        correct = study_session.correct_count or 0
        incorrect = study_session.incorrect_count or 0

        previous_correct = _round_half_up((stats.cards_reviewed or 0) * (stats.average_accuracy or 0) / 100)
        stats.total_study_sessions = (stats.total_study_sessions or 0) + 1
        stats.cards_reviewed = (stats.cards_reviewed or 0) + studied
        if stats.cards_reviewed > 0:
            stats.average_accuracy = _round_half_up((previous_correct + correct) / stats.cards_reviewed * 100)

        if studied > 0 and correct == studied and incorrect == 0:
            stats.perfect_scores = (stats.perfect_scores or 0) + 1

        if incorrect > 0:
            stats.correct_answers_in_row = 0
        else:
            stats.correct_answers_in_row = (stats.correct_answers_in_row or 0) + correct
        stats.best_correct_in_row = max(stats.best_correct_in_row or 0, stats.correct_answers_in_row)

        started = [row[0] for row in db.session.query(StudySession.started_at).filter_by(user_id=user_id)]
        stats.study_streak = calculate_streak(started)
        stats.last_study_date = _utc_date(study_session.started_at)

        day_total = sum(
            s.time_spent_seconds or 0
            for s in StudySession.query.filter_by(user_id=user_id)
            if _utc_date(s.started_at) == stats.last_study_date
        )
        if day_total >= THREE_HOURS_SECONDS:
            stats.set_flag('studied_three_hours_in_one_day')

        if studied > 0 and (study_session.time_spent_seconds or 0) / studied > SLOW_CARD_SECONDS:
            stats.set_flag('slow_card_review')

        if study_session.deck_id is not None:
            deck = db.session.get(Deck, study_session.deck_id)
            flag = DIFFICULTY_FLAGS.get(deck.difficulty) if deck is not None else None
            if flag:
                stats.set_flag(flag)

        return AchievementService._save(stats, 'session')

    @staticmethod
    def apply_deck_created(user_id: int, deck: Deck) -> List[Achievement]:
        stats = AchievementService.get_or_create_stats(user_id)
        stats.decks_created = (stats.decks_created or 0) + 1

        if (deck.emoji or Deck.DEFAULT_EMOJI) != Deck.DEFAULT_EMOJI or \
                (deck.color or Deck.DEFAULT_COLOR) != Deck.DEFAULT_COLOR:
            stats.set_flag('customized_deck_theme')

        categories = (
            db.session.query(func.count(func.distinct(Deck.category)))
            .filter(Deck.user_id == user_id, Deck.category.isnot(None), Deck.category != '')
            .scalar()
        )
        if (categories or 0) >= CATEGORY_COUNT_FOR_BADGE:
            stats.set_flag('used_five_categories')

        return AchievementService._save(stats, 'deck')

    @staticmethod
    def apply_card_created(user_id: int, card) -> List[Achievement]:
        stats = AchievementService.get_or_create_stats(user_id)
        stats.cards_created = (stats.cards_created or 0) + 1

        flag = CARD_TYPE_FLAGS.get(card.card_type)
        if flag:
            stats.set_flag(flag)

        deck = db.session.get(Deck, card.deck_id)
        if deck is not None and (deck.card_count or 0) >= HUNDRED_CARDS:
            stats.set_flag('created_hundred_card_deck')

        return AchievementService._save(stats, 'card')

    @staticmethod
    def apply_deck_published(user_id: int) -> List[Achievement]:
        stats = AchievementService.get_or_create_stats(user_id)
        stats.decks_published = (stats.decks_published or 0) + 1
        return AchievementService._save(stats, 'publish')

    @staticmethod
    def describe(user_id: int) -> dict:
        """Counters plus the unlocked achievements with their catalog details."""
        stats = db.session.get(UserAchievementStats, user_id)
        if stats is None:
            return {'stats': None, 'unlocked': []}
        unlocked = []
        for achievement_id in stats.unlocked or []:
            achievement = get_achievement(achievement_id)
            if achievement is not None:
                unlocked.append(achievement.to_dict())
        return {'stats': stats.to_dict(), 'unlocked': unlocked}


def _utc_date(value):
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.date()
