"""
Tests for achievements.

Tests cover:
- Unlock rules and meta achievements (pure catalog)
- Streak calculation
- Stats folded from saved study sessions
- Signal handlers for decks, cards, publishing and time-of-day flags
"""

from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import patch

from conftest import login_client, make_deck
from flashy_app.core.signals import session_completed, session_started
from flashy_app.models import StudySession, UserAchievementStats, db
from flashy_app.modules.achievements.logics.catalog import ACHIEVEMENTS, newly_unlocked
from flashy_app.modules.achievements.logics.streak import calculate_streak
from flashy_app.modules.achievements.services.achievement_service import AchievementService


def stats(**values):
    base = dict(
        total_study_sessions=0, cards_reviewed=0, average_accuracy=0, perfect_scores=0,
        correct_answers_in_row=0, study_streak=0, decks_created=0, cards_created=0,
        decks_published=0, flags={}, unlocked=[],
    )
    base.update(values)
    return SimpleNamespace(**base)


def ids(achievements):
    return {a.id for a in achievements}


def stats_for(user):
    return db.session.get(UserAchievementStats, user.user_id)


class TestCatalog:

    def test_ids_are_unique(self):
        assert len({a.id for a in ACHIEVEMENTS}) == len(ACHIEVEMENTS)

    def test_first_steps(self):
        found = ids(newly_unlocked(stats(total_study_sessions=1, cards_reviewed=10)))
        assert found == {'first-study', 'memory-spark'}

    def test_already_unlocked_are_skipped(self):
        found = newly_unlocked(stats(total_study_sessions=1, unlocked=['first-study']))
        assert found == []

    def test_accuracy_expert_needs_volume(self):
        assert 'accuracy-expert' not in ids(newly_unlocked(stats(cards_reviewed=99, average_accuracy=100)))
        assert 'accuracy-expert' in ids(newly_unlocked(stats(cards_reviewed=100, average_accuracy=90)))

    def test_ultimate_master_needs_every_difficulty(self):
        three = {'completed_beginner_deck': True, 'completed_intermediate_deck': True,
                 'completed_advanced_deck': True}
        assert 'ultimate-master' not in ids(newly_unlocked(stats(flags=three)))
        four = dict(three, completed_expert_deck=True)
        assert 'ultimate-master' in ids(newly_unlocked(stats(flags=four)))

    def test_meta_counts_this_pass(self):
        regular = [a.id for a in ACHIEVEMENTS if not a.meta]
        found = ids(newly_unlocked(stats(unlocked=regular[-19:], total_study_sessions=1)))
        assert 'achievement-hunter' in found
        assert 'completionist' not in found


class TestStreak:

    def test_consecutive_days(self):
        days = [date(2024, 1, 3), date(2024, 1, 2), date(2024, 1, 1)]
        assert calculate_streak(days) == 3

    def test_gap_breaks_the_streak(self):
        assert calculate_streak([date(2024, 1, 3), date(2024, 1, 1)]) == 1

    def test_same_day_counts_once(self):
        moments = [
            datetime(2024, 1, 2, 23, 0, tzinfo=timezone.utc),
            datetime(2024, 1, 2, 8, 0, tzinfo=timezone.utc),
            datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc),
        ]
        assert calculate_streak(moments) == 2

    def test_no_activity(self):
        assert calculate_streak([]) == 0


def save_session(user, deck, started, studied, correct, incorrect, seconds=60, run_id=None):
    session = StudySession(
        run_id=run_id, user_id=user.user_id, deck_id=deck.deck_id,
        started_at=started, ended_at=started + timedelta(seconds=seconds),
        cards_studied=studied, correct_count=correct, incorrect_count=incorrect,
        time_spent_seconds=seconds, score=0,
    )
    db.session.add(session)
    db.session.commit()
    return AchievementService.apply_session(user.user_id, session)


class TestSessionStats:
    """Counters folded from saved runs."""

    def test_accuracy_and_in_row(self, app, user):
        deck = make_deck(user)
        start = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)
        save_session(user, deck, start, studied=10, correct=9, incorrect=1)
        save_session(user, deck, start + timedelta(hours=1), studied=10, correct=10, incorrect=0)

        result = stats_for(user)
        assert result.total_study_sessions == 2
        assert result.cards_reviewed == 20
        assert result.average_accuracy == 95
        assert result.perfect_scores == 1
        assert result.correct_answers_in_row == 10

    def test_streak_from_session_dates(self, app, user):
        deck = make_deck(user)
        start = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)
        for day in range(3):
            unlocked = save_session(user, deck, start + timedelta(days=day), studied=1, correct=1, incorrect=0)

        assert stats_for(user).study_streak == 3
        assert 'on-a-roll' in ids(unlocked)

    def test_difficulty_and_slow_card_flags(self, app, user):
        deck = make_deck(user, difficulty='expert')
        save_session(user, deck, datetime(2024, 5, 1, tzinfo=timezone.utc), studied=1, correct=1,
                     incorrect=0, seconds=700)

        result = stats_for(user)
        assert result.has_flag('completed_expert_deck')
        assert result.has_flag('slow_card_review')
        assert {'expert-master', 'slow-and-steady'} <= set(result.unlocked)

    def test_three_hours_in_one_day(self, app, user):
        deck = make_deck(user)
        start = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)
        save_session(user, deck, start, studied=100, correct=50, incorrect=50, seconds=5400)
        assert not stats_for(user).has_flag('studied_three_hours_in_one_day')

        save_session(user, deck, start + timedelta(hours=3), studied=100, correct=50, incorrect=50, seconds=5400)
        assert stats_for(user).has_flag('studied_three_hours_in_one_day')

    def test_study_run_through_api_updates_stats(self, app, client, user):
        deck = make_deck(user, difficulty='beginner', cards=[{'front': 'Q', 'back': 'A'}])
        login_client(client, user)
        client.post('/api/study/start', json={'deck_id': deck.deck_id})
        client.post('/api/study/next', json={'was_correct': True})

        result = stats_for(user)
        assert result.total_study_sessions == 1
        assert {'first-study', 'perfect-score', 'beginner-master'} <= set(result.unlocked)

    def test_resubmitted_run_counts_once(self, app, client, user):
        deck = make_deck(user)
        login_client(client, user)
        payload = {
            'run_id': 'same-run', 'deck_id': deck.deck_id,
            'started_at': '2024-05-01T10:00:00Z', 'ended_at': '2024-05-01T10:02:00Z',
            'cards_studied': 2, 'correct_count': 2,
        }
        client.post('/api/study/sessions', json=payload)
        client.post('/api/study/sessions', json=payload)
        assert stats_for(user).total_study_sessions == 1


class TestStudyFlags:

    def test_night_owl(self, app, user):
        session_started.send(None, user_id=user.user_id, started_at=datetime.now(timezone.utc), local_hour=1)
        result = stats_for(user)
        assert result.has_flag('studied_after_midnight')
        assert 'night-owl' in result.unlocked

    def test_early_bird_window(self, app, user):
        session_started.send(None, user_id=user.user_id, started_at=datetime.now(timezone.utc), local_hour=8)
        assert stats_for(user) is None
        session_started.send(None, user_id=user.user_id, started_at=datetime.now(timezone.utc), local_hour=7)
        assert 'early-bird' in stats_for(user).unlocked

    def test_marathon(self, app, user):
        summary = SimpleNamespace(elapsed_seconds=3600)
        session_completed.send(None, user_id=user.user_id, summary=summary, persisted=False, difficulty=None)
        result = stats_for(user)
        assert 'marathon-session' in result.unlocked
        assert 'ultra-marathon' not in result.unlocked

    def test_no_user_is_ignored(self, app):
        session_started.send(None, user_id=None, started_at=datetime.now(timezone.utc), local_hour=1)
        assert UserAchievementStats.query.count() == 0


class TestContentEvents:

    def test_customised_deck(self, app, client, user):
        login_client(client, user)
        client.post('/api/decks', json={'name': 'Plain'})
        assert set(stats_for(user).unlocked) == {'first-deck'}

        client.post('/api/decks', json={'name': 'Fancy', 'emoji': '🚀'})
        assert 'personalized' in stats_for(user).unlocked
        assert stats_for(user).decks_created == 2

    def test_five_categories(self, app, client, premium_user):
        login_client(client, premium_user)
        for category in ('Languages', 'Science', 'History', 'Art', 'Music'):
            client.post('/api/decks', json={'name': category, 'category': category})
        assert 'categorized' in stats_for(premium_user).unlocked
        assert 'deck-builder' in stats_for(premium_user).unlocked

    def test_card_variety(self, app, client, user):
        deck = make_deck(user)
        login_client(client, user)
        url = f'/api/decks/{deck.deck_id}/cards'
        client.post(url, json={'front': 'a', 'back': 'b'})
        client.post(url, json={'card_type': 'type-answer', 'front': 'a', 'back': 'b'})
        assert 'card-variety' not in stats_for(user).unlocked

        client.post(url, json={'card_type': 'multiple-choice', 'front': 'a', 'correct_answers': ['b']})
        result = stats_for(user)
        assert 'card-variety' in result.unlocked
        assert result.cards_created == 3

    def test_publisher_counts_first_publish_only(self, app, client, premium_user):
        deck = make_deck(premium_user, category='Languages', subtopic='Spanish',
                         cards=[{'front': 'Hola', 'back': 'Hello'}])
        login_client(client, premium_user)
        client.post(f'/api/community/decks/{deck.deck_id}/publish')
        client.post(f'/api/community/decks/{deck.deck_id}/publish')

        result = stats_for(premium_user)
        assert result.decks_published == 1
        assert 'publisher' in result.unlocked

    def test_failure_does_not_break_the_request(self, app, client, user):
        login_client(client, user)
        with patch.object(AchievementService, 'apply_deck_created', side_effect=RuntimeError('boom')):
            response = client.post('/api/decks', json={'name': 'Still created'})
        assert response.status_code == 201


class TestAchievementsApi:

    def test_catalog(self, client):
        data = client.get('/api/achievements/catalog').get_json()['data']
        assert len(data['achievements']) == len(ACHIEVEMENTS)

    def test_user_achievements(self, app, client, user):
        login_client(client, user)
        assert client.get('/api/achievements').get_json()['data'] == {'stats': None, 'unlocked': []}

        client.post('/api/decks', json={'name': 'First'})
        data = client.get('/api/achievements').get_json()['data']
        assert data['stats']['decks_created'] == 1
        assert data['unlocked'][0]['id'] == 'first-deck'
