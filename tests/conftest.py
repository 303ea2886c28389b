import random
from datetime import datetime, timedelta, timezone

import pytest
from flask import g

from flashy_app import create_app, db
from flashy_app.config import Config
from flashy_app.models import Card, Deck, User


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ENGINE_OPTIONS = {
        'connect_args': {'check_same_thread': False}
    }
    WTF_CSRF_ENABLED = False
    LOG_LEVEL = 'WARNING'


@pytest.fixture
def app(tmp_path):
    class _Config(TestConfig):
        LOG_DIR = str(tmp_path / 'logs')
        MEDIA_CACHE_DIR = str(tmp_path / 'media')

    app = create_app(_Config)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def make_user(username='learner', tier=User.TIER_FREE, **kwargs):
    user = User(username=username, email=f'{username}@example.com', subscription_tier=tier, **kwargs)
    user.set_password('password')
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def user(app):
    return make_user()


@pytest.fixture
def premium_user(app):
    return make_user('premium', tier=User.TIER_MONTHLY)


def login_client(client, user):
    with client.session_transaction() as session:
        session['_user_id'] = str(user.user_id)
        session['_fresh'] = True
    # The app fixture holds one app context across requests, so drop
    # Flask-Login's per-context cache of the previously loaded user.
    g.pop('_login_user', None)


def make_deck(user, name='Capitals', cards=(), **kwargs):
    """Deck plus cards given as dicts of Card column values."""
    deck = Deck(user_id=user.user_id, name=name, **kwargs)
    db.session.add(deck)
    db.session.flush()
    for position, values in enumerate(cards, start=1):
        db.session.add(Card(deck_id=deck.deck_id, position=position, **values))
    deck.card_count = len(cards)
    db.session.commit()
    return deck


class FakeClock:
    """Controllable ``now()`` for timed runs."""

    def __init__(self, start=None):
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rng():
    return random.Random(1234)
