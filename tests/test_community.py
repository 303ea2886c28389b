"""
Tests for publishing decks to the community.

Tests cover:
- Plan gating and deck requirements for publishing
- Snapshot refresh on republish
- Unpublishing, and cleanup when the source deck is deleted
"""

from conftest import login_client, make_deck
from flashy_app.models import CommunityCard, CommunityDeck, Deck, db

CARDS = [{'front': 'Hola', 'back': 'Hello'}, {'front': 'Adiós', 'back': 'Goodbye'}]


def publishable(user, **kwargs):
    kwargs.setdefault('category', 'Languages')
    kwargs.setdefault('subtopic', 'Spanish')
    kwargs.setdefault('cards', CARDS)
    return make_deck(user, name='Spanish basics', **kwargs)


class TestPublish:

    def test_free_plan_cannot_publish(self, app, client, user):
        deck = publishable(user)
        login_client(client, user)
        response = client.post(f'/api/community/decks/{deck.deck_id}/publish')
        assert response.status_code == 403
        assert response.get_json()['code'] == 'SUBSCRIPTION_LIMIT'

    def test_publish_creates_snapshot(self, app, client, premium_user):
        deck = publishable(premium_user)
        login_client(client, premium_user)

        response = client.post(f'/api/community/decks/{deck.deck_id}/publish')
        assert response.status_code == 200
        snapshot = response.get_json()['data']
        assert snapshot['card_count'] == 2

        deck = db.session.get(Deck, deck.deck_id)
        assert deck.is_published is True
        assert deck.community_published_id == snapshot['community_deck_id']

        shared = client.get(f"/api/community/{snapshot['community_deck_id']}").get_json()['data']
        assert [c['front'] for c in shared['cards']] == ['Hola', 'Adiós']

    def test_republish_refreshes_cards(self, app, client, premium_user):
        deck = publishable(premium_user)
        login_client(client, premium_user)
        first = client.post(f'/api/community/decks/{deck.deck_id}/publish').get_json()['data']

        client.post(f'/api/decks/{deck.deck_id}/cards', json={'front': 'Gracias', 'back': 'Thanks'})
        second = client.post(f'/api/community/decks/{deck.deck_id}/publish').get_json()['data']

        assert second['community_deck_id'] == first['community_deck_id']
        assert second['card_count'] == 3
        assert CommunityCard.query.count() == 3

    def test_category_and_subtopic_required(self, app, client, premium_user):
        deck = publishable(premium_user, subtopic=None)
        login_client(client, premium_user)
        response = client.post(f'/api/community/decks/{deck.deck_id}/publish')
        assert response.status_code == 400
        assert 'subtopic' in response.get_json()['details']['errors']

    def test_empty_deck(self, app, client, premium_user):
        deck = publishable(premium_user, cards=())
        login_client(client, premium_user)
        assert client.post(f'/api/community/decks/{deck.deck_id}/publish').status_code == 400

    def test_banned_deck(self, app, client, premium_user):
        deck = publishable(premium_user, publish_banned=True, publish_banned_reason='spam')
        login_client(client, premium_user)
        response = client.post(f'/api/community/decks/{deck.deck_id}/publish')
        assert response.status_code == 403
        assert 'spam' in response.get_json()['message']

    def test_imported_deck(self, app, client, premium_user):
        deck = publishable(premium_user, source_community_deck_id=42)
        login_client(client, premium_user)
        assert client.post(f'/api/community/decks/{deck.deck_id}/publish').status_code == 403


class TestUnpublish:

    def test_unpublish_removes_snapshot(self, app, client, premium_user):
        deck = publishable(premium_user)
        login_client(client, premium_user)
        client.post(f'/api/community/decks/{deck.deck_id}/publish')

        response = client.delete(f'/api/community/decks/{deck.deck_id}/publish')
        assert response.status_code == 200
        assert response.get_json()['data']['is_published'] is False
        assert CommunityDeck.query.count() == 0
        assert CommunityCard.query.count() == 0

    def test_unpublish_when_not_published(self, app, client, premium_user):
        deck = publishable(premium_user)
        login_client(client, premium_user)
        assert client.delete(f'/api/community/decks/{deck.deck_id}/publish').status_code == 400

    def test_deleting_deck_unpublishes(self, app, client, premium_user):
        deck = publishable(premium_user)
        login_client(client, premium_user)
        client.post(f'/api/community/decks/{deck.deck_id}/publish')

        assert client.delete(f'/api/decks/{deck.deck_id}').status_code == 200
        assert CommunityDeck.query.count() == 0
