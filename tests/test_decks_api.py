"""
Tests for deck and card management.

Tests cover:
- Deck CRUD and ordering, scoped to the owner
- Card validation per card type
- Batch creation with partial failures and concurrent image downloads
"""

from unittest.mock import MagicMock, patch

import requests

from conftest import login_client, make_deck, make_user
from flashy_app.models import Card, Deck, db


def image_response(content_type='image/png', body=b'\x89PNG fake'):
    response = MagicMock()
    response.headers = {'Content-Type': content_type}
    response.raise_for_status.return_value = None
    response.iter_content.return_value = [body]
    return response


class TestDeckApi:

    def test_create_applies_defaults(self, app, client, user):
        login_client(client, user)
        response = client.post('/api/decks', json={'name': 'Spanish verbs'})
        assert response.status_code == 201
        deck = response.get_json()['data']
        assert deck['emoji'] == '📚'
        assert deck['color'] == '#10B981'
        assert deck['card_count'] == 0

    def test_name_is_required(self, app, client, user):
        login_client(client, user)
        response = client.post('/api/decks', json={'name': '  '})
        assert response.status_code == 400
        assert response.get_json()['details']['errors'] == {'name': 'required'}

    def test_unknown_difficulty(self, app, client, user):
        login_client(client, user)
        response = client.post('/api/decks', json={'name': 'X', 'difficulty': 'impossible'})
        assert response.status_code == 400

    def test_update_and_reorder(self, app, client, user):
        first = make_deck(user, name='First', position=0)
        second = make_deck(user, name='Second', position=1)
        login_client(client, user)

        updated = client.patch(f'/api/decks/{first.deck_id}', json={'emoji': '🇪🇸'}).get_json()['data']
        assert updated['emoji'] == '🇪🇸'
        assert updated['name'] == 'First'

        ordered = client.put('/api/decks/order', json={'deck_ids': [second.deck_id, first.deck_id]})
        assert [d['name'] for d in ordered.get_json()['data']] == ['Second', 'First']

    def test_delete_cascades_to_cards(self, app, client, user):
        deck = make_deck(user, cards=[{'front': 'a', 'back': 'b'}])
        login_client(client, user)
        assert client.delete(f'/api/decks/{deck.deck_id}').status_code == 200
        assert Deck.query.count() == 0
        assert Card.query.count() == 0

    def test_other_users_deck_is_hidden(self, app, client, user):
        deck = make_deck(make_user('other'))
        login_client(client, user)
        assert client.get(f'/api/decks/{deck.deck_id}').status_code == 404
        assert client.delete(f'/api/decks/{deck.deck_id}').status_code == 404


class TestCardApi:

    def test_create_classic_card(self, app, client, user):
        deck = make_deck(user)
        login_client(client, user)
        response = client.post(f'/api/decks/{deck.deck_id}/cards', json={'front': 'Hola', 'back': 'Hello'})
        assert response.status_code == 201
        assert response.get_json()['data']['position'] == 1
        assert db.session.get(Deck, deck.deck_id).card_count == 1

    def test_multiple_choice_from_options(self, app, client, user):
        deck = make_deck(user)
        login_client(client, user)
        card = client.post(f'/api/decks/{deck.deck_id}/cards', json={
            'card_type': 'multiple-choice',
            'front': 'Primes',
            'options': ['2', '4', '3', ''],
            'correct_indices': [0, 2],
        }).get_json()['data']
        assert card['correct_answers'] == ['2', '3']
        assert card['incorrect_answers'] == ['4']
        assert card['back'] == '2'

    def test_type_answer_keeps_alternates(self, app, client, user):
        deck = make_deck(user)
        login_client(client, user)
        card = client.post(f'/api/decks/{deck.deck_id}/cards', json={
            'card_type': 'type-answer', 'front': 'Largest US city', 'back': 'New York City',
            'accepted_answers': ['NYC', ' '],
        }).get_json()['data']
        assert card['accepted_answers'] == ['NYC']
        assert card['correct_answers'] == []

    def test_back_is_required_for_classic(self, app, client, user):
        deck = make_deck(user)
        login_client(client, user)
        response = client.post(f'/api/decks/{deck.deck_id}/cards', json={'front': 'Hola'})
        assert response.status_code == 400

    def test_changing_type_clears_other_answer_fields(self, app, client, user):
        deck = make_deck(user, cards=[{
            'card_type': 'type-answer', 'front': 'Q', 'back': 'A', 'accepted_answers': ['a1'],
        }])
        card = Card.query.filter_by(deck_id=deck.deck_id).one()
        login_client(client, user)

        updated = client.patch(f'/api/decks/cards/{card.card_id}', json={'card_type': 'classic-flip'}).get_json()['data']
        assert updated['card_type'] == 'classic-flip'
        assert updated['accepted_answers'] == []

    def test_flag_patch_uses_ignored_alias(self, app, client, user):
        deck = make_deck(user, cards=[{'front': 'Q', 'back': 'A'}])
        card = Card.query.filter_by(deck_id=deck.deck_id).one()
        login_client(client, user)

        updated = client.patch(f'/api/decks/cards/{card.card_id}', json={'ignored': True}).get_json()['data']
        assert updated['is_ignored'] is True

    def test_free_plan_card_limit(self, app, client, user):
        deck = make_deck(user, cards=[{'front': f'Q{i}', 'back': 'A'} for i in range(50)])
        login_client(client, user)
        response = client.post(f'/api/decks/{deck.deck_id}/cards', json={'front': 'one more', 'back': 'A'})
        assert response.status_code == 403
        assert response.get_json()['code'] == 'SUBSCRIPTION_LIMIT'

    def test_images_need_premium(self, app, client, user):
        deck = make_deck(user)
        login_client(client, user)
        response = client.post(f'/api/decks/{deck.deck_id}/cards', json={
            'front': 'Q', 'back': 'A', 'front_image_url': 'https://img.example.com/a.png',
        })
        assert response.status_code == 403

    def test_delete_card_updates_count(self, app, client, user):
        deck = make_deck(user, cards=[{'front': 'Q', 'back': 'A'}, {'front': 'Q2', 'back': 'A2'}])
        card = Card.query.filter_by(deck_id=deck.deck_id, front='Q').one()
        login_client(client, user)
        assert client.delete(f'/api/decks/cards/{card.card_id}').status_code == 200
        assert db.session.get(Deck, deck.deck_id).card_count == 1


class TestBatchCreate:
    """Each item stands alone: bad items and failed images do not sink the batch."""

    def test_invalid_items_are_reported(self, app, client, user):
        deck = make_deck(user)
        login_client(client, user)
        response = client.post(f'/api/decks/{deck.deck_id}/cards/batch', json={'cards': [
            {'front': 'ok', 'back': 'fine'},
            {'front': '', 'back': 'no front'},
            {'card_type': 'multiple-choice', 'front': 'no answers'},
        ]})
        assert response.status_code == 207
        result = response.get_json()['data']
        assert result['created_count'] == 1
        assert [f['index'] for f in result['failed']] == [1, 2]
        assert result['partial'] is True

    def test_empty_batch(self, app, client, user):
        deck = make_deck(user)
        login_client(client, user)
        assert client.post(f'/api/decks/{deck.deck_id}/cards/batch', json={'cards': []}).status_code == 400

    def test_images_downloaded_and_failures_kept_per_card(self, app, client, premium_user):
        deck = make_deck(premium_user)
        login_client(client, premium_user)

        def fake_get(url, **kwargs):
            if 'broken' in url:
                raise requests.ConnectionError('connection refused')
            if 'page' in url:
                return image_response(content_type='text/html')
            return image_response()

        with patch('flashy_app.modules.decks.services.media_service.requests.get', side_effect=fake_get) as mocked:
            response = client.post(f'/api/decks/{deck.deck_id}/cards/batch', json={'cards': [
                {'front': 'a', 'back': 'b', 'front_image_url': 'https://img.example.com/good.png'},
                {'front': 'c', 'back': 'd', 'front_image_url': 'https://img.example.com/broken.png'},
                {'front': 'e', 'back': 'f', 'back_image_url': 'https://img.example.com/page.html'},
                {'front': 'g', 'back': 'h', 'front_image_url': 'https://img.example.com/good.png'},
            ]})

        assert response.status_code == 207
        result = response.get_json()['data']
        assert result['created_count'] == 4
        # The shared URL is fetched once
        assert mocked.call_count == 3

        created = {c['front']: c for c in result['created']}
        assert created['a']['front_image_url'].startswith('/uploads/cards/images/')
        assert created['a']['front_image_url'] == created['g']['front_image_url']
        assert created['c']['front_image_url'] is None
        assert created['e']['back_image_url'] is None

        failures = {(f['index'], f['field']) for f in result['failed']}
        assert failures == {(1, 'front_image_url'), (2, 'back_image_url')}

    def test_batch_respects_card_limit(self, app, client, user):
        deck = make_deck(user, cards=[{'front': f'Q{i}', 'back': 'A'} for i in range(49)])
        login_client(client, user)
        response = client.post(f'/api/decks/{deck.deck_id}/cards/batch', json={'cards': [
            {'front': 'x', 'back': 'y'}, {'front': 'z', 'back': 'w'},
        ]})
        assert response.status_code == 403


class TestMediaLogging:

    def test_media_logger_sits_under_flashy(self):
        from flashy_app.modules.decks.services import media_service

        assert media_service.logger.name == 'flashy.decks.media'
