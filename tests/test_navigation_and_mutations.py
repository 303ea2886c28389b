import pytest

from flashy_app.core.error_handlers import ValidationError
from flashy_app.modules.study.mutations import PendingMutation
from flashy_app.modules.study.navigation import back_target, deck_details_target, navigation_targets
from flashy_app.modules.study.schemas import StudySource


class TestNavigationTargets:
    """Where the summary screen sends the learner."""

    def test_deck_run_goes_back_to_the_deck(self):
        source = StudySource(kind='deck', deck_id=4)
        assert back_target(source).to_dict() == {'view': 'deck-detail', 'deck_id': 4}
        assert deck_details_target(source) is None

    def test_all_cards_run(self):
        assert navigation_targets(StudySource(kind='all-cards')) == {'back': {'view': 'all-cards'}}

    def test_temporary_run_with_shared_deck(self):
        source = StudySource(kind='temporary', community_deck_id=9, return_to_shared_deck_id=9)
        assert navigation_targets(source) == {
            'back': {'view': 'community'},
            'deck_details': {'view': 'shared-deck', 'community_deck_id': 9},
        }

    def test_temporary_run_without_shared_deck(self):
        source = StudySource(kind='temporary', community_deck_id=9)
        assert deck_details_target(source).to_dict() == {'view': 'community'}

    def test_source_validation(self):
        with pytest.raises(ValidationError):
            StudySource(kind='deck')
        with pytest.raises(ValidationError):
            StudySource(kind='folder')


class TestPendingMutation:

    def _mutation(self, store, commit):
        return PendingMutation(
            snapshot=lambda: {'favorite': store['favorite']},
            write=store.update,
            changes={'favorite': True},
            commit=commit,
            label='favorite',
        )

    def test_applies_before_commit(self):
        store = {'favorite': False}
        seen = []
        outcome = self._mutation(store, lambda changes: seen.append(dict(store))).run()

        assert outcome.ok is True
        assert seen == [{'favorite': True}]
        assert store['favorite'] is True

    def test_rollback_on_rejection(self):
        store = {'favorite': False}

        def reject(changes):
            raise ConnectionError('offline')

        outcome = self._mutation(store, reject).run()
        assert outcome.ok is False
        assert outcome.values == {'favorite': False}
        assert 'favorite' in outcome.notice
        assert store['favorite'] is False
