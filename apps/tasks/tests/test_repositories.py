import pytest

from apps.tasks.adapters.store_repositories import StoreTaskRepository
from apps.tasks.domain.entities import DailyMode, TaskType


@pytest.fixture
def repository(store, policy):
    store.insert('tasks', {'id': 'read', 'user': 'u1', 'name': 'Czytanie', 'type': 'daily',
                           'daily_mode': 'checklist'})
    store.insert('tasks', {'id': 'run', 'user': 'u1', 'name': 'Bieganie', 'type': 'daily',
                           'daily_mode': 'number', 'unit': 'km'})
    store.insert('tasks', {'id': 'book', 'user': 'u1', 'name': 'Książki', 'type': 'goal',
                           'daily_mode': '', 'target': 12})
    store.insert('tasks', {'id': 'swim', 'user': 'u2', 'name': 'Pływanie', 'type': 'daily',
                           'daily_mode': 'checklist'})
    return StoreTaskRepository(store, policy=policy)


class TestStoreTaskRepository:
    def test_lists_only_users_tasks(self, repository):
        assert {t.id for t in repository.list_for_user('u1')} == {'read', 'run', 'book'}

    def test_filters_by_type(self, repository):
        tasks = repository.list_for_user('u1', TaskType.RECURRING)
        assert {t.id for t in tasks} == {'read', 'run'}
        assert all(t.is_recurring for t in tasks)

    def test_maps_record_to_entity(self, repository):
        run = repository.get_by_id('run')
        book = repository.get_by_id('book')

        assert run.daily_mode == DailyMode.MEASURED
        assert run.is_measured
        assert run.unit == 'km'
        assert book.type == TaskType.GOAL
        assert book.daily_mode is None
        assert book.target == 12.0

    def test_unknown_task(self, repository):
        assert repository.get_by_id('nope') is None

    def test_retries_cancelled_listing(self, store, repository):
        store.cancel_queries(times=2)
        assert len(repository.list_for_user('u1')) == 3

    def test_listing_cancelled_every_time_is_empty(self, store, repository):
        store.cancel_queries(times=3)
        assert repository.list_for_user('u1') == []
