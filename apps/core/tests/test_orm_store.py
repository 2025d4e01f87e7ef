import pytest
from django.contrib.auth.models import User

from apps.core.adapters.orm_store import DjangoRecordStore
from apps.core.domain.errors import (
    ConstraintViolation,
    InvalidQuery,
    PermissionDenied,
    RecordNotFound,
)
from apps.core.ports.record_store import eq, gte, lt
from apps.daily_logs.domain.services import DailyLogReconciler
from apps.daily_logs.models import DailyLog
from apps.tasks.adapters.store_repositories import StoreTaskRepository
from apps.tasks.domain.entities import TaskType
from apps.tasks.models import Task

pytestmark = pytest.mark.django_db


@pytest.fixture
def owner():
    return User.objects.create_user(username='owner', password='x')


@pytest.fixture
def stranger():
    return User.objects.create_user(username='stranger', password='x')


@pytest.fixture
def task(owner):
    return Task.objects.create(user=owner, name='Czytanie', type='daily', daily_mode='checklist')


def _log_fields(task, user, day='2024-01-15', **extra):
    return {'task': str(task.pk), 'user': str(user.pk), 'date': day, **extra}


class TestCreate:
    def test_returns_record_shaped_like_hosted_backend(self, task, owner):
        record = DjangoRecordStore().create('daily_logs', _log_fields(task, owner, value_bool=False))

        assert record['id'] == str(DailyLog.objects.get().pk)
        assert record['task'] == str(task.pk)
        assert record['user'] == str(owner.pk)
        assert record['date'] == '2024-01-15'
        assert record['value_bool'] is False
        assert 'created' in record and 'updated' in record

    def test_timestamp_is_stored_as_day(self, task, owner):
        record = DjangoRecordStore().create('daily_logs', _log_fields(task, owner, day='2024-01-15T23:10:00Z'))
        assert record['date'] == '2024-01-15'

    def test_duplicate_day_raises_constraint_violation(self, task, owner):
        store = DjangoRecordStore()
        store.create('daily_logs', _log_fields(task, owner))

        with pytest.raises(ConstraintViolation) as exc_info:
            store.create('daily_logs', _log_fields(task, owner, day='2024-01-15 08:00:00'))

        assert exc_info.value.field == 'date'
        assert DailyLog.objects.count() == 1

    def test_cannot_create_for_another_user(self, task, owner, stranger):
        store = DjangoRecordStore(acting_user_id=stranger.pk)
        with pytest.raises(PermissionDenied):
            store.create('daily_logs', _log_fields(task, owner))


class TestQuery:
    def test_day_range(self, task, owner):
        store = DjangoRecordStore()
        for day in ('2024-01-14', '2024-01-15', '2024-01-16'):
            store.create('daily_logs', _log_fields(task, owner, day=day))

        records = store.query('daily_logs', [eq('user', str(owner.pk)), gte('date', '2024-01-15'),
                                             lt('date', '2024-01-16')])

        assert [r['date'] for r in records] == ['2024-01-15']

    def test_sort_descending(self, task, owner):
        store = DjangoRecordStore()
        for day in ('2024-01-14', '2024-01-16', '2024-01-15'):
            store.create('daily_logs', _log_fields(task, owner, day=day))

        records = store.query('daily_logs', sort='-date')
        assert [r['date'] for r in records] == ['2024-01-16', '2024-01-15', '2024-01-14']

    def test_foreign_records_are_silently_filtered(self, task, owner, stranger):
        DjangoRecordStore().create('daily_logs', _log_fields(task, owner))

        assert DjangoRecordStore(acting_user_id=stranger.pk).query('daily_logs') == []
        assert len(DjangoRecordStore(acting_user_id=owner.pk).query('daily_logs')) == 1

    def test_unknown_field(self):
        with pytest.raises(InvalidQuery):
            DjangoRecordStore().query('daily_logs', [eq('mood', 'good')])

    def test_unknown_collection(self):
        with pytest.raises(InvalidQuery):
            DjangoRecordStore().query('habits')

    def test_malformed_value(self):
        with pytest.raises(InvalidQuery):
            DjangoRecordStore().query('daily_logs', [eq('task', 'not-a-number')])


class TestUpdateAndDelete:
    def test_update_only_touches_given_fields(self, task, owner):
        store = DjangoRecordStore()
        record = store.create('daily_logs', _log_fields(task, owner, value_bool=True, value_number=4.0))

        updated = store.update('daily_logs', record['id'], {'value_bool': False})

        assert updated['value_bool'] is False
        assert updated['value_number'] == 4.0

    @pytest.mark.parametrize('record_id', ['999999', 'abc'])
    def test_missing_record(self, record_id):
        with pytest.raises(RecordNotFound):
            DjangoRecordStore().update('daily_logs', record_id, {'value_bool': True})

    def test_foreign_record_is_forbidden(self, task, owner, stranger):
        record = DjangoRecordStore().create('daily_logs', _log_fields(task, owner))

        with pytest.raises(PermissionDenied):
            DjangoRecordStore(acting_user_id=stranger.pk).update('daily_logs', record['id'], {'value_bool': True})
        with pytest.raises(PermissionDenied):
            DjangoRecordStore(acting_user_id=stranger.pk).delete('daily_logs', record['id'])

    def test_delete(self, task, owner):
        store = DjangoRecordStore()
        record = store.create('daily_logs', _log_fields(task, owner))

        assert store.delete('daily_logs', record['id']) is True
        assert not DailyLog.objects.exists()


class TestReconcileOverOrm:
    def test_creates_one_log_per_recurring_task(self, owner, task):
        Task.objects.create(user=owner, name='Bieganie', type='daily', daily_mode='number', unit='km')
        Task.objects.create(user=owner, name='Książka', type='goal', target=12)

        store = DjangoRecordStore(acting_user_id=owner.pk)
        tasks = StoreTaskRepository(store).list_for_user(str(owner.pk), TaskType.RECURRING)
        reconciler = DailyLogReconciler(store)

        first = reconciler.reconcile(str(owner.pk), tasks, '2024-01-15')
        second = reconciler.reconcile(str(owner.pk), tasks, '2024-01-15T18:30:00Z')

        assert len(first.created) == 2
        assert second.created == []
        assert sorted(second.existing) == sorted(first.created)
        assert DailyLog.objects.count() == 2
        assert not DailyLog.objects.filter(value_bool=True).exists()
