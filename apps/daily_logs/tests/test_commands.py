from io import StringIO

import pytest
from django.contrib.auth.models import User
from django.core.management import CommandError, call_command

from apps.core.domain.errors import PermissionDenied
from apps.daily_logs.models import DailyLog
from apps.tasks.adapters.store_repositories import StoreTaskRepository
from apps.tasks.models import Task

pytestmark = pytest.mark.django_db


@pytest.fixture(autouse=True)
def orm_backend(settings):
    settings.TRACKER_STORE_BACKEND = 'orm'


@pytest.fixture
def owner():
    return User.objects.create_user(username='ania', password='x')


@pytest.fixture
def tasks(owner):
    return [
        Task.objects.create(user=owner, name='Medytacja', type='daily', daily_mode='checklist'),
        Task.objects.create(user=owner, name='Bieganie', type='daily', daily_mode='number', unit='km'),
        Task.objects.create(user=owner, name='Książki', type='goal', target=20),
    ]


class TestReconcileDailyLogsCommand:
    def test_creates_logs_for_recurring_tasks(self, owner, tasks):
        out = StringIO()

        call_command('reconcile_daily_logs', user=str(owner.pk), date='2024-01-15', stdout=out)

        assert DailyLog.objects.filter(date='2024-01-15').count() == 2
        assert '2 utworzonych' in out.getvalue()

    def test_second_run_creates_nothing(self, owner, tasks):
        call_command('reconcile_daily_logs', user=str(owner.pk), date='2024-01-15', stdout=StringIO())
        out = StringIO()

        call_command('reconcile_daily_logs', user=str(owner.pk), date='2024-01-15', stdout=out)

        assert DailyLog.objects.count() == 2
        assert '0 utworzonych, 2 istniejących' in out.getvalue()

    def test_invalid_date(self, owner):
        with pytest.raises(CommandError):
            call_command('reconcile_daily_logs', user=str(owner.pk), date='15/01/xx', stdout=StringIO())

    def test_store_error_while_listing_tasks(self, owner, tasks, monkeypatch):
        def forbidden(self, user_id, task_type=None):
            raise PermissionDenied('list rule', status=403)

        monkeypatch.setattr(StoreTaskRepository, 'list_for_user', forbidden)

        with pytest.raises(CommandError, match='access rules'):
            call_command('reconcile_daily_logs', user=str(owner.pk), date='2024-01-15', stdout=StringIO())
        assert not DailyLog.objects.exists()


class TestToggleDailyLogCommand:
    def test_checks_measured_task_with_value(self, owner, tasks):
        run = tasks[1]
        out = StringIO()

        call_command('toggle_daily_log', user=str(owner.pk), task=str(run.pk), date='2024-01-15',
                     value=5.0, stdout=out)

        log = DailyLog.objects.get(task=run)
        assert log.value_bool is True
        assert log.value_number == 5.0
        assert '(2024-01-15): wykonane' in out.getvalue()

    def test_toggle_twice_unchecks_but_keeps_value(self, owner, tasks):
        run = tasks[1]
        options = dict(user=str(owner.pk), task=str(run.pk), date='2024-01-15', stdout=StringIO())

        call_command('toggle_daily_log', value=5.0, **options)
        call_command('toggle_daily_log', **options)

        log = DailyLog.objects.get(task=run)
        assert log.value_bool is False
        assert log.value_number == 5.0

    def test_invalid_date(self, owner, tasks):
        with pytest.raises(CommandError):
            call_command('toggle_daily_log', user=str(owner.pk), task=str(tasks[0].pk),
                         date='jutro', stdout=StringIO())
        assert not DailyLog.objects.exists()
