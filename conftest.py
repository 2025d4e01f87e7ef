import pytest

from apps.core.adapters.memory_store import InMemoryRecordStore
from apps.core.domain.retry import RetryPolicy
from apps.daily_logs.domain.services import (
    DailyLogCreator,
    DailyLogMutator,
    DailyLogProber,
    DailyLogReconciler,
)
from apps.tasks.domain.entities import DailyMode, TaskEntity, TaskType

DAY = '2024-01-15'
USER = 'u1'


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def sleeps():
    """Zamiast spać, zapisujemy opóźnienia."""
    return []


@pytest.fixture
def policy(sleeps):
    return RetryPolicy(max_attempts=3, base_delay=0.2, sleep=sleeps.append)


@pytest.fixture
def race_policy(sleeps):
    return RetryPolicy(max_attempts=3, base_delay=0.3, delay_first=True, sleep=sleeps.append)


@pytest.fixture
def prober(store, policy):
    return DailyLogProber(store, policy=policy)


@pytest.fixture
def creator(store, prober, race_policy):
    return DailyLogCreator(store, prober=prober, race_policy=race_policy)


@pytest.fixture
def reconciler(store, prober, creator):
    return DailyLogReconciler(store, prober=prober, creator=creator)


@pytest.fixture
def mutator(store):
    return DailyLogMutator(store)


@pytest.fixture
def make_task():
    def _make(task_id, daily_mode=DailyMode.CHECKLIST, task_type=TaskType.RECURRING, **kwargs):
        return TaskEntity(
            id=task_id,
            name=kwargs.pop('name', f"Task {task_id}"),
            type=task_type,
            daily_mode=daily_mode if task_type == TaskType.RECURRING else None,
            user_id=kwargs.pop('user_id', USER),
            **kwargs
        )
    return _make


@pytest.fixture
def seed_log(store):
    def _seed(task_id, day=DAY, user_id=USER, **fields):
        return store.insert('daily_logs', {'task': task_id, 'user': user_id, 'date': day, **fields})
    return _seed
