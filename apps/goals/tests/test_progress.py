import pytest

from apps.goals.domain.entities import GoalSummary
from apps.goals.domain.services import GoalProgressService
from apps.tasks.domain.entities import TaskType


@pytest.fixture
def service(store, policy):
    return GoalProgressService(store, policy=policy)


@pytest.fixture
def goal(make_task):
    return make_task('book', task_type=TaskType.GOAL, target=12, unit='książek')


class TestAddProgress:
    def test_same_day_accumulates_in_one_entry(self, store, service):
        service.add_progress('u1', 'book', '2024-01-15', 2)
        entry = service.add_progress('u1', 'book', '2024-01-15T22:00:00Z', 3)

        assert entry.value == 5
        assert len(store.records('goal_progress')) == 1

    def test_new_day_gets_new_entry(self, store, service):
        service.add_progress('u1', 'book', '2024-01-15', 2)
        entry = service.add_progress('u1', 'book', '2024-01-16', 1)

        assert entry.day == '2024-01-16'
        assert entry.value == 1
        assert len(store.records('goal_progress')) == 2

    def test_cancelled_read_adds_separate_entry_without_losing_progress(self, store, service, goal):
        service.add_progress('u1', 'book', '2024-01-15', 2)
        store.cancel_queries(times=3)

        service.add_progress('u1', 'book', '2024-01-15', 3)

        assert len(store.records('goal_progress')) == 2
        assert service.summarize(goal, service.entries('u1', 'book')).current == 5


class TestEntries:
    def test_filtered_by_task(self, service):
        service.add_progress('u1', 'book', '2024-01-15', 2)
        service.add_progress('u1', 'km', '2024-01-15', 10)
        service.add_progress('u2', 'book', '2024-01-15', 7)

        entries = service.entries('u1', 'book')

        assert [(e.task_id, e.value) for e in entries] == [('book', 2)]
        assert len(service.entries('u1')) == 2

    def test_cancelled_listing_is_empty(self, store, service):
        service.add_progress('u1', 'book', '2024-01-15', 2)
        store.cancel_queries(times=3)
        assert service.entries('u1') == []


class TestGoalSummary:
    def test_sums_entries_of_the_task(self, service, goal):
        for day, delta in (('2024-01-01', 4), ('2024-01-02', 5), ('2024-01-03', 1)):
            service.add_progress('u1', 'book', day, delta)
        service.add_progress('u1', 'other', '2024-01-01', 100)

        summary = service.summarize(goal, service.entries('u1'))

        assert summary.current == 10
        assert summary.percentage == pytest.approx(83.33, abs=0.01)
        assert not summary.is_complete
        assert summary.unit == 'książek'

    @pytest.mark.parametrize('current, target, percentage, complete', [
        (12, 12, 100.0, True),
        (30, 12, 100.0, True),
        (0, 12, 0.0, False),
        (5, None, 0.0, True),
        (5, 0, 0.0, True),
    ])
    def test_percentage_and_completion(self, current, target, percentage, complete):
        summary = GoalSummary(task_id='book', current=current, target=target)
        assert summary.percentage == percentage
        assert summary.is_complete is complete
