# apps/goals/domain/services.py
import logging
from typing import Iterable, List, Optional

from apps.core.domain.dates import DateLike, day_key, next_day_key
from apps.core.domain.errors import RequestCancelled
from apps.core.domain.retry import RetryPolicy
from apps.core.ports.record_store import IRecordStore, Page, eq, gte, lt
from apps.goals.domain.entities import GOAL_PROGRESS, GoalProgressEntity, GoalSummary
from apps.tasks.domain.entities import TaskEntity

logger = logging.getLogger(__name__)


class GoalProgressService:
    """
    Wpisy postępu celu są dopisywane; postęp = suma wszystkich wpisów.
    Brak ograniczenia unikalności, więc zdublowany wpis dnia nie psuje sumy.
    """

    def __init__(self, store: IRecordStore, policy: Optional[RetryPolicy] = None, page_size: int = 500):
        self.store = store
        self.policy = policy or RetryPolicy()
        self.page_size = page_size

    def _query(self, filters) -> Optional[List[GoalProgressEntity]]:
        for attempt in self.policy.attempts():
            try:
                records = self.store.query(GOAL_PROGRESS, filters, sort='-date', page=Page(1, self.page_size))
            except RequestCancelled:
                logger.debug("Goal progress query cancelled (attempt %s)", attempt)
                continue
            return [GoalProgressEntity.from_record(r) for r in records]
        return None

    def entries(self, user_id: str, task_id: Optional[str] = None) -> List[GoalProgressEntity]:
        filters = [eq('user', user_id)]
        if task_id:
            filters.append(eq('task', task_id))

        entries = self._query(filters)
        if entries is None:
            logger.warning("Goal progress listing for user %s cancelled on every attempt", user_id)
            return []
        return entries

    def add_progress(self, user_id: str, task_id: str, day: DateLike, delta: float) -> GoalProgressEntity:
        """Odczytaj dzisiejszy wpis (jeśli jest), dodaj deltę, zapisz."""
        key = day_key(day)
        filters = [eq('user', user_id), eq('task', task_id), gte('date', key), lt('date', next_day_key(key))]

        todays = [e for e in (self._query(filters) or []) if e.day == key]
        if todays:
            entry = todays[0]
            record = self.store.update(GOAL_PROGRESS, entry.id, {'value': entry.value + delta})
        else:
            # Także gdy odczyt był niepewny: nowy wpis z samą deltą daje tę samą sumę
            record = self.store.create(GOAL_PROGRESS, {
                'task': task_id,
                'user': user_id,
                'date': key,
                'value': delta,
            })
        return GoalProgressEntity.from_record(record)

    @staticmethod
    def summarize(task: TaskEntity, entries: Iterable[GoalProgressEntity]) -> GoalSummary:
        current = sum(e.value for e in entries if e.task_id == task.id)
        return GoalSummary(task_id=task.id, current=current, target=task.target, unit=task.unit)
