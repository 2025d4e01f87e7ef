# apps/tasks/adapters/store_repositories.py
import logging
from typing import List, Optional

from apps.core.domain.errors import RequestCancelled
from apps.core.domain.retry import RetryPolicy
from apps.core.ports.record_store import IRecordStore, Page, Record, eq
from apps.tasks.domain.entities import TASKS, DailyMode, TaskEntity, TaskType
from apps.tasks.ports.repositories import ITaskRepository

logger = logging.getLogger(__name__)


class StoreTaskRepository(ITaskRepository):
    def __init__(self, store: IRecordStore, policy: Optional[RetryPolicy] = None, page_size: int = 500):
        self.store = store
        self.policy = policy or RetryPolicy()
        self.page_size = page_size

    @staticmethod
    def to_entity(record: Record) -> TaskEntity:
        """Konwertuje rekord magazynu -> Czystą Encję."""
        daily_mode = record.get('daily_mode') or None
        target = record.get('target')
        return TaskEntity(
            id=str(record['id']),
            name=record.get('name', ''),
            type=TaskType(record.get('type') or TaskType.RECURRING.value),
            daily_mode=DailyMode(daily_mode) if daily_mode else None,
            unit=record.get('unit') or None,
            target=float(target) if target is not None else None,
            description=record.get('description') or None,
            tag=record.get('tag') or None,
            user_id=str(record['user']) if record.get('user') is not None else None,
        )

    def get_by_id(self, task_id: str) -> Optional[TaskEntity]:
        for attempt in self.policy.attempts():
            try:
                records = self.store.query(TASKS, [eq('id', task_id)], page=Page(1, 1))
            except RequestCancelled:
                logger.debug("Task lookup %s cancelled (attempt %s)", task_id, attempt)
                continue
            return self.to_entity(records[0]) if records else None
        return None

    def list_for_user(self, user_id: str, task_type: Optional[TaskType] = None) -> List[TaskEntity]:
        filters = [eq('user', user_id)]
        if task_type:
            filters.append(eq('type', task_type.value))

        for attempt in self.policy.attempts():
            try:
                records = self.store.query(TASKS, filters, sort='-created', page=Page(1, self.page_size))
            except RequestCancelled:
                logger.debug("Task listing for %s cancelled (attempt %s)", user_id, attempt)
                continue
            return [self.to_entity(r) for r in records]

        # Zastąpione żądanie: wiarygodna jest odpowiedź tego nowszego
        logger.warning("Task listing for user %s cancelled on every attempt", user_id)
        return []
