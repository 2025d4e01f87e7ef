# apps/daily_logs/application/use_cases.py
import logging
from dataclasses import dataclass
from typing import List, Optional

from apps.core.domain.dates import day_key
from apps.core.domain.errors import StoreError
from apps.core.domain.retry import RetryPolicy
from apps.daily_logs.domain.entities import DailyLogChanges, DailyLogEntity
from apps.daily_logs.domain.services import (
    DailyLogCreator,
    DailyLogMutator,
    DailyLogProber,
    DailyLogReconciler,
)
from apps.tasks.domain.entities import TaskEntity, TaskType
from apps.tasks.ports.repositories import ITaskRepository

logger = logging.getLogger(__name__)


class DailyLogUnavailable(Exception):
    """Log istnieje (albo powinien), ale nie udało się go pobrać nawet po przeładowaniu."""


@dataclass
class DailyBoardRow:
    task: TaskEntity
    log: Optional[DailyLogEntity] = None


@dataclass
class LoadDailyBoardInput:
    user_id: str
    day: str


class LoadDailyBoardUseCase:
    """Zadania cykliczne użytkownika + ich logi na dany dzień (brakujące logi są tworzone)."""

    def __init__(self, repository: ITaskRepository, reconciler: DailyLogReconciler):
        self.repository = repository
        self.reconciler = reconciler

    def execute(self, input_dto: LoadDailyBoardInput) -> List[DailyBoardRow]:
        key = day_key(input_dto.day)
        tasks = self.repository.list_for_user(input_dto.user_id, TaskType.RECURRING)

        self.reconciler.reconcile(input_dto.user_id, tasks, key)

        logs = self.reconciler.prober.snapshot(input_dto.user_id, key) or []
        by_task = {log.task_id: log for log in logs}
        return [DailyBoardRow(task=t, log=by_task.get(t.id)) for t in tasks]


@dataclass
class ToggleDailyLogInput:
    user_id: str
    task_id: str
    day: str
    number_value: Optional[float] = None  # tylko dla zadań mierzalnych


class ToggleDailyLogUseCase:
    def __init__(self, creator: DailyLogCreator, mutator: DailyLogMutator,
                 reload_policy: Optional[RetryPolicy] = None):
        self.creator = creator
        self.mutator = mutator
        self.reload_policy = reload_policy or RetryPolicy(max_attempts=2, base_delay=0.5, delay_first=True)

    @property
    def prober(self) -> DailyLogProber:
        return self.creator.prober

    def _reload(self, user_id: str, task_id: str, key: str) -> Optional[DailyLogEntity]:
        """Świeże przeładowanie dnia: log mógł powstać w innym żądaniu."""
        for attempt in self.reload_policy.attempts():
            for log in self.prober.snapshot(user_id, key) or []:
                if log.task_id == str(task_id):
                    return log
            logger.debug("Reload %s did not return log for task %s on %s", attempt, task_id, key)
        return None

    def _obtain_log(self, user_id: str, task_id: str, key: str) -> DailyLogEntity:
        try:
            result = self.creator.ensure(user_id, task_id, key)
        except StoreError as exc:
            logger.warning("Ensuring log for task %s on %s failed, reloading day: %s", task_id, key, exc)
            log = self._reload(user_id, task_id, key)
            if log is None:
                raise
            return log

        if result.resolved:
            return result.log

        # Rekord istnieje, ale nie dało się go odczytać
        log = self._reload(user_id, task_id, key)
        if log is None:
            raise DailyLogUnavailable("Failed to create log. Please refresh the page and try again.")
        return log

    def execute(self, input_dto: ToggleDailyLogInput) -> DailyLogEntity:
        key = day_key(input_dto.day)
        log = self._obtain_log(input_dto.user_id, input_dto.task_id, key)

        new_value = not log.is_completed
        changes = DailyLogChanges(value_bool=new_value)

        # Przy zaznaczaniu zapisujemy wartość; przy odznaczaniu value_number zostaje jak było
        if new_value and input_dto.number_value is not None:
            changes.value_number = float(input_dto.number_value)

        return self.mutator.apply(log.id, changes)
