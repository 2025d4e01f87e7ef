# apps/daily_logs/domain/services/creation.py
import logging
from typing import Optional

from apps.core.domain.dates import DateLike, day_key
from apps.core.domain.errors import ConstraintViolation, RequestCancelled, StoreError
from apps.core.domain.retry import RetryPolicy
from apps.core.ports.record_store import IRecordStore
from apps.daily_logs.domain.entities import (
    DAILY_LOGS,
    DailyLogEntity,
    EnsureResult,
    EnsureStatus,
    new_log_fields,
)
from apps.daily_logs.domain.services.existence import DailyLogProber

logger = logging.getLogger(__name__)


class DailyLogCreator:
    """
    Zapewnia istnienie logu dla (user, task, dzień) bez tworzenia duplikatów.

    O unikalności decyduje ograniczenie w magazynie, nie ten kod:
    wstępne sprawdzenie tylko oszczędza zbędnych naruszeń. Po naruszeniu
    szukamy rekordu zwycięzcy; ponawiamy wyłącznie po to, by go odczytać.
    """

    def __init__(self, store: IRecordStore, prober: Optional[DailyLogProber] = None,
                 race_policy: Optional[RetryPolicy] = None):
        self.store = store
        self.prober = prober or DailyLogProber(store)
        self.race_policy = race_policy or RetryPolicy(max_attempts=3, base_delay=0.3, delay_first=True)

    def ensure(self, user_id: str, task_id: str, day: DateLike) -> EnsureResult:
        key = day_key(day)

        # 1. Sprawdź czy już nie istnieje
        existing = self.prober.probe(user_id, task_id, key)
        if existing.found:
            return EnsureResult(EnsureStatus.FOUND, existing.log)

        # 2. Brak (lub niepewne) -> spróbuj utworzyć; magazyn rozstrzygnie
        return self.create(user_id, task_id, key)

    def create(self, user_id: str, task_id: str, day: DateLike) -> EnsureResult:
        key = day_key(day)
        try:
            record = self.store.create(DAILY_LOGS, new_log_fields(user_id, task_id, key))
        except ConstraintViolation as exc:
            logger.info("Log for task %s on %s already exists (%s), recovering winner", task_id, key, exc.field)
            return self._recover(user_id, task_id, key)

        log = DailyLogEntity.from_record(record)
        logger.info("Created daily log %s for task %s on %s", log.id, task_id, key)
        return EnsureResult(EnsureStatus.CREATED, log)

    def _recover(self, user_id: str, task_id: str, key: str) -> EnsureResult:
        # 3a. Zwycięski rekord może nie być jeszcze widoczny -> kilka prób z odstępem
        for attempt in self.race_policy.attempts():
            try:
                result = self.prober.probe(user_id, task_id, key)
            except StoreError as exc:
                logger.warning("Re-probe %s after race failed: %s", attempt, exc)
                continue
            if result.found:
                return EnsureResult(EnsureStatus.RACED_AND_RECOVERED, result.log)

        # 3b. Ostatnia deska ratunku: pełna lista i liniowe szukanie
        try:
            logs = self.prober.all_logs(user_id)
        except (StoreError, RequestCancelled) as exc:
            logger.warning("Log for task %s on %s exists but could not be fetched: %s", task_id, key, exc)
            return EnsureResult(EnsureStatus.INCONCLUSIVE)

        for log in logs:
            if log.task_id == str(task_id) and log.day == key:
                return EnsureResult(EnsureStatus.RACED_AND_RECOVERED, log)

        logger.warning("Log for task %s on %s exists but is not visible yet; caller should reload", task_id, key)
        return EnsureResult(EnsureStatus.INCONCLUSIVE)
