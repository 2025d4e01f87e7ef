# apps/daily_logs/domain/services/reconciliation.py
import logging
from typing import Optional, Sequence, Set

from apps.core.domain.dates import DateLike, day_key
from apps.core.domain.errors import StoreError
from apps.core.ports.record_store import IRecordStore
from apps.daily_logs.domain.entities import ReconcileReport
from apps.daily_logs.domain.services.creation import DailyLogCreator
from apps.daily_logs.domain.services.existence import DailyLogProber
from apps.tasks.domain.entities import TaskEntity

logger = logging.getLogger(__name__)


class DailyLogReconciler:
    def __init__(self, store: IRecordStore, prober: Optional[DailyLogProber] = None,
                 creator: Optional[DailyLogCreator] = None):
        self.store = store
        self.prober = prober or DailyLogProber(store)
        self.creator = creator or DailyLogCreator(store, prober=self.prober)

    def reconcile(self, user_id: str, tasks: Sequence[TaskEntity], day: DateLike) -> ReconcileReport:
        """
        Dopilnowuje, żeby każde zadanie cykliczne miało log na dany dzień.

        1. Jeden odczyt wszystkich logów dnia (snapshot).
        2. Dla zadań bez logu: ponowne sprawdzenie + utworzenie,
           po jednym zadaniu naraz (nie równolegle).
        Błąd jednego zadania jest logowany i pomijany.
        """
        key = day_key(day)
        report = ReconcileReport(day=key)

        pending = []
        seen: Set[str] = set()
        for task in tasks:
            if not task.is_recurring or task.id in seen:
                continue
            seen.add(task.id)
            pending.append(task)

        if not pending:
            return report

        covered: Set[str] = set()
        try:
            snapshot = self.prober.snapshot(user_id, key)
        except StoreError as exc:
            logger.warning("Failed to fetch existing logs for %s, checking tasks one by one: %s", key, exc)
            snapshot = None

        if snapshot is None:
            report.snapshot_complete = False
        else:
            covered = {log.task_id for log in snapshot if log.day == key}

        for task in pending:
            if task.id in covered:
                report.existing.append(task.id)
                continue

            try:
                result = self.creator.ensure(user_id, task.id, key)
            except StoreError as exc:
                logger.error("Could not reconcile log for task %s on %s: %s", task.id, key, exc)
                report.failed[task.id] = exc.message
                continue

            report.record(task.id, result)

        if report.created or report.failed or report.inconclusive:
            logger.info(
                "Reconciled %s: %s created, %s recovered, %s inconclusive, %s failed",
                key, len(report.created), len(report.recovered), len(report.inconclusive), len(report.failed)
            )
        return report
