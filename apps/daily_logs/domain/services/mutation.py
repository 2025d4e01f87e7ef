# apps/daily_logs/domain/services/mutation.py
import logging

from apps.core.ports.record_store import IRecordStore
from apps.daily_logs.domain.entities import DAILY_LOGS, DailyLogChanges, DailyLogEntity

logger = logging.getLogger(__name__)


class DailyLogMutator:
    def __init__(self, store: IRecordStore):
        self.store = store

    def apply(self, log_id: str, changes: DailyLogChanges) -> DailyLogEntity:
        """
        Aktualizuje tylko podane pola istniejącego logu.
        Zakłada, że log istnieje: RecordNotFound i PermissionDenied lecą do wywołującego.
        """
        fields = changes.to_fields()
        record = self.store.update(DAILY_LOGS, log_id, fields)
        logger.debug("Updated daily log %s: %s", log_id, sorted(fields))
        return DailyLogEntity.from_record(record)
