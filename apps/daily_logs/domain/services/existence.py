# apps/daily_logs/domain/services/existence.py
import logging
from typing import List, Optional

from apps.core.domain.dates import DateLike, day_key, next_day_key
from apps.core.domain.errors import RequestCancelled
from apps.core.domain.retry import RetryPolicy
from apps.core.ports.record_store import IRecordStore, Page, Predicate, eq, gte, lt
from apps.daily_logs.domain.entities import DAILY_LOGS, DailyLogEntity, ProbeResult

logger = logging.getLogger(__name__)


class DailyLogProber:
    """
    Odpowiada na pytanie "czy istnieje log dla (user, task, dzień)?".

    Zapytanie idzie po zakresie [dzień, dzień+1), bo magazyn trzyma daty
    z częścią czasu, a wynik jest dodatkowo filtrowany w pamięci po
    znormalizowanym kluczu dnia.
    Anulowanie = ponów; błędy uprawnień i złego zapytania lecą wyżej.
    """

    def __init__(self, store: IRecordStore, policy: Optional[RetryPolicy] = None, page_size: int = 500):
        self.store = store
        self.policy = policy or RetryPolicy()
        self.page_size = page_size

    @staticmethod
    def _day_range(key: str) -> List[Predicate]:
        return [gte('date', key), lt('date', next_day_key(key))]

    def _query_with_retry(self, filters: List[Predicate], page: Page, sort: str = '') -> Optional[list]:
        """Zwraca rekordy albo None, gdy każda próba została anulowana."""
        for attempt in self.policy.attempts():
            try:
                return self.store.query(DAILY_LOGS, filters, sort=sort, page=page)
            except RequestCancelled:
                logger.debug("Daily log query cancelled (attempt %s/%s)", attempt, self.policy.max_attempts)
        return None

    def probe(self, user_id: str, task_id: str, day: DateLike) -> ProbeResult:
        key = day_key(day)
        filters = [eq('user', user_id), eq('task', task_id)] + self._day_range(key)

        records = self._query_with_retry(filters, Page(1, 10))
        if records is None:
            logger.warning("Probe for task %s on %s inconclusive after %s cancelled attempts",
                           task_id, key, self.policy.max_attempts)
            return ProbeResult(log=None, conclusive=False)

        for record in records:
            log = DailyLogEntity.from_record(record)
            if log.day == key and log.task_id == str(task_id):
                return ProbeResult(log=log)
        return ProbeResult(log=None)

    def snapshot(self, user_id: str, day: DateLike) -> Optional[List[DailyLogEntity]]:
        """
        Wszystkie logi użytkownika z danego dnia (jedno zapytanie).
        None, jeśli każda próba została anulowana.
        """
        key = day_key(day)
        filters = [eq('user', user_id)] + self._day_range(key)

        records = self._query_with_retry(filters, Page(1, self.page_size), sort='-date')
        if records is None:
            return None

        logs = [DailyLogEntity.from_record(r) for r in records]
        return [log for log in logs if log.day == key]

    def all_logs(self, user_id: str) -> List[DailyLogEntity]:
        """Pełna lista logów użytkownika; anulowanie propaguje jako RequestCancelled."""
        records = self._query_with_retry([eq('user', user_id)], Page(1, self.page_size), sort='-date')
        if records is None:
            raise RequestCancelled(f"Listing daily logs for {user_id} was cancelled")
        return [DailyLogEntity.from_record(r) for r in records]
