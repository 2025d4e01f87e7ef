# apps/daily_logs/domain/entities.py
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from apps.core.domain.dates import day_key

DAILY_LOGS = 'daily_logs'


@dataclass
class DailyLogEntity:
    id: str
    task_id: str
    user_id: str
    day: str  # klucz dnia YYYY-MM-DD, zawsze znormalizowany

    value_bool: Optional[bool] = None
    value_number: Optional[float] = None
    note: Optional[str] = None

    created: Optional[str] = None
    updated: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> 'DailyLogEntity':
        value_number = record.get('value_number')
        return cls(
            id=str(record['id']),
            task_id=str(record['task']),
            user_id=str(record['user']),
            day=day_key(record['date']),
            value_bool=record.get('value_bool'),
            value_number=float(value_number) if value_number is not None else None,
            note=record.get('note') or None,
            created=record.get('created'),
            updated=record.get('updated'),
        )

    @property
    def is_completed(self) -> bool:
        return self.value_bool is True


def new_log_fields(user_id: str, task_id: str, day: str) -> Dict[str, Any]:
    """Pola nowego logu: domyślnie niezaznaczony."""
    return {
        'task': task_id,
        'user': user_id,
        'date': day,
        'value_bool': False,
    }


@dataclass(frozen=True)
class ProbeResult:
    """
    Wynik sprawdzenia istnienia logu.

    conclusive=False oznacza "nie udało się ustalić" (same anulowania),
    a nie dowód, że logu nie ma.
    """
    log: Optional[DailyLogEntity] = None
    conclusive: bool = True

    @property
    def found(self) -> bool:
        return self.log is not None


class EnsureStatus(str, Enum):
    FOUND = 'found'
    CREATED = 'created'
    RACED_AND_RECOVERED = 'raced_and_recovered'
    INCONCLUSIVE = 'inconclusive'


@dataclass(frozen=True)
class EnsureResult:
    status: EnsureStatus
    log: Optional[DailyLogEntity] = None

    @property
    def resolved(self) -> bool:
        return self.log is not None


@dataclass
class DailyLogChanges:
    """Rzadka zmiana: wysyłamy tylko pola podane i różne od None."""
    value_bool: Optional[bool] = None
    value_number: Optional[float] = None
    note: Optional[str] = None

    def to_fields(self) -> Dict[str, Any]:
        fields = {}
        if self.value_bool is not None:
            fields['value_bool'] = self.value_bool
        if self.value_number is not None:
            fields['value_number'] = self.value_number
        # Pusta notatka traktowana jak brak zmiany
        if self.note is not None and self.note != '':
            fields['note'] = self.note
        return fields


@dataclass
class ReconcileReport:
    day: str
    existing: List[str] = field(default_factory=list)
    created: List[str] = field(default_factory=list)
    recovered: List[str] = field(default_factory=list)
    inconclusive: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)
    snapshot_complete: bool = True

    def record(self, task_id: str, result: EnsureResult) -> None:
        bucket = {
            EnsureStatus.FOUND: self.existing,
            EnsureStatus.CREATED: self.created,
            EnsureStatus.RACED_AND_RECOVERED: self.recovered,
            EnsureStatus.INCONCLUSIVE: self.inconclusive,
        }[result.status]
        bucket.append(task_id)

    @property
    def ok(self) -> bool:
        return not self.failed
