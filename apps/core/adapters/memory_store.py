# apps/core/adapters/memory_store.py
import threading
import uuid
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from dateutil.parser import isoparse

from apps.core.domain.errors import ConstraintViolation, RecordNotFound, RequestCancelled
from apps.core.ports.record_store import IRecordStore, Page, Predicate, Record

DEFAULT_UNIQUE_TOGETHER = {
    'daily_logs': [('task', 'user', 'date')],
}

_COMPARATORS: Dict[str, Callable[[Any, Any], bool]] = {
    '=': lambda a, b: a == b,
    '!=': lambda a, b: a != b,
    '>': lambda a, b: a > b,
    '>=': lambda a, b: a >= b,
    '<': lambda a, b: a < b,
    '<=': lambda a, b: a <= b,
}


def _timestamp(moment: Optional[datetime] = None) -> str:
    moment = moment or datetime.now(timezone.utc)
    return moment.strftime('%Y-%m-%d %H:%M:%S.') + f"{moment.microsecond // 1000:03d}Z"


def _echo_datetime(value: Any) -> Any:
    """Zapisuje datę tak jak robi to hostowany backend: zawsze z czasem, w UTC."""
    if not isinstance(value, str) or not value:
        return value
    parsed = isoparse(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return _timestamp(parsed.astimezone(timezone.utc))


@dataclass
class _Fault:
    operation: str
    error: Exception
    remaining: int
    when: Optional[Callable[[str, Any], bool]] = None


class InMemoryRecordStore(IRecordStore):
    """
    Magazyn w pamięci (bezpieczny wątkowo) do testów i lokalnego uruchamiania.

    Wymusza ograniczenia unikalności jak prawdziwy backend, a dodatkowo
    pozwala zasymulować anulowanie żądań, błędy i opóźnioną widoczność zapisów.
    """

    def __init__(self, unique_together: Optional[Dict[str, List[Tuple[str, ...]]]] = None,
                 datetime_fields: Sequence[str] = ('date',)):
        self.unique_together = DEFAULT_UNIQUE_TOGETHER if unique_together is None else unique_together
        self.datetime_fields = set(datetime_fields)
        self.calls: Counter = Counter()
        self.before_create: Optional[Callable[[str, Record], None]] = None

        self._lock = threading.RLock()
        self._collections: Dict[str, Dict[str, Record]] = {}
        self._hidden: Dict[Tuple[str, str], int] = {}
        self._faults: List[_Fault] = []
        self._lag = 0

    # --- Symulacja awarii ---

    def fail(self, operation: str, error: Exception, times: int = 1,
             when: Optional[Callable[[str, Any], bool]] = None) -> None:
        """Następne `times` wywołań `operation` (pasujących do `when`) rzuci `error`."""
        with self._lock:
            self._faults.append(_Fault(operation, error, times, when))

    def cancel_queries(self, times: int = 1, when: Optional[Callable[[str, Any], bool]] = None) -> None:
        self.fail('query', RequestCancelled("request was autocancelled"), times=times, when=when)

    def hide_new_records(self, reads: int) -> None:
        """Nowo utworzone rekordy będą niewidoczne dla kolejnych `reads` zapytań."""
        with self._lock:
            self._lag = reads

    def _raise_fault(self, operation: str, collection: str, payload: Any) -> None:
        for fault in self._faults:
            if fault.operation != operation or fault.remaining <= 0:
                continue
            if fault.when and not fault.when(collection, payload):
                continue
            fault.remaining -= 1
            raise fault.error

    # --- Pomocnicze ---

    def insert(self, collection: str, fields: Record) -> Record:
        """Zasiewa rekord z pominięciem symulowanych awarii i liczników."""
        with self._lock:
            return self._insert(collection, fields)

    def records(self, collection: str) -> List[Record]:
        with self._lock:
            return [dict(r) for r in self._collections.get(collection, {}).values()]

    def _normalize(self, fields: Record) -> Record:
        data = dict(fields)
        for name in self.datetime_fields:
            if name in data:
                data[name] = _echo_datetime(data[name])
        return data

    def _check_unique(self, collection: str, candidate: Record, exclude_id: Optional[str] = None) -> None:
        for group in self.unique_together.get(collection, []):
            key = tuple(candidate.get(f) for f in group)
            for record in self._collections.get(collection, {}).values():
                if record['id'] == exclude_id:
                    continue
                if tuple(record.get(f) for f in group) == key:
                    # Backend zgłasza błąd przy ostatnim polu indeksu
                    raise ConstraintViolation(group[-1], "Value must be unique.", status=400)

    def _insert(self, collection: str, fields: Record) -> Record:
        data = self._normalize(fields)
        self._check_unique(collection, data)

        now = _timestamp()
        record = {'created': now, 'updated': now, **data}
        # Backend przyjmuje własne id, w przeciwnym razie generuje 15-znakowe
        record['id'] = data.get('id') or uuid.uuid4().hex[:15]
        self._collections.setdefault(collection, {})[record['id']] = record
        return dict(record)

    def _matches(self, record: Record, filters: Sequence[Predicate]) -> bool:
        for predicate in filters:
            actual = record.get(predicate.field)
            if actual is None and predicate.op not in ('=', '!='):
                return False
            try:
                if not _COMPARATORS[predicate.op](actual, predicate.value):
                    return False
            except TypeError:
                return False
        return True

    @staticmethod
    def _sorted(records: List[Record], sort: str) -> List[Record]:
        keys = [k.strip() for k in sort.split(',') if k.strip()]
        # Stabilne sortowanie: od ostatniego klucza do pierwszego
        for key in reversed(keys):
            reverse = key.startswith('-')
            name = key.lstrip('-+')
            records.sort(key=lambda r: (r.get(name) is not None, r.get(name)), reverse=reverse)
        return records

    # --- IRecordStore ---

    def query(self, collection: str, filters: Sequence[Predicate] = (),
              sort: str = '', page: Page = Page()) -> List[Record]:
        with self._lock:
            self.calls['query'] += 1
            self._raise_fault('query', collection, filters)

            visible = []
            for record in self._collections.get(collection, {}).values():
                if self._hidden.get((collection, record['id']), 0) > 0:
                    continue
                if self._matches(record, filters):
                    visible.append(dict(record))

            for key in list(self._hidden):
                self._hidden[key] -= 1
                if self._hidden[key] <= 0:
                    del self._hidden[key]

        visible = self._sorted(visible, sort)
        return visible[page.offset:page.offset + page.size]

    def create(self, collection: str, fields: Record) -> Record:
        if self.before_create:
            self.before_create(collection, fields)

        with self._lock:
            self.calls['create'] += 1
            self._raise_fault('create', collection, fields)
            record = self._insert(collection, fields)
            if self._lag:
                self._hidden[(collection, record['id'])] = self._lag
            return record

    def update(self, collection: str, record_id: str, fields: Record) -> Record:
        with self._lock:
            self.calls['update'] += 1
            self._raise_fault('update', collection, fields)

            existing = self._collections.get(collection, {}).get(record_id)
            if existing is None:
                raise RecordNotFound(f"Record {record_id} not found in {collection}", status=404)

            candidate = {**existing, **self._normalize(fields)}
            self._check_unique(collection, candidate, exclude_id=record_id)
            candidate['updated'] = _timestamp()
            self._collections[collection][record_id] = candidate
            return dict(candidate)

    def delete(self, collection: str, record_id: str) -> bool:
        with self._lock:
            self.calls['delete'] += 1
            self._raise_fault('delete', collection, record_id)

            if self._collections.get(collection, {}).pop(record_id, None) is None:
                raise RecordNotFound(f"Record {record_id} not found in {collection}", status=404)
            return True
