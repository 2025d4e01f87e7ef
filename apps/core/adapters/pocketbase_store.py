# apps/core/adapters/pocketbase_store.py
import itertools
import json
import logging
import threading
from typing import Any, Dict, List, Optional, Sequence

import httpx

from apps.core.domain.errors import (
    ConstraintViolation,
    InvalidQuery,
    PermissionDenied,
    RecordNotFound,
    RequestCancelled,
    StoreError,
    TransientStoreError,
)
from apps.core.ports.record_store import IRecordStore, Page, Predicate, Record

logger = logging.getLogger(__name__)

UNIQUE_CODE = 'validation_not_unique'


def _literal(value: Any) -> str:
    if value is None:
        return 'null'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (int, float)):
        return repr(value)
    text = str(value).replace('\\', '\\\\').replace('"', '\\"')
    return f'"{text}"'


def render_filter(filters: Sequence[Predicate]) -> str:
    """Predykaty -> składnia filtra backendu, np. `user = "u1" && date >= "2024-01-15"`."""
    return ' && '.join(f"{p.field} {p.op} {_literal(p.value)}" for p in filters)


def find_unique_violation(data: Dict[str, Any], message: str = '') -> Optional[ConstraintViolation]:
    """
    Szuka sygnału "not unique" w błędach pól.

    Ograniczenie obejmuje trzy pola (task, user, date), a backend może
    zgłosić je przy dowolnym z nich.
    """
    for field, detail in (data or {}).items():
        if not isinstance(detail, dict):
            continue
        code = str(detail.get('code', ''))
        text = str(detail.get('message', ''))
        lowered = text.lower()
        if code == UNIQUE_CODE or 'unique' in lowered or 'already exists' in lowered:
            return ConstraintViolation(field, text or code, status=400)

    lowered = (message or '').lower()
    if 'unique' in lowered or 'already exists' in lowered:
        return ConstraintViolation('*', message, status=400)
    return None


class PocketBaseRecordStore(IRecordStore):
    """
    Adapter HTTP do hostowanego backendu (PocketBase REST API).

    Zapytania z auto_cancel=True zachowują się jak w kliencie przeglądarkowym:
    jeśli w trakcie trwania zapytania wystartuje nowsze identyczne zapytanie,
    starsze kończy się RequestCancelled, a jego wynik jest odrzucany.
    """

    def __init__(self, base_url: str, token: str = '', timeout: float = 10.0,
                 auto_cancel: bool = True, client: Optional[httpx.Client] = None):
        self.base_url = base_url.rstrip('/')
        self.auto_cancel = auto_cancel

        headers = {'Accept': 'application/json'}
        if token:
            headers['Authorization'] = token

        if client is not None:
            client.headers.update(headers)
            self._client = client
        else:
            self._client = httpx.Client(
                base_url=self.base_url,
                headers=headers,
                timeout=httpx.Timeout(timeout),
            )
        self._generations: Dict[str, int] = {}
        self._generation_counter = itertools.count(1)
        self._generations_lock = threading.Lock()

    @classmethod
    def from_settings(cls) -> 'PocketBaseRecordStore':
        from django.conf import settings

        return cls(
            base_url=settings.POCKETBASE_URL,
            token=settings.POCKETBASE_TOKEN,
            timeout=settings.POCKETBASE_TIMEOUT,
        )

    def close(self) -> None:
        self._client.close()

    # --- Auto-anulowanie ---

    def _begin(self, key: str) -> int:
        with self._generations_lock:
            generation = next(self._generation_counter)
            self._generations[key] = generation
            return generation

    def _finish(self, key: str, generation: int) -> bool:
        """Zamyka zapytanie; True, jeśli w międzyczasie wystartowało nowsze identyczne."""
        with self._generations_lock:
            if self._generations.get(key) != generation:
                return True
            # Ostatnie zapytanie z tym kluczem: wpis nie jest już potrzebny
            del self._generations[key]
            return False

    # --- HTTP ---

    @staticmethod
    def _path(collection: str, record_id: Optional[str] = None) -> str:
        path = f"/api/collections/{collection}/records"
        return f"{path}/{record_id}" if record_id else path

    def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            return self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise TransientStoreError(f"{method} {path} failed: {exc}") from exc

    @staticmethod
    def _payload(response: httpx.Response) -> Dict[str, Any]:
        try:
            payload = response.json()
        except (json.JSONDecodeError, ValueError):
            return {}
        return payload if isinstance(payload, dict) else {}

    def _record(self, response: httpx.Response, operation: str) -> Record:
        payload = self._payload(response)
        if not payload.get('id'):
            raise TransientStoreError(
                f"Failed to {operation} record: unexpected response (HTTP {response.status_code})",
                status=response.status_code,
            )
        return payload

    @staticmethod
    def _describe(data: Dict[str, Any], message: str) -> str:
        field_errors = [f"{key}: {json.dumps(value)}" for key, value in (data or {}).items()
                        if isinstance(value, dict)]
        return ', '.join(field_errors) or message or 'Failed to create record.'

    def _raise_for_status(self, response: httpx.Response, operation: str) -> None:
        status = response.status_code
        if status < 400:
            return

        payload = self._payload(response)
        message = payload.get('message') or response.reason_phrase or f"HTTP {status}"
        data = payload.get('data') or {}

        if status == 400 and operation in ('create', 'update'):
            violation = find_unique_violation(data, message)
            if violation:
                raise violation
            raise StoreError(self._describe(data, message), status=status)
        if status == 400:
            raise InvalidQuery(f"Invalid filter syntax: {message}", status=status)
        if status in (401, 403):
            raise PermissionDenied(message, status=status)
        if status == 404:
            if operation == 'query':
                raise InvalidQuery(f"Unknown collection: {message}", status=status)
            raise RecordNotFound(message, status=status)
        raise TransientStoreError(f"Failed to {operation} record: {message}", status=status)

    # --- IRecordStore ---

    def query(self, collection: str, filters: Sequence[Predicate] = (),
              sort: str = '', page: Page = Page()) -> List[Record]:
        params = {'page': page.number, 'perPage': page.size}
        filter_text = render_filter(filters)
        if filter_text:
            params['filter'] = filter_text
        if sort:
            params['sort'] = sort

        key = f"{collection}?{filter_text}&{sort}"
        generation = self._begin(key)

        try:
            response = self._send('GET', self._path(collection), params=params)
        finally:
            superseded = self._finish(key, generation)

        if self.auto_cancel and superseded:
            logger.debug("Query on %s superseded by a newer identical request", collection)
            raise RequestCancelled(f"The request was autocancelled ({collection})")

        self._raise_for_status(response, 'query')
        items = self._payload(response).get('items')
        if not isinstance(items, list):
            raise TransientStoreError(
                f"Failed to query {collection}: unexpected response (HTTP {response.status_code})",
                status=response.status_code,
            )
        return items

    def create(self, collection: str, fields: Record) -> Record:
        response = self._send('POST', self._path(collection), json=fields)
        self._raise_for_status(response, 'create')
        return self._record(response, 'create')

    def update(self, collection: str, record_id: str, fields: Record) -> Record:
        response = self._send('PATCH', self._path(collection, record_id), json=fields)
        self._raise_for_status(response, 'update')
        return self._record(response, 'update')

    def delete(self, collection: str, record_id: str) -> bool:
        response = self._send('DELETE', self._path(collection, record_id))
        self._raise_for_status(response, 'delete')
        return True
