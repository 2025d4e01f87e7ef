# apps/core/adapters/factory.py
from typing import Any, Optional

from django.conf import settings

from apps.core.ports.record_store import IRecordStore

BACKENDS = ('memory', 'orm', 'pocketbase')


def build_record_store(backend: Optional[str] = None, acting_user_id: Optional[Any] = None) -> IRecordStore:
    """Składa magazyn rekordów wg settings.TRACKER_STORE_BACKEND (Manual Dependency Injection)."""
    backend = backend or settings.TRACKER_STORE_BACKEND

    if backend == 'memory':
        from apps.core.adapters.memory_store import InMemoryRecordStore
        return InMemoryRecordStore()

    if backend == 'orm':
        from apps.core.adapters.orm_store import DjangoRecordStore
        return DjangoRecordStore(acting_user_id=acting_user_id)

    if backend == 'pocketbase':
        from apps.core.adapters.pocketbase_store import PocketBaseRecordStore
        return PocketBaseRecordStore.from_settings()

    raise ValueError(f"Unknown record store backend: {backend} (expected one of {', '.join(BACKENDS)})")
