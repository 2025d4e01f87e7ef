# apps/core/domain/errors.py
"""
Typowane błędy magazynu rekordów.

Adaptery tłumaczą na nie surowe błędy transportu / bazy, dzięki czemu
logika uzgadniania nie zna kształtu odpowiedzi konkretnego backendu.
"""
from typing import Optional


class RequestCancelled(Exception):
    """
    Żądanie zostało zastąpione nowszym, identycznym żądaniem.

    To nie jest błąd magazynu (celowo nie dziedziczy po StoreError):
    wynik trzeba zignorować i ewentualnie ponowić zapytanie.
    """


class StoreError(Exception):
    """Bazowy błąd magazynu rekordów."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


class InvalidQuery(StoreError):
    """Niepoprawny filtr lub nieistniejące pole w zapytaniu."""


class ConstraintViolation(StoreError):
    """Naruszenie ograniczenia unikalności (ktoś inny wygrał wyścig)."""

    def __init__(self, field: str, reason: str = "value must be unique", status: Optional[int] = None):
        super().__init__(f"{field}: {reason}", status=status)
        self.field = field
        self.reason = reason


class RecordNotFound(StoreError):
    """Rekord, który miał istnieć, nie istnieje."""


class PermissionDenied(StoreError):
    """Brak uprawnień do rekordu lub kolekcji."""

    HINT = "Access denied. Please check the collection access rules."

    def __init__(self, message: str = "", status: Optional[int] = None):
        if message:
            message = f"{self.HINT} ({message})"
        else:
            message = self.HINT
        super().__init__(message, status=status)


class TransientStoreError(StoreError):
    """Każdy inny błąd sieci lub serwera."""
