# apps/core/ports/record_store.py
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

Record = Dict[str, Any]

OPERATORS = ('=', '!=', '>', '>=', '<', '<=')


@dataclass(frozen=True)
class Predicate:
    field: str
    op: str
    value: Any

    def __post_init__(self):
        if self.op not in OPERATORS:
            raise ValueError(f"Unsupported operator: {self.op}")


def eq(field: str, value: Any) -> Predicate:
    return Predicate(field, '=', value)


def gte(field: str, value: Any) -> Predicate:
    return Predicate(field, '>=', value)


def lt(field: str, value: Any) -> Predicate:
    return Predicate(field, '<', value)


@dataclass(frozen=True)
class Page:
    number: int = 1
    size: int = 500

    @property
    def offset(self) -> int:
        return (self.number - 1) * self.size


class IRecordStore(ABC):
    """
    Minimalny kontrakt zdalnego magazynu rekordów.

    Każde wywołanie to punkt zawieszenia: między wysłaniem żądania a
    odpowiedzią stan magazynu może się dowolnie zmienić.
    """

    @abstractmethod
    def query(self, collection: str, filters: Sequence[Predicate] = (),
              sort: str = '', page: Page = Page()) -> List[Record]:
        """
        Zwraca rekordy spełniające koniunkcję predykatów.
        Może rzucić RequestCancelled (żądanie zastąpione nowszym).
        """
        pass

    @abstractmethod
    def create(self, collection: str, fields: Record) -> Record:
        """Tworzy rekord. Przy naruszeniu unikalności rzuca ConstraintViolation."""
        pass

    @abstractmethod
    def update(self, collection: str, record_id: str, fields: Record) -> Record:
        """Aktualizuje tylko przekazane pola. Rzuca RecordNotFound / PermissionDenied."""
        pass

    @abstractmethod
    def delete(self, collection: str, record_id: str) -> bool:
        pass
