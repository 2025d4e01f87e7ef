# apps/core/adapters/orm_store.py
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence

from django.apps import apps as django_apps
from django.core.exceptions import FieldDoesNotExist, ValidationError
from django.db import DatabaseError, IntegrityError, models, transaction

from apps.core.domain.dates import day_key
from apps.core.domain.errors import (
    ConstraintViolation,
    InvalidQuery,
    PermissionDenied,
    RecordNotFound,
    StoreError,
    TransientStoreError,
)
from apps.core.ports.record_store import IRecordStore, Page, Predicate, Record


class DjangoRecordStore(IRecordStore):
    """
    Magazyn rekordów na ORM Django (samodzielnie hostowany wariant backendu).

    Kolekcje mapujemy na modele, a rekordy to zwykłe słowniki o tym samym
    kształcie co w hostowanym backendzie (id i relacje jako stringi).
    Jeśli podano acting_user_id, działa reguła "właściciel widzi i zmienia tylko swoje".
    """

    COLLECTIONS = {
        'tasks': 'tasks.Task',
        'daily_logs': 'daily_logs.DailyLog',
        'goal_progress': 'goals.GoalProgress',
    }
    TIMESTAMP_FIELDS = {'created': 'created_at', 'updated': 'updated_at'}
    LOOKUPS = {'=': 'exact', '>': 'gt', '>=': 'gte', '<': 'lt', '<=': 'lte'}

    def __init__(self, acting_user_id: Optional[Any] = None):
        self.acting_user_id = str(acting_user_id) if acting_user_id is not None else None

    # --- Mapowanie ---

    def _model(self, collection: str):
        try:
            label = self.COLLECTIONS[collection]
        except KeyError:
            raise InvalidQuery(f"Unknown collection: {collection}", status=404)
        return django_apps.get_model(label)

    def _field(self, model, name: str) -> models.Field:
        name = self.TIMESTAMP_FIELDS.get(name, name)
        try:
            return model._meta.get_field(name)
        except FieldDoesNotExist:
            raise InvalidQuery(f"Unknown field '{name}' in {model._meta.label}", status=400)

    @staticmethod
    def _coerce(field: models.Field, value: Any) -> Any:
        if value is None:
            return None
        # DateTimeField dziedziczy po DateField - tylko "czyste" daty skracamy do klucza dnia
        if isinstance(field, models.DateField) and not isinstance(field, models.DateTimeField):
            return day_key(value)
        return value

    def _assign(self, model, fields: Record) -> Dict[str, Any]:
        data = {}
        for name, value in fields.items():
            if name in ('id', 'created', 'updated'):
                continue
            field = self._field(model, name)
            try:
                data[field.attname] = self._coerce(field, value)
            except ValueError as exc:
                raise StoreError(f"{name}: {exc}", status=400) from exc
        return data

    def to_record(self, obj: models.Model) -> Record:
        """Konwertuje Model Django -> słownik rekordu."""
        reverse_timestamps = {v: k for k, v in self.TIMESTAMP_FIELDS.items()}
        record = {}
        for field in obj._meta.concrete_fields:
            value = getattr(obj, field.attname)
            if value is not None and (field.is_relation or field.primary_key):
                value = str(value)
            elif isinstance(value, (date, datetime)):
                value = value.isoformat()
            record[reverse_timestamps.get(field.name, field.name)] = value
        return record

    # --- Reguły dostępu ---

    @staticmethod
    def _is_owned(model) -> bool:
        return any(f.name == 'user' for f in model._meta.concrete_fields)

    def _check_owner(self, model, owner_id: Any) -> None:
        if self.acting_user_id is None or not self._is_owned(model):
            return
        if str(owner_id) != self.acting_user_id:
            raise PermissionDenied(f"{model._meta.label} belongs to another user", status=403)

    # --- Błędy integralności ---

    @staticmethod
    def _is_unique_violation(exc: IntegrityError) -> bool:
        text = str(exc).lower()
        return 'unique' in text or 'duplicate' in text

    @staticmethod
    def _unique_field(model) -> str:
        groups = model._meta.unique_together
        if groups:
            return groups[0][-1]
        return 'id'

    def _save(self, model, action):
        try:
            with transaction.atomic():
                return action()
        except IntegrityError as exc:
            if self._is_unique_violation(exc):
                raise ConstraintViolation(self._unique_field(model), str(exc), status=400) from exc
            raise StoreError(f"Failed to save record: {exc}", status=400) from exc
        except (ValueError, ValidationError) as exc:
            raise StoreError(f"Failed to save record: {exc}", status=400) from exc
        except DatabaseError as exc:
            raise TransientStoreError(str(exc)) from exc

    def _get(self, model, record_id: str) -> models.Model:
        try:
            obj = model.objects.get(pk=record_id)
        except (model.DoesNotExist, ValueError, ValidationError):
            raise RecordNotFound(f"Record {record_id} not found in {model._meta.label}", status=404)
        self._check_owner(model, getattr(obj, 'user_id', None))
        return obj

    # --- IRecordStore ---

    def query(self, collection: str, filters: Sequence[Predicate] = (),
              sort: str = '', page: Page = Page()) -> List[Record]:
        model = self._model(collection)
        qs = model.objects.all()

        if self.acting_user_id is not None and self._is_owned(model):
            # Reguła listowania filtruje po cichu, tak jak w hostowanym backendzie
            qs = qs.filter(user_id=self.acting_user_id)

        try:
            for predicate in filters:
                field = self._field(model, predicate.field)
                value = self._coerce(field, predicate.value)
                if predicate.op == '!=':
                    qs = qs.exclude(**{field.attname: value})
                else:
                    qs = qs.filter(**{f"{field.attname}__{self.LOOKUPS[predicate.op]}": value})

            ordering = []
            for key in (k.strip() for k in sort.split(',')):
                if not key:
                    continue
                prefix = '-' if key.startswith('-') else ''
                ordering.append(prefix + self._field(model, key.lstrip('-+')).attname)
            if ordering:
                qs = qs.order_by(*ordering)

            return [self.to_record(obj) for obj in qs[page.offset:page.offset + page.size]]
        except (ValueError, ValidationError) as exc:
            raise InvalidQuery(f"Invalid filter: {exc}", status=400) from exc
        except DatabaseError as exc:
            raise TransientStoreError(str(exc)) from exc

    def create(self, collection: str, fields: Record) -> Record:
        model = self._model(collection)
        data = self._assign(model, fields)
        self._check_owner(model, data.get('user_id'))

        obj = self._save(model, lambda: model.objects.create(**data))
        return self.to_record(obj)

    def update(self, collection: str, record_id: str, fields: Record) -> Record:
        model = self._model(collection)
        obj = self._get(model, record_id)

        for attname, value in self._assign(model, fields).items():
            setattr(obj, attname, value)

        self._save(model, obj.save)
        obj.refresh_from_db()
        return self.to_record(obj)

    def delete(self, collection: str, record_id: str) -> bool:
        model = self._model(collection)
        obj = self._get(model, record_id)
        self._save(model, obj.delete)
        return True
