"""
Data access for the service layer.

Services never reach for a global client: they are handed a RecordStore
(one named collection with generic create/read/update/delete and filtered
queries). ModelStore backs a store with a Django model; tests hand in an
in-memory store instead.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, Protocol, TypeVar

from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction

logger = logging.getLogger(__name__)

T = TypeVar('T')


class StoreError(Exception):
    """The backing store rejected an operation."""


class RecordNotFound(StoreError):
    """No record matched the requested id."""


class RecordStore(Protocol):
    """Generic operations over one collection of records."""

    name: str

    def atomic(self): ...

    def create(self, **fields) -> Any: ...

    def bulk_create(self, rows: Iterable[Dict[str, Any]]) -> List[Any]: ...

    def get(self, pk) -> Any: ...

    def filter(self, order_by: Optional[Iterable[str]] = None, **lookups) -> List[Any]: ...

    def update(self, pk, **fields) -> Any: ...

    def delete(self, pk) -> None: ...

    def delete_where(self, **lookups) -> int: ...


class ModelStore:
    """RecordStore backed by a Django model's default manager."""

    def __init__(self, model, select_related=()):
        self.model = model
        self.name = model._meta.db_table
        self.select_related = tuple(select_related)

    def atomic(self):
        return transaction.atomic()

    def create(self, **fields):
        try:
            return self.model.objects.create(**fields)
        except ValidationError as e:
            raise ValueError(_validation_message(e)) from e
        except DatabaseError as e:
            logger.error("Insert into %s failed: %s", self.name, e)
            raise StoreError(str(e)) from e

    def bulk_create(self, rows):
        objs = [self.model(**row) for row in rows]
        if not objs:
            return []
        try:
            return self.model.objects.bulk_create(objs)
        except DatabaseError as e:
            logger.error("Bulk insert of %d rows into %s failed: %s", len(objs), self.name, e)
            raise StoreError(str(e)) from e

    def get(self, pk):
        try:
            return self._queryset().get(pk=pk)
        except self.model.DoesNotExist:
            raise RecordNotFound(f"{self.name} record {pk} does not exist")

    def filter(self, order_by=None, **lookups):
        queryset = self._queryset().filter(**lookups)
        if order_by:
            queryset = queryset.order_by(*order_by)
        return list(queryset)

    def update(self, pk, **fields):
        """Write the given fields through `save()`, so `auto_now` and model validation run."""
        obj = self.get(pk)
        for field_name, value in fields.items():
            setattr(obj, field_name, value)

        update_fields = list(fields)
        if self._has_field('updated_at'):
            update_fields.append('updated_at')
        try:
            obj.save(update_fields=update_fields)
        except ValidationError as e:
            raise ValueError(_validation_message(e)) from e
        except DatabaseError as e:
            logger.error("Update of %s record %s failed: %s", self.name, pk, e)
            raise StoreError(str(e)) from e
        return obj

    def delete(self, pk):
        deleted, _ = self.model.objects.filter(pk=pk).delete()
        if not deleted:
            raise RecordNotFound(f"{self.name} record {pk} does not exist")

    def delete_where(self, **lookups):
        deleted, _ = self.model.objects.filter(**lookups).delete()
        return deleted

    def _queryset(self):
        queryset = self.model.objects.all()
        if self.select_related:
            queryset = queryset.select_related(*self.select_related)
        return queryset

    def _has_field(self, name):
        return any(f.name == name for f in self.model._meta.concrete_fields)


def _validation_message(error: ValidationError) -> str:
    return '; '.join(error.messages)


@dataclass
class OptimisticResult(Generic[T]):
    """Outcome of an optimistic update: the state to show and whether it stuck."""
    state: T
    committed: bool


def apply_optimistic(
    local_state: T,
    commit: Callable[[T], Optional[T]],
    refresh: Callable[[], T],
) -> OptimisticResult[T]:
    """
    Two-phase update: take the locally computed state, push it to the store,
    and fall back to a fresh read if the store refuses it.

    Args:
        local_state: State after applying the change locally
        commit: Writes local_state to the store; may return the state as stored
        refresh: Reads the authoritative state back from the store

    Returns:
        OptimisticResult with the committed state on success, refreshed state otherwise
    """
    try:
        stored_state = commit(local_state)
    except StoreError as e:
        logger.warning("Optimistic update rolled back: %s", e)
        return OptimisticResult(state=refresh(), committed=False)
    return OptimisticResult(
        state=local_state if stored_state is None else stored_state,
        committed=True
    )
