from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from threading import RLock
from typing import Any, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from .errors import NotFoundError, NotInitializedError, TodoStoreError, ValidationError
from .models import TodoEntity, TodoStatus
from .query import TodoQuery
from .schemas import TodoCreate, TodoRecord, TodoUpdate, to_validation_error
from .settings import Settings, get_settings
from .utils import Clock, IdGenerator, SequentialIdGenerator, local_now, utc_now, uuid4_id

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class Repository(ABC):
    """Abstract repository contract for todo storage backends."""

    @abstractmethod
    def insert(self, description: str, status: Optional[Union[TodoStatus, str]] = None) -> TodoRecord:
        """Create and return a new todo. Status defaults to NotDone."""

    @abstractmethod
    def fetch_all(self) -> List[TodoRecord]:
        """Return every stored todo in storage order."""

    @abstractmethod
    def fetch_by_query(self, query: Mapping[str, str]) -> List[TodoRecord]:
        """
        Return the todos matching a query mapping.
        - Filters: Id, Description (regex search), Status, CreatedAt/UpdatedAt with _lt/_gt variants
        - Ordering: Sort (asc/desc) together with SortBy (Id, CreatedAt, UpdatedAt, Description)
        """

    @abstractmethod
    def get(self, todo_id: str) -> TodoRecord:
        """Return a todo by id. Raise NotFoundError if absent."""

    @abstractmethod
    def update(self, todo_id: str, patch: Union[TodoUpdate, Mapping[str, Any]]) -> TodoRecord:
        """Apply the supplied fields of a patch and return the updated todo."""

    @abstractmethod
    def delete(self, todo_id: str) -> TodoRecord:
        """Remove a todo by id and return it as it was before removal."""


class InMemoryRepository(Repository):
    """
    In-memory repository keeping todos in insertion order.

    Args:
        id_generator: Callable returning a fresh id string for each insert.
        clock: Callable returning the current time. Defaults to utc_now.
        records: Initial contents. Pass None to start with uninitialized
            storage: reads then fail with NotInitializedError until the first
            insert initializes it.
    """

    def __init__(
        self,
        id_generator: IdGenerator,
        clock: Optional[Clock] = None,
        records: Optional[Iterable[Union[TodoRecord, Mapping[str, Any]]]] = (),
    ) -> None:
        self._lock = RLock()
        self._id_generator = id_generator
        self._clock = clock or utc_now
        self._items: Optional[List[TodoEntity]] = None
        if records is not None:
            self._items = []
            for record in records:
                self._items.append(self._seed_entity(record))

    def _seed_entity(self, record: Union[TodoRecord, Mapping[str, Any]]) -> TodoEntity:
        try:
            r = record if isinstance(record, TodoRecord) else TodoRecord.model_validate(record)
        except PydanticValidationError as exc:
            raise to_validation_error(exc) from exc
        if not r.description:
            raise ValidationError("description: must be a non-empty string", field="description")
        if (r.created_at.tzinfo is None) != (r.updated_at.tzinfo is None):
            raise ValidationError(
                "updated_at: must be timezone-aware exactly when created_at is", field="updated_at"
            )
        if r.updated_at < r.created_at:
            raise ValidationError("updated_at: must not be earlier than created_at", field="updated_at")
        if self._index_of(r.id) is not None:
            raise ValidationError(f"duplicate id {r.id!r} in initial records", field="id")
        entity: TodoEntity = {
            "id": r.id,
            "description": r.description,
            "status": r.status,
            "created_at": r.created_at,
            "updated_at": r.updated_at,
        }
        return entity

    def _index_of(self, todo_id: str) -> Optional[int]:
        for i, t in enumerate(self._items or ()):
            if t["id"] == todo_id:
                return i
        return None

    def _require_items(self) -> List[TodoEntity]:
        if self._items is None:
            raise NotInitializedError()
        return self._items

    @staticmethod
    def _to_record(entity: TodoEntity) -> TodoRecord:
        return TodoRecord(**entity)

    def insert(self, description: str, status: Optional[Union[TodoStatus, str]] = None) -> TodoRecord:
        try:
            data = TodoCreate(description=description, status=status)
        except PydanticValidationError as exc:
            err = to_validation_error(exc)
            logger.info("Rejected insert: %s", err.message)
            raise err from exc

        with self._lock:
            todo_id = self._id_generator()
            if self._index_of(todo_id) is not None:
                raise TodoStoreError(f"id generator returned an id already in use: {todo_id!r}", code="DUPLICATE_ID")
            # A single clock read keeps created_at == updated_at on insert
            now = self._clock()
            entity: TodoEntity = {
                "id": todo_id,
                "description": data.description,
                "status": data.status,
                "created_at": now,
                "updated_at": now,
            }
            if self._items is None:
                self._items = []
            self._items.append(entity)
        logger.debug("Inserted todo %s", todo_id)
        return self._to_record(entity)

    def fetch_all(self) -> List[TodoRecord]:
        with self._lock:
            return [self._to_record(t) for t in self._require_items()]

    def fetch_by_query(self, query: Mapping[str, str]) -> List[TodoRecord]:
        with self._lock:
            items = self._require_items()
            try:
                compiled = TodoQuery.parse(query)
            except ValidationError as err:
                logger.info("Rejected query %r: %s", dict(query), err.message)
                raise
            return [self._to_record(t) for t in compiled.apply(items)]

    def get(self, todo_id: str) -> TodoRecord:
        with self._lock:
            i = self._index_of(todo_id)
            if i is None:
                raise NotFoundError(todo_id)
            return self._to_record(self._items[i])  # type: ignore[index]

    def update(self, todo_id: str, patch: Union[TodoUpdate, Mapping[str, Any]]) -> TodoRecord:
        if isinstance(patch, TodoUpdate):
            data = patch
        else:
            try:
                data = TodoUpdate.model_validate(patch)
            except PydanticValidationError as exc:
                err = to_validation_error(exc)
                logger.info("Rejected update of todo %s: %s", todo_id, err.message)
                raise err from exc

        with self._lock:
            i = self._index_of(todo_id)
            if i is None:
                raise NotFoundError(todo_id)
            assert self._items is not None

            # Update only provided fields
            updated = self._items[i].copy()
            if data.description:
                updated["description"] = data.description
            if data.status is not None:
                updated["status"] = data.status
            # updated_at never moves backwards, even if the clock does
            updated["updated_at"] = max(self._clock(), updated["updated_at"])

            self._items[i] = updated
        logger.debug("Updated todo %s", todo_id)
        return self._to_record(updated)

    def delete(self, todo_id: str) -> TodoRecord:
        with self._lock:
            i = self._index_of(todo_id)
            if i is None:
                raise NotFoundError(todo_id)
            assert self._items is not None
            removed = self._items.pop(i)
        logger.debug("Deleted todo %s", todo_id)
        return self._to_record(removed)


# PUBLIC_INTERFACE
def get_repository(settings: Optional[Settings] = None) -> Repository:
    """
    Factory to return an in-memory repository configured from settings.
    - id_strategy: 'uuid4' (random UUIDs) or 'sequential' ("1", "2", ...)
    - clock: 'utc' (aware UTC timestamps) or 'local' (naive local timestamps)
    """
    settings = settings or get_settings()
    id_generator: IdGenerator = SequentialIdGenerator() if settings.id_strategy == "sequential" else uuid4_id
    clock: Clock = local_now if settings.clock == "local" else utc_now
    return InMemoryRepository(id_generator=id_generator, clock=clock)
