"""
In-memory todo store.

Exposes the repository contract, its in-memory implementation and the query
engine behind fetch_by_query, for convenience imports from the package root.
"""

from .errors import NotFoundError, NotInitializedError, TodoStoreError, ValidationError
from .models import TodoEntity, TodoStatus
from .query import QueryKey, SortDirection, SortField, TodoQuery
from .repositories import InMemoryRepository, Repository, get_repository
from .schemas import TodoCreate, TodoRecord, TodoUpdate
from .settings import Settings, configure_logging, get_settings
from .utils import SequentialIdGenerator, local_now, truncate_to_day, utc_now, uuid4_id

__all__ = [
    "InMemoryRepository",
    "NotFoundError",
    "NotInitializedError",
    "QueryKey",
    "Repository",
    "SequentialIdGenerator",
    "Settings",
    "SortDirection",
    "SortField",
    "TodoCreate",
    "TodoEntity",
    "TodoQuery",
    "TodoRecord",
    "TodoStatus",
    "TodoStoreError",
    "TodoUpdate",
    "ValidationError",
    "configure_logging",
    "get_repository",
    "get_settings",
    "local_now",
    "truncate_to_day",
    "utc_now",
    "uuid4_id",
]
