"""
Query engine for todo repositories.

A query is a flat mapping of field names to string values, for example::

    {"Status": "Done", "CreatedAt_lt": "2024-11-10", "SortBy": "CreatedAt", "Sort": "desc"}

Parsing happens in two steps. The raw mapping is first checked against the
closed set of QueryKey values and validated by the QueryParams pydantic model
(enum values, strict YYYY-MM-DD dates, the Sort/SortBy pairing). The validated
values are then compiled into typed predicates, one per filter key, plus an
optional SortSpec. A record matches when every predicate holds.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Pattern, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError
from .models import TodoEntity, TodoStatus
from .schemas import to_validation_error
from .utils import truncate_to_day

logger = logging.getLogger(__name__)

_DAY_FORMAT = re.compile(r"^\d{4}-\d{2}-\d{2}$")


# PUBLIC_INTERFACE
class QueryKey(str, Enum):
    """Every field name a query may contain."""

    ID = "Id"
    DESCRIPTION = "Description"
    STATUS = "Status"
    CREATED_AT = "CreatedAt"
    UPDATED_AT = "UpdatedAt"
    CREATED_AT_LT = "CreatedAt_lt"
    CREATED_AT_GT = "CreatedAt_gt"
    UPDATED_AT_LT = "UpdatedAt_lt"
    UPDATED_AT_GT = "UpdatedAt_gt"
    SORT = "Sort"
    SORT_BY = "SortBy"


class DateOperator(str, Enum):
    EQ = "eq"
    LT = "lt"
    GT = "gt"


# PUBLIC_INTERFACE
class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


# PUBLIC_INTERFACE
class SortField(str, Enum):
    """Fields a query may order its results by."""

    ID = "Id"
    CREATED_AT = "CreatedAt"
    UPDATED_AT = "UpdatedAt"
    DESCRIPTION = "Description"


def _parse_day(value: Any) -> Any:
    if value is None or (isinstance(value, date) and not isinstance(value, datetime)):
        return value
    if not isinstance(value, str) or not _DAY_FORMAT.match(value):
        raise ValueError(f"invalid date format {value!r}, expected YYYY-MM-DD")
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise ValueError(f"invalid date {value!r}, expected a calendar date in YYYY-MM-DD") from e


# PUBLIC_INTERFACE
class QueryParams(BaseModel):
    """
    Typed, validated view of a raw query mapping. Populated by the query keys
    (the field aliases); unknown keys are rejected.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: Optional[str] = Field(default=None, alias=QueryKey.ID.value)
    description: Optional[str] = Field(default=None, alias=QueryKey.DESCRIPTION.value)
    status: Optional[TodoStatus] = Field(default=None, alias=QueryKey.STATUS.value)
    created_at: Optional[date] = Field(default=None, alias=QueryKey.CREATED_AT.value)
    updated_at: Optional[date] = Field(default=None, alias=QueryKey.UPDATED_AT.value)
    created_at_lt: Optional[date] = Field(default=None, alias=QueryKey.CREATED_AT_LT.value)
    created_at_gt: Optional[date] = Field(default=None, alias=QueryKey.CREATED_AT_GT.value)
    updated_at_lt: Optional[date] = Field(default=None, alias=QueryKey.UPDATED_AT_LT.value)
    updated_at_gt: Optional[date] = Field(default=None, alias=QueryKey.UPDATED_AT_GT.value)
    sort: Optional[SortDirection] = Field(default=None, alias=QueryKey.SORT.value)
    sort_by: Optional[SortField] = Field(default=None, alias=QueryKey.SORT_BY.value)

    @field_validator(
        "created_at",
        "updated_at",
        "created_at_lt",
        "created_at_gt",
        "updated_at_lt",
        "updated_at_gt",
        mode="before",
    )
    @classmethod
    def parse_day(cls, v: Any) -> Any:
        """
        Accept only YYYY-MM-DD calendar dates, no time component.
        """
        return _parse_day(v)

    @model_validator(mode="after")
    def check_sort_pair(self) -> "QueryParams":
        if self.sort is not None and self.sort_by is None:
            raise ValueError("Sort requires SortBy: a sort direction needs the field to sort by")
        if self.sort_by is not None and self.sort is None:
            raise ValueError("SortBy requires Sort: sorting by a field needs a direction (asc or desc)")
        return self


@dataclass(frozen=True)
class EqualsPredicate:
    """Exact equality between a record attribute and the query value."""

    key: QueryKey
    attribute: str
    value: Any

    def __call__(self, entity: TodoEntity) -> bool:
        return entity[self.attribute] == self.value  # type: ignore[literal-required]


@dataclass(frozen=True)
class PatternPredicate:
    """
    Regular-expression search of the query value inside a record attribute.

    A pattern that does not compile matches no record.
    """

    key: QueryKey
    attribute: str
    pattern: str
    regex: Optional[Pattern[str]] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        try:
            compiled: Optional[Pattern[str]] = re.compile(self.pattern)
        except re.error as exc:
            logger.warning(
                "%s pattern %r is not a valid regular expression (%s); it matches no record",
                self.key.value,
                self.pattern,
                exc,
            )
            compiled = None
        object.__setattr__(self, "regex", compiled)

    def __call__(self, entity: TodoEntity) -> bool:
        if self.regex is None:
            return False
        return self.regex.search(entity[self.attribute]) is not None  # type: ignore[literal-required]


@dataclass(frozen=True)
class DatePredicate:
    """Day-truncated comparison of a record timestamp with a query date."""

    key: QueryKey
    attribute: str
    operator: DateOperator
    day: date

    def __call__(self, entity: TodoEntity) -> bool:
        stored = truncate_to_day(entity[self.attribute])  # type: ignore[literal-required]
        if self.operator is DateOperator.LT:
            return stored < self.day
        if self.operator is DateOperator.GT:
            return stored > self.day
        return stored == self.day


Predicate = Union[EqualsPredicate, PatternPredicate, DatePredicate]

# One entry per filtering key; Sort and SortBy compile into the SortSpec instead.
_PREDICATE_BUILDERS: Dict[QueryKey, Callable[[Any], Predicate]] = {
    QueryKey.ID: lambda v: EqualsPredicate(QueryKey.ID, "id", v),
    QueryKey.DESCRIPTION: lambda v: PatternPredicate(QueryKey.DESCRIPTION, "description", v),
    QueryKey.STATUS: lambda v: EqualsPredicate(QueryKey.STATUS, "status", v),
    QueryKey.CREATED_AT: lambda v: DatePredicate(QueryKey.CREATED_AT, "created_at", DateOperator.EQ, v),
    QueryKey.UPDATED_AT: lambda v: DatePredicate(QueryKey.UPDATED_AT, "updated_at", DateOperator.EQ, v),
    QueryKey.CREATED_AT_LT: lambda v: DatePredicate(QueryKey.CREATED_AT_LT, "created_at", DateOperator.LT, v),
    QueryKey.CREATED_AT_GT: lambda v: DatePredicate(QueryKey.CREATED_AT_GT, "created_at", DateOperator.GT, v),
    QueryKey.UPDATED_AT_LT: lambda v: DatePredicate(QueryKey.UPDATED_AT_LT, "updated_at", DateOperator.LT, v),
    QueryKey.UPDATED_AT_GT: lambda v: DatePredicate(QueryKey.UPDATED_AT_GT, "updated_at", DateOperator.GT, v),
}
_SORT_KEYS = frozenset({QueryKey.SORT, QueryKey.SORT_BY})

_SORT_KEY_FUNCS: Dict[SortField, Callable[[TodoEntity], Any]] = {
    SortField.ID: lambda t: t["id"],
    SortField.DESCRIPTION: lambda t: t["description"],
    SortField.CREATED_AT: lambda t: truncate_to_day(t["created_at"]),
    SortField.UPDATED_AT: lambda t: truncate_to_day(t["updated_at"]),
}


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class SortSpec:
    """Ordering of query results by one field."""

    field: SortField
    direction: SortDirection

    def apply(self, entities: Iterable[TodoEntity]) -> List[TodoEntity]:
        # sorted() is stable, with reverse=True too: ties keep their encounter order
        return sorted(
            entities,
            key=_SORT_KEY_FUNCS[self.field],
            reverse=self.direction is SortDirection.DESC,
        )


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class TodoQuery:
    """
    A validated, compiled query: conjunctive predicates plus optional ordering.
    """

    predicates: Tuple[Predicate, ...] = ()
    sort: Optional[SortSpec] = None

    @classmethod
    def parse(cls, query: Mapping[str, Any]) -> "TodoQuery":
        """
        Validate a raw query mapping and compile it.

        Raises:
            ValidationError: on an unrecognized key, an invalid value, or a
                Sort/SortBy key without its partner.
        """
        known = {k.value for k in QueryKey}
        for key in query:
            if key not in known:
                raise ValidationError(f"Invalid query field: {key!r} is not a recognized field", field=str(key))

        try:
            params = QueryParams.model_validate(dict(query))
        except PydanticValidationError as exc:
            raise to_validation_error(exc) from exc

        values = params.model_dump(by_alias=True, exclude_none=True)
        predicates: List[Predicate] = []
        for key in query:
            qk = QueryKey(key)
            if qk in _SORT_KEYS or key not in values:
                continue
            predicates.append(_PREDICATE_BUILDERS[qk](values[key]))

        sort = None
        if params.sort is not None and params.sort_by is not None:
            sort = SortSpec(field=params.sort_by, direction=params.sort)
        return cls(predicates=tuple(predicates), sort=sort)

    def matches(self, entity: TodoEntity) -> bool:
        return all(p(entity) for p in self.predicates)

    def apply(self, entities: Iterable[TodoEntity]) -> List[TodoEntity]:
        """Return the matching entities, ordered when the query carries a sort."""
        result = [t for t in entities if self.matches(t)]
        if self.sort is not None and result:
            result = self.sort.apply(result)
        return result
