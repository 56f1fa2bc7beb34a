"""Value objects describing a vehicle listing request and its result."""

import math
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, FrozenSet, List, Optional
from uuid import UUID

from ..entities.vehicle import Vehicle, VehicleStatus
from ..exceptions import InvalidArgumentError

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10

_LEADING_INT_PATTERN = re.compile(r"\s*[+-]?\d+")


class SortField(Enum):
    """Fields a vehicle listing can be ordered by."""
    VEHICLE_ID = "vehicleId"
    MARK = "mark"
    MODEL = "model"
    YEAR = "year"
    STATUS = "status"
    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"

    @property
    def is_relation(self) -> bool:
        """True when the value lives in a referenced entity, not on the vehicle."""
        return self in (SortField.MARK, SortField.MODEL)

    @classmethod
    def parse(cls, value: str) -> "SortField":
        for sort_field in cls:
            if sort_field.value == value:
                return sort_field
        allowed = ", ".join(f.value for f in cls)
        raise InvalidArgumentError(f"Invalid sortBy value. Allowed values: {allowed}", field="sortBy")


class SortOrder(Enum):
    """Sort direction."""
    ASC = "asc"
    DESC = "desc"

    @classmethod
    def parse(cls, value: str) -> "SortOrder":
        normalized = (value or "").strip().lower()
        for order in cls:
            if order.value == normalized:
                return order
        raise InvalidArgumentError("Invalid sortOrder value. Allowed values: asc, desc", field="sortOrder")

    @property
    def descending(self) -> bool:
        return self is SortOrder.DESC


def parse_leading_int(value: Any) -> Optional[int]:
    """Integer at the start of a query value, e.g. 2020 for "2020abc"; None if there is none."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    match = _LEADING_INT_PATTERN.match(str(value))
    return int(match.group(0)) if match else None


@dataclass(frozen=True)
class VehicleFilters:
    """Optional listing filters.

    Filters are permissive: unusable values are dropped rather than rejected.
    """
    search: Optional[str] = None
    year_from: Optional[int] = None
    year_to: Optional[int] = None
    status: Optional[VehicleStatus] = None

    @classmethod
    def from_raw(
        cls,
        search: Any = None,
        year_from: Any = None,
        year_to: Any = None,
        status: Any = None
    ) -> "VehicleFilters":
        """Build filters from untyped request values."""
        term = search.strip() if isinstance(search, str) else None
        parsed_status = VehicleStatus.parse(status.strip()) if isinstance(status, str) else None
        return cls(
            search=term or None,
            year_from=parse_leading_int(year_from),
            year_to=parse_leading_int(year_to),
            status=parsed_status
        )


@dataclass(frozen=True)
class VehicleQuery:
    """Validated paging and sorting of a listing request."""
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    sort_field: SortField = SortField.CREATED_AT
    sort_order: SortOrder = SortOrder.DESC
    filters: VehicleFilters = field(default_factory=VehicleFilters)

    @classmethod
    def create(
        cls,
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_LIMIT,
        sort_by: str = SortField.CREATED_AT.value,
        sort_order: str = SortOrder.DESC.value,
        filters: Optional[VehicleFilters] = None
    ) -> "VehicleQuery":
        """Validate paging and sorting strictly; raises InvalidArgumentError."""
        if page < 1:
            raise InvalidArgumentError("Page must be greater than or equal to 1", field="page")
        if limit < 1:
            raise InvalidArgumentError("Limit must be greater than or equal to 1", field="limit")
        return cls(
            page=page,
            limit=limit,
            sort_field=SortField.parse(sort_by),
            sort_order=SortOrder.parse(sort_order),
            filters=filters or VehicleFilters()
        )

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class VehicleCriteria:
    """Storage-level predicate: every present clause must hold.

    The search clause is satisfied by any of its three alternatives: the mark
    is among ``mark_ids``, the model is among ``model_ids``, or the vehicle
    identifier contains ``search_term``.
    """
    search_term: Optional[str] = None
    mark_ids: FrozenSet[UUID] = frozenset()
    model_ids: FrozenSet[UUID] = frozenset()
    year_from: Optional[int] = None
    year_to: Optional[int] = None
    status: Optional[VehicleStatus] = None

    def matches(self, vehicle: Vehicle) -> bool:
        if self.search_term is not None:
            term = self.search_term.lower()
            if not (
                vehicle.mark_id in self.mark_ids
                or vehicle.model_id in self.model_ids
                or term in vehicle.vehicle_id.lower()
            ):
                return False
        if self.year_from is not None and vehicle.year < self.year_from:
            return False
        if self.year_to is not None and vehicle.year > self.year_to:
            return False
        if self.status is not None and vehicle.status is not self.status:
            return False
        return True


@dataclass(frozen=True)
class Pagination:
    """Page metadata for a listing."""
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def from_total(cls, page: int, limit: int, total: int) -> "Pagination":
        total_pages = math.ceil(total / limit)
        return cls(
            current_page=page,
            total_pages=total_pages,
            total_items=total,
            items_per_page=limit,
            has_next_page=page < total_pages,
            has_prev_page=page > 1
        )


@dataclass(frozen=True)
class VehiclePage:
    """One page of vehicles with references resolved."""
    vehicles: List[Vehicle]
    pagination: Pagination
