"""Vehicle entity."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from ..value_objects.references import MarkRef, ModelRef, UserRef

MIN_VEHICLE_YEAR = 1900


class VehicleStatus(Enum):
    """Vehicle status enumeration."""
    AVAILABLE = "available"
    MAINTENANCE = "maintenance"
    SERVICE = "service"

    @classmethod
    def values(cls) -> list[str]:
        """All valid status values, in declaration order."""
        return [status.value for status in cls]

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["VehicleStatus"]:
        """Return the matching status or None when ``value`` is not a valid one."""
        for status in cls:
            if status.value == value:
                return status
        return None


def max_vehicle_year(now: Optional[datetime] = None) -> int:
    """Latest accepted manufacture year: next calendar year."""
    now = now or datetime.now(timezone.utc)
    return now.year + 1


class Vehicle:
    """Fleet vehicle.

    Mark, model and user fields are stored as identifiers. Repositories that
    read a vehicle back attach the resolved references (``mark``, ``model``,
    ``created_by``, ``updated_by``) for display.
    """

    def __init__(
        self,
        vehicle_id: str,
        mark_id: UUID,
        model_id: UUID,
        year: int,
        created_by_id: UUID,
        status: VehicleStatus = VehicleStatus.AVAILABLE,
        updated_by_id: Optional[UUID] = None,
        id: Optional[UUID] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
        mark: Optional[MarkRef] = None,
        model: Optional[ModelRef] = None,
        created_by: Optional[UserRef] = None,
        updated_by: Optional[UserRef] = None,
    ):
        now = datetime.now(timezone.utc)
        self._id = id or uuid4()
        self._vehicle_id = vehicle_id
        self._mark_id = mark_id
        self._model_id = model_id
        self._year = year
        self._status = status
        self._created_by_id = created_by_id
        self._updated_by_id = updated_by_id or created_by_id
        self._created_at = created_at or now
        self._updated_at = updated_at or now
        self._mark = mark
        self._model = model
        self._created_by = created_by
        self._updated_by = updated_by

    @property
    def id(self) -> UUID:
        """Get internal vehicle ID."""
        return self._id

    @property
    def vehicle_id(self) -> str:
        """Get human-readable identifier."""
        return self._vehicle_id

    @property
    def mark_id(self) -> UUID:
        return self._mark_id

    @property
    def model_id(self) -> UUID:
        return self._model_id

    @property
    def year(self) -> int:
        return self._year

    @property
    def status(self) -> VehicleStatus:
        return self._status

    @property
    def created_by_id(self) -> UUID:
        return self._created_by_id

    @property
    def updated_by_id(self) -> UUID:
        return self._updated_by_id

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    @property
    def mark(self) -> Optional[MarkRef]:
        """Resolved mark, when loaded."""
        return self._mark

    @property
    def model(self) -> Optional[ModelRef]:
        """Resolved model, when loaded."""
        return self._model

    @property
    def created_by(self) -> Optional[UserRef]:
        return self._created_by

    @property
    def updated_by(self) -> Optional[UserRef]:
        return self._updated_by

    def replace_details(
        self,
        mark_id: UUID,
        model_id: UUID,
        year: int,
        status: VehicleStatus,
        actor_id: UUID
    ) -> None:
        """Replace every mutable field, stamping the modifier."""
        if mark_id != self._mark_id:
            self._mark = None
        if model_id != self._model_id:
            self._model = None
        self._mark_id = mark_id
        self._model_id = model_id
        self._year = year
        self._status = status
        self._touch(actor_id)

    def change_status(self, status: VehicleStatus, actor_id: UUID) -> None:
        """Change only the status, stamping the modifier."""
        self._status = status
        self._touch(actor_id)

    def _touch(self, actor_id: UUID) -> None:
        if actor_id != self._updated_by_id:
            self._updated_by = None
        self._updated_by_id = actor_id
        self._updated_at = datetime.now(timezone.utc)

    def __eq__(self, other: object) -> bool:
        """Check equality based on internal ID."""
        if not isinstance(other, Vehicle):
            return False
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __str__(self) -> str:
        return f"Vehicle({self._vehicle_id}, {self._status.value})"
