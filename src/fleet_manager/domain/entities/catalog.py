"""Reference catalog entities: vehicle marks and their models."""

from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID, uuid4

from ..value_objects.references import MarkRef, ModelRef


class VehicleMark:
    """A vehicle manufacturer, e.g. Toyota."""

    def __init__(
        self,
        name: str,
        id: Optional[UUID] = None,
        created_at: Optional[datetime] = None,
        models: Optional[List["VehicleModel"]] = None
    ):
        self._id = id or uuid4()
        self._name = name
        self._created_at = created_at or datetime.now(timezone.utc)
        self._models = list(models) if models else []

    @property
    def id(self) -> UUID:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def models(self) -> List["VehicleModel"]:
        """Models attached when the mark is listed with its models."""
        return list(self._models)

    def with_models(self, models: List["VehicleModel"]) -> "VehicleMark":
        return VehicleMark(self._name, id=self._id, created_at=self._created_at, models=models)

    def to_ref(self) -> MarkRef:
        return MarkRef(id=self._id, name=self._name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VehicleMark):
            return False
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __str__(self) -> str:
        return self._name


class VehicleModel:
    """A model line belonging to exactly one mark."""

    def __init__(
        self,
        name: str,
        mark_id: UUID,
        id: Optional[UUID] = None,
        created_at: Optional[datetime] = None,
        mark: Optional[MarkRef] = None
    ):
        self._id = id or uuid4()
        self._name = name
        self._mark_id = mark_id
        self._created_at = created_at or datetime.now(timezone.utc)
        self._mark = mark

    @property
    def id(self) -> UUID:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def mark_id(self) -> UUID:
        return self._mark_id

    @property
    def mark(self) -> Optional[MarkRef]:
        """Resolved owning mark, when loaded."""
        return self._mark

    @property
    def created_at(self) -> datetime:
        return self._created_at

    def belongs_to(self, mark_id: UUID) -> bool:
        return self._mark_id == mark_id

    def to_ref(self) -> ModelRef:
        return ModelRef(id=self._id, name=self._name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VehicleModel):
            return False
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __str__(self) -> str:
        return self._name
