"""In-memory repository implementations for testing and development."""

from typing import Dict, List, Optional, Set
from uuid import UUID

from fleet_manager.application.ports.repositories import (
    CatalogRepository,
    UserRepository,
    VehicleIdAllocator,
    VehicleRepository,
)
from fleet_manager.domain.entities.catalog import VehicleMark, VehicleModel
from fleet_manager.domain.entities.user import User
from fleet_manager.domain.entities.vehicle import Vehicle
from fleet_manager.domain.exceptions import ConflictError, DuplicateVehicleIdError
from fleet_manager.domain.value_objects.vehicle_id import format_vehicle_id, parse_vehicle_id_number
from fleet_manager.domain.value_objects.vehicle_query import SortField, VehicleCriteria

_SORT_KEYS = {
    SortField.VEHICLE_ID: lambda v: v.vehicle_id,
    SortField.YEAR: lambda v: v.year,
    SortField.STATUS: lambda v: v.status.value,
    SortField.CREATED_AT: lambda v: v.created_at,
    SortField.UPDATED_AT: lambda v: v.updated_at,
}


class InMemoryStore:
    """Shared tables backing the in-memory repositories."""

    def __init__(self):
        self.marks: Dict[UUID, VehicleMark] = {}
        self.models: Dict[UUID, VehicleModel] = {}
        self.users: Dict[UUID, User] = {}
        self.vehicles: Dict[UUID, Vehicle] = {}
        self.vehicle_id_counter: Optional[int] = None

    def add_mark(self, name: str) -> VehicleMark:
        mark = VehicleMark(name=name)
        self.marks[mark.id] = mark
        return mark

    def add_model(self, name: str, mark: VehicleMark) -> VehicleModel:
        model = VehicleModel(name=name, mark_id=mark.id)
        self.models[model.id] = model
        return model


class InMemoryVehicleRepository(VehicleRepository):
    """In-memory implementation of vehicle repository."""

    def __init__(self, store: InMemoryStore):
        self._store = store

    async def find_page(
        self,
        criteria: VehicleCriteria,
        sort_field: SortField,
        descending: bool,
        skip: int,
        limit: int
    ) -> List[Vehicle]:
        key = _SORT_KEYS.get(sort_field)
        if key is None:
            raise ValueError(f"Cannot sort vehicles in storage by {sort_field.value}")
        matching = [v for v in self._store.vehicles.values() if criteria.matches(v)]
        matching.sort(key=key, reverse=descending)
        return [self._resolve(v) for v in matching[skip:skip + limit]]

    async def count(self, criteria: VehicleCriteria) -> int:
        return sum(1 for v in self._store.vehicles.values() if criteria.matches(v))

    async def find_by_id(self, vehicle_id: UUID) -> Optional[Vehicle]:
        vehicle = self._store.vehicles.get(vehicle_id)
        return self._resolve(vehicle) if vehicle else None

    async def add(self, vehicle: Vehicle) -> Vehicle:
        if any(v.vehicle_id == vehicle.vehicle_id for v in self._store.vehicles.values()):
            raise DuplicateVehicleIdError(vehicle.vehicle_id)
        self._store.vehicles[vehicle.id] = self._resolve(vehicle)
        return self._resolve(vehicle)

    async def update(self, vehicle: Vehicle) -> Vehicle:
        if vehicle.id not in self._store.vehicles:
            raise LookupError(f"Vehicle {vehicle.id} does not exist")
        self._store.vehicles[vehicle.id] = self._resolve(vehicle)
        return self._resolve(vehicle)

    async def delete(self, vehicle_id: UUID) -> bool:
        return self._store.vehicles.pop(vehicle_id, None) is not None

    def _resolve(self, vehicle: Vehicle) -> Vehicle:
        """Copy of the vehicle with its references looked up in the store."""
        mark = self._store.marks.get(vehicle.mark_id)
        model = self._store.models.get(vehicle.model_id)
        created_by = self._store.users.get(vehicle.created_by_id)
        updated_by = self._store.users.get(vehicle.updated_by_id)
        return Vehicle(
            id=vehicle.id,
            vehicle_id=vehicle.vehicle_id,
            mark_id=vehicle.mark_id,
            model_id=vehicle.model_id,
            year=vehicle.year,
            status=vehicle.status,
            created_by_id=vehicle.created_by_id,
            updated_by_id=vehicle.updated_by_id,
            created_at=vehicle.created_at,
            updated_at=vehicle.updated_at,
            mark=mark.to_ref() if mark else None,
            model=model.to_ref() if model else None,
            created_by=created_by.to_ref() if created_by else None,
            updated_by=updated_by.to_ref() if updated_by else None
        )


class InMemoryVehicleIdAllocator(VehicleIdAllocator):
    """Counter kept on the shared store; seeded from the largest existing identifier."""

    def __init__(self, store: InMemoryStore):
        self._store = store

    async def next_id(self) -> str:
        if self._store.vehicle_id_counter is None:
            self._store.vehicle_id_counter = self._largest_suffix()
        self._store.vehicle_id_counter += 1
        return format_vehicle_id(self._store.vehicle_id_counter)

    async def synchronize(self) -> None:
        self._store.vehicle_id_counter = max(self._store.vehicle_id_counter or 0, self._largest_suffix())

    def _largest_suffix(self) -> int:
        numbers = [parse_vehicle_id_number(v.vehicle_id) or 0 for v in self._store.vehicles.values()]
        return max(numbers, default=0)


class InMemoryCatalogRepository(CatalogRepository):
    """In-memory implementation of the mark/model catalog."""

    def __init__(self, store: InMemoryStore):
        self._store = store

    async def find_mark_ids_by_name(self, term: str) -> Set[UUID]:
        needle = term.lower()
        return {m.id for m in self._store.marks.values() if needle in m.name.lower()}

    async def find_model_ids_by_name(self, term: str) -> Set[UUID]:
        needle = term.lower()
        return {m.id for m in self._store.models.values() if needle in m.name.lower()}

    async def get_mark(self, mark_id: UUID) -> Optional[VehicleMark]:
        return self._store.marks.get(mark_id)

    async def get_model(self, model_id: UUID) -> Optional[VehicleModel]:
        return self._store.models.get(model_id)

    async def list_marks(self) -> List[VehicleMark]:
        return sorted(self._store.marks.values(), key=lambda m: m.name)

    async def list_models_by_mark(self, mark_id: UUID) -> List[VehicleModel]:
        mark = self._store.marks.get(mark_id)
        if mark is None:
            return []
        models = [m for m in self._store.models.values() if m.belongs_to(mark_id)]
        return [
            VehicleModel(name=m.name, mark_id=m.mark_id, id=m.id, created_at=m.created_at, mark=mark.to_ref())
            for m in sorted(models, key=lambda m: m.name)
        ]

    async def list_marks_with_models(self) -> List[VehicleMark]:
        marks = []
        for mark in await self.list_marks():
            models = sorted(
                (m for m in self._store.models.values() if m.belongs_to(mark.id)),
                key=lambda m: m.name
            )
            marks.append(mark.with_models(models))
        return marks


class InMemoryUserRepository(UserRepository):
    """In-memory implementation of user repository."""

    def __init__(self, store: InMemoryStore):
        self._store = store

    async def find_by_id(self, user_id: UUID) -> Optional[User]:
        return self._store.users.get(user_id)

    async def find_by_email(self, email: str) -> Optional[User]:
        normalized = email.strip().lower()
        return next((u for u in self._store.users.values() if u.email == normalized), None)

    async def find_by_reset_token(self, token: str) -> Optional[User]:
        return next(
            (u for u in self._store.users.values() if u.reset_password_token == token),
            None
        )

    async def add(self, user: User) -> User:
        if await self.find_by_email(user.email):
            raise ConflictError("Email is already registered", field="email")
        self._store.users[user.id] = user
        return user

    async def update(self, user: User) -> User:
        if user.id not in self._store.users:
            raise LookupError(f"User {user.id} does not exist")
        self._store.users[user.id] = user
        return user

    async def count(self) -> int:
        return len(self._store.users)
