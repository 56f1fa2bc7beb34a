"""Port interfaces for repositories (Dependency Inversion Principle)."""

from abc import ABC, abstractmethod
from typing import List, Optional, Set, TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from fleet_manager.domain.entities.catalog import VehicleMark, VehicleModel
    from fleet_manager.domain.entities.user import User
    from fleet_manager.domain.entities.vehicle import Vehicle
    from fleet_manager.domain.value_objects.vehicle_query import SortField, VehicleCriteria


class VehicleRepository(ABC):
    """Port interface for vehicle repository.

    Vehicles returned by finders carry their mark, model and user references
    resolved.
    """

    @abstractmethod
    async def find_page(
        self,
        criteria: "VehicleCriteria",
        sort_field: "SortField",
        descending: bool,
        skip: int,
        limit: int
    ) -> List["Vehicle"]:
        """Find vehicles matching criteria, ordered by a column of the vehicle itself."""
        raise NotImplementedError

    @abstractmethod
    async def count(self, criteria: "VehicleCriteria") -> int:
        """Count vehicles matching criteria."""
        raise NotImplementedError

    @abstractmethod
    async def find_by_id(self, vehicle_id: UUID) -> Optional["Vehicle"]:
        """Find vehicle by internal ID."""
        raise NotImplementedError

    @abstractmethod
    async def add(self, vehicle: "Vehicle") -> "Vehicle":
        """Insert a new vehicle.

        Raises DuplicateVehicleIdError when its identifier is already taken.
        """
        raise NotImplementedError

    @abstractmethod
    async def update(self, vehicle: "Vehicle") -> "Vehicle":
        """Persist changes to an existing vehicle."""
        raise NotImplementedError

    @abstractmethod
    async def delete(self, vehicle_id: UUID) -> bool:
        """Delete a vehicle; False when nothing was deleted."""
        raise NotImplementedError


class CatalogRepository(ABC):
    """Port interface for the mark/model reference catalog."""

    @abstractmethod
    async def find_mark_ids_by_name(self, term: str) -> Set[UUID]:
        """IDs of marks whose name contains term, case-insensitively."""
        raise NotImplementedError

    @abstractmethod
    async def find_model_ids_by_name(self, term: str) -> Set[UUID]:
        """IDs of models whose name contains term, case-insensitively."""
        raise NotImplementedError

    @abstractmethod
    async def get_mark(self, mark_id: UUID) -> Optional["VehicleMark"]:
        raise NotImplementedError

    @abstractmethod
    async def get_model(self, model_id: UUID) -> Optional["VehicleModel"]:
        raise NotImplementedError

    @abstractmethod
    async def list_marks(self) -> List["VehicleMark"]:
        """All marks ordered by name."""
        raise NotImplementedError

    @abstractmethod
    async def list_models_by_mark(self, mark_id: UUID) -> List["VehicleModel"]:
        """Models of a mark ordered by name, with the mark resolved."""
        raise NotImplementedError

    @abstractmethod
    async def list_marks_with_models(self) -> List["VehicleMark"]:
        """All marks ordered by name, each carrying its models ordered by name."""
        raise NotImplementedError


class UserRepository(ABC):
    """Port interface for user repository."""

    @abstractmethod
    async def find_by_id(self, user_id: UUID) -> Optional["User"]:
        raise NotImplementedError

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional["User"]:
        """Find user by lower-cased email."""
        raise NotImplementedError

    @abstractmethod
    async def find_by_reset_token(self, token: str) -> Optional["User"]:
        """Find the user holding a pending password reset token."""
        raise NotImplementedError

    @abstractmethod
    async def add(self, user: "User") -> "User":
        """Insert a user; raises ConflictError when the email is taken."""
        raise NotImplementedError

    @abstractmethod
    async def update(self, user: "User") -> "User":
        raise NotImplementedError

    @abstractmethod
    async def count(self) -> int:
        raise NotImplementedError


class VehicleIdAllocator(ABC):
    """Port interface for allocating ``VEH-NNNN`` identifiers."""

    @abstractmethod
    async def next_id(self) -> str:
        """Allocate the next identifier."""
        raise NotImplementedError

    @abstractmethod
    async def synchronize(self) -> None:
        """Realign the allocator with the largest identifier in storage."""
        raise NotImplementedError
