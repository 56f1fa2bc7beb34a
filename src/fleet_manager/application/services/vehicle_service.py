"""Vehicle mutation service: create, update, status change, delete and fetch."""

from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, TYPE_CHECKING
from uuid import UUID

from fleet_manager.domain.entities.vehicle import (
    MIN_VEHICLE_YEAR,
    Vehicle,
    VehicleStatus,
    max_vehicle_year,
)
from fleet_manager.domain.exceptions import (
    ConflictError,
    DuplicateVehicleIdError,
    NotFoundError,
    ValidationError,
)
from fleet_manager.domain.value_objects.entity_id import parse_entity_id
from fleet_manager.infrastructure.logging import get_logger, log_business_rule_violation

if TYPE_CHECKING:
    from fleet_manager.application.ports.repositories import (
        CatalogRepository,
        VehicleIdAllocator,
        VehicleRepository,
    )


@dataclass(frozen=True)
class VehicleData:
    """Validated vehicle fields for a create or full update."""
    mark_id: UUID
    model_id: UUID
    year: int
    status: VehicleStatus


class VehicleDataValidator:
    """Checks raw vehicle input against format and catalog rules.

    Rules that need no storage are all collected before raising, so the
    caller sees every problem at once. Catalog rules stop at the first
    failure.
    """

    def __init__(self, catalog_repository: "CatalogRepository"):
        self._catalog_repository = catalog_repository

    async def validate(self, data: Mapping[str, Any]) -> VehicleData:
        mark_id, model_id, year, status = self._check_format(data)

        mark = await self._catalog_repository.get_mark(mark_id)
        if mark is None:
            raise ValidationError("The specified mark does not exist", field="mark")

        model = await self._catalog_repository.get_model(model_id)
        if model is None:
            raise ValidationError("The specified model does not exist", field="model")

        if not model.belongs_to(mark.id):
            raise ValidationError("The model does not belong to the specified mark", field="model")

        return VehicleData(mark_id=mark_id, model_id=model_id, year=year, status=status)

    def _check_format(self, data: Mapping[str, Any]):
        errors: List[str] = []
        mark_raw = data.get("mark")
        model_raw = data.get("model")
        year_raw = data.get("year")
        status_raw = data.get("status")

        missing = [name for name, value in (("mark", mark_raw), ("model", model_raw), ("year", year_raw))
                   if value is None or value == ""]
        if missing:
            errors.append(f"Missing required fields: {', '.join(missing)}")

        mark_id = self._optional_uuid(mark_raw, "mark", errors)
        model_id = self._optional_uuid(model_raw, "model", errors)

        year: Optional[int] = None
        if year_raw is not None and year_raw != "":
            # JSON numbers such as 2021.0 decode to float
            if isinstance(year_raw, float) and year_raw.is_integer():
                year_raw = int(year_raw)
            if isinstance(year_raw, bool) or not isinstance(year_raw, int):
                errors.append("The year field must be a valid number")
            else:
                upper = max_vehicle_year()
                if year_raw < MIN_VEHICLE_YEAR or year_raw > upper:
                    errors.append(f"The year must be between {MIN_VEHICLE_YEAR} and {upper}")
                else:
                    year = year_raw

        status = VehicleStatus.AVAILABLE
        if status_raw is not None and status_raw != "":
            parsed = VehicleStatus.parse(status_raw) if isinstance(status_raw, str) else None
            if parsed is None:
                errors.append(f"The status must be one of: {', '.join(VehicleStatus.values())}")
            else:
                status = parsed

        if errors:
            message = errors[0] if len(errors) == 1 else "Vehicle data is invalid"
            raise ValidationError(message, errors=errors)

        return mark_id, model_id, year, status

    @staticmethod
    def _optional_uuid(value: Any, name: str, errors: List[str]) -> Optional[UUID]:
        if value is None or value == "":
            return None
        try:
            return UUID(str(value))
        except ValueError:
            errors.append(f"The {name} field must be a valid ID")
            return None


def parse_status(value: Any) -> VehicleStatus:
    """Parse a required status for a status-only update."""
    if value is None or value == "":
        raise ValidationError("The status field is required", field="status")
    status = VehicleStatus.parse(value) if isinstance(value, str) else None
    if status is None:
        raise ValidationError(
            f"The status must be one of: {', '.join(VehicleStatus.values())}",
            field="status"
        )
    return status


class VehicleService:
    """Application service for vehicle mutations."""

    MAX_ID_ALLOCATION_ATTEMPTS = 5

    def __init__(
        self,
        vehicle_repository: "VehicleRepository",
        catalog_repository: "CatalogRepository",
        id_allocator: "VehicleIdAllocator"
    ):
        self._vehicle_repository = vehicle_repository
        self._id_allocator = id_allocator
        self._validator = VehicleDataValidator(catalog_repository)
        self._logger = get_logger(__name__)

    async def create_vehicle(self, data: Mapping[str, Any], actor_id: UUID) -> Vehicle:
        """Validate and insert a vehicle under a freshly allocated identifier."""
        vehicle_data = await self._validator.validate(data)

        for attempt in range(1, self.MAX_ID_ALLOCATION_ATTEMPTS + 1):
            try:
                vehicle = Vehicle(
                    vehicle_id=await self._id_allocator.next_id(),
                    mark_id=vehicle_data.mark_id,
                    model_id=vehicle_data.model_id,
                    year=vehicle_data.year,
                    status=vehicle_data.status,
                    created_by_id=actor_id
                )
                saved = await self._vehicle_repository.add(vehicle)
            except DuplicateVehicleIdError as e:
                self._logger.warning(
                    f"Vehicle identifier {e.vehicle_id} already taken "
                    f"(attempt {attempt}/{self.MAX_ID_ALLOCATION_ATTEMPTS}), resynchronizing"
                )
                await self._id_allocator.synchronize()
                continue

            self._logger.info(f"Created vehicle {saved.vehicle_id} ({saved.id}) by user {actor_id}")
            return saved

        raise ConflictError("Could not allocate a unique vehicle identifier", field="vehicleId")

    async def update_vehicle(self, vehicle_id: Any, data: Mapping[str, Any], actor_id: UUID) -> Vehicle:
        """Replace mark, model, year and status; omitted status resets to available."""
        vehicle_data = await self._validator.validate(data)
        vehicle = await self._get_existing(vehicle_id)

        vehicle.replace_details(
            mark_id=vehicle_data.mark_id,
            model_id=vehicle_data.model_id,
            year=vehicle_data.year,
            status=vehicle_data.status,
            actor_id=actor_id
        )
        updated = await self._vehicle_repository.update(vehicle)
        self._logger.info(f"Updated vehicle {updated.vehicle_id} by user {actor_id}")
        return updated

    async def update_vehicle_status(self, vehicle_id: Any, status: Any, actor_id: UUID) -> Vehicle:
        new_status = parse_status(status)
        vehicle = await self._get_existing(vehicle_id)

        previous = vehicle.status
        vehicle.change_status(new_status, actor_id)
        updated = await self._vehicle_repository.update(vehicle)
        self._logger.info(
            f"Vehicle {updated.vehicle_id} status {previous.value} -> {new_status.value} by user {actor_id}"
        )
        return updated

    async def delete_vehicle(self, vehicle_id: Any) -> None:
        internal_id = parse_entity_id(vehicle_id)
        deleted = await self._vehicle_repository.delete(internal_id)
        if not deleted:
            raise NotFoundError("Vehicle not found")
        self._logger.info(f"Deleted vehicle {internal_id}")

    async def get_vehicle(self, vehicle_id: Any) -> Vehicle:
        return await self._get_existing(vehicle_id)

    async def _get_existing(self, vehicle_id: Any) -> Vehicle:
        internal_id = parse_entity_id(vehicle_id)
        vehicle = await self._vehicle_repository.find_by_id(internal_id)
        if vehicle is None:
            log_business_rule_violation(
                self._logger, "vehicle_exists", f"No vehicle with id {internal_id}"
            )
            raise NotFoundError("Vehicle not found")
        return vehicle
