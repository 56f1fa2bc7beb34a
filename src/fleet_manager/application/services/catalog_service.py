"""Read access to the vehicle mark/model catalog."""

from typing import Any, List, TYPE_CHECKING

from fleet_manager.domain.exceptions import InvalidArgumentError
from fleet_manager.domain.value_objects.entity_id import parse_entity_id
from fleet_manager.infrastructure.logging import get_logger

if TYPE_CHECKING:
    from fleet_manager.application.ports.repositories import CatalogRepository
    from fleet_manager.domain.entities.catalog import VehicleMark, VehicleModel


class CatalogService:
    """Lists marks and models for selection lists."""

    def __init__(self, catalog_repository: "CatalogRepository"):
        self._catalog_repository = catalog_repository
        self._logger = get_logger(__name__)

    async def list_marks(self) -> List["VehicleMark"]:
        return await self._catalog_repository.list_marks()

    async def list_marks_with_models(self) -> List["VehicleMark"]:
        return await self._catalog_repository.list_marks_with_models()

    async def list_models_by_mark(self, mark_id: Any) -> List["VehicleModel"]:
        """Models of a mark; an unknown mark yields an empty list."""
        if mark_id is None or mark_id == "":
            raise InvalidArgumentError("Mark ID is required", field="markId")
        parsed = parse_entity_id(mark_id, message="Invalid mark ID", field="markId")
        models = await self._catalog_repository.list_models_by_mark(parsed)
        self._logger.debug(f"Found {len(models)} models for mark {parsed}")
        return models
