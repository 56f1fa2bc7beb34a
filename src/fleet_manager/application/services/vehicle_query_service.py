"""Vehicle listing: search, filter, sort and paginate."""

from typing import List, TYPE_CHECKING

from fleet_manager.domain.value_objects.vehicle_query import (
    Pagination,
    SortField,
    VehicleCriteria,
    VehiclePage,
    VehicleQuery,
)
from fleet_manager.infrastructure.logging import get_logger

if TYPE_CHECKING:
    from fleet_manager.application.ports.repositories import CatalogRepository, VehicleRepository
    from fleet_manager.domain.entities.vehicle import Vehicle


class VehicleQueryService:
    """Read-only listing of vehicles.

    Each call runs one find and one count with the same predicate, plus two
    catalog lookups when a search term is present.
    """

    def __init__(
        self,
        vehicle_repository: "VehicleRepository",
        catalog_repository: "CatalogRepository"
    ):
        self._vehicle_repository = vehicle_repository
        self._catalog_repository = catalog_repository
        self._logger = get_logger(__name__)

    async def list_vehicles(self, query: VehicleQuery) -> VehiclePage:
        criteria = await self.build_criteria(query)

        # Relation fields are sorted per page after fetching; storage orders by creation.
        storage_sort = SortField.CREATED_AT if query.sort_field.is_relation else query.sort_field
        descending = query.sort_order.descending

        vehicles = await self._vehicle_repository.find_page(
            criteria, storage_sort, descending, query.skip, query.limit
        )
        total = await self._vehicle_repository.count(criteria)

        if query.sort_field.is_relation:
            vehicles = self._sort_by_relation_name(vehicles, query.sort_field, descending)

        pagination = Pagination.from_total(query.page, query.limit, total)
        self._logger.debug(
            f"Listed {len(vehicles)} of {total} vehicles "
            f"(page {query.page}, sort {query.sort_field.value} {query.sort_order.value})"
        )
        return VehiclePage(vehicles=vehicles, pagination=pagination)

    async def build_criteria(self, query: VehicleQuery) -> VehicleCriteria:
        """Resolve the request filters into a storage predicate."""
        filters = query.filters
        mark_ids: frozenset = frozenset()
        model_ids: frozenset = frozenset()
        if filters.search:
            mark_ids = frozenset(await self._catalog_repository.find_mark_ids_by_name(filters.search))
            model_ids = frozenset(await self._catalog_repository.find_model_ids_by_name(filters.search))

        return VehicleCriteria(
            search_term=filters.search,
            mark_ids=mark_ids,
            model_ids=model_ids,
            year_from=filters.year_from,
            year_to=filters.year_to,
            status=filters.status
        )

    @staticmethod
    def _sort_by_relation_name(
        vehicles: List["Vehicle"],
        sort_field: SortField,
        descending: bool
    ) -> List["Vehicle"]:
        def name_of(vehicle: "Vehicle") -> str:
            ref = vehicle.mark if sort_field is SortField.MARK else vehicle.model
            return ref.name if ref is not None and ref.name else ""

        # sorted() is stable, so equal names keep storage order in both directions
        return sorted(vehicles, key=name_of, reverse=descending)
