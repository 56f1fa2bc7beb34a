"""Aggregate counters for the dashboard."""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from fleet_manager.domain.entities.vehicle import VehicleStatus
from fleet_manager.domain.value_objects.vehicle_query import VehicleCriteria

if TYPE_CHECKING:
    from fleet_manager.application.ports.repositories import UserRepository, VehicleRepository


@dataclass(frozen=True)
class DashboardMetrics:
    total_users: int
    total_vehicles: int
    active_vehicles: int


class DashboardService:
    """Counts users, vehicles and vehicles currently available."""

    def __init__(self, user_repository: "UserRepository", vehicle_repository: "VehicleRepository"):
        self._user_repository = user_repository
        self._vehicle_repository = vehicle_repository

    async def get_metrics(self) -> DashboardMetrics:
        total_users = await self._user_repository.count()
        total_vehicles = await self._vehicle_repository.count(VehicleCriteria())
        active_vehicles = await self._vehicle_repository.count(
            VehicleCriteria(status=VehicleStatus.AVAILABLE)
        )
        return DashboardMetrics(
            total_users=total_users or 0,
            total_vehicles=total_vehicles or 0,
            active_vehicles=active_vehicles or 0
        )
