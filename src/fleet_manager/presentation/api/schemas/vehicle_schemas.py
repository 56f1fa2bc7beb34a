"""Request and response schemas for vehicles, the catalog and the dashboard."""

from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from fleet_manager.application.services.dashboard_service import DashboardMetrics
from fleet_manager.domain.entities.catalog import VehicleMark, VehicleModel
from fleet_manager.domain.entities.vehicle import Vehicle
from fleet_manager.domain.value_objects.vehicle_query import Pagination, VehiclePage

from .common import ApiModel


class VehicleRequest(ApiModel):
    """Create/full-update body.

    Fields are untyped so that every format problem is reported by the
    vehicle validator in one itemized error.
    """
    mark: Optional[Any] = None
    model: Optional[Any] = None
    year: Optional[Any] = None
    status: Optional[Any] = None


class VehicleStatusRequest(ApiModel):
    status: Optional[Any] = None


class NamedRef(ApiModel):
    id: UUID
    name: str


class UserSummary(ApiModel):
    id: UUID
    email: str


class VehicleResponse(ApiModel):
    id: UUID
    vehicle_id: str
    mark: Optional[NamedRef] = None
    model: Optional[NamedRef] = None
    year: int
    status: str
    created_by: Optional[UserSummary] = None
    updated_by: Optional[UserSummary] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, vehicle: Vehicle) -> "VehicleResponse":
        return cls(
            id=vehicle.id,
            vehicle_id=vehicle.vehicle_id,
            mark=NamedRef(id=vehicle.mark.id, name=vehicle.mark.name) if vehicle.mark else None,
            model=NamedRef(id=vehicle.model.id, name=vehicle.model.name) if vehicle.model else None,
            year=vehicle.year,
            status=vehicle.status.value,
            created_by=UserSummary(id=vehicle.created_by.id, email=vehicle.created_by.email) if vehicle.created_by else None,
            updated_by=UserSummary(id=vehicle.updated_by.id, email=vehicle.updated_by.email) if vehicle.updated_by else None,
            created_at=vehicle.created_at,
            updated_at=vehicle.updated_at
        )


class VehicleData(ApiModel):
    vehicle: VehicleResponse


class PaginationResponse(ApiModel):
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def from_value(cls, pagination: Pagination) -> "PaginationResponse":
        return cls(
            current_page=pagination.current_page,
            total_pages=pagination.total_pages,
            total_items=pagination.total_items,
            items_per_page=pagination.items_per_page,
            has_next_page=pagination.has_next_page,
            has_prev_page=pagination.has_prev_page
        )


class VehicleListData(ApiModel):
    vehicles: List[VehicleResponse]
    pagination: PaginationResponse

    @classmethod
    def from_page(cls, page: VehiclePage) -> "VehicleListData":
        return cls(
            vehicles=[VehicleResponse.from_entity(v) for v in page.vehicles],
            pagination=PaginationResponse.from_value(page.pagination)
        )


class ModelResponse(ApiModel):
    id: UUID
    name: str
    mark: Optional[NamedRef] = None

    @classmethod
    def from_entity(cls, model: VehicleModel) -> "ModelResponse":
        mark = NamedRef(id=model.mark.id, name=model.mark.name) if model.mark else None
        return cls(id=model.id, name=model.name, mark=mark)


class MarkResponse(ApiModel):
    id: UUID
    name: str

    @classmethod
    def from_entity(cls, mark: VehicleMark) -> "MarkResponse":
        return cls(id=mark.id, name=mark.name)


class MarkWithModelsResponse(MarkResponse):
    models: List[ModelResponse]

    @classmethod
    def from_entity(cls, mark: VehicleMark) -> "MarkWithModelsResponse":
        return cls(id=mark.id, name=mark.name, models=[ModelResponse.from_entity(m) for m in mark.models])


class MarkListData(ApiModel):
    marks: List[MarkResponse]


class MarkWithModelsListData(ApiModel):
    marks: List[MarkWithModelsResponse]


class ModelListData(ApiModel):
    models: List[ModelResponse]


class DashboardMetricsResponse(ApiModel):
    total_users: int = 0
    total_vehicles: int = 0
    active_vehicles: int = 0

    @classmethod
    def from_metrics(cls, metrics: DashboardMetrics) -> "DashboardMetricsResponse":
        return cls(
            total_users=metrics.total_users,
            total_vehicles=metrics.total_vehicles,
            active_vehicles=metrics.active_vehicles
        )
