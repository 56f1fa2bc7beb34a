"""Vehicle endpoints: listing, fetch, create, update, status change and delete."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ....domain.entities.user import User
from ....domain.value_objects.vehicle_query import (
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    VehicleFilters,
    VehicleQuery,
    parse_leading_int,
)
from ....infrastructure.services import ServiceFactory
from ..middleware import get_current_user, get_service_factory
from ..schemas.common import envelope_response
from ..schemas.vehicle_schemas import (
    VehicleData,
    VehicleListData,
    VehicleRequest,
    VehicleResponse,
    VehicleStatusRequest,
)

router = APIRouter()


def _int_or_default(value: Optional[str], default: int) -> int:
    """Missing or non-numeric paging values fall back to the default."""
    parsed = parse_leading_int(value)
    return default if parsed is None else parsed


@router.get("")
async def list_vehicles(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    search: Optional[str] = Query(None),
    year_from: Optional[str] = Query(None, alias="yearFrom"),
    year_to: Optional[str] = Query(None, alias="yearTo"),
    status: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service_factory: ServiceFactory = Depends(get_service_factory)
):
    """Paginated, filtered and sorted vehicle listing."""
    query = VehicleQuery.create(
        page=_int_or_default(page, DEFAULT_PAGE),
        limit=_int_or_default(limit, DEFAULT_LIMIT),
        sort_by=sort_by,
        sort_order=sort_order,
        filters=VehicleFilters.from_raw(search=search, year_from=year_from, year_to=year_to, status=status)
    )
    async with service_factory.get_vehicle_query_service() as query_service:
        page_result = await query_service.list_vehicles(query)

    return envelope_response(data=VehicleListData.from_page(page_result))


@router.get("/{vehicle_id}")
async def get_vehicle(
    vehicle_id: str,
    current_user: User = Depends(get_current_user),
    service_factory: ServiceFactory = Depends(get_service_factory)
):
    async with service_factory.get_vehicle_service() as vehicle_service:
        vehicle = await vehicle_service.get_vehicle(vehicle_id)

    return envelope_response(data=VehicleData(vehicle=VehicleResponse.from_entity(vehicle)))


@router.post("", status_code=201)
async def create_vehicle(
    request: VehicleRequest,
    current_user: User = Depends(get_current_user),
    service_factory: ServiceFactory = Depends(get_service_factory)
):
    async with service_factory.get_vehicle_service() as vehicle_service:
        vehicle = await vehicle_service.create_vehicle(request.model_dump(), current_user.id)

    return envelope_response(
        status_code=201,
        message="Vehicle created successfully",
        data=VehicleData(vehicle=VehicleResponse.from_entity(vehicle))
    )


@router.put("/{vehicle_id}")
async def update_vehicle(
    vehicle_id: str,
    request: VehicleRequest,
    current_user: User = Depends(get_current_user),
    service_factory: ServiceFactory = Depends(get_service_factory)
):
    async with service_factory.get_vehicle_service() as vehicle_service:
        vehicle = await vehicle_service.update_vehicle(vehicle_id, request.model_dump(), current_user.id)

    return envelope_response(
        message="Vehicle updated successfully",
        data=VehicleData(vehicle=VehicleResponse.from_entity(vehicle))
    )


@router.patch("/{vehicle_id}/status")
async def update_vehicle_status(
    vehicle_id: str,
    request: VehicleStatusRequest,
    current_user: User = Depends(get_current_user),
    service_factory: ServiceFactory = Depends(get_service_factory)
):
    async with service_factory.get_vehicle_service() as vehicle_service:
        vehicle = await vehicle_service.update_vehicle_status(vehicle_id, request.status, current_user.id)

    return envelope_response(
        message="Vehicle status updated successfully",
        data=VehicleData(vehicle=VehicleResponse.from_entity(vehicle))
    )


@router.delete("/{vehicle_id}")
async def delete_vehicle(
    vehicle_id: str,
    current_user: User = Depends(get_current_user),
    service_factory: ServiceFactory = Depends(get_service_factory)
):
    async with service_factory.get_vehicle_service() as vehicle_service:
        await vehicle_service.delete_vehicle(vehicle_id)

    return envelope_response(message="Vehicle deleted successfully")
