"""Dashboard endpoints."""

from fastapi import APIRouter, Depends

from ....infrastructure.services import ServiceFactory
from ..middleware import get_current_user, get_service_factory
from ..schemas.common import envelope_response
from ..schemas.vehicle_schemas import DashboardMetricsResponse

router = APIRouter(dependencies=[Depends(get_current_user)])


@router.get("/metrics")
async def get_metrics(service_factory: ServiceFactory = Depends(get_service_factory)):
    """Total users, total vehicles and vehicles currently available."""
    async with service_factory.get_dashboard_service() as dashboard_service:
        metrics = await dashboard_service.get_metrics()

    return envelope_response(data=DashboardMetricsResponse.from_metrics(metrics))
