"""Catalog endpoints: marks and their models."""

from fastapi import APIRouter, Depends

from ....infrastructure.services import ServiceFactory
from ..middleware import get_current_user, get_service_factory
from ..schemas.common import envelope_response
from ..schemas.vehicle_schemas import (
    MarkListData,
    MarkResponse,
    MarkWithModelsListData,
    MarkWithModelsResponse,
    ModelListData,
    ModelResponse,
)

router = APIRouter(dependencies=[Depends(get_current_user)])


@router.get("")
async def list_marks(service_factory: ServiceFactory = Depends(get_service_factory)):
    async with service_factory.get_catalog_service() as catalog_service:
        marks = await catalog_service.list_marks()

    return envelope_response(data=MarkListData(marks=[MarkResponse.from_entity(m) for m in marks]))


@router.get("/with-models")
async def list_marks_with_models(service_factory: ServiceFactory = Depends(get_service_factory)):
    async with service_factory.get_catalog_service() as catalog_service:
        marks = await catalog_service.list_marks_with_models()

    return envelope_response(
        data=MarkWithModelsListData(marks=[MarkWithModelsResponse.from_entity(m) for m in marks])
    )


@router.get("/{mark_id}/models")
async def list_models_by_mark(
    mark_id: str,
    service_factory: ServiceFactory = Depends(get_service_factory)
):
    async with service_factory.get_catalog_service() as catalog_service:
        models = await catalog_service.list_models_by_mark(mark_id)

    return envelope_response(data=ModelListData(models=[ModelResponse.from_entity(m) for m in models]))
