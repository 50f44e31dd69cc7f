"""Equipment-instance API endpoints."""

import structlog
from fastapi import APIRouter, HTTPException, Response

from epg_inventory.api.v1.equipment.dependencies import EquipmentServiceDep
from epg_inventory.api.v1.equipment.schemas import (
    EquipmentInstanceCreate,
    EquipmentInstanceListResponse,
    EquipmentInstanceResponse,
    EquipmentInstanceUpdate,
)
from epg_inventory.services.equipment.exceptions import EquipmentNotFound
from epg_inventory.services.exceptions import ConflictError, ValidationError

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["equipment"])


@router.get("/equipment-instances", response_model=EquipmentInstanceListResponse, operation_id="listEquipment")
async def list_instances(
    service: EquipmentServiceDep,
    skip: int = 0,
    limit: int = 50,
) -> EquipmentInstanceListResponse:
    """List equipment instances with pagination."""
    instances, total = await service.list_instances(skip=skip, limit=limit)
    return EquipmentInstanceListResponse(
        instances=[EquipmentInstanceResponse.from_model(i) for i in instances],
        total=total,
    )


@router.post(
    "/equipment-instances",
    response_model=EquipmentInstanceResponse,
    status_code=201,
    operation_id="createEquipment",
)
async def create_instance(
    payload: EquipmentInstanceCreate,
    service: EquipmentServiceDep,
) -> EquipmentInstanceResponse:
    """Create an equipment instance, generating its SKU unless one is supplied."""
    try:
        instance = await service.create_instance(payload.to_data())
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return EquipmentInstanceResponse.from_model(instance)


@router.get(
    "/equipment-instances/{instance_id}",
    response_model=EquipmentInstanceResponse,
    operation_id="getEquipment",
)
async def get_instance(
    instance_id: str,
    service: EquipmentServiceDep,
) -> EquipmentInstanceResponse:
    """Get a single equipment instance."""
    try:
        instance = await service.get_instance(instance_id)
    except EquipmentNotFound:
        raise HTTPException(status_code=404, detail="Equipment instance not found")

    return EquipmentInstanceResponse.from_model(instance)


@router.patch(
    "/equipment-instances/{instance_id}",
    response_model=EquipmentInstanceResponse,
    operation_id="updateEquipment",
)
async def update_instance(
    instance_id: str,
    payload: EquipmentInstanceUpdate,
    service: EquipmentServiceDep,
) -> EquipmentInstanceResponse:
    """Update category, brand or SKU. A new SKU must be valid and unused."""
    try:
        instance = await service.update_instance(instance_id, payload.model_dump(exclude_unset=True))
    except EquipmentNotFound:
        raise HTTPException(status_code=404, detail="Equipment instance not found")
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return EquipmentInstanceResponse.from_model(instance)


@router.delete("/equipment-instances/{instance_id}", status_code=204, operation_id="deleteEquipment")
async def delete_instance(
    instance_id: str,
    service: EquipmentServiceDep,
) -> Response:
    """Delete an equipment instance."""
    try:
        await service.delete_instance(instance_id)
    except EquipmentNotFound:
        raise HTTPException(status_code=404, detail="Equipment instance not found")

    return Response(status_code=204)
