"""SKU admin API endpoints.

Privilege checks for the destructive endpoints (reset, toggle) belong to the
access-control layer in front of this API.
"""

import structlog
from fastapi import APIRouter, HTTPException

from epg_inventory.api.v1.sku_admin.dependencies import SkuAdminServiceDep
from epg_inventory.api.v1.sku_admin.schemas import (
    AutoGenerationResponse,
    PrefixesResponse,
    PreviewResponse,
    ResetSequenceRequest,
    ResetSequenceResponse,
    SequenceListResponse,
    SequenceResponse,
    StatisticsResponse,
    ToggleAutoGenerationRequest,
    ValidateRequest,
    ValidateResponse,
)
from epg_inventory.services.sku.exceptions import SequenceExhaustedError, SequenceNotFoundError, UnknownPrefixError

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/sku-admin", tags=["sku-admin"])


@router.get("/preview", response_model=PreviewResponse, operation_id="previewSku")
async def preview(
    category: str,
    brand: str,
    service: SkuAdminServiceDep,
) -> PreviewResponse:
    """Show the next SKU for a category/brand prefix pair without consuming it."""
    try:
        next_sku = await service.preview(category, brand)
    except UnknownPrefixError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except SequenceExhaustedError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return PreviewResponse(next_sku=next_sku, category=category.strip().upper(), brand=brand.strip().upper())


@router.get("/statistics", response_model=StatisticsResponse, operation_id="getSkuStatistics")
async def statistics(service: SkuAdminServiceDep) -> StatisticsResponse:
    """Aggregate counter usage."""
    return StatisticsResponse.from_statistics(await service.get_statistics())


@router.post("/validate", response_model=ValidateResponse, operation_id="validateSku")
async def validate(
    request: ValidateRequest,
    service: SkuAdminServiceDep,
) -> ValidateResponse:
    """Check a manual SKU without assigning it."""
    return ValidateResponse.from_result(await service.validate(request.sku))


@router.post("/reset-sequence", response_model=ResetSequenceResponse, operation_id="resetSkuSequence")
async def reset_sequence(
    request: ResetSequenceRequest,
    service: SkuAdminServiceDep,
) -> ResetSequenceResponse:
    """Reset a counter (zero unless last_issued is given)."""
    try:
        result = await service.reset_sequence(request.category, request.brand, request.last_issued)
    except SequenceNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return ResetSequenceResponse.from_result(result)


@router.get("/sequences", response_model=SequenceListResponse, operation_id="listSkuSequences")
async def sequences(service: SkuAdminServiceDep) -> SequenceListResponse:
    """List all counters with their next SKU."""
    summaries = await service.list_sequences()
    return SequenceListResponse(
        sequences=[SequenceResponse.from_summary(s) for s in summaries],
        total=len(summaries),
    )


@router.post(
    "/toggle-auto-generation",
    response_model=AutoGenerationResponse,
    operation_id="toggleSkuAutoGeneration",
)
async def toggle_auto_generation(
    request: ToggleAutoGenerationRequest,
    service: SkuAdminServiceDep,
) -> AutoGenerationResponse:
    """Turn system-wide SKU auto-generation on or off."""
    return AutoGenerationResponse.from_status(await service.toggle_auto_generation(request.enabled))


@router.get(
    "/auto-generation-status",
    response_model=AutoGenerationResponse,
    operation_id="getSkuAutoGenerationStatus",
)
async def auto_generation_status(service: SkuAdminServiceDep) -> AutoGenerationResponse:
    """Current effective auto-generation state."""
    return AutoGenerationResponse.from_status(await service.auto_generation_status())


@router.get("/prefixes", response_model=PrefixesResponse, operation_id="listSkuPrefixes")
async def prefixes(service: SkuAdminServiceDep) -> PrefixesResponse:
    """Registered category and brand prefix codes."""
    return PrefixesResponse(**service.prefixes())
