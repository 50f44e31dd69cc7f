"""API schemas for SKU admin endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field, field_serializer

from epg_inventory.services.sku.admin_service import (
    BrandSequenceStats,
    ResetResult,
    SequenceSummary,
    SkuStatistics,
    ValidationResult,
)
from epg_inventory.services.sku.settings_service import AutoGenerationStatus
from epg_inventory.utils.datetime_utils import to_api_timezone


def _serialize_optional_datetime(dt: datetime | None) -> str | None:
    localized_dt = to_api_timezone(dt)
    return localized_dt.isoformat() if localized_dt else None


# =============================================================================
# Request Schemas
# =============================================================================


class ValidateRequest(BaseModel):
    """Manual SKU to validate."""

    sku: str = Field(min_length=1)


class ResetSequenceRequest(BaseModel):
    """Counter reset request."""

    category: str = Field(min_length=1)
    brand: str = Field(min_length=1)
    last_issued: int = Field(default=0, ge=0)


class ToggleAutoGenerationRequest(BaseModel):
    """Auto-generation toggle request."""

    enabled: bool


# =============================================================================
# Response Schemas
# =============================================================================


class PreviewResponse(BaseModel):
    next_sku: str
    category: str
    brand: str


class ValidateResponse(BaseModel):
    sku: str
    is_available: bool
    message: str

    @classmethod
    def from_result(cls, result: ValidationResult) -> "ValidateResponse":
        return cls(sku=result.sku, is_available=result.is_available, message=result.message)


class ResetSequenceResponse(BaseModel):
    category: str
    brand: str
    old_sequence: int
    new_sequence: int
    next_sku: str | None

    @classmethod
    def from_result(cls, result: ResetResult) -> "ResetSequenceResponse":
        return cls(
            category=result.category_prefix,
            brand=result.brand_prefix,
            old_sequence=result.old_sequence,
            new_sequence=result.new_sequence,
            next_sku=result.next_sku,
        )


class SequenceResponse(BaseModel):
    """One sequence counter."""

    category_prefix: str
    brand_prefix: str
    category_name: str
    brand_name: str
    last_issued: int
    last_used: datetime | None
    next_sku: str | None
    remaining: int

    @field_serializer("last_used")
    def serialize_last_used(self, dt: datetime | None) -> str | None:
        """Serialize datetime to API timezone."""
        return _serialize_optional_datetime(dt)

    @classmethod
    def from_summary(cls, summary: SequenceSummary) -> "SequenceResponse":
        return cls(
            category_prefix=summary.category_prefix,
            brand_prefix=summary.brand_prefix,
            category_name=summary.category_name,
            brand_name=summary.brand_name,
            last_issued=summary.last_issued,
            last_used=summary.last_used,
            next_sku=summary.next_sku,
            remaining=summary.remaining,
        )


class SequenceListResponse(BaseModel):
    sequences: list[SequenceResponse]
    total: int


class BrandSequenceResponse(BaseModel):
    brand: str
    last_issued: int
    remaining: int
    last_used: datetime | None

    @field_serializer("last_used")
    def serialize_last_used(self, dt: datetime | None) -> str | None:
        """Serialize datetime to API timezone."""
        return _serialize_optional_datetime(dt)

    @classmethod
    def from_stats(cls, stats: BrandSequenceStats) -> "BrandSequenceResponse":
        return cls(
            brand=stats.brand_prefix,
            last_issued=stats.last_issued,
            remaining=stats.remaining,
            last_used=stats.last_used,
        )


class StatisticsResponse(BaseModel):
    total_instances: int
    total_issued: int
    total_sequences: int
    sequences_by_category: dict[str, list[BrandSequenceResponse]]
    last_used: datetime | None
    generated_at: datetime

    @field_serializer("last_used", "generated_at")
    def serialize_datetimes(self, dt: datetime | None) -> str | None:
        """Serialize datetime to API timezone."""
        return _serialize_optional_datetime(dt)

    @classmethod
    def from_statistics(cls, stats: SkuStatistics) -> "StatisticsResponse":
        return cls(
            total_instances=stats.total_instances,
            total_issued=stats.total_issued,
            total_sequences=stats.total_sequences,
            sequences_by_category={
                category: [BrandSequenceResponse.from_stats(s) for s in brands]
                for category, brands in stats.sequences_by_category.items()
            },
            last_used=stats.last_used,
            generated_at=stats.generated_at,
        )


class AutoGenerationResponse(BaseModel):
    auto_generation_enabled: bool
    stored_enabled: bool
    forced_by_environment: bool

    @classmethod
    def from_status(cls, status: AutoGenerationStatus) -> "AutoGenerationResponse":
        return cls(
            auto_generation_enabled=status.enabled,
            stored_enabled=status.stored_enabled,
            forced_by_environment=status.forced_by_environment,
        )


class PrefixesResponse(BaseModel):
    categories: dict[str, str]
    brands: dict[str, str]
