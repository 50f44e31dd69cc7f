"""Administrative SKU operations.

Thin layer over the sequence store and allocator for the admin endpoints and
the CLI. It adds no invariants of its own. Reset is destructive and should sit
behind the caller's access control.
"""

from dataclasses import dataclass, field
from datetime import datetime

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from epg_inventory.models.base import utc_now
from epg_inventory.models.equipment import EquipmentInstance
from epg_inventory.services.sku.allocator import SkuAllocator
from epg_inventory.services.sku.codec import normalize
from epg_inventory.services.sku.exceptions import DuplicateSKUError, MalformedSKUError, SequenceExhaustedError
from epg_inventory.services.sku.sequence_store import SequenceStore
from epg_inventory.services.sku.settings_service import AutoGenerationStatus

logger = structlog.get_logger(__name__)

UNKNOWN_NAME = "Unknown"


@dataclass(frozen=True)
class SequenceSummary:
    """One counter enriched for display."""

    category_prefix: str
    brand_prefix: str
    category_name: str
    brand_name: str
    last_issued: int
    last_used: datetime | None
    next_sku: str | None  # None once an exhausted counter can issue no more
    remaining: int


@dataclass(frozen=True)
class BrandSequenceStats:
    brand_prefix: str
    last_issued: int
    remaining: int
    last_used: datetime | None


@dataclass(frozen=True)
class SkuStatistics:
    total_instances: int
    total_issued: int
    total_sequences: int
    sequences_by_category: dict[str, list[BrandSequenceStats]] = field(default_factory=dict)
    last_used: datetime | None = None
    generated_at: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class ValidationResult:
    sku: str
    is_available: bool
    message: str


@dataclass(frozen=True)
class ResetResult:
    category_prefix: str
    brand_prefix: str
    old_sequence: int
    new_sequence: int
    next_sku: str | None


class SkuAdminService:
    """Preview, statistics, reset and toggle operations."""

    def __init__(self, session: AsyncSession, *, allocator: SkuAllocator | None = None):
        self.session = session
        self.allocator = allocator or SkuAllocator(session)

    @property
    def sequences(self) -> SequenceStore:
        return self.allocator.sequences

    def _next_sku(self, category_prefix: str, brand_prefix: str, last_issued: int) -> str | None:
        try:
            return self.allocator.codec.render(category_prefix, brand_prefix, last_issued + 1)
        except SequenceExhaustedError:
            return None

    async def preview(self, category_prefix: str, brand_prefix: str) -> str:
        return await self.allocator.preview_sku(category_prefix, brand_prefix)

    async def list_sequences(self) -> list[SequenceSummary]:
        resolver = self.allocator.resolver
        codec = self.allocator.codec
        return [
            SequenceSummary(
                category_prefix=seq.category_prefix,
                brand_prefix=seq.brand_prefix,
                category_name=resolver.category_name(seq.category_prefix) or UNKNOWN_NAME,
                brand_name=resolver.brand_name(seq.brand_prefix) or UNKNOWN_NAME,
                last_issued=seq.last_issued,
                last_used=seq.last_used,
                next_sku=self._next_sku(seq.category_prefix, seq.brand_prefix, seq.last_issued),
                remaining=codec.remaining(seq.last_issued),
            )
            for seq in await self.sequences.list_sequences()
        ]

    async def get_statistics(self) -> SkuStatistics:
        codec = self.allocator.codec
        sequences = await self.sequences.list_sequences()

        count_result = await self.session.execute(select(func.count()).select_from(EquipmentInstance))
        total_instances = count_result.scalar() or 0

        by_category: dict[str, list[BrandSequenceStats]] = {}
        for seq in sequences:
            by_category.setdefault(seq.category_prefix, []).append(
                BrandSequenceStats(
                    brand_prefix=seq.brand_prefix,
                    last_issued=seq.last_issued,
                    remaining=codec.remaining(seq.last_issued),
                    last_used=seq.last_used,
                )
            )

        used = [seq.last_used for seq in sequences if seq.last_used is not None]
        return SkuStatistics(
            total_instances=total_instances,
            total_issued=sum(seq.last_issued for seq in sequences),
            total_sequences=len(sequences),
            sequences_by_category=by_category,
            last_used=max(used) if used else None,
        )

    async def validate(self, candidate_sku: str) -> ValidationResult:
        """Dry-run manual validation; reports instead of raising on bad input."""
        sku = normalize(candidate_sku)
        try:
            sku = await self.allocator.validate_manual_sku(candidate_sku)
        except (MalformedSKUError, DuplicateSKUError) as e:
            return ValidationResult(sku=sku, is_available=False, message=str(e))
        return ValidationResult(sku=sku, is_available=True, message="SKU is valid and available")

    async def reset_sequence(self, category_prefix: str, brand_prefix: str, last_issued: int = 0) -> ResetResult:
        """Reset a counter, zero by default.

        Raises:
            SequenceNotFoundError: if the pair has never been used
        """
        category_prefix = normalize(category_prefix)
        brand_prefix = normalize(brand_prefix)
        old_value, new_value = await self.sequences.reset_sequence(category_prefix, brand_prefix, last_issued)

        logger.warning(
            "SKU sequence reset",
            category_prefix=category_prefix,
            brand_prefix=brand_prefix,
            old_sequence=old_value,
            new_sequence=new_value,
        )
        return ResetResult(
            category_prefix=category_prefix,
            brand_prefix=brand_prefix,
            old_sequence=old_value,
            new_sequence=new_value,
            next_sku=self._next_sku(category_prefix, brand_prefix, new_value),
        )

    async def toggle_auto_generation(self, enabled: bool) -> AutoGenerationStatus:
        return await self.allocator.auto_generation.set_enabled(enabled)

    async def auto_generation_status(self) -> AutoGenerationStatus:
        return await self.allocator.auto_generation.status()

    def prefixes(self) -> dict[str, dict[str, str]]:
        resolver = self.allocator.resolver
        return {
            "categories": resolver.category_prefixes(),
            "brands": resolver.brand_prefixes(),
        }
