"""SKU allocation.

Decides between auto-generation and manual validation for one equipment
instance:

    START -> manual SKU supplied? -> VALIDATE -> ACCEPT
          -> otherwise -> RESOLVE_PREFIXES -> RESERVE_SEQUENCE -> RENDER
                       -> COLLISION_CHECK -> ACCEPT
    any failing step -> REJECTED (error raised to the caller)

There is no retry loop here. The atomic counter increment is what keeps
generated SKUs unique; the collision check only catches a counter that was
reset or restored from an old backup. Callers own the decision to retry the
whole create request.
"""

from typing import Protocol

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from epg_inventory.models.equipment import EquipmentInstance
from epg_inventory.services.exceptions import ServiceError
from epg_inventory.services.sku.audit import AllocationAudit, AllocationMode
from epg_inventory.services.sku.codec import SkuCodec, get_sku_codec, normalize
from epg_inventory.services.sku.exceptions import (
    AutoGenerationDisabledError,
    DuplicateSKUError,
    SKUCollisionError,
)
from epg_inventory.services.sku.prefixes import PrefixResolver, get_prefix_resolver
from epg_inventory.services.sku.sequence_store import SequenceStore
from epg_inventory.services.sku.settings_service import AutoGenerationSettings

logger = structlog.get_logger(__name__)


class SkuRequest(Protocol):
    """Fields of an equipment-instance payload the allocator reads."""

    sku: str | None
    category: str | None
    brand: str | None


class SkuAllocator:
    """Produces or validates the SKU for an equipment instance.

    Usage:
        allocator = SkuAllocator(session)
        sku = await allocator.generate_sku(payload)
        sku = await allocator.validate_manual_sku(" epg-lgt-chv-0042 ", exclude_instance_id=instance.id)
        sku = await allocator.preview_sku("LGT", "CHV")
    """

    def __init__(
        self,
        session: AsyncSession,
        *,
        resolver: PrefixResolver | None = None,
        codec: SkuCodec | None = None,
        auto_generation: AutoGenerationSettings | None = None,
        audit: AllocationAudit | None = None,
    ):
        self.session = session
        self.resolver = resolver or get_prefix_resolver()
        self.codec = codec or get_sku_codec()
        self.sequences = SequenceStore(session)
        self.auto_generation = auto_generation or AutoGenerationSettings(session)
        self.audit = audit or AllocationAudit()

    async def sku_exists(self, sku: str, *, exclude_instance_id: str | None = None) -> bool:
        """Check whether any instance (other than the excluded one) holds the SKU."""
        stmt = select(EquipmentInstance.id).where(EquipmentInstance.sku == sku)
        if exclude_instance_id is not None:
            stmt = stmt.where(EquipmentInstance.id != exclude_instance_id)
        result = await self.session.execute(stmt.limit(1))
        return result.first() is not None

    async def generate_sku(self, instance_data: SkuRequest, force_manual: bool = False) -> str:
        """Return the SKU a new instance should be persisted with.

        A non-blank instance_data.sku (or force_manual) takes the manual path;
        otherwise a new SKU is generated from the category and brand.

        Raises:
            AutoGenerationDisabledError: no manual SKU while auto-generation is off or skipped
            MalformedSKUError / DuplicateSKUError: manual SKU rejected
            UnknownPrefixError: category or brand has no registered code
            SKUCollisionError: generated SKU already held by an instance
            SequenceExhaustedError: sequence outgrew its width and widening is disabled
        """
        manual_sku = (instance_data.sku or "").strip()

        if force_manual or manual_sku:
            return await self._accept_manual(manual_sku)

        try:
            if not await self.auto_generation.is_enabled():
                raise AutoGenerationDisabledError("Auto SKU generation is disabled and no manual SKU provided")

            category_prefix = self.resolver.resolve_category_prefix(instance_data.category)
            brand_prefix = self.resolver.resolve_brand_prefix(instance_data.brand)
            sequence = await self.sequences.next_sequence(category_prefix, brand_prefix)
            sku = self.codec.render(category_prefix, brand_prefix, sequence)

            if await self.sku_exists(sku):
                raise SKUCollisionError(sku)
        except ServiceError as e:
            self.audit.rejected(e, mode=AllocationMode.AUTO, sku=getattr(e, "sku", None))
            raise

        self.audit.accepted(
            sku,
            mode=AllocationMode.AUTO,
            category_prefix=category_prefix,
            brand_prefix=brand_prefix,
        )
        return sku

    async def _accept_manual(self, candidate: str) -> str:
        try:
            if not candidate:
                raise AutoGenerationDisabledError("A manual SKU is required when auto-generation is skipped")
            sku = await self.validate_manual_sku(candidate)
        except ServiceError as e:
            self.audit.rejected(e, mode=AllocationMode.MANUAL, sku=normalize(candidate) or None)
            raise

        parsed = self.codec.parse(sku)
        self.audit.accepted(
            sku,
            mode=AllocationMode.MANUAL,
            category_prefix=parsed.category_prefix,
            brand_prefix=parsed.brand_prefix,
        )
        return sku

    async def validate_manual_sku(self, candidate_sku: str, *, exclude_instance_id: str | None = None) -> str:
        """Normalize a manually supplied SKU and check it can be assigned.

        Args:
            candidate_sku: SKU as typed by the operator
            exclude_instance_id: instance being updated, ignored in the uniqueness check

        Returns:
            The normalized SKU

        Raises:
            MalformedSKUError: if the SKU does not match the canonical grammar
            DuplicateSKUError: if another instance already holds it
        """
        sku = normalize(candidate_sku)
        self.codec.parse(sku)

        if await self.sku_exists(sku, exclude_instance_id=exclude_instance_id):
            raise DuplicateSKUError(sku)
        return sku

    async def preview_sku(self, category_prefix: str, brand_prefix: str) -> str:
        """Next SKU that auto-generation would issue for the pair, without consuming it.

        Raises:
            UnknownPrefixError: if either code is not registered
        """
        category_prefix = normalize(category_prefix)
        brand_prefix = normalize(brand_prefix)
        self.resolver.require_known_prefixes(category_prefix, brand_prefix)

        last_issued = await self.sequences.peek_sequence(category_prefix, brand_prefix)
        return self.codec.render(category_prefix, brand_prefix, last_issued + 1)
