"""Equipment-instance write path.

Every create goes through the SKU allocator before the row is written, and
every update that touches the SKU is validated before the row is modified.
A failed allocation or validation aborts the write; nothing is persisted with
a missing or invalid SKU.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import structlog
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select
from ulid import ULID

from epg_inventory.models.base import utc_now
from epg_inventory.models.equipment import EquipmentInstance
from epg_inventory.services.equipment.exceptions import EquipmentNotFound
from epg_inventory.services.sku.allocator import SkuAllocator
from epg_inventory.services.sku.codec import normalize
from epg_inventory.services.sku.exceptions import DuplicateSKUError, MalformedSKUError
from epg_inventory.services.sku.sequence_store import SequenceStore

logger = structlog.get_logger(__name__)

UPDATABLE_FIELDS = frozenset({"sku", "category", "brand"})


@dataclass
class EquipmentInstanceData:
    """Payload for creating an equipment instance."""

    category: str | None = None
    brand: str | None = None
    sku: str | None = None  # Manual SKU; blank means auto-generate
    skip_auto_sku: bool = False  # Require a manual SKU for this instance


def _is_sku_conflict(error: IntegrityError) -> bool:
    return "sku" in str(error.orig).lower()


class EquipmentService:
    """Service for equipment-instance persistence.

    Usage:
        service = EquipmentService(session)
        instance = await service.create_instance(EquipmentInstanceData(category="Lighting", brand="Chauvet"))
        instance = await service.update_instance(instance.id, {"sku": "EPG-LGT-CHV-0100"})
    """

    def __init__(self, session: AsyncSession, *, allocator: SkuAllocator | None = None):
        self.session = session
        self.allocator = allocator or SkuAllocator(session)

    async def list_instances(self, *, skip: int = 0, limit: int = 50) -> tuple[list[EquipmentInstance], int]:
        """List instances with pagination. Returns (instances, total_count)."""
        statement = (
            select(EquipmentInstance)
            .offset(skip)
            .limit(limit)
            .order_by(EquipmentInstance.created_at.desc())  # type: ignore[attr-defined]
        )
        result = await self.session.execute(statement)
        instances = list(result.scalars().all())

        count_result = await self.session.execute(select(func.count()).select_from(EquipmentInstance))
        total = count_result.scalar() or 0

        return instances, total

    async def get_instance(self, instance_id: str) -> EquipmentInstance:
        try:
            ULID.from_str(instance_id)
        except ValueError:
            raise EquipmentNotFound()

        instance = await self.session.get(EquipmentInstance, instance_id)
        if instance is None:
            raise EquipmentNotFound()
        return instance

    async def create_instance(self, data: EquipmentInstanceData) -> EquipmentInstance:
        """Allocate a SKU and persist a new instance.

        Raises:
            AutoGenerationDisabledError, UnknownPrefixError, MalformedSKUError,
            DuplicateSKUError, SKUCollisionError, SequenceExhaustedError
        """
        auto_generated = not (data.sku and data.sku.strip()) and not data.skip_auto_sku

        sku = await self.allocator.generate_sku(data, force_manual=data.skip_auto_sku)
        parsed = self.allocator.codec.parse(sku)

        instance = EquipmentInstance(
            sku=sku,
            category=data.category,
            brand=data.brand,
            category_prefix=parsed.category_prefix,
            brand_prefix=parsed.brand_prefix,
        )
        self.session.add(instance)
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            # A concurrent request stored the same SKU between validation and commit
            if _is_sku_conflict(e):
                raise DuplicateSKUError(sku) from e
            raise

        logger.info(
            "Equipment instance created",
            instance_id=instance.id,
            sku=sku,
            auto_generated=auto_generated,
        )

        if auto_generated:
            await self._touch_sequence(parsed.category_prefix, parsed.brand_prefix)

        return instance

    async def _touch_sequence(self, category_prefix: str, brand_prefix: str) -> None:
        """Best-effort last_used bookkeeping; never fails the create.

        Runs in its own session so a rollback there cannot expire the instance
        that was just committed on the request session.
        """
        try:
            async with AsyncSession(self.session.bind, expire_on_commit=False) as touch_session:
                await SequenceStore(touch_session).touch_last_used(category_prefix, brand_prefix)
        except SQLAlchemyError as e:
            logger.warning(
                "Failed to update sequence last_used timestamp",
                category_prefix=category_prefix,
                brand_prefix=brand_prefix,
                error=str(e),
            )

    async def update_instance(self, instance_id: str, changes: Mapping[str, Any]) -> EquipmentInstance:
        """Apply changes to an instance.

        A changed SKU is validated (grammar and uniqueness, ignoring this
        instance) before anything is modified. Category and brand changes never
        re-issue a SKU.

        Raises:
            EquipmentNotFound, MalformedSKUError, DuplicateSKUError
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        instance = await self.get_instance(instance_id)
        old_sku = instance.sku
        new_sku: str | None = None

        if "sku" in changes:
            candidate = changes["sku"] or ""
            if not candidate.strip():
                raise MalformedSKUError(candidate, "SKU cannot be cleared")
            if normalize(candidate) != instance.sku:
                new_sku = await self.allocator.validate_manual_sku(candidate, exclude_instance_id=instance.id)

        if new_sku is not None:
            parsed = self.allocator.codec.parse(new_sku)
            instance.sku = new_sku
            instance.category_prefix = parsed.category_prefix
            instance.brand_prefix = parsed.brand_prefix
        if "category" in changes:
            instance.category = changes["category"]
        if "brand" in changes:
            instance.brand = changes["brand"]
        instance.updated_at = utc_now()

        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            if new_sku is not None and _is_sku_conflict(e):
                raise DuplicateSKUError(new_sku) from e
            raise

        if new_sku is not None:
            logger.info("Equipment instance SKU updated", instance_id=instance.id, old_sku=old_sku, new_sku=new_sku)
        return instance

    async def delete_instance(self, instance_id: str) -> None:
        instance = await self.get_instance(instance_id)
        sku = instance.sku
        await self.session.delete(instance)
        await self.session.commit()
        logger.info("Equipment instance deleted", instance_id=instance_id, sku=sku)
