"""Allocation outcome reporting.

Every accepted or rejected allocation attempt is reported here after the
decision is made. Nothing in the allocator reads it back.
"""

from enum import StrEnum

import structlog

logger = structlog.get_logger("epg_inventory.sku.audit")


class AllocationMode(StrEnum):
    """How a SKU was obtained."""

    AUTO = "auto"
    MANUAL = "manual"


class AllocationAudit:
    """Structured log sink for allocation attempts.

    Subclass or replace to forward outcomes elsewhere (metrics, audit table).
    """

    def accepted(self, sku: str, *, mode: AllocationMode, category_prefix: str, brand_prefix: str) -> None:
        logger.info(
            "SKU allocation accepted",
            sku=sku,
            mode=mode.value,
            category_prefix=category_prefix,
            brand_prefix=brand_prefix,
        )

    def rejected(self, error: Exception, *, mode: AllocationMode, sku: str | None = None) -> None:
        logger.warning(
            "SKU allocation rejected",
            sku=sku,
            mode=mode.value,
            error_type=type(error).__name__,
            error=str(error),
        )
