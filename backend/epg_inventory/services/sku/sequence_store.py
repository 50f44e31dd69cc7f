"""Durable per-(category, brand) sequence counters.

The database is the only source of truth for "next number". Reservation is a
single UPDATE ... SET last_issued = last_issued + 1 ... RETURNING statement, so
the row lock taken by the UPDATE serializes concurrent callers across
processes. There is no read-then-write step and no in-process lock.

A reservation is committed immediately. If the caller fails afterwards the
number stays consumed: sequences are monotonic, not contiguous.
"""

import structlog
from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Executable

from epg_inventory.models.base import utc_now
from epg_inventory.models.sku_sequence import SkuSequence
from epg_inventory.services.sku.exceptions import SequenceNotFoundError

logger = structlog.get_logger(__name__)


class SequenceStore:
    """Counter table access for SKU allocation."""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _insert_if_missing(self, category_prefix: str, brand_prefix: str) -> Executable:
        """INSERT ... ON CONFLICT DO NOTHING for the dialect in use."""
        dialect = self.session.get_bind().dialect.name
        if dialect == "postgresql":
            insert = pg_insert
        elif dialect == "sqlite":
            insert = sqlite_insert  # type: ignore[assignment]
        else:
            raise NotImplementedError(f"Sequence store does not support dialect {dialect!r}")

        return (
            insert(SkuSequence)
            .values(
                category_prefix=category_prefix,
                brand_prefix=brand_prefix,
                last_issued=0,
                created_at=utc_now(),
            )
            .on_conflict_do_nothing(index_elements=["category_prefix", "brand_prefix"])
        )

    async def next_sequence(self, category_prefix: str, brand_prefix: str) -> int:
        """Atomically reserve and return the next number for a prefix pair.

        Creates the counter (last_issued=0) on first use, so the first call returns 1.
        """
        stmt = (
            update(SkuSequence)
            .where(
                SkuSequence.category_prefix == category_prefix,  # type: ignore[arg-type]
                SkuSequence.brand_prefix == brand_prefix,  # type: ignore[arg-type]
            )
            .values(last_issued=SkuSequence.last_issued + 1)
            .returning(SkuSequence.last_issued)  # type: ignore[arg-type]
            .execution_options(synchronize_session=False)
        )
        try:
            await self.session.execute(self._insert_if_missing(category_prefix, brand_prefix))
            result = await self.session.execute(stmt)
            sequence: int = result.scalar_one()
            await self.session.commit()
        except BaseException:
            await self.session.rollback()
            raise

        logger.debug(
            "Reserved SKU sequence",
            category_prefix=category_prefix,
            brand_prefix=brand_prefix,
            sequence=sequence,
        )
        return sequence

    async def peek_sequence(self, category_prefix: str, brand_prefix: str) -> int:
        """Return the last issued number without consuming one (0 if the pair is unused)."""
        stmt = select(SkuSequence.last_issued).where(
            SkuSequence.category_prefix == category_prefix,  # type: ignore[arg-type]
            SkuSequence.brand_prefix == brand_prefix,  # type: ignore[arg-type]
        )
        result = await self.session.execute(stmt)
        value = result.scalar_one_or_none()
        return value or 0

    async def reset_sequence(self, category_prefix: str, brand_prefix: str, last_issued: int = 0) -> tuple[int, int]:
        """Set a counter's last issued number, zero by default.

        Administrative and destructive: numbers below the previous value may be
        handed out again. Returns (old_value, new_value).

        Raises:
            ValueError: if last_issued is negative
            SequenceNotFoundError: if the pair has never been used
        """
        if last_issued < 0:
            raise ValueError("last_issued must not be negative")

        stmt = (
            select(SkuSequence)
            .where(
                SkuSequence.category_prefix == category_prefix,  # type: ignore[arg-type]
                SkuSequence.brand_prefix == brand_prefix,  # type: ignore[arg-type]
            )
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        try:
            result = await self.session.execute(stmt)
            record = result.scalars().first()
            if record is None:
                raise SequenceNotFoundError(category_prefix, brand_prefix)

            old_value = record.last_issued
            record.last_issued = last_issued
            await self.session.commit()
        except BaseException:
            await self.session.rollback()
            raise

        return old_value, last_issued

    async def list_sequences(self) -> list[SkuSequence]:
        """All counters ordered by category then brand prefix."""
        stmt = (
            select(SkuSequence)
            .order_by(
                SkuSequence.category_prefix,  # type: ignore[arg-type]
                SkuSequence.brand_prefix,  # type: ignore[arg-type]
            )
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def touch_last_used(self, category_prefix: str, brand_prefix: str) -> None:
        """Record a successful issuance time for a prefix pair."""
        stmt = (
            update(SkuSequence)
            .where(
                SkuSequence.category_prefix == category_prefix,  # type: ignore[arg-type]
                SkuSequence.brand_prefix == brand_prefix,  # type: ignore[arg-type]
            )
            .values(last_used=utc_now())
            .execution_options(synchronize_session=False)
        )
        try:
            await self.session.execute(stmt)
            await self.session.commit()
        except BaseException:
            await self.session.rollback()
            raise
