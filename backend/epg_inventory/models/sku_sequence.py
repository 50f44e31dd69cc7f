"""SKU sequence counter model."""

from datetime import datetime

from sqlalchemy import Column, DateTime, UniqueConstraint
from sqlmodel import Field, SQLModel

from epg_inventory.models.base import utc_now

SKU_SEQUENCE_PAIR_CONSTRAINT = UniqueConstraint(
    "category_prefix", "brand_prefix", name="uq_sku_sequence_prefix_pair"
)


class SkuSequence(SQLModel, table=True):
    """Last issued sequence number for one (category, brand) prefix pair.

    Incremented with a single UPDATE ... RETURNING so concurrent requests, even
    from separate processes, never receive the same number.
    """

    __tablename__ = "sku_sequences"
    __table_args__ = (SKU_SEQUENCE_PAIR_CONSTRAINT,)

    id: int | None = Field(default=None, primary_key=True)
    category_prefix: str = Field(max_length=8)
    brand_prefix: str = Field(max_length=8)
    last_issued: int = Field(default=0)
    last_used: datetime | None = Field(default=None, sa_column=Column(DateTime(timezone=True), nullable=True))
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False))
