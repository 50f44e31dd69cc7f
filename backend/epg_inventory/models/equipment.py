"""Equipment instance database model."""

from datetime import datetime

from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel

from epg_inventory.models.base import new_ulid, utc_now
from epg_inventory.models.types import ULIDType


class EquipmentInstance(SQLModel, table=True):
    """One physical piece of rental equipment.

    Only the fields needed to compute and guard a SKU live here; the rest of the
    catalog (models, photos, pricing) belongs to the content backend.
    """

    __tablename__ = "equipment_instances"

    # ULID stored as UUID
    id: str = Field(
        default_factory=new_ulid,
        max_length=26,
        sa_column=Column(ULIDType, primary_key=True),
    )

    # Canonical SKU, e.g. "EPG-LGT-CHV-0001"
    sku: str = Field(unique=True, index=True)

    # Master-data names as supplied by the operator
    category: str | None = None
    brand: str | None = None

    # Prefix codes the SKU was issued under
    category_prefix: str = Field(index=True)
    brand_prefix: str = Field(index=True)

    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False))
    updated_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False))
