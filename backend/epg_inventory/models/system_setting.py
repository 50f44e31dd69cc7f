"""Key/value system settings."""

from datetime import datetime

from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel

from epg_inventory.models.base import utc_now

DISABLE_AUTO_SKU_GENERATION_KEY = "disable_auto_sku_generation"


class SystemSetting(SQLModel, table=True):
    """Process-wide setting stored as a string value."""

    __tablename__ = "system_settings"

    key: str = Field(primary_key=True, max_length=100)
    value: str
    description: str | None = None
    updated_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False))
