"""API schemas for equipment-instance endpoints."""

from datetime import datetime

from pydantic import BaseModel, field_serializer

from epg_inventory.models.equipment import EquipmentInstance
from epg_inventory.services.equipment.equipment_service import EquipmentInstanceData
from epg_inventory.utils.datetime_utils import to_api_timezone


class EquipmentInstanceCreate(BaseModel):
    """Create payload. Leave sku empty to auto-generate one."""

    category: str | None = None
    brand: str | None = None
    sku: str | None = None
    skip_auto_sku: bool = False

    def to_data(self) -> EquipmentInstanceData:
        return EquipmentInstanceData(
            category=self.category,
            brand=self.brand,
            sku=self.sku,
            skip_auto_sku=self.skip_auto_sku,
        )


class EquipmentInstanceUpdate(BaseModel):
    """Partial update payload. Only fields that are sent are changed."""

    category: str | None = None
    brand: str | None = None
    sku: str | None = None


class EquipmentInstanceResponse(BaseModel):
    id: str
    sku: str
    category: str | None
    brand: str | None
    category_prefix: str
    brand_prefix: str
    created_at: datetime
    updated_at: datetime

    @field_serializer("created_at", "updated_at")
    def serialize_datetimes(self, dt: datetime) -> str:
        """Serialize datetime to API timezone."""
        localized_dt = to_api_timezone(dt)
        assert localized_dt is not None
        return localized_dt.isoformat()

    @classmethod
    def from_model(cls, instance: EquipmentInstance) -> "EquipmentInstanceResponse":
        return cls(
            id=instance.id,
            sku=instance.sku,
            category=instance.category,
            brand=instance.brand,
            category_prefix=instance.category_prefix,
            brand_prefix=instance.brand_prefix,
            created_at=instance.created_at,
            updated_at=instance.updated_at,
        )


class EquipmentInstanceListResponse(BaseModel):
    instances: list[EquipmentInstanceResponse]
    total: int
