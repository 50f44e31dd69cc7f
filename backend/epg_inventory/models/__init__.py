"""Database models."""

from sqlmodel import SQLModel

from epg_inventory.models.equipment import EquipmentInstance
from epg_inventory.models.sku_sequence import SkuSequence
from epg_inventory.models.system_setting import SystemSetting

__all__ = [
    "SQLModel",
    "EquipmentInstance",
    "SkuSequence",
    "SystemSetting",
]
