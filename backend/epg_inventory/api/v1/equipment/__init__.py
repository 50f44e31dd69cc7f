"""Equipment-instance API package."""

from epg_inventory.api.v1.equipment.routes import router

__all__ = ["router"]
