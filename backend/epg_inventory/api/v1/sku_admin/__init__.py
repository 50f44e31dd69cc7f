"""SKU admin API package: preview, statistics, validation, reset and auto-generation toggle."""

from epg_inventory.api.v1.sku_admin.routes import router

__all__ = ["router"]
