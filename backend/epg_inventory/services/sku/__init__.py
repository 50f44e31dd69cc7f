"""SKU allocation services.

- prefixes: category/brand name -> prefix code lookup
- codec: canonical SKU rendering and parsing
- sequence_store: durable per-pair counters with atomic increment
- allocator: auto-generation and manual validation for one instance
- admin_service: preview, statistics, reset and toggle operations
"""

from epg_inventory.services.sku.admin_service import SkuAdminService
from epg_inventory.services.sku.allocator import SkuAllocator
from epg_inventory.services.sku.codec import ParsedSKU, SkuCodec
from epg_inventory.services.sku.prefixes import PrefixResolver
from epg_inventory.services.sku.sequence_store import SequenceStore

__all__ = [
    "ParsedSKU",
    "PrefixResolver",
    "SequenceStore",
    "SkuAdminService",
    "SkuAllocator",
    "SkuCodec",
]
