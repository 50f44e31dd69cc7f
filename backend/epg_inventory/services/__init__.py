"""Services module.

This module provides the service layer architecture:
- exceptions: Base service exceptions
- sku: Prefix resolution, SKU codec, sequence store, allocator and admin operations
- equipment: Equipment-instance write path that calls into the SKU allocator
"""
