"""FastAPI dependencies for SKU admin service injection."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from epg_inventory.db import get_session
from epg_inventory.services.sku.admin_service import SkuAdminService


async def get_sku_admin_service(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SkuAdminService:
    """Get a SkuAdminService instance with the current session."""
    return SkuAdminService(session)


SkuAdminServiceDep = Annotated[SkuAdminService, Depends(get_sku_admin_service)]
