"""FastAPI dependencies for equipment service injection."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from epg_inventory.db import get_session
from epg_inventory.services.equipment.equipment_service import EquipmentService


async def get_equipment_service(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> EquipmentService:
    """Get an EquipmentService instance with the current session."""
    return EquipmentService(session)


EquipmentServiceDep = Annotated[EquipmentService, Depends(get_equipment_service)]
