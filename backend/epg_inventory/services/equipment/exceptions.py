"""Equipment domain exceptions."""

from epg_inventory.services.exceptions import NotFoundError


class EquipmentNotFound(NotFoundError):
    """Equipment instance not found."""

    pass
