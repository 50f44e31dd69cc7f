import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from epg_inventory.services.equipment.equipment_service import EquipmentInstanceData, EquipmentService
from epg_inventory.services.sku.admin_service import SkuAdminService
from epg_inventory.services.sku.allocator import SkuAllocator
from epg_inventory.services.sku.exceptions import SequenceNotFoundError, UnknownPrefixError


@pytest.fixture
def admin(session: AsyncSession, allocator: SkuAllocator) -> SkuAdminService:
    return SkuAdminService(session, allocator=allocator)


@pytest.fixture
def equipment(session: AsyncSession, allocator: SkuAllocator) -> EquipmentService:
    return EquipmentService(session, allocator=allocator)


async def test_preview(admin: SkuAdminService) -> None:
    assert await admin.preview("LGT", "CHV") == "EPG-LGT-CHV-0001"
    with pytest.raises(UnknownPrefixError):
        await admin.preview("LGT", "XXX")


async def test_list_sequences(admin: SkuAdminService, equipment: EquipmentService) -> None:
    await equipment.create_instance(EquipmentInstanceData(category="Lighting", brand="Chauvet"))
    await equipment.create_instance(EquipmentInstanceData(category="Lighting", brand="Chauvet"))
    await equipment.create_instance(EquipmentInstanceData(category="Audio", brand="Shure"))

    summaries = await admin.list_sequences()

    assert [(s.category_prefix, s.brand_prefix) for s in summaries] == [("AUD", "SHR"), ("LGT", "CHV")]
    lighting = summaries[1]
    assert lighting.category_name == "Lighting"
    assert lighting.brand_name == "Chauvet"
    assert lighting.last_issued == 2
    assert lighting.next_sku == "EPG-LGT-CHV-0003"
    assert lighting.remaining == 9997
    assert lighting.last_used is not None


async def test_statistics(admin: SkuAdminService, equipment: EquipmentService) -> None:
    await equipment.create_instance(EquipmentInstanceData(category="Lighting", brand="Chauvet"))
    await equipment.create_instance(EquipmentInstanceData(category="Lighting", brand="Martin"))
    await equipment.create_instance(EquipmentInstanceData(category="Lighting", brand="Martin"))
    await equipment.create_instance(EquipmentInstanceData(sku="EPG-AUD-QSC-0500"))

    stats = await admin.get_statistics()

    assert stats.total_instances == 4
    assert stats.total_issued == 3
    assert stats.total_sequences == 2
    assert list(stats.sequences_by_category) == ["LGT"]
    assert [(b.brand_prefix, b.last_issued) for b in stats.sequences_by_category["LGT"]] == [("CHV", 1), ("MRT", 2)]
    assert stats.last_used is not None


async def test_statistics_empty(admin: SkuAdminService) -> None:
    stats = await admin.get_statistics()

    assert stats.total_instances == 0
    assert stats.total_sequences == 0
    assert stats.sequences_by_category == {}
    assert stats.last_used is None


async def test_validate(admin: SkuAdminService, equipment: EquipmentService) -> None:
    await equipment.create_instance(EquipmentInstanceData(sku="EPG-LGT-CHV-0001"))

    available = await admin.validate(" epg-lgt-chv-0002")
    taken = await admin.validate("EPG-LGT-CHV-0001")
    malformed = await admin.validate("EPG-LGT-0001")

    assert available.is_available and available.sku == "EPG-LGT-CHV-0002"
    assert not taken.is_available and "already exists" in taken.message
    assert not malformed.is_available and malformed.sku == "EPG-LGT-0001"


async def test_reset(admin: SkuAdminService, equipment: EquipmentService) -> None:
    for _ in range(3):
        await equipment.create_instance(EquipmentInstanceData(category="Lighting", brand="Chauvet"))

    result = await admin.reset_sequence("lgt", "chv", 10)

    assert (result.old_sequence, result.new_sequence) == (3, 10)
    assert result.next_sku == "EPG-LGT-CHV-0011"
    assert await admin.preview("LGT", "CHV") == "EPG-LGT-CHV-0011"


async def test_reset_unused_pair(admin: SkuAdminService) -> None:
    with pytest.raises(SequenceNotFoundError):
        await admin.reset_sequence("LGT", "CHV")


async def test_toggle_auto_generation(admin: SkuAdminService) -> None:
    assert (await admin.auto_generation_status()).enabled

    status = await admin.toggle_auto_generation(False)
    assert not status.enabled
    assert not status.stored_enabled
    assert not status.forced_by_environment

    assert (await admin.toggle_auto_generation(True)).enabled


def test_prefixes(admin: SkuAdminService) -> None:
    prefixes = admin.prefixes()
    assert prefixes["categories"]["Lighting"] == "LGT"
    assert prefixes["brands"]["Chauvet Professional"] == "CHV"
