import httpx
import pytest
from sqlalchemy.exc import OperationalError

from epg_inventory.models.base import new_ulid
from epg_inventory.services.sku.sequence_store import SequenceStore


async def create(client: httpx.AsyncClient, **payload: object) -> httpx.Response:
    return await client.post("/api/v1/equipment-instances", json=payload)


async def test_health(client: httpx.AsyncClient) -> None:
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


class TestEquipmentInstances:
    async def test_create_generates_sku(self, client: httpx.AsyncClient) -> None:
        response = await create(client, category="Lighting", brand="Chauvet")

        assert response.status_code == 201, response.text
        body = response.json()
        assert body["sku"] == "EPG-LGT-CHV-0001"
        assert body["category_prefix"] == "LGT"
        assert body["brand_prefix"] == "CHV"

    async def test_create_survives_last_used_failure(
        self, client: httpx.AsyncClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        async def failing_touch(store: SequenceStore, category_prefix: str, brand_prefix: str) -> None:
            await store.session.rollback()
            raise OperationalError("UPDATE sku_sequences", {}, Exception("database is locked"))

        monkeypatch.setattr(SequenceStore, "touch_last_used", failing_touch)

        response = await create(client, category="Lighting", brand="Chauvet")

        assert response.status_code == 201, response.text
        assert response.json()["sku"] == "EPG-LGT-CHV-0001"
        listing = (await client.get("/api/v1/equipment-instances")).json()
        assert listing["total"] == 1

    async def test_create_manual(self, client: httpx.AsyncClient) -> None:
        response = await create(client, category="Audio", brand="QSC", sku="epg-aud-qsc-0007")

        assert response.status_code == 201
        assert response.json()["sku"] == "EPG-AUD-QSC-0007"

    async def test_create_duplicate(self, client: httpx.AsyncClient) -> None:
        await create(client, sku="EPG-AUD-QSC-0007")

        response = await create(client, sku="EPG-AUD-QSC-0007")

        assert response.status_code == 409
        assert "already exists" in response.json()["detail"]

    async def test_create_malformed(self, client: httpx.AsyncClient) -> None:
        response = await create(client, sku="AUD-QSC-7")
        assert response.status_code == 422

    async def test_create_unknown_brand(self, client: httpx.AsyncClient) -> None:
        response = await create(client, category="Lighting", brand="Nobody")
        assert response.status_code == 422

    async def test_create_while_disabled(self, client: httpx.AsyncClient) -> None:
        await client.post("/api/v1/sku-admin/toggle-auto-generation", json={"enabled": False})

        response = await create(client, category="Lighting", brand="Chauvet")

        assert response.status_code == 409

    async def test_get_list_update_delete(self, client: httpx.AsyncClient) -> None:
        instance_id = (await create(client, category="Video", brand="ARRI")).json()["id"]

        response = await client.get(f"/api/v1/equipment-instances/{instance_id}")
        assert response.status_code == 200
        assert response.json()["sku"] == "EPG-VID-ARR-0001"

        response = await client.get("/api/v1/equipment-instances")
        assert response.json()["total"] == 1

        response = await client.patch(f"/api/v1/equipment-instances/{instance_id}", json={"sku": "EPG-VID-ARR-0500"})
        assert response.status_code == 200
        assert response.json()["sku"] == "EPG-VID-ARR-0500"

        response = await client.delete(f"/api/v1/equipment-instances/{instance_id}")
        assert response.status_code == 204

        response = await client.get(f"/api/v1/equipment-instances/{instance_id}")
        assert response.status_code == 404

    async def test_update_to_taken_sku(self, client: httpx.AsyncClient) -> None:
        await create(client, sku="EPG-LGT-CHV-0001")
        instance_id = (await create(client, sku="EPG-LGT-CHV-0002")).json()["id"]

        response = await client.patch(f"/api/v1/equipment-instances/{instance_id}", json={"sku": "EPG-LGT-CHV-0001"})

        assert response.status_code == 409

    async def test_update_clearing_sku(self, client: httpx.AsyncClient) -> None:
        instance_id = (await create(client, sku="EPG-LGT-CHV-0001")).json()["id"]

        response = await client.patch(f"/api/v1/equipment-instances/{instance_id}", json={"sku": ""})

        assert response.status_code == 422

    async def test_missing_instance(self, client: httpx.AsyncClient) -> None:
        response = await client.patch(f"/api/v1/equipment-instances/{new_ulid()}", json={"brand": "ADJ"})
        assert response.status_code == 404


class TestSkuAdmin:
    async def test_preview(self, client: httpx.AsyncClient) -> None:
        await create(client, category="Lighting", brand="Chauvet")
        await create(client, category="Lighting", brand="Chauvet")

        response = await client.get("/api/v1/sku-admin/preview", params={"category": "lgt", "brand": "chv"})

        assert response.status_code == 200
        assert response.json() == {"next_sku": "EPG-LGT-CHV-0003", "category": "LGT", "brand": "CHV"}

    async def test_preview_unknown_prefix(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/api/v1/sku-admin/preview", params={"category": "ZZZ", "brand": "CHV"})
        assert response.status_code == 422

    async def test_validate(self, client: httpx.AsyncClient) -> None:
        await create(client, sku="EPG-LGT-CHV-0001")

        taken = await client.post("/api/v1/sku-admin/validate", json={"sku": "epg-lgt-chv-0001"})
        free = await client.post("/api/v1/sku-admin/validate", json={"sku": "EPG-LGT-CHV-0002"})

        assert taken.json()["is_available"] is False
        assert free.json() == {"sku": "EPG-LGT-CHV-0002", "is_available": True, "message": "SKU is valid and available"}

    async def test_reset_and_sequences(self, client: httpx.AsyncClient) -> None:
        for _ in range(3):
            await create(client, category="Audio", brand="Shure")

        response = await client.post(
            "/api/v1/sku-admin/reset-sequence",
            json={"category": "AUD", "brand": "SHR", "last_issued": 20},
        )
        assert response.status_code == 200
        assert response.json()["old_sequence"] == 3
        assert response.json()["next_sku"] == "EPG-AUD-SHR-0021"

        response = await client.get("/api/v1/sku-admin/sequences")
        body = response.json()
        assert body["total"] == 1
        assert body["sequences"][0]["last_issued"] == 20
        assert body["sequences"][0]["brand_name"] == "Shure"

    async def test_reset_unknown_pair(self, client: httpx.AsyncClient) -> None:
        response = await client.post("/api/v1/sku-admin/reset-sequence", json={"category": "AUD", "brand": "SHR"})
        assert response.status_code == 404

    async def test_reset_rejects_negative(self, client: httpx.AsyncClient) -> None:
        response = await client.post(
            "/api/v1/sku-admin/reset-sequence",
            json={"category": "AUD", "brand": "SHR", "last_issued": -1},
        )
        assert response.status_code == 422

    async def test_statistics(self, client: httpx.AsyncClient) -> None:
        await create(client, category="Lighting", brand="Chauvet")
        await create(client, category="Audio", brand="QSC")

        body = (await client.get("/api/v1/sku-admin/statistics")).json()

        assert body["total_instances"] == 2
        assert body["total_issued"] == 2
        assert set(body["sequences_by_category"]) == {"AUD", "LGT"}

    async def test_auto_generation_toggle(self, client: httpx.AsyncClient) -> None:
        status = (await client.get("/api/v1/sku-admin/auto-generation-status")).json()
        assert status["auto_generation_enabled"] is True

        response = await client.post("/api/v1/sku-admin/toggle-auto-generation", json={"enabled": False})
        assert response.json()["auto_generation_enabled"] is False

        status = (await client.get("/api/v1/sku-admin/auto-generation-status")).json()
        assert status == {"auto_generation_enabled": False, "stored_enabled": False, "forced_by_environment": False}

    async def test_prefixes(self, client: httpx.AsyncClient) -> None:
        body = (await client.get("/api/v1/sku-admin/prefixes")).json()
        assert body["categories"]["Audio"] == "AUD"
        assert body["brands"]["Shure"] == "SHR"
