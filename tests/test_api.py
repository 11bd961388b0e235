"""
HTTP tests: FastAPI TestClient against a temporary SQLite database.
"""

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import inspect

import app.api.settings as settings_api
import main
from app.core.database import build_engine
from app.core.errors import StoreError
from app.services.bulk import BulkUpdateCoordinator
from app.services.store import SqlItemStore


def intake(client, **payload):
    payload.setdefault("photos", ["https://cdn.example.com/p/1.jpg"])
    r = client.post("/items/", json=payload)
    assert r.status_code == 201, r.text
    return r.json()


def tag_sea(client, item_id, customer_id=1):
    r = client.post(
        f"/items/{item_id}/tag",
        json={"customer_id": customer_id, "shipping_method": "sea", "length": 100, "width": 50, "height": 40},
    )
    assert r.status_code == 200, r.text
    return r.json()


class TestItemsApi:

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_intake_and_get(self, client):
        created = intake(client, tracking_number="TRK-1", name="Blender")

        r = client.get(f"/items/{created['id']}")
        assert r.status_code == 200
        body = r.json()
        assert body["status"] == "china_warehouse"
        assert body["thumbnail_url"] == "https://cdn.example.com/p/1.jpg"
        assert body["photos"] == [{"url": "https://cdn.example.com/p/1.jpg", "order": 0}]

    def test_unknown_item_is_404(self, client):
        assert client.get("/items/999").status_code == 404

    def test_intake_rejects_unknown_fields(self, client):
        r = client.post("/items/", json={"photos": [], "cost_usd": 5})
        assert r.status_code == 422

    def test_tag_item(self, client):
        created = intake(client)
        tagged = tag_sea(client, created["id"])

        assert tagged["cbm"] == pytest.approx(0.2)
        assert tagged["cost_usd"] == pytest.approx(200.0)
        assert tagged["cost_cedis"] == pytest.approx(3000.0)

    def test_tag_validation_is_400_and_writes_nothing(self, client):
        created = intake(client)
        r = client.post(
            f"/items/{created['id']}/tag",
            json={"customer_id": 1, "shipping_method": "sea", "length": 100, "height": 40},
        )
        assert r.status_code == 400
        assert r.json()["detail"]["field"] == "width"
        assert client.get(f"/items/{created['id']}").json()["customer_id"] is None

    def test_tag_unknown_customer_is_404(self, client):
        created = intake(client)
        r = client.post(
            f"/items/{created['id']}/tag",
            json={"customer_id": 77, "shipping_method": "air", "weight": 1},
        )
        assert r.status_code == 404

    def test_patch_flags_and_customer(self, client):
        created = intake(client)
        tag_sea(client, created["id"])

        r = client.post(f"/items/{created['id']}/flags", json={"flag": "damaged", "value": True})
        assert r.json()["is_damaged"] is True

        r = client.delete(f"/items/{created['id']}/customer")
        assert r.json()["customer_id"] is None

        r = client.patch(f"/items/{created['id']}", json={})
        assert r.status_code == 400

    def test_clearing_required_measurement_is_400(self, client):
        created = intake(client)
        tag_sea(client, created["id"])

        r = client.patch(f"/items/{created['id']}", json={"width": None})
        assert r.status_code == 400
        assert r.json()["detail"]["field"] == "width"
        body = client.get(f"/items/{created['id']}").json()
        assert body["width"] == 50
        assert body["cost_usd"] == pytest.approx(200.0)

    def test_non_positive_measurement_is_422(self, client):
        created = intake(client)
        assert client.patch(f"/items/{created['id']}", json={"length": -5}).status_code == 422
        r = client.post(
            f"/items/{created['id']}/tag",
            json={"customer_id": 1, "shipping_method": "air", "weight": 0},
        )
        assert r.status_code == 422

    def test_batch_survives_tracking_lookup_failure(self, client, monkeypatch):
        a = intake(client, tracking_number="TRK-A")
        intake(client, tracking_number="TRK-B")

        async def unavailable(self, filters=None):
            raise StoreError("Store error: database is locked")

        monkeypatch.setattr(SqlItemStore, "list_items", unavailable)
        r = client.post(
            "/items/batch",
            json={
                "updates": [
                    {"identifier": "TRK-A", "item_id": a["id"], "patch": {"carton_number": "CTN-1"}},
                    {"identifier": "TRK-B", "tracking_number": "TRK-B", "patch": {"carton_number": "CTN-1"}},
                ]
            },
        )
        assert r.status_code == 200
        body = r.json()
        assert body["success_count"] == 1
        assert body["failure_count"] == 1
        assert body["results"][1]["message"] == "Store error: database is locked"

    def test_bulk_routes_map_store_errors(self, client, monkeypatch):
        async def down(self, *args, **kwargs):
            raise StoreError("Store error: connection refused")

        monkeypatch.setattr(BulkUpdateCoordinator, "apply_batch", down)
        monkeypatch.setattr(BulkUpdateCoordinator, "import_rows", down)

        r = client.post("/items/package", json={"item_ids": [1], "carton_number": "CTN-3"})
        assert r.status_code == 503
        r = client.post("/items/batch", json={"updates": [{"identifier": "x", "item_id": 1, "patch": {"name": "x"}}]})
        assert r.status_code == 503
        r = client.post("/items/import", json={"rows": [{"row_number": 2, "tracking_number": "T", "status": "in transit"}]})
        assert r.status_code == 503

    def test_list_filters(self, client):
        a = intake(client, tracking_number="TRK-A")
        intake(client, tracking_number="TRK-B")
        tag_sea(client, a["id"])

        r = client.get("/items/", params={"tagged": "true"})
        assert [i["id"] for i in r.json()] == [a["id"]]
        r = client.get("/items/", params={"status": "china_warehouse"})
        assert len(r.json()) == 2

    def test_delete(self, client):
        created = intake(client)
        assert client.delete(f"/items/{created['id']}").status_code == 204
        assert client.delete(f"/items/{created['id']}").status_code == 404

    def test_package(self, client):
        a = intake(client)
        b = intake(client)
        r = client.post("/items/package", json={"item_ids": [a["id"], b["id"]], "carton_number": "CTN-3"})
        assert r.json()["success_count"] == 2

    def test_batch(self, client):
        a = intake(client, tracking_number="TRK-A")
        c = intake(client, tracking_number="TRK-C")

        r = client.post(
            "/items/batch",
            json={
                "updates": [
                    {"identifier": "TRK-A", "item_id": a["id"], "patch": {"carton_number": "CTN-1"}},
                    {"identifier": "ghost", "item_id": 999, "patch": {"carton_number": "CTN-1"}},
                    {"identifier": "TRK-C", "tracking_number": "trk-c", "patch": {"carton_number": "CTN-1"}},
                ]
            },
        )
        body = r.json()
        assert r.status_code == 200
        assert body["success_count"] == 2
        assert body["failure_count"] == 1
        assert body["results"][1]["identifier"] == "ghost"
        assert client.get(f"/items/{c['id']}").json()["carton_number"] == "CTN-1"

    def test_import(self, client):
        intake(client, tracking_number="TRK-A")
        r = client.post(
            "/items/import",
            json={
                "rows": [
                    {"row_number": 2, "tracking_number": "TRK-A", "status": "Arrived Ghana"},
                    {"row_number": 3, "tracking_number": "TRK-A", "status": "bogus"},
                ]
            },
        )
        body = r.json()
        assert body["success_count"] == 1
        assert body["results"][1]["success"] is False


class TestContainersApi:

    def test_load_arrive_and_unload(self, client):
        items = [intake(client) for _ in range(3)]
        for i in items:
            tag_sea(client, i["id"])
        ids = [i["id"] for i in items]

        r = client.post("/containers/load", json={"item_ids": ids, "container_number": "cont-1"})
        assert r.status_code == 200
        assert r.json()["is_new_container"] is True

        containers = client.get("/containers/").json()
        assert len(containers) == 1
        assert containers[0]["item_count"] == 3
        assert containers[0]["status"] == "in_transit"

        client.patch(f"/items/{ids[0]}", json={"status": "arrived_ghana"})
        mixed = client.get("/containers/CONT-1").json()
        assert mixed["is_mixed_status"] is True
        assert mixed["status"] is None
        assert client.get("/containers/", params={"strict": "true"}).status_code == 409

        r = client.post("/containers/CONT-1/arrived")
        assert r.json()["updated_count"] == 2
        assert client.post("/containers/CONT-1/arrived").json()["updated_count"] == 0

        r = client.delete(f"/containers/CONT-1/items/{ids[2]}")
        assert r.status_code == 200
        assert r.json()["container_number"] is None
        assert r.json()["status"] == "china_warehouse"
        assert client.get("/containers/CONT-1").json()["item_count"] == 2

    def test_unknown_container(self, client):
        assert client.get("/containers/NOPE").status_code == 404
        assert client.post("/containers/NOPE/arrived").status_code == 404

    def test_bulk_status(self, client):
        a = intake(client)
        tag_sea(client, a["id"])
        client.post("/containers/load", json={"item_ids": [a["id"]], "container_number": "C-2"})

        r = client.post("/containers/C-2/status", json={"status": "ready_for_pickup"})
        assert r.json()["updated_count"] == 1
        r = client.post("/containers/C-2/status", json={"status": "china_warehouse"})
        assert r.status_code == 400


class TestSettingsApi:

    def test_rates_defaults_and_update(self, client):
        r = client.get("/settings/rates")
        assert r.json()["is_saved"] is False

        r = client.put("/settings/rates", json={"usd_to_ghs_rate": 16.5})
        assert r.status_code == 200
        assert r.json()["usd_to_ghs_rate"] == 16.5
        assert r.json()["is_saved"] is True

    def test_invalid_rate_rejected(self, client):
        assert client.put("/settings/rates", json={"usd_to_ghs_rate": 0}).status_code == 422

    def test_refresh(self, client, monkeypatch):
        async def fake_fetch():
            return 15.9

        monkeypatch.setattr(settings_api, "fetch_usd_ghs_rate", fake_fetch)
        r = client.post("/settings/rates/refresh")
        assert r.json()["usd_to_ghs_rate"] == 15.9

    def test_refresh_feed_down(self, client, monkeypatch):
        async def broken_fetch():
            raise httpx.ConnectError("no route to host")

        monkeypatch.setattr(settings_api, "fetch_usd_ghs_rate", broken_fetch)
        assert client.post("/settings/rates/refresh").status_code == 502


class TestReadOnlyApi:

    def test_customers(self, client):
        names = [c["name"] for c in client.get("/customers/").json()]
        assert names == ["Ama Owusu", "Kwame Mensah"]

    def test_dashboard(self, client):
        a = intake(client)
        intake(client)
        tag_sea(client, a["id"])

        summary = client.get("/dashboard/").json()
        assert summary["total_items"] == 2
        assert summary["untagged"] == 1
        assert summary["total_value_usd"] == 200.0
        assert summary["total_value_cedis"] == 3000.0


class TestAppStartup:

    def test_lifespan_creates_tables(self, tmp_path, monkeypatch):
        engine = build_engine(f"sqlite:///{tmp_path / 'startup.db'}")
        monkeypatch.setattr(main, "engine", engine)

        with TestClient(main.app) as client:
            assert client.get("/health").status_code == 200

        assert {"items", "item_photos", "customers"} <= set(inspect(engine).get_table_names())
        engine.dispose()
