"""HTTP tests for POST /api/v1/products and GET /health."""

import uuid
from datetime import datetime

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.routers import health as health_router
from app.db import session as db
from app.domain.repositories.product_repo import ProductRepo

URL = "/api/v1/products"
EXAMPLE = {"qrCodeId": "QR-1001", "productType": "ELECTRONICS", "attributes": {"voltage": "220V"}}


async def _count_products(sessionmaker) -> int:
    async with sessionmaker() as s:
        return await ProductRepo(s).count()


class TestCreateProductEndpoint:

    async def test_create_returns_201_with_representation(self, client):
        resp = await client.post(URL, json=EXAMPLE)

        assert resp.status_code == 201
        body = resp.json()
        uuid.UUID(body["id"])
        assert body["qrCodeId"] == "QR-1001"
        assert body["productType"] == "ELECTRONICS"
        assert body["name"]
        assert body["attributes"] == {"voltage": "220V"}
        assert "description" not in body

    async def test_repeated_request_returns_409(self, client, sessionmaker):
        assert (await client.post(URL, json=EXAMPLE)).status_code == 201

        resp = await client.post(URL, json=EXAMPLE)

        assert resp.status_code == 409
        body = resp.json()
        assert body["status"] == 409
        assert body["path"] == URL
        assert "QR-1001" in body["message"]
        datetime.fromisoformat(body["timestamp"].replace("Z", "+00:00"))
        assert await _count_products(sessionmaker) == 1

    @pytest.mark.parametrize("attributes", [None, {}])
    async def test_absent_attributes_yield_empty_mapping(self, client, attributes):
        resp = await client.post(URL, json={"qrCodeId": "QR-2", "productType": "FOOD", "attributes": attributes})
        assert resp.status_code == 201
        assert resp.json()["attributes"] == {}

    async def test_attributes_field_may_be_omitted(self, client):
        resp = await client.post(URL, json={"qrCodeId": "QR-3", "productType": "TOOLS"})
        assert resp.status_code == 201
        assert resp.json()["attributes"] == {}

    async def test_create_without_attributes_is_stored_and_returned(self, client, sessionmaker):
        resp = await client.post(URL, json={"qrCodeId": "QR-1001", "productType": "ELECTRONICS"})

        assert resp.status_code == 201
        body = resp.json()
        assert body["attributes"] == {}

        async with sessionmaker() as s:
            stored = await ProductRepo(s).get_by_qr_code("QR-1001")
        assert stored is not None
        assert str(stored.id) == body["id"]
        assert stored.product_type.value == "ELECTRONICS"
        assert stored.attribute_map() == {}

    async def test_storage_failure_returns_500_api_error(self, client, sessionmaker, monkeypatch):
        async def _locked(self, *args, **kwargs):
            raise OperationalError("SELECT products.id ...", {}, Exception("database is locked"))

        monkeypatch.setattr(AsyncSession, "execute", _locked)
        resp = await client.post(URL, json=EXAMPLE)
        monkeypatch.undo()

        assert resp.status_code == 500
        body = resp.json()
        assert body["status"] == 500
        assert body["path"] == URL
        assert "database is locked" in body["message"]
        assert await _count_products(sessionmaker) == 0

    @pytest.mark.parametrize(
        "payload, field",
        [
            ({"qrCodeId": "", "productType": "ELECTRONICS"}, "qrCodeId"),
            ({"productType": "ELECTRONICS"}, "qrCodeId"),
            ({"qrCodeId": "QR-4"}, "productType"),
            ({"qrCodeId": "QR-4", "productType": "SPACESHIP"}, "productType"),
            ({"qrCodeId": "QR-4", "productType": "FOOD", "attributes": {"weight": 5}}, "attributes"),
        ],
    )
    async def test_invalid_request_is_rejected_before_persistence(self, client, sessionmaker, payload, field):
        resp = await client.post(URL, json=payload)

        assert resp.status_code == 400
        body = resp.json()
        assert body["status"] == 400
        assert body["path"] == URL
        assert field in body["message"]
        assert await _count_products(sessionmaker) == 0


class TestHealthEndpoint:

    async def test_health_reports_database_ok(self, client, engine, monkeypatch):
        monkeypatch.setattr(db, "_engine", engine)

        resp = await client.get("/health")

        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ok"
        assert body["checks"]["database"] == "ok"
        assert body["checks"]["naming"] == "skipped"

    async def test_health_reports_error_without_database(self, client, monkeypatch):
        monkeypatch.setattr(db, "_engine", None)

        body = (await client.get("/health")).json()

        assert body["status"] == "error"
        assert body["checks"]["database"].startswith("error")

    async def test_git_sha_is_resolved_once(self, client, engine, monkeypatch):
        calls = []

        def _check_output(cmd, **kwargs):
            calls.append(cmd)
            return b"abc1234\n"

        monkeypatch.setattr(db, "_engine", engine)
        monkeypatch.setattr(health_router.subprocess, "check_output", _check_output)
        health_router._git_sha.cache_clear()
        try:
            first = (await client.get("/health")).json()
            second = (await client.get("/health")).json()
        finally:
            health_router._git_sha.cache_clear()

        assert first["checks"]["version"] == second["checks"]["version"] == "abc1234"
        assert len(calls) == 1
