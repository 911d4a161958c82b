"""HTTP tests for the paywall admin API."""

from __future__ import annotations

import pytest


@pytest.mark.asyncio
async def test_requires_bearer_token(client) -> None:
    missing = await client.get("/api/paywalls")
    wrong = await client.get("/api/paywalls", headers={"Authorization": "Bearer nope"})

    assert missing.status_code == 401
    assert wrong.status_code == 401
    assert wrong.json()["code"] == "unauthorized"


@pytest.mark.asyncio
async def test_unconfigured_token_disables_admin_api(client, services, admin_headers) -> None:
    services.config_service.admin.api_token = ""

    response = await client.get("/api/paywalls", headers=admin_headers)

    assert response.status_code == 500
    assert response.json()["code"] == "admin_not_configured"


@pytest.mark.asyncio
async def test_paywall_lifecycle(client, admin_headers) -> None:
    created = await client.post(
        "/api/paywalls", json={"name": "Capacity Program", "price": "500.00", "equipmentDeposit": "150.00"}, headers=admin_headers
    )
    assert created.status_code == 201
    paywall = created.json()
    assert paywall["slug"] == "capacity-program"
    assert paywall["isActive"] is True

    updated = await client.patch(f"/api/paywalls/{paywall['id']}", json={"price": "650.00"}, headers=admin_headers)
    assert updated.status_code == 200
    assert updated.json()["price"] == "650.00"
    assert updated.json()["equipmentDeposit"] == "150.00"

    toggled = await client.post(f"/api/paywalls/{paywall['id']}/toggle", headers=admin_headers)
    assert toggled.json()["isActive"] is False

    listed = await client.get("/api/paywalls", headers=admin_headers)
    assert [p["id"] for p in listed.json()] == [paywall["id"]]

    deleted = await client.delete(f"/api/paywalls/{paywall['id']}", headers=admin_headers)
    assert deleted.status_code == 204
    gone = await client.get(f"/api/paywalls/{paywall['id']}", headers=admin_headers)
    assert gone.status_code == 404


@pytest.mark.asyncio
async def test_duplicate_slug_conflicts(client, admin_headers) -> None:
    await client.post("/api/paywalls", json={"name": "Capacity Program"}, headers=admin_headers)

    response = await client.post("/api/paywalls", json={"name": "Capacity  Program!"}, headers=admin_headers)

    assert response.status_code == 409
    assert response.json()["code"] == "slug_taken"


@pytest.mark.asyncio
async def test_negative_price_is_rejected(client, admin_headers) -> None:
    response = await client.post("/api/paywalls", json={"name": "Bad", "price": "-1"}, headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["details"]["errors"]
