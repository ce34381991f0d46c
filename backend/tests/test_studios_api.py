"""Test studio, invoice and payment plan endpoints."""
import pytest


async def _studio(client, studio_id, **fields):
    resp = await client.post("/v1/studios", json={"id": studio_id, "name": f"Studio {studio_id}", **fields})
    assert resp.status_code == 201
    return resp.json()


async def _tourist(client, studio_id=None):
    resp = await client.post("/v1/residents/tourist", json={
        "name": "Guest",
        "checkin": "2024-08-01",
        "checkout": "2024-08-03",
        "revenue_cents": 24000,
        "assigned_to": studio_id,
    })
    assert resp.status_code == 201
    return resp.json()["resident"]


@pytest.mark.asyncio
async def test_studio_crud(client):
    studio = await _studio(client, "S1", view="Courtyard", floor=2, room_grade="Platinum")
    assert studio["occupied"] is False
    assert studio["occupied_by"] is None

    resp = await client.post("/v1/studios", json={"id": "S1", "name": "Duplicate"})
    assert resp.status_code == 409

    resp = await client.patch("/v1/studios/S1", json={"view": "Garden"})
    assert resp.status_code == 200
    assert resp.json()["view"] == "Garden"

    assert (await client.get("/v1/studios/NOPE")).status_code == 404
    assert (await client.patch("/v1/studios/NOPE", json={"view": "Sea"})).status_code == 404

    resp = await client.delete("/v1/studios/S1")
    assert resp.status_code == 204
    assert (await client.get("/v1/studios/S1")).status_code == 404


@pytest.mark.asyncio
async def test_list_available(client):
    await _studio(client, "S1")
    await _studio(client, "S2")
    await _tourist(client, "S1")

    all_ids = [s["id"] for s in (await client.get("/v1/studios")).json()]
    free_ids = [s["id"] for s in (await client.get("/v1/studios", params={"available": True})).json()]

    assert all_ids == ["S1", "S2"]
    assert free_ids == ["S2"]


@pytest.mark.asyncio
async def test_occupied_studio_delete_conflicts(client):
    await _studio(client, "S1")
    await _tourist(client, "S1")

    resp = await client.delete("/v1/studios/S1")

    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_release_endpoint(client):
    await _studio(client, "S1")
    guest = await _tourist(client, "S1")

    resp = await client.post("/v1/studios/S1/release")

    assert resp.status_code == 200
    data = resp.json()
    assert data["released"] is True
    assert data["resident_type"] == "tourist"
    assert data["resident_id"] == guest["id"]
    assert data["studio"]["occupied"] is False

    guest = (await client.get(f"/v1/residents/tourist/{guest['id']}")).json()
    assert guest["assigned_to"] is None

    assert (await client.post("/v1/studios/NOPE/release")).status_code == 404


@pytest.mark.asyncio
async def test_occupancy_audit_endpoint(client):
    await _studio(client, "S1")
    await _studio(client, "S2")
    await _tourist(client, "S1")

    resp = await client.get("/v1/studios/occupancy/audit")

    assert resp.status_code == 200
    data = resp.json()
    assert data == {
        "consistent": True,
        "studios_checked": 2,
        "residents_checked": 1,
        "issues": [],
    }


@pytest.mark.asyncio
async def test_invoice_update(client):
    guest = await _tourist(client)
    invoices = (await client.get("/v1/invoices", params={"resident_type": "tourist"})).json()
    assert len(invoices) == 1
    invoice = invoices[0]
    assert invoice["tourist_id"] == guest["id"]
    assert invoice["description"] == "Short-term stay fees for Guest"

    resp = await client.patch(f"/v1/invoices/{invoice['id']}", json={"status": "paid"})
    assert resp.status_code == 200
    assert resp.json()["status"] == "paid"

    paid = (await client.get("/v1/invoices", params={"status": "paid"})).json()
    assert [i["id"] for i in paid] == [invoice["id"]]
    assert (await client.get("/v1/invoices", params={"resident_type": "student"})).json() == []
    assert (await client.get("/v1/invoices/999")).status_code == 404
    assert (await client.patch("/v1/invoices/999", json={"status": "paid"})).status_code == 404


@pytest.mark.asyncio
async def test_payment_plans(client):
    for name, active in (("51 weeks - 10 installments", True), ("Legacy", False)):
        resp = await client.post("/v1/payment-plans", json={
            "name": name,
            "amount_cents": 510000,
            "duration_weeks": 51,
            "payment_cycles": 10,
            "is_active": active,
        })
        assert resp.status_code == 201

    active_plans = (await client.get("/v1/payment-plans")).json()
    assert [p["name"] for p in active_plans] == ["51 weeks - 10 installments"]
    every_plan = (await client.get("/v1/payment-plans", params={"include_inactive": True})).json()
    assert len(every_plan) == 2

    resp = await client.post("/v1/payment-plans", json={"name": "Bad", "amount_cents": -1, "duration_weeks": 51, "payment_cycles": 10})
    assert resp.status_code == 422
