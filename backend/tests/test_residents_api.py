"""Test resident endpoints."""
from datetime import date

import pytest


async def _studio(client, studio_id):
    resp = await client.post("/v1/studios", json={"id": studio_id, "name": f"Studio {studio_id}"})
    assert resp.status_code == 201


async def _student(client, **fields):
    body = {"name": "Katherine Johnson", "checkin": "2024-09-14", "duration": "51 weeks", "revenue_cents": 510000}
    body.update(fields)
    resp = await client.post("/v1/residents/student", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.mark.asyncio
async def test_create_claims_studio_and_invoices(client):
    await _studio(client, "A1")

    data = await _student(client, assigned_to="A1")

    student = data["resident"]
    assert student["resident_type"] == "student"
    assert student["assigned_to"] == "A1"
    assert data["claim_warning"] is None
    assert data["invoice_warning"] is None

    studio = (await client.get("/v1/studios/A1")).json()
    assert studio["occupied_by"] == student["id"]

    invoices = (await client.get("/v1/invoices", params={"resident_type": "student", "resident_id": student["id"]})).json()
    assert len(invoices) == 1
    assert invoices[0]["amount_cents"] == 510000


@pytest.mark.asyncio
async def test_create_tourist_defaults_dates(client):
    resp = await client.post("/v1/residents/tourist", json={"name": "Day Tripper"})

    assert resp.status_code == 201
    tourist = resp.json()["resident"]
    assert tourist["checkin"] == date.today().isoformat()
    assert tourist["checkout"] == tourist["checkin"]
    assert tourist["status"] == "active"


@pytest.mark.asyncio
async def test_get_and_list(client):
    student = (await _student(client))["resident"]

    resp = await client.get(f"/v1/residents/student/{student['id']}")
    assert resp.status_code == 200
    assert resp.json()["name"] == "Katherine Johnson"

    assert (await client.get("/v1/residents/tourist/1")).status_code == 404
    assert (await client.get("/v1/residents/guest")).status_code == 422
    assert len((await client.get("/v1/residents/student")).json()) == 1


@pytest.mark.asyncio
async def test_patch_moves_studio(client):
    await _studio(client, "A1")
    await _studio(client, "A2")
    student = (await _student(client, assigned_to="A1"))["resident"]

    resp = await client.patch(f"/v1/residents/student/{student['id']}", json={"assigned_to": "A2"})

    assert resp.status_code == 200
    assert resp.json()["resident"]["assigned_to"] == "A2"
    assert (await client.get("/v1/studios/A1")).json()["occupied"] is False
    assert (await client.get("/v1/studios/A2")).json()["occupied_by"] == student["id"]


@pytest.mark.asyncio
async def test_patch_into_occupied_studio_conflicts(client):
    await _studio(client, "A1")
    await _student(client, name="Holder", assigned_to="A1")
    other = (await _student(client, name="Other"))["resident"]

    resp = await client.patch(f"/v1/residents/student/{other['id']}", json={"assigned_to": "A1"})

    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_delete_releases_studio(client):
    await _studio(client, "A1")
    student = (await _student(client, assigned_to="A1"))["resident"]

    resp = await client.delete(f"/v1/residents/student/{student['id']}")

    assert resp.status_code == 200
    assert resp.json() == {
        "resident_type": "student",
        "resident_id": student["id"],
        "released_studio_id": "A1",
        "release_warning": None,
    }
    assert (await client.get("/v1/studios/A1")).json()["occupied"] is False
    assert (await client.delete(f"/v1/residents/student/{student['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_bulk_endpoints(client):
    await _studio(client, "A1")
    first = (await _student(client, name="First"))["resident"]
    second = (await _student(client, name="Second"))["resident"]

    resp = await client.post(
        "/v1/residents/student/bulk-update",
        json={"ids": [first["id"], second["id"]], "changes": {"assigned_to": "A1"}},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["succeeded"] == [first["id"]]
    assert data["failed"][0]["id"] == second["id"]

    resp = await client.post(
        "/v1/residents/student/bulk-delete",
        json={"ids": [first["id"], second["id"], 999]},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["succeeded"] == [first["id"], second["id"]]
    assert data["failed"] == [{"id": 999, "error": "Resident 999 not found"}]
    assert (await client.get("/v1/studios/A1")).json()["occupied"] is False

    resp = await client.post("/v1/residents/student/bulk-delete", json={"ids": []})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_history_outlives_resident(client):
    await _studio(client, "A1")
    student = (await _student(client, assigned_to="A1"))["resident"]
    await client.patch(f"/v1/residents/student/{student['id']}", json={"assigned_to": None})
    await client.delete(f"/v1/residents/student/{student['id']}")

    resp = await client.get(f"/v1/residents/student/{student['id']}/history")

    assert resp.status_code == 200
    entries = resp.json()
    assert [e["action"] for e in entries] == ["resident_deleted", "resident_reassigned", "resident_created"]
    assert entries[-1]["details"]["studio_id"] == "A1"
    assert entries[1]["details"]["from"] == "A1"
    assert (await client.get(f"/v1/residents/tourist/{student['id']}/history")).json() == []


@pytest.mark.asyncio
async def test_create_records_payment_plan_name(client):
    resp = await client.post("/v1/payment-plans", json={
        "name": "51 weeks - 10 installments",
        "amount_cents": 510000,
        "duration_weeks": 51,
        "payment_cycles": 10,
    })
    plan = resp.json()

    student = (await _student(client, payment_plan_id=plan["id"], payment_cycles=10))["resident"]

    assert student["payment_plan_id"] == plan["id"]
    assert student["wants_installments"] is True
    assert student["installment_plan_name"] == "51 weeks - 10 installments"
    assert student["payment_cycles"] == 10
