"""Test resident deletion and bulk operations."""
from datetime import date
from unittest.mock import AsyncMock

import pytest

from app.core.exceptions import ResidentDeletionFailed, ResidentNotFound
from app.models.enums import ResidentType

TEST_CHECKIN = date(2024, 7, 1)


async def _tourist(reconciler, studio_id=None, name="Guest"):
    outcome = await reconciler.create_resident(ResidentType.TOURIST, {
        "name": name,
        "checkin": TEST_CHECKIN,
        "checkout": date(2024, 7, 4),
        "duration": "3 days",
        "revenue_cents": 36000,
        "assigned_to": studio_id,
    })
    return outcome.resident


@pytest.mark.asyncio
async def test_delete_releases_studio(reconciler, make_studio, studios, residents):
    await make_studio("S1")
    guest = await _tourist(reconciler, "S1")

    outcome = await reconciler.delete_resident(ResidentType.TOURIST, guest.id)

    assert outcome.released_studio_id == "S1"
    assert outcome.release_warning is None
    assert (await studios.get("S1")).occupied is False
    assert await residents.get(ResidentType.TOURIST, guest.id) is None


@pytest.mark.asyncio
async def test_release_happens_even_when_delete_fails(reconciler, make_studio, studios, residents):
    await make_studio("S1")
    guest = await _tourist(reconciler, "S1")
    reconciler.residents.delete = AsyncMock(side_effect=RuntimeError("row locked"))

    with pytest.raises(ResidentDeletionFailed, match="row locked"):
        await reconciler.delete_resident(ResidentType.TOURIST, guest.id)

    studio = await studios.get("S1")
    assert studio.occupied is False
    assert studio.occupied_by is None
    assert await residents.get(ResidentType.TOURIST, guest.id) is not None


@pytest.mark.asyncio
async def test_failed_release_does_not_block_delete(reconciler, make_studio, residents):
    await make_studio("S1")
    guest = await _tourist(reconciler, "S1")
    reconciler.studios.release = AsyncMock(side_effect=RuntimeError("timeout"))

    outcome = await reconciler.delete_resident(ResidentType.TOURIST, guest.id)

    assert outcome.released_studio_id is None
    assert "timeout" in outcome.release_warning
    assert await residents.get(ResidentType.TOURIST, guest.id) is None


@pytest.mark.asyncio
async def test_delete_never_evicts_another_occupant(reconciler, make_studio, studios, residents):
    await make_studio("S1")
    holder = await _tourist(reconciler, "S1", name="Holder")
    # Assigned behind the reconciler's back: S1 stays with the holder
    stray = await residents.create(ResidentType.TOURIST, {
        "name": "Stray",
        "checkin": TEST_CHECKIN,
        "checkout": TEST_CHECKIN,
        "assigned_to": "S1",
    })

    outcome = await reconciler.delete_resident(ResidentType.TOURIST, stray.id)

    assert outcome.released_studio_id is None
    assert "held by another resident" in outcome.release_warning
    assert (await studios.get("S1")).occupied_by == holder.id


@pytest.mark.asyncio
async def test_delete_unassigned_resident(reconciler, studios):
    guest = await _tourist(reconciler)
    reconciler.studios.release = AsyncMock()

    outcome = await reconciler.delete_resident(ResidentType.TOURIST, guest.id)

    reconciler.studios.release.assert_not_awaited()
    assert outcome.released_studio_id is None


@pytest.mark.asyncio
async def test_delete_unknown_resident(reconciler):
    with pytest.raises(ResidentNotFound):
        await reconciler.delete_resident(ResidentType.STUDENT, 12345)


@pytest.mark.asyncio
async def test_bulk_delete_partial_failure(reconciler, make_studio, studios, residents):
    """One failing delete never blocks the others; every attempted item's studio is released."""
    guests = []
    for studio_id in ("S1", "S2", "S3"):
        await make_studio(studio_id)
        guests.append(await _tourist(reconciler, studio_id, name=f"Guest {studio_id}"))
    failing = guests[1].id

    real_delete = reconciler.residents.delete

    async def flaky_delete(variant, resident_id):
        if resident_id == failing:
            raise RuntimeError("foreign key violation")
        await real_delete(variant, resident_id)

    reconciler.residents.delete = flaky_delete

    result = await reconciler.bulk_delete_residents(ResidentType.TOURIST, [g.id for g in guests])

    assert result.succeeded == [guests[0].id, guests[2].id]
    assert [item_id for item_id, _ in result.failed] == [failing]
    assert "foreign key violation" in result.failed[0][1]

    for studio_id in ("S1", "S2", "S3"):
        assert (await studios.get(studio_id)).occupied is False
    remaining = await residents.list_all(ResidentType.TOURIST)
    assert [r.id for r in remaining] == [failing]


@pytest.mark.asyncio
async def test_bulk_delete_reports_unknown_ids(reconciler):
    guest = await _tourist(reconciler)

    result = await reconciler.bulk_delete_residents(ResidentType.TOURIST, [guest.id, 999])

    assert result.succeeded == [guest.id]
    assert result.to_dict()["failed"] == [{"id": 999, "error": "Resident 999 not found"}]


@pytest.mark.asyncio
async def test_bulk_update_keeps_studios_exclusive(reconciler, make_studio, studios):
    await make_studio("S1")
    first = await _tourist(reconciler, name="First")
    second = await _tourist(reconciler, name="Second")

    result = await reconciler.bulk_update_residents(
        ResidentType.TOURIST,
        [first.id, second.id],
        {"assigned_to": "S1"},
    )

    assert result.succeeded == [first.id]
    assert result.failed[0][0] == second.id
    assert "already occupied" in result.failed[0][1]
    assert (await studios.get("S1")).occupied_by == first.id


@pytest.mark.asyncio
async def test_bulk_update_collects_warnings(reconciler, make_studio):
    await make_studio("S1")
    await make_studio("S2")
    guest = await _tourist(reconciler, "S1")
    reconciler.studios.release = AsyncMock(side_effect=RuntimeError("timeout"))

    result = await reconciler.bulk_update_residents(ResidentType.TOURIST, [guest.id], {"assigned_to": "S2"})

    assert result.succeeded == [guest.id]
    assert len(result.warnings[guest.id]) == 1
    assert "timeout" in result.warnings[guest.id][0]
