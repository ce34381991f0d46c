"""Test studio occupancy: claim/release semantics, explicit release and the consistency audit."""
from datetime import date

import pytest

from app.core.exceptions import StudioAlreadyOccupied, StudioInUse, StudioNotFound
from app.models.enums import OccupancyIssueKind, ResidentType
from app.schemas.lead import LeadConversionRequest

TEST_CHECKIN = date(2024, 9, 1)


def _assert_exclusive(report, studio_rows, resident_rows):
    """Every occupied studio round-trips to its occupant, and no studio has two residents."""
    assert report.consistent, report.issues
    by_key = {(r.resident_type, r.id): r for r in resident_rows}
    for studio in studio_rows:
        assert studio.occupied == (studio.occupied_by is not None)
        if studio.occupied:
            occupant = by_key[(studio.occupied_by_type, studio.occupied_by)]
            assert occupant.assigned_to == studio.id
    assigned = [r.assigned_to for r in resident_rows if r.assigned_to]
    assert len(assigned) == len(set(assigned))


@pytest.mark.asyncio
async def test_claim_is_conditional(make_studio, studios):
    await make_studio("S1")

    studio = await studios.claim("S1", ResidentType.STUDENT, 1)
    assert studio.occupied_by == 1

    # Re-claiming by the same resident is a no-op
    await studios.claim("S1", ResidentType.STUDENT, 1)

    with pytest.raises(StudioAlreadyOccupied):
        await studios.claim("S1", ResidentType.STUDENT, 2)
    # Same id, other variant is a different resident
    with pytest.raises(StudioAlreadyOccupied):
        await studios.claim("S1", ResidentType.TOURIST, 1)

    assert (await studios.get("S1")).occupied_by == 1


@pytest.mark.asyncio
async def test_claim_unknown_studio(studios):
    with pytest.raises(StudioNotFound):
        await studios.claim("NOPE", ResidentType.STUDENT, 1)


@pytest.mark.asyncio
async def test_guarded_release(make_studio, studios):
    await make_studio("S1")
    await studios.claim("S1", ResidentType.TOURIST, 5)

    assert await studios.release("S1", occupant=(ResidentType.TOURIST, 6)) is False
    assert (await studios.get("S1")).occupied is True

    assert await studios.release("S1", occupant=(ResidentType.TOURIST, 5)) is True
    assert (await studios.get("S1")).occupied is False

    # Releasing a vacant studio is harmless
    assert await studios.release("S1", occupant=(ResidentType.TOURIST, 5)) is True


@pytest.mark.asyncio
async def test_occupied_studio_cannot_be_deleted(make_studio, studios):
    await make_studio("S1")
    await studios.claim("S1", ResidentType.STUDENT, 1)

    with pytest.raises(StudioInUse):
        await studios.delete("S1")

    await studios.release("S1")
    await studios.delete("S1")
    assert await studios.get("S1") is None


@pytest.mark.asyncio
async def test_update_ignores_occupancy_fields(make_studio, studios):
    await make_studio("S1")

    studio = await studios.update("S1", {"name": "Penthouse", "occupied": True, "occupied_by": 9})

    assert studio.name == "Penthouse"
    assert studio.occupied is False
    assert studio.occupied_by is None


@pytest.mark.asyncio
async def test_release_studio_clears_occupant_assignment(reconciler, make_studio, make_lead, studios, residents):
    await make_studio("S1")
    lead = await make_lead(duration="45 weeks")
    converted = await reconciler.convert_lead(
        LeadConversionRequest(checkin=TEST_CHECKIN, studio_id="S1"),
        lead=lead,
    )

    outcome = await reconciler.release_studio("S1")

    assert outcome.released is True
    assert outcome.resident_type == ResidentType.STUDENT
    assert outcome.resident_id == converted.resident.id
    assert outcome.resident_warning is None
    assert outcome.studio.occupied is False
    student = await residents.get(ResidentType.STUDENT, converted.resident.id)
    assert student.assigned_to is None
    assert (await reconciler.audit_occupancy()).consistent


@pytest.mark.asyncio
async def test_release_unknown_studio(reconciler):
    with pytest.raises(StudioNotFound):
        await reconciler.release_studio("NOPE")


@pytest.mark.asyncio
async def test_invariant_holds_across_workflow(reconciler, make_studio, make_lead, studios, residents):
    for studio_id in ("S1", "S2", "S3"):
        await make_studio(studio_id)

    a = await reconciler.convert_lead(
        LeadConversionRequest(checkin=TEST_CHECKIN, studio_id="S1"),
        lead=await make_lead(name="A", duration="2 days"),
    )
    b = await reconciler.convert_lead(
        LeadConversionRequest(checkin=TEST_CHECKIN, studio_id="S2"),
        lead=await make_lead(name="B", duration="51 weeks"),
    )
    await reconciler.update_resident(ResidentType.STUDENT, b.resident.id, {"assigned_to": "S3"})
    await reconciler.update_resident(ResidentType.TOURIST, a.resident.id, {"assigned_to": "S2"})
    await reconciler.delete_resident(ResidentType.TOURIST, a.resident.id)
    c = await reconciler.convert_lead(
        LeadConversionRequest(checkin=TEST_CHECKIN, studio_id="S1"),
        lead=await make_lead(name="C", duration="short stay"),
    )

    report = await reconciler.audit_occupancy()
    studio_rows = await studios.list_all()
    resident_rows = [
        *await residents.list_all(ResidentType.STUDENT),
        *await residents.list_all(ResidentType.TOURIST),
    ]
    _assert_exclusive(report, studio_rows, resident_rows)
    assert report.studios_checked == 3
    assert report.residents_checked == 2

    occupancy = {s.id: (s.occupied_by_type, s.occupied_by) for s in studio_rows}
    assert occupancy == {
        "S1": (ResidentType.TOURIST, c.resident.id),
        "S2": (None, None),
        "S3": (ResidentType.STUDENT, b.resident.id),
    }


@pytest.mark.asyncio
async def test_audit_flags_resident_in_vacant_studio(reconciler, make_studio, residents):
    await make_studio("S1")
    student = await residents.create(ResidentType.STUDENT, {
        "name": "Unclaimed", "checkin": TEST_CHECKIN, "assigned_to": "S1",
    })

    report = await reconciler.audit_occupancy()

    assert not report.consistent
    assert len(report.issues) == 1
    issue = report.issues[0]
    assert issue.kind == OccupancyIssueKind.RESIDENT_IN_VACANT_STUDIO
    assert issue.studio_id == "S1"
    assert issue.resident_id == student.id


@pytest.mark.asyncio
async def test_audit_flags_missing_occupant(reconciler, make_studio, studios):
    await make_studio("S1")
    await studios.claim("S1", ResidentType.STUDENT, 999)

    report = await reconciler.audit_occupancy()

    assert [i.kind for i in report.issues] == [OccupancyIssueKind.OCCUPANT_MISSING]


@pytest.mark.asyncio
async def test_audit_flags_resident_in_foreign_studio(reconciler, make_studio, residents):
    await make_studio("S1")
    holder = await reconciler.create_resident(ResidentType.STUDENT, {
        "name": "Holder", "checkin": TEST_CHECKIN, "assigned_to": "S1",
    })
    stray = await residents.create(ResidentType.TOURIST, {
        "name": "Stray", "checkin": TEST_CHECKIN, "checkout": TEST_CHECKIN, "assigned_to": "S1",
    })

    report = await reconciler.audit_occupancy()

    assert len(report.issues) == 1
    assert report.issues[0].kind == OccupancyIssueKind.RESIDENT_IN_FOREIGN_STUDIO
    assert report.issues[0].resident_id == stray.id
    assert holder.studio_claimed is True
