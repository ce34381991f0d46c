"""Occupancy Reconciler - lead conversion and studio occupancy bookkeeping.

Owns the transitions between leads, residents and studios:
1. Lead -> resident conversion (variant decided by stay length)
2. Studio claim / release when a resident is created, reassigned or deleted
3. First invoice for every new resident
4. Read-only occupancy consistency audit

FAILURE SEMANTICS:
- Creating, updating or deleting the resident record itself is fatal and
  raises.
- Every side step (studio claim, studio release, invoice, lead deletion,
  audit entry) is best-effort: it is logged and reported as a warning on
  the returned outcome, never raised.
"""

import logging
from datetime import date
from typing import Any, Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    ConversionFailed,
    NotFoundError,
    ResidentDeletionFailed,
    ResidentNotFound,
    ResidentUpdateFailed,
    StudioAlreadyOccupied,
    StudioNotFound,
)
from app.models.enums import AuditAction, OccupancyIssueKind, ResidentType
from app.services.audit import AuditService
from app.services.invoices import InvoiceService
from app.services.leads import LeadStore
from app.services.residents import ResidentStore
from app.services.studios import StudioStore

logger = logging.getLogger(__name__)

SHORT_STAY_EXACT = "short-term"


def classify_duration(label: Optional[str]) -> ResidentType:
    """Decide the resident variant from a free-text duration label.

    Short-stay when the label contains "day" (so "days" too), has a "short"
    word, or is exactly "short-term". Anything else, including an empty
    label, is long-stay. No day count is computed.
    """
    text = (label or "").strip().lower()
    if not text:
        return ResidentType.STUDENT
    if "day" in text or "short" in text.split() or text == SHORT_STAY_EXACT:
        return ResidentType.TOURIST
    return ResidentType.STUDENT


class ConversionOutcome:
    """Result of creating a resident (from a lead or directly)."""

    def __init__(
        self,
        resident_type: ResidentType,
        resident: Any,
        lead_id: Optional[int] = None,
    ):
        self.resident_type = resident_type
        self.resident = resident
        self.lead_id = lead_id
        self.invoice: Optional[Any] = None
        self.studio_claimed = False
        self.lead_deleted = False
        self.unit_warning: Optional[str] = None
        self.invoice_warning: Optional[str] = None
        self.lead_warning: Optional[str] = None

    @property
    def warnings(self) -> list[str]:
        return [w for w in (self.unit_warning, self.invoice_warning, self.lead_warning) if w]


class ReassignmentOutcome:
    """Result of a resident update, including any studio move."""

    def __init__(
        self,
        resident: Any,
        previous_studio_id: Optional[str],
        studio_id: Optional[str],
    ):
        self.resident = resident
        self.previous_studio_id = previous_studio_id
        self.studio_id = studio_id
        self.release_warning: Optional[str] = None
        self.claim_warning: Optional[str] = None

    @property
    def warnings(self) -> list[str]:
        return [w for w in (self.release_warning, self.claim_warning) if w]


class DeletionOutcome:
    """Result of a resident deletion."""

    def __init__(self, resident_type: ResidentType, resident_id: int):
        self.resident_type = resident_type
        self.resident_id = resident_id
        self.released_studio_id: Optional[str] = None
        self.release_warning: Optional[str] = None

    @property
    def warnings(self) -> list[str]:
        return [self.release_warning] if self.release_warning else []


class ReleaseOutcome:
    """Result of an explicit studio unassignment."""

    def __init__(self, studio: Any, released: bool):
        self.studio = studio
        self.released = released
        self.resident_type: Optional[ResidentType] = None
        self.resident_id: Optional[int] = None
        self.resident_warning: Optional[str] = None


class BulkOutcome:
    """Collect-and-report result of a bulk operation."""

    def __init__(self):
        self.succeeded: list[int] = []
        self.failed: list[tuple[int, str]] = []
        self.warnings: dict[int, list[str]] = {}

    def to_dict(self) -> dict:
        return {
            "succeeded": self.succeeded,
            "failed": [{"id": item_id, "error": error} for item_id, error in self.failed],
            "warnings": self.warnings,
        }


class OccupancyIssue:
    """One divergence between a studio's occupancy and resident assignments."""

    def __init__(
        self,
        kind: OccupancyIssueKind,
        detail: str,
        studio_id: Optional[str] = None,
        resident_type: Optional[ResidentType] = None,
        resident_id: Optional[int] = None,
    ):
        self.kind = kind
        self.detail = detail
        self.studio_id = studio_id
        self.resident_type = resident_type
        self.resident_id = resident_id

    def __repr__(self) -> str:
        return f"OccupancyIssue({self.kind.value}, studio={self.studio_id}, resident={self.resident_id})"


class OccupancyReport:
    """Output of `OccupancyReconciler.audit_occupancy`."""

    def __init__(self, studios_checked: int, residents_checked: int, issues: list[OccupancyIssue]):
        self.studios_checked = studios_checked
        self.residents_checked = residents_checked
        self.issues = issues

    @property
    def consistent(self) -> bool:
        return not self.issues


class OccupancyReconciler:
    """Keeps studio occupancy consistent with resident assignment.

    All steps run sequentially; later steps depend on the resident id the
    first step produces. There is no cross-step transaction: the resident
    record is the source of truth and the rest is reconciled toward it.
    """

    def __init__(
        self,
        residents: ResidentStore,
        studios: StudioStore,
        invoices: InvoiceService,
        leads: LeadStore,
        audit: Optional[AuditService] = None,
    ):
        self.residents = residents
        self.studios = studios
        self.invoices = invoices
        self.leads = leads
        self.audit = audit

    @classmethod
    def for_session(cls, db: AsyncSession, ip_address: Optional[str] = None) -> "OccupancyReconciler":
        return cls(
            residents=ResidentStore(db),
            studios=StudioStore(db),
            invoices=InvoiceService(db),
            leads=LeadStore(db),
            audit=AuditService(db, ip_address=ip_address),
        )

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    async def convert_lead(
        self,
        request,
        lead=None,
        payment_plans: Iterable = (),
    ) -> ConversionOutcome:
        """Turn a lead into exactly one resident.

        `request` carries the operator's details (see LeadConversionRequest);
        any field it leaves out falls back to the lead. The lead is deleted
        only after the resident exists.

        Raises:
            StudioNotFound / StudioAlreadyOccupied: target studio unusable,
                nothing was written
            ConversionFailed: resident creation failed, nothing was written
        """
        def pick(field: str, lead_field: Optional[str] = None):
            value = getattr(request, field, None)
            if value is None and lead is not None:
                value = getattr(lead, lead_field or field, None)
            return value

        # An explicit studio_id of None means "no studio", not "use the lead's"
        if "studio_id" in getattr(request, "model_fields_set", ()):
            studio_id = request.studio_id
        else:
            studio_id = pick("studio_id", "assigned_to")

        duration = pick("duration")
        variant = request.stay_type or classify_duration(duration)
        checkin = request.checkin or date.today()

        payload: dict[str, Any] = {
            "name": pick("name"),
            "email": pick("email"),
            "phone": pick("phone"),
            "room_grade": pick("room_grade"),
            "checkin": checkin,
            "duration": duration,
            "revenue_cents": pick("revenue_cents") or 0,
            "assigned_to": studio_id,
            "notes": pick("notes"),
        }
        if variant == ResidentType.TOURIST:
            payload["checkout"] = request.checkout or checkin
        else:
            payload.update(self._installment_fields(
                request.payment_plan_id,
                request.installment_count,
                payment_plans,
            ))

        lead_id = lead.id if lead is not None else None
        logger.info(
            f"[RECONCILE] Converting lead {lead_id} to {variant.value} "
            f"(duration={duration!r}, studio={payload['assigned_to']})"
        )
        return await self._establish(variant, payload, lead_id=lead_id)

    async def create_resident(
        self,
        variant: ResidentType,
        data: dict[str, Any],
        payment_plans: Iterable = (),
    ) -> ConversionOutcome:
        """Create a resident without a lead: same claim and invoice steps as a conversion."""
        payload = dict(data)
        payload["checkin"] = payload.get("checkin") or date.today()
        if variant == ResidentType.TOURIST:
            payload["checkout"] = payload.get("checkout") or payload["checkin"]
        else:
            payload.pop("checkout", None)
            payload.update(self._installment_fields(
                payload.pop("payment_plan_id", None),
                payload.pop("payment_cycles", None),
                payment_plans,
            ))
        return await self._establish(variant, payload)

    @staticmethod
    def _installment_fields(
        plan_id: Optional[int],
        installment_count: Optional[int],
        payment_plans: Iterable,
    ) -> dict[str, Any]:
        fields: dict[str, Any] = {}
        if plan_id is not None:
            fields["payment_plan_id"] = plan_id
            fields["wants_installments"] = True
            plan = next((p for p in payment_plans if p.id == plan_id), None)
            if plan is not None:
                fields["installment_plan_name"] = plan.name
        if installment_count:
            fields["payment_cycles"] = installment_count
        return fields

    async def _establish(
        self,
        variant: ResidentType,
        payload: dict[str, Any],
        lead_id: Optional[int] = None,
    ) -> ConversionOutcome:
        studio_id = payload.get("assigned_to")
        if studio_id:
            await self._check_claimable(studio_id, variant)

        try:
            resident = await self.residents.create(variant, payload)
        except Exception as e:
            logger.error(f"[RECONCILE] Resident creation failed (lead={lead_id}): {e}")
            raise ConversionFailed(str(e), lead_id=lead_id) from e
        if resident is None:
            logger.error(f"[RECONCILE] Resident creation returned no record (lead={lead_id})")
            raise ConversionFailed("no resident record was returned", lead_id=lead_id)

        resident_id = resident.id
        outcome = ConversionOutcome(variant, resident, lead_id=lead_id)

        if studio_id:
            try:
                await self.studios.claim(studio_id, variant, resident_id)
                outcome.studio_claimed = True
            except Exception as e:
                outcome.unit_warning = f"Studio {studio_id} was not claimed: {e}"
                logger.error(
                    f"[RECONCILE] Claim of studio {studio_id} for {variant.value} "
                    f"{resident_id} failed (lead={lead_id}): {e}"
                )

        try:
            outcome.invoice = await self.invoices.create_for_resident(variant, resident)
        except Exception as e:
            outcome.invoice_warning = f"Invoice was not created: {e}"
            logger.error(f"[RECONCILE] Invoice for {variant.value} {resident_id} failed: {e}")

        if lead_id is not None:
            try:
                await self.leads.delete(lead_id)
                outcome.lead_deleted = True
            except Exception as e:
                outcome.lead_warning = f"Lead {lead_id} was not deleted: {e}"
                logger.error(
                    f"[RECONCILE] Lead {lead_id} survived conversion to "
                    f"{variant.value} {resident_id}: {e}"
                )

        await self._record(
            AuditAction.LEAD_CONVERTED if lead_id is not None else AuditAction.RESIDENT_CREATED,
            variant,
            resident_id,
            {
                "lead_id": lead_id,
                "studio_id": studio_id,
                "studio_claimed": outcome.studio_claimed,
                "warnings": outcome.warnings,
            },
        )

        # A failed side step may have rolled the session back and expired these
        outcome.resident = await self.residents.get(variant, resident_id) or resident
        if outcome.invoice is not None:
            outcome.invoice = await self.invoices.get(outcome.invoice.id) or outcome.invoice

        logger.info(
            f"[RECONCILE] {variant.value} {resident_id} established "
            f"(studio={studio_id}, claimed={outcome.studio_claimed}, warnings={len(outcome.warnings)})"
        )
        return outcome

    async def _check_claimable(
        self,
        studio_id: str,
        variant: ResidentType,
        resident_id: Optional[int] = None,
    ) -> None:
        """Refuse a studio that does not exist or is held by somebody else."""
        studio = await self.studios.get(studio_id)
        if studio is None:
            raise StudioNotFound(studio_id)
        if not studio.occupied:
            return
        if resident_id is not None and studio.occupied_by == resident_id and studio.occupied_by_type == variant:
            return
        raise StudioAlreadyOccupied(
            studio_id,
            studio.occupied_by_type.value if studio.occupied_by_type else None,
            studio.occupied_by,
        )

    # ------------------------------------------------------------------
    # Reassignment
    # ------------------------------------------------------------------

    async def update_resident(
        self,
        variant: ResidentType,
        resident_id: int,
        changes: dict[str, Any],
    ) -> ReassignmentOutcome:
        """Update a resident; when `assigned_to` changes, release the old studio then claim the new one.

        The two studio steps are independent: a failed release never stops
        the claim and vice versa.
        """
        current = await self.residents.get(variant, resident_id)
        if current is None:
            raise ResidentNotFound(resident_id)

        old_studio = current.assigned_to
        moving = "assigned_to" in changes and changes["assigned_to"] != old_studio
        new_studio = changes["assigned_to"] if moving else old_studio

        if moving and new_studio:
            await self._check_claimable(new_studio, variant, resident_id)

        try:
            resident = await self.residents.update(variant, resident_id, changes)
        except NotFoundError:
            raise
        except Exception as e:
            logger.error(f"[RECONCILE] Update of {variant.value} {resident_id} failed: {e}")
            raise ResidentUpdateFailed(resident_id, str(e)) from e

        outcome = ReassignmentOutcome(resident, old_studio, new_studio)
        if not moving:
            return outcome

        if old_studio:
            outcome.release_warning = await self._release_for(old_studio, variant, resident_id)

        if new_studio:
            try:
                await self.studios.claim(new_studio, variant, resident_id)
            except Exception as e:
                outcome.claim_warning = f"Studio {new_studio} was not claimed: {e}"
                logger.error(
                    f"[RECONCILE] Claim of studio {new_studio} for {variant.value} {resident_id} failed: {e}"
                )

        await self._record(
            AuditAction.RESIDENT_REASSIGNED,
            variant,
            resident_id,
            {"from": old_studio, "to": new_studio, "warnings": outcome.warnings},
        )
        outcome.resident = await self.residents.get(variant, resident_id) or resident
        logger.info(f"[RECONCILE] {variant.value} {resident_id} moved {old_studio} -> {new_studio}")
        return outcome

    async def bulk_update_residents(
        self,
        variant: ResidentType,
        resident_ids: Iterable[int],
        changes: dict[str, Any],
    ) -> BulkOutcome:
        """Apply the same changes to each resident independently."""
        result = BulkOutcome()
        for resident_id in resident_ids:
            try:
                outcome = await self.update_resident(variant, resident_id, changes)
            except Exception as e:
                result.failed.append((resident_id, str(e)))
                logger.warning(f"[RECONCILE] Bulk update skipped {variant.value} {resident_id}: {e}")
                continue
            result.succeeded.append(resident_id)
            if outcome.warnings:
                result.warnings[resident_id] = outcome.warnings
        return result

    # ------------------------------------------------------------------
    # Deletion / release
    # ------------------------------------------------------------------

    async def delete_resident(self, variant: ResidentType, resident_id: int) -> DeletionOutcome:
        """Release the resident's studio, then delete the resident.

        The release is attempted first and is not undone if the delete fails:
        a vacant studio with no resident is a safe state.
        """
        resident = await self.residents.get(variant, resident_id)
        if resident is None:
            raise ResidentNotFound(resident_id)

        outcome = DeletionOutcome(variant, resident_id)
        studio_id = resident.assigned_to
        if studio_id:
            outcome.release_warning = await self._release_for(studio_id, variant, resident_id)
            if outcome.release_warning is None:
                outcome.released_studio_id = studio_id

        try:
            await self.residents.delete(variant, resident_id)
        except NotFoundError:
            raise
        except Exception as e:
            logger.error(f"[RECONCILE] Delete of {variant.value} {resident_id} failed: {e}")
            raise ResidentDeletionFailed(resident_id, str(e)) from e

        await self._record(
            AuditAction.RESIDENT_DELETED,
            variant,
            resident_id,
            {"studio_id": studio_id, "studio_released": outcome.released_studio_id is not None},
        )
        return outcome

    async def bulk_delete_residents(self, variant: ResidentType, resident_ids: Iterable[int]) -> BulkOutcome:
        """Delete each resident independently; one failure never blocks the rest."""
        result = BulkOutcome()
        for resident_id in resident_ids:
            try:
                outcome = await self.delete_resident(variant, resident_id)
            except Exception as e:
                result.failed.append((resident_id, str(e)))
                logger.warning(f"[RECONCILE] Bulk delete skipped {variant.value} {resident_id}: {e}")
                continue
            result.succeeded.append(resident_id)
            if outcome.warnings:
                result.warnings[resident_id] = outcome.warnings
        logger.info(
            f"[RECONCILE] Bulk delete of {variant.value}s: "
            f"{len(result.succeeded)} deleted, {len(result.failed)} failed"
        )
        return result

    async def _release_for(self, studio_id: str, variant: ResidentType, resident_id: int) -> Optional[str]:
        """Best-effort release on behalf of one resident. Returns a warning or None."""
        try:
            released = await self.studios.release(studio_id, occupant=(variant, resident_id))
        except Exception as e:
            logger.error(
                f"[RECONCILE] Release of studio {studio_id} for {variant.value} {resident_id} failed: {e}"
            )
            return f"Studio {studio_id} was not released: {e}"
        if not released:
            return f"Studio {studio_id} is held by another resident and was left occupied"
        return None

    async def release_studio(self, studio_id: str) -> ReleaseOutcome:
        """Explicit unassignment: vacate the studio and clear its occupant's assignment.

        Raises:
            StudioNotFound: no such studio
        """
        studio = await self.studios.get(studio_id)
        if studio is None:
            raise StudioNotFound(studio_id)
        occupant_type, occupant_id = studio.occupied_by_type, studio.occupied_by

        released = await self.studios.release(studio_id)
        outcome = ReleaseOutcome(studio, released)
        outcome.resident_type = occupant_type
        outcome.resident_id = occupant_id

        if occupant_type is not None and occupant_id is not None:
            try:
                occupant = await self.residents.get(occupant_type, occupant_id)
                if occupant is not None and occupant.assigned_to == studio_id:
                    await self.residents.update(occupant_type, occupant_id, {"assigned_to": None})
            except Exception as e:
                outcome.resident_warning = (
                    f"{occupant_type.value} {occupant_id} still lists studio {studio_id}: {e}"
                )
                logger.error(f"[RECONCILE] Unassigning occupant of studio {studio_id} failed: {e}")

        await self._record(
            AuditAction.STUDIO_RELEASED,
            occupant_type,
            occupant_id,
            {
                "studio_id": studio_id,
                "occupant_type": occupant_type.value if occupant_type else None,
                "occupant_id": occupant_id,
            },
            resource_type="studio",
            resource_id=studio_id,
        )
        outcome.studio = await self.studios.get(studio_id) or studio
        return outcome

    # ------------------------------------------------------------------
    # Consistency audit
    # ------------------------------------------------------------------

    async def audit_occupancy(self) -> OccupancyReport:
        """Compare every studio against every resident assignment. Read-only."""
        studios = {studio.id: studio for studio in await self.studios.list_all()}
        residents = {}
        for variant in ResidentType:
            for resident in await self.residents.list_all(variant):
                residents[(variant, resident.id)] = resident

        issues: list[OccupancyIssue] = []

        for studio in studios.values():
            if studio.occupied and studio.occupied_by is None:
                issues.append(OccupancyIssue(
                    OccupancyIssueKind.OCCUPIED_WITHOUT_OCCUPANT,
                    f"Studio {studio.id} is marked occupied but has no occupant",
                    studio_id=studio.id,
                ))
            elif not studio.occupied and studio.occupied_by is not None:
                issues.append(OccupancyIssue(
                    OccupancyIssueKind.OCCUPANT_WITHOUT_FLAG,
                    f"Studio {studio.id} is marked vacant but lists occupant {studio.occupied_by}",
                    studio_id=studio.id,
                    resident_type=studio.occupied_by_type,
                    resident_id=studio.occupied_by,
                ))
            elif studio.occupied:
                occupant = residents.get((studio.occupied_by_type, studio.occupied_by))
                if occupant is None:
                    issues.append(OccupancyIssue(
                        OccupancyIssueKind.OCCUPANT_MISSING,
                        f"Studio {studio.id} occupant {studio.occupied_by} does not exist",
                        studio_id=studio.id,
                        resident_type=studio.occupied_by_type,
                        resident_id=studio.occupied_by,
                    ))
                elif occupant.assigned_to != studio.id:
                    issues.append(OccupancyIssue(
                        OccupancyIssueKind.OCCUPANT_ASSIGNED_ELSEWHERE,
                        f"Studio {studio.id} occupant {studio.occupied_by} is assigned to {occupant.assigned_to}",
                        studio_id=studio.id,
                        resident_type=studio.occupied_by_type,
                        resident_id=studio.occupied_by,
                    ))

        for (variant, resident_id), resident in residents.items():
            if not resident.assigned_to:
                continue
            studio = studios.get(resident.assigned_to)
            if studio is None:
                kind, detail = (
                    OccupancyIssueKind.RESIDENT_IN_UNKNOWN_STUDIO,
                    f"{variant.value} {resident_id} is assigned to unknown studio {resident.assigned_to}",
                )
            elif not studio.occupied:
                kind, detail = (
                    OccupancyIssueKind.RESIDENT_IN_VACANT_STUDIO,
                    f"{variant.value} {resident_id} is assigned to vacant studio {studio.id}",
                )
            elif (studio.occupied_by_type, studio.occupied_by) != (variant, resident_id):
                kind, detail = (
                    OccupancyIssueKind.RESIDENT_IN_FOREIGN_STUDIO,
                    f"{variant.value} {resident_id} is assigned to studio {studio.id} "
                    f"held by {studio.occupied_by}",
                )
            else:
                continue
            issues.append(OccupancyIssue(
                kind,
                detail,
                studio_id=resident.assigned_to,
                resident_type=variant,
                resident_id=resident_id,
            ))

        if issues:
            logger.warning(f"[RECONCILE] Occupancy audit found {len(issues)} issue(s)")
        return OccupancyReport(len(studios), len(residents), issues)

    async def _record(
        self,
        action: AuditAction,
        variant: Optional[ResidentType],
        resident_id: Optional[int],
        details: dict[str, Any],
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
    ) -> None:
        if self.audit is None:
            return
        try:
            await self.audit.log(
                action=action,
                resource_type=resource_type or (variant.value if variant else "resident"),
                resource_id=resource_id if resource_id is not None else resident_id,
                details=details,
            )
        except Exception as e:
            logger.error(f"[RECONCILE] Audit entry {action.value} for {resident_id} failed: {e}")
