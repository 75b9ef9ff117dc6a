"""
DraftsService - Draft lifecycle: create, read, patch, list by tab and the
narrow per-stage mutations that own the status columns.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import delete as sql_delete, desc, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import config
from app.core.exceptions import InvalidTabError, NotFoundError, ValidationError
from app.core.utils import utcnow
from app.modules.compliance.scoring import to_internal_status
from .models import ComplianceStatus, Draft, DraftTab, RouteOptimizationStatus, TAB_FILTERS
from .schemas import UpdateDraftDto

logger = logging.getLogger(__name__)

# API field name -> column
PATCHABLE_FIELDS = {
    "formData": "form_data",
    "carbonAnalysisData": "carbon_analysis_data",
    "productAnalysisData": "product_analysis_data",
}


class DraftsService:
    """
    Drafts service. Every read and write is filtered on the owner id;
    a draft owned by someone else is reported exactly like a missing one.
    """

    @staticmethod
    async def create(
        db: AsyncSession,
        owner_id: str,
        form_data: Dict[str, Any],
        *,
        product_analysis_data: Optional[Dict[str, Any]] = None,
        carbon_analysis_data: Optional[Dict[str, Any]] = None,
        expires_at: Optional[datetime] = None,
    ) -> Draft:
        """
        Create a new draft with both statuses at notDone.

        Args:
            db: Request session
            owner_id: ID of the user creating the draft
            form_data: Grouped shipment form
            expires_at: Set for ephemeral drafts, which listings skip
        """
        draft = Draft(
            owner_id=owner_id,
            form_data=form_data or {},
            product_analysis_data=product_analysis_data,
            carbon_analysis_data=carbon_analysis_data,
            compliance_status=ComplianceStatus.NOT_DONE,
            route_optimization_status=RouteOptimizationStatus.NOT_DONE,
            timestamp=utcnow(),
            expires_at=expires_at,
        )
        db.add(draft)
        await db.flush()
        await db.refresh(draft)
        logger.info(f"Created draft {draft.id} for user {owner_id}")
        return draft

    @staticmethod
    async def create_ephemeral(
        db: AsyncSession, owner_id: str, form_data: Dict[str, Any], **fields: Any
    ) -> Draft:
        expires_at = utcnow() + timedelta(hours=config.draft_retention_hours)
        return await DraftsService.create(db, owner_id, form_data, expires_at=expires_at, **fields)

    @staticmethod
    async def find_one(db: AsyncSession, owner_id: str, draft_id: str) -> Draft:
        """
        Get a single draft by ID for a specific user.

        Raises:
            NotFoundError: If draft not found or doesn't belong to user
        """
        draft = await db.scalar(
            select(Draft).where(
                Draft.id == draft_id,
                Draft.owner_id == owner_id,
                or_(Draft.expires_at.is_(None), Draft.expires_at > utcnow()),
            )
        )
        if not draft:
            raise NotFoundError("Draft", draft_id)
        return draft

    @staticmethod
    async def update(
        db: AsyncSession, owner_id: str, draft_id: str, patch: Dict[str, Any]
    ) -> Draft:
        """
        Shallow-merge an allow-listed patch onto a draft.

        Raises:
            ValidationError: A key outside PATCHABLE_FIELDS, or a non-object value
            NotFoundError: If draft not found or doesn't belong to user
        """
        if not isinstance(patch, dict) or not patch:
            raise ValidationError("Update body must be a non-empty object")

        rejected = sorted(key for key in patch if key not in PATCHABLE_FIELDS)
        if rejected:
            raise ValidationError(f"Fields cannot be updated: {', '.join(rejected)}")
        try:
            UpdateDraftDto.model_validate(patch)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid draft update: {e.errors()[0]['msg']}") from e

        draft = await DraftsService.find_one(db, owner_id, draft_id)
        for key, value in patch.items():
            setattr(draft, PATCHABLE_FIELDS[key], value)
        draft.timestamp = utcnow()
        await db.flush()
        await db.refresh(draft)
        return draft

    @staticmethod
    async def delete(db: AsyncSession, owner_id: str, draft_id: str) -> None:
        """
        Delete a draft.

        Raises:
            NotFoundError: If draft not found or doesn't belong to user
        """
        draft = await DraftsService.find_one(db, owner_id, draft_id)
        await db.delete(draft)
        await db.flush()

    @staticmethod
    async def find_all_by_tab(db: AsyncSession, owner_id: str, tab: str) -> List[Draft]:
        """
        List the caller's drafts for one tab, newest first.
        Expired drafts are purged first; ephemeral drafts are never listed.

        Raises:
            InvalidTabError: Unknown tab value
        """
        try:
            draft_tab = DraftTab(tab)
        except ValueError:
            raise InvalidTabError(tab)

        await DraftsService.purge_expired(db)

        compliance, route_statuses = TAB_FILTERS[draft_tab]
        query = (
            select(Draft)
            .where(
                Draft.owner_id == owner_id,
                Draft.expires_at.is_(None),
                Draft.compliance_status == compliance,
                Draft.route_optimization_status.in_(route_statuses),
            )
            .order_by(desc(Draft.timestamp))
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def apply_compliance_result(
        db: AsyncSession,
        owner_id: str,
        draft_id: str,
        form_data: Dict[str, Any],
        result: Dict[str, Any],
    ) -> Draft:
        """Store a compliance result and its status on an existing draft."""
        draft = await DraftsService.find_one(db, owner_id, draft_id)
        draft.form_data = form_data
        draft.compliance_data = dict(result)
        draft.compliance_status = to_internal_status(result.get("complianceStatus"))
        draft.timestamp = utcnow()
        await db.flush()
        await db.refresh(draft)
        return draft

    @staticmethod
    async def create_with_compliance(
        db: AsyncSession, owner_id: str, form_data: Dict[str, Any], result: Dict[str, Any]
    ) -> Draft:
        draft = await DraftsService.create(db, owner_id, form_data)
        draft.compliance_data = dict(result)
        draft.compliance_status = to_internal_status(result.get("complianceStatus"))
        await db.flush()
        await db.refresh(draft)
        return draft

    @staticmethod
    async def apply_route_choice(
        db: AsyncSession, owner_id: str, draft_id: str, route_data: Dict[str, Any]
    ) -> Draft:
        draft = await DraftsService.find_one(db, owner_id, draft_id)
        draft.route_data = route_data
        draft.route_optimization_status = RouteOptimizationStatus.DONE
        draft.timestamp = utcnow()
        await db.flush()
        await db.refresh(draft)
        return draft

    @staticmethod
    async def create_with_route(
        db: AsyncSession,
        owner_id: str,
        form_data: Dict[str, Any],
        route_data: Dict[str, Any],
        origin_code: str,
        destination_code: str,
        weight: float,
    ) -> Draft:
        """
        Create a draft from an inline route choice.
        ShipmentDetails carries the resolved ISO codes and the weight.
        """
        seeded = dict(form_data)
        shipment = dict(seeded.get("ShipmentDetails") or {})
        shipment.update({
            "Origin Country": origin_code,
            "Destination Country": destination_code,
            "Gross Weight": weight,
        })
        seeded["ShipmentDetails"] = shipment

        draft = await DraftsService.create(db, owner_id, seeded)
        draft.route_data = route_data
        draft.route_optimization_status = RouteOptimizationStatus.DONE
        await db.flush()
        await db.refresh(draft)
        return draft

    @staticmethod
    async def apply_carbon_analysis(
        db: AsyncSession, owner_id: str, draft_id: str, analysis: Dict[str, Any]
    ) -> Draft:
        draft = await DraftsService.find_one(db, owner_id, draft_id)
        draft.carbon_analysis_data = analysis
        draft.timestamp = utcnow()
        await db.flush()
        await db.refresh(draft)
        return draft

    @staticmethod
    async def apply_map_data(
        db: AsyncSession, owner_id: str, draft_id: str, map_data: Any
    ) -> Draft:
        draft = await DraftsService.find_one(db, owner_id, draft_id)
        draft.map_data = map_data
        draft.timestamp = utcnow()
        await db.flush()
        await db.refresh(draft)
        return draft

    @staticmethod
    async def purge_expired(db: AsyncSession) -> int:
        """Hard-delete ephemeral drafts past their expiry. Returns the count."""
        result = await db.execute(
            sql_delete(Draft).where(
                Draft.expires_at.is_not(None), Draft.expires_at <= utcnow()
            )
        )
        if result.rowcount:
            logger.info(f"Purged {result.rowcount} expired draft(s)")
        return result.rowcount or 0

    @staticmethod
    async def delete_all_for_owner(db: AsyncSession, owner_id: str) -> int:
        result = await db.execute(sql_delete(Draft).where(Draft.owner_id == owner_id))
        return result.rowcount or 0
