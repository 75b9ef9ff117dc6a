"""
HistoryService - append-only writers and owner-scoped readers for the
compliance, saved-route and product-analysis history tables.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple, Type

from sqlalchemy import delete as sql_delete, desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError, ValidationError
from app.core.utils import is_yes, to_number, utcnow
from app.modules.drafts.models import Draft
from app.modules.drafts.service import DraftsService
from .models import ComplianceRecord, ProductAnalysis, SavedRoute

logger = logging.getLogger(__name__)


def validate_route_form(form_data: Any) -> Dict[str, Any]:
    """
    Check and normalise a {from, to, weight} route form.
    The weight may also arrive as package.weight.

    Raises:
        ValidationError: Missing place names or a non-positive/non-numeric weight
    """
    if not isinstance(form_data, dict):
        raise ValidationError("formData must be an object with from, to and weight")

    origin = form_data.get("from")
    destination = form_data.get("to")
    if not isinstance(origin, str) or not origin.strip():
        raise ValidationError("formData.from is required")
    if not isinstance(destination, str) or not destination.strip():
        raise ValidationError("formData.to is required")

    raw_weight = form_data.get("weight")
    if raw_weight is None and isinstance(form_data.get("package"), dict):
        raw_weight = form_data["package"].get("weight")
    weight = to_number(raw_weight)
    if weight is None or weight <= 0:
        raise ValidationError("formData.weight must be a positive number")

    return {"from": origin.strip(), "to": destination.strip(), "weight": weight}


def _yes_no(value: Any) -> str:
    return "Yes" if is_yes(value) else "No"


class HistoryService:
    """
    History records are never updated after insert.
    When a write also touches a draft, the history row is written first.
    """

    @staticmethod
    async def record_compliance(
        db: AsyncSession,
        owner_id: str,
        form_data: Dict[str, Any],
        result: Dict[str, Any],
        draft_id: Optional[str] = None,
    ) -> ComplianceRecord:
        record = ComplianceRecord(
            owner_id=owner_id,
            draft_id=draft_id,
            form_data=form_data,
            compliance_response=result,
            record_type="complianceCheck",
            timestamp=utcnow(),
        )
        db.add(record)
        await db.flush()
        return record

    @staticmethod
    async def record_saved_route(
        db: AsyncSession,
        owner_id: str,
        form_data: Dict[str, Any],
        route_data: Dict[str, Any],
        draft_id: Optional[str] = None,
    ) -> SavedRoute:
        """
        Insert a saved route after validating its {from, to, weight} form.

        Raises:
            ValidationError: Invalid form or empty route data
        """
        normalized = validate_route_form(form_data)
        if not isinstance(route_data, dict) or not route_data:
            raise ValidationError("routeData is required")

        record = SavedRoute(
            owner_id=owner_id,
            draft_id=draft_id,
            form_data=normalized,
            route_data=route_data,
            timestamp=utcnow(),
        )
        db.add(record)
        await db.flush()
        logger.info(f"Saved route {record.id} for user {owner_id}")
        return record

    @staticmethod
    async def record_product_analysis(
        db: AsyncSession,
        owner_id: str,
        image_details: Dict[str, Any],
        vision_result: Dict[str, Any],
        ai_result: Dict[str, Any],
    ) -> Tuple[ProductAnalysis, Draft]:
        """
        Insert a product analysis, then create a draft seeded from it.

        Returns:
            The record (with draft_id set) and the new draft
        """
        record = ProductAnalysis(
            owner_id=owner_id,
            image_details=image_details,
            vision_response=vision_result,
            ai_response=ai_result,
            timestamp=utcnow(),
        )
        db.add(record)
        await db.flush()

        form_data = {
            "ShipmentDetails": {
                "HS Code": ai_result.get("HS Code", ""),
                "Product Description": ai_result.get("Product Description", ""),
            },
            "TradeAndRegulatoryDetails": {
                "Perishable": _yes_no(ai_result.get("Perishable")),
                "Hazardous Material": _yes_no(ai_result.get("Hazardous")),
            },
        }
        draft = await DraftsService.create(
            db, owner_id, form_data, product_analysis_data=ai_result
        )

        record.draft_id = draft.id
        await db.flush()
        return record, draft

    @staticmethod
    async def _list(db: AsyncSession, model: Type, owner_id: str) -> List[Any]:
        result = await db.execute(
            select(model).where(model.owner_id == owner_id).order_by(desc(model.timestamp))
        )
        return list(result.scalars().all())

    @staticmethod
    async def _delete(db: AsyncSession, model: Type, label: str, owner_id: str, record_id: str) -> None:
        record = await db.scalar(
            select(model).where(model.id == record_id, model.owner_id == owner_id)
        )
        if not record:
            raise NotFoundError(label, record_id)
        await db.delete(record)
        await db.flush()

    @staticmethod
    async def list_compliance(db: AsyncSession, owner_id: str) -> List[ComplianceRecord]:
        return await HistoryService._list(db, ComplianceRecord, owner_id)

    @staticmethod
    async def list_saved_routes(db: AsyncSession, owner_id: str) -> List[SavedRoute]:
        return await HistoryService._list(db, SavedRoute, owner_id)

    @staticmethod
    async def list_product_analyses(db: AsyncSession, owner_id: str) -> List[ProductAnalysis]:
        return await HistoryService._list(db, ProductAnalysis, owner_id)

    @staticmethod
    async def delete_compliance(db: AsyncSession, owner_id: str, record_id: str) -> None:
        await HistoryService._delete(db, ComplianceRecord, "Compliance record", owner_id, record_id)

    @staticmethod
    async def delete_saved_route(db: AsyncSession, owner_id: str, record_id: str) -> None:
        await HistoryService._delete(db, SavedRoute, "Route record", owner_id, record_id)

    @staticmethod
    async def delete_product_analysis(db: AsyncSession, owner_id: str, record_id: str) -> None:
        await HistoryService._delete(db, ProductAnalysis, "Product analysis", owner_id, record_id)

    @staticmethod
    async def delete_all_for_owner(db: AsyncSession, owner_id: str) -> int:
        """Account deletion cascade. Returns the number of rows removed."""
        removed = 0
        for model in (ComplianceRecord, SavedRoute, ProductAnalysis):
            result = await db.execute(sql_delete(model).where(model.owner_id == owner_id))
            removed += result.rowcount or 0
        return removed
