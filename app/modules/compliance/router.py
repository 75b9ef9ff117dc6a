"""
Compliance Router
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db.engine import get_db_util
from app.core.llm import ReasoningClient, get_reasoning_client
from app.modules.users.auth import get_current_user, TokenData
from .schemas import ComplianceCheckResponse
from .service import ComplianceService

router = APIRouter(tags=["compliance"])


@router.post("/compliance-check", response_model=ComplianceCheckResponse)
async def compliance_check(
    payload: Dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db_util),
    llm: ReasoningClient = Depends(get_reasoning_client),
    current_user: TokenData = Depends(get_current_user)
):
    """
    Evaluate a shipment form. Body is the grouped form plus an optional draftId.
    """
    return await ComplianceService.check(db, llm, current_user.user_id, payload)
