"""
Carbon Footprint Router
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db.engine import get_db_util
from app.core.llm import ReasoningClient, get_fast_reasoning_client
from app.modules.users.auth import get_current_user, TokenData
from .schemas import CarbonFootprintRequest, CarbonFootprintResponse
from .service import CarbonFootprintService

router = APIRouter(tags=["carbon-footprint"])


@router.post("/carbon-footprint", response_model=CarbonFootprintResponse)
async def carbon_footprint(
    request: CarbonFootprintRequest,
    db: AsyncSession = Depends(get_db_util),
    llm: ReasoningClient = Depends(get_fast_reasoning_client),
    current_user: TokenData = Depends(get_current_user)
):
    """
    Carbon footprint analysis for a route, stored on the given draft
    or on a 24 hour ephemeral draft.
    """
    return await CarbonFootprintService.analyze(db, llm, current_user.user_id, request)
