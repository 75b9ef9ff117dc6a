"""
Product Analysis Router
"""

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db.engine import get_db_util
from app.core.llm import ReasoningClient, get_reasoning_client
from app.core.vision import VisionClient, get_vision_client
from app.modules.users.auth import get_current_user, TokenData
from .schemas import ProductAnalysisResult
from .service import ProductAnalysisService

router = APIRouter(tags=["product-analysis"])


@router.post("/analyze-product", response_model=ProductAnalysisResult)
async def analyze_product(
    image: UploadFile = File(...),
    db: AsyncSession = Depends(get_db_util),
    llm: ReasoningClient = Depends(get_reasoning_client),
    vision: VisionClient = Depends(get_vision_client),
    current_user: TokenData = Depends(get_current_user)
):
    """
    Classify a product photo (HS code, hazards, export documents) and
    create a draft from the result.
    """
    content = await image.read()
    return await ProductAnalysisService.analyze(
        db,
        llm,
        vision,
        current_user.user_id,
        content,
        image.filename or "image",
        image.content_type or "",
    )
