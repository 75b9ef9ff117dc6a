"""
History Router - list and delete past analyses
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db.engine import get_db_util
from app.modules.users.auth import get_current_user, TokenData
from .service import HistoryService
from .schemas import ComplianceRecordResponse, ProductAnalysisResponse, SavedRouteResponse

router = APIRouter(tags=["history"])


@router.get("/compliance-history", response_model=List[ComplianceRecordResponse])
async def get_compliance_history(
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(get_current_user)
):
    records = await HistoryService.list_compliance(db, current_user.user_id)
    return [ComplianceRecordResponse.from_model(record) for record in records]


@router.delete("/compliance-history/{record_id}")
async def delete_compliance_record(
    record_id: str,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(get_current_user)
):
    await HistoryService.delete_compliance(db, current_user.user_id, record_id)
    return {"message": "Compliance record deleted successfully"}


@router.get("/route-history", response_model=List[SavedRouteResponse])
async def get_route_history(
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(get_current_user)
):
    records = await HistoryService.list_saved_routes(db, current_user.user_id)
    return [SavedRouteResponse.from_model(record) for record in records]


@router.delete("/route-history/{record_id}")
async def delete_route_record(
    record_id: str,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(get_current_user)
):
    await HistoryService.delete_saved_route(db, current_user.user_id, record_id)
    return {"message": "Route record deleted successfully"}


@router.get("/product-analysis-history", response_model=List[ProductAnalysisResponse])
async def get_product_analysis_history(
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(get_current_user)
):
    records = await HistoryService.list_product_analyses(db, current_user.user_id)
    return [ProductAnalysisResponse.from_model(record) for record in records]


@router.delete("/product-analysis-history/{record_id}")
async def delete_product_analysis_record(
    record_id: str,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(get_current_user)
):
    await HistoryService.delete_product_analysis(db, current_user.user_id, record_id)
    return {"message": "Product analysis deleted successfully"}
