"""
Drafts Router - API endpoints for managing shipment drafts
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, File, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db.engine import get_db_util
from app.modules.users.auth import get_current_user, TokenData
from .csv_import import parse_csv
from .service import DraftsService
from .schemas import CreateDraftDto, CsvImportResponse, DraftCreatedResponse, DraftResponse

router = APIRouter(prefix="/drafts", tags=["drafts"])


@router.post("", response_model=DraftCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_draft(
    dto: CreateDraftDto,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(get_current_user)
):
    """
    Create a new draft from the manual form.
    """
    draft = await DraftsService.create(db, current_user.user_id, dto.to_form_data())
    return DraftCreatedResponse(recordId=draft.id)


@router.post("/csv", response_model=CsvImportResponse, status_code=status.HTTP_201_CREATED)
async def import_csv(
    file: UploadFile = File(..., description="CSV file, one shipment per row"),
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(get_current_user)
):
    """
    Bulk import drafts from a CSV upload.
    """
    forms = parse_csv(await file.read())
    record_ids = []
    for form_data in forms:
        draft = await DraftsService.create(db, current_user.user_id, form_data)
        record_ids.append(draft.id)
    return CsvImportResponse(
        message=f"{len(record_ids)} draft(s) created successfully", recordIds=record_ids
    )


@router.get("", response_model=List[DraftResponse])
async def get_drafts_by_tab(
    tab: str = Query(..., description="yet-to-be-checked, compliant, non-compliant or ready-for-shipment"),
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(get_current_user)
):
    """
    Get the current user's drafts for one tab, newest first.
    """
    drafts = await DraftsService.find_all_by_tab(db, current_user.user_id, tab)
    return [DraftResponse.from_model(draft) for draft in drafts]


@router.get("/{draft_id}", response_model=DraftResponse)
async def get_draft(
    draft_id: str,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(get_current_user)
):
    draft = await DraftsService.find_one(db, current_user.user_id, draft_id)
    return DraftResponse.from_model(draft)


@router.patch("/{draft_id}", response_model=DraftResponse)
async def update_draft(
    draft_id: str,
    patch: Dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(get_current_user)
):
    """
    Update a draft. Only formData, carbonAnalysisData and productAnalysisData
    can be changed here; stage results have their own endpoints.
    """
    draft = await DraftsService.update(db, current_user.user_id, draft_id, patch)
    return DraftResponse.from_model(draft)


@router.delete("/{draft_id}")
async def delete_draft(
    draft_id: str,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(get_current_user)
):
    await DraftsService.delete(db, current_user.user_id, draft_id)
    return {"message": "Draft deleted successfully"}
