"""
Route Optimization Router
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db.engine import get_db_util
from app.core.llm import ReasoningClient, get_fast_reasoning_client, get_reasoning_client
from app.core.maps import MapsClient, get_maps_client
from app.modules.users.auth import get_current_user, TokenData
from .schemas import (
    ChooseRouteRequest,
    ChooseRouteResponse,
    RouteMapRequest,
    RouteMapResponse,
    RouteOptimizationRequest,
    SaveRouteRequest,
    SaveRouteResponse,
)
from .service import RouteOptimizationService

router = APIRouter(tags=["route-optimization"])


@router.post("/route-optimization", response_model=List[Dict[str, Any]])
async def optimize_routes(
    request: RouteOptimizationRequest,
    llm: ReasoningClient = Depends(get_fast_reasoning_client),
    current_user: TokenData = Depends(get_current_user)
):
    """
    Generate 9 candidate routes (3 tagged popular) for a package.
    """
    return await RouteOptimizationService.generate_routes(llm, request)


@router.post("/choose-route", response_model=ChooseRouteResponse)
async def choose_route(
    request: ChooseRouteRequest,
    db: AsyncSession = Depends(get_db_util),
    llm: ReasoningClient = Depends(get_fast_reasoning_client),
    current_user: TokenData = Depends(get_current_user)
):
    """
    Store the chosen route on a draft, creating one when no draftId is given.
    """
    return await RouteOptimizationService.choose_route(db, llm, current_user.user_id, request)


@router.post("/routes/map", response_model=RouteMapResponse)
async def build_route_map(
    request: RouteMapRequest,
    db: AsyncSession = Depends(get_db_util),
    llm: ReasoningClient = Depends(get_reasoning_client),
    maps: MapsClient = Depends(get_maps_client),
    current_user: TokenData = Depends(get_current_user)
):
    """
    Geocode route legs: land legs become driving polylines, sea/air legs coordinates.
    """
    return await RouteOptimizationService.build_map_data(
        db, llm, maps, current_user.user_id, request
    )


@router.get("/routes/{draft_id}/map")
async def get_route_map(
    draft_id: str,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(get_current_user)
):
    return await RouteOptimizationService.get_map_data(db, current_user.user_id, draft_id)


@router.post("/save-route", response_model=SaveRouteResponse)
async def save_route(
    request: SaveRouteRequest,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(get_current_user)
):
    return await RouteOptimizationService.save_route(db, current_user.user_id, request)
