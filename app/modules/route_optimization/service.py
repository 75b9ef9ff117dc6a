"""
RouteOptimizationService - route generation, route choice, map geometry
and saved routes.
"""

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AppError, NotFoundError, ValidationError
from app.core.llm import ReasoningClient
from app.core.maps import MapsClient
from app.core.sanitizer import extract_json, strip_code_fence
from app.core.utils import is_number, to_number
from app.modules.countries.service import require_country
from app.modules.drafts.service import DraftsService
from app.modules.history.service import HistoryService, validate_route_form
from .schemas import (
    ChooseRouteRequest,
    ChooseRouteResponse,
    LocationAnalysis,
    RouteMapRequest,
    RouteMapResponse,
    RouteOptimizationRequest,
    SaveRouteRequest,
    SaveRouteResponse,
)
from .validator import LEG_MODES, validate_route_set

logger = logging.getLogger(__name__)

GENERATION_PROMPT = """You are a logistics route planner. Generate realistic shipping routes.

Origin: {origin}
Destination: {destination}
Package: quantity {quantity}, weight {weight} kg, dimensions {length}x{width}x{height} cm
Description: {description}

Rules:
- Return exactly 9 unique routes: air-led, sea-led and multimodal options.
- Land legs connect cities to ports/airports; sea legs run port to port; air legs airport to airport.
- Every leg has a positive distance in km.
- totalCost in USD, totalTime in hours, totalCarbonScore between 0 and 100.
- Tag exactly 3 routes "popular" (cheapest, fastest, lowest carbon); the others have tag null.

Respond with a JSON array only. Each element:
{{"routeDirections": [{{"id": "leg1", "waypoints": ["<start>", "<end>"], "mode": "land|sea|air", "distance": <km>}}],
  "totalDistance": <km>, "totalCost": <usd>, "totalTime": <hours>,
  "totalTimeDaysRange": "<e.g. 2-3 days>", "totalCarbonScore": <0-100>, "tag": "popular" or null}}"""

STANDARDIZE_PROMPT = """Rewrite the waypoints of these route legs as place names Google Maps can geocode.
Cities as "City, Country"; ports and airports by official name with city and country.
Country codes or regions become a major city in that country or region.
Keep "id" and "mode" unchanged and keep the same number of waypoints per leg.

Legs:
{legs}

Respond with the JSON array only, same order and structure."""


def validate_route_choice(route_data: Dict[str, Any]) -> None:
    """
    Raises:
        ValidationError: routeDirections is not a list, or distanceByLeg is not
            a list of positive numbers with one entry per leg
    """
    directions = route_data.get("routeDirections")
    if not isinstance(directions, list):
        raise ValidationError("routeData must include routeDirections as an array")
    distances = route_data.get("distanceByLeg")
    if not isinstance(distances, list):
        raise ValidationError("distanceByLeg must be an array")
    if len(distances) != len(directions):
        raise ValidationError("distanceByLeg length must match the number of routeDirections")
    for index, distance in enumerate(distances):
        number = distance if is_number(distance) else to_number(distance)
        if number is None or number <= 0:
            raise ValidationError(f"distanceByLeg[{index}] must be a positive number")


def validate_map_legs(legs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Normalise map legs to {id, waypoints, mode}; state is accepted for mode."""
    normalized = []
    for index, leg in enumerate(legs):
        leg_id = leg.get("id")
        waypoints = leg.get("waypoints")
        mode = leg.get("mode", leg.get("state"))
        if not isinstance(leg_id, str) or not leg_id.strip():
            raise ValidationError(f"routes[{index}].id is required")
        if (
            not isinstance(waypoints, list)
            or len(waypoints) < 2
            or not all(isinstance(point, str) and point.strip() for point in waypoints)
        ):
            raise ValidationError(f"routes[{index}].waypoints needs at least two place names")
        if not isinstance(mode, str) or mode.lower() not in LEG_MODES:
            raise ValidationError(f"routes[{index}].mode must be land, sea or air")
        normalized.append({"id": leg_id, "waypoints": list(waypoints), "mode": mode.lower()})
    return normalized


class RouteOptimizationService:

    @staticmethod
    async def generate_routes(
        llm: ReasoningClient, request: RouteOptimizationRequest
    ) -> List[Dict[str, Any]]:
        """
        Ask the model for a batch of routes and validate it as a whole.

        Raises:
            MalformedAIResponseError: No JSON array in the response
            RouteValidationError: The batch breaks a structural rule
        """
        package = request.package
        prompt = GENERATION_PROMPT.format(
            origin=request.from_,
            destination=request.to,
            quantity=package.quantity,
            weight=package.weight,
            length=package.length,
            width=package.width,
            height=package.height,
            description=request.description,
        )
        raw = await llm.generate_content(prompt)
        routes = validate_route_set(extract_json(strip_code_fence(raw), "array"))
        logger.info(f"Generated {len(routes)} routes from {request.from_} to {request.to}")
        return routes

    @staticmethod
    async def choose_route(
        db: AsyncSession, llm: ReasoningClient, owner_id: str, request: ChooseRouteRequest
    ) -> ChooseRouteResponse:
        """
        Attach a chosen route to a draft.

        With draftId the caller's draft is updated. Without it, formData must
        carry from/to/weight and both places must resolve to supported
        countries before a new draft is created.
        """
        validate_route_choice(request.routeData)

        if request.draftId:
            draft = await DraftsService.apply_route_choice(
                db, owner_id, request.draftId, request.routeData
            )
            return ChooseRouteResponse(message="Draft updated successfully", recordId=draft.id)

        route_form = validate_route_form(request.formData)
        origin, destination = await asyncio.gather(
            require_country(llm, route_form["from"]),
            require_country(llm, route_form["to"]),
        )

        draft = await DraftsService.create_with_route(
            db,
            owner_id,
            {},
            request.routeData,
            origin.code,
            destination.code,
            route_form["weight"],
        )
        return ChooseRouteResponse(
            message="Route chosen and draft saved successfully",
            recordId=draft.id,
            originAnalysis=LocationAnalysis(
                input=route_form["from"],
                countryName=origin.name,
                countryCode=origin.code,
                confidence=origin.confidence,
            ),
            destinationAnalysis=LocationAnalysis(
                input=route_form["to"],
                countryName=destination.name,
                countryCode=destination.code,
                confidence=destination.confidence,
            ),
        )

    @staticmethod
    async def standardize_waypoints(
        llm: ReasoningClient, legs: List[Dict[str, Any]]
    ) -> List[Dict[str, Any]]:
        """
        Have the model rewrite waypoints into geocodable names.
        Falls back to the caller's legs when the answer is unusable.
        """
        try:
            raw = await llm.generate_content(STANDARDIZE_PROMPT.format(legs=json.dumps(legs, indent=2)))
            cleaned = extract_json(strip_code_fence(raw), "array")
        except AppError as e:
            logger.warning(f"Waypoint standardization failed, using original legs: {e.detail}")
            return legs

        if len(cleaned) != len(legs):
            logger.warning("Waypoint standardization changed the number of legs, using original legs")
            return legs

        standardized = []
        for original, leg in zip(legs, cleaned):
            if not isinstance(leg, dict):
                logger.warning("Waypoint standardization returned a non-object leg, using original legs")
                return legs
            waypoints = leg.get("waypoints")
            mode = leg.get("mode", leg.get("state"))
            if (
                leg.get("id") != original["id"]
                or mode != original["mode"]
                or not isinstance(waypoints, list)
                or len(waypoints) != len(original["waypoints"])
                or not all(isinstance(point, str) and point.strip() for point in waypoints)
            ):
                logger.warning(
                    f"Waypoint standardization returned a mismatched leg {original['id']!r}, "
                    "using original legs"
                )
                return legs
            standardized.append({**original, "waypoints": waypoints})
        return standardized

    @staticmethod
    async def _leg_geometry(maps: MapsClient, leg: Dict[str, Any]) -> Dict[str, Any]:
        try:
            coordinates = await asyncio.gather(*(maps.geocode(point) for point in leg["waypoints"]))
            if leg["mode"] == "land":
                polyline = await maps.compute_driving_polyline(list(coordinates))
                return {"encodedPolyline": polyline, "mode": leg["mode"]}
            return {"coordinates": list(coordinates), "mode": leg["mode"]}
        except (AppError, ValueError) as e:
            message = e.detail if isinstance(e, AppError) else str(e)
            logger.warning(f"Failed to process route leg {leg['id']!r}: {message}")
            return {"error": f"Failed to process route: {message}", "mode": leg["mode"]}

    @staticmethod
    async def build_map_data(
        db: AsyncSession,
        llm: ReasoningClient,
        maps: MapsClient,
        owner_id: str,
        request: RouteMapRequest,
    ) -> RouteMapResponse:
        """
        Geocode every leg concurrently and store the geometry on a draft.
        Without a draftId an ephemeral draft holds the result.
        """
        legs = validate_map_legs(request.routes)
        if request.draftId:
            await DraftsService.find_one(db, owner_id, request.draftId)

        legs = await RouteOptimizationService.standardize_waypoints(llm, legs)
        geometries = await asyncio.gather(
            *(RouteOptimizationService._leg_geometry(maps, leg) for leg in legs)
        )
        routes = {leg["id"]: geometry for leg, geometry in zip(legs, geometries)}
        map_data = {"routes": routes, "originalRoute": legs}

        if request.draftId:
            draft = await DraftsService.apply_map_data(db, owner_id, request.draftId, map_data)
        else:
            draft = await DraftsService.create_ephemeral(db, owner_id, {})
            draft = await DraftsService.apply_map_data(db, owner_id, draft.id, map_data)

        return RouteMapResponse(draftId=draft.id, routes=routes, originalRoute=legs)

    @staticmethod
    async def get_map_data(db: AsyncSession, owner_id: str, draft_id: str) -> Dict[str, Any]:
        draft = await DraftsService.find_one(db, owner_id, draft_id)
        if not draft.map_data:
            raise NotFoundError("Map data")
        return draft.map_data

    @staticmethod
    async def save_route(
        db: AsyncSession, owner_id: str, request: SaveRouteRequest
    ) -> SaveRouteResponse:
        draft_id: Optional[str] = request.draftId
        if draft_id:
            await DraftsService.find_one(db, owner_id, draft_id)
        record = await HistoryService.record_saved_route(
            db, owner_id, request.formData, request.routeData, draft_id=draft_id
        )
        return SaveRouteResponse(recordId=record.id)
