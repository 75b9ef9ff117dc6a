"""
Whole-batch validation of generated route candidates.

Any structural problem anywhere rejects the entire batch; callers regenerate
instead of patching individual routes.
"""

from typing import Any, Dict, List

from app.core.exceptions import RouteValidationError
from app.core.utils import is_number, round2

ROUTE_BATCH_SIZE = 9
POPULAR_TAG = "popular"
POPULAR_COUNT = 3
LEG_MODES = frozenset({"land", "sea", "air"})
NUMERIC_FIELDS = ("totalCost", "totalTime", "totalDistance", "totalCarbonScore")


def _validate_leg(route_index: int, leg_index: int, leg: Any) -> Dict[str, Any]:
    where = f"route {route_index + 1}, leg {leg_index + 1}"
    if not isinstance(leg, dict):
        raise RouteValidationError(f"Invalid route data: {where} is not an object")

    leg_id = leg.get("id")
    if not isinstance(leg_id, str) or not leg_id.strip():
        raise RouteValidationError(f"Invalid route data: {where} has no id")

    waypoints = leg.get("waypoints")
    if (
        not isinstance(waypoints, list)
        or len(waypoints) != 2
        or not all(isinstance(point, str) and point.strip() for point in waypoints)
    ):
        raise RouteValidationError(f"Invalid route data: {where} needs two waypoint names")

    mode = leg.get("mode", leg.get("state"))
    if not isinstance(mode, str) or mode.strip().lower() not in LEG_MODES:
        raise RouteValidationError(f"Invalid route data: {where} has unknown mode {mode!r}")

    normalized = {key: value for key, value in leg.items() if key != "state"}
    normalized["id"] = leg_id
    normalized["waypoints"] = [point.strip() for point in waypoints]
    normalized["mode"] = mode.strip().lower()

    if "distance" in leg and leg["distance"] is not None:
        distance = leg["distance"]
        if not is_number(distance) or distance <= 0:
            raise RouteValidationError(
                f"Invalid route data: {where} distance must be a positive number"
            )
        normalized["distance"] = round2(distance)
    return normalized


def route_signature(route: Dict[str, Any]) -> str:
    """Ordered "A-B:mode" pairs across the legs, used for duplicate detection."""
    return "|".join(
        f"{leg['waypoints'][0]}-{leg['waypoints'][1]}:{leg['mode']}"
        for leg in route["routeDirections"]
    )


def _validate_route(index: int, route: Any) -> Dict[str, Any]:
    if not isinstance(route, dict):
        raise RouteValidationError(f"Invalid route data: route {index + 1} is not an object")

    legs = route.get("routeDirections")
    if not isinstance(legs, list) or not legs:
        raise RouteValidationError(
            f"Invalid route data: route {index + 1} has no routeDirections"
        )

    normalized = dict(route)
    normalized["routeDirections"] = [
        _validate_leg(index, leg_index, leg) for leg_index, leg in enumerate(legs)
    ]

    for name in NUMERIC_FIELDS:
        value = route.get(name)
        if not is_number(value):
            raise RouteValidationError(
                f"Invalid route data: route {index + 1} {name} must be a number"
            )
        normalized[name] = round2(value)

    if not 0 <= normalized["totalCarbonScore"] <= 100:
        raise RouteValidationError(
            f"Invalid route data: route {index + 1} totalCarbonScore must be within 0-100"
        )

    distances = [leg.get("distance") for leg in normalized["routeDirections"]]
    if all(distance is not None for distance in distances):
        normalized["distanceByLeg"] = distances
    return normalized


def validate_route_set(routes: Any) -> List[Dict[str, Any]]:
    """
    Validate a generated batch of routes.

    Returns:
        The routes with legs normalised (state -> mode) and numbers rounded
        to 2 decimals

    Raises:
        RouteValidationError: Wrong batch size, popular-tag quota not met,
            a malformed route or leg, or two routes with the same signature
    """
    if not isinstance(routes, list):
        raise RouteValidationError("Invalid route data: expected a list of routes")
    if len(routes) != ROUTE_BATCH_SIZE:
        raise RouteValidationError(
            f"Invalid route data: expected {ROUTE_BATCH_SIZE} routes, got {len(routes)}"
        )

    validated = [_validate_route(index, route) for index, route in enumerate(routes)]

    popular = sum(1 for route in validated if route.get("tag") == POPULAR_TAG)
    if popular != POPULAR_COUNT:
        raise RouteValidationError(
            f"Invalid route data: expected {POPULAR_COUNT} popular routes, got {popular}"
        )

    seen = {}
    for index, route in enumerate(validated):
        signature = route_signature(route)
        if signature in seen:
            raise RouteValidationError(
                f"Invalid route data: routes {seen[signature] + 1} and {index + 1} are duplicates"
            )
        seen[signature] = index

    return validated
