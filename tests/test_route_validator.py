import json

import pytest

from app.core.exceptions import RouteValidationError
from app.core.sanitizer import extract_json
from app.modules.route_optimization.validator import route_signature, validate_route_set
from tests.factories import route, route_batch


def test_valid_batch_is_normalised():
    routes = validate_route_set(route_batch())

    assert len(routes) == 9
    first = routes[0]
    assert first["totalCost"] == 1200.5
    assert first["routeDirections"][1]["mode"] == "sea"
    assert "state" not in first["routeDirections"][1]
    assert first["routeDirections"][1]["distance"] == 6800.46
    assert first["distanceByLeg"] == [20, 6800.46]


@pytest.mark.parametrize("popular", [2, 4])
def test_popular_quota_must_be_exactly_three(popular):
    with pytest.raises(RouteValidationError, match="popular"):
        validate_route_set(route_batch(popular=popular))


@pytest.mark.parametrize("count", [8, 10])
def test_batch_size_must_be_nine(count):
    with pytest.raises(RouteValidationError, match="expected 9 routes"):
        validate_route_set(route_batch(count=count))


def test_duplicate_signatures_reject_the_batch():
    routes = route_batch()
    routes[8] = route(4)
    with pytest.raises(RouteValidationError, match="duplicates"):
        validate_route_set(routes)


def test_unknown_mode_rejects_the_batch():
    routes = route_batch()
    routes[5]["routeDirections"][0]["mode"] = "teleport"
    with pytest.raises(RouteValidationError, match="unknown mode"):
        validate_route_set(routes)


def test_carbon_score_out_of_range():
    routes = route_batch()
    routes[2]["totalCarbonScore"] = 140
    with pytest.raises(RouteValidationError, match="0-100"):
        validate_route_set(routes)


def test_non_numeric_totals_are_rejected():
    routes = route_batch()
    routes[0]["totalTime"] = "10 days"
    with pytest.raises(RouteValidationError, match="totalTime"):
        validate_route_set(routes)


def test_leg_needs_two_waypoints():
    routes = route_batch()
    routes[1]["routeDirections"][0]["waypoints"] = ["Mumbai"]
    with pytest.raises(RouteValidationError, match="two waypoint"):
        validate_route_set(routes)


def test_not_a_list():
    with pytest.raises(RouteValidationError):
        validate_route_set({"routes": route_batch()})


def test_route_signature():
    normalised = validate_route_set(route_batch())[0]
    assert route_signature(normalised) == "Mumbai-Port 0:land|Port 0-Tokyo:sea"


def _batch_text(old: str, new: str) -> str:
    text = json.dumps(route_batch())
    assert old in text
    return text.replace(old, new, 1)


@pytest.mark.parametrize(
    "old, new, message",
    [
        ('"totalCost": 1200.499', '"totalCost": NaN', "totalCost"),
        ('"totalCost": 1200.499', '"totalCost": Infinity', "totalCost"),
        ('"totalTime": 240', '"totalTime": -Infinity', "totalTime"),
        ('"distance": 6800.456', '"distance": NaN', "distance"),
        ('"totalCarbonScore": 35.5', '"totalCarbonScore": 1e30', "0-100"),
    ],
)
def test_non_finite_and_huge_numbers_reject_the_batch(old, new, message):
    routes = extract_json(_batch_text(old, new), "array")
    with pytest.raises(RouteValidationError, match=message):
        validate_route_set(routes)


def test_huge_finite_total_is_kept_unrounded():
    routes = extract_json(_batch_text('"totalCost": 1200.499', '"totalCost": 1e30'), "array")
    assert validate_route_set(routes)[0]["totalCost"] == 1e30
