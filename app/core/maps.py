"""
Maps collaborator: geocoding and driving polylines (Google Maps Platform).
"""

import logging
from functools import lru_cache
from typing import Dict, List, Optional

import httpx

from app.core.config import config
from app.core.exceptions import ExternalServiceError, UnresolvableLocationError

logger = logging.getLogger(__name__)

GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
ROUTES_URL = "https://routes.googleapis.com/directions/v2:computeRoutes"


def _lat_lng(point: Dict[str, float]) -> Dict[str, Dict[str, float]]:
    return {"location": {"latLng": {"latitude": point["lat"], "longitude": point["lng"]}}}


class MapsClient:
    def __init__(
        self,
        api_key: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def geocode(self, name: str) -> Dict[str, float]:
        """
        Resolve a place name to coordinates.

        Raises:
            UnresolvableLocationError: The provider has no result for the name
            ExternalServiceError: The provider could not be reached
        """
        try:
            async with self._client() as client:
                response = await client.get(
                    GEOCODE_URL, params={"address": name, "key": self.api_key}
                )
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Geocoding request failed for {name!r}: {e}")
            raise ExternalServiceError("Geocoding", str(e)) from e

        results = payload.get("results") or []
        if payload.get("status") != "OK" or not results:
            raise UnresolvableLocationError(name)

        location = results[0]["geometry"]["location"]
        return {"lat": location["lat"], "lng": location["lng"]}

    async def compute_driving_polyline(self, coordinates: List[Dict[str, float]]) -> str:
        """
        Encoded polyline for a driving route through the given points.
        Intermediate points are passed in order.
        """
        if len(coordinates) < 2:
            raise ValueError("A driving route needs at least two waypoints")

        body = {
            "origin": _lat_lng(coordinates[0]),
            "destination": _lat_lng(coordinates[-1]),
            "intermediates": [_lat_lng(point) for point in coordinates[1:-1]],
            "travelMode": "DRIVE",
            "routingPreference": "TRAFFIC_AWARE",
            "computeAlternativeRoutes": False,
            "languageCode": "en-US",
            "units": "METRIC",
        }
        headers = {
            "X-Goog-Api-Key": self.api_key,
            "X-Goog-FieldMask": "routes.polyline.encodedPolyline",
        }
        try:
            async with self._client() as client:
                response = await client.post(ROUTES_URL, json=body, headers=headers)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Routes request failed: {e}")
            raise ExternalServiceError("Routes", str(e)) from e

        routes = payload.get("routes") or []
        if not routes:
            raise ExternalServiceError("Routes", "no driving route found")
        return routes[0]["polyline"]["encodedPolyline"]


@lru_cache
def get_maps_client() -> MapsClient:
    return MapsClient(api_key=config.google_maps_api_key)
