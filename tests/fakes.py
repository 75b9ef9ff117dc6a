"""
In-process stand-ins for the reasoning, maps and vision collaborators.
"""

import json
import re
from typing import Any, Callable, Dict, List, Tuple, Union

from app.core.exceptions import ExternalServiceError, UnresolvableLocationError

COUNTRY_ANSWERS = {
    "mumbai": {"countryName": "India", "countryCode": "IN", "confidence": 0.97},
    "tokyo": {"countryName": "Japan", "countryCode": "JP", "confidence": 0.98},
    "deutschland": {"countryName": "Germany", "countryCode": "DE", "confidence": 0.95},
    "rotterdam": {"countryName": "Netherlands", "countryCode": "NL"},
    "narnia": {"countryName": "Narnia", "countryCode": None, "confidence": 0.1},
}

_PLACE_RE = re.compile(r'for the following location: "(.*)"')

Reply = Union[str, Callable[[str], str]]


class FakeReasoningClient:
    """
    Answers prompts by substring match, first registered rule wins.
    Country lookups fall back to COUNTRY_ANSWERS.
    """

    def __init__(self) -> None:
        self.rules: List[Tuple[str, Reply]] = []
        self.prompts: List[str] = []

    def when(self, marker: str, reply: Reply) -> "FakeReasoningClient":
        self.rules.insert(0, (marker, reply))
        return self

    def calls_containing(self, marker: str) -> int:
        return sum(1 for prompt in self.prompts if marker in prompt)

    async def generate_content(self, prompt: str) -> str:
        self.prompts.append(prompt)
        for marker, reply in self.rules:
            if marker in prompt:
                return reply(prompt) if callable(reply) else reply

        match = _PLACE_RE.search(prompt)
        if match:
            answer = COUNTRY_ANSWERS.get(match.group(1).strip().lower())
            if answer is None:
                return "I could not identify that place."
            return f"Here you go:\n```json\n{json.dumps(answer)}\n```"
        raise ExternalServiceError("Gemini", "no scripted reply for prompt")


COORDINATES = {
    "Mumbai, India": {"lat": 19.076, "lng": 72.8777},
    "Nhava Sheva Port, Navi Mumbai, India": {"lat": 18.95, "lng": 72.95},
    "Port of Tokyo, Tokyo, Japan": {"lat": 35.62, "lng": 139.77},
    "Tokyo, Japan": {"lat": 35.6762, "lng": 139.6503},
}


class FakeMapsClient:
    def __init__(self) -> None:
        self.geocoded: List[str] = []

    async def geocode(self, name: str) -> Dict[str, float]:
        self.geocoded.append(name)
        if name not in COORDINATES:
            raise UnresolvableLocationError(name)
        return COORDINATES[name]

    async def compute_driving_polyline(self, coordinates: List[Dict[str, float]]) -> str:
        if len(coordinates) < 2:
            raise ValueError("A driving route needs at least two waypoints")
        return f"polyline:{len(coordinates)}"


class FakeVisionClient:
    def __init__(self) -> None:
        self.fail = False
        self.labels: List[Dict[str, Any]] = [
            {"description": "Footwear", "score": 0.98},
            {"description": "Leather", "score": 0.91},
        ]

    async def label_image(self, content: bytes, mime_type: str) -> List[Dict[str, Any]]:
        if self.fail:
            raise ExternalServiceError("Vision", "quota exceeded")
        return list(self.labels)
