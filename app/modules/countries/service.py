"""
Country normalizer - turns free-text place names into supported countries.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from app.core.exceptions import AppError, UnresolvableLocationError
from app.core.llm import ReasoningClient
from app.core.sanitizer import extract_json, strip_code_fence
from app.core.utils import to_number
from .constants import SUPPORTED_COUNTRIES

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE = 0.9

COUNTRY_PROMPT = """Identify the country for the following location: "{place}".
The location may be a city, port, region, landmark or a country name in any language.
Respond with JSON only, in exactly this shape:
{{"countryName": "<English country name>", "countryCode": "<ISO 3166-1 alpha-2 code>", "confidence": <number between 0 and 1>}}"""


@dataclass(frozen=True)
class CountryMatch:
    name: str
    code: str
    confidence: float


def _clamp_confidence(value) -> float:
    number = to_number(value)
    if number is None or number <= 0:
        return DEFAULT_CONFIDENCE
    return min(1.0, number)


async def normalize_country(llm: ReasoningClient, place_name) -> Optional[CountryMatch]:
    """
    Resolve a place name to one of the supported countries.

    Returns None for blank input (without calling the model), for codes
    outside the supported list, and for unusable model output.
    """
    if not isinstance(place_name, str) or not place_name.strip():
        return None

    place = place_name.strip()
    try:
        raw = await llm.generate_content(COUNTRY_PROMPT.format(place=place))
        parsed = extract_json(strip_code_fence(raw), "object")
    except AppError as e:
        logger.warning(f"Country lookup failed for {place!r}: {e.detail}")
        return None

    code = parsed.get("countryCode")
    if not isinstance(code, str):
        logger.warning(f"Country lookup for {place!r} returned no country code")
        return None

    code = code.strip().upper()
    if code not in SUPPORTED_COUNTRIES:
        logger.warning(f"Country lookup for {place!r} returned unsupported code {code!r}")
        return None

    return CountryMatch(
        name=SUPPORTED_COUNTRIES[code],
        code=code,
        confidence=_clamp_confidence(parsed.get("confidence")),
    )


async def require_country(llm: ReasoningClient, place_name) -> CountryMatch:
    """Like normalize_country, but unresolved places raise UnresolvableLocationError."""
    match = await normalize_country(llm, place_name)
    if match is None:
        raise UnresolvableLocationError(str(place_name))
    return match
