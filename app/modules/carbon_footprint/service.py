"""
CarbonFootprintService - per-leg emission estimates for a chosen route.
"""

import json
import logging

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import InvalidAIResponseError
from app.core.llm import ReasoningClient
from app.core.sanitizer import extract_json, strip_code_fence
from app.modules.drafts.service import DraftsService
from .schemas import CarbonAnalysis, CarbonFootprintRequest, CarbonFootprintResponse

logger = logging.getLogger(__name__)

# kg CO2e per km
EMISSION_FACTORS = {"land": 0.07, "sea": 0.01, "air": 0.60}

CARBON_PROMPT = """You are a carbon footprint analyst for freight shipments.
Use these CO2e emission factors per km: land {land}, sea {sea}, air {air}.

Origin: {origin}
Destination: {destination}
Total distance: {distance} km
Shipment weight: {weight} kg
Route legs: {legs}

Compute emissions per leg from its transport mode. Where legs carry no
distance, split the total distance across them.

Respond with JSON only:
{{
  "totalDistance": "<e.g. 6700 km>",
  "totalEmissions": "<e.g. 1500 kg CO2e>",
  "routeAnalysis": [{{"leg": "Leg 1", "origin": "<start>", "destination": "<end>",
                      "mode": "land|sea|air", "distance": "<km>", "emissions": "<kg CO2e>"}}],
  "suggestions": ["<how to reduce emissions>"],
  "earthImpact": "<short comparison, e.g. trees needed to absorb it>"
}}"""


def parse_analysis(raw_text: str) -> CarbonAnalysis:
    """
    Raises:
        MalformedAIResponseError: No JSON object in the response
        InvalidAIResponseError: The object does not have the analysis shape
    """
    parsed = extract_json(strip_code_fence(raw_text), "object")
    try:
        return CarbonAnalysis.model_validate(parsed)
    except PydanticValidationError as e:
        raise InvalidAIResponseError(
            f"Invalid AI response structure: {e.errors()[0]['loc']}"
        ) from e


class CarbonFootprintService:

    @staticmethod
    async def analyze(
        db: AsyncSession, llm: ReasoningClient, owner_id: str, request: CarbonFootprintRequest
    ) -> CarbonFootprintResponse:
        """
        Estimate emissions and store them on the draft.
        Without a draftId the analysis goes on a new ephemeral draft.
        """
        if request.draftId:
            await DraftsService.find_one(db, owner_id, request.draftId)

        prompt = CARBON_PROMPT.format(
            origin=request.origin,
            destination=request.destination,
            distance=request.distance,
            weight=request.weight,
            legs=json.dumps(request.routeDirections),
            **EMISSION_FACTORS,
        )
        analysis = parse_analysis(await llm.generate_content(prompt))
        payload = analysis.model_dump()

        if request.draftId:
            draft = await DraftsService.apply_carbon_analysis(
                db, owner_id, request.draftId, payload
            )
        else:
            draft = await DraftsService.create_ephemeral(
                db,
                owner_id,
                {"ShipmentDetails": {"Gross Weight": request.weight}},
                carbon_analysis_data=payload,
            )
            logger.info(f"Stored carbon analysis on ephemeral draft {draft.id}")

        return CarbonFootprintResponse(**payload, draftId=draft.id)
