"""
ComplianceService - scores a shipment, asks the reasoning model for the
narrative, then records the result and attaches it to a draft.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import InvalidAIResponseError, MalformedAIResponseError, ValidationError
from app.core.llm import ReasoningClient
from app.core.sanitizer import extract_json, strip_code_fence
from app.core.utils import round2, to_number
from app.modules.drafts.service import DraftsService
from app.modules.history.service import HistoryService
from . import rules
from .schemas import ComplianceCheckResponse, ComplianceNarrative
from .scoring import ComplianceAssessment, evaluate_compliance

logger = logging.getLogger(__name__)

FORM_GROUPS = (
    "ShipmentDetails",
    "TradeAndRegulatoryDetails",
    "PartiesAndIdentifiers",
    "LogisticsAndHandling",
    "DocumentVerification",
    "IntendedUseDetails",
)

NARRATIVE_PROMPT = """You are a compliance assistant for international trade shipments (WCO standards).
A rules engine has already assessed the shipment below. Do not change its status or scores.
Write the explanation a shipper needs.

Shipment form:
{form}

Rules engine findings:
- Compliance status: {status}
- Risk score: {risk_score}/100
- Risk factors: {risk_factors}
- Violations: {violations}
- Category scores: {scores}

Respond with JSON only, in exactly this shape:
{{
  "summary": "<one or two sentence overview>",
  "riskSummary": "<what drives the risk>",
  "violations": [{{"field": "<field>", "message": "<issue not listed above, if any>"}}],
  "recommendations": [{{"field": "<field>", "message": "<how to fix or mitigate>"}}],
  "additionalTips": ["<tip>", "<tip>", "<tip>"]
}}"""


def validate_form(payload: Any) -> Dict[str, Any]:
    """
    Split the request into draftId and form.

    Raises:
        ValidationError: Body is not an object, or ShipmentDetails is missing
    """
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be an object")
    form_data = {key: value for key, value in payload.items() if key != "draftId"}
    if not isinstance(form_data.get("ShipmentDetails"), dict):
        raise ValidationError("ShipmentDetails is required")
    for group in FORM_GROUPS:
        if group in form_data and not isinstance(form_data[group], dict):
            raise ValidationError(f"{group} must be an object")
    return form_data


def parse_narrative(raw_text: str) -> ComplianceNarrative:
    """
    Raises:
        InvalidAIResponseError: Unparseable text or a body of the wrong shape
    """
    try:
        parsed = extract_json(strip_code_fence(raw_text), "object")
        return ComplianceNarrative.model_validate(parsed)
    except MalformedAIResponseError as e:
        raise InvalidAIResponseError(e.detail) from e
    except PydanticValidationError as e:
        raise InvalidAIResponseError(
            f"Invalid AI response structure: {e.errors()[0]['loc']}"
        ) from e


def _merge_messages(base: List[Dict[str, str]], extra: List[Any]) -> List[Dict[str, str]]:
    merged = list(base)
    seen = {(item["field"], item["message"]) for item in base}
    for item in extra:
        key = (item.field, item.message)
        if item.message.strip() and key not in seen:
            seen.add(key)
            merged.append({"field": item.field, "message": item.message})
    return merged


def _tips(narrative_tips: List[str]) -> List[str]:
    tips = [tip.strip() for tip in narrative_tips if isinstance(tip, str) and tip.strip()]
    for default in rules.DEFAULT_ADDITIONAL_TIPS:
        if len(tips) >= 2:
            break
        if default not in tips:
            tips.append(default)
    return tips[:3]


def build_result(assessment: ComplianceAssessment, narrative: ComplianceNarrative) -> Dict[str, Any]:
    """Combine engine numbers with model text. Engine status and scores always win."""
    result = assessment.to_dict()
    result["summary"] = narrative.summary.strip() or result["summary"]
    if narrative.riskSummary and narrative.riskSummary.strip():
        result["riskLevel"]["summary"] = narrative.riskSummary.strip()
    result["violations"] = _merge_messages(assessment.violations, narrative.violations)
    result["recommendations"] = _merge_messages(
        assessment.recommendations, narrative.recommendations
    )
    result["additionalTips"] = _tips(narrative.additionalTips)

    ai_score = to_number(narrative.riskScore)
    if ai_score is not None:
        result["riskLevel"]["aiRiskScore"] = round2(min(100.0, max(0.0, ai_score)))
    return result


class ComplianceService:

    @staticmethod
    async def check(
        db: AsyncSession, llm: ReasoningClient, owner_id: str, payload: Dict[str, Any]
    ) -> ComplianceCheckResponse:
        """
        Run a compliance check.

        With a draftId the draft must belong to the caller and is updated;
        without one a new draft is created. Nothing is written when the
        model output is unusable.
        """
        form_data = validate_form(payload)
        draft_id: Optional[str] = payload.get("draftId") or None
        if draft_id is not None:
            await DraftsService.find_one(db, owner_id, str(draft_id))

        assessment = evaluate_compliance(form_data)
        prompt = NARRATIVE_PROMPT.format(
            form=json.dumps(form_data, indent=2, default=str),
            status=assessment.compliance_status,
            risk_score=assessment.risk_score,
            risk_factors="; ".join(assessment.risk_factors) or "none",
            violations=json.dumps(assessment.violations),
            scores=json.dumps(assessment.scores),
        )
        narrative = parse_narrative(await llm.generate_content(prompt))
        result = build_result(assessment, narrative)

        record = await HistoryService.record_compliance(
            db, owner_id, form_data, result, draft_id=draft_id
        )
        if draft_id is not None:
            draft = await DraftsService.apply_compliance_result(
                db, owner_id, str(draft_id), form_data, result
            )
        else:
            draft = await DraftsService.create_with_compliance(db, owner_id, form_data, result)
            record.draft_id = draft.id
            await db.flush()

        logger.info(
            f"Compliance check for draft {draft.id}: {result['complianceStatus']} "
            f"(risk {result['riskLevel']['riskScore']})"
        )
        return ComplianceCheckResponse(complianceResponse=result, recordId=draft.id)
