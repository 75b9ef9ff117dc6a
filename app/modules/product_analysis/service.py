"""
ProductAnalysisService - classify a product photo and seed a draft from it.
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import config
from app.core.exceptions import ExternalServiceError, InvalidAIResponseError, ValidationError
from app.core.llm import ReasoningClient
from app.core.sanitizer import extract_json, strip_code_fence
from app.core.storage import StorageService
from app.core.vision import VisionClient
from app.modules.history.service import HistoryService
from .schemas import ProductAnalysisResult, ProductClassification

logger = logging.getLogger(__name__)

MAX_IMAGE_BYTES = 10 * 1024 * 1024

CLASSIFICATION_PROMPT = """Classify the product shown in an image, using the image labels below.

Provide:
1. The HS Code for the product.
2. A detailed product description.
3. Whether the product is perishable (true/false).
4. Whether the product is hazardous (true/false).
5. The documents required to export it (names only).
6. Recommendations for exporting it, referencing world customs rules where relevant.

Image labels:
{labels}

Respond with JSON only:
{{
  "HS Code": "string",
  "Product Description": "string",
  "Perishable": boolean,
  "Hazardous": boolean,
  "Required Export Document List": ["string"],
  "Recommendations": {{"message": "string", "additionalTip": "string"}}
}}"""


def validate_image(content: bytes, mime_type: Optional[str]) -> None:
    if not content:
        raise ValidationError("No image uploaded")
    if not mime_type or not mime_type.startswith("image/"):
        raise ValidationError("Uploaded file must be an image")
    if len(content) > MAX_IMAGE_BYTES:
        raise ValidationError("Image exceeds the 10 MB limit")


def parse_classification(raw_text: str) -> Dict[str, Any]:
    """
    Raises:
        MalformedAIResponseError: No JSON object in the response
        InvalidAIResponseError: The object is missing fields or has wrong types
    """
    parsed = extract_json(strip_code_fence(raw_text), "object")
    try:
        classification = ProductClassification.model_validate(parsed)
    except PydanticValidationError as e:
        raise InvalidAIResponseError(
            f"Invalid AI response structure: {e.errors()[0]['loc']}"
        ) from e
    return classification.model_dump(by_alias=True)


class ProductAnalysisService:

    @staticmethod
    async def _label(vision: VisionClient, content: bytes, mime_type: str) -> Dict[str, Any]:
        try:
            labels = await vision.label_image(content, mime_type)
        except ExternalServiceError as e:
            logger.warning(f"Image labelling unavailable, classifying without labels: {e.detail}")
            return {"success": False, "labels": []}
        return {"success": True, "labels": labels}

    @staticmethod
    async def analyze(
        db: AsyncSession,
        llm: ReasoningClient,
        vision: VisionClient,
        owner_id: str,
        content: bytes,
        filename: str,
        mime_type: str,
    ) -> ProductAnalysisResult:
        """
        Upload (when storage is configured), label, classify, then write the
        history record and its seeded draft.
        """
        validate_image(content, mime_type)

        file_key = StorageService.build_image_key(owner_id, filename)
        image_url = None
        if StorageService.is_enabled():
            await asyncio.to_thread(StorageService.upload_image, content, file_key, mime_type)
            image_url = await asyncio.to_thread(StorageService.generate_signed_url, file_key)

        vision_result = await ProductAnalysisService._label(vision, content, mime_type)
        prompt = CLASSIFICATION_PROMPT.format(labels=json.dumps(vision_result["labels"], indent=2))
        ai_result = parse_classification(await llm.generate_content(prompt))

        image_details = {
            "bucketName": config.gcp_bucket_name,
            "fileName": file_key,
            "mimeType": mime_type,
        }
        record, draft = await HistoryService.record_product_analysis(
            db, owner_id, image_details, vision_result, ai_result
        )
        logger.info(f"Product analysis {record.id} seeded draft {draft.id}")
        return ProductAnalysisResult(
            data=ai_result, imageUrl=image_url, recordId=record.id, draftId=draft.id
        )
