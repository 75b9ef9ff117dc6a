"""
Vision collaborator: image labelling through the Cloud Vision REST API.
"""

import base64
import logging
from functools import lru_cache
from typing import Dict, List, Optional, Union

import httpx

from app.core.config import config
from app.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

ANNOTATE_URL = "https://vision.googleapis.com/v1/images:annotate"


class VisionClient:
    def __init__(
        self,
        api_key: str,
        max_results: int = 10,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.max_results = max_results
        self.timeout = timeout
        self._transport = transport

    async def label_image(
        self, content: bytes, mime_type: str
    ) -> List[Dict[str, Union[str, float]]]:
        """Return ``[{description, score}]`` labels for an image."""
        body = {
            "requests": [
                {
                    "image": {"content": base64.b64encode(content).decode("ascii")},
                    "features": [
                        {"type": "LABEL_DETECTION", "maxResults": self.max_results}
                    ],
                }
            ]
        }
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    ANNOTATE_URL, params={"key": self.api_key}, json=body
                )
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Vision request failed for {mime_type} image: {e}")
            raise ExternalServiceError("Vision", str(e)) from e

        responses = payload.get("responses") or [{}]
        if "error" in responses[0]:
            raise ExternalServiceError("Vision", responses[0]["error"].get("message", ""))

        return [
            {"description": label.get("description", ""), "score": label.get("score", 0.0)}
            for label in responses[0].get("labelAnnotations", [])
        ]


@lru_cache
def get_vision_client() -> VisionClient:
    return VisionClient(api_key=config.vision_api_key or config.google_api_key)
