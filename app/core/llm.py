"""
Reasoning collaborator: single-shot text completion.

The rest of the application depends only on ``ReasoningClient.generate_content``.
``GeminiClient`` talks to the Gemini ``generateContent`` REST endpoint.
"""

import logging
from functools import lru_cache
from typing import Any, Dict, Optional, Protocol

import httpx

from app.core.config import config
from app.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)


class ReasoningClient(Protocol):
    async def generate_content(self, prompt: str) -> str:  # pragma: no cover - interface
        ...


class GeminiClient:
    """Gemini text completion over httpx. No streaming, no conversation state."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _build_body(self, prompt: str) -> Dict[str, Any]:
        return {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}

    @staticmethod
    def _extract_text(payload: Dict[str, Any]) -> str:
        candidates = payload.get("candidates") or []
        if not candidates:
            raise ExternalServiceError("Gemini", "response contained no candidates")
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts)

    async def generate_content(self, prompt: str) -> str:
        if not self.api_key:
            raise ExternalServiceError("Gemini", "GOOGLE_API_KEY is not configured")

        url = f"{self.base_url}/models/{self.model}:generateContent"
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    url, params={"key": self.api_key}, json=self._build_body(prompt)
                )
                response.raise_for_status()
                payload = response.json()
        except httpx.TimeoutException as e:
            logger.error(f"Gemini request timed out after {self.timeout}s (model={self.model})")
            raise ExternalServiceError("Gemini", "request timed out") from e
        except httpx.HTTPError as e:
            logger.error(f"Gemini request failed (model={self.model}): {e}")
            raise ExternalServiceError("Gemini", str(e)) from e

        return self._extract_text(payload)


@lru_cache
def get_reasoning_client() -> ReasoningClient:
    """Dependency: the main reasoning model, built once from config."""
    return GeminiClient(
        api_key=config.google_api_key,
        model=config.gemini_model,
        base_url=config.gemini_base_url,
        timeout=config.llm_timeout_s,
    )


@lru_cache
def get_fast_reasoning_client() -> ReasoningClient:
    """Dependency: the cheaper model used for short lookups (country names, routes)."""
    return GeminiClient(
        api_key=config.google_api_key,
        model=config.gemini_fast_model,
        base_url=config.gemini_base_url,
        timeout=config.llm_timeout_s,
    )
