import logging
from typing import Any, Dict, Optional

import httpx

from .config import Settings, get_settings

logger = logging.getLogger(__name__)


class GeminiError(Exception):
    """The request to the generative-text API did not complete."""


class GeminiResponseError(GeminiError):
    """The API answered, but not with any recommendation text."""


class GeminiClient:
    def __init__(self, settings: Optional[Settings] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        s = settings or get_settings()
        self.base = s.gemini_base_url.rstrip('/')
        self.model = s.gemini_model
        self.api_key = s.gemini_api_key
        self.timeout = s.request_timeout
        self.transport = transport

    @property
    def url(self) -> str:
        return f"{self.base}/models/{self.model}:generateContent"

    async def generate(self, prompt: str) -> str:
        if not self.api_key:
            raise GeminiError("Gemini API key not found")
        body = {"contents": [{"parts": [{"text": prompt}]}]}
        logger.debug("POST %s (model=%s)", self.url, self.model)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                resp = await client.post(
                    self.url,
                    params={"key": self.api_key},
                    headers={"Content-Type": "application/json"},
                    json=body,
                )
        except httpx.HTTPError as e:
            logger.error("Request to %s failed: %s", self.url, e)
            raise GeminiError(str(e) or e.__class__.__name__) from e

        if resp.is_error:
            message = _error_message(resp) or resp.reason_phrase
            logger.error("Gemini returned %s: %s", resp.status_code, message)
            raise GeminiError(f"API error: {resp.status_code} - {message}")

        try:
            data = resp.json()
        except ValueError as e:
            raise GeminiError(f"Response was not valid JSON: {e}") from e
        logger.debug("API response keys: %s", sorted(data) if isinstance(data, dict) else type(data).__name__)
        return extract_text(data)


def _error_message(resp: httpx.Response) -> Optional[str]:
    try:
        data = resp.json()
    except ValueError:
        return None
    if isinstance(data, dict) and isinstance(data.get("error"), dict):
        return data["error"].get("message") or None
    return None


def extract_text(data: Dict[str, Any]) -> str:
    """Pull the first candidate's first text part out of a generateContent body.

    Raises GeminiResponseError when the body carries no usable text, with the
    message that gets shown to the user.
    """
    if not isinstance(data, dict):
        data = {}
    candidates = data.get("candidates")
    if isinstance(candidates, list) and candidates:
        content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
        parts = content.get("parts") if isinstance(content, dict) else None
        if isinstance(parts, list) and parts and isinstance(parts[0], dict):
            return str(parts[0].get("text") or "")
        logger.error("Parts not found or invalid: %r", content)
        raise GeminiResponseError("Invalid response structure from API")
    if data.get("error"):
        error = data["error"]
        message = error.get("message") if isinstance(error, dict) else None
        logger.error("API Error: %r", error)
        raise GeminiResponseError(f"API Error: {message or 'Unknown error'}")
    logger.error("Unexpected response: %r", data)
    raise GeminiResponseError("No recommendations received from API")
