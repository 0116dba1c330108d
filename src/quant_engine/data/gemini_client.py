"""Text-generation provider client (Gemini REST API)."""

import json
import logging
import os
import re
from typing import Any, Protocol

import requests

from quant_engine.data.market_data import run_blocking
from quant_engine.errors import UpstreamUnavailableError

logger = logging.getLogger(__name__)

GEMINI_BASE = "https://generativelanguage.googleapis.com/v1beta/models"
DEFAULT_MODEL = "gemini-1.5-flash"

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


class TextGenerator(Protocol):
    """Anything that can turn a prompt into free text."""

    @property
    def available(self) -> bool: ...

    async def generate(
        self, prompt: str, temperature: float = 0.2, max_output_tokens: int = 300
    ) -> str: ...


class GeminiClient:
    """
    Minimal Gemini generateContent client.

    A missing API key is a valid configuration: `available` is False and
    callers fall back to their neutral behaviour without a network call.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        session: requests.Session | None = None,
        timeout: float = 20.0,
    ):
        self.api_key = api_key if api_key is not None else os.environ.get("GEMINI_API_KEY")
        self.model = model or os.environ.get("GEMINI_MODEL", DEFAULT_MODEL)
        self.session = session or requests.Session()
        self.timeout = timeout

    @property
    def available(self) -> bool:
        return bool(self.api_key)

    async def generate(
        self, prompt: str, temperature: float = 0.2, max_output_tokens: int = 300
    ) -> str:
        """
        Generate text for a prompt.

        Raises:
            UpstreamUnavailableError: If no key is configured, the request
                fails, or the response has no text candidate
        """
        if not self.available:
            raise UpstreamUnavailableError("Gemini API key not configured")

        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": max_output_tokens,
            },
        }
        url = f"{GEMINI_BASE}/{self.model}:generateContent"

        def _post() -> requests.Response:
            return self.session.post(
                url, params={"key": self.api_key}, json=body, timeout=self.timeout
            )

        try:
            response = await run_blocking(_post)
        except requests.RequestException as e:
            raise UpstreamUnavailableError("Gemini request failed", details=str(e)) from e

        if not response.ok:
            raise UpstreamUnavailableError(f"Gemini API error: {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamUnavailableError("Gemini returned non-JSON body") from e

        text = _candidate_text(data)
        if not text:
            raise UpstreamUnavailableError("Gemini response had no text candidate")
        return text


def _candidate_text(data: dict[str, Any]) -> str:
    try:
        return data["candidates"][0]["content"]["parts"][0]["text"] or ""
    except (KeyError, IndexError, TypeError):
        return ""


def extract_json_object(text: str) -> dict[str, Any]:
    """
    Pull the first JSON object out of free text (models like to add fences).

    Raises:
        ValueError: If no JSON object can be decoded
    """
    match = _JSON_OBJECT.search(text or "")
    if not match:
        raise ValueError("No JSON object in response")
    parsed = json.loads(match.group(0))
    if not isinstance(parsed, dict):
        raise ValueError("Response JSON is not an object")
    return parsed
