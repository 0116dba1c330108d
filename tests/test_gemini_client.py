"""Tests for the text-generation client."""

import asyncio
from typing import Any
from unittest.mock import MagicMock

import pytest
import requests

from quant_engine.data.gemini_client import GeminiClient, extract_json_object
from quant_engine.errors import UpstreamUnavailableError


def _session(status_code: int = 200, payload: Any = None, error: Exception | None = None) -> MagicMock:
    session = MagicMock(spec=requests.Session)
    if error is not None:
        session.post.side_effect = error
        return session
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.json.return_value = payload
    session.post.return_value = response
    return session


def _candidates(text: str) -> dict[str, Any]:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


class TestExtractJsonObject:
    """Tests for extract_json_object."""

    def test_plain_object(self) -> None:
        """Test a bare JSON object."""
        assert extract_json_object('{"a": 1}') == {"a": 1}

    def test_fenced_object(self) -> None:
        """Test markdown fences and prose are ignored."""
        text = 'Here you go:\n```json\n{"sentimentScore": 70, "brief": "ok"}\n```'
        assert extract_json_object(text) == {"sentimentScore": 70, "brief": "ok"}

    def test_no_object(self) -> None:
        """Test text without an object raises ValueError."""
        with pytest.raises(ValueError):
            extract_json_object("no json here")

    def test_invalid_json(self) -> None:
        """Test broken JSON raises ValueError."""
        with pytest.raises(ValueError):
            extract_json_object("{not: json}")


class TestGeminiClient:
    """Tests for GeminiClient."""

    def test_available(self) -> None:
        """Test availability follows the API key."""
        assert GeminiClient(api_key="k", session=_session()).available is True
        assert GeminiClient(api_key="", session=_session()).available is False

    def test_generate(self) -> None:
        """Test the first candidate's text is returned."""
        session = _session(payload=_candidates('{"sentimentScore": 60}'))
        client = GeminiClient(api_key="k", model="gemini-test", session=session)

        text = asyncio.run(client.generate("prompt", temperature=0.1, max_output_tokens=50))

        assert text == '{"sentimentScore": 60}'
        url = session.post.call_args.args[0]
        body = session.post.call_args.kwargs["json"]
        assert url.endswith("/gemini-test:generateContent")
        assert body["generationConfig"] == {"temperature": 0.1, "maxOutputTokens": 50}
        assert session.post.call_args.kwargs["params"] == {"key": "k"}

    def test_not_configured(self) -> None:
        """Test generating without a key raises."""
        client = GeminiClient(api_key="", session=_session())
        with pytest.raises(UpstreamUnavailableError, match="not configured"):
            asyncio.run(client.generate("prompt"))

    def test_http_error(self) -> None:
        """Test non-2xx responses raise."""
        client = GeminiClient(api_key="k", session=_session(status_code=500))
        with pytest.raises(UpstreamUnavailableError, match="500"):
            asyncio.run(client.generate("prompt"))

    def test_request_exception(self) -> None:
        """Test network failures raise UpstreamUnavailableError."""
        client = GeminiClient(api_key="k", session=_session(error=requests.Timeout("slow")))
        with pytest.raises(UpstreamUnavailableError, match="request failed"):
            asyncio.run(client.generate("prompt"))

    def test_empty_candidates(self) -> None:
        """Test a response without text raises."""
        client = GeminiClient(api_key="k", session=_session(payload={"candidates": []}))
        with pytest.raises(UpstreamUnavailableError, match="no text candidate"):
            asyncio.run(client.generate("prompt"))
