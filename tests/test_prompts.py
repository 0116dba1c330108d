"""Tests for prompt templates and the error envelope."""

from quant_engine.errors import AuthError, UpstreamRateLimitError
from quant_engine.prompts.templates import (
    get_prompt,
    intent_parse_prompt,
    list_prompts,
    sentiment_prompt,
)
from quant_engine.utils.provenance import build_error_response, build_meta, error_response_from


class TestProviderPrompts:
    """Tests for provider prompt builders."""

    def test_intent_prompt_escapes_quotes(self) -> None:
        """Test double quotes in user text cannot close the Input line."""
        prompt = intent_parse_prompt('buy "AAPL" now')
        assert "Input: \"buy 'AAPL' now\"" in prompt

    def test_intent_prompt_keeps_json_braces(self) -> None:
        """Test template braces survive formatting."""
        assert '"priceType": "MARKET" or "LIMIT"' in intent_parse_prompt("buy aapl")

    def test_sentiment_prompt_defaults(self) -> None:
        """Test company and sector defaults."""
        prompt = sentiment_prompt("NVDA")
        assert "for NVDA (NVDA) in the Unknown sector" in prompt


class TestMcpPrompts:
    """Tests for MCP prompt definitions."""

    def test_list_prompts(self) -> None:
        """Test the trade review prompt is listed."""
        names = [p["name"] for p in list_prompts()]
        assert names == ["trade_review"]

    def test_trade_review(self) -> None:
        """Test the prompt embeds the trade text."""
        result = get_prompt("trade_review", {"text": "Buy 20 AAPL"})

        content = result["messages"][0]["content"]
        assert 'Review this trade idea: "Buy 20 AAPL"' in content
        assert "evaluate_trade_intent" in content

    def test_unknown_prompt(self) -> None:
        """Test unknown prompts return None."""
        assert get_prompt("nope", {}) is None


class TestErrorEnvelope:
    """Tests for error responses."""

    def test_build_error_response(self) -> None:
        """Test the standard error fields."""
        response = build_error_response(400, "bad", "invalid_input", details="why")

        assert response["status"] == 400
        assert response["error"] == "bad"
        assert response["error_type"] == "invalid_input"
        assert response["details"] == "why"
        assert response["meta"]["tool"] == "error"

    def test_error_response_from_exception(self) -> None:
        """Test status and type come from the exception class."""
        response = error_response_from(AuthError("Unauthorized: Token expired"))

        assert response["status"] == 401
        assert response["error_type"] == "unauthorized"
        assert "details" not in response

    def test_partial_results_attached(self) -> None:
        """Test extra fields ride along on the error."""
        response = error_response_from(UpstreamRateLimitError("slow down"), parsed_intent={"symbol": "AAPL"})

        assert response["status"] == 429
        assert response["parsed_intent"] == {"symbol": "AAPL"}

    def test_build_meta(self) -> None:
        """Test duration is rounded to one decimal."""
        meta = build_meta("evaluate_trade_intent", 12.345)

        assert meta["tool"] == "evaluate_trade_intent"
        assert meta["duration_ms"] == 12.3
        assert meta["schema_version"] == "1"
