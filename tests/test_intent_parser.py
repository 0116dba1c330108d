"""Tests for trade intent parsing."""

import asyncio
import json

import pytest

from quant_engine.engine.intent_parser import (
    SYMBOL_NOT_FOUND,
    AIIntentParser,
    IntentParser,
    RegexIntentParser,
    detect_action,
    extract_price,
    extract_quantity,
    extract_symbol,
)


class TestDetectAction:
    """Tests for keyword-based action detection."""

    def test_buy_keyword(self) -> None:
        """Test BUY keyword is detected."""
        assert detect_action("buy 20 aapl") == "BUY"

    def test_sell_keyword(self) -> None:
        """Test SELL keyword is detected."""
        assert detect_action("sell 20 aapl") == "SELL"

    def test_multiword_sell_keyword(self) -> None:
        """Test multi-word SELL phrases are detected."""
        assert detect_action("book profit on infy") == "SELL"

    def test_default_is_buy(self) -> None:
        """Test BUY is the default when no keyword matches."""
        assert detect_action("20 aapl please") == "BUY"

    def test_buy_checked_first(self) -> None:
        """Test BUY keywords win when both kinds appear."""
        assert detect_action("sell tsla and buy aapl") == "BUY"

    def test_keyword_inside_word_ignored(self) -> None:
        """Test 'target' does not count as the BUY keyword 'get'."""
        assert detect_action("sell meta with target 500") == "SELL"

    @pytest.mark.parametrize(
        "text",
        [
            "selling 10 tsla",
            "i am selling 10 tsla",
            "exiting 5 aapl now",
            "closing my msft position",
            "shorting 3 nvda",
            "booking profits on infy",
            "sold? no, sells 2 amzn",
        ],
    )
    def test_inflected_sell_keyword(self, text: str) -> None:
        """Test -s/-ed/-ing forms of SELL keywords are detected."""
        assert detect_action(text) == "SELL"

    def test_inflected_buy_keyword(self) -> None:
        """Test inflected BUY keywords are detected."""
        assert detect_action("buying 10 aapl") == "BUY"
        assert detect_action("purchased 5 msft") == "BUY"

    def test_suffix_outside_inflections_ignored(self) -> None:
        """Test words that only start with a keyword do not match."""
        assert detect_action("shortly after close, address 2 aapl") == "SELL"
        assert detect_action("the closet and the address") == "BUY"


class TestExtractQuantity:
    """Tests for quantity extraction."""

    def test_plain_number(self) -> None:
        """Test a bare number is the quantity."""
        assert extract_quantity("buy 20 aapl") == 20

    def test_thousands_separator(self) -> None:
        """Test comma-separated thousands are handled."""
        assert extract_quantity("buy 1,000 shares of nvda") == 1000

    def test_decimal_truncated(self) -> None:
        """Test fractional quantities are truncated to an integer."""
        assert extract_quantity("buy 2.7 lots") == 2

    def test_default_one(self) -> None:
        """Test quantity defaults to 1."""
        assert extract_quantity("buy aapl") == 1

    def test_zero_becomes_one(self) -> None:
        """Test quantity is at least 1."""
        assert extract_quantity("buy 0 aapl") == 1


class TestExtractSymbol:
    """Tests for ticker extraction."""

    def test_uppercase_ticker(self) -> None:
        """Test a bare uppercase ticker is found."""
        assert extract_symbol("Buy 20 AAPL at market price") == "AAPL"

    def test_noise_words_skipped(self) -> None:
        """Test uppercase noise words are not taken as tickers."""
        assert extract_symbol("I WANT TO BUY NVDA") == "NVDA"

    def test_capitalized_fallback(self) -> None:
        """Test a capitalized word is used when no uppercase ticker exists."""
        assert extract_symbol("buy 5 Tesla") == "TESLA"

    def test_no_symbol(self) -> None:
        """Test None when nothing looks like a ticker."""
        assert extract_symbol("buy some shares please") is None


class TestExtractPrice:
    """Tests for price type and target price extraction."""

    def test_market_default(self) -> None:
        """Test MARKET with no price by default."""
        assert extract_price("Buy AAPL", "buy aapl") == ("MARKET", None)

    def test_at_price(self) -> None:
        """Test 'at <number>' gives a LIMIT order."""
        assert extract_price("Sell TSLA at 250", "sell tsla at 250") == ("LIMIT", 250.0)

    def test_at_sign_price(self) -> None:
        """Test '@ <number>' gives a LIMIT order."""
        assert extract_price("Buy AAPL @ 185.50", "buy aapl @ 185.50") == ("LIMIT", 185.5)

    def test_limit_keyword(self) -> None:
        """Test 'limit <number>' gives a LIMIT order."""
        assert extract_price("buy MSFT limit 400", "buy msft limit 400") == ("LIMIT", 400.0)

    def test_market_phrase_overrides(self) -> None:
        """Test explicit market phrases force MARKET and clear the price."""
        assert extract_price("buy AAPL at cmp", "buy aapl at cmp") == ("MARKET", None)


class TestRegexIntentParser:
    """Tests for the deterministic parser."""

    def test_market_order(self) -> None:
        """Test the canonical market order."""
        result = RegexIntentParser().parse("Buy 20 AAPL at market price")

        assert result.success
        intent = result.intent
        assert intent.action == "BUY"
        assert intent.symbol == "AAPL"
        assert intent.quantity == 20
        assert intent.price_type == "MARKET"
        assert intent.target_price is None
        assert intent.ai_parsed is False

    def test_limit_sell(self) -> None:
        """Test a limit sell order."""
        result = RegexIntentParser().parse("Sell 50 shares of TSLA at 250")

        assert result.success
        assert result.intent.action == "SELL"
        assert result.intent.symbol == "TSLA"
        assert result.intent.quantity == 50
        assert result.intent.price_type == "LIMIT"
        assert result.intent.target_price == 250.0

    @pytest.mark.parametrize(
        "text,symbol",
        [
            ("I am selling 10 TSLA", "TSLA"),
            ("Exiting 5 AAPL now", "AAPL"),
            ("Closing my MSFT position", "MSFT"),
            ("Shorting 3 NVDA", "NVDA"),
        ],
    )
    def test_inflected_sell_orders(self, text: str, symbol: str) -> None:
        """Test sell orders phrased with -ing verbs parse as SELL."""
        result = RegexIntentParser().parse(text)

        assert result.success
        assert result.intent.action == "SELL"
        assert result.intent.symbol == symbol

    def test_raw_input_sanitized(self) -> None:
        """Test raw_input keeps the sanitized text."""
        result = RegexIntentParser().parse("  Buy\n20   AAPL  ")
        assert result.intent.raw_input == "Buy 20 AAPL"

    def test_missing_symbol_fails(self) -> None:
        """Test failure carries an actionable message."""
        result = RegexIntentParser().parse("buy some shares please")

        assert not result.success
        assert result.error == SYMBOL_NOT_FOUND

    def test_empty_input_fails(self) -> None:
        """Test empty input fails."""
        result = RegexIntentParser().parse("   ")
        assert not result.success


class TestAIIntentParser:
    """Tests for the AI-assisted parser."""

    def test_unconfigured(self, fake_generator_cls) -> None:
        """Test an unavailable generator fails without a call."""
        generator = fake_generator_cls(available=False)
        result = asyncio.run(AIIntentParser(generator).try_parse("buy 20 aapl"))

        assert not result.success
        assert generator.prompts == []

    def test_revalidates_response(self, fake_generator_cls) -> None:
        """Test the model output is normalized and validated."""
        generator = fake_generator_cls(
            response='```json\n{"action": "buy", "symbol": "aapl", "quantity": "20", '
            '"priceType": "MARKET", "targetPrice": null}\n```'
        )
        result = asyncio.run(AIIntentParser(generator).try_parse("buy 20 aapl"))

        assert result.success
        assert result.intent.symbol == "AAPL"
        assert result.intent.action == "BUY"
        assert result.intent.quantity == 20
        assert result.intent.ai_parsed is True

    def test_rejects_long_symbol(self, fake_generator_cls) -> None:
        """Test symbols longer than five letters are rejected."""
        generator = fake_generator_cls(response=json.dumps({"action": "BUY", "symbol": "TOOLONG"}))
        result = asyncio.run(AIIntentParser(generator).try_parse("buy toolong"))
        assert not result.success

    def test_provider_error_caught(self, fake_generator_cls) -> None:
        """Test provider exceptions become a failed result."""
        generator = fake_generator_cls(error=RuntimeError("boom"))
        result = asyncio.run(AIIntentParser(generator).try_parse("buy aapl"))

        assert not result.success
        assert "boom" in result.error


class TestIntentParser:
    """Tests for the strategy pipeline."""

    def test_needs_a_strategy(self) -> None:
        """Test an empty pipeline is rejected."""
        with pytest.raises(ValueError):
            IntentParser([])

    def test_deterministic_first(self, fake_generator_cls) -> None:
        """Test the AI strategy is not called when regex succeeds."""
        generator = fake_generator_cls(response="{}")
        result = asyncio.run(IntentParser.default(generator).parse("Buy 20 AAPL"))

        assert result.success
        assert generator.prompts == []

    def test_ai_fallback(self, fake_generator_cls) -> None:
        """Test the AI strategy resolves text the regex parser cannot."""
        generator = fake_generator_cls(
            response=json.dumps({"action": "SELL", "symbol": "AMZN", "quantity": 3})
        )
        result = asyncio.run(IntentParser.default(generator).parse("dump three amazon"))

        assert result.success
        assert result.intent.symbol == "AMZN"
        assert result.intent.action == "SELL"
        assert result.intent.quantity == 3

    def test_both_fail_returns_deterministic_error(self, fake_generator_cls) -> None:
        """Test the deterministic failure message is returned when both fail."""
        generator = fake_generator_cls(response="no json here")
        result = asyncio.run(IntentParser.default(generator).parse("buy some shares please"))

        assert not result.success
        assert result.error == SYMBOL_NOT_FOUND
