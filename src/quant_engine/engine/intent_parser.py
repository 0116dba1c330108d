"""Natural-language trade intent parsing.

Two strategies behind one interface: a deterministic regex parser that
never leaves the process, and an AI-assisted parser used only when the
deterministic pass cannot find a symbol.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Protocol

from quant_engine.data.gemini_client import TextGenerator, extract_json_object
from quant_engine.models import TradeIntent
from quant_engine.prompts.templates import intent_parse_prompt
from quant_engine.utils.numbers import safe_float
from quant_engine.utils.sanitize import sanitize_text

logger = logging.getLogger(__name__)

SYMBOL_PATTERN = re.compile(r"\b([A-Z]{1,5})\b")
QUANTITY_PATTERN = re.compile(
    r"(\d+(?:,\d{3})*(?:\.\d+)?)\s*(?:shares?|lots?|qty|units?|nos?|quantities?)?",
    re.IGNORECASE,
)
PRICE_PATTERN = re.compile(r"(?:\bat|@|\bprice)\s*\$?\s*(\d+(?:\.\d+)?)", re.IGNORECASE)
LIMIT_PATTERN = re.compile(
    r"(?:\blimit|\btarget|\btp|\bsl|\bstop.?loss)\s*(?:at|@|of)?\s*\$?\s*(\d+(?:\.\d+)?)",
    re.IGNORECASE,
)
VALID_SYMBOL = re.compile(r"^[A-Z]{1,5}$")


def _inflected(word: str) -> str:
    """Regex for a keyword plus its -s/-ed/-ing forms ("close" also matches "closing")."""
    if word.endswith("e"):
        return re.escape(word[:-1]) + r"(?:e|es|ed|ing)"
    return re.escape(word) + r"(?:s|es|ed|ing)?"


def keyword_pattern(words: tuple[str, ...]) -> re.Pattern[str]:
    # Leading boundary keeps "get" from matching inside "target"
    return re.compile(r"\b(?:" + "|".join(_inflected(w) for w in words) + r")\b")


BUY_WORDS = (
    "buy", "purchase", "acquire", "long", "enter", "get", "add",
    "accumulate", "pick", "invest",
)
SELL_WORDS = (
    "sell", "exit", "short", "dump", "offload", "liquidate", "close",
    "unload", "book profit", "square off",
)
BUY_PATTERN = keyword_pattern(BUY_WORDS)
SELL_PATTERN = keyword_pattern(SELL_WORDS)
MARKET_PHRASES = (
    "market price", "market order", "today's price", "current price", "cmp", "ltp",
)

NOISE_WORDS = frozenset({
    "I", "A", "AT", "IN", "TO", "OF", "THE", "MY", "IS", "IT", "ON", "FOR",
    "AND", "OR", "NOT", "BUT", "ALL", "DO", "IF", "SO", "UP", "AM", "AN",
    "BE", "BY", "GO", "HE", "ME", "NO", "OK", "US", "WE", "AS", "CAN",
    "BUY", "SELL", "NOW", "QTY", "MKT", "LTP", "SET", "PUT", "GET",
    "WANT", "LIKE", "SOME", "WITH", "FROM", "WILL", "THAT", "THIS", "HAVE",
    "JUST", "BEEN", "THEM", "EACH", "MORE", "ALSO", "THAN", "VERY", "MUCH",
    "TODAY", "PRICE", "MARKET", "LIMIT", "SHARES", "STOCK", "TRADE",
})

SYMBOL_NOT_FOUND = "Could not identify stock symbol. Use uppercase (e.g., AAPL, TSLA)."


@dataclass(frozen=True)
class ParseResult:
    """Outcome of one parsing attempt."""

    success: bool
    intent: TradeIntent | None = None
    error: str | None = None


class IntentParserStrategy(Protocol):
    async def try_parse(self, text: str) -> ParseResult: ...


def detect_action(lower: str) -> str:
    """Keyword match on word starts; BUY keywords win over SELL, BUY when neither appears."""
    if BUY_PATTERN.search(lower):
        return "BUY"
    if SELL_PATTERN.search(lower):
        return "SELL"
    return "BUY"


def extract_quantity(lower: str) -> int:
    match = QUANTITY_PATTERN.search(lower)
    if not match:
        return 1
    quantity = safe_float(match.group(1).replace(",", ""))
    if quantity is None:
        return 1
    return max(1, int(quantity))


def extract_symbol(text: str) -> str | None:
    for candidate in SYMBOL_PATTERN.findall(text):
        if candidate not in NOISE_WORDS:
            return candidate

    # No bare uppercase ticker: accept a capitalized word that looks like one
    for word in text.split():
        clean = re.sub(r"[^A-Za-z]", "", word)
        if 2 <= len(clean) <= 5 and clean.upper() not in NOISE_WORDS:
            if clean[0].isupper() or clean == clean.upper():
                return clean.upper()
    return None


def extract_price(text: str, lower: str) -> tuple[str, float | None]:
    price_type, target_price = "MARKET", None

    limit_match = LIMIT_PATTERN.search(text)
    if limit_match:
        price_type, target_price = "LIMIT", float(limit_match.group(1))
    else:
        price_match = PRICE_PATTERN.search(text)
        if price_match:
            price_type, target_price = "LIMIT", float(price_match.group(1))

    if any(phrase in lower for phrase in MARKET_PHRASES):
        price_type, target_price = "MARKET", None

    if target_price is not None and target_price <= 0:
        target_price = None
    return price_type, target_price


class RegexIntentParser:
    """Deterministic, offline intent extraction."""

    async def try_parse(self, text: str) -> ParseResult:
        return self.parse(text)

    def parse(self, text: str) -> ParseResult:
        if not text or not isinstance(text, str) or not text.strip():
            return ParseResult(success=False, error="Empty or invalid input")

        normalized = sanitize_text(text) or ""
        lower = normalized.lower()

        symbol = extract_symbol(normalized)
        if not symbol:
            return ParseResult(success=False, error=SYMBOL_NOT_FOUND)

        price_type, target_price = extract_price(normalized, lower)
        intent = TradeIntent(
            action=detect_action(lower),
            symbol=symbol,
            quantity=extract_quantity(lower),
            price_type=price_type,
            target_price=target_price,
            raw_input=normalized,
        )
        return ParseResult(success=True, intent=intent)


class AIIntentParser:
    """Intent extraction through a text-generation provider, re-validated locally."""

    def __init__(self, generator: TextGenerator):
        self.generator = generator

    async def try_parse(self, text: str) -> ParseResult:
        if not self.generator.available:
            return ParseResult(success=False, error="AI parser not configured")

        normalized = sanitize_text(text) or ""
        try:
            response = await self.generator.generate(
                intent_parse_prompt(normalized), temperature=0.1, max_output_tokens=200
            )
            parsed = extract_json_object(response)
            intent = self._validated_intent(parsed, normalized)
        except Exception as e:
            logger.warning(f"AI intent parsing failed: {e}")
            return ParseResult(success=False, error=f"AI parsing failed: {e}")
        return ParseResult(success=True, intent=intent)

    @staticmethod
    def _validated_intent(parsed: dict[str, Any], raw_input: str) -> TradeIntent:
        symbol = parsed.get("symbol")
        if not isinstance(symbol, str):
            raise ValueError("Invalid symbol from AI")
        symbol = re.sub(r"[^A-Z]", "", symbol.upper())
        if not VALID_SYMBOL.match(symbol):
            raise ValueError(f"Invalid symbol from AI: {symbol!r}")

        quantity = safe_float(parsed.get("quantity"))
        target_price = safe_float(parsed.get("targetPrice"))
        price_type = "LIMIT" if str(parsed.get("priceType", "")).upper() == "LIMIT" else "MARKET"
        return TradeIntent(
            action="SELL" if str(parsed.get("action", "")).upper() == "SELL" else "BUY",
            symbol=symbol,
            quantity=max(1, int(quantity)) if quantity is not None else 1,
            price_type=price_type,
            target_price=target_price if target_price and target_price > 0 else None,
            raw_input=raw_input,
            ai_parsed=True,
        )


class IntentParser:
    """
    Tries each strategy in order and returns the first success.

    When every strategy fails the first (deterministic) failure is returned,
    since its message tells the user what input format is expected.
    """

    def __init__(self, strategies: list[IntentParserStrategy]):
        if not strategies:
            raise ValueError("IntentParser needs at least one strategy")
        self.strategies = strategies

    @classmethod
    def default(cls, generator: TextGenerator | None = None) -> "IntentParser":
        strategies: list[IntentParserStrategy] = [RegexIntentParser()]
        if generator is not None:
            strategies.append(AIIntentParser(generator))
        return cls(strategies)

    async def parse(self, text: str) -> ParseResult:
        first_failure: ParseResult | None = None
        for strategy in self.strategies:
            result = await strategy.try_parse(text)
            if result.success:
                return result
            if first_failure is None:
                first_failure = result
        return first_failure
