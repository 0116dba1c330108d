"""Prompt templates: provider prompts for parsing/sentiment and MCP client prompts."""

from typing import Any

INTENT_PARSE_PROMPT = """Parse this trade intent into structured data. Return ONLY valid JSON, no markdown.

Input: "{text}"

Return exactly this JSON structure:
{{
  "action": "BUY" or "SELL",
  "symbol": "STOCK_TICKER_SYMBOL",
  "quantity": number,
  "priceType": "MARKET" or "LIMIT",
  "targetPrice": number or null
}}

Rules:
- symbol must be a valid stock ticker (1-5 uppercase letters)
- quantity defaults to 1 if not specified
- priceType is MARKET unless a specific price is mentioned
- targetPrice is null for MARKET orders"""

SENTIMENT_PROMPT = """Rate the current market sentiment for {company} ({symbol}) in the {sector} sector.

Consider: recent news, analyst consensus, earnings momentum, market trends.

Return ONLY a JSON object (no markdown):
{{
  "sentimentScore": <number 0-100>,
  "newsPolarity": <number 0-100>,
  "analystSentiment": <number 0-100>,
  "earningsTone": <number 0-100>,
  "brief": "<one sentence summary>"
}}

Score guide: 0=very bearish, 50=neutral, 100=very bullish."""


def intent_parse_prompt(text: str) -> str:
    # Quotes in user text would break the quoted Input line
    return INTENT_PARSE_PROMPT.format(text=text.replace('"', "'"))


def sentiment_prompt(symbol: str, company: str | None = None, sector: str | None = None) -> str:
    return SENTIMENT_PROMPT.format(
        company=company or symbol,
        symbol=symbol,
        sector=sector or "Unknown",
    )


# MCP prompt definitions
PROMPTS = {
    "trade_review": {
        "description": "Evaluate a natural-language trade idea and explain the verdict",
        "arguments": [{"name": "text", "required": True}],
    },
}


def list_prompts() -> list[dict[str, Any]]:
    """List available prompts."""
    return [
        {
            "name": name,
            "description": info["description"],
            "arguments": info["arguments"],
        }
        for name, info in PROMPTS.items()
    ]


def get_prompt(name: str, arguments: dict[str, str]) -> dict[str, Any] | None:
    """
    Get a prompt by name with arguments filled in.

    Returns dict with 'messages' key for MCP GetPromptResult.
    """
    if name not in PROMPTS:
        return None

    if name == "trade_review":
        text = arguments.get("text", "")
        return {
            "messages": [
                {
                    "role": "user",
                    "content": f"""Review this trade idea: "{text}"

1. Call evaluate_trade_intent with the text above.
2. If the result has an "error" field, report it verbatim and stop.
3. Otherwise present, in order:
   - The summary field VERBATIM as a blockquote
   - Quant score table: factor | score | weight | weighted contribution
   - Risk: position size %, concentration risk, HHI before -> after,
     portfolio beta after, Kelly optimal %
   - Every entry of risk_metrics.violations as a warning line
   - data_source flags for any data that was missing

Do not invent numbers that are not in the result.""",
                }
            ]
        }

    return None
