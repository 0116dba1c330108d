"""Evaluate trade intent tool: the decision orchestrator."""

import asyncio
import dataclasses
import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass
from time import perf_counter
from typing import Any

from quant_engine.auth import Authenticator
from quant_engine.data.gemini_client import TextGenerator
from quant_engine.data.holdings import PortfolioRepository
from quant_engine.data.market_data import MarketDataGateway, fetch_snapshot
from quant_engine.engine.aggregator import NEUTRAL_QUANT_SCORE, aggregate
from quant_engine.engine.fundamental import compute_fundamental_score
from quant_engine.engine.intent_parser import IntentParser
from quant_engine.engine.portfolio_fit import compute_portfolio_fit_score
from quant_engine.engine.portfolio_metrics import compute_portfolio_stats
from quant_engine.engine.risk import assess_risk
from quant_engine.engine.sector import compute_sector_score
from quant_engine.engine.sentiment import compute_sentiment_score
from quant_engine.engine.summary import generate_summary
from quant_engine.engine.technical import compute_technical_score
from quant_engine.errors import AuthError, InputError, InternalError, UpstreamRateLimitError
from quant_engine.models import (
    FactorScore,
    MarketSnapshot,
    PortfolioHolding,
    PortfolioStats,
    QuantScore,
    RiskAssessment,
    TradeIntent,
)
from quant_engine.utils.provenance import build_meta, error_response_from, utc_now_iso
from quant_engine.utils.validators import RiskLimits, validate_intent_text

logger = logging.getLogger(__name__)

# Score substituted when a factor scorer raises
NEUTRAL_SCORES = {
    "fundamental": 50,
    "technical": 50,
    "sector": 50,
    "sentiment": 55,
    "portfolio_fit": 50,
}

RATE_LIMIT_MESSAGE = "Market data provider rate limit reached. Try again later."


@dataclass(frozen=True)
class ScoreResult:
    """Outcome of one factor scorer: a score or the error it raised."""

    factor: str
    score: FactorScore | None = None
    error: str | None = None

    def resolve(self) -> FactorScore:
        """The score, or the factor's neutral default when the scorer failed."""
        if self.score is not None:
            return self.score
        return FactorScore(
            score=NEUTRAL_SCORES[self.factor],
            extras={"error": "Analysis failed"},
        )


async def _run_scorer(factor: str, scorer: Callable[..., Any], *args: Any) -> ScoreResult:
    try:
        result = scorer(*args)
        if inspect.isawaitable(result):
            result = await result
    except Exception as e:
        logger.warning(f"{factor} scorer failed: {e}")
        return ScoreResult(factor=factor, error=str(e))
    return ScoreResult(factor=factor, score=result)


class DecisionOrchestrator:
    """
    Runs one trade-intent evaluation end to end.

    Only authentication, input validation, intent parsing and an upstream
    rate limit end a request early. Every later stage is fault-isolated and
    degrades to a neutral default instead of failing the request.
    """

    def __init__(
        self,
        gateway: MarketDataGateway,
        repository: PortfolioRepository,
        generator: TextGenerator | None,
        authenticator: Authenticator,
        parser: IntentParser | None = None,
        limits: RiskLimits | None = None,
    ):
        self.gateway = gateway
        self.repository = repository
        self.generator = generator
        self.authenticator = authenticator
        self.parser = parser or IntentParser.default(generator)
        self.limits = limits or RiskLimits.from_env()

    async def evaluate(self, text: Any, token: str | None) -> dict[str, Any]:
        try:
            return await self._evaluate(text, token)
        except (AuthError, InputError) as e:
            return error_response_from(e)
        except Exception:
            logger.exception("Trade evaluation failed")
            return error_response_from(InternalError("Trade evaluation failed"))

    async def _evaluate(self, text: Any, token: str | None) -> dict[str, Any]:
        start_time = perf_counter()

        user_id = self.authenticator.authenticate(token)

        try:
            text = validate_intent_text(text)
        except ValueError as e:
            raise InputError(str(e)) from e

        parsed = await self.parser.parse(text)
        if not parsed.success:
            raise InputError(parsed.error or "Could not parse trade intent")
        intent = parsed.intent
        logger.info(f"Parsed intent: {intent.action} {intent.quantity} {intent.symbol}")

        snapshot, rate_limited = await fetch_snapshot(self.gateway, intent.symbol)
        if rate_limited:
            logger.warning(f"Rate limited fetching {intent.symbol}, skipping scoring")
            return error_response_from(
                UpstreamRateLimitError(RATE_LIMIT_MESSAGE), parsed_intent=intent.to_dict()
            )

        portfolio = await self._load_portfolio(user_id)

        results = await asyncio.gather(
            _run_scorer("fundamental", compute_fundamental_score, snapshot.overview),
            _run_scorer("technical", compute_technical_score, snapshot.quote, snapshot.overview),
            _run_scorer("sector", compute_sector_score, snapshot.overview),
            _run_scorer(
                "sentiment", compute_sentiment_score, intent.symbol, snapshot.overview, self.generator
            ),
            _run_scorer("portfolio_fit", compute_portfolio_fit_score, intent, portfolio),
        )
        factors = {result.factor: result.resolve() for result in results}

        quant = self._aggregate(factors)
        risk = self._assess_risk(intent, portfolio, snapshot)
        stats = self._portfolio_stats(portfolio)

        summary = generate_summary(
            intent,
            quant,
            risk,
            factors["technical"],
            factors["sector"],
            factors["sentiment"],
        )
        logger.info(f"Result: {quant.recommendation} ({quant.total_score}/100) for {intent.symbol}")

        duration_ms = (perf_counter() - start_time) * 1000
        return {
            "status": 200,
            "parsed_intent": intent.to_dict(),
            "quant_score": {
                **quant.to_dict(),
                "factors": {name: factor.to_dict() for name, factor in factors.items()},
            },
            "risk_metrics": risk.to_dict(),
            "portfolio_stats": stats.to_dict(),
            "recommendation": quant.recommendation,
            "summary": summary,
            "timestamp": utc_now_iso(),
            "data_source": {
                "quote": snapshot.quote is not None,
                "overview": snapshot.overview is not None,
                "sentiment": factors["sentiment"].extras.get("source", "default"),
                "portfolio": bool(portfolio),
            },
            "meta": build_meta("evaluate_trade_intent", duration_ms),
        }

    async def _load_portfolio(self, user_id: str) -> list[PortfolioHolding]:
        try:
            return await self.repository.load(user_id)
        except Exception as e:
            logger.warning(f"Portfolio unavailable for {user_id}, continuing without it: {e}")
            return []

    @staticmethod
    def _aggregate(factors: dict[str, FactorScore]) -> QuantScore:
        try:
            return aggregate(
                factors["fundamental"].score,
                factors["technical"].score,
                factors["sector"].score,
                factors["sentiment"].score,
                factors["portfolio_fit"].score,
            )
        except Exception as e:
            logger.error(f"Quant score aggregation failed: {e}")
            return dataclasses.replace(NEUTRAL_QUANT_SCORE, error="Score computation failed")

    def _assess_risk(
        self, intent: TradeIntent, portfolio: list[PortfolioHolding], snapshot: MarketSnapshot
    ) -> RiskAssessment:
        try:
            return assess_risk(intent, portfolio, snapshot, self.limits)
        except Exception as e:
            logger.error(f"Risk assessment failed: {e}")
            return RiskAssessment.unknown(str(e))

    @staticmethod
    def _portfolio_stats(portfolio: list[PortfolioHolding]) -> PortfolioStats:
        try:
            return compute_portfolio_stats(portfolio)
        except Exception as e:
            logger.error(f"Portfolio stats failed: {e}")
            return PortfolioStats(total_trades=len(portfolio), error=str(e))


_orchestrator: DecisionOrchestrator | None = None


def get_orchestrator() -> DecisionOrchestrator:
    """Default orchestrator wired to the process-wide collaborators."""
    global _orchestrator
    if _orchestrator is None:
        from quant_engine import services

        _orchestrator = DecisionOrchestrator(
            gateway=services.get_gateway(),
            repository=services.get_portfolio_repository(),
            generator=services.get_generator(),
            authenticator=services.get_authenticator(),
        )
    return _orchestrator


async def evaluate_trade_intent(text: str, token: str | None) -> dict[str, Any]:
    """
    Evaluate a natural-language trade intent.

    Args:
        text: Trade intent, e.g. "Buy 20 AAPL at market price"
        token: Bearer token identifying the user

    Returns:
        Dict with parsed intent, quant score, risk metrics, portfolio stats,
        recommendation and summary, or an error response with a status
    """
    return await get_orchestrator().evaluate(text, token)
