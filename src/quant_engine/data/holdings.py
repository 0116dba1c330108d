"""Holding store contract, schema normalization, and the cached portfolio reader."""

import logging
import uuid
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, Protocol

import pandas as pd

from quant_engine.data.cache import TTLCache
from quant_engine.errors import PersistenceError
from quant_engine.models import PortfolioHolding
from quant_engine.utils.numbers import safe_float
from quant_engine.utils.sanitize import sanitize_text

logger = logging.getLogger(__name__)

WriteListener = Callable[[str], None]


class HoldingStore(Protocol):
    """Keyed document store of trade holdings, owned by the persistence layer."""

    async def find_holdings_by_user(self, user_id: str) -> list[dict[str, Any]]: ...

    async def insert_holding(self, user_id: str, document: dict[str, Any]) -> str: ...

    async def update_holding_on_close(
        self,
        user_id: str,
        holding_id: str,
        realized_pnl: float,
        exit_date: datetime | None = None,
    ) -> bool: ...

    def subscribe(self, listener: WriteListener) -> None: ...


class InMemoryHoldingStore:
    """
    Process-local holding store.

    Documents are kept as written (legacy or current schema); every write
    notifies subscribers with the user id so caches can drop that user.
    """

    def __init__(self, documents: dict[str, list[dict[str, Any]]] | None = None):
        self._documents: dict[str, list[dict[str, Any]]] = {
            user_id: [dict(d) for d in docs] for user_id, docs in (documents or {}).items()
        }
        self._listeners: list[WriteListener] = []

    def subscribe(self, listener: WriteListener) -> None:
        self._listeners.append(listener)

    def _notify(self, user_id: str) -> None:
        for listener in self._listeners:
            listener(user_id)

    async def find_holdings_by_user(self, user_id: str) -> list[dict[str, Any]]:
        docs = [dict(d) for d in self._documents.get(user_id, [])]
        docs.sort(key=lambda d: _document_date(d), reverse=True)
        return docs

    async def insert_holding(self, user_id: str, document: dict[str, Any]) -> str:
        doc = dict(document)
        doc.setdefault("_id", uuid.uuid4().hex)
        doc["userId"] = user_id
        self._documents.setdefault(user_id, []).append(doc)
        self._notify(user_id)
        return doc["_id"]

    async def update_holding_on_close(
        self,
        user_id: str,
        holding_id: str,
        realized_pnl: float,
        exit_date: datetime | None = None,
    ) -> bool:
        for doc in self._documents.get(user_id, []):
            if doc.get("_id") == holding_id:
                doc["status"] = "CLOSED"
                doc["realizedPnL"] = float(realized_pnl)
                doc["exitDate"] = exit_date or datetime.now(timezone.utc)
                self._notify(user_id)
                return True
        return False


def _parse_date(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = pd.Timestamp(value).to_pydatetime()
        except (ValueError, TypeError):
            return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _document_date(document: dict[str, Any]) -> datetime:
    for key in ("date", "exitDate", "entryDate"):
        parsed = _parse_date(document.get(key))
        if parsed is not None:
            return parsed
    return datetime.min


def normalize_holding(document: dict[str, Any]) -> PortfolioHolding:
    """
    Map a stored document to the canonical PortfolioHolding.

    Legacy documents carry `name`/`pl`/`date`; current ones carry
    `symbol`/`realizedPnL`/`exitDate`/`entryDate`. Downstream code only ever
    sees the canonical shape.
    """
    symbol = document.get("symbol") or document.get("name") or "UNKNOWN"
    pnl = safe_float(document.get("pl"))
    if pnl is None:
        pnl = safe_float(document.get("realizedPnL"))
    date = _document_date(document)
    if date == datetime.min:
        date = datetime.now(timezone.utc).replace(tzinfo=None)
    reason = document.get("reason") or document.get("notes") or ""
    return PortfolioHolding(
        symbol=str(symbol).upper().strip(),
        profit_and_loss=pnl if pnl is not None else 0.0,
        date=date,
        reason=sanitize_text(str(reason), max_length=200) or "",
    )


class PortfolioRepository:
    """
    Cached, normalized read access to a user's holdings.

    Registers itself with the store so any write for a user invalidates that
    user's cached portfolio.
    """

    def __init__(self, store: HoldingStore, cache: TTLCache):
        self.store = store
        self.cache = cache
        store.subscribe(self.invalidate)

    async def load(self, user_id: str) -> list[PortfolioHolding]:
        """
        Load holdings newest first.

        Raises:
            PersistenceError: If the store read fails
        """
        cached = self.cache.get(user_id)
        if cached is not None:
            logger.debug(f"portfolio({user_id}): cache hit")
            return cached

        try:
            documents = await self.store.find_holdings_by_user(user_id)
        except Exception as e:
            raise PersistenceError("Failed to load holdings", details=str(e)) from e

        holdings = [normalize_holding(d) for d in documents]
        holdings.sort(key=lambda h: h.date, reverse=True)
        self.cache.set(user_id, holdings)
        logger.info(f"portfolio({user_id}): fetched and cached {len(holdings)} holdings")
        return holdings

    def invalidate(self, user_id: str) -> None:
        """Drop the cached portfolio for user_id."""
        self.cache.invalidate(user_id)
        logger.debug(f"portfolio({user_id}): cache invalidated")
