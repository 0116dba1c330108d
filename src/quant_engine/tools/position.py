"""Live positions tool."""

from time import perf_counter
from typing import Any

from quant_engine.data.price_service import PriceService, compute_unrealised_pnl
from quant_engine.utils.numbers import safe_float
from quant_engine.utils.provenance import build_error_response, build_meta

VALID_SIDES = ("LONG", "SHORT")


def _validate_position(index: int, position: dict[str, Any]) -> dict[str, Any]:
    """Normalize one position dict, raising ValueError with a caller-facing message."""
    symbol = str(position.get("symbol") or "").upper().strip()
    if not symbol:
        raise ValueError(f"positions[{index}]: symbol is required")

    entry_price = safe_float(position.get("entry_price"))
    if entry_price is None or entry_price <= 0:
        raise ValueError(f"positions[{index}]: entry_price must be a positive number")

    quantity = safe_float(position.get("quantity"))
    if quantity is None or quantity <= 0:
        raise ValueError(f"positions[{index}]: quantity must be a positive number")

    side = str(position.get("side") or "LONG").upper()
    if side not in VALID_SIDES:
        raise ValueError(f"positions[{index}]: side must be LONG or SHORT")

    return {"symbol": symbol, "entry_price": entry_price, "quantity": quantity, "side": side}


async def live_positions(
    positions: list[dict[str, Any]],
    price_service: PriceService | None = None,
) -> dict[str, Any]:
    """
    Price open positions and compute unrealised P&L.

    Args:
        positions: Dicts with symbol, entry_price, quantity and side (LONG/SHORT)
        price_service: Price lookup (defaults to the process-wide one)

    Returns:
        Dict with per-position current price, source and unrealised P&L, plus the total
    """
    start_time = perf_counter()

    if not positions:
        return build_error_response(
            status=400,
            message="positions list cannot be empty",
            error_type="invalid_input",
        )

    try:
        normalized = [_validate_position(i, p) for i, p in enumerate(positions)]
    except ValueError as e:
        return build_error_response(status=400, message=str(e), error_type="invalid_input")

    if price_service is None:
        from quant_engine import services

        price_service = services.get_price_service()

    prices = await price_service.get_batch_prices(normalized)

    results: list[dict[str, Any]] = []
    total_pnl = 0.0
    for p in normalized:
        point = prices[p["symbol"]]
        pnl = compute_unrealised_pnl(p["side"], p["entry_price"], point.price, p["quantity"])
        total_pnl += pnl
        results.append(
            {
                **p,
                "current_price": point.price,
                "change": point.change,
                "change_percent": point.change_percent,
                "source": point.source,
                "unrealised_pnl": pnl,
            }
        )

    duration_ms = (perf_counter() - start_time) * 1000
    return {
        "status": 200,
        "positions": results,
        "total_unrealised_pnl": round(total_pnl, 2),
        "meta": build_meta("get_live_positions", duration_ms),
    }
