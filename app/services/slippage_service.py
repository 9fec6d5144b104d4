from __future__ import annotations

import logging
import re
from typing import Any

import requests

from app.config import get_settings
from app.contracts.slippage import SlippageRequest, SlippageResponse

logger = logging.getLogger(__name__)

_SELL_RE = re.compile(r"\b(?:jual|sell|selling)\b", re.IGNORECASE)


class SlippageServiceError(RuntimeError):
    pass


def detect_trade_side(message: str) -> str:
    return "sell" if _SELL_RE.search(message or "") else "buy"


def _post(path: str, payload: dict[str, Any]) -> SlippageResponse:
    settings = get_settings()
    url = f"{settings.SLIPPAGE_API_BASE_URL}{path}"
    try:
        resp = requests.post(url, json=payload, timeout=settings.slippage_timeout_s)
    except requests.RequestException as exc:
        logger.error("Slippage: request failed url=%s error=%s", url, exc)
        raise SlippageServiceError(f"Slippage API unreachable: {exc}") from exc

    if resp.status_code >= 400:
        logger.error("Slippage: API error status=%s body=%s", resp.status_code, resp.text)
        raise SlippageServiceError(f"API returned {resp.status_code}: {resp.text}")

    try:
        data = SlippageResponse.model_validate(resp.json())
    except ValueError as exc:
        raise SlippageServiceError(f"Slippage API returned an invalid body: {exc}") from exc

    logger.info(
        "Slippage: predictions received best_venue=%s quotes=%s",
        data.best_venue,
        len(data.quotes),
    )
    return data


def get_predictions(request: SlippageRequest) -> SlippageResponse:
    """Predicted slippage and total cost on every venue the oracle knows."""
    logger.info(
        "Slippage: fetching predictions symbol=%s amount=%s side=%s",
        request.symbol,
        request.amount,
        request.side,
    )
    return _post(
        "/predict",
        {"symbol": request.symbol, "amount": request.amount, "side": request.side},
    )


def compare_exchanges(request: SlippageRequest) -> SlippageResponse:
    if not request.exchanges:
        return get_predictions(request)

    logger.info(
        "Slippage: comparing exchanges symbol=%s exchanges=%s",
        request.symbol,
        request.exchanges,
    )
    return _post(
        "/compare",
        {
            "symbol": request.symbol,
            "amount": request.amount,
            "side": request.side,
            "exchanges": list(request.exchanges),
        },
    )


def format_money(value: float) -> str:
    if value >= 1_000_000:
        return f"${value / 1_000_000:.2f}M"
    if value >= 1_000:
        return f"${value / 1_000:.2f}K"
    return f"${value:.2f}"


def format_comparison(response: SlippageResponse, request: SlippageRequest) -> str:
    """Plain-text comparison, cheapest venue first."""
    quotes = sorted(response.quotes, key=lambda q: q.total_cost)
    base = request.symbol.split("/")[0]
    action = "Buy" if request.side == "buy" else "Sell"

    lines = [
        "Exchange comparison",
        f"Trade: {action} {request.amount:g} {base}",
    ]
    if not quotes:
        lines.append("No quotes available for this pair right now.")
        return "\n".join(lines)

    best, worst = quotes[0], quotes[-1]
    savings = worst.total_cost - best.total_cost

    lines.append("")
    lines.append(f"Recommended: {response.best_venue.upper()}")
    lines.append(f"Total cost: {format_money(best.total_cost)}")
    if savings > 100:
        lines.append(f"Savings: {format_money(savings)} vs {worst.exchange.upper()}")

    lines.append("")
    lines.append("All exchanges:")
    for index, quote in enumerate(quotes, start=1):
        is_best = quote.exchange == response.best_venue
        label = f"{quote.exchange.upper()} (best)" if is_best else quote.exchange.upper()
        total_fee = quote.fees.trading_fee + quote.fees.slippage_cost
        lines.append(f"{index}. {label}")
        lines.append(f"   Total: {format_money(quote.total_cost)}")
        lines.append(f"   Price: {format_money(quote.quote_price)}")
        lines.append(f"   Slippage: {quote.predicted_slippage_pct:.2f}%")
        lines.append(f"   Fees: {format_money(total_fee)}")
    return "\n".join(lines)
