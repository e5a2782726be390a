"""JSON shaping for API responses. Decimals are rendered as strings."""

from __future__ import annotations

from dataclasses import asdict, is_dataclass
from decimal import Decimal
from enum import Enum
from typing import Any

from funding_matrix.analytics.history import PriceSpreadHistory, SpreadHistory
from funding_matrix.analytics.statistics import spread_percent
from funding_matrix.exchange import trade_url
from funding_matrix.models import EXCHANGE_INFO, MultiExchangeSpread
from funding_matrix.orchestrator import CycleResult


def to_jsonable(obj: Any) -> Any:
    """Recursively convert Decimals, Enums and dataclasses to JSON-safe values."""
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, Enum):
        return obj.value
    if is_dataclass(obj) and not isinstance(obj, type):
        return to_jsonable(asdict(obj))
    if isinstance(obj, dict):
        return {to_jsonable(k): to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(item) for item in obj]
    return obj


def cycle_result_to_dict(result: CycleResult) -> dict:
    return {
        "success": result.success,
        "status": result.status.value,
        "stats": {
            "exchange_records": result.exchange_counts,
            "spread_records": result.spread_count,
            "sample_records": result.sample_count,
        },
        "errors": result.errors,
        "persistence_errors": result.persistence_errors,
        "started_at": result.started_at,
        "duration_ms": result.duration_ms,
    }


def spread_to_dict(spread: MultiExchangeSpread) -> dict:
    best = spread.best_spread
    return {
        "symbol": spread.symbol,
        "exchanges": {
            exchange.value: {
                **to_jsonable(rate),
                "name": EXCHANGE_INFO[exchange].name,
                "venue_type": EXCHANGE_INFO[exchange].venue_type.value,
                "url": trade_url(exchange, spread.symbol, rate.venue_symbol),
            }
            for exchange, rate in spread.exchanges.items()
        },
        "best_spread": {
            "long_exchange": best.long_exchange.value,
            "short_exchange": best.short_exchange.value,
            "spread_hourly": str(best.spread_hourly),
            "spread_daily": str(best.spread_daily),
            "spread_annual": str(best.spread_annual),
        },
        "updated_at": spread.updated_at,
    }


def spread_history_to_dict(history: SpreadHistory) -> dict:
    return {
        "symbol": history.symbol,
        "exchange_a": history.pair.exchange_a.value,
        "exchange_b": history.pair.exchange_b.value,
        "period": f"{history.hours}h",
        "history": [
            {
                "timestamp": s.observed_at,
                "spread_percent": str(spread_percent(s)),
                "rate_a": str(s.hourly_rate_a),
                "rate_b": str(s.hourly_rate_b),
            }
            for s in history.samples
        ],
        "statistics": to_jsonable(history.statistics),
    }


def price_history_to_dict(history: PriceSpreadHistory) -> dict:
    return {
        "symbol": history.symbol,
        "exchange_a": history.pair.exchange_a.value,
        "exchange_b": history.pair.exchange_b.value,
        "period": f"{history.hours}h",
        "history": to_jsonable(history.points),
        "statistics": to_jsonable(history.statistics),
    }
