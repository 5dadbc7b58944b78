"""
Deterministic mock backtest data for demo mode.

- One daily point per day from 2024-01-01; BTC follows a sine-plus-drift curve.
- dca_classic baseline (signal "dca") buys every day and is never critical.
- Every requested config rebalances every 45 days with a spot/stable transfer.
- Known gap: day 260 has no token prices, so dma_200 restarts after it.
"""
import math
from datetime import date, timedelta
from typing import Any

from schemas.backtesting import BacktestRequest

START_DATE = date(2024, 1, 1)
DEFAULT_DAYS = 500
REBALANCE_EVERY_DAYS = 45
PRICE_GAP_DAY = 260
BASELINE_STRATEGY_ID = "dca_classic"

DEMO_STRATEGIES: list[dict[str, Any]] = [
    {
        "id": "dca_classic",
        "name": "DCA Classic",
        "description": "Buys a fixed amount every day regardless of market conditions.",
    },
    {
        "id": "simple_regime",
        "name": "Simple Regime",
        "description": "Shifts between spot and stables following the sentiment regime.",
    },
]

_SENTIMENT_LABELS = ["extreme_fear", "fear", "neutral", "greed", "extreme_greed"]


def _btc_price(day: int) -> float:
    """Deterministic: ~42k start, slow drift up, 60-day cycle of +/-6k."""
    return 42000.0 + 25.0 * day + 6000.0 * math.sin(2 * math.pi * day / 60)


def _sentiment(day: int) -> float:
    return 50.0 + 45.0 * math.sin(2 * math.pi * day / 60)


def _sentiment_label(value: float) -> str:
    bucket = min(len(_SENTIMENT_LABELS) - 1, int(value / 20))
    return _SENTIMENT_LABELS[max(0, bucket)]


def _baseline_point(day: int, num_days: int, capital: float, price: float) -> dict[str, Any]:
    invested = min(capital, capital * (day + 1) / num_days)
    spot = invested * price / _btc_price(0)
    return {
        "portfolio_value": round(spot + capital - invested, 2),
        "portfolio_constituant": {"spot": {"btc": round(spot, 2)}, "stable": round(capital - invested, 2), "lp": {}},
        "event": "buy",
        "metrics": {"signal": "dca"},
    }


def _regime_point(day: int, capital: float, price: float, sentiment: float) -> dict[str, Any]:
    spot_share = 0.7 if sentiment < 50 else 0.3
    growth = price / _btc_price(0)
    spot = capital * spot_share * growth
    stable = capital * (1 - spot_share)
    point: dict[str, Any] = {
        "portfolio_value": round(spot + stable, 2),
        "portfolio_constituant": {"spot": {"btc": round(spot, 2)}, "stable": round(stable, 2), "lp": {}},
        "event": None,
        "metrics": {"signal": _sentiment_label(sentiment)},
    }
    if day > 0 and day % REBALANCE_EVERY_DAYS == 0:
        from_bucket, to_bucket = ("stable", "spot") if spot_share > 0.5 else ("spot", "stable")
        point["event"] = "rebalance"
        point["metrics"]["metadata"] = {
            "transfers": [
                {
                    "from_bucket": from_bucket,
                    "to_bucket": to_bucket,
                    "amount_usd": round(capital * 0.1, 2),
                }
            ]
        }
    return point


def build_demo_backtest(request: BacktestRequest) -> dict[str, Any]:
    """Engine-shaped response for `request`; same input, same output."""
    num_days = request.days or DEFAULT_DAYS
    capital = request.total_capital
    config_ids = [c.config_id for c in request.configs if c.config_id != BASELINE_STRATEGY_ID]

    timeline: list[dict[str, Any]] = []
    for day in range(num_days):
        price = _btc_price(day)
        sentiment = _sentiment(day)
        strategies = {BASELINE_STRATEGY_ID: _baseline_point(day, num_days, capital, price)}
        for config_id in config_ids:
            strategies[config_id] = _regime_point(day, capital, price, sentiment)

        timeline.append(
            {
                "date": (START_DATE + timedelta(days=day)).isoformat(),
                "token_price": {} if day == PRICE_GAP_DAY else {"btc": round(price, 2)},
                "sentiment": round(sentiment, 1),
                "sentiment_label": _sentiment_label(sentiment),
                "strategies": strategies,
            }
        )

    final = timeline[-1]["strategies"] if timeline else {}
    summary = {
        strategy_id: {
            "final_value": result["portfolio_value"],
            "roi_percent": round((result["portfolio_value"] / capital - 1) * 100, 2),
        }
        for strategy_id, result in final.items()
    }
    return {"strategies": summary, "timeline": timeline}


def build_demo_strategies() -> dict[str, Any]:
    return {"strategies": [dict(s) for s in DEMO_STRATEGIES]}
