"""Engine-shaped payload builders shared by the test modules."""
from datetime import date, timedelta

from schemas.backtesting import TimelinePoint

START = date(2024, 1, 1)


def point_date(index: int) -> str:
    return (START + timedelta(days=index)).isoformat()


def regime_strategy(event=None, transfers=None, signal="fear") -> dict:
    metrics: dict = {"signal": signal}
    if transfers is not None:
        metrics["metadata"] = {"transfers": transfers}
    return {
        "portfolio_value": 10000.0,
        "portfolio_constituant": {"spot": {"btc": 5000.0}, "stable": 5000.0, "lp": {}},
        "event": event,
        "metrics": metrics,
    }


def baseline_strategy(event="buy") -> dict:
    return regime_strategy(event=event, signal="dca")


def raw_point(index: int, token_price=None, strategies=None) -> dict:
    return {
        "date": point_date(index),
        "token_price": {"btc": 50000.0} if token_price is None else token_price,
        "sentiment": None,
        "sentiment_label": None,
        "strategies": strategies or {},
    }


def build_point(index: int, token_price=None, strategies=None) -> TimelinePoint:
    return TimelinePoint.model_validate(raw_point(index, token_price, strategies))


def build_timeline(length: int, strategies_at=None, price_at=None) -> list[TimelinePoint]:
    strategies_at = strategies_at or (lambda i: {})
    price_at = price_at or (lambda i: {"btc": 50000.0})
    return [
        build_point(i, token_price=price_at(i), strategies=strategies_at(i))
        for i in range(length)
    ]
