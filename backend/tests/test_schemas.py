import pytest
from pydantic import ValidationError

from helpers import raw_point, regime_strategy
from schemas.backtesting import (
    BacktestRequest,
    BacktestResponse,
    StrategyMetadata,
    StrategyResult,
    TimelinePoint,
    is_valid_transfer,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ({"from_bucket": "spot", "to_bucket": "lp", "amount_usd": 100}, True),
        ({"from_bucket": "stable", "to_bucket": "spot", "amount_usd": 12.5}, True),
        ({"from_bucket": "spot", "to_bucket": "lp", "amount_usd": "100"}, False),
        ({"from_bucket": "spot", "to_bucket": "lp", "amount_usd": True}, False),
        ({"from_bucket": "spot", "to_bucket": "lp", "amount_usd": None}, False),
        ({"from_bucket": "invalid", "to_bucket": "stable", "amount_usd": 1000}, False),
        ({"from_bucket": "spot", "to_bucket": "btc", "amount_usd": 1000}, False),
        ({"to_bucket": "stable", "amount_usd": 1000}, False),
        ("spot->lp", False),
        (None, False),
    ],
)
def test_is_valid_transfer(raw, expected):
    assert is_valid_transfer(raw) is expected


def test_metadata_drops_invalid_transfers_only():
    metadata = StrategyMetadata.model_validate(
        {
            "transfers": [
                {"from_bucket": "spot", "to_bucket": "stable", "amount_usd": 1000},
                {"from_bucket": "spot", "to_bucket": "lp", "amount_usd": "100"},
                "garbage",
                {"from_bucket": "lp", "to_bucket": "spot", "amount_usd": 250},
            ],
            "reason": "regime shift",
        }
    )
    assert [(t.from_bucket, t.to_bucket, t.amount_usd) for t in metadata.transfers] == [
        ("spot", "stable", 1000.0),
        ("lp", "spot", 250.0),
    ]
    assert metadata.model_dump()["reason"] == "regime shift"


@pytest.mark.parametrize("transfers", ["not-a-list", None, 42, {"from_bucket": "spot"}])
def test_metadata_non_list_transfers_become_empty(transfers):
    assert StrategyMetadata.model_validate({"transfers": transfers}).transfers == []


def test_strategy_result_tolerates_malformed_metrics():
    result = StrategyResult.model_validate({"event": None, "metrics": "oops"})
    assert result.metrics.signal is None
    assert result.transfers == []

    result = StrategyResult.model_validate({"metrics": {"signal": 3, "metadata": "oops"}})
    assert result.metrics.signal is None
    assert result.metrics.metadata is None
    assert result.transfers == []


def test_strategy_result_exposes_transfers():
    raw = regime_strategy(
        event="rebalance",
        transfers=[{"from_bucket": "spot", "to_bucket": "lp", "amount_usd": 5000}],
    )
    result = StrategyResult.model_validate(raw)
    assert result.event == "rebalance"
    assert result.transfers[0].to_bucket == "lp"


def test_timeline_point_nulls_non_numeric_prices_keeping_order():
    point = TimelinePoint.model_validate(
        raw_point(0, token_price={"invalid": "not-a-number", "eth": 3000, "flag": True})
    )
    assert list(point.token_price.items()) == [("invalid", None), ("eth", 3000.0), ("flag", None)]


@pytest.mark.parametrize("strategies", [None, "oops", [1, 2]])
def test_timeline_point_malformed_strategies_become_empty(strategies):
    raw = raw_point(0)
    raw["strategies"] = strategies
    assert TimelinePoint.model_validate(raw).strategies == {}


def test_timeline_point_drops_non_mapping_strategy_entries():
    raw = raw_point(0, strategies={"good": regime_strategy(event="buy")})
    raw["strategies"]["bad"] = "n/a"
    point = TimelinePoint.model_validate(raw)
    assert list(point.strategies) == ["good"]


def test_timeline_point_keeps_unknown_engine_fields():
    raw = raw_point(0)
    raw["volume"] = 123
    point = TimelinePoint.model_validate(raw)
    assert point.dma_200 is None
    assert point.model_dump()["volume"] == 123


def test_backtest_response_rejects_non_list_timeline():
    with pytest.raises(ValidationError):
        BacktestResponse.model_validate({"strategies": {}, "timeline": "oops"})


def test_backtest_request_validation():
    request = BacktestRequest.model_validate(
        {
            "token_symbol": "BTC",
            "total_capital": 10000,
            "days": 30,
            "configs": [{"config_id": "dca_classic", "strategy_id": "dca_classic"}],
        }
    )
    assert request.configs[0].params == {}

    with pytest.raises(ValidationError):
        BacktestRequest.model_validate({"total_capital": 10000, "configs": []})
    with pytest.raises(ValidationError):
        BacktestRequest.model_validate(
            {"total_capital": 0, "configs": [{"config_id": "a", "strategy_id": "a"}]}
        )


@pytest.mark.parametrize("portfolio_value", ["n/a", "100", True, [1], {"usd": 1}])
def test_strategy_result_non_numeric_value_becomes_none(portfolio_value):
    result = StrategyResult.model_validate({**regime_strategy(), "portfolio_value": portfolio_value})
    assert result.portfolio_value is None


@pytest.mark.parametrize("event", [1, 2.5, True, ["buy"]])
def test_strategy_result_unusable_event_becomes_none(event):
    result = StrategyResult.model_validate({**regime_strategy(), "event": event})
    assert result.event is None


def test_strategy_result_keeps_text_and_mapping_events():
    assert StrategyResult.model_validate({"event": "sell"}).event == "sell"
    structured = {"action": "buy", "bucket": "spot"}
    assert StrategyResult.model_validate({"event": structured}).event == structured


def test_strategy_result_non_mapping_constituant_becomes_none():
    result = StrategyResult.model_validate({**regime_strategy(), "portfolio_constituant": "spot"})
    assert result.portfolio_constituant is None


def test_timeline_point_nulls_malformed_scalars():
    raw = raw_point(0)
    raw.update({"sentiment": "high", "sentiment_label": 3, "dma_200": "warming up"})
    point = TimelinePoint.model_validate(raw)
    assert point.sentiment is None
    assert point.sentiment_label is None
    assert point.dma_200 is None


def test_backtest_response_drops_only_unusable_points():
    missing_date = raw_point(1)
    del missing_date["date"]
    timeline = [raw_point(0), missing_date, "garbage", {"date": 7}, raw_point(2)]

    response = BacktestResponse.model_validate({"timeline": timeline})

    assert [p.date for p in response.timeline] == [raw_point(0)["date"], raw_point(2)["date"]]
