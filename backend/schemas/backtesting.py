"""
Backtest request/response models.

Engine payloads are validated once here; malformed per-day data is sanitized
(bad transfers dropped, bad scalars nulled, unusable days dropped) instead of
rejected, so the timeline code never re-checks shapes.
"""
from typing import Any, Literal

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

Bucket = Literal["spot", "stable", "lp"]
BUCKETS: frozenset[str] = frozenset(("spot", "stable", "lp"))


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _number_or_none(value: Any) -> Any:
    return value if _is_number(value) else None


def is_valid_transfer(raw: Any) -> bool:
    """True when `raw` is a mapping with known buckets and a numeric amount."""
    if not isinstance(raw, dict):
        return False
    return (
        raw.get("from_bucket") in BUCKETS
        and raw.get("to_bucket") in BUCKETS
        and _is_number(raw.get("amount_usd"))
    )


class Transfer(BaseModel):
    from_bucket: Bucket
    to_bucket: Bucket
    amount_usd: float


class StrategyMetadata(BaseModel):
    model_config = ConfigDict(extra="allow")

    transfers: list[Transfer] = Field(default_factory=list)

    @field_validator("transfers", mode="before")
    @classmethod
    def _drop_invalid_transfers(cls, value: Any) -> list[Any]:
        if not isinstance(value, list):
            return []
        return [t for t in value if isinstance(t, Transfer) or is_valid_transfer(t)]


class StrategyMetrics(BaseModel):
    model_config = ConfigDict(extra="allow")

    signal: str | None = None
    metadata: StrategyMetadata | None = None

    @field_validator("signal", mode="before")
    @classmethod
    def _signal_as_text(cls, value: Any) -> str | None:
        return value if isinstance(value, str) else None

    @field_validator("metadata", mode="before")
    @classmethod
    def _metadata_mapping(cls, value: Any) -> Any:
        if isinstance(value, (dict, StrategyMetadata)):
            return value
        return None


class StrategyResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    portfolio_value: float | None = None
    portfolio_constituant: dict[str, Any] | None = None
    event: str | dict[str, Any] | None = None
    metrics: StrategyMetrics = Field(default_factory=StrategyMetrics)

    @field_validator("portfolio_value", mode="before")
    @classmethod
    def _value_as_number(cls, value: Any) -> Any:
        return _number_or_none(value)

    @field_validator("portfolio_constituant", mode="before")
    @classmethod
    def _constituant_mapping(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else None

    @field_validator("event", mode="before")
    @classmethod
    def _event_marker(cls, value: Any) -> Any:
        return value if isinstance(value, (str, dict)) else None

    @field_validator("metrics", mode="before")
    @classmethod
    def _metrics_mapping(cls, value: Any) -> Any:
        if isinstance(value, (dict, StrategyMetrics)):
            return value
        return {}

    @property
    def transfers(self) -> list[Transfer]:
        if self.metrics.metadata is None:
            return []
        return self.metrics.metadata.transfers


class TimelinePoint(BaseModel):
    model_config = ConfigDict(extra="allow")

    date: str  # YYYY-MM-DD
    token_price: dict[str, float | None] = Field(default_factory=dict)
    sentiment: float | None = None
    sentiment_label: str | None = None
    dma_200: float | None = None
    strategies: dict[str, StrategyResult] = Field(default_factory=dict)

    @field_validator("sentiment", "dma_200", mode="before")
    @classmethod
    def _scalars_as_numbers(cls, value: Any) -> Any:
        return _number_or_none(value)

    @field_validator("sentiment_label", mode="before")
    @classmethod
    def _label_as_text(cls, value: Any) -> str | None:
        return value if isinstance(value, str) else None

    @field_validator("token_price", mode="before")
    @classmethod
    def _null_non_numeric_prices(cls, value: Any) -> dict[str, Any]:
        if not isinstance(value, dict):
            return {}
        return {
            str(symbol): price if _is_number(price) else None
            for symbol, price in value.items()
        }

    @field_validator("strategies", mode="before")
    @classmethod
    def _drop_malformed_strategies(cls, value: Any) -> dict[str, Any]:
        if not isinstance(value, dict):
            return {}
        return {
            str(strategy_id): result
            for strategy_id, result in value.items()
            if isinstance(result, (dict, StrategyResult))
        }


class BacktestStrategyConfig(BaseModel):
    config_id: str
    strategy_id: str
    params: dict[str, Any] = Field(default_factory=dict)


class BacktestRequest(BaseModel):
    token_symbol: str = "BTC"
    total_capital: float = Field(gt=0)
    days: int | None = Field(default=None, gt=0)
    start_date: str | None = None
    end_date: str | None = None
    configs: list[BacktestStrategyConfig] = Field(min_length=1)


class BacktestResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    strategies: dict[str, Any] = Field(default_factory=dict)
    timeline: list[TimelinePoint] = Field(default_factory=list)

    @field_validator("timeline", mode="before")
    @classmethod
    def _drop_unusable_points(cls, value: Any) -> Any:
        # a non-list timeline is left for the field itself to reject
        if not isinstance(value, list):
            return value
        points: list[TimelinePoint] = []
        for raw in value:
            try:
                points.append(TimelinePoint.model_validate(raw))
            except ValidationError:
                continue
        if len(points) < len(value):
            logger.warning(f"Dropped {len(value) - len(points)} unusable timeline point(s)")
        return points


class StrategiesResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    strategies: list[dict[str, Any]] = Field(default_factory=list)
