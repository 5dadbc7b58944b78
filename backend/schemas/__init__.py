from schemas.backtesting import (
    BacktestRequest,
    BacktestResponse,
    BacktestStrategyConfig,
    StrategiesResponse,
    StrategyMetadata,
    StrategyMetrics,
    StrategyResult,
    TimelinePoint,
    Transfer,
)

__all__ = [
    "BacktestRequest",
    "BacktestResponse",
    "BacktestStrategyConfig",
    "StrategiesResponse",
    "StrategyMetadata",
    "StrategyMetrics",
    "StrategyResult",
    "TimelinePoint",
    "Transfer",
]
