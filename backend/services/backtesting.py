"""
Backtest orchestration: run on the analytics engine (or demo data), validate
the payload, then hand a chart-ready timeline back to callers.
"""
from typing import Any

from loguru import logger
from pydantic import ValidationError

from core import analytics_engine
from core import config
from core.analytics_engine import AnalyticsEngineError
from core.mock_data import build_demo_backtest, build_demo_strategies
from schemas.backtesting import BacktestRequest, BacktestResponse, StrategiesResponse
from services.timeline import prepare_chart_timeline

COMPARE_PATH = "/api/v3/backtesting/compare"
STRATEGIES_PATH = "/api/v3/backtesting/strategies"

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred while running the backtest."


class BacktestingError(Exception):
    def __init__(self, message: str, status_code: int = 502) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _use_demo_data() -> bool:
    return config.DEMO_MODE and not config.ANALYTICS_ENGINE_URL


def _call_engine(method: str, path: str, payload: dict[str, Any] | None = None, timeout: float | None = None) -> Any:
    timeout = timeout or config.ENGINE_TIMEOUT_SECONDS
    try:
        if method == "POST":
            return analytics_engine.post(path, payload or {}, timeout=timeout)
        return analytics_engine.get(path, timeout=timeout)
    except AnalyticsEngineError as exc:
        raise BacktestingError(exc.message, exc.status_code) from exc
    except Exception as exc:
        logger.exception(f"Unexpected failure calling analytics engine: {method} {path}")
        raise BacktestingError(UNEXPECTED_ERROR_MESSAGE) from exc


def run_backtest(request: BacktestRequest) -> BacktestResponse:
    """
    Run a strategy comparison and return it with a bounded timeline.
    dma_200 is computed over the full engine timeline before sampling so the
    average is correct on every retained day.
    """
    if _use_demo_data():
        raw = build_demo_backtest(request)
    else:
        raw = _call_engine(
            "POST",
            COMPARE_PATH,
            request.model_dump(exclude_none=True),
            timeout=config.BACKTEST_TIMEOUT_SECONDS,
        )

    try:
        response = BacktestResponse.model_validate(raw)
    except ValidationError as exc:
        logger.error(f"Analytics engine returned an invalid backtest payload: {exc.error_count()} error(s)")
        raise BacktestingError(UNEXPECTED_ERROR_MESSAGE) from exc

    raw_points = len(response.timeline)
    response.timeline = prepare_chart_timeline(response.timeline)
    logger.info(
        f"Backtest {request.token_symbol} configs={[c.config_id for c in request.configs]} "
        f"points={raw_points} sampled={len(response.timeline)}"
    )
    return response


def get_backtesting_strategies() -> StrategiesResponse:
    """Strategy catalogue available for comparison."""
    if _use_demo_data():
        raw = build_demo_strategies()
    else:
        raw = _call_engine("GET", STRATEGIES_PATH)

    try:
        return StrategiesResponse.model_validate(raw)
    except ValidationError as exc:
        logger.error("Analytics engine returned an invalid strategies payload")
        raise BacktestingError(UNEXPECTED_ERROR_MESSAGE) from exc
