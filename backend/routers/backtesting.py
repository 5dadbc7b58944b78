from fastapi import APIRouter, HTTPException

from schemas.backtesting import BacktestRequest, BacktestResponse, StrategiesResponse
from services.backtesting import BacktestingError, get_backtesting_strategies, run_backtest

router = APIRouter()


@router.post("/compare", response_model=BacktestResponse)
def compare_strategies(request: BacktestRequest):
    try:
        return run_backtest(request)
    except BacktestingError as exc:
        raise HTTPException(exc.status_code, detail=exc.message)


@router.get("/strategies", response_model=StrategiesResponse)
def list_strategies():
    try:
        return get_backtesting_strategies()
    except BacktestingError as exc:
        raise HTTPException(exc.status_code, detail=exc.message)
