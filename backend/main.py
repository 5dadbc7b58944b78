from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from core.config import ANALYTICS_ENGINE_URL, DEMO_MODE, LOG_LEVEL
from core.log import configure_logging
from routers.backtesting import router as backtesting_router

app = FastAPI(title="DeFi Backtesting API")


@app.on_event("startup")
def startup() -> None:
    configure_logging(LOG_LEVEL)
    if ANALYTICS_ENGINE_URL:
        logger.info(f"Forwarding backtests to {ANALYTICS_ENGINE_URL}")
    elif DEMO_MODE:
        logger.warning("ANALYTICS_ENGINE_URL not set; serving deterministic demo backtests")
    else:
        logger.warning("ANALYTICS_ENGINE_URL not set and DEMO_MODE off; backtests will fail")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(backtesting_router, prefix="/backtesting")


@app.get("/healthz")
def healthz():
    return {"ok": True, "demo_mode": DEMO_MODE and not ANALYTICS_ENGINE_URL}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
