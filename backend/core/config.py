from dotenv import load_dotenv
import os

load_dotenv()

ANALYTICS_ENGINE_URL = os.getenv("ANALYTICS_ENGINE_URL", "").strip().rstrip("/") or None

DEMO_MODE = os.getenv("DEMO_MODE", "true").lower() in ("true", "1", "yes")

# Complex backtests can run for several minutes on the engine side.
BACKTEST_TIMEOUT_SECONDS = float(os.getenv("BACKTEST_TIMEOUT_SECONDS", "600"))
ENGINE_TIMEOUT_SECONDS = float(os.getenv("ENGINE_TIMEOUT_SECONDS", "30"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
