"""
Pytest fixtures for the backtesting test suite.

Engine calls are never made for real: `engine_stub` replaces the analytics
engine client inside the backtesting service and records every call.
"""
import pytest

from services import backtesting


class EngineStub:
    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.response = None
        self.error: Exception | None = None

    def _reply(self, *call):
        self.calls.append(call)
        if self.error is not None:
            raise self.error
        return self.response

    def post(self, path, payload, timeout=None):
        return self._reply("POST", path, payload, timeout)

    def get(self, path, timeout=None):
        return self._reply("GET", path, None, timeout)


@pytest.fixture
def engine_stub(monkeypatch) -> EngineStub:
    """Point the service at a fake engine URL and stub out the HTTP client."""
    stub = EngineStub()
    monkeypatch.setattr(backtesting.config, "ANALYTICS_ENGINE_URL", "http://engine.test")
    monkeypatch.setattr(backtesting.analytics_engine, "post", stub.post)
    monkeypatch.setattr(backtesting.analytics_engine, "get", stub.get)
    return stub


@pytest.fixture
def demo_mode(monkeypatch) -> None:
    monkeypatch.setattr(backtesting.config, "ANALYTICS_ENGINE_URL", None)
    monkeypatch.setattr(backtesting.config, "DEMO_MODE", True)
