# tests/conftest.py
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from signaldesk.marketdata import Candle


@pytest.fixture(autouse=True)
def mock_settings():
    """Automatically mock settings for all tests."""
    with patch("signaldesk.providers.polygon.client.settings") as mock_polygon_settings, \
         patch("signaldesk.providers.binance.client.settings") as mock_binance_settings, \
         patch("signaldesk.analysis.settings") as mock_analysis_settings:

        for mock_setting in [mock_polygon_settings, mock_binance_settings, mock_analysis_settings]:
            mock_setting.polygon_api_key = "test-polygon-key"
            mock_setting.openai_api_key = "test-openai-key"
            mock_setting.openai_model = "test-model"
            mock_setting.openai_base_url = "https://llm.test/v1"
            mock_setting.binance_base_url = "https://binance.test"
            mock_setting.indicator_cache_ttl = 30.0
            mock_setting.log_level = "INFO"
            mock_setting.validate = MagicMock()

        yield mock_polygon_settings


class AsyncContextManagerMock:
    """Helper class to mock async context managers."""
    def __init__(self, return_value=None):
        self.return_value = return_value or MagicMock()

    async def __aenter__(self):
        return self.return_value

    async def __aexit__(self, *args):
        return None


@pytest.fixture
def mock_http_response():
    """Create a mock HTTP response."""
    mock_response = MagicMock()
    mock_response.status = 200
    mock_response.json = AsyncMock(return_value={})
    mock_response.text = AsyncMock(return_value="")
    return mock_response


@pytest.fixture
def mock_aiohttp_session(mock_http_response):
    """Mock aiohttp ClientSession whose request()/post() yield mock_http_response."""
    response_context = AsyncContextManagerMock(mock_http_response)

    mock_session = MagicMock()
    mock_session.post = MagicMock(return_value=response_context)
    mock_session.request = MagicMock(return_value=response_context)
    mock_session.close = AsyncMock()
    mock_session.headers = {}

    return mock_session


def make_candle(i: int) -> Candle:
    """
    Deterministic candle series with monotonically increasing prices.
    """
    base = 100.0 + i
    return Candle(
        timestamp=f"2025-01-01T{i // 60:02d}:{i % 60:02d}:00Z",
        open=base,
        high=base + 0.5,
        low=base - 0.5,
        close=base + 0.2,
        volume=1000.0,
    )


@pytest.fixture
def candle_factory():
    """
    Returns a function: (i:int) -> Candle
    """
    return make_candle


@pytest.fixture
def make_candles(candle_factory):
    """
    Returns a function: (n:int, start:int=0) -> list[Candle]
    """
    def _make(n: int, start: int = 0) -> list[Candle]:
        return [candle_factory(i) for i in range(start, start + n)]

    return _make


class FakeClock:
    """Manually advanced clock for cache tests."""
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()
