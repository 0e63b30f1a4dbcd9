import asyncio
import json
from datetime import datetime, timezone

import pytest

from signaldesk.analysis import (
    ANALYSIS_FUNCTION,
    SCHEMA_VERSION,
    AnalysisClient,
    AnalysisError,
    build_analysis_prompt,
)
from signaldesk.indicators import IndicatorSet

RESULT = {
    "summary": "Uptrend intact above EMA20.",
    "action": "buy",
    "action_text": "Buy pullbacks to 101",
    "outlook": "bullish",
    "levels": {"support": [100.0], "resistance": [110.0], "vwap": 104.0},
    "trade_idea": {
        "direction": "long",
        "entry": 105.0,
        "stop": 100.0,
        "targets": [110.0, 115.0],
        "rationale": "EMA alignment",
    },
    "confidence": 70,
    "risks": "Earnings next week",
}


def completion(arguments: str, name: str = "TaResult") -> dict:
    return {
        "choices": [
            {
                "message": {
                    "tool_calls": [
                        {"type": "function", "function": {"name": name, "arguments": arguments}}
                    ]
                }
            }
        ]
    }


class TestBuildAnalysisPrompt:
    def test_contains_context(self) -> None:
        prompt = build_analysis_prompt(
            "AAPL",
            "1h",
            "stock",
            IndicatorSet(price=105.0, rsi14=61.0),
            now=datetime(2025, 1, 1, 9, 0, tzinfo=timezone.utc),
        )

        assert "Symbol: AAPL | Timeframe: 1h (intraday) | Asset: stock | Session: London" in prompt
        assert '"rsi14": 61.0' in prompt
        assert '"event_risk": false' in prompt
        assert "RSI above 70 is overbought" in prompt

    def test_custom_news(self) -> None:
        prompt = build_analysis_prompt(
            "AAPL", "1d", "stock", IndicatorSet(), news={"event_risk": True, "headline_hits_30m": 3}
        )
        assert '"headline_hits_30m": 3' in prompt


class TestAnalysisRequest:
    @pytest.mark.asyncio
    async def test_missing_key_fails_before_request(self, mock_aiohttp_session) -> None:
        client = AnalysisClient(api_key="")
        client._session = mock_aiohttp_session

        with pytest.raises(AnalysisError) as exc_info:
            await client._request("/chat/completions", {})

        assert exc_info.value.status == 401
        mock_aiohttp_session.post.assert_not_called()

    @pytest.mark.asyncio
    async def test_posts_to_base_url(self, mock_aiohttp_session, mock_http_response) -> None:
        mock_http_response.json.return_value = {"ok": True}
        client = AnalysisClient()
        client._session = mock_aiohttp_session

        assert await client._request("/chat/completions", {"model": "m"}) == {"ok": True}

        args, kwargs = mock_aiohttp_session.post.call_args
        assert args == ("https://llm.test/v1/chat/completions",)
        assert kwargs["json"] == {"model": "m"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("http_status, expected", [(401, 401), (403, 401), (429, 502), (500, 502)])
    async def test_http_errors(self, mock_aiohttp_session, mock_http_response, http_status, expected) -> None:
        mock_http_response.status = http_status
        mock_http_response.json.return_value = {"error": {"message": "nope"}}
        client = AnalysisClient()
        client._session = mock_aiohttp_session

        with pytest.raises(AnalysisError) as exc_info:
            await client._request("/chat/completions", {})

        assert exc_info.value.status == expected

    @pytest.mark.asyncio
    async def test_timeout(self, mock_aiohttp_session) -> None:
        mock_aiohttp_session.post.side_effect = asyncio.TimeoutError()
        client = AnalysisClient()
        client._session = mock_aiohttp_session

        with pytest.raises(AnalysisError) as exc_info:
            await client._request("/chat/completions", {})

        assert exc_info.value.status == 504


class TestAnalyze:
    @pytest.mark.asyncio
    async def test_forces_function_call(self, monkeypatch) -> None:
        client = AnalysisClient()
        captured = {}

        async def fake_request(path, payload):
            captured["path"] = path
            captured["payload"] = payload
            return completion(json.dumps(RESULT))

        monkeypatch.setattr(client, "_request", fake_request)

        await client.analyze("AAPL", "1h", "stock", IndicatorSet(price=105.0))

        payload = captured["payload"]
        assert captured["path"] == "/chat/completions"
        assert payload["model"] == "test-model"
        assert payload["tools"] == [{"type": "function", "function": ANALYSIS_FUNCTION}]
        assert payload["tool_choice"] == {"type": "function", "function": {"name": "TaResult"}}
        assert [m["role"] for m in payload["messages"]] == ["system", "user"]

    @pytest.mark.asyncio
    async def test_merges_metadata(self, monkeypatch) -> None:
        client = AnalysisClient()
        indicators = IndicatorSet(price=105.0)

        async def fake_request(path, payload):
            return completion(json.dumps(RESULT))

        monkeypatch.setattr(client, "_request", fake_request)

        result = await client.analyze("AAPL", "1h", "stock", indicators)

        assert result["action"] == "buy"
        assert result["symbol"] == "AAPL"
        assert result["timeframe"] == "1h"
        assert result["market"] == "stock"
        assert result["json_version"] == SCHEMA_VERSION
        assert result["input_features"] == indicators.to_dict()
        assert result["input_news"] == {"event_risk": False, "headline_hits_30m": 0}
        datetime.fromisoformat(result["analyzed_at"])

    @pytest.mark.asyncio
    async def test_wrong_function_name(self, monkeypatch) -> None:
        client = AnalysisClient()

        async def fake_request(path, payload):
            return completion(json.dumps(RESULT), name="Other")

        monkeypatch.setattr(client, "_request", fake_request)

        with pytest.raises(AnalysisError, match="valid function call"):
            await client.analyze("AAPL", "1h", "stock", IndicatorSet())

    @pytest.mark.asyncio
    async def test_plain_text_reply(self, monkeypatch) -> None:
        client = AnalysisClient()

        async def fake_request(path, payload):
            return {"choices": [{"message": {"content": "I think it goes up"}}]}

        monkeypatch.setattr(client, "_request", fake_request)

        with pytest.raises(AnalysisError):
            await client.analyze("AAPL", "1h", "stock", IndicatorSet())

    @pytest.mark.asyncio
    async def test_invalid_arguments(self, monkeypatch) -> None:
        client = AnalysisClient()

        async def fake_request(path, payload):
            return completion("{not json")

        monkeypatch.setattr(client, "_request", fake_request)

        with pytest.raises(AnalysisError, match="invalid function arguments") as exc_info:
            await client.analyze("AAPL", "1h", "stock", IndicatorSet())

        assert exc_info.value.status == 502
