# signaldesk/analysis.py
"""
LLM-backed trading commentary.

Builds a prompt from an IndicatorSet and asks an OpenAI-compatible
chat-completions endpoint for a single forced function call whose arguments
are the structured analysis.
"""

import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Any

import aiohttp

from signaldesk.config import settings
from signaldesk.indicators import IndicatorSet
from signaldesk.rules import THRESHOLDS, get_session_utc, get_timeframe_type

log = logging.getLogger(__name__)

SCHEMA_VERSION = "1.0.0"

DEFAULT_NEWS = {"event_risk": False, "headline_hits_30m": 0}

SYSTEM_PROMPT = (
    "You are an institutional-grade technical analysis engine. Use ONLY provided "
    "data. Return ONLY the function call, with no extra text. Be consistent - "
    "same inputs must produce same outputs."
)

_LEVELS = {"type": "array", "items": {"type": "number"}}

ANALYSIS_FUNCTION = {
    "name": "TaResult",
    "description": "Technical analysis summary with a single trade idea",
    "parameters": {
        "type": "object",
        "properties": {
            "summary": {"type": "string"},
            "action": {"type": "string", "enum": ["buy", "sell", "hold"]},
            "action_text": {"type": "string"},
            "outlook": {"type": "string", "enum": ["bullish", "bearish", "neutral"]},
            "levels": {
                "type": "object",
                "properties": {
                    "support": _LEVELS,
                    "resistance": _LEVELS,
                    "vwap": {"type": ["number", "null"]},
                },
                "required": ["support", "resistance"],
            },
            "trade_idea": {
                "type": "object",
                "properties": {
                    "direction": {"type": "string", "enum": ["long", "short", "none"]},
                    "entry": {"type": "number"},
                    "stop": {"type": "number"},
                    "targets": _LEVELS,
                    "rationale": {"type": "string"},
                    "time_horizon": {
                        "type": "string",
                        "enum": ["scalp", "intraday", "swing", "position"],
                    },
                    "rr_estimate": {"type": "number"},
                },
                "required": ["direction", "entry", "stop", "targets", "rationale"],
            },
            "confidence": {"type": "number", "minimum": 0, "maximum": 100},
            "risks": {"type": "string"},
        },
        "required": [
            "summary", "action", "action_text", "outlook",
            "levels", "trade_idea", "confidence", "risks",
        ],
    },
}


class AnalysisError(RuntimeError):
    """The LLM call failed or returned something other than the expected function call."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


def build_analysis_prompt(
    symbol: str,
    timeframe: str,
    market: str,
    indicators: IndicatorSet,
    news: dict[str, Any] | None = None,
    now: datetime | None = None,
) -> str:
    """User prompt with the indicator snapshot, news context and rule thresholds."""
    features = indicators.to_dict()
    horizon = get_timeframe_type(timeframe)
    session = get_session_utc(now)

    return f"""MARKET DATA:
Symbol: {symbol} | Timeframe: {timeframe} ({horizon}) | Asset: {market} | Session: {session}

The analysis MUST be specific to the {timeframe} timeframe. All levels and
recommendations should be contextualised to {timeframe} chart analysis.

TECHNICAL FEATURES:
{json.dumps(features, indent=2)}

NEWS/EVENT CONTEXT:
{json.dumps(news or DEFAULT_NEWS, indent=2)}

RULES:
- RSI above {THRESHOLDS["RSI_OVERBOUGHT"]} is overbought, below {THRESHOLDS["RSI_OVERSOLD"]} oversold.
- Stops are {THRESHOLDS["STOP_ATR_MULTIPLIER"]} ATR beyond the nearest level; targets at {THRESHOLDS["TARGET1_ATR_MULTIPLIER"]} and {THRESHOLDS["TARGET2_ATR_MULTIPLIER"]} ATR.
- Only propose a trade with reward:risk of at least {THRESHOLDS["MIN_RR_RATIO"]}; otherwise action is "hold".
- Confidence never exceeds {THRESHOLDS["MAX_CONFIDENCE"]}.

Identify trend direction from EMA 20/50/200 alignment, momentum from RSI and
MACD, volatility from ATR and Bollinger width, and value from VWAP. Provide a
concise summary, one actionable trade idea with entry, stop and targets, and
the main risks."""


class AnalysisClient:
    """Thin wrapper around an OpenAI-compatible /chat/completions endpoint."""

    REQUEST_TIMEOUT = 60.0

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.openai_api_key
        self.model = model or settings.openai_model
        self.base_url = (base_url or settings.openai_base_url).rstrip("/")
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "AnalysisClient":
        await self.start()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def start(self) -> None:
        if self._session is None:
            self._session = aiohttp.ClientSession(headers=self._headers())

    async def close(self) -> None:
        if self._session:
            await self._session.close()
            self._session = None

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def _request(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        if not self.api_key:
            raise AnalysisError("OpenAI API key not configured (set OPENAI_API_KEY)", status=401)

        if not self._session:
            self._session = aiohttp.ClientSession(headers=self._headers())

        url = f"{self.base_url}{path}"
        timeout = aiohttp.ClientTimeout(total=self.REQUEST_TIMEOUT)

        try:
            async with self._session.post(url, json=payload, timeout=timeout) as resp:
                if resp.status >= 400:
                    try:
                        err_body = await resp.json()
                    except Exception:
                        err_body = await resp.text()

                    log.error("HTTP %s for POST %s: %s", resp.status, url, err_body)
                    status = 401 if resp.status in (401, 403) else 502
                    raise AnalysisError(
                        f"Analysis request failed: HTTP {resp.status}: {err_body}",
                        status=status,
                    )

                result: dict[str, Any] = await resp.json()
                return result

        except asyncio.TimeoutError as e:
            log.error("Analysis request timed out: POST %s", url)
            raise AnalysisError("Analysis request timed out", status=504) from e
        except aiohttp.ClientError as e:
            log.error("Request failed: POST %s - %s", url, e)
            raise AnalysisError(f"Analysis request failed: {e}", status=502) from e

    async def analyze(
        self,
        symbol: str,
        timeframe: str,
        market: str,
        indicators: IndicatorSet,
        news: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Request structured analysis for a symbol.

        Returns the parsed function arguments merged with request metadata.

        Raises:
            AnalysisError: On HTTP failure, a missing function call or
                unparseable function arguments
        """
        prompt = build_analysis_prompt(symbol, timeframe, market, indicators, news)
        fn_name = ANALYSIS_FUNCTION["name"]
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "tools": [{"type": "function", "function": ANALYSIS_FUNCTION}],
            "tool_choice": {"type": "function", "function": {"name": fn_name}},
        }

        log.info("Requesting analysis for %s (%s, %s)", symbol, timeframe, market)
        response = await self._request("/chat/completions", payload)

        choices = response.get("choices") or [{}]
        tool_calls = (choices[0].get("message") or {}).get("tool_calls") or []
        call = tool_calls[0].get("function", {}) if tool_calls else {}
        if call.get("name") != fn_name:
            log.error("No %s function call in response: %s", fn_name, response)
            raise AnalysisError("AI did not return a valid function call", status=502)

        arguments = call.get("arguments") or ""
        try:
            parsed = json.loads(arguments)
        except json.JSONDecodeError as e:
            log.error("Function arguments parse failed: %s", e)
            raise AnalysisError(
                f"AI returned invalid function arguments: {arguments[:200]}", status=502
            ) from e

        result = {
            **parsed,
            "symbol": symbol,
            "timeframe": timeframe,
            "market": market,
            "json_version": SCHEMA_VERSION,
            "analyzed_at": datetime.now(timezone.utc).isoformat(),
            "input_features": indicators.to_dict(),
            "input_news": news or DEFAULT_NEWS,
        }
        log.info(
            "Analysis for %s: %s (%s%% confidence)",
            symbol,
            result.get("action"),
            result.get("confidence"),
        )
        return result
