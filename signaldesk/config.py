# signaldesk/config.py
"""
Configuration management for the signaldesk library.

Settings are loaded from environment variables.

Provider credentials (required only for the provider in use):
    POLYGON_API_KEY     - Polygon.io API key (market data)
    OPENAI_API_KEY      - API key for the chat-completion endpoint (analysis)

Optional environment variables:
    OPENAI_MODEL        - Model name sent with analysis requests
    OPENAI_BASE_URL     - Base URL of an OpenAI-compatible API
    BINANCE_BASE_URL    - Binance REST base URL
    INDICATOR_CACHE_TTL - Indicator cache freshness window in seconds (default: 30)
    LOG_LEVEL           - Logging level (default: INFO)
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got '{raw}'")


@dataclass
class Settings:
    """
    Global settings for the signaldesk library.

    Values are loaded from environment variables on initialization.
    Users can override these programmatically if needed:

        from signaldesk.config import settings
        settings.polygon_api_key = "custom_key"
    """

    polygon_api_key: str = ""
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_base_url: str = "https://api.openai.com/v1"
    binance_base_url: str = "https://api.binance.com"
    indicator_cache_ttl: float = 30.0
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        # Populate from environment at import-time.
        self.polygon_api_key = os.getenv("POLYGON_API_KEY", "")
        self.openai_api_key = os.getenv("OPENAI_API_KEY", "")
        self.openai_model = os.getenv("OPENAI_MODEL", self.openai_model)
        self.openai_base_url = os.getenv("OPENAI_BASE_URL", self.openai_base_url).rstrip("/")
        self.binance_base_url = os.getenv("BINANCE_BASE_URL", self.binance_base_url).rstrip("/")
        self.indicator_cache_ttl = _float_env("INDICATOR_CACHE_TTL", self.indicator_cache_ttl)
        self.log_level = os.getenv("LOG_LEVEL", self.log_level).upper()

    def validate(self, provider: str = "polygon", *, analysis: bool = False) -> None:
        """
        Validate that the settings needed for `provider` are present.

        Raises:
            ValueError: If required settings are missing or invalid
        """
        missing: list[str] = []
        if provider == "polygon" and not self.polygon_api_key:
            missing.append("POLYGON_API_KEY")
        if analysis and not self.openai_api_key:
            missing.append("OPENAI_API_KEY")

        if missing:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing)}. "
                "Set them in your shell or export them before running signaldesk."
            )

        if provider not in ("polygon", "binance"):
            raise ValueError(f"provider must be 'polygon' or 'binance', got '{provider}'")

        if self.indicator_cache_ttl < 0:
            raise ValueError(
                f"INDICATOR_CACHE_TTL must be >= 0, got {self.indicator_cache_ttl}"
            )

    def apply(self, overrides: dict[str, Any]) -> None:
        """Apply overrides (e.g. from a YAML config file) to known fields."""
        for key, value in overrides.items():
            if not hasattr(self, key):
                raise ValueError(f"Unknown setting '{key}'")
            setattr(self, key, value)


def load_config(config_path: str | Path) -> dict[str, Any]:
    """
    Load configuration overrides from a YAML file.

    Args:
        config_path: Path to YAML config file

    Returns:
        Dictionary containing configuration
    """
    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(config_file) as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {config_path}: {e}")

    if config is None:
        raise ValueError(f"Empty config file: {config_path}")
    if not isinstance(config, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")

    return config


# Global settings instance - loaded when module is imported
settings = Settings()
