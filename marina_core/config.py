# =============================================================================
# marina_core/config.py
# Application configuration loaded from .streamlit/secrets.toml
# =============================================================================
"""
Configuration for the marina back office.

Values come from the ``[marina]`` table of ``.streamlit/secrets.toml`` (or the
TOML file named by ``MARINA_CONFIG``). ``MARINA_API_URL`` overrides the backend
URL. Missing keys fall back to the defaults below.

    [marina]
    api_base_url = "http://localhost:3000"
    probe_timeout = 8.0
    default_poll_interval = 5
"""

from __future__ import annotations
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union
import logging

import toml

from marina_core.errors import ConfigurationError
from marina_core.state.settings import ALLOWED_INTERVALS

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_SECRETS_PATH = PROJECT_ROOT / ".streamlit" / "secrets.toml"
CONFIG_ENV = "MARINA_CONFIG"
API_URL_ENV = "MARINA_API_URL"


@dataclass(frozen=True)
class MarinaConfig:
    """Runtime configuration"""
    api_base_url: str = "http://localhost:3000"
    probe_timeout: float = 8.0
    feed_timeout: float = 8.0
    default_poll_interval: int = 5
    offline_poll_interval: float = 10.0
    restored_notice_seconds: float = 5.0
    settings_path: Optional[str] = None
    demo_latency: float = 0.0

    def __post_init__(self):
        if not self.api_base_url.startswith(("http://", "https://")):
            raise ConfigurationError(
                f"api_base_url must be an http(s) URL, got {self.api_base_url!r}",
                config_key="api_base_url",
                expected_type="url",
            )
        for name in ("probe_timeout", "feed_timeout", "offline_poll_interval", "restored_notice_seconds"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(
                    f"{name} must be positive",
                    config_key=name,
                    expected_type="float > 0",
                )
        if self.demo_latency < 0:
            raise ConfigurationError(
                "demo_latency cannot be negative",
                config_key="demo_latency",
                expected_type="float >= 0",
            )
        if self.default_poll_interval not in ALLOWED_INTERVALS:
            raise ConfigurationError(
                f"default_poll_interval must be one of {ALLOWED_INTERVALS}",
                config_key="default_poll_interval",
                expected_type="int",
            )

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "MarinaConfig":
        known = {f.name: f for f in fields(cls)}
        unknown = sorted(set(values) - set(known))
        if unknown:
            logger.warning(f"Ignoring unknown [marina] settings: {', '.join(unknown)}")

        kwargs = {}
        for name, value in values.items():
            if name not in known:
                continue
            default = known[name].default
            try:
                if isinstance(default, bool) or default is None:
                    kwargs[name] = value
                else:
                    kwargs[name] = type(default)(value)
            except (TypeError, ValueError) as e:
                raise ConfigurationError(
                    f"Invalid value for {name}: {value!r}",
                    config_key=name,
                    expected_type=type(default).__name__,
                ) from e
        return cls(**kwargs)


def load_config(path: Optional[Union[str, Path]] = None) -> MarinaConfig:
    """
    Load configuration from TOML.

    Args:
        path: Explicit TOML file; defaults to $MARINA_CONFIG or
              .streamlit/secrets.toml

    Raises:
        ConfigurationError: the file cannot be parsed or holds bad values
    """
    explicit = path or os.getenv(CONFIG_ENV)
    config_path = Path(explicit) if explicit else DEFAULT_SECRETS_PATH

    values: Dict[str, Any] = {}
    if config_path.exists():
        try:
            document = toml.load(config_path)
        except toml.TomlDecodeError as e:
            raise ConfigurationError(
                f"Cannot parse {config_path}: {e}",
                config_key=str(config_path),
            ) from e
        section = document.get("marina", {})
        if not isinstance(section, dict):
            raise ConfigurationError(
                "[marina] must be a table",
                config_key="marina",
                expected_type="table",
            )
        values.update(section)
        logger.debug(f"Loaded configuration from {config_path}")
    elif explicit:
        raise ConfigurationError(
            f"Configuration file not found: {config_path}",
            config_key=CONFIG_ENV,
        )

    api_url = os.getenv(API_URL_ENV)
    if api_url:
        values["api_base_url"] = api_url

    return MarinaConfig.from_dict(values)
