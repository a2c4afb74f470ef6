"""Configuration loading, validation, and access."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from ashares.core.exceptions import ConfigError

_DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
)


class HttpConfig(BaseModel):
    """HTTP transport configuration shared by every endpoint."""

    model_config = ConfigDict(frozen=True)

    user_agent: str = _DEFAULT_USER_AGENT
    request_timeout: float = 10.0
    follow_redirects: bool = True

    @field_validator("user_agent")
    @classmethod
    def user_agent_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("user_agent must not be blank")
        return v

    @field_validator("request_timeout")
    @classmethod
    def timeout_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("request_timeout must be > 0")
        return v


class SourcesConfig(BaseModel):
    """Base URLs of the quote endpoints. Query strings are appended per call."""

    model_config = ConfigDict(frozen=True)

    tencent_kline_url: str = "https://web.ifzq.gtimg.cn/appstock/app/fqkline/get"
    tencent_minute_url: str = "https://ifzq.gtimg.cn/appstock/app/kline/mkline"
    sina_kline_url: str = (
        "http://money.finance.sina.com.cn/quotes_service/api/json_v2.php/"
        "CN_MarketData.getKLineData"
    )

    @field_validator("tencent_kline_url", "tencent_minute_url", "sina_kline_url")
    @classmethod
    def url_has_scheme(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"endpoint URL must start with http:// or https://, got {v!r}")
        return v.rstrip("?")


class AsharesConfig(BaseModel):
    """Root configuration for the ashares client."""

    model_config = ConfigDict(frozen=True)

    http: HttpConfig = HttpConfig()
    sources: SourcesConfig = SourcesConfig()


# Env var that names the YAML file; never treated as a config override.
CONFIG_PATH_ENV = "ASHARES_CONFIG"
DEFAULT_CONFIG_FILE = "ashares.yml"


def load_config(
    config_path: str | None = None,
    env_prefix: str = "ASHARES_",
) -> AsharesConfig:
    """Build an AsharesConfig from defaults, a YAML file and the environment.

    Later layers win: built-in defaults, then the YAML file, then
    ``<prefix><SECTION>__<FIELD>`` environment variables, e.g.
    ``ASHARES_HTTP__REQUEST_TIMEOUT=5`` or
    ``ASHARES_SOURCES__SINA_KLINE_URL=http://localhost:8000/sina``.

    Env values stay strings; pydantic coerces "5" to a float and "false"
    to a bool when the models validate.
    """
    yaml_path = _find_config_file(config_path)
    data = _read_yaml(yaml_path) if yaml_path is not None else {}
    data = _deep_merge(data, _env_overrides(env_prefix))
    try:
        return AsharesConfig.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        raise ConfigError(
            f"Invalid configuration: {e}",
            context={
                "field": ".".join(str(p) for p in first["loc"]),
                "value": first.get("input"),
                "source": str(yaml_path) if yaml_path else "defaults/env",
            },
        ) from e


def _find_config_file(explicit: str | None) -> Path | None:
    """The explicit path, else $ASHARES_CONFIG, else ./ashares.yml if present."""
    for origin, candidate in (
        ("config_path", explicit),
        (CONFIG_PATH_ENV, os.environ.get(CONFIG_PATH_ENV)),
    ):
        if not candidate:
            continue
        path = Path(candidate)
        if not path.is_file():
            raise ConfigError(
                f"Config file not found: {candidate}",
                context={"field": origin, "value": candidate},
            )
        return path

    default = Path(DEFAULT_CONFIG_FILE)
    return default if default.is_file() else None


def _read_yaml(path: Path) -> dict:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(
            f"Cannot read YAML config {path}: {e}",
            context={"field": "config_file", "value": str(path)},
        ) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"YAML config must be a mapping, got {type(data).__name__}",
            context={"field": "config_file", "value": str(path)},
        )
    return data


def _env_overrides(prefix: str) -> dict:
    """Nested dict of every ``<prefix>A__B=value`` variable as {"a": {"b": value}}."""
    overrides: dict = {}
    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue
        remainder = key[len(prefix) :]
        if remainder.upper() == "CONFIG":
            continue
        *sections, leaf = remainder.lower().split("__")
        node = overrides
        for section in sections:
            child = node.get(section)
            if not isinstance(child, dict):
                child = node[section] = {}
            node = child
        node[leaf] = value
    return overrides


def _deep_merge(base: dict, overrides: dict) -> dict:
    """Return ``base`` with ``overrides`` laid over it; neither input is modified."""
    merged = dict(base)
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(value, dict) and isinstance(current, dict):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged
