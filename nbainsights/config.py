"""Configuration for the dashboard client.

Settings come from NBA_INSIGHTS_* environment variables, optionally layered
over a .env or JSON file (environment wins).
"""

from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Dict, Iterator, Mapping, Optional, Tuple
from urllib.parse import urlparse
import json
import os

from nbainsights.exceptions import ConfigurationError

ENV_PREFIX = "NBA_INSIGHTS_"

_DEFAULT_API_BASE_URL = "http://127.0.0.1:8000"
_DEFAULT_RECENT_GAMES_LIMIT = 10
_DEFAULT_CANCEL_SUPERSEDED = True
_DEFAULT_DIAGNOSTICS_ENABLED = False
_DEFAULT_LOG_LEVEL = "INFO"

_TRUE_VALUES = {"1", "true", "yes", "on"}

Settings = Mapping[str, Optional[str]]


def _setting(values: Settings, name: str) -> Optional[str]:
    """Raw value of NBA_INSIGHTS_<name>, None when unset or blank."""
    value = values.get(ENV_PREFIX + name)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _int_setting(values: Settings, name: str, default: int) -> int:
    raw = _setting(values, name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _bool_setting(values: Settings, name: str, default: bool) -> bool:
    raw = _setting(values, name)
    if raw is None:
        return default
    return raw.lower() in _TRUE_VALUES


def _normalize_base_url(value: Optional[str]) -> str:
    url = value or _DEFAULT_API_BASE_URL
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigurationError("api_base_url", f"expected an http(s) URL, got {url!r}")
    return url.rstrip("/")


def _env_file_pairs(path: Path) -> Iterator[Tuple[str, str]]:
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
            value = value[1:-1]
        yield key.strip(), value


def _read_config_file(path: Path) -> Dict[str, str]:
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    if path.suffix.lower() != ".json":
        return dict(_env_file_pairs(path))
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigurationError(str(path), f"invalid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ConfigurationError(str(path), "expected a JSON object of settings")
    return {str(k): str(v) for k, v in payload.items()}


@dataclass
class Config:
    api_base_url: str = _DEFAULT_API_BASE_URL
    recent_games_limit: int = _DEFAULT_RECENT_GAMES_LIMIT
    cancel_superseded: bool = _DEFAULT_CANCEL_SUPERSEDED
    diagnostics_enabled: bool = _DEFAULT_DIAGNOSTICS_ENABLED
    log_level: str = _DEFAULT_LOG_LEVEL

    @classmethod
    def from_mapping(cls, values: Settings) -> "Config":
        return cls(
            api_base_url=_normalize_base_url(_setting(values, "API_URL")),
            recent_games_limit=_int_setting(values, "RECENT_LIMIT", _DEFAULT_RECENT_GAMES_LIMIT),
            cancel_superseded=_bool_setting(values, "CANCEL_SUPERSEDED", _DEFAULT_CANCEL_SUPERSEDED),
            diagnostics_enabled=_bool_setting(values, "DIAGNOSTICS", _DEFAULT_DIAGNOSTICS_ENABLED),
            log_level=(_setting(values, "LOG_LEVEL") or _DEFAULT_LOG_LEVEL).upper(),
        )

    @classmethod
    def from_env(cls) -> "Config":
        return cls.from_mapping(os.environ)

    @classmethod
    def load(cls, path: str) -> "Config":
        """Load settings from a .env or JSON file; non-blank environment variables win."""
        values: Dict[str, Optional[str]] = dict(_read_config_file(Path(path)))
        for key, value in os.environ.items():
            if key.startswith(ENV_PREFIX) and value.strip():
                values[key] = value
        return cls.from_mapping(values)

    def to_dict(self) -> dict:
        return asdict(self)
