"""Settings file I/O and resolved runtime configuration for t9s.

Manages a JSON settings file at XDG_CONFIG_HOME/t9s/settings.json. Values
resolve with precedence: CLI flag > environment > settings file > default.

Import as: import t9s.settings
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Mapping

logger = logging.getLogger(__name__)

DEFAULT_ADDRESS = "http://localhost:8233"
DEFAULT_NAMESPACE = "default"


def get_config_path() -> Path:
    """Return path to settings file.

    Uses XDG_CONFIG_HOME (default ~/.config) / t9s / settings.json.
    """
    config_home = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return Path(config_home) / "t9s" / "settings.json"


def load_settings() -> dict:
    """Load settings from JSON file. Returns empty dict on missing/corrupt file."""
    path = get_config_path()
    # [LAW:dataflow-not-control-flow] Always attempt read; empty dict is the "no data" value.
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (FileNotFoundError, json.JSONDecodeError, OSError):
        return {}
    return data if isinstance(data, dict) else {}


def save_settings(data: dict) -> None:
    """Atomic write of settings dict to JSON file (temp file, then rename)."""
    path = get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.write("\n")
        os.replace(tmp_path, path)
    except Exception:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def load_setting(key: str, default=None):
    """Load a single setting by key. Returns default if absent."""
    return load_settings().get(key, default)


def save_setting(key: str, value) -> None:
    """Save a single setting by key (merge into existing settings)."""
    data = load_settings()
    data[key] = value
    save_settings(data)


# ─── Resolved configuration ──────────────────────────────────────────────────


@dataclass(frozen=True)
class Settings:
    address: str = DEFAULT_ADDRESS
    namespace: str = DEFAULT_NAMESPACE
    api_key: str | None = None
    tls_cert: str | None = None
    tls_key: str | None = None
    poll_interval: float = 3.0
    page_size: int = 50
    page_height: int = 20
    tick_interval: float = 1.0
    request_timeout: float = 10.0


@dataclass(frozen=True)
class _Field:
    name: str
    env: str | None
    parse: Callable[[Any], Any]


def _positive_float(raw: Any) -> float:
    value = float(raw)
    if value <= 0:
        raise ValueError(f"must be positive: {raw!r}")
    return value


def _positive_int(raw: Any) -> int:
    value = int(raw)
    if value <= 0:
        raise ValueError(f"must be positive: {raw!r}")
    return value


def _text(raw: Any) -> str:
    value = str(raw).strip()
    if not value:
        raise ValueError("must be non-empty")
    return value


def _path(raw: Any) -> str:
    return os.path.expanduser(_text(raw))


# [LAW:one-source-of-truth] Field -> environment variable -> parser.
_FIELDS: tuple[_Field, ...] = (
    _Field("address", "TEMPORAL_ADDRESS", _text),
    _Field("namespace", "TEMPORAL_NAMESPACE", _text),
    _Field("api_key", "TEMPORAL_API_KEY", _text),
    _Field("tls_cert", "TEMPORAL_TLS_CERT", _path),
    _Field("tls_key", "TEMPORAL_TLS_KEY", _path),
    _Field("poll_interval", "T9S_POLL_INTERVAL", _positive_float),
    _Field("page_size", None, _positive_int),
    _Field("page_height", None, _positive_int),
    _Field("tick_interval", None, _positive_float),
    _Field("request_timeout", None, _positive_float),
)


def _normalize_address(address: str, tls: bool) -> str:
    # A bare host:port means plain HTTP, or HTTPS when a client certificate is set.
    if "://" not in address:
        return f"{'https' if tls else 'http'}://{address}"
    return address


def resolve_settings(
    overrides: Mapping[str, Any] | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    file_values: Mapping[str, Any] | None = None,
) -> Settings:
    """Resolve every Settings field from flags, environment, file, defaults.

    Invalid values at one layer are logged and skipped, falling through to the
    next layer.
    """
    overrides = overrides or {}
    environ = os.environ if environ is None else environ
    file_values = load_settings() if file_values is None else file_values

    resolved: dict[str, Any] = {}
    for f in _FIELDS:
        layers = (
            ("flag", overrides.get(f.name)),
            ("env", environ.get(f.env) if f.env else None),
            ("file", file_values.get(f.name)),
        )
        for source, raw in layers:
            if raw is None or raw == "":
                continue
            try:
                resolved[f.name] = f.parse(raw)
            except (TypeError, ValueError) as e:
                logger.warning("ignoring %s value for %s: %s", source, f.name, e)
                continue
            break

    if "address" in resolved:
        resolved["address"] = _normalize_address(resolved["address"], "tls_cert" in resolved)
    return Settings(**resolved)
