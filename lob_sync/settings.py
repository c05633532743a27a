from __future__ import annotations

import math
import os
from dataclasses import dataclass, fields, replace
from typing import Optional

import yaml


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "y")


def _as_int(name: str, value) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer (got {value!r})")
    try:
        as_float = float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be an integer (got {value!r})") from exc
    if not as_float.is_integer():
        raise ValueError(f"{name} must be an integer (got {value!r})")
    return int(as_float)


def _as_float(name: str, value) -> float:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be a number (got {value!r})")
    try:
        out = float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be a number (got {value!r})") from exc
    if not math.isfinite(out):
        raise ValueError(f"{name} must be finite (got {value!r})")
    return out


WOOX_WS_URL = "wss://wss.woox.io/v3/public"
WOOX_REST_URL = "https://api.woox.io/v3/public/orderbook"
CLIENT_ID = "client_id_x"
SYMBOL = "PERP_ETH_USDT"
MAX_LEVEL = 50

BUFFER_DELAY_S = 3.0
SNAPSHOT_TIMEOUT_S = 10.0
RENDER_LEVELS = 5


@dataclass(frozen=True)
class SyncConfig:
    symbol: str = SYMBOL
    depth: int = MAX_LEVEL
    ws_url: str = WOOX_WS_URL
    rest_url: str = WOOX_REST_URL
    client_id: str = CLIENT_ID
    buffer_delay_s: float = BUFFER_DELAY_S
    snapshot_timeout_s: float = SNAPSHOT_TIMEOUT_S
    render_levels: int = RENDER_LEVELS
    render: bool = True
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        # values from YAML arrive untyped; store them as the declared field types
        for name in ("symbol", "ws_url", "rest_url", "client_id", "log_level"):
            object.__setattr__(self, name, str(getattr(self, name)).strip())
        for name in ("depth", "render_levels"):
            object.__setattr__(self, name, _as_int(name, getattr(self, name)))
        for name in ("buffer_delay_s", "snapshot_timeout_s"):
            object.__setattr__(self, name, _as_float(name, getattr(self, name)))
        if not isinstance(self.render, bool):
            raise ValueError(f"render must be true or false (got {self.render!r})")

        if not self.symbol:
            raise ValueError("symbol must not be empty")
        if self.depth < 1:
            raise ValueError(f"depth must be >= 1 (got {self.depth!r})")
        if self.buffer_delay_s < 0:
            raise ValueError(f"buffer_delay_s must be >= 0 (got {self.buffer_delay_s!r})")
        if self.snapshot_timeout_s <= 0:
            raise ValueError(f"snapshot_timeout_s must be > 0 (got {self.snapshot_timeout_s!r})")
        if self.render_levels < 1:
            raise ValueError(f"render_levels must be >= 1 (got {self.render_levels!r})")

    @property
    def topic(self) -> str:
        return f"orderbookupdate@{self.symbol}@{self.depth}"

    @classmethod
    def from_env(cls) -> "SyncConfig":
        return cls(
            symbol=_env_str("SYMBOL", SYMBOL),
            depth=_env_int("MAX_LEVEL", MAX_LEVEL),
            ws_url=_env_str("WOOX_WS_URL", WOOX_WS_URL),
            rest_url=_env_str("WOOX_REST_URL", WOOX_REST_URL),
            client_id=_env_str("CLIENT_ID", CLIENT_ID),
            buffer_delay_s=_env_float("BUFFER_DELAY_S", BUFFER_DELAY_S),
            snapshot_timeout_s=_env_float("SNAPSHOT_TIMEOUT_S", SNAPSHOT_TIMEOUT_S),
            render_levels=_env_int("RENDER_LEVELS", RENDER_LEVELS),
            render=_env_bool("RENDER", True),
            log_level=_env_str("LOG_LEVEL", "INFO"),
        )


def load_config(path: Optional[str] = None) -> SyncConfig:
    """Build the runtime config: defaults, then env vars, then an optional YAML file.

    The YAML path comes from `path` or the CONFIG_PATH env var. Keys must be
    SyncConfig field names.
    """
    cfg = SyncConfig.from_env()
    path = path or os.getenv("CONFIG_PATH")
    if not path:
        return cfg

    with open(path, "r") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"config file {path} must contain a mapping")

    known = {f.name for f in fields(SyncConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ValueError(f"unknown config keys in {path}: {', '.join(unknown)}")
    return replace(cfg, **raw)
