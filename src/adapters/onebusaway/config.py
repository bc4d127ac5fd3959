from __future__ import annotations

import os
from dataclasses import dataclass

import httpx

from src.domain.exceptions import ConfigMissing

DEFAULT_BASE_URL = "https://api.pugetsound.onebusaway.org"


def env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


def env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


@dataclass(frozen=True, slots=True)
class OneBusAwayConfig:
    api_key: str | None
    base_url: str = DEFAULT_BASE_URL
    timeout_s: float = 10.0

    @staticmethod
    def from_env() -> "OneBusAwayConfig":
        api_key = os.getenv("ONEBUSAWAY_API_KEY")
        if api_key is not None:
            api_key = api_key.strip() or None

        base_url = (os.getenv("ONEBUSAWAY_BASE_URL") or "").strip() or DEFAULT_BASE_URL

        return OneBusAwayConfig(
            api_key=api_key,
            base_url=base_url.rstrip("/"),
            timeout_s=env_float("ONEBUSAWAY_TIMEOUT_S", 10.0),
        )

    def require_api_key(self) -> str:
        if not self.api_key:
            raise ConfigMissing("Missing ONEBUSAWAY_API_KEY")
        return self.api_key

    def url(self, path: str) -> str:
        return f"{self.base_url}/api/where/{path.lstrip('/')}"


def async_client(
    cfg: OneBusAwayConfig, transport: httpx.AsyncBaseTransport | None = None
) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=cfg.timeout_s, transport=transport)
