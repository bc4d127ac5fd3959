from __future__ import annotations

import os

import pytest

from src.adapters.onebusaway import OneBusAwayConfig


@pytest.fixture(scope="session")
def require_onebusaway() -> OneBusAwayConfig:
    """Live OneBusAway config; skipped unless an API key is exported."""

    cfg = OneBusAwayConfig.from_env()
    if not cfg.api_key:
        msg = "ONEBUSAWAY_API_KEY not set"

        # CI jobs that export REQUIRE_ONEBUSAWAY expect the live run.
        if os.getenv("REQUIRE_ONEBUSAWAY"):
            pytest.fail(msg, pytrace=False)

        pytest.skip(f"{msg}; skipping integration tests")
    return cfg
