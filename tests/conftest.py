from __future__ import annotations

import pytest


@pytest.fixture
def anyio_backend() -> str:
    # The services are built on asyncio primitives; run async tests on asyncio only.
    return "asyncio"
