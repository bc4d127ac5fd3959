from __future__ import annotations

from typing import Any

import httpx

from src.domain.exceptions import UpstreamMalformed, UpstreamUnavailable


async def get_json(
    client: httpx.AsyncClient,
    url: str,
    *,
    what: str,
    params: dict[str, str] | None = None,
) -> Any:
    """GET a JSON document, mapping transport and decode failures to domain errors.

    Messages never include the request URL, which carries the API key.
    """

    try:
        resp = await client.get(url, params=params)
    except httpx.TimeoutException as exc:
        raise UpstreamUnavailable(f"{what}: request timed out") from exc
    except httpx.HTTPError as exc:
        raise UpstreamUnavailable(f"{what}: {type(exc).__name__}") from exc

    if not resp.is_success:
        raise UpstreamUnavailable(
            f"{what}: HTTP {resp.status_code}", status_code=resp.status_code
        )

    try:
        return resp.json()
    except ValueError as exc:
        raise UpstreamMalformed(f"{what}: response is not valid JSON") from exc
