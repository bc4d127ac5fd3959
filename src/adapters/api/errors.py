from __future__ import annotations

from typing import Mapping

from fastapi.responses import JSONResponse

from src.domain.exceptions import (
    AgencyNotFound,
    AggregateFailure,
    FleetError,
    UpstreamError,
)


def status_for(exc: FleetError) -> int:
    if isinstance(exc, AgencyNotFound):
        return 404
    if isinstance(exc, (AggregateFailure, UpstreamError)):
        return 502
    # ConfigMissing and anything else is a server-side problem.
    return 500


def error_response(
    exc: FleetError, *, error: str, headers: Mapping[str, str] | None = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_for(exc),
        content={"error": error, "message": str(exc) or exc.__class__.__name__},
        headers=dict(headers or {}),
    )
