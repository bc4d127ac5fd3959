from __future__ import annotations

import logging
import os

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.adapters.api.controllers.agencies import router as agencies_router
from src.adapters.api.controllers.vehicles import router as vehicles_router
from src.adapters.api.errors import error_response
from src.domain.exceptions import FleetError

app = FastAPI(title="Fleet View")
app.include_router(vehicles_router)
app.include_router(agencies_router)


@app.exception_handler(FleetError)
async def fleet_error_handler(request: Request, exc: FleetError) -> JSONResponse:
    logging.getLogger("uvicorn.error").warning(
        "Fleet error: %s", exc, extra={"path": str(request.url.path)}
    )
    return error_response(exc, error=exc.__class__.__name__)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Ensure API errors are JSON so map clients can display them.

    Starlette's default 500 handler may return plain text/HTML.
    """

    logging.getLogger("uvicorn.error").exception(
        "Unhandled exception", extra={"path": str(request.url.path)}
    )

    reveal = (os.getenv("FLEET_REVEAL_ERRORS") or "").strip().lower() in {
        "1",
        "true",
        "yes",
        "on",
    }

    if reveal:
        message = str(exc) or exc.__class__.__name__
    else:
        message = "Internal Server Error"

    return JSONResponse(
        status_code=500, content={"error": "Internal server error", "message": message}
    )


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
