from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, Response

from src.adapters.api.controllers.vehicles import agency_to_schema
from src.adapters.api.dependencies import get_fleet_feed_service
from src.adapters.api.errors import error_response
from src.adapters.api.schemas.agencies import (
    AgencyDirectorySchema,
    AgencyEntrySchema,
    AgencyListSchema,
    AgencyReferencesSchema,
    CoverageSchema,
)
from src.app.services.fleet_feed_service import FleetFeedService
from src.domain.exceptions import FleetError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["agencies"])


def _dump(model) -> dict:
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


@router.get("/agencies", response_model=AgencyDirectorySchema)
async def list_agencies(
    service: FleetFeedService = Depends(get_fleet_feed_service),
) -> Response:
    try:
        listing = await service.agency_listing()
    except FleetError as exc:
        logger.error("Error fetching agencies: %s", exc)
        return error_response(exc, error="Failed to fetch agencies")

    body = AgencyDirectorySchema(
        current_time=listing.current_time,
        data=AgencyListSchema(
            coverage=[
                CoverageSchema(
                    agency_id=c.agency_id,
                    lat=c.lat,
                    lon=c.lon,
                    lat_span=c.lat_span,
                    lon_span=c.lon_span,
                )
                for c in listing.coverage
            ],
            references=AgencyReferencesSchema(
                agencies=[agency_to_schema(a) for a in listing.agencies]
            ),
        ),
    )
    return JSONResponse(content=_dump(body))


@router.get("/agency", response_model=AgencyEntrySchema)
async def get_agency(
    agency_id: str | None = Query(default=None, alias="id"),
    service: FleetFeedService = Depends(get_fleet_feed_service),
) -> Response:
    if not agency_id:
        return JSONResponse(
            status_code=400,
            content={"error": "Agency ID is required. Use ?id=AGENCY_ID parameter."},
        )

    try:
        agency = await service.agency(agency_id)
    except FleetError as exc:
        logger.error("Error fetching agency %s: %s", agency_id, exc)
        return error_response(exc, error="Failed to fetch agency data")

    entry = AgencyEntrySchema(agency=agency_to_schema(agency))
    return JSONResponse(content=_dump(entry))
