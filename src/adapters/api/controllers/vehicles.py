from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, Response

from src.adapters.api.dependencies import get_fleet_feed_service
from src.adapters.api.errors import error_response
from src.adapters.api.schemas.vehicles import (
    AgencySchema,
    LocationSchema,
    TripStatusSchema,
    VehicleFeedSchema,
    VehicleListSchema,
    VehicleSchema,
)
from src.app.services.fleet_feed_service import FleetFeedService
from src.domain.exceptions import FleetError
from src.domain.models import Agency, AggregatedFeed, TripStatus, VehicleRecord

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["vehicles"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET",
    "Access-Control-Allow-Headers": "Content-Type",
}


def agency_to_schema(agency: Agency) -> AgencySchema:
    return AgencySchema(
        id=agency.id,
        name=agency.name,
        phone=agency.phone,
        email=agency.email,
        url=agency.url,
        fare_url=agency.fare_url,
        timezone=agency.timezone,
        disclaimer=agency.disclaimer,
        lang=agency.lang,
        private_service=agency.private_service,
    )


def _trip_status_to_schema(ts: TripStatus) -> TripStatusSchema:
    return TripStatusSchema(
        active_trip_id=ts.active_trip_id,
        next_stop=ts.next_stop,
        closest_stop=ts.closest_stop,
        orientation=ts.orientation,
        schedule_deviation=ts.schedule_deviation,
        distance_along_trip=ts.distance_along_trip,
        total_distance_along_trip=ts.total_distance_along_trip,
        occupancy_count=ts.occupancy_count,
        occupancy_capacity=ts.occupancy_capacity,
        occupancy_status=ts.occupancy_status,
        situation_ids=list(ts.situation_ids),
        phase=ts.phase,
        status=ts.status,
        predicted=ts.predicted,
        service_date=ts.service_date,
    )


def _vehicle_to_schema(v: VehicleRecord) -> VehicleSchema:
    return VehicleSchema(
        vehicle_id=v.vehicle_id,
        agency_id=v.agency_id,
        location=(
            LocationSchema(lat=v.location.lat, lon=v.location.lon)
            if v.location
            else None
        ),
        last_location_update_time=v.last_location_update_time,
        last_update_time=v.last_update_time,
        status=v.status,
        phase=v.phase,
        trip_id=v.trip_id,
        occupancy_count=v.occupancy_count,
        occupancy_capacity=v.occupancy_capacity,
        occupancy_status=v.occupancy_status,
        trip_status=_trip_status_to_schema(v.trip_status) if v.trip_status else None,
        agency_info=agency_to_schema(v.agency) if v.agency else None,
    )


def feed_to_schema(feed: AggregatedFeed) -> VehicleFeedSchema:
    return VehicleFeedSchema(
        code=feed.code,
        current_time=feed.current_time,
        data=VehicleListSchema(
            limit_exceeded=feed.limit_exceeded,
            vehicles=[_vehicle_to_schema(v) for v in feed.vehicles],
        ),
    )


@router.get("/vehicles", response_model=VehicleFeedSchema)
async def list_vehicles(
    service: FleetFeedService = Depends(get_fleet_feed_service),
) -> Response:
    try:
        feed = await service.current_feed()
    except FleetError as exc:
        logger.error("Error fetching vehicle data: %s", exc)
        return error_response(
            exc, error="Failed to fetch vehicle data", headers=CORS_HEADERS
        )

    body = feed_to_schema(feed)
    return JSONResponse(
        content=body.model_dump(mode="json", by_alias=True, exclude_none=True),
        headers=CORS_HEADERS,
    )


@router.options("/vehicles")
def vehicles_preflight() -> Response:
    return Response(status_code=200, headers=CORS_HEADERS)
