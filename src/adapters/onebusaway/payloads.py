from __future__ import annotations

import logging
from typing import Any, Mapping

from src.domain.exceptions import UpstreamMalformed, UpstreamUnavailable
from src.domain.models import (
    Agency,
    AgencyCoverage,
    AgencyDirectoryListing,
    AgencyRoster,
    AggregatedFeed,
    GeoPoint,
    TripStatus,
    VehicleRecord,
)

logger = logging.getLogger(__name__)

# Parsers for OneBusAway "where" API responses. Shape violations raise
# ValueError/TypeError internally and leave as UpstreamMalformed.


def _mapping(value: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValueError(f"{what} is not an object")
    return value


def _list(value: Any, what: str) -> list[Any]:
    if not isinstance(value, list):
        raise ValueError(f"{what} is not a list")
    return value


def _opt_str(raw: Mapping[str, Any], key: str) -> str | None:
    value = raw.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{key} is not a string")
    return value or None


def _req_str(raw: Mapping[str, Any], key: str) -> str:
    value = _opt_str(raw, key)
    if value is None:
        raise ValueError(f"Missing {key}")
    return value


def _opt_int(raw: Mapping[str, Any], key: str) -> int | None:
    value = raw.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key} is not a number")
    return int(value)


def _opt_float(raw: Mapping[str, Any], key: str) -> float | None:
    value = raw.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key} is not a number")
    return float(value)


def _opt_bool(raw: Mapping[str, Any], key: str) -> bool | None:
    value = raw.get(key)
    if value is None:
        return None
    if not isinstance(value, bool):
        raise ValueError(f"{key} is not a boolean")
    return value


def check_envelope(payload: Any, *, what: str) -> Mapping[str, Any]:
    """Validate the `{code, data, ...}` envelope and return `data`."""

    if not isinstance(payload, Mapping):
        raise UpstreamMalformed(f"{what}: response is not a JSON object")

    code = payload.get("code")
    if code != 200:
        raise UpstreamUnavailable(
            f"{what}: upstream code {code} ({payload.get('text') or 'no text'})",
            status_code=code if isinstance(code, int) else None,
        )

    data = payload.get("data")
    if not isinstance(data, Mapping):
        raise UpstreamMalformed(f"{what}: missing data object")
    return data


def parse_agency(raw: Any) -> Agency:
    raw = _mapping(raw, "agency")
    return Agency(
        id=_req_str(raw, "id"),
        name=_req_str(raw, "name"),
        phone=_opt_str(raw, "phone"),
        email=_opt_str(raw, "email"),
        url=_opt_str(raw, "url"),
        fare_url=_opt_str(raw, "fareUrl"),
        timezone=_opt_str(raw, "timezone"),
        disclaimer=_opt_str(raw, "disclaimer"),
        lang=_opt_str(raw, "lang"),
        private_service=bool(_opt_bool(raw, "privateService")),
    )


def parse_coverage(raw: Any) -> AgencyCoverage:
    raw = _mapping(raw, "coverage entry")
    return AgencyCoverage(
        agency_id=_req_str(raw, "agencyId"),
        lat=_opt_float(raw, "lat"),
        lon=_opt_float(raw, "lon"),
        lat_span=_opt_float(raw, "latSpan"),
        lon_span=_opt_float(raw, "lonSpan"),
    )


def parse_location(raw: Any) -> GeoPoint | None:
    if raw is None:
        return None
    raw = _mapping(raw, "location")
    lat = _opt_float(raw, "lat")
    lon = _opt_float(raw, "lon")
    if lat is None or lon is None:
        return None
    try:
        return GeoPoint(lat=lat, lon=lon)
    except ValueError:
        # Out-of-range fix: the vehicle stays, unplaced.
        logger.debug("Ignoring invalid location lat=%s lon=%s", lat, lon)
        return None


def parse_trip_status(raw: Any) -> TripStatus | None:
    if raw is None:
        return None
    raw = _mapping(raw, "tripStatus")

    situation_ids = raw.get("situationIds") or []
    situations = tuple(
        str(s) for s in _list(situation_ids, "situationIds") if s is not None
    )

    return TripStatus(
        active_trip_id=_opt_str(raw, "activeTripId"),
        next_stop=_opt_str(raw, "nextStop"),
        closest_stop=_opt_str(raw, "closestStop"),
        orientation=_opt_float(raw, "orientation"),
        schedule_deviation=_opt_int(raw, "scheduleDeviation"),
        distance_along_trip=_opt_float(raw, "distanceAlongTrip"),
        total_distance_along_trip=_opt_float(raw, "totalDistanceAlongTrip"),
        occupancy_count=_opt_int(raw, "occupancyCount"),
        occupancy_capacity=_opt_int(raw, "occupancyCapacity"),
        occupancy_status=_opt_str(raw, "occupancyStatus"),
        situation_ids=situations,
        phase=_opt_str(raw, "phase"),
        status=_opt_str(raw, "status"),
        predicted=_opt_bool(raw, "predicted"),
        service_date=_opt_int(raw, "serviceDate"),
    )


def parse_vehicle(raw: Any) -> VehicleRecord:
    raw = _mapping(raw, "vehicle")

    agency = None
    if raw.get("agencyInfo") is not None:
        agency = parse_agency(raw["agencyInfo"])

    return VehicleRecord(
        vehicle_id=_req_str(raw, "vehicleId"),
        agency_id=_opt_str(raw, "agencyId"),
        location=parse_location(raw.get("location")),
        last_location_update_time=_opt_int(raw, "lastLocationUpdateTime") or 0,
        last_update_time=_opt_int(raw, "lastUpdateTime") or 0,
        status=_opt_str(raw, "status") or "",
        phase=_opt_str(raw, "phase") or "",
        trip_id=_opt_str(raw, "tripId"),
        occupancy_count=_opt_int(raw, "occupancyCount"),
        occupancy_capacity=_opt_int(raw, "occupancyCapacity"),
        occupancy_status=_opt_str(raw, "occupancyStatus"),
        trip_status=parse_trip_status(raw.get("tripStatus")),
        agency=agency,
    )


def parse_directory(payload: Any) -> AgencyDirectoryListing:
    data = check_envelope(payload, what="agencies-with-coverage")
    try:
        coverage = tuple(parse_coverage(c) for c in _list(data.get("list"), "list"))
        refs = _mapping(data.get("references") or {}, "references")
        agencies = tuple(
            parse_agency(a) for a in _list(refs.get("agencies") or [], "agencies")
        )
        current_time = _opt_int(payload, "currentTime")
    except (ValueError, TypeError) as exc:
        raise UpstreamMalformed(f"agencies-with-coverage: {exc}") from exc

    return AgencyDirectoryListing(
        coverage=coverage, agencies=agencies, current_time=current_time
    )


def parse_agency_entry(payload: Any, *, agency_id: str) -> Agency:
    data = check_envelope(payload, what=f"agency {agency_id}")
    try:
        return parse_agency(data.get("entry"))
    except (ValueError, TypeError) as exc:
        raise UpstreamMalformed(f"agency {agency_id}: {exc}") from exc


def parse_roster(payload: Any, *, agency_id: str) -> AgencyRoster:
    what = f"vehicles-for-agency {agency_id}"
    data = check_envelope(payload, what=what)
    try:
        vehicles = tuple(parse_vehicle(v) for v in _list(data.get("list"), "list"))
        current_time = _opt_int(payload, "currentTime") or 0
        limit_exceeded = bool(_opt_bool(data, "limitExceeded"))
    except (ValueError, TypeError) as exc:
        raise UpstreamMalformed(f"{what}: {exc}") from exc

    return AgencyRoster(
        agency_id=agency_id,
        current_time=current_time,
        vehicles=vehicles,
        limit_exceeded=limit_exceeded,
    )


def parse_aggregated_feed(payload: Any) -> AggregatedFeed:
    """Parse the unified feed served by this service's `/api/vehicles`."""

    data = check_envelope(payload, what="vehicle feed")
    try:
        vehicles = tuple(parse_vehicle(v) for v in _list(data.get("list"), "list"))
        current_time = _opt_int(payload, "currentTime") or 0
        limit_exceeded = bool(_opt_bool(data, "limitExceeded"))
    except (ValueError, TypeError) as exc:
        raise UpstreamMalformed(f"vehicle feed: {exc}") from exc

    return AggregatedFeed(
        current_time=current_time,
        vehicles=vehicles,
        limit_exceeded=limit_exceeded,
    )
