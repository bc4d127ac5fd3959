from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from enum import Enum
from typing import Iterable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from src.domain.algorithms.classification import MODE_LABELS, MODE_SYMBOLS, classify
from src.domain.algorithms.geo_utils import bounding_box
from src.domain.models import VehicleMode, VehicleRecord

UNKNOWN_TIME = "Unknown"
MAJOR_DEVIATION_S = 300


class ScheduleKind(str, Enum):
    ON_TIME = "OnTime"
    EARLY = "Early"
    LATE = "Late"


@dataclass(frozen=True, slots=True)
class ScheduleStatus:
    kind: ScheduleKind
    seconds: int = 0

    @property
    def label(self) -> str:
        if self.kind is ScheduleKind.ON_TIME:
            return "On time"
        return f"{self.seconds}s {self.kind.value.lower()}"

    @property
    def severity(self) -> str:
        if self.kind is ScheduleKind.ON_TIME:
            return "on_time"
        return "major" if self.seconds > MAJOR_DEVIATION_S else "minor"


@dataclass(frozen=True, slots=True)
class VehicleSummary:
    """Display-ready fields for a vehicle marker and its popup."""

    vehicle_id: str
    short_id: str
    mode: VehicleMode
    mode_label: str
    symbol: str
    color: str
    agency_id: str | None
    agency_name: str
    agency_phone: str | None
    status: str
    phase_label: str
    updated_at: str
    schedule: ScheduleStatus | None = None
    next_stop: str | None = None
    closest_stop: str | None = None
    heading: int | None = None
    occupancy: str | None = None
    occupancy_percent: int | None = None
    active_trip_id: str | None = None
    distance_along_trip: str | None = None
    total_distance_along_trip: str | None = None
    alerts: tuple[str, ...] = ()
    lat: str | None = None
    lon: str | None = None


def _zone(name: str | None) -> tzinfo:
    if not name:
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return timezone.utc


def format_update_time(timestamp_ms: int, tz: str | None = None) -> str:
    if timestamp_ms == 0:
        return UNKNOWN_TIME
    dt = datetime.fromtimestamp(timestamp_ms / 1000.0, tz=_zone(tz))
    return dt.strftime("%H:%M:%S")


def schedule_status(deviation: int | None) -> ScheduleStatus:
    if deviation is None or deviation == 0:
        return ScheduleStatus(kind=ScheduleKind.ON_TIME)
    kind = ScheduleKind.LATE if deviation > 0 else ScheduleKind.EARLY
    return ScheduleStatus(kind=kind, seconds=abs(int(deviation)))


def format_schedule_deviation(deviation: int | None) -> str:
    return schedule_status(deviation).label


def format_distance(meters: float | None) -> str:
    if meters is None or meters == 0:
        return "N/A"
    if meters < 1000:
        return f"{round(meters)}m"
    return f"{meters / 1000:.1f}km"


def occupancy_percent(count: int | None, capacity: int | None) -> int | None:
    if count is None or capacity is None or capacity <= 0:
        return None
    return round(count / capacity * 100)


def short_vehicle_id(vehicle_id: str) -> str:
    return vehicle_id.split("_")[-1]


def summarize(vehicle: VehicleRecord) -> VehicleSummary:
    vclass = classify(vehicle)
    agency = vehicle.agency
    trip = vehicle.trip_status

    count = capacity = None
    if trip is not None and trip.occupancy_capacity is not None:
        count, capacity = trip.occupancy_count, trip.occupancy_capacity
    elif vehicle.occupancy_capacity is not None:
        count, capacity = vehicle.occupancy_count, vehicle.occupancy_capacity
    percent = occupancy_percent(count, capacity)

    lat = lon = None
    if vehicle.location is not None:
        lat, lon = vehicle.location.formatted()

    return VehicleSummary(
        vehicle_id=vehicle.vehicle_id,
        short_id=short_vehicle_id(vehicle.vehicle_id),
        mode=vclass.mode,
        mode_label=MODE_LABELS[vclass.mode],
        symbol=MODE_SYMBOLS[vclass.mode],
        color=vclass.color,
        agency_id=vehicle.agency_id or (agency.id if agency else None),
        agency_name=agency.name if agency else "Unknown Agency",
        agency_phone=agency.phone if agency else None,
        status=vehicle.status,
        phase_label=vehicle.phase.replace("_", " ", 1),
        updated_at=format_update_time(
            vehicle.last_location_update_time, agency.timezone if agency else None
        ),
        schedule=(
            schedule_status(trip.schedule_deviation)
            if trip is not None and trip.schedule_deviation is not None
            else None
        ),
        next_stop=trip.next_stop if trip else None,
        closest_stop=trip.closest_stop if trip else None,
        heading=(
            round(trip.orientation)
            if trip is not None and trip.orientation is not None
            else None
        ),
        occupancy=f"{count}/{capacity}" if percent is not None else None,
        occupancy_percent=percent,
        active_trip_id=trip.active_trip_id if trip else None,
        distance_along_trip=(
            format_distance(trip.distance_along_trip)
            if trip is not None and trip.distance_along_trip is not None
            else None
        ),
        total_distance_along_trip=(
            format_distance(trip.total_distance_along_trip)
            if trip is not None and trip.total_distance_along_trip is not None
            else None
        ),
        alerts=trip.situation_ids if trip else (),
        lat=lat,
        lon=lon,
    )


def vehicle_bounds(
    vehicles: Iterable[VehicleRecord],
) -> tuple[float, float, float, float] | None:
    """Box for fitting the map to the vehicles that have a location."""

    return bounding_box(v.location for v in vehicles if v.location is not None)
