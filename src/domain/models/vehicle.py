from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .agency import Agency
from .geo import GeoPoint


class VehicleMode(str, Enum):
    LIGHT_RAIL = "LightRail"
    FERRY = "Ferry"
    MONORAIL = "Monorail"
    TRAIN = "Train"
    BUS = "Bus"
    UNKNOWN = "Unknown"


@dataclass(frozen=True, slots=True)
class VehicleClass:
    mode: VehicleMode
    color: str  # hex with '#'


@dataclass(frozen=True, slots=True)
class TripStatus:
    """Subset of the OneBusAway TripStatus attached to a vehicle."""

    active_trip_id: str | None = None
    next_stop: str | None = None
    closest_stop: str | None = None
    orientation: float | None = None  # degrees, 0-360
    schedule_deviation: int | None = None  # seconds, >0 late
    distance_along_trip: float | None = None
    total_distance_along_trip: float | None = None
    occupancy_count: int | None = None
    occupancy_capacity: int | None = None
    occupancy_status: str | None = None
    situation_ids: tuple[str, ...] = ()
    phase: str | None = None
    status: str | None = None
    predicted: bool | None = None
    service_date: int | None = None


@dataclass(frozen=True, slots=True)
class VehicleRecord:
    vehicle_id: str
    agency_id: str | None = None
    location: GeoPoint | None = None
    last_location_update_time: int = 0  # epoch ms
    last_update_time: int = 0  # epoch ms
    status: str = ""
    phase: str = ""
    trip_id: str | None = None
    occupancy_count: int | None = None
    occupancy_capacity: int | None = None
    occupancy_status: str | None = None
    trip_status: TripStatus | None = None
    # Copy of the operator metadata at aggregation time, not a live link.
    agency: Agency | None = None


@dataclass(frozen=True, slots=True)
class AgencyRoster:
    """One operator's vehicles-for-agency response."""

    agency_id: str
    current_time: int
    vehicles: tuple[VehicleRecord, ...] = ()
    limit_exceeded: bool = False


@dataclass(frozen=True, slots=True)
class RosterDiagnostic:
    agency_id: str
    error_kind: str
    message: str


@dataclass(frozen=True, slots=True)
class AggregatedFeed:
    current_time: int
    vehicles: tuple[VehicleRecord, ...] = ()
    code: int = 200
    limit_exceeded: bool = False
    diagnostics: tuple[RosterDiagnostic, ...] = ()
