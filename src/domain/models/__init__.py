from .agency import Agency, AgencyCoverage, AgencyDirectoryListing
from .geo import GeoPoint
from .vehicle import (
    AgencyRoster,
    AggregatedFeed,
    RosterDiagnostic,
    TripStatus,
    VehicleClass,
    VehicleMode,
    VehicleRecord,
)

__all__ = [
    "Agency",
    "AgencyCoverage",
    "AgencyDirectoryListing",
    "AgencyRoster",
    "AggregatedFeed",
    "GeoPoint",
    "RosterDiagnostic",
    "TripStatus",
    "VehicleClass",
    "VehicleMode",
    "VehicleRecord",
]
