from .config import OneBusAwayConfig
from .http_agency_directory import HttpAgencyDirectory
from .http_vehicle_roster_provider import HttpVehicleRosterProvider

__all__ = [
    "HttpAgencyDirectory",
    "HttpVehicleRosterProvider",
    "OneBusAwayConfig",
]
