from .agency_directory import IAgencyDirectory
from .vehicle_feed_source import IVehicleFeedSource
from .vehicle_roster_provider import IVehicleRosterProvider

__all__ = [
    "IAgencyDirectory",
    "IVehicleFeedSource",
    "IVehicleRosterProvider",
]
