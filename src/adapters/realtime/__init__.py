from .http_vehicle_feed_source import HttpVehicleFeedSource

__all__ = ["HttpVehicleFeedSource"]
