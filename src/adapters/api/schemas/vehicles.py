from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LocationSchema(CamelModel):
    lat: float
    lon: float


class AgencySchema(CamelModel):
    id: str
    name: str
    phone: str | None = None
    email: str | None = None
    url: str | None = None
    fare_url: str | None = None
    timezone: str | None = None
    disclaimer: str | None = None
    lang: str | None = None
    private_service: bool = False


class TripStatusSchema(CamelModel):
    active_trip_id: str | None = None
    next_stop: str | None = None
    closest_stop: str | None = None
    orientation: float | None = None
    schedule_deviation: int | None = None
    distance_along_trip: float | None = None
    total_distance_along_trip: float | None = None
    occupancy_count: int | None = None
    occupancy_capacity: int | None = None
    occupancy_status: str | None = None
    situation_ids: list[str] = []
    phase: str | None = None
    status: str | None = None
    predicted: bool | None = None
    service_date: int | None = None


class VehicleSchema(CamelModel):
    vehicle_id: str
    agency_id: str | None = None
    location: LocationSchema | None = None
    last_location_update_time: int = 0
    last_update_time: int = 0
    status: str = ""
    phase: str = ""
    trip_id: str | None = None
    occupancy_count: int | None = None
    occupancy_capacity: int | None = None
    occupancy_status: str | None = None
    trip_status: TripStatusSchema | None = None
    agency_info: AgencySchema | None = None


class VehicleListSchema(CamelModel):
    limit_exceeded: bool = False
    vehicles: list[VehicleSchema] = Field(default_factory=list, alias="list")


class VehicleFeedSchema(CamelModel):
    code: int = 200
    current_time: int
    data: VehicleListSchema
    text: str = "OK"
    version: int = 2
