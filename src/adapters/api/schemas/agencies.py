from __future__ import annotations

from pydantic import Field

from .vehicles import AgencySchema, CamelModel


class CoverageSchema(CamelModel):
    agency_id: str
    lat: float | None = None
    lon: float | None = None
    lat_span: float | None = None
    lon_span: float | None = None


class AgencyReferencesSchema(CamelModel):
    agencies: list[AgencySchema] = []


class AgencyListSchema(CamelModel):
    coverage: list[CoverageSchema] = Field(default_factory=list, alias="list")
    references: AgencyReferencesSchema


class AgencyDirectorySchema(CamelModel):
    code: int = 200
    current_time: int | None = None
    data: AgencyListSchema


class AgencyEntrySchema(CamelModel):
    agency: AgencySchema
