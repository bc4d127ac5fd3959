from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Agency:
    """Transit operator metadata (OneBusAway `references.agencies` entry)."""

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


@dataclass(frozen=True, slots=True)
class AgencyCoverage:
    """One operator of the coverage list, with its service-area box."""

    agency_id: str
    lat: float | None = None
    lon: float | None = None
    lat_span: float | None = None
    lon_span: float | None = None


@dataclass(frozen=True, slots=True)
class AgencyDirectoryListing:
    coverage: tuple[AgencyCoverage, ...] = ()
    agencies: tuple[Agency, ...] = field(default_factory=tuple)
    current_time: int | None = None

    @property
    def agency_ids(self) -> tuple[str, ...]:
        return tuple(c.agency_id for c in self.coverage)

    def lookup(self) -> dict[str, Agency]:
        return {a.id: a for a in self.agencies}

    def ordered_agencies(self) -> tuple[Agency, ...]:
        """Agencies in coverage order; coverage ids without metadata are skipped."""

        by_id = self.lookup()
        return tuple(by_id[i] for i in self.agency_ids if i in by_id)
