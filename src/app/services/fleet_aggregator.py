from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field, replace
from typing import Callable, Sequence

from src.app.ports.output import IVehicleRosterProvider
from src.domain.exceptions import UpstreamError, UpstreamUnavailable
from src.domain.models import (
    Agency,
    AgencyCoverage,
    AgencyRoster,
    AggregatedFeed,
    RosterDiagnostic,
    VehicleRecord,
)

logger = logging.getLogger(__name__)


def _wall_clock_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True, slots=True)
class RosterOutcome:
    """Result slot of one operator in the fan-out: a roster or an error."""

    agency_id: str
    roster: AgencyRoster | None = None
    error: UpstreamError | None = None


@dataclass(slots=True)
class FleetAggregator:
    """Fans out one roster request per operator and merges the results.

    - Requests run concurrently, one task per operator, no cap.
    - An operator failure contributes zero vehicles and a diagnostic.
    - The join waits for every operator (each bounded by `operator_timeout_s`).
    """

    roster_provider: IVehicleRosterProvider
    operator_timeout_s: float = 15.0
    clock: Callable[[], int] = field(default=_wall_clock_ms)

    async def aggregate(
        self,
        agencies: Sequence[Agency],
        *,
        coverage: Sequence[AgencyCoverage] | None = None,
    ) -> AggregatedFeed:
        lookup = {a.id: a for a in agencies}
        source_ids = (
            [c.agency_id for c in coverage]
            if coverage is not None
            else [a.id for a in agencies]
        )
        targets = list(dict.fromkeys(source_ids))

        outcomes = await asyncio.gather(*(self._fetch_one(aid) for aid in targets))

        vehicles: list[VehicleRecord] = []
        seen: set[str] = set()
        diagnostics: list[RosterDiagnostic] = []
        times: list[int] = []

        for outcome in outcomes:
            if outcome.error is not None:
                diagnostics.append(
                    RosterDiagnostic(
                        agency_id=outcome.agency_id,
                        error_kind=type(outcome.error).__name__,
                        message=str(outcome.error),
                    )
                )
                continue

            roster = outcome.roster
            if roster is None:
                continue
            if roster.current_time > 0:
                times.append(roster.current_time)
            if roster.limit_exceeded:
                logger.debug("Roster for agency %s was truncated", outcome.agency_id)

            agency = lookup.get(outcome.agency_id)
            for v in roster.vehicles:
                if v.vehicle_id in seen:
                    logger.warning(
                        "Duplicate vehicle %s from agency %s dropped",
                        v.vehicle_id,
                        outcome.agency_id,
                    )
                    continue
                seen.add(v.vehicle_id)
                vehicles.append(replace(v, agency_id=outcome.agency_id, agency=agency))

        current_time = max(times) if times else self.clock()

        logger.info(
            "Aggregated %d vehicles from %d/%d agencies",
            len(vehicles),
            len(targets) - len(diagnostics),
            len(targets),
        )

        # Aggregate-level truncation is not surfaced; see DESIGN.md.
        return AggregatedFeed(
            current_time=current_time,
            vehicles=tuple(vehicles),
            limit_exceeded=False,
            diagnostics=tuple(diagnostics),
        )

    async def _fetch_one(self, agency_id: str) -> RosterOutcome:
        try:
            roster = await asyncio.wait_for(
                self.roster_provider.fetch_roster(agency_id),
                timeout=self.operator_timeout_s,
            )
        except asyncio.TimeoutError:
            error: UpstreamError = UpstreamUnavailable(
                f"Roster request for agency {agency_id} timed out"
            )
        except UpstreamError as exc:
            error = exc
        else:
            return RosterOutcome(agency_id=agency_id, roster=roster)

        logger.warning("Failed to fetch vehicles for agency %s: %s", agency_id, error)
        return RosterOutcome(agency_id=agency_id, error=error)
