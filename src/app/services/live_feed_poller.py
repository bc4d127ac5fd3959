from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from src.app.ports.output import IVehicleFeedSource
from src.domain.exceptions import FleetError
from src.domain.models import AggregatedFeed, VehicleRecord

logger = logging.getLogger(__name__)


class PollerState(str, Enum):
    IDLE = "idle"
    POLLING = "polling"


@dataclass(frozen=True, slots=True)
class FeedSnapshot:
    sequence: int
    current_time: int
    vehicles: tuple[VehicleRecord, ...]
    received_at: float


@dataclass(frozen=True, slots=True)
class PollerUpdate:
    snapshot: FeedSnapshot | None
    error: str | None = None


Listener = Callable[[PollerUpdate], None]


def is_renderable(vehicle: VehicleRecord) -> bool:
    """A vehicle is shown only with a full location and a real fix time."""

    loc = vehicle.location
    if loc is None or loc.lat is None or loc.lon is None:
        return False
    return vehicle.last_location_update_time > 0


def renderable_vehicles(feed: AggregatedFeed) -> tuple[VehicleRecord, ...]:
    return tuple(v for v in feed.vehicles if is_renderable(v))


@dataclass(slots=True)
class LiveFeedPoller:
    """Periodically pulls the aggregated feed and keeps the latest snapshot.

    - Every tick runs as its own task; a slow tick may overlap the next one.
    - Ticks are numbered; a result older than the last applied one is dropped.
    - A failed tick keeps the previous snapshot and sets `error`.
    - `stop()` cancels the timer only; late results are discarded.
    """

    feed_source: IVehicleFeedSource
    interval_s: float = 15.0

    _state: PollerState = field(default=PollerState.IDLE, init=False)
    _snapshot: FeedSnapshot | None = field(default=None, init=False)
    _error: str | None = field(default=None, init=False)
    _issued_seq: int = field(default=0, init=False)
    _applied_seq: int = field(default=0, init=False)
    _timer: asyncio.Task | None = field(default=None, init=False, repr=False)
    _inflight: set[asyncio.Task] = field(default_factory=set, init=False, repr=False)
    _listeners: list[Listener] = field(default_factory=list, init=False, repr=False)

    @property
    def state(self) -> PollerState:
        return self._state

    @property
    def snapshot(self) -> FeedSnapshot | None:
        return self._snapshot

    @property
    def vehicles(self) -> tuple[VehicleRecord, ...]:
        return self._snapshot.vehicles if self._snapshot else ()

    @property
    def error(self) -> str | None:
        return self._error

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def start(self) -> None:
        if self._state is PollerState.POLLING:
            logger.warning("Live feed poller already running")
            return

        self._state = PollerState.POLLING
        self._spawn_tick()
        self._timer = asyncio.create_task(self._run_timer())
        logger.info("Live feed poller started (every %.1fs)", self.interval_s)

    async def stop(self) -> None:
        if self._state is PollerState.IDLE:
            return

        self._state = PollerState.IDLE
        # Ticks still in flight belong to this run and must never apply.
        self._applied_seq = self._issued_seq
        timer, self._timer = self._timer, None
        if timer is not None and not timer.done():
            timer.cancel()
            try:
                await timer
            except asyncio.CancelledError:
                pass
        logger.info("Live feed poller stopped")

    async def refresh(self) -> None:
        """Issue one tick now, outside the regular schedule, and wait for it."""

        if self._state is not PollerState.POLLING:
            return
        await self._spawn_tick()

    async def settle(self) -> None:
        """Wait for every tick that is currently in flight."""

        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    async def _run_timer(self) -> None:
        while True:
            await asyncio.sleep(self.interval_s)
            self._spawn_tick()

    def _spawn_tick(self) -> asyncio.Task:
        self._issued_seq += 1
        task = asyncio.create_task(self._tick(self._issued_seq))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return task

    def _accepts(self, seq: int) -> bool:
        if self._state is not PollerState.POLLING:
            logger.debug("Discarding tick %d: poller stopped", seq)
            return False
        if seq <= self._applied_seq:
            logger.debug(
                "Discarding tick %d: tick %d already applied", seq, self._applied_seq
            )
            return False
        return True

    async def _tick(self, seq: int) -> None:
        try:
            feed = await self.feed_source.fetch_feed()
        except FleetError as exc:
            self._fail(seq, exc)
            return
        except Exception as exc:
            self._fail(seq, exc, unexpected=True)
            return

        if not self._accepts(seq):
            return
        self._applied_seq = seq
        self._snapshot = FeedSnapshot(
            sequence=seq,
            current_time=feed.current_time,
            vehicles=renderable_vehicles(feed),
            received_at=time.monotonic(),
        )
        self._error = None
        self._publish()

    def _fail(self, seq: int, exc: Exception, *, unexpected: bool = False) -> None:
        if not self._accepts(seq):
            return
        self._applied_seq = seq
        self._error = str(exc) or type(exc).__name__
        if unexpected:
            logger.exception("Unexpected error fetching vehicles: %s", self._error)
        else:
            logger.warning("Error fetching vehicles: %s", self._error)
        self._publish()

    def _publish(self) -> None:
        update = PollerUpdate(snapshot=self._snapshot, error=self._error)
        for listener in list(self._listeners):
            try:
                listener(update)
            except Exception:
                logger.exception("Live feed listener failed")
