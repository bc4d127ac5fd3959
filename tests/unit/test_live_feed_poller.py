from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

import pytest

from src.app.services.live_feed_poller import (
    LiveFeedPoller,
    PollerState,
    PollerUpdate,
    is_renderable,
)
from src.domain.exceptions import UpstreamUnavailable
from src.domain.models import AggregatedFeed, GeoPoint, VehicleRecord


def _vehicle(
    vehicle_id: str, *, located: bool = True, fix_ms: int = 1000
) -> VehicleRecord:
    return VehicleRecord(
        vehicle_id=vehicle_id,
        agency_id="1",
        location=GeoPoint(lat=47.6, lon=-122.3) if located else None,
        last_location_update_time=fix_ms,
    )


def _feed(*vehicle_ids: str, current_time: int = 1000) -> AggregatedFeed:
    return AggregatedFeed(
        current_time=current_time,
        vehicles=tuple(_vehicle(v) for v in vehicle_ids),
    )


@dataclass(slots=True)
class ScriptedFeedSource:
    """Each fetch waits on a future the test resolves explicitly."""

    pending: list[asyncio.Future] = field(default_factory=list)

    async def fetch_feed(self) -> AggregatedFeed:
        fut: asyncio.Future = asyncio.get_running_loop().create_future()
        self.pending.append(fut)
        return await fut


@dataclass(slots=True)
class ImmediateFeedSource:
    feed: AggregatedFeed
    calls: int = 0

    async def fetch_feed(self) -> AggregatedFeed:
        self.calls += 1
        return self.feed


async def _until(predicate, attempts: int = 100) -> None:
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


@pytest.mark.unit
def test_is_renderable_filter() -> None:
    assert is_renderable(_vehicle("a"))
    assert not is_renderable(_vehicle("b", located=False))
    assert not is_renderable(_vehicle("c", fix_ms=0))
    assert not is_renderable(_vehicle("d", fix_ms=-1))


@pytest.mark.unit
@pytest.mark.anyio
async def test_start_issues_immediate_tick_and_filters() -> None:
    feed = AggregatedFeed(
        current_time=2000,
        vehicles=(
            _vehicle("ok"),
            _vehicle("stale", fix_ms=0),
            _vehicle("nowhere", located=False),
        ),
    )
    source = ImmediateFeedSource(feed=feed)
    poller = LiveFeedPoller(feed_source=source, interval_s=3600)
    updates: list[PollerUpdate] = []
    poller.subscribe(updates.append)

    assert poller.state is PollerState.IDLE
    await poller.start()
    assert poller.state is PollerState.POLLING
    await poller.settle()

    assert source.calls == 1
    assert [v.vehicle_id for v in poller.vehicles] == ["ok"]
    assert poller.snapshot is not None and poller.snapshot.current_time == 2000
    assert poller.error is None
    assert len(updates) == 1

    await poller.stop()
    assert poller.state is PollerState.IDLE


@pytest.mark.unit
@pytest.mark.anyio
async def test_timer_repeats_ticks() -> None:
    source = ImmediateFeedSource(feed=_feed("a"))
    poller = LiveFeedPoller(feed_source=source, interval_s=0.01)

    await poller.start()
    await asyncio.sleep(0.1)
    await poller.stop()

    assert source.calls >= 3


@pytest.mark.unit
@pytest.mark.anyio
async def test_snapshot_is_replaced_wholesale() -> None:
    source = ScriptedFeedSource()
    poller = LiveFeedPoller(feed_source=source, interval_s=3600)

    await poller.start()
    await _until(lambda: len(source.pending) == 1)
    source.pending[0].set_result(_feed("a", "b"))
    await poller.settle()

    refresh = asyncio.create_task(poller.refresh())
    await _until(lambda: len(source.pending) == 2)
    source.pending[1].set_result(_feed("c"))
    await refresh

    assert [v.vehicle_id for v in poller.vehicles] == ["c"]
    await poller.stop()


@pytest.mark.unit
@pytest.mark.anyio
async def test_failure_keeps_previous_snapshot_and_sets_error() -> None:
    source = ScriptedFeedSource()
    poller = LiveFeedPoller(feed_source=source, interval_s=3600)
    updates: list[PollerUpdate] = []
    poller.subscribe(updates.append)

    await poller.start()
    await _until(lambda: len(source.pending) == 1)
    source.pending[0].set_result(_feed("a", "b"))
    await poller.settle()

    refresh = asyncio.create_task(poller.refresh())
    await _until(lambda: len(source.pending) == 2)
    source.pending[1].set_exception(UpstreamUnavailable("HTTP 502"))
    await refresh

    assert [v.vehicle_id for v in poller.vehicles] == ["a", "b"]
    assert poller.error == "HTTP 502"
    assert updates[-1].error == "HTTP 502"
    assert updates[-1].snapshot is not None

    # The next good tick clears the error indicator.
    refresh = asyncio.create_task(poller.refresh())
    await _until(lambda: len(source.pending) == 3)
    source.pending[2].set_result(_feed("z"))
    await refresh

    assert poller.error is None
    assert [v.vehicle_id for v in poller.vehicles] == ["z"]
    await poller.stop()


@pytest.mark.unit
@pytest.mark.anyio
async def test_late_older_tick_is_discarded() -> None:
    source = ScriptedFeedSource()
    poller = LiveFeedPoller(feed_source=source, interval_s=3600)

    await poller.start()
    await _until(lambda: len(source.pending) == 1)
    refresh = asyncio.create_task(poller.refresh())
    await _until(lambda: len(source.pending) == 2)

    # Newer tick lands first, then the slow older one.
    source.pending[1].set_result(_feed("new", current_time=2000))
    await refresh
    source.pending[0].set_result(_feed("old", current_time=1000))
    await poller.settle()

    assert poller.snapshot is not None
    assert poller.snapshot.sequence == 2
    assert [v.vehicle_id for v in poller.vehicles] == ["new"]
    await poller.stop()


@pytest.mark.unit
@pytest.mark.anyio
async def test_result_after_stop_is_discarded() -> None:
    source = ScriptedFeedSource()
    poller = LiveFeedPoller(feed_source=source, interval_s=3600)
    updates: list[PollerUpdate] = []
    poller.subscribe(updates.append)

    await poller.start()
    await _until(lambda: len(source.pending) == 1)
    await poller.stop()

    # In-flight request is not aborted.
    assert not source.pending[0].cancelled()
    source.pending[0].set_result(_feed("a"))
    await poller.settle()

    assert poller.snapshot is None
    assert updates == []


@pytest.mark.unit
@pytest.mark.anyio
async def test_listener_errors_do_not_stop_updates() -> None:
    source = ImmediateFeedSource(feed=_feed("a"))
    poller = LiveFeedPoller(feed_source=source, interval_s=3600)
    seen: list[PollerUpdate] = []

    def _broken(update: PollerUpdate) -> None:
        raise RuntimeError("render failed")

    poller.subscribe(_broken)
    unsubscribe = poller.subscribe(seen.append)

    await poller.start()
    await poller.settle()
    assert len(seen) == 1

    unsubscribe()
    await poller.refresh()
    assert len(seen) == 1
    await poller.stop()


@pytest.mark.unit
@pytest.mark.anyio
async def test_refresh_is_ignored_when_idle() -> None:
    source = ImmediateFeedSource(feed=_feed("a"))
    poller = LiveFeedPoller(feed_source=source, interval_s=3600)

    await poller.refresh()

    assert source.calls == 0
    assert poller.snapshot is None


@pytest.mark.unit
@pytest.mark.anyio
async def test_tick_from_previous_run_is_discarded_after_restart() -> None:
    source = ScriptedFeedSource()
    poller = LiveFeedPoller(feed_source=source, interval_s=3600)

    await poller.start()
    await _until(lambda: len(source.pending) == 1)
    await poller.stop()
    await poller.start()
    await _until(lambda: len(source.pending) == 2)

    # The tick issued before stop() resolves first.
    source.pending[0].set_result(_feed("before_stop"))
    await _until(lambda: len(poller._inflight) == 1)
    assert poller.vehicles == ()
    assert poller.snapshot is None

    source.pending[1].set_result(_feed("current"))
    await poller.settle()
    assert [v.vehicle_id for v in poller.vehicles] == ["current"]
    await poller.stop()


@dataclass(slots=True)
class BrokenFeedSource:
    async def fetch_feed(self) -> AggregatedFeed:
        raise RuntimeError("decoder exploded")


@pytest.mark.unit
@pytest.mark.anyio
async def test_unexpected_error_sets_error_indicator() -> None:
    poller = LiveFeedPoller(feed_source=BrokenFeedSource(), interval_s=3600)
    updates: list[PollerUpdate] = []
    poller.subscribe(updates.append)

    await poller.start()
    await poller.settle()
    await poller.stop()

    assert poller.error == "decoder exploded"
    assert poller.snapshot is None
    assert len(updates) == 1 and updates[0].error == "decoder exploded"


@pytest.mark.unit
def test_internal_state_is_not_a_constructor_argument() -> None:
    with pytest.raises(TypeError):
        LiveFeedPoller(  # type: ignore[call-arg]
            feed_source=ImmediateFeedSource(feed=_feed("a")),
            _state=PollerState.POLLING,
        )
