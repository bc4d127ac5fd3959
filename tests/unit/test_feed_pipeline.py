from __future__ import annotations

import httpx
import pytest

from src.adapters.api.dependencies import get_fleet_feed_service
from src.adapters.realtime import HttpVehicleFeedSource
from src.app.services.live_feed_poller import LiveFeedPoller
from src.app.services.vehicle_presentation import summarize
from src.domain.exceptions import UpstreamUnavailable
from src.domain.models import VehicleMode
from src.main import app

from tests.unit.oba_fakes import (
    agency_ref,
    directory_payload,
    http_feed_service,
    oba_transport,
    roster_payload,
    vehicle_payload,
)


def _upstream() -> httpx.MockTransport:
    return oba_transport(
        {
            "/api/where/agencies-with-coverage.json": httpx.Response(
                200,
                json=directory_payload(
                    ["1", "40"],
                    [
                        agency_ref("1", "King County Metro"),
                        agency_ref("40", "Sound Transit"),
                    ],
                ),
            ),
            "/api/where/vehicles-for-agency/1.json": httpx.Response(
                200,
                json=roster_payload(
                    [
                        vehicle_payload(
                            "1_7001", trip_status={"scheduleDeviation": 420}
                        ),
                        vehicle_payload("1_7002", lat=None, lon=None),
                    ],
                    current_time=1_700_000_001_000,
                ),
            ),
            "/api/where/vehicles-for-agency/40.json": httpx.Response(
                200,
                json=roster_payload(
                    [
                        vehicle_payload("40_LLR_12"),
                        vehicle_payload("40_9", last_location_update_time=0),
                    ],
                    current_time=1_700_000_002_000,
                ),
            ),
        }
    )


@pytest.fixture
def served_feed():
    app.dependency_overrides[get_fleet_feed_service] = lambda: http_feed_service(
        _upstream()
    )
    try:
        yield HttpVehicleFeedSource(
            url="http://fleet.test/api/vehicles",
            headers_raw="",
            transport=httpx.ASGITransport(app=app),
        )
    finally:
        app.dependency_overrides.clear()


@pytest.mark.unit
@pytest.mark.anyio
async def test_feed_source_reads_served_feed(
    served_feed: HttpVehicleFeedSource,
) -> None:
    feed = await served_feed.fetch_feed()

    assert feed.current_time == 1_700_000_002_000
    ids = [v.vehicle_id for v in feed.vehicles]
    assert ids == ["1_7001", "1_7002", "40_LLR_12", "40_9"]
    assert feed.vehicles[0].agency is not None
    assert feed.vehicles[0].agency.name == "King County Metro"
    assert feed.vehicles[1].location is None


@pytest.mark.unit
@pytest.mark.anyio
async def test_poller_renders_served_feed(served_feed: HttpVehicleFeedSource) -> None:
    poller = LiveFeedPoller(feed_source=served_feed, interval_s=3600)

    await poller.start()
    await poller.settle()
    await poller.stop()

    assert poller.error is None
    summaries = {v.vehicle_id: summarize(v) for v in poller.vehicles}
    assert set(summaries) == {"1_7001", "40_LLR_12"}
    assert summaries["40_LLR_12"].mode is VehicleMode.LIGHT_RAIL
    assert summaries["1_7001"].mode is VehicleMode.UNKNOWN
    assert summaries["1_7001"].schedule is not None
    assert summaries["1_7001"].schedule.severity == "major"


@pytest.mark.unit
@pytest.mark.anyio
async def test_feed_source_maps_error_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, json={"error": "Failed to fetch vehicle data"})

    source = HttpVehicleFeedSource(
        url="http://fleet.test/api/vehicles",
        headers_raw="",
        transport=httpx.MockTransport(handler),
    )

    with pytest.raises(UpstreamUnavailable) as err:
        await source.fetch_feed()
    assert err.value.status_code == 502


@pytest.mark.unit
@pytest.mark.anyio
async def test_feed_source_sends_configured_headers() -> None:
    seen: dict[str, str] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(request.headers)
        return httpx.Response(
            200,
            json={
                "code": 200,
                "currentTime": 5,
                "data": {
                    "limitExceeded": False,
                    "list": [{"vehicleId": "3_1", "agencyId": "3"}],
                },
            },
        )

    source = HttpVehicleFeedSource(
        url="http://fleet.test/api/vehicles",
        headers_raw="X-Api-Key: abc ; Accept:application/json",
        transport=httpx.MockTransport(handler),
    )
    feed = await source.fetch_feed()

    assert seen["x-api-key"] == "abc"
    assert feed.vehicles[0].agency is not None
    assert feed.vehicles[0].agency.name == "Agency 3"


@pytest.mark.unit
@pytest.mark.anyio
async def test_poller_drops_only_vehicle_with_invalid_fix() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "code": 200,
                "currentTime": 5,
                "data": {
                    "limitExceeded": False,
                    "list": [
                        vehicle_payload("1_1", lat=147.6, agencyId="1"),
                        vehicle_payload("1_2", agencyId="1"),
                    ],
                },
            },
        )

    source = HttpVehicleFeedSource(
        url="http://fleet.test/api/vehicles",
        headers_raw="",
        transport=httpx.MockTransport(handler),
    )
    poller = LiveFeedPoller(feed_source=source, interval_s=3600)

    await poller.start()
    await poller.settle()
    await poller.stop()

    assert poller.error is None
    assert [v.vehicle_id for v in poller.vehicles] == ["1_2"]
