from __future__ import annotations

import asyncio
import logging

import pytest

from wsdot_api_client.apis.cache_flush_date import CACHE_FLUSH_DATE_ENDPOINTS
from wsdot_api_client.core.cache_flush import CacheFlushPoller, normalize_marker
from wsdot_api_client.core.errors import ErrorKind, WsdotApiError, WsdotConfigError
from wsdot_api_client.core.models import FetchMode
from tests.shared.payloads import wire

VESSELS = {"wsf-vessels": CACHE_FLUSH_DATE_ENDPOINTS["wsf-vessels"]}


class _MarkerFetcher:
    """Returns queued markers per group; exceptions in the queue are raised."""

    def __init__(self, markers: dict[str, list[object]]):
        self.markers = {group: list(values) for group, values in markers.items()}
        self.calls: list[tuple[str, FetchMode]] = []
        self._groups = {descriptor.endpoint_id: group for group, descriptor in CACHE_FLUSH_DATE_ENDPOINTS.items()}

    async def execute(self, descriptor, params=None, mode=FetchMode.NATIVE):
        group = self._groups[descriptor.endpoint_id]
        self.calls.append((group, mode))
        queue = self.markers[group]
        step = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(step, BaseException):
            raise step
        return step


class _RecordingSink:
    def __init__(self, failures: int = 0):
        self.groups: list[str] = []
        self._failures = failures

    def invalidate(self, group_key: str) -> int:
        if self._failures:
            self._failures -= 1
            raise RuntimeError("sink unavailable")
        self.groups.append(group_key)
        return 3


def test_normalize_marker_compares_wire_dates_by_instant():
    assert normalize_marker(wire(1700000000000, "-0800")) == normalize_marker(wire(1700000000000, "-0700"))
    assert normalize_marker("\\/Date(5)\\/") == 5
    assert normalize_marker("v2") == "v2"
    with pytest.raises(ValueError):
        normalize_marker(None)
    with pytest.raises(ValueError):
        normalize_marker("")


@pytest.mark.asyncio
async def test_first_marker_is_baseline_then_change_invalidates_once():
    fetcher = _MarkerFetcher({"wsf-vessels": [wire(1000), wire(2000), wire(2000)]})
    sink = _RecordingSink()
    poller = CacheFlushPoller(fetcher, sink, groups=VESSELS, interval_seconds=60)

    assert await poller.poll_group("wsf-vessels") is False
    assert poller.markers == {"wsf-vessels": 1000}
    assert await poller.poll_group("wsf-vessels") is True
    assert await poller.poll_group("wsf-vessels") is False

    assert sink.groups == ["wsf-vessels"]
    assert poller.markers == {"wsf-vessels": 2000}
    assert fetcher.calls == [("wsf-vessels", FetchMode.RAW)] * 3


@pytest.mark.asyncio
async def test_offset_only_change_is_not_an_invalidation():
    fetcher = _MarkerFetcher({"wsf-vessels": [wire(1000, "-0800"), wire(1000, "-0700")]})
    sink = _RecordingSink()
    poller = CacheFlushPoller(fetcher, sink, groups=VESSELS)

    await poller.poll_group("wsf-vessels")
    assert await poller.poll_group("wsf-vessels") is False
    assert sink.groups == []


@pytest.mark.asyncio
async def test_failed_poll_keeps_previous_marker(caplog: pytest.LogCaptureFixture):
    failure = WsdotApiError("boom", kind=ErrorKind.NETWORK_ERROR, endpoint="wsf-vessels/cacheFlushDate")
    fetcher = _MarkerFetcher({"wsf-vessels": [wire(1000), failure, wire(1000)]})
    sink = _RecordingSink()
    poller = CacheFlushPoller(fetcher, sink, groups=VESSELS)

    await poller.poll_group("wsf-vessels")
    with caplog.at_level(logging.WARNING, logger="wsdot_api_client"):
        assert await poller.poll_group("wsf-vessels") is False
    assert await poller.poll_group("wsf-vessels") is False

    assert poller.markers == {"wsf-vessels": 1000}
    assert sink.groups == []
    assert "cache flush poll failed group=wsf-vessels" in caplog.text


@pytest.mark.asyncio
@pytest.mark.parametrize("bad", ["", None, "/Date(nope)/"])
async def test_empty_or_malformed_marker_is_a_failed_poll(bad):
    fetcher = _MarkerFetcher({"wsf-vessels": [bad]})
    poller = CacheFlushPoller(fetcher, _RecordingSink(), groups=VESSELS)

    assert await poller.poll_group("wsf-vessels") is False
    assert poller.markers == {}


@pytest.mark.asyncio
async def test_missing_credential_does_not_stop_polling():
    fetcher = _MarkerFetcher({"wsf-vessels": [WsdotConfigError("api_key is not configured"), wire(1)]})
    poller = CacheFlushPoller(fetcher, _RecordingSink(), groups=VESSELS)

    assert await poller.poll_group("wsf-vessels") is False
    assert await poller.poll_group("wsf-vessels") is False
    assert poller.markers == {"wsf-vessels": 1}


@pytest.mark.asyncio
async def test_unexpected_fetcher_error_is_a_failed_tick_and_loop_keeps_running(caplog: pytest.LogCaptureFixture):
    fetcher = _MarkerFetcher({"wsf-vessels": [RuntimeError("socket exploded"), wire(7)]})
    poller = CacheFlushPoller(fetcher, _RecordingSink(), groups=VESSELS, interval_seconds=0.01)

    with caplog.at_level(logging.WARNING, logger="wsdot_api_client"):
        poller.start()
        await asyncio.sleep(0.05)
        assert poller.running is True
        await poller.dispose()

    assert poller.markers == {"wsf-vessels": 7}
    assert "cache flush poll failed group=wsf-vessels error=RuntimeError" in caplog.text


@pytest.mark.asyncio
async def test_sink_failure_is_retried_on_next_tick():
    fetcher = _MarkerFetcher({"wsf-vessels": [wire(1000), wire(2000)]})
    sink = _RecordingSink(failures=1)
    poller = CacheFlushPoller(fetcher, sink, groups=VESSELS)

    await poller.poll_group("wsf-vessels")
    assert await poller.poll_group("wsf-vessels") is False
    assert poller.markers == {"wsf-vessels": 1000}
    assert await poller.poll_group("wsf-vessels") is True
    assert sink.groups == ["wsf-vessels"]


@pytest.mark.asyncio
async def test_poll_once_polls_every_group_in_order():
    fetcher = _MarkerFetcher(
        {
            "wsf-fares": [wire(1), wire(1)],
            "wsf-vessels": [wire(1), wire(2)],
            "wsf-terminals": [wire(1), wire(1)],
            "wsf-schedule": [wire(1), wire(9)],
        }
    )
    sink = _RecordingSink()
    poller = CacheFlushPoller(fetcher, sink, groups=CACHE_FLUSH_DATE_ENDPOINTS)

    assert await poller.poll_once() == []
    assert await poller.poll_once() == ["wsf-vessels", "wsf-schedule"]
    assert [group for group, _ in fetcher.calls[:4]] == [
        "wsf-fares",
        "wsf-vessels",
        "wsf-terminals",
        "wsf-schedule",
    ]


@pytest.mark.asyncio
async def test_start_polls_immediately_and_dispose_stops_ticks():
    fetcher = _MarkerFetcher({"wsf-vessels": [wire(1)]})
    poller = CacheFlushPoller(fetcher, _RecordingSink(), groups=VESSELS, interval_seconds=0.01)

    poller.start()
    poller.start()
    assert poller.running is True
    await asyncio.sleep(0.05)
    await poller.dispose()

    ticks = len(fetcher.calls)
    assert ticks >= 2
    assert poller.running is False
    assert poller.disposed is True
    await asyncio.sleep(0.03)
    assert len(fetcher.calls) == ticks


@pytest.mark.asyncio
async def test_dispose_waits_for_in_flight_tick():
    release = asyncio.Event()
    entered = asyncio.Event()

    class _BlockingFetcher:
        async def execute(self, descriptor, params=None, mode=FetchMode.NATIVE):
            entered.set()
            await release.wait()
            return wire(1)

    poller = CacheFlushPoller(_BlockingFetcher(), _RecordingSink(), groups=VESSELS, interval_seconds=60)
    poller.start()
    await entered.wait()

    disposing = asyncio.create_task(poller.dispose())
    await asyncio.sleep(0)
    assert disposing.done() is False

    release.set()
    await disposing
    assert poller.markers == {"wsf-vessels": 1}


@pytest.mark.asyncio
async def test_start_after_dispose_is_rejected():
    poller = CacheFlushPoller(_MarkerFetcher({"wsf-vessels": [wire(1)]}), _RecordingSink(), groups=VESSELS)
    await poller.dispose()
    await poller.dispose()

    with pytest.raises(RuntimeError):
        poller.start()


@pytest.mark.parametrize(
    ("kwargs", "message"),
    [
        ({"groups": VESSELS, "interval_seconds": 0}, "interval_seconds"),
        ({"groups": {}}, "groups"),
    ],
)
def test_poller_rejects_invalid_construction(kwargs, message):
    with pytest.raises(ValueError, match=message):
        CacheFlushPoller(_MarkerFetcher({}), _RecordingSink(), **kwargs)
