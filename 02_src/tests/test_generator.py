"""Tests for TrafficGenerator."""

import asyncio
import random

import httpx
import pytest
from opentelemetry.trace import StatusCode

from loadgen import TrafficGenerator


def _recording_transport(seen: list[httpx.Request], status: int = 200) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(status, text="ok")

    return httpx.MockTransport(handler)


def _failing_transport() -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    return httpx.MockTransport(handler)


@pytest.fixture
def make_generator(telemetry):
    """Factory for generators bound to the test telemetry."""

    def _make(transport, paths=("/", "/health"), interval=60.0, seed=1):
        gen = TrafficGenerator(
            target_url="http://receiver:8081/",
            paths=paths,
            tracer=telemetry.tracer,
            tracer_provider=telemetry.provider,
            interval=interval,
            rng=random.Random(seed),
            transport=transport,
        )
        return gen

    return _make


class TestSendOnce:
    """Tests for a single generator tick."""

    @pytest.mark.asyncio
    async def test_send_once_hits_a_known_path(self, make_generator):
        """Test that a tick issues a GET to one of the configured paths."""
        seen: list[httpx.Request] = []
        gen = make_generator(_recording_transport(seen))
        await gen.start()

        status = await gen.send_once()
        await gen.stop()

        assert status == 200
        assert len(seen) == 1
        assert seen[0].method == "GET"
        assert str(seen[0].url) in ("http://receiver:8081/", "http://receiver:8081/health")
        assert gen.ticks == 1
        assert gen.failures == 0

    @pytest.mark.asyncio
    async def test_send_once_propagates_trace_context(self, make_generator):
        """Test that outbound requests carry a traceparent header."""
        seen: list[httpx.Request] = []
        gen = make_generator(_recording_transport(seen))
        await gen.start()

        await gen.send_once()
        await gen.stop()

        assert "traceparent" in seen[0].headers

    @pytest.mark.asyncio
    async def test_send_once_creates_span(self, make_generator, finished_spans):
        """Test that each tick is wrapped in a periodic-dummy-request span."""
        gen = make_generator(_recording_transport([]))
        await gen.start()

        await gen.send_once()
        await gen.stop()

        spans = finished_spans("periodic-dummy-request")
        assert len(spans) == 1
        assert spans[0].attributes["dummy.request.type"] == "periodic"
        assert spans[0].attributes["dummy.request.url"].startswith("http://receiver:8081/")
        assert spans[0].attributes["http.status_code"] == 200

    @pytest.mark.asyncio
    async def test_send_once_swallows_transport_errors(self, make_generator, finished_spans):
        """Test that a failed request is recorded, not raised."""
        gen = make_generator(_failing_transport())
        await gen.start()

        status = await gen.send_once()
        await gen.stop()

        assert status is None
        assert gen.failures == 1
        span = finished_spans("periodic-dummy-request")[0]
        assert span.status.status_code == StatusCode.ERROR

    @pytest.mark.asyncio
    async def test_send_once_requires_start(self, make_generator):
        """Test that ticking a stopped generator raises."""
        gen = make_generator(_recording_transport([]))

        with pytest.raises(RuntimeError, match="not started"):
            await gen.send_once()

    @pytest.mark.asyncio
    async def test_paths_chosen_from_list(self, make_generator):
        """Test that only configured paths are requested."""
        seen: list[httpx.Request] = []
        paths = ("/", "/health", "/slow", "/error")
        gen = make_generator(_recording_transport(seen), paths=paths)
        await gen.start()

        for _ in range(40):
            await gen.send_once()
        await gen.stop()

        requested = {r.url.path for r in seen}
        assert requested <= set(paths)
        assert len(requested) > 1

    def test_empty_paths_rejected(self, telemetry):
        """Test that a generator needs at least one path."""
        with pytest.raises(ValueError):
            TrafficGenerator("http://peer", [], tracer=telemetry.tracer)

    @pytest.mark.parametrize("interval", [0.0, -1.0])
    def test_non_positive_interval_rejected(self, telemetry, interval):
        """Test that a zero or negative interval cannot spin the loop."""
        with pytest.raises(ValueError, match="interval"):
            TrafficGenerator("http://peer", ["/"], tracer=telemetry.tracer, interval=interval)


class TestLifecycle:
    """Tests for start()/stop()."""

    @pytest.mark.asyncio
    async def test_loop_ticks_periodically(self, make_generator):
        """Test that the loop fires repeatedly at the interval."""
        seen: list[httpx.Request] = []
        gen = make_generator(_recording_transport(seen), interval=0.01)

        await gen.start()
        await asyncio.sleep(0.2)
        await gen.stop()

        assert gen.ticks >= 2
        # stop() may cancel one tick mid-request
        assert gen.ticks - 1 <= len(seen) <= gen.ticks

    @pytest.mark.asyncio
    async def test_loop_survives_failures(self, make_generator):
        """Test that the loop keeps running while the peer is down."""
        gen = make_generator(_failing_transport(), interval=0.01)

        await gen.start()
        await asyncio.sleep(0.2)
        assert gen.running
        await gen.stop()

        assert gen.failures >= 2
        assert gen.ticks - 1 <= gen.failures <= gen.ticks

    @pytest.mark.asyncio
    async def test_first_tick_waits_for_interval(self, make_generator):
        """Test that nothing is sent before the first interval elapses."""
        seen: list[httpx.Request] = []
        gen = make_generator(_recording_transport(seen), interval=60.0)

        await gen.start()
        await asyncio.sleep(0.05)
        await gen.stop()

        assert seen == []

    @pytest.mark.asyncio
    async def test_stop_is_deterministic(self, make_generator):
        """Test that no requests are sent after stop() returns."""
        seen: list[httpx.Request] = []
        gen = make_generator(_recording_transport(seen), interval=0.01)

        await gen.start()
        await asyncio.sleep(0.05)
        await gen.stop()
        count = len(seen)
        await asyncio.sleep(0.05)

        assert not gen.running
        assert len(seen) == count

    @pytest.mark.asyncio
    async def test_start_and_stop_idempotent(self, make_generator):
        """Test that repeated start/stop calls are harmless."""
        gen = make_generator(_recording_transport([]))

        await gen.start()
        await gen.start()
        assert gen.running

        await gen.stop()
        await gen.stop()
        assert not gen.running
