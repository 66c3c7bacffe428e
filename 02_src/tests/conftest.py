"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import httpx
import pytest
import pytest_asyncio
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))


TEST_ENV = {
    "RANDOM_SEED": "42",
    "SLOW_MIN_MS": "100",
    "SLOW_MAX_MS": "150",
    "GENERATOR_INTERVAL": "60",
}


def make_settings(variant: str = "app", **overrides: str):
    """Settings for tests: seeded, short /slow delays, no generator ticks."""
    from tracedemo.config import load_settings

    return load_settings(variant, env={**TEST_ENV, **overrides})


def ok_transport() -> httpx.MockTransport:
    """Peer that answers every request with 200."""
    return httpx.MockTransport(lambda request: httpx.Response(200, text="ok"))


@pytest.fixture
def settings():
    """App-variant settings."""
    return make_settings("app")


@pytest.fixture
def span_exporter():
    """Exporter that keeps finished spans in memory."""
    return InMemorySpanExporter()


@pytest.fixture
def telemetry(settings, span_exporter):
    """Telemetry wired to the in-memory exporter."""
    from tracedemo.telemetry import init_telemetry

    tm = init_telemetry(settings, exporter=span_exporter)
    yield tm
    tm.provider.shutdown()


@pytest.fixture
def finished_spans(telemetry, span_exporter):
    """Callable returning spans after flushing the batch processor."""

    def _get(name: str | None = None):
        telemetry.force_flush()
        spans = span_exporter.get_finished_spans()
        if name is not None:
            spans = [s for s in spans if s.name == name]
        return list(spans)

    return _get


@pytest.fixture
def application(settings, telemetry):
    """Application whose generator talks to a mock peer."""
    from tracedemo.app import Application

    return Application(settings, telemetry, generator_transport=ok_transport())


@pytest_asyncio.fixture
async def client(application):
    """HTTP client bound to the ASGI app (lifespan not run)."""
    from tracedemo.api import create_fastapi_app

    app = create_fastapi_app(application)
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac
    if application.generator:
        await application.generator.stop()
