"""Periodic traffic generator that keeps traces flowing."""

import asyncio
import random
from typing import Protocol, Sequence

import httpx
from opentelemetry.instrumentation.httpx import AsyncOpenTelemetryTransport
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.trace import Status, StatusCode, Tracer

from tracedemo.logging_config import get_logger

logger = get_logger(__name__)


class ITrafficGenerator(Protocol):
    """Issue dummy requests against a peer on a fixed interval."""

    async def start(self) -> None:
        """Start the periodic loop."""
        ...

    async def stop(self) -> None:
        """Stop the loop and close the client."""
        ...


class TrafficGenerator:
    """Sends a GET to a random path of the target every ``interval`` seconds."""

    def __init__(
        self,
        target_url: str,
        paths: Sequence[str],
        tracer: Tracer,
        tracer_provider: TracerProvider | None = None,
        interval: float = 5.0,
        rng: random.Random | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ):
        if not paths:
            raise ValueError("paths must not be empty")
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")

        self._target_url = target_url.rstrip("/")
        self._paths = list(paths)
        self._tracer = tracer
        self._tracer_provider = tracer_provider
        self._interval = interval
        self._rng = rng or random.Random()
        self._transport = transport
        self._timeout = timeout

        self._running = False
        self._task: asyncio.Task | None = None
        self._client: httpx.AsyncClient | None = None
        self.ticks = 0
        self.failures = 0

    @property
    def running(self) -> bool:
        return self._running

    @property
    def target_url(self) -> str:
        return self._target_url

    @property
    def interval(self) -> float:
        return self._interval

    async def start(self) -> None:
        """Start the periodic loop."""
        if self._running:
            return

        self._running = True
        transport = AsyncOpenTelemetryTransport(
            self._transport or httpx.AsyncHTTPTransport(),
            tracer_provider=self._tracer_provider,
        )
        self._client = httpx.AsyncClient(transport=transport, timeout=self._timeout)

        self._task = asyncio.create_task(self._run())
        logger.info(
            "Periodic request generator started (interval: %ss, target: %s)",
            self._interval,
            self._target_url,
        )

    async def stop(self) -> None:
        """Stop the loop and close the client."""
        if not self._running:
            return
        self._running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        if self._client:
            await self._client.aclose()
            self._client = None

        logger.info("Periodic request generator stopped after %d requests", self.ticks)

    async def _run(self) -> None:
        while self._running:
            await asyncio.sleep(self._interval)
            try:
                await self.send_once()
            except Exception as e:
                logger.error("Generator tick error: %s", e)

    async def send_once(self) -> int | None:
        """
        Send one dummy request inside its own span.

        Returns:
            The response status code, or None if the request failed.
        """
        if not self._client:
            raise RuntimeError("Generator not started")

        with self._tracer.start_as_current_span("periodic-dummy-request") as span:
            path = self._rng.choice(self._paths)
            url = f"{self._target_url}{path}"
            span.set_attribute("dummy.request.url", url)
            span.set_attribute("dummy.request.type", "periodic")
            self.ticks += 1

            try:
                response = await self._client.get(url)
            except httpx.HTTPError as e:
                self.failures += 1
                span.record_exception(e)
                span.set_status(Status(StatusCode.ERROR, str(e)))
                logger.error("Dummy request failed: %s: %s", url, e)
                return None

            span.set_attribute("http.status_code", response.status_code)
            logger.info("Dummy request complete: %s, status: %d", path, response.status_code)
            return response.status_code
