"""Application bootstrap and lifecycle management."""

import asyncio
import random
import signal
from typing import Protocol

import httpx
from opentelemetry.trace import Tracer

from loadgen import TrafficGenerator

from .config import Settings
from .faults import FaultInjector
from .logging_config import get_logger
from .telemetry import Telemetry

logger = get_logger(__name__)


class IApplication(Protocol):
    """Bootstrap and lifecycle."""

    async def start(self) -> None:
        """Start background components."""
        ...

    async def stop(self) -> None:
        """Stop background components and flush spans."""
        ...


class Application:
    """Owns everything a demo process needs: telemetry, faults, generator."""

    def __init__(
        self,
        settings: Settings,
        telemetry: Telemetry,
        generator_transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings
        self.telemetry = telemetry
        self.faults = FaultInjector.from_settings(settings)

        self.generator: TrafficGenerator | None = None
        if settings.generator_enabled:
            seed = settings.random_seed
            self.generator = TrafficGenerator(
                target_url=settings.generator_target,
                paths=settings.generator_paths,
                tracer=telemetry.tracer,
                tracer_provider=telemetry.provider,
                interval=settings.generator_interval,
                rng=random.Random(seed + 2 if seed is not None else None),
                transport=generator_transport,
            )

        self._started = False

    @property
    def tracer(self) -> Tracer:
        """Tracer handed to handlers and the generator."""
        return self.telemetry.tracer

    async def start(self) -> None:
        """Start background components."""
        if self._started:
            return
        logger.info("Starting %s (%s)", self.settings.service_name, self.settings.variant.value)

        if self.generator:
            await self.generator.start()

        self._started = True

    async def stop(self) -> None:
        """Stop the generator, then flush and shut down telemetry."""
        if not self._started:
            return
        self._started = False

        if self.generator:
            await self.generator.stop()

        self.telemetry.shutdown()
        logger.info("Stopped %s", self.settings.service_name)


async def run_until_signalled(
    application: Application,
    stop_event: asyncio.Event | None = None,
) -> None:
    """Run the application until SIGINT/SIGTERM (or ``stop_event``) fires."""
    if stop_event is None:
        stop_event = asyncio.Event()

    loop = asyncio.get_running_loop()
    installed = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
            installed.append(sig)
        except (NotImplementedError, RuntimeError):
            # Not available on this platform or outside the main thread
            pass

    await application.start()
    logger.info("%s started, waiting for termination signal", application.settings.service_name)
    try:
        await stop_event.wait()
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)
        await application.stop()
