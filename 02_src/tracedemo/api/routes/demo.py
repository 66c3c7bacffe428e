"""Demo routes: greeting, liveness, simulated latency and failures."""

import asyncio
from dataclasses import dataclass

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse
from opentelemetry.trace import Status, StatusCode, Tracer

from ...faults import FaultInjector
from ...logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class DemoTexts:
    """Response bodies; the receiver prefixes them with its name."""

    prefix: str = ""

    @property
    def greeting(self) -> str:
        if self.prefix:
            return f"{self.prefix}Hello, World!\n"
        return "Hello, World! This is the monitoring test server.\n"

    @property
    def health(self) -> str:
        return f"{self.prefix}Status: OK\n"

    def slow(self, delay_ms: int) -> str:
        return f"Slow response complete! Delay: {delay_ms} ms\n"

    error = "An internal server error occurred!\n"
    no_error = "No error this time!\n"


@dataclass(frozen=True)
class HandlerDependencies:
    """Everything the demo handlers need, passed in explicitly."""

    tracer: Tracer
    faults: FaultInjector
    texts: DemoTexts


def create_demo_router(deps: HandlerDependencies) -> APIRouter:
    """Create demo router."""
    router = APIRouter(tags=["demo"])
    tracer = deps.tracer

    @router.get("/", response_class=PlainTextResponse)
    async def home(request: Request) -> str:
        """Fixed greeting."""
        with tracer.start_as_current_span("home-handler") as span:
            logger.info("Home request: %s %s", request.method, request.url.path)
            span.set_attribute("http.method", request.method)
            return deps.texts.greeting

    @router.get("/health", response_class=PlainTextResponse)
    async def health(request: Request) -> str:
        """Liveness probe."""
        with tracer.start_as_current_span("health-handler"):
            logger.info("Health check: %s %s", request.method, request.url.path)
            return deps.texts.health

    @router.get("/slow")
    async def slow(request: Request) -> PlainTextResponse:
        """Sleep for a random delay, then report it."""
        with tracer.start_as_current_span("slow-handler") as span:
            logger.info("Slow request: %s %s", request.method, request.url.path)

            delay_ms = deps.faults.pick_delay_ms()
            span.set_attribute("delay_ms", delay_ms)

            await asyncio.sleep(delay_ms / 1000)

            return PlainTextResponse(
                deps.texts.slow(delay_ms),
                headers={"X-Delay-Ms": str(delay_ms)},
            )

    @router.get("/error")
    async def error(request: Request) -> PlainTextResponse:
        """Fail with a 500 at the configured rate."""
        with tracer.start_as_current_span("error-handler") as span:
            logger.info("Error request: %s %s", request.method, request.url.path)

            if deps.faults.should_fail():
                logger.warning("Returning simulated 500")
                span.set_attribute("error", "true")
                span.set_status(Status(StatusCode.ERROR, "simulated failure"))
                return PlainTextResponse(deps.texts.error, status_code=500)

            return PlainTextResponse(deps.texts.no_error)

    return router
