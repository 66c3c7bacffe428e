"""FastAPI application setup."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

from ..app import Application
from .routes import control, demo


def create_fastapi_app(application: Application) -> FastAPI:
    """Create and configure the FastAPI app for a demo service."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Manage application lifespan."""
        await application.start()
        yield
        await application.stop()

    fastapi_app = FastAPI(
        title=application.settings.service_name,
        description="Demo service emitting OpenTelemetry traces",
        version="0.1.0",
        lifespan=lifespan,
    )

    deps = demo.HandlerDependencies(
        tracer=application.tracer,
        faults=application.faults,
        texts=demo.DemoTexts(prefix=application.settings.text_prefix),
    )
    fastapi_app.include_router(demo.create_demo_router(deps))
    fastapi_app.include_router(control.create_control_router(application.generator))

    FastAPIInstrumentor.instrument_app(
        fastapi_app,
        tracer_provider=application.telemetry.provider,
    )

    return fastapi_app
