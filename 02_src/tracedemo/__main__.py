"""Main entry point for the trace demo services."""

import asyncio
import sys

import uvicorn
from dotenv import find_dotenv, load_dotenv

from .api import create_fastapi_app
from .app import Application, run_until_signalled
from .config import Settings, load_settings
from .logging_config import get_logger, setup_logging
from .telemetry import Telemetry, TelemetryError, init_telemetry

logger = get_logger(__name__)


def init_telemetry_or_exit(settings: Settings) -> Telemetry:
    """Build the trace pipeline; a failure here terminates the process."""
    try:
        return init_telemetry(settings)
    except TelemetryError as e:
        logger.critical("Tracer initialization failed: %s", e)
        sys.exit(1)


def main():
    """Run the configured service variant."""
    load_dotenv(find_dotenv(usecwd=True))

    setup_logging()
    settings = load_settings()
    telemetry = init_telemetry_or_exit(settings)
    application = Application(settings, telemetry)

    if not settings.serve_http:
        logger.info("%s started without an HTTP server", settings.service_name)
        asyncio.run(run_until_signalled(application))
        return

    app = create_fastapi_app(application)

    logger.info("Server starting on port %d", settings.api_port)
    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_level="info",
    )


if __name__ == "__main__":
    main()
