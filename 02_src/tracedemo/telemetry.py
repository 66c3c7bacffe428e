"""Trace provider construction and shutdown."""

from dataclasses import dataclass
from urllib.parse import urlsplit

from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SpanExporter
from opentelemetry.sdk.trace.sampling import ALWAYS_ON
from opentelemetry.trace import Tracer

from .config import Settings
from .logging_config import get_logger

logger = get_logger(__name__)


class TelemetryError(RuntimeError):
    """Raised when the trace pipeline cannot be constructed."""


@dataclass(frozen=True)
class CollectorEndpoint:
    """A parsed OTLP gRPC collector address."""

    host: str
    port: int
    insecure: bool = True

    @property
    def address(self) -> str:
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


def parse_collector_endpoint(endpoint: str) -> CollectorEndpoint:
    """Parse ``host:port`` or ``http(s)://host:port`` into a CollectorEndpoint."""
    raw = (endpoint or "").strip()
    if not raw:
        raise TelemetryError("Collector endpoint is empty")

    if "://" in raw:
        parts = urlsplit(raw)
        if parts.scheme not in ("http", "https"):
            raise TelemetryError(f"Unsupported collector scheme: {parts.scheme!r}")
        insecure = parts.scheme == "http"
    else:
        parts = urlsplit(f"//{raw}")
        insecure = True

    try:
        port = parts.port
    except ValueError as e:
        raise TelemetryError(f"Invalid collector port in {endpoint!r}") from e

    if not parts.hostname:
        raise TelemetryError(f"Missing collector host in {endpoint!r}")
    if port is None:
        raise TelemetryError(f"Missing collector port in {endpoint!r}")
    if parts.path not in ("", "/"):
        raise TelemetryError(f"Unexpected path in collector endpoint {endpoint!r}")

    return CollectorEndpoint(host=parts.hostname, port=port, insecure=insecure)


def build_exporter(endpoint: str) -> SpanExporter:
    """Create the OTLP gRPC exporter for the given collector address."""
    collector = parse_collector_endpoint(endpoint)
    try:
        return OTLPSpanExporter(endpoint=collector.address, insecure=collector.insecure)
    except Exception as e:
        raise TelemetryError(f"Failed to create OTLP exporter: {e}") from e


@dataclass
class Telemetry:
    """Tracer provider plus the named tracer handed to every component."""

    provider: TracerProvider
    tracer: Tracer

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        return self.provider.force_flush(timeout_millis)

    def shutdown(self) -> None:
        """Flush outstanding spans and stop the exporter."""
        logger.info("Shutting down tracer provider")
        self.provider.shutdown()


def init_telemetry(settings: Settings, exporter: SpanExporter | None = None) -> Telemetry:
    """
    Construct the trace pipeline for this process.

    The provider is returned rather than registered globally; callers pass
    ``telemetry.tracer`` and ``telemetry.provider`` to whatever needs them.

    Args:
        settings: Service settings (service name, environment tag, collector endpoint).
        exporter: Exporter to use instead of OTLP (tests).

    Raises:
        TelemetryError: If the collector endpoint is malformed or the exporter
            cannot be created.
    """
    if exporter is None:
        exporter = build_exporter(settings.tempo_endpoint)
        logger.info("Exporting spans to %s", settings.tempo_endpoint)

    resource = Resource.create(
        {
            SERVICE_NAME: settings.service_name,
            "environment": settings.environment,
        }
    )
    provider = TracerProvider(resource=resource, sampler=ALWAYS_ON)
    provider.add_span_processor(BatchSpanProcessor(exporter))

    return Telemetry(provider=provider, tracer=provider.get_tracer(settings.service_name))
