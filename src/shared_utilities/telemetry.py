"""
OpenTelemetry instrumentation utilities for tracing preprocessor runs
"""

import functools
import os
import time
from collections.abc import Callable
from contextlib import contextmanager

try:
    from opentelemetry import trace as otel_trace  # type: ignore
    from opentelemetry.sdk.resources import Resource  # type: ignore
    from opentelemetry.sdk.trace import TracerProvider  # type: ignore
    from opentelemetry.sdk.trace.export import (  # type: ignore
        BatchSpanProcessor,
    )

    # Optional OTLP exporter - only import if available
    try:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (  # type: ignore
            OTLPSpanExporter,
        )

        OTLP_AVAILABLE = True
    except ImportError:
        OTLP_AVAILABLE = False
    from opentelemetry.trace import Status, StatusCode  # type: ignore

    OTEL_AVAILABLE = True
except ImportError:
    OTEL_AVAILABLE = False
    OTLP_AVAILABLE = False


class TelemetryManager:
    """Manages OpenTelemetry setup and instrumentation"""

    def __init__(self, service_name: str = "mdbook-git-atom"):
        self.service_name = service_name
        self.tracer = None
        self.enabled = OTEL_AVAILABLE

        if self.enabled:
            self._setup_telemetry()

    def _setup_telemetry(self) -> None:
        """Set up OpenTelemetry tracing"""
        resource = Resource.create(
            {
                "service.name": self.service_name,
                "service.version": "0.3.0",
            }
        )

        otel_trace.set_tracer_provider(TracerProvider(resource=resource))
        tracer_provider = otel_trace.get_tracer_provider()

        # Spans are only exported when an OTLP endpoint is configured
        otlp_endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
        if OTLP_AVAILABLE and otlp_endpoint:
            tracer_provider.add_span_processor(  # type: ignore
                BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint))
            )

        self.tracer = otel_trace.get_tracer(__name__)  # type: ignore

    @contextmanager
    def trace_operation(self, operation_name: str):
        """
        Context manager for tracing operations.

        Args:
            operation_name: Name of the operation being traced

        Yields:
            The current span, or None when tracing is disabled
        """
        if not self.enabled or not self.tracer:
            yield None
            return

        with self.tracer.start_as_current_span(operation_name) as span:
            try:
                yield span
            except Exception as e:
                span.set_status(Status(StatusCode.ERROR, str(e)))
                span.record_exception(e)
                raise

    def trace_function(self, operation_name: str | None = None):
        """
        Decorator for tracing function calls.

        Args:
            operation_name: Custom operation name (defaults to function name)
        """

        def decorator(func: Callable) -> Callable:
            if not self.enabled:
                return func

            @functools.wraps(func)
            def wrapper(*args, **kwargs):
                name = operation_name or f"{func.__module__}.{func.__name__}"

                with self.trace_operation(name) as span:
                    start_time = time.time()
                    result = func(*args, **kwargs)
                    if span:
                        span.set_attribute(
                            "duration_seconds", time.time() - start_time
                        )
                    return result

            return wrapper

        return decorator


# Global telemetry manager instance
_telemetry_manager: TelemetryManager | None = None


def get_telemetry_manager() -> TelemetryManager:
    """Get or create the global telemetry manager instance"""
    global _telemetry_manager
    if _telemetry_manager is None:
        _telemetry_manager = TelemetryManager()
    return _telemetry_manager


def trace_function(operation_name: str | None = None):
    """Convenience decorator for tracing functions."""
    return get_telemetry_manager().trace_function(operation_name)
