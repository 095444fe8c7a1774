"""
Prometheus Metrics for the Document Generation Pipeline

Metrics Categories:
- Request metrics: Total requests, success/failure rates, latency
- LLM metrics: Gateway calls and latency per operation
- Generation metrics: Session outcomes, streamed fragments, keyword quality
"""

from prometheus_client import (
    Counter,
    Histogram,
    Gauge,
    Info,
    generate_latest,
    CONTENT_TYPE_LATEST
)
from contextlib import contextmanager
from functools import wraps
from time import time
from typing import Callable, Any, Iterator
import logging

logger = logging.getLogger(__name__)


# =============================================================================
# REQUEST METRICS
# =============================================================================

application_requests_total = Counter(
    'careerdocs_requests_total',
    'Total number of API requests',
    ['endpoint', 'status']
)

application_latency_seconds = Histogram(
    'careerdocs_latency_seconds',
    'API request duration in seconds',
    ['endpoint'],
    buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0]
)

application_requests_in_progress = Gauge(
    'careerdocs_requests_in_progress',
    'Number of requests currently being processed',
    ['endpoint']
)


# =============================================================================
# LLM-SPECIFIC METRICS
# =============================================================================

llm_api_calls_total = Counter(
    'careerdocs_llm_api_calls_total',
    'Total number of LLM gateway calls',
    ['operation', 'model', 'status']  # operation: keyword_extraction, stream
)

llm_latency_seconds = Histogram(
    'careerdocs_llm_latency_seconds',
    'LLM gateway call duration in seconds (full stream for streaming calls)',
    ['operation', 'model'],
    buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 20.0, 60.0]
)


# =============================================================================
# GENERATION METRICS
# =============================================================================

generation_sessions_total = Counter(
    'careerdocs_generation_sessions_total',
    'Generation sessions by terminal status',
    ['status']
)

stream_fragments_total = Counter(
    'careerdocs_stream_fragments_total',
    'Text fragments received from streaming generations',
    ['artifact']
)

malformed_extractions_total = Counter(
    'careerdocs_malformed_keyword_extractions_total',
    'Keyword extractions that returned unparsable or schema-violating output'
)

application_errors_total = Counter(
    'careerdocs_errors_total',
    'Total number of errors',
    ['error_type', 'component']
)


# =============================================================================
# SYSTEM METRICS
# =============================================================================

application_info = Info(
    'careerdocs_application',
    'Application version and metadata'
)

application_info.info({
    'version': '0.1.0',
    'component': 'document_generation_service'
})


# =============================================================================
# UTILITY DECORATORS
# =============================================================================

def track_request_metrics(endpoint: str):
    """
    Decorator to track request metrics for async route handlers.

    Usage:
        @track_request_metrics("parse_document")
        async def parse_document(file):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            application_requests_in_progress.labels(endpoint=endpoint).inc()
            start_time = time()

            try:
                result = await func(*args, **kwargs)
                application_requests_total.labels(
                    endpoint=endpoint,
                    status='success'
                ).inc()
                return result

            except Exception as e:
                application_requests_total.labels(
                    endpoint=endpoint,
                    status='failure'
                ).inc()
                record_error(type(e).__name__, endpoint)
                raise

            finally:
                application_latency_seconds.labels(
                    endpoint=endpoint
                ).observe(time() - start_time)
                application_requests_in_progress.labels(endpoint=endpoint).dec()

        return wrapper
    return decorator


@contextmanager
def track_llm_call(operation: str, model: str) -> Iterator[None]:
    """
    Record outcome and latency of one gateway call.

    Usage:
        with track_llm_call("stream", model):
            async for chunk in stream:
                ...
    """
    start_time = time()
    try:
        yield
    except Exception:
        llm_api_calls_total.labels(
            operation=operation,
            model=model,
            status='failure'
        ).inc()
        raise
    else:
        llm_api_calls_total.labels(
            operation=operation,
            model=model,
            status='success'
        ).inc()
    finally:
        llm_latency_seconds.labels(
            operation=operation,
            model=model
        ).observe(time() - start_time)


# =============================================================================
# METRIC RECORDING FUNCTIONS
# =============================================================================

def record_session_status(status: str):
    generation_sessions_total.labels(status=status).inc()


def record_stream_fragment(artifact: str):
    stream_fragments_total.labels(artifact=artifact).inc()


def record_malformed_extraction():
    malformed_extractions_total.inc()


def record_error(error_type: str, component: str):
    """
    Record an application error.

    Args:
        error_type: Type/class of error
        component: Component where error occurred
    """
    application_errors_total.labels(
        error_type=error_type,
        component=component
    ).inc()


# =============================================================================
# METRICS ENDPOINT
# =============================================================================

def get_metrics() -> tuple[bytes, str]:
    """
    Get Prometheus metrics in text format.

    Returns:
        Tuple of (metrics_bytes, content_type)
    """
    return generate_latest(), CONTENT_TYPE_LATEST
