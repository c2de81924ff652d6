from prometheus_client import Counter, Histogram, Info as PrometheusInfo
from prometheus_fastapi_instrumentator import Instrumentator, metrics
from prometheus_fastapi_instrumentator.metrics import Info as MetricsInfo
import time
from fastapi import FastAPI
from functools import wraps

from glow_wizard.core.config import settings

# Custom metrics for AI services
ai_service_requests = Counter(
    'ai_service_requests_total',
    'Total requests to AI services',
    ['service', 'endpoint', 'status']
)

ai_service_duration = Histogram(
    'ai_service_duration_seconds',
    'Duration of AI service requests',
    ['service', 'endpoint']
)

ai_service_tokens = Counter(
    'ai_service_tokens_total',
    'Total tokens used by AI services',
    ['service', 'type']  # type: prompt/completion
)

# Photo pipeline metrics
photo_probes_total = Counter(
    'photo_probes_total',
    'Photo accessibility probes by outcome',
    ['outcome']  # accessible or the failure code
)

photo_quality_score = Histogram(
    'photo_quality_score',
    'Distribution of estimated photo quality scores',
    buckets=(0, 10, 20, 30, 40, 50, 60, 70, 80, 90, 100)
)

# Recommendation metrics
recommendation_requests = Counter(
    'recommendation_requests_total',
    'Recommendation requests by outcome',
    ['outcome']  # success / invalid / upstream / internal
)

# App info
app_info = PrometheusInfo('app_info', 'Application information')
app_info.info({
    'version': settings.APP_VERSION,
    'name': settings.APP_NAME,
    'environment': settings.ENVIRONMENT
})

def setup_metrics(app: FastAPI) -> Instrumentator:
    """
    Set up Prometheus metrics for FastAPI application
    """
    instrumentator = Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        excluded_handlers=["/metrics", "/health"],
    )

    instrumentator.add(
        metrics.latency(
            buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 15.0)
        )
    )
    instrumentator.add(metrics.requests())

    # Error rate by endpoint
    @instrumentator.add
    def error_rate(info: MetricsInfo) -> None:
        if not hasattr(error_rate, '_counter'):
            error_rate._counter = Counter(
                name="http_errors_total",
                documentation="Total number of HTTP errors",
                labelnames=("method", "handler", "status"),
            )

        if str(info.modified_status).startswith(("4", "5")):
            error_rate._counter.labels(
                method=info.method,
                handler=info.modified_handler,
                status=str(info.modified_status)
            ).inc()

    return instrumentator

def track_ai_service(service: str, endpoint: str):
    """
    Decorator to track AI service metrics on async service methods
    """
    def decorator(func):
        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            start_time = time.time()
            status = "success"

            try:
                return await func(*args, **kwargs)
            except Exception:
                status = "error"
                raise
            finally:
                duration = time.time() - start_time
                ai_service_requests.labels(service=service, endpoint=endpoint, status=status).inc()
                ai_service_duration.labels(service=service, endpoint=endpoint).observe(duration)

        return async_wrapper
    return decorator
