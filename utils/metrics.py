import re
import time
from typing import Callable
from fastapi import Request, Response
from prometheus_client import Counter, Histogram, generate_latest
from prometheus_client import REGISTRY
import logging

logger = logging.getLogger("metrics")

# HTTP Metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "endpoint", "status_code"]
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

# Extraction Metrics
dme_notes_processed_total = Counter(
    "dme_notes_processed_total",
    "Total number of physician notes processed",
    ["status"]
)

dme_devices_extracted_total = Counter(
    "dme_devices_extracted_total",
    "Device types extracted from physician notes",
    ["device"]
)

# Transport Metrics
dme_transport_requests_total = Counter(
    "dme_transport_requests_total",
    "Total number of DME order POSTs",
    ["status"]
)

dme_transport_duration_seconds = Histogram(
    "dme_transport_duration_seconds",
    "DME order POST duration in seconds",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0]
)


def normalize_path(path: str) -> str:
    """Normalize path for metrics (remove IDs, etc.)"""
    path = re.sub(r'[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}', '{id}', path, flags=re.IGNORECASE)
    path = re.sub(r'/\d+', '/{id}', path)
    return path


async def metrics_middleware(request: Request, call_next: Callable) -> Response:
    """Middleware to collect HTTP metrics"""
    start_time = time.time()

    # Skip metrics endpoint itself
    if request.url.path == "/metrics":
        return await call_next(request)

    method = request.method
    path = normalize_path(request.url.path)

    try:
        response = await call_next(request)
        duration = time.time() - start_time
        http_requests_total.labels(method=method, endpoint=path, status_code=response.status_code).inc()
        http_request_duration_seconds.labels(method=method, endpoint=path).observe(duration)
        return response
    except Exception as e:
        duration = time.time() - start_time
        http_requests_total.labels(method=method, endpoint=path, status_code=500).inc()
        http_request_duration_seconds.labels(method=method, endpoint=path).observe(duration)
        logger.error(f"Request failed: {method} {path} - {str(e)}", exc_info=True)
        raise


def get_metrics():
    """Get Prometheus metrics"""
    return generate_latest(REGISTRY)
