"""
Prometheus-based metrics for production monitoring.
Provides /metrics endpoint for scraping.
"""
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import APIRouter, Response


# Counters
generation_batches_total = Counter(
    "generation_batches_total",
    "Total number of generation batches dispatched",
)

image_generations_total = Counter(
    "image_generations_total",
    "Total number of per-provider generations by terminal status",
    ["provider", "status"],
)

image_uploads_total = Counter(
    "image_uploads_total",
    "Total decoded image uploads",
    ["backend", "status"],
)

# Histograms
provider_request_duration_seconds = Histogram(
    "provider_request_duration_seconds",
    "Image provider call duration",
    ["provider"],
    buckets=[0.5, 1, 2, 5, 10, 30, 60, 120],
)

batch_duration_seconds = Histogram(
    "batch_duration_seconds",
    "Wall time from dispatch until every provider settled",
    buckets=[1, 2, 5, 10, 30, 60, 120, 300],
)


router = APIRouter()


@router.get("/metrics")
def metrics() -> Response:
    """Prometheus metrics endpoint."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
