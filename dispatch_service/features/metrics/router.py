"""Prometheus metrics endpoint for observability.

Endpoints:
    GET /metrics - Prometheus scrape endpoint

Metrics Exposed:
    Notification Metrics:
        - notification_created_total - Submissions by type
        - notification_delivered_total - Delivery attempts by channel and outcome
        - notification_delivery_duration_seconds - Transport round-trip time
        - notification_retry_total - Retries by channel and source (manual/sweep)
        - notification_retry_exhausted_total - Failed notifications left at the retry cap
        - notification_errors_total - Delivery errors by channel and category
"""

from __future__ import annotations

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, generate_latest

router = APIRouter(tags=["observability"])


@router.get("/metrics")
async def metrics() -> Response:
    """Expose Prometheus metrics in text exposition format."""
    data = generate_latest(REGISTRY)
    return Response(
        content=data,
        media_type=CONTENT_TYPE_LATEST,
        headers={"Cache-Control": "no-cache, no-store, must-revalidate"},
    )
