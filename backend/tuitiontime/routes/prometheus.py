"""
Prometheus metrics endpoint for monitoring infrastructure.

Public, like any Prometheus scrape target. Exposes the HTTP, service,
ledger and gateway metrics from ``monitoring.prometheus_metrics``.
"""

from fastapi import APIRouter, Response

from ..monitoring.prometheus_metrics import prometheus_metrics

router = APIRouter(tags=["monitoring"])


@router.get("/metrics", include_in_schema=False)
def get_metrics() -> Response:
    return Response(
        content=prometheus_metrics.get_metrics(),
        media_type=prometheus_metrics.get_content_type(),
    )
