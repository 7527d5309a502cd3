from __future__ import annotations

from flask import Blueprint, Response
from prometheus_client import Counter, Histogram, generate_latest

metrics_blueprint = Blueprint("metrics_bp", __name__)

CONTENT_TYPE_LATEST = "text/plain; version=0.0.4; charset=utf-8"

TOKEN_ACQUISITIONS = Counter(
    "trackradar_token_acquisitions_total",
    "Client-credentials exchanges performed against the token endpoint.",
    ["outcome"],
)
TOKEN_CACHE_HITS = Counter(
    "trackradar_token_cache_hits_total",
    "Proxied calls served with a cached bearer token.",
)
PROXY_REQUESTS = Counter(
    "trackradar_proxy_requests_total",
    "Catalog proxy calls by mode and outcome.",
    ["mode", "outcome"],
)
UPSTREAM_LATENCY = Histogram(
    "trackradar_upstream_request_seconds",
    "Latency of calls made to the catalog API.",
    ["mode"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10, float("inf")),
)


def record_token_acquisition(success: bool) -> None:
    TOKEN_ACQUISITIONS.labels(outcome="success" if success else "failure").inc()


def record_token_cache_hit() -> None:
    TOKEN_CACHE_HITS.inc()


def record_proxy_request(mode: str, outcome: str) -> None:
    PROXY_REQUESTS.labels(mode=mode, outcome=outcome).inc()


def observe_upstream_latency(mode: str, seconds: float) -> None:
    UPSTREAM_LATENCY.labels(mode=mode).observe(seconds)


@metrics_blueprint.route("/metrics")
def metrics_endpoint() -> Response:
    return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)
