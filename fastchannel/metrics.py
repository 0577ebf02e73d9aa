"""Prometheus collectors for the Fastchannel client.

Every collector goes through :func:`get_metric` so it is registered with the
default registry exactly once.
"""
from __future__ import annotations

from typing import Any, Dict, Tuple, Type

from prometheus_client import Counter, Histogram

_METRICS: Dict[Tuple[Type[Any], str], Any] = {}


def get_metric(cls: Type[Any], name: str, *args, **kwargs):
    key = (cls, name)
    if key in _METRICS:
        return _METRICS[key]
    metric = cls(name, *args, **kwargs)
    _METRICS[key] = metric
    return metric


http_requests_total = get_metric(
    Counter, "fastchannel_http_requests_total",
    "HTTP requests to the Fastchannel API",
    ["method", "status"],
)

http_latency_seconds = get_metric(
    Histogram, "fastchannel_http_latency_seconds",
    "Latency of Fastchannel API requests (seconds)",
    ["method"],
    buckets=(0.1, 0.3, 0.5, 1, 2, 5, 10, 30),
)

oauth_tokens_issued_total = get_metric(
    Counter, "fastchannel_oauth_tokens_issued_total",
    "OAuth client-credentials tokens issued",
)

oauth_errors_total = get_metric(
    Counter, "fastchannel_oauth_errors_total",
    "OAuth token request failures",
    ["reason"],
)
