"""
Traffic-wide metrics over a flow list.

All functions are pure and accept an empty list. Only "http" flows are
counted; response times are computed for flows with both a request start
and a response end and expressed in milliseconds.
"""
from __future__ import annotations

import math
from collections import Counter
from typing import Dict, Iterable, List

from models.flow import Flow
from models.metrics import (
    DomainStat,
    MetricsReport,
    MetricsSummary,
    ResponseTimePoint,
    StatusCodeCount,
)

SLOW_QUERY_THRESHOLD_MS = 1000
ERROR_STATUS_MIN = 400
DEFAULT_BUCKET_SIZE_MS = 5000
MAX_SERIES_POINTS = 50
TOP_N = 10


def _http_flows(flows: Iterable[Flow]) -> List[Flow]:
    return [f for f in flows if f.is_http]


def calculate_summary(flows: Iterable[Flow]) -> MetricsSummary:
    http_flows = _http_flows(flows)
    total = len(http_flows)

    # 4xx and 5xx
    error_count = sum(
        1 for f in http_flows
        if f.response is not None and f.response.status_code >= ERROR_STATUS_MIN
    )
    error_rate = (error_count / total) * 100 if total > 0 else 0

    response_times = [f.response_time_ms for f in http_flows if f.is_complete]
    avg_response_time = sum(response_times) / len(response_times) if response_times else 0
    slow_queries = sum(1 for t in response_times if t > SLOW_QUERY_THRESHOLD_MS)

    return MetricsSummary(
        total_requests=total,
        error_rate=error_rate,
        avg_response_time=avg_response_time,
        slow_queries=slow_queries,
    )


def calculate_status_codes(flows: Iterable[Flow]) -> List[StatusCodeCount]:
    """Status code histogram, most frequent first, top 10."""
    counts = Counter(
        f.response.status_code for f in _http_flows(flows)
        if f.response is not None
    )
    # Counter.most_common keeps first-seen order between equal counts
    return [
        StatusCodeCount(code=code, count=count)
        for code, count in counts.most_common(TOP_N)
    ]


def calculate_domain_stats(flows: Iterable[Flow], corrected: bool = False) -> List[DomainStat]:
    """
    Per-host request count and average response time, top 10 by count.

    The average divides the summed response time of the timed flows by the
    host's TOTAL flow count, so in-flight flows pull it down. corrected=True
    divides by the number of timed flows instead.
    """
    domains: Dict[str, Dict[str, float]] = {}

    for f in _http_flows(flows):
        stat = domains.setdefault(f.request.host, {"count": 0, "timed": 0, "total_time": 0.0})
        stat["count"] += 1
        if f.is_complete:
            stat["timed"] += 1
            stat["total_time"] += f.response_time_ms

    results = []
    for domain, stat in domains.items():
        denominator = stat["timed"] if corrected else stat["count"]
        avg_time = stat["total_time"] / denominator if denominator > 0 else 0
        results.append(DomainStat(domain=domain, count=stat["count"], avg_time=avg_time))

    results.sort(key=lambda s: s.count, reverse=True)
    return results[:TOP_N]


def calculate_response_time_over_time(flows: Iterable[Flow],
                                      bucket_size_ms: int = DEFAULT_BUCKET_SIZE_MS) -> List[ResponseTimePoint]:
    """
    Mean response time per fixed-width bucket of request start time.

    Buckets are keyed by their start (ms), returned oldest first, and only
    the newest 50 are kept.
    """
    if bucket_size_ms <= 0:
        raise ValueError(f"bucket_size_ms must be positive, got {bucket_size_ms}")

    buckets: Dict[int, List[float]] = {}
    for f in _http_flows(flows):
        if not f.is_complete:
            continue
        start_ms = math.floor(f.request.timestamp_start * 1000)
        bucket = (start_ms // bucket_size_ms) * bucket_size_ms
        buckets.setdefault(bucket, []).append(f.response_time_ms)

    points = [
        ResponseTimePoint(timestamp=bucket, time=sum(times) / len(times))
        for bucket, times in sorted(buckets.items())
    ]
    return points[-MAX_SERIES_POINTS:]


def calculate_metrics(flows: Iterable[Flow], bucket_size_ms: int = DEFAULT_BUCKET_SIZE_MS,
                      corrected_domain_avg: bool = False) -> MetricsReport:
    flows = list(flows)
    return MetricsReport(
        summary=calculate_summary(flows),
        status_codes=calculate_status_codes(flows),
        domains=calculate_domain_stats(flows, corrected=corrected_domain_avg),
        response_times=calculate_response_time_over_time(flows, bucket_size_ms),
    )
