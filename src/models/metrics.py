"""
Traffic metrics models. All times are milliseconds.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List


@dataclass(frozen=True)
class MetricsSummary:
    total_requests: int = 0
    error_rate: float = 0.0
    """Percentage of flows answered with status >= 400."""
    avg_response_time: float = 0.0
    slow_queries: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class StatusCodeCount:
    code: int
    count: int


@dataclass(frozen=True)
class DomainStat:
    domain: str
    count: int
    avg_time: float


@dataclass(frozen=True)
class ResponseTimePoint:
    timestamp: int
    """Bucket start."""
    time: float
    """Mean response time within the bucket."""


@dataclass(frozen=True)
class MetricsReport:
    summary: MetricsSummary
    status_codes: List[StatusCodeCount] = field(default_factory=list)
    domains: List[DomainStat] = field(default_factory=list)
    response_times: List[ResponseTimePoint] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
