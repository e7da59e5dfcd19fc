# Flow data model
"""
Flow data models for flowscope.

A Flow is one request/response exchange as captured and displayed by the
intercepting proxy. Flows are INPUT ONLY - nothing in the analysis layer
modifies them. Every derived view is rebuilt from the flow list.
"""

from dataclasses import dataclass
from typing import Optional, Union

Body = Union[str, bytes, bytearray, memoryview, None]


@dataclass(frozen=True)
class FlowRequest:
    """
    Request half of a flow.

    Timestamps are seconds since the Unix epoch with fractional part,
    exactly as the proxy reports them.
    """
    host: str
    """Destination host as displayed (the proxy's "pretty host")."""

    path: str
    """Request path INCLUDING the query string, e.g. '/imp?adsid=abc'."""

    scheme: str = "https"

    timestamp_start: Optional[float] = None
    """Seconds since epoch when the request started."""

    content: Body = None
    """Raw body: text, bytes, or None when absent."""

    method: str = "GET"


@dataclass(frozen=True)
class FlowResponse:
    """Response half of a flow. Missing on in-flight flows."""
    status_code: int
    timestamp_end: Optional[float] = None
    """Seconds since epoch when the response completed."""


@dataclass(frozen=True)
class Flow:
    """
    One captured exchange.

    Only the "http" type carries a request; other proxy flow types
    (tcp, udp, dns) are kept so that aggregate counts can skip them.
    """
    id: str
    type: str = "http"
    request: Optional[FlowRequest] = None
    response: Optional[FlowResponse] = None

    @property
    def is_http(self) -> bool:
        return self.type == "http" and self.request is not None

    @property
    def is_complete(self) -> bool:
        """True if both start and end timestamps are known."""
        return (
            self.is_http
            and self.request.timestamp_start is not None
            and self.response is not None
            and self.response.timestamp_end is not None
        )

    @property
    def response_time_ms(self) -> Optional[float]:
        """Response time in milliseconds, None for in-flight flows."""
        if not self.is_complete:
            return None
        return (self.response.timestamp_end - self.request.timestamp_start) * 1000
