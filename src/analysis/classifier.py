"""
Flow classification predicates.

Every predicate is total: it answers False for anything it does not
recognize, including objects that are not flows at all. Hosts are compared
exactly (no case folding, no port stripping). Endpoint patterns are version
specific and anchored at the end of the path.
"""
from __future__ import annotations

import re

# Destination hosts
AD_API_HOST = "ads-api-kcsandbox-01.kidsnote.com"
TIARA_API_HOST = "stat.tiara.daum.net"

# Ad API endpoints. The click endpoint lives under v2.
AD_REQUEST_PATTERN = re.compile(r"/api/v1/kidsnote_benefit/benefit/req\Z")
AD_IMPRESSION_PATTERN = re.compile(r"/api/v1/kidsnote_benefit/benefit/imp\Z")
AD_CLICK_PATTERN = re.compile(r"/api/v2/kidsnote_benefit/benefit/click\Z")


def _request_of(flow):
    """Return the request of an HTTP flow, or None."""
    if getattr(flow, "type", None) != "http":
        return None
    return getattr(flow, "request", None)


def _host_is(flow, host: str) -> bool:
    request = _request_of(flow)
    if request is None:
        return False
    return getattr(request, "host", None) == host


def _path_without_query(path) -> str:
    if not isinstance(path, str):
        return ""
    # the path field carries the query string; endpoints match the bare path
    return path.split("?", 1)[0].split("#", 1)[0]


def _path_matches(flow, pattern: re.Pattern) -> bool:
    request = _request_of(flow)
    path = _path_without_query(getattr(request, "path", None))
    return pattern.search(path) is not None


def is_ad_api_flow(flow) -> bool:
    """True if the flow is HTTP and targets the ad API host."""
    return _host_is(flow, AD_API_HOST)


def is_ad_request_flow(flow) -> bool:
    """True for the ad list request (/req)."""
    return is_ad_api_flow(flow) and _path_matches(flow, AD_REQUEST_PATTERN)


def is_impression_flow(flow) -> bool:
    """True for impression tracking calls (/imp)."""
    return is_ad_api_flow(flow) and _path_matches(flow, AD_IMPRESSION_PATTERN)


def is_click_flow(flow) -> bool:
    """True for click tracking calls (v2 /click)."""
    return is_ad_api_flow(flow) and _path_matches(flow, AD_CLICK_PATTERN)


def is_tiara_flow(flow) -> bool:
    """True if the flow is HTTP and targets the Tiara analytics host."""
    return _host_is(flow, TIARA_API_HOST)


is_analytics_flow = is_tiara_flow
