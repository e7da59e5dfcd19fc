"""
Derived views over captured flows: ad lifecycle, Tiara events, metrics.
"""

from .classifier import (
    is_ad_api_flow,
    is_ad_request_flow,
    is_analytics_flow,
    is_click_flow,
    is_impression_flow,
    is_tiara_flow,
)
from .ad_tracking import ad_tracking_stats, build_ad_records, extract_adsid, select_ads
from .tiara import extract_unique_action_types, parse_tiara_events, parse_tiara_flows
from .metrics import (
    calculate_domain_stats,
    calculate_metrics,
    calculate_response_time_over_time,
    calculate_status_codes,
    calculate_summary,
)

__all__ = [
    'is_ad_api_flow',
    'is_ad_request_flow',
    'is_impression_flow',
    'is_click_flow',
    'is_tiara_flow',
    'is_analytics_flow',
    'build_ad_records',
    'extract_adsid',
    'select_ads',
    'ad_tracking_stats',
    'parse_tiara_events',
    'parse_tiara_flows',
    'extract_unique_action_types',
    'calculate_summary',
    'calculate_status_codes',
    'calculate_domain_stats',
    'calculate_response_time_over_time',
    'calculate_metrics',
]
