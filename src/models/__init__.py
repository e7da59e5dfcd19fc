"""
Flow input models and derived view models.
"""

from .flow import Flow, FlowRequest, FlowResponse
from .ad import AdRecord, AdStatus, AdTrackingStats, TrackingEvent, TrackingEventType
from .tiara import TiaraEvent
from .metrics import (
    DomainStat,
    MetricsReport,
    MetricsSummary,
    ResponseTimePoint,
    StatusCodeCount,
)

__all__ = [
    'Flow',
    'FlowRequest',
    'FlowResponse',
    'AdRecord',
    'AdStatus',
    'AdTrackingStats',
    'TrackingEvent',
    'TrackingEventType',
    'TiaraEvent',
    'MetricsSummary',
    'StatusCodeCount',
    'DomainStat',
    'ResponseTimePoint',
    'MetricsReport',
]
