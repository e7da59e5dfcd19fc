"""
Ad tracking data models.

AdRecord values are frozen. The reducer "updates" a record by storing a
replacement built with dataclasses.replace(), never by mutating it.
"""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional


class TrackingEventType(str, Enum):
    REQUEST = "request"        # ad list request
    IMPRESSION = "impression"
    CLICK = "click"


class AdStatus(str, Enum):
    REQUESTED = "requested"
    IMPRESSED = "impressed"
    CLICKED = "clicked"

    @property
    def rank(self) -> int:
        """Position in the REQUESTED < IMPRESSED < CLICKED order."""
        return _STATUS_ORDER.index(self)


_STATUS_ORDER = (AdStatus.REQUESTED, AdStatus.IMPRESSED, AdStatus.CLICKED)


@dataclass(frozen=True)
class TrackingEvent:
    """A single lifecycle event, derived from exactly one flow."""
    type: TrackingEventType
    timestamp: float
    """Milliseconds since epoch (request start of the flow)."""
    flow_id: str


@dataclass(frozen=True)
class AdRecord:
    """
    Lifecycle state of one advertisement, keyed by adsid.

    title/subtitle/ad_imp/link would come from the ad list response.
    That enrichment is not performed, so title is a placeholder built
    from the adsid.
    """
    adsid: str
    title: str
    status: AdStatus = AdStatus.REQUESTED

    subtitle: Optional[str] = None
    ad_imp: Optional[str] = None
    """Impression tracking URL."""
    link: Optional[str] = None

    request_event: Optional[TrackingEvent] = None
    impression_event: Optional[TrackingEvent] = None
    click_event: Optional[TrackingEvent] = None

    request_time: Optional[float] = None
    impression_time: Optional[float] = None
    click_time: Optional[float] = None

    @property
    def sort_time(self) -> float:
        """Most relevant timestamp for newest-first listings."""
        return self.request_time or self.impression_time or self.click_time or 0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        for key in ("request_event", "impression_event", "click_event"):
            if data[key] is not None:
                data[key]["type"] = data[key]["type"].value
        return data


@dataclass(frozen=True)
class AdTrackingStats:
    """Counters shown above the ad table."""
    total: int
    impressed: int
    """Records that reached IMPRESSED or CLICKED."""
    clicked: int
    ctr: Optional[float]
    """clicked / total * 100, None when there are no records."""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
