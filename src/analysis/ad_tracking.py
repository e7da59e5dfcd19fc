"""
Ad lifecycle reconstruction.

Folds a flow list into one AdRecord per advertisement id (adsid):

    /req   ad list request   -> recognized, contributes nothing yet
    /imp   impression        -> status IMPRESSED
    /click click             -> status CLICKED

Flows are processed once, in the order given. By default each event sets
its own status unconditionally, so an impression seen after a click moves
the record back to IMPRESSED. Pass monotonic=True to only ever advance.
"""
from __future__ import annotations

import dataclasses
import logging
from typing import Dict, Iterable, List, Optional
from urllib.parse import parse_qs, urlsplit

from models.ad import AdRecord, AdStatus, AdTrackingStats, TrackingEvent, TrackingEventType
from models.flow import Flow

from .classifier import is_ad_request_flow, is_click_flow, is_impression_flow

_log = logging.getLogger(__name__)

ADSID_PARAM = "adsid"


def extract_adsid(flow: Flow, logger: Optional[logging.Logger] = None) -> Optional[str]:
    """
    Return the adsid query parameter of an impression or click flow.

    When the parameter repeats, the last value wins. Returns None for other
    flows, when that value is missing or empty, or when the URL cannot be
    parsed.
    """
    log = logger or _log
    if not is_impression_flow(flow) and not is_click_flow(flow):
        return None

    request = flow.request
    url = f"{request.scheme}://{request.host}{request.path}"
    try:
        query = urlsplit(url).query
        params = parse_qs(query, keep_blank_values=True)
    except ValueError as e:
        log.debug("Failed to parse URL of flow %s: %s", flow.id, e)
        return None

    # a repeated parameter resolves to its last occurrence
    values = params.get(ADSID_PARAM)
    if not values or not values[-1]:
        return None
    return values[-1]


def parse_ad_request_response(flow: Flow) -> List[AdRecord]:
    """
    Ad metadata from an ad list (/req) response.

    The response body is not part of the captured flow record, so list
    metadata (title, subtitle, ad_imp, link) cannot be merged and this
    always yields no records.
    """
    if not is_ad_request_flow(flow) or flow.response is None:
        return []
    return []


def create_tracking_event(flow: Flow, event_type: TrackingEventType) -> TrackingEvent:
    """Build the event for a flow; timestamp is request start in ms."""
    start = flow.request.timestamp_start or 0
    return TrackingEvent(
        type=event_type,
        timestamp=start * 1000,
        flow_id=flow.id,
    )


def new_ad_record(adsid: str) -> AdRecord:
    """Placeholder record for an adsid seen before its metadata."""
    return AdRecord(
        adsid=adsid,
        title=f"Ad {adsid[:8]}...",
        status=AdStatus.REQUESTED,
    )


def _next_status(current: AdStatus, target: AdStatus, monotonic: bool) -> AdStatus:
    if monotonic and current.rank > target.rank:
        return current
    return target


def add_impression_event(ad: AdRecord, event: TrackingEvent, monotonic: bool = False) -> AdRecord:
    return dataclasses.replace(
        ad,
        impression_event=event,
        impression_time=event.timestamp,
        status=_next_status(ad.status, AdStatus.IMPRESSED, monotonic),
    )


def add_click_event(ad: AdRecord, event: TrackingEvent, monotonic: bool = False) -> AdRecord:
    return dataclasses.replace(
        ad,
        click_event=event,
        click_time=event.timestamp,
        status=_next_status(ad.status, AdStatus.CLICKED, monotonic),
    )


def build_ad_records(flows: Iterable[Flow], monotonic: bool = False,
                     logger: Optional[logging.Logger] = None) -> Dict[str, AdRecord]:
    """
    Reduce a flow list to {adsid: AdRecord}.

    Keys are in first-seen order. Impression/click flows without an adsid
    are skipped and never touch an existing record.
    """
    ads: Dict[str, AdRecord] = {}

    for flow in flows:
        # 1. Ad list request
        if is_ad_request_flow(flow) and flow.response is not None:
            for listed in parse_ad_request_response(flow):
                ads[listed.adsid] = listed
            continue

        # 2. Impression
        if is_impression_flow(flow):
            adsid = extract_adsid(flow, logger=logger)
            if adsid:
                existing = ads.get(adsid) or new_ad_record(adsid)
                event = create_tracking_event(flow, TrackingEventType.IMPRESSION)
                ads[adsid] = add_impression_event(existing, event, monotonic)
            continue

        # 3. Click
        if is_click_flow(flow):
            adsid = extract_adsid(flow, logger=logger)
            if adsid:
                existing = ads.get(adsid) or new_ad_record(adsid)
                event = create_tracking_event(flow, TrackingEventType.CLICK)
                ads[adsid] = add_click_event(existing, event, monotonic)

    return ads


def index_flows_to_ads(flows: Iterable[Flow]) -> Dict[str, str]:
    """Map impression/click flow ids to the adsid they carry."""
    index: Dict[str, str] = {}
    for flow in flows:
        adsid = extract_adsid(flow)
        if adsid:
            index[flow.id] = adsid
    return index


def select_ads(ads: Dict[str, AdRecord], search: str = "",
               status: Optional[AdStatus] = None) -> List[AdRecord]:
    """
    Filter and order records for display.

    search matches adsid or title, case-insensitively. Results are newest
    first by request time, else impression time, else click time.
    """
    selected = list(ads.values())

    if search:
        query = search.lower()
        selected = [
            ad for ad in selected
            if query in ad.adsid.lower() or query in ad.title.lower()
        ]

    if status is not None:
        selected = [ad for ad in selected if ad.status == status]

    return sorted(selected, key=lambda ad: ad.sort_time, reverse=True)


def ad_tracking_stats(ads: Dict[str, AdRecord]) -> AdTrackingStats:
    total = len(ads)
    impressed = sum(
        1 for ad in ads.values()
        if ad.status in (AdStatus.IMPRESSED, AdStatus.CLICKED)
    )
    clicked = sum(1 for ad in ads.values() if ad.status == AdStatus.CLICKED)
    ctr = (clicked / total) * 100 if total > 0 else None
    return AdTrackingStats(total=total, impressed=impressed, clicked=clicked, ctr=ctr)
