"""
Tiara analytics payload decoding.

Tiara clients POST a JSON array of events to the analytics host. Each
element looks roughly like:

    {
      "action": {"type": "Click", "name": "banner"},
      "common": {"access_timestamp": 1700000000000, "page": "home",
                 "section": "top"},
      "viewimp_contents": [{"imp_id": "...", "copy": "..."}],
      "click_contents": [{"imp_id": "...", "copy": "..."}]
    }

Decoding is best-effort and never raises: an unreadable body yields no
events and a diagnostic on the injected logger.
"""
from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable, Dict, Iterable, List, Optional

from models.flow import Flow
from models.tiara import TiaraEvent

from .classifier import is_tiara_flow

_log = logging.getLogger(__name__)

PLACEHOLDER = "-"

# (contents key, value key, label, max values)
SUMMARY_GROUPS = (
    ("viewimp_contents", "imp_id", "imp_id", 3),
    ("viewimp_contents", "copy", "copy", 2),
    ("click_contents", "imp_id", "click_imp_id", 3),
    ("click_contents", "copy", "click_copy", 2),
)


def _field(obj: Any, key: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(key)
    return None


def _present(value: Any) -> bool:
    """Falsy means None, False, 0 or an empty string. Empty containers count as present."""
    if value is None or value is False or value == "":
        return False
    if isinstance(value, (int, float)) and value == 0:
        return False
    return True


def _text_or_placeholder(value: Any) -> str:
    if not _present(value):
        return PLACEHOLDER
    return str(value)


def _decode_body(flow: Flow, log: logging.Logger) -> Optional[str]:
    content = flow.request.content
    if not content:
        return None
    if isinstance(content, str):
        return content
    if isinstance(content, (bytes, bytearray, memoryview)):
        try:
            return bytes(content).decode("utf-8")
        except UnicodeDecodeError as e:
            log.warning("Failed to decode Tiara request body of flow %s: %s", flow.id, e)
            return None
    log.warning("Unsupported Tiara request body type on flow %s: %s",
                flow.id, type(content).__name__)
    return None


def parse_request_body(flow: Flow, logger: Optional[logging.Logger] = None) -> Any:
    """Return the JSON-decoded request body, or None."""
    log = logger or _log
    text = _decode_body(flow, log)
    if text is None:
        return None
    try:
        return json.loads(text)
    except (ValueError, RecursionError) as e:
        log.warning("Failed to parse Tiara request body of flow %s: %s", flow.id, e)
        return None


def extract_summary(event_data: Dict[str, Any]) -> str:
    """
    Short human readable summary of the impression/click contents.

    e.g. 'imp_id: a, b, c | copy: Spring sale | click_imp_id: a'
    """
    parts = []
    for contents_key, value_key, label, limit in SUMMARY_GROUPS:
        contents = event_data.get(contents_key)
        if not isinstance(contents, list) or not contents:
            continue
        values = [
            str(value) for value in (_field(item, value_key) for item in contents)
            if _present(value)
        ][:limit]
        if values:
            parts.append(f"{label}: {', '.join(values)}")
    return " | ".join(parts) or PLACEHOLDER


def _event_timestamp(common: Any, clock: Callable[[], float]) -> float:
    access = _field(common, "access_timestamp")
    if isinstance(access, (int, float)) and not isinstance(access, bool) and access:
        return access
    return int(clock() * 1000)


def parse_tiara_events(flow: Flow, logger: Optional[logging.Logger] = None,
                       clock: Callable[[], float] = time.time) -> List[TiaraEvent]:
    """
    Decode the Tiara events carried by one flow.

    Args:
        flow: Any flow; non-Tiara flows yield [].
        logger: Diagnostic sink for unreadable bodies (module logger if None).
        clock: Seconds-since-epoch source used when an event has no
            access_timestamp.

    Returns:
        One TiaraEvent per array element that has both "action" and
        "common". Other elements are skipped.
    """
    log = logger or _log
    if not is_tiara_flow(flow):
        return []

    body = parse_request_body(flow, log)
    if body is None:
        return []
    if not isinstance(body, list):
        log.warning("Tiara request body of flow %s is not an array (%s)",
                    flow.id, type(body).__name__)
        return []

    events = []
    for index, event_data in enumerate(body):
        if not isinstance(event_data, dict):
            log.debug("Skipping non-object Tiara element %d of flow %s", index, flow.id)
            continue

        action = event_data.get("action")
        common = event_data.get("common")
        if not _present(action) or not _present(common):
            continue

        events.append(TiaraEvent(
            id=f"{flow.id}-{index}",
            timestamp=_event_timestamp(common, clock),
            action_type=_text_or_placeholder(_field(action, "type")),
            action_name=_text_or_placeholder(_field(action, "name")),
            page=_text_or_placeholder(_field(common, "page")),
            section=_text_or_placeholder(_field(common, "section")),
            summary=extract_summary(event_data),
            raw_data=event_data,
        ))

    return events


def parse_tiara_flows(flows: Iterable[Flow], logger: Optional[logging.Logger] = None,
                      clock: Callable[[], float] = time.time) -> List[TiaraEvent]:
    """Decode every Tiara flow in order and concatenate the events."""
    events = []
    for flow in flows:
        events.extend(parse_tiara_events(flow, logger=logger, clock=clock))
    return events


def extract_unique_action_types(events: Iterable[TiaraEvent]) -> List[str]:
    """Distinct action types, sorted, without the '-' placeholder."""
    types = {
        event.action_type for event in events
        if event.action_type and event.action_type != PLACEHOLDER
    }
    return sorted(types)


def filter_tiara_events(events: Iterable[TiaraEvent], action_type: Optional[str] = None,
                        search: str = "") -> List[TiaraEvent]:
    """
    Keep events of one action type and/or matching a search string.

    search is matched case-insensitively against action name, page,
    section and summary.
    """
    selected = list(events)
    if action_type:
        selected = [event for event in selected if event.action_type == action_type]
    if search:
        query = search.lower()
        selected = [
            event for event in selected
            if any(query in field.lower() for field in
                   (event.action_name, event.page, event.section, event.summary))
        ]
    return selected
