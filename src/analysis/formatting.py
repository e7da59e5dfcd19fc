"""Display helpers shared by the CLI tables."""
from datetime import datetime
from typing import Optional

from models.ad import AdStatus

STATUS_LABELS = {
    AdStatus.REQUESTED: "Requested",
    AdStatus.IMPRESSED: "Impressed",
    AdStatus.CLICKED: "Clicked",
}

STATUS_COLORS = {
    AdStatus.REQUESTED: "#6b7280",  # gray
    AdStatus.IMPRESSED: "#3b82f6",  # blue
    AdStatus.CLICKED: "#10b981",    # green
}


def format_timestamp(timestamp_ms: Optional[float]) -> str:
    """Local wall-clock time as HH:MM:SS.mmm, '-' when unknown or out of range."""
    if not timestamp_ms:
        return "-"
    try:
        dt = datetime.fromtimestamp(timestamp_ms / 1000)
    except (OverflowError, OSError, ValueError):
        return "-"
    return f"{dt.strftime('%H:%M:%S')}.{dt.microsecond // 1000:03d}"


def format_status(status: AdStatus) -> str:
    return STATUS_LABELS.get(status, str(status))


def status_color(status: AdStatus) -> str:
    return STATUS_COLORS.get(status, STATUS_COLORS[AdStatus.REQUESTED])


def format_number(num: float) -> str:
    return f"{num:,}"


def format_time(ms: float) -> str:
    """'250ms' below one second, '1.25s' above."""
    if ms < 1000:
        return f"{round(ms)}ms"
    return f"{ms / 1000:.2f}s"


def format_percentage(percent: float) -> str:
    return f"{percent:.1f}%"
