"""
Tiara analytics event model.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class TiaraEvent:
    """One decoded element of a batched Tiara payload."""
    id: str
    """'<flow id>-<index in batch>'"""
    timestamp: float
    """Milliseconds since epoch."""
    action_type: str
    action_name: str
    page: str
    section: str
    summary: str
    raw_data: Dict[str, Any]
    """The decoded element, kept as-is for inspection."""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
