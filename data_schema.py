"""
Shared data schema for the page tracker <-> analytics endpoint.

All structures are JSON-serializable for transport over HTTP.
"""

import re
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Optional


# ---------------------------------------------------------------------------
# Page / device classification
# ---------------------------------------------------------------------------


class PageType(str, Enum):
    """Coarse category of a portal route. Unknown routes carry no page type."""
    ONBOARDING = "onboarding"
    NEWS = "news"
    EVENT = "event"
    INSTRUCTION = "instruction"
    RECORDING = "recording"
    FAQ = "faq"
    PROFILE = "profile"
    FAVORITES = "favorites"
    NOTES = "notes"


class DeviceType(str, Enum):
    MOBILE = "mobile"
    TABLET = "tablet"
    DESKTOP = "desktop"


_TABLET_RE = re.compile(r"tablet|ipad|playbook|silk", re.IGNORECASE)
_MOBILE_RE = re.compile(
    r"mobile|iphone|ipod|android|blackberry|opera|mini|windows\sce|palm|smartphone|iemobile",
    re.IGNORECASE,
)


def _enum_or_none(enum_cls, value):
    try:
        return enum_cls(value) if value else None
    except ValueError:
        return None


def detect_device_type(user_agent: Optional[str]) -> DeviceType:
    """Tablet is checked first: iPad/Android tablet UAs also match the mobile pattern."""
    ua = user_agent or ""
    if _TABLET_RE.search(ua):
        return DeviceType.TABLET
    if _MOBILE_RE.search(ua):
        return DeviceType.MOBILE
    return DeviceType.DESKTOP


# ---------------------------------------------------------------------------
# Page visit (tracker -> POST /api/analytics/page-visit)
# ---------------------------------------------------------------------------


@dataclass
class PageVisit:
    """One page view. time_spent_seconds stays None until dwell time is computed."""

    page_path: str
    session_id: str
    page_title: Optional[str] = None
    page_type: Optional[PageType] = None
    page_id: Optional[str] = None
    referrer: Optional[str] = None
    time_spent_seconds: Optional[int] = None
    user_agent: Optional[str] = None
    device_type: Optional[DeviceType] = None

    def to_dict(self) -> dict:
        """Wire body: snake_case keys, enums as plain strings, None fields omitted."""
        d: dict = {}
        for k, v in asdict(self).items():
            if v is None:
                continue
            d[k] = v.value if isinstance(v, Enum) else v
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "PageVisit":
        """Parse a wire body or a stored row. Unrecognised page/device types (e.g. "unknown") become None."""
        page_type = d.get("page_type")
        device_type = d.get("device_type")
        time_spent = d.get("time_spent_seconds")
        return cls(
            page_path=d.get("page_path", ""),
            session_id=d.get("session_id", ""),
            page_title=d.get("page_title"),
            page_type=_enum_or_none(PageType, page_type),
            page_id=str(d["page_id"]) if d.get("page_id") is not None else None,
            referrer=d.get("referrer"),
            time_spent_seconds=int(time_spent) if time_spent is not None else None,
            user_agent=d.get("user_agent"),
            device_type=_enum_or_none(DeviceType, device_type),
        )
