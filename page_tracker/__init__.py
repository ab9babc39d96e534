"""Page-visit tracking - page classification, visible dwell time, best-effort delivery."""

from .classifier import PageInfo, extract_page_info
from .dispatcher import VisitDispatcher
from .environment import PageEnvironment
from .provider import TrackerProvider
from .session import PageTracker, generate_session_id

__all__ = [
    "PageInfo",
    "extract_page_info",
    "VisitDispatcher",
    "PageEnvironment",
    "TrackerProvider",
    "PageTracker",
    "generate_session_id",
]
