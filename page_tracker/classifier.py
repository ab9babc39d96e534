"""Map a portal URL path to a (page_type, page_id) pair."""

import re
from dataclasses import dataclass
from typing import Optional

from data_schema import PageType


@dataclass(frozen=True)
class PageInfo:
    page_type: Optional[PageType] = None
    page_id: Optional[str] = None


UNKNOWN_PAGE = PageInfo()

# (prefixes, page type, id pattern). First match wins; a None pattern means the
# route never addresses a single resource.
_ROUTES: list[tuple[tuple[str, ...], PageType, Optional[re.Pattern]]] = [
    (("/news",), PageType.NEWS, re.compile(r"^/news(?:/(\d+))?/?$")),
    (("/events", "/calendar"), PageType.EVENT, re.compile(r"/(?:events|calendar)(?:/(\d+))?/?$")),
    (("/instructions", "/library"), PageType.INSTRUCTION, re.compile(r"/(?:instructions|library)(?:/(\d+))?/?$")),
    (("/recordings",), PageType.RECORDING, re.compile(r"^/recordings(?:/(\d+))?/?$")),
    (("/faq",), PageType.FAQ, re.compile(r"^/faq(?:/(\d+))?/?$")),
    (("/profile",), PageType.PROFILE, None),
    (("/favorites",), PageType.FAVORITES, None),
    (("/notes",), PageType.NOTES, None),
]


def split_path(path: str) -> tuple[str, str]:
    """Split "/calendar/7?x=1" into ("/calendar/7", "?x=1"). A fragment is dropped."""
    path = path.split("#", 1)[0]
    if "?" in path:
        pathname, query = path.split("?", 1)
        return pathname, "?" + query
    return path, ""


def extract_page_info(pathname: str, search: str = "") -> PageInfo:
    """
    Classify a route. Never raises: anything unrecognised (or not a string)
    comes back as UNKNOWN_PAGE.
    """
    if not isinstance(pathname, str):
        return UNKNOWN_PAGE
    pathname, _ = split_path(pathname)

    if pathname in ("", "/"):
        return PageInfo(page_type=PageType.ONBOARDING)

    for prefixes, page_type, id_pattern in _ROUTES:
        if not pathname.startswith(prefixes):
            continue
        if id_pattern is None:
            return PageInfo(page_type=page_type)
        m = id_pattern.search(pathname)
        return PageInfo(page_type=page_type, page_id=m.group(1) if m else None)

    return UNKNOWN_PAGE
