"""Page environment - the document/window the tracker observes (title, referrer, visibility, unload)."""

import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)

VISIBILITY_CHANGE = "visibilitychange"
BEFORE_UNLOAD = "beforeunload"
NAVIGATE = "navigate"

EVENTS = (VISIBILITY_CHANGE, BEFORE_UNLOAD, NAVIGATE)


class PageEnvironment:
    """
    Host-side state the tracker reads at record-creation time, plus the
    events it reacts to. Drivers (set_hidden, unload, navigate) are called by
    the host application or by a test.
    """

    def __init__(
        self,
        user_agent: str = "",
        title: str = "",
        referrer: str = "",
    ):
        self.user_agent = user_agent
        self.title = title
        self.referrer = referrer
        self.hidden = False
        self.pathname = "/"
        self.search = ""
        self._listeners: dict[str, list[Callable]] = {event: [] for event in EVENTS}

    def add_listener(self, event: str, callback: Callable) -> None:
        if event not in self._listeners:
            raise ValueError(f"Unknown event: {event}")
        self._listeners[event].append(callback)

    def remove_listener(self, event: str, callback: Callable) -> None:
        try:
            self._listeners[event].remove(callback)
        except (KeyError, ValueError):
            pass

    def listener_count(self, event: Optional[str] = None) -> int:
        if event is not None:
            return len(self._listeners.get(event, []))
        return sum(len(cbs) for cbs in self._listeners.values())

    def _emit(self, event: str, *args) -> None:
        for cb in list(self._listeners[event]):
            try:
                cb(*args)
            except Exception:
                logger.exception("Listener for %s failed", event)

    def set_hidden(self, hidden: bool) -> None:
        """Change page visibility; fires visibilitychange only on an actual change."""
        if hidden == self.hidden:
            return
        self.hidden = hidden
        self._emit(VISIBILITY_CHANGE)

    def unload(self) -> None:
        self._emit(BEFORE_UNLOAD)

    def navigate(self, pathname: str, search: str = "", title: Optional[str] = None) -> None:
        """Client-side route change. referrer is left alone, as document.referrer is."""
        self.pathname = pathname
        self.search = search
        if title is not None:
            self.title = title
        self._emit(NAVIGATE, pathname, search)
