"""Owns the single active PageTracker for one running application."""

import logging
import time
from typing import Callable, Optional

from .environment import PageEnvironment
from .session import PageTracker

logger = logging.getLogger(__name__)


class TrackerProvider:
    """
    Hands out the application's tracker. The app creates one provider and
    passes it to whatever needs tracking; tests build their own.

    uninitialized -> active -> destroyed -> active (fresh session) ...
    """

    def __init__(
        self,
        environment: PageEnvironment,
        dispatcher,
        clock: Callable[[], float] = time.time,
    ):
        self.environment = environment
        self.dispatcher = dispatcher
        self.clock = clock
        self._tracker: Optional[PageTracker] = None

    def init(self) -> PageTracker:
        """Return the active tracker, creating one (new session id) if there is none."""
        if self._tracker is None:
            self._tracker = PageTracker(self.environment, self.dispatcher, clock=self.clock)
            logger.debug("Page tracker started: %s", self._tracker.session_id)
        return self._tracker

    def get(self) -> Optional[PageTracker]:
        return self._tracker

    def destroy(self) -> None:
        if self._tracker is not None:
            tracker, self._tracker = self._tracker, None
            tracker.destroy()
            logger.debug("Page tracker destroyed: %s", tracker.session_id)

    def track_page(self, pathname: str, search: str = "") -> None:
        """Route-change hook: init on first use, then track."""
        self.init().track_page(pathname, search)
