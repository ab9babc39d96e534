"""Tracks time spent on each portal page and hands finished visits to the dispatcher."""

import logging
import random
import string
import time
from dataclasses import dataclass
from typing import Callable, Optional

from data_schema import PageVisit, detect_device_type

from .classifier import extract_page_info
from .environment import BEFORE_UNLOAD, VISIBILITY_CHANGE, PageEnvironment

logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_lowercase


def generate_session_id(clock: Callable[[], float] = time.time) -> str:
    """session_<ms timestamp>_<9 random base-36 chars>. Collisions are possible and acceptable."""
    suffix = "".join(random.choice(_BASE36) for _ in range(9))
    return f"session_{int(clock() * 1000)}_{suffix}"


@dataclass
class ActivePage:
    """The page currently being timed."""
    pathname: str
    visit: PageVisit
    start_time: float  # 0 while paused (page hidden)
    accumulated: float = 0.0


class PageTracker:
    """
    One tracker per session. Times the current page while it is visible and
    sends a visit record when the page starts and again, with dwell time, when
    the user moves on, unloads or the tracker is destroyed.

    Nothing raised in here reaches the caller: analytics is best-effort.
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
        self.session_id = generate_session_id(clock)
        self._current: Optional[ActivePage] = None
        self._destroyed = False

        environment.add_listener(VISIBILITY_CHANGE, self._on_visibility_change)
        environment.add_listener(BEFORE_UNLOAD, self._on_before_unload)

    @property
    def current_path(self) -> Optional[str]:
        return self._current.pathname if self._current else None

    @property
    def pending_visit(self) -> Optional[PageVisit]:
        return self._current.visit if self._current else None

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    def _record_time_spent(self) -> None:
        """Fold the running interval into the pending visit, then pause the timer."""
        page = self._current
        if page is None or page.start_time <= 0:
            return
        elapsed = self.clock() - page.start_time
        page.start_time = 0
        if elapsed > 0:
            page.accumulated += elapsed
            page.visit.time_spent_seconds = int(page.accumulated)

    def _send(self, visit: PageVisit, sync: bool = False) -> None:
        try:
            self.dispatcher.send(visit, sync=sync)
        except Exception as e:
            logger.debug("Failed to track page visit: %s", e)

    def _on_visibility_change(self) -> None:
        try:
            if self.environment.hidden:
                self._record_time_spent()
            elif self._current is not None:
                self._current.start_time = self.clock()
        except Exception as e:
            logger.debug("Visibility handling failed: %s", e)

    def _on_before_unload(self) -> None:
        try:
            self._record_time_spent()
            if self._current is not None:
                self._send(self._current.visit, sync=True)
        except Exception as e:
            logger.debug("Unload handling failed: %s", e)

    def track_page(self, pathname: str, search: str = "") -> None:
        """
        Start timing a new page. If a different page was current, its dwell
        time is finalized and it is sent first. The new page's record is sent
        straight away without time; the timed copy follows when the user leaves.
        """
        if self._destroyed:
            logger.debug("track_page(%s) on destroyed tracker ignored", pathname)
            return
        try:
            if self._current is not None and self._current.pathname != pathname:
                self._record_time_spent()
                self._send(self._current.visit)

            info = extract_page_info(pathname, search)
            env = self.environment
            visit = PageVisit(
                page_path=pathname + (search or ""),
                session_id=self.session_id,
                page_title=env.title or None,
                page_type=info.page_type,
                page_id=info.page_id,
                referrer=env.referrer or None,
                user_agent=env.user_agent or None,
                device_type=detect_device_type(env.user_agent),
            )
            # A page opened in a background tab starts paused.
            start = 0 if env.hidden else self.clock()
            self._current = ActivePage(pathname=pathname, visit=visit, start_time=start)
            self._send(visit)
        except Exception as e:
            logger.debug("track_page(%s) failed: %s", pathname, e)

    def destroy(self) -> None:
        """Finalize and flush the current page, then detach from the environment. Idempotent."""
        if self._destroyed:
            return
        self._destroyed = True
        try:
            self._record_time_spent()
            if self._current is not None:
                self._send(self._current.visit, sync=True)
        except Exception as e:
            logger.debug("Final page visit flush failed: %s", e)
        finally:
            self.environment.remove_listener(VISIBILITY_CHANGE, self._on_visibility_change)
            self.environment.remove_listener(BEFORE_UNLOAD, self._on_before_unload)
