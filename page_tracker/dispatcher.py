"""Fire-and-forget delivery of page-visit records to the analytics endpoint."""

import concurrent.futures
import logging
import threading
from typing import Union

import requests

import config
from data_schema import PageVisit

logger = logging.getLogger(__name__)


class VisitDispatcher:
    """
    At-most-once, no-guarantee delivery channel.

    Normal sends go through the API client on a single background worker, so
    records leave in the order send() was called. Unload sends bypass the
    worker and post from their own non-daemon thread: the request can outlive
    the unload event and the interpreter waits for it before exiting.
    Failures are logged at debug level and dropped.
    """

    def __init__(self, client, timeout: float = config.HTTP_TIMEOUT_SEC):
        self.client = client
        self.timeout = timeout
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="visit-dispatch"
        )
        self._unload_threads: list[threading.Thread] = []
        self._lock = threading.Lock()
        self._closed = False

    def send(self, visit: Union[PageVisit, dict], sync: bool = False) -> None:
        """Queue one record. Never raises, never blocks on the network."""
        try:
            # Snapshot now: the tracker keeps mutating its live record.
            body = visit.to_dict() if isinstance(visit, PageVisit) else dict(visit)
            if sync:
                self._send_unload(body)
            else:
                with self._lock:
                    if self._closed:
                        logger.debug("Dispatcher closed, dropping visit %s", body.get("page_path"))
                        return
                    self._executor.submit(self._deliver, body)
        except Exception as e:
            logger.debug("Failed to track page visit: %s", e)

    def _deliver(self, body: dict) -> None:
        try:
            self.client.track_page_visit(body)
        except Exception as e:
            logger.debug("Failed to track page visit %s: %s", body.get("page_path"), e)

    def _send_unload(self, body: dict) -> None:
        url = self.client.url_for(config.PAGE_VISIT_ENDPOINT)
        headers = {"Content-Type": "application/json", **self.client.auth_headers()}

        def _post():
            try:
                r = requests.post(url, json=body, headers=headers, timeout=self.timeout)
                if not r.ok:
                    logger.debug("Unload visit rejected: HTTP %s", r.status_code)
            except Exception as e:
                logger.debug("Failed to track page visit on unload: %s", e)

        t = threading.Thread(target=_post, name="visit-unload", daemon=False)
        t.start()
        with self._lock:
            self._unload_threads = [th for th in self._unload_threads if th.is_alive()]
            self._unload_threads.append(t)

    def close(self, wait: bool = True) -> None:
        """Stop accepting async sends. With wait, drain queued sends and join unload posts."""
        with self._lock:
            self._closed = True
            unload_threads = list(self._unload_threads)
        self._executor.shutdown(wait=wait)
        if wait:
            for t in unload_threads:
                t.join(self.timeout)
