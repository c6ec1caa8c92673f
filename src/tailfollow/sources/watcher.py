from __future__ import annotations
from typing import Optional
import asyncio
import logging
import os
import threading

from ..events import EventEmitter

logger = logging.getLogger(__name__)

WATCH_EVENTS = ("change", "create", "unlink", "success", "failure", "close")


class PollingWatcher(EventEmitter):
    """
    Stat-polling watch primitive for a single path.

    A background thread compares successive os.stat() results and posts
    notifications to the event loop that called start():
      - success  once the file is being watched (again after every re-create)
      - change   size or mtime changed
      - unlink   the path disappeared
      - create   the path reappeared, or now points to a different inode
      - failure  stat failed for any reason other than a missing file
      - close    after close()
    With persistent=False the thread is a daemon and does not keep the
    process alive.
    """

    def __init__(self, path: str, *, persistent: bool = True, poll_interval: float = 0.2) -> None:
        super().__init__(WATCH_EVENTS)
        self.path = path
        self.persistent = persistent
        self.poll_interval = poll_interval
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._stop = threading.Event()
        self._closed = False

    def start(self) -> None:
        if self._thread is not None:
            return
        self._loop = asyncio.get_running_loop()
        self._thread = threading.Thread(
            target=self._run,
            name=f"tailfollow-watch:{self.path}",
            daemon=not self.persistent,
        )
        self._thread.start()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._stop.set()
        if self._loop is not None:
            self._loop.call_soon(self.emit, "close")

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def _post(self, event: str, *args: object) -> bool:
        if self._stop.is_set():
            return False
        try:
            self._loop.call_soon_threadsafe(self.emit, event, *args)
        except RuntimeError:
            # loop already closed
            logger.debug("Event loop gone, stopping watcher for %s", self.path)
            self._stop.set()
            return False
        return True

    def _stat(self) -> Optional[os.stat_result]:
        try:
            return os.stat(self.path)
        except FileNotFoundError:
            return None

    def _run(self) -> None:
        try:
            st = self._stat()
        except OSError as e:
            self._post("failure", e)
            st = None
        else:
            if st is not None:
                self._post("success")

        while not self._stop.wait(self.poll_interval):
            try:
                st2 = self._stat()
            except OSError as e:
                self._post("failure", e)
                continue

            if st2 is None:
                if st is not None:
                    self._post("unlink")
                st = None
                continue

            if st is None:
                self._post("create")
                self._post("success")
                if st2.st_size > 0:
                    self._post("change")
            elif st2.st_ino != st.st_ino or st2.st_dev != st.st_dev:
                # replaced by rename without an observed gap
                self._post("unlink")
                self._post("create")
                self._post("success")
                if st2.st_size > 0:
                    self._post("change")
            elif st2.st_size != st.st_size or st2.st_mtime_ns != st.st_mtime_ns:
                self._post("change")
            st = st2
