from __future__ import annotations
from typing import Any, Callable, Optional, Set
import asyncio
import enum
import logging
import os
import stat

from .config import FollowConfig, coerce_config
from .errors import ArgumentError, WatchFailure
from .events import EventEmitter, Listener
from .processor import ChangeProcessor, FollowState
from .sources.watcher import PollingWatcher

logger = logging.getLogger(__name__)

SESSION_EVENTS = ("line", "error", "success", "close")

WatcherFactory = Callable[[str, FollowConfig], Any]


class SessionState(enum.Enum):
    INITIALIZING = "initializing"
    ACTIVE = "active"
    CLOSED = "closed"


def _polling_watcher(path: str, config: FollowConfig) -> PollingWatcher:
    return PollingWatcher(path, persistent=config.persistent, poll_interval=config.poll_interval)


class FollowSession:
    """
    Follows one file and re-publishes its complete lines.

    Events (subscribe with on()):
      line(filename, text), error(filename, reason),
      success(filename), close(filename)

    The watch primitive only tells us *that* something happened; reading is
    delegated to a ChangeProcessor, which serializes all work on the state.
    """

    def __init__(
        self,
        filename: str,
        config: FollowConfig,
        *,
        watcher_factory: Optional[WatcherFactory] = None,
    ) -> None:
        self.filename = filename
        self.config = config
        self.status = SessionState.INITIALIZING
        self.state = FollowState()

        self._loop = asyncio.get_running_loop()
        self._events = EventEmitter(SESSION_EVENTS)
        self._tasks: Set[asyncio.Task] = set()
        self._closed_event = asyncio.Event()
        self._watcher_factory = watcher_factory or _polling_watcher
        self._watcher: Any = None
        self._processor = ChangeProcessor(
            filename,
            self.state,
            self._emit,
            chunk_size=config.chunk_size,
            encoding=config.encoding,
            errors=config.errors,
            detect_truncation=config.detect_truncation,
        )

    # -------------------------
    # Public handle
    # -------------------------
    @property
    def closed(self) -> bool:
        return self.state.closed

    @property
    def watcher(self) -> Any:
        return self._watcher

    def on(self, event: str, listener: Listener) -> Listener:
        return self._events.on(event, listener)

    def off(self, event: str, listener: Listener) -> None:
        self._events.off(event, listener)

    def close(self) -> None:
        """
        Stop following. The close event is always delivered on a later loop
        iteration, so listeners registered right after close() still see it.
        """
        if self.state.closed:
            return
        self.state.closed = True
        self.status = SessionState.CLOSED
        logger.debug("Closing session for %s", self.filename)
        if self._watcher is not None:
            self._watcher.close()
        self._loop.call_soon(self._dispatch_close)

    async def wait_idle(self) -> None:
        """Wait until every queued change notification has been processed."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def wait_closed(self) -> None:
        """Wait for the close event and for the watcher's thread, if any, to exit."""
        await self._closed_event.wait()
        join = getattr(self._watcher, "join", None)
        if join is not None:
            await self._loop.run_in_executor(None, join)

    # -------------------------
    # Lifecycle
    # -------------------------
    def start(self) -> "FollowSession":
        try:
            st = os.stat(self.filename)
        except FileNotFoundError:
            raise FileNotFoundError(
                f"File not found: {self.filename}\n"
                f"Please check the file path and try again"
            )
        if not stat.S_ISREG(st.st_mode):
            raise ArgumentError(f"Not a regular file: {self.filename}")

        start_offset = self.config.start_offset
        self.state.offset = st.st_size if start_offset is None else start_offset
        self.state.last_modified_time = st.st_mtime

        watcher = self._watcher_factory(self.filename, self.config)
        watcher.on("change", self._on_change)
        watcher.on("create", self._on_rotate)
        watcher.on("unlink", self._on_rotate)
        watcher.on("success", self._on_success)
        watcher.on("failure", self._on_failure)
        watcher.on("close", self._on_watcher_close)
        self._watcher = watcher
        watcher.start()

        self.status = SessionState.ACTIVE
        logger.info("Following %s from offset %d", self.filename, self.state.offset)

        if self.state.offset < st.st_size:
            # backlog between the requested offset and the current end
            self._schedule(self._processor.process())
        return self

    def _schedule(self, coro) -> None:
        task = self._loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _emit(self, event: str, *args: object) -> None:
        if self.state.closed:
            logger.debug("Dropping %s event for closed session %s", event, self.filename)
            return
        self._events.emit(event, *args)

    def _dispatch_close(self) -> None:
        self._events.emit("close", self.filename)
        self._closed_event.set()

    # -------------------------
    # Watch notifications
    # -------------------------
    def _on_change(self, *_: object) -> None:
        if self.state.closed:
            return
        self._schedule(self._processor.process())

    def _on_rotate(self, *_: object) -> None:
        if self.state.closed:
            return
        logger.info("%s rotated, resetting read position", self.filename)
        if self.config.reset_success_on_rotation:
            self.state.success_emitted = False
        self._schedule(self._processor.reset())

    def _on_success(self, *_: object) -> None:
        if self.state.closed or self.state.success_emitted:
            return
        self.state.success_emitted = True
        self._emit("success", self.filename)

    def _on_failure(self, reason: object = None, *_: object) -> None:
        logger.warning("Watch failure on %s: %s", self.filename, reason)
        self._emit("error", self.filename, WatchFailure(reason))

    def _on_watcher_close(self, *_: object) -> None:
        logger.debug("Watcher for %s closed", self.filename)


def follow(
    filename: Any,
    config: Any = None,
    listener: Optional[Listener] = None,
    *,
    watcher_factory: Optional[WatcherFactory] = None,
) -> FollowSession:
    """
    Start following `filename` and return the session handle.

    Must be called from a coroutine (a running event loop is required).
    `listener`, if given, is subscribed to the line event.
    """
    if isinstance(filename, os.PathLike):
        filename = os.fspath(filename)
    if not isinstance(filename, str) or not filename:
        raise ArgumentError(f"filename must be a non-empty string, got {filename!r}")
    cfg = coerce_config(config)
    if listener is not None and not callable(listener):
        raise ArgumentError(f"listener must be callable, got {type(listener).__name__}")

    session = FollowSession(filename, cfg, watcher_factory=watcher_factory)
    if listener is not None:
        session.on("line", listener)
    return session.start()
