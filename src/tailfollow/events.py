from __future__ import annotations
from collections import defaultdict
from typing import Callable, Dict, Iterable, List, Optional
import logging

from .errors import ArgumentError

logger = logging.getLogger(__name__)

Listener = Callable[..., object]


class EventEmitter:
    """
    Minimal listener registry.

    If `events` is given, only those names may be subscribed to. A listener
    that raises is logged and skipped; the remaining listeners still run.
    """

    def __init__(self, events: Optional[Iterable[str]] = None) -> None:
        self._events = frozenset(events) if events is not None else None
        self._listeners: Dict[str, List[Listener]] = defaultdict(list)

    def _check(self, event: str, listener: Listener) -> None:
        if self._events is not None and event not in self._events:
            raise ArgumentError(
                f"Unknown event {event!r}; expected one of {sorted(self._events)}"
            )
        if not callable(listener):
            raise ArgumentError(f"Listener for {event!r} must be callable, got {type(listener).__name__}")

    def on(self, event: str, listener: Listener) -> Listener:
        self._check(event, listener)
        self._listeners[event].append(listener)
        return listener

    def off(self, event: str, listener: Listener) -> None:
        try:
            self._listeners[event].remove(listener)
        except ValueError:
            pass

    def emit(self, event: str, *args: object) -> None:
        for fn in list(self._listeners.get(event, ())):
            try:
                fn(*args)
            except Exception:
                logger.exception("Listener for %r raised", event)
