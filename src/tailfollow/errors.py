from __future__ import annotations
from typing import Optional


class TailError(Exception):
    """Base class for everything tailfollow raises or reports."""


class ArgumentError(TailError, ValueError):
    """Malformed arguments to follow() or to a handle method."""


class WatchFailure(TailError):
    tag = "watch_failure"

    def __init__(self, detail: object = None) -> None:
        self.detail = detail
        msg = self.tag if detail is None else f"{self.tag}: {detail}"
        super().__init__(msg)


class ReadError(TailError):
    def __init__(self, path: str, cause: Optional[BaseException] = None) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"failed to read {path}: {cause}")
