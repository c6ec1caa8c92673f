from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, Optional
import asyncio
import logging

import aiofiles
import aiofiles.os

from .accumulator import drain
from .errors import ReadError
from .newline import LF

logger = logging.getLogger(__name__)


# -------------------------
# Model
# -------------------------
@dataclass
class FollowState:
    offset: int = 0
    last_modified_time: Optional[float] = None
    partial_buffer: bytearray = field(default_factory=bytearray)
    newline_style: bytes = LF
    success_emitted: bool = False
    closed: bool = False

    @property
    def read_position(self) -> int:
        # bytes already carried in partial_buffer are never read twice
        return self.offset + len(self.partial_buffer)

    def rewind(self) -> None:
        self.offset = 0
        self.partial_buffer.clear()


Emit = Callable[..., None]


# -------------------------
# Processing
# -------------------------
class ChangeProcessor:
    """
    Handles "file grew" notifications for one file.

    Every call to process() reads from the current read position to end of
    file and emits one ("line", filename, text) per complete line. Calls are
    serialized with a FIFO lock: the stat and the chunked read both suspend,
    and two overlapping calls would otherwise read the same byte range.
    """

    def __init__(
        self,
        filename: str,
        state: FollowState,
        emit: Emit,
        *,
        chunk_size: int = 64 * 1024,
        encoding: str = "utf-8",
        errors: str = "replace",
        detect_truncation: bool = False,
    ) -> None:
        self.filename = filename
        self.state = state
        self.emit = emit
        self.chunk_size = chunk_size
        self.encoding = encoding
        self.errors = errors
        self.detect_truncation = detect_truncation
        self._lock = asyncio.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    async def process(self) -> None:
        async with self._lock:
            await self._process()

    async def reset(self) -> None:
        async with self._lock:
            logger.debug("Rewinding %s (offset was %d)", self.filename, self.state.offset)
            self.state.rewind()

    def _emit_line(self, raw: bytes) -> None:
        # offset already covers these bytes; an undecodable line is reported and skipped
        try:
            text = raw.decode(self.encoding, self.errors)
        except UnicodeDecodeError as e:
            self.emit("error", self.filename, ReadError(self.filename, e))
            return
        self.emit("line", self.filename, text)

    async def _process(self) -> None:
        state = self.state
        if state.closed:
            return

        try:
            st = await aiofiles.os.stat(self.filename)
        except FileNotFoundError:
            # Usually mid-rotation; a create notification follows.
            logger.debug("%s vanished before stat", self.filename)
            return
        except OSError as e:
            self.emit("error", self.filename, ReadError(self.filename, e))
            return

        state.last_modified_time = st.st_mtime
        size = st.st_size

        if size < state.read_position and self.detect_truncation:
            logger.info(
                "%s shrank from %d to %d bytes, reading from start",
                self.filename, state.read_position, size,
            )
            state.rewind()

        if size <= state.read_position:
            return

        try:
            async with aiofiles.open(self.filename, "rb") as f:
                await f.seek(state.read_position)
                while True:
                    chunk = await f.read(self.chunk_size)
                    if not chunk or state.closed:
                        break
                    state.partial_buffer += chunk
                    consumed, lines, style = drain(state.partial_buffer)
                    state.newline_style = style
                    state.offset += consumed
                    for raw in lines:
                        self._emit_line(raw)
        except FileNotFoundError:
            logger.debug("%s vanished before read", self.filename)
        except OSError as e:
            self.emit("error", self.filename, ReadError(self.filename, e))
