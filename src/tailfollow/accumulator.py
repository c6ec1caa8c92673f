from __future__ import annotations
from typing import List, Tuple

from .newline import deduce


def split_raw(buffer: bytes) -> Tuple[int, List[bytes], bytes]:
    """
    Split a byte buffer into complete, undecoded lines.

    Returns (bytes_consumed, lines, style). The last segment after the final
    separator is always treated as incomplete, even when it is empty, so
    removing bytes_consumed from the front of buffer leaves only the
    trailing partial line.
    """
    style = deduce(buffer)
    if not buffer:
        return 0, [], style

    complete = bytes(buffer).split(style)[:-1]
    consumed = sum(len(p) for p in complete) + len(style) * len(complete)
    return consumed, complete, style


def split(buffer: bytes, encoding: str = "utf-8", errors: str = "replace") -> Tuple[int, List[str]]:
    consumed, lines, _ = split_raw(buffer)
    return consumed, [p.decode(encoding, errors) for p in lines]


def drain(buffer: bytearray) -> Tuple[int, List[bytes], bytes]:
    """Like split_raw(), but drops the consumed prefix from buffer in place."""
    consumed, lines, style = split_raw(buffer)
    if consumed:
        del buffer[:consumed]
    return consumed, lines, style
