from __future__ import annotations

LF = b"\n"
CRLF = b"\r\n"

_NAMES = {LF: "LF", CRLF: "CRLF"}


def deduce(sample: bytes) -> bytes:
    """Return CRLF if the sample contains one anywhere, LF otherwise."""
    if CRLF in sample:
        return CRLF
    return LF


def style_name(style: bytes) -> str:
    return _NAMES[style]
