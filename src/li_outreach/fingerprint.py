"""Short deterministic identifiers for lead records."""

from __future__ import annotations

_MASK = 0xFFFFFFFF


def _to_int32(value: int) -> int:
    value &= _MASK
    return value - (1 << 32) if value & 0x80000000 else value


def _utf16_units(text: str):
    data = text.encode("utf-16-le", "surrogatepass")
    for i in range(0, len(data), 2):
        yield data[i] | (data[i + 1] << 8)


def generate_hash(text: str) -> str:
    """Hash ``text`` into a short hex id.

    Rolling ``h * 31 + code`` over the UTF-16 code units (characters outside
    the BMP count as two surrogates) with signed 32-bit wraparound; the
    absolute value is rendered as lowercase hex. Not cryptographic: it only
    has to be stable for the same profile URL, matching ids already stored
    by the browser extension.
    """
    h = 0
    for code in _utf16_units(text):
        h = _to_int32((h << 5) - h + code)
    return format(abs(h), "x")
