"""16-bit CRC helpers and seed-argument parsing used by the benchmark."""

from __future__ import annotations

import re
from collections.abc import Sequence

__all__ = ["crcu8", "crcu16", "crcu32", "crc16", "parseval", "get_seed_args"]

_HEX_RE = re.compile(r"[0-9a-f]*")
_DEC_RE = re.compile(r"[0-9]*")


def _to_s32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def crcu8(data: int, crc: int) -> int:
    """Fold one byte into a 16-bit CRC (reflected polynomial 0xA001)."""
    data &= 0xFF
    crc &= 0xFFFF
    for _ in range(8):
        carry = (data ^ crc) & 1
        data >>= 1
        if carry:
            crc ^= 0x4002
        crc >>= 1
        if carry:
            crc |= 0x8000
    return crc


def crcu16(newval: int, crc: int) -> int:
    """Fold a 16-bit value into the CRC, low byte first."""
    crc = crcu8(newval & 0xFF, crc)
    return crcu8((newval >> 8) & 0xFF, crc)


def crc16(newval: int, crc: int) -> int:
    """Fold a signed 16-bit value into the CRC."""
    return crcu16(newval & 0xFFFF, crc)


def crcu32(newval: int, crc: int) -> int:
    """Fold a 32-bit value into the CRC, low half first."""
    newval &= 0xFFFFFFFF
    crc = crc16(newval & 0xFFFF, crc)
    return crc16(newval >> 16, crc)


def parseval(valstring: str) -> int:
    """Parse a decimal or ``0x`` hex number with optional ``K``/``M`` suffix.

    Parsing stops at the first character that is not a digit; an empty or
    malformed string yields 0.  The result wraps to a signed 32-bit value.
    """
    text = valstring
    sign = 1
    if text.startswith("-"):
        sign = -1
        text = text[1:]
    if text.startswith("0x"):
        digits = _HEX_RE.match(text, 2).group()
        value = int(digits, 16) if digits else 0
        rest = text[2 + len(digits):]
    else:
        digits = _DEC_RE.match(text).group()
        value = int(digits) if digits else 0
        rest = text[len(digits):]
    if rest.startswith("K"):
        value *= 1024
    elif rest.startswith("M"):
        value *= 1024 * 1024
    return _to_s32(value * sign)


def get_seed_args(i: int, argv: Sequence[str]) -> int:
    """Return the parsed value of ``argv[i]``, or 0 when it is absent."""
    if len(argv) > i:
        return parseval(argv[i])
    return 0