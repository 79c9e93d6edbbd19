"""State-machine benchmark: classify comma-separated numeric tokens."""

from __future__ import annotations

from enum import IntEnum
from collections.abc import MutableSequence

from rvmark.crc import crcu32

__all__ = [
    "CoreState",
    "NUM_CORE_STATES",
    "INT_PATTERNS",
    "FLOAT_PATTERNS",
    "SCI_PATTERNS",
    "ERR_PATTERNS",
    "init_state",
    "state_transition",
    "bench_state",
]


class CoreState(IntEnum):
    """States of the token-recognising machine."""

    START = 0
    INVALID = 1
    S1 = 2
    S2 = 3
    INT = 4
    FLOAT = 5
    EXPONENT = 6
    SCIENTIFIC = 7


NUM_CORE_STATES = len(CoreState)

INT_PATTERNS = (b"5012", b"1234", b"-874", b"+122")
FLOAT_PATTERNS = (b"35.54400", b".1234500", b"-110.700", b"+0.64400")
SCI_PATTERNS = (b"5.500e+3", b"-.123e-2", b"-87e+832", b"+0.6e-12")
ERR_PATTERNS = (b"T0.3e-1F", b"-T.T++Tq", b"1T3.4e4z", b"34.0e-T^")

_COMMA = ord(",")
_PLUS = ord("+")
_MINUS = ord("-")
_DOT = ord(".")
_UPPER_E = ord("E")
_LOWER_E = ord("e")


def _to_s16(value: int) -> int:
    value &= 0xFFFF
    return value - 0x10000 if value & 0x8000 else value


def _isdigit(c: int) -> bool:
    return 0x30 <= c <= 0x39


def _pattern_for(seed: int) -> bytes:
    kind = seed & 0x7
    which = (seed >> 3) & 0x3
    if kind <= 2:
        return INT_PATTERNS[which]
    if kind <= 4:
        return FLOAT_PATTERNS[which]
    if kind <= 6:
        return SCI_PATTERNS[which]
    return ERR_PATTERNS[which]


def init_state(size: int, seed: int) -> bytearray:
    """Build a ``size``-byte input of comma-terminated tokens, zero padded."""
    if size < 1:
        raise ValueError(f"state block size must be positive, got {size}")
    block = bytearray(size)
    limit = size - 1
    total = 0
    pattern = b""
    seed = _to_s16(seed)
    while total + len(pattern) + 1 < limit:
        if pattern:
            block[total:total + len(pattern)] = pattern
            block[total + len(pattern)] = _COMMA
            total += len(pattern) + 1
        seed = _to_s16(seed + 1)
        pattern = _pattern_for(seed)
    return block


def state_transition(
    data: bytes | bytearray,
    pos: int,
    transition_count: MutableSequence[int],
) -> tuple[CoreState, int]:
    """Scan one token starting at ``pos``.

    Returns the final state and the position where scanning stopped.  A zero
    byte or the end of ``data`` terminates the input.  ``transition_count``
    is updated with the transitions taken.
    """
    state = CoreState.START
    end = len(data)
    while pos < end and data[pos] != 0 and state != CoreState.INVALID:
        symbol = data[pos]
        if symbol == _COMMA:
            pos += 1
            break
        if state == CoreState.START:
            if _isdigit(symbol):
                state = CoreState.INT
            elif symbol in (_PLUS, _MINUS):
                state = CoreState.S1
            elif symbol == _DOT:
                state = CoreState.FLOAT
            else:
                state = CoreState.INVALID
                transition_count[CoreState.INVALID] += 1
            transition_count[CoreState.START] += 1
        elif state == CoreState.S1:
            if _isdigit(symbol):
                state = CoreState.INT
            elif symbol == _DOT:
                state = CoreState.FLOAT
            else:
                state = CoreState.INVALID
            transition_count[CoreState.S1] += 1
        elif state == CoreState.INT:
            if symbol == _DOT:
                state = CoreState.FLOAT
                transition_count[CoreState.INT] += 1
            elif not _isdigit(symbol):
                state = CoreState.INVALID
                transition_count[CoreState.INT] += 1
        elif state == CoreState.FLOAT:
            if symbol in (_UPPER_E, _LOWER_E):
                state = CoreState.S2
                transition_count[CoreState.FLOAT] += 1
            elif not _isdigit(symbol):
                state = CoreState.INVALID
                transition_count[CoreState.FLOAT] += 1
        elif state == CoreState.S2:
            state = CoreState.EXPONENT if symbol in (_PLUS, _MINUS) else CoreState.INVALID
            transition_count[CoreState.S2] += 1
        elif state == CoreState.EXPONENT:
            state = CoreState.SCIENTIFIC if _isdigit(symbol) else CoreState.INVALID
            transition_count[CoreState.EXPONENT] += 1
        elif state == CoreState.SCIENTIFIC:
            if not _isdigit(symbol):
                state = CoreState.INVALID
                transition_count[CoreState.INVALID] += 1
        pos += 1
    return state, pos


def _run_machine(
    memblock: bytearray, final_counts: list[int], track_counts: list[int]
) -> None:
    pos = 0
    while pos < len(memblock) and memblock[pos] != 0:
        state, pos = state_transition(memblock, pos, track_counts)
        final_counts[state] += 1


def _corrupt(memblock: bytearray, blksize: int, step: int, mask: int) -> None:
    mask &= 0xFF
    for pos in range(0, min(blksize, len(memblock)), step):
        if memblock[pos] != _COMMA:
            memblock[pos] ^= mask


def bench_state(
    blksize: int,
    memblock: bytearray,
    seed1: int,
    seed2: int,
    step: int,
    crc: int,
) -> int:
    """Run the state machine over ``memblock`` before and after corruption.

    Corruption XORs every ``step``-th non-comma byte with ``seed1`` and is
    undone with ``seed2``; ``memblock`` is modified in place.  Returns the CRC
    of the final-state and transition counts folded into ``crc``.
    """
    if step <= 0:
        raise ValueError(f"corruption step must be positive, got {step}")
    final_counts = [0] * NUM_CORE_STATES
    track_counts = [0] * NUM_CORE_STATES

    _run_machine(memblock, final_counts, track_counts)
    _corrupt(memblock, blksize, step, seed1)
    _run_machine(memblock, final_counts, track_counts)
    _corrupt(memblock, blksize, step, seed2)

    for final, track in zip(final_counts, track_counts):
        crc = crcu32(final, crc)
        crc = crcu32(track, crc)
    return crc