"""Matrix benchmark: small integer matrix arithmetic folded into a CRC.

Matrices are flat, row-major lists of ``n * n`` integers.  Input matrices
hold signed 16-bit values and the result matrix holds signed 32-bit values;
all arithmetic wraps the same way fixed-width integers do.
"""

from __future__ import annotations

from collections.abc import MutableSequence, Sequence
from dataclasses import dataclass, field

from rvmark.crc import crc16

__all__ = [
    "MatParams",
    "init_matrix",
    "matrix_add_const",
    "matrix_mul_const",
    "matrix_mul_vect",
    "matrix_mul_matrix",
    "matrix_mul_matrix_bitextract",
    "matrix_sum",
    "matrix_test",
    "bench_matrix",
]

# Two 16-bit input matrices plus one 32-bit result matrix per element.
_BYTES_PER_ELEMENT = 2 * 4


def _to_s16(value: int) -> int:
    value &= 0xFFFF
    return value - 0x10000 if value & 0x8000 else value


def _to_s32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def _cmod(value: int, modulus: int) -> int:
    """Remainder that truncates toward zero, as fixed-width division does."""
    remainder = abs(value) % modulus
    return -remainder if value < 0 else remainder


def _bit_extract(value: int, start: int, width: int) -> int:
    return (value >> start) & ((1 << width) - 1)


@dataclass
class MatParams:
    """Dimension and storage of the matrices used by the benchmark."""

    n: int
    a: list[int] = field(default_factory=list)
    b: list[int] = field(default_factory=list)
    c: list[int] = field(default_factory=list)


def init_matrix(blksize: int, seed: int) -> MatParams:
    """Create matrices A, B and C that fit in ``blksize`` bytes.

    The dimension is the largest ``n`` with ``8 * n * n`` below ``blksize``.
    A holds small values (0..255), B medium 16-bit values, C is zeroed.
    A zero ``seed`` is treated as 1.
    """
    if blksize <= 0:
        raise ValueError(f"matrix block size must be positive, got {blksize}")
    i = 0
    used = 0
    while used < blksize:
        i += 1
        used = i * i * _BYTES_PER_ELEMENT
    n = i - 1

    seed = _to_s32(seed)
    if seed == 0:
        seed = 1

    a: list[int] = []
    b: list[int] = []
    for order in range(1, n * n + 1):
        seed = _cmod(_to_s32(order * seed), 65536)
        b_val = _to_s16(seed + order)
        b.append(b_val)
        a.append((b_val + order) & 0xFF)

    return MatParams(n=n, a=a, b=b, c=[0] * (n * n))


def matrix_add_const(n: int, a: MutableSequence[int], val: int) -> None:
    """Add ``val`` to every element of ``a`` in place, wrapping to 16 bits."""
    val = _to_s16(val)
    for idx in range(n * n):
        a[idx] = _to_s16(a[idx] + val)


def matrix_mul_const(
    n: int, c: MutableSequence[int], a: Sequence[int], val: int
) -> None:
    """Store ``a * val`` element-wise into ``c``."""
    val = _to_s16(val)
    for idx in range(n * n):
        c[idx] = _to_s32(a[idx] * val)


def matrix_mul_vect(
    n: int, c: MutableSequence[int], a: Sequence[int], b: Sequence[int]
) -> None:
    """Multiply ``a`` by the vector formed by the first ``n`` values of ``b``.

    Only the first ``n`` entries of ``c`` are written.
    """
    vector = b[:n]
    for i in range(n):
        row = a[i * n:(i + 1) * n]
        c[i] = _to_s32(sum(x * y for x, y in zip(row, vector)))


def matrix_mul_matrix(
    n: int, c: MutableSequence[int], a: Sequence[int], b: Sequence[int]
) -> None:
    """Store the matrix product ``a @ b`` into ``c``."""
    columns = [b[j:n * n:n] for j in range(n)]
    for i in range(n):
        row = a[i * n:(i + 1) * n]
        for j, column in enumerate(columns):
            c[i * n + j] = _to_s32(sum(x * y for x, y in zip(row, column)))


def matrix_mul_matrix_bitextract(
    n: int, c: MutableSequence[int], a: Sequence[int], b: Sequence[int]
) -> None:
    """Matrix product where each term is replaced by a product of bit fields.

    For each term ``t = a[i,k] * b[k,j]`` the value added is
    ``bits(t, 2, 4) * bits(t, 5, 7)``.
    """
    columns = [b[j:n * n:n] for j in range(n)]
    for i in range(n):
        row = a[i * n:(i + 1) * n]
        for j, column in enumerate(columns):
            total = 0
            for x, y in zip(row, column):
                term = _to_s32(x * y)
                total += _bit_extract(term, 2, 4) * _bit_extract(term, 5, 7)
            c[i * n + j] = _to_s32(total)


def matrix_sum(n: int, c: Sequence[int], clipval: int) -> int:
    """Score the elements of ``c``.

    A running total accumulates the elements; whenever it exceeds ``clipval``
    the score grows by 10 and the total resets, otherwise the score grows by
    1 if the element is larger than the previous one.
    """
    clipval = _to_s16(clipval)
    total = 0
    prev = 0
    ret = 0
    for cur in c[:n * n]:
        total = _to_s32(total + cur)
        if total > clipval:
            ret += 10
            total = 0
        elif cur > prev:
            ret += 1
        prev = cur
    return _to_s16(ret)


def matrix_test(
    n: int,
    c: MutableSequence[int],
    a: MutableSequence[int],
    b: Sequence[int],
    val: int,
) -> int:
    """Run every matrix operation once and return a CRC of the results.

    ``a`` is shifted by ``val`` for the duration and restored afterwards.
    """
    crc = 0
    val = _to_s16(val)
    clipval = _to_s16(0xF000 | val)

    matrix_add_const(n, a, val)
    matrix_mul_const(n, c, a, val)
    crc = crc16(matrix_sum(n, c, clipval), crc)
    matrix_mul_vect(n, c, a, b)
    crc = crc16(matrix_sum(n, c, clipval), crc)
    matrix_mul_matrix(n, c, a, b)
    crc = crc16(matrix_sum(n, c, clipval), crc)
    matrix_mul_matrix_bitextract(n, c, a, b)
    crc = crc16(matrix_sum(n, c, clipval), crc)
    matrix_add_const(n, a, -val)
    return _to_s16(crc)


def bench_matrix(params: MatParams, seed: int, crc: int) -> int:
    """Run :func:`matrix_test` with ``seed`` and fold its result into ``crc``."""
    result = matrix_test(params.n, params.c, params.a, params.b, _to_s16(seed))
    return crc16(result, crc)