"""Benchmark driver: set up the data, run and time the algorithms, report.

The three algorithms (linked list, matrix, state machine) share one memory
budget.  Runs with the well-known seed/size combinations are checked against
their reference CRC values.
"""

from __future__ import annotations

import platform
import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import IntFlag

from rvmark.crc import crc16, crcu16, get_seed_args
from rvmark.linkedlist import CoreResults, bench_list, list_init
from rvmark.matrix import init_matrix
from rvmark.state import init_state
from rvmark.timing import (
    CLOCKS_PER_SEC,
    DEFAULT_NUM_CONTEXTS,
    Timer,
    time_in_secs,
)

__all__ = [
    "Algorithm",
    "ALL_ALGORITHMS_MASK",
    "NUM_ALGORITHMS",
    "TOTAL_DATA_SIZE",
    "LIST_KNOWN_CRC",
    "MATRIX_KNOWN_CRC",
    "STATE_KNOWN_CRC",
    "BenchmarkReport",
    "iterate",
    "prepare",
    "run",
    "main",
]


class Algorithm(IntFlag):
    """Bits selecting which algorithms run."""

    LIST = 1 << 0
    MATRIX = 1 << 1
    STATE = 1 << 2


ALL_ALGORITHMS_MASK = int(Algorithm.LIST | Algorithm.MATRIX | Algorithm.STATE)
NUM_ALGORITHMS = 3
TOTAL_DATA_SIZE = 2 * 1000
MEMORY_LOCATION = "STACK"

LIST_KNOWN_CRC = (0xD4B0, 0x3340, 0x6A79, 0xE714, 0xE3C1)
MATRIX_KNOWN_CRC = (0xBE52, 0x1199, 0x5608, 0x1FD7, 0x0747)
STATE_KNOWN_CRC = (0x5E47, 0x39BF, 0xE5A4, 0x8E3A, 0x8D84)

# Seed CRC of a known run -> (index into the known CRC tables, description).
_KNOWN_RUNS = {
    0x8A02: (0, "6k performance run parameters for coremark."),
    0x7B05: (1, "6k validation run parameters for coremark."),
    0x4EAF: (2, "Profile generation run parameters for coremark."),
    0xE9F5: (3, "2K performance run parameters for coremark."),
    0x18F2: (4, "2K validation run parameters for coremark."),
}


def _to_s16(value: int) -> int:
    value &= 0xFFFF
    return value - 0x10000 if value & 0x8000 else value


def _to_s32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def _default_compiler_version() -> str:
    return f"{platform.python_implementation()} {platform.python_version()}"


@dataclass
class BenchmarkReport:
    """Outcome of one benchmark run."""

    size: int
    total_ticks: int
    iterations: int
    seedcrc: int
    execs: int
    crclist: int
    crcmatrix: int
    crcstate: int
    crcfinal: int
    known_id: int = -1
    run_label: str | None = None
    error_messages: list[str] = field(default_factory=list)
    total_errors: int = 0
    compiler_version: str = field(default_factory=_default_compiler_version)
    compiler_flags: str = ""
    memory_location: str = MEMORY_LOCATION

    @property
    def seconds(self) -> float:
        """Timed duration in seconds."""
        return time_in_secs(self.total_ticks)

    @property
    def total_iterations(self) -> int:
        """Iterations summed over all contexts."""
        return DEFAULT_NUM_CONTEXTS * self.iterations

    @property
    def validated(self) -> bool:
        """True when the run matched a known result without errors."""
        return self.total_errors == 0

    def _iterations_per_sec(self) -> float:
        secs = self.seconds
        if secs == 0:
            return float("inf")
        return self.total_iterations / secs

    def format(self) -> str:
        """Render the report as printed at the end of a run."""
        lines: list[str] = []
        if self.run_label:
            lines.append(self.run_label)
        lines.extend(self.error_messages)
        lines.append(f"CoreMark Size    : {self.size}")
        lines.append(f"Total ticks      : {self.total_ticks}")
        lines.append(f"Total time (secs): {self.seconds:f}")
        if self.seconds > 0:
            lines.append(f"Iterations/Sec   : {self._iterations_per_sec():f}")
        lines.append(f"Iterations       : {self.total_iterations}")
        lines.append(f"Compiler version : {self.compiler_version}")
        lines.append(f"Compiler flags   : {self.compiler_flags}")
        lines.append(f"Memory location  : {self.memory_location}")
        lines.append(f"seedcrc          : 0x{self.seedcrc:04x}")
        if self.execs & Algorithm.LIST:
            lines.append(f"[0]crclist       : 0x{self.crclist:04x}")
        if self.execs & Algorithm.MATRIX:
            lines.append(f"[0]crcmatrix     : 0x{self.crcmatrix:04x}")
        if self.execs & Algorithm.STATE:
            lines.append(f"[0]crcstate      : 0x{self.crcstate:04x}")
        lines.append(f"[0]crcfinal      : 0x{self.crcfinal:04x}")
        if self.total_errors == 0:
            lines.append(
                "Correct operation validated. See README.md for run and "
                "reporting rules."
            )
            if self.known_id == 3:
                rate = self._iterations_per_sec()
                lines.append(
                    f"CoreMark 1.0 : {rate:f} / {self.compiler_version} "
                    f"{self.compiler_flags} / {self.memory_location}"
                )
                lines.append(
                    f"CoreMark/MHz: {rate / (CLOCKS_PER_SEC / 1000000.0):f}"
                )
        if self.total_errors > 0:
            lines.append("Errors detected")
        if self.total_errors < 0:
            lines.append(
                "Cannot validate operation for these seed values, please "
                "compare with results on a known platform."
            )
        return "\n".join(lines) + "\n"


def iterate(res: CoreResults) -> int:
    """Run the list benchmark ``res.iterations`` times; return the final CRC.

    Resets the output CRCs first; ``res.crclist`` records the CRC after the
    first iteration.
    """
    res.crc = 0
    res.crclist = 0
    res.crcmatrix = 0
    res.crcstate = 0
    for i in range(res.iterations):
        res.crc = crcu16(bench_list(res, 1), res.crc)
        res.crc = crcu16(bench_list(res, -1), res.crc)
        if i == 0:
            res.crclist = res.crc
    return res.crc


def prepare(
    seed1: int,
    seed2: int,
    seed3: int,
    iterations: int = 0,
    execs: int = 0,
    total_size: int = TOTAL_DATA_SIZE,
) -> CoreResults:
    """Apply the seed defaults, split the memory budget and build the data.

    Seeds ``0, 0, 0`` select the performance run and ``1, 0, 0`` the
    validation run.  ``execs`` of 0 selects all algorithms.
    """
    seed1, seed2, seed3 = _to_s16(seed1), _to_s16(seed2), _to_s16(seed3)
    execs &= 0xFFFFFFFF
    if execs == 0:
        execs = ALL_ALGORITHMS_MASK
    if (seed1, seed2, seed3) == (0, 0, 0):
        seed3 = 0x66
    elif (seed1, seed2, seed3) == (1, 0, 0):
        seed1, seed2, seed3 = 0x3415, 0x3415, 0x66

    selected = [alg for alg in Algorithm if execs & alg]
    if not selected:
        raise ValueError(f"no algorithm selected by execs mask {execs:#x}")
    if total_size <= 0:
        raise ValueError(f"total data size must be positive, got {total_size}")
    size = (total_size & 0xFFFFFFFF) // len(selected)

    res = CoreResults(
        seed1=seed1,
        seed2=seed2,
        seed3=seed3,
        size=size,
        iterations=iterations & 0xFFFFFFFF,
        execs=execs,
    )
    if execs & Algorithm.LIST:
        res.head = list_init(size, seed1)
    if execs & Algorithm.MATRIX:
        res.mat = init_matrix(size, _to_s32(seed1 | (seed2 << 16)))
    if execs & Algorithm.STATE:
        res.state = init_state(size, seed1)
    return res


def _calibrate(res: CoreResults, timer: Timer) -> int:
    """Choose an iteration count that runs for roughly ten seconds."""
    secs_passed = 0.0
    res.iterations = 1
    while secs_passed < 1:
        res.iterations *= 10
        timer.start()
        iterate(res)
        timer.stop()
        secs_passed = time_in_secs(timer.elapsed_ticks())
    divisor = int(secs_passed) or 1
    return res.iterations * (1 + 10 // divisor)


def run(
    seed1: int,
    seed2: int,
    seed3: int,
    iterations: int = 0,
    execs: int = 0,
    total_size: int = TOTAL_DATA_SIZE,
    clock: Callable[[], int] | None = None,
) -> BenchmarkReport:
    """Prepare, time and validate a benchmark run.

    ``iterations`` of 0 calibrates the count automatically.  ``clock``
    supplies tick counts for timing (see :class:`rvmark.timing.Timer`).
    """
    res = prepare(seed1, seed2, seed3, iterations, execs, total_size)
    timer = Timer(clock)
    if res.iterations == 0:
        res.iterations = _calibrate(res, timer)

    timer.start()
    iterate(res)
    timer.stop()
    total_ticks = timer.elapsed_ticks()

    seedcrc = 0
    for value in (res.seed1, res.seed2, res.seed3, res.size):
        seedcrc = crc16(value, seedcrc)

    known_id, label = _KNOWN_RUNS.get(seedcrc, (-1, None))
    total_errors = -1 if known_id < 0 else 0
    messages: list[str] = []
    if known_id >= 0:
        checks = (
            (Algorithm.LIST, "list", res.crclist, LIST_KNOWN_CRC),
            (Algorithm.MATRIX, "matrix", res.crcmatrix, MATRIX_KNOWN_CRC),
            (Algorithm.STATE, "state", res.crcstate, STATE_KNOWN_CRC),
        )
        for alg, name, got, table in checks:
            expected = table[known_id]
            if res.execs & alg and got != expected:
                messages.append(
                    f"[0]ERROR! {name} crc 0x{got:04x} - should be 0x{expected:04x}"
                )
        res.err = len(messages)
        total_errors += res.err

    return BenchmarkReport(
        size=res.size,
        total_ticks=total_ticks,
        iterations=res.iterations,
        seedcrc=seedcrc,
        execs=res.execs,
        crclist=res.crclist,
        crcmatrix=res.crcmatrix,
        crcstate=res.crcstate,
        crcfinal=res.crc,
        known_id=known_id,
        run_label=label,
        error_messages=messages,
        total_errors=total_errors,
    )


def main(argv: Sequence[str] | None = None) -> int:
    """Command entry point.

    Positional arguments: seed1 seed2 seed3 iterations execs _ total_size,
    each decimal or ``0x`` hex with an optional ``K``/``M`` suffix.
    """
    args = ["rvmark", *(sys.argv[1:] if argv is None else argv)]
    size_override = _to_s16(get_seed_args(7, args))
    report = run(
        seed1=get_seed_args(1, args),
        seed2=get_seed_args(2, args),
        seed3=get_seed_args(3, args),
        iterations=get_seed_args(4, args),
        execs=get_seed_args(5, args),
        total_size=size_override if size_override != 0 else TOTAL_DATA_SIZE,
    )
    sys.stdout.write(report.format())
    return 0