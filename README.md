# rvmark

rvmark is a CPU benchmark written in plain Python. It also has a small
loader that turns 32-bit ELF executables into flat instruction and data
memory images for a small RISC-V core.

The benchmark runs three workloads over one shared memory budget:

- **linked list** (`rvmark.linkedlist`): find, reverse, remove and merge
  sort on a list of small records;
- **matrix** (`rvmark.matrix`): add, multiply and bit-extract on small
  integer matrices with fixed-width wrap-around;
- **state machine** (`rvmark.state`): a scanner that sorts comma-separated
  tokens into integers, floats, scientific numbers and invalid input.

Each workload folds its results into a 16-bit CRC (`rvmark.crc`). For the
well-known seed and size sets, the CRCs are checked against reference
values, so a run reports whether it computed the right answers as well as
how long it took.

## Installation

```
pip install .
```

With the test dependencies:

```
pip install .[test]
```

## Running the benchmark

```
rvmark 0x0 0x0 0x66 10
```

The positional arguments are, in order: seed1, seed2, seed3, the iteration
count and the algorithm mask (1 list, 2 matrix, 4 state; 0 selects all).
The sixth argument is ignored, and a non-zero seventh one replaces the total
data size of 2000 bytes, which is split evenly between the selected
algorithms. Values may be decimal or `0x` hex and may end in `K` or `M`;
missing values count as 0.

- Seeds `0 0 0` (or no seeds at all) become the performance run
  `0 0 0x66`.
- Seeds `1 0 0` become the validation run `0x3415 0x3415 0x66`.
- An iteration count of `0` makes the benchmark calibrate a count that runs
  for about ten seconds.

The report gives the data size, ticks and seconds taken, iterations per
second, the seed CRC and the list, matrix, state and final CRCs. It ends by
saying whether the run was validated, had errors, or used seeds that have no
reference values. Time is counted in ticks of a 100 MHz clock
(`rvmark.timing.cycle_clock`, built on `time.perf_counter_ns`).

## Using it from Python

```python
from rvmark.benchmark import run

report = run(0, 0, 0x66, 10, 0, 2000, None)
print(report.format())
print(report.validated, hex(report.crcfinal))
```

`run` takes an optional `clock` callable returning tick counts, which is
handed to `rvmark.timing.Timer`. `rvmark.benchmark.prepare` builds the
working data without running it, and `rvmark.benchmark.iterate` runs the
list pass (which drives the matrix and state workloads) a given number of
times.

The workloads can also be used one at a time:

```python
from rvmark.matrix import init_matrix, bench_matrix
from rvmark.state import init_state, bench_state

params = init_matrix(666, 1)
print(hex(bench_matrix(params, 0x22, 0)))

block = init_state(666, 0)
print(hex(bench_state(666, block, 0, 0, 0x22, 0)))
```

## Loading ELF images

```
rvmark-elfload program.elf --memsize 256 --out-dir build
```

This reads the `PT_LOAD` segments of a little-endian 32-bit ELF file.
Instruction memory starts at address 0 and data memory right after it; each
is `--memsize` KiB (default 256). Each segment goes into whichever memory
holds its whole address range, and the two memories are written out as
`imem.bin` and `dmem.bin` in `--out-dir` (default the current directory).
The command prints the reason and exits with status 1 if loading fails.

From Python, `rvmark.elfloader.load_elf` returns the combined memory as a
`bytearray`, and `rvmark.elfloader.write_memory_images` writes the two image
files and returns their paths. Both raise `ElfLoadError` when the file
cannot be read, is not an ELF file, is not 32-bit, or has a segment outside
both memories.

## What it does not do

rvmark does not simulate a processor: `imem.bin` and `dmem.bin` are meant
for a separate simulator, and nothing in this package runs them. The
benchmark runs one context only; there is no parallel execution.