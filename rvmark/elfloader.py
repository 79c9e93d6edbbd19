"""Load the loadable segments of a 32-bit ELF file into instruction/data memory.

Memory is one flat byte array: ``imem_size`` bytes of instruction memory
followed by ``dmem_size`` bytes of data memory.  Segments are read as
little-endian ELF32 program headers.
"""

from __future__ import annotations

import argparse
import struct
import sys
from collections.abc import Sequence
from pathlib import Path

__all__ = [
    "ElfLoadError",
    "DEFAULT_MEMSIZE_KB",
    "load_elf",
    "write_memory_images",
    "main",
]

DEFAULT_MEMSIZE_KB = 256
_DEFAULT_MEM_BYTES = DEFAULT_MEMSIZE_KB * 1024

EI_NIDENT = 16
EI_CLASS = 4
ELFCLASS32 = 1
PT_LOAD = 1

_EHDR = struct.Struct("<16sHHIIIIIHHHHHH")
_PHDR = struct.Struct("<8I")

IMEM_IMAGE = "imem.bin"
DMEM_IMAGE = "dmem.bin"


class ElfLoadError(Exception):
    """Raised when an ELF file cannot be read or does not fit in memory."""


def _s32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def _read_segment(data: bytes, offset: int, size: int) -> bytes:
    if size <= 0:
        raise ElfLoadError("File read fail")
    segment = data[offset:offset + size]
    if len(segment) < size:
        raise ElfLoadError("File read fail")
    return segment


def _load_elf32(
    data: bytes,
    mem: bytearray,
    imem_base: int,
    dmem_base: int,
    imem_size: int,
    dmem_size: int,
) -> None:
    if len(data) < _EHDR.size:
        raise ElfLoadError("File read fail")
    fields = _EHDR.unpack_from(data)
    phoff, phnum = fields[5], fields[10]
    table = data[phoff:phoff + _PHDR.size * phnum]
    if phnum == 0 or len(table) < _PHDR.size * phnum:
        raise ElfLoadError("File read fail")

    for p_type, p_offset, p_vaddr, _paddr, _filesz, p_memsz, _flags, _align in (
        _PHDR.iter_unpack(table)
    ):
        if p_type != PT_LOAD:
            continue
        vaddr = _s32(p_vaddr)
        memsz = _s32(p_memsz)
        end = _s32(p_vaddr + p_memsz)

        if vaddr >= imem_base and end <= imem_base + imem_size:
            start = vaddr - imem_base
        elif vaddr >= dmem_base and end <= dmem_base + dmem_size:
            start = imem_size + vaddr - dmem_base
        else:
            raise ElfLoadError(
                f"Error: memory {p_vaddr:08x} with size {memsz} out of range"
            )
        mem[start:start + memsz] = _read_segment(data, p_offset, memsz)


def load_elf(
    path: str | Path,
    imem_base: int = 0,
    dmem_base: int = _DEFAULT_MEM_BYTES,
    imem_size: int = _DEFAULT_MEM_BYTES,
    dmem_size: int = _DEFAULT_MEM_BYTES,
) -> bytearray:
    """Return memory holding the ELF file's ``PT_LOAD`` segments.

    The result is ``imem_size + dmem_size`` bytes, instruction memory first.
    Raises :class:`ElfLoadError` if the file cannot be read, is not an ELF32
    file, or has a segment outside both memories.
    """
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise ElfLoadError(f"Can not open file {path}") from exc

    ident = data[:EI_NIDENT]
    if len(ident) < EI_NIDENT:
        raise ElfLoadError(f"Can not read file {path}")
    if not (ident[0] == 0x7F or ident[1] == ord("E")):
        raise ElfLoadError(f"The file {path} is not an ELF format")
    if ident[EI_CLASS] != ELFCLASS32:
        raise ElfLoadError(f"The file {path} is not a 32-bit ELF file")

    mem = bytearray(imem_size + dmem_size)
    _load_elf32(data, mem, imem_base, dmem_base, imem_size, dmem_size)
    return mem


def write_memory_images(
    path: str | Path,
    memsize: int = DEFAULT_MEMSIZE_KB,
    out_dir: str | Path = ".",
) -> tuple[Path, Path]:
    """Load an ELF file and write ``imem.bin`` and ``dmem.bin`` images.

    ``memsize`` is the size of each memory in KiB; data memory starts right
    after instruction memory.  Returns the paths of the two images.
    """
    size = memsize * 1024
    if size <= 0:
        raise ValueError(f"memory size must be positive, got {memsize}")
    mem = load_elf(path, 0, size, size, size)
    directory = Path(out_dir)
    imem_path = directory / IMEM_IMAGE
    dmem_path = directory / DMEM_IMAGE
    imem_path.write_bytes(bytes(mem[:size]))
    dmem_path.write_bytes(bytes(mem[size:]))
    return imem_path, dmem_path


def main(argv: Sequence[str] | None = None) -> int:
    """Command entry point: write the memory images of an ELF file."""
    parser = argparse.ArgumentParser(
        description="Split an ELF32 program into instruction and data memory images."
    )
    parser.add_argument("elf", help="ELF file to load")
    parser.add_argument(
        "--memsize",
        type=int,
        default=DEFAULT_MEMSIZE_KB,
        help="size of each memory in KiB (default %(default)s)",
    )
    parser.add_argument(
        "--out-dir", default=".", help="directory for imem.bin and dmem.bin"
    )
    args = parser.parse_args(sys.argv[1:] if argv is None else list(argv))
    try:
        write_memory_images(args.elf, args.memsize, args.out_dir)
    except (ElfLoadError, ValueError) as exc:
        print(exc)
        print(f"Can not read elf file {args.elf}")
        return 1
    except OSError as exc:
        print(f"image write fail: {exc}")
        return 1
    return 0