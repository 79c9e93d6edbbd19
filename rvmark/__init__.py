"""CPU benchmark with CRC-checked list, matrix and state workloads, and an ELF32 memory-image loader."""

__version__ = "0.1.0"
__all__ = ["benchmark", "crc", "elfloader", "linkedlist", "matrix", "state", "timing"]