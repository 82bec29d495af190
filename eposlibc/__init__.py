"""A compact C runtime library: memory and string routines, formatting, allocation, stdlib helpers and sorting."""

__version__ = "0.1.0"

__all__ = ["cstring", "heapbits", "intarith", "memory", "printf", "qsort", "stdlib", "tlsf"]