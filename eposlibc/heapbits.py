"""Bit tricks, size rounding and list indexing for a two-level segregated-fit heap.

The parameters are those of a 32-bit target: 4-byte alignment, 32-bit
``size_t`` and block sizes below ``1 << 30``.
"""

from __future__ import annotations

__all__ = [
    "SL_INDEX_COUNT_LOG2",
    "ALIGN_SIZE_LOG2",
    "ALIGN_SIZE",
    "FL_INDEX_MAX",
    "SL_INDEX_COUNT",
    "FL_INDEX_SHIFT",
    "FL_INDEX_COUNT",
    "SMALL_BLOCK_SIZE",
    "BLOCK_HEADER_SIZE",
    "BLOCK_HEADER_OVERHEAD",
    "BLOCK_START_OFFSET",
    "BLOCK_SIZE_MIN",
    "BLOCK_SIZE_MAX",
    "SIZE_MASK",
    "fls",
    "ffs",
    "fls_sizet",
    "align_up",
    "align_down",
    "adjust_request_size",
    "mapping_insert",
    "mapping_search",
]

SL_INDEX_COUNT_LOG2 = 5
ALIGN_SIZE_LOG2 = 2
ALIGN_SIZE = 1 << ALIGN_SIZE_LOG2
FL_INDEX_MAX = 30
SL_INDEX_COUNT = 1 << SL_INDEX_COUNT_LOG2
FL_INDEX_SHIFT = SL_INDEX_COUNT_LOG2 + ALIGN_SIZE_LOG2
FL_INDEX_COUNT = FL_INDEX_MAX - FL_INDEX_SHIFT + 1
SMALL_BLOCK_SIZE = 1 << FL_INDEX_SHIFT

_WORD = 4
SIZE_MASK = (1 << 32) - 1

# Header layout: prev_phys_block, size, next_free, prev_free.
BLOCK_HEADER_SIZE = 4 * _WORD
# Only the size field is visible to a used block.
BLOCK_HEADER_OVERHEAD = _WORD
# User data starts right after the size field.
BLOCK_START_OFFSET = 2 * _WORD
BLOCK_SIZE_MIN = BLOCK_HEADER_SIZE - _WORD
BLOCK_SIZE_MAX = 1 << FL_INDEX_MAX


def fls(word: int) -> int:
    """Index of the highest set bit of a 32-bit word, or -1 if none is set."""
    return (word & 0xFFFFFFFF).bit_length() - 1


def ffs(word: int) -> int:
    """Index of the lowest set bit of a 32-bit word, or -1 if none is set."""
    word &= 0xFFFFFFFF
    return (word & -word).bit_length() - 1


def fls_sizet(size: int) -> int:
    """:func:`fls` for a ``size_t``, which is 32 bits wide here."""
    return fls(size)


def _check_alignment(align: int) -> None:
    if align <= 0 or align & (align - 1):
        raise ValueError(f"alignment must be a power of two, got {align}")


def align_up(x: int, align: int) -> int:
    """Round *x* up to a multiple of *align*, with ``size_t`` wrap-around."""
    _check_alignment(align)
    return ((x + align - 1) & ~(align - 1)) & SIZE_MASK


def align_down(x: int, align: int) -> int:
    """Round *x* down to a multiple of *align*."""
    _check_alignment(align)
    return (x - (x & (align - 1))) & SIZE_MASK


def adjust_request_size(size: int, align: int) -> int:
    """Aligned block size for a request, at least :data:`BLOCK_SIZE_MIN`.

    Returns 0 for a zero request or one not below :data:`BLOCK_SIZE_MAX`.
    """
    if size and size < BLOCK_SIZE_MAX:
        return max(align_up(size, align), BLOCK_SIZE_MIN)
    return 0


def mapping_insert(size: int) -> tuple[int, int]:
    """First- and second-level list indices for a free block of *size* bytes."""
    if size < SMALL_BLOCK_SIZE:
        return 0, size // (SMALL_BLOCK_SIZE // SL_INDEX_COUNT)
    fl = fls_sizet(size)
    sl = (size >> (fl - SL_INDEX_COUNT_LOG2)) ^ (1 << SL_INDEX_COUNT_LOG2)
    return fl - (FL_INDEX_SHIFT - 1), sl


def mapping_search(size: int) -> tuple[int, int]:
    """List indices for a request, rounded up to the next list's size class."""
    if size >= SMALL_BLOCK_SIZE:
        size = (size + (1 << (fls_sizet(size) - SL_INDEX_COUNT_LOG2)) - 1) & SIZE_MASK
    return mapping_insert(size)