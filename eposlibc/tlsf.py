"""Two-level segregated-fit memory allocator.

The allocator manages an integer address space. Block headers are kept as
allocator state rather than inside the managed bytes, so an allocator may
work with or without a backing ``bytearray``. When one is given, ``realloc``
moves block contents and :class:`Heap` can clear memory for ``calloc``.
All sizes and addresses follow a 32-bit target.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import NamedTuple, Optional

from .heapbits import (
    ALIGN_SIZE,
    BLOCK_HEADER_OVERHEAD,
    BLOCK_HEADER_SIZE,
    BLOCK_SIZE_MAX,
    BLOCK_SIZE_MIN,
    BLOCK_START_OFFSET,
    FL_INDEX_COUNT,
    SIZE_MASK,
    SL_INDEX_COUNT,
    adjust_request_size,
    align_down,
    ffs,
    mapping_insert,
    mapping_search,
)
from .memory import memcpy, memset

__all__ = [
    "CONTROL_SIZE",
    "POOL_OVERHEAD",
    "BlockInfo",
    "Tlsf",
    "Heap",
    "create_with_pool",
]

# Bytes taken by the control structure at the start of a self-hosted heap:
# the null block, the first-level bitmap, the second-level bitmaps and the
# free-list heads, all 32-bit words.
CONTROL_SIZE = (
    BLOCK_HEADER_SIZE + 4 + FL_INDEX_COUNT * 4 + FL_INDEX_COUNT * SL_INDEX_COUNT * 4
)
# A pool loses one free-block header and one sentinel header.
POOL_OVERHEAD = 2 * BLOCK_HEADER_OVERHEAD

_FREE_BIT = 1 << 0
_PREV_FREE_BIT = 1 << 1
_FLAG_BITS = _FREE_BIT | _PREV_FREE_BIT
_WORD_MASK = 0xFFFFFFFF

# The empty-list marker; block addresses are always multiples of 4.
_NULL = -1


class BlockInfo(NamedTuple):
    """One physical block of a pool, as seen by :meth:`Tlsf.walk_pool`."""

    ptr: int
    size: int
    used: bool


Walker = Callable[[int, int, bool], object]


def _align_ptr(ptr: int, align: int) -> int:
    return (ptr + (align - 1)) & ~(align - 1)


class Tlsf:
    """A TLSF allocator over one or more pools of addresses."""

    def __init__(self, memory: Optional[bytearray] = None) -> None:
        self.memory = memory
        self.pools: list[int] = []
        self._size: dict[int, int] = {}
        self._prev_phys: dict[int, int] = {}
        self._next_free: dict[int, int] = {}
        self._prev_free: dict[int, int] = {}
        self._fl_bitmap = 0
        self._sl_bitmap = [0] * FL_INDEX_COUNT
        self._blocks = [[_NULL] * SL_INDEX_COUNT for _ in range(FL_INDEX_COUNT)]

    # -- block header access -------------------------------------------

    def _bsize(self, block: int) -> int:
        return self._size[block] & ~_FLAG_BITS

    def _set_size(self, block: int, size: int) -> None:
        self._size[block] = size | (self._size.get(block, 0) & _FLAG_BITS)

    def _is_last(self, block: int) -> bool:
        return self._bsize(block) == 0

    def _is_free(self, block: int) -> bool:
        return bool(self._size[block] & _FREE_BIT)

    def _set_free(self, block: int) -> None:
        self._size[block] |= _FREE_BIT

    def _set_used(self, block: int) -> None:
        self._size[block] &= ~_FREE_BIT

    def _is_prev_free(self, block: int) -> bool:
        return bool(self._size[block] & _PREV_FREE_BIT)

    def _set_prev_free(self, block: int) -> None:
        self._size[block] |= _PREV_FREE_BIT

    def _set_prev_used(self, block: int) -> None:
        self._size[block] &= ~_PREV_FREE_BIT

    @staticmethod
    def _to_ptr(block: int) -> int:
        return block + BLOCK_START_OFFSET

    @staticmethod
    def _from_ptr(ptr: int) -> int:
        return ptr - BLOCK_START_OFFSET

    def _next(self, block: int) -> int:
        return self._to_ptr(block) + self._bsize(block) - BLOCK_HEADER_OVERHEAD

    def _link_next(self, block: int) -> int:
        nxt = self._next(block)
        self._prev_phys[nxt] = block
        return nxt

    def _mark_as_free(self, block: int) -> None:
        nxt = self._link_next(block)
        self._set_prev_free(nxt)
        self._set_free(block)

    def _mark_as_used(self, block: int) -> None:
        nxt = self._next(block)
        self._set_prev_used(nxt)
        self._set_used(block)

    def _header(self, ptr: int) -> int:
        block = self._from_ptr(ptr)
        if block not in self._size or self._is_last(block):
            raise ValueError(f"address {ptr:#x} is not a block of this allocator")
        return block

    # -- free lists ----------------------------------------------------

    def _remove_free_block(self, block: int, fl: int, sl: int) -> None:
        prev = self._prev_free[block]
        nxt = self._next_free[block]
        self._prev_free[nxt] = prev
        self._next_free[prev] = nxt
        if self._blocks[fl][sl] == block:
            self._blocks[fl][sl] = nxt
            if nxt == _NULL:
                self._sl_bitmap[fl] &= ~(1 << sl)
                if not self._sl_bitmap[fl]:
                    self._fl_bitmap &= ~(1 << fl)

    def _insert_free_block(self, block: int, fl: int, sl: int) -> None:
        current = self._blocks[fl][sl]
        self._next_free[block] = current
        self._prev_free[block] = _NULL
        self._prev_free[current] = block
        self._blocks[fl][sl] = block
        self._fl_bitmap |= 1 << fl
        self._sl_bitmap[fl] |= 1 << sl

    def _block_remove(self, block: int) -> None:
        self._remove_free_block(block, *mapping_insert(self._bsize(block)))

    def _block_insert(self, block: int) -> None:
        self._insert_free_block(block, *mapping_insert(self._bsize(block)))

    def _search_suitable_block(self, fl: int, sl: int) -> Optional[tuple[int, int, int]]:
        if fl >= FL_INDEX_COUNT:
            return None
        sl_map = self._sl_bitmap[fl] & ((_WORD_MASK << sl) & _WORD_MASK)
        if not sl_map:
            fl_map = self._fl_bitmap & ((_WORD_MASK << (fl + 1)) & _WORD_MASK)
            if not fl_map:
                return None
            fl = ffs(fl_map)
            sl_map = self._sl_bitmap[fl]
        sl = ffs(sl_map)
        return self._blocks[fl][sl], fl, sl

    # -- splitting and merging -----------------------------------------

    def _can_split(self, block: int, size: int) -> bool:
        return self._bsize(block) >= BLOCK_HEADER_SIZE + size

    def _split(self, block: int, size: int) -> int:
        remaining = self._to_ptr(block) + size - BLOCK_HEADER_OVERHEAD
        remain_size = self._bsize(block) - (size + BLOCK_HEADER_OVERHEAD)
        self._set_size(remaining, remain_size)
        self._set_size(block, size)
        self._mark_as_free(remaining)
        return remaining

    def _absorb(self, prev: int, block: int) -> int:
        self._size[prev] += self._bsize(block) + BLOCK_HEADER_OVERHEAD
        self._link_next(prev)
        for table in (self._size, self._prev_phys, self._next_free, self._prev_free):
            table.pop(block, None)
        return prev

    def _merge_prev(self, block: int) -> int:
        if self._is_prev_free(block):
            prev = self._prev_phys[block]
            self._block_remove(prev)
            block = self._absorb(prev, block)
        return block

    def _merge_next(self, block: int) -> int:
        nxt = self._next(block)
        if self._is_free(nxt):
            self._block_remove(nxt)
            block = self._absorb(block, nxt)
        return block

    def _trim_free(self, block: int, size: int) -> None:
        if self._can_split(block, size):
            remaining = self._split(block, size)
            self._link_next(block)
            self._set_prev_free(remaining)
            self._block_insert(remaining)

    def _trim_used(self, block: int, size: int) -> None:
        if self._can_split(block, size):
            remaining = self._split(block, size)
            self._set_prev_used(remaining)
            remaining = self._merge_next(remaining)
            self._block_insert(remaining)

    def _trim_free_leading(self, block: int, size: int) -> int:
        remaining = block
        if self._can_split(block, size):
            remaining = self._split(block, size - BLOCK_HEADER_OVERHEAD)
            self._set_prev_free(remaining)
            self._link_next(block)
            self._block_insert(block)
        return remaining

    def _locate_free(self, size: int) -> Optional[int]:
        if not size:
            return None
        found = self._search_suitable_block(*mapping_search(size))
        if found is None:
            return None
        block, fl, sl = found
        self._remove_free_block(block, fl, sl)
        return block

    def _prepare_used(self, block: Optional[int], size: int) -> Optional[int]:
        if block is None:
            return None
        self._trim_free(block, size)
        self._mark_as_used(block)
        return self._to_ptr(block)

    # -- pools ---------------------------------------------------------

    def add_pool(self, address: int, size: int) -> int:
        """Hand *size* bytes starting at *address* to the allocator.

        Returns the pool's address. Raises ValueError if the address is not
        aligned or the usable size is out of range.
        """
        if address % ALIGN_SIZE:
            raise ValueError(f"pool address must be aligned to {ALIGN_SIZE} bytes")
        pool_bytes = align_down((size - POOL_OVERHEAD) & SIZE_MASK, ALIGN_SIZE)
        if pool_bytes < BLOCK_SIZE_MIN or pool_bytes > BLOCK_SIZE_MAX:
            raise ValueError(
                f"pool size must be between {POOL_OVERHEAD + BLOCK_SIZE_MIN} "
                f"and {POOL_OVERHEAD + BLOCK_SIZE_MAX} bytes"
            )
        if self.memory is not None and (address < 0 or address + size > len(self.memory)):
            raise ValueError("pool does not fit in the backing memory")

        block = address - BLOCK_HEADER_OVERHEAD
        self._size[block] = pool_bytes | _FREE_BIT
        self._block_insert(block)

        sentinel = self._link_next(block)
        self._size[sentinel] = _PREV_FREE_BIT
        self.pools.append(address)
        return address

    def remove_pool(self, pool: int) -> None:
        """Take a pool with no live allocations back from the allocator."""
        block = pool - BLOCK_HEADER_OVERHEAD
        if block not in self._size or not self._is_free(block):
            raise ValueError(f"pool {pool:#x} is not a wholly free pool")
        nxt = self._next(block)
        if self._is_free(nxt) or self._bsize(nxt) != 0:
            raise ValueError(f"pool {pool:#x} is not a wholly free pool")
        self._remove_free_block(block, *mapping_insert(self._bsize(block)))
        if pool in self.pools:
            self.pools.remove(pool)

    # -- allocation ----------------------------------------------------

    def malloc(self, size: int) -> Optional[int]:
        """Allocate *size* bytes; returns the address or None."""
        adjust = adjust_request_size(size, ALIGN_SIZE)
        return self._prepare_used(self._locate_free(adjust), adjust)

    def memalign(self, align: int, size: int) -> Optional[int]:
        """Allocate *size* bytes at an address that is a multiple of *align*."""
        adjust = adjust_request_size(size, ALIGN_SIZE)
        gap_minimum = BLOCK_HEADER_SIZE
        size_with_gap = adjust_request_size(adjust + align + gap_minimum, align)
        aligned_size = size_with_gap if adjust and align > ALIGN_SIZE else adjust

        block = self._locate_free(aligned_size)
        if block is not None:
            ptr = self._to_ptr(block)
            aligned = _align_ptr(ptr, align)
            gap = aligned - ptr
            if gap and gap < gap_minimum:
                offset = max(gap_minimum - gap, align)
                aligned = _align_ptr(aligned + offset, align)
                gap = aligned - ptr
            if gap:
                block = self._trim_free_leading(block, gap)
        return self._prepare_used(block, adjust)

    def free(self, ptr: Optional[int]) -> None:
        """Release an allocation; None is ignored."""
        if not ptr:
            return
        block = self._header(ptr)
        if self._is_free(block):
            raise ValueError(f"block at {ptr:#x} is already free")
        self._mark_as_free(block)
        block = self._merge_prev(block)
        block = self._merge_next(block)
        self._block_insert(block)

    def realloc(self, ptr: Optional[int], size: int) -> Optional[int]:
        """Resize an allocation, moving it if needed.

        A None pointer behaves like :meth:`malloc`; a zero size frees the
        block and returns None. If the request cannot be met, None is
        returned and the original block is left untouched.
        """
        if ptr and size == 0:
            self.free(ptr)
            return None
        if not ptr:
            return self.malloc(size)

        block = self._header(ptr)
        if self._is_free(block):
            raise ValueError(f"block at {ptr:#x} is free")
        nxt = self._next(block)
        cursize = self._bsize(block)
        combined = cursize + self._bsize(nxt) + BLOCK_HEADER_OVERHEAD
        adjust = adjust_request_size(size, ALIGN_SIZE)

        if adjust > cursize and (not self._is_free(nxt) or adjust > combined):
            moved = self.malloc(size)
            if moved is not None:
                minsize = min(cursize, size)
                if self.memory is not None:
                    with memoryview(self.memory) as view:
                        memcpy(view[moved : moved + minsize], view[ptr : ptr + minsize], minsize)
                self.free(ptr)
            return moved

        if adjust > cursize:
            self._merge_next(block)
            self._mark_as_used(block)
        self._trim_used(block, adjust)
        return ptr

    def block_size(self, ptr: Optional[int]) -> int:
        """Internal size of the block at *ptr*, not the size requested."""
        if not ptr:
            return 0
        return self._bsize(self._header(ptr))

    # -- debugging -----------------------------------------------------

    def walk_pool(self, pool: int, walker: Optional[Walker] = None) -> list[BlockInfo]:
        """List the physical blocks of *pool*, passing each to *walker* if given."""
        block = pool - BLOCK_HEADER_OVERHEAD
        if block not in self._size:
            raise ValueError(f"address {pool:#x} is not a pool of this allocator")
        blocks: list[BlockInfo] = []
        while not self._is_last(block):
            info = BlockInfo(self._to_ptr(block), self._bsize(block), not self._is_free(block))
            if walker is not None:
                walker(info.ptr, info.size, info.used)
            blocks.append(info)
            block = self._next(block)
        return blocks

    def check(self) -> int:
        """Check free lists and bitmaps; 0 if consistent, else minus the failures."""
        status = 0

        def insist(condition: object) -> None:
            nonlocal status
            if not condition:
                status -= 1

        for fl, (sl_list, heads) in enumerate(zip(self._sl_bitmap, self._blocks)):
            fl_map = self._fl_bitmap & (1 << fl)
            for sl, block in enumerate(heads):
                sl_map = sl_list & (1 << sl)
                if not fl_map:
                    insist(not sl_map)
                if not sl_map:
                    insist(block == _NULL)
                    continue
                insist(sl_list)
                insist(block != _NULL)
                while block != _NULL:
                    insist(self._is_free(block))
                    insist(not self._is_prev_free(block))
                    nxt = self._next(block)
                    insist(not self._is_free(nxt))
                    insist(self._is_prev_free(nxt))
                    insist(self._bsize(block) >= BLOCK_SIZE_MIN)
                    insist(mapping_insert(self._bsize(block)) == (fl, sl))
                    block = self._next_free[block]
        return status

    def check_pool(self, pool: int) -> int:
        """Check the physical block chain of *pool*; 0 if consistent."""
        status = 0
        prev_status = False
        for info in self.walk_pool(pool):
            block = self._from_ptr(info.ptr)
            if prev_status != self._is_prev_free(block):
                status -= 1
            if info.size != self._bsize(block):
                status -= 1
            prev_status = self._is_free(block)
        return status


@dataclass
class Heap:
    """The C heap interface on top of a :class:`Tlsf` allocator."""

    allocator: Tlsf

    def malloc(self, size: int) -> Optional[int]:
        """Allocate *size* bytes."""
        return self.allocator.malloc(size)

    def calloc(self, num: int, size: int) -> Optional[int]:
        """Allocate *num* * *size* bytes, cleared to zero."""
        total = (num * size) & SIZE_MASK
        ptr = self.malloc(total)
        memory = self.allocator.memory
        if ptr is not None and memory is not None:
            with memoryview(memory) as view:
                memset(view[ptr : ptr + total], 0, total)
        return ptr

    def memalign(self, align: int, size: int) -> Optional[int]:
        """Allocate *size* bytes aligned to *align*."""
        return self.allocator.memalign(align, size)

    def realloc(self, ptr: Optional[int], size: int) -> Optional[int]:
        """Resize an allocation."""
        return self.allocator.realloc(ptr, size)

    def free(self, ptr: Optional[int]) -> None:
        """Release an allocation."""
        self.allocator.free(ptr)


def create_with_pool(size: int) -> Tlsf:
    """An allocator over a fresh *size*-byte memory holding its own control area.

    The pool starts at address :data:`CONTROL_SIZE` and takes the rest.
    """
    if size < CONTROL_SIZE:
        raise ValueError(f"memory must be at least {CONTROL_SIZE} bytes")
    allocator = Tlsf(bytearray(size))
    allocator.add_pool(CONTROL_SIZE, size - CONTROL_SIZE)
    return allocator