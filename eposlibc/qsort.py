"""In-place quicksort with a three-way comparison function.

Uses the Bentley-McIlroy scheme: median-of-three pivot selection (ninther
for more than 40 items), fat partitioning that gathers elements equal to
the pivot, and insertion sort for short runs or runs that needed no swaps.
The sort is not stable.
"""

from __future__ import annotations

from collections.abc import Callable, MutableSequence
from typing import Any, TypeVar

__all__ = ["qsort"]

T = TypeVar("T")
Comparator = Callable[[Any, Any], int]

_INSERTION_THRESHOLD = 7
_NINTHER_THRESHOLD = 40


def _swap(items: MutableSequence[Any], i: int, j: int) -> None:
    items[i], items[j] = items[j], items[i]


def _vecswap(items: MutableSequence[Any], i: int, j: int, n: int) -> None:
    """Exchange the non-overlapping runs ``items[i:i+n]`` and ``items[j:j+n]``."""
    if n > 0:
        items[i : i + n], items[j : j + n] = items[j : j + n], items[i : i + n]


def _med3(items: MutableSequence[Any], a: int, b: int, c: int, cmp: Comparator) -> int:
    """Index of the median of three elements."""
    if cmp(items[a], items[b]) < 0:
        if cmp(items[b], items[c]) < 0:
            return b
        return c if cmp(items[a], items[c]) < 0 else a
    if cmp(items[b], items[c]) > 0:
        return b
    return a if cmp(items[a], items[c]) < 0 else c


def _insertion_sort(items: MutableSequence[Any], lo: int, n: int, cmp: Comparator) -> None:
    for pm in range(lo + 1, lo + n):
        pl = pm
        while pl > lo and cmp(items[pl - 1], items[pl]) > 0:
            _swap(items, pl, pl - 1)
            pl -= 1


def _sort(items: MutableSequence[Any], lo: int, n: int, cmp: Comparator) -> None:
    while True:
        if n < _INSERTION_THRESHOLD:
            _insertion_sort(items, lo, n, cmp)
            return

        pm = lo + n // 2
        if n > _INSERTION_THRESHOLD:
            pl = lo
            pn = lo + n - 1
            if n > _NINTHER_THRESHOLD:
                d = n // 8
                pl = _med3(items, pl, pl + d, pl + 2 * d, cmp)
                pm = _med3(items, pm - d, pm, pm + d, cmp)
                pn = _med3(items, pn - 2 * d, pn - d, pn, cmp)
            pm = _med3(items, pl, pm, pn, cmp)
        _swap(items, lo, pm)

        pa = pb = lo + 1
        pc = pd = lo + n - 1
        swapped = False
        while True:
            while pb <= pc and (r := cmp(items[pb], items[lo])) <= 0:
                if r == 0:
                    swapped = True
                    _swap(items, pa, pb)
                    pa += 1
                pb += 1
            while pb <= pc and (r := cmp(items[pc], items[lo])) >= 0:
                if r == 0:
                    swapped = True
                    _swap(items, pc, pd)
                    pd -= 1
                pc -= 1
            if pb > pc:
                break
            _swap(items, pb, pc)
            swapped = True
            pb += 1
            pc -= 1

        if not swapped:
            _insertion_sort(items, lo, n, cmp)
            return

        pn = lo + n
        r = min(pa - lo, pb - pa)
        _vecswap(items, lo, pb - r, r)
        r = min(pd - pc, pn - pd - 1)
        _vecswap(items, pb, pn - r, r)

        left = pb - pa
        if left > 1:
            _sort(items, lo, left, cmp)
        right = pd - pc
        if right <= 1:
            return
        # Iterate on the right part rather than recursing.
        lo = pn - right
        n = right


def qsort(items: MutableSequence[T], cmp: Comparator) -> MutableSequence[T]:
    """Sort *items* in place by *cmp* and return it.

    *cmp(a, b)* must return a negative number, zero or a positive number
    when *a* orders before, with or after *b*.
    """
    if not callable(cmp):
        raise TypeError("comparison function must be callable")
    _sort(items, 0, len(items), cmp)
    return items