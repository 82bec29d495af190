"""Raw byte-buffer copy and fill operations."""

from __future__ import annotations

from typing import TypeVar

__all__ = ["memcpy", "memset"]

_Buffer = TypeVar("_Buffer")


def _writable_bytes(dest: object) -> memoryview:
    """Return a flat, writable byte view of *dest*."""
    view = memoryview(dest)  # type: ignore[arg-type]
    if view.readonly:
        raise TypeError("destination buffer is read-only")
    return view.cast("B")


def _readable_bytes(src: object) -> memoryview:
    """Return a flat byte view of *src*."""
    return memoryview(src).cast("B")  # type: ignore[arg-type]


def _check_count(count: int, *sizes: int) -> None:
    if count < 0:
        raise ValueError(f"byte count must not be negative, got {count}")
    limit = min(sizes)
    if count > limit:
        raise ValueError(f"byte count {count} exceeds buffer size {limit}")


def memcpy(dest: _Buffer, src: object, count: int) -> _Buffer:
    """Copy the first *count* bytes of *src* into *dest* and return *dest*.

    Both arguments may be any contiguous buffer; *dest* must be writable.
    No overlap handling is promised beyond what a forward copy gives.
    """
    target = _writable_bytes(dest)
    source = _readable_bytes(src)
    _check_count(count, len(target), len(source))
    if count:
        target[:count] = source[:count]
    return dest


def memset(dest: _Buffer, value: int, length: int) -> _Buffer:
    """Fill the first *length* bytes of *dest* with the low byte of *value*.

    Returns *dest*. As with a C ``int`` argument, only ``value & 0xFF`` is
    stored.
    """
    if not isinstance(value, int):
        raise TypeError(f"fill value must be an int, not {type(value).__name__}")
    target = _writable_bytes(dest)
    _check_count(length, len(target))
    if length:
        target[:length] = bytes((value & 0xFF,)) * length
    return dest