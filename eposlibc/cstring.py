"""Byte-buffer and NUL-terminated string routines.

Strings may be ``bytes``-like objects or ``str``; each is read up to its
first NUL character, as a C string would be. Characters compare by their
unsigned code values.
"""

from __future__ import annotations

from itertools import islice
from typing import Union

__all__ = [
    "memmove",
    "memchr",
    "memcmp",
    "strlen",
    "strcmp",
    "strncmp",
    "strchr",
    "strrchr",
    "strstr",
    "strncpy",
    "strcasecmp",
    "strncasecmp",
]

CString = Union[str, bytes, bytearray, memoryview]


def _build_charmap() -> bytes:
    table = bytearray(range(256))
    for code in range(ord("A"), ord("Z") + 1):
        table[code] = code + 0x20
    for code in range(0xC1, 0xDB):
        if code != 0xC5:
            table[code] = code + 0x20
    return bytes(table)


# Case-folding table for ASCII letters and part of the Latin-1 upper half.
_CHARMAP = _build_charmap()


def _fold(code: int) -> int:
    return _CHARMAP[code] if code < 256 else code


def _cstr(s: CString) -> str | bytes:
    """Return *s* cut at its first NUL, as ``str`` or ``bytes``."""
    if isinstance(s, str):
        return s.partition("\0")[0]
    if isinstance(s, (bytes, bytearray, memoryview)):
        return bytes(s).partition(b"\0")[0]
    raise TypeError(f"expected a string or bytes-like object, not {type(s).__name__}")


def _units(s: CString) -> list[int]:
    """Code values of the C string *s*, followed by its terminating NUL."""
    text = _cstr(s)
    codes = [ord(ch) for ch in text] if isinstance(text, str) else list(text)
    codes.append(0)
    return codes


def _char_code(c: int | str) -> int:
    if isinstance(c, str):
        if len(c) != 1:
            raise ValueError(f"expected a single character, got {c!r}")
        return ord(c)
    if isinstance(c, int):
        return c & 0xFF
    raise TypeError(f"expected an int or a character, not {type(c).__name__}")


def _check_bounds(count: int, *limits: int) -> None:
    if count < 0:
        raise ValueError(f"byte count must not be negative, got {count}")
    if any(count > limit for limit in limits):
        raise ValueError(f"byte count {count} exceeds buffer size {min(limits)}")


def memmove(dest, dest_offset: int, src_offset: int, count: int):
    """Copy *count* bytes inside *dest* from *src_offset* to *dest_offset*.

    The regions may overlap. Returns *dest*.
    """
    view = memoryview(dest).cast("B")
    if view.readonly:
        raise TypeError("destination buffer is read-only")
    if dest_offset < 0 or src_offset < 0:
        raise ValueError("offsets must not be negative")
    _check_bounds(count, len(view) - dest_offset, len(view) - src_offset)
    if count:
        view[dest_offset : dest_offset + count] = bytes(
            view[src_offset : src_offset + count]
        )
    return dest


def memchr(data, c: int, n: int) -> int | None:
    """Index of the first byte equal to ``c & 0xFF`` among the first *n*, or None."""
    raw = bytes(memoryview(data).cast("B"))
    _check_bounds(n, len(raw))
    index = raw.find(bytes((c & 0xFF,)), 0, n)
    return None if index < 0 else index


def memcmp(b1, b2, length: int) -> int:
    """Compare the first *length* bytes of two buffers.

    Returns 0 when they are equal; otherwise the number of bytes from the
    first difference to the end of the compared range.
    """
    a = bytes(memoryview(b1).cast("B"))
    b = bytes(memoryview(b2).cast("B"))
    _check_bounds(length, len(a), len(b))
    for position, (x, y) in enumerate(zip(a[:length], b[:length])):
        if x != y:
            return length - position
    return 0


def strlen(s: CString) -> int:
    """Number of characters before the first NUL."""
    return len(_cstr(s))


def strcmp(s1: CString, s2: CString) -> int:
    """Difference of the first differing characters, or 0 if equal."""
    for x, y in zip(_units(s1), _units(s2)):
        if x != y:
            return x - y
        if x == 0:
            break
    return 0


def strncmp(s1: CString, s2: CString, count: int) -> int:
    """Compare at most *count* characters; returns -1, 0 or 1."""
    for x, y in islice(zip(_units(s1), _units(s2)), max(count, 0)):
        if x != y:
            return -1 if x < y else 1
        if x == 0:
            break
    return 0


def strchr(s: CString, c: int | str) -> int | None:
    """Index of the first occurrence of *c*, or None.

    Searching for NUL finds the terminator, at index ``strlen(s)``.
    """
    units = _units(s)
    target = _char_code(c)
    try:
        return units.index(target)
    except ValueError:
        return None


def strrchr(s: CString, c: int | str) -> int | None:
    """Index of the last occurrence of *c*, or None."""
    units = _units(s)
    target = _char_code(c)
    last = None
    for position, code in enumerate(units):
        if code == target:
            last = position
    return last


def strstr(haystack: CString, needle: CString) -> int | None:
    """Index of the first occurrence of *needle* in *haystack*, or None.

    An empty needle matches at index 0.
    """
    h = _cstr(haystack)
    n = _cstr(needle)
    if type(h) is not type(n):
        raise TypeError("haystack and needle must both be str or both be bytes")
    index = h.find(n)  # type: ignore[arg-type]
    return None if index < 0 else index


def strncpy(src: CString, n: int) -> str | bytes:
    """The first *n* characters of *src*, padded with NULs to exactly *n*."""
    if n < 0:
        raise ValueError(f"length must not be negative, got {n}")
    text = _cstr(src)[:n]
    padding = "\0" if isinstance(text, str) else b"\0"
    return text + padding * (n - len(text))  # type: ignore[operator]


def strcasecmp(s1: CString, s2: CString) -> int:
    """Case-insensitive :func:`strcmp`."""
    x = y = 0
    for x, y in zip(_units(s1), _units(s2)):
        if x == 0 or _fold(x) != _fold(y):
            break
    return _fold(x) - _fold(y)


def strncasecmp(s1: CString, s2: CString, length: int) -> int:
    """Case-insensitive :func:`strncmp`, returning the folded difference."""
    for x, y in islice(zip(_units(s1), _units(s2)), max(length, 0)):
        if _fold(x) != _fold(y):
            return _fold(x) - _fold(y)
        if x == 0:
            return 0
    return 0