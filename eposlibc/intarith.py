"""64-bit integer division helpers and network byte-order conversion."""

from __future__ import annotations

import sys
from typing import NamedTuple

__all__ = [
    "UINT64_MAX",
    "INT64_MIN",
    "INT64_MAX",
    "DivMod",
    "udivmoddi4",
    "udivdi3",
    "umoddi3",
    "divdi3",
    "moddi3",
    "htons",
    "ntohs",
    "htonl",
    "ntohl",
]

UINT64_MAX = 2**64 - 1
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_LITTLE_ENDIAN_HOST = sys.byteorder == "little"


class DivMod(NamedTuple):
    """Quotient and remainder of an unsigned division."""

    quot: int
    rem: int


def _u64(value: int) -> int:
    return value & UINT64_MAX


def _s64(value: int) -> int:
    value &= UINT64_MAX
    return value - 2**64 if value > INT64_MAX else value


def udivmoddi4(num: int, den: int) -> DivMod:
    """Unsigned 64-bit division with remainder."""
    num, den = _u64(num), _u64(den)
    if den == 0:
        raise ZeroDivisionError("integer division by zero")
    return DivMod(*divmod(num, den))


def udivdi3(num: int, den: int) -> int:
    """Unsigned 64-bit quotient."""
    return udivmoddi4(num, den).quot


def umoddi3(num: int, den: int) -> int:
    """Unsigned 64-bit remainder."""
    return udivmoddi4(num, den).rem


def _signed_parts(num: int, den: int) -> tuple[int, int, bool]:
    num, den = _s64(num), _s64(den)
    minus = (num < 0) != (den < 0)
    return _u64(abs(num)), _u64(abs(den)), minus


def divdi3(num: int, den: int) -> int:
    """Signed 64-bit quotient, truncated toward zero, wrapping on overflow."""
    unum, uden, minus = _signed_parts(num, den)
    quot = udivmoddi4(unum, uden).quot
    return _s64(-quot if minus else quot)


def moddi3(num: int, den: int) -> int:
    """Signed 64-bit remainder.

    The magnitude is that of the unsigned remainder of the magnitudes; it is
    negative when exactly one operand is negative.
    """
    unum, uden, minus = _signed_parts(num, den)
    rem = udivmoddi4(unum, uden).rem
    return _s64(-rem if minus else rem)


def _swap(value: int, width: int) -> int:
    if not _LITTLE_ENDIAN_HOST:
        return value
    return int.from_bytes(value.to_bytes(width, "little"), "big")


def htons(x: int) -> int:
    """Host to network order for a 16-bit value."""
    return _swap(x & 0xFFFF, 2)


def ntohs(x: int) -> int:
    """Network to host order for a 16-bit value."""
    return _swap(x & 0xFFFF, 2)


def htonl(x: int) -> int:
    """Host to network order for a 32-bit value."""
    return _swap(x & 0xFFFFFFFF, 4)


def ntohl(x: int) -> int:
    """Network to host order for a 32-bit value."""
    return _swap(x & 0xFFFFFFFF, 4)