"""Integer division, pseudo-random numbers, number parsing and sysconf.

Integers follow a 32-bit target: ``int``, ``long`` and ``unsigned long``
are all 32 bits wide.
"""

from __future__ import annotations

from typing import NamedTuple, Union

__all__ = [
    "RAND_MAX",
    "EXIT_SUCCESS",
    "EXIT_FAILURE",
    "LONG_MIN",
    "LONG_MAX",
    "ULONG_MAX",
    "SC_PAGESIZE",
    "SC_PAGE_SIZE",
    "PAGE_SIZE",
    "DivResult",
    "ParseResult",
    "Random",
    "rand_r",
    "div",
    "ldiv",
    "strtol",
    "strtoul",
    "atol",
    "sysconf",
]

RAND_MAX = 0x7FFFFFFD
EXIT_SUCCESS = 0
EXIT_FAILURE = 1

LONG_MIN = -(2**31)
LONG_MAX = 2**31 - 1
ULONG_MAX = 2**32 - 1
_ULONG_MASK = ULONG_MAX

SC_PAGESIZE = 0x0027
SC_PAGE_SIZE = SC_PAGESIZE
PAGE_SIZE = 4096

# Seed used in place of zero, which the generator cannot start from.
_ZERO_SEED_REPLACEMENT = 123459876

_SPACES = " \t\n"

Text = Union[str, bytes, bytearray]


class DivResult(NamedTuple):
    """Quotient and remainder of a division truncated toward zero."""

    quot: int
    rem: int


class ParseResult(NamedTuple):
    """A parsed number and the index where parsing stopped.

    ``end`` is 0 when no digits were consumed.
    """

    value: int
    end: int


def _next_state(ctx: int) -> int:
    """One step of the Park-Miller minimal standard generator."""
    ctx &= _ULONG_MASK
    if ctx == 0:
        ctx = _ZERO_SEED_REPLACEMENT
    hi, lo = divmod(ctx, 127773)
    x = 16807 * lo - 2836 * hi
    if x < 0:
        x += 0x7FFFFFFF
    return x


def _output(state: int) -> int:
    return state % (RAND_MAX + 1)


class Random:
    """A generator with the shared state behind ``rand`` and ``srand``."""

    def __init__(self, seed: int = 1) -> None:
        self._state = seed & _ULONG_MASK

    def seed(self, seed: int) -> None:
        """Restart the sequence from *seed*."""
        self._state = seed & _ULONG_MASK

    def rand(self) -> int:
        """Next value in ``[0, RAND_MAX]``."""
        self._state = _next_state(self._state)
        return _output(self._state)


def rand_r(seed: int) -> tuple[int, int]:
    """Reentrant generator step: returns ``(value, next_seed)``."""
    state = _next_state(seed)
    return _output(state), state & _ULONG_MASK


def _truncated_divmod(numer: int, denom: int) -> DivResult:
    if denom == 0:
        raise ZeroDivisionError("integer division by zero")
    quot = abs(numer) // abs(denom)
    if (numer < 0) != (denom < 0):
        quot = -quot
    return DivResult(quot, numer - quot * denom)


def div(numer: int, denom: int) -> DivResult:
    """Divide two ``int`` values, truncating the quotient toward zero."""
    return _truncated_divmod(numer, denom)


def ldiv(numer: int, denom: int) -> DivResult:
    """Divide two ``long`` values, truncating the quotient toward zero."""
    return _truncated_divmod(numer, denom)


def _cstr(s: Text) -> str:
    if isinstance(s, (bytes, bytearray)):
        s = bytes(s).decode("latin-1")
    if not isinstance(s, str):
        raise TypeError(f"expected a string or bytes, not {type(s).__name__}")
    return s.partition("\0")[0]


def _digit_value(ch: str) -> int | None:
    if "0" <= ch <= "9":
        return ord(ch) - ord("0")
    if "A" <= ch <= "Z":
        return ord(ch) - ord("A") + 10
    if "a" <= ch <= "z":
        return ord(ch) - ord("a") + 10
    return None


def _parse(s: Text, base: int, limit_for: "callable") -> tuple[int, bool, bool, int]:
    """Shared scanner: returns (magnitude, negative, overflowed, end)."""
    if base != 0 and not 2 <= base <= 36:
        raise ValueError(f"base must be 0 or between 2 and 36, got {base}")
    text = _cstr(s)

    def char(i: int) -> str:
        return text[i] if i < len(text) else "\0"

    pos = 0
    c = char(pos)
    pos += 1
    while c in _SPACES:
        c = char(pos)
        pos += 1

    negative = False
    if c == "-":
        negative = True
        c = char(pos)
        pos += 1
    elif c == "+":
        c = char(pos)
        pos += 1

    if base in (0, 16) and c == "0" and char(pos) in ("x", "X"):
        c = char(pos + 1)
        pos += 2
        base = 16
    elif base in (0, 2) and c == "0" and char(pos) in ("b", "B"):
        c = char(pos + 1)
        pos += 2
        base = 2
    if base == 0:
        base = 8 if c == "0" else 10

    cutoff, cutlim = divmod(limit_for(negative), base)
    acc = 0
    consumed = False
    overflow = False
    while True:
        digit = _digit_value(c)
        if digit is None or digit >= base:
            break
        if overflow or acc > cutoff or (acc == cutoff and digit > cutlim):
            overflow = True
        else:
            acc = acc * base + digit
        consumed = True
        c = char(pos)
        pos += 1

    end = pos - 1 if consumed else 0
    return acc, negative, overflow, end


def strtol(s: Text, base: int) -> ParseResult:
    """Parse a signed ``long``, clamping to its range on overflow.

    Leading spaces, tabs and newlines are skipped; a sign may follow.
    Base 0 picks 16 for ``0x``, 2 for ``0b``, 8 for a leading ``0`` and
    10 otherwise.
    """
    acc, negative, overflow, end = _parse(
        s, base, lambda neg: -LONG_MIN if neg else LONG_MAX
    )
    if overflow:
        value = LONG_MIN if negative else LONG_MAX
    else:
        value = -acc if negative else acc
    return ParseResult(value, end)


def strtoul(s: Text, base: int) -> ParseResult:
    """Parse an ``unsigned long``; a minus sign negates modulo ``2**32``.

    Overflow yields :data:`ULONG_MAX`.
    """
    acc, negative, overflow, end = _parse(s, base, lambda neg: ULONG_MAX)
    if overflow:
        value = ULONG_MAX
    else:
        value = (-acc if negative else acc) & _ULONG_MASK
    return ParseResult(value, end)


def atol(s: Text) -> int:
    """Decimal :func:`strtol`, returning only the value."""
    return strtol(s, 10).value


def sysconf(name: int) -> int:
    """Value of a system configuration variable.

    Only the page size is known; any other name raises ValueError.
    """
    if name == SC_PAGESIZE:
        return PAGE_SIZE
    raise ValueError(f"unknown configuration name {name:#x}")