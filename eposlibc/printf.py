"""Formatted output in the style of the C printf family.

Integer conversions behave as on a 32-bit machine: ``int`` and ``long``
are both 32 bits wide, so ``h`` and ``l`` length modifiers only matter for
``%n``. Floating-point conversions are recognised but produce no output
and consume no argument. ``#`` is accepted and ignored.
"""

from __future__ import annotations

import enum
import sys
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any, TextIO

__all__ = ["Counter", "vsnprintf", "snprintf", "sprintf", "printf"]

INT_MAX = 2**31 - 1
_BUFFER_SIZE = 1024
_NUL = "\0"
_NULL_STRING = "<NULL>"


@dataclass
class Counter:
    """Target of a ``%n`` conversion: receives the characters produced so far."""

    value: int = 0


class _State(enum.Enum):
    DEFAULT = enum.auto()
    FLAGS = enum.auto()
    MIN = enum.auto()
    DOT = enum.auto()
    MAX = enum.auto()
    MOD = enum.auto()
    CONV = enum.auto()
    DONE = enum.auto()


class _Flag(enum.IntFlag):
    MINUS = 1 << 0
    PLUS = 1 << 1
    SPACE = 1 << 2
    NUM = 1 << 3
    ZERO = 1 << 4
    UP = 1 << 5
    UNSIGNED = 1 << 6


class _Length(enum.Enum):
    DEFAULT = enum.auto()
    SHORT = enum.auto()
    LONG = enum.auto()


_FLAG_CHARS = {
    "-": _Flag.MINUS,
    "+": _Flag.PLUS,
    " ": _Flag.SPACE,
    "#": _Flag.NUM,
    "0": _Flag.ZERO,
}

_LENGTH_CHARS = {"h": _Length.SHORT, "l": _Length.LONG}


def _wrap(value: int, bits: int, signed: bool) -> int:
    """Reduce *value* to a machine integer of the given width."""
    value &= (1 << bits) - 1
    if signed and value >> (bits - 1):
        value -= 1 << bits
    return value


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def _format_chars(fmt: str) -> Iterator[str]:
    """Yield the format's characters up to the first NUL, then NUL forever."""
    for ch in fmt:
        if ch == _NUL:
            break
        yield ch
    while True:
        yield _NUL


class _Sink:
    """Bounded output: characters past the limit are silently dropped."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        self._chars: list[str] = []

    @property
    def length(self) -> int:
        return len(self._chars)

    @property
    def full(self) -> bool:
        return len(self._chars) >= self.limit

    def write(self, text: str) -> None:
        room = self.limit - len(self._chars)
        if room > 0:
            self._chars.extend(text[:room])

    def result(self) -> str:
        text = "".join(self._chars)[: max(self.limit - 1, 0)]
        return text.partition(_NUL)[0]


class _Arguments:
    """Sequential access to the values consumed by conversions."""

    def __init__(self, args: Iterable[Any]) -> None:
        self._it = iter(args)

    def take(self) -> Any:
        try:
            return next(self._it)
        except StopIteration:
            raise TypeError("not enough arguments for format string") from None

    def integer(self, conversion: str, *, signed: bool = True) -> int:
        arg = self.take()
        if not isinstance(arg, int):
            raise TypeError(
                f"%{conversion} requires an integer, not {type(arg).__name__}"
            )
        return _wrap(arg, 32, signed)

    def character(self) -> str:
        arg = self.take()
        if isinstance(arg, str) and len(arg) == 1:
            return arg
        if isinstance(arg, int):
            return chr(arg & 0xFF)
        raise TypeError(f"%c requires an integer or a single character, not {arg!r}")

    def string(self) -> str:
        arg = self.take()
        if arg is None:
            return _NULL_STRING
        if isinstance(arg, (bytes, bytearray)):
            arg = bytes(arg).decode("latin-1")
        if not isinstance(arg, str):
            raise TypeError(f"%s requires a string, not {type(arg).__name__}")
        return arg.partition(_NUL)[0]

    def counter(self) -> Counter:
        arg = self.take()
        if not isinstance(arg, Counter):
            raise TypeError(f"%n requires a Counter, not {type(arg).__name__}")
        return arg


def _digits(value: int, base: int, upper: bool) -> str:
    if base == 8:
        return format(value, "o")
    if base == 16:
        return format(value, "X" if upper else "x")
    return str(value)


def _format_int(value: int, base: int, width: int, precision: int, flags: _Flag) -> str:
    precision = max(precision, 0)
    sign = ""
    magnitude = value
    if not flags & _Flag.UNSIGNED:
        if value < 0:
            sign = "-"
            magnitude = -value
        elif flags & _Flag.PLUS:
            sign = "+"
        elif flags & _Flag.SPACE:
            sign = " "

    digits = _digits(magnitude, base, bool(flags & _Flag.UP))
    zero_pad = max(precision - len(digits), 0)
    space_pad = max(width - max(precision, len(digits)) - len(sign), 0)
    if flags & _Flag.ZERO:
        zero_pad = max(zero_pad, space_pad)
        space_pad = 0

    body = sign + "0" * zero_pad + digits
    if flags & _Flag.MINUS:
        return body + " " * space_pad
    return " " * space_pad + body


def _format_str(value: str, width: int, precision: int, flags: _Flag) -> str:
    padding = " " * max(width - len(value), 0)
    body = value + padding if flags & _Flag.MINUS else padding + value
    return body[: max(precision, 0)]


def _convert(
    conversion: str,
    flags: _Flag,
    length: _Length,
    width: int,
    precision: int,
    arguments: _Arguments,
    out: _Sink,
) -> None:
    if conversion in ("d", "i"):
        value = arguments.integer(conversion)
        out.write(_format_int(value, 10, width, precision, flags))
    elif conversion in ("o", "u", "x", "X"):
        flags |= _Flag.UNSIGNED
        if conversion == "X":
            flags |= _Flag.UP
        base = {"o": 8, "u": 10}.get(conversion, 16)
        value = arguments.integer(conversion, signed=False)
        out.write(_format_int(value, base, width, precision, flags))
    elif conversion == "c":
        out.write(arguments.character())
    elif conversion == "s":
        value = arguments.string()
        limit = out.limit if precision < 0 else precision
        out.write(_format_str(value, width, limit, flags))
    elif conversion == "p":
        value = arguments.integer(conversion)
        out.write(_format_int(value, 16, width, precision, flags))
    elif conversion == "n":
        target = arguments.counter()
        if length is _Length.SHORT:
            target.value = _wrap(out.length, 16, True)
        else:
            target.value = out.length
    elif conversion == "%":
        out.write("%")


def vsnprintf(count: int, fmt: str, args: Iterable[Any]) -> str:
    """Format *args* according to *fmt*, keeping at most ``count - 1`` characters.

    The result ends at the first NUL character produced, as a C string does.
    """
    if count < 0:
        raise ValueError(f"buffer size must not be negative, got {count}")
    if not isinstance(fmt, str):
        raise TypeError(f"format must be a str, not {type(fmt).__name__}")

    out = _Sink(count)
    arguments = _Arguments(args)
    chars = _format_chars(fmt)

    state = _State.DEFAULT
    flags = _Flag(0)
    length = _Length.DEFAULT
    width = 0
    precision = -1
    ch = next(chars)

    while state is not _State.DONE:
        if ch == _NUL or out.full:
            state = _State.DONE

        if state is _State.DEFAULT:
            if ch == "%":
                state = _State.FLAGS
            else:
                out.write(ch)
            ch = next(chars)
        elif state is _State.FLAGS:
            flag = _FLAG_CHARS.get(ch)
            if flag is None:
                state = _State.MIN
            else:
                flags |= flag
                ch = next(chars)
        elif state is _State.MIN:
            if _is_digit(ch):
                width = 10 * width + int(ch)
                ch = next(chars)
            elif ch == "*":
                width = arguments.integer("*")
                ch = next(chars)
                state = _State.DOT
            else:
                state = _State.DOT
        elif state is _State.DOT:
            if ch == ".":
                state = _State.MAX
                ch = next(chars)
            else:
                state = _State.MOD
        elif state is _State.MAX:
            if _is_digit(ch):
                precision = 10 * max(precision, 0) + int(ch)
                ch = next(chars)
            elif ch == "*":
                precision = arguments.integer("*")
                ch = next(chars)
                state = _State.MOD
            else:
                state = _State.MOD
        elif state is _State.MOD:
            modifier = _LENGTH_CHARS.get(ch)
            if modifier is not None:
                length = modifier
                ch = next(chars)
            state = _State.CONV
        elif state is _State.CONV:
            _convert(ch, flags, length, width, precision, arguments, out)
            if ch == "w":
                # Reserved conversion: the character after it is skipped.
                ch = next(chars)
            ch = next(chars)
            state = _State.DEFAULT
            flags = _Flag(0)
            length = _Length.DEFAULT
            width = 0
            precision = -1

    return out.result()


def snprintf(count: int, fmt: str, *args: Any) -> str:
    """Format *args* by *fmt*, keeping at most ``count - 1`` characters."""
    return vsnprintf(count, fmt, args)


def sprintf(fmt: str, *args: Any) -> str:
    """Format *args* by *fmt* with no practical length limit."""
    return vsnprintf(INT_MAX, fmt, args)


def printf(fmt: str, *args: Any, file: TextIO | None = None) -> int:
    """Write the formatted text to *file* (standard output by default).

    Output is limited to what fits a 1024-byte buffer. Returns the number
    of characters written.
    """
    text = vsnprintf(_BUFFER_SIZE, fmt, args)
    (sys.stdout if file is None else file).write(text)
    return len(text)