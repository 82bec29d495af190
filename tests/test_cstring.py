import pytest
from hypothesis import given
from hypothesis import strategies as st

from eposlibc.cstring import (
    memchr,
    memcmp,
    memmove,
    strcasecmp,
    strchr,
    strcmp,
    strlen,
    strncasecmp,
    strncmp,
    strncpy,
    strrchr,
    strstr,
)

nul_free = st.binary(max_size=20).map(lambda b: b.replace(b"\0", b"a"))


def test_memmove_forward_overlap():
    buf = bytearray(b"abcdef")
    result = memmove(buf, 2, 0, 4)
    assert result is buf
    assert buf == bytearray(b"ababcd")


def test_memmove_backward_overlap():
    buf = bytearray(b"abcdef")
    memmove(buf, 0, 2, 4)
    assert buf == bytearray(b"cdefef")


def test_memmove_out_of_bounds():
    with pytest.raises(ValueError):
        memmove(bytearray(b"abc"), 2, 0, 2)


def test_memmove_read_only():
    with pytest.raises(TypeError):
        memmove(b"abc", 0, 1, 1)


@given(st.binary(min_size=1, max_size=30), st.data())
def test_memmove_matches_slice_copy(data, draw):
    size = len(data)
    count = draw.draw(st.integers(0, size))
    dst = draw.draw(st.integers(0, size - count))
    src = draw.draw(st.integers(0, size - count))
    buf = bytearray(data)
    memmove(buf, dst, src, count)
    assert buf[dst : dst + count] == data[src : src + count]
    assert buf[:dst] == data[:dst]
    assert buf[dst + count :] == data[dst + count :]


def test_memchr_finds_first():
    data = b"abcabc"
    assert memchr(data, ord("c"), len(data)) == data.index(b"c")


def test_memchr_respects_limit():
    assert memchr(b"abcabc", ord("c"), 2) is None


def test_memchr_masks_value():
    assert memchr(b"x\xff", -1, 2) == 1


def test_memchr_limit_too_large():
    with pytest.raises(ValueError):
        memchr(b"ab", ord("a"), 3)


@given(st.binary(max_size=20))
def test_memcmp_equal_buffers(data):
    assert memcmp(data, bytes(data), len(data)) == 0


@given(st.binary(min_size=1, max_size=20), st.binary(min_size=1, max_size=20))
def test_memcmp_reports_first_difference(a, b):
    length = min(len(a), len(b))
    result = memcmp(a, b, length)
    if a[:length] == b[:length]:
        assert result == 0
    else:
        position = length - result
        assert 0 <= position < length
        assert a[:position] == b[:position]
        assert a[position] != b[position]


def test_strlen_stops_at_nul():
    assert strlen(b"hello\0world") == len(b"hello")
    assert strlen("abc") == len("abc")


def test_strcmp_equal_and_order():
    assert strcmp(b"abc", b"abc\0zzz") == 0
    assert strcmp(b"abc", b"abd") == ord("c") - ord("d")
    assert strcmp(b"abcd", b"abc") > 0
    assert strcmp(b"ab", b"abc") < 0


def test_strcmp_unsigned():
    assert strcmp(b"\xff", b"a") > 0


@given(nul_free, nul_free)
def test_strcmp_antisymmetric(a, b):
    assert strcmp(a, b) == -strcmp(b, a)
    assert (strcmp(a, b) == 0) == (a == b)


def test_strncmp():
    assert strncmp(b"abcX", b"abcY", 3) == 0
    assert strncmp(b"a", b"b", 1) == -1
    assert strncmp(b"b", b"a", 1) == 1
    assert strncmp(b"abc", b"abd", 0) == 0


def test_strchr():
    s = b"hello"
    assert strchr(s, "l") == s.index(b"l")
    assert strchr(s, ord("z")) is None
    assert strchr(s, 0) == len(s)


def test_strrchr():
    s = b"hello"
    assert strrchr(s, "l") == s.rindex(b"l")
    assert strrchr(s, "q") is None
    assert strrchr(s, 0) == len(s)


@given(nul_free, nul_free)
def test_strstr_agrees_with_find(h, n):
    index = h.find(n)
    assert strstr(h, n) == (None if index < 0 else index)


def test_strstr_empty_needle_and_types():
    assert strstr("abc", "") == 0
    with pytest.raises(TypeError):
        strstr("abc", b"b")


def test_strncpy_pads_and_truncates():
    assert strncpy(b"ab", 4) == b"ab\0\0"
    assert strncpy(b"abcdef", 3) == b"abc"
    assert strncpy("x", 1) == "x"
    with pytest.raises(ValueError):
        strncpy(b"a", -1)


def test_strcasecmp():
    assert strcasecmp(b"HeLLo", b"hello") == 0
    assert strcasecmp(b"\xc1", b"\xe1") == 0
    assert strcasecmp(b"\xc5", b"\xe5") < 0
    assert strcasecmp(b"abc", b"ABCD") < 0
    assert strcasecmp(b"b", b"A") > 0


def test_strncasecmp():
    assert strncasecmp(b"ABCx", b"abcy", 3) == 0
    assert strncasecmp(b"ABCx", b"abcy", 4) < 0
    assert strncasecmp(b"AB", b"ab", 10) == 0