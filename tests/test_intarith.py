import sys

import pytest
from hypothesis import given
from hypothesis import strategies as st

from eposlibc.intarith import (
    INT64_MAX,
    INT64_MIN,
    UINT64_MAX,
    divdi3,
    htonl,
    htons,
    moddi3,
    ntohl,
    ntohs,
    udivdi3,
    udivmoddi4,
    umoddi3,
)

u64 = st.integers(min_value=0, max_value=UINT64_MAX)
nonzero_u64 = st.integers(min_value=1, max_value=UINT64_MAX)
s64 = st.integers(min_value=INT64_MIN, max_value=INT64_MAX)
nonzero_s64 = s64.filter(lambda v: v != 0)


@given(u64, nonzero_u64)
def test_udivmoddi4_invariant(num, den):
    quot, rem = udivmoddi4(num, den)
    assert quot * den + rem == num
    assert 0 <= rem < den


@given(u64, nonzero_u64)
def test_udivdi3_and_umoddi3_agree(num, den):
    assert (udivdi3(num, den), umoddi3(num, den)) == tuple(udivmoddi4(num, den))


def test_unsigned_division_by_zero_raises():
    with pytest.raises(ZeroDivisionError):
        udivmoddi4(1, 0)
    with pytest.raises(ZeroDivisionError):
        udivdi3(5, 0)
    with pytest.raises(ZeroDivisionError):
        umoddi3(5, 0)


def test_signed_division_by_zero_raises():
    with pytest.raises(ZeroDivisionError):
        divdi3(-1, 0)
    with pytest.raises(ZeroDivisionError):
        moddi3(-1, 0)


def test_unsigned_max_divided_by_itself():
    assert udivmoddi4(UINT64_MAX, UINT64_MAX) == (1, 0)


@given(s64, nonzero_s64)
def test_divdi3_truncates_toward_zero(num, den):
    quot = divdi3(num, den)
    if num == INT64_MIN and den == -1:
        assert quot == INT64_MIN
        return
    assert abs(quot * den) <= abs(num)
    assert abs(num) - abs(quot * den) < abs(den)
    assert quot == 0 or (quot < 0) == ((num < 0) != (den < 0))


def test_divdi3_overflow_wraps():
    assert divdi3(INT64_MIN, -1) == INT64_MIN


@given(s64.filter(lambda v: v != INT64_MIN), nonzero_s64.filter(lambda v: v != INT64_MIN))
def test_moddi3_magnitude_and_sign(num, den):
    rem = moddi3(num, den)
    assert abs(rem) == umoddi3(abs(num), abs(den))
    if rem:
        assert (rem < 0) == ((num < 0) != (den < 0))


@given(st.integers(min_value=0, max_value=0xFFFF))
def test_htons_gives_network_order(x):
    assert htons(x).to_bytes(2, sys.byteorder) == x.to_bytes(2, "big")
    assert ntohs(htons(x)) == x
    assert ntohs(x) == htons(x)


@given(st.integers(min_value=0, max_value=0xFFFFFFFF))
def test_htonl_gives_network_order(x):
    assert htonl(x).to_bytes(4, sys.byteorder) == x.to_bytes(4, "big")
    assert ntohl(htonl(x)) == x
    assert ntohl(x) == htonl(x)


def test_byte_order_truncates_wide_values():
    assert htons(0x12345) == htons(0x2345)
    assert htonl(0x1_0000_0001) == htonl(1)