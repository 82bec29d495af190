import pytest
from hypothesis import given
from hypothesis import strategies as st

from eposlibc.heapbits import (
    ALIGN_SIZE,
    BLOCK_SIZE_MAX,
    BLOCK_SIZE_MIN,
    FL_INDEX_COUNT,
    SL_INDEX_COUNT,
    SMALL_BLOCK_SIZE,
    adjust_request_size,
    align_down,
    align_up,
    ffs,
    fls,
    fls_sizet,
    mapping_insert,
    mapping_search,
)

powers = st.integers(0, 12).map(lambda e: 1 << e)
sizes = st.integers(BLOCK_SIZE_MIN, BLOCK_SIZE_MAX - 1)


def test_ffs_fls_reference_values():
    assert ffs(0) == -1
    assert fls(0) == -1
    assert ffs(1) == 0
    assert fls(1) == 0
    assert ffs(0x80000000) == 31
    assert ffs(0x80008000) == 15
    assert fls(0x80000008) == 31
    assert fls(0x7FFFFFFF) == 30


def test_fls_sizet_is_32_bit():
    assert fls_sizet(0x80000000) == 31
    assert fls_sizet(0) == -1


@given(st.integers(1, 0xFFFFFFFF))
def test_ffs_fls_bracket_word(word):
    low, high = ffs(word), fls(word)
    assert 0 <= low <= high <= 31
    assert word >> high == 1
    assert word & ((1 << low) - 1) == 0
    assert (word >> low) & 1 == 1


@given(st.integers(0, 1 << 20), powers)
def test_align_up_down(x, align):
    up = align_up(x, align)
    down = align_down(x, align)
    assert up % align == 0 and down % align == 0
    assert down <= x <= up
    assert up - down in (0, align)


def test_align_rejects_non_power_of_two():
    with pytest.raises(ValueError):
        align_up(5, 3)
    with pytest.raises(ValueError):
        align_down(5, 0)


def test_adjust_request_size_edges():
    assert adjust_request_size(0, ALIGN_SIZE) == 0
    assert adjust_request_size(1, ALIGN_SIZE) == BLOCK_SIZE_MIN
    assert adjust_request_size(BLOCK_SIZE_MAX, ALIGN_SIZE) == 0


@given(st.integers(1, BLOCK_SIZE_MAX - 1), powers)
def test_adjust_request_size_invariants(size, align):
    adjusted = adjust_request_size(size, align)
    assert adjusted >= size
    assert adjusted >= BLOCK_SIZE_MIN
    assert adjusted == BLOCK_SIZE_MIN or adjusted % align == 0


def test_mapping_boundary_between_small_and_large():
    fl_small, _ = mapping_insert(SMALL_BLOCK_SIZE - ALIGN_SIZE)
    assert fl_small == 0
    assert mapping_insert(SMALL_BLOCK_SIZE) == (1, 0)


@given(sizes)
def test_mapping_insert_in_range(size):
    fl, sl = mapping_insert(size)
    assert 0 <= fl < FL_INDEX_COUNT
    assert 0 <= sl < SL_INDEX_COUNT


@given(sizes, sizes)
def test_mapping_insert_monotonic(a, b):
    lo, hi = sorted((a, b))
    assert mapping_insert(lo) <= mapping_insert(hi)


@given(st.integers(BLOCK_SIZE_MIN, BLOCK_SIZE_MAX // 2))
def test_mapping_search_rounds_up(size):
    searched = mapping_search(size)
    assert searched >= mapping_insert(size)
    fl, sl = searched
    assert 0 <= sl < SL_INDEX_COUNT
    assert 0 <= fl < FL_INDEX_COUNT


@given(st.integers(0, SMALL_BLOCK_SIZE - 1))
def test_mapping_search_small_sizes_unchanged(size):
    assert mapping_search(size) == mapping_insert(size)