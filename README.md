# eposlibc

A compact C runtime library for Python. The routines follow C library
semantics on a 32-bit target: `int`, `long` and `size_t` are 32 bits wide,
and strings end at their first NUL. That makes the package useful for
teaching, for checking expected outputs, and for simulating how an allocator
behaves.

## What is inside

| Module                | Contents                                                        |
|-----------------------|-----------------------------------------------------------------|
| `eposlibc.memory`     | `memcpy`, `memset` on writable byte buffers                     |
| `eposlibc.cstring`    | `memmove`, `memchr`, `memcmp`, `strlen`, `strcmp`, `strncmp`, `strchr`, `strrchr`, `strstr`, `strncpy`, `strcasecmp`, `strncasecmp` |
| `eposlibc.printf`     | `vsnprintf`, `snprintf`, `sprintf`, `printf`, and `Counter` as the target of `%n` |
| `eposlibc.heapbits`   | TLSF helpers and constants: `fls`, `ffs`, `fls_sizet`, `align_up`, `align_down`, `adjust_request_size`, `mapping_insert`, `mapping_search` |
| `eposlibc.tlsf`       | the `Tlsf` two-level segregated-fit allocator, the `Heap` front end (`malloc`, `calloc`, `memalign`, `realloc`, `free`), and `create_with_pool` |
| `eposlibc.stdlib`     | `Random`, `rand_r`, `div`, `ldiv`, `strtol`, `strtoul`, `atol`, `sysconf` |
| `eposlibc.intarith`   | 64-bit division helpers (`udivmoddi4`, `udivdi3`, `umoddi3`, `divdi3`, `moddi3`) and byte-order conversion (`htons`, `ntohs`, `htonl`, `ntohl`) |
| `eposlibc.qsort`      | Bentley–McIlroy `qsort` with a three-way comparison function    |

Where C reports an error by a return code or undefined behaviour, these
functions raise: `ValueError` for out-of-range sizes, offsets or bases,
`TypeError` for wrong argument types, and `ZeroDivisionError` for division by
zero.

## Installing

```
pip install eposlibc
```

To run the test suite:

```
pip install "eposlibc[test]"
pytest
```

## Examples

Formatted output uses a C-style formatter. The buffer size counts the
terminating NUL, so at most `count - 1` characters are kept:

```python
from eposlibc.printf import snprintf, sprintf

sprintf("%-5d|%04x|%s", 42, 255, "hi")   # '42   |00ff|hi'
snprintf(4, "%d", 123456)                # '123'
```

`printf` writes to standard output, or to the `file` keyword argument, and
returns the number of characters written.

Heap allocation with the TLSF allocator. Addresses are plain integers into a
`bytearray` that the allocator owns:

```python
from eposlibc.tlsf import Heap, create_with_pool

allocator = create_with_pool(1 << 20)
p = allocator.malloc(100)
q = allocator.realloc(p, 400)    # contents move with the block
allocator.free(q)

heap = Heap(allocator)
z = heap.calloc(10, 4)           # 40 bytes, cleared to zero
heap.free(z)

allocator.check()                # 0 when free lists and bitmaps are consistent
```

`Tlsf.walk_pool` lists the physical blocks of a pool as `BlockInfo(ptr, size, used)`
entries.

Number parsing accepts `0x` and `0b` prefixes, and a value out of range
saturates:

```python
from eposlibc.stdlib import strtol

strtol("  0x1f rest", 0)   # ParseResult(value=31, end=6)
```

Sorting with a three-way comparator, in place:

```python
from eposlibc.qsort import qsort

items = [5, 3, 9, 1]
qsort(items, lambda a, b: (a > b) - (a < b))
# items is now [1, 3, 5, 9]
```

## What it does not do

- There are no floating-point math functions (`sin`, `sqrt`, `pow` and the
  like); use Python's `math` module.
- The formatter does not produce floating-point output: `%f`, `%e` and `%g`
  write nothing and take no argument.
- `sysconf` knows only the page size; any other name raises `ValueError`.
- The package is a library only and installs no command.