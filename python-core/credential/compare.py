"""
Constant-Time Comparison.

This module compares two strings or byte sequences with an algorithm
whose running time does not depend on where, or whether, they differ.

How it works:
1. One sentinel unit is appended to each operand so the modulo below
   always has something to wrap over, even for empty input.
2. The loop runs max(len(a), len(b), MAX_KEY_CHARS) times. Short
   operands are read with a wrapping index instead of stopping early.
3. Each step XORs one unit from each side and ORs it into an
   accumulator. Nothing short-circuits.
4. The length difference is folded into the same accumulator, so
   unequal lengths cost the same as a mismatch.

There is deliberately no equal-length or equal-content fast path.
"""

from typing import List, Union

# Every comparison touches at least this many units, masking the
# timing of short strings behind a fixed floor.
MAX_KEY_CHARS = 1024

Comparable = Union[str, bytes, bytearray, memoryview]


def _units(value: Comparable) -> List[int]:
    """Return the code units of value plus a trailing sentinel."""
    if isinstance(value, str):
        units = [ord(ch) for ch in value]
    else:
        units = list(bytes(value))
    units.append(0x20)
    return units


def constant_time_compare(a: Comparable, b: Comparable) -> bool:
    """
    Compare a and b in constant time.

    Args:
        a: First string or byte sequence
        b: Second string or byte sequence

    Returns:
        True if a and b are identical, False otherwise

    Example:
        >>> constant_time_compare(b"abc", b"abc")
        True
        >>> constant_time_compare("abc", "abC")
        False
    """
    x = _units(a)
    y = _units(b)
    x_len = len(x)
    y_len = len(y)

    # Non-zero iff the lengths differ; no branch on the comparison.
    diff = x_len ^ y_len

    steps = max(x_len, y_len, MAX_KEY_CHARS)
    for i in range(steps):
        diff |= x[i % x_len] ^ y[i % y_len]

    return diff == 0
