"""Integer utilities.

Small helpers for working with the bits of Python ints:
  msb(x): "most significant bit" of |x|, as abs(x).bit_length()
  floorlog2(x): msb(x) - 1, 0 if x is 0
  ctz2(x): "count trailing zeros", and the remaining significant bits
  is_power_of_two(x): |x| has exactly one bit set
"""

import typing


def msb(x: int) -> int:
    """Bit length of the magnitude of x.

    >>> msb(0)
    0
    >>> msb(5)
    3
    >>> msb(-5)
    3
    >>> msb(-4)
    3
    """
    return abs(x).bit_length()


def floorlog2(x: int) -> int:
    """
    >>> floorlog2(0)
    0
    >>> floorlog2(1)
    0
    >>> floorlog2(1023)
    9
    >>> floorlog2(-1024)
    10
    """
    return max(msb(x) - 1, 0)


def ctz2(x: int) -> typing.Tuple[int, int]:
    """Count trailing zeros.

    Args:
        x: An int.

    Returns:
        A tuple (zeros, x >> zeros) where zeros is the number of trailing
        zeros in x. I.e. (x >> zeros) & 1 == 1 or x == zeros == 0.

    The lowest set bit is isolated with x & -x, which works the same way
    for negative numbers in two's complement.

    >>> ctz2(0)
    (0, 0)
    >>> ctz2(1)
    (0, 1)
    >>> ctz2(-1)
    (0, -1)
    >>> ctz2(-2)
    (1, -1)
    >>> ctz2(40) # 0b101000 = 2**3 * 5
    (3, 5)
    >>> ctz2(-40)
    (3, -5)
    >>> ctz2(37 << 100)
    (100, 37)
    """
    if x == 0:
        return 0, 0
    else:
        zeros = (x & -x).bit_length() - 1
        return zeros, x >> zeros


def is_power_of_two(x: int) -> bool:
    """
    >>> is_power_of_two(1)
    True
    >>> is_power_of_two(-64)
    True
    >>> is_power_of_two(0)
    False
    >>> is_power_of_two(96)
    False
    """
    x = abs(x)
    return x != 0 and x & (x - 1) == 0
