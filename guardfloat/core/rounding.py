"""Round-to-nearest right shifts on plain ints.

All rounding in guardfloat goes through these helpers. Bits are removed
from the bottom of a signed integer mantissa and the result is rounded to
nearest, with ties away from zero. Rounding is symmetric in the sign:
shift_right_round(-x, k) == -shift_right_round(x, k).
"""

import typing


class RoundResult(typing.NamedTuple):
    """A rounded mantissa, and whether rounding up carried into a new top bit."""
    value: int
    carried: bool


def _round_magnitude(x: int, bits: int) -> int:
    # x >= 0, bits > 0
    return (x + (1 << (bits - 1))) >> bits


def shift_right_round(x: int, bits: int) -> int:
    """Shift x right by bits, rounding to nearest with ties away from zero.
    A non-positive shift moves x left instead, which is always exact.
    The result r always satisfies abs(r - x / 2**bits) <= 1/2.

    >>> shift_right_round(5, 1) # 2.5
    3
    >>> shift_right_round(-5, 1)
    -3
    >>> shift_right_round(5, 2) # 1.25
    1
    >>> shift_right_round(6, 2) # 1.5
    2
    >>> shift_right_round(3, -2)
    12
    >>> shift_right_round(0b1111, 4)
    1
    """
    if bits <= 0:
        return x << -bits
    elif x < 0:
        return -_round_magnitude(-x, bits)
    else:
        return _round_magnitude(x, bits)


def shift_right_round_carry(x: int, bits: int, size: int = None) -> RoundResult:
    """Like shift_right_round, but also report if the bit length grew.

    size is the bit length of abs(x), if the caller already knows it. The
    result has max(0, size - bits) bits, or one more if rounding up carried
    all the way out of the top, in which case carried is True and the value
    is a power of two.

    >>> shift_right_round_carry(0b1011, 2)
    RoundResult(value=3, carried=False)
    >>> shift_right_round_carry(0b1111, 2)
    RoundResult(value=4, carried=True)
    >>> shift_right_round_carry(-0b1110, 1, 4)
    RoundResult(value=-7, carried=False)
    """
    if size is None:
        size = abs(x).bit_length()
    elif size != abs(x).bit_length():
        raise ValueError('stale size {} for {}'.format(repr(size), repr(x)))

    if bits <= 0:
        return RoundResult(x << -bits, False)

    value = shift_right_round(x, bits)
    expected = max(0, size - bits)
    return RoundResult(value, (abs(value) >> expected) != 0)


def shift_right_round_fixed(x: int, bits: int, size: int = None) -> RoundResult:
    """Like shift_right_round_carry, but keep the width at exactly size - bits.

    When rounding carries, the result (a power of two) is shifted right one
    more place, and carried tells the caller to bump its exponent by one.

    >>> shift_right_round_fixed(0b1111, 2)
    RoundResult(value=2, carried=True)
    >>> shift_right_round_fixed(-0b1101, 2)
    RoundResult(value=-3, carried=False)
    """
    if size is None:
        size = abs(x).bit_length()
    if bits >= size:
        raise ValueError('cannot keep {} bits of a {} bit number'.format(repr(size - bits), repr(size)))

    value, carried = shift_right_round_carry(x, bits, size)
    if carried:
        # value is +-2**(size - bits), so halving it is exact
        value = value // 2
    return RoundResult(value, carried)
