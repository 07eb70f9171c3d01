"""Comparisons between digital numbers with guard bits.

There are three orderings:

  compare: precision-aware. Differences that only show up in the guard
    bits of the less precise operand are ignored. This is the ordering
    used by ==, <, and friends. It is not transitive: a == b and b == c
    does not imply a == c.

  compare_exact: compares the stored values exactly, guard bits included.
    This is a total order.

  compare_ignoring_least_significant_bits: like compare, but with a
    caller-chosen number of ignored bits instead of the guard bits.

All of them return -1, 0, or 1.
"""

import typing

from ..core import utils
from ..core.digital import GUARD_BITS
from ..core.rounding import shift_right_round


class MatchingBits(typing.NamedTuple):
    count: int
    sign: int


def _aligned_difference(a, b, ignored_bits):
    """Sign of a - b, computed at the coarser of the two scales,
    after rounding away another ignored_bits bits.
    """
    if a.scale >= b.scale:
        diff = a.mantissa - shift_right_round(b.mantissa, a.scale - b.scale)
    else:
        diff = shift_right_round(a.mantissa, b.scale - a.scale) - b.mantissa
    return utils.sign(shift_right_round(diff, ignored_bits))


def _exactly_aligned(a, b):
    """Both mantissas, shifted (exactly) to the finer of the two scales."""
    scale = min(a.scale, b.scale)
    return a.mantissa << (a.scale - scale), b.mantissa << (b.scale - scale)


def compare(a, b):
    """Compare a and b to within the precision of the less precise one.

    Zero values (see Digital.is_zero) are equal to each other and defer to
    the sign of the other operand. Otherwise the signs decide, then the
    binary exponents if they are more than one apart. When the exponents
    are close the mantissas are aligned and subtracted, which also catches
    a 0b1111... that rounds up to meet a 0b1000... one exponent higher.
    """
    a_zero = a.is_zero()
    b_zero = b.is_zero()
    if a_zero or b_zero:
        if a_zero and b_zero:
            return 0
        elif a_zero:
            return -utils.sign(b.mantissa)
        else:
            return utils.sign(a.mantissa)

    a_sign = utils.sign(a.mantissa)
    if a_sign != utils.sign(b.mantissa):
        return a_sign

    exp_diff = a.binary_exponent - b.binary_exponent
    if exp_diff > 1:
        return a_sign
    elif exp_diff < -1:
        return -a_sign

    return _aligned_difference(a, b, GUARD_BITS)


def compare_exact(a, b):
    """Compare the exact stored values of a and b, guard bits included."""
    a_sign = utils.sign(a.mantissa)
    b_sign = utils.sign(b.mantissa)
    if a_sign != b_sign:
        return utils.sign(a_sign - b_sign)
    elif a_sign == 0:
        return 0

    exp_diff = a.binary_exponent - b.binary_exponent
    if exp_diff != 0:
        return a_sign * utils.sign(exp_diff)

    a_m, b_m = _exactly_aligned(a, b)
    return utils.sign(a_m - b_m)


def compare_ignoring_least_significant_bits(a, b, n):
    """Compare a and b at the coarser of their two scales, ignoring
    differences in the bottom n bits there. With n == GUARD_BITS this
    is the last step of compare.
    """
    if n < 0:
        raise ValueError('cannot ignore {} bits'.format(repr(n)))
    return _aligned_difference(a, b, n)


def matching_leading_bits(a, b):
    """Number of leading bits of a and b that are literally the same.
    Values with different signs or different binary exponents share no bits.
    The count is capped by the size of the smaller mantissa.
    """
    a_sign = utils.sign(a.mantissa)
    if a_sign == 0 or a_sign != utils.sign(b.mantissa):
        return 0
    elif a.binary_exponent != b.binary_exponent:
        return 0

    a_m, b_m = _exactly_aligned(a, b)
    a_m = abs(a_m)
    agree = a_m.bit_length() - (a_m ^ abs(b_m)).bit_length()
    return min(agree, a.size, b.size)


def matching_leading_bits_with_rounding(a, b):
    """Number of leading bits of a and b that agree, measured by the size of
    their difference, so that 0b11111 and 0b100000 agree on 5 bits.

    Returns MatchingBits(count, sign), where sign is the sign of a - b.
    The count is 0 if the signs differ or the binary exponents are more
    than one apart, and at most the size of the smaller mantissa.
    """
    a_sign = utils.sign(a.mantissa)
    b_sign = utils.sign(b.mantissa)
    if a_sign == 0 or b_sign == 0 or a_sign != b_sign:
        return MatchingBits(0, compare_exact(a, b))

    exp_diff = a.binary_exponent - b.binary_exponent
    if abs(exp_diff) > 1:
        return MatchingBits(0, a_sign * utils.sign(exp_diff))

    a_m, b_m = _exactly_aligned(a, b)
    diff = a_m - b_m
    limit = min(a.size, b.size)
    if diff == 0:
        return MatchingBits(limit, 0)

    count = max(abs(a_m).bit_length(), abs(b_m).bit_length()) - abs(diff).bit_length()
    return MatchingBits(max(0, min(count, limit)), utils.sign(diff))
