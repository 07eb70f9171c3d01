"""Arbitrary-precision binary floating point that tracks its own accuracy.

A BigFloat carries GUARD_BITS extra bits below its precision. Every
operation sizes its result to the precision that its operands can
justify: a product of an N bit and an M bit number keeps min(N, M) bits,
the sum of two numbers is only as accurate as the coarser one, and so on.
Equality and ordering (==, <, ...) ignore differences that only show up
in the guard bits, see compare.compare.
"""

import math
import numbers

import gmpy2 as gmp

from ..core import utils
from ..core import digital
from ..core import gmpmath
from ..core import newton
from ..core.digital import GUARD_BITS
from ..core.integral import floorlog2
from ..core.rounding import shift_right_round, shift_right_round_carry

from . import compare
from .np import to_numpy


# divisors wider than this (in bits) are divided using newton_inverse
DIVIDE_NEWTON_CUTOFF = 8192

# when operand sizes differ by at least this much, the larger one is cut
# down before multiplying, keeping MUL_KEEP_EXTRA bits over the smaller one
MUL_SKIP_SIZE_DIFF = 32
MUL_KEEP_EXTRA = 16

# bits of precision given to integers beyond the ones they need
INT_EXTRA_PRECISION = 64


def _divmod(num, den):
    """divmod for nonnegative ints, using newton_inverse for wide divisors."""
    den_size = den.bit_length()
    if den_size <= DIVIDE_NEWTON_CUTOFF:
        return divmod(num, den)

    bits = max(num.bit_length() - den_size, 0) + 2
    inv = newton.newton_inverse(den, bits)
    q = (num * inv) >> (den_size + bits - 1)
    r = num - q * den
    while r < 0:
        q -= 1
        r += den
    while r >= den:
        q += 1
        r -= den
    return q, r


class BigFloat(digital.Digital):

    def __init__(self, x=None, ctx=None, **kwargs):
        """Create a new BigFloat.

        x can be another digital number to clone and update with kwargs,
        as for Digital, or an int, float, gmpy2.mpz or gmpy2.mpfr to convert.
        Conversions are exact: ints get INT_EXTRA_PRECISION more bits of
        precision than they need, floats and MPFRs keep their own precision.
        If a context is given, the new value is rounded to it.
        """
        if x is None or isinstance(x, digital.Digital):
            unrounded = digital.Digital(x=x, **kwargs)
        else:
            if kwargs:
                raise ValueError('cannot specify additional values {}'.format(repr(kwargs)))
            unrounded = self._convert(x)

        if ctx is not None:
            unrounded = ctx.round(unrounded)

        super().__init__(x=unrounded)

    @staticmethod
    def _convert(x):
        if isinstance(x, numbers.Integral):
            return digital.Digital.from_raw_parts(int(x) << INT_EXTRA_PRECISION, -INT_EXTRA_PRECISION)
        elif isinstance(x, gmp.mpfr):
            return gmpmath.mpfr_to_digital(x)
        elif isinstance(x, numbers.Real):
            f = float(x)
            if math.isnan(f) or math.isinf(f):
                raise utils.DomainError('cannot convert {} to a finite value'.format(repr(x)))
            return gmpmath.mpfr_to_digital(gmpmath.mpfr(f, 53))
        else:
            raise TypeError('cannot convert {} to {}'.format(repr(x), BigFloat.__name__))

    @classmethod
    def from_int(cls, i, extra_precision=INT_EXTRA_PRECISION):
        """The integer i, with extra_precision more bits than it needs."""
        return cls.from_raw_parts(i << extra_precision, -extra_precision)

    @classmethod
    def _round_to_context(cls, unrounded, ctx=None):
        if ctx is not None:
            unrounded = ctx.round(unrounded)
        if isinstance(unrounded, cls):
            return unrounded
        else:
            return cls(unrounded)

    def _coerce(self, other):
        if isinstance(other, BigFloat):
            return other
        else:
            return type(self)(other)

    def _operand(self, other):
        """Coerce the other operand of a Python operator, or None if we can't."""
        try:
            return self._coerce(other)
        except TypeError:
            return None

    def _order(self, other):
        """Compare to the other operand of a comparison operator.
        Returns NotImplemented for foreign types, and None if the two are
        unordered (other is a NaN). Infinities are beyond every BigFloat.
        """
        if isinstance(other, gmp.mpfr):
            finite = gmp.is_finite(other)
        elif isinstance(other, numbers.Real) and not isinstance(other, numbers.Rational):
            finite = math.isfinite(other)
        else:
            finite = True

        if not finite:
            if other != other:
                return None
            return -1 if other > 0 else 1

        other = self._operand(other)
        if other is None:
            return NotImplemented
        return compare.compare(self, other)

    # kernels

    def _add(self, other, negate=False):
        b_m = -other._m if negate else other._m
        if other._m == 0:
            return self
        elif self._m == 0:
            return type(self)(other, m=b_m)

        scale_diff = self._scale - other._scale
        if scale_diff > other._size:
            # other lies entirely below our lowest bit
            return self
        elif -scale_diff > self._size:
            return type(self)(other, m=b_m)

        if scale_diff == 0:
            m = self._m + b_m
            scale = self._scale
        elif scale_diff > 0:
            m = self._m + shift_right_round(b_m, scale_diff)
            scale = self._scale
        else:
            m = shift_right_round(self._m, -scale_diff) + b_m
            scale = other._scale

        return type(self)(m=m, scale=scale)

    def _mul(self, other):
        if self.is_zero() or other.is_zero():
            return type(self)(m=0, scale=self._scale + other._scale)

        a_m = self._m
        b_m = other._m
        pre_shift = 0
        size_diff = self._size - other._size
        if size_diff >= MUL_SKIP_SIZE_DIFF:
            pre_shift = size_diff - MUL_KEEP_EXTRA
            a_m = shift_right_round(a_m, pre_shift)
        elif -size_diff >= MUL_SKIP_SIZE_DIFF:
            pre_shift = -size_diff - MUL_KEEP_EXTRA
            b_m = shift_right_round(b_m, pre_shift)

        target = min(self._size, other._size)
        prod = a_m * b_m
        prod_size = abs(prod).bit_length()
        shrink = prod_size - target
        if shrink > 0:
            m, carried = shift_right_round_carry(prod, shrink, prod_size)
            size = target + carried
        else:
            m = prod
            size = prod_size
            shrink = 0

        scale = self._scale + other._scale + shrink + pre_shift - GUARD_BITS
        return type(self)(m=m, scale=scale, size=size)

    def _div(self, other):
        if other.is_zero():
            raise utils.DivisionByZero('cannot divide {} by zero'.format(str(self)))
        elif self.is_zero():
            return type(self)(m=0, scale=self._scale - other._scale)

        a_abs = abs(self._m)
        b_abs = abs(other._m)
        target = min(self._size, other._size)

        # the quotient gets one more bit if the leading bits of a are at least b
        if utils.shift(a_abs, other._size - self._size) >= b_abs:
            k = target + other._size - self._size - 1
        else:
            k = target + other._size - self._size

        if k >= 0:
            q, r = _divmod(a_abs << k, b_abs)
            den = b_abs
        else:
            den = b_abs << -k
            q, r = _divmod(a_abs, den)
        if 2 * r >= den:
            q += 1

        if (self._m < 0) != (other._m < 0):
            q = -q
        return type(self)(m=q, scale=self._scale - other._scale - k + GUARD_BITS)

    def _remainder(self, other):
        if other.is_zero():
            raise utils.DivisionByZero('cannot take {} modulo zero'.format(str(self)))

        fine = min(self._scale, other._scale)
        coarse = max(self._scale, other._scale)
        a_m = self._m << (self._scale - fine)
        b_m = other._m << (other._scale - fine)

        # truncated division: the remainder has the sign of the dividend
        _, r = _divmod(abs(a_m), abs(b_m))
        if a_m < 0:
            r = -r
        return type(self)(m=shift_right_round(r, coarse - fine), scale=coarse)

    def _add_unit(self, direction):
        ones = GUARD_BITS - self._scale
        if ones < 0:
            # the ones place is below the bottom of the mantissa
            return self
        return type(self)(self, m=self._m + (direction << ones))

    def _sqrt(self, wanted_precision):
        if self.is_zero():
            return type(self)(m=0, scale=self._scale // 2)
        elif self._m < 0:
            raise utils.DomainError('cannot take the square root of negative number {}'.format(str(self)))

        if wanted_precision <= 0:
            wanted_precision = max(self.precision, 1)
        want = wanted_precision + GUARD_BITS

        # scale the radicand to 2*want + 2 bits, with an even exponent,
        # and take one extra bit of root to round with
        k = 2 * want + 2 - self._size
        if (self._scale - GUARD_BITS - k) & 1:
            k += 1
        r = newton.newton_sqrt(utils.shift(self._m, k))
        return type(self)(m=shift_right_round(r, 1),
                          scale=(self._scale - GUARD_BITS - k) // 2 + GUARD_BITS + 1)

    def _inverse(self):
        if self.is_zero():
            raise utils.DivisionByZero('cannot invert zero value {}'.format(str(self)))
        n = self._size
        # 2**(2n) / m, with one extra bit to round with
        inv = newton.newton_inverse(self._m, n + 1)
        return type(self)(m=shift_right_round(inv, 1), scale=2 * GUARD_BITS - 2 * n - self._scale + 1)

    def _pow(self, exponent):
        if exponent < 0:
            return self._pow(-exponent)._inverse()
        elif exponent == 0:
            size = max(self._size, GUARD_BITS + 1)
            return type(self)(m=1 << (size - 1), scale=GUARD_BITS - size + 1)
        elif exponent == 1:
            return self
        elif self.is_zero():
            return type(self)(m=0, scale=self._scale * exponent)

        # relative error grows with the exponent: give up a bit per doubling
        want = max(self._size - floorlog2(exponent), 1)
        top, shift = newton.pow_top_bits(self._m, exponent, want)
        return type(self)(m=top, scale=shift + exponent * (self._scale - GUARD_BITS) + GUARD_BITS)

    # arithmetic

    def add(self, other, ctx=None):
        """Sum, at the coarser of the two scales.
        A StrictZero operand is an exact identity whatever its scale: adding
        zero_with_accuracy(-10) does not cut the other operand's accuracy.
        """
        other = self._coerce(other)
        return self._round_to_context(self._add(other), ctx=ctx)

    def sub(self, other, ctx=None):
        other = self._coerce(other)
        return self._round_to_context(self._add(other, negate=True), ctx=ctx)

    def mul(self, other, ctx=None):
        other = self._coerce(other)
        return self._round_to_context(self._mul(other), ctx=ctx)

    def square(self, ctx=None):
        return self._round_to_context(self._mul(self), ctx=ctx)

    def div(self, other, ctx=None):
        other = self._coerce(other)
        return self._round_to_context(self._div(other), ctx=ctx)

    def remainder(self, other, ctx=None):
        """Remainder of truncated division: the result has the sign of self.
        This is what the % operator computes, as in C rather than Python.
        The result is as accurate as the coarser of the two operands.
        """
        other = self._coerce(other)
        return self._round_to_context(self._remainder(other), ctx=ctx)

    def mod(self, other, ctx=None):
        """Modulus with the sign of the divisor, like Python's % on ints."""
        other = self._coerce(other)
        r = self._remainder(other)
        if not r.is_zero() and utils.sign(r._m) != utils.sign(other._m):
            r = r._add(other)
        return self._round_to_context(r, ctx=ctx)

    def increment(self, ctx=None):
        """Add exactly one at the current scale.
        If the ones place is below the mantissa, the value is unchanged.
        """
        return self._round_to_context(self._add_unit(1), ctx=ctx)

    def decrement(self, ctx=None):
        return self._round_to_context(self._add_unit(-1), ctx=ctx)

    def neg(self, ctx=None):
        return self._round_to_context(type(self)(self, m=-self._m), ctx=ctx)

    def fabs(self, ctx=None):
        return self._round_to_context(type(self)(self, m=abs(self._m)), ctx=ctx)

    def sqrt(self, wanted_precision=0, ctx=None):
        """Square root, to wanted_precision bits (by default, our own precision)."""
        return self._round_to_context(self._sqrt(wanted_precision), ctx=ctx)

    def inverse(self, ctx=None):
        return self._round_to_context(self._inverse(), ctx=ctx)

    def pow(self, exponent, ctx=None):
        """Raise to an integer power.
        The result has floor(log2(abs(exponent))) fewer bits of precision.
        """
        if not isinstance(exponent, numbers.Integral):
            raise TypeError('exponent must be an integer, got {}'.format(repr(exponent)))
        return self._round_to_context(self._pow(int(exponent)), ctx=ctx)

    def floor(self, ctx=None):
        """Round down to an integer, once the guard bits are rounded away."""
        if self._scale >= 0:
            return self._round_to_context(self, ctx=ctx)
        rounded = shift_right_round(self._m, GUARD_BITS)
        return self._round_to_context(type(self).from_raw_parts(rounded >> -self._scale, 0), ctx=ctx)

    def ceil(self, ctx=None):
        return self.neg().floor().neg(ctx=ctx)

    def round(self, ctx=None):
        """Round to the nearest integer, ties away from zero, once the guard bits are rounded away."""
        if self._scale >= 0:
            return self._round_to_context(self, ctx=ctx)
        rounded = shift_right_round(self._m, GUARD_BITS)
        return self._round_to_context(type(self).from_raw_parts(shift_right_round(rounded, -self._scale), 0), ctx=ctx)

    def trunc(self, ctx=None):
        """Round toward zero to an integer."""
        if self._scale >= 0:
            return self._round_to_context(self, ctx=ctx)
        return self._round_to_context(type(self).from_raw_parts(int(self), 0), ctx=ctx)

    def fractional_part(self, ctx=None):
        """The bits of the magnitude below the radix point, with our sign."""
        frac_bits = GUARD_BITS - self._scale
        if frac_bits <= 0:
            return self._round_to_context(type(self)(m=0, scale=self._scale), ctx=ctx)
        m = utils.maskbits(abs(self._m), frac_bits)
        if self._m < 0:
            m = -m
        return self._round_to_context(type(self)(self, m=m), ctx=ctx)

    def log2(self):
        """Base 2 logarithm, as a hardware double."""
        if self._m <= 0:
            raise utils.DomainError('cannot take the logarithm of nonpositive number {}'.format(str(self)))
        k = self._size - 53
        return math.log2(shift_right_round(self._m, k)) + (k + self._scale - GUARD_BITS)

    def log2_int(self):
        """floor(log2(abs(x))) as an int: the binary exponent. A StrictZero gives 0."""
        if self._m == 0:
            return 0
        return self.binary_exponent

    # comparison

    def compareto(self, other, exact=False):
        """Compare to another number: -1, 0, or 1.
        If exact is True, compare the stored values exactly (see compare.compare_exact),
        otherwise ignore the guard bits (see compare.compare).
        """
        other = self._coerce(other)
        if exact:
            return compare.compare_exact(self, other)
        else:
            return compare.compare(self, other)

    def __lt__(self, other):
        order = self._order(other)
        if order is NotImplemented:
            return NotImplemented
        return order is not None and order < 0

    def __le__(self, other):
        order = self._order(other)
        if order is NotImplemented:
            return NotImplemented
        return order is not None and order <= 0

    def __eq__(self, other):
        order = self._order(other)
        if order is NotImplemented:
            return NotImplemented
        return order == 0

    def __ne__(self, other):
        order = self._order(other)
        if order is NotImplemented:
            return NotImplemented
        return order != 0

    def __ge__(self, other):
        order = self._order(other)
        if order is NotImplemented:
            return NotImplemented
        return order is not None and order >= 0

    def __gt__(self, other):
        order = self._order(other)
        if order is NotImplemented:
            return NotImplemented
        return order is not None and order > 0

    # fuzzy equality can't be hashed consistently
    __hash__ = None

    # operators

    def __add__(self, other):
        other = self._operand(other)
        if other is None:
            return NotImplemented
        return self._add(other)

    def __radd__(self, other):
        other = self._operand(other)
        if other is None:
            return NotImplemented
        return other._add(self)

    def __sub__(self, other):
        other = self._operand(other)
        if other is None:
            return NotImplemented
        return self._add(other, negate=True)

    def __rsub__(self, other):
        other = self._operand(other)
        if other is None:
            return NotImplemented
        return other._add(self, negate=True)

    def __mul__(self, other):
        other = self._operand(other)
        if other is None:
            return NotImplemented
        return self._mul(other)

    def __rmul__(self, other):
        other = self._operand(other)
        if other is None:
            return NotImplemented
        return other._mul(self)

    def __truediv__(self, other):
        other = self._operand(other)
        if other is None:
            return NotImplemented
        return self._div(other)

    def __rtruediv__(self, other):
        other = self._operand(other)
        if other is None:
            return NotImplemented
        return other._div(self)

    def __mod__(self, other):
        other = self._operand(other)
        if other is None:
            return NotImplemented
        return self._remainder(other)

    def __rmod__(self, other):
        other = self._operand(other)
        if other is None:
            return NotImplemented
        return other._remainder(self)

    def __pow__(self, exponent):
        if not isinstance(exponent, numbers.Integral):
            return NotImplemented
        return self._pow(int(exponent))

    def __neg__(self):
        return type(self)(self, m=-self._m)

    def __pos__(self):
        return self

    def __abs__(self):
        return type(self)(self, m=abs(self._m))

    def __lshift__(self, k):
        return self.adjust_scale(k)

    def __rshift__(self, k):
        return self.adjust_scale(-k)

    def __bool__(self):
        return not self.is_zero()

    # conversion

    def __int__(self):
        """Round away the guard bits, then truncate toward zero."""
        rounded = shift_right_round(self._m, GUARD_BITS)
        if self._scale >= 0:
            return rounded << self._scale
        elif rounded < 0:
            return -((-rounded) >> -self._scale)
        else:
            return rounded >> -self._scale

    def __trunc__(self):
        return int(self)

    def __floor__(self):
        return int(self.floor())

    def __ceil__(self):
        return int(self.ceil())

    def __round__(self):
        return int(self.round())

    def __float__(self):
        """Nearest double (from the top 53 bits, guard bits included).
        Raises OverflowError if the value is too big for a double.
        """
        if self._m == 0:
            return 0.0
        k = self._size - 53
        return math.ldexp(float(shift_right_round(self._m, k)), k + self._scale - GUARD_BITS)

    def astype(self, dtype):
        """Convert to a numpy scalar of type dtype.
        Raises NarrowingOverflowError if the value does not fit.
        """
        return to_numpy(self, dtype)

    def __str__(self):
        if self.is_out_of_precision():
            return '0'
        precise = digital.Digital.from_raw_parts(shift_right_round(self._m, GUARD_BITS), self._scale)
        return str(gmpmath.digital_to_mpfr(precise))
