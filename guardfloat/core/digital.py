"""Universal representation for numbers with guard bits (in base 2)"""

from . import utils
from .rounding import shift_right_round, shift_right_round_fixed


# the bottom GUARD_BITS bits of every mantissa are guard bits
GUARD_BITS = 32


def _truncate(m, bits):
    """Drop bits from the bottom of m, rounding the magnitude toward zero."""
    if m < 0:
        return -((-m) >> bits)
    else:
        return m >> bits


class Digital(object):

    # the real value is exactly _m * 2**(_scale - GUARD_BITS)
    _m : int = 0
    _scale : int = 0

    # cached bit length of abs(_m), including the guard bits
    _size : int = 0

    # the internal state is not directly visible: expose it with properties

    @property
    def mantissa(self):
        """Signed integer mantissa, including the guard bits.
        The real value is exactly (mantissa * 2**(scale - GUARD_BITS)).
        """
        return self._m

    @property
    def scale(self):
        """Signed integer scale: the binary exponent of the lowest bit above
        the guard bits. from_raw_parts(m, scale) is exactly m * 2**scale.
        """
        return self._scale

    @property
    def size(self):
        """Bit length of the magnitude of the mantissa, guard bits included."""
        return self._size

    @property
    def precision(self):
        """Number of bits of the mantissa that are above the guard bits.
        Negative if the mantissa is smaller than the guard bits.
        """
        return self._size - GUARD_BITS

    @property
    def accuracy(self):
        """Number of precise bits below the radix point.
        Negative if the lowest precise bit is above the ones place.
        """
        return -self._scale

    @property
    def binary_exponent(self):
        """Exponent of the leading bit: 2**binary_exponent <= abs(value) for nonzero values."""
        return self._scale + self._size - GUARD_BITS - 1

    @property
    def sign(self):
        """-1, 0, or 1. Values with less than one bit of precision have sign 0."""
        if self._size >= GUARD_BITS - 1:
            return utils.sign(self._m)
        else:
            return 0

    def is_zero(self):
        """Is this value zero to within its precision?
        A value is Zero if its mantissa is empty, or if all of its bits
        (even the guard bits) are below the ones place of the guard region.
        """
        return self._size == 0 or (self._size + self._scale < GUARD_BITS and self._size < GUARD_BITS)

    def is_strict_zero(self):
        """Is the mantissa exactly zero?"""
        return self._m == 0

    def is_out_of_precision(self):
        """Does this value have less than one bit of precision?"""
        return self._size < GUARD_BITS

    def is_positive(self):
        return self.sign > 0

    def is_negative(self):
        return self.sign < 0

    def is_integer(self):
        """Is this value an integer, once the guard bits are rounded away?"""
        if self._scale >= 0:
            return True
        rounded = shift_right_round(self._m, GUARD_BITS)
        return utils.maskbits(abs(rounded), -self._scale) == 0

    def is_identical_to(self, other):
        """Is this value encoded identically to some other value?
        This is a structural property, and may be stricter than real valued equality.
        """
        return self._m == other._m and self._scale == other._scale

    def validate(self):
        """Check the cached size against the mantissa."""
        if self._size != abs(self._m).bit_length():
            raise ValueError('inconsistent size {} for mantissa {}'.format(repr(self._size), repr(self._m)))

    def __init__(self, x=None, m=None, scale=None, size=None):
        """Create a new digital number. The first argument, "x", is a base number
        to clone and update, otherwise the default values will be used.
        The mantissa m includes the guard bits. If the size is given, it must be
        the bit length of abs(m); it is only a shortcut to avoid recomputing it.
        """
        # _m and _size
        if m is not None:
            self._m = m
            if size is not None:
                if size != abs(m).bit_length():
                    raise ValueError('size {} does not match mantissa {}'.format(repr(size), repr(m)))
                self._size = size
            else:
                self._size = abs(m).bit_length()
        elif size is not None:
            raise ValueError('cannot specify size={} without m'.format(repr(size)))
        elif x is not None:
            self._m = x._m
            self._size = x._size
        else:
            self._m = type(self)._m
            self._size = type(self)._size

        # _scale
        if scale is not None:
            self._scale = scale
        elif x is not None:
            self._scale = x._scale
        else:
            self._scale = type(self)._scale

    @classmethod
    def from_raw_parts(cls, mantissa, scale, has_guard_bits=False):
        """Build a value from a mantissa and scale.
        If has_guard_bits is False, GUARD_BITS zero bits are appended to the
        mantissa, so the value is exactly mantissa * 2**scale.
        """
        if not has_guard_bits:
            mantissa = mantissa << GUARD_BITS
        return cls(m=mantissa, scale=scale)

    def __repr__(self):
        return '{}(m={}, scale={}, size={})'.format(
            type(self).__name__, repr(self._m), repr(self._scale), repr(self._size),
        )

    def __str__(self):
        return '{:d} * 2**{:d}'.format(self._m, self._scale - GUARD_BITS)

    # special values

    @classmethod
    def zero(cls):
        """Zero with no precision at all."""
        return cls(m=0, scale=0)

    @classmethod
    def zero_with_accuracy(cls, accuracy):
        """Zero, precise to accuracy bits below the radix point."""
        return cls(m=0, scale=-accuracy)

    @classmethod
    def one_with_accuracy(cls, accuracy):
        """One, precise to accuracy bits below the radix point."""
        if accuracy < -GUARD_BITS:
            raise ValueError('cannot represent one with accuracy {}'.format(repr(accuracy)))
        return cls(m=1 << (GUARD_BITS + accuracy), scale=-accuracy)

    @classmethod
    def int_with_accuracy(cls, i, accuracy):
        """The integer i, precise to accuracy bits below the radix point.
        With a negative accuracy, low bits of i are rounded away.
        """
        return cls(m=shift_right_round(i, -(GUARD_BITS + accuracy)), scale=-accuracy)

    # precision adjustment

    def adjust_scale(self, k):
        """Multiply by 2**k."""
        return type(self)(self, scale=self._scale + k)

    def truncate_by_and_round(self, k):
        """Remove k bits of precision from the bottom, rounding to nearest."""
        if k < 0:
            raise ValueError('cannot truncate by {} bits'.format(repr(k)))
        return type(self)(self, m=shift_right_round(self._m, k), scale=self._scale + k)

    def extend_precision(self, k):
        """Append k zero bits to the mantissa. The value does not change."""
        if k < 0:
            raise ValueError('cannot extend by {} bits'.format(repr(k)))
        return type(self)(self, m=self._m << k, scale=self._scale - k)

    def reduce_precision(self, k):
        """Remove k bits of precision from the bottom, rounding toward zero."""
        if k < 0:
            raise ValueError('cannot reduce by {} bits'.format(repr(k)))
        return type(self)(self, m=_truncate(self._m, k), scale=self._scale + k)

    def set_precision(self, p):
        """Pad or crop the mantissa to exactly p bits of precision, without rounding."""
        delta = p - self.precision
        if delta >= 0:
            return self.extend_precision(delta)
        else:
            return self.reduce_precision(-delta)

    def set_precision_with_round(self, p):
        """Pad or crop the mantissa to exactly p bits of precision, rounding to nearest."""
        delta = p - self.precision
        if delta >= 0:
            return self.extend_precision(delta)
        elif -delta >= self._size:
            # nothing is left but (maybe) the rounding carry
            return type(self)(self, m=shift_right_round(self._m, -delta), scale=self._scale - delta)
        else:
            m, carried = shift_right_round_fixed(self._m, -delta, self._size)
            return type(self)(self, m=m, scale=self._scale - delta + carried)
