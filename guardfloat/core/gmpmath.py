"""Exact conversions between digital numbers and GMP (MPFR) values.

MPFR is never used to compute guardfloat results; it is the reference that
results are displayed with and checked against.
"""


import gmpy2 as gmp

from . import utils
from . import digital


def _exact_context(prec):
    return gmp.context(
        precision=max(2, prec),
        emin=gmp.get_emin_min(),
        emax=gmp.get_emax_max(),
        trap_underflow=True,
        trap_overflow=True,
        trap_inexact=True,
        trap_invalid=True,
        trap_erange=True,
        trap_divzero=True,
    )


def mpfr(x, prec):
    """Convert x to an MPFR with prec bits, rounding to nearest."""
    with gmp.context(
            precision=max(2, prec),
            emin=gmp.get_emin_min(),
            emax=gmp.get_emax_max(),
            trap_underflow=True,
            trap_overflow=True,
            trap_inexact=False,
            trap_invalid=True,
            trap_erange=True,
            trap_divzero=True,
            round=gmp.RoundToNearest,
    ):
        return gmp.mpfr(x)


def digital_to_mpfr(x):
    """The exact value of x, guard bits included, as an MPFR."""
    if x.size == 0:
        with _exact_context(2):
            return gmp.zero()

    with _exact_context(x.size):
        significand = gmp.mpfr(x.mantissa)
        return gmp.mul_2exp(significand, x.scale - digital.GUARD_BITS)


def mpfr_to_digital(x, cls=digital.Digital):
    """Convert an MPFR to a value with the same precision (plus guard bits).
    The conversion is exact.
    """
    if gmp.is_nan(x) or gmp.is_infinite(x):
        raise utils.DomainError('cannot convert {} to a finite value'.format(repr(x)))
    elif gmp.is_zero(x):
        return cls.zero()

    m, e = x.as_mantissa_exp()
    m = int(m)
    e = int(e)

    # pad the mantissa back out to the precision of the MPFR
    pad = x.precision - abs(m).bit_length()
    if pad > 0:
        m <<= pad
        e -= pad

    return cls.from_raw_parts(m, e)
