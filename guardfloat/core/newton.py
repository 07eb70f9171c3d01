"""Newton's method kernels on plain ints.

Each kernel starts from a hardware double approximation of the answer and
refines it with Newton-Raphson steps over a window of bits that roughly
doubles every round, so that most of the work is done on numbers much
smaller than the operand. Only the last round is done at full width, and
is followed by an exact correction against the operand.

Intermediate results are passed around as Window(value, bits) pairs:
value is trusted to about its leading bits bits.
"""

import logging
import math
import typing

from . import utils
from .integral import ctz2, is_power_of_two


logger = logging.getLogger(__name__)


# bits of a hardware double seed that are trusted
SEED_BITS = 48

# below this many bits (operand + requested precision), inverse just divides
INVERSE_NEWTON_CUTOFF = 1024

# extra bits carried by inverse and pow_top_bits beyond what was asked for
WORKING_EXTRA = 8

# bound for every loop in this module
MAX_ITERATIONS = 64


class Window(typing.NamedTuple):
    value: int
    bits: int

class PowResult(typing.NamedTuple):
    """Top bits of a power: x**exponent ~= top * 2**shift."""
    top: int
    shift: int


def _widths(target, margin):
    """Window sizes from just above SEED_BITS up to target, each at most
    a little under twice the previous one. The last entry is target.
    Returns (seed_width, widths).
    """
    widths = []
    w = target
    while w > SEED_BITS:
        widths.append(w)
        w = w // 2 + margin
    widths.reverse()
    return w, widths


# square root

def _even_shift(n, w):
    """Even right shift that leaves about 2*w bits of an n bit number."""
    s = max(0, n - 2 * w)
    return s + (s & 1)

def _sqrt_seed(y):
    # y is small enough to convert to a double exactly, or nearly so
    r = int(math.sqrt(y))
    return max(r, 1)

def newton_sqrt(x: int) -> int:
    """Integer square root: the largest r with r*r <= x.

    >>> newton_sqrt(0)
    0
    >>> newton_sqrt(24)
    4
    >>> newton_sqrt(25)
    5
    >>> newton_sqrt((1 << 200) - 1) == (1 << 100) - 1
    True
    """
    if x < 0:
        raise utils.DomainError('cannot take the square root of negative number {}'.format(repr(x)))
    elif x == 0:
        return 0

    n = x.bit_length()
    w, widths = _widths((n + 1) // 2, 2)

    s = _even_shift(n, w)
    window = Window(_sqrt_seed(x >> s), w)

    for w in widths:
        s_next = _even_shift(n, w)
        xs = x >> s_next
        guess = window.value << ((s - s_next) // 2)
        window = Window((guess + xs // guess) >> 1, w)
        s = s_next

    # the last window is the full width (s == 0). After a Newton step r can
    # only be too big, but a seed used directly can be off either way
    r = window.value
    fixups = 0
    while r * r > x:
        r -= 1
        fixups += 1
        assert fixups < MAX_ITERATIONS, 'newton_sqrt failed to converge for {}'.format(repr(x))
    while (r + 1) * (r + 1) <= x:
        r += 1
        fixups += 1
        assert fixups < MAX_ITERATIONS, 'newton_sqrt failed to converge for {}'.format(repr(x))

    logger.debug('newton_sqrt: %d bits, %d rounds, %d fixups', n, len(widths), fixups)
    return r


# reciprocal

def _reciprocal_seed(x, n, w):
    """About 2**(w - 1) / X, where X = x / 2**n is in [1/2, 1)."""
    top = utils.shift(x, 53 - n)
    return Window(int(math.ldexp(math.ldexp(1.0, 53) / top, w - 1)), w)

def _newton_reciprocal(x, n, bits):
    w, widths = _widths(bits + WORKING_EXTRA, 4)
    window = _reciprocal_seed(x, n, w)

    for w in widths:
        # y' = y * (2 - X*y), with X truncated to a few more bits than we want
        m = w + 2
        xt = utils.shift(x, m - n)
        y = window.value
        correction = (xt * y * y) >> (m + 2 * window.bits - w - 1)
        window = Window((y << (w - window.bits + 1)) - correction, w)

    return utils.shift(window.value, bits - window.bits), len(widths)

def newton_inverse(x: int, bits: int = 0) -> int:
    """Fixed-point reciprocal of x: floor(2**(n + bits - 1) / abs(x)),
    with the sign of x, where n is the bit length of abs(x).

    For x that is not a power of two, the result has exactly bits bits.
    If bits is 0, it defaults to n.

    >>> newton_inverse(3, 8) # 512 / 3
    170
    >>> newton_inverse(-3, 8)
    -170
    >>> newton_inverse(4, 4) # a power of two gets one more bit
    16
    >>> newton_inverse(255)
    128
    """
    if x == 0:
        raise utils.DivisionByZero('cannot invert zero')
    elif bits < 0:
        raise ValueError('cannot compute inverse to {} bits'.format(repr(bits)))

    negative = x < 0
    x = abs(x)
    n = x.bit_length()
    if bits == 0:
        bits = n
    numerator = 1 << (n + bits - 1)

    if n + bits <= INVERSE_NEWTON_CUTOFF:
        r = numerator // x
    elif is_power_of_two(x):
        r = 1 << bits
    else:
        r, rounds = _newton_reciprocal(x, n, bits)
        # exact correction, so the result is the true floor
        rem = numerator - r * x
        fixups = 0
        while rem < 0:
            r -= 1
            rem += x
            fixups += 1
            assert fixups < MAX_ITERATIONS, 'newton_inverse failed to converge for {}'.format(repr(x))
        while rem >= x:
            r += 1
            rem -= x
            fixups += 1
            assert fixups < MAX_ITERATIONS, 'newton_inverse failed to converge for {}'.format(repr(x))
        logger.debug('newton_inverse: %d bits to %d bits, %d rounds, %d fixups', n, bits, rounds, fixups)

    if negative:
        return -r
    else:
        return r


# powers

def _trim(lo, hi, shift, width):
    """Cut a bounding pair down to width bits: lo rounds down and hi rounds up."""
    extra = hi.bit_length() - width
    if extra <= 0:
        return lo, hi, shift
    else:
        return lo >> extra, -((-hi) >> extra), shift + extra

def _pow_bounds(x, exponent, width):
    """lo * 2**shift <= x**exponent <= hi * 2**shift, for x, exponent >= 1."""
    lo, hi, shift = 1, 1, 0
    base_lo, base_hi, base_shift = _trim(x, x, 0, width)
    while True:
        if exponent & 1:
            lo, hi, shift = _trim(lo * base_lo, hi * base_hi, shift + base_shift, width)
        exponent >>= 1
        if exponent == 0:
            return lo, hi, shift
        base_lo, base_hi, base_shift = _trim(base_lo * base_lo, base_hi * base_hi, 2 * base_shift, width)

def pow_top_bits(x: int, exponent: int, wanted_bits: int = 0) -> PowResult:
    """The top wanted_bits bits of x**exponent, without computing the whole power.

    Returns PowResult(top, shift), where top has exactly wanted_bits bits and
        0 <= abs(top) - (abs(x)**exponent >> shift) <= 1
    i.e. the top bits are never too small and at most one unit too big. The
    shift is within one of the bit length of the power minus wanted_bits.
    If wanted_bits is 0, it defaults to the bit length of x.

    >>> pow_top_bits(3, 4) # 81 = 0b1010001
    PowResult(top=2, shift=5)
    >>> pow_top_bits(-3, 3, 5) # -27 = -0b11011
    PowResult(top=-27, shift=0)
    >>> pow_top_bits(12, 10, 3) # 12**10 is a 36 bit number starting with 0b111
    PowResult(top=7, shift=33)
    """
    if exponent < 0:
        raise utils.DomainError('cannot compute top bits of a negative power {}'.format(repr(exponent)))

    negative = x < 0 and exponent & 1 == 1
    x = abs(x)
    if wanted_bits <= 0:
        wanted_bits = max(x.bit_length(), 1)

    if x == 0 and exponent > 0:
        return PowResult(0, 0)

    zeros, odd = ctz2(x)
    if exponent == 0 or odd == 1:
        # exactly a power of two
        top = 1 << (wanted_bits - 1)
        shift = zeros * exponent - (wanted_bits - 1)
    else:
        width = wanted_bits + exponent.bit_length() + WORKING_EXTRA
        attempts = 0
        while True:
            lo, hi, sh = _pow_bounds(odd, exponent, width)
            sh += zeros * exponent
            shift = sh + hi.bit_length() - wanted_bits
            top = utils.shift(hi, sh - shift)
            if top - utils.shift(lo, sh - shift) <= 1:
                break
            attempts += 1
            assert attempts < MAX_ITERATIONS, 'pow_top_bits failed to converge for {}**{}'.format(repr(x), repr(exponent))
            logger.debug('pow_top_bits: bounds too loose at %d bits, widening', width)
            width *= 2

    if negative:
        return PowResult(-top, shift)
    else:
        return PowResult(top, shift)
