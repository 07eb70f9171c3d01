from .core import utils, integral, rounding, digital, newton, gmpmath
from .arithmetic import evalctx, compare, bigfloat

BigFloat = bigfloat.BigFloat
BigFloatCtx = evalctx.BigFloatCtx
GUARD_BITS = digital.GUARD_BITS

DomainError = utils.DomainError
DivisionByZero = utils.DivisionByZero
NarrowingOverflowError = utils.NarrowingOverflowError
