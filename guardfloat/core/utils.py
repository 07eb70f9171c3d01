"""General utilities, such as exception classes."""


# guardfloat-specific exceptions

class GuardFloatError(Exception):
    """Base guardfloat error."""

class DomainError(GuardFloatError, ValueError):
    """Operand outside the domain of an operation, such as the square root of a negative number."""

class DivisionByZero(DomainError, ZeroDivisionError):
    """Division or inversion by a value that is Zero."""

class NarrowingOverflowError(GuardFloatError, OverflowError):
    """Value does not fit in the fixed-width type it is being converted to."""


# Useful things

def maskbits(x: int, n:int) -> int:
    """Keep the bottom n bits of x if n is positive, or clear them if n is negative."""
    if n >= 0:
        return x & ((1 << n) - 1)
    else:
        return x & (-1 << -n)

def shift(x: int, n: int) -> int:
    """Shift x left by n bits, or right (truncating toward -inf) if n is negative."""
    if n >= 0:
        return x << n
    else:
        return x >> -n

def sign(x: int) -> int:
    return (x > 0) - (x < 0)
