"""Evaluation contexts: limits on the precision of computed results."""


class BigFloatCtx(object):
    """Context for guard-bit arithmetic.

    Results computed with a context are rounded to nearest so that they have
    at most precision precise bits, and at most accuracy precise bits below
    the radix point. A limit of None means no limit.
    """

    precision = None
    accuracy = None

    def __init__(self, precision=None, accuracy=None):
        if precision is not None and precision < 0:
            raise ValueError('precision must be nonnegative, got {}'.format(repr(precision)))
        self.precision = precision
        self.accuracy = accuracy

    def __repr__(self):
        args = []
        if self.precision is not None:
            args.append('precision=' + repr(self.precision))
        if self.accuracy is not None:
            args.append('accuracy=' + repr(self.accuracy))
        return '{}({})'.format(type(self).__name__, ', '.join(args))

    def __eq__(self, other):
        if not isinstance(other, BigFloatCtx):
            return NotImplemented
        return self.precision == other.precision and self.accuracy == other.accuracy

    def __hash__(self):
        return hash((self.precision, self.accuracy))

    def let(self, precision=None, accuracy=None):
        """Create a new context, updated with any provided limits."""
        if precision is None:
            precision = self.precision
        if accuracy is None:
            accuracy = self.accuracy
        return type(self)(precision=precision, accuracy=accuracy)

    def round(self, x):
        """Round the digital number x to this context."""
        if self.accuracy is not None and x.accuracy > self.accuracy:
            x = x.truncate_by_and_round(x.accuracy - self.accuracy)
        if self.precision is not None and x.precision > self.precision:
            x = x.set_precision_with_round(self.precision)
        return x
