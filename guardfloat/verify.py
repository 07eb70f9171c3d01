"""Exhaustive checks of the Newton kernels against GMP.

Operands come from four families: a brute force range of small integers,
powers of two plus or minus a small delta, repeated bit patterns, and
random numbers of random size. They are split into chunks and checked in
parallel, in a process pool.

Usage:
    python -m guardfloat.verify --check all --bits 2000 --random 200
"""

import logging
import random
import sys
from multiprocessing import Pool

import gmpy2 as gmp

from .core import newton


logger = logging.getLogger(__name__)


# operands

def brute_operands(n):
    return list(range(n))

def power_of_two_operands(bits, delta):
    xs = []
    for b in range(1, bits + 1):
        for d in range(-delta, delta + 1):
            x = (1 << b) + d
            if x >= 0:
                xs.append(x)
    return xs

def pattern_operands(bits):
    xs = []
    for pattern in ('1', '10', '110', '1100', '1000'):
        for reps in range(1, bits // len(pattern) + 1):
            xs.append(int(pattern * reps, 2))
    return xs

def random_operands(bits, count, seed):
    rng = random.Random(seed)
    return [rng.getrandbits(rng.randint(1, bits)) for _ in range(count)]

def operands(bits, brute, delta, count, seed):
    return (brute_operands(brute)
            + power_of_two_operands(bits, delta)
            + pattern_operands(bits)
            + random_operands(bits, count, seed))


# checks: each takes a list of operands and returns a list of failures

def check_sqrt(xs):
    failures = []
    for x in xs:
        got = newton.newton_sqrt(x)
        expected = int(gmp.isqrt(x))
        if got != expected:
            failures.append(('sqrt', x, got, expected))
    return failures

def check_inverse(xs, bits):
    failures = []
    for x in xs:
        if x == 0:
            continue
        n = x.bit_length()
        want = bits if bits > 0 else n
        got = newton.newton_inverse(x, bits)
        expected = int(gmp.f_div(gmp.mpz(1) << (n + want - 1), x))
        if got != expected:
            failures.append(('inverse', x, got, expected))
    return failures

def check_pow(xs, exponent, wanted_bits):
    failures = []
    for x in xs:
        if x == 0:
            continue
        want = wanted_bits if wanted_bits > 0 else x.bit_length()
        top, shift = newton.pow_top_bits(x, exponent, want)
        exact = gmp.mpz(x) ** exponent
        if shift >= 0:
            truncated = int(exact >> shift)
        else:
            truncated = int(exact << -shift)
        true_shift = exact.bit_length() - want
        if not (0 <= top - truncated <= 1 and top.bit_length() == want and abs(shift - true_shift) <= 1):
            failures.append(('pow', x, (top, shift), (truncated, true_shift)))
    return failures


def chunked(xs, size):
    for i in range(0, len(xs), size):
        yield xs[i:i + size]


def run(checks, xs, chunk=256, processes=None):
    """Run each (fn, extra_args) check over xs in a process pool.
    Returns the list of all failures.
    """
    failures = []
    with Pool(processes=processes) as p:
        result_buf = []

        for fn, extra_args in checks:
            for xs_chunk in chunked(xs, chunk):
                result_buf.append((fn.__name__, p.apply_async(fn, (xs_chunk, *extra_args))))

        print(f'waiting for {len(result_buf)!s} chunks of {len(xs)!s} operands to come back')

        for done, (name, result) in enumerate(result_buf, 1):
            chunk_failures = result.get()
            logger.debug('%s: chunk %d finished with %d failures', name, done, len(chunk_failures))
            failures.extend(chunk_failures)

    return failures


def main(argv=None):
    import argparse

    parser = argparse.ArgumentParser(description='check the Newton kernels against GMP')
    parser.add_argument('--check', choices=['sqrt', 'inverse', 'pow', 'all'], default='all',
                        help='which kernel to check')
    parser.add_argument('--bits', type=int, default=1000,
                        help='largest operand size, in bits')
    parser.add_argument('--brute', type=int, default=1 << 14,
                        help='check every operand below this')
    parser.add_argument('--delta', type=int, default=8,
                        help='check powers of two plus or minus this much')
    parser.add_argument('--random', type=int, default=1000,
                        help='number of random operands')
    parser.add_argument('--seed', type=int, default=0,
                        help='random seed')
    parser.add_argument('--precision', type=int, default=0,
                        help='bits for inverse and pow (0 means the size of the operand)')
    parser.add_argument('--exponent', type=int, default=7,
                        help='exponent for pow')
    parser.add_argument('--chunk', type=int, default=256,
                        help='operands per task')
    parser.add_argument('--processes', type=int, default=None,
                        help='worker processes (default: one per cpu)')
    parser.add_argument('-v', '--verbose', action='store_true')
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    checks = []
    if args.check in ('sqrt', 'all'):
        checks.append((check_sqrt, ()))
    if args.check in ('inverse', 'all'):
        checks.append((check_inverse, (args.precision,)))
    if args.check in ('pow', 'all'):
        checks.append((check_pow, (args.exponent, args.precision)))

    xs = operands(args.bits, args.brute, args.delta, args.random, args.seed)
    failures = run(checks, xs, chunk=args.chunk, processes=args.processes)

    for name, x, got, expected in failures[:20]:
        print(f'FAIL {name}({x!r}): got {got!r}, expected {expected!r}', file=sys.stderr)
    print(f'{len(failures)!s} failures', flush=True)

    return 1 if failures else 0


if __name__ == '__main__':
    sys.exit(main())
