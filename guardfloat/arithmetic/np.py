"""Narrowing conversions from guard-bit numbers to fixed-width numpy types.
"""

import numpy as np

from ..core import utils


binary16_synonyms = {'binary16', 'float16', 'half'}
binary32_synonyms = {'binary32', 'float32', 'single', 'float'}
binary64_synonyms = {'binary64', 'float64', 'double'}

int8_synonyms = {'int8', 'int8_t', 'char'}
int16_synonyms = {'int16', 'int16_t', 'short'}
int32_synonyms = {'int32', 'int32_t', 'int'}
int64_synonyms = {'int64', 'int64_t', 'long'}

uint8_synonyms = {'uint8', 'uint8_t'}
uint16_synonyms = {'uint16', 'uint16_t'}
uint32_synonyms = {'uint32', 'uint32_t'}
uint64_synonyms = {'uint64', 'uint64_t'}

np_types = {}
np_types.update((k, np.float16) for k in binary16_synonyms)
np_types.update((k, np.float32) for k in binary32_synonyms)
np_types.update((k, np.float64) for k in binary64_synonyms)
np_types.update((k, np.int8) for k in int8_synonyms)
np_types.update((k, np.int16) for k in int16_synonyms)
np_types.update((k, np.int32) for k in int32_synonyms)
np_types.update((k, np.int64) for k in int64_synonyms)
np_types.update((k, np.uint8) for k in uint8_synonyms)
np_types.update((k, np.uint16) for k in uint16_synonyms)
np_types.update((k, np.uint32) for k in uint32_synonyms)
np_types.update((k, np.uint64) for k in uint64_synonyms)


def scalar_type(dtype):
    """Look up a numpy scalar type by name, or from anything np.dtype accepts."""
    if isinstance(dtype, str):
        try:
            return np_types[dtype.lower()]
        except KeyError:
            raise ValueError('unsupported type {}'.format(repr(dtype)))
    return np.dtype(dtype).type


def to_numpy(x, dtype):
    """Convert x to a numpy scalar of the given type.

    Integer types get int(x) (guard bits rounded away, then truncated toward
    zero). Floating types get the nearest double, rounded again if the type
    is narrower. Raises NarrowingOverflowError if the value is out of range.
    """
    t = scalar_type(dtype)

    if issubclass(t, np.integer):
        info = np.iinfo(t)
        i = int(x)
        if i < info.min or i > info.max:
            raise utils.NarrowingOverflowError('{} does not fit in {}'.format(str(x), t.__name__))
        return t(i)

    elif issubclass(t, np.floating):
        info = np.finfo(t)
        try:
            f = float(x)
        except OverflowError as exn:
            raise utils.NarrowingOverflowError('{} does not fit in {}'.format(str(x), t.__name__)) from exn
        if abs(f) > float(info.max):
            raise utils.NarrowingOverflowError('{} does not fit in {}'.format(str(x), t.__name__))
        return t(f)

    else:
        raise ValueError('unsupported type {}'.format(repr(dtype)))
