"""Tests for the guard-bit representation."""

import pytest

from guardfloat.core.digital import Digital, GUARD_BITS


def raw(m, scale):
    return Digital.from_raw_parts(m, scale)


class TestRepresentation:
    def test_guard_bits(self):
        assert GUARD_BITS == 32

    def test_from_raw_parts_appends_guard_bits(self):
        d = raw(5, 3)
        assert d.mantissa == 5 << GUARD_BITS
        assert d.scale == 3
        assert d.size == 3 + GUARD_BITS
        assert d.precision == 3
        assert d.accuracy == -3
        # 5 * 2**3 = 40
        assert d.binary_exponent == 5

    def test_from_raw_parts_with_guard_bits(self):
        d = Digital.from_raw_parts(5, 3, has_guard_bits=True)
        assert d.mantissa == 5
        assert d.size == 3
        assert d.precision == 3 - GUARD_BITS
        assert d.is_out_of_precision()

    def test_size_tracks_mantissa(self):
        for m in (0, 1, -1, 255, -256, 1 << 100, -(1 << 100) + 1):
            d = Digital(m=m, scale=0)
            assert d.size == abs(m).bit_length()
            d.validate()

    def test_validate_catches_stale_size(self):
        d = Digital(m=12, scale=0)
        d._size = 7
        with pytest.raises(ValueError):
            d.validate()

    def test_size_must_match(self):
        with pytest.raises(ValueError):
            Digital(m=12, scale=0, size=5)

    def test_size_without_mantissa(self):
        with pytest.raises(ValueError):
            Digital(size=3)

    def test_clone_and_update(self):
        d = Digital(m=7, scale=2)
        e = Digital(d, scale=5)
        assert e.mantissa == 7 and e.scale == 5 and e.size == 3
        f = Digital(d, m=-300)
        assert f.mantissa == -300 and f.scale == 2 and f.size == 9

    def test_accuracy(self):
        assert raw(1, -10).accuracy == 10
        assert raw(1, 10).accuracy == -10

    def test_sign(self):
        assert raw(-3, 0).sign == -1
        assert raw(3, 0).sign == 1
        assert Digital.zero().sign == 0
        # less than one bit of precision
        assert Digital(m=-1, scale=0).sign == 0
        assert Digital(m=-(1 << 30), scale=0).sign == -1
        assert raw(-3, 0).is_negative()
        assert raw(3, 0).is_positive()

    def test_is_integer(self):
        assert raw(5, 0).is_integer()
        assert raw(5, 7).is_integer()
        assert not raw(5, -1).is_integer()
        assert raw(4, -1).is_integer()
        # guard bits just below 3 round up to it
        assert Digital(m=(6 << GUARD_BITS) - 1, scale=-1).is_integer()
        # 2.75: the guard bits tie and round up to 3
        assert Digital(m=(5 << GUARD_BITS) + (1 << 31), scale=-1).is_integer()
        assert not Digital(m=(5 << GUARD_BITS) + (1 << 31) - 1, scale=-1).is_integer()

    def test_is_identical_to(self):
        assert raw(5, 0).is_identical_to(raw(5, 0))
        assert not raw(5, 0).is_identical_to(raw(10, -1))

    def test_repr(self):
        assert repr(Digital(m=3, scale=1)) == 'Digital(m=3, scale=1, size=2)'

    def test_str(self):
        assert str(Digital(m=3, scale=1)) == '3 * 2**-31'


class TestZero:
    def test_zero_with_no_precision(self):
        z = Digital.zero()
        assert z.is_zero()
        assert z.is_strict_zero()
        assert z.size == 0
        assert z.scale == 0

    def test_tiny_values_are_not_zero(self):
        for i in range(1073):
            d = raw(1, -i)
            assert not d.is_strict_zero()
            assert not d.is_out_of_precision()
            assert not d.is_zero()

    def test_empty_mantissa_is_zero_at_any_scale(self):
        for scale in (-1000, 0, 1000):
            assert Digital(m=0, scale=scale).is_zero()

    def test_zero_threshold(self):
        # size + scale < GUARD_BITS and size < GUARD_BITS
        assert Digital(m=1 << 30, scale=0).is_zero()
        assert not Digital(m=1 << 30, scale=1).is_zero()
        assert Digital(m=1, scale=GUARD_BITS - 2).is_zero()
        assert not Digital(m=1, scale=GUARD_BITS - 1).is_zero()
        # a full guard region is never Zero
        assert not Digital(m=1 << 31, scale=-100).is_zero()

    def test_zero_is_not_strict_zero(self):
        d = Digital(m=5, scale=0)
        assert d.is_zero()
        assert not d.is_strict_zero()

    def test_out_of_precision(self):
        assert not Digital(m=1 << 31, scale=0).is_out_of_precision()
        assert Digital(m=(1 << 31) - 1, scale=0).is_out_of_precision()


class TestSpecialValues:
    def test_zero_with_accuracy(self):
        z = Digital.zero_with_accuracy(7)
        assert z.is_strict_zero()
        assert z.accuracy == 7

    def test_one_with_accuracy(self):
        one = Digital.one_with_accuracy(10)
        assert one.mantissa == 1 << (GUARD_BITS + 10)
        assert one.accuracy == 10
        assert one.precision == 11
        least = Digital.one_with_accuracy(-GUARD_BITS)
        assert least.mantissa == 1
        assert least.scale == GUARD_BITS

    def test_one_with_too_little_accuracy(self):
        with pytest.raises(ValueError):
            Digital.one_with_accuracy(-GUARD_BITS - 1)

    def test_int_with_accuracy(self):
        d = Digital.int_with_accuracy(5, 4)
        assert d.mantissa == 5 << (GUARD_BITS + 4)
        assert d.scale == -4
        # 5 = 2.5 * 2, rounded away from zero
        coarse = Digital.int_with_accuracy(5, -GUARD_BITS - 1)
        assert coarse.mantissa == 3
        assert coarse.scale == GUARD_BITS + 1


class TestPrecisionAdjustment:
    def test_adjust_scale(self):
        d = raw(0b1011, 0).adjust_scale(3)
        assert d.mantissa == 0b1011 << GUARD_BITS
        assert d.scale == 3

    def test_extend_precision(self):
        d = raw(0b1011, 0)
        e = d.extend_precision(4)
        assert e.mantissa == d.mantissa << 4
        assert e.scale == -4
        assert e.precision == 8

    def test_truncate_by_and_round(self):
        d = raw(0b1011, 0).truncate_by_and_round(GUARD_BITS + 2)
        # 11 / 4 = 2.75
        assert d.mantissa == 3
        assert d.scale == GUARD_BITS + 2

    def test_reduce_precision(self):
        d = raw(0b1011, 0).reduce_precision(GUARD_BITS + 2)
        assert d.mantissa == 2
        assert d.scale == GUARD_BITS + 2
        n = raw(-0b1011, 0).reduce_precision(GUARD_BITS + 2)
        assert n.mantissa == -2

    def test_set_precision(self):
        d = raw(0b1011, 0)
        assert d.set_precision(2).precision == 2
        assert d.set_precision(2).mantissa == 0b1011 << (GUARD_BITS - 2)
        assert d.set_precision(2).scale == 2
        assert d.set_precision(10).precision == 10

    def test_set_precision_with_round_carry(self):
        d = Digital(m=(1 << 40) - 1, scale=0)
        e = d.set_precision_with_round(0)
        assert e.size == GUARD_BITS
        assert e.mantissa == 1 << 31
        assert e.scale == 9

    def test_set_precision_with_round_everything(self):
        d = Digital(m=(1 << 40) - 1, scale=0)
        e = d.set_precision_with_round(-GUARD_BITS - 1)
        assert e.mantissa == 0
        assert e.scale == 41

    def test_negative_counts(self):
        d = raw(3, 0)
        with pytest.raises(ValueError):
            d.truncate_by_and_round(-1)
        with pytest.raises(ValueError):
            d.extend_precision(-1)
        with pytest.raises(ValueError):
            d.reduce_precision(-1)
