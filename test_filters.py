#!/usr/bin/env python3
"""
Tests for filter representation, validation and normalization.
"""

import os
import sys

import numpy as np
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

from pydfc import filters, response
from pydfc.errors import FilterRangeError, FilterStatus
from pydfc.filters import Filter
from pydfc.poly import Polynomial


def make_filter(num, den, f0=1000.0):
    return Filter(f0=f0, num=Polynomial.from_coefficients(num),
                  den=Polynomial.from_coefficients(den))


class TestLifecycle:

    def test_allocate(self):
        flt = filters.allocate(100.0, 3, 2)
        assert flt.num.coeffs.shape == (4,)
        assert flt.den.coeffs.shape == (3,)
        assert flt.factor == 0.0

    def test_duplicate_is_deep(self):
        flt = make_filter([1.0, 2.0], [1.0, 0.5])
        copy = filters.duplicate(flt)
        copy.num.coeffs[0] = 7.0
        assert flt.num.coeffs[0] == 1.0

    def test_free_is_idempotent(self):
        flt = make_filter([1.0], [1.0])
        filters.free(flt)
        filters.free(flt)
        assert flt.released


class TestCheckValidity:

    def test_clean_filter_is_noop(self):
        flt = make_filter([1.0, 2.0, 1.0], [1.0, -0.5])
        assert filters.check_validity(flt) is FilterStatus.SUCCESS
        assert filters.check_validity(flt) is FilterStatus.SUCCESS
        np.testing.assert_array_equal(flt.num.coeffs, [1.0, 2.0, 1.0])

    def test_trailing_zeros_pruned(self):
        flt = make_filter([1.0, 2.0, 1e-20, 0.0], [1.0])
        assert filters.check_validity(flt) is FilterStatus.ADJUSTED
        assert flt.num.degree == 1
        np.testing.assert_array_equal(flt.num.coeffs, [1.0, 2.0])
        assert filters.check_validity(flt) is FilterStatus.SUCCESS

    def test_leading_zeros_shifted(self):
        flt = make_filter([0.0, 0.0, 1.0, 2.0], [1.0])
        assert filters.check_validity(flt) is FilterStatus.ADJUSTED
        np.testing.assert_array_equal(flt.num.coeffs, [1.0, 2.0])

    def test_vanished_numerator(self):
        flt = make_filter([0.0, 1e-30], [1.0])
        assert filters.check_validity(flt) is FilterStatus.INVALID

    def test_vanished_denominator(self):
        flt = make_filter([1.0], [0.0, 0.0])
        assert filters.check_validity(flt) is FilterStatus.INVALID


class TestNormalize:

    def test_coefficients(self):
        flt = make_filter([4.0, 2.0], [2.0, 1.0])
        assert filters.normalize_coefficients(flt) is FilterStatus.SUCCESS
        assert flt.den.coeffs[0] == 1.0
        np.testing.assert_allclose(flt.num.coeffs, [2.0, 1.0])
        np.testing.assert_allclose(flt.den.coeffs, [1.0, 0.5])

    def test_coefficients_exact_unity(self):
        flt = make_filter([0.3, 0.1, 0.7], [3.7, -1.1, 0.4])
        filters.normalize_coefficients(flt)
        assert flt.den.coeffs[0] == 1.0

    def test_coefficients_overflow(self):
        flt = make_filter([1.0, 1.0], [0.0, 1.0])
        with pytest.raises(FilterRangeError):
            filters.normalize_coefficients(flt)

    @pytest.mark.parametrize("f,gain", [(0.0, 1.0), (123.0, 0.25), (480.0, 3.0)])
    def test_magnitude(self, f, gain):
        flt = make_filter([0.2, 0.5, 0.3], [1.5, -0.6, 0.2])
        filters.normalize_magnitude(flt, f, gain)
        assert flt.den.coeffs[0] == 1.0
        assert response.magnitude(f, flt) == pytest.approx(gain, rel=1e-9)

    def test_magnitude_singular(self):
        flt = make_filter([1.0, -1.0], [1.0])
        with pytest.raises(FilterRangeError):
            filters.normalize_magnitude(flt, 0.0, 1.0)


def test_roots():
    flt = make_filter([2.0, -3.0, 1.0], [4.0, 0.0, -1.0])
    zeros, poles = filters.roots(flt)

    np.testing.assert_allclose(np.sort(zeros.real), [0.5, 1.0], atol=1e-12)
    np.testing.assert_allclose(np.sort(poles.real), [-0.5, 0.5], atol=1e-12)
    assert flt.factor == pytest.approx(0.5)
