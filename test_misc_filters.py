#!/usr/bin/env python3
"""
Tests for the closed-form miscellaneous systems.
"""

import math
import os
import sys

import numpy as np
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

from pydfc import response
from pydfc.design import MiscDesign, MiscType
from pydfc.errors import DesignParameterError, FilterRangeError, FilterStatus
from pydfc.misc_filters import misc_filter_gen

F0 = 1000.0


def generate(misc_type, order):
    return misc_filter_gen(MiscDesign(type=misc_type, order=order), F0)


def test_moving_average_fir():
    flt, status = generate(MiscType.MOVING_AVERAGE_FIR, 6)

    assert status is FilterStatus.SUCCESS
    np.testing.assert_allclose(flt.num.coeffs, np.full(7, 1.0 / 7.0))
    np.testing.assert_array_equal(flt.den.coeffs, [1.0])
    assert response.magnitude(0.0, flt) == pytest.approx(1.0)
    assert response.magnitude(F0 / 7.0, flt) == pytest.approx(0.0, abs=1e-12)


def test_moving_average_iir_matches_fir():
    iir, _ = generate(MiscType.MOVING_AVERAGE_IIR, 5)
    fir, _ = generate(MiscType.MOVING_AVERAGE_FIR, 4)

    np.testing.assert_allclose(iir.den.coeffs, [1.0, -1.0])
    for f in (10.0, 123.0, 321.0):
        assert response.magnitude(f, iir) == pytest.approx(response.magnitude(f, fir),
                                                           rel=1e-9)


def test_exponential_average():
    flt, _ = generate(MiscType.EXPONENTIAL_AVERAGE, 4)

    np.testing.assert_array_equal(flt.num.coeffs, [1.0])
    np.testing.assert_array_equal(flt.den.coeffs, [4.0, -3.0])
    assert response.magnitude(0.0, flt) == pytest.approx(1.0)


def test_comb():
    flt, _ = generate(MiscType.COMB, 4)

    np.testing.assert_array_equal(flt.num.coeffs, [0.5, 0.0, 0.0, 0.0, -0.5])
    assert response.magnitude(0.0, flt) == pytest.approx(0.0, abs=1e-15)
    assert response.magnitude(F0 / 8.0, flt) == pytest.approx(1.0)


class TestHilbert:

    def test_order_20(self):
        flt, status = generate(MiscType.HILBERT, 20)

        # the end taps (even offsets) are zero and get pruned
        assert status is FilterStatus.ADJUSTED
        assert flt.num.degree == 18

        taps = flt.num.coeffs
        center = 9
        assert taps[center] == 0.0
        for k in range(2, 10, 2):
            assert taps[center - k] == 0.0
            assert taps[center + k] == 0.0
        for k in range(1, 10, 2):
            assert taps[center - k] == pytest.approx(-2.0 / (math.pi * k))
            assert taps[center + k] == pytest.approx(2.0 / (math.pi * k))

    def test_magnitude_flat_in_band(self):
        flt, _ = generate(MiscType.HILBERT, 20)
        for f in np.linspace(0.05, 0.45, 41) * F0:
            assert abs(response.magnitude(f, flt) - 1.0) < 0.25

    def test_order_too_small(self):
        with pytest.raises(FilterRangeError):
            generate(MiscType.HILBERT, 1)


def test_integrator():
    flt, _ = generate(MiscType.INTEGRATOR, 16)

    assert response.magnitude(0.0, flt) == pytest.approx(0.5, rel=1e-12)
    assert flt.num.degree == 16


def test_differentiator():
    flt, _ = generate(MiscType.DIFFERENTIATOR, 16)
    taps = flt.num.coeffs

    np.testing.assert_allclose(taps, -taps[::-1], atol=1e-15)
    assert response.magnitude(0.0, flt) == pytest.approx(0.0, abs=1e-12)
    assert response.magnitude(F0 / 4, flt) > response.magnitude(F0 / 8, flt)


@pytest.mark.parametrize("order", [0, 1025])
def test_invalid_order(order):
    with pytest.raises(DesignParameterError):
        generate(MiscType.MOVING_AVERAGE_FIR, order)
