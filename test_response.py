#!/usr/bin/env python3
"""
Tests for frequency and time domain responses.
"""

import math
import os
import sys

import numpy as np
import pytest
from scipy import signal

sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

from pydfc import response
from pydfc.filters import Filter
from pydfc.poly import Polynomial
from pydfc.response import ResponseType, TimeSignal


def make_filter(num, den, f0=1000.0):
    return Filter(f0=f0, num=Polynomial.from_coefficients(num),
                  den=Polynomial.from_coefficients(den))


class TestFrequencyResponse:

    def test_pure_delay(self):
        flt = make_filter([0.0, 0.0, 0.0, 1.0], [1.0])
        f = 10.0
        omega = 2 * math.pi * f / flt.f0

        assert response.magnitude(f, flt) == pytest.approx(1.0)
        assert response.phase(f, flt) == pytest.approx(3 * omega)
        assert response.phase_delay(f, flt) == pytest.approx(3.0 / flt.f0)
        assert response.group_delay(f, flt) == pytest.approx(3.0 / flt.f0)

    def test_symmetric_fir_group_delay(self):
        """Linear phase FIR delays every frequency by order/2 samples."""
        flt = make_filter([0.1, 0.3, 0.5, 0.3, 0.1], [1.0])
        for f in (5.0, 100.0, 333.0):
            assert response.group_delay(f, flt) == pytest.approx(2.0 / flt.f0, rel=1e-9)

    def test_attenuation(self):
        flt = make_filter([0.5], [1.0])
        assert response.attenuation(100.0, flt) == pytest.approx(20 * math.log10(2.0))

    def test_characteristic(self):
        flt = make_filter([1.0 / math.sqrt(2.0)], [1.0])
        assert response.characteristic(100.0, flt) == pytest.approx(1.0)

    def test_first_order_iir(self):
        flt = make_filter([1.0], [1.0, -0.5])
        _, h = signal.freqz([1.0], [1.0, -0.5], worN=[2 * math.pi * 0.1])
        assert response.magnitude(100.0, flt) == pytest.approx(abs(h[0]), rel=1e-12)

    def test_singular_values(self):
        """A pole on the unit circle yields signed infinities, not exceptions."""
        flt = make_filter([1.0], [1.0, -1.0])
        assert response.magnitude(0.0, flt) == math.inf
        assert response.attenuation(0.0, flt) == -math.inf
        assert response.characteristic(0.0, flt) == math.inf

    def test_zero_magnitude(self):
        flt = make_filter([1.0, -1.0], [1.0])
        assert response.attenuation(0.0, flt) == math.inf

    def test_phase_delay_at_dc(self):
        flt = make_filter([1.0], [1.0])
        assert response.phase_delay(0.0, flt) == math.inf

    def test_frequency_response_grid(self):
        flt = make_filter([0.25, 0.5, 0.25], [1.0])
        freqs = np.linspace(0.0, 500.0, 11)
        mag = response.frequency_response(flt, ResponseType.MAGNITUDE, freqs)

        assert mag.shape == (11,)
        assert mag[0] == pytest.approx(1.0)
        assert mag[-1] == pytest.approx(0.0, abs=1e-15)
        assert np.all(np.diff(mag) <= 1e-15)

    @pytest.mark.parametrize("signal_type", list(TimeSignal))
    def test_frequency_response_rejects_time_types(self, signal_type):
        flt = make_filter([1.0], [1.0])
        with pytest.raises(ValueError):
            response.frequency_response(flt, signal_type, [0.0])

    def test_time_signals_not_frequency_types(self):
        assert {t.value for t in ResponseType}.isdisjoint(t.value for t in TimeSignal)


class TestTimeResponse:

    def test_fir_impulse(self):
        flt = make_filter([1.0, 2.0, 3.0], [1.0], f0=1.0)
        t, y = response.time_response(flt, TimeSignal.IMPULSE, 0.0, 5.0)

        np.testing.assert_allclose(t, [0, 1, 2, 3, 4, 5])
        np.testing.assert_allclose(y, [1, 2, 3, 0, 0, 0])

    def test_fir_step(self):
        flt = make_filter([1.0, 2.0, 3.0], [1.0], f0=1.0)
        _, y = response.time_response(flt, TimeSignal.STEP, 0.0, 4.0)
        np.testing.assert_allclose(y, [1, 3, 6, 6, 6])

    def test_settling_before_start(self):
        flt = make_filter([1.0, 2.0, 3.0], [1.0], f0=1.0)
        t, y = response.time_response(flt, TimeSignal.IMPULSE, 2.0, 4.0)

        np.testing.assert_allclose(t, [2, 3, 4])
        np.testing.assert_allclose(y, [3, 0, 0])

    def test_first_order_iir(self):
        flt = make_filter([1.0], [1.0, -0.5], f0=1.0)
        k = np.arange(8)

        _, y = response.time_response(flt, TimeSignal.IMPULSE, 0.0, 7.0)
        np.testing.assert_allclose(y, 0.5 ** k)

        _, y = response.time_response(flt, TimeSignal.STEP, 0.0, 7.0)
        np.testing.assert_allclose(y, 2.0 * (1.0 - 0.5 ** (k + 1)))

    def test_matches_lfilter(self):
        """Ring buffers wrap correctly over long runs."""
        b = [0.2, -0.1, 0.4, 0.05]
        a = [1.5, -0.3, 0.2]
        flt = make_filter(b, a, f0=1.0)

        _, y = response.time_response(flt, TimeSignal.IMPULSE, 0.0, 49.0)
        x = np.zeros(50)
        x[0] = 1.0
        np.testing.assert_allclose(y, signal.lfilter(b, a, x), rtol=1e-12, atol=1e-15)

    def test_sample_limit(self):
        flt = make_filter([1.0], [1.0], f0=1000.0)
        assert response.create_workspace(0.0, 2.049, TimeSignal.IMPULSE, flt) is None
        assert response.create_workspace(3.0, 3.1, TimeSignal.IMPULSE, flt) is None
        assert response.time_response(flt, TimeSignal.STEP, 0.0, 2.049) is None
        assert response.create_workspace(0.0, 2.0, TimeSignal.IMPULSE, flt) is not None

    def test_workspace_iteration(self):
        flt = make_filter([0.5, 0.5], [1.0], f0=1.0)

        with response.create_workspace(0.0, 3.0, TimeSignal.STEP, flt) as ws:
            assert ws.samples == 4
            values = [value for _, value in ws]

        assert values == pytest.approx([0.5, 1.0, 1.0, 1.0])

    def test_next_sample(self):
        flt = make_filter([2.0], [1.0], f0=10.0)
        ws = response.create_workspace(0.0, 1.0, TimeSignal.IMPULSE, flt)

        assert ws.next_sample() == (0.0, 2.0)
        t, value = ws.next_sample()
        assert t == pytest.approx(0.1)
        assert value == 0.0
        ws.close()
