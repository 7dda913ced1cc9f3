"""
Frequency & Time Response Evaluator
===================================

Frequency domain functions evaluate ``H(z)`` on the unit circle at
``omega = 2*pi*f/f0``. They are sampled repeatedly during scans, so domain
problems return a signed infinity instead of raising.

The time domain simulator runs the direct-form difference equation of a
filter over a bounded interval for an impulse or step input.
"""

from __future__ import annotations

import cmath
import enum
import logging
import math
from typing import TYPE_CHECKING, Iterator, Optional, Sequence, Tuple

import numpy as np

from .constants import TIME_SAMPLES_LIMIT
from .numerics import try_div

if TYPE_CHECKING:
    from .filters import Filter

log = logging.getLogger(__name__)


class ResponseType(enum.Enum):
    MAGNITUDE = "magnitude"
    ATTENUATION = "attenuation"
    CHARACTERISTIC = "characteristic"
    PHASE = "phase"
    PHASE_DELAY = "phase_delay"
    GROUP_DELAY = "group_delay"


class TimeSignal(enum.Enum):
    IMPULSE = "impulse"
    STEP = "step"


# ───────────────────────── polynomial evaluation ────────────────────────── #

def _eval_poly_z(omega: float, coeffs: np.ndarray) -> complex:
    """Horner evaluation of ``sum(c_i * z**-i)`` at ``z = exp(j*omega)``."""
    zinv = cmath.exp(-1j * omega)
    acc = 0j

    for c in coeffs[::-1]:
        acc = acc * zinv + c

    return acc


def _group_delay_poly(omega: float, coeffs: np.ndarray) -> float:
    """Group delay (in samples) of a single polynomial in ``z**-1``."""
    i = np.arange(coeffs.size, dtype=np.float64)
    cosv = np.cos(i * omega)
    sinv = np.sin(i * omega)

    rp = float(np.dot(coeffs, cosv))
    ip = float(np.dot(coeffs, sinv))
    rd = float(np.dot(coeffs * i, sinv))
    id_ = float(np.dot(coeffs * i, cosv))

    return try_div(rp * id_ + ip * rd, rp * rp + ip * ip)


def _coeffs(p) -> np.ndarray:
    return p.coeffs[:p.degree + 1]


def poly_magnitude(omega: float, p) -> float:
    """``|p(exp(j*omega))|`` for a polynomial in ``z**-1``."""
    return abs(_eval_poly_z(omega, _coeffs(p)))


# ───────────────────────── frequency response ────────────────────────── #

def magnitude(f: float, flt: Filter) -> float:
    omega = 2.0 * math.pi * f / flt.f0
    return try_div(poly_magnitude(omega, flt.num), poly_magnitude(omega, flt.den))


def attenuation(f: float, flt: Filter) -> float:
    """Attenuation ``-20*log10(|H(f)|)`` in dB."""
    mag = magnitude(f, flt)

    if not math.isfinite(mag):
        return -math.inf

    if mag == 0.0:
        return math.inf

    return -20.0 * math.log10(mag)


def phase(f: float, flt: Filter) -> float:
    """Phase ``arg(den) - arg(num)`` in rad."""
    omega = 2.0 * math.pi * f / flt.f0
    num = _eval_poly_z(omega, _coeffs(flt.num))
    den = _eval_poly_z(omega, _coeffs(flt.den))

    if not (cmath.isfinite(num) and cmath.isfinite(den)):
        return math.inf

    return cmath.phase(den) - cmath.phase(num)


def phase_delay(f: float, flt: Filter) -> float:
    """Phase delay ``phase / (2*pi*f)`` in s."""
    result = phase(f, flt)

    if math.isfinite(result):
        result = try_div(result, 2.0 * math.pi * f)

    return result


def group_delay(f: float, flt: Filter) -> float:
    """Group delay (negative derivative of phase) in s."""
    omega = 2.0 * math.pi * f / flt.f0
    tg_num = _group_delay_poly(omega, _coeffs(flt.num))
    tg_den = _group_delay_poly(omega, _coeffs(flt.den))

    if math.isfinite(tg_num) and math.isfinite(tg_den):
        return (tg_num - tg_den) / flt.f0

    return math.inf


def characteristic(f: float, flt: Filter) -> float:
    """Characteristic function ``D(f)`` with ``|H|**2 = 1 / (1 + D**2)``."""
    mag = magnitude(f, flt)

    if math.isfinite(mag):
        result = try_div(1.0, mag * mag)

        if math.isfinite(result):
            result -= 1.0

            if result >= 0.0:
                return math.sqrt(result)

    return math.inf


_FREQUENCY_FUNCS = {
    ResponseType.MAGNITUDE: magnitude,
    ResponseType.ATTENUATION: attenuation,
    ResponseType.CHARACTERISTIC: characteristic,
    ResponseType.PHASE: phase,
    ResponseType.PHASE_DELAY: phase_delay,
    ResponseType.GROUP_DELAY: group_delay,
}


def frequency_response(flt: Filter, kind: ResponseType,
                       frequencies: Sequence[float]) -> np.ndarray:
    """
    Sample a frequency domain response over a grid.

    Parameters
    ----------
    flt : Filter
        Filter to evaluate
    kind : ResponseType
        Any frequency domain response type
    frequencies : array_like
        Frequencies in Hz

    Returns
    -------
    np.ndarray
        Response values (signed infinity where the response is singular)
    """
    try:
        func = _FREQUENCY_FUNCS[kind]
    except KeyError:
        raise ValueError(f"{kind} is not a frequency domain response") from None

    return np.array([func(float(f), flt) for f in np.asarray(frequencies).ravel()],
                    dtype=np.float64)


# ───────────────────────── time response ────────────────────────── #

class TimeResponse:
    """
    Single-use workspace simulating a filter for an impulse or step input.

    Holds ring buffers of the last input and output samples, so each step
    costs ``O(num.degree + den.degree)``. The filter is referenced, not
    copied, and must not change while the workspace is in use.
    """

    def __init__(self, flt: Filter, signal: TimeSignal, start: float, stop: float):
        self.filter = flt
        self.signal = signal
        self.start = start
        self.stop = stop
        self.time = 0.0

        self._in_buf = np.zeros(flt.num.degree + 1, dtype=np.float64)
        self._out_buf = np.zeros(flt.den.degree + 1, dtype=np.float64)
        self._in_pos = 0
        self._out_pos = 0

        t0 = 1.0 / flt.f0

        while self.time < start:  # settle transients, discard output
            self._step()
            self.time += t0

        self.samples = 0
        xtime = self.time

        while xtime <= stop:
            self.samples += 1
            xtime += t0

    def _input(self) -> float:
        if self.signal is TimeSignal.IMPULSE:
            return 1.0 if self.time == 0.0 else 0.0
        return 1.0

    def _step(self) -> float:
        num = self.filter.num.coeffs
        den = self.filter.den.coeffs
        in_size = self._in_buf.size
        out_size = self._out_buf.size

        self._in_buf[self._in_pos] = self._input()
        sample = 0.0

        pos = self._in_pos
        for i in range(in_size):
            sample += self._in_buf[pos] * num[i]
            pos = (pos + 1) % in_size

        self._in_pos = (self._in_pos - 1) % in_size

        pos = self._out_pos
        for i in range(1, out_size):
            sample -= self._out_buf[pos] * den[i]
            pos = (pos + 1) % out_size

        sample = try_div(sample, den[0])
        self._out_pos = (self._out_pos - 1) % out_size
        self._out_buf[self._out_pos] = sample
        return sample

    def next_sample(self) -> Tuple[float, float]:
        """
        Advance the simulation by one sample.

        Returns
        -------
        (time, value) : tuple of float
            Sample time in s and output value. A non-finite value means the
            recurrence overflowed and the scan should stop.
        """
        t = self.time
        value = self._step()
        self.time += 1.0 / self.filter.f0
        return t, value

    def __iter__(self) -> Iterator[Tuple[float, float]]:
        for _ in range(self.samples):
            t, value = self.next_sample()
            yield t, value
            if not math.isfinite(value):
                return

    def close(self) -> None:
        self._in_buf = None
        self._out_buf = None

    def __enter__(self) -> 'TimeResponse':
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def create_workspace(start: float, stop: float, signal: TimeSignal,
                     flt: Filter) -> Optional[TimeResponse]:
    """
    Create a time response workspace for the interval ``[start, stop]``.

    Returns ``None`` (without allocating) if settling up to ``start`` or the
    scan itself would need more than ``TIME_SAMPLES_LIMIT`` samples.
    """
    if start * flt.f0 > TIME_SAMPLES_LIMIT or (stop - start) * flt.f0 > TIME_SAMPLES_LIMIT:
        log.debug("Too many samples for time response (%g, %g)",
                  start * flt.f0, (stop - start) * flt.f0)
        return None

    return TimeResponse(flt, signal, start, stop)


def time_response(flt: Filter, signal: TimeSignal, start: float,
                  stop: float) -> Optional[Tuple[np.ndarray, np.ndarray]]:
    """
    Collect a complete time response scan.

    Returns
    -------
    (t, y) : tuple of np.ndarray or None
        Sample times and output values, ``None`` if the interval is too long.
    """
    workspace = create_workspace(start, stop, signal, flt)

    if workspace is None:
        return None

    with workspace:
        points = list(workspace)

    if not points:
        return np.empty(0), np.empty(0)

    t, y = zip(*points)
    return np.array(t), np.array(y)
