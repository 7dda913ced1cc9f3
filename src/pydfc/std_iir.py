"""
Standard IIR Approximation Engine
=================================

Classic analog lowpass approximations, realized in the z-domain:

1. pre-warp the requested frequencies (inverse bilinear transform)
2. build the normalized Laplace lowpass (poles, zeros and gain factor)
3. apply the Laplace highpass/bandpass/bandstop transform
4. denormalize and apply the bilinear transform
5. re-order to ``z**-1`` polynomials and normalize ``den[0] = 1``

Families:
- Butterworth           maximally flat
- Chebyshev             equiripple passband
- inverse Chebyshev     equiripple stopband with finite zeros
- Cauer (elliptic)      equiripple in both bands, designed either from the
                        passband ripple (CAUER1) or the stopband attenuation
                        (CAUER2) together with the module angle
- Bessel                maximally flat group delay

Floating point exceptions are collected per call (``numpy.errstate`` and
``scipy.special.errstate``) instead of by a process-wide handler. Both
settings are restored on exit; ``numpy.errstate`` is also thread-local,
while ``scipy.special.errstate`` is process-wide on older scipy releases,
so concurrent designs there share the special function error setting.
"""

from __future__ import annotations

import contextlib
import logging
import math
import time
from typing import Callable, Dict, Iterator, Optional, Tuple

import numpy as np
from scipy import special
from scipy.optimize import brentq

from . import filters
from . import poly as mpoly
from .constants import (
    BESSEL_MAXITER,
    BESSEL_RTOL,
    CUTOFF_3DB,
    FREQ_MIN,
    RIPPLE_MAX,
    STOPBAND_MIN,
)
from .design import IirType, StandardIirDesign, TransformKind
from .errors import FilterError, FilterRangeError, FilterStatus, NumericalFailure
from .filters import Filter
from .numerics import drosselung, try_div
from .poly import Polynomial


# ───────────────────────── helpers ────────────────────────── #

@contextlib.contextmanager
def _domain_guard() -> Iterator[None]:
    """
    Scope in which overflow yields inf and special functions raise.

    The previous settings are restored on exit. The scipy.special part is
    not thread-local on older scipy releases.
    """
    try:
        with np.errstate(all="ignore"), special.errstate(all="raise"):
            yield
    except special.SpecialFunctionError as exc:
        raise NumericalFailure("Special function evaluation failed: %s" % exc) from exc


def bilinear_inverse(f: float, f0: float) -> float:
    """
    Pre-warp a z-domain frequency ``f`` to the Laplace domain.

    ``f0 / pi * tan(pi * f / f0)``, written with sin/cos of the full angle.
    """
    w = 2.0 * math.pi * f / f0
    return f0 / math.pi * math.sin(w) / (1.0 + math.cos(w))


def _poly_abs_laplace(omega: float, p: Polynomial) -> float:
    acc = 0j
    for c in p.coeffs[:p.degree + 1][::-1]:
        acc = acc * 1j * omega + c
    return abs(acc)


def laplace_magnitude(omega: float, flt: Filter) -> float:
    """``|H(j*omega)|`` of a Laplace-domain filter given by coefficients."""
    return try_div(_poly_abs_laplace(omega, flt.num), _poly_abs_laplace(omega, flt.den))


def _angles(order: int) -> np.ndarray:
    """Angles ``(2k+1)*pi/(2n)`` for ``k = 0 .. n-1``."""
    return (2.0 * np.arange(order) + 1.0) * np.pi / (2.0 * order)


# ───────────────────────── approximations ────────────────────────── #
# Each fills flt with a normalized Laplace lowpass and returns the
# normalized 3 dB cutoff angular frequency.

def _approx_butterworth(design: StandardIirDesign, order: int, flt: Filter) -> float:
    theta = _angles(order)
    flt.den = Polynomial(degree=order, roots=-np.sin(theta) - 1j * np.cos(theta))
    flt.num = Polynomial(degree=0, roots=np.zeros(1, dtype=np.complex128))
    flt.factor = 1.0
    return 1.0


def _approx_chebyshev(design: StandardIirDesign, order: int, flt: Filter) -> float:
    sigma_inv = 1.0 / drosselung(design.ripple)
    a = math.asinh(sigma_inv) / order
    theta = _angles(order)

    flt.den = Polynomial(degree=order,
                         roots=-math.sinh(a) * np.sin(theta)
                         + 1j * math.cosh(a) * np.cos(theta))
    flt.num = Polynomial(degree=0, roots=np.zeros(1, dtype=np.complex128))
    flt.factor = 2.0 * sigma_inv * 0.5 ** order
    return mpoly.chebyshev_inverse(order, sigma_inv)


def _approx_chebyshev_inverse(design: StandardIirDesign, order: int, flt: Filter) -> float:
    max_ampl = drosselung(design.minatt)
    omega_s = mpoly.chebyshev_inverse(order, max_ampl)
    a = math.asinh(max_ampl) / order
    theta = _angles(order)

    poles = omega_s / (-math.sinh(a) * np.sin(theta) + 1j * math.cosh(a) * np.cos(theta))

    if order % 2:
        # pole at the real axis has no zero counterpart
        num_degree = order - 1
        flt.factor = order * omega_s / max_ampl
    else:
        num_degree = order
        flt.factor = 1.0 / math.hypot(1.0, max_ampl)

    zeros = 1j * omega_s / np.cos(theta[:num_degree // 2])
    flt.den = Polynomial(degree=order, roots=poles)
    flt.num = Polynomial(degree=num_degree,
                         roots=np.concatenate([zeros, -zeros]) if num_degree
                         else np.zeros(1, dtype=np.complex128))
    return 1.0


def _approx_cauer(design: StandardIirDesign, order: int, flt: Filter) -> float:
    """
    Elliptic lowpass via the first principal transformation of degree n.

    With module ``k = sin(angle)`` and ``sn`` evaluated at multiples of
    ``K(k)/n`` the characteristic function is ``R(x) = c*P(x)/Q(x)`` in
    ``x = s**2``. The poles follow from the roots of
    ``sigma**2 * c**2 * P(x)**2 + Q(x)**2``.
    """
    k = math.sin(math.radians(design.angle))
    kappa = k * k
    delta_k = special.ellipk(kappa) / order
    num_deg2 = (order // 2) * 2

    zeros, p_roots, q_roots = [], [], []
    multiplier = 1.0
    lam = 1.0

    for i in range(0, num_deg2, 2):
        sn_odd = special.ellipj((i + 1) * delta_k, kappa)[0]
        sn_even = special.ellipj((i + 2) * delta_k, kappa)[0]
        sn = sn_even if order % 2 else sn_odd

        zeros += [1j / (k * sn), -1j / (k * sn)]
        multiplier *= (sn_odd / sn_even) ** 2
        lam *= sn_odd ** 4
        p_roots += [-sn * sn] * 2
        q_roots += [-1.0 / (sn * sn * kappa)] * 2

    lam *= k ** order
    factor = 1.0 / lam

    if order % 2:
        p_roots.append(0.0)
        factor *= -k * multiplier

    if design.type is IirType.CAUER1:
        sigma = drosselung(design.ripple)
        if sigma < lam * drosselung(STOPBAND_MIN):
            raise FilterRangeError(
                "Stopband attenuation below 3 dB (increase ripple, order or angle)")
    else:
        sigma = lam * drosselung(design.minatt)
        if sigma > drosselung(RIPPLE_MAX):
            raise FilterRangeError(
                "Passband ripple above 3 dB (increase attenuation or order)")

    factor *= sigma
    den = Polynomial.from_roots(p_roots, factor * abs(factor))
    mpoly.add(den, Polynomial.from_roots(q_roots, 1.0))
    mpoly.coefficients_to_roots(den)

    flt.den = Polynomial(degree=order, roots=-np.sqrt(den.roots[:order]))
    flt.num = Polynomial(degree=num_deg2,
                         roots=np.array(zeros, dtype=np.complex128) if zeros
                         else np.zeros(1, dtype=np.complex128))
    flt.factor = 1.0 / math.sqrt(abs(den.coeffs[order]))

    lam_c = math.sqrt(1.0 - lam * lam)
    phi = math.asin(min(1.0, math.sqrt(1.0 - sigma * sigma) / lam_c))

    if lam_c == 1.0:
        integral = math.log(abs(math.tan(0.5 * phi + 0.25 * math.pi)))
    else:
        integral = special.ellipkinc(phi, lam_c * lam_c)

    dn = special.ellipj(multiplier * integral, 1.0 - kappa)[2]
    return try_div(1.0, dn)


def _approx_bessel(design: StandardIirDesign, order: int, flt: Filter) -> float:
    den = mpoly.bessel_polynomial(order)

    if not np.all(np.isfinite(den)):
        raise FilterRangeError("Bessel polynomial of degree %d overflows" % order)

    flt.den = Polynomial.from_coefficients(den)
    flt.num = Polynomial.from_coefficients([den[0]])
    flt.factor = 0.0

    def cutoff_magnitude(omega: float) -> float:
        return laplace_magnitude(omega, flt) - CUTOFF_3DB

    try:
        return brentq(cutoff_magnitude, 0.0, 10.0 * order, maxiter=BESSEL_MAXITER,
                      rtol=BESSEL_RTOL)
    except (RuntimeError, ValueError) as exc:
        raise NumericalFailure("Bessel cutoff search did not converge") from exc


_APPROXIMATIONS: Dict[IirType, Callable[[StandardIirDesign, int, Filter], float]] = {
    IirType.BUTTERWORTH: _approx_butterworth,
    IirType.CHEBYSHEV: _approx_chebyshev,
    IirType.CHEBYSHEV_INVERSE: _approx_chebyshev_inverse,
    IirType.CAUER1: _approx_cauer,
    IirType.CAUER2: _approx_cauer,
    IirType.BESSEL: _approx_bessel,
}


def _approximate(design: StandardIirDesign, order: int, flt: Filter) -> float:
    """Fill ``flt`` with the Laplace lowpass given by coefficients."""
    norm_omega = _APPROXIMATIONS[design.type](design, order, flt)

    if not (math.isfinite(norm_omega) and norm_omega > 0.0):
        raise FilterRangeError("Standard IIR approximation has failed")

    if flt.factor != 0.0:
        mpoly.roots_to_coefficients(flt.den, 1.0)
        mpoly.roots_to_coefficients(flt.num, flt.factor)

    return norm_omega


def lowpass_prototype(design: StandardIirDesign,
                      order: Optional[int] = None) -> Tuple[Filter, float]:
    """
    Normalized Laplace lowpass of ``design``.

    Parameters
    ----------
    design : StandardIirDesign
        Approximation family and its ripple/attenuation/angle parameters
    order : int, optional
        Prototype order (defaults to ``design.order``)

    Returns
    -------
    flt : Filter
        Filter in ``s`` (``coeffs[i]`` multiplies ``s**i``); roots and
        ``factor`` are kept where the family defines them
    cutoff : float
        Normalized 3 dB cutoff angular frequency
    """
    order = design.order if order is None else order
    flt = Filter(f0=1.0)

    try:
        with _domain_guard():
            cutoff = _approximate(design, order, flt)
    except FilterError:
        filters.free(flt)
        raise

    return flt, cutoff


# ───────────────────────── transforms ────────────────────────── #

def _highpass(flt: Filter, omega: float) -> None:
    """``s := omega**2 / s``"""
    deg = flt.den.degree - flt.num.degree
    w2 = omega * omega
    mpoly.transform(flt.den, 0, 0.0, w2, 1, 1.0, 0.0)
    mpoly.transform(flt.num, 0, 0.0, w2, 1, 1.0, 0.0)
    mpoly.shift_left(flt.num, deg)


def _bandpass(flt: Filter, omega: float, quality: float) -> None:
    """``s := Q * (s**2 + omega**2) / s``"""
    deg = flt.den.degree - flt.num.degree
    mpoly.transform(flt.den, 2, quality, omega * omega * quality, 1, 1.0, 0.0)
    mpoly.transform(flt.num, 2, quality, omega * omega * quality, 1, 1.0, 0.0)
    mpoly.shift_left(flt.num, deg)


def _bilinear(flt: Filter, scale: float) -> None:
    """``s := scale * (z - 1) / (z + 1)``, then re-order to ``z**-1``."""
    deg = flt.den.degree - flt.num.degree
    mpoly.transform(flt.den, 1, scale, -scale, 1, 1.0, 1.0)
    mpoly.transform(flt.num, 1, scale, -scale, 1, 1.0, 1.0)

    for _ in range(deg):
        mpoly.multiply_by_binomial(flt.num, 1, 1.0, 1.0)

    flt.num.coeffs = flt.num.coeffs[::-1].copy()
    flt.den.coeffs = flt.den.coeffs[::-1].copy()


# ───────────────────────── design routine ─────────────────────── #

def _design_frequencies(design: StandardIirDesign, f0: float) -> Tuple[int, float, float]:
    """Prototype order, pre-warped cutoff (or center) and bandpass quality."""
    ftr = design.ftr

    if ftr.is_band:
        fc = math.hypot(ftr.fc, 0.5 * ftr.bw) if ftr.geometric else ftr.fc
        f1 = bilinear_inverse(fc - 0.5 * ftr.bw, f0)

        if f1 <= FREQ_MIN:
            raise FilterRangeError("Bandwidth vs. cutoff frequency mismatch")

        f2 = bilinear_inverse(fc + 0.5 * ftr.bw, f0)
        if not f2 > f1:
            raise FilterRangeError("Upper band edge beyond Nyquist")

        fc = math.sqrt(f1 * f2)
        return design.order // 2, fc, fc / (f2 - f1)

    if ftr.kind is TransformKind.HIGHPASS:
        return design.order, bilinear_inverse(ftr.fc, f0), 0.0

    return design.order, bilinear_inverse(design.cutoff, f0), 0.0


def std_iir_filter_gen(
    design: StandardIirDesign,
    f0: float,
    log: Optional[logging.Logger] = None
) -> Tuple[Filter, FilterStatus]:
    """
    Generate a standard IIR filter.

    Parameters
    ----------
    design : StandardIirDesign
        Approximation family, order, frequencies and tolerances
    f0 : float
        Sample frequency in Hz
    log : Logger
        Optional logger

    Returns
    -------
    flt : Filter
        Filter with ``den.coeffs[0] == 1``
    status : FilterStatus
        ``SUCCESS`` or ``ADJUSTED``

    Raises
    ------
    DesignParameterError
        Parameters outside the supported limits
    FilterRangeError
        Overflow, singular evaluation or an unrealizable elliptic combination
    NumericalFailure
        Root solver, root finder or special function failure
    """
    if log is None:
        log = logging.getLogger(__name__)

    design.validate(f0)
    t0 = time.perf_counter()

    log.info("Designing %s IIR filter: order %d, transform %s",
             design.type.value, design.order, design.ftr.kind.value)

    flt = Filter(f0=f0)

    try:
        order, fc, quality = _design_frequencies(design, f0)

        with _domain_guard():
            norm_omega = _approximate(design, order, flt)
            log.debug("Normalized cutoff %.9g, pre-warped frequency %.9g Hz",
                      norm_omega, fc)
            flt.factor = 0.0  # roots are valid in the Laplace domain only

            if design.ftr.kind in (TransformKind.HIGHPASS, TransformKind.BANDSTOP):
                _highpass(flt, norm_omega)

            if design.ftr.is_band:
                _bandpass(flt, norm_omega, quality)

            _bilinear(flt, norm_omega * f0 / fc / math.pi)

        status = filters.normalize_coefficients(flt)

        if status.is_fatal:
            raise FilterRangeError("All IIR coefficients vanished")
    except FilterError:
        filters.free(flt)
        raise

    if status is FilterStatus.ADJUSTED:
        log.warning("IIR coefficients pruned: numerator degree %d, denominator degree %d",
                    flt.num.degree, flt.den.degree)

    log.debug("IIR generated in %.3f ms", 1e3 * (time.perf_counter() - t0))
    return flt, status
