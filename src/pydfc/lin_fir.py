"""
Linear FIR Design Engine
========================

Windowed linear-phase FIR filters from closed-form ideal lowpass impulse
responses:

- RECTANGULAR          brick-wall spectrum (sinc)
- COSINE               half-cosine spectrum
- SQUARED_COSINE       raised-cosine spectrum
- GAUSSIAN             Gaussian spectrum
- SQUARED_FIRST_ORDER  squared magnitude of a first order lowpass

All families except RECTANGULAR are scaled so that the lowpass 3 dB point
equals the cutoff. RECTANGULAR keeps the sinc transition, which passes
the cutoff at half gain (-6 dB).
Highpass, bandpass and bandstop filters are derived by spectral inversion
and cosine modulation, which requires an even order.
"""

from __future__ import annotations

import logging
import math
import time
from typing import Optional, Tuple

import numpy as np

from . import filters
from .design import FirType, LinearFirDesign, TransformKind
from .errors import FilterError, FilterRangeError, FilterStatus, NumericalFailure
from .filters import Filter
from .response import poly_magnitude
from .windows import build_window

_LN2 = math.log(2.0)
_INV_SQRT2 = 1.0 / math.sqrt(2.0)

# Ratio between the (1 - 1/sqrt(2)) point and the 3 dB point of each
# lowpass. Spectral inversion turns the former into the 3 dB point.
_HIGHPASS_RATIO = {
    FirType.RECTANGULAR: 1.0,
    FirType.COSINE: 4.0 / math.pi * math.acos(1.0 - _INV_SQRT2),
    FirType.SQUARED_COSINE: (math.acos(math.sqrt(1.0 - _INV_SQRT2))
                             / math.acos(2.0 ** -0.25)),
    FirType.GAUSSIAN: math.sqrt(-2.0 * math.log(1.0 - _INV_SQRT2) / _LN2),
    FirType.SQUARED_FIRST_ORDER: 1.0 + math.sqrt(2.0),
}

# Limits of the removable singularities at |u| = 1
_SINGULAR_ATOL = 1e-9


# ───────────────────────── ideal impulse responses ────────────────────────── #

def ideal_lowpass(fir_type: FirType, x: float, order: int) -> np.ndarray:
    """
    Ideal lowpass taps for normalized cutoff ``x = cutoff / f0``.

    Parameters
    ----------
    fir_type : FirType
        Spectrum family
    x : float
        Cutoff frequency divided by the sample frequency
    order : int
        Filter order, giving ``order + 1`` taps centered at ``order / 2``

    Returns
    -------
    np.ndarray
        Unnormalized taps
    """
    t = np.arange(order + 1, dtype=np.float64) - order / 2.0

    if fir_type is FirType.RECTANGULAR:
        return np.sinc(2.0 * x * t)

    if fir_type is FirType.COSINE:
        u = 8.0 * x * t
        with np.errstate(divide="ignore", invalid="ignore"):
            h = np.cos(0.5 * np.pi * u) / (1.0 - u * u)
        return np.where(np.isclose(np.abs(u), 1.0, rtol=0.0, atol=_SINGULAR_ATOL),
                        0.25 * np.pi, h)

    if fir_type is FirType.SQUARED_COSINE:
        y = np.pi / math.acos(2.0 ** -0.25) * x * t
        with np.errstate(divide="ignore", invalid="ignore"):
            h = np.sinc(y) / (1.0 - y * y)
        return np.where(np.isclose(np.abs(y), 1.0, rtol=0.0, atol=_SINGULAR_ATOL),
                        0.5, h)

    if fir_type is FirType.GAUSSIAN:
        return np.exp(-2.0 * (np.pi * x * t) ** 2 / _LN2)

    if fir_type is FirType.SQUARED_FIRST_ORDER:
        return np.exp(-2.0 * np.pi * x * np.abs(t) / math.sqrt(math.sqrt(2.0) - 1.0))

    raise ValueError(f"Unsupported FIR type: {fir_type}")


# ───────────────────────── design routine ─────────────────────── #

def _lowpass_cutoff(design: LinearFirDesign) -> float:
    """Cutoff of the lowpass the transformed filter is derived from."""
    ftr = design.ftr
    ratio = _HIGHPASS_RATIO[design.type]

    if ftr.kind is TransformKind.HIGHPASS:
        return ftr.fc / ratio

    if ftr.kind is TransformKind.BANDPASS:
        return ftr.bw / 2.0

    if ftr.kind is TransformKind.BANDSTOP:
        return ftr.bw / 2.0 / ratio

    return design.cutoff


def _build(design: LinearFirDesign, f0: float, flt: Filter,
           log: logging.Logger) -> float:
    """Fill the taps of ``flt``; returns the magnitude normalization frequency."""
    order = design.order
    ftr = design.ftr
    center = order // 2

    cutoff = _lowpass_cutoff(design)
    log.debug("Lowpass prototype cutoff %.6g Hz", cutoff)

    taps = ideal_lowpass(design.type, cutoff / f0, order)

    window = build_window(order, design.window, design.kaiser_alpha)
    if not np.all(np.isfinite(window)):
        raise NumericalFailure("%s window evaluation failed" % design.window.value)

    taps = taps * window

    if not np.all(np.isfinite(taps)):
        raise FilterRangeError("Singular tap evaluation")

    fnorm = 0.0

    if ftr.kind is TransformKind.HIGHPASS:
        taps[center] -= taps.sum()
        fnorm = f0 / 2.0
    elif ftr.is_band:
        fc = math.hypot(ftr.fc, ftr.bw / 2.0) if ftr.geometric else ftr.fc
        t = np.arange(order + 1, dtype=np.float64) - order / 2.0
        taps = taps * np.cos(2.0 * np.pi * fc * t / f0)
        fnorm = fc

        if ftr.kind is TransformKind.BANDSTOP:
            flt.num.coeffs = taps
            peak = poly_magnitude(2.0 * math.pi * fc / f0, flt.num)
            taps[center] -= peak
            fnorm = f0 / 2.0

    flt.num.coeffs = taps
    return fnorm


def lin_fir_filter_gen(
    design: LinearFirDesign,
    f0: float,
    log: Optional[logging.Logger] = None
) -> Tuple[Filter, FilterStatus]:
    """
    Generate a windowed linear-phase FIR filter.

    Parameters
    ----------
    design : LinearFirDesign
        Family, order, cutoff, window and frequency transform
    f0 : float
        Sample frequency in Hz
    log : Logger
        Optional logger

    Returns
    -------
    flt : Filter
        Filter with ``order + 1`` taps and denominator ``1``
    status : FilterStatus
        ``SUCCESS`` or ``ADJUSTED`` (near-zero end taps were pruned)

    Raises
    ------
    DesignParameterError
        Parameters outside the supported limits
    FilterRangeError
        Singular evaluation or normalization overflow
    NumericalFailure
        Window evaluation failed
    """
    if log is None:
        log = logging.getLogger(__name__)

    design.validate(f0)
    t0 = time.perf_counter()

    log.info("Designing %s FIR filter: order %d, %s window, transform %s",
             design.type.value, design.order, design.window.value,
             design.ftr.kind.value)

    flt = filters.allocate(f0, design.order, 0)
    flt.den.coeffs[0] = 1.0

    try:
        fnorm = _build(design, f0, flt, log)
        status = filters.normalize_magnitude(flt, fnorm, 1.0)

        if status.is_fatal:
            raise FilterRangeError("All FIR coefficients vanished")
    except FilterError:
        filters.free(flt)
        raise

    if status is FilterStatus.ADJUSTED:
        log.warning("FIR coefficients pruned to degree %d", flt.num.degree)

    log.debug("FIR generated in %.3f ms", 1e3 * (time.perf_counter() - t0))
    return flt, status
