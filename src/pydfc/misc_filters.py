"""
Miscellaneous Filter Generator
==============================

Closed-form systems whose coefficients follow directly from the order:

- HILBERT              Fourier series of the 90 degree phase shifter
- INTEGRATOR           Fourier series of a perfect integrator
- DIFFERENTIATOR       Fourier series of a perfect differentiator
- COMB                 (1 - z^-n) / 2
- MOVING_AVERAGE_FIR   n + 1 taps of 1 / (n + 1)
- MOVING_AVERAGE_IIR   (1 - z^-n) / (n * (1 - z^-1))
- EXPONENTIAL_AVERAGE  1 / (n - (n - 1) z^-1)
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

import numpy as np
from scipy.special import sici

from . import filters
from .design import MiscDesign, MiscType
from .errors import FilterError, FilterRangeError, FilterStatus
from .filters import Filter

_RECURSIVE = (MiscType.MOVING_AVERAGE_IIR, MiscType.EXPONENTIAL_AVERAGE)


def _fourier_taps(design: MiscDesign, num: np.ndarray) -> None:
    ic = design.order // 2
    k = np.arange(1, ic + 1, dtype=np.float64)
    odd = (np.arange(1, ic + 1) % 2) == 1

    if design.type is MiscType.HILBERT:
        left = np.where(odd, -2.0 / (np.pi * k), 0.0)
        num[ic] = 0.0
        num[ic - 1::-1][:ic] = left
        num[ic + 1:2 * ic + 1] = -left
    elif design.type is MiscType.INTEGRATOR:
        si, _ = sici(np.pi * k)
        left = 0.5 - si / np.pi
        num[ic] = 0.5
        num[ic - 1::-1][:ic] = left
        num[ic + 1:2 * ic + 1] = 1.0 - left
    elif design.type is MiscType.DIFFERENTIATOR:
        left = np.where(odd, -1.0, 1.0) / (np.pi * k)
        num[ic] = 0.0
        num[ic - 1::-1][:ic] = left
        num[ic + 1:2 * ic + 1] = -left


def misc_filter_gen(
    design: MiscDesign,
    f0: float,
    log: Optional[logging.Logger] = None
) -> Tuple[Filter, FilterStatus]:
    """
    Generate one of the miscellaneous closed-form systems.

    Parameters
    ----------
    design : MiscDesign
        System type and order
    f0 : float
        Sample frequency in Hz
    log : Logger
        Optional logger

    Returns
    -------
    flt : Filter
        Generated filter
    status : FilterStatus
        ``SUCCESS`` or ``ADJUSTED`` (zero end taps were pruned)
    """
    if log is None:
        log = logging.getLogger(__name__)

    design.validate(f0)
    n = design.order
    log.info("Generating %s system of order %d", design.type.value, n)

    num_degree = 0 if design.type is MiscType.EXPONENTIAL_AVERAGE else n
    den_degree = 1 if design.type in _RECURSIVE else 0

    flt = filters.allocate(f0, num_degree, den_degree)
    flt.num.coeffs[0] = 1.0
    flt.den.coeffs[0] = 1.0
    num = flt.num.coeffs

    try:
        if design.type in (MiscType.HILBERT, MiscType.INTEGRATOR,
                           MiscType.DIFFERENTIATOR):
            _fourier_taps(design, num)

            if design.type is MiscType.INTEGRATOR:
                # the truncated series is not self-normalized
                status = filters.normalize_magnitude(flt, 0.0, 0.5)
                if status.is_fatal:
                    raise FilterRangeError("Integrator normalization failed")
        elif design.type is MiscType.COMB:
            num[0] = 0.5
            num[n] = -0.5
        elif design.type is MiscType.MOVING_AVERAGE_FIR:
            num[:] = 1.0 / (n + 1)
        elif design.type is MiscType.MOVING_AVERAGE_IIR:
            num[0] = 1.0 / n
            num[n] = -num[0]
            flt.den.coeffs[1] = -1.0
        elif design.type is MiscType.EXPONENTIAL_AVERAGE:
            flt.den.coeffs[0] = float(n)
            flt.den.coeffs[1] = 1.0 - n

        status = filters.check_validity(flt)

        if status.is_fatal:
            raise FilterRangeError("Implementation of %s filter impossible"
                                   % design.type.value)
    except FilterError:
        filters.free(flt)
        raise

    if status is FilterStatus.ADJUSTED:
        log.warning("Coefficients pruned: numerator degree %d, denominator degree %d",
                    flt.num.degree, flt.den.degree)

    return flt, status

