"""
Filter Representation & Validation
==================================

A :class:`Filter` is a sample frequency plus numerator and denominator
polynomials in ``z**-1`` (``coeffs[i]`` multiplies ``z**-i``). The coefficient
form is always authoritative; roots and ``factor`` form an optional cache.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Tuple

import numpy as np

from . import poly as mpoly
from . import response
from .constants import APPROX_ZERO
from .errors import FilterRangeError, FilterStatus
from .numerics import try_div
from .poly import Polynomial

log = logging.getLogger(__name__)


@dataclass
class Filter:
    """Transfer function ``H(z) = num(z**-1) / den(z**-1)`` at sample rate ``f0``."""
    f0: float
    num: Polynomial = field(default_factory=Polynomial)
    den: Polynomial = field(default_factory=Polynomial)
    factor: float = 0.0  # 0.0 = no valid roots representation

    @property
    def released(self) -> bool:
        return self.num.coeffs is None and self.den.coeffs is None


def allocate(f0: float, num_degree: int, den_degree: int) -> Filter:
    """Create a zeroed filter with storage for the given degrees."""
    flt = Filter(f0=f0, num=Polynomial(degree=num_degree),
                 den=Polynomial(degree=den_degree))
    mpoly.allocate(flt.num)
    try:
        mpoly.allocate(flt.den)
    except MemoryError:
        mpoly.release(flt.num)
        raise
    return flt


def duplicate(flt: Filter) -> Filter:
    """Deep copy of ``flt``."""
    return Filter(f0=flt.f0, num=flt.num.copy(), den=flt.den.copy(),
                  factor=flt.factor)


def free(flt: Filter) -> None:
    """Release all storage of ``flt``; calling it twice is harmless."""
    mpoly.release(flt.num)
    mpoly.release(flt.den)
    flt.factor = 0.0


# ───────────────────────── validation ────────────────────────── #

def _check_polynomial(p: Polynomial) -> FilterStatus:
    """Prune near-zero coefficients at both ends of ``p``."""
    coeffs = p.coeffs[:p.degree + 1]
    significant = np.flatnonzero(np.abs(coeffs) >= APPROX_ZERO)

    if significant.size == 0:
        return FilterStatus.INVALID

    first, last = int(significant[0]), int(significant[-1])

    if first == 0 and last == p.degree:
        return FilterStatus.SUCCESS

    log.debug("Pruning polynomial of degree %d to [%d, %d]", p.degree, first, last)
    p.coeffs = coeffs[first:last + 1].copy()
    p.degree = last - first
    p.roots = None
    return FilterStatus.ADJUSTED


def check_validity(flt: Filter) -> FilterStatus:
    """
    Trim leading and trailing near-zero coefficients of both polynomials.

    Returns
    -------
    FilterStatus
        ``INVALID`` if the numerator vanished, else the denominator result if
        that is not ``SUCCESS``, else the numerator result.
    """
    num_status = _check_polynomial(flt.num)
    den_status = _check_polynomial(flt.den)

    if FilterStatus.ADJUSTED in (num_status, den_status):
        flt.factor = 0.0

    if num_status is FilterStatus.INVALID:
        return num_status

    if den_status is not FilterStatus.SUCCESS:
        return den_status

    return num_status


def _scale_polynomial(p: Polynomial, den: float) -> None:
    coeffs = np.array([try_div(c, den) for c in p.coeffs[:p.degree + 1]])

    if not np.all(np.isfinite(coeffs)):
        raise FilterRangeError("Overflow while normalizing coefficients")

    p.coeffs = coeffs


def normalize_coefficients(flt: Filter) -> FilterStatus:
    """
    Scale numerator and denominator so that ``den.coeffs[0] == 1``.

    Raises
    ------
    FilterRangeError
        On overflow (including a vanishing ``den.coeffs[0]``).
    """
    den0 = float(flt.den.coeffs[0])
    _scale_polynomial(flt.num, den0)
    _scale_polynomial(flt.den, den0)
    return check_validity(flt)


def normalize_magnitude(flt: Filter, f: float, target_gain: float = 1.0) -> FilterStatus:
    """
    Normalize coefficients, then scale the numerator so ``|H(f)| == target_gain``.

    Parameters
    ----------
    flt : Filter
        Filter to normalize (modified in place)
    f : float
        Reference frequency in Hz
    target_gain : float
        Requested magnitude at ``f``

    Raises
    ------
    FilterRangeError
        On overflow or a singular magnitude at ``f``.
    """
    status = normalize_coefficients(flt)

    if status.is_fatal:
        return status

    gain = response.magnitude(f, flt)

    if not math.isfinite(gain):
        raise FilterRangeError("Magnitude at %g Hz is singular" % f)

    scale = try_div(target_gain, gain)

    if not math.isfinite(scale):
        raise FilterRangeError("Magnitude at %g Hz vanishes" % f)

    flt.num.coeffs = flt.num.coeffs * scale
    return status.worst(check_validity(flt))


def roots(flt: Filter) -> Tuple[np.ndarray, np.ndarray]:
    """
    Compute zeros and poles of ``flt`` in the z-plane.

    Sets ``flt.factor`` so that ``H(z) = factor * prod(z - zeros) /
    prod(z - poles)`` (up to a power of ``z``).

    Returns
    -------
    zeros, poles : np.ndarray
        Complex roots of numerator and denominator
    """
    result = []

    for p in (flt.num, flt.den):
        # a polynomial in z**-1 is the reversed polynomial in z
        zpoly = Polynomial.from_coefficients(p.coeffs[:p.degree + 1][::-1])
        mpoly.coefficients_to_roots(zpoly)
        p.roots = zpoly.roots
        result.append(zpoly.roots[:p.degree])

    flt.factor = try_div(float(flt.num.coeffs[0]), float(flt.den.coeffs[0]))
    return result[0], result[1]
