"""
Polynomial Algebra
==================

Real polynomials with ascending coefficient order (``coeffs[i]`` multiplies
``z**i``) and an optional cache of complex roots.

Provides:
- allocation helpers sized from the polynomial degree
- conversion between roots and coefficients
- fractional variable substitution (used for the Laplace and bilinear
  transforms of the IIR engine)
- binomial multiplication, addition and shifting
- Chebyshev (first kind) and Bessel polynomials
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from .errors import NumericalFailure


@dataclass
class Polynomial:
    """Polynomial of ``degree`` with coefficients and (optionally) roots."""
    degree: int = 0
    coeffs: Optional[np.ndarray] = None
    roots: Optional[np.ndarray] = None

    @classmethod
    def from_coefficients(cls, coeffs: Sequence[float]) -> 'Polynomial':
        coeffs = np.array(coeffs, dtype=np.float64)
        if coeffs.ndim != 1 or coeffs.size == 0:
            raise ValueError("Coefficients must be a non-empty 1-D sequence")
        return cls(degree=coeffs.size - 1, coeffs=coeffs)

    @classmethod
    def from_roots(cls, roots: Sequence[complex], scale: float = 1.0) -> 'Polynomial':
        roots = np.array(roots, dtype=np.complex128).ravel()
        poly = cls(degree=roots.size, roots=roots)
        roots_to_coefficients(poly, scale)
        return poly

    def copy(self) -> 'Polynomial':
        return Polynomial(
            degree=self.degree,
            coeffs=None if self.coeffs is None else self.coeffs.copy(),
            roots=None if self.roots is None else self.roots.copy(),
        )


# ───────────────────────── storage ────────────────────────── #

def allocate_coefficients(poly: Polynomial) -> None:
    poly.coeffs = np.zeros(poly.degree + 1, dtype=np.float64)


def allocate_roots(poly: Polynomial) -> None:
    # at least one slot, even for a constant polynomial
    poly.roots = np.zeros(max(1, poly.degree), dtype=np.complex128)


def allocate(poly: Polynomial) -> None:
    """Allocate zeroed coefficient and root storage for ``poly.degree``."""
    allocate_coefficients(poly)
    try:
        allocate_roots(poly)
    except MemoryError:
        poly.coeffs = None
        raise


def release(poly: Polynomial) -> None:
    poly.coeffs = None
    poly.roots = None


# ───────────────────────── roots <-> coefficients ────────────────────────── #

def roots_to_coefficients(poly: Polynomial, scale: float = 1.0) -> None:
    """
    Expand ``scale * prod(z - roots[i])`` into real coefficients.

    The roots must come in conjugate pairs (or be real); the imaginary parts
    of the expanded product are discarded.
    """
    acc = np.zeros(poly.degree + 1, dtype=np.complex128)
    acc[0] = 1.0

    for k, root in enumerate(poly.roots[:poly.degree], start=1):
        acc[1:k + 1] = acc[0:k] - root * acc[1:k + 1]
        acc[0] = -root * acc[0]

    poly.coeffs = scale * acc.real


def coefficients_to_roots(poly: Polynomial) -> None:
    """
    Find all roots of ``poly`` and store them in ``poly.roots``.

    Raises
    ------
    NumericalFailure
        If the solver fails, the leading coefficient vanishes or a
        coefficient is not finite.
    """
    if poly.degree == 0:
        allocate_roots(poly)
        return

    coeffs = poly.coeffs[:poly.degree + 1]

    if not np.all(np.isfinite(coeffs)):
        raise NumericalFailure("Polynomial coefficients are not finite")

    if coeffs[-1] == 0.0:
        raise NumericalFailure(
            "Leading coefficient of degree %d polynomial vanishes" % poly.degree)

    try:
        roots = np.roots(coeffs[::-1])
    except np.linalg.LinAlgError as exc:
        raise NumericalFailure("Polynomial root solver did not converge") from exc

    if roots.size != poly.degree or not np.all(np.isfinite(roots)):
        raise NumericalFailure("Polynomial root solver did not converge")

    poly.roots = roots.astype(np.complex128)


# ───────────────────────── algebra ────────────────────────── #

def _binomial_product(coeffs: np.ndarray, n: int, a: float, b: float) -> np.ndarray:
    """Coefficients of ``(a*z**n + b) * p(z)``."""
    out = np.zeros(coeffs.size + n, dtype=np.float64)
    out[:coeffs.size] += b * coeffs
    out[n:] += a * coeffs
    return out


def _padded_sum(p1: np.ndarray, p2: np.ndarray) -> np.ndarray:
    if p1.size < p2.size:
        p1, p2 = p2, p1
    out = p1.copy()
    out[:p2.size] += p2
    return out


def transform(poly: Polynomial, m: int, a: float, b: float,
              n: int, c: float, d: float) -> None:
    """
    Substitute ``z := (a*z**m + b) / (c*z**n + d)`` in place.

    The result is multiplied by ``(c*z**n + d)**r`` (``r`` the input
    degree) so it stays a polynomial of degree ``r * max(m, n)``. Evaluated
    with a Horner scheme that tracks the numerator ``u`` and the power of the
    denominator ``v`` separately::

        u_0 = c_r,  v_0 = 1
        v_i = (c z^n + d) v_{i-1}
        u_i = (a z^m + b) u_{i-1} + c_{r-i} v_i
    """
    r = poly.degree
    coeffs = poly.coeffs

    u = np.array([coeffs[r]], dtype=np.float64)
    v = np.ones(1, dtype=np.float64)

    for i in range(1, r + 1):
        v = _binomial_product(v, n, c, d)
        u = _padded_sum(_binomial_product(u, m, a, b), coeffs[r - i] * v)

    degree = r * max(m, n)
    out = np.zeros(degree + 1, dtype=np.float64)
    size = min(u.size, degree + 1)
    out[:size] = u[:size]

    poly.degree = degree
    poly.coeffs = out
    poly.roots = None


def multiply_by_binomial(poly: Polynomial, n: int, a: float, b: float) -> None:
    """Multiply ``poly`` by ``(a*z**n + b)`` in place."""
    poly.coeffs = _binomial_product(poly.coeffs[:poly.degree + 1], n, a, b)
    poly.degree += n
    poly.roots = None


def add(poly1: Polynomial, poly2: Polynomial, scale: float = 1.0) -> None:
    """``poly1 += scale * poly2``, extending the degree of ``poly1`` if needed."""
    p2 = poly2.coeffs[:poly2.degree + 1]

    if poly2.degree > poly1.degree:
        grown = np.zeros(poly2.degree + 1, dtype=np.float64)
        grown[:poly1.degree + 1] = poly1.coeffs[:poly1.degree + 1]
        poly1.coeffs = grown
        poly1.degree = poly2.degree

    poly1.coeffs[:p2.size] += scale * p2
    poly1.roots = None


def shift_left(poly: Polynomial, n: int) -> None:
    """Multiply ``poly`` by ``z**n``."""
    multiply_by_binomial(poly, n, 1.0, 0.0)


# ───────────────────────── special polynomials ────────────────────────── #

def _chebyshev_t(degree: float, x: float) -> float:
    if abs(x) < 1.0:
        return float(np.cos(degree * np.arccos(x)))

    with np.errstate(over="ignore"):
        y = float(np.cosh(degree * np.arccosh(abs(x))))

    if x < 0.0 and int(degree) % 2 == 1:
        return -y

    return y


def chebyshev(degree: int, x: float) -> float:
    """
    Chebyshev polynomial of the first kind ``T_n(x)``.

    Uses ``cos(n*acos(x))`` inside ``(-1, 1)`` and ``cosh(n*acosh(|x|))``
    outside, negated for odd ``n`` and negative ``x``. Overflow yields
    ``+/-inf``.
    """
    return _chebyshev_t(float(degree), x)


def chebyshev_inverse(degree: int, x: float) -> float:
    """Inverse of :func:`chebyshev`, i.e. ``T_{1/n}(x)``."""
    return _chebyshev_t(1.0 / degree, x)


def bessel_polynomial(degree: int) -> np.ndarray:
    """
    Coefficients of the (reverse) Bessel polynomial ``B_n(s)``.

    B_0 = 1, B_1 = 1 + s, B_n = (2n - 1) B_{n-1} + s^2 B_{n-2}
    """
    if degree < 0:
        raise ValueError("Bessel polynomial degree must be >= 0")

    prev = np.ones(1, dtype=np.float64)
    if degree == 0:
        return prev

    cur = np.ones(2, dtype=np.float64)

    for k in range(2, degree + 1):
        nxt = np.zeros(k + 1, dtype=np.float64)
        nxt[:k] = (2 * k - 1) * cur
        nxt[2:] += prev
        prev, cur = cur, nxt

    return cur
