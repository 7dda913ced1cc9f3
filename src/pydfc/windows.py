"""
Window functions for linear FIR design.
"""

import numpy as np
from scipy.special import i0 as bessel_i0

from .design import FirWindow


def build_window(degree: int, win_type: FirWindow = FirWindow.NONE,
                 alpha: float = 2.0) -> np.ndarray:
    """
    Return the ``degree + 1`` point window for a filter of order ``degree``.

    Parameters:
    -----------
    degree : int
        Filter order (number of taps minus one)
    win_type : FirWindow
        Window type
    alpha : float
        Kaiser window parameter (only for KAISER)

    Returns:
    --------
    np.ndarray
        Window values, not necessarily finite (callers must check)
    """
    i = np.arange(degree + 1, dtype=np.float64)

    if win_type is FirWindow.NONE:
        w = np.ones_like(i)
    elif win_type is FirWindow.HAMMING:
        u = i / degree
        w = 0.53836 - 0.46164 * np.cos(2 * np.pi * u)
    elif win_type is FirWindow.VAN_HANN:
        # (i+1)/(n+2) keeps both end taps non-zero
        u = (i + 1) / (degree + 2)
        w = 0.5 * (1.0 - np.cos(2 * np.pi * u))
    elif win_type is FirWindow.BLACKMAN:
        u = (i + 1) / (degree + 2)
        w = 0.42 - 0.5 * np.cos(2 * np.pi * u) + 0.08 * np.cos(4 * np.pi * u)
    elif win_type is FirWindow.KAISER:
        u = i / degree
        arg = np.sqrt(np.clip(1.0 - (2.0 * u - 1.0) ** 2, 0.0, None))
        with np.errstate(over="ignore", invalid="ignore"):
            w = bessel_i0(alpha * arg) / bessel_i0(alpha)
    else:
        raise ValueError(f"Unsupported window type: {win_type}")

    return w
