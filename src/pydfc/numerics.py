"""
Small numeric helpers shared by the design engines.
"""

import math
import sys

_DBL_MAX = sys.float_info.max


def try_div(num: float, den: float) -> float:
    """
    Divide without trapping on overflow.

    Returns signed infinity when ``num / den`` would overflow (this includes
    division by zero, where ``0 / 0`` yields ``+inf``).
    """
    if abs(den) <= 1.0 and abs(num) >= abs(den) * _DBL_MAX:
        if (num >= 0.0) == (den >= 0.0):
            return math.inf
        return -math.inf

    return num / den


def drosselung(attenuation: float) -> float:
    """Discrimination sqrt(10^(A/10) - 1) of an attenuation ``A`` in dB."""
    return math.sqrt(math.pow(10.0, attenuation / 10.0) - 1.0)
