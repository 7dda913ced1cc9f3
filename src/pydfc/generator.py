"""
Dispatch a design-parameter variant to its filter generator.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from .design import FilterDesign, LinearFirDesign, MiscDesign, StandardIirDesign
from .errors import FilterStatus
from .filters import Filter
from .lin_fir import lin_fir_filter_gen
from .misc_filters import misc_filter_gen
from .std_iir import std_iir_filter_gen


def design_filter(
    design: FilterDesign,
    f0: float,
    log: Optional[logging.Logger] = None
) -> Tuple[Filter, FilterStatus]:
    """
    Generate the filter described by ``design`` at sample frequency ``f0``.

    The caller owns the returned filter and releases it with
    :func:`pydfc.filters.free` when done.
    """
    if isinstance(design, StandardIirDesign):
        return std_iir_filter_gen(design, f0, log)

    if isinstance(design, LinearFirDesign):
        return lin_fir_filter_gen(design, f0, log)

    if isinstance(design, MiscDesign):
        return misc_filter_gen(design, f0, log)

    raise TypeError(f"Unsupported design type: {type(design).__name__}")
