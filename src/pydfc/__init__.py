"""
pydfc - Digital filter coefficient generation and response analysis.
"""

from .design import (
    FilterClass,
    FirType,
    FirWindow,
    FrequencyTransform,
    IirType,
    LinearFirDesign,
    MiscDesign,
    MiscType,
    StandardIirDesign,
    TransformKind,
    design_from_dict,
)
from .errors import (
    DesignParameterError,
    FilterError,
    FilterRangeError,
    FilterStatus,
    NumericalFailure,
)
from .filters import Filter
from .generator import design_filter
from .lin_fir import lin_fir_filter_gen
from .misc_filters import misc_filter_gen
from .poly import Polynomial
from .response import (
    ResponseType,
    TimeResponse,
    TimeSignal,
    create_workspace,
    frequency_response,
    time_response,
)
from .std_iir import std_iir_filter_gen

__version__ = "0.1.0"
__all__ = [
    "DesignParameterError",
    "Filter",
    "FilterClass",
    "FilterError",
    "FilterRangeError",
    "FilterStatus",
    "FirType",
    "FirWindow",
    "FrequencyTransform",
    "IirType",
    "LinearFirDesign",
    "MiscDesign",
    "MiscType",
    "NumericalFailure",
    "Polynomial",
    "ResponseType",
    "StandardIirDesign",
    "TimeResponse",
    "TimeSignal",
    "TransformKind",
    "create_workspace",
    "design_filter",
    "design_from_dict",
    "frequency_response",
    "lin_fir_filter_gen",
    "misc_filter_gen",
    "std_iir_filter_gen",
    "time_response",
]
