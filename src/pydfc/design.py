"""
Design parameters
=================

One dataclass per filter class, each tagged by its ``filter_class``:

- :class:`MiscDesign`        closed-form systems (Hilbert, comb, ...)
- :class:`LinearFirDesign`   windowed linear-phase FIR filters
- :class:`StandardIirDesign` classic IIR approximations

Frequency-selectivity (highpass, bandpass, bandstop) is described by a
:class:`FrequencyTransform` shared by the FIR and IIR variants.
"""

from __future__ import annotations

import enum
import math
from dataclasses import asdict, dataclass, field
from typing import Any, ClassVar, Dict, Union

from .constants import (
    ANGLE_MAX,
    ANGLE_MIN,
    DEGREE_MAX,
    DEGREE_MIN,
    FREQ_MIN,
    KAISER_ALPHA_MAX,
    KAISER_ALPHA_MIN,
    RIPPLE_MAX,
    RIPPLE_MIN,
    SAMPLE_FREQ_MAX,
    SAMPLE_FREQ_MIN,
    STOPBAND_MAX,
    STOPBAND_MIN,
)
from .errors import DesignParameterError


class FilterClass(enum.Enum):
    MISC = "misc"
    LINEAR_FIR = "linear_fir"
    STANDARD_IIR = "standard_iir"


class TransformKind(enum.Enum):
    NONE = "none"
    HIGHPASS = "highpass"
    BANDPASS = "bandpass"
    BANDSTOP = "bandstop"


class MiscType(enum.Enum):
    HILBERT = "hilbert"
    INTEGRATOR = "integrator"
    DIFFERENTIATOR = "differentiator"
    COMB = "comb"
    MOVING_AVERAGE_FIR = "moving_average_fir"
    MOVING_AVERAGE_IIR = "moving_average_iir"
    EXPONENTIAL_AVERAGE = "exponential_average"


class FirType(enum.Enum):
    RECTANGULAR = "rectangular"
    COSINE = "cosine"
    SQUARED_COSINE = "squared_cosine"
    GAUSSIAN = "gaussian"
    SQUARED_FIRST_ORDER = "squared_first_order"


class FirWindow(enum.Enum):
    NONE = "none"
    HAMMING = "hamming"
    VAN_HANN = "van_hann"
    BLACKMAN = "blackman"
    KAISER = "kaiser"


class IirType(enum.Enum):
    BUTTERWORTH = "butterworth"
    CHEBYSHEV = "chebyshev"
    CHEBYSHEV_INVERSE = "chebyshev_inverse"
    CAUER1 = "cauer1"
    CAUER2 = "cauer2"
    BESSEL = "bessel"


# ───────────────────────── helpers ────────────────────────── #

def _check_range(name: str, value: float, lo: float, hi: float) -> None:
    if not lo <= value <= hi:
        raise DesignParameterError(f"{name} {value!r} outside [{lo:g}, {hi:g}]")


def _check_frequency(name: str, value: float, f0: float) -> None:
    if not FREQ_MIN <= value < f0 / 2.0:
        raise DesignParameterError(
            f"{name} {value!r} Hz must be in [{FREQ_MIN:g}, {f0 / 2.0:g}) Hz")


def _check_sample_frequency(f0: float) -> None:
    _check_range("Sample frequency", f0, SAMPLE_FREQ_MIN, SAMPLE_FREQ_MAX)


def _enum_fields(d: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v.value if isinstance(v, enum.Enum) else v for k, v in d.items()}


# ───────────────────────── data structures ────────────────────────── #

@dataclass
class FrequencyTransform:
    """Lowpass to highpass/bandpass/bandstop transformation."""
    kind: TransformKind = TransformKind.NONE
    fc: float = 0.0        # cutoff (highpass) or center frequency in Hz
    bw: float = 0.0        # bandwidth in Hz (bandpass, bandstop)
    geometric: bool = False  # fc is the geometric center of the band

    @property
    def is_band(self) -> bool:
        return self.kind in (TransformKind.BANDPASS, TransformKind.BANDSTOP)

    def validate(self, f0: float) -> None:
        if self.kind is TransformKind.NONE:
            return

        _check_frequency("Transform frequency", self.fc, f0)

        if self.is_band:
            if self.bw <= 0.0:
                raise DesignParameterError("Bandwidth must be positive")

            center = math.hypot(self.fc, self.bw / 2.0) if self.geometric else self.fc
            if center + self.bw / 2.0 >= f0 / 2.0:
                raise DesignParameterError("Upper band edge exceeds f0/2")

            if not self.geometric and self.fc - self.bw / 2.0 < FREQ_MIN:
                raise DesignParameterError("Lower band edge must be positive")

    def to_dict(self) -> Dict[str, Any]:
        return _enum_fields(asdict(self))

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'FrequencyTransform':
        d = dict(d)
        d["kind"] = TransformKind(d.get("kind", TransformKind.NONE.value))
        return cls(**d)


@dataclass
class MiscDesign:
    """Closed-form miscellaneous system."""
    filter_class: ClassVar[FilterClass] = FilterClass.MISC

    type: MiscType
    order: int

    def validate(self, f0: float) -> None:
        _check_sample_frequency(f0)
        _check_range("Order", self.order, DEGREE_MIN, DEGREE_MAX)

    def to_dict(self) -> Dict[str, Any]:
        d = _enum_fields(asdict(self))
        d["filter_class"] = self.filter_class.value
        return d

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'MiscDesign':
        return cls(type=MiscType(d["type"]), order=int(d["order"]))


@dataclass
class LinearFirDesign:
    """Windowed linear-phase FIR filter."""
    filter_class: ClassVar[FilterClass] = FilterClass.LINEAR_FIR

    type: FirType
    order: int
    cutoff: float = 0.0  # lowpass cutoff in Hz (ignored when transformed)
    window: FirWindow = FirWindow.NONE
    kaiser_alpha: float = KAISER_ALPHA_MIN
    ftr: FrequencyTransform = field(default_factory=FrequencyTransform)

    def validate(self, f0: float) -> None:
        _check_sample_frequency(f0)
        _check_range("Order", self.order, DEGREE_MIN, DEGREE_MAX)

        if self.ftr.kind is TransformKind.NONE:
            _check_frequency("Cutoff frequency", self.cutoff, f0)
        elif self.order % 2:
            raise DesignParameterError(
                "Order must be even for a %s transform" % self.ftr.kind.value)

        self.ftr.validate(f0)

        if self.window is FirWindow.KAISER:
            _check_range("Kaiser alpha", self.kaiser_alpha,
                         KAISER_ALPHA_MIN, KAISER_ALPHA_MAX)

    def to_dict(self) -> Dict[str, Any]:
        d = _enum_fields(asdict(self))
        d["ftr"] = self.ftr.to_dict()
        d["filter_class"] = self.filter_class.value
        return d

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'LinearFirDesign':
        return cls(
            type=FirType(d["type"]),
            order=int(d["order"]),
            cutoff=float(d.get("cutoff", 0.0)),
            window=FirWindow(d.get("window", FirWindow.NONE.value)),
            kaiser_alpha=float(d.get("kaiser_alpha", KAISER_ALPHA_MIN)),
            ftr=FrequencyTransform.from_dict(d.get("ftr", {})),
        )


@dataclass
class StandardIirDesign:
    """Classic IIR approximation (designed in s, realized by bilinear transform)."""
    filter_class: ClassVar[FilterClass] = FilterClass.STANDARD_IIR

    type: IirType
    order: int
    cutoff: float = 0.0      # lowpass cutoff in Hz (ignored when transformed)
    ripple: float = 1.0      # passband ripple in dB
    minatt: float = 40.0     # stopband attenuation in dB
    angle: float = 45.0      # elliptic module angle in degrees
    ftr: FrequencyTransform = field(default_factory=FrequencyTransform)

    def validate(self, f0: float) -> None:
        _check_sample_frequency(f0)
        _check_range("Order", self.order, DEGREE_MIN, DEGREE_MAX)

        if self.ftr.kind is TransformKind.NONE:
            _check_frequency("Cutoff frequency", self.cutoff, f0)
        elif self.ftr.is_band and self.order % 2:
            raise DesignParameterError(
                "Order must be even for a %s transform" % self.ftr.kind.value)

        self.ftr.validate(f0)

        if self.type in (IirType.CHEBYSHEV, IirType.CAUER1, IirType.CAUER2):
            _check_range("Passband ripple", self.ripple, RIPPLE_MIN, RIPPLE_MAX)

        if self.type in (IirType.CHEBYSHEV_INVERSE, IirType.CAUER2):
            _check_range("Stopband attenuation", self.minatt, STOPBAND_MIN, STOPBAND_MAX)

        if self.type in (IirType.CAUER1, IirType.CAUER2):
            _check_range("Module angle", self.angle, ANGLE_MIN, ANGLE_MAX)

    def to_dict(self) -> Dict[str, Any]:
        d = _enum_fields(asdict(self))
        d["ftr"] = self.ftr.to_dict()
        d["filter_class"] = self.filter_class.value
        return d

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'StandardIirDesign':
        return cls(
            type=IirType(d["type"]),
            order=int(d["order"]),
            cutoff=float(d.get("cutoff", 0.0)),
            ripple=float(d.get("ripple", 1.0)),
            minatt=float(d.get("minatt", 40.0)),
            angle=float(d.get("angle", 45.0)),
            ftr=FrequencyTransform.from_dict(d.get("ftr", {})),
        )


FilterDesign = Union[MiscDesign, LinearFirDesign, StandardIirDesign]

_DESIGN_CLASSES = {
    cls.filter_class: cls for cls in (MiscDesign, LinearFirDesign, StandardIirDesign)
}


def design_from_dict(d: Dict[str, Any]) -> FilterDesign:
    """Rebuild any design variant from its ``to_dict()`` form."""
    try:
        cls = _DESIGN_CLASSES[FilterClass(d["filter_class"])]
    except (KeyError, ValueError) as exc:
        raise DesignParameterError(f"Unknown filter class in {d!r}") from exc
    return cls.from_dict(d)
