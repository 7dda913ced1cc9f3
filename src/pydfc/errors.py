"""
Error taxonomy of the filter design engine
==========================================

Every fatal condition of a generator surfaces as a subclass of
:class:`FilterError`. Non-fatal outcomes are reported through
:class:`FilterStatus` next to the generated filter.
"""

from __future__ import annotations

import enum


class FilterError(Exception):
    """Base exception for all filter design and validation failures."""


class FilterRangeError(FilterError, ArithmeticError):
    """Overflow, underflow or singular evaluation while building a filter.

    Also raised when all coefficients of a polynomial vanished, because the
    filter is no longer realizable.
    """


class NumericalFailure(FilterError):
    """A root solver, root finder or special function did not converge."""


class DesignParameterError(FilterError, ValueError):
    """Design parameters are outside the supported limits."""


class FilterStatus(enum.IntEnum):
    """Outcome of validation and normalization steps.

    ``ADJUSTED`` means coefficients were pruned (or the degree changed) but the
    filter is still realizable, so callers should warn and continue.
    """

    SUCCESS = 0
    ADJUSTED = 1
    INVALID = 2

    @property
    def is_fatal(self) -> bool:
        return self is FilterStatus.INVALID

    def worst(self, other: "FilterStatus") -> "FilterStatus":
        """Return the more severe of two results."""
        return max(self, other)
