"""
Errors and Warnings
===================

Exception taxonomy of the sampling engine.

- :class:`InvalidParameterError` – a bound parameter is outside its valid
  range. Recoverable: re-clamp the parameter or abort the calling operation.
- :class:`UnknownIntegrationCodeError`, :class:`UnsupportedGenerationTargetError`,
  :class:`UnsupportedSamplingModeError` – misuse, raised at the point of misuse.
- :class:`GenerationBudgetExceededError`, :class:`DegenerateDensityError` –
  numerical conditions that fail a single generation request.

Sampling-efficiency diagnostics are reported as warnings, not errors.
"""

from __future__ import annotations

__author__ = "Leonid Elkin, Mikhail Mikhailov"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"


class SamplingError(Exception):
    """Base class for all errors raised by :mod:`pysatl_sampling`."""


class InvalidParameterError(SamplingError, ValueError):
    """A parameter value lies outside its declared valid range."""


class UnknownIntegrationCodeError(SamplingError, LookupError):
    """An integral was requested with a code the density does not declare."""


class UnsupportedGenerationTargetError(SamplingError, NotImplementedError):
    """The requested variable cannot be generated by the chosen technique."""


class UnsupportedSamplingModeError(SamplingError, NotImplementedError):
    """The sampler does not support the requested mode (conditional, categories)."""


class GenerationBudgetExceededError(SamplingError, RuntimeError):
    """The maximum number of generation trials was exhausted."""

    def __init__(self, accepted: int, requested: int, trials: int) -> None:
        super().__init__(
            f"Generated only {accepted} of {requested} points in {trials} trials; "
            "trial budget exhausted."
        )
        self.accepted = accepted
        self.requested = requested
        self.trials = trials


class DegenerateDensityError(SamplingError, RuntimeError):
    """The density integrates to (numerically) zero over the sampling domain."""


class LowSamplingEfficiencyWarning(RuntimeWarning):
    """Most proposals of a generation call were rejected."""


class BoundExceededWarning(RuntimeWarning):
    """A density value exceeded the envelope estimated for its cell."""


__all__ = [
    "SamplingError",
    "InvalidParameterError",
    "UnknownIntegrationCodeError",
    "UnsupportedGenerationTargetError",
    "UnsupportedSamplingModeError",
    "GenerationBudgetExceededError",
    "DegenerateDensityError",
    "LowSamplingEfficiencyWarning",
    "BoundExceededWarning",
]
