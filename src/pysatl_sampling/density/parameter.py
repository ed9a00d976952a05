"""
Parameters and Observables
==========================

A :class:`Parameter` is a named real variable with a current value and a
valid range. Observables and model parameters are represented the same way;
what makes a variable an observable is only that it is the one being
evaluated, integrated or generated.

Values are bound externally (e.g. by a fit or a generator loop) and may
change between evaluations. Range violations are not rejected on
assignment; they are reported by the density at evaluation time.
"""

from __future__ import annotations

__author__ = "Leonid Elkin, Mikhail Mikhailov"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from dataclasses import dataclass, field
from math import inf
from typing import Any

from pysatl_sampling.errors import InvalidParameterError
from pysatl_sampling.types import Interval1D, Kind


@dataclass(slots=True, eq=False)
class Parameter:
    """
    Named real variable with a valid range.

    Parameters
    ----------
    name : str
        Unique name within a density.
    value : float
        Current value.
    min : float, default=-inf
        Lower end of the valid range.
    max : float, default=inf
        Upper end of the valid range.
    floating : bool, default True
        Whether the variable may vary during integration or generation.
    kind : Kind, default Kind.CONTINUOUS
        ``Kind.DISCRETE`` marks a category variable.

    Notes
    -----
    Assigning ``min`` or ``max`` rebuilds :attr:`limits`, so both views of the
    range always agree. Use :meth:`set_range` to move both ends at once.
    """

    name: str
    value: float
    min: float = -inf
    max: float = inf
    floating: bool = True
    kind: Kind = Kind.CONTINUOUS
    limits: Interval1D = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.value = float(self.value)
        self.limits = Interval1D(float(self.min), float(self.max))

    def set_range(self, min: float, max: float) -> None:
        """Replace the valid range."""
        limits = Interval1D(float(min), float(max))
        object.__setattr__(self, "limits", limits)
        object.__setattr__(self, "min", limits.left)
        object.__setattr__(self, "max", limits.right)

    def __setattr__(self, name: str, value: Any) -> None:
        # Assigning one end of the range rebuilds ``limits``; an empty range is
        # rejected before anything changes.
        if name in ("min", "max") and hasattr(self, "limits"):
            if name == "min":
                self.set_range(value, self.max)
            else:
                self.set_range(self.min, value)
            return
        object.__setattr__(self, name, value)

    def in_range(self, value: float | None = None) -> bool:
        """Check ``value`` (the current value by default) against the valid range."""
        return (self.value if value is None else value) in self.limits

    def check(self) -> None:
        """
        Validate the current value.

        Raises
        ------
        InvalidParameterError
            If the value is outside ``[min, max]``.
        """
        if not self.in_range():
            raise InvalidParameterError(
                f"Parameter '{self.name}' = {self.value} is outside its range "
                f"[{self.min}, {self.max}]."
            )

    @property
    def is_bounded(self) -> bool:
        """Whether the valid range is finite."""
        return self.limits.is_bounded
