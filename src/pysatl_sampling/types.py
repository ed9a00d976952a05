"""
Core Type Definitions
=====================

Fundamental types and aliases shared by densities, integrators and samplers.
"""

__author__ = "Leonid Elkin, Mikhail Mikhailov"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from dataclasses import dataclass
from enum import StrEnum
from math import inf, isfinite
from typing import Any, cast, overload

import numpy as np
from numpy.typing import NDArray


class Kind(StrEnum):
    """
    Enumeration of variable kinds.

    Attributes
    ----------
    DISCRETE : str
        Category-like variable taking isolated values.
    CONTINUOUS : str
        Real-valued variable.
    """

    DISCRETE = "discrete"
    CONTINUOUS = "continuous"


NumPyNumber = np.floating[Any] | np.integer[Any]
"""Type alias for NumPy numeric types."""

Number = NumPyNumber | int | float
"""Type alias for all numeric types."""

NumericArray = NDArray[np.float64]
"""Type alias for floating point arrays."""

BoolArray = NDArray[np.bool_]
"""Type alias for boolean arrays."""

type VariableName = str
"""Type alias for the name of a parameter or observable."""


@dataclass(frozen=True, slots=True)
class Interval1D:
    """
    Closed 1D interval ``[left, right]`` used as the valid range of a variable.

    Parameters
    ----------
    left : float, default=-inf
        Left endpoint of the interval.
    right : float, default=inf
        Right endpoint of the interval.

    Raises
    ------
    ValueError
        If ``left > right`` or an endpoint is NaN.
    """

    left: float = -inf
    right: float = inf

    def __post_init__(self) -> None:
        if self.left != self.left or self.right != self.right:
            raise ValueError("Interval endpoints must not be NaN.")
        if self.left > self.right:
            raise ValueError(f"Empty interval [{self.left}, {self.right}].")

    @overload
    def contains(self, x: Number) -> bool: ...
    @overload
    def contains(self, x: NumericArray) -> BoolArray: ...

    def contains(self, x: Number | NumericArray) -> bool | BoolArray:
        """
        Check if point(s) are contained in the interval.

        Parameters
        ----------
        x : Number or NumericArray
            Point(s) to check.

        Returns
        -------
        bool or BoolArray
            True for points within the interval, False otherwise.
        """
        arr = np.asarray(x)
        result = (arr >= self.left) & (arr <= self.right)

        if np.ndim(arr) == 0:
            return bool(result)

        return cast(BoolArray, result)

    def __contains__(self, x: object) -> bool:
        """Check if a single point is in the interval."""
        return bool(self.contains(cast(Number, x)))

    @property
    def is_bounded(self) -> bool:
        """Whether both endpoints are finite."""
        return isfinite(self.left) and isfinite(self.right)

    @property
    def width(self) -> float:
        """Length of the interval (``inf`` for rays and the real line)."""
        return self.right - self.left


__all__ = [
    "Kind",
    "NumPyNumber",
    "Number",
    "NumericArray",
    "BoolArray",
    "VariableName",
    "Interval1D",
]
