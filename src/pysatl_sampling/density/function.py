"""
Density Function Interface
==========================

This module defines the pluggable abstraction implemented by every density:

- :class:`DensityFunction` – base class with scalar and batch evaluation,
  optional closed-form integrals and optional direct generation.
- :class:`FunctionDensity` – a density backed by a user-supplied formula.

Notes
-----
- A density owns its variables but no global state. Variable values are bound
  externally and read at every call.
- ``evaluate`` is implemented through ``evaluate_batch`` with a batch of one,
  so both forms share a single numerical code path.
- Every variable that is not supplied by the evaluated point must lie within
  its declared range, otherwise :class:`InvalidParameterError` is raised.
"""

from __future__ import annotations

__author__ = "Leonid Elkin, Mikhail Mikhailov"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from abc import ABC, abstractmethod
from collections.abc import Callable
from types import MappingProxyType
from typing import TYPE_CHECKING, ClassVar, cast

import numpy as np
from mypy_extensions import KwArg

from pysatl_sampling.errors import (
    UnknownIntegrationCodeError,
    UnsupportedGenerationTargetError,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence
    from enum import Enum
    from typing import Any

    from pysatl_sampling.density.parameter import Parameter
    from pysatl_sampling.integration import IntegrationRequest
    from pysatl_sampling.types import BoolArray, NumericArray, VariableName

type DensityFormula = Callable[[KwArg(Any)], Any]


class DensityFunction(ABC):
    """
    Base class for (possibly unnormalised) densities ``f(x; θ)``.

    Parameters
    ----------
    name : str
        Name that identifies the density.
    variables : Iterable[Parameter]
        Observables and parameters the density depends on. Names must be unique.

    Attributes
    ----------
    integration_codes : frozenset
        Closed-form integral codes this density implements.
    generation_codes : frozenset
        Direct generation codes this density implements.
    """

    integration_codes: ClassVar[frozenset[Enum]] = frozenset()
    generation_codes: ClassVar[frozenset[Enum]] = frozenset()

    def __init__(self, name: str, variables: Iterable[Parameter]) -> None:
        self.name = name
        self._variables: dict[VariableName, Parameter] = {}
        for var in variables:
            if var.name in self._variables:
                raise ValueError(f"Variable '{var.name}' is declared twice in '{name}'.")
            self._variables[var.name] = var

    @property
    def variables(self) -> Mapping[VariableName, Parameter]:
        """Read-only view of the variables, in declaration order."""
        return MappingProxyType(self._variables)

    def variable(self, name: VariableName) -> Parameter:
        """
        Get a variable by name.

        Raises
        ------
        KeyError
            If the density has no such variable.
        """
        try:
            return self._variables[name]
        except KeyError:
            raise KeyError(f"Density '{self.name}' has no variable '{name}'.") from None

    @abstractmethod
    def _compute(self, values: Mapping[VariableName, Any]) -> Any:
        """
        Vectorised formula.

        ``values`` holds one entry per variable: 1-D arrays for the variables
        of the evaluated points and scalars for the bound ones.
        """

    def _bind(self, columns: Mapping[VariableName, Any]) -> dict[VariableName, Any]:
        unknown = set(columns) - set(self._variables)
        if unknown:
            raise KeyError(f"Density '{self.name}' has no variables {sorted(unknown)}.")

        values: dict[VariableName, Any] = {}
        for name, var in self._variables.items():
            if name in columns:
                values[name] = columns[name]
            else:
                var.check()
                values[name] = np.float64(var.value)
        return values

    def current_values(self, exclude: Iterable[VariableName] = ()) -> dict[VariableName, float]:
        """
        Current values of the variables, validated against their ranges.

        Parameters
        ----------
        exclude : Iterable[str]
            Variables to leave out (and not validate).
        """
        skipped = set(exclude)
        values: dict[VariableName, float] = {}
        for name, var in self._variables.items():
            if name in skipped:
                continue
            var.check()
            values[name] = var.value
        return values

    def evaluate(self, point: Mapping[VariableName, float] | None = None) -> float:
        """
        Evaluate the density at a single point.

        Parameters
        ----------
        point : Mapping[str, float], optional
            Values overriding the bound values of the named variables.

        Returns
        -------
        float
            Non-negative density value.

        Raises
        ------
        InvalidParameterError
            If a bound variable is outside its declared range.
        """
        if not point:
            point = {}
        columns = {name: np.array([value], dtype=np.float64) for name, value in point.items()}
        if not columns:
            return float(np.asarray(self._compute(self._bind(columns)), dtype=np.float64))
        return float(self.evaluate_batch(columns)[0])

    def evaluate_batch(self, points: Mapping[VariableName, Any]) -> NumericArray:
        """
        Evaluate the density at many points.

        Parameters
        ----------
        points : Mapping[str, array_like]
            Column per variable; all columns are 1-D and share one length.

        Returns
        -------
        NumericArray
            Density values, in the order of the input points.

        Raises
        ------
        ValueError
            If no column is given or the columns disagree in shape.
        InvalidParameterError
            If a bound variable is outside its declared range.
        """
        columns = {name: np.asarray(col, dtype=np.float64) for name, col in points.items()}
        if not columns:
            raise ValueError("evaluate_batch expects at least one column of points.")

        shapes = {col.shape for col in columns.values()}
        if len(shapes) != 1 or len(next(iter(shapes))) != 1:
            raise ValueError(f"Point columns must be 1-D of equal length, got shapes {shapes}.")
        (n,) = next(iter(shapes))

        result = np.asarray(self._compute(self._bind(columns)), dtype=np.float64)
        return cast("NumericArray", np.broadcast_to(result, (n,)).copy())

    def analytical_integral_code(self, variables: Sequence[VariableName]) -> Enum | None:
        """Code of the closed-form integral over ``variables``, if any."""
        return None

    def analytical_integral(self, request: IntegrationRequest) -> float:
        """
        Closed-form integral described by ``request``.

        Raises
        ------
        UnknownIntegrationCodeError
            If the density does not implement ``request.code``.
        """
        raise UnknownIntegrationCodeError(
            f"Density '{self.name}' has no closed-form integral {request.code!r}."
        )

    def direct_generation_code(self, variables: Sequence[VariableName]) -> Enum | None:
        """Code of the direct generator for ``variables``, if any."""
        return None

    def generate_direct(self, code: Enum, size: int, rng: np.random.Generator) -> NumericArray:
        """
        Draw ``size`` raw proposals with the direct generator ``code``.

        Proposals may fall outside the generation domain; the caller filters
        them with :meth:`in_generation_domain`.

        Raises
        ------
        UnsupportedGenerationTargetError
            If the density does not implement ``code``.
        """
        raise UnsupportedGenerationTargetError(
            f"Density '{self.name}' cannot generate directly with {code!r}."
        )

    def in_generation_domain(self, variable: VariableName, values: Any) -> BoolArray:
        """Mask of ``values`` that are acceptable generated values of ``variable``."""
        arr = np.asarray(values, dtype=np.float64)
        return cast("BoolArray", np.isfinite(arr) & self.variable(variable).limits.contains(arr))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, variables={list(self._variables)})"


class FunctionDensity(DensityFunction):
    """
    Density defined by a vectorised formula ``func(**values)``.

    Useful for shapes without closed forms; it declares neither analytical
    integrals nor direct generation, so sampling goes through the adaptive
    cell sampler.

    Parameters
    ----------
    name : str
        Name that identifies the density.
    func : Callable[[KwArg(Any)], Any]
        Formula receiving one keyword argument per variable.
    variables : Iterable[Parameter]
        Variables of the formula.
    """

    def __init__(self, name: str, func: DensityFormula, variables: Iterable[Parameter]) -> None:
        super().__init__(name, variables)
        self._func = func

    def _compute(self, values: Mapping[VariableName, Any]) -> Any:
        return self._func(**values)
