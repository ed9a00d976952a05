"""
Johnson S_U density.

A normally distributed variable ``z`` transformed as

    z = γ + δ · asinh((x - μ) / λ)

gives the density

    f(x) = δ / (λ √(2π)) · 1 / √(1 + ((x-μ)/λ)²) · exp(-z² / 2),

set to zero below a configurable mass threshold. It is often used for mass
differences in charm decays, hence the observable is called ``mass``.

References: Johnson, N. L. (1949). *Systems of Frequency Curves Generated by
Methods of Translation*. Biometrika 36(1/2), 149–176.
"""

from __future__ import annotations

__author__ = "Fedor Myznikov"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

import math
from enum import Enum
from typing import TYPE_CHECKING, ClassVar, cast

import numpy as np
from scipy import integrate as _sp_integrate

from pysatl_sampling.density.function import DensityFunction
from pysatl_sampling.errors import (
    InvalidParameterError,
    UnknownIntegrationCodeError,
    UnsupportedGenerationTargetError,
)
from pysatl_sampling.integration import (
    INTEGRAL_FLOOR,
    gaussian_interval_probability,
    gaussian_signed_difference,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence
    from typing import Any

    from pysatl_sampling.density.parameter import Parameter
    from pysatl_sampling.integration import IntegrationRequest
    from pysatl_sampling.types import BoolArray, NumericArray, VariableName

_INV_SQRT_2PI = 1.0 / math.sqrt(2.0 * math.pi)

# Below this |asinh(arg)| the closed form over delta cancels catastrophically.
_DELTA_CLOSED_FORM_MIN_SLOPE = 1e-3


class JohnsonIntegral(Enum):
    """Closed-form integrals of the Johnson density, by integrated variable."""

    MASS = "mass"
    MEAN = "mu"
    GAMMA = "gamma"
    DELTA = "delta"


class JohnsonGenerator(Enum):
    """Direct generators of the Johnson density."""

    MASS = "mass"


class JohnsonDensity(DensityFunction):
    """
    Johnson S_U density.

    Parameters
    ----------
    name : str
        Name that identifies the density.
    mass : Parameter
        The observable.
    mu : Parameter
        Location parameter of the underlying normal distribution.
    lambda_ : Parameter
        Width parameter (> 0).
    gamma : Parameter
        Shape parameter that distorts the distribution to the left/right.
    delta : Parameter
        Shape parameter (> 0) setting the strength of the Gaussian component.
    mass_threshold : float, default -inf
        The density is zero below this value.

    Raises
    ------
    InvalidParameterError
        If the valid range of ``lambda_`` or ``delta`` extends below zero, or,
        at evaluation, integration or generation time, their value is not
        positive.
    """

    integration_codes: ClassVar[frozenset[Enum]] = frozenset(JohnsonIntegral)
    generation_codes: ClassVar[frozenset[Enum]] = frozenset(JohnsonGenerator)

    def __init__(
        self,
        name: str,
        mass: Parameter,
        mu: Parameter,
        lambda_: Parameter,
        gamma: Parameter,
        delta: Parameter,
        mass_threshold: float = -math.inf,
    ) -> None:
        super().__init__(name, [mass, mu, lambda_, gamma, delta])
        for positive in (lambda_, delta):
            if positive.min < 0.0:
                raise InvalidParameterError(
                    f"The range of '{positive.name}' must not extend below 0, "
                    f"got [{positive.min}, {positive.max}]."
                )

        self.mass_threshold = float(mass_threshold)
        self._roles = {
            "mass": mass.name,
            "mu": mu.name,
            "lambda": lambda_.name,
            "gamma": gamma.name,
            "delta": delta.name,
        }
        self._codes_by_variable: dict[VariableName, JohnsonIntegral] = {
            self._roles[code.value]: code for code in JohnsonIntegral
        }
        self._integrals: dict[Enum, Callable[[float, float, dict[str, float]], float]] = {
            JohnsonIntegral.MASS: self._integral_mass,
            JohnsonIntegral.MEAN: self._integral_mean,
            JohnsonIntegral.GAMMA: self._integral_gamma,
            JohnsonIntegral.DELTA: self._integral_delta,
        }

    @property
    def mass_name(self) -> VariableName:
        """Name of the observable."""
        return self._roles["mass"]

    def _compute(self, values: Mapping[VariableName, Any]) -> Any:
        mass = values[self._roles["mass"]]
        mu = values[self._roles["mu"]]
        lam = values[self._roles["lambda"]]
        gamma = values[self._roles["gamma"]]
        delta = values[self._roles["delta"]]
        self._check_positive("lambda", lam)
        self._check_positive("delta", delta)

        arg = (mass - mu) / lam
        expo = gamma + delta * np.arcsinh(arg)
        result = delta * _INV_SQRT_2PI / (lam * np.hypot(1.0, arg)) * np.exp(-0.5 * expo * expo)

        return np.where(mass < self.mass_threshold, 0.0, result)

    # ------------------------------------------------------------------ #
    # Integrals
    # ------------------------------------------------------------------ #

    def analytical_integral_code(self, variables: Sequence[VariableName]) -> Enum | None:
        if len(variables) != 1:
            return None
        return self._codes_by_variable.get(variables[0])

    def analytical_integral(self, request: IntegrationRequest) -> float:
        try:
            closed_form = self._integrals[request.code]
        except KeyError:
            raise UnknownIntegrationCodeError(
                f"Johnson density has no closed-form integral {request.code!r}."
            ) from None

        params = self._params(exclude=self._roles[request.code.value])
        return closed_form(request.low, request.high, params)

    def _params(self, exclude: VariableName | None = None) -> dict[str, float]:
        bound = self.current_values(exclude=() if exclude is None else (exclude,))
        params = {role: bound[name] for role, name in self._roles.items() if name in bound}
        for role in ("lambda", "delta"):
            if role in params:
                self._check_positive(role, params[role])
        return params

    def _check_positive(self, role: str, value: Any) -> None:
        if np.any(np.asarray(value) <= 0.0):
            raise InvalidParameterError(
                f"Johnson density '{self.name}' needs {self._roles[role]} > 0, got {value}."
            )

    def _transform(self, mass: float, mu: float, lam: float, gamma: float, delta: float) -> float:
        return gamma + delta * math.asinh((mass - mu) / lam)

    def _integral_mass(self, low: float, high: float, p: dict[str, float]) -> float:
        low = max(low, self.mass_threshold)
        if high <= low:
            return INTEGRAL_FLOOR
        z_low = self._transform(low, p["mu"], p["lambda"], p["gamma"], p["delta"])
        z_high = self._transform(high, p["mu"], p["lambda"], p["gamma"], p["delta"])
        return gaussian_interval_probability(z_low, z_high)

    def _integral_mean(self, low: float, high: float, p: dict[str, float]) -> float:
        if p["mass"] < self.mass_threshold:
            return INTEGRAL_FLOOR
        z_low = self._transform(p["mass"], low, p["lambda"], p["gamma"], p["delta"])
        z_high = self._transform(p["mass"], high, p["lambda"], p["gamma"], p["delta"])
        return gaussian_interval_probability(z_high, z_low)

    def _integral_gamma(self, low: float, high: float, p: dict[str, float]) -> float:
        if p["mass"] < self.mass_threshold:
            return INTEGRAL_FLOOR
        arg = (p["mass"] - p["mu"]) / p["lambda"]
        jacobian = p["delta"] / (p["lambda"] * math.hypot(1.0, arg))
        slope = p["delta"] * math.asinh(arg)
        result = jacobian * gaussian_interval_probability(low + slope, high + slope)
        return result if result > 0.0 else INTEGRAL_FLOOR

    def _integral_delta(self, low: float, high: float, p: dict[str, float]) -> float:
        if p["mass"] < self.mass_threshold:
            return INTEGRAL_FLOOR
        arg = (p["mass"] - p["mu"]) / p["lambda"]
        jacobian = 1.0 / (p["lambda"] * math.hypot(1.0, arg))
        s = math.asinh(arg)
        gamma = p["gamma"]

        if abs(s) < _DELTA_CLOSED_FORM_MIN_SLOPE:
            val, _ = _sp_integrate.quad(
                lambda d: d * _INV_SQRT_2PI * math.exp(-0.5 * (gamma + d * s) ** 2), low, high
            )
            result = jacobian * float(val)
        else:
            # ∫ δ φ(γ + δ s) dδ = s⁻² ∫ (u - γ) φ(u) du  and  ∫ (u - γ) φ(u) du = -φ(u) - γ Φ(u)
            u_low = gamma + low * s
            u_high = gamma + high * s
            phi_diff = _INV_SQRT_2PI * (math.exp(-0.5 * u_high**2) - math.exp(-0.5 * u_low**2))
            cdf_diff = gaussian_signed_difference(u_low, u_high)
            result = jacobian * (-phi_diff - gamma * cdf_diff) / (s * s)

        return result if result > 0.0 else INTEGRAL_FLOOR

    # ------------------------------------------------------------------ #
    # Direct generation
    # ------------------------------------------------------------------ #

    def direct_generation_code(self, variables: Sequence[VariableName]) -> Enum | None:
        if list(variables) == [self.mass_name]:
            return JohnsonGenerator.MASS
        return None

    def generate_direct(self, code: Enum, size: int, rng: np.random.Generator) -> NumericArray:
        """
        Draw raw mass proposals by transforming standard normal deviates.

        Raises
        ------
        UnsupportedGenerationTargetError
            For any code other than :attr:`JohnsonGenerator.MASS`.
        """
        if code is not JohnsonGenerator.MASS:
            raise UnsupportedGenerationTargetError(
                "Johnson density generates only the mass variable directly, "
                f"got {code!r}."
            )
        p = self._params(exclude=self.mass_name)
        gauss = rng.standard_normal(size)
        with np.errstate(over="ignore"):
            mass = p["lambda"] * np.sinh((gauss - p["gamma"]) / p["delta"]) + p["mu"]
        return cast("NumericArray", mass)

    def in_generation_domain(self, variable: VariableName, values: Any) -> BoolArray:
        mask = super().in_generation_domain(variable, values)
        if variable == self.mass_name:
            mask &= np.asarray(values, dtype=np.float64) >= self.mass_threshold
        return mask
