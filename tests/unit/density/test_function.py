from __future__ import annotations

__author__ = "Leonid Elkin, Mikhail Mikhailov"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from typing import Any

import numpy as np
import pytest

from pysatl_sampling.density import (
    DensityFunction,
    FunctionDensity,
    JohnsonGenerator,
    JohnsonIntegral,
    Parameter,
)
from pysatl_sampling.errors import (
    InvalidParameterError,
    UnknownIntegrationCodeError,
    UnsupportedGenerationTargetError,
)
from pysatl_sampling.integration import IntegrationRequest


def _exponential() -> FunctionDensity:
    def formula(x: Any, tau: Any) -> Any:
        return np.exp(-x / tau) / tau

    return FunctionDensity(
        "expo", formula, [Parameter("x", 1.0, 0.0, 10.0), Parameter("tau", 2.0, 0.1, 5.0)]
    )


class TestFunctionDensity:
    def test_is_density_function(self) -> None:
        assert isinstance(_exponential(), DensityFunction)

    def test_evaluate_uses_bound_values(self) -> None:
        density = _exponential()
        assert density.evaluate() == pytest.approx(np.exp(-0.5) / 2.0)

    def test_evaluate_point_overrides_bound_value(self) -> None:
        density = _exponential()
        assert density.evaluate({"x": 4.0}) == pytest.approx(np.exp(-2.0) / 2.0)
        assert density.variable("x").value == 1.0

    def test_batch_matches_scalar(self) -> None:
        density = _exponential()
        xs = np.linspace(0.0, 10.0, 101)
        batch = density.evaluate_batch({"x": xs})
        scalar = np.array([density.evaluate({"x": x}) for x in xs])
        np.testing.assert_allclose(batch, scalar, rtol=1e-12, atol=0.0)

    def test_batch_accepts_parameter_columns(self) -> None:
        density = _exponential()
        taus = np.array([0.5, 1.0, 2.0])
        result = density.evaluate_batch({"x": np.ones(3), "tau": taus})
        np.testing.assert_allclose(result, np.exp(-1.0 / taus) / taus)

    def test_batch_output_has_batch_length_for_constant_formula(self) -> None:
        density = FunctionDensity("flat", lambda x: 1.0, [Parameter("x", 0.0, 0.0, 1.0)])
        assert density.evaluate_batch({"x": np.zeros(5)}).shape == (5,)

    def test_out_of_range_parameter_raises(self) -> None:
        density = _exponential()
        density.variable("tau").value = 7.0
        with pytest.raises(InvalidParameterError, match="tau"):
            density.evaluate({"x": 1.0})
        with pytest.raises(InvalidParameterError):
            density.evaluate_batch({"x": np.ones(4)})

    def test_supplied_columns_are_not_range_checked(self) -> None:
        density = _exponential()
        density.variable("x").value = 50.0
        assert density.evaluate({"x": 1.0}) > 0.0

    def test_batch_shape_errors(self) -> None:
        density = _exponential()
        with pytest.raises(ValueError, match="at least one column"):
            density.evaluate_batch({})
        with pytest.raises(ValueError, match="equal length"):
            density.evaluate_batch({"x": np.ones(3), "tau": np.ones(4)})
        with pytest.raises(ValueError, match="equal length"):
            density.evaluate_batch({"x": np.ones((2, 2))})

    def test_unknown_variable(self) -> None:
        density = _exponential()
        with pytest.raises(KeyError, match="no variable"):
            density.variable("y")
        with pytest.raises(KeyError):
            density.evaluate({"y": 1.0})

    def test_duplicate_variables_rejected(self) -> None:
        with pytest.raises(ValueError, match="declared twice"):
            FunctionDensity("dup", lambda x: x, [Parameter("x", 0.0), Parameter("x", 1.0)])

    def test_variables_view_is_read_only(self) -> None:
        density = _exponential()
        assert list(density.variables) == ["x", "tau"]
        with pytest.raises(TypeError):
            density.variables["z"] = Parameter("z", 0.0)  # type: ignore[index]

    def test_no_closed_forms(self) -> None:
        density = _exponential()
        assert density.analytical_integral_code(["x"]) is None
        assert density.direct_generation_code(["x"]) is None
        request = IntegrationRequest("x", JohnsonIntegral.MASS, 0.0, 1.0)
        with pytest.raises(UnknownIntegrationCodeError):
            density.analytical_integral(request)
        with pytest.raises(UnsupportedGenerationTargetError):
            density.generate_direct(JohnsonGenerator.MASS, 10, np.random.default_rng(0))

    def test_generation_domain_is_variable_range(self) -> None:
        density = _exponential()
        mask = density.in_generation_domain("x", [-1.0, 0.0, 5.0, 10.0, np.inf, np.nan])
        assert mask.tolist() == [False, True, True, True, False, False]
