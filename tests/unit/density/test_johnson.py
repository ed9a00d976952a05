from __future__ import annotations

__author__ = "Fedor Myznikov"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

import numpy as np
import pytest
from scipy import stats

from pysatl_sampling.density import JohnsonDensity, JohnsonGenerator, JohnsonIntegral, Parameter
from pysatl_sampling.errors import InvalidParameterError, UnsupportedGenerationTargetError
from pysatl_sampling.integration import AnalyticIntegrator
from pysatl_sampling.sampling import DirectSampler


def _reference(mu: float = 0.5, lam: float = 1.2, gamma: float = -0.4, delta: float = 1.5):
    return stats.johnsonsu(gamma, delta, loc=mu, scale=lam)


class TestJohnsonDensity:
    def test_matches_reference_pdf(self, johnson: JohnsonDensity) -> None:
        masses = np.linspace(-30.0, 30.0, 2001)
        values = johnson.evaluate_batch({"mass": masses})
        np.testing.assert_allclose(values, _reference().pdf(masses), rtol=1e-10, atol=1e-300)

    def test_non_negative_and_finite(self, johnson_factory) -> None:
        for delta in (0.1, 1.0, 8.0):
            for gamma in (-9.0, 0.0, 9.0):
                density = johnson_factory(gamma=gamma, delta=delta, lambda_=0.05)
                values = density.evaluate_batch({"mass": np.linspace(-30.0, 30.0, 501)})
                assert np.all(np.isfinite(values))
                assert np.all(values >= 0.0)

    def test_zero_below_threshold(self, johnson_factory) -> None:
        density = johnson_factory(mass_threshold=0.0)
        assert density.evaluate({"mass": -0.1}) == 0.0
        assert density.evaluate({"mass": 0.0}) > 0.0
        values = density.evaluate_batch({"mass": np.array([-5.0, -1e-9, 1e-9, 5.0])})
        assert values[0] == 0.0 and values[1] == 0.0
        assert values[2] > 0.0 and values[3] > 0.0

    @pytest.mark.parametrize("role", ["lambda_", "delta"])
    def test_positive_parameters_range_checked(self, role: str) -> None:
        kwargs = {
            "mass": Parameter("mass", 0.0, -1.0, 1.0),
            "mu": Parameter("mu", 0.0),
            "lambda_": Parameter("lambda", 1.0, 0.0, 5.0),
            "gamma": Parameter("gamma", 0.0),
            "delta": Parameter("delta", 1.0, 0.0, 5.0),
        }
        kwargs[role] = Parameter(role, 1.0, -1.0, 5.0)
        with pytest.raises(InvalidParameterError, match="below 0"):
            JohnsonDensity("bad", **kwargs)

    def test_bound_parameter_out_of_range(self, johnson: JohnsonDensity) -> None:
        johnson.variable("lambda").value = 11.0
        with pytest.raises(InvalidParameterError, match="lambda"):
            johnson.evaluate({"mass": 0.0})

    @pytest.mark.parametrize("role", ["lambda_", "delta"])
    def test_zero_width_or_slope_is_invalid(self, johnson_factory, role: str) -> None:
        """Zero is inside the declared range but gives no finite density."""
        density = johnson_factory(**{role: 0.0})
        name = role.rstrip("_")

        with pytest.raises(InvalidParameterError, match=name):
            density.evaluate({"mass": 1.0})
        with pytest.raises(InvalidParameterError, match=name):
            density.evaluate_batch({"mass": np.array([0.5, 1.0])})
        with pytest.raises(InvalidParameterError, match=name):
            AnalyticIntegrator(density).integral("mass", -1.0, 1.0)
        with pytest.raises(InvalidParameterError, match=name):
            AnalyticIntegrator(density).integral("gamma", -1.0, 1.0)
        with pytest.raises(InvalidParameterError, match=name):
            DirectSampler(density, "mass", rng=np.random.default_rng(0)).generate(10)

    def test_batch_matches_scalar(self, johnson_factory) -> None:
        density = johnson_factory(mass_threshold=0.0)
        masses = np.linspace(-5.0, 5.0, 101)
        batch = density.evaluate_batch({"mass": masses})
        scalar = np.array([density.evaluate({"mass": m}) for m in masses])

        np.testing.assert_allclose(batch, scalar, rtol=1e-12, atol=0)
        assert np.all(batch[masses < 0.0] == 0.0)
        assert np.all(batch[masses >= 0.0] > 0.0)

    def test_integration_codes(self, johnson: JohnsonDensity) -> None:
        assert johnson.analytical_integral_code(["mass"]) is JohnsonIntegral.MASS
        assert johnson.analytical_integral_code(["mu"]) is JohnsonIntegral.MEAN
        assert johnson.analytical_integral_code(["gamma"]) is JohnsonIntegral.GAMMA
        assert johnson.analytical_integral_code(["delta"]) is JohnsonIntegral.DELTA
        assert johnson.analytical_integral_code(["lambda"]) is None
        assert johnson.analytical_integral_code(["mass", "mu"]) is None
        assert johnson.integration_codes == frozenset(JohnsonIntegral)

    def test_codes_follow_variable_names(self) -> None:
        density = JohnsonDensity(
            "renamed",
            mass=Parameter("dm", 0.0, 0.0, 1.0),
            mu=Parameter("m0", 0.1),
            lambda_=Parameter("w", 0.2, 0.0, 1.0),
            gamma=Parameter("g", 0.0),
            delta=Parameter("d", 1.0, 0.0, 5.0),
        )
        assert density.mass_name == "dm"
        assert density.analytical_integral_code(["dm"]) is JohnsonIntegral.MASS
        assert density.analytical_integral_code(["m0"]) is JohnsonIntegral.MEAN
        assert density.analytical_integral_code(["mass"]) is None
        assert density.direct_generation_code(["dm"]) is JohnsonGenerator.MASS

    def test_generation_codes(self, johnson: JohnsonDensity) -> None:
        assert johnson.direct_generation_code(["mass"]) is JohnsonGenerator.MASS
        assert johnson.direct_generation_code(["mu"]) is None
        assert johnson.direct_generation_code(["mass", "mu"]) is None

    def test_generate_direct_rejects_other_codes(
        self, johnson: JohnsonDensity, rng: np.random.Generator
    ) -> None:
        with pytest.raises(UnsupportedGenerationTargetError):
            johnson.generate_direct(JohnsonIntegral.MASS, 10, rng)

    def test_generate_direct_follows_distribution(
        self, johnson: JohnsonDensity, rng: np.random.Generator
    ) -> None:
        proposals = johnson.generate_direct(JohnsonGenerator.MASS, 20_000, rng)
        assert proposals.shape == (20_000,)
        assert stats.kstest(proposals, _reference().cdf).pvalue > 1e-4

    def test_generation_domain(self, johnson_factory) -> None:
        density = johnson_factory(mass_range=(-5.0, 5.0), mass_threshold=-1.0)
        mask = density.in_generation_domain("mass", [-6.0, -2.0, -1.0, 0.0, 5.0, 6.0, np.inf])
        assert mask.tolist() == [False, False, True, True, True, False, False]
