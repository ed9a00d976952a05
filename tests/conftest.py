from __future__ import annotations

__author__ = "Leonid Elkin, Mikhail Mikhailov"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from collections.abc import Callable
from typing import Any

import numpy as np
import pytest

from pysatl_sampling.density import FunctionDensity, JohnsonDensity, Parameter

pytest.importorskip("scipy")


def make_johnson(
    mass_range: tuple[float, float] = (-30.0, 30.0),
    mu: float = 0.5,
    lambda_: float = 1.2,
    gamma: float = -0.4,
    delta: float = 1.5,
    mass_threshold: float = -np.inf,
) -> JohnsonDensity:
    """Johnson density with wide parameter ranges and the given values."""
    return JohnsonDensity(
        "johnson",
        mass=Parameter("mass", 0.0, *mass_range),
        mu=Parameter("mu", mu, -10.0, 10.0),
        lambda_=Parameter("lambda", lambda_, 0.0, 10.0),
        gamma=Parameter("gamma", gamma, -10.0, 10.0),
        delta=Parameter("delta", delta, 0.0, 10.0),
        mass_threshold=mass_threshold,
    )


@pytest.fixture
def johnson() -> JohnsonDensity:
    return make_johnson()


@pytest.fixture
def johnson_factory() -> Callable[..., JohnsonDensity]:
    return make_johnson


@pytest.fixture
def uniform_density() -> FunctionDensity:
    """Flat density on [0, 1]."""

    def flat(x: Any) -> Any:
        return np.ones_like(x)

    return FunctionDensity("uniform", flat, [Parameter("x", 0.5, 0.0, 1.0)])


@pytest.fixture
def zero_density() -> FunctionDensity:
    """Density that vanishes everywhere on [0, 1]."""

    def zero(x: Any) -> Any:
        return np.zeros_like(x)

    return FunctionDensity("zero", zero, [Parameter("x", 0.5, 0.0, 1.0)])


@pytest.fixture
def gauss2d() -> FunctionDensity:
    """Unnormalised isotropic Gaussian centred in the unit square (sigma = 0.1)."""

    def gauss(x: Any, y: Any) -> Any:
        return np.exp(-((x - 0.5) ** 2 + (y - 0.5) ** 2) / (2 * 0.1**2))

    return FunctionDensity(
        "gauss2d", gauss, [Parameter("x", 0.5, 0.0, 1.0), Parameter("y", 0.5, 0.0, 1.0)]
    )


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(20250101)
