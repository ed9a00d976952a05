from __future__ import annotations

__author__ = "Artem Romanyuk"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

import dataclasses

import pytest

from pysatl_sampling.sampling import SamplerConfig


class TestSamplerConfig:
    """Validation and construction helpers of the sampler configuration."""

    def test_defaults(self) -> None:
        config = SamplerConfig()
        assert config.target_cell_count == 30
        assert config.exploration_samples_per_cell == 200
        assert config.max_generation_trial_budget == 10_000_000
        assert config.seed is None

    @pytest.mark.parametrize(
        ("dimension", "cells"), [(1, 30), (2, 500), (3, 5000), (4, 10000), (7, 10000)]
    )
    def test_cells_by_dimension(self, dimension: int, cells: int) -> None:
        assert SamplerConfig.for_dimension(dimension).target_cell_count == cells

    def test_for_dimension_overrides(self) -> None:
        config = SamplerConfig.for_dimension(2, target_cell_count=7, seed=3)
        assert config.target_cell_count == 7
        assert config.seed == 3

    def test_for_dimension_rejects_non_positive(self) -> None:
        with pytest.raises(ValueError, match="dimension"):
            SamplerConfig.for_dimension(0)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"target_cell_count": 0},
            {"exploration_samples_per_cell": 0},
            {"flatness_threshold": 0.0},
            {"flatness_threshold": 1.5},
            {"max_generation_trial_budget": 0},
            {"bins_per_axis": 1},
            {"bound_margin": -0.1},
            {"min_efficiency": 1.0},
        ],
    )
    def test_invalid_values(self, overrides: dict[str, float]) -> None:
        """Every field outside its domain is rejected on construction."""
        with pytest.raises(ValueError):
            SamplerConfig(**overrides)  # type: ignore[arg-type]

    def test_with_options(self) -> None:
        config = SamplerConfig()
        assert config.with_options() is config

        changed = config.with_options(bound_margin=0.5)
        assert changed.bound_margin == 0.5
        assert config.bound_margin == 0.25
        with pytest.raises(ValueError):
            config.with_options(bins_per_axis=0)

    def test_is_frozen(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            SamplerConfig().seed = 1  # type: ignore[misc]
