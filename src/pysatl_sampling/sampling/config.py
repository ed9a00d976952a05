"""
Sampler Configuration
=====================

Configuration shared by the direct and the adaptive cell samplers.
"""

from __future__ import annotations

__author__ = "Artem Romanyuk"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from dataclasses import dataclass, replace
from typing import Any

# Cells explored per dimensionality (1, 2, 3, >= 4 dimensions).
_CELLS_BY_DIMENSION = (30, 500, 5000, 10000)


@dataclass(frozen=True, slots=True)
class SamplerConfig:
    """
    Configuration of the samplers.

    Parameters
    ----------
    target_cell_count : int, default 30
        Number of leaf cells at which exploration stops.
    exploration_samples_per_cell : int, default 200
        Density evaluations used to explore one cell.
    flatness_threshold : float, default 0.9
        A cell whose efficiency ``mean(f) / max(f)`` reaches this value is
        considered flat and is not split further. Must be in ``(0, 1]``.
    max_generation_trial_budget : int, default 10_000_000
        Maximum number of proposals per ``generate`` call.
    bins_per_axis : int, default 8
        Bins per axis used to locate the best split of a cell.
    bound_margin : float, default 0.25
        Envelope of a cell: ``max + bound_margin * (max - mean)``.
    min_efficiency : float, default 0.01
        Acceptance rate below which a generation call warns.
    seed : int | None, default None
        Seed of the random generator created when none is injected.

    Raises
    ------
    ValueError
        If any value is outside its domain.

    Notes
    -----
    - :meth:`for_dimension` picks the cell count by dimensionality.
    """

    target_cell_count: int = 30
    exploration_samples_per_cell: int = 200
    flatness_threshold: float = 0.9
    max_generation_trial_budget: int = 10_000_000
    bins_per_axis: int = 8
    bound_margin: float = 0.25
    min_efficiency: float = 0.01
    seed: int | None = None

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if self.target_cell_count <= 0:
            raise ValueError(f"target_cell_count must be positive, got {self.target_cell_count}")
        if self.exploration_samples_per_cell <= 0:
            raise ValueError(
                "exploration_samples_per_cell must be positive, "
                f"got {self.exploration_samples_per_cell}"
            )
        if not 0.0 < self.flatness_threshold <= 1.0:
            raise ValueError(
                f"flatness_threshold must be in (0, 1], got {self.flatness_threshold}"
            )
        if self.max_generation_trial_budget <= 0:
            raise ValueError(
                "max_generation_trial_budget must be positive, "
                f"got {self.max_generation_trial_budget}"
            )
        if self.bins_per_axis < 2:
            raise ValueError(f"bins_per_axis must be at least 2, got {self.bins_per_axis}")
        if self.bound_margin < 0.0:
            raise ValueError(f"bound_margin must be non-negative, got {self.bound_margin}")
        if not 0.0 <= self.min_efficiency < 1.0:
            raise ValueError(f"min_efficiency must be in [0, 1), got {self.min_efficiency}")

    @classmethod
    def for_dimension(cls, dimension: int, **overrides: Any) -> SamplerConfig:
        """
        Default configuration for sampling ``dimension`` variables.

        Parameters
        ----------
        dimension : int
            Number of generated variables.
        **overrides : Any
            Fields replacing the defaults.
        """
        if dimension <= 0:
            raise ValueError(f"dimension must be positive, got {dimension}")
        cells = _CELLS_BY_DIMENSION[min(dimension, len(_CELLS_BY_DIMENSION)) - 1]
        options: dict[str, Any] = {"target_cell_count": cells}
        options.update(overrides)
        return cls(**options)

    def with_options(self, **overrides: Any) -> SamplerConfig:
        """Return a copy with the given fields replaced (validated again)."""
        return replace(self, **overrides) if overrides else self
