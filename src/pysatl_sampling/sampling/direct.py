"""
Direct Sampler
==============

Generation from a density's own closed-form transform (e.g. inverse
transform of a standard normal deviate), followed by an acceptance test
against the generation domain. Rejected proposals are retried until enough
points are accepted or the trial budget is exhausted.
"""

from __future__ import annotations

__author__ = "Artem Romanyuk"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from typing import TYPE_CHECKING

import numpy as np

from pysatl_sampling.errors import (
    GenerationBudgetExceededError,
    UnsupportedGenerationTargetError,
)
from pysatl_sampling.sampling.config import SamplerConfig
from pysatl_sampling.sampling.sample import SampleBuffer

if TYPE_CHECKING:
    from enum import Enum

    from pysatl_sampling.density.function import DensityFunction
    from pysatl_sampling.types import VariableName

# Proposal batches never shrink below this size.
_MIN_BATCH = 64


class DirectSampler:
    """
    Sampler using the density's direct generator.

    Parameters
    ----------
    density : DensityFunction
        Density to sample.
    variable : str
        Generated variable.
    config : SamplerConfig, optional
        Uses ``max_generation_trial_budget`` and ``seed``.
    rng : numpy.random.Generator, optional
        Source of randomness; created from ``config.seed`` if omitted.

    Raises
    ------
    UnsupportedGenerationTargetError
        If the density declares no direct generator for ``variable``.

    Attributes
    ----------
    resample_ratio : float
        Fraction of proposals rejected in the most recent call.
    trials : int
        Number of proposals made in the most recent call.
    """

    can_sample_conditional = False
    can_sample_categories = False

    def __init__(
        self,
        density: DensityFunction,
        variable: VariableName,
        config: SamplerConfig | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        code = density.direct_generation_code([variable])
        if code is None:
            raise UnsupportedGenerationTargetError(
                f"Density '{density.name}' cannot generate '{variable}' directly."
            )
        self.density = density
        self.variable = variable
        self.code: Enum = code
        self.config = config or SamplerConfig()
        self.rng = rng if rng is not None else np.random.default_rng(self.config.seed)
        self.resample_ratio = 0.0
        self.trials = 0

    @property
    def variables(self) -> tuple[VariableName, ...]:
        """Generated variables."""
        return (self.variable,)

    def reset(self, seed: int | None = None) -> None:
        """Replace the random generator with one seeded by ``seed``."""
        self.rng = np.random.default_rng(seed)

    def generate(self, count: int) -> SampleBuffer:
        """
        Generate exactly ``count`` accepted points.

        Parameters
        ----------
        count : int
            Number of points. Must be non-negative.

        Returns
        -------
        SampleBuffer
            Buffer with the single generated variable.

        Raises
        ------
        ValueError
            If ``count < 0``.
        GenerationBudgetExceededError
            If ``max_generation_trial_budget`` proposals do not yield
            ``count`` accepted points.
        """
        if count < 0:
            raise ValueError(f"Number of samples must be non-negative, got {count}")

        buffer = SampleBuffer(self.variables)
        budget = self.config.max_generation_trial_budget
        accepted = 0
        rejected = 0
        trials = 0
        acceptance = 1.0

        while accepted < count:
            if trials >= budget:
                self._record(trials, rejected)
                raise GenerationBudgetExceededError(accepted, count, trials)

            wanted = count - accepted
            size = min(max(int(wanted / acceptance * 1.1) + 1, _MIN_BATCH), budget - trials)
            proposals = self.density.generate_direct(self.code, size, self.rng)
            good = proposals[self.density.in_generation_domain(self.variable, proposals)]

            trials += size
            rejected += size - len(good)
            taken = good[:wanted]
            buffer.append(taken)
            accepted += len(taken)
            acceptance = max(len(good) / size, 1.0 / size)

        self._record(trials, rejected)
        return buffer

    def _record(self, trials: int, rejected: int) -> None:
        self.trials = trials
        self.resample_ratio = rejected / trials if trials else 0.0
