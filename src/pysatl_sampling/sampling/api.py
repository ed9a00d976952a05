"""
Sampling API
============

Protocols shared by the samplers and the sampling strategies.

- :class:`DensitySampler` – a sampler bound to one density and one set of
  generated variables (:class:`~pysatl_sampling.sampling.direct.DirectSampler`,
  :class:`~pysatl_sampling.sampling.foam.AdaptiveCellSampler`).
- :class:`DensitySamplingStrategy` – draws samples from any density, choosing
  and caching the sampler.
"""

from __future__ import annotations

__author__ = "Artem Romanyuk"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from pysatl_sampling.density.function import DensityFunction
    from pysatl_sampling.sampling.sample import Sample
    from pysatl_sampling.types import VariableName


@runtime_checkable
class DensitySampler(Protocol):
    """
    Protocol for sampler instances.

    Notes
    -----
    - Samplers are stateful and keep their random generator between calls
    - Multiple calls to ``generate()`` produce independent points
    - ``resample_ratio`` describes the most recent ``generate()`` call
    """

    can_sample_conditional: bool
    can_sample_categories: bool
    resample_ratio: float

    @property
    def variables(self) -> tuple[VariableName, ...]: ...

    def generate(self, count: int) -> Sample:
        """Generate ``count`` points."""
        ...

    def reset(self, seed: int | None = None) -> None:
        """Reseed the sampler's random generator."""
        ...


class DensitySamplingStrategy(Protocol):
    """Protocol for strategies drawing samples from densities."""

    def sample(
        self,
        n: int,
        density: DensityFunction,
        variables: Sequence[VariableName] | None = None,
        **options: Any,
    ) -> Sample: ...
