"""
Sampler Selection
=================

This module chooses the sampler for a density and provides the default
sampling strategy:

- :class:`SamplerSelector` – direct generation when the density declares it
  for a single requested variable, the adaptive cell sampler otherwise.
- :class:`DefaultDensitySamplingStrategy` – selects a sampler, caches it and
  returns samples.

Notes
-----
- The adaptive cell sampler explores the density on construction, which is
  costly; the strategy therefore reuses the last sampler as long as the
  density, the generated variables, their ranges and all parameter values are
  unchanged.
"""

from __future__ import annotations

__author__ = "Artem Romanyuk"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from typing import TYPE_CHECKING, Any

from pysatl_sampling.errors import UnsupportedGenerationTargetError
from pysatl_sampling.sampling.api import DensitySamplingStrategy
from pysatl_sampling.sampling.config import SamplerConfig
from pysatl_sampling.sampling.direct import DirectSampler
from pysatl_sampling.sampling.foam import AdaptiveCellSampler

if TYPE_CHECKING:
    from collections.abc import Hashable, Iterable, Sequence

    import numpy as np

    from pysatl_sampling.density.function import DensityFunction
    from pysatl_sampling.sampling.api import DensitySampler
    from pysatl_sampling.sampling.sample import SampleBuffer
    from pysatl_sampling.types import VariableName


class SamplerSelector:
    """
    Chooses between direct generation and the adaptive cell sampler.

    Parameters
    ----------
    config : SamplerConfig, optional
        Configuration handed to the samplers. When omitted, the adaptive
        sampler uses :meth:`SamplerConfig.for_dimension`.
    allow_adaptive : bool, default True
        If ``False``, variables without a direct generator are rejected
        instead of falling back to the adaptive cell sampler.
    """

    def __init__(self, config: SamplerConfig | None = None, allow_adaptive: bool = True) -> None:
        self.config = config
        self.allow_adaptive = allow_adaptive

    def uses_direct(self, density: DensityFunction, variables: Sequence[VariableName]) -> bool:
        """Whether :meth:`select` would return a :class:`DirectSampler`."""
        return len(variables) == 1 and density.direct_generation_code(variables) is not None

    def select(
        self,
        density: DensityFunction,
        variables: Sequence[VariableName],
        conditional: Iterable[VariableName] = (),
        rng: np.random.Generator | None = None,
    ) -> DensitySampler:
        """
        Build the sampler for ``variables`` of ``density``.

        Parameters
        ----------
        density : DensityFunction
            Density to sample.
        variables : Sequence[str]
            Generated variables.
        conditional : Iterable[str], optional
            Variables to condition on (passed on to the adaptive sampler,
            which rejects them).
        rng : numpy.random.Generator, optional
            Random generator injected into the sampler.

        Raises
        ------
        UnsupportedGenerationTargetError
            If there is no direct generator and ``allow_adaptive`` is ``False``.
        UnsupportedSamplingModeError
            If the adaptive sampler is asked for an unsupported mode.
        """
        variables = tuple(variables)
        conditional = tuple(conditional)

        if not conditional and self.uses_direct(density, variables):
            return DirectSampler(density, variables[0], config=self.config, rng=rng)

        if not self.allow_adaptive:
            raise UnsupportedGenerationTargetError(
                f"Density '{density.name}' has no direct generator for {list(variables)} "
                "and adaptive sampling is disabled."
            )

        config = self.config or SamplerConfig.for_dimension(len(variables))
        return AdaptiveCellSampler(
            density, variables, config=config, rng=rng, conditional=conditional
        )


class DefaultDensitySamplingStrategy(DensitySamplingStrategy):
    """
    Default sampling strategy.

    Parameters
    ----------
    default_config : SamplerConfig, optional
        Configuration used when a call gives no overrides.
    allow_adaptive : bool, default True
        Passed to :class:`SamplerSelector`.
    use_cache : bool, default True
        Whether the last sampler is reused for an unchanged request.
    """

    def __init__(
        self,
        default_config: SamplerConfig | None = None,
        allow_adaptive: bool = True,
        use_cache: bool = True,
    ) -> None:
        self._default_config = default_config
        self._allow_adaptive = allow_adaptive
        self._use_cache = use_cache
        self._cached_sampler: DensitySampler | None = None
        self._cached_key: Hashable | None = None

    @property
    def default_config(self) -> SamplerConfig | None:
        """Default sampler configuration."""
        return self._default_config

    def sample(
        self,
        n: int,
        density: DensityFunction,
        variables: Sequence[VariableName] | None = None,
        **options: Any,
    ) -> SampleBuffer:
        """
        Generate ``n`` points from ``density``.

        Parameters
        ----------
        n : int
            Number of points to draw.
        density : DensityFunction
            Density to sample.
        variables : Sequence[str], optional
            Generated variables; defaults to all floating variables.
        **options : Any
            ``conditional`` (variables to condition on) and any
            :class:`SamplerConfig` field overriding the default configuration
            (e.g. ``seed``, ``target_cell_count``).

        Returns
        -------
        SampleBuffer
            The generated points.

        Raises
        ------
        ValueError
            If ``n < 0`` or an option is invalid.
        """
        if n < 0:
            raise ValueError(f"Number of samples must be non-negative, got {n}")

        if variables is None:
            variables = [name for name, var in density.variables.items() if var.floating]
        variables = tuple(variables)
        conditional = tuple(options.pop("conditional", ()))

        if self._use_cache:
            key = self._cache_key(density, variables, conditional, options)
            sampler = self._cached_sampler if key == self._cached_key else None
            if sampler is None:
                sampler = self._create_sampler(density, variables, conditional, options)
                self._cached_sampler = sampler
                self._cached_key = key
        else:
            sampler = self._create_sampler(density, variables, conditional, options)

        return sampler.generate(n)

    def _config(self, dimension: int, options: dict[str, Any]) -> SamplerConfig | None:
        if self._default_config is not None:
            return self._default_config.with_options(**options)
        if options:
            return SamplerConfig.for_dimension(dimension, **options)
        return None

    def _create_sampler(
        self,
        density: DensityFunction,
        variables: tuple[VariableName, ...],
        conditional: tuple[VariableName, ...],
        options: dict[str, Any],
    ) -> DensitySampler:
        selector = SamplerSelector(
            config=self._config(len(variables), options), allow_adaptive=self._allow_adaptive
        )
        return selector.select(density, variables, conditional=conditional)

    @staticmethod
    def _cache_key(
        density: DensityFunction,
        variables: tuple[VariableName, ...],
        conditional: tuple[VariableName, ...],
        options: dict[str, Any],
    ) -> Hashable:
        state = tuple(
            (name, None if name in variables else var.value, var.min, var.max)
            for name, var in density.variables.items()
        )
        return (id(density), variables, conditional, state, tuple(sorted(options.items())))

    def clear_cache(self) -> None:
        """Drop the cached sampler."""
        self._cached_sampler = None
        self._cached_key = None
