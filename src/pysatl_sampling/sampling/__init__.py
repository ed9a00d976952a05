"""
Sampling subpackage

Samplers and strategies that generate points from densities:

- sample containers (:mod:`.sample`);
- sampler configuration (:mod:`.config`);
- direct generation from closed-form transforms (:mod:`.direct`);
- the adaptive cell ("foam") sampler (:mod:`.foam`);
- sampler selection and the default strategy (:mod:`.selector`).
"""

from __future__ import annotations

__author__ = "Leonid Elkin, Mikhail Mikhailov"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from .api import DensitySampler, DensitySamplingStrategy
from .config import SamplerConfig
from .direct import DirectSampler
from .foam import AdaptiveCellSampler, FoamCell
from .sample import Sample, SampleBuffer
from .selector import DefaultDensitySamplingStrategy, SamplerSelector

__all__ = [
    # containers
    "Sample",
    "SampleBuffer",
    # configuration
    "SamplerConfig",
    # samplers
    "DensitySampler",
    "DirectSampler",
    "AdaptiveCellSampler",
    "FoamCell",
    # selection
    "SamplerSelector",
    "DensitySamplingStrategy",
    "DefaultDensitySamplingStrategy",
]
