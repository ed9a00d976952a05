"""
PySATL Sampling
===============

Probability-density sampling engine: density functions with closed-form
integrals, direct generation, and an adaptive cell ("foam") sampler for
densities without a closed form.
"""

__author__ = "Leonid Elkin, Mikhail Mikhailov"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from importlib.metadata import version

from .density import *
from .density import __all__ as _density_all
from .errors import *
from .errors import __all__ as _errors_all
from .integration import (
    INTEGRAL_FLOOR,
    AnalyticIntegrator,
    IntegrationRequest,
    gaussian_interval_probability,
)
from .sampling import *
from .sampling import __all__ as _sampling_all
from .types import *
from .types import __all__ as _types_all

__version__ = version("pysatl-sampling")
__all__ = [
    "__version__",
    "INTEGRAL_FLOOR",
    "AnalyticIntegrator",
    "IntegrationRequest",
    "gaussian_interval_probability",
    *_density_all,
    *_errors_all,
    *_sampling_all,
    *_types_all,
]

del _density_all
del _errors_all
del _sampling_all
del _types_all
