"""
Densities subpackage

Interfaces and implementations of density functions:

- parameters and observables (:mod:`.parameter`);
- the density interface and formula-backed densities (:mod:`.function`);
- the Johnson S_U density with closed-form integrals and direct
  generation (:mod:`.johnson`).
"""

from __future__ import annotations

__author__ = "Leonid Elkin, Mikhail Mikhailov"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from .function import DensityFunction, FunctionDensity
from .johnson import JohnsonDensity, JohnsonGenerator, JohnsonIntegral
from .parameter import Parameter

__all__ = [
    "Parameter",
    "DensityFunction",
    "FunctionDensity",
    "JohnsonDensity",
    "JohnsonGenerator",
    "JohnsonIntegral",
]
