"""
Adaptive Cell Sampler
=====================

Density-agnostic adaptive Monte Carlo generator ("foam").

The sampling domain (the product of the generated variables' ranges) is
mapped onto the unit hypercube and partitioned into a binary tree of cells:

1. **Exploration** – each new cell is probed with a stratified sample of
   density values giving its integral, its maximum and the split that best
   reduces the wasted envelope ``volume * (max - mean)``. The leaf with the
   largest waste is split until the target leaf count is reached or every
   leaf is flat.
2. **Weight table** – a cumulative table over the leaves' envelope masses
   ``volume * bound`` allows ``O(log n)`` cell selection.
3. **Generation** – pick a cell from the table, draw a uniform point inside
   it and accept it with probability ``f / bound``.

Notes
-----
- Cells live in a flat arena (:attr:`AdaptiveCellSampler.cells`); parent and
  children are indices into it.
- Exploration is sequential. After the weight table is built, the cell tree is
  only touched when a density value exceeds a cell's bound.
- Conditional generation and category variables are not supported.
"""

from __future__ import annotations

__author__ = "Artem Romanyuk"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

import heapq
import math
import warnings
from dataclasses import dataclass
from typing import TYPE_CHECKING, cast

import numpy as np

from pysatl_sampling.errors import (
    BoundExceededWarning,
    DegenerateDensityError,
    GenerationBudgetExceededError,
    LowSamplingEfficiencyWarning,
    UnsupportedSamplingModeError,
)
from pysatl_sampling.sampling.config import SamplerConfig
from pysatl_sampling.sampling.sample import SampleBuffer
from pysatl_sampling.types import Kind

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    import numpy.typing as npt

    from pysatl_sampling.density.function import DensityFunction
    from pysatl_sampling.types import NumericArray, VariableName

_MIN_BATCH = 64

# Cells narrower than this (in unit coordinates) are not split.
_MIN_CELL_WIDTH = 1e-12

# Cells wasting less than this share of the running integral are not split.
_NEGLIGIBLE_LOSS_SHARE = 1e-9


@dataclass(slots=True, eq=False)
class FoamCell:
    """
    Node of the cell tree.

    Parameters
    ----------
    index : int
        Position in the arena.
    parent : int | None
        Index of the parent cell, ``None`` for the root.
    depth : int
        Number of splits from the root.
    lower, upper : NumericArray
        Cell bounds in unit-hypercube coordinates.
    """

    index: int
    parent: int | None
    depth: int
    lower: NumericArray
    upper: NumericArray
    children: tuple[int, int] | None = None
    integral: float = 0.0
    integral_error: float = 0.0
    mean_value: float = 0.0
    max_value: float = 0.0
    bound: float = 0.0
    loss: float = 0.0
    best_axis: int = 0
    best_split: float = 0.5

    @property
    def is_leaf(self) -> bool:
        """Whether the cell has not been split."""
        return self.children is None

    @property
    def efficiency(self) -> float:
        """Estimated acceptance rate ``mean / max`` (1 for an empty cell)."""
        if self.max_value <= 0.0:
            return 1.0
        return self.mean_value / self.max_value

    @property
    def unit_volume(self) -> float:
        """Volume in unit-hypercube coordinates."""
        return float(np.prod(self.upper - self.lower))


class AdaptiveCellSampler:
    """
    Adaptive cell ("foam") sampler over a set of continuous variables.

    Exploration and the weight table build run on construction.

    Parameters
    ----------
    density : DensityFunction
        Density to sample; need not be normalised.
    variables : Sequence[str]
        Generated variables. Their ranges must be finite.
    config : SamplerConfig, optional
        Defaults to :meth:`SamplerConfig.for_dimension`.
    rng : numpy.random.Generator, optional
        Source of randomness; created from ``config.seed`` if omitted.
    conditional : Iterable[str], optional
        Variables to condition on. Not supported; must be empty.

    Raises
    ------
    UnsupportedSamplingModeError
        If conditional variables are requested or a generated variable is
        discrete.
    ValueError
        If no variable is given, a name repeats or a range is not finite.
    DegenerateDensityError
        If the density integrates to zero over the domain.

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
        variables: Sequence[VariableName],
        config: SamplerConfig | None = None,
        rng: np.random.Generator | None = None,
        conditional: Iterable[VariableName] = (),
    ) -> None:
        conditional = tuple(conditional)
        if conditional:
            raise UnsupportedSamplingModeError(
                f"Adaptive cell sampler cannot sample conditionally on {list(conditional)}."
            )

        self.variables: tuple[VariableName, ...] = tuple(variables)
        if not self.variables:
            raise ValueError("At least one variable must be generated.")
        if len(set(self.variables)) != len(self.variables):
            raise ValueError(f"Duplicate generated variables {self.variables}.")

        xmin, width = [], []
        for name in self.variables:
            var = density.variable(name)
            if var.kind is Kind.DISCRETE:
                raise UnsupportedSamplingModeError(
                    f"Adaptive cell sampler cannot generate category variable '{name}'."
                )
            if not var.is_bounded:
                raise ValueError(
                    f"Variable '{name}' needs a finite range for adaptive sampling, "
                    f"got [{var.min}, {var.max}]."
                )
            xmin.append(var.min)
            width.append(var.max - var.min)

        self.density = density
        self.config = config or SamplerConfig.for_dimension(len(self.variables))
        self.rng = rng if rng is not None else np.random.default_rng(self.config.seed)

        self._xmin = np.array(xmin, dtype=np.float64)
        self._range = np.array(width, dtype=np.float64)
        self._volume = float(np.prod(self._range))

        self._cells: list[FoamCell] = []
        self._leaf_index: npt.NDArray[np.intp] = np.empty(0, dtype=np.intp)
        self._leaf_lower: NumericArray = np.empty((0, self.dimension))
        self._leaf_width: NumericArray = np.empty((0, self.dimension))
        self._leaf_bound: NumericArray = np.empty(0)
        self._leaf_volume: NumericArray = np.empty(0)
        self._cumulative: NumericArray = np.empty(0)
        self._table_ready = False

        self.resample_ratio = 0.0
        self.trials = 0

        root = self._new_cell(
            None, 0, np.zeros(self.dimension), np.ones(self.dimension)
        )
        self._explore_cell(root)
        self.explore()
        self.build_weight_table()

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #

    @property
    def dimension(self) -> int:
        """Number of generated variables."""
        return len(self.variables)

    @property
    def cells(self) -> Sequence[FoamCell]:
        """All cells, root first."""
        return tuple(self._cells)

    @property
    def leaves(self) -> list[FoamCell]:
        """Leaf cells in arena order."""
        return [cell for cell in self._cells if cell.is_leaf]

    @property
    def n_leaves(self) -> int:
        """Number of leaf cells."""
        return (len(self._cells) + 1) // 2

    @property
    def integral(self) -> float:
        """Monte Carlo estimate of the density's integral over the domain."""
        return math.fsum(cell.integral for cell in self.leaves)

    @property
    def integral_error(self) -> float:
        """Statistical error of :attr:`integral`."""
        return math.sqrt(math.fsum(cell.integral_error**2 for cell in self.leaves))

    @property
    def efficiency(self) -> float:
        """Expected acceptance rate: integral over envelope mass."""
        envelope = float(self._cumulative[-1]) if self._cumulative.size else 0.0
        return self.integral / envelope if envelope > 0.0 else 0.0

    def reset(self, seed: int | None = None) -> None:
        """Replace the random generator with one seeded by ``seed``."""
        self.rng = np.random.default_rng(seed)

    # ------------------------------------------------------------------ #
    # Exploration
    # ------------------------------------------------------------------ #

    def _new_cell(
        self, parent: int | None, depth: int, lower: NumericArray, upper: NumericArray
    ) -> FoamCell:
        cell = FoamCell(
            index=len(self._cells), parent=parent, depth=depth, lower=lower, upper=upper
        )
        self._cells.append(cell)
        return cell

    def _stratified(self, n: int) -> NumericArray:
        """Latin hypercube sample of ``n`` points in the unit hypercube."""
        shape = (n, self.dimension)
        strata = np.argsort(self.rng.random(shape), axis=0)
        return cast("NumericArray", (strata + self.rng.random(shape)) / n)

    def _evaluate(self, unit_points: NumericArray) -> NumericArray:
        points = self._xmin + unit_points * self._range
        values = self.density.evaluate_batch(
            {name: points[:, j] for j, name in enumerate(self.variables)}
        )
        if not np.all(np.isfinite(values)) or np.any(values < 0.0):
            raise ValueError(
                f"Density '{self.density.name}' returned negative or non-finite values."
            )
        return values

    def _explore_cell(self, cell: FoamCell) -> None:
        """Estimate integral, maximum and best split of ``cell``."""
        n = self.config.exploration_samples_per_cell
        bins = self.config.bins_per_axis
        u = self._stratified(n)
        extent = cell.upper - cell.lower
        f = self._evaluate(cell.lower + u * extent)

        volume = cell.unit_volume * self._volume
        cell.mean_value = float(f.mean())
        cell.max_value = float(f.max())
        cell.integral = volume * cell.mean_value
        cell.integral_error = volume * float(f.std(ddof=1)) / math.sqrt(n) if n > 1 else 0.0
        cell.loss = volume * (cell.max_value - cell.mean_value)
        cell.bound = cell.max_value + self.config.bound_margin * (
            cell.max_value - cell.mean_value
        )

        cell.best_axis = int(np.argmax(extent))
        cell.best_split = float(cell.lower[cell.best_axis] + 0.5 * extent[cell.best_axis])
        best_gain = 0.0

        fractions = np.arange(1, bins) / bins
        for axis in range(self.dimension):
            idx = np.minimum((u[:, axis] * bins).astype(np.intp), bins - 1)
            counts = np.bincount(idx, minlength=bins)
            sums = np.bincount(idx, weights=f, minlength=bins)
            maxima = np.zeros(bins)
            np.maximum.at(maxima, idx, f)

            left_n = np.cumsum(counts)[:-1]
            left_sum = np.cumsum(sums)[:-1]
            left_max = np.maximum.accumulate(maxima)[:-1]
            right_n = counts.sum() - left_n
            right_sum = sums.sum() - left_sum
            right_max = np.maximum.accumulate(maxima[::-1])[::-1][1:]

            left_mean = np.divide(left_sum, left_n, out=np.zeros(bins - 1), where=left_n > 0)
            right_mean = np.divide(right_sum, right_n, out=np.zeros(bins - 1), where=right_n > 0)
            loss = volume * (
                fractions * (left_max - left_mean) + (1.0 - fractions) * (right_max - right_mean)
            )
            gains = cell.loss - loss

            k = int(np.argmax(gains))
            if gains[k] > best_gain:
                best_gain = float(gains[k])
                cell.best_axis = axis
                cell.best_split = float(cell.lower[axis] + fractions[k] * extent[axis])

    def _is_candidate(self, cell: FoamCell) -> bool:
        if cell.loss <= 0.0 or cell.efficiency >= self.config.flatness_threshold:
            return False
        axis = cell.best_axis
        return bool(cell.upper[axis] - cell.lower[axis] > _MIN_CELL_WIDTH)

    def _split(self, cell: FoamCell) -> tuple[FoamCell, FoamCell]:
        axis, split = cell.best_axis, cell.best_split

        left_upper = cell.upper.copy()
        left_upper[axis] = split
        right_lower = cell.lower.copy()
        right_lower[axis] = split

        left = self._new_cell(cell.index, cell.depth + 1, cell.lower.copy(), left_upper)
        right = self._new_cell(cell.index, cell.depth + 1, right_lower, cell.upper.copy())
        cell.children = (left.index, right.index)

        self._explore_cell(left)
        self._explore_cell(right)
        return left, right

    def explore(self) -> None:
        """
        Split cells until ``target_cell_count`` leaves exist or all leaves are flat.

        The leaf wasting the largest envelope mass is split first; exploration
        also stops once that waste is a negligible share of the running
        integral estimate. Calling this again after raising
        ``target_cell_count`` continues the refinement.
        """
        leaves = self.leaves
        running = math.fsum(cell.integral for cell in leaves)
        queue = [(-cell.loss, cell.index) for cell in leaves if self._is_candidate(cell)]
        heapq.heapify(queue)

        while queue and self.n_leaves < self.config.target_cell_count:
            neg_loss, index = heapq.heappop(queue)
            if -neg_loss <= _NEGLIGIBLE_LOSS_SHARE * running:
                break
            parent = self._cells[index]
            children = self._split(parent)
            running += children[0].integral + children[1].integral - parent.integral
            for child in children:
                if self._is_candidate(child):
                    heapq.heappush(queue, (-child.loss, child.index))

        self._table_ready = False

    # ------------------------------------------------------------------ #
    # Weight table
    # ------------------------------------------------------------------ #

    def build_weight_table(self) -> None:
        """
        Freeze the leaves into the cumulative selection table.

        Raises
        ------
        DegenerateDensityError
            If the estimated integral over the domain is zero.
        """
        leaves = self.leaves
        total = math.fsum(cell.integral for cell in leaves)
        if not total > 0.0 or not math.isfinite(total):
            raise DegenerateDensityError(
                f"Density '{self.density.name}' integrates to {total} over the sampling domain."
            )

        self._leaf_index = np.array([cell.index for cell in leaves], dtype=np.intp)
        self._leaf_lower = np.array([cell.lower for cell in leaves])
        self._leaf_width = np.array([cell.upper - cell.lower for cell in leaves])
        self._leaf_volume = np.prod(self._leaf_width, axis=1) * self._volume
        self._leaf_bound = np.array([cell.bound for cell in leaves])
        self._update_cumulative()
        self._table_ready = True

    def _update_cumulative(self) -> None:
        self._cumulative = np.cumsum(self._leaf_volume * self._leaf_bound)

    def _raise_bounds(self, slots: npt.NDArray[np.intp], values: NumericArray) -> None:
        observed = np.zeros(len(self._leaf_bound))
        np.maximum.at(observed, slots, values)
        exceeded = np.flatnonzero(observed > self._leaf_bound)

        for slot in exceeded:
            new_bound = float(observed[slot]) * (1.0 + self.config.bound_margin)
            self._leaf_bound[slot] = new_bound
            self._cells[int(self._leaf_index[slot])].bound = new_bound
        self._update_cumulative()

        warnings.warn(
            f"Density values exceeded the estimated bound in {len(exceeded)} cell(s); "
            "bounds were raised. Consider more exploration samples per cell.",
            BoundExceededWarning,
            stacklevel=3,
        )

    # ------------------------------------------------------------------ #
    # Generation
    # ------------------------------------------------------------------ #

    def _pick_leaves(self, size: int) -> npt.NDArray[np.intp]:
        r = self.rng.random(size) * self._cumulative[-1]
        slots = np.searchsorted(self._cumulative, r, side="right")
        return np.minimum(slots, len(self._cumulative) - 1)

    def generate(self, count: int) -> SampleBuffer:
        """
        Generate ``count`` points.

        Parameters
        ----------
        count : int
            Number of points. Must be non-negative.

        Returns
        -------
        SampleBuffer
            Buffer with one column per generated variable.

        Raises
        ------
        ValueError
            If ``count < 0``.
        GenerationBudgetExceededError
            If ``max_generation_trial_budget`` proposals do not yield
            ``count`` accepted points.

        Warns
        -----
        LowSamplingEfficiencyWarning
            If the acceptance rate of the call is below ``min_efficiency``.
        BoundExceededWarning
            If a density value exceeded its cell's bound.
        """
        if count < 0:
            raise ValueError(f"Number of samples must be non-negative, got {count}")
        if not self._table_ready:
            self.build_weight_table()

        buffer = SampleBuffer(self.variables)
        budget = self.config.max_generation_trial_budget
        accepted = 0
        rejected = 0
        trials = 0
        acceptance = max(self.efficiency, 1e-3)

        while accepted < count:
            if trials >= budget:
                self._record(trials, rejected)
                raise GenerationBudgetExceededError(accepted, count, trials)

            wanted = count - accepted
            size = min(max(int(wanted / acceptance * 1.1) + 1, _MIN_BATCH), budget - trials)
            slots = self._pick_leaves(size)
            u = self._leaf_lower[slots] + self.rng.random((size, self.dimension)) * (
                self._leaf_width[slots]
            )
            f = self._evaluate(u)
            bound = self._leaf_bound[slots]

            over = f > bound
            if over.any():
                self._raise_bounds(slots[over], f[over])

            keep = self.rng.random(size) * bound < f
            n_keep = int(keep.sum())
            trials += size
            rejected += size - n_keep

            taken = (self._xmin + u[keep] * self._range)[:wanted]
            buffer.append(taken)
            accepted += len(taken)
            acceptance = max(n_keep / size, 1.0 / size)

        self._record(trials, rejected)
        if trials and 1.0 - self.resample_ratio < self.config.min_efficiency:
            warnings.warn(
                f"Sampling efficiency {1.0 - self.resample_ratio:.3g} is below "
                f"{self.config.min_efficiency}; the cell tree is poorly converged.",
                LowSamplingEfficiencyWarning,
                stacklevel=2,
            )
        return buffer

    def _record(self, trials: int, rejected: int) -> None:
        self.trials = trials
        self.resample_ratio = rejected / trials if trials else 0.0
