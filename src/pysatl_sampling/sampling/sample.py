"""
Sample Containers
=================

This module defines the sample protocol and the append-only buffer filled by
the samplers.
"""

from __future__ import annotations

__author__ = "Leonid Elkin, Mikhail Mikhailov"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

from typing import TYPE_CHECKING, Protocol, runtime_checkable

import numpy as np

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Sequence
    from typing import Any

    import numpy.typing as npt

    from pysatl_sampling.types import VariableName


@runtime_checkable
class Sample(Protocol):
    """
    Protocol for sample containers.

    Attributes
    ----------
    array : numpy.ndarray
        Array representation of the samples.
    shape : tuple[int, ...]
        Shape of the sample array.
    """

    def __len__(self) -> int: ...
    @property
    def array(self) -> npt.NDArray[np.floating[Any]]: ...
    @property
    def shape(self) -> tuple[int, ...]: ...


class SampleBuffer:
    """
    Ordered, append-only buffer of generated points.

    Points are stored as rows of a 2D floating-point array of shape
    ``(n_points, n_variables)``; column ``j`` holds ``variables[j]``.

    Parameters
    ----------
    variables : Sequence[str]
        Names of the generated variables, one per column.
    data : array_like, optional
        Initial points of shape ``(n, len(variables))``.

    Raises
    ------
    ValueError
        If no variable is given, names repeat, or a block has the wrong shape.
    """

    def __init__(self, variables: Sequence[VariableName], data: Any = None) -> None:
        self.variables: tuple[VariableName, ...] = tuple(variables)
        if not self.variables:
            raise ValueError("SampleBuffer needs at least one variable.")
        if len(set(self.variables)) != len(self.variables):
            raise ValueError(f"Duplicate variables in {self.variables}.")

        self._blocks: list[npt.NDArray[np.float64]] = []
        self._size = 0
        self._data: npt.NDArray[np.float64] | None = None
        if data is not None:
            self.append(data)

    @property
    def dimension(self) -> int:
        """Number of generated variables (columns)."""
        return len(self.variables)

    def append(self, block: Any) -> None:
        """
        Append points.

        Parameters
        ----------
        block : array_like
            2D block of shape ``(m, dimension)``, or 1D of length ``m`` when
            the buffer has a single variable.
        """
        arr = np.array(block, dtype=np.float64, copy=True)
        if arr.ndim == 1 and self.dimension == 1:
            arr = arr.reshape(-1, 1)
        if arr.ndim != 2 or arr.shape[1] != self.dimension:
            raise ValueError(
                f"SampleBuffer expects blocks of shape (m, {self.dimension}), got {arr.shape}."
            )
        if arr.shape[0] == 0:
            return
        self._blocks.append(arr)
        self._size += int(arr.shape[0])
        self._data = None

    def extend(self, blocks: Iterable[Any]) -> None:
        """Append several blocks in order."""
        for block in blocks:
            self.append(block)

    def __len__(self) -> int:
        """Return the number of points."""
        return self._size

    @property
    def array(self) -> npt.NDArray[np.float64]:
        """Return all points as one ``(n, d)`` array."""
        if self._data is None:
            if self._blocks:
                self._data = np.concatenate(self._blocks, axis=0)
                self._blocks = [self._data]
            else:
                self._data = np.empty((0, self.dimension), dtype=np.float64)
        return self._data

    @property
    def shape(self) -> tuple[int, ...]:
        """Return the shape of the sample array (n, d)."""
        return self._size, self.dimension

    def column(self, variable: VariableName) -> npt.NDArray[np.float64]:
        """Values of one generated variable."""
        try:
            j = self.variables.index(variable)
        except ValueError:
            raise KeyError(f"Variable '{variable}' was not generated.") from None
        return self.array[:, j]

    def as_dict(self) -> dict[VariableName, npt.NDArray[np.float64]]:
        """Columns keyed by variable name (the layout of ``evaluate_batch``)."""
        return {name: self.array[:, j] for j, name in enumerate(self.variables)}

    def __iter__(self) -> Iterator[npt.NDArray[np.float64]]:
        """Iterate over points (rows of the array)."""
        yield from self.array

    def __repr__(self) -> str:
        return f"SampleBuffer(variables={self.variables}, size={self._size})"
