"""Labelled numeric arrays and name matching."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence

import numpy as np


class PompError(ValueError):
    """Raised when model inputs or results are inconsistent."""


def _names(names):
    if names is None:
        return None
    if isinstance(names, str):
        return (names,)
    return tuple(str(name) for name in names)


@dataclass(eq=False)
class LabeledArray:
    """A numeric array with optional row names, column names and axis labels.

    Axis 0 holds variables, axis 1 replicates and a third axis, if any, times.
    Row names shorter than the number of rows are padded with empty names.
    """

    values: Any
    rownames: Optional[Sequence[str]] = None
    colnames: Optional[Sequence[str]] = None
    dimlabels: Optional[Sequence[str]] = None

    def __post_init__(self):
        values = np.array(self.values, dtype=float)
        if values.ndim == 0:
            values = values.reshape(1)
        self.values = values

        rownames = _names(self.rownames)
        if rownames is not None:
            nrow = values.shape[0]
            if len(rownames) > nrow:
                raise ValueError(
                    f"{len(rownames)} row names given for an array with {nrow} rows"
                )
            rownames = rownames + ("",) * (nrow - len(rownames))
        self.rownames = rownames

        colnames = _names(self.colnames)
        if colnames is not None and (values.ndim < 2 or len(colnames) != values.shape[1]):
            raise ValueError("column names do not match the second dimension")
        self.colnames = colnames

        dimlabels = _names(self.dimlabels)
        if dimlabels is not None and len(dimlabels) != values.ndim:
            raise ValueError("one label is needed for each dimension")
        self.dimlabels = dimlabels

    def as_matrix(self):
        """Return a two-dimensional copy, folding any trailing axes into columns."""
        values = self.values
        if values.ndim == 1:
            return LabeledArray(values.reshape(-1, 1), self.rownames)
        if values.ndim == 2:
            return LabeledArray(values, self.rownames, self.colnames, self.dimlabels)
        folded = values.reshape(values.shape[0], -1, order="F")
        return LabeledArray(folded, self.rownames)

    def as_state_array(self):
        """Return a three-dimensional copy laid out as variables x replicates x times."""
        values = self.values
        if values.ndim == 1:
            return LabeledArray(values.reshape(-1, 1, 1), self.rownames)
        if values.ndim == 2:
            return LabeledArray(values[:, np.newaxis, :], self.rownames)
        if values.ndim == 3:
            return LabeledArray(values, self.rownames, self.colnames, self.dimlabels)
        folded = values.reshape(values.shape[0], values.shape[1], -1, order="F")
        return LabeledArray(folded, self.rownames)


def match_names(provided, needed, where):
    """Return the position in ``provided`` of each name in ``needed``.

    Raises PompError when ``provided`` is missing or a name is not found.
    """
    if provided is None:
        raise PompError(f"invalid variable names among the {where}.")
    positions = {}
    for index, name in enumerate(provided):
        positions.setdefault(str(name), index)
    if isinstance(needed, str):
        needed = [needed]
    found = []
    for name in needed:
        try:
            found.append(positions[str(name)])
        except KeyError:
            raise PompError(f"variable '{name}' not found among the {where}.") from None
    return np.array(found, dtype=np.intp)