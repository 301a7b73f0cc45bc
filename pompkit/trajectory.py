"""Deterministic trajectories: iterated maps and vector fields."""

from __future__ import annotations

from typing import Mapping

import numpy as np

from pompkit.arrays import LabeledArray, PompError
from pompkit.skeleton import iterate_skeleton, skeleton

_DIMLABELS = ("name", ".id", "time")


def _as_params(params):
    if isinstance(params, LabeledArray):
        return params.as_matrix()
    if isinstance(params, Mapping):
        names = [str(name) for name in params]
        rows = [np.atleast_1d(np.array(value, dtype=float)).ravel() for value in params.values()]
        if not rows:
            return LabeledArray(np.empty((0, 1)), ()).as_matrix()
        try:
            return LabeledArray(np.vstack(rows), names).as_matrix()
        except ValueError:
            raise PompError("all parameters must have the same length") from None
    return LabeledArray(params).as_matrix()


def iterate_map(model, times, t0, x0, params):
    """Iterate the model's skeleton as a map with its ``skeleton_delta_t`` step.

    Returns states x replicates x times; replicate names come from the
    parameter columns when they match in number.
    """
    p = _as_params(params)
    result = iterate_skeleton(model, t0, times, x0, p, model.skeleton_delta_t)
    colnames = p.colnames
    if colnames is not None and len(colnames) != result.values.shape[1]:
        colnames = None
    return LabeledArray(result.values, result.rownames, colnames, _DIMLABELS)


def vector_field(model, params):
    """Return the skeleton as a vector field ``field(t, y, statenames)``.

    ``y`` holds the states of every replicate, one replicate after another;
    there is one replicate per parameter column. The field returns the time
    derivatives in the same layout, ready for an ODE solver.
    """
    if model.skeleton is None:
        raise PompError("'skeleton' unspecified")
    p = _as_params(params)
    nreps = p.values.shape[1]

    def field(t, y, statenames):
        names = [statenames] if isinstance(statenames, str) else [str(n) for n in statenames]
        y = np.asarray(y, dtype=float).ravel()
        nvars = len(names)
        if y.size != nvars * nreps:
            raise PompError(
                f"'y' has {y.size} values but {nvars * nreps} are expected."
            )
        states = LabeledArray(y.reshape(nvars, nreps, 1, order="F"), names)
        rates = skeleton(model, states, [float(t)], p)
        return rates.values[:, :, 0].ravel(order="F")

    return field