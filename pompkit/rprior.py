"""Drawing parameters from a model's prior."""

from __future__ import annotations

import warnings
from typing import Mapping

import numpy as np

from pompkit.arrays import LabeledArray, PompError, match_names
from pompkit.userdata import UserData

_DIMLABELS = ("name", ".id")


def _as_params(params):
    if isinstance(params, LabeledArray):
        return params.as_matrix()
    if isinstance(params, Mapping):
        names = [str(name) for name in params]
        rows = [np.atleast_1d(np.array(value, dtype=float)).ravel() for value in params.values()]
        return LabeledArray(np.vstack(rows) if rows else np.empty((0, 1)), names).as_matrix()
    return LabeledArray(params).as_matrix()


def _userdata_kwargs(userdata):
    if not isinstance(userdata, UserData):
        userdata = UserData(userdata)
    return {name: userdata.get(name) for name in userdata if name in userdata}


def _values(answer):
    if isinstance(answer, Mapping):
        return np.array([float(value) for value in answer.values()])
    return np.atleast_1d(np.array(answer, dtype=float)).ravel()


def rprior(model, params):
    """Return a copy of ``params`` with each column overwritten by a prior draw.

    The user ``rprior`` is called once per column with the parameters as
    keyword arguments and returns the new values by name; names it leaves
    out keep their values. Without one, the parameters are copied with a warning.
    """
    p = _as_params(params)
    values = p.values.copy()
    pnames = p.rownames or ()

    if model.rprior is None:
        warnings.warn(
            "'rprior' unspecified: duplicating parameters.", RuntimeWarning, stacklevel=2
        )
    else:
        base = _userdata_kwargs(model.userdata)
        positions = None
        for j in range(values.shape[1]):
            kwargs = dict(base)
            kwargs.update(
                {name: float(value) for name, value in zip(pnames, values[:, j]) if name}
            )
            answer = model.rprior(**kwargs)
            if positions is None:
                if not isinstance(answer, Mapping):
                    raise PompError("'rprior' must return a named numeric vector.")
                positions = match_names(p.rownames, list(answer), "parameters")
            drawn = _values(answer)
            if drawn.size != positions.size:
                raise PompError("'rprior' returns variable-length results.")
            values[positions, j] = drawn

    return LabeledArray(values, p.rownames, p.colnames, _DIMLABELS)