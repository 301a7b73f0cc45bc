"""Evaluating and iterating a model's deterministic skeleton."""

from __future__ import annotations

import math
import warnings
from typing import Mapping

import numpy as np

from pompkit.arrays import LabeledArray, PompError, match_names
from pompkit.userdata import UserData

_DIMLABELS = ("name", ".id", "time")
_TOLERANCE = math.sqrt(float(np.finfo(float).eps))


def _rows_from_mapping(mapping, what):
    names = [str(name) for name in mapping]
    rows = [np.atleast_1d(np.array(value, dtype=float)).ravel() for value in mapping.values()]
    if not rows:
        raise PompError(f"'{what}' holds no variables")
    try:
        return np.vstack(rows), names
    except ValueError:
        raise PompError(f"all variables in '{what}' must have the same length") from None


def _as_states(x):
    if isinstance(x, LabeledArray):
        return x.as_state_array()
    if isinstance(x, Mapping):
        values, names = _rows_from_mapping(x, "x")
        return LabeledArray(values, names).as_state_array()
    return LabeledArray(x).as_state_array()


def _as_matrix(x, what):
    if isinstance(x, LabeledArray):
        return x.as_matrix()
    if isinstance(x, Mapping):
        if not x:
            return LabeledArray(np.empty((0, 1)), ()).as_matrix()
        values, names = _rows_from_mapping(x, what)
        return LabeledArray(values, names).as_matrix()
    return LabeledArray(x).as_matrix()


def _userdata_kwargs(userdata):
    if not isinstance(userdata, UserData):
        userdata = UserData(userdata)
    return {name: userdata.get(name) for name in userdata if name in userdata}


def _named(names, values):
    return {name: float(value) for name, value in zip(names, values) if name}


def _values(answer):
    if isinstance(answer, Mapping):
        return np.array([float(value) for value in answer.values()])
    return np.atleast_1d(np.array(answer, dtype=float)).ravel()


def _num_map_steps(t1, t2, deltat):
    """Number of map iterations needed to go from ``t1`` to ``t2``."""
    if t1 > t2:
        raise PompError(f"'t1' = {t1:g} > 't2' = {t2:g}")
    return int(math.floor((t2 - t1) / deltat / (1.0 - _TOLERANCE)))


class _Skeleton:
    """Calls the user skeleton and aligns its answers with the state names."""

    def __init__(self, model, snames, pnames):
        self._fn = model.skeleton
        self._snames = snames
        self._state_keys = snames or ()
        self._pnames = pnames or ()
        self._nvars = len(self._state_keys)
        self._base = _userdata_kwargs(model.userdata)
        self._positions = None

    def write(self, target, t, x, p, covars):
        """Evaluate at time ``t`` and store the result by name into ``target``."""
        kwargs = dict(self._base)
        kwargs["t"] = float(t)
        kwargs.update(_named(self._state_keys, x))
        kwargs.update(_named(self._pnames, p))
        kwargs.update(covars)
        answer = self._fn(**kwargs)
        values = _values(answer)
        if self._positions is None:
            if values.size != target.size:
                raise PompError(
                    f"'skeleton' returns a vector of {values.size} state variables "
                    f"but {target.size} are expected."
                )
            if not isinstance(answer, Mapping):
                raise PompError("'skeleton' must return a named numeric vector.")
            self._positions = match_names(self._snames, list(answer), "state variables")
        if values.size != self._positions.size:
            raise PompError("'skeleton' returns variable-length results.")
        target[self._positions] = values


def skeleton(model, x, t, params):
    """Evaluate the skeleton at states ``x`` and times ``t``, as states x replicates x times.

    ``x`` is laid out as states x replicates x times; replicates of ``x`` and
    ``params`` are recycled, and the larger count must be a multiple of the
    smaller. The user skeleton is called with keyword arguments ``t``, the
    states, the parameters, the covariates and the user data, and returns the
    value for each state by name. Without one, NaNs are returned with a warning.
    """
    tgrid = [float(value) for value in np.atleast_1d(np.array(t, dtype=float)).ravel()]
    ntimes = len(tgrid)

    xs = _as_states(x)
    nvars, nrepx, nxtimes = xs.values.shape
    if ntimes != nxtimes:
        raise PompError("length of 't' and 3rd dimension of 'x' do not agree.")

    p = _as_matrix(params, "params")
    nrepp = p.values.shape[1]
    nreps = max(nrepx, nrepp)
    if nrepx == 0 or nrepp == 0 or nreps % nrepp != 0 or nreps % nrepx != 0:
        raise PompError("2nd dimensions of 'x' and 'params' are incompatible")

    out = np.full((nvars, nreps, ntimes), np.nan)
    if model.skeleton is None:
        warnings.warn("'skeleton' unspecified: NAs generated.", RuntimeWarning, stacklevel=2)
        return LabeledArray(out, xs.rownames, dimlabels=_DIMLABELS)

    evaluator = _Skeleton(model, xs.rownames, p.rownames)
    for k, time in enumerate(tgrid):
        covars = model.covariates_at(time)
        for j in range(nreps):
            evaluator.write(
                out[:, j, k],
                time,
                xs.values[:, j % nrepx, k],
                p.values[:, j % nrepp],
                covars,
            )

    return LabeledArray(out, xs.rownames, dimlabels=_DIMLABELS)


def iterate_skeleton(model, t0, times, x0, params, deltat):
    """Iterate the skeleton as a map from ``t0`` with step ``deltat``.

    Returns the states at each of ``times``, as states x replicates x times.
    Accumulator variables are set to zero at the start of each interval.
    Parameter columns are recycled over the replicates of ``x0``. Without a
    skeleton, NaNs are returned with a warning.
    """
    tgrid = [float(value) for value in np.atleast_1d(np.array(times, dtype=float)).ravel()]
    ntimes = len(tgrid)
    deltat = float(deltat)
    if not deltat > 0:
        raise PompError("'delta.t' must be positive")

    start = _as_matrix(x0, "x0")
    x = start.values.copy()
    nvars, nreps = x.shape
    snames = start.rownames

    p = _as_matrix(params, "params")
    nrepp = p.values.shape[1]
    if nrepp == 0:
        raise PompError("'params' holds no parameter sets")

    out = np.full((nvars, nreps, ntimes), np.nan)
    if model.skeleton is None:
        warnings.warn("'skeleton' unspecified: NAs generated.", RuntimeWarning, stacklevel=2)
        return LabeledArray(out, snames, dimlabels=_DIMLABELS)

    if model.accumvars:
        zeros = match_names(snames, list(model.accumvars), "state variables")
    else:
        zeros = np.empty(0, dtype=np.intp)

    evaluator = _Skeleton(model, snames, p.rownames)
    t = float(t0)
    for k, time in enumerate(tgrid):
        nsteps = _num_map_steps(t, time, deltat)
        x[zeros, :] = 0.0
        for h in range(nsteps):
            covars = model.covariates_at(t)
            for j in range(nreps):
                column = x[:, j]
                evaluator.write(column, t, column.copy(), p.values[:, j % nrepp], covars)
            t = t + deltat if h != nsteps - 1 else time
        out[:, :, k] = x

    return LabeledArray(out, snames, dimlabels=_DIMLABELS)