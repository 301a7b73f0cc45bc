"""Variance-covariance matrices of a model's measurement process."""

from __future__ import annotations

import math
import warnings
from typing import Mapping

import numpy as np

from pompkit.arrays import LabeledArray, PompError
from pompkit.userdata import UserData

_DIMLABELS = ("var1", "var2", ".id", "time")


def _as_states(x):
    if isinstance(x, LabeledArray):
        return x.as_state_array()
    if isinstance(x, Mapping):
        names = [str(name) for name in x]
        rows = [np.atleast_1d(np.array(value, dtype=float)).ravel() for value in x.values()]
        if not rows:
            raise PompError("'x' holds no state variables")
        return LabeledArray(np.vstack(rows), names).as_state_array()
    return LabeledArray(x).as_state_array()


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


def _named(names, values):
    return {name: float(value) for name, value in zip(names, values) if name}


def _matrix(answer):
    """Return (row names or None, values flattened in column-major order)."""
    if isinstance(answer, LabeledArray):
        return answer.rownames, answer.values.ravel(order="F")
    if isinstance(answer, Mapping):
        names = [str(name) for name in answer]
        rows = [np.atleast_1d(np.array(value, dtype=float)).ravel() for value in answer.values()]
        try:
            values = np.vstack(rows) if rows else np.empty((0, 0))
        except ValueError:
            raise PompError("'vmeasure' must return a symmetric square matrix.") from None
        return names, values.ravel(order="F")
    return None, np.atleast_1d(np.array(answer, dtype=float)).ravel(order="F")


def vmeasure(model, x, times, params):
    """Measurement covariance matrices, as observables x observables x replicates x times.

    ``x`` is laid out as states x replicates x times; replicates of ``x`` and
    ``params`` are recycled. The user ``vmeasure`` is called with keyword
    arguments ``t``, the states, the parameters, the covariates and the user
    data, and returns a square matrix with row names: a LabeledArray or a
    mapping from each row name to that row. Without one, NaNs are returned
    with a warning.
    """
    tgrid = [float(value) for value in np.atleast_1d(np.array(times, dtype=float)).ravel()]
    ntimes = len(tgrid)
    if ntimes < 1:
        raise PompError("length('times') = 0, no work to do.")

    xs = _as_states(x)
    nvars, nrepsx, nxtimes = xs.values.shape
    if ntimes != nxtimes:
        raise PompError("length of 'times' and 3rd dimension of 'x' do not agree.")

    p = _as_params(params)
    nrepsp = p.values.shape[1]
    nreps = max(nrepsx, nrepsp)
    if nrepsx == 0 or nrepsp == 0 or nreps % nrepsp != 0 or nreps % nrepsx != 0:
        raise PompError("larger number of replicates is not a multiple of smaller.")

    if model.vmeasure is None:
        obsnames = list(model.obsnames)
        nobs = len(obsnames)
        warnings.warn("'vmeasure' unspecified: NAs generated.", RuntimeWarning, stacklevel=2)
        out = np.full((nobs, nobs, nreps, ntimes), np.nan)
        return LabeledArray(out, obsnames, obsnames, _DIMLABELS)

    snames = xs.rownames or ()
    pnames = p.rownames or ()
    base = _userdata_kwargs(model.userdata)
    names = None
    nobs = 0
    out = None

    for k, t in enumerate(tgrid):
        covars = model.covariates_at(t)
        for j in range(nreps):
            kwargs = dict(base)
            kwargs["t"] = t
            kwargs.update(_named(snames, xs.values[:, j % nrepsx, k]))
            kwargs.update(_named(pnames, p.values[:, j % nrepsp]))
            kwargs.update(covars)
            rownames, values = _matrix(model.vmeasure(**kwargs))
            if names is None:
                nobs = math.isqrt(values.size)
                if values.size != nobs * nobs:
                    raise PompError("'vmeasure' must return a symmetric square matrix.")
                if rownames is None or len(rownames) != nobs:
                    raise PompError("'vmeasure' must return a matrix with row-names.")
                names = [str(name) for name in rownames]
                out = np.full((nobs, nobs, nreps, ntimes), np.nan)
            if values.size != nobs * nobs:
                raise PompError("'vmeasure' returns variable-length results.")
            out[:, :, j, k] = values.reshape(nobs, nobs, order="F")

    return LabeledArray(out, names, names, _DIMLABELS)