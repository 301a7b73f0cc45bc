"""Drawing initial states of a model."""

from __future__ import annotations

import re
import warnings
from typing import Mapping

import numpy as np

from pompkit.arrays import LabeledArray, PompError
from pompkit.userdata import UserData

_IVP = re.compile(r"[_.]0\Z")
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


def _column_names(colnames, nrep, nsim):
    if nrep <= 1:
        return None
    base = list(colnames) if colnames is not None else [str(k + 1) for k in range(nrep)]
    if nsim > 1:
        return [f"{base[j % nrep]}_{j // nrep + 1}" for j in range(nrep * nsim)]
    return base


def _default_rinit(pvals, pnames, ns):
    ivps = [(k, name) for k, name in enumerate(pnames) if _IVP.search(name)]
    if not ivps:
        warnings.warn(
            "in default 'rinit': there are no parameters with suffix '.0' or '_0'.",
            RuntimeWarning,
            stacklevel=3,
        )
    rows = np.array([k for k, _ in ivps], dtype=np.intp)
    columns = np.arange(ns) % pvals.shape[1]
    statenames = [name[:-2] for _, name in ivps]
    return statenames, pvals[rows][:, columns]


def _user_rinit(model, pvals, pnames, t0, ns, covars):
    base = _userdata_kwargs(model.userdata)
    nrep = pvals.shape[1]
    pset = set(pnames)
    names = None
    columns = []
    for j in range(ns):
        kwargs = dict(base)
        kwargs["t0"] = t0
        kwargs.update(
            {name: float(value) for name, value in zip(pnames, pvals[:, j % nrep]) if name}
        )
        kwargs.update(covars)
        answer = model.rinit(**kwargs)
        if names is None:
            if not isinstance(answer, Mapping):
                raise PompError("user 'rinit' must return a named numeric vector.")
            names = [str(name) for name in answer]
            for name in names:
                if name in pset:
                    raise PompError(
                        f"a state variable and a parameter share the name: '{name}'."
                    )
        values = _values(answer)
        if values.size != len(names):
            raise PompError("user 'rinit' returns vectors of variable length.")
        columns.append(values)
    return names, np.array(columns).reshape(ns, len(names)).T


def rinit(model, params, t0=None, nsim=1):
    """Draw ``nsim`` initial states for each parameter set, as states x replicates.

    Without a user ``rinit`` the states are taken from parameters whose names
    end in ``_0`` or ``.0``, with that suffix removed.
    """
    p = _as_params(params)
    pvals = p.values
    nrep = pvals.shape[1]
    nsim = int(nsim)
    if nsim < 1:
        raise PompError("'nsim' must be a positive integer")
    ns = nsim * nrep
    t0 = model.t0 if t0 is None else float(t0)
    pnames = p.rownames or ()
    covars = model.covariates_at(t0)

    if model.rinit is None:
        statenames, x = _default_rinit(pvals, pnames, ns)
    else:
        statenames, x = _user_rinit(model, pvals, pnames, t0, ns, covars)

    return LabeledArray(x, statenames, _column_names(p.colnames, nrep, nsim), _DIMLABELS)