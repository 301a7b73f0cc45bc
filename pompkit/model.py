"""Model specification: component functions, covariates and settings."""

from __future__ import annotations

import math
import warnings
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Callable, ClassVar, Mapping, Optional, Sequence

import numpy as np

from pompkit.arrays import LabeledArray
from pompkit.userdata import UserData


class ProcessType(IntEnum):
    """Kinds of latent-process simulator."""

    DEFAULT = 0
    ONESTEP = 1
    DISCRETE = 2
    EULER = 3
    GILLESPIE = 4


@dataclass(eq=False)
class GillespieProcess:
    """An event-driven process simulated with Gillespie's algorithm.

    ``rate_fn`` gives the rate of event ``j`` (1-based); column ``j`` of the
    stoichiometry matrix ``v`` gives the change each event makes to the states.
    """

    kind: ClassVar[ProcessType] = ProcessType.GILLESPIE

    rate_fn: Callable[..., float]
    v: Any
    hmax: float = math.inf

    def __post_init__(self):
        if not isinstance(self.v, LabeledArray):
            self.v = LabeledArray(self.v)
        if self.v.values.ndim != 2:
            raise ValueError("'v' must be a matrix")
        self.hmax = float(self.hmax)
        if not self.hmax > 0:
            raise ValueError("'hmax' must be positive")


def _float_vector(values):
    return np.atleast_1d(np.array(values, dtype=float)).ravel()


@dataclass(eq=False)
class Model:
    """A partially observed Markov process model.

    Component functions are called with keyword arguments naming time,
    states, parameters, covariates and user data; a missing component
    falls back to the default behaviour of the operation using it.
    """

    times: Any = field(default_factory=lambda: np.empty(0))
    t0: float = 0.0
    rinit: Optional[Callable[..., Mapping[str, float]]] = None
    rprior: Optional[Callable[..., Mapping[str, float]]] = None
    rprocess: Optional[GillespieProcess] = None
    rmeasure: Optional[Callable[..., Mapping[str, float]]] = None
    vmeasure: Optional[Callable[..., Any]] = None
    skeleton: Optional[Callable[..., Mapping[str, float]]] = None
    skeleton_delta_t: float = 1.0
    obsnames: Sequence[str] = ()
    accumvars: Sequence[str] = ()
    covar: Mapping[str, Sequence[float]] = field(default_factory=dict)
    covar_times: Any = field(default_factory=lambda: np.empty(0))
    covar_order: str = "linear"
    userdata: Any = field(default_factory=UserData)
    params: Mapping[str, float] = field(default_factory=dict)
    states: Optional[LabeledArray] = None
    data: Optional[LabeledArray] = None

    def __post_init__(self):
        self.times = _float_vector(self.times) if np.size(self.times) else np.empty(0)
        self.t0 = float(self.t0)
        self.obsnames = tuple(self.obsnames)
        self.accumvars = tuple(self.accumvars)
        self.params = dict(self.params)
        if not isinstance(self.userdata, UserData):
            self.userdata = UserData(self.userdata)

        if self.covar_order not in ("linear", "constant"):
            raise ValueError("'covar_order' must be 'linear' or 'constant'")
        covar_times = (
            _float_vector(self.covar_times) if np.size(self.covar_times) else np.empty(0)
        )
        if np.any(np.diff(covar_times) < 0):
            raise ValueError("covariate times must be non-decreasing")
        covar = {str(name): _float_vector(values) for name, values in self.covar.items()}
        if covar and covar_times.size == 0:
            raise ValueError("covariates need at least one time")
        for name, values in covar.items():
            if values.size != covar_times.size:
                raise ValueError(
                    f"covariate '{name}' has {values.size} values for {covar_times.size} times"
                )
        self.covar_times = covar_times
        self.covar = covar

    def covariates_at(self, t):
        """Return the covariates interpolated at time ``t``, by name.

        Outside the covariate times the end values are used, with a warning.
        """
        if not self.covar:
            return {}
        times = self.covar_times
        t = float(t)
        if t < times[0] or t > times[-1]:
            warnings.warn(
                f"in 'table_lookup': extrapolating at {t}.", RuntimeWarning, stacklevel=2
            )
        if self.covar_order == "linear":
            return {name: float(np.interp(t, times, values)) for name, values in self.covar.items()}
        index = int(np.searchsorted(times, t, side="right")) - 1
        index = min(max(index, 0), times.size - 1)
        return {name: float(values[index]) for name, values in self.covar.items()}