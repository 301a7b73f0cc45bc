# pompkit

Building blocks for partially observed Markov process (POMP) models:
probability distributions used inside model code, a model description with
interpolated covariates, drawing initial states, prior parameters and
observations, measurement covariance matrices, evaluating and iterating
the deterministic skeleton, and a robust synthetic log likelihood.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Modules

- `pompkit.distributions`: `reulermultinom`/`deulermultinom`
  (Euler-multinomial draws and densities), `dmultinom`,
  `rbetabinom`/`dbetabinom`, `rbetanbinom`/`dbetanbinom`, `rgammawn`
  (gamma white noise), `logit`, `expit`, `to_log_barycentric`,
  `from_log_barycentric`, `dot_product` and `exp2geom_rate_correction`.
  Random draws take an optional `numpy.random.Generator`; invalid
  arguments give NaN with a `RuntimeWarning`.
- `pompkit.userdata`: `UserData`, a read-only named store with `get`,
  `get_int` and `get_double`. Its elements are passed to model functions
  as keyword arguments.
- `pompkit.arrays`: `LabeledArray`, a numeric array with row names, column
  names and axis labels (`as_matrix`, `as_state_array`); `match_names`; and
  `PompError`, raised for inconsistent inputs or results.
- `pompkit.model`: `Model`, holding the observation times, `t0`, the
  component functions (`rinit`, `rprior`, `rmeasure`, `vmeasure`,
  `skeleton`), `skeleton_delta_t`, `obsnames`, `accumvars`, covariates with
  linear or constant interpolation (`covariates_at`) and user data;
  `GillespieProcess` and `ProcessType` describe an event-driven latent
  process.
- `pompkit.rinit.rinit`: initial states for each parameter set; without a
  user function, states come from parameters named `..._0` or `....0`.
- `pompkit.rprior.rprior`: parameters redrawn column by column from the
  user's prior.
- `pompkit.rmeasure.rmeasure`: observations drawn given states, as
  observables x replicates x times.
- `pompkit.vmeasure.vmeasure`: measurement covariance matrices, as
  observables x observables x replicates x times.
- `pompkit.skeleton`: `skeleton` evaluates the deterministic skeleton;
  `iterate_skeleton` iterates it as a map, resetting accumulator variables
  at the start of each interval.
- `pompkit.trajectory`: `iterate_map` iterates the skeleton with the
  model's `skeleton_delta_t`; `vector_field` returns a function
  `field(t, y, statenames)` suitable for an ODE solver.
- `pompkit.synthlik.synthetic_loglik`: Gaussian log likelihood of observed
  probes given simulated ones, with robust covariance estimation.

Model functions are plain Python callables. They receive time (`t`, or
`t0` for `rinit`), states, parameters, covariates and user data as keyword
arguments, and return their results as a mapping from names to values.

## Example

```python
import numpy as np
from pompkit.arrays import LabeledArray
from pompkit.distributions import reulermultinom, deulermultinom
from pompkit.model import Model
from pompkit.rinit import rinit
from pompkit.rmeasure import rmeasure
from pompkit.trajectory import iterate_map

rng = np.random.default_rng(1)

# Split 100 individuals among two exit routes over a time step of 0.1.
trans = reulermultinom(100, [0.5, 1.5], 0.1, rng)
print(trans, deulermultinom(trans, 100, [0.5, 1.5], 0.1, give_log=True))

model = Model(
    times=[1, 2, 3],
    t0=0,
    rmeasure=lambda X, sigma, **_: {"Y": X + sigma * rng.normal()},
    skeleton=lambda X, r, **_: {"X": r * X},
)

# Default initial state: the parameter X_0 gives the state X.
print(rinit(model, {"X_0": 5.0, "sigma": 1.0}).values)

# Observations at the three times from given states.
states = LabeledArray(np.array([[1.0, 2.0, 3.0]]), ["X"])
print(rmeasure(model, states, model.times, {"sigma": 0.5}).values)

# Iterate X -> r X from t0 = 0: gives 2, 4, 8.
print(iterate_map(model, model.times, 0.0, {"X": [1.0]}, {"r": 2.0}).values)
```

## What this package does not do

There is no simulator for the latent process: `GillespieProcess` and
`ProcessType` describe a process, but no function here runs it or produces
whole simulated data sets from a `Model`. There is no particle filter,
no resampling routine and no vectorised parameter transformation. The
package has no command-line program; it is used as a library.