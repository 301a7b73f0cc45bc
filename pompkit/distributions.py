"""Probability distributions and small numerical helpers for model code."""

from __future__ import annotations

import math
import warnings

import numpy as np
from scipy import special, stats

_NEG_INF = -math.inf


def _warn(message):
    warnings.warn(message, RuntimeWarning, stacklevel=3)


def _default_rng(rng):
    return rng if rng is not None else np.random.default_rng()


def _is_whole(value):
    """True when ``value`` equals its nearest integer."""
    return bool(np.floor(value + 0.5) == value)


def _r_is_int(value):
    return abs(value - float(np.rint(value))) <= 1e-7 * max(1.0, abs(value))


def _exp(value):
    with np.errstate(over="ignore"):
        return float(np.exp(value))


def _log(value):
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.log(value))


def _log_dbinom(x, n, p):
    """Log binomial probability; -inf off the support, NaN for bad arguments."""
    return float(stats.binom.logpmf(x, n, p))


def _lbeta(a, b):
    """Log of the beta function, NaN for negative arguments."""
    if math.isnan(a) or math.isnan(b):
        return a + b
    p, q = min(a, b), max(a, b)
    if p < 0:
        return math.nan
    if p == 0:
        return math.inf
    if not math.isfinite(q):
        return _NEG_INF
    return float(special.betaln(p, q))


def _lfastchoose(n, k):
    return -_log(n + 1.0) - _lbeta(n - k + 1.0, k + 1.0)


def _lchoose(n, k):
    """Log of the absolute binomial coefficient; ``k`` is rounded to an integer."""
    if math.isnan(n) or math.isnan(k):
        return n + k
    k0 = k
    k = float(np.rint(k))
    if abs(k - k0) > 1e-7:
        _warn(f"'k' ({k0:.2f}) must be integer, rounded to {k:.0f}")
    if k < 2:
        if k < 0:
            return _NEG_INF
        if k == 0:
            return 0.0
        return _log(abs(n))
    if n < 0:
        return _lchoose(-n + k - 1.0, k)
    if _r_is_int(n):
        n = float(np.rint(n))
        if n < k:
            return _NEG_INF
        if n - k < 2:
            return _lchoose(n, n - k)
        return _lfastchoose(n, k)
    if n < k - 1:
        return math.lgamma(n + 1.0) - math.lgamma(k + 1.0) - math.lgamma(n - k + 1.0)
    return _lfastchoose(n, k)


def _vector(values):
    return np.asarray(values, dtype=float).ravel()


def logit(p):
    """Log-odds of a probability."""
    p = np.float64(p)
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.log(p / (1.0 - p)))


def expit(x):
    """Inverse of :func:`logit`."""
    with np.errstate(over="ignore"):
        return float(1.0 / (1.0 + np.exp(-np.float64(x))))


def rgammawn(sigma, dt, rng=None):
    """Draw a gamma white-noise increment with mean ``dt`` and intensity ``sigma``."""
    sigmasq = sigma * sigma
    if sigmasq > 0:
        return float(_default_rng(rng).gamma(dt / sigmasq, sigmasq))
    return dt


def reulermultinom(size, rate, dt, rng=None):
    """Draw transition counts out of a compartment of ``size`` individuals.

    Returns an array as long as ``rate``; entries are NaN (with a warning)
    when the arguments are invalid.
    """
    rates = _vector(rate)
    if (
        not math.isfinite(size)
        or size < 0.0
        or not _is_whole(size)
        or not math.isfinite(dt)
        or dt < 0.0
    ):
        _warn("in 'reulermultinom': NAs produced.")
        return np.full(rates.size, np.nan)
    if not np.all(np.isfinite(rates) & (rates >= 0.0)):
        _warn("in 'reulermultinom': NAs produced.")
        return np.full(rates.size, np.nan)

    trans = np.zeros(rates.size)
    total = float(rates.sum())
    if total <= 0.0:
        return trans

    rng = _default_rng(rng)
    remaining = int(rng.binomial(int(size), 1.0 - math.exp(-total * dt)))
    for k, r in enumerate(rates[:-1]):
        r = float(r)
        if r > total:
            total = r
        drawn = int(rng.binomial(remaining, r / total)) if remaining > 0 and total > 0 else 0
        trans[k] = drawn
        remaining -= drawn
        total -= r
    trans[-1] = remaining
    return trans


def deulermultinom(x, size, rate, dt, give_log=False):
    """Probability of transition counts ``x`` under :func:`reulermultinom`."""
    counts = _vector(x).tolist()
    rates = _vector(rate).tolist()
    if len(counts) != len(rates):
        raise ValueError("'x' and 'rate' must have the same length")
    if dt < 0.0 or size < 0.0 or not _is_whole(size):
        _warn("in 'deulermultinom': NaNs produced.")
        return math.nan

    zero = _NEG_INF if give_log else 0.0
    total = 0.0
    n = 0.0
    for r, c in zip(rates, counts):
        if r < 0.0:
            _warn("in 'deulermultinom': NaNs produced.")
            return math.nan
        if c < 0.0:
            return zero
        total += r
        n += c
    if n > size:
        return zero

    ff = _log_dbinom(n, size, 1.0 - _exp(-total * dt))
    for r, c in zip(rates[:-1], counts[:-1]):
        if n > 0 and total > 0:
            if r > total:
                total = r
            ff += _log_dbinom(c, n, r / total)
        n -= c
        total -= r
    return ff if give_log else _exp(ff)


def dmultinom(x, prob, give_log=False):
    """Multinomial probability of counts ``x``; ``prob`` need not sum to one."""
    counts = _vector(x).tolist()
    probs = _vector(prob).tolist()
    if len(counts) != len(probs):
        raise ValueError("'x' and 'prob' must have the same length")

    total = 0.0
    n = 0.0
    for pr, c in zip(probs, counts):
        if pr < 0.0:
            _warn("in 'dmultinom': NaNs produced.")
            return math.nan
        if c < 0.0 or not _is_whole(c):
            return _NEG_INF if give_log else 0.0
        total += pr
        n += c

    ff = 0.0
    for pr, c in zip(probs, counts):
        if n > 0 and total > 0:
            if pr > total:
                total = pr
            ff += _log_dbinom(c, n, pr / total)
        n -= c
        total -= pr
    return ff if give_log else _exp(ff)


def to_log_barycentric(x):
    """Map positive values to the logs of their proportions."""
    values = _vector(x)
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.log(values / values.sum())


def from_log_barycentric(x):
    """Map log-proportions back to proportions summing to one."""
    with np.errstate(over="ignore", invalid="ignore"):
        values = np.exp(_vector(x))
        return values / values.sum()


def dot_product(x, y):
    """Inner product of two equal-length vectors."""
    xs = _vector(x)
    ys = _vector(y)
    if xs.shape != ys.shape:
        raise ValueError("vectors must have the same length")
    return float(np.dot(xs, ys))


def exp2geom_rate_correction(rate, dt):
    """Convert an exponential rate into the equivalent geometric rate over ``dt``."""
    if dt > 0:
        with np.errstate(divide="ignore", invalid="ignore"):
            return float(np.log1p(rate * dt)) / dt
    return rate


def rbetabinom(size, prob, theta, rng=None):
    """Draw from a beta-binomial distribution with mean ``size*prob``."""
    rng = _default_rng(rng)
    p = rng.beta(prob * theta, (1.0 - prob) * theta)
    return float(rng.binomial(int(size), p))


def dbetabinom(x, size, prob, theta, give_log=False):
    """Beta-binomial probability of ``x``."""
    a = theta * prob
    b = theta * (1.0 - prob)
    f = _lchoose(size, x) - _lbeta(a, b) + _lbeta(a + x, b + size - x)
    return f if give_log else _exp(f)


def rbetanbinom(mu, size, theta, rng=None):
    """Draw from a beta-negative-binomial distribution with mean near ``mu``."""
    rng = _default_rng(rng)
    p = size / (size + mu)
    q = rng.beta(p * theta, (1.0 - p) * theta)
    return float(rng.negative_binomial(size, q))


def dbetanbinom(x, mu, size, theta, give_log=False):
    """Beta-negative-binomial probability of ``x``."""
    p = size / (size + mu)
    a = theta * p
    b = theta * (1.0 - p)
    f = _lchoose(size + x - 1.0, size - 1.0) - _lbeta(a, b) + _lbeta(a + size, b + x)
    return f if give_log else _exp(f)