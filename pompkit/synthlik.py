"""Robust synthetic log likelihood of a probe vector."""

from __future__ import annotations

import math

import numpy as np
from scipy.linalg import solve_triangular

from pompkit.arrays import PompError

_LN_SQRT_2PI = 0.5 * math.log(2.0 * math.pi)
_ALPHA = 2.0
_BETA = 1.25


def _r_factor(matrix):
    return np.linalg.qr(matrix, mode="r")


def synthetic_loglik(ysim, ydat):
    """Gaussian log likelihood of ``ydat`` given simulated probes ``ysim``.

    ``ysim`` holds one simulation per row and one probe per column. The mean
    and covariance are estimated with Campbell's robust weighting.
    """
    y = np.array(ysim, dtype=float)
    if y.ndim != 2:
        raise PompError("'ysim' must be a matrix")
    nrow, ncol = y.shape
    if nrow <= ncol:
        raise PompError(
            f"'nsim' (={nrow}) should be (much) larger than the number of probes (={ncol})"
        )
    target = np.array(ydat, dtype=float).ravel()
    if target.size != ncol:
        raise PompError("the number of probes in 'ydat' and 'ysim' differ")

    with np.errstate(divide="ignore", invalid="ignore"):
        # precondition: centre and scale each column
        y1 = y - y.mean(axis=0)
        y1 /= np.sqrt((y1 * y1).sum(axis=0) / (nrow - 1))

        # Mahalanobis distances of the rows and Campbell weights
        r = _r_factor(y1)
        z = solve_triangular(r, y1.T, trans="T", lower=False).T
        distance = np.sqrt((nrow - 1) * (z * z).sum(axis=1))
        d0 = math.sqrt(ncol) + _ALPHA / math.sqrt(2.0)
        excess = distance - d0
        weights = np.where(
            distance > d0, np.exp(-0.5 * excess * excess / _BETA) * d0 / distance, 1.0
        )
        wbar = math.sqrt(float((weights * weights).sum()) - 1.0)

        # weighted centring and scaling
        centre = (weights[:, np.newaxis] * y).sum(axis=0) / weights.sum()
        y2 = y - centre
        target -= centre
        sd = np.sqrt((y2 * y2).sum(axis=0) / (nrow - 1))
        y2 = y2 / wbar * weights[:, np.newaxis] / sd
        target /= sd
        half_log_det = ncol * _LN_SQRT_2PI + float(np.log(sd).sum())

        r = _r_factor(y2)
        resid = solve_triangular(r, target, trans="T", lower=False)
        rss = float(resid @ resid)
        half_log_det += float(np.log(np.abs(np.diag(r))).sum())

    return -0.5 * rss - half_log_det