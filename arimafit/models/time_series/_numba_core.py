"""
Numba-accelerated kernels for ARIMA estimation and forecasting.

Every kernel operates on the differenced, regression-adjusted series and on the
expanded ARMA coefficients, where the seasonal factors have already been
multiplied into single AR and MA lag polynomials:

    w_t = sum_i a_i w_{t-i} + e_t + sum_j b_j e_{t-j}

The kernels use explicit loops so that they compile in nopython mode without
relying on BLAS.
"""

import logging
from typing import Tuple

import numpy as np
from numba import jit

logger = logging.getLogger("arimafit.models.time_series._numba_core")


@jit(nopython=True, cache=True)
def css_residuals(w: np.ndarray,
                  ar: np.ndarray,
                  ma: np.ndarray,
                  n_cond: int) -> Tuple[np.ndarray, float, int]:
    """
    Conditional sum of squares residuals.

    Residuals before ``n_cond`` are fixed at zero and pre-sample values are
    treated as zero.

    Args:
        w: Differenced, regression-adjusted series
        ar: Expanded AR coefficients a_1..a_p
        ma: Expanded MA coefficients b_1..b_q
        n_cond: Number of leading observations used only for conditioning

    Returns:
        Tuple[np.ndarray, float, int]: Residuals, their sum of squares and the
        number of residuals that entered the sum
    """
    n = len(w)
    p = len(ar)
    q = len(ma)
    resid = np.zeros(n)
    ssq = 0.0
    nu = 0

    for t in range(n_cond, n):
        tmp = w[t]
        for i in range(p):
            if t - i - 1 >= 0:
                tmp -= ar[i] * w[t - i - 1]
        for j in range(q):
            if t - j - 1 < 0:
                break
            tmp -= ma[j] * resid[t - j - 1]
        resid[t] = tmp
        ssq += tmp * tmp
        nu += 1

    return resid, ssq, nu


@jit(nopython=True, cache=True)
def kalman_filter(w: np.ndarray,
                  phi: np.ndarray,
                  theta: np.ndarray,
                  p0: np.ndarray) -> Tuple[np.ndarray, float, float]:
    """
    Kalman filter for an ARMA process in Harvey's state space form.

    The state has dimension r = max(p, q + 1). The transition matrix carries
    ``phi`` (zero padded to length r) in its first column and an identity shifted
    above the diagonal; the disturbance loading is ``theta`` = (1, b_1, ..., b_{r-1}).
    The innovation variance is concentrated out, so the filter runs with unit
    variance.

    Args:
        w: Differenced, regression-adjusted series
        phi: Expanded AR coefficients padded to length r
        theta: Disturbance loading of length r, starting with 1
        p0: Stationary initial state covariance (r x r)

    Returns:
        Tuple[np.ndarray, float, float]: Standardized innovations v_t / sqrt(F_t),
        the sum of v_t^2 / F_t and the sum of log F_t
    """
    n = len(w)
    r = len(phi)
    a = np.zeros(r)
    a_upd = np.zeros(r)
    P = p0.copy()
    P_upd = np.zeros((r, r))
    M = np.zeros((r, r))
    resid = np.zeros(n)
    ssq = 0.0
    sumlog = 0.0

    for t in range(n):
        v = w[t] - a[0]
        F = P[0, 0]
        if F <= 0.0:
            resid[:] = np.nan
            return resid, np.nan, np.nan

        # Update
        for i in range(r):
            a_upd[i] = a[i] + P[i, 0] * v / F
        for i in range(r):
            for j in range(r):
                P_upd[i, j] = P[i, j] - P[i, 0] * P[0, j] / F

        ssq += v * v / F
        sumlog += np.log(F)
        resid[t] = v / np.sqrt(F)

        # Predict: a = T a_upd
        for i in range(r):
            a[i] = phi[i] * a_upd[0]
            if i + 1 < r:
                a[i] += a_upd[i + 1]

        # Predict: P = T P_upd T' + theta theta'
        for i in range(r):
            for j in range(r):
                M[i, j] = phi[i] * P_upd[0, j]
                if i + 1 < r:
                    M[i, j] += P_upd[i + 1, j]
        for i in range(r):
            for j in range(r):
                value = M[i, 0] * phi[j] + theta[i] * theta[j]
                if j + 1 < r:
                    value += M[i, j + 1]
                P[i, j] = value

    return resid, ssq, sumlog


@jit(nopython=True, cache=True)
def arma_forecast(w: np.ndarray,
                  resid: np.ndarray,
                  ar: np.ndarray,
                  ma: np.ndarray,
                  steps: int) -> np.ndarray:
    """
    Extend an ARMA recursion ``steps`` periods beyond the sample.

    Future innovations are set to zero and the in-sample residuals drive the MA
    terms near the end of the sample.

    Args:
        w: Differenced, regression-adjusted series
        resid: In-sample residuals aligned with ``w``
        ar: Expanded AR coefficients
        ma: Expanded MA coefficients
        steps: Forecast horizon

    Returns:
        np.ndarray: Forecasts of the next ``steps`` values of ``w``
    """
    m = len(w)
    total = m + steps
    p = len(ar)
    q = len(ma)
    ext = np.zeros(total)
    eps = np.zeros(total)
    for t in range(m):
        ext[t] = w[t]
        eps[t] = resid[t]

    for t in range(m, total):
        value = 0.0
        for i in range(p):
            if t - i - 1 >= 0:
                value += ar[i] * ext[t - i - 1]
        for j in range(q):
            if t - j - 1 >= 0:
                value += ma[j] * eps[t - j - 1]
        ext[t] = value

    return ext[m:]
