"""
Objective functions for ARIMA estimation.

:func:`evaluate` computes the residuals, innovation variance and log-likelihood
of a coefficient vector on an already differenced series, together with the
scalar value minimized by the optimizer:

* CSS: the conditional sum of squared residuals.
* ML: the negative exact Gaussian log-likelihood with the innovation variance
  concentrated out, computed by a Kalman filter started from the stationary
  state covariance.

Coefficient vectors whose AR factors are not stationary or whose MA factors are
not invertible are rejected with :data:`INFEASIBLE` rather than an exception,
which keeps the optimizer inside the admissible region.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Union

import numpy as np
from scipy import linalg

from arimafit.core.exceptions import InsufficientDataError
from arimafit.core.types import Matrix, ParameterVector, Vector
from arimafit.models.time_series._numba_core import css_residuals, kalman_filter
from arimafit.models.time_series.coefficients import ArimaCoefficients, expand_ar, expand_ma
from arimafit.models.time_series.order import ArimaOrder, FittingStrategy
from arimafit.optim.core import INFEASIBLE

logger = logging.getLogger("arimafit.models.time_series.objective")

_LOG_2PI = float(np.log(2.0 * np.pi))


@dataclass(frozen=True)
class Evaluation:
    """Result of evaluating one coefficient vector.

    Attributes:
        value: Objective value to be minimized, INFEASIBLE when inadmissible
        residuals: Residuals aligned with the differenced series. CSS residuals
            of the conditioning set are zero; ML residuals are standardized
            innovations
        sigma2: Estimated innovation variance
        log_likelihood: Gaussian log-likelihood
        n_used: Number of residuals that entered the variance estimate
        admissible: Whether the coefficients are stationary and invertible
    """
    value: float
    residuals: np.ndarray
    sigma2: float
    log_likelihood: float
    n_used: int
    admissible: bool


def _roots_outside_unit_circle(coefficients: np.ndarray, sign: float) -> bool:
    """Check that all roots of 1 + sign * sum_k c_k z^k lie outside the unit circle."""
    coefficients = np.asarray(coefficients, dtype=np.float64)
    if coefficients.size == 0 or not np.any(coefficients):
        return True
    poly = np.r_[1.0, sign * coefficients]
    roots = np.roots(poly[::-1])
    return bool(np.all(np.abs(roots) > 1.0))


def is_admissible(coefficients: ArimaCoefficients) -> bool:
    """Check stationarity of the AR factors and invertibility of the MA factors.

    Seasonal and non-seasonal factors are checked separately; the product of
    two polynomials has all roots outside the unit circle exactly when both
    factors do.
    """
    return (_roots_outside_unit_circle(coefficients.ar, -1.0)
            and _roots_outside_unit_circle(coefficients.seasonal_ar, -1.0)
            and _roots_outside_unit_circle(coefficients.ma, 1.0)
            and _roots_outside_unit_circle(coefficients.seasonal_ma, 1.0))


def stationary_covariance(phi: np.ndarray, theta: np.ndarray) -> Matrix:
    """Unconditional state covariance P solving P = T P T' + theta theta'."""
    r = phi.shape[0]
    transition = np.zeros((r, r))
    transition[:, 0] = phi
    transition[:-1, 1:] = np.eye(r - 1)
    return linalg.solve_discrete_lyapunov(transition, np.outer(theta, theta))


def _inadmissible(m: int) -> Evaluation:
    return Evaluation(INFEASIBLE, np.zeros(m), np.nan, -np.inf, 0, False)


def evaluate(coefficients: Union[ParameterVector, ArimaCoefficients],
             differenced: Vector,
             order: ArimaOrder,
             strategy: FittingStrategy,
             seasonal_frequency: int = 1,
             regressors: Optional[Matrix] = None) -> Evaluation:
    """
    Evaluate the estimation objective at one coefficient vector.

    Args:
        coefficients: Flat coefficient vector in AR, MA, SAR, SMA, drift, mean
            order, or an ArimaCoefficients instance
        differenced: The differenced series
        order: Model order describing the coefficient layout
        strategy: CSS uses the conditional sum of squares; ML and CSS_ML use
            the exact likelihood
        seasonal_frequency: Seasonal period s
        regressors: Differenced drift/mean design matrix with one column per
            regression coefficient, required when the order has trend terms

    Returns:
        Evaluation: Objective value and the statistics derived from it

    Raises:
        InsufficientDataError: If no residual remains after the CSS conditioning set
    """
    if not isinstance(coefficients, ArimaCoefficients):
        coefficients = ArimaCoefficients.from_array(coefficients, order)

    w = np.asarray(differenced, dtype=np.float64)
    m = w.shape[0]
    if not is_admissible(coefficients):
        return _inadmissible(m)

    if order.n_regressors:
        w = w - np.asarray(regressors, dtype=np.float64) @ coefficients.regression

    ar = expand_ar(np.asarray(coefficients.ar), np.asarray(coefficients.seasonal_ar), seasonal_frequency)
    ma = expand_ma(np.asarray(coefficients.ma), np.asarray(coefficients.seasonal_ma), seasonal_frequency)

    if FittingStrategy.parse(strategy) is FittingStrategy.CSS:
        return _evaluate_css(w, ar, ma)
    return _evaluate_ml(w, ar, ma)


def _evaluate_css(w: np.ndarray, ar: np.ndarray, ma: np.ndarray) -> Evaluation:
    m = w.shape[0]
    n_cond = ar.shape[0]
    if m - n_cond < 1:
        raise InsufficientDataError(
            "No observations remain after the conditioning set",
            required=n_cond + 1,
            available=m,
            data_name="differenced"
        )

    resid, ssq, nu = css_residuals(w, ar, ma, n_cond)
    if not np.isfinite(ssq):
        return _inadmissible(m)

    sigma2 = ssq / nu
    with np.errstate(divide="ignore"):
        log_likelihood = -0.5 * m * (_LOG_2PI + np.log(sigma2) + 1.0)
    return Evaluation(float(ssq), resid, float(sigma2), float(log_likelihood), int(nu), True)


def _evaluate_ml(w: np.ndarray, ar: np.ndarray, ma: np.ndarray) -> Evaluation:
    m = w.shape[0]
    r = max(ar.shape[0], ma.shape[0] + 1)
    phi = np.zeros(r)
    phi[:ar.shape[0]] = ar
    theta = np.zeros(r)
    theta[0] = 1.0
    theta[1:ma.shape[0] + 1] = ma

    p0 = np.ascontiguousarray(stationary_covariance(phi, theta))
    if not np.all(np.isfinite(p0)) or p0[0, 0] <= 0:
        return _inadmissible(m)

    resid, ssq, sumlog = kalman_filter(w, phi, theta, p0)
    if not (np.isfinite(ssq) and np.isfinite(sumlog)):
        return _inadmissible(m)

    sigma2 = ssq / m
    with np.errstate(divide="ignore"):
        value = 0.5 * (m * (_LOG_2PI + np.log(sigma2) + 1.0) + sumlog)
    return Evaluation(float(value), resid, float(sigma2), float(-value), m, True)


def make_objective(differenced: Vector,
                   order: ArimaOrder,
                   strategy: FittingStrategy,
                   seasonal_frequency: int = 1,
                   regressors: Optional[Matrix] = None) -> Callable[[np.ndarray], float]:
    """Bind the data and model structure into a function of the coefficient vector."""
    def objective(x: np.ndarray) -> float:
        if not np.all(np.isfinite(x)):
            return INFEASIBLE
        return evaluate(x, differenced, order, strategy, seasonal_frequency, regressors).value

    return objective
