"""
Forecasting for fitted ARIMA models.

Point forecasts run the ARMA recursion forward on the differenced,
trend-adjusted series with future innovations set to zero, integrate the result
back to the level of the observations and add the trend terms for the future
time points.

Forecast error variances follow from the MA(infinity) representation of the
full model, including the differencing operator:

    Var(h) = sigma2 * sum_{j=0}^{h-1} psi_j^2

which is non-decreasing in h. Prediction intervals are Gaussian.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

import numpy as np
import pandas as pd
from scipy import stats
from statsmodels.tsa.arima_process import arma2ma

from arimafit.core.config import get_forecast_config
from arimafit.core.types import Vector
from arimafit.core.validation import validate_alpha, validate_steps
from arimafit.models.time_series._numba_core import arma_forecast
from arimafit.models.time_series.coefficients import (
    differencing_polynomial, expand_ar, expand_ma, trend_regressors
)
from arimafit.models.time_series.differencing import difference, undifference
from arimafit.utils.date_utils import extend_forecast_index

if TYPE_CHECKING:
    from arimafit.models.time_series.arima import FittedArima

logger = logging.getLogger("arimafit.models.time_series.forecast")


@dataclass(frozen=True)
class ArimaForecast:
    """Point forecasts with Gaussian prediction intervals.

    Attributes:
        point: Point forecasts for horizons 1..steps
        lower: Lower bounds of the prediction intervals
        upper: Upper bounds of the prediction intervals
        standard_errors: Forecast standard errors
        alpha: Significance level; intervals have coverage 1 - alpha
        index: Index of the forecast periods, when the input series had one
    """
    point: np.ndarray
    lower: np.ndarray
    upper: np.ndarray
    standard_errors: np.ndarray
    alpha: float
    index: Optional[pd.Index] = None

    @property
    def steps(self) -> int:
        return int(self.point.shape[0])

    def to_dataframe(self) -> pd.DataFrame:
        """Return the forecasts as a DataFrame.

        Returns:
            pd.DataFrame: Columns ``forecast``, ``std_error``, ``lower`` and ``upper``
        """
        index = self.index if self.index is not None else pd.RangeIndex(1, self.steps + 1, name="horizon")
        return pd.DataFrame({
            "forecast": self.point,
            "std_error": self.standard_errors,
            "lower": self.lower,
            "upper": self.upper,
        }, index=index)


def psi_weights(ar: Vector, ma: Vector, steps: int, d: int = 0, D: int = 0,
                period: int = 1) -> np.ndarray:
    """MA(infinity) weights psi_0..psi_{steps-1} of an ARIMA process.

    Args:
        ar: Expanded AR coefficients a_k of 1 - sum_k a_k B^k
        ma: Expanded MA coefficients b_k of 1 + sum_k b_k B^k
        steps: Number of weights
        d: Regular differencing order
        D: Seasonal differencing order
        period: Seasonal period

    Returns:
        np.ndarray: The weights, starting with psi_0 = 1
    """
    ar_poly = np.convolve(np.r_[1.0, -np.asarray(ar, dtype=np.float64)],
                          differencing_polynomial(d, D, period))
    ma_poly = np.r_[1.0, np.asarray(ma, dtype=np.float64)]
    return arma2ma(ar_poly, ma_poly, lags=steps)


def forecast_variance(ar: Vector, ma: Vector, sigma2: float, steps: int,
                      d: int = 0, D: int = 0, period: int = 1) -> np.ndarray:
    """Forecast error variances for horizons 1..steps.

    Examples:
        >>> forecast_variance(np.array([]), np.array([]), 2.0, 3, d=1)
        array([2., 4., 6.])
    """
    psi = psi_weights(ar, ma, steps, d, D, period)
    return sigma2 * np.cumsum(psi ** 2)


def point_forecast(model: "FittedArima", steps: int) -> np.ndarray:
    """Point forecasts for the next ``steps`` periods.

    Args:
        model: Fitted model
        steps: Forecast horizon, at least 1

    Returns:
        np.ndarray: Forecasts on the scale of the original observations
    """
    steps = validate_steps(steps)
    order = model.order
    coefs = model.coefficients
    s = model.seasonal_frequency
    y = model.time_series
    n = y.shape[0]
    lost = order.lost_observations(s)

    beta = coefs.regression
    z = y - trend_regressors(order, np.arange(1, n + 1)) @ beta if beta.size else y
    w = difference(z, order.d, order.D, s)
    resid = np.ascontiguousarray(model.residuals[lost:])

    ar = expand_ar(np.asarray(coefs.ar), np.asarray(coefs.seasonal_ar), s)
    ma = expand_ma(np.asarray(coefs.ma), np.asarray(coefs.seasonal_ma), s)
    w_future = arma_forecast(np.ascontiguousarray(w), resid, ar, ma, steps)

    z_future = undifference(w_future, z[n - lost:], order.d, order.D, s)[lost:]
    if beta.size:
        z_future = z_future + trend_regressors(order, np.arange(n + 1, n + steps + 1)) @ beta
    return z_future


def forecast(model: "FittedArima", steps: int, alpha: Optional[float] = None) -> ArimaForecast:
    """Point forecasts with prediction intervals.

    Args:
        model: Fitted model
        steps: Forecast horizon, at least 1
        alpha: Significance level; defaults to the configured value (0.05)

    Returns:
        ArimaForecast: Point forecasts, bounds and standard errors for each horizon

    Raises:
        ParameterError: If ``steps`` or ``alpha`` is invalid
    """
    steps = validate_steps(steps)
    alpha = validate_alpha(get_forecast_config().alpha if alpha is None else alpha)

    point = point_forecast(model, steps)

    order = model.order
    coefs = model.coefficients
    s = model.seasonal_frequency
    ar = expand_ar(np.asarray(coefs.ar), np.asarray(coefs.seasonal_ar), s)
    ma = expand_ma(np.asarray(coefs.ma), np.asarray(coefs.seasonal_ma), s)
    variance = forecast_variance(ar, ma, model.sigma2, steps, order.d, order.D, s)
    std_errors = np.sqrt(variance)

    critical_value = stats.norm.ppf(1 - alpha / 2)
    lower = point - critical_value * std_errors
    upper = point + critical_value * std_errors

    index = None
    if model.index is not None:
        try:
            index = extend_forecast_index(model.index, steps)
        except ValueError as e:
            logger.warning(f"Could not extend forecast index: {e}")

    return ArimaForecast(point=point, lower=lower, upper=upper,
                         standard_errors=std_errors, alpha=alpha, index=index)
