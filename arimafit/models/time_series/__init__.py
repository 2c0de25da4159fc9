"""
arimafit time series models.

Seasonal ARIMA(p, d, q)(P, D, Q) estimation by conditional sum of squares or
exact maximum likelihood, fixed-coefficient evaluation, and forecasting with
Gaussian prediction intervals.
"""

import logging

logger = logging.getLogger("arimafit.models.time_series")

from .arima import ArimaConfig, ArimaModel, FitState, FittedArima, fit_arima
from .coefficients import ArimaCoefficients
from .differencing import difference, undifference
from .forecast import ArimaForecast, forecast, forecast_variance, point_forecast, psi_weights
from .objective import Evaluation, evaluate, is_admissible, make_objective
from .order import ArimaOrder, Constant, Drift, FittingStrategy

__all__ = [
    "ArimaConfig",
    "ArimaModel",
    "FitState",
    "FittedArima",
    "fit_arima",
    "ArimaCoefficients",
    "difference",
    "undifference",
    "ArimaForecast",
    "forecast",
    "forecast_variance",
    "point_forecast",
    "psi_weights",
    "Evaluation",
    "evaluate",
    "is_admissible",
    "make_objective",
    "ArimaOrder",
    "Constant",
    "Drift",
    "FittingStrategy",
]
