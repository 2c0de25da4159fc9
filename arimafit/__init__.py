# arimafit/__init__.py
"""
arimafit - Seasonal ARIMA estimation and forecasting for Python

The package provides:
- Regular and seasonal differencing and its inverse
- Conditional sum of squares and exact Gaussian likelihood objectives
- A BFGS optimizer with cooperative cancellation
- Model fitting, fixed-coefficient evaluation and forecasting with
  prediction intervals

Examples:
    >>> import numpy as np
    >>> import arimafit
    >>> y = np.cumsum(np.random.default_rng(1).standard_normal(120))
    >>> model = arimafit.fit_arima(y, order=arimafit.ArimaOrder(1, 1, 0))
    >>> model.forecast(12).point.shape
    (12,)
"""

import logging

# Handlers and level are configured from the logging section of the configuration
logger = logging.getLogger("arimafit")

from .version import __version__, __title__, __description__, __license__

from . import core
from . import optim
from . import utils
from . import models

from .core import (
    ArimaError,
    ParameterError,
    InvalidOrderError,
    DimensionError,
    DataError,
    InsufficientDataError,
    ConvergenceError,
    NonConvergenceError,
    InterruptedFitError,
    ConfigurationError,
    ArimaWarning,
    ConvergenceWarning,
    NumericWarning,
    get_config,
    set_config,
    reset_config,
)
from .models.time_series import (
    ArimaCoefficients,
    ArimaConfig,
    ArimaForecast,
    ArimaModel,
    ArimaOrder,
    Constant,
    Drift,
    FitState,
    FittedArima,
    FittingStrategy,
    difference,
    undifference,
    fit_arima,
)
from .optim import CancellationToken, OptimizationStatus, minimize

__all__ = [
    "__version__",
    "core",
    "optim",
    "utils",
    "models",
    "ArimaError",
    "ParameterError",
    "InvalidOrderError",
    "DimensionError",
    "DataError",
    "InsufficientDataError",
    "ConvergenceError",
    "NonConvergenceError",
    "InterruptedFitError",
    "ConfigurationError",
    "ArimaWarning",
    "ConvergenceWarning",
    "NumericWarning",
    "get_config",
    "set_config",
    "reset_config",
    "ArimaCoefficients",
    "ArimaConfig",
    "ArimaForecast",
    "ArimaModel",
    "ArimaOrder",
    "Constant",
    "Drift",
    "FitState",
    "FittedArima",
    "FittingStrategy",
    "difference",
    "undifference",
    "fit_arima",
    "CancellationToken",
    "OptimizationStatus",
    "minimize",
]
