"""
arimafit core module.

Exception hierarchy, configuration management, type aliases, input validation
and the structural model protocol shared by the rest of the package.
"""

import logging

logger = logging.getLogger("arimafit.core")

from .base import Model
from .config import (
    ConfigManager,
    get_config,
    set_config,
    reset_config,
    save_config,
    get_config_manager,
    get_optimizer_config,
    get_forecast_config,
    get_logging_config,
)
from .exceptions import (
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
    warn_convergence,
    warn_numeric,
)
from .validation import validate_series

__all__ = [
    "Model",
    "ConfigManager",
    "get_config",
    "set_config",
    "reset_config",
    "save_config",
    "get_config_manager",
    "get_optimizer_config",
    "get_forecast_config",
    "get_logging_config",
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
    "warn_convergence",
    "warn_numeric",
    "validate_series",
]
