# arimafit/core/validation.py

"""
Validation utilities for arimafit.

These helpers normalise user input into the plain NumPy representations used by
the numerical code and raise the package's own exceptions when input is
unusable.
"""

from typing import Any, Optional, Tuple, Type

import numpy as np
import pandas as pd

from arimafit.core.exceptions import DataError, DimensionError, ParameterError
from arimafit.core.types import TimeSeriesData, Vector


def validate_series(
    data: TimeSeriesData,
    min_length: int = 1,
    data_name: str = "data"
) -> Tuple[Vector, Optional[pd.Index]]:
    """Validate a univariate time series and split it into values and index.

    Args:
        data: Series as a NumPy array, pandas Series or sequence of floats
        min_length: Minimum required number of observations
        data_name: Name of the data for error messages

    Returns:
        Tuple[np.ndarray, Optional[pd.Index]]: A float64 copy of the values and
        the pandas index, or None when the input carries no index

    Raises:
        TypeError: If data is None or not array-like
        DimensionError: If the data is not one-dimensional
        DataError: If the data is too short or contains NaN or infinite values
    """
    if data is None:
        raise TypeError(f"{data_name} cannot be None")

    index = None
    if isinstance(data, pd.DataFrame):
        if data.shape[1] != 1:
            raise DimensionError(
                f"{data_name} must be univariate",
                array_name=data_name,
                expected_shape="(n_obs,) or (n_obs, 1)",
                actual_shape=data.shape
            )
        data = data.iloc[:, 0]

    if isinstance(data, pd.Series):
        index = data.index
        values = data.to_numpy(dtype=np.float64, copy=True)
    else:
        try:
            values = np.array(data, dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise TypeError(
                f"{data_name} must be a NumPy array, pandas Series or sequence of numbers, "
                f"got {type(data).__name__}"
            ) from e

    if values.ndim == 2 and 1 in values.shape:
        values = values.ravel()
    if values.ndim != 1:
        raise DimensionError(
            f"{data_name} must be one-dimensional",
            array_name=data_name,
            expected_shape="(n_obs,)",
            actual_shape=values.shape
        )

    if values.shape[0] < min_length:
        raise DataError(
            f"{data_name} is too short (length {values.shape[0]}), "
            f"minimum required length is {min_length}",
            data_name=data_name,
            issue=f"insufficient length: {values.shape[0]} < {min_length}"
        )

    if np.isnan(values).any():
        raise DataError(
            f"{data_name} contains NaN values",
            data_name=data_name,
            issue="contains NaN values",
            index=int(np.flatnonzero(np.isnan(values))[0])
        )
    if np.isinf(values).any():
        raise DataError(
            f"{data_name} contains infinite values",
            data_name=data_name,
            issue="contains infinite values",
            index=int(np.flatnonzero(np.isinf(values))[0])
        )

    return values, index


def validate_non_negative_int(value: Any, param_name: str,
                              error_cls: Type[ParameterError] = ParameterError) -> int:
    """Return ``value`` as an int, raising ``error_cls`` unless it is an integer >= 0."""
    if isinstance(value, (bool, np.bool_)) or not isinstance(value, (int, np.integer)):
        raise error_cls(
            f"{param_name} must be an integer",
            param_name=param_name,
            param_value=value,
            constraint="integer >= 0"
        )
    if value < 0:
        raise error_cls(
            f"{param_name} must be non-negative",
            param_name=param_name,
            param_value=value,
            constraint="integer >= 0"
        )
    return int(value)


def validate_alpha(alpha: float) -> float:
    """Validate a significance level for prediction intervals."""
    if not isinstance(alpha, (int, float, np.floating)) or not (0 < alpha < 1):
        raise ParameterError(
            "alpha must lie strictly between 0 and 1",
            param_name="alpha",
            param_value=alpha,
            constraint="0 < alpha < 1"
        )
    return float(alpha)


def validate_steps(steps: int) -> int:
    """Validate a forecast horizon."""
    if isinstance(steps, (bool, np.bool_)) or not isinstance(steps, (int, np.integer)) or steps < 1:
        raise ParameterError(
            "steps must be a positive integer",
            param_name="steps",
            param_value=steps,
            constraint="integer >= 1"
        )
    return int(steps)
