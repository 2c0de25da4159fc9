"""
Regular and seasonal differencing and its inverse.

Differencing applies (1 - B^s)^D followed by (1 - B)^d. The two operators
commute, so the order only matters for floating point rounding. A series of
length n yields a differenced series of length n - d - D*s.
"""

import logging

import numpy as np

from arimafit.core.exceptions import InsufficientDataError, InvalidOrderError
from arimafit.core.types import Vector
from arimafit.core.validation import validate_non_negative_int
from arimafit.models.time_series.coefficients import differencing_polynomial

logger = logging.getLogger("arimafit.models.time_series.differencing")


def _validate_orders(d: int, D: int, period: int) -> None:
    validate_non_negative_int(d, "d", error_cls=InvalidOrderError)
    validate_non_negative_int(D, "D", error_cls=InvalidOrderError)
    if D > 0 and (isinstance(period, bool) or not isinstance(period, (int, np.integer)) or period < 1):
        raise InvalidOrderError(
            "Seasonal differencing requires a seasonal period of at least 1",
            param_name="period",
            param_value=period,
            constraint="period >= 1"
        )


def difference(series: Vector, d: int, D: int = 0, period: int = 1) -> np.ndarray:
    """Apply seasonal and regular differencing.

    Args:
        series: Observations
        d: Regular differencing order
        D: Seasonal differencing order
        period: Seasonal period, used only when D > 0

    Returns:
        np.ndarray: The differenced series of length len(series) - d - D*period

    Raises:
        InvalidOrderError: If an order is negative or the period is invalid
        InsufficientDataError: If the series is shorter than d + D*period

    Examples:
        >>> difference(np.array([1.0, 4.0, 9.0, 16.0]), d=1)
        array([3., 5., 7.])
    """
    _validate_orders(d, D, period)
    values = np.asarray(series, dtype=np.float64)
    lost = d + D * (period if D > 0 else 0)
    if values.shape[0] < lost:
        raise InsufficientDataError(
            f"Series of length {values.shape[0]} is too short for differencing "
            f"with d={d}, D={D}, period={period}",
            required=lost,
            available=values.shape[0],
            data_name="series"
        )

    result = values.copy()
    for _ in range(D):
        result = result[period:] - result[:-period]
    for _ in range(d):
        result = np.diff(result)
    return result


def undifference(differenced: Vector, original_tail: Vector, d: int, D: int = 0,
                 period: int = 1) -> np.ndarray:
    """Invert :func:`difference`.

    Each level is rebuilt from y_t = w_t + sum_k delta_k y_{t-k}, where delta are
    the coefficients of the expanded differencing polynomial.

    Args:
        differenced: Differenced values following ``original_tail``
        original_tail: The d + D*period observations immediately preceding the
            first observation represented in ``differenced``
        d: Regular differencing order
        D: Seasonal differencing order
        period: Seasonal period, used only when D > 0

    Returns:
        np.ndarray: ``original_tail`` followed by the reconstructed observations

    Raises:
        InvalidOrderError: If an order is negative or the period is invalid
        InsufficientDataError: If ``original_tail`` is shorter than d + D*period
    """
    _validate_orders(d, D, period)
    w = np.asarray(differenced, dtype=np.float64)
    tail = np.asarray(original_tail, dtype=np.float64)
    lost = d + D * (period if D > 0 else 0)
    if tail.shape[0] < lost:
        raise InsufficientDataError(
            "Not enough trailing observations to invert differencing",
            required=lost,
            available=tail.shape[0],
            data_name="original_tail"
        )

    tail = tail[tail.shape[0] - lost:]
    if lost == 0:
        return w.copy()

    # y_t = w_t - sum_{k>=1} poly_k y_{t-k}
    poly = differencing_polynomial(d, D, period if D > 0 else 1)
    result = np.concatenate([tail, np.zeros(w.shape[0])])
    for t in range(lost, result.shape[0]):
        history = result[t - lost:t][::-1]
        result[t] = w[t - lost] - np.dot(poly[1:], history)
    return result
