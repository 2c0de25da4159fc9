"""
ARIMA coefficient container and lag polynomial helpers.

The flat coefficient vector exchanged between the optimizer and the objective
evaluator always has the layout

    AR(p), MA(q), SAR(P), SMA(Q), drift (if any), mean (if any)

and :class:`ArimaCoefficients` converts between that vector and named groups.

Sign conventions follow the difference equation

    w_t = sum_i phi_i w_{t-i} + e_t + sum_j theta_j e_{t-j}

so the AR lag polynomial is 1 - phi_1 B - ... and the MA lag polynomial is
1 + theta_1 B + ... The seasonal factors multiply the non-seasonal ones.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np

from arimafit.core.exceptions import DimensionError, ParameterError
from arimafit.core.types import ParameterNames, ParameterVector
from arimafit.models.time_series.order import ArimaOrder, Constant, Drift


def _as_tuple(values: Sequence[float], name: str) -> Tuple[float, ...]:
    array = np.asarray(values, dtype=np.float64).ravel()
    if not np.all(np.isfinite(array)):
        raise ParameterError(f"{name} coefficients must be finite",
                             param_name=name, param_value=array)
    return tuple(float(v) for v in array)


@dataclass(frozen=True)
class ArimaCoefficients:
    """Coefficients of a seasonal ARIMA model.

    Attributes:
        ar: Non-seasonal autoregressive coefficients phi_1..phi_p
        ma: Non-seasonal moving average coefficients theta_1..theta_q
        seasonal_ar: Seasonal autoregressive coefficients Phi_1..Phi_P
        seasonal_ma: Seasonal moving average coefficients Theta_1..Theta_Q
        drift: Drift per observation, or None when the model has no drift
        mean: Process mean, or None when the model has no constant
        d: Non-seasonal differencing order
        D: Seasonal differencing order
    """
    ar: Tuple[float, ...] = field(default_factory=tuple)
    ma: Tuple[float, ...] = field(default_factory=tuple)
    seasonal_ar: Tuple[float, ...] = field(default_factory=tuple)
    seasonal_ma: Tuple[float, ...] = field(default_factory=tuple)
    drift: Optional[float] = None
    mean: Optional[float] = None
    d: int = 0
    D: int = 0

    def __post_init__(self) -> None:
        for name in ("ar", "ma", "seasonal_ar", "seasonal_ma"):
            object.__setattr__(self, name, _as_tuple(getattr(self, name), name))
        for name in ("drift", "mean"):
            value = getattr(self, name)
            if value is not None:
                value = float(value)
                if not np.isfinite(value):
                    raise ParameterError(f"{name} must be finite", param_name=name, param_value=value)
                object.__setattr__(self, name, value)
        # The order check validates d and D and the trend/differencing combination
        object.__setattr__(self, "d", self.order.d)
        object.__setattr__(self, "D", self.order.D)

    @property
    def order(self) -> ArimaOrder:
        """The model order implied by these coefficients."""
        return ArimaOrder(
            p=len(self.ar), d=self.d, q=len(self.ma),
            P=len(self.seasonal_ar), D=self.D, Q=len(self.seasonal_ma),
            constant=Constant.INCLUDE if self.mean is not None else Constant.EXCLUDE,
            drift=Drift.INCLUDE if self.drift is not None else Drift.EXCLUDE,
        )

    @property
    def regression(self) -> np.ndarray:
        """Regression coefficients in regressor column order: drift, then mean."""
        return np.array([v for v in (self.drift, self.mean) if v is not None], dtype=np.float64)

    def to_array(self) -> ParameterVector:
        """Flatten into AR, MA, SAR, SMA, drift, mean order."""
        return np.concatenate([
            np.asarray(self.ar, dtype=np.float64),
            np.asarray(self.ma, dtype=np.float64),
            np.asarray(self.seasonal_ar, dtype=np.float64),
            np.asarray(self.seasonal_ma, dtype=np.float64),
            self.regression,
        ])

    @classmethod
    def from_array(cls, values: ParameterVector, order: ArimaOrder) -> "ArimaCoefficients":
        """Rebuild coefficients from a flat vector laid out for ``order``.

        Raises:
            DimensionError: If the vector length does not match the order
        """
        values = np.asarray(values, dtype=np.float64).ravel()
        if values.shape[0] != order.n_coefficients:
            raise DimensionError(
                "Coefficient vector length does not match the model order",
                array_name="coefficients",
                expected_shape=(order.n_coefficients,),
                actual_shape=values.shape
            )
        bounds = np.cumsum([0, order.p, order.q, order.P, order.Q])
        ar, ma, sar, sma = (values[bounds[i]:bounds[i + 1]] for i in range(4))
        rest = list(values[bounds[-1]:])
        drift = rest.pop(0) if order.drift.include else None
        mean = rest.pop(0) if order.constant.include else None
        return cls(ar=ar, ma=ma, seasonal_ar=sar, seasonal_ma=sma,
                   drift=drift, mean=mean, d=order.d, D=order.D)

    @staticmethod
    def parameter_names(order: ArimaOrder) -> ParameterNames:
        """Names of the entries of the flat vector for ``order``."""
        names: List[str] = []
        names += [f"ar.L{i}" for i in range(1, order.p + 1)]
        names += [f"ma.L{i}" for i in range(1, order.q + 1)]
        names += [f"ar.S.L{i}" for i in range(1, order.P + 1)]
        names += [f"ma.S.L{i}" for i in range(1, order.Q + 1)]
        if order.drift.include:
            names.append("drift")
        if order.constant.include:
            names.append("mean")
        return names


def seasonal_lag_coefficients(coefficients: np.ndarray, period: int) -> np.ndarray:
    """Spread seasonal coefficients onto lags period, 2*period, ..."""
    expanded = np.zeros(len(coefficients) * period)
    if len(coefficients):
        expanded[period - 1::period] = coefficients
    return expanded


def expand_ar(ar: np.ndarray, seasonal_ar: np.ndarray, period: int) -> np.ndarray:
    """Coefficients a_k of the multiplied AR polynomial phi(B)Phi(B^s) = 1 - sum_k a_k B^k."""
    poly = np.convolve(np.r_[1.0, -np.asarray(ar, dtype=np.float64)],
                       np.r_[1.0, -seasonal_lag_coefficients(np.asarray(seasonal_ar, dtype=np.float64), period)])
    return -poly[1:]


def expand_ma(ma: np.ndarray, seasonal_ma: np.ndarray, period: int) -> np.ndarray:
    """Coefficients b_k of the multiplied MA polynomial theta(B)Theta(B^s) = 1 + sum_k b_k B^k."""
    poly = np.convolve(np.r_[1.0, np.asarray(ma, dtype=np.float64)],
                       np.r_[1.0, seasonal_lag_coefficients(np.asarray(seasonal_ma, dtype=np.float64), period)])
    return poly[1:]


def differencing_polynomial(d: int, D: int, period: int) -> np.ndarray:
    """Lag polynomial (1 - B)^d (1 - B^s)^D in increasing powers of B."""
    poly = np.array([1.0])
    for _ in range(d):
        poly = np.convolve(poly, [1.0, -1.0])
    if D > 0:
        seasonal = np.zeros(period + 1)
        seasonal[0], seasonal[period] = 1.0, -1.0
        for _ in range(D):
            poly = np.convolve(poly, seasonal)
    return poly


def trend_regressors(order: ArimaOrder, time: np.ndarray) -> np.ndarray:
    """Design matrix of the trend terms at the given time points.

    Columns follow the coefficient layout: the time index for drift, then a
    column of ones for the mean. Time is counted from 1 at the first observation.
    """
    time = np.asarray(time, dtype=np.float64)
    columns = []
    if order.drift.include:
        columns.append(time)
    if order.constant.include:
        columns.append(np.ones_like(time))
    if not columns:
        return np.zeros((time.shape[0], 0))
    return np.column_stack(columns)
