"""
Calendar period utilities.

The seasonal period of an ARIMA model is expressed as a number of observations
per seasonal cycle. Users describe the cycle ("one year") and the observation
period ("one month") as calendar durations, and this module converts them using
nominal lengths: a year of 365.2425 days, a quarter of a quarter year and a
month of a twelfth of a year.
"""

import logging
from datetime import timedelta
from typing import Optional, Union

import pandas as pd
from pandas.tseries.frequencies import to_offset

from arimafit.core.exceptions import ParameterError
from arimafit.core.types import PeriodLike

logger = logging.getLogger("arimafit.utils.date_utils")

SECONDS_PER_DAY = 86400.0
SECONDS_PER_YEAR = 365.2425 * SECONDS_PER_DAY
SECONDS_PER_QUARTER = SECONDS_PER_YEAR / 4.0
SECONDS_PER_MONTH = SECONDS_PER_YEAR / 12.0
SECONDS_PER_WEEK = 7.0 * SECONDS_PER_DAY

# Absorbs floating point error so that e.g. a year over a month gives exactly 12
_RATIO_TOLERANCE = 1e-9

ONE_YEAR = pd.DateOffset(years=1)

_YEAR_OFFSETS = (pd.offsets.YearBegin, pd.offsets.YearEnd,
                 pd.offsets.BYearBegin, pd.offsets.BYearEnd)
_QUARTER_OFFSETS = (pd.offsets.QuarterBegin, pd.offsets.QuarterEnd,
                    pd.offsets.BQuarterBegin, pd.offsets.BQuarterEnd)
_MONTH_OFFSETS = (pd.offsets.MonthBegin, pd.offsets.MonthEnd,
                  pd.offsets.BMonthBegin, pd.offsets.BMonthEnd)
_SEMI_MONTH_OFFSETS = (pd.offsets.SemiMonthBegin, pd.offsets.SemiMonthEnd)

_DATE_OFFSET_UNITS = {
    "years": SECONDS_PER_YEAR,
    "months": SECONDS_PER_MONTH,
    "weeks": SECONDS_PER_WEEK,
    "days": SECONDS_PER_DAY,
    "hours": 3600.0,
    "minutes": 60.0,
    "seconds": 1.0,
}


def nominal_seconds(period: PeriodLike) -> float:
    """Return the nominal length of a calendar period in seconds.

    Args:
        period: An offset alias such as ``"MS"``, a pandas DateOffset, a
            pandas Timedelta or a ``datetime.timedelta``

    Returns:
        float: Nominal duration in seconds

    Raises:
        ParameterError: If the period has no fixed nominal length
    """
    if isinstance(period, (pd.Timedelta, timedelta)):
        return pd.Timedelta(period).total_seconds()

    offset = to_offset(period) if isinstance(period, str) else period
    if not isinstance(offset, pd.DateOffset):
        raise ParameterError(
            "Period must be an offset alias, DateOffset or timedelta",
            param_name="period",
            param_value=period
        )

    n = offset.n
    if isinstance(offset, _YEAR_OFFSETS):
        return n * SECONDS_PER_YEAR
    if isinstance(offset, _QUARTER_OFFSETS):
        return n * SECONDS_PER_QUARTER
    if isinstance(offset, _MONTH_OFFSETS):
        return n * SECONDS_PER_MONTH
    if isinstance(offset, _SEMI_MONTH_OFFSETS):
        return n * SECONDS_PER_MONTH / 2.0
    if isinstance(offset, pd.offsets.Week):
        return n * SECONDS_PER_WEEK
    if isinstance(offset, (pd.offsets.Day, pd.offsets.BusinessDay)):
        return n * SECONDS_PER_DAY
    if isinstance(offset, pd.offsets.Tick):
        return pd.Timedelta(offset).total_seconds()

    kwds = getattr(offset, "kwds", {}) or {}
    units = {k: v for k, v in kwds.items() if k in _DATE_OFFSET_UNITS}
    if units and len(units) == len(kwds):
        return n * sum(_DATE_OFFSET_UNITS[k] * v for k, v in units.items())

    raise ParameterError(
        f"Period {offset!r} has no fixed nominal length",
        param_name="period",
        param_value=period
    )


def observations_per_cycle(observation_period: PeriodLike,
                           seasonal_cycle: PeriodLike = ONE_YEAR) -> int:
    """Number of observations in one seasonal cycle.

    Args:
        observation_period: Time between consecutive observations
        seasonal_cycle: Length of the seasonal cycle, one year by default

    Returns:
        int: The whole number of observation periods that fit in the cycle.
        Zero when the cycle is shorter than one observation period.

    Raises:
        ParameterError: If either period has no positive nominal length

    Examples:
        >>> observations_per_cycle("MS")
        12
        >>> observations_per_cycle(pd.offsets.Week())
        52
    """
    period_seconds = nominal_seconds(observation_period)
    cycle_seconds = nominal_seconds(seasonal_cycle)
    if period_seconds <= 0 or cycle_seconds <= 0:
        raise ParameterError(
            "Observation period and seasonal cycle must have positive length",
            param_name="observation_period",
            param_value=observation_period
        )
    return int(cycle_seconds / period_seconds + _RATIO_TOLERANCE)


def infer_observation_period(index: Optional[pd.Index]) -> Optional[pd.DateOffset]:
    """Infer the observation period from a DatetimeIndex or PeriodIndex.

    Returns None when the index carries no regular frequency.
    """
    if index is None:
        return None
    if isinstance(index, pd.PeriodIndex):
        return index.freq
    if isinstance(index, pd.DatetimeIndex):
        if index.freq is not None:
            return index.freq
        if len(index) >= 3:
            inferred = pd.infer_freq(index)
            if inferred is not None:
                return to_offset(inferred)
        logger.debug("Could not infer a regular frequency from the index")
    return None


def extend_forecast_index(
    original_index: pd.Index,
    steps: int,
    freq: Optional[Union[str, pd.DateOffset]] = None
) -> pd.Index:
    """Extend a time series index for forecasting.

    Date-based indices continue at their frequency, numeric indices continue at
    their average spacing, and any other index is continued with positions.

    Args:
        original_index: Index of the observed series
        steps: Number of future periods
        freq: Frequency for a DatetimeIndex without one (optional)

    Returns:
        pd.Index: Index for the forecast period

    Raises:
        ValueError: If the index is empty or a DatetimeIndex has no usable frequency
    """
    if len(original_index) == 0:
        raise ValueError("Original index is empty")

    if isinstance(original_index, pd.PeriodIndex):
        return pd.period_range(start=original_index[-1] + 1, periods=steps,
                               freq=original_index.freq)

    if isinstance(original_index, pd.DatetimeIndex):
        if freq is None:
            freq = infer_observation_period(original_index)
        if freq is None and len(original_index) >= 2:
            freq = original_index[-1] - original_index[-2]
        if freq is None:
            raise ValueError(
                "Could not infer frequency from index. "
                "Please provide a frequency using the freq parameter."
            )
        offset = to_offset(freq) if isinstance(freq, str) else freq
        return pd.date_range(start=original_index[-1] + offset, periods=steps, freq=offset)

    if pd.api.types.is_numeric_dtype(original_index):
        last_idx = original_index[-1]
        if len(original_index) >= 2:
            step_size = (original_index[-1] - original_index[0]) / (len(original_index) - 1)
        else:
            step_size = 1
        return pd.Index([last_idx + (i + 1) * step_size for i in range(steps)])

    n = len(original_index)
    return pd.RangeIndex(n, n + steps)
