# arimafit/core/types.py

"""
Core type aliases for arimafit.

These aliases document the shapes and roles of the arrays and callables passed
between the differencer, the objective evaluator, the optimizer and the model
orchestrator.
"""

from datetime import timedelta
from typing import Callable, List, Literal, Sequence, Union

import numpy as np
import pandas as pd

# NumPy array type aliases
Vector = np.ndarray  # 1D array
Matrix = np.ndarray  # 2D array

ParameterVector = np.ndarray  # Flat coefficient vector: AR, MA, SAR, SMA, drift, mean
CovarianceMatrix = np.ndarray  # Symmetric covariance of the coefficient estimates

# Input series
TimeSeriesData = Union[np.ndarray, pd.Series, Sequence[float]]

# Calendar periods: an offset alias such as "MS", a pandas offset or timedelta
PeriodLike = Union[str, pd.DateOffset, pd.Timedelta, timedelta]

# Optimizer callables
ObjectiveFunction = Callable[[np.ndarray], float]
GradientFunction = Callable[[np.ndarray], np.ndarray]
IterationCallback = Callable[[int, np.ndarray, float], None]

# Progress reporting for long-running fits: fraction complete and a message
ProgressCallback = Callable[[float, str], None]

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

ParameterNames = List[str]
