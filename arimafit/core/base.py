# arimafit/core/base.py

"""
Structural interface shared by fitted time series models.

Code that only needs to query a fitted model (forecasting, reporting) depends on
this protocol rather than on a concrete result class.
"""

from typing import Optional, Protocol, runtime_checkable

import numpy as np
import pandas as pd


@runtime_checkable
class Model(Protocol):
    """Query surface of a fitted univariate time series model."""

    @property
    def time_series(self) -> np.ndarray:
        """The original, undifferenced observations."""
        ...

    @property
    def index(self) -> Optional[pd.Index]:
        """The index of the observations, if the input carried one."""
        ...

    @property
    def fitted_values(self) -> np.ndarray:
        """In-sample one-step-ahead fitted values, aligned with ``time_series``."""
        ...

    @property
    def residuals(self) -> np.ndarray:
        """In-sample residuals, aligned with ``time_series``."""
        ...

    def point_forecast(self, steps: int) -> np.ndarray:
        """Point forecasts for the next ``steps`` periods."""
        ...

    def forecast(self, steps: int, alpha: Optional[float] = None):
        """Point forecasts with prediction intervals."""
        ...
