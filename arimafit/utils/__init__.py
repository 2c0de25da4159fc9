"""
Utility functions for numerical differentiation and calendar period arithmetic.
"""

from .date_utils import (
    extend_forecast_index,
    infer_observation_period,
    nominal_seconds,
    observations_per_cycle,
)
from .differentiation import gradient_2sided, hessian_2sided, in_domain

__all__ = [
    "extend_forecast_index",
    "infer_observation_period",
    "nominal_seconds",
    "observations_per_cycle",
    "gradient_2sided",
    "hessian_2sided",
    "in_domain",
]
