"""
arimafit models.
"""

import logging

logger = logging.getLogger("arimafit.models")

from . import time_series

__all__ = ["time_series"]
