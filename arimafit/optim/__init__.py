"""
Optimization routines.

A hand-written BFGS minimizer with a strong Wolfe line search, penalty-based
handling of inadmissible regions and cooperative cancellation.
"""

from .bfgs import minimize
from .cancellation import CancellationToken
from .core import INFEASIBLE, OptimizationStatus, OptimizeResult, is_feasible
from .line_search import LineSearchResult, wolfe_line_search

__all__ = [
    "minimize",
    "CancellationToken",
    "INFEASIBLE",
    "OptimizationStatus",
    "OptimizeResult",
    "is_feasible",
    "LineSearchResult",
    "wolfe_line_search",
]
