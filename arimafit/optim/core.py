"""
Result and status types shared by the optimization routines.

Objectives minimized here report points outside their domain by returning
:data:`INFEASIBLE`. The optimizer never steps to such a point; it treats the
value as an infinitely bad candidate and backtracks.
"""

from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from arimafit.core.types import Matrix, Vector
from arimafit.utils.differentiation import in_domain

# Penalty returned by objectives for inadmissible parameter vectors
INFEASIBLE = float(np.finfo(np.float64).max)


class OptimizationStatus(str, Enum):
    """Termination status of an optimization run."""
    CONVERGED = "converged"
    NOT_CONVERGED = "not_converged"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class OptimizeResult:
    """Outcome of a BFGS run.

    Attributes:
        x: Best point found
        fun: Objective value at ``x``
        inverse_hessian: Final BFGS approximation of the inverse Hessian at ``x``
        gradient: Gradient at ``x``
        status: Why the run stopped
        iterations: Number of completed iterations
        evaluations: Number of objective evaluations, gradients included
        message: Human readable description of the termination reason
    """
    x: Vector
    fun: float
    inverse_hessian: Matrix
    gradient: Vector
    status: OptimizationStatus
    iterations: int
    evaluations: int
    message: str = field(default="")

    @property
    def converged(self) -> bool:
        """True when the run met one of its convergence tests."""
        return self.status is OptimizationStatus.CONVERGED

    @property
    def gradient_norm(self) -> float:
        """Euclidean norm of the final gradient."""
        return float(np.linalg.norm(self.gradient)) if self.gradient.size else 0.0


def is_feasible(value: float) -> bool:
    """Check whether an objective value lies inside the objective's domain."""
    return in_domain(value)
