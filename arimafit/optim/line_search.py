"""
Strong Wolfe line search with bracketing and zoom (Nocedal & Wright, Alg. 3.5/3.6).

Trial points whose objective value lies outside the objective's domain are
treated as having an infinite value, so the search backtracks away from them.
When the curvature condition cannot be met within the iteration budget the
search still accepts the best trial point that satisfies sufficient decrease.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import numpy as np

from arimafit.core.types import Vector
from arimafit.optim.core import is_feasible

logger = logging.getLogger("arimafit.optim.line_search")

# Gradient callable used by the search: (point, value at point) -> gradient
PointGradient = Callable[[np.ndarray, float], np.ndarray]

_ZOOM_MAX_ITER = 50
_BRACKET_TOLERANCE = 1e-14


@dataclass(frozen=True)
class LineSearchResult:
    """Accepted step of a line search.

    Attributes:
        step: Step length along the search direction, 0.0 on failure
        value: Objective value at the accepted point
        gradient: Gradient at the accepted point, None on failure
        success: Whether a point with sufficient decrease was found
        evaluations: Objective evaluations made by the search, excluding gradients
    """
    step: float
    value: float
    gradient: Optional[Vector]
    success: bool
    evaluations: int


def wolfe_line_search(
    fun: Callable[[np.ndarray], float],
    grad: PointGradient,
    x: Vector,
    direction: Vector,
    f0: float,
    g0: Vector,
    initial_step: float = 1.0,
    c1: float = 1e-4,
    c2: float = 0.9,
    max_iter: int = 40,
) -> LineSearchResult:
    """Find a step satisfying the strong Wolfe conditions.

    Args:
        fun: Objective function
        grad: Gradient function taking the point and its objective value
        x: Current point
        direction: Descent direction
        f0: Objective value at ``x``
        g0: Gradient at ``x``
        initial_step: First trial step length
        c1: Sufficient decrease constant
        c2: Curvature constant
        max_iter: Maximum number of step expansions

    Returns:
        LineSearchResult: The accepted step, or a failed result with step 0.0

    Raises:
        ValueError: If the constants are invalid or ``direction`` is not a descent direction
    """
    if not (0 < c1 < c2 < 1):
        raise ValueError("Require 0 < c1 < c2 < 1 for Wolfe conditions.")

    slope0 = float(np.dot(g0, direction))
    if not slope0 < 0:
        raise ValueError("Search direction must be a descent direction.")

    nfev = 0

    def phi(step: float) -> float:
        nonlocal nfev
        nfev += 1
        value = float(fun(x + step * direction))
        return value if is_feasible(value) else np.inf

    def phi_prime(step: float, value: float) -> Tuple[np.ndarray, float]:
        g = np.asarray(grad(x + step * direction, value), dtype=np.float64)
        return g, float(np.dot(g, direction))

    step_prev, value_prev, grad_prev = 0.0, f0, g0
    step = float(initial_step)

    for iteration in range(max_iter):
        value = phi(step)
        if value > f0 + c1 * step * slope0 or (iteration > 0 and value >= value_prev):
            accepted = _zoom(phi, phi_prime, step_prev, value_prev, grad_prev, step,
                             f0, slope0, c1, c2)
            return LineSearchResult(*accepted, evaluations=nfev)

        g_new, slope = phi_prime(step, value)
        if abs(slope) <= -c2 * slope0:
            return LineSearchResult(step, value, g_new, True, nfev)
        if slope >= 0:
            accepted = _zoom(phi, phi_prime, step, value, g_new, step_prev,
                             f0, slope0, c1, c2)
            return LineSearchResult(*accepted, evaluations=nfev)

        step_prev, value_prev, grad_prev = step, value, g_new
        step *= 2.0

    logger.debug("Line search expansion budget exhausted at step %g", step_prev)
    return LineSearchResult(step_prev, value_prev, grad_prev, step_prev > 0, nfev)


def _zoom(
    phi: Callable[[float], float],
    phi_prime: Callable[[float, float], Tuple[np.ndarray, float]],
    step_lo: float,
    value_lo: float,
    grad_lo: Vector,
    step_hi: float,
    f0: float,
    slope0: float,
    c1: float,
    c2: float,
) -> Tuple[float, float, Optional[Vector], bool]:
    """Zoom stage enforcing the strong Wolfe conditions within [step_lo, step_hi].

    Returns the accepted step, its value and gradient, and a success flag.
    """
    best: Optional[Tuple[float, float, Vector]] = None
    if step_lo > 0:
        best = (step_lo, value_lo, grad_lo)

    for _ in range(_ZOOM_MAX_ITER):
        step = 0.5 * (step_lo + step_hi)
        value = phi(step)
        if value > f0 + c1 * step * slope0 or value >= value_lo:
            step_hi = step
        else:
            g_new, slope = phi_prime(step, value)
            best = (step, value, g_new)
            if abs(slope) <= -c2 * slope0:
                return step, value, g_new, True
            if slope * (step_hi - step_lo) >= 0:
                step_hi = step_lo
            step_lo, value_lo = step, value
        if abs(step_hi - step_lo) <= _BRACKET_TOLERANCE * max(1.0, abs(step_lo)):
            break

    if best is not None:
        logger.debug("Curvature condition not met; accepting sufficient decrease at step %g", best[0])
        return best[0], best[1], best[2], True
    return 0.0, f0, None, False
