"""
Full-memory BFGS quasi-Newton minimizer.

The minimizer works on unconstrained vectors. Objectives express constraints by
returning :data:`arimafit.optim.core.INFEASIBLE` outside their admissible
region; the line search never accepts such a point, so every iterate stays
admissible as long as the starting point is.

The final inverse Hessian approximation is returned with the result, which lets
callers derive approximate covariance matrices for the estimates without an
extra numerical Hessian.
"""

import logging
from typing import Optional

import numpy as np

from arimafit.core.config import get_optimizer_config
from arimafit.core.exceptions import ParameterError
from arimafit.core.types import GradientFunction, IterationCallback, ObjectiveFunction, Vector
from arimafit.optim.cancellation import CancellationToken
from arimafit.optim.core import OptimizationStatus, OptimizeResult, is_feasible
from arimafit.optim.line_search import wolfe_line_search
from arimafit.utils.differentiation import gradient_2sided

logger = logging.getLogger("arimafit.optim.bfgs")

# Relative curvature threshold below which the BFGS update is skipped
_CURVATURE_EPS = 1e-10


def _initial_inverse_hessian(gradient: np.ndarray) -> np.ndarray:
    """Identity scaled so that the first step has length at most one."""
    n = gradient.shape[0]
    return np.eye(n) / max(1.0, float(np.linalg.norm(gradient)))


def _bfgs_update(inv_hessian: np.ndarray, s: np.ndarray, y: np.ndarray, ys: float) -> np.ndarray:
    """Rank-two inverse-Hessian update (I - rho s y')H(I - rho y s') + rho s s'."""
    n = s.shape[0]
    rho = 1.0 / ys
    identity = np.eye(n)
    outer_sy = np.outer(s, y)
    updated = ((identity - rho * outer_sy) @ inv_hessian @ (identity - rho * outer_sy.T)
               + rho * np.outer(s, s))
    # Keep the approximation exactly symmetric
    return 0.5 * (updated + updated.T)


def minimize(objective: ObjectiveFunction,
             initial_point: Vector,
             gradient_tolerance: Optional[float] = None,
             step_tolerance: Optional[float] = None,
             max_iter: Optional[int] = None,
             gradient: Optional[GradientFunction] = None,
             cancellation_token: Optional[CancellationToken] = None,
             callback: Optional[IterationCallback] = None) -> OptimizeResult:
    """
    Minimize a scalar function with BFGS and a strong Wolfe line search.

    Each iteration first polls the cancellation token, then tests the gradient
    norm against ``gradient_tolerance * max(1, |f|)``, then checks the iteration
    budget, and only then takes a step. A step shorter than
    ``step_tolerance * max(1, ||x||)`` also counts as convergence, as does a
    second consecutive line search failure after the inverse Hessian has been
    reset to a scaled identity.

    Args:
        objective: Function to minimize
        initial_point: Starting point; must lie inside the objective's domain
        gradient_tolerance: Relative gradient tolerance, defaults to the configured value
        step_tolerance: Relative step tolerance, defaults to the configured value
        max_iter: Maximum number of iterations, defaults to the configured value.
            Zero evaluates the starting point only
        gradient: Analytic gradient. Central finite differences are used when None
        cancellation_token: Token polled once per iteration
        callback: Called as ``callback(iteration, x, f)`` after every iteration

    Returns:
        OptimizeResult: Best point, value, gradient, inverse Hessian approximation
        and termination status. Non-convergence and cancellation are reported
        through the status, not raised.

    Raises:
        ParameterError: If a setting is invalid or the objective is outside its
            domain at the starting point

    Examples:
        >>> import numpy as np
        >>> from arimafit.optim import minimize
        >>> result = minimize(lambda x: float(np.sum((x - 3.0) ** 2)), np.zeros(2))
        >>> np.allclose(result.x, 3.0, atol=1e-5)
        True
    """
    settings = get_optimizer_config()
    gtol = settings.gradient_tolerance if gradient_tolerance is None else float(gradient_tolerance)
    steptol = settings.step_tolerance if step_tolerance is None else float(step_tolerance)
    max_iter = settings.max_iter if max_iter is None else max_iter

    if not gtol > 0:
        raise ParameterError("gradient_tolerance must be positive",
                             param_name="gradient_tolerance", param_value=gtol)
    if not steptol >= 0:
        raise ParameterError("step_tolerance must be non-negative",
                             param_name="step_tolerance", param_value=steptol)
    if isinstance(max_iter, bool) or not isinstance(max_iter, (int, np.integer)) or max_iter < 0:
        raise ParameterError("max_iter must be a non-negative integer",
                             param_name="max_iter", param_value=max_iter)

    evaluations = 0

    def fun(point: np.ndarray) -> float:
        nonlocal evaluations
        evaluations += 1
        return float(objective(point))

    def grad(point: np.ndarray, value: float) -> np.ndarray:
        if gradient is not None:
            return np.asarray(gradient(point), dtype=np.float64)
        return gradient_2sided(fun, point, f0=value)

    x = np.array(initial_point, dtype=np.float64).ravel()
    n = x.shape[0]

    fx = fun(x)
    if np.isnan(fx) or not (fx == -np.inf or is_feasible(fx)):
        raise ParameterError(
            "Objective is outside its domain at the initial point",
            param_name="initial_point",
            param_value=x,
            constraint="objective must be finite at the initial point"
        )

    if n == 0 or fx == -np.inf:
        message = "No free parameters" if n == 0 else "Objective unbounded below at initial point"
        return OptimizeResult(x, fx, np.eye(n), np.zeros(n), OptimizationStatus.CONVERGED,
                              0, evaluations, message)

    g = grad(x, fx)
    inv_hessian = _initial_inverse_hessian(g)
    updates = 0
    just_reset = False
    iteration = 0
    status = OptimizationStatus.NOT_CONVERGED
    message = "Maximum number of iterations reached"

    while True:
        if cancellation_token is not None and cancellation_token.cancelled:
            status = OptimizationStatus.CANCELLED
            message = "Cancelled"
            break

        grad_norm = float(np.linalg.norm(g))
        if grad_norm <= gtol * max(1.0, abs(fx)):
            status = OptimizationStatus.CONVERGED
            message = "Gradient tolerance satisfied"
            break

        if iteration >= max_iter:
            break

        direction = -inv_hessian @ g
        if not float(np.dot(g, direction)) < 0:
            # Lost positive definiteness; restart from steepest descent
            inv_hessian = _initial_inverse_hessian(g)
            direction = -inv_hessian @ g

        search = wolfe_line_search(fun, grad, x, direction, fx, g,
                                   max_iter=settings.line_search_max_iter)
        if not search.success:
            if just_reset:
                status = OptimizationStatus.CONVERGED
                message = "No further decrease along the search direction"
                break
            logger.debug("Line search failed at iteration %d; resetting inverse Hessian", iteration)
            inv_hessian = _initial_inverse_hessian(g)
            updates = 0
            just_reset = True
            continue
        just_reset = False

        s = search.step * direction
        x_new = x + s
        g_new = search.gradient
        y = g_new - g
        ys = float(np.dot(y, s))

        if ys > _CURVATURE_EPS * float(np.linalg.norm(s)) * float(np.linalg.norm(y)):
            if updates == 0:
                inv_hessian = np.eye(n) * (ys / float(np.dot(y, y)))
            inv_hessian = _bfgs_update(inv_hessian, s, y, ys)
            updates += 1
        else:
            logger.debug("Skipping BFGS update at iteration %d: curvature y's = %g", iteration, ys)

        x, fx, g = x_new, search.value, g_new
        iteration += 1
        logger.debug("Iteration %d: f=%.10g |g|=%.3g step=%.3g",
                     iteration, fx, float(np.linalg.norm(g)), search.step)

        if callback is not None:
            callback(iteration, x.copy(), fx)

        if float(np.linalg.norm(s)) <= steptol * max(1.0, float(np.linalg.norm(x))):
            status = OptimizationStatus.CONVERGED
            message = "Step tolerance satisfied"
            break

    logger.info("BFGS finished after %d iterations (%s): f=%.10g",
                iteration, status.value, fx)

    return OptimizeResult(
        x=x,
        fun=fx,
        inverse_hessian=inv_hessian,
        gradient=g,
        status=status,
        iterations=iteration,
        evaluations=evaluations,
        message=message,
    )
