"""
Numerical Differentiation Module

Finite-difference gradients and Hessians of scalar objective functions. The
optimizer uses :func:`gradient_2sided` whenever no analytic gradient is
supplied, and the model orchestrator uses :func:`hessian_2sided` to obtain
standard errors for coefficients that were supplied rather than estimated.

Objectives in this package signal points outside their domain (for example a
non-stationary AR polynomial) by returning a non-finite value or the largest
representable float. Both functions detect such values. The gradient falls back
to a one-sided difference on the side that stays inside the domain.

Functions:
    gradient_2sided: Two-sided numerical gradient with one-sided fallback
    hessian_2sided: Two-sided numerical Hessian
"""

import logging
from typing import Optional, Union

import numpy as np

from arimafit.core.config import get_optimizer_config
from arimafit.core.exceptions import DimensionError, warn_numeric
from arimafit.core.types import Matrix, ObjectiveFunction, Vector

logger = logging.getLogger("arimafit.utils.differentiation")

_DOMAIN_LIMIT = np.finfo(np.float64).max


def in_domain(value: float) -> bool:
    """Check whether an objective value is finite and below the infeasibility sentinel."""
    return bool(np.isfinite(value)) and value < _DOMAIN_LIMIT


def _as_vector(x: Vector) -> np.ndarray:
    x = np.asarray(x, dtype=np.float64)
    if x.ndim != 1:
        raise DimensionError(
            "Input must be a 1D vector",
            array_name="x",
            expected_shape="(n,)",
            actual_shape=x.shape
        )
    return x


def _step_sizes(x: np.ndarray, epsilon: Optional[Union[float, np.ndarray]],
                relative_step: float) -> np.ndarray:
    """Per-coordinate steps, scaled by max(|x_i|, 1) unless given explicitly."""
    if epsilon is None:
        h = relative_step * np.maximum(np.abs(x), 1.0)
    else:
        h = np.broadcast_to(np.asarray(epsilon, dtype=np.float64), x.shape).copy()
    # Use steps that are exactly representable as differences of x
    return (x + h) - x


def gradient_2sided(func: ObjectiveFunction,
                    x: Vector,
                    epsilon: Optional[Union[float, np.ndarray]] = None,
                    f0: Optional[float] = None) -> Vector:
    """
    Compute the two-sided numerical gradient of a scalar function.

    For each coordinate the central difference

    ∂f/∂x_i ≈ [f(x + h_i e_i) - f(x - h_i e_i)] / (2 h_i)

    is used. When one of the two probes falls outside the function's domain the
    one-sided difference on the other side is used instead, relative to
    ``f(x)``. If both probes fall outside, the component is set to zero and a
    NumericWarning is issued.

    Args:
        func: Function to differentiate, taking a vector and returning a scalar
        x: Point at which to compute the gradient
        epsilon: Absolute step size, scalar or per coordinate. If None, the
            configured relative step scaled by max(|x_i|, 1) is used
        f0: Value of ``func(x)`` if already known; only needed by the
            one-sided fallback

    Returns:
        Gradient vector of the same shape as x

    Raises:
        DimensionError: If x is not a 1D array

    Examples:
        >>> import numpy as np
        >>> from arimafit.utils.differentiation import gradient_2sided
        >>> def f(x): return x[0]**2 + x[1]**2
        >>> np.round(gradient_2sided(f, np.array([1.0, 2.0])), 6)
        array([2., 4.])
    """
    x = _as_vector(x)
    h = _step_sizes(x, epsilon, get_optimizer_config().finite_difference_step)

    n = x.shape[0]
    grad = np.zeros(n, dtype=np.float64)
    for i in range(n):
        x_plus = x.copy()
        x_minus = x.copy()
        x_plus[i] += h[i]
        x_minus[i] -= h[i]
        f_plus = float(func(x_plus))
        f_minus = float(func(x_minus))

        plus_ok = in_domain(f_plus)
        minus_ok = in_domain(f_minus)
        if plus_ok and minus_ok:
            grad[i] = (f_plus - f_minus) / (2.0 * h[i])
            continue

        if f0 is None:
            f0 = float(func(x))
        if plus_ok:
            grad[i] = (f_plus - f0) / h[i]
        elif minus_ok:
            grad[i] = (f0 - f_minus) / h[i]
        else:
            warn_numeric(
                "Both finite-difference probes left the function's domain",
                operation="gradient_2sided",
                issue=f"component {i} set to zero",
                value=x
            )

    return grad


def hessian_2sided(func: ObjectiveFunction,
                   x: Vector,
                   epsilon: Optional[Union[float, np.ndarray]] = None) -> Matrix:
    """
    Compute the two-sided numerical Hessian of a scalar function.

    Diagonal elements use

    ∂²f/∂x_i² ≈ [f(x + 2h_i e_i) - 2f(x) + f(x - 2h_i e_i)] / (4 h_i²)

    and off-diagonal elements use the four-point stencil

    ∂²f/∂x_i∂x_j ≈ [f(x+h_i e_i+h_j e_j) - f(x+h_i e_i-h_j e_j)
                    - f(x-h_i e_i+h_j e_j) + f(x-h_i e_i-h_j e_j)] / (4 h_i h_j)

    Entries whose stencil leaves the function's domain are set to NaN and a
    NumericWarning is issued.

    Args:
        func: Function to differentiate, taking a vector and returning a scalar
        x: Point at which to compute the Hessian
        epsilon: Absolute step size, scalar or per coordinate. If None, the
            configured relative Hessian step scaled by max(|x_i|, 1) is used

    Returns:
        Symmetric Hessian matrix of shape (n, n)

    Raises:
        DimensionError: If x is not a 1D array
    """
    x = _as_vector(x)
    h = _step_sizes(x, epsilon, get_optimizer_config().hessian_step)

    n = x.shape[0]
    hess = np.zeros((n, n), dtype=np.float64)
    if n == 0:
        return hess

    f0 = float(func(x))
    outside = False

    def probe(offsets: np.ndarray) -> float:
        nonlocal outside
        value = float(func(x + offsets))
        if not in_domain(value):
            outside = True
            return np.nan
        return value

    for i in range(n):
        e_i = np.zeros(n)
        e_i[i] = h[i]
        hess[i, i] = (probe(2.0 * e_i) - 2.0 * f0 + probe(-2.0 * e_i)) / (4.0 * h[i] ** 2)
        for j in range(i):
            e_j = np.zeros(n)
            e_j[j] = h[j]
            value = (probe(e_i + e_j) - probe(e_i - e_j)
                     - probe(-e_i + e_j) + probe(-e_i - e_j)) / (4.0 * h[i] * h[j])
            hess[i, j] = value
            hess[j, i] = value

    if outside:
        warn_numeric(
            "Hessian stencil left the function's domain",
            operation="hessian_2sided",
            issue="affected entries set to NaN",
            value=x
        )

    return hess
