'''
Custom exception and warning classes for arimafit.

This module defines the exception hierarchy used throughout the package. Every
error carries a primary message, optional details and a context dictionary that
is rendered into the final message together with the location that raised it.

Structural problems (bad orders, too little data, invalid parameters) are raised
before any optimization work starts. Problems that arise during optimization are
either reported through warnings (non-convergence by default) or raised as
dedicated errors (cancellation, or non-convergence when the caller asks for it).
'''

from typing import Any, Dict, Optional, Sequence, Tuple, Union
import inspect
import warnings
import numpy as np
from pathlib import Path


def _format_message(message: str,
                    details: Optional[str],
                    context: Optional[Dict[str, Any]],
                    frame: Any) -> str:
    """Assemble the full text of an error or warning."""
    full_message = message
    if details:
        full_message += f"\n\nDetails: {details}"

    if context:
        context_str = "\n".join(f"  {k}: {v}" for k, v in context.items())
        full_message += f"\n\nContext:\n{context_str}"

    if frame is not None:
        caller_info = inspect.getframeinfo(frame)
        full_message += f"\n\nLocation: {Path(caller_info.filename).name}:{caller_info.lineno}"

    return full_message


def _caller_frame() -> Any:
    """Return the first frame outside this module."""
    frame = inspect.currentframe()
    try:
        while frame is not None and frame.f_code.co_filename == __file__:
            frame = frame.f_back
        return frame
    finally:
        del frame


class ArimaError(Exception):
    """Base exception class for all arimafit errors.

    Attributes:
        message: The error message
        details: Additional details about the error
        context: Dictionary containing contextual information about the error
    """

    def __init__(self,
                 message: str,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        """Initialize the ArimaError.

        Args:
            message: The primary error message
            details: Additional details about the error
            context: Dictionary containing contextual information about the error
        """
        self.message = message
        self.details = details
        self.context = context or {}

        frame = _caller_frame()
        try:
            full_message = _format_message(message, details, context, frame)
        finally:
            del frame  # Avoid reference cycles

        super().__init__(full_message)


class ParameterError(ArimaError):
    """Exception raised for errors related to model or optimizer parameters.

    Attributes:
        param_name: The name of the parameter that caused the error
        param_value: The invalid parameter value
        constraint: Description of the constraint that was violated
    """

    def __init__(self,
                 message: str,
                 param_name: Optional[str] = None,
                 param_value: Optional[Any] = None,
                 constraint: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        """Initialize the ParameterError.

        Args:
            message: The primary error message
            param_name: The name of the parameter that caused the error
            param_value: The invalid parameter value
            constraint: Description of the constraint that was violated
            details: Additional details about the error
            context: Dictionary containing contextual information about the error
        """
        self.param_name = param_name
        self.param_value = param_value
        self.constraint = constraint

        context_dict = context or {}
        if param_name:
            context_dict["Parameter"] = param_name
        if param_value is not None:
            context_dict["Value"] = param_value
        if constraint:
            context_dict["Constraint"] = constraint

        super().__init__(message, details, context_dict)


class InvalidOrderError(ParameterError):
    """Exception raised when an ARIMA order is structurally invalid.

    Raised for negative orders, seasonal terms without a usable seasonal
    period, or trend terms that are incompatible with the differencing orders.
    """
    pass


class DimensionError(ArimaError):
    """Exception raised for errors related to array dimensions.

    Attributes:
        array_name: The name of the array that caused the error
        expected_shape: The expected shape of the array
        actual_shape: The actual shape of the array
    """

    def __init__(self,
                 message: str,
                 array_name: Optional[str] = None,
                 expected_shape: Optional[Union[Tuple[int, ...], str]] = None,
                 actual_shape: Optional[Tuple[int, ...]] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.array_name = array_name
        self.expected_shape = expected_shape
        self.actual_shape = actual_shape

        context_dict = context or {}
        if array_name:
            context_dict["Array"] = array_name
        if expected_shape is not None:
            context_dict["Expected Shape"] = expected_shape
        if actual_shape is not None:
            context_dict["Actual Shape"] = actual_shape

        super().__init__(message, details, context_dict)


class DataError(ArimaError):
    """Exception raised for errors related to input data.

    This exception is used when input data contains missing or non-finite
    values, or is otherwise unsuitable for the requested operation.

    Attributes:
        data_name: The name of the data that caused the error
        issue: Description of the issue with the data
        index: The index or location where the issue was detected
    """

    def __init__(self,
                 message: str,
                 data_name: Optional[str] = None,
                 issue: Optional[str] = None,
                 index: Optional[Union[int, Tuple[int, ...], str]] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        """Initialize the DataError.

        Args:
            message: The primary error message
            data_name: The name of the data that caused the error
            issue: Description of the issue with the data
            index: The index or location where the issue was detected
            details: Additional details about the error
            context: Dictionary containing contextual information about the error
        """
        self.data_name = data_name
        self.issue = issue
        self.index = index

        context_dict = context or {}
        if data_name:
            context_dict["Data"] = data_name
        if issue:
            context_dict["Issue"] = issue
        if index is not None:
            context_dict["Index"] = index

        super().__init__(message, details, context_dict)


class InsufficientDataError(DataError):
    """Exception raised when a series is too short for the requested operation.

    Attributes:
        required: The minimum number of observations needed
        available: The number of observations supplied
    """

    def __init__(self,
                 message: str,
                 required: Optional[int] = None,
                 available: Optional[int] = None,
                 data_name: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.required = required
        self.available = available

        context_dict = context or {}
        if required is not None:
            context_dict["Required"] = required
        if available is not None:
            context_dict["Available"] = available

        super().__init__(message, data_name=data_name, issue="insufficient data",
                         details=details, context=context_dict)


class ConvergenceError(ArimaError):
    """Exception raised when an optimization fails to converge.

    Attributes:
        iterations: The number of iterations performed before failure
        tolerance: The convergence tolerance that was used
        final_value: The final objective function value
        gradient_norm: The norm of the final gradient
    """

    def __init__(self,
                 message: str,
                 iterations: Optional[int] = None,
                 tolerance: Optional[float] = None,
                 final_value: Optional[float] = None,
                 gradient_norm: Optional[float] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        """Initialize the ConvergenceError.

        Args:
            message: The primary error message
            iterations: The number of iterations performed before failure
            tolerance: The convergence tolerance that was used
            final_value: The final objective function value
            gradient_norm: The norm of the final gradient
            details: Additional details about the error
            context: Dictionary containing contextual information about the error
        """
        self.iterations = iterations
        self.tolerance = tolerance
        self.final_value = final_value
        self.gradient_norm = gradient_norm

        context_dict = context or {}
        if iterations is not None:
            context_dict["Iterations"] = iterations
        if tolerance is not None:
            context_dict["Tolerance"] = tolerance
        if final_value is not None:
            context_dict["Final Value"] = final_value
        if gradient_norm is not None:
            context_dict["Gradient Norm"] = gradient_norm

        super().__init__(message, details, context_dict)


class NonConvergenceError(ConvergenceError):
    """Exception raised for a fit that stopped before convergence.

    This is only raised when the caller opts in; by default the fitted model is
    returned with its ``converged`` flag cleared and a ConvergenceWarning.

    Attributes:
        model: The fitted model flagged as not converged
    """

    def __init__(self,
                 message: str,
                 model: Any = None,
                 iterations: Optional[int] = None,
                 tolerance: Optional[float] = None,
                 final_value: Optional[float] = None,
                 gradient_norm: Optional[float] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.model = model
        super().__init__(message, iterations, tolerance, final_value,
                         gradient_norm, details, context)


class InterruptedFitError(ArimaError):
    """Exception raised when a fit is cancelled through its cancellation token.

    Attributes:
        iterations: Iterations completed before cancellation was observed
        best_coefficients: The best coefficient vector found before stopping
        best_value: Objective value at ``best_coefficients``
    """

    def __init__(self,
                 message: str,
                 iterations: Optional[int] = None,
                 best_coefficients: Optional[Sequence[float]] = None,
                 best_value: Optional[float] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.iterations = iterations
        self.best_coefficients = (None if best_coefficients is None
                                  else np.asarray(best_coefficients, dtype=np.float64))
        self.best_value = best_value

        context_dict = context or {}
        if iterations is not None:
            context_dict["Iterations"] = iterations
        if best_value is not None:
            context_dict["Best Value"] = best_value

        super().__init__(message, details, context_dict)


class ConfigurationError(ArimaError):
    """Exception raised for errors in configuration settings.

    Attributes:
        section: The configuration section that caused the error
        option: The configuration option that caused the error
        value: The invalid configuration value
    """

    def __init__(self,
                 message: str,
                 section: Optional[str] = None,
                 option: Optional[str] = None,
                 value: Optional[Any] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.section = section
        self.option = option
        self.value = value

        context_dict = context or {}
        if section:
            context_dict["Section"] = section
        if option:
            context_dict["Option"] = option
        if value is not None:
            context_dict["Value"] = value

        super().__init__(message, details, context_dict)


class ArimaWarning(Warning):
    """Base warning class for all arimafit warnings.

    Attributes:
        message: The warning message
        details: Additional details about the warning
        context: Dictionary containing contextual information about the warning
    """

    def __init__(self,
                 message: str,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details
        self.context = context or {}

        frame = _caller_frame()
        try:
            full_message = _format_message(message, details, context, frame)
        finally:
            del frame

        super().__init__(full_message)


class ConvergenceWarning(ArimaWarning):
    """Warning for a fit that terminated without meeting its convergence test.

    Attributes:
        iterations: The number of iterations performed
        tolerance: The convergence tolerance that was used
        gradient_norm: The norm of the final gradient
    """

    def __init__(self,
                 message: str,
                 iterations: Optional[int] = None,
                 tolerance: Optional[float] = None,
                 gradient_norm: Optional[float] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.iterations = iterations
        self.tolerance = tolerance
        self.gradient_norm = gradient_norm

        context_dict = context or {}
        if iterations is not None:
            context_dict["Iterations"] = iterations
        if tolerance is not None:
            context_dict["Tolerance"] = tolerance
        if gradient_norm is not None:
            context_dict["Gradient Norm"] = gradient_norm

        super().__init__(message, details, context_dict)


class NumericWarning(ArimaWarning):
    """Warning for numerical issues that do not prevent computation.

    Attributes:
        operation: The operation where the issue was detected
        issue: Description of the numerical issue
        value: The value that may cause numerical issues
    """

    def __init__(self,
                 message: str,
                 operation: Optional[str] = None,
                 issue: Optional[str] = None,
                 value: Optional[Any] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.operation = operation
        self.issue = issue
        self.value = value

        context_dict = context or {}
        if operation:
            context_dict["Operation"] = operation
        if issue:
            context_dict["Issue"] = issue
        if value is not None:
            if isinstance(value, np.ndarray) and value.size > 10:
                # Truncate large arrays for readability
                context_dict["Value"] = f"Array with shape {value.shape}"
            else:
                context_dict["Value"] = value

        super().__init__(message, details, context_dict)


def warn_convergence(message: str,
                     iterations: Optional[int] = None,
                     tolerance: Optional[float] = None,
                     gradient_norm: Optional[float] = None,
                     details: Optional[str] = None,
                     context: Optional[Dict[str, Any]] = None) -> None:
    """Issue a ConvergenceWarning with consistent formatting.

    Args:
        message: The primary warning message
        iterations: The number of iterations performed
        tolerance: The convergence tolerance that was used
        gradient_norm: The norm of the final gradient
        details: Additional details about the warning
        context: Dictionary containing contextual information about the warning
    """
    warnings.warn(
        ConvergenceWarning(message, iterations, tolerance, gradient_norm, details, context),
        stacklevel=2
    )


def warn_numeric(message: str,
                 operation: Optional[str] = None,
                 issue: Optional[str] = None,
                 value: Optional[Any] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
    """Issue a NumericWarning with consistent formatting.

    Args:
        message: The primary warning message
        operation: The operation where the issue was detected
        issue: Description of the numerical issue
        value: The value that may cause numerical issues
        details: Additional details about the warning
        context: Dictionary containing contextual information about the warning
    """
    warnings.warn(
        NumericWarning(message, operation, issue, value, details, context),
        stacklevel=2
    )
