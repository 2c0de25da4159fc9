"""
Seasonal ARIMA model estimation.

:class:`ArimaModel` drives a fit through its stages: validate and difference the
series, minimize the chosen objective with BFGS, and derive the statistics of
the final coefficients. The outcome is an immutable :class:`FittedArima` that
can be queried and forecast from any thread.

Two modes are supported:

* Estimation, when an :class:`ArimaOrder` is given. CSS and ML minimize a single
  objective; CSS_ML minimizes the conditional sum of squares first and starts a
  separate maximum likelihood optimization from its optimum.
* Evaluation, when :class:`ArimaCoefficients` are given. No optimization runs and
  the statistics are those of the supplied coefficients, identical to an
  estimation seeded at those coefficients with a budget of zero iterations.

Examples:
    >>> import numpy as np
    >>> from arimafit import ArimaOrder, fit_arima
    >>> rng = np.random.default_rng(0)
    >>> y = np.cumsum(rng.standard_normal(200))
    >>> model = fit_arima(y, order=ArimaOrder(1, 1, 0))
    >>> model.point_forecast(3).shape
    (3,)
"""

import asyncio
import functools
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np
import pandas as pd
from scipy import stats

from arimafit.core.config import get_optimizer_config
from arimafit.core.exceptions import (
    InsufficientDataError, InterruptedFitError, InvalidOrderError, NonConvergenceError,
    ParameterError, warn_convergence, warn_numeric
)
from arimafit.core.types import CovarianceMatrix, PeriodLike, ProgressCallback, TimeSeriesData
from arimafit.core.validation import validate_non_negative_int, validate_series
from arimafit.models.time_series import forecast as forecasting
from arimafit.models.time_series.coefficients import ArimaCoefficients, trend_regressors
from arimafit.models.time_series.differencing import difference
from arimafit.models.time_series.objective import Evaluation, evaluate, is_admissible, make_objective
from arimafit.models.time_series.order import ArimaOrder, FittingStrategy
from arimafit.optim import INFEASIBLE, CancellationToken, OptimizationStatus, minimize
from arimafit.utils.date_utils import ONE_YEAR, infer_observation_period, observations_per_cycle
from arimafit.utils.differentiation import hessian_2sided

logger = logging.getLogger("arimafit.models.time_series.arima")


class FitState(str, Enum):
    """Progress of an :class:`ArimaModel` through a fit."""
    UNFITTED = "unfitted"
    DIFFERENCING = "differencing"
    OPTIMIZING = "optimizing"
    FINALIZED = "finalized"
    INTERRUPTED = "interrupted"


OrderLike = Union[ArimaOrder, Sequence[int]]


def _coerce_order(order: OrderLike) -> ArimaOrder:
    if isinstance(order, ArimaOrder):
        return order
    values = tuple(order)
    if len(values) == 3:
        return ArimaOrder(*values)
    if len(values) == 6:
        return ArimaOrder.of(values[:3], values[3:])
    raise InvalidOrderError(
        "Order must be an ArimaOrder, (p, d, q) or (p, d, q, P, D, Q)",
        param_name="order",
        param_value=order
    )


@dataclass
class ArimaConfig:
    """Configuration of an ARIMA fit.

    Exactly one of ``order`` (estimate coefficients) and ``coefficients``
    (evaluate the given coefficients) must be supplied.

    Attributes:
        order: Model order to estimate; a tuple (p, d, q) or (p, d, q, P, D, Q) is accepted
        coefficients: Fixed coefficients to evaluate
        strategy: Estimation objective, CSS_ML by default
        seasonal_cycle: Length of the seasonal cycle, one year by default
        observation_period: Time between observations. Inferred from a
            DatetimeIndex or PeriodIndex when None, otherwise one year
        seasonal_frequency: Observations per seasonal cycle. Overrides the
            cycle and observation period when given
        initial_coefficients: Starting point of the optimization
        max_iter: Iteration budget per optimization stage
        gradient_tolerance: Relative gradient tolerance of the optimizer
        step_tolerance: Relative step tolerance of the optimizer
        raise_on_nonconvergence: Raise NonConvergenceError instead of warning
    """
    order: Optional[OrderLike] = None
    coefficients: Optional[ArimaCoefficients] = None
    strategy: Union[FittingStrategy, str] = FittingStrategy.CSS_ML
    seasonal_cycle: PeriodLike = field(default_factory=lambda: ONE_YEAR)
    observation_period: Optional[PeriodLike] = None
    seasonal_frequency: Optional[int] = None
    initial_coefficients: Optional[ArimaCoefficients] = None
    max_iter: Optional[int] = None
    gradient_tolerance: Optional[float] = None
    step_tolerance: Optional[float] = None
    raise_on_nonconvergence: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if (self.order is None) == (self.coefficients is None):
            raise ParameterError(
                "Exactly one of order and coefficients must be given",
                param_name="order",
                param_value=self.order,
                constraint="order XOR coefficients"
            )
        if self.order is not None:
            self.order = _coerce_order(self.order)
        self.strategy = FittingStrategy.parse(self.strategy)

        if self.seasonal_frequency is not None:
            self.seasonal_frequency = validate_non_negative_int(
                self.seasonal_frequency, "seasonal_frequency", error_cls=InvalidOrderError)

        if self.initial_coefficients is not None:
            if self.order is None:
                raise ParameterError(
                    "initial_coefficients can only be used when estimating an order",
                    param_name="initial_coefficients"
                )
            if self.initial_coefficients.order != self.order:
                raise ParameterError(
                    "initial_coefficients do not match the model order",
                    param_name="initial_coefficients",
                    param_value=str(self.initial_coefficients.order),
                    constraint=str(self.order)
                )

    @property
    def evaluate_only(self) -> bool:
        return self.coefficients is not None

    @property
    def model_order(self) -> ArimaOrder:
        return self.order if self.order is not None else self.coefficients.order


def _read_only(array: np.ndarray) -> np.ndarray:
    array = np.array(array, dtype=np.float64, copy=True)
    array.setflags(write=False)
    return array


@dataclass(frozen=True, eq=False)
class FittedArima:
    """An immutable fitted ARIMA model.

    Attributes:
        time_series: The original observations
        index: Index of the observations, when the input carried one
        order: Model order
        coefficients: Estimated or supplied coefficients
        strategy: Estimation objective
        seasonal_frequency: Observations per seasonal cycle
        differenced: The differenced series
        residuals: Residuals aligned with ``time_series``; the first d + D*s are zero
        fitted_values: ``time_series - residuals``
        sigma2: Innovation variance
        log_likelihood: Gaussian log-likelihood
        cov_params: Approximate covariance of the coefficient estimates
        std_errors: Standard errors of the coefficients
        converged: Whether every optimization stage converged
        iterations: Total optimizer iterations
        evaluate_only: True when the coefficients were supplied, not estimated
        message: Termination message of the last optimization stage
    """
    time_series: np.ndarray
    index: Optional[pd.Index]
    order: ArimaOrder
    coefficients: ArimaCoefficients
    strategy: FittingStrategy
    seasonal_frequency: int
    differenced: np.ndarray
    residuals: np.ndarray
    fitted_values: np.ndarray
    sigma2: float
    log_likelihood: float
    cov_params: CovarianceMatrix
    std_errors: np.ndarray
    converged: bool = True
    iterations: int = 0
    evaluate_only: bool = False
    message: str = ""

    def __post_init__(self) -> None:
        for name in ("time_series", "differenced", "residuals", "fitted_values",
                     "cov_params", "std_errors"):
            object.__setattr__(self, name, _read_only(getattr(self, name)))

    @property
    def nobs(self) -> int:
        """Number of observations in the original series."""
        return int(self.time_series.shape[0])

    @property
    def n_parameters(self) -> int:
        """Number of estimated parameters, the innovation variance included."""
        return self.order.n_coefficients + 1

    @property
    def aic(self) -> float:
        """Akaike information criterion, 2k - 2 log L."""
        return 2.0 * self.n_parameters - 2.0 * self.log_likelihood

    @property
    def parameter_names(self) -> List[str]:
        return ArimaCoefficients.parameter_names(self.order)

    def point_forecast(self, steps: int) -> np.ndarray:
        """Point forecasts for the next ``steps`` periods."""
        return forecasting.point_forecast(self, steps)

    def forecast(self, steps: int, alpha: Optional[float] = None) -> forecasting.ArimaForecast:
        """Point forecasts with 1 - alpha prediction intervals (alpha defaults to 0.05)."""
        return forecasting.forecast(self, steps, alpha)

    def to_dict(self) -> Dict[str, Any]:
        """Summary statistics and coefficients as a plain dictionary."""
        return {
            "order": str(self.order),
            "strategy": self.strategy.value,
            "seasonal_frequency": self.seasonal_frequency,
            "coefficients": dict(zip(self.parameter_names, self.coefficients.to_array().tolist())),
            "std_errors": dict(zip(self.parameter_names, self.std_errors.tolist())),
            "sigma2": self.sigma2,
            "log_likelihood": self.log_likelihood,
            "aic": self.aic,
            "nobs": self.nobs,
            "converged": self.converged,
            "iterations": self.iterations,
        }

    def summary(self) -> str:
        """Generate a text summary of the model results.

        Returns:
            str: A formatted string containing the model results summary.
        """
        header = f"Model: {self.order}"
        if self.order.is_seasonal:
            header += f" [{self.seasonal_frequency}]"
        header += "\n" + "=" * len(header) + "\n\n"

        info = f"Method: {self.strategy.description}\n"
        if self.evaluate_only:
            info += "Coefficients: fixed\n\n"
        else:
            info += f"Convergence: {'Yes' if self.converged else 'No'}\n"
            info += f"Iterations: {self.iterations}\n\n"

        param_table = "Parameter Estimates:\n"
        param_table += "-" * 68 + "\n"
        param_table += f"{'Parameter':<15} {'Estimate':>12} {'Std. Error':>12} "
        param_table += f"{'z-stat':>12} {'p-value':>12}\n"
        param_table += "-" * 68 + "\n"
        for name, estimate, std_err in zip(self.parameter_names,
                                           self.coefficients.to_array(), self.std_errors):
            with np.errstate(divide="ignore", invalid="ignore"):
                z_stat = estimate / std_err
            p_value = 2.0 * stats.norm.sf(abs(z_stat))
            param_table += f"{name:<15} {estimate:>12.6f} {std_err:>12.6f} "
            param_table += f"{z_stat:>12.4f} {p_value:>12.4f}\n"
        param_table += "-" * 68 + "\n\n"

        fit_stats = "Model Statistics:\n"
        fit_stats += "-" * 40 + "\n"
        fit_stats += f"sigma^2: {self.sigma2:.6f}\n"
        fit_stats += f"Log-Likelihood: {self.log_likelihood:.6f}\n"
        fit_stats += f"AIC: {self.aic:.6f}\n"
        fit_stats += f"Number of observations: {self.nobs}\n"
        fit_stats += "-" * 40 + "\n"

        return header + info + param_table + fit_stats

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FittedArima):
            return NotImplemented
        return (np.array_equal(self.time_series, other.time_series)
                and self.order == other.order
                and self.coefficients == other.coefficients
                and self.strategy == other.strategy)

    def __hash__(self) -> int:
        return hash((self.time_series.tobytes(), self.order, self.coefficients, self.strategy))

    def __repr__(self) -> str:
        return (f"FittedArima({self.order}, strategy={self.strategy.value}, "
                f"sigma2={self.sigma2:.6g}, log_likelihood={self.log_likelihood:.6g})")


@dataclass(frozen=True)
class _Problem:
    """Differenced data and model structure shared by all stages of a fit."""
    values: np.ndarray
    index: Optional[pd.Index]
    order: ArimaOrder
    seasonal_frequency: int
    differenced: np.ndarray
    regressors: np.ndarray

    def objective(self, strategy: FittingStrategy):
        return make_objective(self.differenced, self.order, strategy,
                              self.seasonal_frequency, self.regressors)

    def evaluate(self, x: np.ndarray, strategy: FittingStrategy) -> Evaluation:
        return evaluate(x, self.differenced, self.order, strategy,
                        self.seasonal_frequency, self.regressors)


def _covariance_from_hessian(hessian: np.ndarray, scale: float) -> np.ndarray:
    """Scaled inverse of a numerical Hessian, NaN when it cannot be inverted."""
    k = hessian.shape[0]
    if k == 0:
        return np.zeros((0, 0))
    if np.all(np.isfinite(hessian)):
        try:
            return scale * np.linalg.inv(hessian)
        except np.linalg.LinAlgError:
            pass
    warn_numeric(
        "Hessian of the objective could not be inverted",
        operation="covariance",
        issue="standard errors set to NaN",
        value=hessian
    )
    return np.full((k, k), np.nan)


def _standard_errors(cov: np.ndarray) -> np.ndarray:
    diag = np.diag(cov).copy()
    with np.errstate(invalid="ignore"):
        return np.sqrt(np.where(diag >= 0, diag, np.nan))


def _final_strategy(strategy: FittingStrategy) -> FittingStrategy:
    return FittingStrategy.CSS if strategy is FittingStrategy.CSS else FittingStrategy.ML


def _covariance_scale(strategy: FittingStrategy, sigma2: float) -> float:
    # The CSS objective is a sum of squares rather than a negative log-likelihood
    return 2.0 * sigma2 if strategy is FittingStrategy.CSS else 1.0


class ArimaModel:
    """Seasonal ARIMA model estimator.

    Attributes:
        config: The fit configuration
        state: Current stage of the fit
        result: The fitted model once the fit has finished
    """

    def __init__(self, config: Optional[ArimaConfig] = None, **kwargs: Any) -> None:
        """Initialize the model.

        Args:
            config: Fit configuration. When omitted, keyword arguments are
                forwarded to :class:`ArimaConfig`
            **kwargs: ArimaConfig fields, only valid without ``config``

        Raises:
            TypeError: If both a config and keyword arguments are given
        """
        if config is None:
            config = ArimaConfig(**kwargs)
        elif kwargs:
            raise TypeError("Pass either an ArimaConfig or keyword arguments, not both")
        self._config = config
        self._state = FitState.UNFITTED
        self._result: Optional[FittedArima] = None

    @property
    def config(self) -> ArimaConfig:
        return self._config

    @property
    def state(self) -> FitState:
        return self._state

    @property
    def result(self) -> Optional[FittedArima]:
        return self._result

    def _seasonal_frequency(self, order: ArimaOrder, index: Optional[pd.Index]) -> int:
        cfg = self._config
        if cfg.seasonal_frequency is not None:
            frequency = cfg.seasonal_frequency
        else:
            period = cfg.observation_period
            if period is None:
                period = infer_observation_period(index)
            if period is None:
                period = ONE_YEAR
            frequency = observations_per_cycle(period, cfg.seasonal_cycle)

        if frequency < 1:
            if order.is_seasonal:
                raise InvalidOrderError(
                    "Seasonal terms require at least one observation per seasonal cycle",
                    param_name="seasonal_frequency",
                    param_value=frequency,
                    constraint="seasonal_frequency >= 1"
                )
            frequency = 1
        return frequency

    def _prepare(self, data: TimeSeriesData) -> _Problem:
        order = self._config.model_order
        values, index = validate_series(data)
        s = self._seasonal_frequency(order, index)

        n = values.shape[0]
        required = order.lost_observations(s) + order.conditioning_length(s) + 1
        if n < required:
            raise InsufficientDataError(
                f"Series of length {n} is too short for {order} with seasonal frequency {s}",
                required=required,
                available=n,
                data_name="data"
            )

        differenced = difference(values, order.d, order.D, s)
        design = trend_regressors(order, np.arange(1, n + 1))
        if design.shape[1]:
            regressors = np.column_stack([difference(design[:, j], order.d, order.D, s)
                                          for j in range(design.shape[1])])
        else:
            regressors = np.zeros((differenced.shape[0], 0))

        return _Problem(values, index, order, s, differenced, regressors)

    def _initial_point(self, problem: _Problem) -> np.ndarray:
        if self._config.initial_coefficients is not None:
            return self._config.initial_coefficients.to_array()

        order = problem.order
        x0 = np.zeros(order.n_coefficients)
        if order.n_regressors:
            beta = np.linalg.lstsq(problem.regressors, problem.differenced, rcond=None)[0]
            x0[order.n_coefficients - order.n_regressors:] = beta
        return x0

    def _finalize(self, problem: _Problem, x: np.ndarray, strategy: FittingStrategy,
                  evaluation: Evaluation, cov: np.ndarray, converged: bool,
                  iterations: int, message: str,
                  coefficients: Optional[ArimaCoefficients] = None) -> FittedArima:
        lost = problem.order.lost_observations(problem.seasonal_frequency)
        residuals = np.zeros(problem.values.shape[0])
        residuals[lost:] = evaluation.residuals

        if coefficients is None:
            coefficients = ArimaCoefficients.from_array(x, problem.order)

        return FittedArima(
            time_series=problem.values,
            index=problem.index,
            order=problem.order,
            coefficients=coefficients,
            strategy=strategy,
            seasonal_frequency=problem.seasonal_frequency,
            differenced=problem.differenced,
            residuals=residuals,
            fitted_values=problem.values - residuals,
            sigma2=evaluation.sigma2,
            log_likelihood=evaluation.log_likelihood,
            cov_params=cov,
            std_errors=_standard_errors(cov),
            converged=converged,
            iterations=iterations,
            evaluate_only=self._config.evaluate_only,
            message=message,
        )

    def fit(self,
            data: TimeSeriesData,
            cancellation_token: Optional[CancellationToken] = None,
            progress_callback: Optional[ProgressCallback] = None) -> FittedArima:
        """Fit the model to a series.

        Args:
            data: Observations as a NumPy array, pandas Series or sequence
            cancellation_token: Token checked once per optimizer iteration
            progress_callback: Called as ``progress_callback(fraction, message)``

        Returns:
            FittedArima: The fitted model

        Raises:
            DataError: If the series contains NaN or infinite values
            InsufficientDataError: If the series is too short for the order
            InvalidOrderError: If seasonal terms lack a usable seasonal frequency
            ParameterError: If fixed or initial coefficients are not stationary
                and invertible
            InterruptedFitError: If the fit was cancelled
            NonConvergenceError: If the optimizer did not converge and
                ``raise_on_nonconvergence`` is set
        """
        cfg = self._config
        self._result = None
        self._state = FitState.DIFFERENCING
        try:
            problem = self._prepare(data)
        except Exception:
            self._state = FitState.UNFITTED
            raise

        if cfg.evaluate_only:
            result = self._evaluate_fixed(problem)
        else:
            self._state = FitState.OPTIMIZING
            result = self._estimate(problem, cancellation_token, progress_callback)

        self._result = result
        self._state = FitState.FINALIZED
        logger.info("Fitted %s: sigma2=%.6g, log-likelihood=%.6g, aic=%.6g",
                    result.order, result.sigma2, result.log_likelihood, result.aic)
        if progress_callback is not None:
            progress_callback(1.0, "ARIMA estimation complete")

        if not result.converged:
            if cfg.raise_on_nonconvergence:
                raise NonConvergenceError(
                    f"Estimation of {result.order} did not converge",
                    model=result,
                    iterations=result.iterations,
                    final_value=-result.log_likelihood,
                    details=result.message
                )
            warn_convergence(
                f"Estimation of {result.order} did not converge; "
                "the returned coefficients may be unreliable",
                iterations=result.iterations,
                details=result.message
            )
        return result

    def _evaluate_fixed(self, problem: _Problem) -> FittedArima:
        coefficients = self._config.coefficients
        if not is_admissible(coefficients):
            self._state = FitState.UNFITTED
            raise ParameterError(
                "Fixed coefficients are not stationary and invertible",
                param_name="coefficients",
                param_value=coefficients,
                constraint="all AR and MA roots outside the unit circle"
            )

        strategy = _final_strategy(self._config.strategy)
        x = coefficients.to_array()
        evaluation = problem.evaluate(x, strategy)
        if not evaluation.admissible:
            self._state = FitState.UNFITTED
            raise ParameterError(
                "Objective cannot be evaluated at the fixed coefficients",
                param_name="coefficients",
                param_value=coefficients
            )

        hessian = hessian_2sided(problem.objective(strategy), x)
        cov = _covariance_from_hessian(hessian, _covariance_scale(strategy, evaluation.sigma2))
        return self._finalize(problem, x, self._config.strategy, evaluation, cov, True, 0,
                              "Coefficients supplied", coefficients=coefficients)

    def _estimate(self, problem: _Problem,
                  cancellation_token: Optional[CancellationToken],
                  progress_callback: Optional[ProgressCallback]) -> FittedArima:
        cfg = self._config
        strategy = cfg.strategy
        stages = ([FittingStrategy.CSS, FittingStrategy.ML] if strategy is FittingStrategy.CSS_ML
                  else [strategy])

        x0 = self._initial_point(problem)
        if not is_admissible(ArimaCoefficients.from_array(x0, problem.order)):
            self._state = FitState.UNFITTED
            raise ParameterError(
                "Initial coefficients are not stationary and invertible",
                param_name="initial_coefficients",
                param_value=x0
            )

        budget = cfg.max_iter if cfg.max_iter is not None else get_optimizer_config().max_iter
        x = x0
        iterations = 0
        converged = True
        result = None
        for stage_number, stage in enumerate(stages):
            objective = problem.objective(stage)
            if stage_number > 0 and not objective(x) < INFEASIBLE:
                logger.warning("%s objective undefined at the previous optimum; "
                               "restarting from initial values", stage.value.upper())
                x = x0

            callback = None
            if progress_callback is not None:
                callback = self._progress_reporter(progress_callback, stage, stage_number,
                                                   len(stages), budget)

            logger.debug("Starting %s optimization of %s from %s", stage.value, problem.order, x)
            result = minimize(objective, x,
                              gradient_tolerance=cfg.gradient_tolerance,
                              step_tolerance=cfg.step_tolerance,
                              max_iter=cfg.max_iter,
                              cancellation_token=cancellation_token,
                              callback=callback)
            iterations += result.iterations

            if result.status is OptimizationStatus.CANCELLED:
                self._state = FitState.INTERRUPTED
                raise InterruptedFitError(
                    f"Fit of {problem.order} was cancelled during the {stage.value} stage",
                    iterations=iterations,
                    best_coefficients=result.x,
                    best_value=result.fun
                )
            if result.status is not OptimizationStatus.CONVERGED:
                converged = False
            x = result.x

        final = stages[-1]
        evaluation = problem.evaluate(x, final)
        cov = _covariance_scale(final, evaluation.sigma2) * result.inverse_hessian
        return self._finalize(problem, x, strategy, evaluation, cov, converged,
                              iterations, result.message)

    @staticmethod
    def _progress_reporter(progress_callback: ProgressCallback, stage: FittingStrategy,
                           stage_number: int, n_stages: int, max_iter: int):
        max_iter = max(1, max_iter)

        def report(iteration: int, x: np.ndarray, value: float) -> None:
            fraction = (stage_number + min(iteration / max_iter, 1.0)) / n_stages
            progress_callback(min(fraction, 0.99),
                              f"{stage.value.upper()} iteration {iteration}: objective {value:.6g}")

        return report

    async def fit_async(self,
                        data: TimeSeriesData,
                        progress_callback: Optional[ProgressCallback] = None,
                        cancellation_token: Optional[CancellationToken] = None) -> FittedArima:
        """Asynchronously fit the model to a series.

        The fit runs in the default executor. Cancelling the awaiting task
        cancels the fit through its cancellation token.

        Args:
            data: Observations as a NumPy array, pandas Series or sequence
            progress_callback: Called as ``progress_callback(fraction, message)``
            cancellation_token: Token to share with other fits; a private token
                is used when None

        Returns:
            FittedArima: The fitted model
        """
        loop = asyncio.get_running_loop()
        token = cancellation_token if cancellation_token is not None else CancellationToken()

        if progress_callback:
            progress_callback(0.0, "Starting ARIMA estimation...")

        fit_call = functools.partial(self.fit, data, cancellation_token=token,
                                     progress_callback=progress_callback)
        try:
            return await loop.run_in_executor(None, fit_call)
        except asyncio.CancelledError:
            token.cancel()
            raise

    def __repr__(self) -> str:
        return f"ArimaModel({self._config.model_order}, state={self._state.value})"


def fit_arima(data: TimeSeriesData,
              order: Optional[OrderLike] = None,
              coefficients: Optional[ArimaCoefficients] = None,
              strategy: Union[FittingStrategy, str] = FittingStrategy.CSS_ML,
              cancellation_token: Optional[CancellationToken] = None,
              **options: Any) -> FittedArima:
    """Fit or evaluate an ARIMA model in one call.

    Args:
        data: Observations as a NumPy array, pandas Series or sequence
        order: Model order to estimate
        coefficients: Fixed coefficients to evaluate instead of estimating
        strategy: Estimation objective, CSS_ML by default
        cancellation_token: Token checked once per optimizer iteration
        **options: Further :class:`ArimaConfig` fields

    Returns:
        FittedArima: The fitted model
    """
    config = ArimaConfig(order=order, coefficients=coefficients, strategy=strategy, **options)
    return ArimaModel(config).fit(data, cancellation_token=cancellation_token)
