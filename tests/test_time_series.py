# tests/test_time_series.py

"""
Tests for ARIMA estimation, evaluation and forecasting.

The test suite includes:
- Tests for model orders, coefficient layouts and differencing
- Tests for the CSS and exact likelihood objectives, including a comparison
  with the statsmodels state space likelihood
- Tests for parameter recovery on simulated series
- Tests for fixed-coefficient evaluation
- Tests for point forecasts and prediction intervals against hand-computed values
- Tests for cancellation, non-convergence and asynchronous fitting
"""

import asyncio
import dataclasses
import threading
import warnings

import numpy as np
import pandas as pd
import pytest
from hypothesis import given, settings, strategies as st
from numpy.testing import assert_allclose
from scipy import stats
from statsmodels.tsa.statespace.sarimax import SARIMAX

from arimafit import (
    ArimaCoefficients, ArimaConfig, ArimaModel, ArimaOrder, CancellationToken, Constant, Drift,
    FitState, FittedArima, FittingStrategy, difference, fit_arima, undifference
)
from arimafit.core.base import Model
from arimafit.core.exceptions import (
    ConvergenceWarning, DataError, DimensionError, InsufficientDataError, InterruptedFitError,
    InvalidOrderError, NonConvergenceError, ParameterError
)
from arimafit.models.time_series.coefficients import expand_ar, expand_ma
from arimafit.models.time_series.forecast import forecast_variance, psi_weights
from arimafit.models.time_series.objective import evaluate, is_admissible
from arimafit.optim import INFEASIBLE

from .conftest import simulate_arma


class TestArimaOrder:
    """Tests for model order validation and derived properties."""

    def test_constant_default(self):
        """Test that a constant is included only without differencing."""
        assert ArimaOrder(1, 0, 1).constant is Constant.INCLUDE
        assert ArimaOrder(1, 1, 1).constant is Constant.EXCLUDE
        assert ArimaOrder(0, 0, 0, 0, 1, 0).constant is Constant.EXCLUDE

    def test_properties(self):
        """Test derived counts for a seasonal order with drift."""
        order = ArimaOrder(2, 1, 1, 1, 0, 1, drift=Drift.INCLUDE)

        assert order.is_seasonal
        assert order.n_regressors == 1
        assert order.n_coefficients == 6
        assert order.lost_observations(12) == 1
        assert order.conditioning_length(12) == 14
        assert str(order) == "ARIMA(2,1,1)(1,0,1) with drift"

    @pytest.mark.parametrize("kwargs", [
        {"p": -1},
        {"q": 1.5},
        {"d": True},
        {"d": 1, "constant": Constant.INCLUDE},
        {"d": 1, "D": 1, "drift": Drift.INCLUDE},
        {"d": 2, "drift": Drift.INCLUDE},
    ])
    def test_invalid_orders(self, kwargs):
        """Test that invalid orders raise InvalidOrderError."""
        with pytest.raises(InvalidOrderError):
            ArimaOrder(**kwargs)

    def test_invalid_order_is_parameter_error(self):
        """Test the exception hierarchy of order errors."""
        with pytest.raises(ParameterError):
            ArimaOrder(p=-1)

    def test_strategy_parse(self):
        """Test fitting strategy parsing."""
        assert FittingStrategy.parse("CSS") is FittingStrategy.CSS
        assert FittingStrategy.parse("css_ml") is FittingStrategy.CSS_ML
        assert FittingStrategy.parse(FittingStrategy.ML) is FittingStrategy.ML
        with pytest.raises(ValueError):
            FittingStrategy.parse("bogus")


class TestArimaCoefficients:
    """Tests for the coefficient container."""

    def test_round_trip_layout(self):
        """Test that the flat vector follows the AR, MA, SAR, SMA, drift, mean layout."""
        coefs = ArimaCoefficients(ar=[0.5, -0.2], ma=[0.3], seasonal_ar=[0.4],
                                  seasonal_ma=[0.1], drift=0.01, mean=2.0)
        order = coefs.order

        assert_allclose(coefs.to_array(), [0.5, -0.2, 0.3, 0.4, 0.1, 0.01, 2.0])
        assert ArimaCoefficients.from_array(coefs.to_array(), order) == coefs
        assert ArimaCoefficients.parameter_names(order) == [
            "ar.L1", "ar.L2", "ma.L1", "ar.S.L1", "ma.S.L1", "drift", "mean"
        ]

    def test_implied_order(self):
        """Test the order implied by the coefficients."""
        order = ArimaCoefficients(ma=[0.2], d=1, drift=0.5).order

        assert (order.p, order.d, order.q) == (0, 1, 1)
        assert order.drift is Drift.INCLUDE
        assert order.constant is Constant.EXCLUDE

    def test_wrong_length(self):
        """Test that a vector of the wrong length raises DimensionError."""
        with pytest.raises(DimensionError):
            ArimaCoefficients.from_array(np.zeros(3), ArimaOrder(1, 0, 1))

    def test_non_finite(self):
        """Test that non-finite coefficients are rejected."""
        with pytest.raises(ParameterError):
            ArimaCoefficients(ar=[np.nan])

    def test_mean_with_differencing(self):
        """Test that a mean cannot be combined with differencing."""
        with pytest.raises(InvalidOrderError):
            ArimaCoefficients(mean=1.0, d=1)

    def test_admissibility(self):
        """Test stationarity and invertibility checks per factor."""
        assert is_admissible(ArimaCoefficients(ar=[0.5], seasonal_ar=[0.9]))
        assert not is_admissible(ArimaCoefficients(ar=[1.2]))
        assert not is_admissible(ArimaCoefficients(seasonal_ar=[1.0]))
        assert not is_admissible(ArimaCoefficients(ma=[-1.1]))
        assert is_admissible(ArimaCoefficients(ar=[1.2, -0.5]))

    def test_seasonal_polynomial_expansion(self):
        """Test multiplication of the non-seasonal and seasonal lag polynomials."""
        # (1 + 0.4B)(1 + 0.5B^4) and (1 - 0.4B)(1 - 0.5B^4)
        assert_allclose(expand_ma([0.4], [0.5], 4), [0.4, 0.0, 0.0, 0.5, 0.2])
        assert_allclose(expand_ar([0.4], [0.5], 4), [0.4, 0.0, 0.0, 0.5, -0.2])
        assert_allclose(expand_ma([], [0.3, -0.2], 3), [0.0, 0.0, 0.3, 0.0, 0.0, -0.2])
        assert_allclose(expand_ar([0.5, 0.1], [], 12), [0.5, 0.1])


class TestDifferencing:
    """Tests for differencing and its inverse."""

    def test_regular_differencing(self):
        """Test first and second differences."""
        y = np.array([1.0, 4.0, 9.0, 16.0])

        assert_allclose(difference(y, d=1), [3.0, 5.0, 7.0])
        assert_allclose(difference(y, d=2), [2.0, 2.0])
        assert_allclose(difference(y, d=0), y)

    def test_seasonal_differencing(self):
        """Test seasonal differencing with period 2."""
        y = np.array([1.0, 2.0, 4.0, 7.0, 11.0])

        assert_allclose(difference(y, d=0, D=1, period=2), [3.0, 5.0, 7.0])
        assert_allclose(difference(y, d=1, D=1, period=2), [2.0, 2.0])

    def test_insufficient_length(self):
        """Test that differencing more than the series length raises."""
        with pytest.raises(InsufficientDataError):
            difference(np.ones(3), d=1, D=1, period=4)

    def test_invalid_orders(self):
        """Test that negative orders raise InvalidOrderError."""
        with pytest.raises(InvalidOrderError):
            difference(np.ones(5), d=-1)
        with pytest.raises(InvalidOrderError):
            difference(np.ones(5), d=0, D=1, period=0)

    @given(
        data=st.lists(st.floats(min_value=-1e3, max_value=1e3), min_size=12, max_size=40),
        d=st.integers(min_value=0, max_value=2),
        D=st.integers(min_value=0, max_value=1),
        period=st.integers(min_value=1, max_value=4)
    )
    @settings(max_examples=50, deadline=None)
    def test_undifference_inverts_difference(self, data, d, D, period):
        """Test that undifferencing restores the original series."""
        y = np.array(data)
        lost = d + D * period
        restored = undifference(difference(y, d, D, period), y[:lost], d, D, period)

        assert_allclose(restored, y, atol=1e-6)


class TestObjective:
    """Tests for the CSS and exact likelihood objectives."""

    def test_css_residuals_ar1(self, ar1_series):
        """Test CSS residuals of an AR(1) against the difference equation."""
        order = ArimaOrder(1, 0, 0, constant=Constant.EXCLUDE)
        result = evaluate(np.array([0.6]), ar1_series, order, FittingStrategy.CSS)

        expected = np.r_[0.0, ar1_series[1:] - 0.6 * ar1_series[:-1]]
        assert_allclose(result.residuals, expected, atol=1e-12)
        assert result.value == pytest.approx(np.sum(expected ** 2))
        assert result.sigma2 == pytest.approx(np.sum(expected ** 2) / (len(ar1_series) - 1))
        assert result.n_used == len(ar1_series) - 1

    @pytest.mark.parametrize("order, seasonal_order, params", [
        ((1, 0, 1), (0, 0, 0, 0), [0.5, 0.3]),
        ((2, 0, 0), (0, 0, 0, 0), [0.4, 0.2]),
        ((0, 0, 2), (0, 0, 0, 0), [0.3, -0.2]),
        ((1, 0, 1), (1, 0, 1, 4), [0.5, 0.3, 0.4, -0.3]),
        ((0, 0, 1), (0, 0, 2, 4), [0.3, 0.4, -0.2]),
        ((1, 0, 0), (1, 0, 0, 12), [0.5, 0.3]),
    ])
    def test_ml_matches_statsmodels(self, rng, order, seasonal_order, params):
        """Test the concentrated exact log-likelihood against statsmodels."""
        w = simulate_arma(rng, 250, ar=[0.5], ma=[0.3])
        arima_order = ArimaOrder(*order, *seasonal_order[:3], constant=Constant.EXCLUDE)

        result = evaluate(np.array(params), w, arima_order, FittingStrategy.ML,
                          seasonal_frequency=max(seasonal_order[3], 1))
        reference = SARIMAX(w, order=order, seasonal_order=seasonal_order, trend="n",
                            concentrate_scale=True).loglike(np.array(params))

        assert result.admissible
        assert result.log_likelihood == pytest.approx(reference, rel=1e-6)
        assert result.value == pytest.approx(-reference, rel=1e-6)

    def test_css_ml_uses_exact_likelihood(self, ar1_series):
        """Test that CSS_ML evaluation is the exact likelihood."""
        order = ArimaOrder(1, 0, 0, constant=Constant.EXCLUDE)
        ml = evaluate(np.array([0.6]), ar1_series, order, FittingStrategy.ML)
        css_ml = evaluate(np.array([0.6]), ar1_series, order, FittingStrategy.CSS_ML)

        assert css_ml.value == ml.value

    @pytest.mark.parametrize("order, params", [
        ((1, 0, 0), [1.5]),
        ((0, 0, 1), [-1.1]),
        ((2, 0, 0), [0.5, 0.6]),
    ])
    def test_inadmissible_is_infeasible(self, ar1_series, order, params):
        """Test that inadmissible coefficients yield the INFEASIBLE penalty."""
        arima_order = ArimaOrder(*order, constant=Constant.EXCLUDE)
        for strategy in FittingStrategy:
            result = evaluate(np.array(params), ar1_series, arima_order, strategy)
            assert result.value == INFEASIBLE
            assert not result.admissible
            assert result.log_likelihood == -np.inf

    def test_css_requires_residuals(self):
        """Test that CSS needs at least one residual beyond the conditioning set."""
        with pytest.raises(InsufficientDataError):
            evaluate(np.zeros(2), np.ones(2), ArimaOrder(2, 0, 0, constant=Constant.EXCLUDE),
                     FittingStrategy.CSS)


class TestArimaModel:
    """Tests for model estimation."""

    @pytest.mark.parametrize("strategy", list(FittingStrategy))
    def test_zero_series(self, strategy):
        """Test that a constant zero series gives zero fitted values."""
        y = np.zeros(10)
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", ConvergenceWarning)
            model = fit_arima(y, order=ArimaOrder(1, 0, 1), strategy=strategy)

        assert_allclose(model.fitted_values, 0.0, atol=1e-12)
        assert_allclose(model.residuals, 0.0, atol=1e-12)
        assert model.sigma2 == pytest.approx(0.0, abs=1e-20)

    def test_arima111_recovery(self, arima111_series):
        """Test recovery of ARIMA(1,1,1) coefficients from 1000 observations."""
        model = fit_arima(arima111_series, order=ArimaOrder(1, 1, 1))

        assert model.converged
        assert model.strategy is FittingStrategy.CSS_ML
        assert abs(model.coefficients.ar[0] - 0.7) < 0.15
        assert abs(model.coefficients.ma[0] - 0.4) < 0.15
        assert abs(model.sigma2 - 1.0) < 0.15
        assert np.all(np.isfinite(model.std_errors))
        assert np.all(model.std_errors > 0)

    def test_standard_errors_match_statsmodels(self, arima111_series):
        """Test that standard errors from the inverse Hessian agree with statsmodels."""
        model = fit_arima(arima111_series, order=ArimaOrder(1, 1, 1))
        reference = SARIMAX(arima111_series, order=(1, 1, 1), trend="n").fit(disp=False)

        assert_allclose(model.coefficients.to_array(), reference.params[:2], atol=1e-2)
        assert_allclose(model.std_errors, reference.bse[:2], rtol=0.2)

    def test_css_recovery(self, arima111_series):
        """Test CSS estimation of ARIMA(1,1,1)."""
        model = fit_arima(arima111_series, order=(1, 1, 1), strategy="css")

        assert model.strategy is FittingStrategy.CSS
        assert abs(model.coefficients.ar[0] - 0.7) < 0.15
        assert abs(model.coefficients.ma[0] - 0.4) < 0.15

    def test_mean_recovery(self, ar1_series):
        """Test estimation of the process mean."""
        model = fit_arima(10.0 + ar1_series, order=ArimaOrder(1, 0, 0))

        assert model.coefficients.mean == pytest.approx(10.0, abs=0.5)
        assert abs(model.coefficients.ar[0] - 0.6) < 0.15
        assert model.parameter_names == ["ar.L1", "mean"]

    def test_drift_recovery(self, drift_series):
        """Test estimation of drift in a random walk."""
        model = fit_arima(drift_series, order=ArimaOrder(0, 1, 0, drift=Drift.INCLUDE))

        assert model.coefficients.drift == pytest.approx(2.0, abs=0.2)
        assert model.coefficients.drift == pytest.approx(np.mean(np.diff(drift_series)), abs=1e-3)

    def test_seasonal_ar_recovery(self, quarterly_seasonal_series):
        """Test estimation of a seasonal AR coefficient with period 4."""
        order = ArimaOrder(0, 0, 0, 1, 0, 0, constant=Constant.EXCLUDE)
        model = fit_arima(quarterly_seasonal_series, order=order, seasonal_frequency=4)

        assert model.seasonal_frequency == 4
        assert abs(model.coefficients.seasonal_ar[0] - 0.5) < 0.15

    def test_fitted_values_and_residuals(self, arima111_series):
        """Test the alignment of residuals and fitted values."""
        model = fit_arima(arima111_series, order=ArimaOrder(1, 1, 0), strategy="css")

        assert model.residuals.shape == arima111_series.shape
        assert model.residuals[0] == 0.0
        assert_allclose(model.fitted_values, arima111_series - model.residuals)

    def test_aic(self, ar1_series):
        """Test the AIC identity 2k - 2 log L."""
        model = fit_arima(ar1_series, order=ArimaOrder(1, 0, 0))

        assert model.n_parameters == 3
        assert model.aic == pytest.approx(2.0 * 3 - 2.0 * model.log_likelihood)

    @pytest.mark.parametrize("strategy", ["css", "ml", "css-ml"])
    def test_evaluate_only_matches_zero_iteration_fit(self, ar1_series, strategy):
        """Test that fixed coefficients give the same statistics as a zero-budget fit."""
        coefs = ArimaCoefficients(ar=[0.5], ma=[0.2], mean=0.1)

        fixed = fit_arima(ar1_series, coefficients=coefs, strategy=strategy)
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", ConvergenceWarning)
            seeded = fit_arima(ar1_series, order=coefs.order, strategy=strategy,
                               initial_coefficients=coefs, max_iter=0)

        assert fixed.evaluate_only
        assert fixed.converged
        assert fixed.iterations == 0
        assert fixed.coefficients == coefs
        assert seeded.iterations == 0
        assert fixed.sigma2 == pytest.approx(seeded.sigma2, rel=1e-12)
        assert fixed.log_likelihood == pytest.approx(seeded.log_likelihood, rel=1e-12)
        assert fixed.aic == pytest.approx(seeded.aic, rel=1e-12)
        assert_allclose(fixed.residuals, seeded.residuals, rtol=1e-12, atol=1e-14)
        assert fixed.std_errors.shape == (3,)

    def test_fixed_inadmissible_coefficients(self, ar1_series):
        """Test that non-stationary fixed coefficients are rejected."""
        model = ArimaModel(coefficients=ArimaCoefficients(ar=[1.2]))
        with pytest.raises(ParameterError):
            model.fit(ar1_series)
        assert model.state is FitState.UNFITTED

    def test_config_requires_exactly_one_mode(self):
        """Test that order and coefficients are mutually exclusive."""
        with pytest.raises(ParameterError):
            ArimaConfig()
        with pytest.raises(ParameterError):
            ArimaConfig(order=ArimaOrder(1, 0, 0), coefficients=ArimaCoefficients(ar=[0.5]))

    def test_config_initial_coefficients_must_match(self):
        """Test that initial coefficients must follow the model order."""
        with pytest.raises(ParameterError):
            ArimaConfig(order=ArimaOrder(1, 0, 0),
                        initial_coefficients=ArimaCoefficients(ar=[0.5, 0.1], mean=0.0))

    def test_config_invalid_strategy(self):
        """Test that an unknown strategy is rejected."""
        with pytest.raises(ValueError):
            ArimaConfig(order=ArimaOrder(1, 0, 0), strategy="bogus")

    def test_insufficient_data(self):
        """Test that a series too short for the order raises InsufficientDataError."""
        with pytest.raises(InsufficientDataError):
            fit_arima(np.arange(3.0), order=ArimaOrder(2, 1, 0))

    def test_seasonal_order_without_frequency(self):
        """Test that seasonal terms need at least one observation per cycle."""
        with pytest.raises(InvalidOrderError):
            fit_arima(np.arange(20.0), order=ArimaOrder(0, 0, 0, 1, 0, 0), seasonal_frequency=0)

    def test_nan_rejected(self):
        """Test that missing values raise DataError."""
        y = np.ones(20)
        y[7] = np.nan
        with pytest.raises(DataError) as excinfo:
            fit_arima(y, order=ArimaOrder(1, 0, 0))
        assert excinfo.value.index == 7

    def test_cancelled_fit(self, arima111_series):
        """Test that a cancelled token interrupts the fit."""
        token = CancellationToken()
        token.cancel()
        model = ArimaModel(order=ArimaOrder(1, 1, 1))

        with pytest.raises(InterruptedFitError) as excinfo:
            model.fit(arima111_series, cancellation_token=token)

        assert model.state is FitState.INTERRUPTED
        assert model.result is None
        assert excinfo.value.iterations == 0
        assert excinfo.value.best_coefficients.shape == (2,)

    def test_cancel_during_fit(self, arima111_series):
        """Test that cancelling mid-optimization stops after the current iteration."""
        token = CancellationToken()
        calls = []

        def progress_callback(fraction, message):
            calls.append(fraction)
            if len(calls) == 3:
                token.cancel()

        model = ArimaModel(order=ArimaOrder(1, 1, 1))
        with pytest.raises(InterruptedFitError) as excinfo:
            model.fit(arima111_series, cancellation_token=token,
                      progress_callback=progress_callback)

        assert excinfo.value.iterations == 3
        assert len(calls) == 3
        assert model.state is FitState.INTERRUPTED
        assert model.result is None

    def test_nonconvergence_warns(self, arima111_series):
        """Test that an exhausted iteration budget warns and flags the model."""
        with pytest.warns(ConvergenceWarning):
            model = fit_arima(arima111_series, order=ArimaOrder(1, 1, 1),
                              strategy="css", max_iter=1)

        assert not model.converged
        assert model.iterations == 1

    def test_nonconvergence_raises(self, arima111_series):
        """Test that non-convergence can be raised together with the model."""
        with pytest.raises(NonConvergenceError) as excinfo:
            fit_arima(arima111_series, order=ArimaOrder(1, 1, 1), strategy="css",
                      max_iter=1, raise_on_nonconvergence=True)

        assert isinstance(excinfo.value.model, FittedArima)
        assert not excinfo.value.model.converged

    def test_state_transitions(self, ar1_series):
        """Test the model state before and after fitting."""
        model = ArimaModel(order=ArimaOrder(1, 0, 0))
        assert model.state is FitState.UNFITTED

        result = model.fit(ar1_series)

        assert model.state is FitState.FINALIZED
        assert model.result is result

    def test_progress_callback(self, ar1_series):
        """Test that progress is reported up to completion."""
        updates = []
        ArimaModel(order=ArimaOrder(1, 0, 0)).fit(
            ar1_series, progress_callback=lambda p, m: updates.append((p, m)))

        fractions = [p for p, _ in updates]
        assert fractions[-1] == 1.0
        assert all(0.0 <= p <= 1.0 for p in fractions)
        assert np.all(np.diff(fractions) >= 0)

    def test_equality_and_hash(self, ar1_series):
        """Test value equality over series, order, coefficients and strategy."""
        a = fit_arima(ar1_series, order=ArimaOrder(1, 0, 0), strategy="css")
        b = fit_arima(ar1_series, order=ArimaOrder(1, 0, 0), strategy="css")
        c = fit_arima(ar1_series, order=ArimaOrder(1, 0, 0), strategy="ml")

        assert a == b
        assert hash(a) == hash(b)
        assert len({a, b}) == 1
        assert a != c
        assert a != object()
        assert a != None  # noqa: E711

    def test_fitted_model_is_immutable(self, ar1_series):
        """Test that fitted models cannot be modified."""
        model = fit_arima(ar1_series, order=ArimaOrder(1, 0, 0))

        with pytest.raises(dataclasses.FrozenInstanceError):
            model.sigma2 = 2.0
        with pytest.raises(ValueError):
            model.residuals[0] = 1.0

    def test_pandas_input(self, monthly_series):
        """Test fitting a pandas Series with a monthly DatetimeIndex."""
        model = fit_arima(monthly_series, order=ArimaOrder(1, 1, 0))

        assert model.seasonal_frequency == 12
        assert model.index.equals(monthly_series.index)
        assert_allclose(model.time_series, monthly_series.to_numpy())

    def test_model_protocol(self, ar1_series):
        """Test that fitted models satisfy the structural Model interface."""
        model = fit_arima(ar1_series, order=ArimaOrder(1, 0, 0))

        assert isinstance(model, Model)
        assert_allclose(model.point_forecast(3), model.forecast(3).point)

    def test_summary(self, ar1_series):
        """Test the text summary."""
        summary = fit_arima(ar1_series, order=ArimaOrder(1, 0, 0)).summary()

        assert "Model: ARIMA(1,0,0) with constant" in summary
        assert "Convergence: Yes" in summary
        assert "Parameter Estimates" in summary
        assert "ar.L1" in summary
        assert "mean" in summary
        assert "AIC" in summary

    def test_to_dict(self, ar1_series):
        """Test the dictionary view of a fitted model."""
        model = fit_arima(ar1_series, order=ArimaOrder(1, 0, 0))
        info = model.to_dict()

        assert info["coefficients"]["ar.L1"] == model.coefficients.ar[0]
        assert info["aic"] == model.aic
        assert info["nobs"] == len(ar1_series)

    @pytest.mark.asyncio
    async def test_fit_async(self, ar1_series):
        """Test asynchronous fitting."""
        model = ArimaModel(order=ArimaOrder(1, 0, 0))
        progress_updates = []

        def progress_callback(percent, message):
            progress_updates.append((percent, message))

        result = await model.fit_async(ar1_series, progress_callback=progress_callback)

        assert model.state is FitState.FINALIZED
        assert result == fit_arima(ar1_series, order=ArimaOrder(1, 0, 0))
        assert progress_updates[0][0] == 0.0
        assert progress_updates[-1][0] == 1.0

    @pytest.mark.asyncio
    async def test_fit_async_cancelled_token(self, ar1_series):
        """Test that a shared cancelled token interrupts an asynchronous fit."""
        token = CancellationToken()
        token.cancel()
        model = ArimaModel(order=ArimaOrder(1, 0, 0))

        with pytest.raises(InterruptedFitError):
            await model.fit_async(ar1_series, cancellation_token=token)
        assert model.state is FitState.INTERRUPTED

    @pytest.mark.asyncio
    async def test_fit_async_task_cancellation(self, arima111_series):
        """Test that cancelling the awaiting task interrupts the running fit."""
        token = CancellationToken()
        started = threading.Event()
        release = threading.Event()

        def progress_callback(fraction, message):
            if fraction > 0.0 and not started.is_set():
                started.set()
                release.wait(timeout=10.0)

        model = ArimaModel(order=ArimaOrder(1, 1, 1))
        task = asyncio.ensure_future(model.fit_async(
            arima111_series, progress_callback=progress_callback, cancellation_token=token))

        while not started.is_set():
            await asyncio.sleep(0.001)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        release.set()

        assert token.cancelled
        for _ in range(1000):
            if model.state is not FitState.OPTIMIZING:
                break
            await asyncio.sleep(0.01)
        assert model.state is FitState.INTERRUPTED
        assert model.result is None


class TestForecast:
    """Tests for point forecasts and prediction intervals."""

    def test_ar1_forecast(self, ar1_series):
        """Test AR(1) forecasts against the closed form."""
        coefs = ArimaCoefficients(ar=[0.5], mean=1.0)
        model = fit_arima(ar1_series, coefficients=coefs, strategy="ml")
        steps = np.arange(1, 6)

        fc = model.forecast(5)

        expected_point = 1.0 + 0.5 ** steps * (ar1_series[-1] - 1.0)
        expected_var = model.sigma2 * np.cumsum(0.25 ** (steps - 1))
        z = stats.norm.ppf(0.975)
        assert_allclose(fc.point, expected_point, rtol=1e-10)
        assert_allclose(model.point_forecast(5), expected_point, rtol=1e-10)
        assert_allclose(fc.standard_errors ** 2, expected_var, rtol=1e-10)
        assert_allclose(fc.lower, expected_point - z * np.sqrt(expected_var), rtol=1e-10)
        assert_allclose(fc.upper, expected_point + z * np.sqrt(expected_var), rtol=1e-10)
        assert fc.alpha == 0.05

    def test_random_walk_forecast(self, rng):
        """Test random walk forecasts: flat point forecast and linear variance."""
        y = np.cumsum(rng.standard_normal(100))
        model = fit_arima(y, coefficients=ArimaCoefficients(d=1), strategy="ml")

        fc = model.forecast(4, alpha=0.1)

        assert model.sigma2 == pytest.approx(np.mean(np.diff(y) ** 2))
        assert_allclose(fc.point, y[-1])
        assert_allclose(fc.standard_errors ** 2, model.sigma2 * np.arange(1, 5))
        assert_allclose(fc.upper - fc.point,
                        stats.norm.ppf(0.95) * np.sqrt(model.sigma2 * np.arange(1, 5)))

    def test_drift_forecast(self, drift_series):
        """Test that drift extends the last observation linearly."""
        model = fit_arima(drift_series, coefficients=ArimaCoefficients(drift=2.0, d=1))

        assert_allclose(model.point_forecast(5), drift_series[-1] + 2.0 * np.arange(1, 6))

    def test_seasonal_random_walk_forecast(self, quarterly_seasonal_series):
        """Test that a seasonal random walk repeats the last cycle."""
        y = quarterly_seasonal_series
        model = fit_arima(y, coefficients=ArimaCoefficients(D=1), seasonal_frequency=4)

        fc = model.forecast(8)

        assert_allclose(fc.point, np.tile(y[-4:], 2))
        assert_allclose(fc.standard_errors ** 2,
                        model.sigma2 * np.array([1, 1, 1, 1, 2, 2, 2, 2]))

    def test_fitted_model_forecast(self, arima111_series):
        """Test forecasts from an estimated model."""
        model = fit_arima(arima111_series, order=ArimaOrder(1, 1, 1))
        fc = model.forecast(12)

        assert fc.steps == 12
        assert np.all(np.diff(fc.standard_errors) >= 0)
        assert np.all(fc.lower < fc.point)
        assert np.all(fc.point < fc.upper)

    def test_forecast_dataframe_index(self, monthly_series):
        """Test that the forecast index continues a monthly DatetimeIndex."""
        model = fit_arima(monthly_series, order=ArimaOrder(1, 1, 0))
        frame = model.forecast(6).to_dataframe()

        assert list(frame.columns) == ["forecast", "std_error", "lower", "upper"]
        expected = pd.date_range("2010-01-01", periods=6, freq="MS")
        assert list(frame.index) == list(expected)

    def test_forecast_dataframe_without_index(self, ar1_series):
        """Test the horizon index used for plain arrays."""
        frame = fit_arima(ar1_series, order=ArimaOrder(1, 0, 0)).forecast(3).to_dataframe()

        assert list(frame.index) == [1, 2, 3]
        assert frame.index.name == "horizon"

    @pytest.mark.parametrize("steps", [0, -1, 2.5])
    def test_invalid_steps(self, ar1_series, steps):
        """Test that invalid horizons are rejected."""
        model = fit_arima(ar1_series, coefficients=ArimaCoefficients(ar=[0.5]))
        with pytest.raises(ParameterError):
            model.forecast(steps)

    @pytest.mark.parametrize("alpha", [0.0, 1.0, 1.5])
    def test_invalid_alpha(self, ar1_series, alpha):
        """Test that invalid significance levels are rejected."""
        model = fit_arima(ar1_series, coefficients=ArimaCoefficients(ar=[0.5]))
        with pytest.raises(ParameterError):
            model.forecast(3, alpha=alpha)

    def test_psi_weights(self):
        """Test MA(infinity) weights of simple processes."""
        assert_allclose(psi_weights(np.array([0.5]), np.array([]), 4), 0.5 ** np.arange(4))
        assert_allclose(psi_weights(np.array([]), np.array([]), 4, d=1), np.ones(4))
        assert_allclose(psi_weights(np.array([]), np.array([0.4]), 3), [1.0, 0.4, 0.0])

    @given(
        phi=st.floats(min_value=-0.9, max_value=0.9),
        theta=st.floats(min_value=-0.9, max_value=0.9),
        d=st.integers(min_value=0, max_value=2),
        sigma2=st.floats(min_value=1e-3, max_value=1e3),
        steps=st.integers(min_value=1, max_value=30)
    )
    @settings(max_examples=50, deadline=None)
    def test_forecast_variance_non_decreasing(self, phi, theta, d, sigma2, steps):
        """Test that forecast variances never decrease with the horizon."""
        variance = forecast_variance(np.array([phi]), np.array([theta]), sigma2, steps, d=d)

        assert variance.shape == (steps,)
        assert variance[0] == pytest.approx(sigma2)
        assert np.all(np.diff(variance) >= 0)
