# tests/test_utils.py

"""
Tests for arimafit utility and core modules.

This module covers:
- Numerical differentiation
- Calendar period arithmetic and forecast index extension
- Input validation
- Configuration management
- Exception formatting
"""

import warnings

import numpy as np
import pandas as pd
import pytest
from hypothesis import given, settings, strategies as st
from numpy.testing import assert_allclose

from arimafit.core.config import ConfigManager, get_config, reset_config, set_config
from arimafit.core.exceptions import (
    ConfigurationError, ConvergenceWarning, DataError, DimensionError, NumericWarning,
    ParameterError, warn_convergence
)
from arimafit.core.validation import validate_alpha, validate_series, validate_steps
from arimafit.optim import INFEASIBLE
from arimafit.utils.date_utils import (
    ONE_YEAR, extend_forecast_index, infer_observation_period, nominal_seconds,
    observations_per_cycle
)
from arimafit.utils.differentiation import gradient_2sided, hessian_2sided, in_domain


# ---- Numerical Differentiation Tests ----

class TestDifferentiation:
    """Tests for finite-difference gradients and Hessians."""

    def test_gradient_quadratic(self):
        """Test the gradient of a quadratic form."""
        A = np.array([[2.0, 0.5], [0.5, 1.0]])
        x = np.array([1.0, -3.0])

        grad = gradient_2sided(lambda v: float(v @ A @ v), x)

        assert_allclose(grad, 2.0 * A @ x, rtol=1e-7)

    def test_gradient_one_sided_fallback(self):
        """Test that a probe outside the domain falls back to a one-sided difference."""
        def f(v):
            return INFEASIBLE if v[0] > 1.0 else float(v[0] ** 2)

        grad = gradient_2sided(f, np.array([1.0]))

        assert grad[0] == pytest.approx(2.0, rel=1e-4)

    def test_gradient_both_probes_outside(self):
        """Test that a component with no valid probe is zero and warns."""
        def f(v):
            return 0.0 if v[0] == 0.0 else np.inf

        with pytest.warns(NumericWarning):
            grad = gradient_2sided(f, np.array([0.0]))

        assert grad[0] == 0.0

    def test_gradient_requires_vector(self):
        """Test that matrices are rejected."""
        with pytest.raises(DimensionError):
            gradient_2sided(lambda v: 0.0, np.zeros((2, 2)))

    def test_hessian_quadratic(self):
        """Test the Hessian of a quadratic form."""
        A = np.array([[2.0, 0.5], [0.5, 1.0]])

        hess = hessian_2sided(lambda v: float(v @ A @ v), np.array([0.3, 0.7]))

        assert_allclose(hess, 2.0 * A, rtol=1e-5, atol=1e-6)
        assert_allclose(hess, hess.T)

    def test_hessian_rosenbrock(self):
        """Test the Hessian of the Rosenbrock function at its minimum."""
        def f(v):
            return float(100.0 * (v[1] - v[0] ** 2) ** 2 + (1.0 - v[0]) ** 2)

        hess = hessian_2sided(f, np.array([1.0, 1.0]))

        assert_allclose(hess, [[802.0, -400.0], [-400.0, 200.0]], rtol=1e-4)

    def test_hessian_empty(self):
        """Test the Hessian of a function of no variables."""
        assert hessian_2sided(lambda v: 1.0, np.zeros(0)).shape == (0, 0)

    def test_hessian_outside_domain(self):
        """Test that stencil points outside the domain give NaN entries."""
        def f(v):
            return np.inf if v[0] > 0.0 else float(v[0] ** 2)

        with pytest.warns(NumericWarning):
            hess = hessian_2sided(f, np.array([0.0]))

        assert np.isnan(hess[0, 0])

    def test_in_domain(self):
        """Test the domain check."""
        assert in_domain(1.0)
        assert not in_domain(np.inf)
        assert not in_domain(np.nan)
        assert not in_domain(INFEASIBLE)


# ---- Date Utility Tests ----

class TestDateUtils:
    """Tests for calendar period arithmetic."""

    @pytest.mark.parametrize("period, expected", [
        (pd.offsets.MonthEnd(), 12),
        (pd.offsets.MonthBegin(), 12),
        ("MS", 12),
        (pd.offsets.QuarterEnd(), 4),
        (pd.offsets.Week(), 52),
        (pd.offsets.Day(), 365),
        (pd.Timedelta(days=1), 365),
        (pd.offsets.SemiMonthEnd(), 24),
        (ONE_YEAR, 1),
        (pd.DateOffset(years=2), 0),
    ])
    def test_observations_per_year(self, period, expected):
        """Test the number of observations per one-year cycle."""
        assert observations_per_cycle(period) == expected

    def test_custom_cycle(self):
        """Test a weekly cycle of daily observations."""
        assert observations_per_cycle(pd.offsets.Day(), pd.offsets.Week()) == 7
        assert observations_per_cycle(pd.Timedelta(hours=1), pd.Timedelta(days=1)) == 24

    def test_nominal_lengths(self):
        """Test nominal period lengths."""
        year = nominal_seconds(ONE_YEAR)

        assert year == pytest.approx(365.2425 * 86400.0)
        assert nominal_seconds(pd.offsets.MonthEnd()) == pytest.approx(year / 12.0)
        assert nominal_seconds(pd.offsets.QuarterEnd(2)) == pytest.approx(year / 2.0)

    def test_invalid_period(self):
        """Test that non-period input is rejected."""
        with pytest.raises(ParameterError):
            nominal_seconds(3.5)

    def test_infer_observation_period(self):
        """Test period inference from date indices."""
        monthly = pd.date_range("2020-01-01", periods=24, freq="MS")
        quarterly = pd.period_range("2020Q1", periods=8, freq="Q")

        assert observations_per_cycle(infer_observation_period(monthly)) == 12
        assert observations_per_cycle(infer_observation_period(quarterly)) == 4
        assert infer_observation_period(None) is None
        assert infer_observation_period(pd.RangeIndex(10)) is None

    def test_infer_without_freq(self):
        """Test inference from a DatetimeIndex that carries no freq attribute."""
        index = pd.DatetimeIndex(["2020-01-01", "2020-01-02", "2020-01-03", "2020-01-04"])

        assert observations_per_cycle(infer_observation_period(index)) == 365

    def test_extend_datetime_index(self):
        """Test extension of a monthly DatetimeIndex."""
        index = pd.date_range("2020-01-01", periods=12, freq="MS")

        extended = extend_forecast_index(index, 3)

        assert list(extended) == list(pd.date_range("2021-01-01", periods=3, freq="MS"))

    def test_extend_period_index(self):
        """Test extension of a quarterly PeriodIndex."""
        index = pd.period_range("2020Q1", periods=4, freq="Q")

        extended = extend_forecast_index(index, 2)

        assert list(extended) == list(pd.period_range("2021Q1", periods=2, freq="Q"))

    def test_extend_numeric_index(self):
        """Test extension of an evenly spaced numeric index."""
        extended = extend_forecast_index(pd.Index([10, 20, 30]), 2)

        assert list(extended) == [40, 50]

    def test_extend_other_index(self):
        """Test that other indices continue with positions."""
        extended = extend_forecast_index(pd.Index(["a", "b", "c"]), 2)

        assert list(extended) == [3, 4]

    def test_extend_empty_index(self):
        """Test that an empty index cannot be extended."""
        with pytest.raises(ValueError):
            extend_forecast_index(pd.Index([]), 2)


# ---- Validation Tests ----

class TestValidation:
    """Tests for input validation."""

    def test_array_input(self):
        """Test that arrays are copied to float64 without an index."""
        data = np.array([1, 2, 3])
        values, index = validate_series(data)

        assert values.dtype == np.float64
        assert index is None
        values[0] = 10.0
        assert data[0] == 1

    def test_series_input(self):
        """Test that a Series keeps its index."""
        series = pd.Series([1.0, 2.0], index=pd.date_range("2020-01-01", periods=2))
        values, index = validate_series(series)

        assert_allclose(values, [1.0, 2.0])
        assert index.equals(series.index)

    def test_dataframe_input(self):
        """Test single-column DataFrames and rejection of multiple columns."""
        values, _ = validate_series(pd.DataFrame({"y": [1.0, 2.0, 3.0]}))
        assert_allclose(values, [1.0, 2.0, 3.0])

        with pytest.raises(DimensionError):
            validate_series(pd.DataFrame({"a": [1.0], "b": [2.0]}))

    def test_column_vector(self):
        """Test that column vectors are flattened and matrices rejected."""
        values, _ = validate_series(np.ones((4, 1)))
        assert values.shape == (4,)

        with pytest.raises(DimensionError):
            validate_series(np.ones((3, 2)))

    def test_non_finite(self):
        """Test that NaN and infinite values are located."""
        with pytest.raises(DataError) as excinfo:
            validate_series([1.0, np.inf, 2.0])
        assert excinfo.value.index == 1

    def test_invalid_type(self):
        """Test that None and non-numeric data are rejected."""
        with pytest.raises(TypeError):
            validate_series(None)
        with pytest.raises(TypeError):
            validate_series(["a", "b"])

    def test_alpha_and_steps(self):
        """Test validation of forecast settings."""
        assert validate_alpha(0.1) == 0.1
        assert validate_steps(np.int64(3)) == 3
        with pytest.raises(ParameterError):
            validate_alpha(0.0)
        with pytest.raises(ParameterError):
            validate_steps(True)

    @given(st.lists(st.floats(allow_nan=False, allow_infinity=False), min_size=1, max_size=30))
    @settings(max_examples=30)
    def test_finite_lists_accepted(self, data):
        """Test that any finite list is accepted unchanged."""
        values, index = validate_series(data)

        assert index is None
        assert_allclose(values, data)


# ---- Configuration Tests ----

class TestConfig:
    """Tests for configuration management."""

    def test_defaults(self):
        """Test the built-in defaults."""
        assert get_config("optimizer", "max_iter") == 500
        assert get_config("optimizer", "gradient_tolerance") == 1e-6
        assert get_config("forecast", "alpha") == 0.05
        assert get_config("optimizer", "missing", "fallback") == "fallback"

    def test_set_and_reset(self):
        """Test runtime modification and reset."""
        set_config("optimizer", "max_iter", 50)
        assert get_config("optimizer", "max_iter") == 50

        reset_config("optimizer", "max_iter")
        assert get_config("optimizer", "max_iter") == 500

    def test_set_coerces_strings(self):
        """Test that string values are converted to the option's type."""
        set_config("forecast", "alpha", "0.1")
        assert get_config("forecast", "alpha") == 0.1

    @pytest.mark.parametrize("section, option, value", [
        ("optimizer", "max_iter", -1),
        ("optimizer", "gradient_tolerance", 0.0),
        ("forecast", "alpha", 1.5),
        ("logging", "log_level", "LOUD"),
        ("optimizer", "unknown", 1),
        ("unknown", "max_iter", 1),
        ("optimizer", "max_iter", "many"),
    ])
    def test_invalid_values(self, section, option, value):
        """Test that invalid settings raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            set_config(section, option, value)

    def test_environment_override(self, monkeypatch, tmp_path):
        """Test ARIMAFIT_<SECTION>_<OPTION> environment overrides."""
        monkeypatch.setenv("ARIMAFIT_CONFIG_DIR", str(tmp_path))
        monkeypatch.setenv("ARIMAFIT_OPTIMIZER_MAX_ITER", "250")
        monkeypatch.setenv("ARIMAFIT_FORECAST_ALPHA", "0.1")

        manager = ConfigManager()
        manager.initialize()

        assert manager.get("optimizer", "max_iter") == 250
        assert manager.get("forecast", "alpha") == 0.1

    def test_invalid_environment_value_uses_default(self, monkeypatch, tmp_path):
        """Test that an invalid override falls back to the default."""
        monkeypatch.setenv("ARIMAFIT_CONFIG_DIR", str(tmp_path))
        monkeypatch.setenv("ARIMAFIT_FORECAST_ALPHA", "2.0")

        manager = ConfigManager()
        manager.initialize()

        assert manager.get("forecast", "alpha") == 0.05

    def test_save_and_load(self, monkeypatch, tmp_path):
        """Test that a saved configuration is loaded by a new manager."""
        monkeypatch.setenv("ARIMAFIT_CONFIG_DIR", str(tmp_path))

        manager = ConfigManager()
        manager.initialize()
        manager.set("optimizer", "max_iter", 123)
        manager.save_user_config()

        reloaded = ConfigManager()
        reloaded.initialize()

        assert reloaded.get("optimizer", "max_iter") == 123

    def test_sections(self):
        """Test section introspection."""
        manager = ConfigManager()

        assert manager.get_sections() == ["optimizer", "forecast", "logging"]
        assert manager.has_section("forecast")
        with pytest.raises(ConfigurationError):
            manager.get_section("plots")


# ---- Exception Tests ----

class TestExceptions:
    """Tests for exception and warning formatting."""

    def test_parameter_error_message(self):
        """Test that parameter details appear in the message."""
        error = ParameterError("bad order", param_name="p", param_value=-1, constraint="p >= 0")

        text = str(error)
        assert "bad order" in text
        assert "p" in text
        assert error.param_name == "p"

    def test_convergence_warning(self):
        """Test that convergence warnings carry the iteration count."""
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            warn_convergence("did not converge", iterations=7)

        assert len(caught) == 1
        assert issubclass(caught[0].category, ConvergenceWarning)
        assert caught[0].message.iterations == 7
