'''
Pytest configuration and fixtures for the arimafit test suite.

Provides seeded simulated series for the model tests and isolates every test
from the global configuration.
'''

import numpy as np
import pandas as pd
import pytest

from arimafit.core.config import reset_config


def simulate_arma(rng: np.random.Generator, n: int, ar=(), ma=(), sigma: float = 1.0,
                  burn: int = 200) -> np.ndarray:
    """Simulate w_t = sum_i ar_i w_{t-i} + e_t + sum_j ma_j e_{t-j}."""
    ar = np.asarray(ar, dtype=np.float64)
    ma = np.asarray(ma, dtype=np.float64)
    total = n + burn
    e = rng.normal(0.0, sigma, total)
    w = np.zeros(total)
    for t in range(total):
        value = e[t]
        for i, a in enumerate(ar, start=1):
            if t - i >= 0:
                value += a * w[t - i]
        for j, b in enumerate(ma, start=1):
            if t - j >= 0:
                value += b * e[t - j]
        w[t] = value
    return w[burn:]


@pytest.fixture(autouse=True)
def clean_config():
    """Restore default configuration after each test."""
    yield
    reset_config()


# ---- Basic Data Generation Fixtures ----

@pytest.fixture
def rng() -> np.random.Generator:
    """Provide a seeded random number generator for reproducible tests."""
    return np.random.default_rng(12345)


@pytest.fixture
def ar1_series(rng: np.random.Generator) -> np.ndarray:
    """AR(1) series with phi = 0.6."""
    return simulate_arma(rng, 300, ar=[0.6])


@pytest.fixture
def arima111_series(rng: np.random.Generator) -> np.ndarray:
    """ARIMA(1,1,1) series with phi = 0.7 and theta = 0.4."""
    w = simulate_arma(rng, 1000, ar=[0.7], ma=[0.4])
    return np.cumsum(w)


@pytest.fixture
def drift_series(rng: np.random.Generator) -> np.ndarray:
    """Random walk with drift 2."""
    return np.cumsum(2.0 + rng.standard_normal(500))


@pytest.fixture
def quarterly_seasonal_series(rng: np.random.Generator) -> np.ndarray:
    """Seasonal AR(1) with period 4 and Phi = 0.5."""
    return simulate_arma(rng, 400, ar=[0.0, 0.0, 0.0, 0.5])


@pytest.fixture
def monthly_series(rng: np.random.Generator) -> pd.Series:
    """Ten years of monthly observations of an integrated AR(1)."""
    index = pd.date_range("2000-01-01", periods=120, freq="MS")
    return pd.Series(100.0 + np.cumsum(simulate_arma(rng, 120, ar=[0.5])), index=index)
