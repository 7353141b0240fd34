"""
pytest configuration and shared fixtures.
"""

from pathlib import Path

import numpy as np
import pandas as pd
import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def simple_regression_data(rng):
    """Intercept plus two predictors, low noise."""
    n = 100
    X = np.column_stack([np.ones(n), rng.standard_normal((n, 2))])
    beta_true = np.array([1.0, -2.0, 0.5])
    y = X @ beta_true + rng.standard_normal(n) * 0.1
    return X, y, beta_true


@pytest.fixture
def collinear_data(rng):
    """Dataset with perfect collinearity (should fail)."""
    n = 100
    x1 = rng.standard_normal(n)
    x2 = rng.standard_normal(n)
    x3 = x1 + x2  # Perfect collinearity
    X = np.column_stack([np.ones(n), x1, x2, x3])
    y = rng.standard_normal(n)
    return X, y


@pytest.fixture
def mtcars_path():
    return FIXTURES_DIR / "mtcars.csv"


@pytest.fixture
def mtcars(mtcars_path):
    """The 32-car Motor Trend dataset (numeric columns only)."""
    return pd.read_csv(mtcars_path, index_col="model")
