'''
Pytest configuration and fixtures for the SVAR-IV Toolbox test suite.

This module provides seeded random number generators, synthetic reduced-form
models with strong and weak instruments, and simulated SVAR data with an
external instrument.
'''

from typing import Tuple

import numpy as np
import pytest

from svariv.core.config import reset_config
from svariv.models.svar.reduced_form import ReducedFormModel


# ---- Basic Data Generation Fixtures ----

@pytest.fixture
def rng() -> np.random.Generator:
    """Provide a seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture(autouse=True)
def _clean_config():
    """Restore configuration defaults around every test."""
    reset_config()
    yield
    reset_config()


# ---- Synthetic Reduced-Form Fixtures ----

AL_2VAR = np.array([[0.5, 0.1],
                    [0.2, 0.4]])
SIGMA_2VAR = np.array([[1.0, 0.3],
                       [0.3, 1.0]])
GAMMA_2VAR = np.array([0.5, 0.3])


def make_w_hat(n: int = 2, p: int = 1) -> np.ndarray:
    """Positive definite covariance of (vec(AL), Gamma) with nonzero cross blocks."""
    k = n * n * p
    w_hat = np.diag(np.r_[np.full(k, 0.5), np.ones(n)])
    w_hat[0, k] = w_hat[k, 0] = 0.1
    w_hat[1, k + 1] = w_hat[k + 1, 1] = 0.1
    w_hat[k, k + 1] = w_hat[k + 1, k] = 0.2
    return w_hat


def make_rform(rng: np.random.Generator, gamma_scale: float = 1.0,
               T: int = 500, sigma: np.ndarray = SIGMA_2VAR) -> ReducedFormModel:
    """Synthetic two-variable VAR(1) reduced form."""
    eta = rng.standard_normal((2, T))
    return ReducedFormModel(
        al=AL_2VAR,
        p=1,
        n=2,
        sigma=sigma,
        eta=eta,
        gamma=gamma_scale * GAMMA_2VAR,
        w_hat=make_w_hat(),
    )


@pytest.fixture
def strong_rform(rng: np.random.Generator) -> ReducedFormModel:
    """Reduced form whose instrument is strong: T Gamma_1² >> critval W2[1,1]."""
    return make_rform(rng)


@pytest.fixture
def weak_rform(rng: np.random.Generator) -> ReducedFormModel:
    """Reduced form whose instrument is nearly irrelevant."""
    return make_rform(rng, gamma_scale=1e-3)


# ---- Simulated SVAR-IV Data ----

def simulate_svar_iv(rng: np.random.Generator, T: int = 1000,
                     relevance: float = 1.0) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Simulate y_t = mu + A y_{t-1} + B eps_t with z_t = relevance * eps_1t + noise.

    Returns:
        Tuple of (ydata (T x 2), z (T,), B)
    """
    A = AL_2VAR
    B = np.array([[1.0, 0.0],
                  [0.5, 1.0]])
    mu = np.array([0.1, -0.2])
    burn = 100

    eps = rng.standard_normal((T + burn, 2))
    y = np.zeros((T + burn, 2))
    for t in range(1, T + burn):
        y[t] = mu + A @ y[t - 1] + B @ eps[t]

    z = relevance * eps[:, 0] + 0.5 * rng.standard_normal(T + burn)
    return y[burn:], z[burn:], B


@pytest.fixture
def svar_data(rng: np.random.Generator) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Simulated bivariate SVAR(1) with a strong external instrument."""
    return simulate_svar_iv(rng)
