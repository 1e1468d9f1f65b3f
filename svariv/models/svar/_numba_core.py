"""
Numba-accelerated core functions for SVAR-IV inference.

This module holds the loops of the inference engine that are evaluated for
every horizon: the moving-average recursion of the VAR, the Jacobian of the
MA coefficients with respect to the lag coefficients, and the construction
of the lagged regressor matrix. All kernels operate on contiguous float64
arrays whose leading axis is the horizon (or the lag).
"""

import logging
from typing import Tuple

import numpy as np
from numba import jit

# Set up module-level logger
logger = logging.getLogger("svariv.models.svar._numba_core")


@jit(nopython=True, cache=True)
def ma_recursion(coefs: np.ndarray, horizons: int) -> np.ndarray:
    """
    Compute MA coefficients C[0..horizons] of a VAR(p).

    Args:
        coefs: Lag coefficient matrices stacked as (p, n, n)
        horizons: Largest horizon

    Returns:
        np.ndarray: MA coefficients (horizons+1, n, n) with C[0] = I
    """
    p = coefs.shape[0]
    n = coefs.shape[1]

    C = np.zeros((horizons + 1, n, n))
    for i in range(n):
        C[0, i, i] = 1.0

    for h in range(1, horizons + 1):
        acc = np.zeros((n, n))
        for l in range(1, min(h, p) + 1):
            acc += np.ascontiguousarray(coefs[l - 1]) @ np.ascontiguousarray(C[h - l])
        C[h] = acc

    return C


@jit(nopython=True, cache=True)
def ma_jacobian(C: np.ndarray, comp: np.ndarray, J: np.ndarray) -> np.ndarray:
    """
    Jacobian of vec(C[h]) with respect to vec([A_1 ... A_p]).

    G[h] = sum_{m=0}^{h-1} kron(J (A')^{h-1-m}, C[m]) where A is the
    companion matrix and J = [I_n, 0, ..., 0].

    Args:
        C: MA coefficients (horizons+1, n, n)
        comp: Companion matrix (n*p, n*p)
        J: Selection matrix [I_n, 0, ..., 0] of shape (n, n*p)

    Returns:
        np.ndarray: Jacobians (horizons+1, n*n, n*n*p) with G[0] = 0
    """
    H = C.shape[0]
    n, np_ = J.shape
    G = np.zeros((H, n * n, n * np_))

    # JAp[k] = J (A')^k
    JAp = np.zeros((H, n, np_))
    power = np.eye(np_)
    comp_t = comp.T.copy()
    for k in range(H):
        JAp[k] = J @ power
        power = power @ comp_t

    for h in range(1, H):
        for m in range(h):
            left = JAp[h - 1 - m]
            right = C[m]
            # kron(left, right): block (r, c) of size n x n equals left[r, c] * right
            for r in range(n):
                for c in range(np_):
                    coef = left[r, c]
                    if coef != 0.0:
                        for a in range(n):
                            for b in range(n):
                                G[h, r * n + a, c * n + b] += coef * right[a, b]

    return G


@jit(nopython=True, cache=True)
def lag_regressors(y: np.ndarray, lags: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Build VAR regressors [1, y_{t-1}', ..., y_{t-p}'] and the aligned left-hand side.

    Args:
        y: Time series data matrix (T_total x n)
        lags: Number of lags to include

    Returns:
        Tuple containing:
            - Regressor matrix (T_total-lags x 1+n*lags)
            - Trimmed original data (T_total-lags x n)
    """
    T, n = y.shape
    X = np.ones((T - lags, 1 + n * lags))

    for t in range(lags, T):
        row_idx = t - lags
        for lag in range(1, lags + 1):
            X[row_idx, 1 + (lag - 1) * n:1 + lag * n] = y[t - lag]

    return X, y[lags:].copy()
