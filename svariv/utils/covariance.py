# svariv/utils/covariance.py

"""
Covariance Estimation Module

Newey-West heteroskedasticity and autocorrelation consistent (HAC) long-run
covariance for the moment conditions of the reduced-form SVAR-IV estimators.

Functions:
    covnw: Newey-West covariance estimator for time series
    kernel_weight: Bartlett kernel weights for the autocovariance terms
"""

import logging

import numpy as np
from numba import jit

from svariv.core.types import Matrix, Vector, CovarianceMatrix
from svariv.core.exceptions import raise_dimension_error, raise_parameter_error

# Set up module-level logger
logger = logging.getLogger("svariv.utils.covariance")


@jit(nopython=True, cache=True)
def _covnw_core(x: np.ndarray, lags: int, weights: np.ndarray) -> np.ndarray:
    """
    Numba-accelerated core implementation of Newey-West covariance estimator.

    Args:
        x: Data matrix (T x K)
        lags: Number of lags to include
        weights: Kernel weights for each lag

    Returns:
        Newey-West covariance matrix estimate
    """
    T, K = x.shape

    # Compute the base covariance matrix (X'X / T)
    cov = np.zeros((K, K))
    for i in range(T):
        xi = x[i]
        for j in range(K):
            for k in range(K):
                cov[j, k] += xi[j] * xi[k]
    cov = cov / T

    # Add weighted autocovariance terms
    for lag in range(1, lags + 1):
        weight = weights[lag - 1]

        acov = np.zeros((K, K))
        for t in range(lag, T):
            xt = x[t]
            xt_lag = x[t - lag]
            for j in range(K):
                for k in range(K):
                    acov[j, k] += xt[j] * xt_lag[k]

        acov = acov / T

        # Add to the covariance matrix (symmetrically)
        for j in range(K):
            for k in range(K):
                cov[j, k] += weight * (acov[j, k] + acov[k, j])

    return cov


def kernel_weight(lags: int) -> Vector:
    """
    Compute Bartlett kernel weights w(l) = 1 - l/(lags+1) for l = 1..lags.

    Args:
        lags: Number of lags to compute weights for (0 gives an empty vector)

    Returns:
        Vector of weights for each lag (length = lags)

    Raises:
        ParameterError: If lags is not a non-negative integer

    Examples:
        >>> from svariv.utils.covariance import kernel_weight
        >>> kernel_weight(4)
        array([0.8, 0.6, 0.4, 0.2])
    """
    if isinstance(lags, bool) or not isinstance(lags, (int, np.integer)) or lags < 0:
        raise_parameter_error(
            "lags must be a non-negative integer",
            param_name="lags",
            param_value=lags,
            constraint="integer >= 0"
        )

    return 1.0 - np.arange(1, lags + 1, dtype=float) / (lags + 1)


def covnw(x: Matrix, lags: int = 0, demean: bool = True) -> CovarianceMatrix:
    """
    Compute the Newey-West HAC covariance matrix of a set of moment series.

    Args:
        x: Data matrix (T x K) where T is the number of observations and K is the
           number of moment series
        lags: Number of lags in the Bartlett kernel. With 0 lags the estimator
              is the sample covariance of the (demeaned) moments
        demean: Subtract the sample mean of each column before estimation

    Returns:
        Newey-West HAC covariance matrix estimate (K x K)

    Raises:
        DimensionError: If x is not a 2D array
        ParameterError: If lags is negative or not an integer

    Examples:
        >>> import numpy as np
        >>> from svariv.utils.covariance import covnw
        >>> rng = np.random.default_rng(123)
        >>> x = rng.standard_normal((100, 3))
        >>> covnw(x, lags=5).shape
        (3, 3)
    """
    x = np.asarray(x, dtype=float)

    if x.ndim != 2:
        raise_dimension_error(
            "Input must be a 2D array",
            array_name="x",
            expected_shape="(T, K)",
            actual_shape=x.shape
        )

    T, K = x.shape
    weights = kernel_weight(lags)

    if lags > T - 1:
        logger.debug(f"Truncating Newey-West lags from {lags} to {T - 1}")
        lags = T - 1
        weights = weights[:lags]

    if demean:
        x = x - x.mean(axis=0)

    cov = _covnw_core(np.ascontiguousarray(x), lags, weights)

    # Ensure the result is symmetric (to handle numerical precision issues)
    return (cov + cov.T) / 2
