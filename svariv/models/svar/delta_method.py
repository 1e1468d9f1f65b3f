# svariv/models/svar/delta_method.py

"""
Delta-method (Wald) inference for SVAR-IV impulse responses.

The plug-in impulse response of variable j at horizon h is
lambda = x e_j'C[h] Gamma / Gamma_i. Its asymptotic variance follows from the
gradient d = [x (Gamma'⊗e_j') G[h], x e_j'C[h] - lambda e_i'] and WHat; the
interval is symmetric around the point estimate.
"""

import logging
from dataclasses import dataclass

import numpy as np

from svariv.core.types import CovarianceMatrix, Matrix
from .ma_representation import gamma_projections

# Set up module-level logger
logger = logging.getLogger("svariv.models.svar.delta_method")


@dataclass(frozen=True)
class DeltaMethodSolution:
    """
    Plug-in impulse responses and delta-method intervals, all (n, horizons+1).

    Attributes:
        point: Plug-in impulse responses
        variance: d' WHat d
        std_error: sqrt(variance) / (sqrt(T) |Gamma_i|)
        lower: point - sqrt(critval) * std_error
        upper: point + sqrt(critval) * std_error
    """
    point: Matrix
    variance: Matrix
    std_error: Matrix
    lower: Matrix
    upper: Matrix


def delta_method(
    C: np.ndarray,
    G: np.ndarray,
    gamma: np.ndarray,
    w_hat: CovarianceMatrix,
    T: int,
    nvar: int,
    scale: float,
    critval: float
) -> DeltaMethodSolution:
    """
    Compute plug-in impulse responses and delta-method intervals.

    Args:
        C: MA coefficients, non-cumulative or cumulative, (horizons+1, n, n)
        G: Matching Jacobians, (horizons+1, n², n²p)
        gamma: Covariance between residuals and instrument, (n,)
        w_hat: Asymptotic covariance of (vec(AL), Gamma)
        T: Number of periods
        nvar: 1-based index of the normalization variable
        scale: Impact response of the normalization variable
        critval: Squared normal critical value

    Returns:
        DeltaMethodSolution: Point estimates, variances, standard errors and bounds
    """
    i = nvar - 1
    x = scale
    H, n, _ = C.shape

    CG, D = gamma_projections(C, G, gamma)

    with np.errstate(divide="ignore", invalid="ignore"):
        point = x * CG / gamma[i]

        d2 = x * C.copy()
        d2[:, :, i] -= point
        d = np.concatenate([x * D, d2], axis=2)

        # Rounding can leave tiny negative quadratic forms
        variance = np.maximum(np.einsum("hjm,mk,hjk->hj", d, w_hat, d), 0.0)
        std_error = np.sqrt(variance) / (np.sqrt(T) * abs(gamma[i]))

    half_width = np.sqrt(critval) * std_error

    logger.debug(f"Delta-method intervals computed for {n} variables and {H} horizons")
    return DeltaMethodSolution(
        point=point.T.copy(),
        variance=variance.T.copy(),
        std_error=std_error.T.copy(),
        lower=(point - half_width).T.copy(),
        upper=(point + half_width).T.copy(),
    )
