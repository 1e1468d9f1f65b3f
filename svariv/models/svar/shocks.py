# svariv/models/svar/shocks.py

"""
Recovery of the structural shock identified by the external instrument.
"""

import logging
from dataclasses import dataclass

import numpy as np
from scipy import linalg

from svariv.core.exceptions import raise_numerical_error
from svariv.core.types import CovarianceMatrix, Matrix, Vector

# Set up module-level logger
logger = logging.getLogger("svariv.models.svar.shocks")


@dataclass(frozen=True)
class StructuralShock:
    """
    Plug-in estimate of the structural shock series.

    Attributes:
        epsilon: x Gamma' Sigma^-1 eta_t / Gamma_i for t = 1..T
        epsilon_std: epsilon standardized with its sample mean and (T-1) standard deviation
    """
    epsilon: Vector
    epsilon_std: Vector


def recover_structural_shock(
    gamma: Vector,
    sigma: CovarianceMatrix,
    eta: Matrix,
    nvar: int,
    scale: float
) -> StructuralShock:
    """
    Estimate the structural shock series.

    Args:
        gamma: Covariance between residuals and instrument, (n,)
        sigma: Residual covariance, (n, n)
        eta: Residuals, (n, T)
        nvar: 1-based index of the normalization variable
        scale: Impact response of the normalization variable

    Returns:
        StructuralShock: Raw and standardized shock series

    Raises:
        NumericalError: If sigma is singular or Gamma is zero for the
            normalization variable
    """
    i = nvar - 1
    if gamma[i] == 0:
        raise_numerical_error(
            "Gamma is exactly zero for the normalization variable",
            operation="structural shock recovery",
            error_type="division by zero",
            values=gamma
        )

    try:
        # Gamma' Sigma^-1 = (Sigma^-1 Gamma)' since Sigma is symmetric
        weights = linalg.solve(sigma, gamma, assume_a="sym")
    except linalg.LinAlgError as e:
        raise_numerical_error(
            "Residual covariance matrix Sigma is singular",
            operation="structural shock recovery",
            error_type="singular matrix",
            details=str(e)
        )

    epsilon = scale * (weights @ eta) / gamma[i]
    with np.errstate(divide="ignore", invalid="ignore"):
        epsilon_std = (epsilon - epsilon.mean()) / epsilon.std(ddof=1)

    logger.debug(f"Recovered structural shock series of length {epsilon.shape[0]}")
    return StructuralShock(epsilon=epsilon, epsilon_std=epsilon_std)
