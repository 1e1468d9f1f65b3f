# svariv/utils/matrix_ops.py
"""
Matrix Operations Module

Structural matrices used by the SVAR-IV inference engine. All
vectorization is column-major, matching the stacking of
vec(A) in the asymptotic covariance of the reduced-form estimators.

Functions:
    elimination_matrix: Create an elimination matrix L with L vec(A) = vech(A)
    companion_matrix: Build the VAR(1) companion form of [A_1 ... A_p]
    selection_matrix: Build J = [I_n, 0, ..., 0]
"""

import logging

import numpy as np

from svariv.core.types import Matrix
from svariv.core.exceptions import raise_dimension_error

# Set up module-level logger
logger = logging.getLogger("svariv.utils.matrix_ops")


def elimination_matrix(n: int) -> Matrix:
    """
    Create an elimination matrix.

    This function creates an elimination matrix L_n such that
    L_n * vec(A) = vech(A) for any n×n matrix A. In the covariance of the
    reduced-form estimators it maps the moments of vec(eta_t eta_t') onto
    vech(Sigma).

    Args:
        n: Dimension of the symmetric matrix

    Returns:
        Elimination matrix of size (n(n+1)/2)×(n²)

    Examples:
        >>> import numpy as np
        >>> from svariv.utils.matrix_ops import elimination_matrix
        >>> A = np.array([[1., 2., 3.], [2., 4., 5.], [3., 5., 6.]])
        >>> elimination_matrix(3) @ A.flatten(order='F')
        array([1., 2., 3., 4., 5., 6.])
    """
    n_squared = n * n
    n_vech = n * (n + 1) // 2

    L = np.zeros((n_vech, n_squared))

    vech_idx = 0
    for j in range(n):
        for i in range(j, n):
            # Position of (i, j) in vec(A)
            L[vech_idx, j * n + i] = 1
            vech_idx += 1

    return L


def companion_matrix(AL: Matrix, p: int) -> Matrix:
    """
    Build the companion matrix of a VAR(p).

    Args:
        AL: Lag coefficients [A_1, ..., A_p] of shape (n, n*p)
        p: Lag order

    Returns:
        Companion matrix of shape (n*p, n*p) with AL in the first block row
        and an identity shifting the lags below it

    Raises:
        DimensionError: If AL does not have n*p columns
    """
    AL = np.asarray(AL, dtype=float)
    n = AL.shape[0]
    if AL.ndim != 2 or AL.shape[1] != n * p:
        raise_dimension_error(
            f"AL must have shape (n, n*p) = ({n}, {n * p})",
            array_name="AL",
            expected_shape=(n, n * p),
            actual_shape=AL.shape
        )

    comp = np.zeros((n * p, n * p))
    comp[:n, :] = AL
    if p > 1:
        comp[n:, :n * (p - 1)] = np.eye(n * (p - 1))
    return comp


def selection_matrix(n: int, p: int) -> Matrix:
    """Return J = [I_n, 0, ..., 0] of shape (n, n*p)."""
    J = np.zeros((n, n * p))
    J[:, :n] = np.eye(n)
    return J
