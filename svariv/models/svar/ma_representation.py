# svariv/models/svar/ma_representation.py

"""
Moving-average representation of a reduced-form VAR and its derivatives.

The inference engine consumes the MA coefficients C[h] of the VAR and the
Jacobians G[h] = d vec(C[h]) / d vec(AL)' for h = 0..horizons, together with
their cumulative sums. Tensors are stored with the horizon as the leading
axis, so that C[h] is the n x n coefficient at horizon h and G[h] is the
n² x n²p Jacobian at horizon h.

Functions:
    ma_coefficients: MA coefficient tensor C
    ma_derivatives: Jacobian tensors G and Gcum
    build_ma_representation: Everything the interval engines need, in one pass
"""

import logging
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from svariv.core.exceptions import raise_dimension_error
from svariv.core.types import Matrix, Tensor3D
from svariv.core.validation import validate_non_negative_int
from svariv.utils.matrix_ops import companion_matrix, selection_matrix
from ._numba_core import ma_jacobian, ma_recursion

# Set up module-level logger
logger = logging.getLogger("svariv.models.svar.ma_representation")


def _split_lags(AL: Matrix, p: int) -> np.ndarray:
    """Reshape [A_1 ... A_p] (n x n*p) into a contiguous (p, n, n) array."""
    AL = np.asarray(AL, dtype=float)
    if AL.ndim != 2 or AL.shape[1] != AL.shape[0] * p:
        raise_dimension_error(
            "AL must have shape (n, n*p)",
            array_name="AL",
            expected_shape=f"(n, n*{p})",
            actual_shape=AL.shape
        )
    n = AL.shape[0]
    return np.ascontiguousarray(AL.reshape(n, p, n).transpose(1, 0, 2))


def ma_coefficients(AL: Matrix, p: int, horizons: int) -> Tensor3D:
    """
    Compute the MA coefficients of a VAR(p).

    C[0] = I and C[h] = sum_{l=1}^{min(h,p)} A_l C[h-l].

    Args:
        AL: Lag coefficients [A_1, ..., A_p] of shape (n, n*p)
        p: Lag order
        horizons: Largest horizon

    Returns:
        np.ndarray: MA coefficients of shape (horizons+1, n, n)

    Raises:
        DimensionError: If AL does not have n*p columns
        ParameterError: If p < 1 or horizons < 0
    """
    p = validate_non_negative_int(p, "p", minimum=1)
    horizons = validate_non_negative_int(horizons, "horizons")
    coefs = _split_lags(AL, p)
    return ma_recursion(coefs, horizons)


def ma_derivatives(AL: Matrix, C: Tensor3D, p: int, horizons: int, n: int) -> Tuple[Tensor3D, Tensor3D]:
    """
    Compute the derivatives of the MA coefficients with respect to vec(AL).

    G[0] = 0 and G[h] = sum_{m=0}^{h-1} kron(J (A')^{h-1-m}, C[m]), where A is
    the companion matrix of the VAR and J = [I_n, 0, ..., 0].

    Args:
        AL: Lag coefficients of shape (n, n*p)
        C: MA coefficients of shape (horizons+1, n, n), as returned by ma_coefficients
        p: Lag order
        horizons: Largest horizon
        n: Number of variables

    Returns:
        Tuple containing:
            - G: Jacobians of shape (horizons+1, n², n²p)
            - Gcum: Running sum of G along the horizon axis
    """
    C = np.ascontiguousarray(C, dtype=float)
    if C.shape != (horizons + 1, n, n):
        raise_dimension_error(
            "C must have shape (horizons+1, n, n)",
            array_name="C",
            expected_shape=(horizons + 1, n, n),
            actual_shape=C.shape
        )

    comp = np.ascontiguousarray(companion_matrix(AL, p))
    G = ma_jacobian(C, comp, selection_matrix(n, p))
    return G, np.cumsum(G, axis=0)


@dataclass(frozen=True)
class MovingAverageRepresentation:
    """
    MA coefficients of a VAR and their Jacobians, non-cumulative and cumulative.

    Attributes:
        C: MA coefficients (horizons+1, n, n)
        Ccum: Running sum of C along the horizon axis
        G: Jacobians of vec(C[h]) with respect to vec(AL), (horizons+1, n², n²p)
        Gcum: Running sum of G along the horizon axis
    """
    C: Tensor3D
    Ccum: Tensor3D
    G: Tensor3D
    Gcum: Tensor3D

    @property
    def horizons(self) -> int:
        return self.C.shape[0] - 1

    def select(self, cumulative: bool) -> Tuple[Tensor3D, Tensor3D]:
        """Return the (C, G) pair for the requested kind of impulse response."""
        if cumulative:
            return self.Ccum, self.Gcum
        return self.C, self.G


def gamma_projections(C: Tensor3D, G: Tensor3D, gamma: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Project the MA coefficients and their Jacobians on Gamma.

    Returns:
        Tuple containing:
            - CG: e_j' C[h] Gamma for all (h, j), shape (horizons+1, n)
            - D: (Gamma' ⊗ e_j') G[h] for all (h, j), shape (horizons+1, n, n²p)
    """
    H, n, _ = C.shape
    CG = np.einsum("hij,j->hi", C, gamma)
    # Row k*n + j of G[h] belongs to element (j, k) of C[h]
    D = np.einsum("k,hkjm->hjm", gamma, G.reshape(H, n, n, -1))
    return CG, D


def build_ma_representation(AL: Matrix, p: int, horizons: int) -> MovingAverageRepresentation:
    """
    Compute MA coefficients and derivatives, non-cumulative and cumulative.

    The arrays are marked read-only since they are shared by the interval
    engines.
    """
    C = ma_coefficients(AL, p, horizons)
    n = C.shape[1]
    G, Gcum = ma_derivatives(AL, C, p, horizons, n)
    Ccum = np.cumsum(C, axis=0)

    for arr in (C, Ccum, G, Gcum):
        arr.setflags(write=False)

    logger.debug(f"Built MA representation: n={n}, p={p}, horizons={horizons}")
    return MovingAverageRepresentation(C=C, Ccum=Ccum, G=G, Gcum=Gcum)
