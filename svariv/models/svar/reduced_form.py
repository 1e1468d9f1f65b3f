# svariv/models/svar/reduced_form.py

"""
Reduced-form inputs of SVAR-IV inference.

This module defines the immutable ReducedFormModel consumed by the inference
engine, the partition of the asymptotic covariance matrix into coefficient
and instrument-covariance blocks, and reference implementations of the two
estimation collaborators: OLS estimation of the reduced-form VAR (through
statsmodels) and the Newey-West estimator of the asymptotic covariance of
(vec(AL), vech(Sigma), Gamma).

Classes:
    ReducedFormModel: Reduced-form estimates and their asymptotic covariance
    CovarianceBlocks: The W1, W12 and W2 blocks of WHat

Functions:
    partition_covariance: Slice WHat at index n²p
    cov_ahat_sigmahat_gamma: Asymptotic covariance of the reduced-form estimators
    estimate_reduced_form: Estimate a ReducedFormModel from data and an instrument
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd
from scipy import linalg
from statsmodels.tsa.api import VAR as StatsmodelsVAR

from svariv.core.exceptions import (
    EstimationError, raise_dimension_error, raise_numerical_error
)
from svariv.core.types import (
    CovarianceMatrix, Matrix, TimeSeriesData, TimeSeriesDataFrame, Vector
)
from svariv.core.validation import (
    validate_matrix_shape, validate_non_negative_int, validate_square_matrix,
    validate_vector
)
from svariv.utils.covariance import covnw
from svariv.utils.matrix_ops import elimination_matrix
from ._numba_core import lag_regressors

# Set up module-level logger
logger = logging.getLogger("svariv.models.svar.reduced_form")


@dataclass(frozen=True)
class CovarianceBlocks:
    """
    Blocks of the asymptotic covariance of (vec(AL), Gamma).

    Attributes:
        W1: Covariance of vec(AL), (n²p, n²p)
        W12: Cross covariance of vec(AL) and Gamma, (n²p, n)
        W2: Covariance of Gamma, (n, n)
    """
    W1: CovarianceMatrix
    W12: Matrix
    W2: CovarianceMatrix


def partition_covariance(w_hat: CovarianceMatrix, n: int, p: int) -> CovarianceBlocks:
    """
    Partition WHat into W1, W12 and W2 at index n²p.

    Raises:
        DimensionError: If WHat is not (n²p+n) x (n²p+n)
    """
    k = n * n * p
    w_hat = validate_square_matrix(w_hat, size=k + n, matrix_name="WHat")
    return CovarianceBlocks(
        W1=w_hat[:k, :k],
        W12=w_hat[:k, k:],
        W2=w_hat[k:, k:]
    )


@dataclass(frozen=True)
class ReducedFormModel:
    """
    Reduced-form VAR estimates and the asymptotic covariance used for inference.

    The required fields are everything the inference engine reads. The
    optional fields are filled by estimate_reduced_form and carried along for
    reporting.

    Attributes:
        al: Lag coefficients [A_1, ..., A_p], (n, n*p)
        p: Lag order
        n: Number of endogenous variables
        sigma: Residual covariance eta eta' / T, (n, n)
        eta: Residuals, (n, T)
        gamma: Covariance between residuals and the instrument, (n,)
        w_hat: Asymptotic covariance of (vec(AL), Gamma), (n²p+n, n²p+n)
        mu: Intercept, (n,)
        X: Regressor matrix with rows [1, y_{t-1}', ..., y_{t-p}'], (T, 1+n*p)
        Y: Left-hand side of the VAR, (T, n)
        Y0: Initial conditions, (p, n)
        z: Instrument aligned with the residuals, (T,)
        w_hat_all: Asymptotic covariance of (vec(AL), vech(Sigma), Gamma)
        var_names: Names of the endogenous variables
    """
    al: Matrix
    p: int
    n: int
    sigma: CovarianceMatrix
    eta: Matrix
    gamma: Vector
    w_hat: CovarianceMatrix
    mu: Optional[Vector] = None
    X: Optional[Matrix] = None
    Y: Optional[Matrix] = None
    Y0: Optional[Matrix] = None
    z: Optional[Vector] = None
    w_hat_all: Optional[CovarianceMatrix] = None
    var_names: Optional[List[str]] = None

    def __post_init__(self) -> None:
        p = validate_non_negative_int(self.p, "p", minimum=1)
        n = validate_non_negative_int(self.n, "n", minimum=1)
        object.__setattr__(self, "p", p)
        object.__setattr__(self, "n", n)

        object.__setattr__(self, "al", validate_matrix_shape(self.al, n, n * p, "AL"))
        object.__setattr__(self, "sigma", validate_matrix_shape(self.sigma, n, n, "Sigma"))
        object.__setattr__(self, "eta", validate_matrix_shape(self.eta, n, None, "eta"))
        object.__setattr__(self, "gamma", validate_vector(self.gamma, n, "Gamma"))

        dim = n * n * p + n
        object.__setattr__(self, "w_hat", validate_matrix_shape(self.w_hat, dim, dim, "WHat"))

        if self.eta.shape[1] < 2:
            raise_dimension_error(
                "eta must contain at least two periods",
                array_name="eta",
                expected_shape=f"({n}, T >= 2)",
                actual_shape=self.eta.shape
            )

        if self.var_names is not None and len(self.var_names) != n:
            raise_dimension_error(
                f"var_names must have {n} entries",
                array_name="var_names",
                expected_shape=(n,),
                actual_shape=(len(self.var_names),)
            )

    @property
    def T(self) -> int:
        """Number of periods used in estimation."""
        return self.eta.shape[1]

    @property
    def names(self) -> List[str]:
        """Variable names, defaulting to y1..yn."""
        if self.var_names is not None:
            return list(self.var_names)
        return [f"y{i + 1}" for i in range(self.n)]

    def covariance_blocks(self) -> CovarianceBlocks:
        """Partition w_hat into W1, W12 and W2."""
        return partition_covariance(self.w_hat, self.n, self.p)


def cov_ahat_sigmahat_gamma(
    p: int,
    X: Matrix,
    z: Vector,
    eta: Matrix,
    nw_lags: int = 0
) -> Tuple[CovarianceMatrix, CovarianceMatrix, Matrix]:
    """
    Asymptotic covariance of the reduced-form SVAR-IV estimators.

    The moment vector of period t is vec(eta_t [X_t', eta_t', z_t]). Its
    demeaned long-run covariance is estimated with a Bartlett (Newey-West)
    kernel and mapped to (vec(AL), vech(Sigma), Gamma) with the delta method,

        S = [ kron([0, I_np] Q1^-1, I_n)   0   0
              0                            V   0
              -kron(Q2 Q1^-1, I_n)         0   I_n ]

    with Q1 = X'X/T, Q2 = z'X/T and V the elimination matrix.

    Args:
        p: Lag order
        X: Regressors with rows [1, y_{t-1}', ..., y_{t-p}'], (T, 1+n*p)
        z: Instrument aligned with the residuals, (T,)
        eta: Residuals, (n, T)
        nw_lags: Number of Newey-West lags

    Returns:
        Tuple containing:
            - w_hat_all: Covariance of (vec(AL), vech(Sigma), Gamma)
            - w_hat: Covariance of (vec(AL), Gamma), vech(Sigma) rows and columns removed
            - V: Elimination matrix with V vec(Sigma) = vech(Sigma)

    Raises:
        DimensionError: If X, z and eta are not conformable
        ParameterError: If nw_lags is negative
        NumericalError: If X'X is singular
    """
    nw_lags = validate_non_negative_int(nw_lags, "nw_lags")
    eta = validate_matrix_shape(eta, matrix_name="eta")
    n, T = eta.shape
    X = validate_matrix_shape(X, T, 1 + n * p, "X")
    z = validate_vector(z, T, "z")

    # kron([X_t; eta_t; z_t], eta_t) for every t
    w = np.column_stack([X, eta.T, z])
    moments = (w[:, :, None] * eta.T[:, None, :]).reshape(T, -1)
    omega = covnw(moments, nw_lags, demean=True)

    Q1 = X.T @ X / T
    Q2 = (z @ X / T)[None, :]
    k = X.shape[1]
    select = np.hstack([np.zeros((n * p, 1)), np.eye(n * p)])

    try:
        # Q1 is symmetric, so A Q1^-1 = solve(Q1, A')'
        select_q1 = linalg.solve(Q1, select.T, assume_a="sym").T
        q2_q1 = linalg.solve(Q1, Q2.T, assume_a="sym").T
    except linalg.LinAlgError as e:
        raise_numerical_error(
            "Regressor second-moment matrix X'X/T is singular",
            operation="covariance of reduced-form estimators",
            error_type="singular matrix",
            details=str(e)
        )

    V = elimination_matrix(n)
    n_vech = V.shape[0]
    I_n = np.eye(n)

    S = np.zeros((n * n * p + n_vech + n, n * (k + n + 1)))
    S[:n * n * p, :n * k] = np.kron(select_q1, I_n)
    S[n * n * p:n * n * p + n_vech, n * k:n * k + n * n] = V
    S[n * n * p + n_vech:, :n * k] = -np.kron(q2_q1, I_n)
    S[n * n * p + n_vech:, n * k + n * n:] = I_n

    w_hat_all = S @ omega @ S.T
    w_hat_all = (w_hat_all + w_hat_all.T) / 2

    keep = np.r_[0:n * n * p, n * n * p + n_vech:w_hat_all.shape[0]]
    w_hat = w_hat_all[np.ix_(keep, keep)]

    logger.debug(f"Estimated asymptotic covariance with {nw_lags} Newey-West lags, T={T}")
    return w_hat_all, w_hat, V


def estimate_reduced_form(
    ydata: TimeSeriesDataFrame,
    z: TimeSeriesData,
    p: int,
    nw_lags: int = 0,
    var_names: Optional[List[str]] = None
) -> ReducedFormModel:
    """
    Estimate the reduced-form VAR(p) with intercept and the instrument covariance.

    Args:
        ydata: Endogenous variables (T_total x n); DataFrame column names are kept
        z: External instrument of length T_total
        p: Lag order
        nw_lags: Number of Newey-West lags for the asymptotic covariance
        var_names: Names of the endogenous variables (overrides DataFrame columns)

    Returns:
        ReducedFormModel: Estimates with T = T_total - p periods

    Raises:
        ParameterError: If p < 1 or nw_lags < 0
        DimensionError: If ydata and z lengths differ or there are too few observations
        EstimationError: If the data contain non-finite values or the VAR fit fails
    """
    p = validate_non_negative_int(p, "p", minimum=1)
    nw_lags = validate_non_negative_int(nw_lags, "nw_lags")

    if isinstance(ydata, pd.DataFrame):
        if var_names is None:
            var_names = [str(c) for c in ydata.columns]
        y = ydata.to_numpy(dtype=float)
    else:
        y = np.asarray(ydata, dtype=float)
    if y.ndim == 1:
        y = y[:, None]
    y = validate_matrix_shape(y, matrix_name="ydata")

    if isinstance(z, (pd.Series, pd.DataFrame)):
        z = z.to_numpy(dtype=float)
    z = validate_vector(z, y.shape[0], "z")

    T_total, n = y.shape
    if T_total - p <= 1 + n * p:
        raise_dimension_error(
            f"Too few observations ({T_total}) for a VAR({p}) in {n} variables",
            array_name="ydata",
            expected_shape=f"(> {p + 1 + n * p}, {n})",
            actual_shape=y.shape
        )

    if not (np.all(np.isfinite(y)) and np.all(np.isfinite(z))):
        raise EstimationError(
            "Data and instrument must be finite",
            model_type="VAR",
            estimation_method="OLS",
            issue="non-finite values"
        )

    try:
        sm_result = StatsmodelsVAR(y).fit(maxlags=p, trend="c")
    except Exception as e:
        raise EstimationError(
            f"Reduced-form VAR({p}) estimation failed",
            model_type="VAR",
            estimation_method="OLS",
            issue=str(e)
        ) from e

    al = np.hstack(list(sm_result.coefs))
    mu = np.asarray(sm_result.intercept, dtype=float)
    eta = np.asarray(sm_result.resid, dtype=float).T

    X, Y = lag_regressors(np.ascontiguousarray(y), p)
    T = eta.shape[1]
    z_aligned = z[p:]

    sigma = eta @ eta.T / T
    gamma = eta @ z_aligned / T

    w_hat_all, w_hat, _ = cov_ahat_sigmahat_gamma(p, X, z_aligned, eta, nw_lags)

    logger.debug(f"Estimated reduced-form VAR({p}) with n={n}, T={T}")

    return ReducedFormModel(
        al=al,
        p=p,
        n=n,
        sigma=sigma,
        eta=eta,
        gamma=gamma,
        w_hat=w_hat,
        mu=mu,
        X=X,
        Y=Y,
        Y0=y[:p].copy(),
        z=z_aligned,
        w_hat_all=w_hat_all,
        var_names=var_names,
    )
