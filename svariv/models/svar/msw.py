# svariv/models/svar/msw.py

"""
Weak-instrument robust and delta-method inference for SVAR-IV impulse responses.

msw_inference runs the whole confidence-set engine on a ReducedFormModel in a
single pass: MA coefficients and their Jacobians are computed once and shared
by the robust and the delta-method engines, for non-cumulative and cumulative
responses alike. The Cholesky benchmark and the structural shock recovery
consume the same reduced form independently.

Classes:
    RobustInference: Weak-IV robust sets and delta-method bounds
    PluginInference: Plug-in impulse responses, standard errors and shocks

Functions:
    msw_inference: Compute all inference outputs for one request
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd

from svariv.core.config import get_inference_config, get_numerical_config
from svariv.core.exceptions import raise_numerical_error, warn_numeric
from svariv.core.results import ModelResult, irf_table
from svariv.core.types import Matrix, Vector
from svariv.core.validation import (
    validate_index, validate_non_negative_int, validate_nonzero
)
from .cholesky import CholeskyBenchmark, cholesky_benchmark
from .delta_method import delta_method
from .diagnostics import FirstStageDiagnostics, first_stage_diagnostics
from .ma_representation import build_ma_representation
from .reduced_form import ReducedFormModel
from .shocks import recover_structural_shock
from .weak_iv import ConfidenceSet, QuadraticSolution, critical_value, robust_quadratic

# Set up module-level logger
logger = logging.getLogger("svariv.models.svar.msw")


@dataclass(repr=False)
class RobustInference(ModelResult):
    """
    Weak-IV robust confidence sets and delta-method bounds.

    Arrays have shape (n, horizons+1); the ``_cum`` variants refer to
    cumulative impulse responses. In case 2 ``lower``/``upper`` bound the
    excluded interval.

    Attributes:
        robust: Quadratic coefficients, cases and bounds (non-cumulative)
        robust_cum: Quadratic coefficients, cases and bounds (cumulative)
        dmethod_lower, dmethod_upper: Delta-method bounds (non-cumulative)
        dmethod_lower_cum, dmethod_upper_cum: Delta-method bounds (cumulative)
        T: Number of periods
        confidence: Nominal confidence level
        critical_value: Squared normal critical value
        diagnostics: First-stage Wald statistic report
        var_names: Names of the endogenous variables
    """
    model_name: str = "Weak-IV robust inference"
    robust: Optional[QuadraticSolution] = None
    robust_cum: Optional[QuadraticSolution] = None
    dmethod_lower: Optional[Matrix] = None
    dmethod_upper: Optional[Matrix] = None
    dmethod_lower_cum: Optional[Matrix] = None
    dmethod_upper_cum: Optional[Matrix] = None
    T: int = 0
    confidence: float = 0.68
    critical_value: float = float("nan")
    diagnostics: Optional[FirstStageDiagnostics] = None
    var_names: Optional[List[str]] = None

    # Legacy flat accessors

    @property
    def a(self) -> Matrix:
        return self.robust.a

    @property
    def b(self) -> Matrix:
        return self.robust.b

    @property
    def c(self) -> Matrix:
        return self.robust.c

    @property
    def delta(self) -> Matrix:
        return self.robust.delta

    @property
    def case(self) -> np.ndarray:
        return self.robust.case

    @property
    def lower(self) -> Matrix:
        return self.robust.lower

    @property
    def upper(self) -> Matrix:
        return self.robust.upper

    @property
    def a_cum(self) -> Matrix:
        return self.robust_cum.a

    @property
    def b_cum(self) -> Matrix:
        return self.robust_cum.b

    @property
    def c_cum(self) -> Matrix:
        return self.robust_cum.c

    @property
    def delta_cum(self) -> Matrix:
        return self.robust_cum.delta

    @property
    def case_cum(self) -> np.ndarray:
        return self.robust_cum.case

    @property
    def lower_cum(self) -> Matrix:
        return self.robust_cum.lower

    @property
    def upper_cum(self) -> Matrix:
        return self.robust_cum.upper

    def confidence_set(self, variable: int, horizon: int, cumulative: bool = False) -> ConfidenceSet:
        """Typed weak-IV robust set for a 0-based variable index and a horizon."""
        solution = self.robust_cum if cumulative else self.robust
        return solution.confidence_set(variable, horizon)

    def to_pandas(self) -> pd.DataFrame:
        """Long-format table indexed by (variable, horizon)."""
        columns = {}
        for suffix, solution, dm_lower, dm_upper in (
            ("", self.robust, self.dmethod_lower, self.dmethod_upper),
            ("_cum", self.robust_cum, self.dmethod_lower_cum, self.dmethod_upper_cum),
        ):
            columns[f"a{suffix}"] = solution.a
            columns[f"b{suffix}"] = solution.b
            columns[f"c{suffix}"] = solution.c
            columns[f"delta{suffix}"] = solution.delta
            columns[f"case{suffix}"] = solution.case
            columns[f"lower{suffix}"] = solution.lower
            columns[f"upper{suffix}"] = solution.upper
            columns[f"dmethod_lower{suffix}"] = dm_lower
            columns[f"dmethod_upper{suffix}"] = dm_upper
        return irf_table(columns, self.var_names)

    def summary(self) -> str:
        base = super().summary()
        counts = np.bincount(self.case.ravel(), minlength=5)[1:]
        counts_cum = np.bincount(self.case_cum.ravel(), minlength=5)[1:]
        text = (
            f"T: {self.T}\n"
            f"Confidence level: {self.confidence}\n"
            f"Critical value: {self.critical_value:.4f}\n"
            f"Cases (1-4), non-cumulative: {counts.tolist()}\n"
            f"Cases (1-4), cumulative: {counts_cum.tolist()}\n"
        )
        if self.diagnostics is not None:
            text += f"First-stage Wald statistic: {self.diagnostics.wald_statistic:.4f}\n"
        return base + text


@dataclass(repr=False)
class PluginInference(ModelResult):
    """
    Plug-in impulse responses, delta-method standard errors and the shock series.

    Attributes:
        irf, irf_std_error: Non-cumulative responses and standard errors, (n, horizons+1)
        irf_cum, irf_std_error_cum: Cumulative responses and standard errors
        epsilon: Estimated structural shock series, (T,)
        epsilon_std: Standardized structural shock series, (T,)
        var_names: Names of the endogenous variables
    """
    model_name: str = "Plug-in inference"
    irf: Optional[Matrix] = None
    irf_std_error: Optional[Matrix] = None
    irf_cum: Optional[Matrix] = None
    irf_std_error_cum: Optional[Matrix] = None
    epsilon: Optional[Vector] = None
    epsilon_std: Optional[Vector] = None
    var_names: Optional[List[str]] = None

    def to_pandas(self) -> pd.DataFrame:
        """Long-format table of responses indexed by (variable, horizon)."""
        return irf_table(
            {
                "irf": self.irf,
                "irf_std_error": self.irf_std_error,
                "irf_cum": self.irf_cum,
                "irf_std_error_cum": self.irf_std_error_cum,
            },
            self.var_names,
        )

    def shocks_to_pandas(self, index: Optional[pd.Index] = None) -> pd.DataFrame:
        return pd.DataFrame({"epsilon": self.epsilon, "epsilon_std": self.epsilon_std}, index=index)


def msw_inference(
    confidence: Optional[float],
    norm_var: int,
    scale: Optional[float],
    horizons: Optional[int],
    rform: ReducedFormModel,
    display_diagnostics: Optional[bool] = None
) -> Tuple[RobustInference, PluginInference, CholeskyBenchmark]:
    """
    Weak-IV robust and delta-method confidence sets for SVAR-IV impulse responses.

    Arguments passed as None take their value from the ``inference``
    configuration section.

    Args:
        confidence: Nominal confidence level, strictly between 0 and 1
        norm_var: 1-based index of the normalization variable
        scale: Impact response of the normalization variable (nonzero)
        horizons: Largest horizon (>= 0)
        rform: Reduced-form estimates and their asymptotic covariance
        display_diagnostics: Log the first-stage diagnostics at INFO level

    Returns:
        Tuple containing:
            - RobustInference: Weak-IV robust sets and delta-method bounds
            - PluginInference: Plug-in responses, standard errors and shocks
            - CholeskyBenchmark: Responses to the rescaled first Cholesky shock

    Raises:
        ParameterError: If confidence, norm_var, scale or horizons are invalid
        NumericalError: If Sigma is not symmetric positive definite or
            singular, or Gamma is exactly zero for the normalization variable

    Examples:
        >>> from svariv import estimate_reduced_form, msw_inference
        >>> rform = estimate_reduced_form(ydata, z, p=4, nw_lags=0)  # doctest: +SKIP
        >>> robust, plugin, chol = msw_inference(0.68, 1, 1.0, 20, rform)  # doctest: +SKIP
    """
    defaults = get_inference_config()
    if confidence is None:
        confidence = defaults.confidence
    if scale is None:
        scale = defaults.scale
    if horizons is None:
        horizons = defaults.horizons
    if display_diagnostics is None:
        display_diagnostics = defaults.display_diagnostics

    critval = critical_value(confidence)
    n, p, T = rform.n, rform.p, rform.T
    nvar = validate_index(norm_var, n, "norm_var")
    x = validate_nonzero(scale, "scale")
    horizons = validate_non_negative_int(horizons, "horizons")
    numerical = get_numerical_config()

    gamma = rform.gamma
    gamma_i = gamma[nvar - 1]
    if gamma_i == 0:
        raise_numerical_error(
            "Gamma is exactly zero for the normalization variable",
            operation="normalization",
            error_type="division by zero",
            values=gamma
        )
    if abs(gamma_i) < numerical.gamma_warning_threshold:
        warn_numeric(
            "Gamma is nearly zero for the normalization variable; "
            "plug-in responses may not be finite",
            operation="normalization",
            issue="near-zero Gamma",
            value=float(gamma_i)
        )

    logger.debug(
        f"Weak-IV inference: n={n}, p={p}, T={T}, horizons={horizons}, "
        f"confidence={confidence}, norm_var={nvar}, scale={x}"
    )

    ma = build_ma_representation(rform.al, p, horizons)

    chol = cholesky_benchmark(
        rform.sigma, ma.C, ma.Ccum, nvar, x,
        var_names=rform.names, symmetry_tol=numerical.symmetry_tolerance
    )

    blocks = rform.covariance_blocks()

    robust = robust_quadratic(ma.C, ma.G, gamma, blocks, T, nvar, x, critval)
    robust_cum = robust_quadratic(ma.Ccum, ma.Gcum, gamma, blocks, T, nvar, x, critval)

    dmethod = delta_method(ma.C, ma.G, gamma, rform.w_hat, T, nvar, x, critval)
    dmethod_cum = delta_method(ma.Ccum, ma.Gcum, gamma, rform.w_hat, T, nvar, x, critval)

    diagnostics = first_stage_diagnostics(
        gamma, rform.w_hat, T, n, p, nvar, confidence, critval, display=display_diagnostics
    )

    shock = recover_structural_shock(gamma, rform.sigma, rform.eta, nvar, x)

    metadata = {
        "norm_var": nvar,
        "scale": x,
        "horizons": horizons,
        "n": n,
        "p": p,
    }

    inference = RobustInference(
        robust=robust,
        robust_cum=robust_cum,
        dmethod_lower=dmethod.lower,
        dmethod_upper=dmethod.upper,
        dmethod_lower_cum=dmethod_cum.lower,
        dmethod_upper_cum=dmethod_cum.upper,
        T=T,
        confidence=confidence,
        critical_value=critval,
        diagnostics=diagnostics,
        var_names=rform.names,
        metadata=dict(metadata),
    )

    plugin = PluginInference(
        irf=dmethod.point,
        irf_std_error=dmethod.std_error,
        irf_cum=dmethod_cum.point,
        irf_std_error_cum=dmethod_cum.std_error,
        epsilon=shock.epsilon,
        epsilon_std=shock.epsilon_std,
        var_names=rform.names,
        metadata=dict(metadata),
    )

    return inference, plugin, chol
