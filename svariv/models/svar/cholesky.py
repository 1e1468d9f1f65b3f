# svariv/models/svar/cholesky.py

"""
Cholesky benchmark impulse responses.

The benchmark identifies the shock of interest as the first orthogonalized
shock of a recursive (Cholesky) ordering, rescaled so that the normalization
variable responds on impact by the chosen scale.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

import numpy as np
import pandas as pd
from scipy import linalg

from svariv.core.exceptions import warn_numeric
from svariv.core.results import ModelResult, irf_table
from svariv.core.types import CovarianceMatrix, Matrix, Tensor3D, Vector
from svariv.core.validation import validate_positive_definite

# Set up module-level logger
logger = logging.getLogger("svariv.models.svar.cholesky")


@dataclass(repr=False)
class CholeskyBenchmark(ModelResult):
    """
    Impulse responses to the rescaled first Cholesky shock.

    Attributes:
        irf: Non-cumulative responses, (n, horizons+1)
        irf_cum: Cumulative responses, (n, horizons+1)
        impact: Rescaled first column of the lower Cholesky factor, (n,)
        normalization_variable: 1-based index of the normalization variable
        scale: Impact response of the normalization variable
        var_names: Names of the endogenous variables
    """
    model_name: str = "Cholesky benchmark"
    irf: Optional[Matrix] = None
    irf_cum: Optional[Matrix] = None
    impact: Optional[Vector] = None
    normalization_variable: int = 1
    scale: float = 1.0
    var_names: Optional[List[str]] = None

    def to_pandas(self) -> pd.DataFrame:
        """Long-format table of the benchmark responses."""
        return irf_table({"irf": self.irf, "irf_cum": self.irf_cum}, self.var_names)

    def summary(self) -> str:
        base = super().summary()
        return base + (
            f"Normalization variable: {self.normalization_variable} (scale {self.scale})\n"
            f"Horizons: {self.irf.shape[1] - 1}\n"
        )


def cholesky_benchmark(
    sigma: CovarianceMatrix,
    C: Tensor3D,
    Ccum: Tensor3D,
    nvar: int,
    scale: float,
    var_names: Optional[List[str]] = None,
    symmetry_tol: float = 1e-8
) -> CholeskyBenchmark:
    """
    Compute the Cholesky benchmark impulse responses.

    Args:
        sigma: Residual covariance (n, n), symmetric positive definite
        C: MA coefficients (horizons+1, n, n)
        Ccum: Cumulative MA coefficients (horizons+1, n, n)
        nvar: 1-based index of the normalization variable
        scale: Impact response of the normalization variable
        var_names: Names of the endogenous variables
        symmetry_tol: Relative tolerance of the symmetry check

    Returns:
        CholeskyBenchmark: Non-cumulative and cumulative responses

    Raises:
        NumericalError: If sigma is not symmetric positive definite
    """
    sigma = validate_positive_definite(sigma, "Sigma", tol=symmetry_tol)
    chol = linalg.cholesky(sigma, lower=True)

    pivot = chol[nvar - 1, 0]
    if pivot == 0:
        warn_numeric(
            "The first Cholesky shock has no impact on the normalization variable; "
            "the benchmark responses are not finite",
            operation="Cholesky benchmark",
            issue="zero impact on normalization variable",
            value=nvar
        )
    with np.errstate(divide="ignore", invalid="ignore"):
        impact = scale * chol[:, 0] / pivot

    irf = np.einsum("hij,j->ih", C, impact)
    irf_cum = np.einsum("hij,j->ih", Ccum, impact)

    logger.debug(f"Cholesky benchmark computed for normalization variable {nvar}")
    return CholeskyBenchmark(
        irf=irf,
        irf_cum=irf_cum,
        impact=impact,
        normalization_variable=nvar,
        scale=scale,
        var_names=var_names,
    )
