# svariv/models/svar/svar_iv.py

"""
End-to-end SVAR-IV inference.

svar_iv estimates the reduced-form VAR, the covariance between its residuals
and the external instrument and their asymptotic covariance, then reports
weak-IV robust and delta-method confidence sets for the impulse responses,
the Cholesky benchmark and the estimated structural shock. Nothing is written
to disk unless SVARIVResult.save is called with an explicit path.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import pandas as pd

from svariv.core.config import get_inference_config
from svariv.core.results import ModelResult, save_result
from svariv.core.types import FilePath, TimeSeriesData, TimeSeriesDataFrame
from .cholesky import CholeskyBenchmark
from .msw import PluginInference, RobustInference, msw_inference
from .reduced_form import ReducedFormModel, estimate_reduced_form

# Set up module-level logger
logger = logging.getLogger("svariv.models.svar.svar_iv")


@dataclass(repr=False)
class SVARIVResult(ModelResult):
    """
    Complete output of an SVAR-IV inference run.

    Attributes:
        plugin: Plug-in responses, standard errors and structural shocks
        inference: Weak-IV robust sets and delta-method bounds
        cholesky: Cholesky benchmark responses
        reduced_form: Reduced-form estimates used for inference
    """
    model_name: str = "SVAR-IV"
    plugin: Optional[PluginInference] = None
    inference: Optional[RobustInference] = None
    cholesky: Optional[CholeskyBenchmark] = None
    reduced_form: Optional[ReducedFormModel] = None

    def to_pandas(self) -> pd.DataFrame:
        """Plug-in responses, robust sets and delta-method bounds in one long table."""
        inference = self.inference.to_pandas()
        plugin = self.plugin.to_pandas()
        return plugin.join(inference)

    def save(self, path: FilePath) -> Path:
        """Write the result as a single pickle payload to ``path``."""
        path = save_result(self, path)
        logger.info(f"Saved SVAR-IV results to {path}")
        return path

    def summary(self) -> str:
        rform = self.reduced_form
        text = super().summary()
        text += f"Variables: {', '.join(rform.names)}\n"
        text += f"Lags: {rform.p}, T: {rform.T}\n\n"
        text += self.inference.summary()
        return text


def svar_iv(
    ydata: TimeSeriesDataFrame,
    z: TimeSeriesData,
    p: int,
    confidence: Optional[float] = None,
    nw_lags: Optional[int] = None,
    norm: int = 1,
    scale: Optional[float] = None,
    horizons: Optional[int] = None,
    var_names: Optional[List[str]] = None,
    display_diagnostics: bool = True
) -> SVARIVResult:
    """
    Estimate an SVAR-IV and report weak-IV robust confidence sets.

    confidence, nw_lags, scale and horizons default to the ``inference``
    configuration section when left as None.

    Args:
        ydata: Endogenous variables (T_total x n)
        z: External instrument of length T_total
        p: Lag order of the VAR
        confidence: Nominal confidence level, strictly between 0 and 1
        nw_lags: Number of Newey-West lags in the asymptotic covariance
        norm: 1-based index of the normalization variable
        scale: Impact response of the normalization variable
        horizons: Largest horizon of the impulse responses
        var_names: Names of the endogenous variables
        display_diagnostics: Log the first-stage diagnostics at INFO level

    Returns:
        SVARIVResult: Plug-in estimates, inference, benchmark and reduced form

    Raises:
        ParameterError: If any request parameter is invalid
        DimensionError: If ydata and z are not conformable
        EstimationError: If the reduced-form estimation fails
        NumericalError: If Sigma is degenerate or Gamma is zero for the
            normalization variable
    """
    defaults = get_inference_config()
    if confidence is None:
        confidence = defaults.confidence
    if nw_lags is None:
        nw_lags = defaults.nw_lags
    if scale is None:
        scale = defaults.scale
    if horizons is None:
        horizons = defaults.horizons

    logger.debug("Weak-IV robust inference for SVAR-IV impulse responses")

    rform = estimate_reduced_form(ydata, z, p, nw_lags=nw_lags, var_names=var_names)

    inference, plugin, chol = msw_inference(
        confidence, norm, scale, horizons, rform,
        display_diagnostics=display_diagnostics
    )

    return SVARIVResult(
        plugin=plugin,
        inference=inference,
        cholesky=chol,
        reduced_form=rform,
        metadata={
            "p": rform.p,
            "nw_lags": nw_lags,
            "confidence": confidence,
            "norm": norm,
            "scale": scale,
            "horizons": horizons,
        },
    )
