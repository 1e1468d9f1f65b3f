# svariv/models/svar/diagnostics.py

"""
First-stage diagnostics for the external instrument.

The Wald statistic for the covariance between the instrument and the
residual of the normalization variable decides whether the weak-IV robust
confidence sets are guaranteed to be bounded: the leading coefficient of every
quadratic is positive exactly when the statistic exceeds the critical value.
"""

import logging
from dataclasses import dataclass

import numpy as np

from svariv.core.exceptions import warn_weak_instrument
from svariv.core.types import CovarianceMatrix, Vector

# Set up module-level logger
logger = logging.getLogger("svariv.models.svar.diagnostics")


@dataclass(frozen=True)
class FirstStageDiagnostics:
    """
    First-stage Wald statistic compared with the critical value.

    Attributes:
        wald_statistic: (sqrt(T) Gamma_i)² / WHat[n²p+i, n²p+i]
        critical_value: Squared normal critical value
        confidence: Nominal confidence level
    """
    wald_statistic: float
    critical_value: float
    confidence: float

    @property
    def bounded_guaranteed(self) -> bool:
        """Whether every robust confidence set is a bounded interval or empty."""
        return bool(self.wald_statistic > self.critical_value)

    def summary(self) -> str:
        lines = [
            f"(the nominal confidence level is {self.confidence * 100:g}%)",
            "First-stage Wald statistic for the covariance between the instrument "
            f"and the normalization variable: {self.wald_statistic:.4f}",
            f"Critical value: {self.critical_value:.4f}",
        ]
        if self.bounded_guaranteed:
            lines.append("The weak-IV robust confidence set is a bounded interval at every horizon.")
        else:
            lines.append("The weak-IV robust confidence set may be unbounded (check the case arrays).")
        return "\n".join(lines)


def first_stage_diagnostics(
    gamma: Vector,
    w_hat: CovarianceMatrix,
    T: int,
    n: int,
    p: int,
    nvar: int,
    confidence: float,
    critval: float,
    display: bool = False
) -> FirstStageDiagnostics:
    """
    Compute the first-stage Wald statistic and report it.

    The summary is logged at INFO level when ``display`` is set. A warning
    is logged and a WeakInstrumentWarning issued whenever the statistic falls
    below the critical value. Never raises for weak instruments.
    """
    i = nvar - 1
    k = n * n * p
    with np.errstate(divide="ignore", invalid="ignore"):
        wald = float((np.sqrt(T) * gamma[i]) ** 2 / w_hat[k + i, k + i])

    diagnostics = FirstStageDiagnostics(
        wald_statistic=wald, critical_value=critval, confidence=confidence
    )

    if display:
        for line in diagnostics.summary().splitlines():
            logger.info(line)

    if wald < critval:
        message = (
            f"First-stage Wald statistic {wald:.4f} is below the critical value "
            f"{critval:.4f}; weak-IV robust confidence sets may be unbounded"
        )
        logger.warning(message)
        warn_weak_instrument(message, wald_statistic=wald, critical_value=critval)

    return diagnostics
