"""
SVAR-IV inference.

Weak-instrument robust and delta-method confidence sets for impulse responses
of structural VARs identified with an external instrument, together with the
reduced-form estimators they consume.

Key components:
- ReducedFormModel and its reference estimators
- MA coefficients and their derivatives
- Weak-IV robust confidence sets and delta-method intervals
- Cholesky benchmark, structural shock recovery and first-stage diagnostics
"""

import logging

# Set up module-level logger
logger = logging.getLogger("svariv.models.svar")

from .reduced_form import (
    ReducedFormModel,
    CovarianceBlocks,
    partition_covariance,
    cov_ahat_sigmahat_gamma,
    estimate_reduced_form,
)

from .ma_representation import (
    MovingAverageRepresentation,
    ma_coefficients,
    ma_derivatives,
    build_ma_representation,
)

from .cholesky import (
    CholeskyBenchmark,
    cholesky_benchmark,
)

from .weak_iv import (
    BoundedInterval,
    ExcludedInterval,
    EmptySet,
    WholeLine,
    QuadraticSolution,
    critical_value,
    classify_quadratic,
    solve_quadratic_set,
    robust_quadratic,
)

from .delta_method import (
    DeltaMethodSolution,
    delta_method,
)

from .shocks import (
    StructuralShock,
    recover_structural_shock,
)

from .diagnostics import (
    FirstStageDiagnostics,
    first_stage_diagnostics,
)

from .msw import (
    RobustInference,
    PluginInference,
    msw_inference,
)

from .svar_iv import (
    SVARIVResult,
    svar_iv,
)

__all__ = [
    # Reduced form
    'ReducedFormModel',
    'CovarianceBlocks',
    'partition_covariance',
    'cov_ahat_sigmahat_gamma',
    'estimate_reduced_form',

    # MA representation
    'MovingAverageRepresentation',
    'ma_coefficients',
    'ma_derivatives',
    'build_ma_representation',

    # Cholesky benchmark
    'CholeskyBenchmark',
    'cholesky_benchmark',

    # Weak-IV robust sets
    'BoundedInterval',
    'ExcludedInterval',
    'EmptySet',
    'WholeLine',
    'QuadraticSolution',
    'critical_value',
    'classify_quadratic',
    'solve_quadratic_set',
    'robust_quadratic',

    # Delta method
    'DeltaMethodSolution',
    'delta_method',

    # Shocks and diagnostics
    'StructuralShock',
    'recover_structural_shock',
    'FirstStageDiagnostics',
    'first_stage_diagnostics',

    # Inference
    'RobustInference',
    'PluginInference',
    'msw_inference',
    'SVARIVResult',
    'svar_iv',
]
