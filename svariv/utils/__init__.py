"""
SVAR-IV Toolbox Utilities Module

Matrix operations and covariance estimators shared by the reduced-form
estimators and the inference engine.

Key components:
- Structural matrices (elimination, companion and selection matrices)
- Newey-West HAC covariance estimation
"""

import logging

# Set up module-level logger
logger = logging.getLogger("svariv.utils")

from .matrix_ops import (
    elimination_matrix,
    companion_matrix,
    selection_matrix,
)

from .covariance import (
    covnw,
    kernel_weight,
)

__all__ = [
    # Matrix operations
    'elimination_matrix',
    'companion_matrix',
    'selection_matrix',

    # Covariance estimators
    'covnw',
    'kernel_weight',
]
