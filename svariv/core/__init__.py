"""
SVAR-IV Toolbox Core Module

This module provides the foundation shared by every inference component:
the exception and warning hierarchy, type aliases, input validation,
configuration management and the result base class.
"""

import logging

# Set up module-level logger
logger = logging.getLogger("svariv.core")

from .exceptions import (
    SVARIVError,
    ParameterError,
    DimensionError,
    NumericalError,
    EstimationError,
    ConfigurationError,
    SVARIVWarning,
    WeakInstrumentWarning,
    NumericWarning,
)

from .types import (
    Vector,
    Matrix,
    Tensor3D,
    TimeSeriesData,
    TimeSeriesDataFrame,
    IntervalCase,
)

from .validation import (
    validate_matrix_shape,
    validate_square_matrix,
    validate_vector,
    validate_symmetric,
    validate_positive_definite,
    validate_probability,
    validate_index,
    validate_nonzero,
    validate_non_negative_int,
)

from .config import (
    get_config,
    set_config,
    reset_config,
    get_config_manager,
)

from .results import (
    ModelResult,
    irf_table,
    save_result,
    load_result,
)

__all__ = [
    # Exceptions
    'SVARIVError',
    'ParameterError',
    'DimensionError',
    'NumericalError',
    'EstimationError',
    'ConfigurationError',
    'SVARIVWarning',
    'WeakInstrumentWarning',
    'NumericWarning',

    # Types
    'Vector',
    'Matrix',
    'Tensor3D',
    'TimeSeriesData',
    'TimeSeriesDataFrame',
    'IntervalCase',

    # Validation
    'validate_matrix_shape',
    'validate_square_matrix',
    'validate_vector',
    'validate_symmetric',
    'validate_positive_definite',
    'validate_probability',
    'validate_index',
    'validate_nonzero',
    'validate_non_negative_int',

    # Configuration
    'get_config',
    'set_config',
    'reset_config',
    'get_config_manager',

    # Results
    'ModelResult',
    'irf_table',
    'save_result',
    'load_result',
]

logger.debug("SVAR-IV core module initialized")
