# svariv/__init__.py
"""
SVAR-IV Toolbox - Weak-instrument robust inference for SVAR-IV models

Structural vector autoregressions identified with an external instrument
(SVAR-IV) deliver impulse responses whose usual delta-method confidence
intervals break down when the instrument is weak. The toolbox provides:
- Reduced-form VAR estimation and the asymptotic covariance of the
  coefficient and instrument-covariance estimators
- MA coefficients of the VAR and their derivatives
- Weak-instrument robust (Anderson-Rubin / Fieller type) confidence sets
- Delta-method confidence intervals and a Cholesky benchmark
- Recovery of the structural shock series and first-stage diagnostics

This module serves as the main entry point for the package.
"""

import logging
import os
from typing import Union

# Set up package-wide logger
logger = logging.getLogger("svariv")
logger.setLevel(logging.INFO)
_handler = logging.StreamHandler()
logger.addHandler(_handler)

from .version import __version__
from .core.config import LoggingConfig, get_logging_config
from .core.exceptions import ConfigurationError


def _configure_logging() -> None:
    """
    Apply the logging configuration to the package logger.

    SVARIV_LOG_LEVEL takes precedence over the configured level.
    """
    try:
        logging_config = get_logging_config()
    except ConfigurationError as e:
        logging_config = LoggingConfig()
        logger.warning(f"Using default logging configuration: {e}")

    _handler.setFormatter(logging.Formatter(logging_config.log_format))

    log_level = os.environ.get("SVARIV_LOG_LEVEL", logging_config.log_level).upper()
    if log_level in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        logger.setLevel(getattr(logging, log_level))
    else:
        logger.warning(f"Ignoring invalid SVARIV_LOG_LEVEL value: {log_level}")


_configure_logging()

from . import core
from . import utils
from . import models

from .core.exceptions import (
    SVARIVError,
    ParameterError,
    DimensionError,
    NumericalError,
    EstimationError,
    ConfigurationError,
    WeakInstrumentWarning,
)
from .models.svar import (
    ReducedFormModel,
    RobustInference,
    PluginInference,
    CholeskyBenchmark,
    SVARIVResult,
    estimate_reduced_form,
    cov_ahat_sigmahat_gamma,
    msw_inference,
    svar_iv,
)


def get_version() -> str:
    """
    Return the version of the SVAR-IV Toolbox.

    Returns:
        str: Version string in format MAJOR.MINOR.PATCH
    """
    return __version__


def set_log_level(level: Union[str, int]) -> None:
    """
    Set the logging level for the SVAR-IV Toolbox.

    Args:
        level: Logging level, either as string ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
              or as an integer constant from the logging module
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())
    logger.setLevel(level)
    logger.info(f"Log level set to {logging.getLevelName(level)}")


__all__ = [
    # Subpackages
    'core',
    'models',
    'utils',

    # Main API
    'ReducedFormModel',
    'RobustInference',
    'PluginInference',
    'CholeskyBenchmark',
    'SVARIVResult',
    'estimate_reduced_form',
    'cov_ahat_sigmahat_gamma',
    'msw_inference',
    'svar_iv',

    # Exceptions
    'SVARIVError',
    'ParameterError',
    'DimensionError',
    'NumericalError',
    'EstimationError',
    'ConfigurationError',
    'WeakInstrumentWarning',

    # Public functions
    'get_version',
    'set_log_level',

    # Version info
    '__version__',
]

logger.debug(f"SVAR-IV Toolbox v{__version__} initialized successfully")
