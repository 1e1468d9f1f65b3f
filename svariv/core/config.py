'''
Configuration management for the SVAR-IV toolbox.

The configuration follows a layered approach:
1. Default configurations built into the package
2. An optional user configuration file (JSON)
3. Environment variables of the form SVARIV_<SECTION>_<OPTION>
4. Runtime modifications through set_config()

Configuration only supplies defaults; every inference entry point still
accepts its parameters explicitly. The user configuration file is read if it
exists and is never created implicitly.
'''

import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from .exceptions import ConfigurationError
from .types import ConfigDict, LogLevel

# Set up module-level logger
logger = logging.getLogger("svariv.core.config")

# Constants for configuration paths and environment variables
CONFIG_ENV_PREFIX = "SVARIV_"
DEFAULT_CONFIG_FILENAME = "svariv_config.json"
USER_CONFIG_DIR_ENV = "SVARIV_CONFIG_DIR"

_VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigSection(Enum):
    """Configuration sections."""
    INFERENCE = "inference"
    NUMERICAL = "numerical"
    LOGGING = "logging"


@dataclass
class InferenceConfig:
    """
    Default request parameters for SVAR-IV inference.

    Attributes:
        confidence: Default nominal confidence level
        horizons: Default number of impulse-response horizons
        nw_lags: Default number of Newey-West lags for the covariance estimator
        scale: Default shock scale for the normalization variable
        display_diagnostics: Whether first-stage diagnostics are logged by default
    """
    confidence: float = 0.68
    horizons: int = 20
    nw_lags: int = 0
    scale: float = 1.0
    display_diagnostics: bool = False


@dataclass
class NumericalConfig:
    """
    Numerical tolerances.

    Attributes:
        symmetry_tolerance: Relative tolerance for the symmetry check of Sigma
        gamma_warning_threshold: |Gamma[nvar]| below this value triggers a
            numerical warning before the intervals are computed
    """
    symmetry_tolerance: float = 1e-8
    gamma_warning_threshold: float = 1e-10


@dataclass
class LoggingConfig:
    """
    Logging configuration.

    Attributes:
        log_level: Default logging level of the package logger
        log_format: Format string for log messages
    """
    log_level: LogLevel = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class SVARIVConfig:
    """Complete configuration combining all sections."""
    inference: InferenceConfig = field(default_factory=InferenceConfig)
    numerical: NumericalConfig = field(default_factory=NumericalConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


class ConfigManager:
    """
    Configuration manager.

    Holds the active configuration, applies the user file and environment
    overrides once on initialization, and tracks which options were modified
    at runtime.
    """

    def __init__(self) -> None:
        self._config = SVARIVConfig()
        self._initialized = False
        self._config_file: Optional[Path] = None
        self._modified_keys: set = set()

    def initialize(self) -> None:
        """Load the user configuration file and apply environment overrides."""
        if self._initialized:
            return

        env_config_dir = os.environ.get(USER_CONFIG_DIR_ENV)
        if env_config_dir:
            self._config_file = Path(env_config_dir) / DEFAULT_CONFIG_FILENAME
            self._load_user_config()

        self._apply_env_overrides()
        self._validate_config()

        self._initialized = True
        logger.debug("Configuration manager initialized")

    def _load_user_config(self) -> None:
        if self._config_file is None or not self._config_file.exists():
            logger.debug("No user configuration file found")
            return

        try:
            with open(self._config_file, 'r') as f:
                user_config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(
                f"Failed to load user configuration from {self._config_file}",
                details=str(e)
            ) from e

        for section, options in user_config.items():
            if not isinstance(options, dict):
                continue
            for option, value in options.items():
                self._set(section, option, value)
        logger.debug(f"Loaded user configuration from {self._config_file}")

    def _apply_env_overrides(self) -> None:
        for env_var, value in os.environ.items():
            if not env_var.startswith(CONFIG_ENV_PREFIX) or env_var == USER_CONFIG_DIR_ENV:
                continue

            key = env_var[len(CONFIG_ENV_PREFIX):]
            parts = key.lower().split('_', 1)
            if len(parts) != 2:
                continue

            section, option = parts
            section_obj = getattr(self._config, section, None)
            if section_obj is None or not hasattr(section_obj, option):
                continue

            current_value = getattr(section_obj, option)
            try:
                if isinstance(current_value, bool):
                    typed_value: Any = value.lower() in ('true', 'yes', '1', 'y')
                elif isinstance(current_value, int):
                    typed_value = int(value)
                elif isinstance(current_value, float):
                    typed_value = float(value)
                else:
                    typed_value = value.upper() if option == "log_level" else value
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid environment override {env_var}={value}",
                    section=section,
                    option=option,
                    value=value,
                    details=str(e)
                ) from e

            setattr(section_obj, option, typed_value)
            logger.debug(f"Applied environment override: {env_var}={value}")

    def _validate_config(self) -> None:
        inference = self._config.inference
        if not 0 < inference.confidence < 1:
            raise ConfigurationError(
                "inference.confidence must be strictly between 0 and 1",
                section="inference", option="confidence", value=inference.confidence
            )
        if inference.horizons < 0:
            raise ConfigurationError(
                "inference.horizons must be non-negative",
                section="inference", option="horizons", value=inference.horizons
            )
        if inference.nw_lags < 0:
            raise ConfigurationError(
                "inference.nw_lags must be non-negative",
                section="inference", option="nw_lags", value=inference.nw_lags
            )
        if inference.scale == 0:
            raise ConfigurationError(
                "inference.scale must be nonzero",
                section="inference", option="scale", value=inference.scale
            )

        numerical = self._config.numerical
        for option in ("symmetry_tolerance", "gamma_warning_threshold"):
            value = getattr(numerical, option)
            if value < 0:
                raise ConfigurationError(
                    f"numerical.{option} must be non-negative",
                    section="numerical", option=option, value=value
                )

        if self._config.logging.log_level not in _VALID_LOG_LEVELS:
            raise ConfigurationError(
                f"logging.log_level must be one of {_VALID_LOG_LEVELS}",
                section="logging", option="log_level", value=self._config.logging.log_level
            )

    def _section(self, section: str) -> Any:
        try:
            ConfigSection(section)
        except ValueError:
            raise ConfigurationError(
                f"Unknown configuration section: {section}",
                section=section,
                details=f"Valid sections: {[s.value for s in ConfigSection]}"
            )
        return getattr(self._config, section)

    def _set(self, section: str, option: str, value: Any) -> None:
        section_obj = self._section(section)
        if not hasattr(section_obj, option):
            raise ConfigurationError(
                f"Unknown configuration option: {section}.{option}",
                section=section,
                option=option
            )
        setattr(section_obj, option, value)

    def get(self, section: str, option: str, default: Any = None) -> Any:
        section_obj = self._section(section)
        return getattr(section_obj, option, default)

    def set(self, section: str, option: str, value: Any) -> None:
        previous = self.get(section, option)
        self._set(section, option, value)
        try:
            self._validate_config()
        except ConfigurationError:
            self._set(section, option, previous)
            raise
        self._modified_keys.add(f"{section}.{option}")
        logger.debug(f"Set configuration {section}.{option}={value}")

    def reset(self, section: Optional[str] = None, option: Optional[str] = None) -> None:
        if section is None:
            self._config = SVARIVConfig()
            self._modified_keys.clear()
            return

        defaults = getattr(SVARIVConfig(), section, None)
        if defaults is None:
            self._section(section)

        if option is None:
            setattr(self._config, section, defaults)
            self._modified_keys = {k for k in self._modified_keys if not k.startswith(f"{section}.")}
            return

        if not hasattr(defaults, option):
            raise ConfigurationError(
                f"Unknown configuration option: {section}.{option}",
                section=section,
                option=option
            )
        self._set(section, option, getattr(defaults, option))
        self._modified_keys.discard(f"{section}.{option}")

    def get_modified_options(self) -> List[str]:
        return sorted(self._modified_keys)

    def to_dict(self) -> ConfigDict:
        return asdict(self._config)

    def get_section_options(self, section: str) -> List[str]:
        return [f.name for f in fields(self._section(section))]


# Create a singleton instance of the configuration manager
_config_manager = ConfigManager()


def initialize_config() -> None:
    """Initialize the configuration system."""
    _config_manager.initialize()


def get_config(section: str, option: str, default: Any = None) -> Any:
    """
    Get a configuration value.

    Args:
        section: The configuration section
        option: The configuration option
        default: Default value if the option is not found

    Returns:
        The configuration value, or the default if not found

    Raises:
        ConfigurationError: If the section is not found
    """
    if not _config_manager._initialized:
        initialize_config()

    return _config_manager.get(section, option, default)


def set_config(section: str, option: str, value: Any) -> None:
    """
    Set a configuration value.

    Raises:
        ConfigurationError: If the section or option is not found or the
            value violates a constraint (the previous value is kept)
    """
    if not _config_manager._initialized:
        initialize_config()

    _config_manager.set(section, option, value)


def reset_config(section: Optional[str] = None, option: Optional[str] = None) -> None:
    """
    Reset configuration to default values.

    Args:
        section: The configuration section to reset, or None to reset all
        option: The configuration option to reset, or None to reset the entire section
    """
    if not _config_manager._initialized:
        initialize_config()

    _config_manager.reset(section, option)


def get_config_manager() -> ConfigManager:
    """Get the configuration manager instance."""
    if not _config_manager._initialized:
        initialize_config()

    return _config_manager


def get_inference_config() -> InferenceConfig:
    """Get the inference defaults section."""
    return get_config_manager()._config.inference


def get_numerical_config() -> NumericalConfig:
    """Get the numerical tolerances section."""
    return get_config_manager()._config.numerical


def get_logging_config() -> LoggingConfig:
    """Get the logging section."""
    return get_config_manager()._config.logging


def to_dict() -> Dict[str, Any]:
    """Return the full configuration as a nested dictionary."""
    return get_config_manager().to_dict()
