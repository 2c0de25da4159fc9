'''
Configuration management for arimafit.

Settings are layered, with later layers overriding earlier ones:
1. Defaults built into the dataclasses below
2. A JSON user configuration file
3. Environment variables named ``ARIMAFIT_<SECTION>_<OPTION>``
4. Runtime modifications through :func:`set_config`

The optimizer section supplies the defaults used by :func:`arimafit.optim.minimize`
and the model orchestrator whenever a caller leaves a tolerance or iteration
budget unspecified.
'''

import os
import json
import logging
from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np

from .exceptions import ConfigurationError
from .types import LogLevel

logger = logging.getLogger("arimafit.core.config")

CONFIG_ENV_PREFIX = "ARIMAFIT_"
DEFAULT_CONFIG_FILENAME = "arimafit_config.json"
USER_CONFIG_DIR_ENV = "ARIMAFIT_CONFIG_DIR"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigSection(Enum):
    """Enumeration of configuration sections."""
    OPTIMIZER = "optimizer"
    FORECAST = "forecast"
    LOGGING = "logging"


@dataclass
class OptimizerConfig:
    """
    Default settings for the BFGS optimizer.

    Attributes:
        max_iter: Maximum number of BFGS iterations
        gradient_tolerance: Relative gradient-norm tolerance, scaled by max(1, |f|)
        step_tolerance: Relative step-length tolerance, scaled by max(1, ||x||)
        finite_difference_step: Relative step for central-difference gradients
        hessian_step: Relative step for finite-difference Hessians
        line_search_max_iter: Maximum trial steps per line search
    """
    max_iter: int = 500
    gradient_tolerance: float = 1e-6
    step_tolerance: float = 1e-10
    finite_difference_step: float = float(np.finfo(np.float64).eps ** (1.0 / 3.0))
    hessian_step: float = float(np.finfo(np.float64).eps ** 0.25)
    line_search_max_iter: int = 40


@dataclass
class ForecastConfig:
    """
    Default settings for forecasting.

    Attributes:
        alpha: Significance level for prediction intervals
    """
    alpha: float = 0.05


@dataclass
class LoggingConfig:
    """
    Logging configuration for the ``arimafit`` logger hierarchy.

    Attributes:
        log_level: Level of the package logger
        log_format: Format string for log messages
        log_date_format: Format string for log message timestamps
        console_logging: Whether to attach a console handler
    """
    log_level: LogLevel = "WARNING"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_date_format: str = "%Y-%m-%d %H:%M:%S"
    console_logging: bool = True


@dataclass
class ArimafitConfig:
    """Complete configuration, one attribute per section."""
    optimizer: OptimizerConfig = field(default_factory=OptimizerConfig)
    forecast: ForecastConfig = field(default_factory=ForecastConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _check_value(section: str, option: str, value: Any) -> None:
    """Raise ConfigurationError if ``value`` violates the option's constraint."""
    if option == "max_iter" and (not isinstance(value, (int, np.integer)) or value < 0):
        raise ConfigurationError("max_iter must be a non-negative integer",
                                 section=section, option=option, value=value)
    if option == "line_search_max_iter" and (not isinstance(value, (int, np.integer)) or value < 1):
        raise ConfigurationError("line_search_max_iter must be a positive integer",
                                 section=section, option=option, value=value)
    if option in ("gradient_tolerance", "step_tolerance", "finite_difference_step",
                  "hessian_step") and not (0 < value < 1):
        raise ConfigurationError(f"{option} must lie strictly between 0 and 1",
                                 section=section, option=option, value=value)
    if option == "alpha" and not (0 < value < 1):
        raise ConfigurationError("alpha must lie strictly between 0 and 1",
                                 section=section, option=option, value=value)
    if option == "log_level" and value not in _LOG_LEVELS:
        raise ConfigurationError(f"log_level must be one of {', '.join(_LOG_LEVELS)}",
                                 section=section, option=option, value=value)


def _coerce(current_value: Any, value: Any) -> Any:
    """Convert ``value`` to the type of ``current_value``."""
    value_type = type(current_value)
    if value_type is bool and isinstance(value, str):
        return value.lower() in ('true', 'yes', '1', 'y')
    if value_type is int and isinstance(value, str):
        return int(value)
    if value_type is float and isinstance(value, (str, int, np.integer)):
        return float(value)
    if value_type is not type(value):
        return value_type(value)
    return value


class ConfigManager:
    """
    Configuration manager for arimafit.

    Attributes:
        _config: The current configuration object
        _initialized: Whether the manager has loaded files and environment overrides
        _config_file: Path to the user configuration file
    """

    def __init__(self):
        """Initialize the configuration manager with default settings."""
        self._config = ArimafitConfig()
        self._initialized = False
        self._config_file: Optional[Path] = None

    def initialize(self) -> None:
        """
        Initialize the configuration manager.

        This method:
        1. Locates the user configuration file
        2. Loads user configuration from file if available
        3. Applies environment variable overrides
        4. Validates the configuration
        5. Sets up logging based on configuration
        """
        if self._initialized:
            return

        self._config_file = self.get_user_config_dir() / DEFAULT_CONFIG_FILENAME
        self._load_user_config()
        self._apply_env_overrides()
        self._validate_config()
        self._setup_logging()

        self._initialized = True
        logger.debug("Configuration manager initialized")

    def get_user_config_dir(self) -> Path:
        """Return the directory holding the user configuration file."""
        env_config_dir = os.environ.get(USER_CONFIG_DIR_ENV)
        if env_config_dir:
            return Path(env_config_dir)
        return Path.home() / ".arimafit"

    def _load_user_config(self) -> None:
        """Load user configuration from file, ignoring unreadable files."""
        if not self._config_file or not self._config_file.exists():
            logger.debug("No user configuration file found")
            return

        try:
            with open(self._config_file, 'r') as f:
                user_config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to load user configuration: {e}")
            return

        self._update_from_dict(user_config)
        logger.debug(f"Loaded user configuration from {self._config_file}")

    def _apply_env_overrides(self) -> None:
        """Apply ``ARIMAFIT_<SECTION>_<OPTION>`` environment variables."""
        for env_var, value in os.environ.items():
            if not env_var.startswith(CONFIG_ENV_PREFIX) or env_var == USER_CONFIG_DIR_ENV:
                continue

            key = env_var[len(CONFIG_ENV_PREFIX):]
            parts = key.lower().split('_', 1)
            if len(parts) != 2:
                continue

            section, option = parts
            try:
                ConfigSection(section)
            except ValueError:
                continue

            section_obj = getattr(self._config, section)
            if not hasattr(section_obj, option):
                continue

            try:
                typed_value = _coerce(getattr(section_obj, option), value)
            except ValueError as e:
                logger.warning(f"Failed to apply environment override {env_var}: {e}")
                continue

            setattr(section_obj, option, typed_value)
            logger.debug(f"Applied environment override: {env_var}={value}")

    def _setup_logging(self) -> None:
        """Configure the ``arimafit`` logger from the logging section."""
        package_logger = logging.getLogger("arimafit")

        for handler in package_logger.handlers[:]:
            package_logger.removeHandler(handler)

        package_logger.setLevel(getattr(logging, self._config.logging.log_level))

        if self._config.logging.console_logging:
            formatter = logging.Formatter(
                fmt=self._config.logging.log_format,
                datefmt=self._config.logging.log_date_format
            )
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(formatter)
            package_logger.addHandler(console_handler)

    def _validate_config(self) -> None:
        """Validate every option, restoring defaults for invalid values."""
        defaults = ArimafitConfig()
        for section_name in self.get_sections():
            section = getattr(self._config, section_name)
            for f in fields(section):
                value = getattr(section, f.name)
                try:
                    _check_value(section_name, f.name, value)
                except ConfigurationError:
                    default = getattr(getattr(defaults, section_name), f.name)
                    logger.warning(
                        f"Invalid value for {section_name}.{f.name}: {value!r}, using {default!r}"
                    )
                    setattr(section, f.name, default)

    def _update_from_dict(self, config_dict: Dict[str, Any]) -> None:
        """
        Update the configuration from a dictionary.

        Args:
            config_dict: Mapping of section name to a mapping of option values
        """
        for section_name, section_dict in config_dict.items():
            if not self.has_section(section_name):
                logger.warning(f"Unknown configuration section: {section_name}")
                continue

            section = getattr(self._config, section_name)
            for option_name, option_value in section_dict.items():
                if not hasattr(section, option_name):
                    logger.warning(f"Unknown configuration option: {section_name}.{option_name}")
                    continue
                try:
                    setattr(section, option_name, _coerce(getattr(section, option_name), option_value))
                except (TypeError, ValueError) as e:
                    logger.warning(f"Failed to set {section_name}.{option_name}: {e}")

    def save_user_config(self) -> None:
        """Write the current configuration to the user configuration file."""
        if not self._config_file:
            self._config_file = self.get_user_config_dir() / DEFAULT_CONFIG_FILENAME

        self._config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self._config_file, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

        logger.debug(f"Saved user configuration to {self._config_file}")

    def to_dict(self) -> Dict[str, Any]:
        """Return the configuration as a nested dictionary."""
        return {
            section_name: {f.name: getattr(getattr(self._config, section_name), f.name)
                           for f in fields(getattr(self._config, section_name))}
            for section_name in self.get_sections()
        }

    def get(self, section: str, option: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            section: The configuration section
            option: The configuration option
            default: Default value if the option is not found

        Returns:
            The configuration value, or the default if not found
        """
        section_obj = getattr(self._config, section, None)
        if section_obj is None or not hasattr(section_obj, option):
            return default
        return getattr(section_obj, option)

    def set(self, section: str, option: str, value: Any) -> None:
        """
        Set a configuration value.

        Args:
            section: The configuration section
            option: The configuration option
            value: The value to set

        Raises:
            ConfigurationError: If the section or option is unknown or the value is invalid
        """
        if not self.has_section(section):
            raise ConfigurationError(f"Unknown configuration section: {section}",
                                     section=section, option=option, value=value)

        section_obj = getattr(self._config, section)
        if not hasattr(section_obj, option):
            raise ConfigurationError(f"Unknown configuration option: {section}.{option}",
                                     section=section, option=option, value=value)

        try:
            typed_value = _coerce(getattr(section_obj, option), value)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Failed to set configuration option: {section}.{option}",
                                     section=section, option=option, value=value,
                                     details=str(e)) from e

        _check_value(section, option, typed_value)
        setattr(section_obj, option, typed_value)

        if section == ConfigSection.LOGGING.value:
            self._setup_logging()

        logger.debug(f"Set configuration option: {section}.{option}={value}")

    def reset(self, section: Optional[str] = None, option: Optional[str] = None) -> None:
        """
        Reset configuration to default values.

        Args:
            section: The configuration section to reset, or None to reset all
            option: The option to reset, or None to reset the entire section

        Raises:
            ConfigurationError: If the section or option is not found
        """
        if section is None:
            self._config = ArimafitConfig()
            self._setup_logging()
            logger.debug("Reset all configuration to defaults")
            return

        if not self.has_section(section):
            raise ConfigurationError(f"Unknown configuration section: {section}", section=section)

        defaults = getattr(ArimafitConfig(), section)
        if option is None:
            setattr(self._config, section, defaults)
        else:
            if not hasattr(defaults, option):
                raise ConfigurationError(f"Unknown configuration option: {section}.{option}",
                                         section=section, option=option)
            setattr(getattr(self._config, section), option, getattr(defaults, option))

        if section == ConfigSection.LOGGING.value:
            self._setup_logging()

    def has_section(self, section: str) -> bool:
        """Check whether ``section`` names a configuration section."""
        return section in self.get_sections()

    def get_sections(self) -> List[str]:
        """Return the names of all configuration sections."""
        return [s.value for s in ConfigSection]

    def get_section(self, section: str) -> Any:
        """
        Get a whole configuration section.

        Raises:
            ConfigurationError: If the section is not found
        """
        if not self.has_section(section):
            raise ConfigurationError(f"Unknown configuration section: {section}", section=section)
        return getattr(self._config, section)


_config_manager = ConfigManager()


def initialize_config() -> None:
    """Load the user file and environment overrides into the global manager."""
    _config_manager.initialize()


def get_config_manager() -> ConfigManager:
    """Return the initialized global configuration manager."""
    if not _config_manager._initialized:
        initialize_config()
    return _config_manager


def get_config(section: str, option: str, default: Any = None) -> Any:
    """
    Get a configuration value.

    Args:
        section: The configuration section
        option: The configuration option
        default: Default value if the option is not found

    Returns:
        The configuration value, or the default if not found
    """
    return get_config_manager().get(section, option, default)


def set_config(section: str, option: str, value: Any) -> None:
    """
    Set a configuration value.

    Raises:
        ConfigurationError: If the section or option is unknown or the value is invalid
    """
    get_config_manager().set(section, option, value)


def reset_config(section: Optional[str] = None, option: Optional[str] = None) -> None:
    """Reset one option, one section, or the whole configuration to defaults."""
    get_config_manager().reset(section, option)


def save_config() -> None:
    """Save the current configuration to the user configuration file."""
    get_config_manager().save_user_config()


def get_optimizer_config() -> OptimizerConfig:
    """Return the optimizer configuration section."""
    return get_config_manager().get_section("optimizer")


def get_forecast_config() -> ForecastConfig:
    """Return the forecast configuration section."""
    return get_config_manager().get_section("forecast")


def get_logging_config() -> LoggingConfig:
    """Return the logging configuration section."""
    return get_config_manager().get_section("logging")
