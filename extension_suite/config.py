# extension_suite/config.py
import logging
import os
from pathlib import Path
from typing import Optional, Union

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

logger = logging.getLogger(__name__)

# Time-windowed buffering
DEFAULT_BUFFER_PERIOD_SECONDS = 1.0  # Window length used when no period is configured

# Backoff-retry behaviour
RETRY_INITIAL_DELAY_SECONDS = 0.0  # First resubscription happens immediately
RETRY_BACKOFF_FACTOR = 2.0         # Multiplier applied to the previous delay
RETRY_MIN_DELAY_SECONDS = 1.0      # Smallest non-zero delay handed out by exponential backoff
RETRY_MAX_DELAY_SECONDS = 60.0     # Ceiling for exponential backoff

# Logging configuration
LOG_FILE = "./extension_suite.log"  # Path to the log file (None/empty disables file logging)
LOG_LEVEL = "INFO"                  # Default logging level (e.g., DEBUG, INFO, WARNING, ERROR)

ENV_PREFIX = "EXTENSION_SUITE_"


class RetrySettings(BaseModel):
    """Delays used by back_off_retry when built from settings."""
    initial_delay: float = Field(default=RETRY_INITIAL_DELAY_SECONDS, description="Delay before the first resubscription")
    factor: float = Field(default=RETRY_BACKOFF_FACTOR, description="Multiplier applied to the previous delay")
    min_delay: float = Field(default=RETRY_MIN_DELAY_SECONDS, description="Delay used after a zero delay")
    max_delay: float = Field(default=RETRY_MAX_DELAY_SECONDS, description="Upper bound for any delay")

    @field_validator('initial_delay', 'min_delay', 'max_delay')
    @classmethod
    def delay_must_be_non_negative(cls, v):
        if v < 0:
            raise ValueError('Delays must be non-negative')
        return v

    @field_validator('factor')
    @classmethod
    def factor_must_be_at_least_one(cls, v):
        if v < 1:
            raise ValueError('Backoff factor must be >= 1')
        return v

    @model_validator(mode='after')
    def validate_bounds(self) -> 'RetrySettings':
        if self.min_delay > self.max_delay:
            raise ValueError('min_delay cannot exceed max_delay')
        return self


class LoggingSettings(BaseModel):
    level: str = LOG_LEVEL
    file: Optional[str] = LOG_FILE

    @field_validator('level')
    @classmethod
    def level_must_be_known(cls, v):
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f'Unknown logging level: {v}')
        return level


class ExtensionSettings(BaseModel):
    """ Top level settings object returned by load_settings. """
    buffer_period: float = Field(default=DEFAULT_BUFFER_PERIOD_SECONDS, description="Seconds per non_blocking_buffer window")
    retry: RetrySettings = Field(default_factory=RetrySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @field_validator('buffer_period')
    @classmethod
    def period_must_be_positive(cls, v):
        if v <= 0:
            raise ValueError('buffer_period must be positive')
        return v


def _apply_env_overrides(data: dict) -> dict:
    """Overlay EXTENSION_SUITE_* environment variables on the raw settings dict."""
    overrides = {
        "BUFFER_PERIOD": ("buffer_period",),
        "RETRY_INITIAL_DELAY": ("retry", "initial_delay"),
        "RETRY_FACTOR": ("retry", "factor"),
        "RETRY_MIN_DELAY": ("retry", "min_delay"),
        "RETRY_MAX_DELAY": ("retry", "max_delay"),
        "LOG_LEVEL": ("logging", "level"),
        "LOG_FILE": ("logging", "file"),
    }
    for env_name, path in overrides.items():
        value = os.getenv(ENV_PREFIX + env_name)
        if value is None:
            continue
        target = data
        for key in path[:-1]:
            target = target.setdefault(key, {})
        target[path[-1]] = value
        logger.debug(f"Setting {'.'.join(path)} overridden from environment")
    return data


def load_settings(config_path: Union[str, Path, None] = None) -> ExtensionSettings:
    """
    Load settings from an optional YAML file, then apply environment overrides.

    A ``.env`` file in the working directory is loaded first so that
    ``EXTENSION_SUITE_*`` variables can live there.

    Args:
        config_path: Path to a YAML file. When None only defaults and the
            environment are used.

    Raises:
        FileNotFoundError: If config_path is given but does not exist.
        ValueError: If the YAML root is not a mapping.
        pydantic.ValidationError: If a value fails validation.
    """
    load_dotenv()

    raw_config_data: dict = {}
    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.exists():
            logger.error(f"Configuration file not found: {config_path}")
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, 'r', encoding="utf-8") as f:
            loaded = yaml.safe_load(f)

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ValueError(f"Config root must be a dictionary, got {type(loaded)}")
        raw_config_data = loaded

    settings = ExtensionSettings(**_apply_env_overrides(raw_config_data))
    logger.info(f"Loaded settings (buffer_period={settings.buffer_period}, log level={settings.logging.level})")
    return settings
