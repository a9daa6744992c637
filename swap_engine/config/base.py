"""
Base configuration for the swap engine.

Every config class is a dataclass whose fields default to environment
variables (a local .env file is loaded first).
"""

import os
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, TypeVar
from dotenv import load_dotenv

from ..core.errors import ConfigurationError

load_dotenv()

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
ENVIRONMENTS = ("local", "dev", "staging", "production")

T = TypeVar("T")


class ConfigError(ConfigurationError):
    """Exception raised for configuration-related errors."""
    pass


@dataclass
class BaseConfig:
    """Environment name and log level shared by all configuration classes."""

    ENVIRONMENT: str = field(default_factory=lambda: os.getenv("ENVIRONMENT", "local"))
    LOG_LEVEL: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    def __post_init__(self):
        self._setup_logging()
        self._validate_config()

    def _setup_logging(self):
        level = logging.getLevelName(self.LOG_LEVEL.upper())
        if not isinstance(level, int):
            raise ConfigError(f"Invalid log level: {self.LOG_LEVEL}")
        logging.basicConfig(level=level, format=LOG_FORMAT)

    def _validate_config(self):
        """Subclasses extend this with their own checks."""
        if self.ENVIRONMENT not in ENVIRONMENTS:
            raise ConfigError(f"Invalid environment: {self.ENVIRONMENT} (expected one of {', '.join(ENVIRONMENTS)})")

    @staticmethod
    def get_env(key: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
        """
        Read an environment variable.

        Args:
            key: Variable name
            default: Value used when the variable is unset
            required: Raise instead of returning None when unset

        Raises:
            ConfigError: If a required variable is missing
        """
        value = os.getenv(key, default)
        if value is None and required:
            raise ConfigError(f"Required environment variable '{key}' is not set")
        return value

    @staticmethod
    def _get_typed(key: str, default: Optional[T], convert: Callable[[str], T], kind: str) -> T:
        raw = os.getenv(key)
        if raw is None:
            if default is None:
                raise ConfigError(f"Required environment variable '{key}' is not set")
            return default
        try:
            return convert(raw.strip())
        except ValueError:
            raise ConfigError(f"Environment variable '{key}' must be {kind}, got: {raw}")

    @staticmethod
    def get_env_int(key: str, default: Optional[int] = None) -> int:
        return BaseConfig._get_typed(key, default, int, "an integer")

    @staticmethod
    def get_env_float(key: str, default: Optional[float] = None) -> float:
        return BaseConfig._get_typed(key, default, float, "a number")

    def to_dict(self) -> Dict[str, Any]:
        """Public fields as a dictionary."""
        return {
            name: getattr(self, name)
            for name in self.__dataclass_fields__
            if not name.startswith('_')
        }
