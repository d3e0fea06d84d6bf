"""
Configuration Management for PowerClock

Dataclass configuration with per-environment defaults, overridable from a
dictionary, a JSON file or POWERCLOCK_* environment variables.
"""

import json
import logging
import logging.handlers
import os
import sys
from dataclasses import dataclass, field, asdict
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union


class Environment(Enum):
    """Application environments"""
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


@dataclass
class ClockConfig:
    """Tick source and counter configuration"""
    interval: float = 0.001  # seconds between ticks
    modulus: int = 1
    max_modulus: int = 500  # upper bound of the page slider only
    bit_width: Optional[int] = None  # None means unbounded doubling
    start_paused: bool = False
    int_max_str_digits: int = 0  # 0 lifts Python's int-to-str digit limit

    def validate(self) -> None:
        if self.interval <= 0:
            raise ValueError(f"clock.interval must be positive, got {self.interval}")
        if self.modulus < 1:
            raise ValueError(f"clock.modulus must be at least 1, got {self.modulus}")
        if self.max_modulus < self.modulus:
            raise ValueError(f"clock.max_modulus ({self.max_modulus}) is below clock.modulus ({self.modulus})")
        if self.bit_width is not None and self.bit_width < 1:
            raise ValueError(f"clock.bit_width must be positive, got {self.bit_width}")
        if 0 < self.int_max_str_digits < 640:
            raise ValueError(f"clock.int_max_str_digits must be 0 or at least 640, got {self.int_max_str_digits}")


@dataclass
class WebConfig:
    """Web server configuration"""
    host: str = "localhost"
    port: int = 5001
    debug: bool = False
    live_reload: bool = False
    secret_key: Optional[str] = None


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_path: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5


@dataclass
class ApplicationConfig:
    """Complete application configuration"""
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = False

    clock: ClockConfig = field(default_factory=ClockConfig)
    web: WebConfig = field(default_factory=WebConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def for_environment(cls, environment: Environment) -> 'ApplicationConfig':
        """Create configuration for specific environment"""
        config = cls(environment=environment)

        if environment == Environment.DEVELOPMENT:
            config.debug = True
            config.web.debug = True
            config.web.live_reload = True
            config.logging.level = "DEBUG"

        elif environment == Environment.TESTING:
            config.logging.level = "WARNING"

        elif environment == Environment.PRODUCTION:
            config.web.host = "0.0.0.0"
            config.logging.level = "INFO"

        return config

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'ApplicationConfig':
        """Create configuration from a dictionary of sections"""
        environment = Environment(config_dict.get("environment", Environment.DEVELOPMENT.value))
        config = cls.for_environment(environment)

        if "debug" in config_dict:
            config.debug = bool(config_dict["debug"])

        for section in ("clock", "web", "logging"):
            target = getattr(config, section)
            for key, value in config_dict.get(section, {}).items():
                if not hasattr(target, key):
                    raise ValueError(f"Unknown {section} setting: {key}")
                setattr(target, key, value)

        config.clock.validate()
        return config

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> 'ApplicationConfig':
        """Load configuration from a JSON file"""
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        if config_path.suffix != '.json':
            raise ValueError(f"Unsupported configuration file format: {config_path.suffix}")

        with open(config_path) as f:
            return cls.from_dict(json.load(f))

    @classmethod
    def from_environment(cls) -> 'ApplicationConfig':
        """Create configuration from environment variables"""
        environment = Environment(os.getenv('POWERCLOCK_ENV', 'development'))
        config = cls.for_environment(environment)

        if os.getenv('POWERCLOCK_DEBUG'):
            config.debug = os.getenv('POWERCLOCK_DEBUG').lower() == 'true'

        if os.getenv('POWERCLOCK_HOST'):
            config.web.host = os.getenv('POWERCLOCK_HOST')

        if os.getenv('POWERCLOCK_PORT'):
            config.web.port = int(os.getenv('POWERCLOCK_PORT'))

        if os.getenv('POWERCLOCK_SECRET_KEY'):
            config.web.secret_key = os.getenv('POWERCLOCK_SECRET_KEY')

        if os.getenv('POWERCLOCK_INTERVAL'):
            config.clock.interval = float(os.getenv('POWERCLOCK_INTERVAL'))

        if os.getenv('POWERCLOCK_MODULUS'):
            config.clock.modulus = int(os.getenv('POWERCLOCK_MODULUS'))

        if os.getenv('POWERCLOCK_BIT_WIDTH'):
            config.clock.bit_width = int(os.getenv('POWERCLOCK_BIT_WIDTH'))

        if os.getenv('POWERCLOCK_LOG_LEVEL'):
            config.logging.level = os.getenv('POWERCLOCK_LOG_LEVEL').upper()

        if os.getenv('POWERCLOCK_LOG_FILE'):
            config.logging.file_path = os.getenv('POWERCLOCK_LOG_FILE')

        config.clock.validate()
        return config

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["environment"] = self.environment.value
        return data


def configure_logging(config: LoggingConfig) -> None:
    """Configure the root logger from `config`."""
    handlers = [logging.StreamHandler()]
    if config.file_path:
        handlers.append(logging.handlers.RotatingFileHandler(
            config.file_path,
            maxBytes=config.max_file_size,
            backupCount=config.backup_count,
        ))
    logging.basicConfig(level=config.level, format=config.format, handlers=handlers, force=True)


def configure_int_digits(config: ClockConfig) -> None:
    """Let `str()` render the counter value no matter how many digits it has."""
    if hasattr(sys, "set_int_max_str_digits"):
        sys.set_int_max_str_digits(config.int_max_str_digits)


# Global configuration management
_current_config: Optional[ApplicationConfig] = None


def set_config(config: Optional[ApplicationConfig]):
    global _current_config
    _current_config = config


def get_config() -> ApplicationConfig:
    """Get the current global configuration, loading it from the environment on first use"""
    global _current_config

    if _current_config is None:
        _current_config = ApplicationConfig.from_environment()

    return _current_config


__all__ = [
    "ApplicationConfig", "Environment", "ClockConfig", "WebConfig", "LoggingConfig",
    "configure_logging", "configure_int_digits", "set_config", "get_config",
]
