"""Configuration management for beer service.

Settings are read from a YAML file. String values may reference environment
variables as ``${NAME}`` or ``${NAME:default}``; a reference to an unset
variable without a default is a startup error.
"""

import os
import re
from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Literal, Mapping, Optional

import yaml
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFIG_PATH_ENV = "BEER_SERVICE_CONFIG"
DEFAULT_CONFIG_PATH = Path(__file__).with_name("application.yml")

_PLACEHOLDER = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::([^}]*))?\}")
_DURATION = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h|d)?\s*$")
_DURATION_UNITS = {"ms": 0.001, "s": 1, "m": 60, "h": 3600, "d": 86400}


class ConfigurationError(Exception):
    """Configuration could not be loaded."""
    pass


def parse_duration(value: Any) -> timedelta:
    """Parse ``250ms``, ``5s``, ``10m``, ``1h``, ``1d`` or a number of seconds."""
    if isinstance(value, timedelta):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return timedelta(seconds=value)
    if isinstance(value, str):
        match = _DURATION.match(value)
        if match:
            amount, unit = match.groups()
            return timedelta(seconds=float(amount) * _DURATION_UNITS[unit or "s"])
    raise ValueError(f"Invalid duration: {value!r}")


Duration = Annotated[timedelta, BeforeValidator(parse_duration)]


def interpolate(value: Any, environ: Mapping[str, str], path: str = "") -> Any:
    """Resolve ``${NAME[:default]}`` placeholders in every string of a config tree."""
    if isinstance(value, dict):
        return {
            key: interpolate(item, environ, f"{path}.{key}" if path else str(key))
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [interpolate(item, environ, f"{path}[{i}]") for i, item in enumerate(value)]
    if value is None:
        raise ConfigurationError(f"Configuration key '{path}' is declared without a value")
    if not isinstance(value, str):
        return value

    def _resolve(match: re.Match) -> str:
        name, default = match.group(1), match.group(2)
        if name in environ:
            return environ[name]
        if default is not None:
            return default
        raise ConfigurationError(
            f"Could not resolve placeholder ${{{name}}} for configuration key '{path}'"
        )

    return _PLACEHOLDER.sub(_resolve, value)


class _Section(BaseModel):
    model_config = ConfigDict(
        alias_generator=lambda name: name.replace("_", "-"),
        populate_by_name=True,
        extra="forbid",
    )


class RetrySettings(_Section):
    attempts: int = Field(default=10, ge=1)
    delay: Duration = timedelta(seconds=5)


class CircuitBreakerSettings(_Section):
    attempts: int = Field(default=5, ge=1)
    delay: Duration = timedelta(seconds=5)
    multiplier: float = Field(default=2.0, ge=1.0)
    reset: Duration = timedelta(minutes=10)


class BeersSettings(_Section):
    url: str = "http://localhost:8080/beers"
    timeout: Duration = timedelta(seconds=10)
    initial_delay: Duration = timedelta(seconds=10)
    fixed_delay: Duration = timedelta(seconds=5)
    poller_enabled: bool = True
    retry: RetrySettings = Field(default_factory=RetrySettings)
    circuit_breaker: CircuitBreakerSettings = Field(default_factory=CircuitBreakerSettings)


class ServerSettings(_Section):
    host: str = "0.0.0.0"
    port: int = 8080
    emit_delay: Duration = timedelta(seconds=1)
    seed_demo_data: bool = True


class LoggingSettings(_Section):
    level: str = "INFO"
    format: Literal["json", "console"] = "json"


class TracingSettings(_Section):
    otlp_endpoint: str = ""


class Settings(BaseSettings):
    service_name: str = "beer-service"
    beers: BeersSettings = Field(default_factory=BeersSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    tracing: TracingSettings = Field(default_factory=TracingSettings)

    model_config = SettingsConfigDict(
        alias_generator=lambda name: name.replace("_", "-"),
        populate_by_name=True,
        extra="forbid",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # the environment is only consulted through ${...} placeholders
        return (init_settings,)


def load_settings(
    path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Load, interpolate and validate the YAML configuration file."""
    environ = os.environ if environ is None else environ
    config_path = Path(path or environ.get(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH)

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigurationError(f"Cannot read configuration file {config_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigurationError(f"Configuration file {config_path} must contain a mapping")

    data = interpolate(raw, environ)

    try:
        return Settings(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {config_path}: {e}") from e


@lru_cache()
def get_settings() -> Settings:
    return load_settings()
