"""Configuration loading with environment variable substitution."""

import os
import re
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field

from kvtools.exceptions import ConfigError
from kvtools.observability import LogLevel, configure_logging

ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)\}")


def substitute_env_vars(value: Any) -> Any:
    """Recursively substitute ${VAR_NAME} patterns with environment variables."""
    if isinstance(value, str):
        def replace(match: re.Match[str]) -> str:
            var_name = match.group(1)
            env_value = os.environ.get(var_name)
            if env_value is None:
                raise ValueError(f"Environment variable {var_name} is not set")
            return env_value

        return ENV_VAR_PATTERN.sub(replace, value)
    elif isinstance(value, dict):
        return {k: substitute_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [substitute_env_vars(v) for v in value]
    return value


class PoolConfig(BaseModel):
    """Connection pool sizing."""

    max_idle: int = Field(default=5, ge=0)
    max_active: int = Field(default=500, ge=0)  # 0 means unlimited
    idle_timeout_seconds: float = Field(default=300.0, gt=0)
    wait: bool = True  # block instead of failing when max_active is reached


class StoreConfig(BaseModel):
    """Key-value store connection settings."""

    url: str = "redis://localhost:6379/0"
    prefix: str = ""
    pool: PoolConfig = Field(default_factory=PoolConfig)


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: LogLevel = LogLevel.INFO
    format: Literal["json", "text"] = "json"


class Config(BaseModel):
    """Main configuration for kvtools."""

    store: StoreConfig = Field(default_factory=StoreConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_file(cls, path: str | Path) -> "Config":
        """Load configuration from a YAML or JSON file."""
        path = Path(path)
        with path.open() as f:
            if path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            elif path.suffix == ".json":
                import json
                data = json.load(f)
            else:
                raise ConfigError(f"Unsupported config file type: {path.suffix}")

        data = substitute_env_vars(data or {})
        return cls.model_validate(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """Load configuration from a dictionary."""
        data = substitute_env_vars(data)
        return cls.model_validate(data)

    def apply_logging(self) -> None:
        """Configure the kvtools loggers from the logging section."""
        configure_logging(level=self.logging.level, format=self.logging.format)
