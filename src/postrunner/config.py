"""
PostRunner Configuration

Runner and server settings, loadable from YAML and environment variables.
"""

import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml


ENV_PREFIX = "POSTRUNNER_"


@dataclass
class RunnerConfig:
    """Configuration for request execution and the HTTP server."""

    # Server options
    host: str = "127.0.0.1"
    port: int = 5000
    log_level: str = "info"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    # Upload limits
    max_upload_bytes: int = 10 * 1024 * 1024  # per file

    # Execution
    request_timeout: Optional[float] = 30  # single request
    bulk_timeout: Optional[float] = None  # per request in bulk runs, None = unbounded
    verify_ssl: bool = True
    substitute_variables: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RunnerConfig':
        """
        Create config from a dictionary.

        Raises:
            ValueError: If the dictionary holds unknown keys
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**data)

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> 'RunnerConfig':
        """Load config from a YAML file."""
        with open(yaml_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Expected a mapping in {yaml_path}, got {type(data).__name__}")

        return cls.from_dict(data)

    def with_env(self, env: Optional[Dict[str, str]] = None) -> 'RunnerConfig':
        """
        Overlay POSTRUNNER_* environment variables.

        Args:
            env: Environment mapping (defaults to os.environ)
        """
        env = dict(os.environ) if env is None else env
        overrides: Dict[str, Any] = {}

        if f"{ENV_PREFIX}HOST" in env:
            overrides['host'] = env[f"{ENV_PREFIX}HOST"]
        if f"{ENV_PREFIX}PORT" in env:
            overrides['port'] = int(env[f"{ENV_PREFIX}PORT"])
        if f"{ENV_PREFIX}REQUEST_TIMEOUT" in env:
            overrides['request_timeout'] = float(env[f"{ENV_PREFIX}REQUEST_TIMEOUT"])
        if f"{ENV_PREFIX}LOG_LEVEL" in env:
            overrides['log_level'] = env[f"{ENV_PREFIX}LOG_LEVEL"]

        return replace(self, **overrides)

    @classmethod
    def load(cls, yaml_path: Optional[Union[str, Path]] = None) -> 'RunnerConfig':
        """Defaults, then the YAML file if given, then the environment."""
        config = cls.from_yaml(yaml_path) if yaml_path else cls()
        return config.with_env()
