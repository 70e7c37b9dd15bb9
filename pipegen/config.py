"""Configuration loading for pipegen (.pipegen.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .models import CIProvider

CONFIG_FILENAME = ".pipegen.yml"
ENV_BASE_URL = "PIPEGEN_BASE_URL"

# Upper bound for a single analysis call, in seconds. Large repositories can
# take minutes to inspect on the backend.
DEFAULT_ANALYSIS_TIMEOUT = 240.0
DEFAULT_GENERATION_TIMEOUT = 240.0


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class EndpointConfig:
    """Locations of the analysis and generation backends."""

    base_url: str = "http://localhost:3000"
    github_analyze_path: str = "/api/github/analyze"
    gitlab_analyze_path: str = "/api/gitlab/analyze"
    generate_path: str = "/api/cicdgen"


@dataclass
class TimeoutConfig:
    """Independent wait bounds for each remote call (seconds)."""

    analysis: float = DEFAULT_ANALYSIS_TIMEOUT
    generation: float = DEFAULT_GENERATION_TIMEOUT


@dataclass
class StorageConfig:
    """Where successful generations are persisted."""

    artifact_path: Path = Path(".pipegen") / "artifact.json"


@dataclass
class LoggingConfig:
    """Optional file sink for pipegen logs."""

    file: Optional[Path] = None


@dataclass
class PipegenConfig:
    """Represents the high-level settings defined in .pipegen.yml."""

    root: Path
    endpoints: EndpointConfig = field(default_factory=EndpointConfig)
    timeouts: TimeoutConfig = field(default_factory=TimeoutConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    default_provider: CIProvider = CIProvider.GITHUB_ACTIONS

    @property
    def artifact_path(self) -> Path:
        path = self.storage.artifact_path
        return path if path.is_absolute() else self.root / path

    @property
    def log_file(self) -> Optional[Path]:
        path = self.logging.file
        if path is None:
            return None
        return path if path.is_absolute() else self.root / path


def load_config(config_path: Path) -> PipegenConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    data: Dict[str, Any] = {}
    if config_file.exists():
        data = _read_config(config_file)
        if not isinstance(data, dict):
            raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    endpoints = EndpointConfig()
    endpoint_data = _as_dict(data.get("endpoints"))
    if endpoint_data:
        endpoints.base_url = _as_str(endpoint_data.get("base_url")) or endpoints.base_url
        endpoints.github_analyze_path = (
            _as_str(endpoint_data.get("github_analyze_path")) or endpoints.github_analyze_path
        )
        endpoints.gitlab_analyze_path = (
            _as_str(endpoint_data.get("gitlab_analyze_path")) or endpoints.gitlab_analyze_path
        )
        endpoints.generate_path = (
            _as_str(endpoint_data.get("generate_path")) or endpoints.generate_path
        )
    env_base_url = os.getenv(ENV_BASE_URL)
    if env_base_url:
        endpoints.base_url = env_base_url
    endpoints.base_url = endpoints.base_url.rstrip("/")

    timeouts = TimeoutConfig()
    timeout_data = _as_dict(data.get("timeouts"))
    if timeout_data:
        timeouts.analysis = _as_positive_float(timeout_data.get("analysis")) or timeouts.analysis
        timeouts.generation = (
            _as_positive_float(timeout_data.get("generation")) or timeouts.generation
        )

    storage = StorageConfig()
    storage_data = _as_dict(data.get("storage"))
    artifact_path = _as_str(storage_data.get("artifact_path")) if storage_data else None
    if artifact_path:
        storage.artifact_path = Path(artifact_path).expanduser()

    logging_config = LoggingConfig()
    logging_data = _as_dict(data.get("logging"))
    log_file = _as_str(logging_data.get("file")) if logging_data else None
    if log_file:
        logging_config.file = Path(log_file).expanduser()

    default_provider = CIProvider.GITHUB_ACTIONS
    provider_name = _as_str(data.get("default_provider"))
    if provider_name:
        try:
            default_provider = CIProvider(provider_name)
        except ValueError as exc:
            choices = ", ".join(provider.value for provider in CIProvider)
            raise ConfigError(
                f"Unknown default_provider '{provider_name}'. Expected one of: {choices}"
            ) from exc

    return PipegenConfig(
        root=root,
        endpoints=endpoints,
        timeouts=timeouts,
        storage=storage,
        logging=logging_config,
        default_provider=default_provider,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return {} if loaded is None else loaded


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    return str(value) if isinstance(value, (str, int, float)) else None


def _as_positive_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        result = float(value)
    elif isinstance(value, str):
        try:
            result = float(value)
        except ValueError:
            return None
    else:
        return None
    return result if result > 0 else None


__all__ = [
    "ConfigError",
    "EndpointConfig",
    "LoggingConfig",
    "PipegenConfig",
    "StorageConfig",
    "TimeoutConfig",
    "load_config",
]
