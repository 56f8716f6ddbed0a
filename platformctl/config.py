"""platformctl configuration management.

Configuration is loaded from multiple sources with the following precedence:
1. Environment variables (``PLATFORMCTL_<SECTION>__<FIELD>``, ``.env`` honoured)
2. Configuration file
3. Default values
"""
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Load environment variables from .env file if it exists
load_dotenv()

logger = logging.getLogger("platformctl.config")

ENV_PREFIX = "PLATFORMCTL_"
ENV_NESTED_DELIMITER = "__"

# Default configuration paths
DEFAULT_CONFIG_PATHS = [
    Path("/etc/platformctl/config.yaml"),
    Path("~/.config/platformctl/config.yaml").expanduser(),
    Path("platformctl.yaml").absolute(),
]


class CapacityConfig(BaseModel):
    """Pod capacity defaults."""
    default_max_pods: int = Field(
        default=17,
        description="Max pods used when an instance type is not in the ENI table"
    )
    default_instance_type: str = Field(
        default="t3.medium",
        description="Instance type used when a node group declares none"
    )

    @field_validator('default_max_pods')
    @classmethod
    def positive_max_pods(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("default_max_pods must be positive")
        return v


class ClusterDefaults(BaseModel):
    """Cluster-wide defaults."""
    version: str = Field(
        default="1.33",
        description="Kubernetes version used when the platform declares none"
    )
    service_cidr: str = Field(
        default="172.20.0.0/16",
        description="Kubernetes service IPv4 range"
    )
    dns_cluster_ip: str = Field(
        default="172.20.0.10",
        description="Cluster DNS service IP"
    )


class PolicyConfig(BaseModel):
    """Failure policy for conditions the engine can tolerate."""
    strict_version_shim: bool = Field(
        default=False,
        description="Fail composition when no kubectl shim exists for the version"
    )
    validate_labels: bool = Field(
        default=True,
        description="Reject labels that would corrupt the bootstrap payload"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    file: Optional[str] = Field(
        default=None,
        description="Path to log file (if None, logs to stdout)"
    )

    @field_validator('level')
    @classmethod
    def upper_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level


class ComposerConfig(BaseModel):
    """platformctl configuration."""
    model_config = ConfigDict(extra="ignore")

    capacity: CapacityConfig = Field(default_factory=CapacityConfig)
    cluster: ClusterDefaults = Field(default_factory=ClusterDefaults)
    policy: PolicyConfig = Field(default_factory=PolicyConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, config_path: Optional[Union[str, Path]] = None) -> 'ComposerConfig':
        """Load configuration from file and environment variables."""
        config_data: Dict[str, Any] = {}

        if config_path:
            config_path = Path(config_path).expanduser().absolute()
            if config_path.exists():
                config_data = cls._load_config_file(config_path)
        else:
            path = find_config_file()
            if path is not None:
                config_data = cls._load_config_file(path)

        _apply_env_overrides(config_data, os.environ)
        return cls(**config_data)

    @classmethod
    def _load_config_file(cls, path: Path) -> Dict[str, Any]:
        """Load configuration from a YAML file."""
        try:
            with open(path, 'r') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load config from {path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring config at {path}: top level is not a mapping")
            return {}
        return data

    def save(self, path: Union[str, Path]) -> None:
        """Save configuration to a file."""
        path = Path(path).expanduser().absolute()
        path.parent.mkdir(parents=True, exist_ok=True)

        config_dict = self.model_dump(exclude_none=True)

        with open(path, 'w') as f:
            yaml.safe_dump(config_dict, f, default_flow_style=False, sort_keys=False)


def find_config_file() -> Optional[Path]:
    """Return the first default config path that exists."""
    for path in DEFAULT_CONFIG_PATHS:
        path = path.expanduser().absolute()
        if path.exists():
            return path
    return None


def _apply_env_overrides(config_data: Dict[str, Any], environ) -> None:
    """Apply ``PLATFORMCTL_SECTION__FIELD`` variables onto the raw config."""
    sections = ComposerConfig.model_fields
    for key, value in environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        parts: List[str] = key[len(ENV_PREFIX):].lower().split(ENV_NESTED_DELIMITER)
        if len(parts) != 2 or parts[0] not in sections:
            continue
        section, name = parts
        target = config_data.setdefault(section, {})
        if isinstance(target, dict):
            target[name] = value


# Global configuration instance
_config: Optional[ComposerConfig] = None


def get_config(config_path: Optional[Union[str, Path]] = None) -> ComposerConfig:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = ComposerConfig.load(config_path)
    return _config


def set_config(config: Optional[ComposerConfig]) -> None:
    """Set (or reset with ``None``) the global configuration instance."""
    global _config
    _config = config
