"""Controller configuration management.

Configuration is loaded from the following sources, later ones winning:
1. Default values
2. Configuration files
3. Environment variables (a ``.env`` file is honoured)
"""
import os
import logging
from pathlib import Path
from typing import Dict, Any, Optional, List, Tuple, Union

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import ConfigurationError

# Load environment variables from .env file if it exists
load_dotenv()

logger = logging.getLogger("bootstrapctl.config")

# Default configuration paths
DEFAULT_CONFIG_PATHS = [
    Path("/etc/bootstrapctl/config.yaml"),
    Path("~/.config/bootstrapctl/config.yaml").expanduser(),
    Path("bootstrapctl.yaml").absolute(),
]

# Environment variable -> (section, key)
ENV_OVERRIDES: Dict[str, Tuple[str, str]] = {
    "BOOTSTRAPCTL_LOG_LEVEL": ("logging", "level"),
    "BOOTSTRAPCTL_LOG_FILE": ("logging", "file"),
    "KUBECONFIG": ("kubernetes", "kubeconfig"),
    "BOOTSTRAPCTL_KUBE_CONTEXT": ("kubernetes", "context"),
    "BOOTSTRAPCTL_CRD_GROUP": ("kubernetes", "group"),
    "BOOTSTRAPCTL_RECONCILE_TIMEOUT": ("reconcile", "timeout"),
    "BOOTSTRAPCTL_STATUS_RETRIES": ("reconcile", "status_retries"),
    "BOOTSTRAPCTL_API_KEY": ("api", "api_key"),
}


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    file: Optional[str] = Field(
        default=None,
        description="Path to log file (if None, logs to stdout only)"
    )
    max_size_mb: int = Field(
        default=100,
        description="Maximum log file size in MB before rotation"
    )
    backup_count: int = Field(
        default=5,
        description="Number of backup log files to keep"
    )

    @field_validator('level')
    @classmethod
    def normalise_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {v}")
        return level


class KubernetesConfig(BaseModel):
    """Where the management cluster and the tenant resources live."""
    kubeconfig: Optional[str] = Field(
        default=None,
        description="Path to the management cluster kubeconfig"
    )
    context: Optional[str] = Field(
        default=None,
        description="Kubeconfig context to use"
    )
    group: str = Field(default="kamaji.clastix.io", description="TenantControlPlane API group")
    version: str = Field(default="v1alpha1", description="TenantControlPlane API version")
    plural: str = Field(default="tenantcontrolplanes", description="TenantControlPlane plural name")
    admin_kubeconfig_key: str = Field(
        default="admin.conf",
        description="Key holding the admin kubeconfig in the tenant kubeconfig Secret"
    )

    @field_validator('kubeconfig')
    @classmethod
    def expand_kubeconfig(cls, v: Optional[str]) -> Optional[str]:
        """Expand the user home directory in the kubeconfig path."""
        return os.path.expanduser(v) if v else v


class ReconcileConfig(BaseModel):
    """Reconciliation limits."""
    timeout: float = Field(
        default=300.0,
        description="Deadline for a whole reconciliation pass in seconds"
    )
    status_retries: int = Field(
        default=3,
        description="Attempts to commit the status when the resourceVersion conflicts"
    )


class ApiConfig(BaseModel):
    """HTTP API configuration."""
    api_key: str = Field(default="bootstrapctl-secret", description="Value expected in X-API-Key")


class ControllerConfig(BaseModel):
    """bootstrapctl configuration."""
    model_config = ConfigDict(extra="ignore")

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    kubernetes: KubernetesConfig = Field(default_factory=KubernetesConfig)
    reconcile: ReconcileConfig = Field(default_factory=ReconcileConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    config_paths: List[Path] = Field(
        default_factory=lambda: list(DEFAULT_CONFIG_PATHS),
        exclude=True  # Don't include in serialization
    )

    @classmethod
    def load(cls, config_path: Optional[Union[str, Path]] = None) -> 'ControllerConfig':
        """Load configuration from file and environment variables."""
        config_data: Dict[str, Any] = {}

        if config_path:
            config_path = Path(config_path).expanduser().absolute()
            if not config_path.exists():
                raise ConfigurationError(f"Config file not found: {config_path}")
            config_data = cls._load_config_file(config_path)
        else:
            for path in DEFAULT_CONFIG_PATHS:
                path = path.expanduser().absolute()
                if path.exists():
                    config_data = cls._load_config_file(path)
                    break

        for env_var, (section, key) in ENV_OVERRIDES.items():
            value = os.getenv(env_var)
            if value:
                config_data.setdefault(section, {})[key] = value

        try:
            return cls(**config_data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    @classmethod
    def _load_config_file(cls, path: Path) -> Dict[str, Any]:
        """Load configuration from a YAML file."""
        try:
            with open(path, 'r') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to load config from {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")
        logger.debug(f"Loaded configuration from {path}")
        return data

    def save(self, path: Union[str, Path]) -> None:
        """Save configuration to a file."""
        path = Path(path).expanduser().absolute()
        path.parent.mkdir(parents=True, exist_ok=True)

        config_dict = self.model_dump(exclude={"config_paths"}, exclude_none=True)

        with open(path, 'w') as f:
            yaml.safe_dump(config_dict, f, default_flow_style=False, sort_keys=False)


# Global configuration instance
_config: Optional[ControllerConfig] = None


def get_config(config_path: Optional[Union[str, Path]] = None) -> ControllerConfig:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = ControllerConfig.load(config_path)
    return _config


def set_config(config: Optional[ControllerConfig]) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
