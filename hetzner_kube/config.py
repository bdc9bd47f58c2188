"""Runtime settings for provisioning."""

import os
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator

from hetzner_kube.exceptions import ConfigurationError

DEFAULT_CONFIG_PATH = Path("~/.hetzner-kube/config.yaml")
TOKEN_ENV_VAR = "HCLOUD_TOKEN"


class ProvisionerSettings(BaseModel):
    """Settings shared by the provisioner and the action tracker."""

    token: str = ""
    image: str = "ubuntu-16.04"
    poll_interval: float = Field(default=1.0, gt=0)
    action_timeout: float = Field(default=600.0, gt=0)
    poll_retries: int = Field(default=3, ge=1)
    private_network_prefix: str = "10.0.1"
    partition_size: int = Field(default=10, ge=2)
    cloud_init_file: Path | None = None

    @field_validator("image")
    @classmethod
    def validate_image(cls, v: str) -> str:
        """Validate image name is not empty."""
        if not v:
            raise ValueError("image cannot be empty")
        return v

    @classmethod
    def from_env(cls, **overrides) -> "ProvisionerSettings":
        """Build settings from HETZNER_KUBE_* environment variables.

        The API token is read from HCLOUD_TOKEN. Keyword overrides that are
        not None win over the environment.

        Raises:
            ConfigurationError: If a value cannot be validated
        """
        values = {}
        if os.environ.get(TOKEN_ENV_VAR):
            values["token"] = os.environ[TOKEN_ENV_VAR]
        for name in cls.model_fields:
            env_value = os.environ.get(f"HETZNER_KUBE_{name.upper()}")
            if env_value:
                values[name] = env_value
        values.update({k: v for k, v in overrides.items() if v is not None})

        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError("Invalid provisioner settings", str(e))

    def require_token(self) -> str:
        """Return the API token.

        Raises:
            ConfigurationError: If no token is configured
        """
        if not self.token:
            raise ConfigurationError(
                "No Hetzner Cloud API token configured",
                f"Export {TOKEN_ENV_VAR} or pass --token",
            )
        return self.token
