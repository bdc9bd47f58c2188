"""Data models for clusters and the persisted cluster list."""

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from hetzner_kube.exceptions import ConfigurationError
from hetzner_kube.logging_config import get_logger
from hetzner_kube.models.node import Node

logger = get_logger(__name__)


class Cluster(BaseModel):
    """Named snapshot of a cluster and its nodes in creation order."""

    model_config = ConfigDict(frozen=True)

    name: str
    nodes: tuple[Node, ...] = ()

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate cluster name is not empty."""
        if not v:
            raise ValueError("cluster name cannot be empty")
        return v

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def master_ip(self) -> str:
        """Public IP of the first master node, or an empty string."""
        for node in self.nodes:
            if node.is_master:
                return str(node.ip_address)
        return ""


class AppConfig(BaseModel):
    """Clusters known to this installation."""

    clusters: list[Cluster] = Field(default_factory=list)

    def get_cluster(self, name: str) -> Cluster | None:
        return next((c for c in self.clusters if c.name == name), None)

    def upsert_cluster(self, cluster: Cluster) -> None:
        """Add the cluster, replacing any cluster with the same name."""
        self.clusters = [c for c in self.clusters if c.name != cluster.name]
        self.clusters.append(cluster)

    def save(self, path: str | Path) -> None:
        """Save configuration to YAML file."""
        path = Path(path).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.safe_dump(self.model_dump(mode="json"), f, default_flow_style=False)
        logger.debug(f"Saved {len(self.clusters)} clusters to {path}")

    @classmethod
    def load(cls, path: str | Path) -> "AppConfig":
        """Load configuration from YAML file.

        A missing file yields an empty configuration.

        Raises:
            ConfigurationError: If the file cannot be parsed or validated
        """
        path = Path(path).expanduser()
        if not path.exists():
            logger.debug(f"No config file at {path}, starting empty")
            return cls()

        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Failed to parse config file: {path}",
                f"The file has invalid YAML syntax: {e}",
            )

        try:
            return cls(**(data or {}))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid config file: {path}", str(e))
