"""Data models for cluster nodes and node templates."""

import re

from pydantic import BaseModel, ConfigDict, IPvAnyAddress, field_validator

HOSTNAME_PATTERN = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$", re.IGNORECASE)
MAX_NAME_LENGTH = 63


def check_node_name(name: str) -> str:
    """Return name if it is a single RFC 1123 label, else raise ValueError."""
    if not name:
        raise ValueError("name cannot be empty")
    if len(name) > MAX_NAME_LENGTH:
        raise ValueError(f"name '{name}' exceeds {MAX_NAME_LENGTH} characters")
    if not HOSTNAME_PATTERN.match(name):
        raise ValueError(
            f"name '{name}' must contain only alphanumeric characters and hyphens, "
            "and cannot start or end with a hyphen"
        )
    return name


class NodeTemplate(BaseModel):
    """Desired shape for a batch of nodes."""

    model_config = ConfigDict(frozen=True)

    ssh_key_name: str
    type: str  # provider machine type, e.g. cx11
    is_master: bool = False
    is_etcd: bool = False

    @field_validator("ssh_key_name", "type")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        """Validate required identifiers are not empty."""
        if not v:
            raise ValueError("value cannot be empty")
        return v


class Node(BaseModel):
    """A provisioned cluster member."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: str
    is_master: bool = False
    is_etcd: bool = False
    ip_address: IPvAnyAddress
    private_ip_address: IPvAnyAddress
    ssh_key_name: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate the node name is a single RFC 1123 label."""
        return check_node_name(v)

    @property
    def is_worker(self) -> bool:
        """A node without master or etcd flags is a worker."""
        return not self.is_master and not self.is_etcd

    @property
    def role(self) -> str:
        """Primary role of the node (a master running etcd reports master)."""
        if self.is_master:
            return "master"
        if self.is_etcd:
            return "etcd"
        return "worker"


class NodeCommand(BaseModel):
    """A command to run on a node during installation."""

    model_config = ConfigDict(frozen=True)

    event_name: str
    command: str
