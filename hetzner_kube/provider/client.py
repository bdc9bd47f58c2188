"""Provider API boundary consumed by the provisioner.

The records here are deliberately independent of any SDK so the
provisioning logic can be exercised against an in-memory client.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

ACTION_RUNNING = "running"
ACTION_SUCCESS = "success"
ACTION_ERROR = "error"


@dataclass(frozen=True, slots=True)
class SSHKey:
    """SSH key registered with the provider."""

    id: int
    name: str
    fingerprint: str = ""


@dataclass(frozen=True, slots=True)
class Machine:
    """A provider-side virtual machine."""

    id: int
    name: str
    public_ipv4: str
    datacenter: str = ""
    server_type: str = ""


@dataclass(frozen=True, slots=True)
class Action:
    """Status of an asynchronous provider operation."""

    id: int
    command: str = ""
    status: str = ACTION_RUNNING
    progress: int = 0
    error_code: str | None = None
    error_message: str | None = None

    @property
    def done(self) -> bool:
        return self.status in (ACTION_SUCCESS, ACTION_ERROR)

    @property
    def failed(self) -> bool:
        return self.status == ACTION_ERROR


@dataclass(frozen=True, slots=True)
class MachineCreateRequest:
    """Everything needed to create one machine."""

    name: str
    server_type: str
    image: str
    datacenter: str
    ssh_keys: tuple[SSHKey, ...] = ()
    user_data: str | None = None


@runtime_checkable
class ProviderClient(Protocol):
    """Operations the provisioner needs from a cloud provider.

    Lookups return None when the named resource does not exist.
    ``create_machine`` raises ConflictError when the name is taken and
    TransportError for any other API failure.
    """

    def get_ssh_key_by_name(self, name: str) -> SSHKey | None: ...

    def get_machine_by_name(self, name: str) -> Machine | None: ...

    def create_machine(self, request: MachineCreateRequest) -> tuple[Action, Machine]: ...

    def get_action(self, action_id: int) -> Action: ...
