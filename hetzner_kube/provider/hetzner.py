"""ProviderClient implementation backed by the hcloud SDK."""

from __future__ import annotations

import requests
from hcloud import APIException, Client
from hcloud.datacenters import Datacenter
from hcloud.images import Image
from hcloud.locations import Location
from hcloud.server_types import ServerType
from hcloud.ssh_keys import SSHKey as HcloudSSHKey

from hetzner_kube.exceptions import ConflictError, TransportError
from hetzner_kube.logging_config import get_logger
from hetzner_kube.provider.client import Action, Machine, MachineCreateRequest, SSHKey

logger = get_logger(__name__)

UNIQUENESS_ERROR = "uniqueness_error"


class HetznerClient:
    """Thin adapter translating hcloud objects and errors."""

    def __init__(self, token: str, client: Client | None = None):
        """Initialize the adapter.

        Args:
            token: Hetzner Cloud API token
            client: Optional preconfigured hcloud client
        """
        self.token = token
        self.client = client or Client(token=token, application_name="hetzner-kube")

    def get_ssh_key_by_name(self, name: str) -> SSHKey | None:
        try:
            key = self.client.ssh_keys.get_by_name(name)
        except (APIException, requests.RequestException) as e:
            raise _transport_error(f"Failed to look up SSH key '{name}'", e)
        if key is None:
            return None
        return SSHKey(id=key.id, name=key.name, fingerprint=key.fingerprint or "")

    def get_machine_by_name(self, name: str) -> Machine | None:
        try:
            server = self.client.servers.get_by_name(name)
        except (APIException, requests.RequestException) as e:
            raise _transport_error(f"Failed to look up server '{name}'", e)
        if server is None:
            return None
        return _to_machine(server)

    def create_machine(self, request: MachineCreateRequest) -> tuple[Action, Machine]:
        placement = {}
        # Datacenter names carry a "-dc" suffix, bare names are locations
        if "-dc" in request.datacenter:
            placement["datacenter"] = Datacenter(name=request.datacenter)
        else:
            placement["location"] = Location(name=request.datacenter)

        try:
            response = self.client.servers.create(
                name=request.name,
                server_type=ServerType(name=request.server_type),
                image=Image(name=request.image),
                ssh_keys=[HcloudSSHKey(id=key.id) for key in request.ssh_keys],
                user_data=request.user_data,
                **placement,
            )
        except APIException as e:
            if e.code == UNIQUENESS_ERROR:
                raise ConflictError(f"Server '{request.name}' already exists", str(e.message))
            raise _transport_error(f"Failed to create server '{request.name}'", e)
        except requests.RequestException as e:
            raise _transport_error(f"Failed to create server '{request.name}'", e)

        return _to_action(response.action), _to_machine(response.server)

    def get_action(self, action_id: int) -> Action:
        try:
            action = self.client.actions.get_by_id(action_id)
        except (APIException, requests.RequestException) as e:
            raise _transport_error(f"Failed to fetch action {action_id}", e)
        return _to_action(action)


def _to_machine(server) -> Machine:
    ipv4 = server.public_net.ipv4.ip if server.public_net and server.public_net.ipv4 else ""
    return Machine(
        id=server.id,
        name=server.name,
        public_ipv4=ipv4,
        datacenter=server.datacenter.name if server.datacenter else "",
        server_type=server.server_type.name if server.server_type else "",
    )


def _to_action(action) -> Action:
    error = action.error or {}
    return Action(
        id=action.id,
        command=action.command or "",
        status=action.status,
        progress=action.progress or 0,
        error_code=error.get("code"),
        error_message=error.get("message"),
    )


def _transport_error(message: str, error: Exception) -> TransportError:
    logger.debug(f"{message}: {error}")
    return TransportError(message, str(error))
