"""Node provisioning: turns a node template and count into addressed nodes."""

import threading
from pathlib import Path

import pydantic

from hetzner_kube.addressing import AddressScheme
from hetzner_kube.exceptions import NotFoundError, ValidationError
from hetzner_kube.logging_config import get_logger
from hetzner_kube.models.node import Node, NodeTemplate, check_node_name
from hetzner_kube.progress import ProgressReporter
from hetzner_kube.provider.actions import ActionTracker
from hetzner_kube.provider.client import MachineCreateRequest, ProviderClient
from hetzner_kube.provider.reconcile import Ensured, ensure
from hetzner_kube.registry import NodeRegistry

logger = get_logger(__name__)

DEFAULT_IMAGE = "ubuntu-16.04"


class NodeProvisioner:
    """Creates cluster nodes on the provider, idempotently by name.

    Nodes are created one at a time; each creation action is awaited before
    the next node is started. Every resulting node is appended to the
    registry. A failure aborts the batch; nodes created before it stay
    registered and on the provider, so the repair path is to run the same
    call again.
    """

    def __init__(
        self,
        cluster_name: str,
        client: ProviderClient,
        registry: NodeRegistry,
        tracker: ActionTracker,
        reporter: ProgressReporter,
        addresses: AddressScheme | None = None,
        image: str = DEFAULT_IMAGE,
        cloud_init_file: Path | None = None,
    ):
        self.cluster_name = cluster_name
        self.client = client
        self.registry = registry
        self.tracker = tracker
        self.reporter = reporter
        self.addresses = addresses or AddressScheme()
        self.image = image
        self.cloud_init_file = cloud_init_file
        self.has_waited = False

    def node_name(self, role_suffix: str, node_number: int) -> str:
        return f"{self.cluster_name}-{role_suffix}-{node_number:02d}"

    def create_nodes(
        self,
        role_suffix: str,
        template: NodeTemplate,
        zones: list[str],
        count: int,
        offset: int = 0,
        cancel: threading.Event | None = None,
    ) -> list[Node]:
        """Create the nodes ``{cluster}-{role_suffix}-NN`` for NN in offset+1..offset+count.

        Node ``i`` (1-based) is placed in ``zones[i % len(zones)]``.

        Args:
            role_suffix: Name component identifying the role, e.g. "worker"
            template: Role flags, machine type and SSH key for the batch
            zones: Candidate placement zones, used round-robin
            count: Number of nodes to create
            offset: Number added to each node index
            cancel: Set to abandon the wait on the current creation action

        Returns:
            The nodes of this batch in creation order

        Raises:
            ValidationError: If zones is empty, count/offset is negative, a
                derived name is not a valid hostname or a server has no
                public IPv4 address
            NotFoundError: If the template's SSH key does not exist
            ActionCancelledError: If cancel was set while waiting
            HetznerKubeError: Any provider or action error for a node
        """
        if not zones:
            raise ValidationError("At least one placement zone is required")
        if count < 0 or offset < 0:
            raise ValidationError(
                f"count and offset must not be negative (count={count}, offset={offset})"
            )
        names = [self.node_name(role_suffix, i + offset) for i in range(1, count + 1)]
        for name in names:
            try:
                check_node_name(name)
            except ValueError as e:
                raise ValidationError(
                    f"Invalid node name '{name}'",
                    f"{e}. Use a shorter cluster name made of letters, digits and hyphens.",
                ) from e

        ssh_key = self.client.get_ssh_key_by_name(template.ssh_key_name)
        if ssh_key is None:
            raise NotFoundError(
                f"SSH key '{template.ssh_key_name}' not found",
                "Upload the key to the project or use an existing key name",
            )

        user_data = self._read_cloud_init()
        nodes = []
        for i, name in enumerate(names, start=1):
            node_number = i + offset
            private_ip = self.addresses.private_address(
                node_number, template.is_master, template.is_etcd
            )
            request = MachineCreateRequest(
                name=name,
                server_type=template.type,
                image=self.image,
                datacenter=zones[i % len(zones)],
                ssh_keys=(ssh_key,),
                user_data=user_data,
            )

            ensured = self._ensure_machine(request, cancel)
            machine = ensured.resource
            if ensured.created:
                logger.info(f"Created node '{machine.name}' with IP {machine.public_ipv4}")
            else:
                logger.info(f"Loaded node '{machine.name}' with IP {machine.public_ipv4}")
            if not machine.public_ipv4:
                raise ValidationError(
                    f"Server '{name}' has no public IPv4 address",
                    "Assign a primary IPv4 to the server or delete it and run again",
                )

            try:
                node = Node(
                    name=name,
                    type=template.type,
                    is_master=template.is_master,
                    is_etcd=template.is_etcd,
                    ip_address=machine.public_ipv4,
                    private_ip_address=private_ip,
                    ssh_key_name=template.ssh_key_name,
                )
            except pydantic.ValidationError as e:
                raise ValidationError(f"Invalid node '{name}'", str(e)) from e
            nodes.append(node)
            if self.registry.get(name) is None:
                self.registry.append(node)

        return nodes

    def create_etcd_nodes(
        self,
        ssh_key_name: str,
        server_type: str,
        zones: list[str],
        count: int,
        cancel: threading.Event | None = None,
    ) -> list[Node]:
        template = _template(ssh_key_name=ssh_key_name, type=server_type, is_etcd=True)
        return self.create_nodes("etcd", template, zones, count, 0, cancel)

    def create_master_nodes(
        self,
        ssh_key_name: str,
        server_type: str,
        zones: list[str],
        count: int,
        is_etcd: bool,
        cancel: threading.Event | None = None,
    ) -> list[Node]:
        template = _template(
            ssh_key_name=ssh_key_name, type=server_type, is_master=True, is_etcd=is_etcd
        )
        return self.create_nodes("master", template, zones, count, 0, cancel)

    def create_worker_nodes(
        self,
        ssh_key_name: str,
        server_type: str,
        zones: list[str],
        count: int,
        offset: int,
        cancel: threading.Event | None = None,
    ) -> list[Node]:
        """Create workers numbered after ``offset`` so existing workers keep their names."""
        template = _template(ssh_key_name=ssh_key_name, type=server_type)
        return self.create_nodes("worker", template, zones, count, offset, cancel)

    def _ensure_machine(
        self, request: MachineCreateRequest, cancel: threading.Event | None = None
    ) -> Ensured:
        logger.info(f"creating server '{request.name}'...")
        ensured = ensure(
            request.name,
            self.client.get_machine_by_name,
            lambda: self.client.create_machine(request),
        )
        if ensured.created:
            self.reporter.report(
                self.tracker.track(ensured.action, cancel), description=request.name
            )
            self.has_waited = True
        return ensured

    def _read_cloud_init(self) -> str | None:
        if not self.cloud_init_file:
            return None
        try:
            return Path(self.cloud_init_file).read_text()
        except OSError as e:
            logger.warning(f"Ignoring unreadable cloud-init file {self.cloud_init_file}: {e}")
            return None


def _template(**fields) -> NodeTemplate:
    try:
        return NodeTemplate(**fields)
    except pydantic.ValidationError as e:
        raise ValidationError("Invalid node template", str(e)) from e
