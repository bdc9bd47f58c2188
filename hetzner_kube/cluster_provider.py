"""Cluster provider facade owning the nodes of a provisioning session."""

import threading
from pathlib import Path
from typing import Protocol

import pydantic
from rich.console import Console

from hetzner_kube.addressing import AddressScheme
from hetzner_kube.config import ProvisionerSettings
from hetzner_kube.exceptions import ValidationError
from hetzner_kube.models.cluster import Cluster
from hetzner_kube.models.node import Node, NodeCommand, NodeTemplate
from hetzner_kube.progress import ProgressReporter
from hetzner_kube.provider.actions import ActionTracker
from hetzner_kube.provider.client import ProviderClient
from hetzner_kube.provisioner import NodeProvisioner
from hetzner_kube.registry import NodeRegistry


class ClusterProvider(Protocol):
    """What the rest of the tool needs from a cluster provider."""

    def create_etcd_nodes(
        self,
        ssh_key_name: str,
        server_type: str,
        zones: list[str],
        count: int,
        cancel: threading.Event | None = None,
    ) -> list[Node]: ...

    def create_master_nodes(
        self,
        ssh_key_name: str,
        server_type: str,
        zones: list[str],
        count: int,
        is_etcd: bool,
        cancel: threading.Event | None = None,
    ) -> list[Node]: ...

    def create_worker_nodes(
        self,
        ssh_key_name: str,
        server_type: str,
        zones: list[str],
        count: int,
        offset: int,
        cancel: threading.Event | None = None,
    ) -> list[Node]: ...

    def set_nodes(self, nodes: list[Node]) -> None: ...

    def get_all_nodes(self) -> list[Node]: ...

    def get_master_nodes(self) -> list[Node]: ...

    def get_etcd_nodes(self) -> list[Node]: ...

    def get_worker_nodes(self) -> list[Node]: ...

    def get_master_node(self) -> Node: ...

    def get_cluster(self) -> Cluster: ...

    def get_additional_master_install_commands(self) -> list[NodeCommand]: ...

    def must_wait(self) -> bool: ...


class HetznerProvider:
    """Hetzner Cloud implementation of ClusterProvider."""

    def __init__(
        self,
        cluster_name: str,
        client: ProviderClient,
        settings: ProvisionerSettings | None = None,
        console: Console | None = None,
        registry: NodeRegistry | None = None,
    ):
        """Initialize the provider.

        Args:
            cluster_name: Name used as prefix for every node
            client: Provider API client
            settings: Provisioning settings; defaults when omitted
            console: Console used for progress output
            registry: Node registry to own; a fresh one when omitted
        """
        self.cluster_name = cluster_name
        self.settings = settings or ProvisionerSettings()
        self.registry = registry if registry is not None else NodeRegistry()
        tracker = ActionTracker(
            client,
            poll_interval=self.settings.poll_interval,
            timeout=self.settings.action_timeout,
            poll_retries=self.settings.poll_retries,
        )
        self.provisioner = NodeProvisioner(
            cluster_name,
            client,
            self.registry,
            tracker,
            ProgressReporter(console),
            addresses=AddressScheme(
                self.settings.private_network_prefix, self.settings.partition_size
            ),
            image=self.settings.image,
            cloud_init_file=self.settings.cloud_init_file,
        )

    def set_cloud_init_file(self, cloud_init_file: str | Path | None) -> None:
        self.provisioner.cloud_init_file = Path(cloud_init_file) if cloud_init_file else None

    def create_nodes(
        self,
        suffix: str,
        template: NodeTemplate,
        zones: list[str],
        count: int,
        offset: int,
        cancel: threading.Event | None = None,
    ) -> list[Node]:
        return self.provisioner.create_nodes(suffix, template, zones, count, offset, cancel)

    def create_etcd_nodes(
        self,
        ssh_key_name: str,
        server_type: str,
        zones: list[str],
        count: int,
        cancel: threading.Event | None = None,
    ) -> list[Node]:
        return self.provisioner.create_etcd_nodes(ssh_key_name, server_type, zones, count, cancel)

    def create_master_nodes(
        self,
        ssh_key_name: str,
        server_type: str,
        zones: list[str],
        count: int,
        is_etcd: bool,
        cancel: threading.Event | None = None,
    ) -> list[Node]:
        return self.provisioner.create_master_nodes(
            ssh_key_name, server_type, zones, count, is_etcd, cancel
        )

    def create_worker_nodes(
        self,
        ssh_key_name: str,
        server_type: str,
        zones: list[str],
        count: int,
        offset: int,
        cancel: threading.Event | None = None,
    ) -> list[Node]:
        return self.provisioner.create_worker_nodes(
            ssh_key_name, server_type, zones, count, offset, cancel
        )

    def set_nodes(self, nodes: list[Node]) -> None:
        self.registry.replace(nodes)

    def get_all_nodes(self) -> list[Node]:
        return list(self.registry.nodes)

    def get_master_nodes(self) -> list[Node]:
        return self.registry.master_nodes()

    def get_etcd_nodes(self) -> list[Node]:
        return self.registry.etcd_nodes()

    def get_worker_nodes(self) -> list[Node]:
        return self.registry.worker_nodes()

    def get_master_node(self) -> Node:
        """Return the first master node.

        Raises:
            NotFoundError: If no master node exists
        """
        return self.registry.master_node()

    def get_cluster(self) -> Cluster:
        try:
            return Cluster(name=self.cluster_name, nodes=self.registry.nodes)
        except pydantic.ValidationError as e:
            raise ValidationError(f"Invalid cluster '{self.cluster_name}'", str(e)) from e

    def get_additional_master_install_commands(self) -> list[NodeCommand]:
        """Provider-specific commands to run after the master install; none for Hetzner."""
        return []

    def must_wait(self) -> bool:
        """True once a node was created (not just loaded) in this session."""
        return self.provisioner.has_waited

    def token(self) -> str:
        return self.settings.token
