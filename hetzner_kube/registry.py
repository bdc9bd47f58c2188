"""Owned, append-only collection of the nodes provisioned in a session."""

from collections.abc import Iterable

from hetzner_kube.exceptions import NotFoundError
from hetzner_kube.models.node import Node


class NodeRegistry:
    """Ordered node set with role queries.

    Not synchronized: the provisioner appends from a single flow.
    """

    def __init__(self, nodes: Iterable[Node] = ()):
        self._nodes: list[Node] = list(nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self):
        return iter(self._nodes)

    @property
    def nodes(self) -> tuple[Node, ...]:
        return tuple(self._nodes)

    def append(self, node: Node) -> None:
        self._nodes.append(node)

    def extend(self, nodes: Iterable[Node]) -> None:
        self._nodes.extend(nodes)

    def replace(self, nodes: Iterable[Node]) -> None:
        """Replace the whole node set, e.g. with nodes loaded from config."""
        self._nodes = list(nodes)

    def get(self, name: str) -> Node | None:
        return next((n for n in self._nodes if n.name == name), None)

    def master_nodes(self) -> list[Node]:
        return [n for n in self._nodes if n.is_master]

    def etcd_nodes(self) -> list[Node]:
        return [n for n in self._nodes if n.is_etcd]

    def worker_nodes(self) -> list[Node]:
        return [n for n in self._nodes if n.is_worker]

    def master_node(self) -> Node:
        """Return the first master node in insertion order.

        Raises:
            NotFoundError: If no master node exists
        """
        for node in self._nodes:
            if node.is_master:
                return node
        raise NotFoundError(
            "no master node found",
            "Create master nodes first or load a cluster that has them",
        )
