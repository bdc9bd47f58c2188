"""Data models for clusters and nodes."""

from hetzner_kube.models.cluster import AppConfig, Cluster
from hetzner_kube.models.node import Node, NodeCommand, NodeTemplate

__all__ = [
    "AppConfig",
    "Cluster",
    "Node",
    "NodeCommand",
    "NodeTemplate",
]
