"""Private network address assignment by role and node number.

Each role owns a partition of the last octet: etcd nodes start at the
prefix base, masters one partition later and workers two partitions later.
With the default partition size of 10 that gives etcd 10.0.1.1-9,
masters 10.0.1.11-19 and workers 10.0.1.21-29.
"""

import ipaddress

from hetzner_kube.exceptions import ValidationError
from hetzner_kube.logging_config import get_logger

logger = get_logger(__name__)


class AddressScheme:
    """Deterministic private address for a node number and role."""

    def __init__(self, prefix: str = "10.0.1", partition_size: int = 10):
        if partition_size < 2:
            raise ValidationError(f"partition_size must be at least 2, got {partition_size}")
        try:
            ipaddress.IPv4Address(f"{prefix}.0")
        except ipaddress.AddressValueError:
            raise ValidationError(
                f"Invalid private network prefix '{prefix}'",
                "Expected the first three octets of an IPv4 address, e.g. 10.0.1",
            )
        self.prefix = prefix
        self.partition_size = partition_size

    def last_octet(self, node_number: int, is_master: bool, is_etcd: bool) -> int:
        octet = node_number
        if not is_etcd:
            octet += self.partition_size
            if not is_master:
                octet += self.partition_size
        return octet

    def private_address(self, node_number: int, is_master: bool, is_etcd: bool) -> str:
        """Compute the private address of a node.

        Node numbers at or above the partition size spill into the next
        role's range; this is logged, not corrected.

        Raises:
            ValidationError: If the resulting octet is not a usable host address
        """
        if node_number >= self.partition_size:
            logger.warning(
                f"Node number {node_number} exceeds the address partition size "
                f"{self.partition_size}; its private address overlaps the next role's range"
            )
        octet = self.last_octet(node_number, is_master, is_etcd)
        if not 1 <= octet <= 254:
            raise ValidationError(
                f"Private address octet {octet} for node number {node_number} is out of range",
                "Reduce the node count or offset, or use a smaller partition size",
            )
        return f"{self.prefix}.{octet}"
