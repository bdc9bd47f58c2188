"""Cloud provider boundary: client protocol, adapters and action tracking."""

from hetzner_kube.provider.actions import (
    ActionEvent,
    ActionFailed,
    ActionProgress,
    ActionSucceeded,
    ActionTracker,
)
from hetzner_kube.provider.client import (
    Action,
    Machine,
    MachineCreateRequest,
    ProviderClient,
    SSHKey,
)
from hetzner_kube.provider.reconcile import Ensured, ensure

__all__ = [
    "Action",
    "ActionEvent",
    "ActionFailed",
    "ActionProgress",
    "ActionSucceeded",
    "ActionTracker",
    "Ensured",
    "Machine",
    "MachineCreateRequest",
    "ProviderClient",
    "SSHKey",
    "ensure",
]
