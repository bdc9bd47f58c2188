"""Unit tests for node provisioning."""

import logging
import threading

import pytest
from fakes import FakeProviderClient, make_provisioner

from hetzner_kube.exceptions import (
    ActionCancelledError,
    ActionFailedError,
    NotFoundError,
    TransportError,
    ValidationError,
)
from hetzner_kube.models.node import NodeTemplate
from hetzner_kube.provider.client import ACTION_RUNNING, Machine
from hetzner_kube.registry import NodeRegistry


def names(nodes):
    return [n.name for n in nodes]


def private_ips(nodes):
    return [str(n.private_ip_address) for n in nodes]


def test_create_master_nodes_from_scratch(provisioner, fake_client):
    nodes = provisioner.create_master_nodes("key1", "cx11", ["fsn1", "nbg1"], 2, False)

    assert names(nodes) == ["test-master-01", "test-master-02"]
    assert private_ips(nodes) == ["10.0.1.11", "10.0.1.12"]
    # node i goes to zones[i % len(zones)], starting at i = 1
    assert [r.datacenter for r in fake_client.create_requests] == ["nbg1", "fsn1"]
    assert all(n.is_master and not n.is_etcd for n in nodes)
    assert provisioner.has_waited


def test_create_etcd_nodes(provisioner):
    nodes = provisioner.create_etcd_nodes("key1", "cx21", ["fsn1"], 3)

    assert names(nodes) == ["test-etcd-01", "test-etcd-02", "test-etcd-03"]
    assert private_ips(nodes) == ["10.0.1.1", "10.0.1.2", "10.0.1.3"]
    assert all(n.is_etcd and not n.is_master for n in nodes)
    assert {n.type for n in nodes} == {"cx21"}


def test_master_running_etcd_uses_etcd_partition(provisioner):
    nodes = provisioner.create_master_nodes("key1", "cx11", ["fsn1"], 1, True)

    assert nodes[0].is_master and nodes[0].is_etcd
    assert str(nodes[0].private_ip_address) == "10.0.1.1"


def test_worker_scale_out_keeps_numbering(provisioner):
    first = provisioner.create_worker_nodes("key1", "cx11", ["fsn1", "nbg1"], 2, 0)
    second = provisioner.create_worker_nodes("key1", "cx11", ["fsn1", "nbg1"], 2, 2)

    assert names(first) == ["test-worker-01", "test-worker-02"]
    assert names(second) == ["test-worker-03", "test-worker-04"]
    assert private_ips(first + second) == ["10.0.1.21", "10.0.1.22", "10.0.1.23", "10.0.1.24"]
    assert names(provisioner.registry.worker_nodes()) == names(first + second)


def test_rerun_reuses_existing_machines(provisioner, fake_client):
    first = provisioner.create_worker_nodes("key1", "cx11", ["fsn1"], 3, 0)
    requests_before = len(fake_client.create_requests)

    again = provisioner.create_worker_nodes("key1", "cx11", ["fsn1"], 3, 0)

    assert again == first
    assert len(fake_client.create_requests) == requests_before
    assert len(provisioner.registry) == 3


def test_existing_machine_is_loaded_without_waiting(fake_client):
    fake_client.add_machine("test-master-01")
    provisioner = make_provisioner(fake_client)

    nodes = provisioner.create_master_nodes("key1", "cx11", ["fsn1"], 1, False)

    assert fake_client.create_requests == []
    assert fake_client.action_polls == []
    assert str(nodes[0].ip_address) == fake_client.machines["test-master-01"].public_ipv4
    assert not provisioner.has_waited


def test_conflict_matches_clean_create_without_awaiting(fake_client):
    fake_client.conflict_names.add("test-worker-01")
    provisioner = make_provisioner(fake_client)

    nodes = provisioner.create_worker_nodes("key1", "cx11", ["fsn1"], 1, 0)

    assert names(nodes) == ["test-worker-01"]
    assert str(nodes[0].private_ip_address) == "10.0.1.21"
    assert str(nodes[0].ip_address) == fake_client.machines["test-worker-01"].public_ipv4
    assert fake_client.action_polls == []
    assert not provisioner.has_waited


def test_failure_aborts_batch_and_keeps_earlier_nodes(fake_client):
    fake_client.create_errors["test-worker-02"] = TransportError("API unavailable")
    provisioner = make_provisioner(fake_client)

    with pytest.raises(TransportError):
        provisioner.create_worker_nodes("key1", "cx11", ["fsn1"], 3, 0)

    assert names(provisioner.registry) == ["test-worker-01"]
    assert "test-worker-03" not in [r.name for r in fake_client.create_requests]

    del fake_client.create_errors["test-worker-02"]
    nodes = provisioner.create_worker_nodes("key1", "cx11", ["fsn1"], 3, 0)

    assert names(nodes) == ["test-worker-01", "test-worker-02", "test-worker-03"]
    assert names(provisioner.registry) == names(nodes)


def test_failed_action_aborts_batch():
    client = FakeProviderClient(action_script=[("error", 40)])
    provisioner = make_provisioner(client)

    with pytest.raises(ActionFailedError):
        provisioner.create_etcd_nodes("key1", "cx11", ["fsn1"], 2)

    assert [r.name for r in client.create_requests] == ["test-etcd-01"]


def test_unknown_ssh_key_raises_not_found(provisioner, fake_client):
    with pytest.raises(NotFoundError) as exc_info:
        provisioner.create_worker_nodes("missing", "cx11", ["fsn1"], 1, 0)

    assert "missing" in exc_info.value.message
    assert fake_client.create_requests == []


def test_empty_zones_rejected(provisioner):
    with pytest.raises(ValidationError):
        provisioner.create_worker_nodes("key1", "cx11", [], 1, 0)


@pytest.mark.parametrize("count,offset", [(-1, 0), (1, -1)])
def test_negative_count_or_offset_rejected(provisioner, count, offset):
    with pytest.raises(ValidationError):
        provisioner.create_worker_nodes("key1", "cx11", ["fsn1"], count, offset)


def test_zero_count_creates_nothing(provisioner, fake_client):
    assert provisioner.create_worker_nodes("key1", "cx11", ["fsn1"], 0, 0) == []
    assert fake_client.create_requests == []


def test_create_request_carries_image_key_and_cloud_init(fake_client, tmp_path):
    cloud_init = tmp_path / "cloud-init.yml"
    cloud_init.write_text("#cloud-config\npackages: [curl]\n")
    provisioner = make_provisioner(fake_client)
    provisioner.cloud_init_file = cloud_init

    provisioner.create_nodes("worker", NodeTemplate(ssh_key_name="key1", type="cx11"), ["fsn1"], 1)

    request = fake_client.create_requests[0]
    assert request.image == "ubuntu-16.04"
    assert request.server_type == "cx11"
    assert [k.name for k in request.ssh_keys] == ["key1"]
    assert request.user_data.startswith("#cloud-config")


def test_unreadable_cloud_init_is_ignored(fake_client, tmp_path):
    provisioner = make_provisioner(fake_client)
    provisioner.cloud_init_file = tmp_path / "missing.yml"

    provisioner.create_worker_nodes("key1", "cx11", ["fsn1"], 1, 0)

    assert fake_client.create_requests[0].user_data is None


def test_batch_is_appended_to_shared_registry(fake_client):
    registry = NodeRegistry()
    provisioner = make_provisioner(fake_client, cluster_name="prod", registry=registry)

    provisioner.create_etcd_nodes("key1", "cx11", ["fsn1"], 1)
    provisioner.create_master_nodes("key1", "cx11", ["fsn1"], 1, False)

    assert names(registry) == ["prod-etcd-01", "prod-master-01"]


def test_overlong_node_name_rejected_before_any_create(fake_client):
    provisioner = make_provisioner(fake_client, cluster_name="c" * 55)

    with pytest.raises(ValidationError) as exc_info:
        provisioner.create_worker_nodes("key1", "cx11", ["fsn1"], 1, 0)

    assert "c" * 55 + "-worker-01" in exc_info.value.message
    assert "63" in exc_info.value.details
    assert fake_client.create_requests == []
    assert len(provisioner.registry) == 0


def test_batch_is_rejected_when_a_later_name_is_invalid(fake_client):
    # "-worker-09" fits in 63 characters, "-worker-100" does not
    provisioner = make_provisioner(fake_client, cluster_name="c" * 53)

    with pytest.raises(ValidationError):
        provisioner.create_worker_nodes("key1", "cx11", ["fsn1"], 2, 98)

    assert fake_client.create_requests == []


def test_cluster_name_with_invalid_characters_rejected(fake_client):
    provisioner = make_provisioner(fake_client, cluster_name="my_cluster")

    with pytest.raises(ValidationError):
        provisioner.create_master_nodes("key1", "cx11", ["fsn1"], 1, False)

    assert fake_client.create_requests == []


def test_empty_ssh_key_name_raises_validation_error(provisioner, fake_client):
    with pytest.raises(ValidationError):
        provisioner.create_worker_nodes("", "cx11", ["fsn1"], 1, 0)

    assert fake_client.create_requests == []


def test_existing_machine_without_public_ipv4_raises(fake_client):
    fake_client.machines["test-worker-01"] = Machine(
        id=99, name="test-worker-01", public_ipv4="", datacenter="fsn1"
    )
    provisioner = make_provisioner(fake_client)

    with pytest.raises(ValidationError) as exc_info:
        provisioner.create_worker_nodes("key1", "cx11", ["fsn1"], 1, 0)

    assert "no public IPv4" in exc_info.value.message
    assert len(provisioner.registry) == 0


def test_cancel_stops_waiting_on_running_action():
    client = FakeProviderClient(action_script=[(ACTION_RUNNING, 10)] * 5)
    provisioner = make_provisioner(client)
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(ActionCancelledError):
        provisioner.create_worker_nodes("key1", "cx11", ["fsn1"], 2, 0, cancel=cancel)

    assert [r.name for r in client.create_requests] == ["test-worker-01"]
    assert client.action_polls == []
    assert len(provisioner.registry) == 0


def test_log_distinguishes_created_and_loaded_nodes(fake_client, caplog):
    fake_client.add_machine("test-worker-01")
    provisioner = make_provisioner(fake_client)

    with caplog.at_level(logging.INFO, logger="hetzner_kube.provisioner"):
        provisioner.create_worker_nodes("key1", "cx11", ["fsn1"], 2, 0)

    assert "Loaded node 'test-worker-01'" in caplog.text
    assert "Created node 'test-worker-02'" in caplog.text
    assert "Created node 'test-worker-01'" not in caplog.text
