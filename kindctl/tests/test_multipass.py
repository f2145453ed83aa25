import json
import logging
import os

import pytest

from conftest import make_config
from kindctl.apis.cluster import Cluster, Mount, Node as NodeConfig, set_defaults_cluster
from kindctl.cluster import ClusterContext, ClusterOptions, create_cluster
from kindctl.cluster.constants import DEFAULT_CNI_MANIFEST_PATH
from kindctl.cluster.nodes import plan_nodes
from kindctl.config import Config
from kindctl.cluster.providers import multipass
from kindctl.cluster.providers.multipass import MultipassNode, MultipassProvider
from kindctl.errors import CommandError, ProvisioningError
from kindctl.status import Status


class FakeMultipass:
    """Stands in for run_command; answers ``multipass list`` from ``vms``."""

    def __init__(self, vms=None, fail_on=None):
        self.vms = list(vms or [])
        self.fail_on = fail_on
        self.calls = []
        self.cloud_inits = []

    def __call__(self, args, stdin=None):
        self.calls.append((list(args), stdin))
        if self.fail_on and self.fail_on in args:
            raise CommandError(args, 2, "launch failed")
        if args[1] == "launch":
            with open(args[args.index("--cloud-init") + 1], encoding="utf-8") as f:
                self.cloud_inits.append(f.read())
        if args[1] == "list":
            return json.dumps({"list": self.vms})
        if args[1] == "info":
            return json.dumps({"info": {args[2]: {"ipv4": ["10.0.0.42", "10.1.0.1"]}}})
        return ""

    def subcommands(self):
        return [args[1] for args, _ in self.calls]


@pytest.fixture
def fake_multipass(monkeypatch, tmp_path):
    fake = FakeMultipass()
    monkeypatch.setattr(multipass, "run_command", fake)
    monkeypatch.setattr(multipass, "CLOUD_INIT_DIR", str(tmp_path / "cloud-init"))
    return fake


@pytest.fixture
def provider():
    return MultipassProvider(binary="multipass", cpus="2", memory="4G", disk="20G", cloud_init="")


@pytest.fixture
def status():
    return Status(logging.getLogger("kindctl.tests"))


def test_plan_nodes_single_control_plane():
    plans = plan_nodes("dev", make_config("control-plane", "worker", "worker"))
    assert [(name, role) for name, role, _ in plans] == [
        ("dev-control-plane", "control-plane"),
        ("dev-worker", "worker"),
        ("dev-worker2", "worker"),
    ]


def test_plan_nodes_adds_load_balancer_for_ha():
    plans = plan_nodes("dev", make_config("control-plane", "control-plane", "control-plane"))
    assert [name for name, _, _ in plans] == [
        "dev-external-load-balancer",
        "dev-control-plane",
        "dev-control-plane2",
        "dev-control-plane3",
    ]
    assert plans[0][2] is None


def test_provision_launches_every_node(fake_multipass, provider, status):
    provider.provision(status, "dev", make_config("control-plane", "worker"))

    launches = [args for args, _ in fake_multipass.calls if args[1] == "launch"]
    assert [args[args.index("--name") + 1] for args in launches] == ["dev-control-plane", "dev-worker"]
    assert launches[0][:3] == ["multipass", "launch", Config.NODE_IMAGE]
    assert launches[0][launches[0].index("--timeout") + 1] == Config.LAUNCH_TIMEOUT


def test_provision_passes_default_cloud_init(fake_multipass, provider, status):
    provider.provision(status, "dev", make_config("control-plane", "worker"))

    launches = [args for args, _ in fake_multipass.calls if args[1] == "launch"]
    paths = {args[args.index("--cloud-init") + 1] for args in launches}
    assert len(paths) == 1
    assert len(fake_multipass.cloud_inits) == 2
    cloud_init = fake_multipass.cloud_inits[0]
    assert cloud_init.startswith("#cloud-config")
    assert "apt-get install -y -q kubelet kubeadm kubectl" in cloud_init
    assert f"core:/stable:/{Config.KUBERNETES_VERSION}/deb" in cloud_init
    assert f"curl -fsSL -o {DEFAULT_CNI_MANIFEST_PATH} {Config.CNI_MANIFEST_URL}" in cloud_init
    # the pod subnet placeholder is left for the CNI install step
    assert "{{ pod_subnet }}" in cloud_init
    # the rendered file is removed once every node is launched
    assert not any(os.path.exists(p) for p in paths)


def test_provision_uses_configured_cloud_init(fake_multipass, status, tmp_path):
    custom = tmp_path / "custom.yaml"
    custom.write_text("#cloud-config\n")
    provider = MultipassProvider(binary="multipass", cloud_init=str(custom))

    provider.provision(status, "dev", make_config("control-plane"))

    [launch] = [args for args, _ in fake_multipass.calls if args[1] == "launch"]
    assert launch[launch.index("--cloud-init") + 1] == str(custom)
    assert custom.exists()


def test_provision_uses_node_image_and_mounts(fake_multipass, provider, status):
    cfg = Cluster(nodes=[NodeConfig(
        role="control-plane",
        image="22.04",
        extraMounts=[Mount(hostPath="/src", containerPath="/mnt/src")],
    )])
    set_defaults_cluster(cfg)

    provider.provision(status, "dev", cfg)

    launch, mount = [args for args, _ in fake_multipass.calls if args[1] in ("launch", "mount")]
    assert launch[2] == "22.04"
    assert mount == ["multipass", "mount", "/src", "dev-control-plane:/mnt/src"]


def test_create_leaves_existing_cluster_alone(fake_multipass, tmp_path):
    fake_multipass.vms = [{"name": "kind-control-plane", "ipv4": ["10.0.0.2"]}]
    kubeconfig_path = tmp_path / "config"

    with pytest.raises(ProvisioningError, match="already exist"):
        create_cluster(
            ClusterContext("kind", MultipassProvider(binary="multipass")),
            ClusterOptions(kubeconfig_path=str(kubeconfig_path)),
        )

    assert fake_multipass.subcommands() == ["list"]
    assert not kubeconfig_path.exists()


def test_provision_launch_failure(fake_multipass, provider, status):
    fake_multipass.fail_on = "dev-worker"
    with pytest.raises(ProvisioningError, match="dev-worker"):
        provider.provision(status, "dev", make_config("control-plane", "worker"))


def test_list_nodes_and_clusters(fake_multipass, provider):
    fake_multipass.vms = [
        {"name": "dev-control-plane", "ipv4": ["10.0.0.2"]},
        {"name": "dev-worker2", "ipv4": []},
        {"name": "dev-external-load-balancer", "ipv4": "10.0.0.9"},
        {"name": "prod-control-plane", "ipv4": ["10.0.1.2"]},
        {"name": "unrelated-vm", "ipv4": ["10.0.2.2"]},
    ]

    nodes = provider.list_nodes("dev")
    assert [(n.name, n.role) for n in nodes] == [
        ("dev-control-plane", "control-plane"),
        ("dev-worker2", "worker"),
        ("dev-external-load-balancer", "external-load-balancer"),
    ]
    assert nodes[0].ip() == "10.0.0.2"
    assert nodes[2].ip() == "10.0.0.9"
    assert provider.list_clusters() == ["dev", "prod"]


def test_node_ip_falls_back_to_info(fake_multipass):
    node = MultipassNode("dev-worker", "worker")
    assert node.ip() == "10.0.0.42"
    assert fake_multipass.calls[0][0][:3] == ["multipass", "info", "dev-worker"]


def test_node_run_uses_exec_with_sudo(fake_multipass):
    MultipassNode("dev-worker", "worker").run("cat", "/etc/hostname", stdin="x")
    assert fake_multipass.calls == [
        (["multipass", "exec", "dev-worker", "--", "sudo", "cat", "/etc/hostname"], "x")
    ]


def test_delete_nodes_deletes_then_purges(fake_multipass, provider):
    nodes = [MultipassNode("dev-control-plane", "control-plane"), MultipassNode("dev-worker", "worker")]
    provider.delete_nodes(nodes)
    assert [args for args, _ in fake_multipass.calls] == [
        ["multipass", "delete", "dev-control-plane", "dev-worker"],
        ["multipass", "purge"],
    ]


def test_delete_nodes_without_nodes_is_a_noop(fake_multipass, provider):
    provider.delete_nodes([])
    assert fake_multipass.calls == []
