import pytest

from kindctl.apis import encoding
from kindctl.apis.cluster import (
    Cluster,
    Networking,
    Node,
    set_defaults_cluster,
    validate_cluster,
)
from kindctl.config import Config
from kindctl.errors import ConfigError

MULTI_NODE_YAML = """
kind: Cluster
apiVersion: kindctl.dev/v1alpha1
name: dev
nodes:
- role: control-plane
- role: worker
  labels:
    tier: backend
  kubeadmConfigPatches:
  - |
    kind: JoinConfiguration
    nodeRegistration:
      taints: []
networking:
  disableDefaultCNI: true
  podSubnet: 10.100.0.0/16
featureGates:
  SomeGate: true
"""


def test_load_empty_path_returns_default_cluster():
    cfg = encoding.load("")

    assert cfg.name == Config.CLUSTER_NAME
    assert [n.role for n in cfg.nodes] == ["control-plane"]
    assert cfg.nodes[0].image == Config.NODE_IMAGE
    assert cfg.networking.ip_family == "ipv4"
    assert cfg.networking.api_server_port == 6443
    assert cfg.networking.pod_subnet == "10.244.0.0/16"
    assert cfg.networking.service_subnet == "10.96.0.0/16"
    assert cfg.networking.kube_proxy_mode == "iptables"
    assert cfg.networking.disable_default_cni is False


def test_parse_reads_camel_case_fields():
    cfg = encoding.parse(MULTI_NODE_YAML)

    assert cfg.name == "dev"
    assert [n.role for n in cfg.nodes] == ["control-plane", "worker"]
    assert cfg.nodes[1].labels == {"tier": "backend"}
    assert len(cfg.nodes[1].kubeadm_config_patches) == 1
    assert cfg.networking.disable_default_cni is True
    assert cfg.networking.pod_subnet == "10.100.0.0/16"
    assert cfg.networking.service_subnet == "10.96.0.0/16"
    assert cfg.feature_gates == {"SomeGate": True}
    validate_cluster(cfg)


def test_load_reads_file(tmp_path):
    path = tmp_path / "cluster.yaml"
    path.write_text(MULTI_NODE_YAML)

    cfg = encoding.load(str(path))
    assert cfg.name == "dev"


def test_load_missing_file():
    with pytest.raises(ConfigError):
        encoding.load("/nonexistent/cluster.yaml")


def test_parse_invalid_yaml():
    with pytest.raises(ConfigError):
        encoding.parse("nodes: [\n  - role: worker")


def test_parse_non_mapping():
    with pytest.raises(ConfigError):
        encoding.parse("- just\n- a list\n")


def test_parse_rejects_unknown_role():
    with pytest.raises(ConfigError, match="schema"):
        encoding.parse("nodes:\n- role: master\n")


def test_parse_rejects_unknown_fields():
    with pytest.raises(ConfigError):
        encoding.parse("nodes:\n- role: worker\n  bogus: 1\n")


def test_parse_empty_document_is_default():
    cfg = encoding.parse("")
    assert [n.role for n in cfg.nodes] == ["control-plane"]


def test_set_defaults_is_idempotent():
    cfg = Cluster(nodes=[Node(role="control-plane", image="mine:1"), Node(role="worker")])
    set_defaults_cluster(cfg)
    first = cfg.model_dump()
    set_defaults_cluster(cfg)

    assert cfg.model_dump() == first
    assert cfg.nodes[0].image == "mine:1"
    assert cfg.nodes[1].image == Config.NODE_IMAGE


def test_set_defaults_for_ipv6():
    cfg = Cluster(networking=Networking(ip_family="ipv6"))
    set_defaults_cluster(cfg)

    assert cfg.networking.pod_subnet == "fd00:10:244::/56"
    assert cfg.networking.service_subnet == "fd00:10:96::/112"
    validate_cluster(cfg)


def test_set_defaults_for_dual_stack():
    cfg = Cluster(networking=Networking(ip_family="dual"))
    set_defaults_cluster(cfg)
    validate_cluster(cfg)


def test_validate_requires_a_control_plane():
    cfg = Cluster(nodes=[Node(role="worker")])
    set_defaults_cluster(cfg)

    with pytest.raises(ConfigError, match="at least one control-plane"):
        validate_cluster(cfg)


def test_validate_rejects_bad_subnet():
    cfg = Cluster(networking=Networking(pod_subnet="not-a-cidr"))
    set_defaults_cluster(cfg)

    with pytest.raises(ConfigError, match="podSubnet"):
        validate_cluster(cfg)


def test_validate_rejects_family_mismatch():
    cfg = Cluster(networking=Networking(ip_family="ipv6", service_subnet="10.96.0.0/16"))
    set_defaults_cluster(cfg)

    with pytest.raises(ConfigError, match="serviceSubnet"):
        validate_cluster(cfg)


def test_validate_reports_every_problem():
    cfg = Cluster(
        nodes=[Node(role="bogus")],
        networking=Networking(kube_proxy_mode="magic", api_server_port=70000),
    )
    set_defaults_cluster(cfg)

    with pytest.raises(ConfigError) as exc:
        validate_cluster(cfg)

    message = str(exc.value)
    assert "invalid role" in message
    assert "kubeProxyMode" in message
    assert "apiServerPort" in message
