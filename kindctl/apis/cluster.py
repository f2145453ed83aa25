"""Data models for kindctl cluster configuration.

A ``Cluster`` describes the desired topology: its nodes, their roles and
images, and cluster-wide networking settings. Field names follow the YAML
document format (camelCase aliases) while the Python attributes are
snake_case.
"""
import ipaddress
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field

from ..config import Config
from ..errors import ConfigError

CONTROL_PLANE_ROLE = "control-plane"
WORKER_ROLE = "worker"
NODE_ROLES = (CONTROL_PLANE_ROLE, WORKER_ROLE)

IPV4_FAMILY = "ipv4"
IPV6_FAMILY = "ipv6"
DUAL_STACK_FAMILY = "dual"
IP_FAMILIES = (IPV4_FAMILY, IPV6_FAMILY, DUAL_STACK_FAMILY)

KUBE_PROXY_MODES = ("iptables", "ipvs", "nftables", "none")

DEFAULT_API_SERVER_PORT = 6443

DEFAULT_POD_SUBNETS = {
    IPV4_FAMILY: "10.244.0.0/16",
    IPV6_FAMILY: "fd00:10:244::/56",
    DUAL_STACK_FAMILY: "10.244.0.0/16,fd00:10:244::/56",
}
DEFAULT_SERVICE_SUBNETS = {
    IPV4_FAMILY: "10.96.0.0/16",
    IPV6_FAMILY: "fd00:10:96::/112",
    DUAL_STACK_FAMILY: "10.96.0.0/16,fd00:10:96::/112",
}


class _Model(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid", validate_assignment=True)


class Mount(_Model):
    """A host directory mounted into a node."""
    host_path: str = Field(alias="hostPath")
    container_path: str = Field(alias="containerPath")


class Node(_Model):
    """A single node in the cluster."""
    role: str = CONTROL_PLANE_ROLE
    image: str = ""
    labels: Dict[str, str] = Field(default_factory=dict)
    extra_mounts: List[Mount] = Field(default_factory=list, alias="extraMounts")
    kubeadm_config_patches: List[str] = Field(default_factory=list, alias="kubeadmConfigPatches")


class Networking(_Model):
    """Cluster-wide network settings."""
    ip_family: str = Field(default="", alias="ipFamily")
    api_server_port: int = Field(default=0, alias="apiServerPort")
    api_server_address: str = Field(default="", alias="apiServerAddress")
    pod_subnet: str = Field(default="", alias="podSubnet")
    service_subnet: str = Field(default="", alias="serviceSubnet")
    disable_default_cni: bool = Field(default=False, alias="disableDefaultCNI")
    kube_proxy_mode: str = Field(default="", alias="kubeProxyMode")


class Cluster(_Model):
    """Top level cluster configuration document."""
    kind: str = "Cluster"
    api_version: str = Field(default="kindctl.dev/v1alpha1", alias="apiVersion")
    name: str = ""
    nodes: List[Node] = Field(default_factory=list)
    networking: Networking = Field(default_factory=Networking)
    feature_gates: Dict[str, bool] = Field(default_factory=dict, alias="featureGates")
    runtime_config: Dict[str, str] = Field(default_factory=dict, alias="runtimeConfig")
    kubeadm_config_patches: List[str] = Field(default_factory=list, alias="kubeadmConfigPatches")


def set_defaults_cluster(cfg: Cluster) -> None:
    """Fill in unset fields of ``cfg`` in place.

    Fields that are already set are left alone, so calling this more than
    once has no further effect.
    """
    if not cfg.name:
        cfg.name = Config.CLUSTER_NAME

    # a cluster without nodes gets a single control plane
    if not cfg.nodes:
        cfg.nodes = [Node(role=CONTROL_PLANE_ROLE)]
    for node in cfg.nodes:
        _set_defaults_node(node)

    networking = cfg.networking
    if not networking.ip_family:
        networking.ip_family = IPV4_FAMILY
    if not networking.api_server_port:
        networking.api_server_port = DEFAULT_API_SERVER_PORT
    if not networking.pod_subnet:
        networking.pod_subnet = DEFAULT_POD_SUBNETS.get(networking.ip_family, DEFAULT_POD_SUBNETS[IPV4_FAMILY])
    if not networking.service_subnet:
        networking.service_subnet = DEFAULT_SERVICE_SUBNETS.get(
            networking.ip_family, DEFAULT_SERVICE_SUBNETS[IPV4_FAMILY]
        )
    if not networking.kube_proxy_mode:
        networking.kube_proxy_mode = "iptables"


def _set_defaults_node(node: Node) -> None:
    if not node.role:
        node.role = CONTROL_PLANE_ROLE
    if not node.image:
        node.image = Config.NODE_IMAGE


def validate_cluster(cfg: Cluster) -> None:
    """Check a defaulted cluster config for semantic errors.

    Raises:
        ConfigError: listing every problem found
    """
    errors = []

    if cfg.kind != "Cluster":
        errors.append(f"unsupported kind {cfg.kind!r}, expected 'Cluster'")

    control_planes = 0
    for i, node in enumerate(cfg.nodes):
        if node.role not in NODE_ROLES:
            errors.append(f"nodes[{i}]: invalid role {node.role!r}, must be one of {', '.join(NODE_ROLES)}")
        if node.role == CONTROL_PLANE_ROLE:
            control_planes += 1
        if not node.image:
            errors.append(f"nodes[{i}]: image must not be empty")
        for j, mount in enumerate(node.extra_mounts):
            if not mount.host_path or not mount.container_path:
                errors.append(f"nodes[{i}].extraMounts[{j}]: hostPath and containerPath are required")
    if control_planes < 1:
        errors.append("must have at least one control-plane node")

    networking = cfg.networking
    if networking.ip_family not in IP_FAMILIES:
        errors.append(f"invalid ipFamily {networking.ip_family!r}, must be one of {', '.join(IP_FAMILIES)}")
    else:
        errors.extend(_validate_subnets("podSubnet", networking.pod_subnet, networking.ip_family))
        errors.extend(_validate_subnets("serviceSubnet", networking.service_subnet, networking.ip_family))
    if not 0 < networking.api_server_port <= 65535:
        errors.append(f"invalid apiServerPort {networking.api_server_port}, must be in the range 1-65535")
    if networking.kube_proxy_mode not in KUBE_PROXY_MODES:
        errors.append(
            f"invalid kubeProxyMode {networking.kube_proxy_mode!r}, must be one of {', '.join(KUBE_PROXY_MODES)}"
        )

    if errors:
        raise ConfigError("invalid cluster configuration:\n" + "\n".join(f"  - {e}" for e in errors))


def _validate_subnets(field: str, value: str, ip_family: str) -> List[str]:
    networks = []
    for raw in value.split(","):
        try:
            networks.append(ipaddress.ip_network(raw.strip(), strict=False))
        except ValueError as e:
            return [f"invalid {field} {raw.strip()!r}: {e}"]

    versions = sorted(n.version for n in networks)
    expected = {IPV4_FAMILY: [4], IPV6_FAMILY: [6], DUAL_STACK_FAMILY: [4, 6]}[ip_family]
    if versions != expected:
        return [f"{field} {value!r} does not match ipFamily {ip_family!r}"]
    return []
