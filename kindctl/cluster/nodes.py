"""Running cluster nodes and helpers for selecting them by role."""
import posixpath
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple

from ..apis.cluster import CONTROL_PLANE_ROLE, WORKER_ROLE, Cluster, Node as NodeConfig
from ..errors import PipelineStepError

EXTERNAL_LOAD_BALANCER_ROLE = "external-load-balancer"


class Node(ABC):
    """A provisioned node that commands can be run against."""

    def __init__(self, name: str, role: str):
        self.name = name
        self.role = role

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, role={self.role!r})"

    @abstractmethod
    def ip(self) -> str:
        """Return the node's primary IP address."""

    @abstractmethod
    def run(self, *args: str, stdin: Optional[str] = None) -> str:
        """Run a command on the node as root and return its stdout.

        Raises:
            CommandError: If the command exits non-zero
        """

    def write_file(self, path: str, content: str) -> None:
        self.run("mkdir", "-p", posixpath.dirname(path))
        self.run("cp", "/dev/stdin", path, stdin=content)


def select_nodes_by_role(all_nodes: List[Node], role: str) -> List[Node]:
    return [n for n in all_nodes if n.role == role]


def control_plane_nodes(all_nodes: List[Node]) -> List[Node]:
    return sorted(select_nodes_by_role(all_nodes, CONTROL_PLANE_ROLE), key=lambda n: n.name)


def worker_nodes(all_nodes: List[Node]) -> List[Node]:
    return sorted(select_nodes_by_role(all_nodes, WORKER_ROLE), key=lambda n: n.name)


def bootstrap_control_plane_node(all_nodes: List[Node]) -> Node:
    """Return the control-plane node kubeadm init runs on.

    The first control-plane node by name is used, so the choice is stable
    across calls.
    """
    control_planes = control_plane_nodes(all_nodes)
    if not control_planes:
        raise PipelineStepError("expected at least one control plane node")
    return control_planes[0]


def secondary_control_plane_nodes(all_nodes: List[Node]) -> List[Node]:
    return control_plane_nodes(all_nodes)[1:]


def external_load_balancer_node(all_nodes: List[Node]) -> Optional[Node]:
    loadbalancers = select_nodes_by_role(all_nodes, EXTERNAL_LOAD_BALANCER_ROLE)
    if len(loadbalancers) > 1:
        raise PipelineStepError(
            f"unexpected number of {EXTERNAL_LOAD_BALANCER_ROLE} nodes {len(loadbalancers)}"
        )
    return loadbalancers[0] if loadbalancers else None


def plan_nodes(cluster_name: str, cfg: Cluster) -> List[Tuple[str, str, Optional[NodeConfig]]]:
    """Return ``(node_name, role, node_config)`` for every node a cluster needs.

    Names are ``<cluster>-<role>`` for the first node of a role and
    ``<cluster>-<role><n>`` for the rest. A cluster with more than one
    control plane gets an external load balancer, which has no node config.
    """
    counters: Dict[str, int] = {}

    def next_name(role: str) -> str:
        counters[role] = counters.get(role, 0) + 1
        suffix = "" if counters[role] == 1 else str(counters[role])
        return f"{cluster_name}-{role}{suffix}"

    plans: List[Tuple[str, str, Optional[NodeConfig]]] = []
    control_planes = sum(1 for n in cfg.nodes if n.role == CONTROL_PLANE_ROLE)
    if control_planes > 1:
        plans.append((next_name(EXTERNAL_LOAD_BALANCER_ROLE), EXTERNAL_LOAD_BALANCER_ROLE, None))
    for node in cfg.nodes:
        plans.append((next_name(node.role), node.role, node))
    return plans


def join_host_port(host: str, port: int) -> str:
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"
