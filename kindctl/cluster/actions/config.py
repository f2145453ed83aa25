"""Generates and writes the kubeadm config for every node."""
from typing import Dict, List, Optional

import yaml

from ...apis.cluster import CONTROL_PLANE_ROLE, Cluster, Node as NodeConfig
from ...errors import CommandError, PipelineStepError
from ...templates import render_template
from ...utils import merge_dicts
from ..constants import KUBEADM_CONFIG_PATH, KUBEADM_TOKEN
from ..nodes import (
    EXTERNAL_LOAD_BALANCER_ROLE,
    Node,
    bootstrap_control_plane_node,
    control_plane_nodes,
    external_load_balancer_node,
    join_host_port,
    plan_nodes,
)
from . import Action, ActionContext


class ConfigAction(Action):
    """Renders ``/kind/kubeadm.conf`` on every kubernetes node."""

    def execute(self, ctx: ActionContext) -> None:
        ctx.status.start("Writing configuration 📜")
        try:
            all_nodes = ctx.nodes()
            node_configs = {name: cfg for name, _, cfg in plan_nodes(ctx.cluster.name, ctx.config)}

            try:
                bootstrap = bootstrap_control_plane_node(all_nodes)
                kubernetes_version = bootstrap.run("kubeadm", "version", "-o", "short").strip()
                endpoint_node = external_load_balancer_node(all_nodes) or bootstrap
                control_plane_endpoint = join_host_port(
                    endpoint_node.ip(), ctx.config.networking.api_server_port
                )
                cert_sans = _cert_sans(ctx.config, endpoint_node, control_plane_nodes(all_nodes))
            except CommandError as e:
                raise PipelineStepError(f"failed to inspect cluster nodes: {e}") from e

            for node in all_nodes:
                if node.role == EXTERNAL_LOAD_BALANCER_ROLE:
                    continue
                try:
                    config = generate_kubeadm_config(
                        ctx.config,
                        node_configs.get(node.name),
                        node_name=node.name,
                        node_address=node.ip(),
                        is_control_plane=node.role == CONTROL_PLANE_ROLE,
                        kubernetes_version=kubernetes_version,
                        control_plane_endpoint=control_plane_endpoint,
                        cert_sans=cert_sans,
                    )
                    ctx.logger.debug(f"Using the following kubeadm config for node {node.name}:\n{config}")
                    node.write_file(KUBEADM_CONFIG_PATH, config)
                except CommandError as e:
                    raise PipelineStepError(f"failed to write kubeadm config to node {node.name}: {e}") from e
            ctx.status.end(True)
        finally:
            ctx.status.end(False)


def _cert_sans(cfg: Cluster, endpoint_node: Node, control_planes: List[Node]) -> List[str]:
    sans = ["localhost", "127.0.0.1", endpoint_node.ip()]
    if cfg.networking.api_server_address:
        sans.append(cfg.networking.api_server_address)
    sans.extend(node.ip() for node in control_planes)
    # keep order, drop duplicates
    return list(dict.fromkeys(sans))


def generate_kubeadm_config(
    cfg: Cluster,
    node_cfg: Optional[NodeConfig],
    node_name: str,
    node_address: str,
    is_control_plane: bool,
    kubernetes_version: str,
    control_plane_endpoint: str,
    cert_sans: List[str],
) -> str:
    """Render the kubeadm config for one node and apply config patches.

    Cluster wide patches are applied first, then the node's own patches.
    """
    labels = node_cfg.labels if node_cfg else {}
    rendered = render_template(
        "kubeadm.conf.j2",
        cluster_name=cfg.name,
        kubernetes_version=kubernetes_version,
        control_plane_endpoint=control_plane_endpoint,
        pod_subnet=cfg.networking.pod_subnet,
        service_subnet=cfg.networking.service_subnet,
        cert_sans=cert_sans,
        feature_gates=_join_pairs({k: str(v).lower() for k, v in cfg.feature_gates.items()}),
        feature_gate_map=cfg.feature_gates,
        runtime_config=_join_pairs(cfg.runtime_config),
        token=KUBEADM_TOKEN,
        node_name=node_name,
        node_address=node_address,
        api_bind_port=cfg.networking.api_server_port,
        node_labels=_join_pairs(labels),
        is_control_plane=is_control_plane,
        kube_proxy_mode=cfg.networking.kube_proxy_mode,
    )

    patches = list(cfg.kubeadm_config_patches)
    if node_cfg:
        patches.extend(node_cfg.kubeadm_config_patches)
    if not patches:
        return rendered
    return apply_patches(rendered, patches)


def apply_patches(config: str, patches: List[str]) -> str:
    """Merge each YAML patch into the config documents with the same ``kind``.

    A patch that also sets ``apiVersion`` only matches documents with that
    version. A patch matching no document is an error.
    """
    documents = [doc for doc in yaml.safe_load_all(config) if doc]
    for raw in patches:
        try:
            patch = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise PipelineStepError(f"invalid kubeadm config patch: {e}") from e
        if not isinstance(patch, dict) or "kind" not in patch:
            raise PipelineStepError("kubeadm config patches must be mappings with a 'kind'")

        matched = False
        for i, doc in enumerate(documents):
            if doc.get("kind") != patch["kind"]:
                continue
            if "apiVersion" in patch and doc.get("apiVersion") != patch["apiVersion"]:
                continue
            documents[i] = merge_dicts(doc, patch)
            matched = True
        if not matched:
            raise PipelineStepError(f"kubeadm config patch for kind {patch['kind']!r} matched no document")
    return yaml.safe_dump_all(documents, default_flow_style=False, sort_keys=False)


def _join_pairs(values: Dict[str, str]) -> str:
    return ",".join(f"{k}={v}" for k, v in sorted(values.items()))
