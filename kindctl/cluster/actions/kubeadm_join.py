"""Joins the remaining nodes to the cluster with kubeadm join."""
import posixpath
from typing import List

from ...errors import CommandError, PipelineStepError
from ..constants import KUBEADM_CONFIG_PATH, SHARED_CERTIFICATES
from ..nodes import (
    Node,
    bootstrap_control_plane_node,
    secondary_control_plane_nodes,
    worker_nodes,
)
from . import Action, ActionContext


class KubeadmJoinAction(Action):
    """Joins secondary control planes first, then workers."""

    def execute(self, ctx: ActionContext) -> None:
        all_nodes = ctx.nodes()

        secondary = secondary_control_plane_nodes(all_nodes)
        if secondary:
            self._join_control_planes(ctx, bootstrap_control_plane_node(all_nodes), secondary)

        workers = worker_nodes(all_nodes)
        if workers:
            self._join_workers(ctx, workers)

    def _join_control_planes(self, ctx: ActionContext, bootstrap: Node, nodes: List[Node]) -> None:
        ctx.status.start("Joining more control-plane nodes 🎮")
        try:
            for node in nodes:
                try:
                    copy_certificates(bootstrap, node)
                except CommandError as e:
                    raise PipelineStepError(f"failed to copy certificates to node {node.name}: {e}") from e
                run_kubeadm_join(ctx, node)
            ctx.status.end(True)
        finally:
            ctx.status.end(False)

    def _join_workers(self, ctx: ActionContext, nodes: List[Node]) -> None:
        ctx.status.start("Joining worker nodes 🚜")
        try:
            for node in nodes:
                run_kubeadm_join(ctx, node)
            ctx.status.end(True)
        finally:
            ctx.status.end(False)


def copy_certificates(source: Node, target: Node) -> None:
    """Copy the cluster CA and service account keys between control planes."""
    for path in SHARED_CERTIFICATES:
        content = source.run("cat", path)
        target.run("mkdir", "-p", posixpath.dirname(path))
        target.run("cp", "/dev/stdin", path, stdin=content)


def run_kubeadm_join(ctx: ActionContext, node: Node) -> None:
    try:
        output = node.run(
            "kubeadm", "join",
            f"--config={KUBEADM_CONFIG_PATH}",
            "--skip-phases=preflight",
        )
    except CommandError as e:
        raise PipelineStepError(f"failed to join node {node.name} with kubeadm: {e}") from e
    ctx.logger.debug(output)
