"""Runs kubeadm init on the bootstrap control-plane node."""
from ...errors import CommandError, PipelineStepError
from ..constants import ADMIN_KUBECONFIG_PATH, CONTROL_PLANE_LABEL, KUBEADM_CONFIG_PATH
from ..nodes import bootstrap_control_plane_node, worker_nodes
from . import Action, ActionContext


class KubeadmInitAction(Action):
    """Bootstraps the first control plane with kubeadm init."""

    def execute(self, ctx: ActionContext) -> None:
        ctx.status.start("Starting control-plane 🕹️")
        try:
            all_nodes = ctx.nodes()
            node = bootstrap_control_plane_node(all_nodes)

            try:
                output = node.run(
                    "kubeadm", "init",
                    "--skip-phases=preflight",
                    f"--config={KUBEADM_CONFIG_PATH}",
                    "--skip-token-print",
                )
            except CommandError as e:
                raise PipelineStepError(f"failed to init node with kubeadm: {e}") from e
            ctx.logger.debug(output)

            # without workers, workloads have to be schedulable on the control plane
            if not worker_nodes(all_nodes):
                try:
                    node.run(
                        "kubectl", f"--kubeconfig={ADMIN_KUBECONFIG_PATH}",
                        "taint", "nodes", "--all", f"{CONTROL_PLANE_LABEL}-",
                    )
                except CommandError as e:
                    raise PipelineStepError(f"failed to remove control plane taint: {e}") from e
            ctx.status.end(True)
        finally:
            ctx.status.end(False)
