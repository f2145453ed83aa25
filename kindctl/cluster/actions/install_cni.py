"""Installs the default CNI shipped with the node image."""
from ...errors import CommandError, PipelineStepError
from ...templates import render_string
from ..constants import ADMIN_KUBECONFIG_PATH, DEFAULT_CNI_MANIFEST_PATH
from ..nodes import bootstrap_control_plane_node
from . import Action, ActionContext


class InstallCNIAction(Action):
    """Applies the node image's CNI manifest with the pod subnet filled in.

    The manifest may reference ``{{ pod_subnet }}``.
    """

    def execute(self, ctx: ActionContext) -> None:
        ctx.status.start("Installing CNI 🔌")
        try:
            node = bootstrap_control_plane_node(ctx.nodes())

            try:
                manifest = node.run("cat", DEFAULT_CNI_MANIFEST_PATH)
            except CommandError as e:
                raise PipelineStepError(f"failed to read CNI manifest: {e}") from e

            manifest = render_string(manifest, pod_subnet=ctx.config.networking.pod_subnet)

            try:
                node.run(
                    "kubectl", "create", f"--kubeconfig={ADMIN_KUBECONFIG_PATH}", "-f", "-",
                    stdin=manifest,
                )
            except CommandError as e:
                raise PipelineStepError(f"failed to apply overlay network: {e}") from e
            ctx.status.end(True)
        finally:
            ctx.status.end(False)
