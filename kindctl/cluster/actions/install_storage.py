"""Installs the default StorageClass."""
from ...errors import CommandError, PipelineStepError
from ..constants import ADMIN_KUBECONFIG_PATH, DEFAULT_STORAGE_MANIFEST_PATH
from ..nodes import bootstrap_control_plane_node
from . import Action, ActionContext

# used when the node image does not ship its own storage manifest
FALLBACK_STORAGE_MANIFEST = """\
apiVersion: storage.k8s.io/v1
kind: StorageClass
metadata:
  namespace: kube-system
  name: standard
  annotations:
    storageclass.kubernetes.io/is-default-class: "true"
provisioner: kubernetes.io/host-path
"""


class InstallStorageAction(Action):
    """Applies the node image's StorageClass manifest, or a default one."""

    def execute(self, ctx: ActionContext) -> None:
        ctx.status.start("Installing StorageClass 💾")
        try:
            node = bootstrap_control_plane_node(ctx.nodes())

            try:
                manifest = node.run("cat", DEFAULT_STORAGE_MANIFEST_PATH)
            except CommandError:
                ctx.logger.debug("No storage manifest on the node image, using the default StorageClass")
                manifest = FALLBACK_STORAGE_MANIFEST

            try:
                node.run(
                    "kubectl", f"--kubeconfig={ADMIN_KUBECONFIG_PATH}", "apply", "-f", "-",
                    stdin=manifest,
                )
            except CommandError as e:
                raise PipelineStepError(f"failed to add default storage class: {e}") from e
            ctx.status.end(True)
        finally:
            ctx.status.end(False)
