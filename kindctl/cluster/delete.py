"""Deleting a cluster's nodes and credentials."""
import logging

from ..errors import KindctlError
from . import kubeconfig
from .context import ClusterContext


def delete_cluster(logger: logging.Logger, ctx: ClusterContext, explicit_kubeconfig_path: str) -> None:
    """Delete the cluster's nodes and remove it from the kubeconfig.

    A kubeconfig failure does not stop the nodes from being deleted. It is
    raised once the nodes are gone.

    Raises:
        CommandError: If the nodes cannot be listed or deleted
        KindctlError: If the kubeconfig could not be updated
    """
    nodes = ctx.list_nodes()

    kubeconfig_error = None
    try:
        kubeconfig.remove(ctx.name, explicit_kubeconfig_path)
    except (KindctlError, OSError) as e:
        logger.error(f"failed to update kubeconfig: {e}")
        kubeconfig_error = e

    if nodes:
        ctx.provider.delete_nodes(nodes)

    if kubeconfig_error is not None:
        raise KindctlError(f"failed to update kubeconfig: {kubeconfig_error}") from kubeconfig_error
