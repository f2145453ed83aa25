import logging

import typer

from kindctl.cluster import ClusterContext
from kindctl.cluster import delete as cluster_delete
from kindctl.cluster.providers import default_provider
from kindctl.config import Config
from kindctl.errors import KindctlError

app = typer.Typer()

logger = logging.getLogger("kindctl.commands.delete")


@app.command("cluster")
def delete_cluster_cmd(
    name: str = typer.Option(Config.CLUSTER_NAME, help="Cluster name"),
    kubeconfig: str = typer.Option(
        "", help="Kubeconfig file to remove the cluster from, defaults to $KUBECONFIG or ~/.kube/config"
    ),
):
    """Delete a cluster and its kubeconfig entries."""
    logger.info(f"🗑️ Deleting cluster {name!r} ...")
    try:
        cluster_delete.delete_cluster(logger, ClusterContext(name, default_provider()), kubeconfig)
    except KindctlError as e:
        logger.error(f"❌ Failed to delete cluster: {e}")
        raise typer.Exit(code=1)
    logger.info("✅ Cluster deletion complete.")
