import logging

import typer

from kindctl.cluster import ClusterContext, kubeconfig as cluster_kubeconfig
from kindctl.cluster.providers import default_provider
from kindctl.config import Config
from kindctl.errors import KindctlError

app = typer.Typer()

logger = logging.getLogger("kindctl.commands.export")


@app.command("kubeconfig")
def export_kubeconfig_cmd(
    name: str = typer.Option(Config.CLUSTER_NAME, help="Cluster name"),
    kubeconfig: str = typer.Option(
        "", help="Kubeconfig file to write credentials to, defaults to $KUBECONFIG or ~/.kube/config"
    ),
):
    """Write a cluster's credentials to a kubeconfig file."""
    ctx = ClusterContext(name, default_provider())
    try:
        nodes = ctx.list_nodes()
        if not nodes:
            logger.error(f"❌ Could not locate any nodes for cluster {name!r}")
            raise typer.Exit(code=1)
        cluster_kubeconfig.export(ctx, kubeconfig)
    except KindctlError as e:
        logger.error(f"❌ Failed to export kubeconfig: {e}")
        raise typer.Exit(code=1)
    logger.info(f'Set kubectl context to "{cluster_kubeconfig.context_for_cluster(name)}"')
