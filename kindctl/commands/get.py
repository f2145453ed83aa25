import logging

import typer

from kindctl.cluster import ClusterContext
from kindctl.cluster.providers import default_provider
from kindctl.config import Config
from kindctl.errors import KindctlError

app = typer.Typer()

logger = logging.getLogger("kindctl.commands.get")


@app.command("clusters")
def get_clusters_cmd():
    """List clusters."""
    try:
        clusters = default_provider().list_clusters()
    except KindctlError as e:
        logger.error(f"❌ Failed to list clusters: {e}")
        raise typer.Exit(code=1)

    if not clusters:
        typer.echo("No clusters found.")
        return
    for name in clusters:
        typer.echo(name)


@app.command("nodes")
def get_nodes_cmd(name: str = typer.Option(Config.CLUSTER_NAME, help="Cluster name")):
    """List the nodes of a cluster."""
    try:
        nodes = ClusterContext(name, default_provider()).list_nodes()
    except KindctlError as e:
        logger.error(f"❌ Failed to list nodes: {e}")
        raise typer.Exit(code=1)

    if not nodes:
        typer.echo(f"No nodes found for cluster {name!r}.")
        return
    for node in sorted(nodes, key=lambda n: n.name):
        typer.echo(f"{node.name}\t{node.role}")
