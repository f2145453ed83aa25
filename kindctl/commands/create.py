import logging
from typing import Optional

import typer

from kindctl.apis import encoding
from kindctl.cluster import ClusterContext, ClusterOptions
from kindctl.cluster import create as cluster_create
from kindctl.cluster.providers import default_provider
from kindctl.config import Config
from kindctl.errors import KindctlError
from kindctl.utils import parse_duration

app = typer.Typer()

logger = logging.getLogger("kindctl.commands.create")


@app.command("cluster")
def create_cluster_cmd(
    name: Optional[str] = typer.Option(None, help="Cluster name, overrides the name in the config file"),
    config: Optional[str] = typer.Option(None, help="Path to a cluster config file, '-' reads stdin"),
    image: str = typer.Option("", help="Node image, overrides the image of every node in the config"),
    retain: bool = typer.Option(False, help="Retain nodes for debugging when cluster creation fails"),
    wait: str = typer.Option("0s", help="Wait for the control plane to be ready (e.g. 30s, 5m)"),
    kubeconfig: str = typer.Option(
        "", help="Kubeconfig file to write credentials to, defaults to $KUBECONFIG or ~/.kube/config"
    ),
    stop_before_bootstrap: bool = typer.Option(
        False, help="Provision nodes and write their config without bootstrapping Kubernetes"
    ),
):
    """Create a local Kubernetes cluster."""
    try:
        wait_seconds = parse_duration(wait)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--wait")

    try:
        cfg = encoding.load(config) if config else None
        cluster_name = name or (cfg.name if cfg else Config.CLUSTER_NAME)

        logger.info(f"🚀 Creating cluster {cluster_name!r} ...")
        cluster_create.create_cluster(
            ClusterContext(cluster_name, default_provider()),
            ClusterOptions(
                config=cfg,
                node_image=image,
                retain=retain,
                wait_for_ready=wait_seconds,
                kubeconfig_path=kubeconfig,
                stop_before_bootstrap=stop_before_bootstrap,
                display_usage=True,
                display_salutation=True,
            ),
        )
    except KindctlError as e:
        logger.error(f"❌ Failed to create cluster: {e}")
        raise typer.Exit(code=1)
