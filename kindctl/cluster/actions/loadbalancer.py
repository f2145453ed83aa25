"""Configures the external load balancer in front of the API servers."""
from ...errors import CommandError, PipelineStepError
from ...templates import render_template
from ..nodes import control_plane_nodes, external_load_balancer_node, join_host_port
from . import Action, ActionContext

HAPROXY_CONFIG_PATH = "/etc/haproxy/haproxy.cfg"


class LoadBalancerAction(Action):
    """Points haproxy on the load balancer node at every control plane.

    Clusters with a single control plane have no load balancer node, in which
    case this does nothing.
    """

    def execute(self, ctx: ActionContext) -> None:
        all_nodes = ctx.nodes()
        loadbalancer = external_load_balancer_node(all_nodes)
        if loadbalancer is None:
            return

        ctx.status.start("Configuring the external load balancer ⚖️")
        try:
            port = ctx.config.networking.api_server_port
            try:
                backend_servers = {
                    node.name: join_host_port(node.ip(), port)
                    for node in control_plane_nodes(all_nodes)
                }
            except CommandError as e:
                raise PipelineStepError(f"failed to get control plane addresses: {e}") from e

            config = render_template(
                "haproxy.cfg.j2",
                control_plane_port=port,
                ipv6=ctx.config.networking.ip_family != "ipv4",
                backend_servers=backend_servers,
            )

            try:
                loadbalancer.run(
                    "sh", "-c",
                    "command -v haproxy >/dev/null || (apt-get update -q && apt-get install -y -q haproxy)",
                )
                loadbalancer.write_file(HAPROXY_CONFIG_PATH, config)
                loadbalancer.run("systemctl", "restart", "haproxy")
            except CommandError as e:
                raise PipelineStepError(f"failed to configure load balancer: {e}") from e
            ctx.status.end(True)
        finally:
            ctx.status.end(False)
