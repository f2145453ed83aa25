"""Waits for the control-plane nodes to report Ready."""
import time

from ...errors import CommandError
from ..constants import ADMIN_KUBECONFIG_PATH, CONTROL_PLANE_LABEL
from ..nodes import Node, bootstrap_control_plane_node
from . import Action, ActionContext


class WaitForReadyAction(Action):
    """Polls the control-plane nodes until Ready or ``wait_time`` seconds pass.

    A zero wait time skips the check. Timing out is not an error: the
    cluster is still up, it is just not reporting Ready yet.
    """

    poll_interval = 2.0

    def __init__(self, wait_time: float):
        self.wait_time = wait_time

    def __repr__(self) -> str:
        return f"WaitForReadyAction(wait_time={self.wait_time!r})"

    def execute(self, ctx: ActionContext) -> None:
        if self.wait_time <= 0:
            return

        ctx.status.start(f"Waiting ≤ {format_duration(self.wait_time)} for control-plane = Ready ⏳")
        try:
            node = bootstrap_control_plane_node(ctx.nodes())
            start = time.monotonic()
            if not self._wait_for_ready(ctx, node, start + self.wait_time):
                ctx.status.end(False)
                ctx.logger.warning(" • WARNING: Timed out waiting for Ready ⚠️")
                return
            ctx.status.end(True)
            ctx.logger.info(f" • Ready after {format_duration(time.monotonic() - start)} 💚")
        finally:
            ctx.status.end(False)

    def _wait_for_ready(self, ctx: ActionContext, node: Node, deadline: float) -> bool:
        while True:
            if nodes_ready(ctx, node):
                return True
            if time.monotonic() >= deadline:
                return False
            time.sleep(self.poll_interval)


def nodes_ready(ctx: ActionContext, node: Node) -> bool:
    """Return True if every control-plane node's last condition is True."""
    try:
        output = node.run(
            "kubectl", f"--kubeconfig={ADMIN_KUBECONFIG_PATH}",
            "get", "nodes", f"--selector={CONTROL_PLANE_LABEL}",
            "-o=jsonpath={.items..status.conditions[-1:].status}",
        )
    except CommandError as e:
        ctx.logger.debug(f"Control plane not ready yet: {e}")
        return False

    statuses = output.strip().strip("'").split()
    return bool(statuses) and all(status == "True" for status in statuses)


def format_duration(seconds: float) -> str:
    seconds = int(round(seconds))
    minutes, secs = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h{minutes}m{secs}s"
    if minutes:
        return f"{minutes}m{secs}s"
    return f"{secs}s"
