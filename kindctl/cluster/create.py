"""Cluster creation.

``create_cluster`` validates the name, normalizes the options, provisions
nodes through the provider and then runs the bootstrap actions in order.
A failure while provisioning or bootstrapping deletes whatever was created,
unless ``retain`` is set. Once every action has succeeded the cluster is
considered up: a failure to export the kubeconfig after that point is
reported but never triggers a delete.
"""
import logging
import random
import re
import shlex
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from ..apis import encoding
from ..apis.cluster import Cluster, set_defaults_cluster, validate_cluster
from ..errors import CommandError, InvalidNameError, ProvisioningError
from ..status import status_for_logger
from . import delete, kubeconfig
from .actions import Action, ActionContext
from .actions.config import ConfigAction
from .actions.install_cni import InstallCNIAction
from .actions.install_storage import InstallStorageAction
from .actions.kubeadm_init import KubeadmInitAction
from .actions.kubeadm_join import KubeadmJoinAction
from .actions.loadbalancer import LoadBalancerAction
from .actions.wait_for_ready import WaitForReadyAction
from .context import ClusterContext

logger = logging.getLogger("kindctl.cluster.create")

# Typical host name max limit is 64 characters (see sethostname(2)) and the
# control plane node name appends "-control-plane" (14 characters).
CLUSTER_NAME_MAX = 50

VALID_NAME_RE = re.compile(r"^[A-Za-z0-9_.-]+$")

SALUTATIONS = (
    "Have a nice day! 👋",
    "Thanks for using kindctl! 😊",
    "Not sure what to do next? 😅 Try: kubectl get nodes",
    "Have a question, bug, or feature request? Let us know! 🙂",
)


@dataclass
class ClusterOptions:
    """Options for a single cluster creation."""
    config: Optional[Cluster] = None
    # overrides the image of every node in config if set
    node_image: str = ""
    retain: bool = False
    wait_for_ready: float = 0.0
    kubeconfig_path: str = ""
    # provision nodes and write config, but do not bootstrap kubernetes
    stop_before_bootstrap: bool = False
    display_usage: bool = False
    display_salutation: bool = False


def create_cluster(ctx: ClusterContext, opts: ClusterOptions, log: Optional[logging.Logger] = None) -> None:
    """Create the cluster ``ctx.name`` as described by ``opts``.

    Raises:
        InvalidNameError: The cluster name is malformed
        ConfigError: The config could not be loaded or is invalid
        ProvisioningError: Nodes for the name already exist, or the provider failed to create nodes
        PipelineStepError: A bootstrap action failed
        ExportError: The kubeconfig could not be written
    """
    log = log or logger

    validate_name(ctx.name, log)
    fixup_options(opts)
    validate_cluster(opts.config)
    # an existing cluster with this name is never cleaned up
    check_not_exists(ctx)

    status = status_for_logger(log)

    try:
        ctx.provider.provision(status, ctx.name, opts.config)
    except Exception as e:
        # in case of errors nodes are deleted, unless retain is set
        log.error(f"{e}")
        if not opts.retain:
            compensate(log, ctx, opts.kubeconfig_path)
        raise

    def on_failure() -> None:
        compensate(log, ctx, opts.kubeconfig_path)

    action_ctx = ActionContext(log, opts.config, ctx, status)
    run_actions(build_actions(opts), action_ctx, None if opts.retain else on_failure)

    if opts.stop_before_bootstrap:
        return

    kubeconfig.export(ctx, opts.kubeconfig_path)

    if opts.display_usage:
        log_usage(log, ctx, opts.kubeconfig_path)
    if opts.display_salutation:
        log.info("")
        log_salutation(log)


def validate_name(name: str, log: logging.Logger) -> None:
    """Reject malformed cluster names and warn about long ones."""
    if not VALID_NAME_RE.fullmatch(name):
        raise InvalidNameError(
            f"'{name}' is not a valid cluster name, cluster names must match `{VALID_NAME_RE.pattern}`"
        )
    if len(name) > CLUSTER_NAME_MAX:
        log.warning(f"cluster name {name!r} is probably too long, this might not work properly on some systems")


def check_not_exists(ctx: ClusterContext) -> None:
    """Refuse to create a cluster whose name is already taken by existing nodes."""
    try:
        existing = ctx.list_nodes()
    except CommandError as e:
        raise ProvisioningError(f"failed to list existing nodes: {e}") from e
    if existing:
        raise ProvisioningError(f"node(s) already exist for a cluster with the name {ctx.name!r}")


def fixup_options(opts: ClusterOptions) -> None:
    """Load the default config if none was given, then apply the image override and defaults."""
    if opts.config is None:
        opts.config = encoding.load("")

    if opts.node_image:
        for node in opts.config.nodes:
            node.image = opts.node_image

    # the config may have been built in memory rather than loaded from disk
    set_defaults_cluster(opts.config)


def build_actions(opts: ClusterOptions) -> List[Action]:
    """Return the bootstrap actions to run for ``opts``, in order."""
    actions: List[Action] = [
        LoadBalancerAction(),  # setup external loadbalancer
        ConfigAction(),        # setup kubeadm config
    ]
    if opts.stop_before_bootstrap:
        return actions

    actions.append(KubeadmInitAction())
    # a CNI may be installed by the user instead
    disable_default_cni = opts.config is not None and opts.config.networking.disable_default_cni
    if not disable_default_cni:
        actions.append(InstallCNIAction())
    actions.extend([
        InstallStorageAction(),
        KubeadmJoinAction(),
        WaitForReadyAction(opts.wait_for_ready),
    ])
    return actions


def run_actions(
    actions: List[Action],
    ctx: ActionContext,
    on_failure: Optional[Callable[[], None]] = None,
) -> None:
    """Execute ``actions`` in order, stopping at the first failure.

    ``on_failure`` is called once before the failing action's exception is
    re-raised unchanged.
    """
    for action in actions:
        try:
            action.execute(ctx)
        except Exception:
            if on_failure is not None:
                on_failure()
            raise


def compensate(log: logging.Logger, ctx: ClusterContext, kubeconfig_path: str) -> None:
    """Best effort delete of a partially created cluster.

    Errors are logged and discarded so they never hide the original failure.
    """
    try:
        delete.delete_cluster(log, ctx, kubeconfig_path)
    except Exception as e:
        log.warning(f"⚠️  Failed to clean up cluster {ctx.name!r}: {e}")


def log_usage(log: logging.Logger, ctx: ClusterContext, explicit_kubeconfig_path: str) -> None:
    kctx = kubeconfig.context_for_cluster(ctx.name)
    sample_command = f"kubectl cluster-info --context {kctx}"
    if explicit_kubeconfig_path:
        sample_command += " --kubeconfig " + shlex.quote(explicit_kubeconfig_path)
    log.info(f'Set kubectl context to "{kctx}"')
    log.info(f"You can now use your cluster with:\n\n{sample_command}")


def log_salutation(log: logging.Logger) -> None:
    rng = random.Random(time.time_ns())
    log.info(rng.choice(SALUTATIONS))
