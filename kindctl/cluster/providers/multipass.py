"""Multipass VM provider.

Each cluster node is a Multipass VM named after the cluster and the node's
role: ``<cluster>-control-plane``, ``<cluster>-control-plane2``,
``<cluster>-worker`` and so on. Clusters with more than one control plane
also get a ``<cluster>-external-load-balancer`` VM in front of the API
servers. Role and cluster membership are recovered from the VM name, so no
state is kept outside of Multipass itself.
"""
import json
import logging
import os
import re
import tempfile
from contextlib import contextmanager
from typing import Iterator, List, Optional

from ...apis.cluster import Cluster, Node as NodeConfig
from ...config import Config
from ...errors import CommandError, ProvisioningError
from ...status import Status
from ...templates import render_template
from ...utils import run_command
from ..constants import DEFAULT_CNI_MANIFEST_PATH
from ..nodes import EXTERNAL_LOAD_BALANCER_ROLE, Node, plan_nodes
from .base import Provider

logger = logging.getLogger("kindctl.cluster.providers.multipass")

_ROLES_PATTERN = f"(control-plane|worker|{EXTERNAL_LOAD_BALANCER_ROLE})"

CLOUD_INIT_TEMPLATE = "cloud-init.yaml.j2"
CLOUD_INIT_DIR = os.path.join(os.path.expanduser("~"), ".kindctl")


class MultipassNode(Node):
    """A cluster node backed by a Multipass VM."""

    def __init__(self, name: str, role: str, binary: str = "multipass", ipv4: Optional[str] = None):
        super().__init__(name, role)
        self.binary = binary
        self._ip = ipv4

    def ip(self) -> str:
        if self._ip:
            return self._ip

        output = run_command([self.binary, "info", self.name, "--format", "json"])
        data = json.loads(output)
        all_ips = data["info"][self.name].get("ipv4", [])

        # Convert to list if it's a string
        ip_list = [all_ips] if isinstance(all_ips, str) else all_ips
        valid_ips = [ip for ip in ip_list if ip]
        if not valid_ips:
            raise CommandError([self.binary, "info", self.name], 1, f"no IPv4 address found for {self.name}")

        self._ip = valid_ips[0]
        return self._ip

    def run(self, *args: str, stdin: Optional[str] = None) -> str:
        return run_command([self.binary, "exec", self.name, "--", "sudo", *args], stdin=stdin)


class MultipassProvider(Provider):
    """Provides cluster nodes as local Multipass VMs."""

    def __init__(
        self,
        binary: Optional[str] = None,
        cpus: Optional[str] = None,
        memory: Optional[str] = None,
        disk: Optional[str] = None,
        cloud_init: Optional[str] = None,
        launch_timeout: Optional[str] = None,
    ):
        self.binary = binary or Config.MULTIPASS_BIN
        self.cpus = cpus or Config.NODE_CPUS
        self.memory = memory or Config.NODE_MEMORY
        self.disk = disk or Config.NODE_DISK
        self.cloud_init = cloud_init if cloud_init is not None else Config.CLOUD_INIT
        self.launch_timeout = launch_timeout or Config.LAUNCH_TIMEOUT

    def provision(self, status: Status, name: str, cfg: Cluster) -> None:
        plans = plan_nodes(name, cfg)
        status.start(f"Preparing nodes {'📦 ' * len(plans)}".rstrip())
        with self._cloud_init_file() as cloud_init:
            for vm_name, role, node_cfg in plans:
                try:
                    self._launch(vm_name, role, node_cfg, cloud_init)
                except CommandError as e:
                    status.end(False)
                    raise ProvisioningError(f"failed to create node {vm_name}: {e}") from e
        status.end(True)

    @contextmanager
    def _cloud_init_file(self) -> Iterator[str]:
        """Yield the cloud-init file passed to every launch.

        Without a configured file, the packaged template is rendered to a
        temporary file that installs containerd, kubeadm, kubelet and kubectl
        and fetches the default CNI manifest.
        """
        if self.cloud_init:
            yield self.cloud_init
            return

        content = render_template(
            CLOUD_INIT_TEMPLATE,
            kubernetes_version=Config.KUBERNETES_VERSION,
            cni_manifest_url=Config.CNI_MANIFEST_URL,
            cni_manifest_path=DEFAULT_CNI_MANIFEST_PATH,
        )
        # multipass is usually a confined snap that can read the home directory but not /tmp
        os.makedirs(CLOUD_INIT_DIR, exist_ok=True)
        fd, path = tempfile.mkstemp(prefix="cloud-init-", suffix=".yaml", dir=CLOUD_INIT_DIR)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            yield path
        finally:
            os.unlink(path)

    def _launch(self, vm_name: str, role: str, node_cfg: Optional[NodeConfig], cloud_init: str) -> None:
        image = node_cfg.image if node_cfg and node_cfg.image else Config.NODE_IMAGE
        logger.debug(f"ℹ️  Launching {role} VM {vm_name} from image {image}")

        args = [
            self.binary, "launch", image,
            "--name", vm_name,
            "--cpus", self.cpus,
            "--memory", self.memory,
            "--disk", self.disk,
            "--cloud-init", cloud_init,
            # launch blocks until cloud-init has installed the node packages
            "--timeout", self.launch_timeout,
        ]
        run_command(args)
        logger.debug(f"✅ Launched: {vm_name}")

        if node_cfg:
            for mount in node_cfg.extra_mounts:
                run_command([self.binary, "mount", mount.host_path, f"{vm_name}:{mount.container_path}"])

    def _list_vms(self) -> List[dict]:
        output = run_command([self.binary, "list", "--format", "json"])
        return json.loads(output).get("list", [])

    def list_clusters(self) -> List[str]:
        pattern = re.compile(rf"^(.+)-{_ROLES_PATTERN}\d*$")
        clusters = set()
        for vm in self._list_vms():
            match = pattern.match(vm.get("name", ""))
            if match:
                clusters.add(match.group(1))
        return sorted(clusters)

    def list_nodes(self, name: str) -> List[Node]:
        pattern = re.compile(rf"^{re.escape(name)}-{_ROLES_PATTERN}\d*$")
        nodes: List[Node] = []
        for vm in self._list_vms():
            match = pattern.match(vm.get("name", ""))
            if not match:
                continue
            ips = vm.get("ipv4") or []
            ip_list = [ips] if isinstance(ips, str) else ips
            nodes.append(MultipassNode(
                vm["name"], match.group(1), self.binary, ipv4=ip_list[0] if ip_list else None
            ))
        return nodes

    def delete_nodes(self, nodes: List[Node]) -> None:
        if not nodes:
            return
        names = [n.name for n in nodes]
        for vm_name in names:
            logger.info(f"🗑️ Deleting Multipass VM → {vm_name}")
        run_command([self.binary, "delete", *names])
        run_command([self.binary, "purge"])
