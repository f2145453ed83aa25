import logging
from typing import Dict, List, Optional

import pytest

from kindctl.apis.cluster import Cluster, Node as NodeConfig, set_defaults_cluster
from kindctl.cluster import delete as delete_module
from kindctl.cluster import kubeconfig as kubeconfig_module
from kindctl.cluster.actions import Action, ActionContext
from kindctl.cluster.context import ClusterContext
from kindctl.cluster.nodes import Node
from kindctl.cluster.providers.base import Provider
from kindctl.status import Status


class FakeNode(Node):
    """Records commands; ``responses`` maps an argv tuple (or its first word)
    to output text or an exception to raise."""

    def __init__(self, name: str, role: str, ip: str = "10.0.0.1", responses: Optional[Dict] = None):
        super().__init__(name, role)
        self._ip = ip
        self.responses = responses or {}
        self.commands: List[tuple] = []

    def ip(self) -> str:
        return self._ip

    def run(self, *args, stdin=None):
        self.commands.append((args, stdin))
        response = self.responses.get(tuple(args), self.responses.get(args[0], ""))
        if isinstance(response, Exception):
            raise response
        return response

    def argvs(self):
        return [args for args, _ in self.commands]

    def written(self, path: str) -> Optional[str]:
        for args, stdin in self.commands:
            if args == ("cp", "/dev/stdin", path):
                return stdin
        return None


class FakeProvider(Provider):
    def __init__(self, nodes=None, provision_error=None):
        self.nodes = list(nodes or [])
        self.provision_error = provision_error
        self.provision_calls = []
        self.deleted = []

    def provision(self, status, name, cfg):
        self.provision_calls.append((name, cfg))
        if self.provision_error is not None:
            raise self.provision_error

    def list_clusters(self):
        return ["kind"] if self.nodes else []

    def list_nodes(self, name):
        return list(self.nodes)

    def delete_nodes(self, nodes):
        self.deleted.append(list(nodes))


class RecordingAction(Action):
    def __init__(self, name, log, error=None):
        self.name = name
        self.log = log
        self.error = error

    def execute(self, ctx):
        self.log.append((self.name, ctx))
        if self.error is not None:
            raise self.error


def make_config(*roles: str) -> Cluster:
    cfg = Cluster(nodes=[NodeConfig(role=role) for role in roles])
    set_defaults_cluster(cfg)
    return cfg


def make_action_context(nodes, cfg: Optional[Cluster] = None, name: str = "kind") -> ActionContext:
    logger = logging.getLogger("kindctl.tests")
    cfg = cfg or make_config(*[n.role for n in nodes if n.role != "external-load-balancer"])
    return ActionContext(logger, cfg, ClusterContext(name, FakeProvider(nodes)), Status(logger))


class Recorder:
    def __init__(self):
        self.deletes = []
        self.exports = []
        self.delete_error = None
        self.export_error = None


@pytest.fixture
def recorder(monkeypatch):
    """Replace cluster deletion and kubeconfig export with recorders."""
    rec = Recorder()

    def fake_delete(logger, ctx, kubeconfig_path):
        rec.deletes.append((ctx.name, kubeconfig_path))
        if rec.delete_error is not None:
            raise rec.delete_error

    def fake_export(ctx, kubeconfig_path):
        rec.exports.append((ctx.name, kubeconfig_path))
        if rec.export_error is not None:
            raise rec.export_error

    monkeypatch.setattr(delete_module, "delete_cluster", fake_delete)
    monkeypatch.setattr(kubeconfig_module, "export", fake_export)
    return rec
