import logging

import pytest
import yaml

from conftest import FakeNode, FakeProvider
from kindctl.cluster import kubeconfig
from kindctl.cluster.context import ClusterContext
from kindctl.cluster.delete import delete_cluster
from kindctl.errors import KindctlError

logger = logging.getLogger("kindctl.tests")


def test_delete_removes_nodes_and_kubeconfig_entries(tmp_path):
    path = tmp_path / "config"
    kubeconfig.merge(str(path), {
        "clusters": [{"name": "kindctl-dev", "cluster": {}}],
        "users": [{"name": "kindctl-dev", "user": {}}],
        "contexts": [{"name": "kindctl-dev", "context": {}}],
        "current-context": "kindctl-dev",
    })
    nodes = [FakeNode("dev-control-plane", "control-plane"), FakeNode("dev-worker", "worker")]
    provider = FakeProvider(nodes)

    delete_cluster(logger, ClusterContext("dev", provider), str(path))

    assert provider.deleted == [nodes]
    data = yaml.safe_load(path.read_text())
    assert data["clusters"] == [] and data["current-context"] == ""


def test_delete_without_nodes(tmp_path):
    provider = FakeProvider([])
    delete_cluster(logger, ClusterContext("dev", provider), str(tmp_path / "config"))
    assert provider.deleted == []


def test_delete_still_deletes_nodes_when_kubeconfig_is_broken(tmp_path):
    path = tmp_path / "config"
    path.write_text("- not\n- a mapping\n")
    nodes = [FakeNode("dev-control-plane", "control-plane")]
    provider = FakeProvider(nodes)

    with pytest.raises(KindctlError, match="failed to update kubeconfig"):
        delete_cluster(logger, ClusterContext("dev", provider), str(path))
    assert provider.deleted == [nodes]
