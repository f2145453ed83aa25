"""Exporting and removing cluster credentials in kubeconfig files."""
import logging
import os
from pathlib import Path
from typing import Any, Dict, List

import yaml

from ..errors import ExportError, KindctlError
from .constants import ADMIN_KUBECONFIG_PATH
from .context import ClusterContext
from .nodes import bootstrap_control_plane_node

logger = logging.getLogger("kindctl.cluster.kubeconfig")

CONTEXT_PREFIX = "kindctl-"

_SECTIONS = ("clusters", "users", "contexts")


def context_for_cluster(name: str) -> str:
    """Return the kubeconfig context (and cluster/user entry) name for a cluster."""
    return f"{CONTEXT_PREFIX}{name}"


def default_path() -> str:
    """Return the first entry of $KUBECONFIG, or ~/.kube/config."""
    for entry in os.environ.get("KUBECONFIG", "").split(os.pathsep):
        if entry:
            return entry
    return str(Path.home() / ".kube" / "config")


def resolve_path(explicit_path: str) -> str:
    return os.path.expanduser(explicit_path) if explicit_path else default_path()


def export(ctx: ClusterContext, explicit_path: str) -> None:
    """Merge the cluster's admin credentials into a kubeconfig file.

    The entries are named ``kindctl-<cluster>`` and become the current context.

    Raises:
        ExportError: If the credentials cannot be read or the file written
    """
    path = resolve_path(explicit_path)
    try:
        node = bootstrap_control_plane_node(ctx.list_nodes())
        raw = yaml.safe_load(node.run("cat", ADMIN_KUBECONFIG_PATH))
        merge(path, kindctl_kubeconfig(raw, ctx.name))
    except (KindctlError, OSError, yaml.YAMLError) as e:
        if isinstance(e, ExportError):
            raise
        raise ExportError(f"failed to export kubeconfig to {path}: {e}") from e
    logger.debug(f"🔐 Exported kubeconfig for {ctx.name} to {path}")


def kindctl_kubeconfig(raw: Any, cluster_name: str) -> Dict[str, Any]:
    """Rename the kubeadm admin kubeconfig entries after the cluster."""
    try:
        cluster = dict(raw["clusters"][0]["cluster"])
        user = dict(raw["users"][0]["user"])
    except (KeyError, IndexError, TypeError) as e:
        raise ExportError(f"invalid admin kubeconfig on control plane node: {e}") from e

    name = context_for_cluster(cluster_name)
    return {
        "apiVersion": "v1",
        "kind": "Config",
        "preferences": {},
        "clusters": [{"name": name, "cluster": cluster}],
        "users": [{"name": name, "user": user}],
        "contexts": [{"name": name, "context": {"cluster": name, "user": name}}],
        "current-context": name,
    }


def merge(path: str, kubeconfig: Dict[str, Any]) -> None:
    """Merge ``kubeconfig`` into the file at ``path``, replacing entries by name."""
    existing = _read(path)
    for section in _SECTIONS:
        existing[section] = _merge_entries(existing.get(section) or [], kubeconfig.get(section) or [])
    existing.setdefault("apiVersion", "v1")
    existing.setdefault("kind", "Config")
    existing.setdefault("preferences", {})
    existing["current-context"] = kubeconfig.get("current-context", "")
    _write(path, existing)


def remove(name: str, explicit_path: str) -> None:
    """Remove a cluster's entries from the kubeconfig file, if present."""
    path = resolve_path(explicit_path)
    if not os.path.exists(path):
        return

    entry_name = context_for_cluster(name)
    existing = _read(path)
    changed = False
    for section in _SECTIONS:
        entries = existing.get(section) or []
        kept = [e for e in entries if e.get("name") != entry_name]
        if len(kept) != len(entries):
            existing[section] = kept
            changed = True
    if existing.get("current-context") == entry_name:
        existing["current-context"] = ""
        changed = True

    if changed:
        _write(path, existing)


def _merge_entries(existing: List[Dict[str, Any]], new: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    names = {e.get("name") for e in new}
    return [e for e in existing if e.get("name") not in names] + list(new)


def _read(path: str) -> Dict[str, Any]:
    if not os.path.exists(path):
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ExportError(f"{path} is not a valid kubeconfig file")
    return data


def _write(path: str, data: Dict[str, Any]) -> None:
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
    os.chmod(path, 0o600)
