"""Loading cluster configuration documents from YAML."""
import logging
import sys

import yaml
from jsonschema import ValidationError as SchemaValidationError
from jsonschema import validate
from pydantic import ValidationError

from ..errors import ConfigError
from .cluster import NODE_ROLES, Cluster, set_defaults_cluster

logger = logging.getLogger("kindctl.apis.encoding")

CLUSTER_SCHEMA = {
    "type": "object",
    "properties": {
        "kind": {"type": "string", "enum": ["Cluster"]},
        "apiVersion": {"type": "string"},
        "name": {"type": "string"},
        "nodes": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "role": {"type": "string", "enum": list(NODE_ROLES)},
                    "image": {"type": "string"},
                    "labels": {"type": "object"},
                    "extraMounts": {"type": "array"},
                    "kubeadmConfigPatches": {"type": "array", "items": {"type": "string"}},
                },
            },
        },
        "networking": {"type": "object"},
        "featureGates": {"type": "object"},
        "runtimeConfig": {"type": "object"},
        "kubeadmConfigPatches": {"type": "array", "items": {"type": "string"}},
    },
}


def load(path: str) -> Cluster:
    """Load a cluster config from ``path`` with defaults applied.

    An empty path returns the default configuration: a single
    control-plane node. ``-`` reads the document from stdin.

    Raises:
        ConfigError: if the file cannot be read, decoded or validated
    """
    if not path:
        cfg = Cluster()
        set_defaults_cluster(cfg)
        return cfg

    try:
        if path == "-":
            raw = sys.stdin.read()
        else:
            with open(path, "r", encoding="utf-8") as f:
                raw = f.read()
    except OSError as e:
        raise ConfigError(f"error reading cluster config file {path}: {e}") from e

    logger.debug(f"📄 Loaded cluster config from {path}")
    return parse(raw)


def parse(raw: str) -> Cluster:
    """Decode a YAML cluster config document and apply defaults."""
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in cluster config: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("cluster config must be a YAML mapping")

    try:
        validate(instance=data, schema=CLUSTER_SCHEMA)
    except SchemaValidationError as ve:
        raise ConfigError(f"cluster config schema error: {ve.message}") from ve

    try:
        cfg = Cluster.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"cluster config decode error: {e}") from e

    set_defaults_cluster(cfg)
    return cfg
