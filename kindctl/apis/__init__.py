"""Cluster configuration API types and their on-disk encoding."""
from .cluster import (
    Cluster,
    Mount,
    Networking,
    Node,
    set_defaults_cluster,
    validate_cluster,
)
from .encoding import load, parse

__all__ = [
    'Cluster',
    'Mount',
    'Networking',
    'Node',
    'set_defaults_cluster',
    'validate_cluster',
    'load',
    'parse',
]
