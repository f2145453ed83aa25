"""Cluster lifecycle: create, delete and export credentials."""
from .context import ClusterContext
from .create import ClusterOptions, create_cluster
from .delete import delete_cluster

__all__ = [
    'ClusterContext',
    'ClusterOptions',
    'create_cluster',
    'delete_cluster',
]
