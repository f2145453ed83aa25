"""The handle identifying one named cluster and the provider backing it."""
from typing import List

from .nodes import Node
from .providers.base import Provider


class ClusterContext:
    """Binds a cluster name to the provider that manages its nodes."""

    def __init__(self, name: str, provider: Provider):
        self.name = name
        self.provider = provider

    def __repr__(self) -> str:
        return f"ClusterContext(name={self.name!r}, provider={type(self.provider).__name__})"

    def list_nodes(self) -> List[Node]:
        return self.provider.list_nodes(self.name)
