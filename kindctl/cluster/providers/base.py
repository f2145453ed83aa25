"""The interface every node infrastructure provider implements."""
from abc import ABC, abstractmethod
from typing import List

from ...apis.cluster import Cluster
from ...status import Status
from ..nodes import Node


class Provider(ABC):
    """Creates, lists and destroys the nodes backing a cluster."""

    @abstractmethod
    def provision(self, status: Status, name: str, cfg: Cluster) -> None:
        """Create one node per entry in ``cfg.nodes`` for cluster ``name``.

        Raises:
            ProvisioningError: If the nodes cannot be created
        """

    @abstractmethod
    def list_clusters(self) -> List[str]:
        """Return the names of all clusters with at least one node."""

    @abstractmethod
    def list_nodes(self, name: str) -> List[Node]:
        """Return the nodes belonging to cluster ``name``."""

    @abstractmethod
    def delete_nodes(self, nodes: List[Node]) -> None:
        """Destroy ``nodes``."""
