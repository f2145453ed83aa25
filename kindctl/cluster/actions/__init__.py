"""Bootstrap actions run against provisioned cluster nodes.

Each action implements a single ``execute(ctx)`` method. Actions run one at a
time, in order, against a single shared ``ActionContext``.
"""
import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from ...apis.cluster import Cluster
from ...status import Status
from ..context import ClusterContext
from ..nodes import Node


class ActionContext:
    """State shared by every action during one cluster creation."""

    def __init__(self, logger: logging.Logger, config: Cluster, cluster: ClusterContext, status: Status):
        self.logger = logger
        self.config = config
        self.cluster = cluster
        self.status = status
        self._nodes: Optional[List[Node]] = None

    def nodes(self) -> List[Node]:
        """Return the cluster's nodes, listing them from the provider once."""
        if self._nodes is None:
            self._nodes = self.cluster.list_nodes()
        return list(self._nodes)


class Action(ABC):
    """A single bootstrap step."""

    @abstractmethod
    def execute(self, ctx: ActionContext) -> None:
        """Run the action.

        Raises:
            Exception: Any failure; the caller stops the pipeline on the first one
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


__all__ = [
    'Action',
    'ActionContext',
]
