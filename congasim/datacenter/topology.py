"""
Base topology class for data center networks
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..core.logger.logfile import Logfile


class Topology(ABC):
    """
    Abstract base class for network topologies

    Servers are numbered 0..no_of_nodes()-1. Subclasses build every queue,
    pipe and switch at construction time and never change them afterwards.
    """

    def __init__(self):
        self._no_of_nodes = 0

    def no_of_nodes(self) -> int:
        """
        Get total number of servers in the topology

        Returns:
            Number of servers
        """
        return self._no_of_nodes

    @abstractmethod
    def get_neighbours(self, src: int) -> Optional[List[int]]:
        """
        Get servers directly reachable from a server without crossing the core

        Args:
            src: Server ID

        Returns:
            List of server IDs, or None if not applicable
        """

    @abstractmethod
    def add_switch_loggers(self, logfile: Logfile, sample_period: int) -> None:
        """
        Add sampling loggers to every switch

        Args:
            logfile: Logfile instance
            sample_period: Sampling period in picoseconds
        """
