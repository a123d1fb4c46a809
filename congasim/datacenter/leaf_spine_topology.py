"""
Two-tier leaf/core topology for the CONGA testbed

Every leaf switch connects to every core switch with one link in each
direction, and every server connects to its leaf with one link in each
direction. A link is a FairQueue followed by a Pipe.

Server IDs are leaf_index * servers_per_leaf + index_in_leaf.
"""

import logging
from typing import List, Optional, Tuple

from ..core.config import microseconds_to_picoseconds
from ..core.eventlist import EventList
from ..core.logger.logfile import Logfile
from ..core.logger.queue import QueueLoggerFactory
from ..core.pipe import Pipe
from ..queues.base_queue import BaseQueue
from ..queues.fair_queue import FairQueue
from . import constants
from .constants import SwitchTier
from .errors import ConfigurationError, InvariantViolation
from .fabric_switch import FabricSwitch, Link
from .server import Server
from .topology import Topology


class LeafSpineTopology(Topology):
    """
    Leaf/core fabric

    Args:
        core_count: Number of core switches
        leaf_count: Number of leaf switches
        servers_per_leaf: Servers attached to each leaf
        leaf_link_rate: Rate of leaf->core, server->leaf and leaf->server links (bps)
        core_link_rate: Rate of core->leaf links (bps)
        leaf_buffer_bytes: Buffer of leaf egress queues
        core_buffer_bytes: Buffer of core egress queues
        endpoint_buffer_bytes: Buffer of each server's send queue
        hop_delay: Propagation delay of every pipe in picoseconds
        eventlist: Event list
        logger_factory: Optional factory creating a logger for every queue

    Raises:
        ConfigurationError: If any count, rate, buffer or the delay is not positive
    """

    def __init__(self,
                 core_count: int,
                 leaf_count: int,
                 servers_per_leaf: int,
                 leaf_link_rate: int,
                 core_link_rate: int,
                 leaf_buffer_bytes: int,
                 core_buffer_bytes: int,
                 endpoint_buffer_bytes: int,
                 hop_delay: int,
                 eventlist: EventList,
                 logger_factory: Optional[QueueLoggerFactory] = None):
        super().__init__()

        for name, value in (("core_count", core_count),
                            ("leaf_count", leaf_count),
                            ("servers_per_leaf", servers_per_leaf),
                            ("leaf_link_rate", leaf_link_rate),
                            ("core_link_rate", core_link_rate),
                            ("leaf_buffer_bytes", leaf_buffer_bytes),
                            ("core_buffer_bytes", core_buffer_bytes),
                            ("endpoint_buffer_bytes", endpoint_buffer_bytes),
                            ("hop_delay", hop_delay)):
            if value <= 0:
                raise ConfigurationError(f"{name} must be positive, got {value}")

        self._core_count = core_count
        self._leaf_count = leaf_count
        self._servers_per_leaf = servers_per_leaf
        self._leaf_link_rate = leaf_link_rate
        self._core_link_rate = core_link_rate
        self._leaf_buffer = leaf_buffer_bytes
        self._core_buffer = core_buffer_bytes
        self._endpoint_buffer = endpoint_buffer_bytes
        self._hop_delay = hop_delay
        self._eventlist = eventlist
        self._logger_factory = logger_factory
        self._no_of_nodes = leaf_count * servers_per_leaf

        self._leaves: List[FabricSwitch] = []
        self._cores: List[FabricSwitch] = []
        self._servers: List[Server] = []
        # [leaf][core] and [core][leaf]
        self._leaf_uplinks: List[List[Link]] = []
        self._core_downlinks: List[List[Link]] = []

        self.init_network()

    def init_network(self) -> None:
        """Create switches, servers and all links"""
        for i in range(self._leaf_count):
            self._leaves.append(FabricSwitch(f"Leaf_{i}", SwitchTier.LEAF, i, self._eventlist))
        for j in range(self._core_count):
            self._cores.append(FabricSwitch(f"Core_{j}", SwitchTier.CORE, j, self._eventlist))

        self._core_downlinks = [[None] * self._leaf_count for _ in range(self._core_count)]
        for i, leaf in enumerate(self._leaves):
            uplinks = []
            for j, core in enumerate(self._cores):
                # Leaf to core
                up = self._make_link(self._leaf_link_rate, self._leaf_buffer,
                                     f"LeafToCore_{i}_{j}", f"LeafPipe_{i}_{j}", leaf, core)
                leaf.add_link(up)
                uplinks.append(up)

                # Core to leaf
                down = self._make_link(self._core_link_rate, self._core_buffer,
                                       f"CoreToLeaf_{j}_{i}", f"CorePipe_{j}_{i}", core, leaf)
                core.add_link(down)
                self._core_downlinks[j][i] = down
            self._leaf_uplinks.append(uplinks)

        for l, leaf in enumerate(self._leaves):
            for s in range(self._servers_per_leaf):
                server = Server(l * self._servers_per_leaf + s, l, s)
                server.uplink = self._make_link(self._leaf_link_rate, self._endpoint_buffer,
                                                f"SrcQueue_{l}_{s}", f"SrvPipe_{l}_{s}", server, leaf)
                server.downlink = self._make_link(self._leaf_link_rate, self._leaf_buffer,
                                                  f"LeafToSrv_{l}_{s}", f"LeafSrvPipe_{l}_{s}", leaf, server)
                leaf.add_link(server.downlink)
                self._servers.append(server)

        logging.info(f"Built leaf/core fabric: {self._leaf_count} leaves, {self._core_count} cores, "
                     f"{self._no_of_nodes} servers, {self.link_count()} links")

    def _make_link(self, rate: int, buffer_bytes: int, queue_name: str, pipe_name: str, src, dst) -> Link:
        queue_logger = None
        if self._logger_factory:
            queue_logger = self._logger_factory.createQueueLogger()

        queue = self.alloc_queue(queue_logger, rate, buffer_bytes)
        queue.setName(queue_name)
        pipe = Pipe(self._hop_delay, self._eventlist)
        pipe.setName(pipe_name)
        return Link(queue, pipe, src, dst)

    def alloc_queue(self, queue_logger, speed: int, queuesize: int) -> BaseQueue:
        """Allocate an egress queue"""
        return FairQueue(speed, queuesize, self._eventlist, queue_logger)

    def _check_leaf(self, leaf: int) -> None:
        if not 0 <= leaf < self._leaf_count:
            raise InvariantViolation(f"Leaf index {leaf} out of range [0, {self._leaf_count})")

    def _check_core(self, core: int) -> None:
        if not 0 <= core < self._core_count:
            raise InvariantViolation(f"Core index {core} out of range [0, {self._core_count})")

    def _check_server(self, server_id: int) -> None:
        if not 0 <= server_id < self._no_of_nodes:
            raise InvariantViolation(f"Server id {server_id} out of range [0, {self._no_of_nodes})")

    # Accessors

    @property
    def core_count(self) -> int:
        return self._core_count

    @property
    def leaf_count(self) -> int:
        return self._leaf_count

    @property
    def servers_per_leaf(self) -> int:
        return self._servers_per_leaf

    @property
    def hop_delay(self) -> int:
        return self._hop_delay

    @property
    def leaf_link_rate(self) -> int:
        return self._leaf_link_rate

    @property
    def endpoint_buffer(self) -> int:
        return self._endpoint_buffer

    def leaf_switches(self) -> List[FabricSwitch]:
        return list(self._leaves)

    def core_switches(self) -> List[FabricSwitch]:
        return list(self._cores)

    def leaf_switch(self, leaf: int) -> FabricSwitch:
        self._check_leaf(leaf)
        return self._leaves[leaf]

    def core_switch(self, core: int) -> FabricSwitch:
        self._check_core(core)
        return self._cores[core]

    def servers(self) -> List[Server]:
        return list(self._servers)

    def server(self, server_id: int) -> Server:
        self._check_server(server_id)
        return self._servers[server_id]

    def leaf_of(self, server_id: int) -> int:
        self._check_server(server_id)
        return server_id // self._servers_per_leaf

    def leaf_uplink(self, leaf: int, core: int) -> Link:
        self._check_leaf(leaf)
        self._check_core(core)
        return self._leaf_uplinks[leaf][core]

    def core_downlink(self, core: int, leaf: int) -> Link:
        self._check_core(core)
        self._check_leaf(leaf)
        return self._core_downlinks[core][leaf]

    def leaf_core_link_pairs(self) -> List[Tuple[Link, Link]]:
        """(leaf->core, core->leaf) for every leaf/core pair"""
        return [(self._leaf_uplinks[i][j], self._core_downlinks[j][i])
                for i in range(self._leaf_count)
                for j in range(self._core_count)]

    def server_link_pairs(self) -> List[Tuple[Link, Link]]:
        """(server->leaf, leaf->server) for every server"""
        return [(server.uplink, server.downlink) for server in self._servers]

    def link_count(self) -> int:
        """Number of directional links"""
        return 2 * self._leaf_count * self._core_count + 2 * self._leaf_count * self._servers_per_leaf

    def get_neighbours(self, src: int) -> Optional[List[int]]:
        """Other servers on the same leaf"""
        leaf = self.leaf_of(src)
        first = leaf * self._servers_per_leaf
        return [s for s in range(first, first + self._servers_per_leaf) if s != src]

    def add_switch_loggers(self, logfile: Logfile, sample_period: int) -> None:
        for switch in self._leaves:
            switch.add_logger(logfile, sample_period)
        for switch in self._cores:
            switch.add_logger(logfile, sample_period)

    def __repr__(self) -> str:
        return (f"LeafSpineTopology(cores={self._core_count}, leaves={self._leaf_count}, "
                f"servers_per_leaf={self._servers_per_leaf})")


def build_fabric(core_count: int = constants.N_CORE,
                 leaf_count: int = constants.N_LEAF,
                 servers_per_leaf: int = constants.N_SERVER,
                 leaf_link_rate: int = constants.LEAF_SPEED,
                 core_link_rate: int = constants.CORE_SPEED,
                 leaf_buffer_bytes: int = constants.LEAF_BUFFER,
                 core_buffer_bytes: int = constants.CORE_BUFFER,
                 endpoint_buffer_bytes: int = constants.ENDH_BUFFER,
                 hop_delay: Optional[int] = None,
                 eventlist: Optional[EventList] = None,
                 logger_factory: Optional[QueueLoggerFactory] = None) -> LeafSpineTopology:
    """
    Build a leaf/core fabric with the testbed defaults

    Args:
        hop_delay: Pipe delay in picoseconds; defaults to 10us
        eventlist: Event list; defaults to the global one

    Returns:
        The constructed topology
    """
    if hop_delay is None:
        hop_delay = microseconds_to_picoseconds(constants.HOP_DELAY_US)
    if eventlist is None:
        eventlist = EventList.get_the_event_list()
    return LeafSpineTopology(core_count, leaf_count, servers_per_leaf,
                             leaf_link_rate, core_link_rate,
                             leaf_buffer_bytes, core_buffer_bytes, endpoint_buffer_bytes,
                             hop_delay, eventlist, logger_factory)
