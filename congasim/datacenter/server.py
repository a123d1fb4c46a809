"""
Server class for the leaf/core fabric
"""

import logging
from typing import Dict, Optional

from ..core.logger.core import Logged
from ..core.network import FlowId, Packet, PacketSink


class Server(Logged, PacketSink):
    """
    A server attached to exactly one leaf switch.

    The server owns its uplink (server -> leaf, the send queue for every flow
    it originates) and its downlink (leaf -> server). It is also the last
    element of every route that ends at it: arriving packets are handed to
    the transport endpoint bound to their flow id.
    """

    def __init__(self, server_id: int, leaf_index: int, index_in_leaf: int):
        Logged.__init__(self, f"Server_{leaf_index}_{index_in_leaf}")
        PacketSink.__init__(self)
        self._server_id = server_id
        self._leaf_index = leaf_index
        self._index_in_leaf = index_in_leaf
        self._nodename = f"Server_{leaf_index}_{index_in_leaf}"

        self.uplink = None
        self.downlink = None

        self._bindings: Dict[FlowId, PacketSink] = {}
        self._packets_received = 0
        self._unbound_drops = 0

    @property
    def server_id(self) -> int:
        return self._server_id

    @property
    def leaf_index(self) -> int:
        return self._leaf_index

    @property
    def index_in_leaf(self) -> int:
        return self._index_in_leaf

    def bind(self, flow_id: FlowId, sink: PacketSink) -> None:
        """
        Deliver packets of flow_id to sink

        Raises:
            ValueError: If the flow is already bound on this server
        """
        if flow_id in self._bindings:
            raise ValueError(f"Flow {flow_id} already bound on {self._nodename}")
        self._bindings[flow_id] = sink

    def unbind(self, flow_id: FlowId) -> Optional[PacketSink]:
        return self._bindings.pop(flow_id, None)

    def bound_sink(self, flow_id: FlowId) -> Optional[PacketSink]:
        return self._bindings.get(flow_id)

    def bound_flows(self) -> int:
        return len(self._bindings)

    def receivePacket(self, pkt: Packet) -> None:
        self._packets_received += 1
        sink = self._bindings.get(pkt.flow_id())
        if sink is None:
            logging.warning(f"{self._nodename}: no endpoint for flow {pkt.flow_id()}, dropping packet")
            self._unbound_drops += 1
            pkt.free()
            return
        sink.receivePacket(pkt)

    def packets_received(self) -> int:
        return self._packets_received

    def unbound_drops(self) -> int:
        return self._unbound_drops

    def nodename(self) -> str:
        return self._nodename

    def __repr__(self) -> str:
        return f"Server(id={self._server_id}, leaf={self._leaf_index}, flows={len(self._bindings)})"
