"""
Data Transfer - 一次性发送的数据传输端点

功能: 最简单的传输端点对，用于在拓扑上驱动流量

主要类:
- DataSrc: 发送端，流开始时一次性发出全部数据包，收齐确认后完成
- DataSink: 接收端，每收到一个数据包沿反向路由返回一个确认包

不做重传和拥塞控制：丢失数据包的流在仿真时间内不会完成。
发送速率由路由上的第一跳（端主机发送队列）决定。
"""

import math
from typing import Callable, Optional

from ..core.eventlist import EventList, EventSource
from ..core.logger.core import Logged
from ..core.logger.traffic import FlowEventLogger, TrafficLogger
from ..core.network import Packet, PacketFlow, PacketSink
from ..core.route import Route
from ..packets.data_packet import DataAck, DataPacket


class DataSrc(EventSource, PacketSink):
    """
    数据发送端

    connect() 之后在 starttime 开始发送 ceil(flow_size / mss) 个数据包，
    所有字节被确认后调用完成回调 callback(src)。
    """

    def __init__(self, eventlist: EventList, flow_size: int,
                 logger: Optional[FlowEventLogger] = None,
                 pktlogger: Optional[TrafficLogger] = None):
        EventSource.__init__(self, eventlist, "datasrc")
        PacketSink.__init__(self)

        if flow_size <= 0:
            raise ValueError(f"Flow size must be positive, got {flow_size}")

        self._logger = logger
        self._flow = PacketFlow(pktlogger)
        self._flow_size = flow_size
        self._mss = Packet.data_packet_size()

        self._route: Optional[Route] = None
        self._sink: Optional['DataSink'] = None
        self._on_complete: Optional[Callable[['DataSrc'], None]] = None

        self._packets_sent = 0
        self._bytes_acked = 0
        self._start_time: Optional[int] = None
        self._finish_time: Optional[int] = None

        self._nodename = "datasrc"

    def connect(self, route_out: Route, route_back: Route, sink: 'DataSink', starttime: int) -> None:
        """
        绑定路由和接收端，并调度流在绝对时间 starttime 开始

        Args:
            route_out: 数据包使用的前向路由
            route_back: 确认包使用的反向路由
            sink: 接收端
            starttime: 开始时间（皮秒）
        """
        assert route_out is not None and route_back is not None
        self._route = route_out
        self._sink = sink
        sink.connect(self, route_back)
        self.eventlist().source_is_pending(self, starttime)

    def set_completion_callback(self, callback: Optional[Callable[['DataSrc'], None]]) -> None:
        self._on_complete = callback

    def do_next_event(self) -> None:
        self.startflow()

    def startflow(self) -> None:
        now = self.eventlist().now()
        self._start_time = now
        if self._logger:
            self._logger.logEvent(self._flow, self, FlowEventLogger.FlowEvent.START,
                                  self._flow_size, self.total_packets())

        seqno = 1
        remaining = self._flow_size
        while remaining > 0:
            size = min(self._mss, remaining)
            pkt = DataPacket.newpkt(self._flow, self._route, seqno, size, now)
            if self._flow.log_me():
                self._flow.logTraffic(pkt, self, TrafficLogger.TrafficEvent.PKT_CREATESEND)
            self._packets_sent += 1
            seqno += size
            remaining -= size
            pkt.sendOn()

    def receivePacket(self, pkt: Packet) -> None:
        if not isinstance(pkt, DataAck):
            raise TypeError(f"{self._nodename} expected a DataAck, got {type(pkt).__name__}")

        if self._flow.log_me():
            self._flow.logTraffic(pkt, self, TrafficLogger.TrafficEvent.PKT_RCVDESTROY)
        self._bytes_acked += pkt.acked_bytes()
        pkt.free()

        if self._finish_time is None and self._bytes_acked >= self._flow_size:
            self._finish_time = self.eventlist().now()
            if self._logger:
                self._logger.logEvent(self._flow, self, FlowEventLogger.FlowEvent.FINISH,
                                      self._flow_size, self._packets_sent)
            if self._on_complete is not None:
                self._on_complete(self)

    def total_packets(self) -> int:
        return math.ceil(self._flow_size / self._mss)

    def flow(self) -> PacketFlow:
        return self._flow

    def flow_size(self) -> int:
        return self._flow_size

    def packets_sent(self) -> int:
        return self._packets_sent

    def bytes_acked(self) -> int:
        return self._bytes_acked

    def is_complete(self) -> bool:
        return self._finish_time is not None

    def start_time(self) -> Optional[int]:
        return self._start_time

    def finish_time(self) -> Optional[int]:
        return self._finish_time

    def sink(self) -> Optional['DataSink']:
        return self._sink

    def nodename(self) -> str:
        return self._nodename

    def setName(self, name: str) -> None:
        EventSource.setName(self, name)
        self._nodename = name


class DataSink(Logged, PacketSink):
    """
    数据接收端

    每收到一个数据包，沿反向路由返回一个 DataAck，确认该包的全部字节
    """

    def __init__(self):
        Logged.__init__(self, "datasink")
        PacketSink.__init__(self)
        self._src: Optional[DataSrc] = None
        self._route: Optional[Route] = None
        self._packets_received = 0
        self._bytes_received = 0
        self._nodename = "datasink"

    def connect(self, src: DataSrc, route: Route) -> None:
        self._src = src
        self._route = route

    def receivePacket(self, pkt: Packet) -> None:
        if not isinstance(pkt, DataPacket):
            raise TypeError(f"{self._nodename} expected a DataPacket, got {type(pkt).__name__}")
        assert self._route is not None, "DataSink is not connected"

        if pkt.flow().log_me():
            pkt.flow().logTraffic(pkt, self, TrafficLogger.TrafficEvent.PKT_RCVDESTROY)

        self._packets_received += 1
        self._bytes_received += pkt.size()

        ack = DataAck.newpkt(pkt.flow(), self._route, pkt.id(), pkt.size(), pkt.ts())
        pkt.free()
        if ack.flow().log_me():
            ack.flow().logTraffic(ack, self, TrafficLogger.TrafficEvent.PKT_CREATESEND)
        ack.sendOn()

    def packets_received(self) -> int:
        return self._packets_received

    def bytes_received(self) -> int:
        return self._bytes_received

    def nodename(self) -> str:
        return self._nodename

    def setName(self, name: str) -> None:
        Logged.setName(self, name)
        self._nodename = name
