"""
Pipe - Network Pipe Component

功能: 网络管道，将每个进入的数据包延迟固定时间后交给路由上的下一跳。
管道不限速、不丢包，并保持数据包顺序。

主要类:
- Pipe: 网络管道类
- PktRecord: 在途数据包记录
"""

from dataclasses import dataclass
from typing import Optional

from .circular_buffer import CircularBuffer
from .eventlist import EventList, EventSource
from .logger.traffic import TrafficLogger
from .network import Packet, PacketSink


@dataclass
class PktRecord:
    """在途数据包及其离开管道的时间"""
    time: int
    pkt: Packet


class Pipe(EventSource, PacketSink):
    """
    网络管道

    数据包在 receivePacket() 时刻加上 delay 后离开管道。由于延迟固定，
    离开顺序与到达顺序一致，因此只需要为队首数据包调度一个事件。
    """

    def __init__(self, delay: int, eventlist: Optional[EventList] = None):
        if eventlist is None:
            eventlist = EventList.get_the_event_list()
        EventSource.__init__(self, eventlist, "pipe")
        PacketSink.__init__(self)

        self._delay: int = delay
        self._inflight: CircularBuffer[PktRecord] = CircularBuffer(16)
        self._nodename = f"pipe({delay // 1_000_000}us)"

    def receivePacket(self, pkt: Packet) -> None:
        if self._inflight.empty():
            # 管道中没有数据包，需要为此数据包调度事件
            self.eventlist().source_is_pending_rel(self, self._delay)
        self._inflight.push(PktRecord(self.eventlist().now() + self._delay, pkt))

    def do_next_event(self) -> None:
        if self._inflight.empty():
            return

        record = self._inflight.pop()
        pkt = record.pkt
        if pkt.flow().log_me():
            pkt.flow().logTraffic(pkt, self, TrafficLogger.TrafficEvent.PKT_DEPART)

        pkt.sendOn()

        if not self._inflight.empty():
            self.eventlist().source_is_pending(self, self._inflight.next_to_pop().time)

    def delay(self) -> int:
        return self._delay

    def inflight(self) -> int:
        """当前在管道中的数据包数"""
        return self._inflight.size()

    def nodename(self) -> str:
        return self._nodename

    def setName(self, name: str) -> None:
        EventSource.setName(self, name)
        self._nodename = name

    def __repr__(self) -> str:
        return f"Pipe(name={self._nodename}, delay={self._delay}, inflight={self._inflight.size()})"
