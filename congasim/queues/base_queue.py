"""
BaseQueue - Base Queue Implementation

功能: 限速、有界缓冲的输出队列

主要类:
- BaseQueue: 队列基类，提供服务时间计算、利用率统计、命名与交换机关联
- Queue: 先进先出队列，缓冲区满时丢弃新到达的数据包
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..core.circular_buffer import CircularBuffer
from ..core.config import microseconds_to_picoseconds
from ..core.eventlist import EventList, EventSource
from ..core.logger.queue import QueueLogger
from ..core.logger.traffic import TrafficLogger
from ..core.network import Packet, PacketSink


class BaseQueue(EventSource, PacketSink, ABC):
    """
    队列基类

    以 bitrate (bps) 的速率发送数据包，一个字节的服务时间为 _ps_per_byte 皮秒。
    队列可以关联到一个交换机（setSwitch），到达、转发和丢弃事件会通知该交换机。
    """

    def __init__(self, bitrate: int, eventlist, logger: Optional[QueueLogger] = None):
        EventSource.__init__(self, eventlist, "Queue")
        PacketSink.__init__(self)

        if bitrate <= 0:
            raise ValueError(f"Queue bitrate must be positive, got {bitrate}")

        self._logger = logger
        self._bitrate = bitrate
        self._switch = None
        self._ps_per_byte = int((10**12 * 8) / bitrate)

        # 利用率统计窗口
        self._window = microseconds_to_picoseconds(30)
        self._busy = 0
        self._busystart: CircularBuffer[int] = CircularBuffer()
        self._busyend: CircularBuffer[int] = CircularBuffer()

        self._nodename = ""

    def setName(self, name: str) -> None:
        EventSource.setName(self, name)
        self._nodename = name

    def setSwitch(self, switch) -> None:
        assert self._switch is None, "Queue already belongs to a switch"
        self._switch = switch

    def getSwitch(self):
        return self._switch

    def nodename(self) -> str:
        return self._nodename

    @abstractmethod
    def queuesize(self) -> int:
        """当前排队字节数"""

    @abstractmethod
    def maxsize(self) -> int:
        """缓冲区容量（字节）"""

    def drain_time(self, pkt: Packet) -> int:
        """发送一个数据包所需的时间（皮秒）"""
        return pkt.size() * self._ps_per_byte

    def service_capacity(self, t: int) -> int:
        """在 t 皮秒内能够发送的字节数"""
        return int(t / 10**12 * self._bitrate / 8)

    def log_packet_send(self, duration: int) -> None:
        now = self._eventlist.now()
        self._busystart.push(now - duration)
        self._busyend.push(now)
        self._busy += duration

    def average_utilization(self) -> int:
        """
        最近一个统计窗口内的平均利用率

        Returns:
            利用率百分比 (0-100)
        """
        now = self._eventlist.now()
        while not self._busyend.empty() and self._busyend.next_to_pop() < now - self._window:
            start = self._busystart.pop()
            end = self._busyend.pop()
            self._busy -= (end - start)
        assert self._busy >= 0
        return min(100, (self._busy * 100) // self._window)

    @property
    def bitrate(self) -> int:
        return self._bitrate

    def _notify_switch(self, event: str, pkt: Packet) -> None:
        if self._switch is not None:
            self._switch.queue_event(self, event, pkt)

    def __str__(self) -> str:
        return self._nodename

    def __repr__(self) -> str:
        return f"{type(self).__name__}(nodename={self._nodename}, bitrate={self._bitrate})"


class Queue(BaseQueue):
    """
    先进先出队列

    当前排队字节数加上新数据包大小超过 maxsize 时丢弃新数据包（尾丢弃）。
    """

    def __init__(self, bitrate: int, maxsize: int, eventlist: EventList,
                 logger: Optional[QueueLogger] = None):
        super().__init__(bitrate, eventlist, logger)
        if maxsize <= 0:
            raise ValueError(f"Queue buffer must be positive, got {maxsize}")

        self._maxsize = maxsize
        self._num_drops = 0
        self._queuesize = 0
        self._enqueued: CircularBuffer[Packet] = CircularBuffer()

        self._nodename = f"queue({bitrate // 1_000_000}Mb/s,{maxsize}bytes)"

    def receivePacket(self, pkt: Packet) -> None:
        self._notify_switch("arrive", pkt)

        if self._queuesize + pkt.size() > self._maxsize:
            self._drop(pkt)
            return

        if pkt.flow().log_me():
            pkt.flow().logTraffic(pkt, self, TrafficLogger.TrafficEvent.PKT_ARRIVE)

        queue_was_empty = self._enqueue(pkt)

        if self._logger:
            self._logger.logQueue(self, QueueLogger.QueueEvent.PKT_ENQUEUE, pkt)

        if queue_was_empty:
            self.beginService()

    def _drop(self, pkt: Packet) -> None:
        if self._logger:
            self._logger.logQueue(self, QueueLogger.QueueEvent.PKT_DROP, pkt)
        if pkt.flow().log_me():
            pkt.flow().logTraffic(pkt, self, TrafficLogger.TrafficEvent.PKT_DROP)
        self._notify_switch("drop", pkt)
        self._num_drops += 1
        pkt.free()

    def _enqueue(self, pkt: Packet) -> bool:
        """加入数据包，返回加入前队列是否为空"""
        was_empty = self._queuesize == 0
        self._enqueued.push(pkt)
        self._queuesize += pkt.size()
        return was_empty

    def _dequeue(self) -> Packet:
        pkt = self._enqueued.pop()
        self._queuesize -= pkt.size()
        return pkt

    def _head(self) -> Packet:
        return self._enqueued.next_to_pop()

    def beginService(self) -> None:
        """为队首数据包调度发送完成事件"""
        assert self._queuesize > 0
        self.eventlist().source_is_pending_rel(self, self.drain_time(self._head()))

    def do_next_event(self) -> None:
        self.completeService()

    def completeService(self) -> None:
        assert self._queuesize > 0
        pkt = self._dequeue()

        if pkt.flow().log_me():
            pkt.flow().logTraffic(pkt, self, TrafficLogger.TrafficEvent.PKT_DEPART)
        if self._logger:
            self._logger.logQueue(self, QueueLogger.QueueEvent.PKT_SERVICE, pkt)
        self.log_packet_send(self.drain_time(pkt))
        self._notify_switch("forward", pkt)

        pkt.sendOn()

        if self._queuesize > 0:
            self.beginService()

    def queuesize(self) -> int:
        return self._queuesize

    def maxsize(self) -> int:
        return self._maxsize

    def num_drops(self) -> int:
        return self._num_drops
