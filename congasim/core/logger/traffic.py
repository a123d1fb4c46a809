"""
Traffic Logger Classes - 流量日志类

功能: 记录数据包在网络中经过各个元素的事件，以及流的开始/结束事件

主要类:
- TrafficLogger: 流量日志记录器基类
- FlowEventLogger: 流事件日志记录器基类
- TrafficLoggerSimple: 简单流量日志记录器
- FlowEventLoggerSimple: 简单流事件日志记录器
"""

from abc import ABC, abstractmethod
from enum import IntEnum

from .base import Logger
from .core import Logged


class TrafficLogger(Logger, ABC):
    """
    流量日志记录器

    队列、管道和端点在数据包到达、离开、被丢弃时调用 logTraffic()
    """

    class TrafficEvent(IntEnum):
        PKT_ARRIVE = 0
        PKT_DEPART = 1
        PKT_CREATESEND = 2
        PKT_DROP = 3
        PKT_RCVDESTROY = 4
        PKT_CREATE = 5
        PKT_SEND = 6

    @abstractmethod
    def logTraffic(self, pkt, location: Logged, ev: 'TrafficEvent') -> None:
        pass


class FlowEventLogger(Logger, ABC):
    """流事件日志记录器"""

    class FlowEvent(IntEnum):
        START = 0
        FINISH = 1

    @abstractmethod
    def logEvent(self, flow, location: Logged, ev: 'FlowEvent', bytes_val: int, pkts: int) -> None:
        pass


class FlowEventLoggerSimple(FlowEventLogger):
    """简单流事件日志记录器 - 每个事件写一条记录"""

    def logEvent(self, flow, location: Logged, ev: FlowEventLogger.FlowEvent, bytes_val: int, pkts: int) -> None:
        if self._logfile:
            self._logfile.writeRecord(Logger.EventType.FLOW_EVENT,
                                      location.get_id(),
                                      ev,
                                      flow.flow_id(),
                                      bytes_val,
                                      pkts)


class TrafficLoggerSimple(TrafficLogger):
    """简单流量日志记录器 - 每个事件写一条记录"""

    def logTraffic(self, pkt, location: Logged, ev: TrafficLogger.TrafficEvent) -> None:
        if self._logfile:
            self._logfile.writeRecord(Logger.EventType.TRAFFIC_EVENT,
                                      location.get_id(),
                                      ev,
                                      pkt.flow_id(),
                                      pkt.id(),
                                      0)
