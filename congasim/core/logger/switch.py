"""
Switch Logger Classes - 交换机日志类

功能: 记录交换机上的数据包到达、转发、丢弃事件以及周期性计数
"""

from abc import ABC, abstractmethod
from enum import IntEnum
from typing import List, Optional

from .base import Logger
from ..eventlist import EventSource


class SwitchLogger(Logger, ABC):
    """交换机日志记录器基类"""

    class SwitchEvent(IntEnum):
        PKT_ARRIVE = 0
        PKT_FORWARD = 1
        PKT_DROP = 2

    class SwitchRecord(IntEnum):
        PKT_COUNT = 0
        BYTE_COUNT = 1

    @abstractmethod
    def log_switch(self, switch, ev: 'SwitchEvent', pkt=None) -> None:
        pass


class SwitchLoggerSimple(SwitchLogger):
    """每个交换机事件写一条记录"""

    def log_switch(self, switch, ev: SwitchLogger.SwitchEvent, pkt=None) -> None:
        if self._logfile:
            self._logfile.writeRecord(Logger.EventType.SWITCH_EVENT,
                                      switch.get_id(),
                                      ev,
                                      float(pkt.size() if pkt else 0),
                                      pkt.flow_id() if pkt else 0,
                                      pkt.id() if pkt else 0)


class SwitchLoggerSampling(EventSource, SwitchLogger):
    """
    采样交换机日志记录器

    在每个采样周期写出该周期内的到达/转发/丢弃数据包数，以及字节数和吞吐率(bps)，
    然后清零计数。
    """

    def __init__(self, period: int, eventlist, switch=None):
        EventSource.__init__(self, eventlist, "SwitchLoggerSampling")
        SwitchLogger.__init__(self)

        self._period = period
        self._switch = switch
        self._pkt_count = 0
        self._byte_count = 0
        self._drop_count = 0
        self._forward_count = 0
        self._last_sample_time = 0

        eventlist.source_is_pending(self, period)

    def log_switch(self, switch, ev: SwitchLogger.SwitchEvent, pkt=None) -> None:
        if self._switch is None:
            self._switch = switch

        if ev == SwitchLogger.SwitchEvent.PKT_ARRIVE:
            self._pkt_count += 1
            self._byte_count += pkt.size() if pkt else 0
        elif ev == SwitchLogger.SwitchEvent.PKT_FORWARD:
            self._forward_count += 1
        elif ev == SwitchLogger.SwitchEvent.PKT_DROP:
            self._drop_count += 1

    def do_next_event(self) -> None:
        now = self.eventlist().now()
        self.eventlist().source_is_pending(self, now + self._period)

        if self._switch is None or not self._logfile:
            return

        interval = now - self._last_sample_time
        throughput = self._byte_count * 8.0 * 1e12 / interval if interval > 0 else 0.0

        self._logfile.writeRecord(Logger.EventType.SWITCH_RECORD,
                                  self._switch.get_id(),
                                  SwitchLogger.SwitchRecord.PKT_COUNT,
                                  float(self._pkt_count),
                                  float(self._forward_count),
                                  float(self._drop_count))
        self._logfile.writeRecord(Logger.EventType.SWITCH_RECORD,
                                  self._switch.get_id(),
                                  SwitchLogger.SwitchRecord.BYTE_COUNT,
                                  float(self._byte_count),
                                  throughput,
                                  0.0)

        self._pkt_count = 0
        self._byte_count = 0
        self._drop_count = 0
        self._forward_count = 0
        self._last_sample_time = now


class SwitchLoggerFactory:
    """交换机日志记录器工厂"""

    class SwitchLoggerType(IntEnum):
        LOGGER_SIMPLE = 0
        LOGGER_SAMPLING = 1

    def __init__(self, logfile, logtype: 'SwitchLoggerType', eventlist):
        self._logfile = logfile
        self._logger_type = logtype
        self._eventlist = eventlist
        self._sample_period = 1_000_000_000  # 1ms
        self._loggers: List[SwitchLogger] = []

    def set_sample_period(self, sample_period: int) -> None:
        self._sample_period = sample_period

    def create_switch_logger(self, switch=None) -> Optional[SwitchLogger]:
        if self._logger_type == self.SwitchLoggerType.LOGGER_SIMPLE:
            logger = SwitchLoggerSimple()
        elif self._logger_type == self.SwitchLoggerType.LOGGER_SAMPLING:
            logger = SwitchLoggerSampling(self._sample_period, self._eventlist, switch)
        else:
            return None

        if self._logfile:
            self._logfile.addLogger(logger)
        self._loggers.append(logger)
        return logger
