"""
Queue Logger Classes - 队列日志类

功能: 记录队列相关的事件（入队、服务、丢弃）和周期性统计

主要类:
- QueueLogger: 队列日志记录器基类
- QueueLoggerSimple: 每个事件写一条记录
- QueueLoggerSampling: 周期性采样队列长度范围、空闲与丢弃
- QueueLoggerFactory: 为拓扑中的每个队列创建日志记录器
"""

from abc import ABC, abstractmethod
from enum import IntEnum
from typing import List, Optional

from .base import Logger
from ..eventlist import EventSource


class QueueLogger(Logger, ABC):
    """队列日志记录器"""

    class QueueEvent(IntEnum):
        PKT_ENQUEUE = 0
        PKT_DROP = 1
        PKT_SERVICE = 2

    class QueueRecord(IntEnum):
        CUM_TRAFFIC = 0

    class QueueApprox(IntEnum):
        QUEUE_RANGE = 0
        QUEUE_OVERFLOW = 1

    @abstractmethod
    def logQueue(self, queue, ev: 'QueueEvent', pkt) -> None:
        pass


class QueueLoggerSimple(QueueLogger):
    """简单队列日志记录器"""

    def logQueue(self, queue, ev: QueueLogger.QueueEvent, pkt) -> None:
        if self._logfile:
            self._logfile.writeRecord(Logger.EventType.QUEUE_EVENT,
                                      queue.get_id(),
                                      ev,
                                      float(queue.queuesize()),
                                      pkt.flow_id(),
                                      pkt.id())


class QueueLoggerSampling(EventSource, QueueLogger):
    """
    采样队列日志记录器

    每个采样周期写出:
    - QUEUE_RANGE: 最近、最小、最大队列长度
    - QUEUE_OVERFLOW: 空闲容量、丢弃字节、缓冲区大小
    - CUM_TRAFFIC: 累计到达、空闲、丢弃时间（秒）
    """

    def __init__(self, period: int, eventlist):
        EventSource.__init__(self, eventlist, "QueuelogSampling")
        QueueLogger.__init__(self)

        self._period = period
        self._queue = None
        self._lastlook = 0
        self._lastq = 0
        self._seenQueueInD = False
        self._minQueueInD = 0
        self._maxQueueInD = 0
        self._lastDroppedInD = 0
        self._lastIdledInD = 0
        self._numIdledInD = 0
        self._numDropsInD = 0
        self._cumidle = 0.0
        self._cumarr = 0.0
        self._cumdrop = 0.0

        eventlist.source_is_pending(self, period)

    def logQueue(self, queue, ev: QueueLogger.QueueEvent, pkt) -> None:
        if self._queue is None:
            self._queue = queue
        assert queue is self._queue, "QueueLoggerSampling observes a single queue"

        queue_size = queue.queuesize()
        self._lastq = queue_size
        now = self.eventlist().now()

        if not self._seenQueueInD:
            self._seenQueueInD = True
            self._minQueueInD = queue_size
            self._maxQueueInD = queue_size
            self._lastDroppedInD = 0
            self._lastIdledInD = 0
            self._numIdledInD = 0
            self._numDropsInD = 0
        else:
            self._minQueueInD = min(self._minQueueInD, queue_size)
            self._maxQueueInD = max(self._maxQueueInD, queue_size)

        dt_ps = now - self._lastlook
        self._lastlook = now

        if ev == QueueLogger.QueueEvent.PKT_ENQUEUE:
            self._cumarr += queue.drain_time(pkt) / 1e12
            if queue_size <= pkt.size():
                # 队列刚才是空闲的
                self._cumidle += dt_ps / 1e12
                self._lastIdledInD = queue.service_capacity(dt_ps)
                self._numIdledInD += 1
        elif ev == QueueLogger.QueueEvent.PKT_DROP:
            localdroptime = queue.drain_time(pkt) / 1e12
            self._cumarr += localdroptime
            self._cumdrop += localdroptime
            self._lastDroppedInD = pkt.size()
            self._numDropsInD += 1

    def do_next_event(self) -> None:
        now = self.eventlist().now()
        starttime = self._logfile.starttime() if self._logfile else 0
        self.eventlist().source_is_pending(self, max(now + self._period, starttime))

        if self._queue is None or not self._logfile:
            return

        queue_id = self._queue.get_id()
        queuebuff = self._queue.maxsize()

        if not self._seenQueueInD:
            self._logfile.writeRecord(Logger.EventType.QUEUE_APPROX, queue_id,
                                      QueueLogger.QueueApprox.QUEUE_RANGE,
                                      float(self._lastq), float(self._lastq), float(self._lastq))
            self._logfile.writeRecord(Logger.EventType.QUEUE_APPROX, queue_id,
                                      QueueLogger.QueueApprox.QUEUE_OVERFLOW,
                                      0.0, 0.0, float(queuebuff))
        else:
            self._logfile.writeRecord(Logger.EventType.QUEUE_APPROX, queue_id,
                                      QueueLogger.QueueApprox.QUEUE_RANGE,
                                      float(self._lastq), float(self._minQueueInD), float(self._maxQueueInD))
            self._logfile.writeRecord(Logger.EventType.QUEUE_APPROX, queue_id,
                                      QueueLogger.QueueApprox.QUEUE_OVERFLOW,
                                      -float(self._lastIdledInD), float(self._lastDroppedInD), float(queuebuff))

        self._seenQueueInD = False
        dt_ps = now - self._lastlook
        self._lastlook = now
        if self._queue.queuesize() == 0:
            self._cumidle += dt_ps / 1e12

        self._logfile.writeRecord(Logger.EventType.QUEUE_RECORD, queue_id,
                                  QueueLogger.QueueRecord.CUM_TRAFFIC,
                                  self._cumarr, self._cumidle, self._cumdrop)


class QueueLoggerFactory:
    """
    队列日志记录器工厂

    拓扑在创建每个队列时调用 createQueueLogger()。
    """

    class QueueLoggerType(IntEnum):
        LOGGER_SIMPLE = 0
        LOGGER_SAMPLING = 1

    def __init__(self, logfile, logtype: 'QueueLoggerType', eventlist):
        self._logfile = logfile
        self._logger_type = logtype
        self._eventlist = eventlist
        self._sample_period = 0
        self._loggers: List[QueueLogger] = []

    def set_sample_period(self, sample_period: int) -> None:
        self._sample_period = sample_period

    def createQueueLogger(self) -> Optional[QueueLogger]:
        if self._logger_type == self.QueueLoggerType.LOGGER_SIMPLE:
            queue_logger = QueueLoggerSimple()
        elif self._logger_type == self.QueueLoggerType.LOGGER_SAMPLING:
            if self._sample_period <= 0:
                raise ValueError("Sampling queue loggers need a positive sample period")
            queue_logger = QueueLoggerSampling(self._sample_period, self._eventlist)
        else:
            return None

        if self._logfile:
            self._logfile.addLogger(queue_logger)
        self._loggers.append(queue_logger)
        return queue_logger

    def loggers(self) -> List[QueueLogger]:
        return self._loggers
