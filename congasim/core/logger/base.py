"""
Base Logger Class - 基础日志类

功能: 定义日志记录事件类型，提供统一的日志记录接口

主要类:
- Logger: 日志记录器基类
- Logger.EventType: 日志事件类型枚举
"""

from enum import IntEnum


class Logger:
    """
    日志记录器基类

    所有仿真日志记录器都通过 Logfile 写出记录
    """

    class EventType(IntEnum):
        """日志事件类型"""
        QUEUE_EVENT = 0
        TRAFFIC_EVENT = 3
        QUEUE_RECORD = 4
        QUEUE_APPROX = 5
        SWITCH_EVENT = 34
        SWITCH_RECORD = 35
        FLOW_EVENT = 44

    def __init__(self):
        self._logfile = None

    def setLogfile(self, logfile) -> None:
        """由 Logfile.addLogger() 调用"""
        self._logfile = logfile

    def logfile(self):
        return self._logfile
