"""
Logger Package - 日志系统

功能: 提供仿真对象的命名/ID管理和仿真记录日志

主要模块:
- core: Logged（对象名称与ID）
- base: 基础Logger类和事件类型
- traffic: 流量和流事件日志记录器
- logfile: 日志文件
- queue: 队列日志记录器（依赖 eventlist，需直接从子模块导入）
- switch: 交换机日志记录器（依赖 eventlist，需直接从子模块导入）
"""

from .core import Logged
from .base import Logger
from .traffic import (
    TrafficLogger, FlowEventLogger,
    TrafficLoggerSimple, FlowEventLoggerSimple,
)
from .logfile import Logfile

__all__ = [
    'Logged', 'Logger',
    'TrafficLogger', 'FlowEventLogger',
    'TrafficLoggerSimple', 'FlowEventLoggerSimple',
    'Logfile',
]
