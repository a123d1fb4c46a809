"""
Core components of congasim

- eventlist.py: 事件调度系统
- network.py: 数据包、数据包接收器、数据包流
- route.py: 路由路径
- pipe.py: 固定延迟管道
- circular_buffer.py: 循环缓冲区
- config.py: 时间与链路速度定义
- logger/: 日志系统
"""

from .eventlist import EventList, EventSource
from .network import Packet, PacketSink, PacketFlow, PacketType, PacketPriority
from .route import Route
from .pipe import Pipe
from .logger import Logger, Logged, Logfile

__all__ = [
    'EventList', 'EventSource',
    'Packet', 'PacketSink', 'PacketFlow', 'PacketType', 'PacketPriority',
    'Route', 'Pipe',
    'Logger', 'Logged', 'Logfile',
]
