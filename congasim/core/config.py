"""
Config - 仿真时间与链路速度定义

功能: 定义仿真中使用的时间类型、单位换算函数以及常用链路速度常量

主要内容:
- SimTime 皮秒级时间类型
- 时间换算函数 (秒/毫秒/微秒 <-> 皮秒)
- 链路速度常量
"""

from typing import TypeAlias

# 皮秒级时间戳
SimTime: TypeAlias = int

# 时间单位常量
PICOSECONDS_PER_SECOND = 1_000_000_000_000
PICOSECONDS_PER_MILLISECOND = 1_000_000_000
PICOSECONDS_PER_MICROSECOND = 1_000_000


def seconds_to_picoseconds(seconds: float) -> SimTime:
    """将秒转换为皮秒"""
    return int(seconds * PICOSECONDS_PER_SECOND)


def milliseconds_to_picoseconds(milliseconds: float) -> SimTime:
    """将毫秒转换为皮秒"""
    return int(milliseconds * PICOSECONDS_PER_MILLISECOND)


def microseconds_to_picoseconds(microseconds: float) -> SimTime:
    """将微秒转换为皮秒"""
    return int(microseconds * PICOSECONDS_PER_MICROSECOND)


def picoseconds_to_seconds(picoseconds: SimTime) -> float:
    """将皮秒转换为秒"""
    return picoseconds / PICOSECONDS_PER_SECOND


def picoseconds_to_microseconds(picoseconds: SimTime) -> float:
    """将皮秒转换为微秒"""
    return picoseconds / PICOSECONDS_PER_MICROSECOND


# 链路速度常量
LINK_SPEED_1G = 1_000_000_000
LINK_SPEED_10G = 10_000_000_000
LINK_SPEED_40G = 40_000_000_000
