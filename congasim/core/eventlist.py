"""
EventList - 离散事件调度器

主要类:
- EventSource: 能被调度的仿真对象
- EventList: 全局调度器 (单例模式)

待处理事件保存在一个按 (时间, 调度序号) 排序的堆中，因此同一时间的事件按
调度顺序执行。时间以整数皮秒表示。设置了结束时间后，调度在结束时间及之后的
事件会被直接丢弃。
"""

import heapq
import itertools
from abc import ABC, abstractmethod
from typing import Iterator, List, Optional, Tuple

from .config import SimTime
from .logger.core import Logged


class EventSource(Logged, ABC):
    """
    事件源基类

    子类实现 do_next_event()，在被调度的时间点由 EventList 调用
    """

    def __init__(self, eventlist: 'EventList', name: str):
        Logged.__init__(self, name)
        self._eventlist = eventlist

    @abstractmethod
    def do_next_event(self) -> None:
        pass

    def eventlist(self) -> 'EventList':
        return self._eventlist


class EventList:
    """
    事件调度器

    所有状态保存在类变量中；get_the_event_list() 返回唯一实例，
    reset() 清空全部状态（测试之间使用）。
    """

    _endtime: SimTime = 0
    _now: SimTime = 0
    _the_event_list: Optional['EventList'] = None

    # (when, seq, source)
    _heap: List[Tuple[SimTime, int, EventSource]] = []
    _seq: Iterator[int] = itertools.count()

    def __init__(self):
        if EventList._the_event_list is not None:
            raise RuntimeError("There should be only one instance of EventList")
        EventList._the_event_list = self

    @classmethod
    def get_the_event_list(cls) -> 'EventList':
        if cls._the_event_list is None:
            cls()
        return cls._the_event_list

    @classmethod
    def set_endtime(cls, endtime: SimTime) -> None:
        """0 表示不限制"""
        cls._endtime = endtime

    @classmethod
    def endtime(cls) -> SimTime:
        return cls._endtime

    @classmethod
    def now(cls) -> SimTime:
        """当前仿真时间（皮秒）"""
        return cls._now

    @classmethod
    def do_next_event(cls) -> bool:
        """
        执行最早的一个待处理事件

        Returns:
            执行了一个事件返回 True，没有待处理事件返回 False
        """
        if not cls._heap:
            return False

        when, _, source = heapq.heappop(cls._heap)
        assert when >= cls._now
        cls._now = when
        source.do_next_event()
        return True

    @classmethod
    def source_is_pending(cls, src: EventSource, when: SimTime) -> None:
        """调度 src 在绝对时间 when 执行"""
        assert when >= cls._now, "Cannot schedule an event in the past"
        if cls._endtime and when >= cls._endtime:
            return
        heapq.heappush(cls._heap, (when, next(cls._seq), src))

    @classmethod
    def source_is_pending_rel(cls, src: EventSource, timefromnow: SimTime) -> None:
        cls.source_is_pending(src, cls._now + timefromnow)

    @classmethod
    def cancel_pending_source(cls, src: EventSource) -> None:
        """取消 src 最早的一个待处理事件"""
        earliest = None
        for i, entry in enumerate(cls._heap):
            if entry[2] is src and (earliest is None or entry[:2] < cls._heap[earliest][:2]):
                earliest = i
        if earliest is None:
            return

        cls._heap[earliest] = cls._heap[-1]
        cls._heap.pop()
        heapq.heapify(cls._heap)

    @classmethod
    def reschedule_pending_source(cls, src: EventSource, when: SimTime) -> None:
        cls.cancel_pending_source(src)
        cls.source_is_pending(src, when)

    @classmethod
    def pending_count(cls) -> int:
        return len(cls._heap)

    @classmethod
    def reset(cls) -> None:
        """重置所有状态（仅用于测试）"""
        cls._endtime = 0
        cls._now = 0
        cls._heap.clear()
        cls._seq = itertools.count()
        cls._the_event_list = None
