"""
CircularBuffer - 循环缓冲区实现

功能: 可自动扩容的循环缓冲区，队列和管道用它保存数据包

主要类:
- CircularBuffer: 先进先出的循环缓冲区
"""

from typing import Generic, List, Optional, TypeVar

T = TypeVar('T')


class CircularBuffer(Generic[T]):
    """
    循环缓冲区

    push() 在队尾添加元素，pop() 从队首取出最老的元素。
    缓冲区满时容量翻倍。
    """

    def __init__(self, starting_size: int = 8):
        assert starting_size > 1
        self._count = 0
        self._next_push = 0
        self._next_pop = 0
        self._size = starting_size
        self._queue: List[Optional[T]] = [None] * self._size

    def push(self, item: T) -> None:
        self._count += 1

        if self._count == self._size:
            # 扩容并把元素按顺序搬到新数组开头
            newsize = self._size * 2
            new_queue: List[Optional[T]] = [None] * newsize
            for i in range(self._count - 1):
                new_queue[i] = self._queue[(self._next_pop + i) % self._size]
            self._queue = new_queue
            self._next_pop = 0
            self._next_push = self._count - 1
            self._size = newsize

        self._queue[self._next_push] = item
        self._next_push = (self._next_push + 1) % self._size

    def pop(self) -> T:
        """移除并返回最老的元素"""
        assert self._count > 0
        old_index = self._next_pop
        item = self._queue[old_index]
        self._queue[old_index] = None
        self._next_pop = (self._next_pop + 1) % self._size
        self._count -= 1
        return item  # type: ignore

    def next_to_pop(self) -> T:
        assert self._count > 0
        return self._queue[self._next_pop]  # type: ignore

    def empty(self) -> bool:
        return self._count == 0

    def size(self) -> int:
        return self._count

    def __len__(self) -> int:
        return self._count
