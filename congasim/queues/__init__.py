"""
Queues - output queue implementations

- base_queue.py: 队列基类和先进先出队列
- fair_queue.py: 按流轮询的公平队列
"""

from .base_queue import BaseQueue, Queue
from .fair_queue import FairPullQueue, FairQueue

__all__ = [
    'BaseQueue',
    'Queue',
    'FairPullQueue',
    'FairQueue',
]
