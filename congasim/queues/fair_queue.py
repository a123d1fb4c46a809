"""
Fair Queue - per-flow round-robin output queue

FairQueue keeps one FIFO per flow id and serves the flows in round-robin
order, one packet per turn. Buffer accounting and tail drop are shared with
Queue: the byte limit applies to the queue as a whole.
"""

from collections import deque
from typing import Deque, Dict, Optional

from .base_queue import Queue
from ..core.circular_buffer import CircularBuffer
from ..core.eventlist import EventList
from ..core.logger.queue import QueueLogger
from ..core.network import Packet


class FairPullQueue:
    """
    Fair pull queue for packets - provides round-robin fairness between flows
    """

    def __init__(self):
        self._queue_map: Dict[int, CircularBuffer[Packet]] = {}
        self._active: Deque[int] = deque()
        self._pull_count = 0

    def enqueue(self, pkt: Packet) -> None:
        flow_id = pkt.flow_id()
        if flow_id not in self._queue_map:
            self._queue_map[flow_id] = CircularBuffer()
            self._active.append(flow_id)
        self._queue_map[flow_id].push(pkt)
        self._pull_count += 1

    def dequeue(self) -> Optional[Packet]:
        """Take one packet from the flow whose turn it is"""
        if self._pull_count == 0:
            return None

        flow_id = self._active.popleft()
        queue = self._queue_map[flow_id]
        pkt = queue.pop()
        self._pull_count -= 1

        if queue.empty():
            del self._queue_map[flow_id]
        else:
            self._active.append(flow_id)
        return pkt

    def empty(self) -> bool:
        return self._pull_count == 0

    def size(self) -> int:
        return self._pull_count

    def flow_count(self) -> int:
        """Number of flows with queued packets"""
        return len(self._queue_map)


class FairQueue(Queue):
    """
    Round-robin fair queue

    The packet being transmitted is taken out of the per-flow queues when its
    service starts, and still counts towards queuesize() until it departs.
    """

    def __init__(self, bitrate: int, maxsize: int, eventlist: EventList,
                 logger: Optional[QueueLogger] = None):
        super().__init__(bitrate, maxsize, eventlist, logger)
        self._fair = FairPullQueue()
        self._sending: Optional[Packet] = None
        self._nodename = f"fairqueue({bitrate // 1_000_000}Mb/s,{maxsize}bytes)"

    def _enqueue(self, pkt: Packet) -> bool:
        was_empty = self._queuesize == 0
        self._fair.enqueue(pkt)
        self._queuesize += pkt.size()
        return was_empty

    def _head(self) -> Packet:
        if self._sending is None:
            self._sending = self._fair.dequeue()
        assert self._sending is not None
        return self._sending

    def _dequeue(self) -> Packet:
        pkt = self._head()
        self._sending = None
        self._queuesize -= pkt.size()
        return pkt

    def active_flows(self) -> int:
        return self._fair.flow_count()
