"""
Poisson flow generator for the leaf/core fabric

On every arrival the generator asks its RouteGenerator for a route pair,
draws a flow size, binds a DataSrc/DataSink pair to the routes and starts
the flow immediately. Arrivals form a Poisson process whose rate makes the
offered load equal to target_rate_bps on average:

    flows per second = target_rate_bps / (8 * mean_flow_size)

Route pairs of live flows are owned by a RouteArena and released when the
flow completes.
"""

import logging
import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..core.config import PICOSECONDS_PER_SECOND, SimTime
from ..core.eventlist import EventList, EventSource
from ..core.logger.traffic import FlowEventLogger, TrafficLogger
from ..core.network import FlowId
from ..core.route import Route
from ..protocols.data_transfer import DataSink, DataSrc
from .errors import ConfigurationError
from .flow_size import FlowSizeGenerator, FlowSizeGenerators
from .route_generator import FabricRoute, RouteGenerator


@dataclass
class Flow:
    """A flow started by the generator"""
    flow_id: FlowId
    src_id: int
    dst_id: int
    size: int
    start_time: SimTime
    forward: FabricRoute
    reverse: FabricRoute
    src: DataSrc
    sink: DataSink
    finish_time: Optional[SimTime] = None

    def completion_time(self) -> Optional[SimTime]:
        """Flow completion time in picoseconds, None while running"""
        if self.finish_time is None:
            return None
        return self.finish_time - self.start_time


class RouteArena:
    """
    Owner of the route pairs of live flows

    A route pair is registered when its flow starts and released when the
    flow completes; release_all() tears down whatever is left at the end of
    a run.
    """

    def __init__(self):
        self._routes: Dict[FlowId, Tuple[Route, Route]] = {}
        self._released = 0

    def register(self, flow_id: FlowId, forward: Route, reverse: Route) -> None:
        if flow_id in self._routes:
            raise ValueError(f"Routes for flow {flow_id} already registered")
        self._routes[flow_id] = (forward, reverse)

    def release(self, flow_id: FlowId) -> Optional[Tuple[Route, Route]]:
        pair = self._routes.pop(flow_id, None)
        if pair is not None:
            # break the forward <-> reverse reference cycle
            for route in pair:
                route.set_reverse(None)
            self._released += 1
        return pair

    def discard(self, flow_id: FlowId) -> None:
        """Drop a pair whose flow never started; not counted as released"""
        pair = self._routes.pop(flow_id, None)
        if pair is not None:
            for route in pair:
                route.set_reverse(None)

    def release_all(self) -> int:
        """Release every remaining pair, returning how many were released"""
        flow_ids = list(self._routes)
        for flow_id in flow_ids:
            self.release(flow_id)
        return len(flow_ids)

    def live(self) -> int:
        return len(self._routes)

    def released(self) -> int:
        return self._released

    def __contains__(self, flow_id: FlowId) -> bool:
        return flow_id in self._routes

    def __len__(self) -> int:
        return len(self._routes)


class FlowGenerator(EventSource):
    """
    Flow arrival process

    Args:
        eventlist: Event list
        route_generator: Source of route pairs; its topology must outlive the run
        target_rate_bps: Offered load in bits per second
        mean_flow_size: Mean flow size in bytes
        size_generator: Flow size generator; defaults to exponential(mean_flow_size)
        flow_logger: Optional logger for flow START/FINISH events
        rng: Random source for inter-arrival times

    Raises:
        ConfigurationError: If the rate or mean size is not positive
    """

    def __init__(self,
                 eventlist: EventList,
                 route_generator: RouteGenerator,
                 target_rate_bps: float,
                 mean_flow_size: float,
                 size_generator: Optional[FlowSizeGenerator] = None,
                 flow_logger: Optional[FlowEventLogger] = None,
                 rng: Optional[random.Random] = None):
        super().__init__(eventlist, "FlowGenerator")

        if target_rate_bps <= 0:
            raise ConfigurationError(f"Target rate must be positive, got {target_rate_bps}")
        if mean_flow_size <= 0:
            raise ConfigurationError(f"Mean flow size must be positive, got {mean_flow_size}")

        self._route_generator = route_generator
        self._topology = route_generator.topology
        self._target_rate = target_rate_bps
        self._mean_flow_size = mean_flow_size
        self._flow_rate = target_rate_bps / (8.0 * mean_flow_size)
        self._rng = rng if rng is not None else random.Random()
        self._size_generator = size_generator or FlowSizeGenerators.exponential(mean_flow_size, self._rng)
        self._flow_logger = flow_logger
        self._traffic_logger: Optional[TrafficLogger] = None

        self._start_time: SimTime = 0
        self._end_time: SimTime = 0
        self._endhost_rate: Optional[int] = None
        self._endhost_buffer: Optional[int] = None

        self._arena = RouteArena()
        self._active: Dict[FlowId, Flow] = {}
        self._completed: List[Flow] = []
        self._flows_started = 0

        self._nodename = "FlowGenerator"
        self.eventlist().source_is_pending(self, max(self._start_time, self.eventlist().now()))

    def set_time_limits(self, start: SimTime, end: SimTime) -> None:
        """
        Restrict arrivals to [start, end)

        Args:
            start: Time of the first arrival in picoseconds
            end: No arrivals at or after this time; 0 means unlimited
        """
        if end and end <= start:
            raise ConfigurationError(f"Flow generator end time {end} is not after start time {start}")
        self._start_time = start
        self._end_time = end
        self.eventlist().reschedule_pending_source(self, max(start, self.eventlist().now()))

    def set_endhost_queue(self, rate: int, buffer_bytes: int) -> None:
        """
        Record the end-host send queue parameters

        The send queues themselves belong to the topology; a mismatch is
        reported but not corrected.
        """
        if rate <= 0 or buffer_bytes <= 0:
            raise ConfigurationError(f"Invalid end-host queue {rate} bps / {buffer_bytes} bytes")
        self._endhost_rate = rate
        self._endhost_buffer = buffer_bytes
        if rate != self._topology.leaf_link_rate or buffer_bytes != self._topology.endpoint_buffer:
            logging.warning(f"End-host queue {rate} bps / {buffer_bytes} bytes differs from the fabric's "
                            f"{self._topology.leaf_link_rate} bps / {self._topology.endpoint_buffer} bytes")

    def endhost_queue(self) -> Tuple[Optional[int], Optional[int]]:
        return self._endhost_rate, self._endhost_buffer

    def set_traffic_logger(self, logger: Optional[TrafficLogger]) -> None:
        """Log per-packet traffic of flows started from now on"""
        self._traffic_logger = logger

    def do_next_event(self) -> None:
        now = self.eventlist().now()
        if self._end_time and now >= self._end_time:
            return

        self.start_flow()

        gap = int(self._rng.expovariate(self._flow_rate) * PICOSECONDS_PER_SECOND)
        next_arrival = now + gap
        if not self._end_time or next_arrival < self._end_time:
            self.eventlist().source_is_pending(self, next_arrival)

    def start_flow(self, src_id: Optional[int] = None, dst_id: Optional[int] = None) -> Flow:
        """Start one flow now, sampling endpoints that are not given"""
        now = self.eventlist().now()
        forward, reverse, src_id, dst_id = self._route_generator.generate(src_id, dst_id)
        size = self._size_generator()

        src = DataSrc(self.eventlist(), size, self._flow_logger, self._traffic_logger)
        sink = DataSink()
        src.setName(f"datasrc_{src_id}_{dst_id}({self._flows_started})")
        sink.setName(f"datasink_{src_id}_{dst_id}({self._flows_started})")

        flow_id = src.flow().flow_id()
        self._arena.register(flow_id, forward, reverse)
        dst_server = self._topology.server(dst_id)
        src_server = self._topology.server(src_id)
        try:
            dst_server.bind(flow_id, sink)
            try:
                src_server.bind(flow_id, src)
            except ValueError:
                dst_server.unbind(flow_id)
                raise
        except ValueError:
            self._arena.discard(flow_id)
            raise

        flow = Flow(flow_id, src_id, dst_id, size, now, forward, reverse, src, sink)
        self._active[flow_id] = flow
        self._flows_started += 1

        src.set_completion_callback(self._flow_finished)
        src.connect(forward, reverse, sink, now)

        logging.debug(f"Flow {flow_id}: {src_id} -> {dst_id} via core {forward.core_index}, {size} bytes")
        return flow

    def _flow_finished(self, src: DataSrc) -> None:
        flow = self._active.pop(src.flow().flow_id())
        flow.finish_time = src.finish_time()
        self._unbind(flow)
        self._arena.release(flow.flow_id)
        self._completed.append(flow)

    def _unbind(self, flow: Flow) -> None:
        self._topology.server(flow.src_id).unbind(flow.flow_id)
        self._topology.server(flow.dst_id).unbind(flow.flow_id)

    def release_all(self) -> int:
        """Tear down flows still running at the end of a run"""
        for flow in self._active.values():
            self._unbind(flow)
        self._active.clear()
        return self._arena.release_all()

    @property
    def arena(self) -> RouteArena:
        return self._arena

    def flow_rate(self) -> float:
        """Mean flow arrivals per second"""
        return self._flow_rate

    def flows_started(self) -> int:
        return self._flows_started

    def flows_completed(self) -> int:
        return len(self._completed)

    def active_flows(self) -> int:
        return len(self._active)

    def completed(self) -> List[Flow]:
        return list(self._completed)

    def nodename(self) -> str:
        return self._nodename

    def setName(self, name: str) -> None:
        EventSource.setName(self, name)
        self._nodename = name
