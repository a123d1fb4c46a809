"""
Route generation for the leaf/core fabric

RouteGenerator maps a flow's endpoints to a forward route and its mirrored
reverse route through one core switch:

    src server -> src leaf -> core -> dst leaf -> dst server

Each of the five hops contributes the route elements of the node's egress
link (queue, pipe), except the last, which is the receiving server itself.
The reverse route uses the same core with the roles of src and dst swapped.
Both routes are allocated fresh on every call.

The core switch is chosen by a pluggable CoreSelection strategy:
- RandomCoreSelection: uniform over all cores (default)
- SourceModuloCoreSelection: src_id % core_count
"""

import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..core.route import Route
from .errors import ConfigurationError, InvariantViolation
from .leaf_spine_topology import LeafSpineTopology

HOPS_PER_ROUTE = 5


@dataclass(frozen=True)
class Hop:
    """One traversal unit of a route: the node and the elements it contributes"""
    node: object
    elements: tuple


class FabricRoute(Route):
    """
    Route through the fabric with a hop view on top of the flat element list

    The packet walks the flat list (queue, pipe, ..., server). hops() and
    nodes() describe the same path as five fabric nodes.
    """

    def __init__(self, src_id: int, dst_id: int, core_index: int):
        super().__init__()
        self._src_id = src_id
        self._dst_id = dst_id
        self._core_index = core_index
        self._hops: List[Hop] = []

    def add_hop(self, hop: Hop) -> None:
        self._hops.append(hop)
        for element in hop.elements:
            self.push_back(element)

    def hops(self) -> List[Hop]:
        return list(self._hops)

    def nodes(self) -> list:
        return [hop.node for hop in self._hops]

    @property
    def src_id(self) -> int:
        return self._src_id

    @property
    def dst_id(self) -> int:
        return self._dst_id

    @property
    def core_index(self) -> int:
        return self._core_index

    def __repr__(self) -> str:
        return (f"FabricRoute(src={self._src_id}, dst={self._dst_id}, core={self._core_index}, "
                f"elements={self.size()})")


class CoreSelection(ABC):
    """Strategy choosing the core switch a flow traverses"""

    @abstractmethod
    def select(self, src_id: int, dst_id: int, core_count: int) -> int:
        """Return a core index in [0, core_count)"""


class RandomCoreSelection(CoreSelection):
    """Uniform random core; every core has positive probability on every call"""

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng if rng is not None else random.Random()

    def select(self, src_id: int, dst_id: int, core_count: int) -> int:
        return self._rng.randrange(core_count)


class SourceModuloCoreSelection(CoreSelection):
    """Core keyed by source id; exactly balanced over consecutive sources"""

    def select(self, src_id: int, dst_id: int, core_count: int) -> int:
        return src_id % core_count


CORE_SELECTION_NAMES = ("random", "round_robin")


def core_selection_from_name(name: str, rng: Optional[random.Random] = None) -> CoreSelection:
    """
    Build a core selection strategy by name ("random" or "round_robin")

    Raises:
        ConfigurationError: If the name is unknown
    """
    if name == "random":
        return RandomCoreSelection(rng)
    if name == "round_robin":
        return SourceModuloCoreSelection()
    raise ConfigurationError(f"Unknown core selection {name!r}, expected one of {CORE_SELECTION_NAMES}")


class RouteGenerator:
    """
    Route generator bound to one topology

    Args:
        topology: The fabric; read, never modified
        core_selection: Core selection strategy; defaults to RandomCoreSelection
        rng: Random source for endpoint sampling (and the default strategy)

    Raises:
        ConfigurationError: If the fabric has fewer than two servers
    """

    def __init__(self, topology: LeafSpineTopology,
                 core_selection: Optional[CoreSelection] = None,
                 rng: Optional[random.Random] = None):
        n = topology.no_of_nodes()
        if n < 2:
            raise ConfigurationError(f"Need at least two servers to generate flows, fabric has {n}")

        self._topology = topology
        self._rng = rng if rng is not None else random.Random()
        self._core_selection = core_selection if core_selection is not None else RandomCoreSelection(self._rng)

    @property
    def topology(self) -> LeafSpineTopology:
        return self._topology

    @property
    def core_selection(self) -> CoreSelection:
        return self._core_selection

    def _check_endpoint(self, server_id: int) -> None:
        n = self._topology.no_of_nodes()
        if not 0 <= server_id < n:
            raise InvariantViolation(f"Endpoint {server_id} out of range [0, {n})")

    def _draw_other(self, exclude: int) -> int:
        # uniform over the n-1 servers other than exclude, in one draw
        d = self._rng.randrange(self._topology.no_of_nodes() - 1)
        return d + 1 if d >= exclude else d

    def sample_endpoints(self, src_id: Optional[int] = None,
                         dst_id: Optional[int] = None) -> Tuple[int, int]:
        """
        Fill in missing endpoints

        Missing endpoints are drawn uniformly; the second one is drawn from
        the servers other than the first.

        Returns:
            (src_id, dst_id) with src_id != dst_id
        """
        if src_id is None and dst_id is None:
            src_id = self._rng.randrange(self._topology.no_of_nodes())
            dst_id = self._draw_other(src_id)
        elif src_id is None:
            self._check_endpoint(dst_id)
            src_id = self._draw_other(dst_id)
        elif dst_id is None:
            self._check_endpoint(src_id)
            dst_id = self._draw_other(src_id)
        else:
            self._check_endpoint(src_id)
            self._check_endpoint(dst_id)
            if src_id == dst_id:
                raise InvariantViolation(f"Flow source and destination are both {src_id}")
        return src_id, dst_id

    def select_core(self, src_id: int, dst_id: int) -> int:
        core_count = self._topology.core_count
        core = self._core_selection.select(src_id, dst_id, core_count)
        if not isinstance(core, int) or not 0 <= core < core_count:
            raise InvariantViolation(
                f"{type(self._core_selection).__name__} chose core {core!r}, expected [0, {core_count})")
        return core

    def build_route(self, src_id: int, dst_id: int, core: int) -> FabricRoute:
        """Assemble the five-hop route from src_id to dst_id through core"""
        topo = self._topology
        src = topo.server(src_id)
        dst = topo.server(dst_id)

        route = FabricRoute(src_id, dst_id, core)
        # source server, source leaf, core, destination leaf, destination server
        route.add_hop(Hop(src, src.uplink.elements()))
        route.add_hop(Hop(topo.leaf_switch(src.leaf_index),
                          topo.leaf_uplink(src.leaf_index, core).elements()))
        route.add_hop(Hop(topo.core_switch(core),
                          topo.core_downlink(core, dst.leaf_index).elements()))
        route.add_hop(Hop(topo.leaf_switch(dst.leaf_index), dst.downlink.elements()))
        route.add_hop(Hop(dst, (dst,)))
        route.set_path_id(core, topo.core_count)
        return route

    def generate(self, src_id: Optional[int] = None,
                 dst_id: Optional[int] = None) -> Tuple[FabricRoute, FabricRoute, int, int]:
        """
        Generate a forward/reverse route pair

        Args:
            src_id: Source server, sampled if None
            dst_id: Destination server, sampled if None

        Returns:
            (forward, reverse, src_id, dst_id)

        Raises:
            InvariantViolation: For out-of-range endpoints or src_id == dst_id
        """
        src_id, dst_id = self.sample_endpoints(src_id, dst_id)
        core = self.select_core(src_id, dst_id)

        forward = self.build_route(src_id, dst_id, core)
        reverse = self.build_route(dst_id, src_id, core)
        forward.set_reverse(reverse)
        reverse.set_reverse(forward)
        return forward, reverse, src_id, dst_id

    __call__ = generate

    def all_paths(self, src_id: int, dst_id: int) -> List[FabricRoute]:
        """Forward routes from src_id to dst_id through every core"""
        self.sample_endpoints(src_id, dst_id)
        return [self.build_route(src_id, dst_id, core) for core in range(self._topology.core_count)]
