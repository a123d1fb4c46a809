"""
congasim Datacenter Module

Leaf/core fabric components for the CONGA testbed:
- Two-tier topology of leaf and core switches with attached servers
- Route generation with pluggable core selection
- Poisson flow arrivals bound to generated routes
- Simulation driver with an optional operator-gated batch mode
"""

from .errors import ConfigurationError, InvariantViolation
from .constants import SwitchTier
from .topology import Topology
from .fabric_switch import FabricSwitch, Link
from .server import Server
from .leaf_spine_topology import LeafSpineTopology, build_fabric
from .route_generator import (
    RouteGenerator, FabricRoute, Hop,
    CoreSelection, RandomCoreSelection, SourceModuloCoreSelection,
    core_selection_from_name,
)
from .flow_size import FlowSizeGenerators
from .flow_generator import FlowGenerator, Flow, RouteArena
from .simulation_driver import SimulationDriver, DriverState

__all__ = [
    # Errors
    'ConfigurationError',
    'InvariantViolation',

    # Topology
    'SwitchTier',
    'Topology',
    'FabricSwitch',
    'Link',
    'Server',
    'LeafSpineTopology',
    'build_fabric',

    # Routing
    'RouteGenerator',
    'FabricRoute',
    'Hop',
    'CoreSelection',
    'RandomCoreSelection',
    'SourceModuloCoreSelection',
    'core_selection_from_name',

    # Traffic
    'FlowSizeGenerators',
    'FlowGenerator',
    'Flow',
    'RouteArena',

    # Driver
    'SimulationDriver',
    'DriverState',
]
