"""
Constants for the CONGA leaf/core testbed

Fabric dimensions, buffer sizes and link speeds of the reference testbed,
plus the default workload parameters.
"""

from enum import Enum

from ..core.config import LINK_SPEED_10G, LINK_SPEED_40G


class SwitchTier(Enum):
    """Switch tiers in the two-tier fabric"""
    LEAF = 0
    CORE = 1


# Testbed dimensions
N_CORE = 12
N_LEAF = 24
N_SERVER = 32  # per leaf

# Buffer sizes in bytes
LEAF_BUFFER = 512000
CORE_BUFFER = 1024000
ENDH_BUFFER = 8192000

# Link speeds in bps
LEAF_SPEED = LINK_SPEED_10G
CORE_SPEED = LINK_SPEED_40G

# Propagation delay of every pipe
HOP_DELAY_US = 10.0

# Workload defaults
DEFAULT_DURATION_S = 10.0
DEFAULT_LOAD = 0.7
DEFAULT_FLOW_SIZE = 100000  # bytes

# Interactive driver
DEFAULT_BATCH_SIZE = 1000

# Logging intervals
QUEUE_SAMPLING_INTERVAL = 1_000_000_000     # 1ms in picoseconds
SWITCH_SAMPLING_INTERVAL = 10_000_000_000   # 10ms in picoseconds
