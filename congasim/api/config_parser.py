"""
TestbedConfig - Configuration Parser

功能: 解析和管理 CONGA 测试平台的配置参数

主要类:
- TestbedConfig: 配置数据类，支持字典转换、htsim 风格的 key=value 参数以及校验

配置对应关系:
- 仿真时长 -> duration (秒)
- 负载 -> load (占叶交换机链路速率的比例)
- 平均流大小 -> flow_size (字节)
- 拓扑规模 -> core_count / leaf_count / servers_per_leaf
"""

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Iterable, Optional

from ..core.config import (
    LINK_SPEED_10G, LINK_SPEED_40G, microseconds_to_picoseconds, seconds_to_picoseconds,
)
from ..datacenter import constants
from ..datacenter.errors import ConfigurationError
from ..datacenter.route_generator import CORE_SELECTION_NAMES

# htsim 参数名 -> 配置字段
KEY_VALUE_ALIASES = {
    "duration": "duration",
    "load": "load",
    "utilization": "load",
    "flowsize": "flow_size",
    "flow_size": "flow_size",
}

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class TestbedConfig:
    """
    测试平台配置

    默认值即参考测试平台：12 个核心交换机、24 个叶交换机、每个叶交换机 32 台服务器
    """

    # 不是 pytest 测试类
    __test__ = False

    # 仿真配置
    duration: float = constants.DEFAULT_DURATION_S
    load: float = constants.DEFAULT_LOAD
    flow_size: int = constants.DEFAULT_FLOW_SIZE

    # 拓扑配置
    core_count: int = constants.N_CORE
    leaf_count: int = constants.N_LEAF
    servers_per_leaf: int = constants.N_SERVER

    # 链路配置
    leaf_link_rate: int = LINK_SPEED_10G
    core_link_rate: int = LINK_SPEED_40G
    leaf_buffer: int = constants.LEAF_BUFFER
    core_buffer: int = constants.CORE_BUFFER
    endhost_buffer: int = constants.ENDH_BUFFER
    hop_delay_us: float = constants.HOP_DELAY_US

    # 路由配置
    core_selection: str = "random"

    # 驱动配置
    interactive: bool = False
    batch_size: int = constants.DEFAULT_BATCH_SIZE
    seed: Optional[int] = None

    # 日志配置
    log_file: str = "logout.dat"
    log_level: str = "INFO"
    log_queues: bool = False    # 每个队列一个采样日志记录器
    log_switches: bool = True   # 每个交换机一个采样日志记录器
    log_traffic: bool = False   # 每个数据包经过每个元素时写一条记录

    def to_dict(self) -> Dict[str, Any]:
        """
        将配置转换为字典

        Returns:
            配置字典
        """
        return asdict(self)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'TestbedConfig':
        """
        从字典创建配置

        Args:
            config_dict: 配置字典

        Raises:
            ConfigurationError: 出现未知字段时
        """
        known = {f.name for f in fields(cls)}
        unknown = set(config_dict) - known
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {sorted(unknown)}")
        return cls(**config_dict)

    def apply_key_values(self, args: Iterable[str]) -> 'TestbedConfig':
        """
        应用 htsim 风格的 key=value 参数

        支持 duration、load、utilization、flowsize、flow_size

        Raises:
            ConfigurationError: 参数格式错误、未知或无法解析时
        """
        for arg in args:
            key, sep, value = arg.partition("=")
            if not sep:
                raise ConfigurationError(f"Expected key=value, got {arg!r}")
            key = key.strip()
            if key not in KEY_VALUE_ALIASES:
                raise ConfigurationError(f"Unknown parameter {key!r}")

            field_name = KEY_VALUE_ALIASES[key]
            try:
                if field_name == "flow_size":
                    setattr(self, field_name, int(value))
                else:
                    setattr(self, field_name, float(value))
            except ValueError as e:
                raise ConfigurationError(f"Invalid value for {key}: {value!r}") from e
        return self

    def validate(self) -> None:
        """
        验证配置参数的有效性

        Raises:
            ConfigurationError: 任一参数无效时
        """
        if seconds_to_picoseconds(self.duration) <= 0:
            raise ConfigurationError(f"duration must be at least 1 ps, got {self.duration}")
        if not 0 < self.load <= 1:
            raise ConfigurationError(f"load must be in (0, 1], got {self.load}")

        for name in ("flow_size", "core_count", "leaf_count", "servers_per_leaf",
                     "leaf_link_rate", "core_link_rate",
                     "leaf_buffer", "core_buffer", "endhost_buffer",
                     "hop_delay_us", "batch_size"):
            value = getattr(self, name)
            if value <= 0:
                raise ConfigurationError(f"{name} must be positive, got {value}")

        if microseconds_to_picoseconds(self.hop_delay_us) <= 0:
            raise ConfigurationError(f"hop_delay_us must be at least 1 ps, got {self.hop_delay_us}")
        if self.total_servers() < 2:
            raise ConfigurationError(f"Need at least two servers to generate flows, "
                                     f"fabric has {self.total_servers()}")

        if self.core_selection not in CORE_SELECTION_NAMES:
            raise ConfigurationError(f"core_selection must be one of {CORE_SELECTION_NAMES}, "
                                     f"got {self.core_selection!r}")
        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigurationError(f"log_level must be one of {LOG_LEVELS}, got {self.log_level!r}")

    def target_rate(self) -> float:
        """目标流量到达速率 (bps)"""
        return self.load * self.leaf_link_rate

    def total_servers(self) -> int:
        return self.leaf_count * self.servers_per_leaf
