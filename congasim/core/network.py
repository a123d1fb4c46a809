"""
Network - 数据包、数据包流与接收器

主要类:
- PacketFlow: 流ID与可选的逐包流量日志
- PacketSink: 路由上的一个元素（队列、管道、服务器、传输端点）
- Packet: 沿 Route 逐跳转发的数据包
- PacketDB: 按类型复用数据包对象
"""

from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Generic, List, Optional, TypeVar, TYPE_CHECKING

from .logger.core import Logged
from .logger.traffic import TrafficLogger

if TYPE_CHECKING:
    from .route import Route

PacketId = int
FlowId = int

DEFAULTDATASIZE = 1500


class PacketType(IntEnum):
    IP = 0
    DATA = 1
    DATAACK = 2


class PacketPriority(IntEnum):
    PRIO_LO = 0
    PRIO_MID = 1
    PRIO_HI = 2


class PacketFlow(Logged):
    """
    数据包流

    流ID按创建顺序分配，全局唯一。数据包和它的确认包共用同一个流。
    """

    _next_flow_id: FlowId = 1

    def __init__(self, logger: Optional[TrafficLogger]):
        super().__init__("PacketFlow")
        self._logger = logger
        self._flow_id = PacketFlow._next_flow_id
        PacketFlow._next_flow_id += 1

    def flow_id(self) -> FlowId:
        return self._flow_id

    def log_me(self) -> bool:
        return self._logger is not None

    def logTraffic(self, pkt: 'Packet', location: Logged, ev) -> None:
        if self._logger:
            self._logger.logTraffic(pkt, location, ev)


class PacketSink(ABC):
    """路由上的一个元素"""

    def __init__(self):
        pass

    @abstractmethod
    def receivePacket(self, pkt: 'Packet') -> None:
        pass

    @abstractmethod
    def nodename(self) -> str:
        pass


class Packet(ABC):
    """
    数据包基类

    数据包携带它的 Route 和下一跳下标；每个元素处理完后调用 sendOn()
    把它交给路由上的下一个元素。
    """

    _data_packet_size: int = DEFAULTDATASIZE

    def __init__(self):
        self._type = PacketType.IP
        self._refcount = 0
        self._size = 0
        self._id: PacketId = 0
        self._flow: Optional[PacketFlow] = None
        self._route: Optional['Route'] = None
        self._nexthop = 0

    @staticmethod
    def data_packet_size() -> int:
        """数据包的负载大小（字节）"""
        return Packet._data_packet_size

    def set_route(self, flow: PacketFlow, route: 'Route', pkt_size: int, id: PacketId) -> None:
        """绑定流、路由、大小和包ID，从路由起点开始转发"""
        self._flow = flow
        self._route = route
        self._size = pkt_size
        self._id = id
        self._nexthop = 0

    def sendOn(self) -> PacketSink:
        assert self._route is not None, "Packet has no route"
        assert self._nexthop < self._route.size(), "Packet ran off the end of its route"
        nextsink = self._route.at(self._nexthop)
        self._nexthop += 1
        nextsink.receivePacket(self)
        return nextsink

    def free(self) -> None:
        pass

    @abstractmethod
    def priority(self) -> PacketPriority:
        pass

    def size(self) -> int:
        return self._size

    def type(self) -> PacketType:
        return self._type

    def flow(self) -> PacketFlow:
        assert self._flow is not None, "Packet has no flow"
        return self._flow

    def flow_id(self) -> FlowId:
        return self.flow().flow_id()

    def id(self) -> PacketId:
        return self._id

    def route(self) -> Optional['Route']:
        return self._route

    def ref_count(self) -> int:
        return self._refcount


P = TypeVar('P', bound=Packet)


class PacketDB(Generic[P]):
    """
    数据包对象池

    free() 之后的数据包回到空闲列表，由下一次 allocPacket() 复用
    """

    def __init__(self):
        self._freelist: List[P] = []
        self._allocated = 0

    def allocPacket(self, packet_class) -> P:
        if self._freelist:
            p = self._freelist.pop()
        else:
            p = packet_class()
            self._allocated += 1
        p._refcount += 1
        return p

    def freePacket(self, pkt: P) -> None:
        assert pkt.ref_count() >= 1, f"Double free of {pkt!r}"
        pkt._refcount -= 1
        if pkt._refcount == 0:
            self._freelist.append(pkt)

    def allocated(self) -> int:
        """创建过的数据包对象数"""
        return self._allocated

    def free_count(self) -> int:
        return len(self._freelist)
