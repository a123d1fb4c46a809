"""
DataPacket - Data and Acknowledgement Packets

功能: 固定大小的数据包及其确认包，供 DataSrc/DataSink 使用

主要类:
- DataPacket: 数据包，按字节序号标识
- DataAck: 确认包，携带被确认数据包的序号

两种包都从各自的 PacketDB 对象池中分配，free() 后回收复用。
"""

from ..core.network import Packet, PacketDB, PacketFlow, PacketPriority, PacketType
from ..core.route import Route

seq_t = int


class DataPacket(Packet):
    """
    数据包

    seqno 为包内第一个字节的序号（从 1 开始），包ID为包内最后一个字节的序号
    """

    _packetdb: PacketDB['DataPacket'] = PacketDB()

    def __init__(self):
        super().__init__()
        self._seqno: seq_t = 0
        self._ts = 0

    @staticmethod
    def newpkt(flow: PacketFlow, route: Route, seqno: seq_t, size: int, ts: int = 0) -> 'DataPacket':
        p = DataPacket._packetdb.allocPacket(DataPacket)
        p.set_route(flow, route, size, seqno + size - 1)
        p._type = PacketType.DATA
        p._seqno = seqno
        p._ts = ts
        return p

    def free(self) -> None:
        DataPacket._packetdb.freePacket(self)

    def seqno(self) -> seq_t:
        return self._seqno

    def ts(self) -> int:
        """发送时间戳"""
        return self._ts

    def priority(self) -> PacketPriority:
        return PacketPriority.PRIO_LO

    def __repr__(self) -> str:
        return f"DataPacket(flow={self.flow_id()}, seqno={self._seqno}, size={self._size})"


class DataAck(Packet):
    """
    确认包

    每个数据包对应一个确认包，ackno 为被确认数据包最后一个字节的序号
    """

    ACKSIZE = 40

    _packetdb: PacketDB['DataAck'] = PacketDB()

    def __init__(self):
        super().__init__()
        self._ackno: seq_t = 0
        self._acked_bytes = 0
        self._ts = 0

    @staticmethod
    def newpkt(flow: PacketFlow, route: Route, ackno: seq_t, acked_bytes: int, ts: int = 0) -> 'DataAck':
        p = DataAck._packetdb.allocPacket(DataAck)
        p.set_route(flow, route, DataAck.ACKSIZE, ackno)
        p._type = PacketType.DATAACK
        p._ackno = ackno
        p._acked_bytes = acked_bytes
        p._ts = ts
        return p

    def free(self) -> None:
        DataAck._packetdb.freePacket(self)

    def ackno(self) -> seq_t:
        return self._ackno

    def acked_bytes(self) -> int:
        """被确认数据包的负载字节数"""
        return self._acked_bytes

    def ts(self) -> int:
        """回显的数据包时间戳"""
        return self._ts

    def priority(self) -> PacketPriority:
        return PacketPriority.PRIO_HI

    def __repr__(self) -> str:
        return f"DataAck(flow={self.flow_id()}, ackno={self._ackno})"
