"""
Packets - Data Packet Types

- data_packet.py: 数据包 DataPacket 与确认包 DataAck
"""

from .data_packet import DataPacket, DataAck

__all__ = [
    'DataPacket',
    'DataAck',
]
