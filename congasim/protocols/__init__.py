"""
Protocols - Transport Endpoints

- data_transfer.py: DataSrc / DataSink 端点对
"""

from .data_transfer import DataSrc, DataSink

__all__ = [
    'DataSrc',
    'DataSink',
]
