"""
Route - 数据包依次经过的 PacketSink 列表
"""

from typing import Iterator, List, Optional

from .network import PacketSink


class Route:
    """
    路由

    可以通过 set_reverse() 关联一条反向路由，供接收端回送确认包。
    path_id / no_of_paths 记录多路径中的第几条。
    """

    def __init__(self):
        self._sinklist: List[PacketSink] = []
        self._reverse: Optional['Route'] = None
        self._path_id = 0
        self._no_of_paths = 1

    def push_back(self, sink: PacketSink) -> None:
        assert sink is not None, "PacketSink cannot be None"
        self._sinklist.append(sink)

    def at(self, n: int) -> PacketSink:
        return self._sinklist[n]

    def size(self) -> int:
        return len(self._sinklist)

    def set_reverse(self, reverse: Optional['Route']) -> None:
        self._reverse = reverse

    def reverse(self) -> Optional['Route']:
        return self._reverse

    def set_path_id(self, path_id: int, no_of_paths: int) -> None:
        assert 0 <= path_id < no_of_paths
        self._path_id = path_id
        self._no_of_paths = no_of_paths

    def path_id(self) -> int:
        return self._path_id

    def no_of_paths(self) -> int:
        return self._no_of_paths

    def __iter__(self) -> Iterator[PacketSink]:
        return iter(self._sinklist)

    def __len__(self) -> int:
        return len(self._sinklist)

    def __str__(self) -> str:
        return " -> ".join(sink.nodename() for sink in self._sinklist)
