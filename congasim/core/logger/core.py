"""
Logged - 仿真对象的日志标识

每个对象在创建时得到一个唯一的整数ID；日志记录里只写ID，
Logfile.writeName() 写出 ID -> 名称 的对应行。
"""

import itertools
from typing import Iterator


class Logged:
    """
    日志基类

    所有需要出现在日志记录中的仿真对象都继承此类
    """

    IdType = int

    _ids: Iterator[int] = itertools.count()

    def __init__(self, name: str):
        self._name = name
        self._log_id = next(Logged._ids)

    def setName(self, name: str) -> None:
        self._name = name

    def str(self) -> str:
        return self._name

    def get_id(self) -> IdType:
        return self._log_id

    @classmethod
    def reset_ids(cls) -> None:
        """重置ID计数器（仅用于测试）"""
        Logged._ids = itertools.count()
