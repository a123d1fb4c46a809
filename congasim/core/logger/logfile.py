"""
Logfile - 日志文件管理器

功能: 管理仿真的记录输出，每条记录格式为
    时间 类型 ID 事件 值1 值2 值3

主要类:
- Logfile: 日志文件管理器
"""

import logging
import os
from typing import List, Optional, TextIO

from .base import Logger
from .core import Logged


class Logfile:
    """
    日志文件管理器

    所有仿真日志记录器通过 addLogger() 注册到 Logfile，并通过
    writeRecord() 写出带时间戳的记录。早于 starttime 的记录被忽略。
    """

    def __init__(self, filename: str, eventlist):
        self._filename = filename
        self._eventlist = eventlist
        self._starttime = 0
        self._loggers: List[Logger] = []
        self._records = 0
        self._file: Optional[TextIO] = None

        dirname = os.path.dirname(filename)
        if dirname:
            os.makedirs(dirname, exist_ok=True)

        self._file = open(filename, 'w')
        logging.debug(f"Opened simulation logfile {filename}")

    def setStartTime(self, starttime: int) -> None:
        """设置开始记录日志的时间"""
        self._starttime = starttime

    def starttime(self) -> int:
        return self._starttime

    def addLogger(self, logger: Logger) -> None:
        self._loggers.append(logger)
        logger.setLogfile(self)

    def loggers(self) -> List[Logger]:
        return self._loggers

    def write(self, msg: str) -> None:
        if self._file:
            self._file.write(msg + '\n')

    def writeName(self, item: Logged) -> None:
        """写入对象的 ID 和名称"""
        self.write(f"# {item.get_id()} {item.str()}")

    def writeRecord(self, type_val: int, id_val: int, ev: int,
                    val1: float, val2: float, val3: float) -> None:
        """写入一条带时间戳的记录"""
        if not self._file:
            return
        now = self._eventlist.now()
        if now < self._starttime:
            return
        self._file.write(f"{now} {int(type_val)} {id_val} {int(ev)} {val1} {val2} {val3}\n")
        self._records += 1

    def record_count(self) -> int:
        return self._records

    def filename(self) -> str:
        return self._filename

    def close(self) -> None:
        if self._file:
            self._file.close()
            self._file = None
