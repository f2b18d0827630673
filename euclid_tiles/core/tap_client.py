#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
TAP查询模块
对远程 TAP 服务执行一次同步 ADQL 查询，并将结果逐行交给接收器
"""

import logging
from typing import Any, Optional, Protocol, Tuple

import numpy as np
import pyvo
from pyvo.dal import DALAccessError

logger = logging.getLogger(__name__)


class TapQueryError(Exception):
    """TAP 查询失败（网络错误、服务错误或结果无法解析）"""


class RowSink(Protocol):
    """查询结果接收器"""

    def accept_row(self, row: Tuple[Any, ...]) -> None:
        ...

    def end_rows(self) -> None:
        ...


def _cell(value: Any) -> Any:
    """将 VOTable 单元格转换为普通 Python 值"""
    if value is np.ma.masked:
        return None
    if isinstance(value, np.ndarray):
        if value.dtype.kind in 'fiu':
            return np.ma.filled(value.astype(float), np.nan)
        return np.ma.filled(value).tolist()
    if isinstance(value, bytes):
        return value.decode('utf-8', errors='ignore')
    if isinstance(value, np.generic):
        return value.item()
    return value


class TapQuery:
    """一次同步 TAP 查询"""

    def __init__(self, tap_url: str, adql: str, maxrec: Optional[int] = None):
        """
        Args:
            tap_url: TAP 服务地址
            adql: ADQL 查询语句
            maxrec: 最大返回行数（None 表示使用服务默认值）
        """
        self.tap_url = tap_url
        self.adql = adql
        self.maxrec = maxrec

    def execute(self, sink: RowSink) -> int:
        """
        执行查询，将每一行交给 sink.accept_row，最后调用 sink.end_rows

        Args:
            sink: 结果接收器

        Returns:
            读取的行数
        """
        logger.info(f"执行 TAP 查询 [{self.tap_url}]: {self.adql}")
        try:
            service = pyvo.dal.TAPService(self.tap_url)
            results = service.run_sync(self.adql, maxrec=self.maxrec)
            table = results.to_table()
        except (DALAccessError, OSError, ValueError) as e:
            raise TapQueryError(f"TAP 查询失败 [{self.tap_url}]: {e}") from e

        nrow = 0
        for row in table.iterrows():
            sink.accept_row(tuple(_cell(value) for value in row))
            nrow += 1
        sink.end_rows()
        return nrow
