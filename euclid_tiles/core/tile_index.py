#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
TILE索引模块
通过一次 TAP 查询读取某个服务的全部 TILE 视场和数据产品，建立 tile_index -> Tile 的只读映射

查询形式：
    SELECT tile_index, fov, filter_name, instrument_name, file_name, file_path
    FROM sedm.mosaic_product
"""

import logging
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Optional, Sequence

from euclid_tiles.config import Config, get_config
from euclid_tiles.core.tap_client import TapQuery, TapQueryError
from euclid_tiles.models.service import ServiceIdentity
from euclid_tiles.models.tile import Product, Tile

logger = logging.getLogger(__name__)

TILE_COLUMNS = ['tile_index', 'fov']
PRODUCT_COLUMNS = ['filter_name', 'instrument_name', 'file_name', 'file_path']


def tile_index_adql(table: str = 'sedm.mosaic_product', include_products: bool = True) -> str:
    """
    生成读取TILE信息的 ADQL 语句

    Args:
        table: TILE元数据表
        include_products: 是否同时读取波段和数据产品字段

    Returns:
        ADQL 查询语句
    """
    columns = TILE_COLUMNS + (PRODUCT_COLUMNS if include_products else [])
    return f"SELECT {', '.join(columns)} FROM {table}"


class TileIndex:
    """某个服务的只读TILE索引"""

    def __init__(self, tiles: Optional[Dict[int, Tile]] = None):
        self._tiles = MappingProxyType(dict(tiles or {}))

    @classmethod
    def empty(cls) -> 'TileIndex':
        return cls()

    def get(self, tile_id: int) -> Optional[Tile]:
        return self._tiles.get(tile_id)

    def tiles(self):
        return self._tiles.values()

    def tiles_containing(self, ra: float, dec: float) -> List[Tile]:
        """返回视场包含该坐标的所有TILE（无序）"""
        return [tile for tile in self.tiles() if tile.contains_position(ra, dec)]

    def __contains__(self, tile_id) -> bool:
        return tile_id in self._tiles

    def __iter__(self) -> Iterator[int]:
        return iter(self._tiles)

    def __len__(self) -> int:
        return len(self._tiles)

    def __repr__(self) -> str:
        return f"TileIndex({len(self)} tiles)"


class TileIndexBuilder:
    """TAP 查询结果接收器，逐行累积TILE信息"""

    def __init__(self, source: str = ''):
        """
        Args:
            source: 数据来源描述（用于日志）
        """
        self.source = source
        self._tiles: Dict[int, Tile] = {}
        self._built = False

    def accept_row(self, row: Sequence[Any]):
        """
        处理一行结果

        同一 tile_index 的多行只保留第一次出现的视场；视场不同时记录警告。
        行中包含波段信息时，将数据产品挂到该TILE上（同一波段后写覆盖先写）。

        Args:
            row: (tile_index, fov[, filter_name, instrument_name, file_name, file_path])
        """
        if self._built:
            raise RuntimeError("TILE索引已发布，不能继续追加")

        tile_id = int(row[0])
        candidate = Tile(tile_id, row[1])
        tile = self._tiles.get(tile_id)
        if tile is None:
            self._tiles[tile_id] = candidate
            tile = candidate
        elif tile != candidate:
            logger.warning(f"Euclid TILE {tile_id} 的视场不一致，保留首次读取的视场")

        if len(row) >= 6 and row[2] is not None:
            filter_name, instrument, file_name, file_path = row[2:6]
            tile.add_product(filter_name, Product(instrument, file_name, file_path))

    def end_rows(self):
        logger.info(f"读取到不同的 Euclid TILE 数量: {len(self._tiles)} [{self.source}]")

    def build(self) -> TileIndex:
        """冻结并返回TILE索引"""
        self._built = True
        return TileIndex(self._tiles)


def read_tile_index(identity: ServiceIdentity, config: Optional[Config] = None) -> TileIndex:
    """
    从服务读取TILE索引

    查询失败（网络错误、服务错误、结果格式错误）时记录警告并返回空索引，不抛出异常。

    Args:
        identity: TAP 服务标识
        config: 配置对象（可选）

    Returns:
        TileIndex实例
    """
    if config is None:
        config = get_config()

    adql = tile_index_adql(config.get('tap.table', 'sedm.mosaic_product'),
                           bool(config.get('tap.include_products', True)))
    builder = TileIndexBuilder(identity.tap_url)
    query = TapQuery(identity.tap_url, adql, maxrec=config.get('tap.maxrec'))
    try:
        query.execute(builder)
    except (TapQueryError, ValueError, TypeError, IndexError) as e:
        logger.warning(f"读取 Euclid TILE 信息失败 [{identity.name}]: {e}", exc_info=True)
        return TileIndex.empty()
    return builder.build()
