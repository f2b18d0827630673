#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
TILE数据模型
定义TILE视场及其各波段数据产品
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np

from euclid_tiles.core.geometry import point_in_polygon, vertices_from_flat


@dataclass(frozen=True)
class Product:
    """sedm.mosaic_product 中某个TILE/波段对应的数据产品"""
    instrument: str
    file_name: str
    file_path: str


class Tile:
    """Euclid TILE：tile_index、视场多边形和波段到数据产品的映射"""

    def __init__(self, tile_id: int, fov: Sequence[float]):
        """
        Args:
            tile_id: tile_index
            fov: 交替排列的 x/y 顶点值（度）
        """
        self.tile_id = int(tile_id)
        vertices = vertices_from_flat(fov)
        vertices.setflags(write=False)
        self.vertices = vertices
        self.products: Dict[str, Product] = {}

    def contains_position(self, ra: float, dec: float) -> bool:
        """判断坐标是否落在本TILE视场内"""
        return point_in_polygon(ra, dec, self.vertices)

    def add_product(self, filter_name: str, product: Product):
        """添加或覆盖某个波段的数据产品（仅在构建索引时调用）"""
        self.products[filter_name] = product

    def get_product(self, filter_name: str) -> Optional[Product]:
        return self.products.get(filter_name)

    def filters(self) -> List[str]:
        """按字母顺序返回已有数据产品的波段名"""
        return sorted(self.products)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Tile):
            return NotImplemented
        return (self.tile_id == other.tile_id
                and np.array_equal(self.vertices, other.vertices))

    def __hash__(self) -> int:
        return hash((self.tile_id, self.vertices.tobytes()))

    def __repr__(self) -> str:
        return f"Tile({self.tile_id}, vertices={len(self.vertices)}, filters={self.filters()})"


@dataclass
class TileMatch:
    """坐标查询结果"""
    ra: float
    dec: float
    tile_id: Optional[int] = None
    tile_ids: Optional[List[int]] = None

    @property
    def matched(self) -> bool:
        return self.tile_id is not None

    def to_dict(self):
        """转换为字典"""
        return {
            'ra': self.ra,
            'dec': self.dec,
            'tile_id': self.tile_id,
            'tile_ids': list(self.tile_ids or []),
            'num_tiles': len(self.tile_ids or []),
            'matched': self.matched
        }
