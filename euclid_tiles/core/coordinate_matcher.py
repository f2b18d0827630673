#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
坐标查询模块
提供单个坐标和批量坐标到 TILE ID 的查询功能
"""

import logging
from typing import List, Optional, Sequence, Tuple

from euclid_tiles.config import get_config
from euclid_tiles.core.tile_resolver import euclid_tile_ids
from euclid_tiles.models.tile import TileMatch

logger = logging.getLogger(__name__)


def default_service_name() -> str:
    """配置中的默认服务名"""
    return get_config().get('resolver.default_service', 'otf')


def match_position(ra: float, dec: float, service_name: Optional[str] = None) -> TileMatch:
    """
    查询单个坐标，返回全部匹配的TILE

    Args:
        ra: 赤经（度）
        dec: 赤纬（度）
        service_name: Euclid TAP 服务名（可选，默认使用配置中的服务）

    Returns:
        TileMatch实例
    """
    service_name = service_name or default_service_name()
    tile_ids = euclid_tile_ids(service_name, ra, dec)
    return TileMatch(ra=ra, dec=dec,
                     tile_id=tile_ids[0] if tile_ids else None,
                     tile_ids=tile_ids)


def query_tile_id(ra: float, dec: float, service_name: Optional[str] = None) -> Optional[int]:
    """
    根据坐标查询TILE ID

    Args:
        ra: 赤经（度）
        dec: 赤纬（度）
        service_name: Euclid TAP 服务名（可选）

    Returns:
        TILE ID，如果未找到则返回None
    """
    tile_id = match_position(ra, dec, service_name).tile_id
    logger.info(f"查询坐标 ({ra}, {dec}) -> TILE ID: {tile_id}")
    return tile_id


def batch_query_tile_ids(coordinates: Sequence[Tuple[float, float]],
                         service_name: Optional[str] = None) -> List[dict]:
    """
    批量查询TILE ID

    Args:
        coordinates: 坐标列表 [(ra1, dec1), (ra2, dec2), ...]
        service_name: Euclid TAP 服务名（可选）

    Returns:
        每个坐标的查询结果字典列表
    """
    service_name = service_name or default_service_name()
    results = [match_position(ra, dec, service_name).to_dict() for ra, dec in coordinates]
    matched = sum(1 for r in results if r['matched'])
    logger.info(f"批量查询 {len(results)} 个坐标，{matched} 个位于 Euclid TILE 内")
    return results
