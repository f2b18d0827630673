#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Euclid TILE 查询接口
根据天球坐标查询 Euclid tile_index，以及查询TILE各波段的数据产品和裁剪地址

TILE 信息在首次使用某个服务时从 Euclid 归档读取：
    SELECT tile_index, fov, filter_name, instrument_name, file_name, file_path
    FROM sedm.mosaic_product

每个函数的第一个参数 service_name 指定 Euclid TAP 服务，通常为三个字母的简称，
如 "otf" 或 "idr"，也可以是完整的 TAP 地址。以下写法等价：
    euclid_tile_id(OTF, ra, dec)
    euclid_tile_id("otf", ra, dec)
    euclid_tile_id("https://easotf.esac.esa.int/tap-server/tap", ra, dec)

不存在或没有公开 sedm.mosaic_product 表的服务不会报错，所有查询都返回空结果。
跨越 RA=0/360 的TILE判断结果不可靠。
"""

from typing import List, Optional

from euclid_tiles.core.service_registry import get_registry
from euclid_tiles.core.tile_index import TileIndex
from euclid_tiles.models.tile import Product

# 服务简称
OTF = "otf"
IDR = "idr"

# 波段名
DECAM_g = "DECAM_g"
DECAM_i = "DECAM_i"
DECAM_r = "DECAM_r"
DECAM_z = "DECAM_z"
HSC_g = "HSC_g"
HSC_i = "HSC_i"
HSC_i2 = "HSC_i2"
HSC_r = "HSC_r"
HSC_r2 = "HSC_r2"
HSC_z = "HSC_z"
MEGACAM_r = "MEGACAM_r"
MEGACAM_u = "MEGACAM_u"
NIR_H = "NIR_H"
NIR_J = "NIR_J"
NIR_Y = "NIR_Y"
PANSTARRS_i = "PANSTARRS_i"
VIS = "VIS"

FILTER_NAMES = [
    DECAM_g, DECAM_i, DECAM_r, DECAM_z,
    HSC_g, HSC_i, HSC_i2, HSC_r, HSC_r2, HSC_z,
    MEGACAM_r, MEGACAM_u,
    NIR_H, NIR_J, NIR_Y,
    PANSTARRS_i, VIS,
]


def euclid_tile_id(service_name: str, ra: float, dec: float) -> Optional[int]:
    """
    查询坐标所在的 Euclid tile_index

    坐标落在多个TILE内时返回编号最小的一个。

    Args:
        service_name: Euclid TAP 服务名，如 "otf"
        ra: 赤经（度）
        dec: 赤纬（度）

    Returns:
        tile_index，坐标不在任何TILE内时返回 None
    """
    ids = euclid_tile_ids(service_name, ra, dec)
    return ids[0] if ids else None


def euclid_tile_ids(service_name: str, ra: float, dec: float) -> List[int]:
    """
    查询包含该坐标的所有 Euclid tile_index

    Euclid 覆盖区域内的大部分坐标只对应一个TILE，部分位置对应两个或更多，
    覆盖区域外返回空列表。

    Args:
        service_name: Euclid TAP 服务名，如 "otf"
        ra: 赤经（度）
        dec: 赤纬（度）

    Returns:
        升序排列的 tile_index 列表
    """
    tiles = _get_index(service_name).tiles_containing(ra, dec)
    return sorted(tile.tile_id for tile in tiles)


def euclid_tile_id_count(service_name: str, ra: float, dec: float) -> int:
    """返回包含该坐标的TILE数量（0 或更多）"""
    return len(euclid_tile_ids(service_name, ra, dec))


def euclid_tile_filters(service_name: str, tile_id: int) -> List[str]:
    """
    返回 sedm.mosaic_product 中该TILE已有数据产品的全部波段名

    Args:
        service_name: Euclid TAP 服务名，如 "otf"
        tile_id: tile_index

    Returns:
        按字母排序的波段名列表，TILE不存在时为空列表
    """
    tile = _get_index(service_name).get(tile_id)
    return tile.filters() if tile is not None else []


def euclid_tile_file_name(service_name: str, tile_id: int, filter_name: str) -> Optional[str]:
    """返回该TILE和波段对应的 file_name 字段"""
    product = _get_product(service_name, tile_id, filter_name)
    return product.file_name if product is not None else None


def euclid_tile_file_path(service_name: str, tile_id: int, filter_name: str) -> Optional[str]:
    """返回该TILE和波段对应的 file_path 字段"""
    product = _get_product(service_name, tile_id, filter_name)
    return product.file_path if product is not None else None


def euclid_tile_cutout_url(service_name: str, tile_id: int, filter_name: str) -> Optional[str]:
    """
    返回该TILE和波段的裁剪服务地址

    对应 ivoa.obscore 表中的 cutout_access_url 字段格式，地址不做可用性检查，
    下载时通常需要认证。

    Args:
        service_name: Euclid TAP 服务名，如 "otf"
        tile_id: tile_index
        filter_name: 波段名

    Returns:
        裁剪地址，不存在对应数据产品时返回 None
    """
    product = _get_product(service_name, tile_id, filter_name)
    if product is None:
        return None
    identity = get_registry().get_service(service_name).identity
    return (f"{identity.cutout_base_url}"
            f"?filepath={product.file_path}/{product.file_name}"
            f"&collection={product.instrument}"
            f"&tileindex={tile_id}")


def _get_index(service_name: str) -> TileIndex:
    return get_registry().get_index(service_name)


def _get_product(service_name: str, tile_id: int, filter_name: str) -> Optional[Product]:
    tile = _get_index(service_name).get(tile_id)
    return tile.get_product(filter_name) if tile is not None else None
