#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
测试公共夹具
用合成的 sedm.mosaic_product 行代替远程 TAP 查询
"""

import threading

import pytest

from euclid_tiles.config import Config, set_config
from euclid_tiles.core.service_registry import ServiceRegistry, set_registry
from euclid_tiles.core.tile_index import TileIndex, TileIndexBuilder
from euclid_tiles.models.service import nickname_tap_url

OTF_TAP_URL = nickname_tap_url('otf')

VIS_FILE_NAME = "EUC_MER_BGSUB-MOSAIC-VIS_TILE102020553-1969C4_20240301T185204.814169Z_00.00.fits"
VIS_FILE_PATH = "/data_staging_otf/repository_otf/F-006/MER/102020553/VIS"


def square(ra, dec, half=0.25):
    """以 (ra, dec) 为中心的正方形 fov（一维交替数组）"""
    return [ra - half, dec - half,
            ra + half, dec - half,
            ra + half, dec + half,
            ra - half, dec + half]


def product_rows(tile_id, fov, filters):
    rows = []
    for filter_name, instrument in filters:
        file_name = f"EUC_MER_BGSUB-MOSAIC-{filter_name}_TILE{tile_id}_00.00.fits"
        file_path = f"/data_staging_otf/repository_otf/F-006/MER/{tile_id}/{instrument}"
        rows.append((tile_id, fov, filter_name, instrument, file_name, file_path))
    return rows


TILE_553_FOV = square(75.0, -49.0)

# 102024002 和 102024003 在 ra=76 附近重叠；102024003 先出现
SYNTHETIC_ROWS = (
    [(102020553, TILE_553_FOV, 'VIS', 'VIS', VIS_FILE_NAME, VIS_FILE_PATH)]
    + product_rows(102024003, square(76.1, -45.4), [('VIS', 'VIS'), ('NIR_H', 'NISP')])
    + product_rows(102020553, TILE_553_FOV, [
        ('NIR_Y', 'NISP'), ('NIR_J', 'NISP'), ('NIR_H', 'NISP'),
        ('DECAM_g', 'DECAM'), ('DECAM_r', 'DECAM'), ('DECAM_i', 'DECAM'),
    ])
    + product_rows(102024002, square(75.9, -45.4), [('VIS', 'VIS')])
)


class FakeReader:
    """按 TAP 地址返回合成行的 TILE 索引读取函数，记录调用次数"""

    def __init__(self, rows_by_url):
        self.rows_by_url = rows_by_url
        self.calls = []
        self._lock = threading.Lock()

    def __call__(self, identity, config):
        with self._lock:
            self.calls.append(identity.name)
        rows = self.rows_by_url.get(identity.tap_url)
        if rows is None:
            return TileIndex.empty()
        builder = TileIndexBuilder(identity.tap_url)
        for row in rows:
            builder.accept_row(row)
        builder.end_rows()
        return builder.build()


@pytest.fixture
def config():
    config = Config()
    set_config(config)
    yield config
    set_config(None)


@pytest.fixture
def reader():
    return FakeReader({OTF_TAP_URL: SYNTHETIC_ROWS})


@pytest.fixture(autouse=True)
def registry(config, reader):
    """所有测试都使用合成数据，不访问网络"""
    registry = ServiceRegistry(reader=reader, config=config)
    set_registry(registry)
    yield registry
    set_registry(None)
