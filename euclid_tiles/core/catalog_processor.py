#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
星表处理模块
加载星表并为每个源添加所在 Euclid TILE 的列
"""

import logging
from pathlib import Path
from typing import Optional, Tuple

import numpy as np
import pandas as pd
from astropy.table import MaskedColumn, Table

from euclid_tiles.core.coordinate_matcher import default_service_name
from euclid_tiles.core.tile_resolver import euclid_tile_ids

logger = logging.getLogger(__name__)

RA_CANDIDATES = ['RA', 'RA_DEG', 'RIGHT_ASCENSION', 'ALPHA_J2000', 'ALPHAWIN_J2000']
DEC_CANDIDATES = ['DEC', 'DEC_DEG', 'DECLINATION', 'DELTA_J2000', 'DELTAWIN_J2000']


def _detect_column(catalog: Table, candidates, label: str) -> str:
    columns = [col.upper() for col in catalog.colnames]
    for candidate in candidates:
        if candidate in columns:
            return catalog.colnames[columns.index(candidate)]
    raise ValueError(f"无法自动检测{label}列，请手动指定")


def load_catalog(
    catalog_path: str,
    ra_col: Optional[str] = None,
    dec_col: Optional[str] = None
) -> Tuple[Table, str, str]:
    """
    加载星表文件（FITS、VOTable 或 CSV 格式）

    Args:
        catalog_path: 星表文件路径
        ra_col: RA列名（可选，自动检测）
        dec_col: DEC列名（可选，自动检测）

    Returns:
        (catalog, ra_col, dec_col)
    """
    catalog_path = Path(catalog_path)

    if not catalog_path.exists():
        raise FileNotFoundError(f"星表文件不存在: {catalog_path}")

    suffix = catalog_path.suffix.lower()
    if suffix in ['.fits', '.fit']:
        catalog = Table.read(catalog_path, format='fits')
    elif suffix in ['.vot', '.xml']:
        catalog = Table.read(catalog_path, format='votable')
    elif suffix in ['.csv', '.txt']:
        catalog = Table.from_pandas(pd.read_csv(catalog_path))
    else:
        raise ValueError(f"不支持的文件格式: {catalog_path.suffix}")

    if ra_col is None:
        ra_col = _detect_column(catalog, RA_CANDIDATES, 'RA')
    if dec_col is None:
        dec_col = _detect_column(catalog, DEC_CANDIDATES, 'DEC')

    for col in (ra_col, dec_col):
        if col not in catalog.colnames:
            raise ValueError(f"星表中不存在列: {col}")

    logger.info(f"加载星表: {catalog_path}, 行数: {len(catalog)}, RA列: {ra_col}, DEC列: {dec_col}")

    return catalog, ra_col, dec_col


def add_tile_columns(catalog: Table, ra_col: str, dec_col: str,
                     service_name: Optional[str] = None,
                     id_col: str = 'TILE_INDEX', count_col: str = 'N_TILES') -> Table:
    """
    为星表添加 TILE_INDEX 和 N_TILES 列

    TILE_INDEX 为编号最小的包含该源的TILE，不在任何TILE内（或坐标无效）时为掩码值。

    Args:
        catalog: 星表
        ra_col: RA列名
        dec_col: DEC列名
        service_name: Euclid TAP 服务名（可选）
        id_col: 输出的 tile_index 列名
        count_col: 输出的TILE数量列名

    Returns:
        添加了新列的星表（原星表被修改）
    """
    service_name = service_name or default_service_name()

    nrow = len(catalog)
    tile_index = np.zeros(nrow, dtype=np.int64)
    missing = np.ones(nrow, dtype=bool)
    counts = np.zeros(nrow, dtype=np.int32)

    ra_values = np.ma.filled(np.ma.asarray(catalog[ra_col], dtype=float), np.nan)
    dec_values = np.ma.filled(np.ma.asarray(catalog[dec_col], dtype=float), np.nan)

    for i, (ra, dec) in enumerate(zip(ra_values, dec_values)):
        if not (np.isfinite(ra) and np.isfinite(dec)):
            continue
        ids = euclid_tile_ids(service_name, float(ra), float(dec))
        counts[i] = len(ids)
        if ids:
            tile_index[i] = ids[0]
            missing[i] = False

    catalog[id_col] = MaskedColumn(tile_index, mask=missing,
                                   description='Euclid tile_index containing the source')
    catalog[count_col] = counts

    logger.info(f"{nrow} 个源中 {int(np.sum(~missing))} 个位于 Euclid TILE 内 [{service_name}]")
    return catalog


def annotate_catalog(catalog_path: str, output_path: str,
                     ra_col: Optional[str] = None, dec_col: Optional[str] = None,
                     service_name: Optional[str] = None) -> dict:
    """
    加载星表、添加TILE列并写出

    Args:
        catalog_path: 输入星表路径
        output_path: 输出星表路径（格式由扩展名决定）
        ra_col: RA列名（可选）
        dec_col: DEC列名（可选）
        service_name: Euclid TAP 服务名（可选）

    Returns:
        统计信息字典
    """
    catalog, ra_col, dec_col = load_catalog(catalog_path, ra_col, dec_col)
    add_tile_columns(catalog, ra_col, dec_col, service_name)

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    catalog.write(output_path, overwrite=True)

    num_matched = int(np.sum(~catalog['TILE_INDEX'].mask))
    return {
        'output_path': str(output_path),
        'num_rows': len(catalog),
        'num_matched': num_matched,
        'num_unmatched': len(catalog) - num_matched,
        'tile_ids': sorted({int(t) for t in catalog['TILE_INDEX'].compressed()}),
        'ra_col': ra_col,
        'dec_col': dec_col
    }
