#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
查询相关的 MCP 工具
"""

import asyncio
import logging
from typing import Any, Dict

from euclid_tiles.core.coordinate_matcher import (
    batch_query_tile_ids,
    default_service_name,
    match_position
)
from euclid_tiles.core.tile_resolver import (
    euclid_tile_filters,
    euclid_tile_file_name,
    euclid_tile_file_path,
    euclid_tile_cutout_url
)

logger = logging.getLogger(__name__)


def _service_name(arguments: Dict[str, Any]) -> str:
    return arguments.get('service') or default_service_name()


def _lookup_product(service_name: str, tile_id: int, filter_name: str):
    """查询数据产品，首次使用服务时会读取TILE索引（阻塞）"""
    cutout_url = euclid_tile_cutout_url(service_name, tile_id, filter_name)
    if cutout_url is None:
        return None
    return {
        'file_name': euclid_tile_file_name(service_name, tile_id, filter_name),
        'file_path': euclid_tile_file_path(service_name, tile_id, filter_name),
        'cutout_url': cutout_url
    }


async def handle_query_tile_id(arguments: Dict[str, Any]) -> Dict[str, Any]:
    """
    处理 query_tile_id 工具调用

    Args:
        arguments: 工具参数 {ra, dec, service?}

    Returns:
        结果字典
    """
    try:
        ra = float(arguments['ra'])
        dec = float(arguments['dec'])
        service_name = _service_name(arguments)

        match = await asyncio.to_thread(match_position, ra, dec, service_name)

        if match.matched:
            return {
                'success': True,
                'service': service_name,
                **match.to_dict(),
                'message': f'找到 TILE ID: {match.tile_id}'
            }
        else:
            return {
                'success': False,
                'service': service_name,
                **match.to_dict(),
                'message': '未找到对应的 TILE ID'
            }

    except Exception as e:
        logger.error(f"query_tile_id 执行失败: {e}", exc_info=True)
        return {
            'success': False,
            'error': str(e),
            'message': f'查询失败: {e}'
        }


async def handle_batch_query_tile_ids(arguments: Dict[str, Any]) -> Dict[str, Any]:
    """
    处理 batch_query_tile_ids 工具调用

    Args:
        arguments: 工具参数 {coordinates: [[ra, dec], ...], service?}

    Returns:
        结果字典
    """
    try:
        coordinates = arguments['coordinates']
        service_name = _service_name(arguments)

        coord_list = [(float(coord[0]), float(coord[1])) for coord in coordinates]

        results = await asyncio.to_thread(batch_query_tile_ids, coord_list, service_name)

        return {
            'success': True,
            'service': service_name,
            'num_queries': len(results),
            'results': results,
            'message': f'成功查询 {len(results)} 个坐标'
        }

    except Exception as e:
        logger.error(f"batch_query_tile_ids 执行失败: {e}", exc_info=True)
        return {
            'success': False,
            'error': str(e),
            'message': f'批量查询失败: {e}'
        }


async def handle_list_tile_filters(arguments: Dict[str, Any]) -> Dict[str, Any]:
    """
    处理 list_tile_filters 工具调用

    Args:
        arguments: 工具参数 {tile_id, service?}

    Returns:
        结果字典
    """
    try:
        tile_id = int(arguments['tile_id'])
        service_name = _service_name(arguments)

        filters = await asyncio.to_thread(euclid_tile_filters, service_name, tile_id)

        return {
            'success': bool(filters),
            'service': service_name,
            'tile_id': tile_id,
            'filters': filters,
            'message': f'TILE {tile_id} 有 {len(filters)} 个波段' if filters else f'未找到 TILE {tile_id}'
        }

    except Exception as e:
        logger.error(f"list_tile_filters 执行失败: {e}", exc_info=True)
        return {
            'success': False,
            'error': str(e),
            'message': f'查询失败: {e}'
        }


async def handle_get_tile_product(arguments: Dict[str, Any]) -> Dict[str, Any]:
    """
    处理 get_tile_product 工具调用

    Args:
        arguments: 工具参数 {tile_id, filter, service?}

    Returns:
        结果字典，包含 file_name、file_path 和 cutout_url
    """
    try:
        tile_id = int(arguments['tile_id'])
        filter_name = str(arguments['filter'])
        service_name = _service_name(arguments)

        product = await asyncio.to_thread(_lookup_product, service_name, tile_id, filter_name)
        if product is None:
            return {
                'success': False,
                'service': service_name,
                'tile_id': tile_id,
                'filter': filter_name,
                'message': f'TILE {tile_id} 没有波段 {filter_name} 的数据产品'
            }

        return {
            'success': True,
            'service': service_name,
            'tile_id': tile_id,
            'filter': filter_name,
            **product,
            'message': '裁剪地址未经验证，下载时可能需要认证'
        }

    except Exception as e:
        logger.error(f"get_tile_product 执行失败: {e}", exc_info=True)
        return {
            'success': False,
            'error': str(e),
            'message': f'查询失败: {e}'
        }
