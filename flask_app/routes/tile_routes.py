#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
TILE路由 - 坐标查询、波段列表、数据产品和裁剪地址
"""

import logging
from flask import Blueprint, request, jsonify, current_app

from euclid_tiles.core.coordinate_matcher import batch_query_tile_ids
from euclid_tiles.core.tile_resolver import (
    euclid_tile_ids,
    euclid_tile_filters,
    euclid_tile_file_name,
    euclid_tile_file_path,
    euclid_tile_cutout_url
)

logger = logging.getLogger(__name__)

tile_bp = Blueprint('tile', __name__)


def _service_name() -> str:
    return request.args.get('service') or current_app.config['DEFAULT_SERVICE']


@tile_bp.route('/api/tile', methods=['GET'])
def query_tile():
    """根据坐标查询TILE"""
    try:
        ra = float(request.args['ra'])
        dec = float(request.args['dec'])
    except (KeyError, ValueError) as e:
        logger.error(f"坐标参数无效: {e}")
        return jsonify({'success': False, 'error': '需要数值参数 ra 和 dec'}), 400

    service_name = _service_name()
    tile_ids = euclid_tile_ids(service_name, ra, dec)

    return jsonify({
        'success': True,
        'service': service_name,
        'ra': ra,
        'dec': dec,
        'tile_id': tile_ids[0] if tile_ids else None,
        'tile_ids': tile_ids,
        'count': len(tile_ids)
    })


@tile_bp.route('/api/tiles/batch', methods=['POST'])
def batch_query_tiles():
    """批量查询坐标"""
    try:
        data = request.get_json(force=True)
        coordinates = [(float(c[0]), float(c[1])) for c in data['coordinates']]
    except Exception as e:
        logger.error(f"批量查询参数无效: {str(e)}", exc_info=True)
        return jsonify({'success': False, 'error': f'参数无效: {str(e)}'}), 400

    service_name = data.get('service') or current_app.config['DEFAULT_SERVICE']
    results = batch_query_tile_ids(coordinates, service_name)

    return jsonify({
        'success': True,
        'service': service_name,
        'num_queries': len(results),
        'results': results
    })


@tile_bp.route('/api/tile/<int:tile_id>/filters', methods=['GET'])
def list_filters(tile_id):
    """列出TILE已有数据产品的波段"""
    service_name = _service_name()
    filters = euclid_tile_filters(service_name, tile_id)
    return jsonify({
        'success': True,
        'service': service_name,
        'tile_id': tile_id,
        'filters': filters
    })


@tile_bp.route('/api/tile/<int:tile_id>/product', methods=['GET'])
def get_product(tile_id):
    """获取TILE某个波段的数据产品和裁剪地址"""
    filter_name = request.args.get('filter')
    if not filter_name:
        return jsonify({'success': False, 'error': '缺少参数 filter'}), 400

    service_name = _service_name()
    file_name = euclid_tile_file_name(service_name, tile_id, filter_name)
    if file_name is None:
        return jsonify({
            'success': False,
            'error': f'TILE {tile_id} 没有波段 {filter_name} 的数据产品'
        }), 404

    return jsonify({
        'success': True,
        'service': service_name,
        'tile_id': tile_id,
        'filter': filter_name,
        'file_name': file_name,
        'file_path': euclid_tile_file_path(service_name, tile_id, filter_name),
        'cutout_url': euclid_tile_cutout_url(service_name, tile_id, filter_name)
    })
