#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
健康检查路由
"""

import logging
from flask import Blueprint, jsonify

from euclid_tiles.core.service_registry import get_registry

logger = logging.getLogger(__name__)

health_bp = Blueprint('health', __name__)


@health_bp.route("/health")
def api_health():
    """健康检查接口"""
    registry = get_registry()
    return jsonify({
        'status': 'healthy',
        'service': 'euclid-tiles-flask',
        'version': '1.0.0',
        'services': {
            name: {
                'loaded': registry.get_service(name).loaded,
                'tap_url': registry.get_service(name).identity.tap_url
            }
            for name in registry.known_services()
        }
    })
