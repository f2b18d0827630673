#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Euclid Tile Resolver - Flask Application
"""

import logging
from typing import Optional

from flask import Flask
from flask_cors import CORS

from euclid_tiles.config import Config, get_config, set_config

logger = logging.getLogger(__name__)


def create_app(config: Optional[Config] = None) -> Flask:
    """
    创建 Flask 应用

    Args:
        config: 配置对象（可选，默认使用全局配置）

    Returns:
        Flask 应用实例
    """
    if config is not None:
        set_config(config)
    config = get_config()

    app = Flask(__name__)

    # 配置 CORS
    CORS(app)

    app.config['DEFAULT_SERVICE'] = config.get('resolver.default_service', 'otf')

    # 注册路由蓝图
    from flask_app.routes.tile_routes import tile_bp
    from flask_app.routes.health_routes import health_bp

    app.register_blueprint(tile_bp)
    app.register_blueprint(health_bp)

    logger.info("Flask 应用初始化完成")
    return app


app = create_app()

if __name__ == '__main__':
    from euclid_tiles.logging_config import setup_logging
    setup_logging()

    config = get_config()
    host = config.get('flask.host', '0.0.0.0')
    port = config.get('flask.port', 5000)
    debug = config.get('flask.debug', False)

    logger.info(f"启动 Flask 服务器: http://{host}:{port}")
    app.run(host=host, port=port, debug=debug)
