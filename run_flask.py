#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
启动 Euclid Tile Resolver Flask Web 服务
"""

import sys
from pathlib import Path

# 添加项目根目录到 Python 路径
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

if __name__ == "__main__":
    from euclid_tiles.config import get_config
    from euclid_tiles.logging_config import setup_logging
    from flask_app.app import app

    setup_logging()
    config = get_config()
    host = config.get('flask.host', '0.0.0.0')
    port = config.get('flask.port', 5000)
    debug = config.get('flask.debug', False)

    print("=" * 60)
    print("🚀 启动 Euclid Tile Resolver Flask 服务")
    print("=" * 60)
    print(f"📡 服务地址: http://{host}:{port}")
    print(f"🔧 健康检查: http://{host}:{port}/health")
    print(f"🔭 坐标查询: http://{host}:{port}/api/tile?ra=75&dec=-49")
    print("=" * 60)
    print("\n按 Ctrl+C 停止服务器\n")

    app.run(host=host, port=port, debug=debug, threaded=True)
